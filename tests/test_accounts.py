from uuid import UUID

from up_ynab_recon.matching.accounts import identify, resolve_accounts
from up_ynab_recon.models import UpAccountRecord, YnabAccountRecord


def test_resolve_accounts(up_accounts, ynab_accounts, spending, home):
    resolution = resolve_accounts(up_accounts, ynab_accounts)

    assert resolution.accounts == [spending, home]
    assert resolution.failures == []


def test_names_are_trimmed(ynab_accounts):
    up = UpAccountRecord.model_validate(
        {"id": "up-home", "attributes": {"displayName": "  Home "}}
    )

    accounts = identify([up], ynab_accounts)

    assert len(accounts) == 1
    assert accounts[0].name == "  Home "
    assert accounts[0].ynab_id == UUID("2b00a77e-9b3c-4277-9c6c-6944f7696705")


def test_unmatched_account_is_skipped(up_accounts, ynab_accounts, spending):
    extra = UpAccountRecord.model_validate(
        {"id": "up-holiday", "attributes": {"displayName": "Holiday"}}
    )

    resolution = resolve_accounts([extra] + up_accounts, ynab_accounts)

    assert [a.name for a in resolution.accounts] == ["Spending", "Home"]
    assert len(resolution.failures) == 1
    failure = resolution.failures[0]
    assert failure.source == "account"
    assert failure.record_id == "up-holiday"
    assert "Holiday" in failure.reason


def test_missing_transfer_payee_is_skipped(up_accounts):
    ynab = [
        YnabAccountRecord(
            id=UUID("f6ca888b-327a-45d0-9775-830abdaa3a04"),
            name="Spending",
            transfer_payee_id=None,
        )
    ]

    resolution = resolve_accounts(up_accounts, ynab)

    assert resolution.accounts == []
    assert len(resolution.failures) == 2
    assert "transfer payee" in resolution.failures[0].reason


def test_empty():
    resolution = resolve_accounts([], [])
    assert resolution.accounts == []
    assert resolution.failures == []


def test_deleted_account_is_ignored(up_accounts, ynab_accounts, spending, home):
    deleted = YnabAccountRecord(
        id=UUID("0b7e6a3c-1d2f-4e5a-8b9c-0d1e2f3a4b5c"),
        name="Home",
        transfer_payee_id=UUID("5c4b3a2f-1e0d-4c9b-8a7f-6e5d4c3b2a10"),
        deleted=True,
    )

    resolution = resolve_accounts(up_accounts, [deleted] + ynab_accounts)

    assert resolution.accounts == [spending, home]


def test_only_deleted_match_is_skipped(up_accounts):
    deleted = YnabAccountRecord(
        id=UUID("f6ca888b-327a-45d0-9775-830abdaa3a04"),
        name="Spending",
        transfer_payee_id=UUID("89ddd9ef-2510-4b42-a889-e7a68cae291c"),
        deleted=True,
    )

    resolution = resolve_accounts(up_accounts[:1], [deleted])

    assert resolution.accounts == []
    assert [f.record_id for f in resolution.failures] == [up_accounts[0].id]
