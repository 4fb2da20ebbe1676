from datetime import datetime, timezone

import pytest

from up_ynab_recon.models import External, Internal, YnabBudget, YnabTransactionRecord
from up_ynab_recon.parsers.ynab_parser import YnabParser
from up_ynab_recon.utils.exceptions import (
    InvalidAmount,
    MissingMemo,
    MissingPayeeName,
    UnmatchedAccount,
)


@pytest.fixture
def parser(budget, accounts):
    return YnabParser(budget, accounts)


def record(**overrides):
    payload = {
        "id": "3f1e2d4c-0001-4000-8000-000000000001",
        "date": "2023-12-02",
        "amount": -57840,
        "memo": None,
        "account_id": "f6ca888b-327a-45d0-9775-830abdaa3a04",
        "payee_name": "7-Eleven",
        "transfer_account_id": None,
        "import_id": "5ce7c223-0188-4b68-8d19-227a7cc3464d",
    }
    payload.update(overrides)
    return YnabTransactionRecord.model_validate(payload)


def test_expense(parser, spending, expense):
    actual = parser.to_transaction(record())

    assert actual.id == "3f1e2d4c-0001-4000-8000-000000000001"
    assert actual.time == datetime(2023, 12, 2, tzinfo=timezone.utc)
    assert actual.amount.minor_units == -5784
    assert actual.amount.currency == "AUD"
    assert actual.kind == External(to=spending, from_name="7-Eleven")
    assert actual.message is None
    assert actual.imported_id == expense.id
    assert actual.is_equivalent(expense)


def test_transfer_by_transfer_payee_id(parser, spending, home):
    actual = parser.to_transaction(
        record(
            amount=37940,
            memo="Transfer from Home",
            payee_name=None,
            transfer_account_id=str(home.ynab_transfer_id),
        )
    )

    assert actual.kind == Internal(to=spending, from_=home)
    assert actual.message == "Transfer from Home"


def test_transfer_by_account_id(parser, spending, home):
    actual = parser.to_transaction(
        record(amount=37940, memo="", payee_name=None, transfer_account_id=str(home.ynab_id))
    )

    assert actual.kind == Internal(to=spending, from_=home)


def test_unknown_account(parser):
    with pytest.raises(UnmatchedAccount):
        parser.to_transaction(record(account_id="00000000-0000-4000-8000-000000000000"))


def test_unknown_transfer_account(parser):
    with pytest.raises(UnmatchedAccount):
        parser.to_transaction(
            record(transfer_account_id="00000000-0000-4000-8000-000000000000")
        )


@pytest.mark.parametrize("payee_name", [None, ""])
def test_missing_payee_name(parser, payee_name):
    with pytest.raises(MissingPayeeName):
        parser.to_transaction(record(payee_name=payee_name))


def test_missing_memo(parser):
    payload = record().model_dump(exclude={"memo"})

    with pytest.raises(MissingMemo):
        parser.to_transaction(YnabTransactionRecord.model_validate(payload))


def test_budget_without_currency(accounts):
    parser = YnabParser(YnabBudget(id="6d2b1c55-3f7a-4a7e-9d5e-0c1b2a3d4e5f", name="Bare"), accounts)

    with pytest.raises(InvalidAmount):
        parser.to_transaction(record())


def test_parse_collects_failures(parser, ynab_transactions):
    bad = record(id="bad", account_id="00000000-0000-4000-8000-000000000000")

    transactions, failures = parser.parse(ynab_transactions + [bad])

    assert len(transactions) == 3
    assert [(f.source, f.record_id) for f in failures] == [("ynab", "bad")]


def test_parse_skips_deleted(parser, ynab_transactions):
    deleted = record(id="deleted", import_id="f1b6981f-94d2-42b6-9cae-304dae08a480", deleted=True)

    transactions, failures = parser.parse(ynab_transactions + [deleted])

    assert [t.id for t in transactions] == [r.id for r in ynab_transactions]
    assert failures == []


@pytest.mark.parametrize("decimal_digits", [0, 3])
def test_budget_without_cents(accounts, decimal_digits):
    budget = YnabBudget.model_validate(
        {
            "id": "6d2b1c55-3f7a-4a7e-9d5e-0c1b2a3d4e5f",
            "name": "Yen",
            "currency_format": {"iso_code": "JPY", "decimal_digits": decimal_digits},
        }
    )
    parser = YnabParser(budget, accounts)

    with pytest.raises(InvalidAmount, match="decimal digits"):
        parser.to_transaction(record())
