import pytest

from conftest import make_transaction
from up_ynab_recon.config import ReconConfig
from up_ynab_recon.matching.engine import ReconciliationEngine
from up_ynab_recon.models import External, Internal, Money
from up_ynab_recon.parsers.run_loader import RunLoader
from up_ynab_recon.reports.balance import running_balance
from up_ynab_recon.utils.exceptions import RunLoadError

INCOME_ID = "9f08959d-51d2-43a8-a45a-154373870094"


@pytest.fixture
def snapshot(run_dir):
    return RunLoader(ReconConfig()).read(run_dir)


@pytest.fixture
def engine():
    return ReconciliationEngine()


def test_reconcile(engine, snapshot, spending, home):
    result = engine.reconcile(snapshot)

    assert result.accounts == [spending, home]
    assert result.failures == []
    assert [t.id for t in result.source] == [
        "66e3f7f3-e766-4095-adbb-19f3e1271646",
        "5ce7c223-0188-4b68-8d19-227a7cc3464d",
        "f1b6981f-94d2-42b6-9cae-304dae08a480",
        INCOME_ID,
        "a0f9976c-d0ac-4cef-afd6-91bbc0033730",
        "0c4b6f1e-5d2a-4b8e-9f37-1a2b3c4d5e6f",
    ]
    assert all(t.is_normalized() for t in result.source)

    assert len(result.transfers) == 1
    assert result.transfers[0].receiving_leg.message == "Transfer from Home"
    assert [t.id for t in result.unmatched_transfers] == ["66e3f7f3-e766-4095-adbb-19f3e1271646"]
    assert result.reclassified == []

    assert [t.id for t in result.missing] == [
        "66e3f7f3-e766-4095-adbb-19f3e1271646",
        "f1b6981f-94d2-42b6-9cae-304dae08a480",
        "a0f9976c-d0ac-4cef-afd6-91bbc0033730",
        "0c4b6f1e-5d2a-4b8e-9f37-1a2b3c4d5e6f",
    ]
    assert [(source.id, remote.message) for source, remote in result.modified] == [
        (INCOME_ID, "pizza night")
    ]


def test_write_back(engine, snapshot, home):
    request = engine.reconcile(snapshot).write_back

    assert len(request.create) == 4
    transfer = next(p for p in request.create if p.import_id == "f1b6981f-94d2-42b6-9cae-304dae08a480")
    assert transfer.amount == 37940
    assert transfer.payee_id == home.ynab_transfer_id

    assert len(request.update) == 1
    assert request.update[0].id == "3f1e2d4c-0002-4000-8000-000000000002"
    assert request.update[0].memo == "pizza"


def test_balances(engine, snapshot, spending, home):
    balances = engine.reconcile(snapshot).balances

    assert len(balances) == 6
    assert balances[-1].balance_of(spending) == Money.from_minor_units(-4094, "AUD")
    assert balances[-1].balance_of(home) == Money.from_minor_units(-3694, "AUD")


def test_summary(engine, snapshot):
    summary = engine.reconcile(snapshot).summary

    assert summary.budget_name == "My Budget"
    assert summary.resolved_account_count == 2
    assert summary.skipped_account_count == 0
    assert summary.up_record_count == 7
    assert summary.source_transaction_count == 6
    assert summary.matched_transfer_count == 1
    assert summary.unmatched_transfer_count == 1
    assert summary.reclassified_count == 0
    assert summary.ynab_record_count == 3
    assert summary.remote_transaction_count == 3
    assert summary.missing_count == 4
    assert summary.modified_count == 1
    assert summary.failure_count == 0
    assert not summary.in_sync
    assert summary.transfer_match_rate == pytest.approx(200 / 3)


def test_failures_are_collected(engine, snapshot):
    snapshot.up_accounts = snapshot.up_accounts[:1]

    result = engine.reconcile(snapshot)

    sources = [f.source for f in result.failures]
    assert sources.count("account") == 1
    # every Up record touching Home
    assert sources.count("up") == 3
    assert result.summary.skipped_account_count == 1
    assert result.summary.failure_count == len(result.failures)


def test_unknown_budget(snapshot):
    config = ReconConfig(sync={"budget_id": "00000000-0000-4000-8000-000000000000"})

    with pytest.raises(RunLoadError):
        ReconciliationEngine(config).reconcile(snapshot)


@pytest.fixture
def dangling(spending, home):
    return make_transaction(
        "dangling", "2024-02-01T10:00:00+11:00", 2500,
        Internal(to=spending, from_=home), message="Transfer from Home",
    )


def test_unmatched_transfer_is_reclassified(engine, dangling, spending):
    source, transfers, unmatched, reclassified = engine.build_source([dangling])

    assert transfers.matched == []
    assert unmatched == [dangling]
    assert len(reclassified) == 1
    assert reclassified[0].kind == External(to=spending, from_name="Home")
    assert reclassified[0].message == "Transfer from Home"
    assert source == reclassified


def test_unmatched_transfer_dropped_without_reclassify(dangling):
    engine = ReconciliationEngine(ReconConfig(transfers={"reclassify_unmatched": False}))

    source, _, unmatched, reclassified = engine.build_source([dangling])

    assert source == []
    assert unmatched == [dangling]
    assert reclassified == []


def test_outgoing_round_up_leg_is_dropped(engine, spending, home):
    leg = make_transaction(
        "round-up-out", "2024-02-01T10:00:00+11:00", -100,
        Internal(to=spending, from_=home), message="Round Up",
    )

    source, _, unmatched, reclassified = engine.build_source([leg])

    assert source == []
    assert unmatched == [leg]
    assert reclassified == []


@pytest.mark.parametrize("first", ["ru-out", "tr-out"])
def test_round_up_does_not_strand_transfer(engine, spending, home, first):
    round_up = make_transaction(
        "ru-out", "2024-03-01T10:00:00+11:00", -100,
        Internal(to=spending, from_=home), message="Round Up",
    )
    outgoing = make_transaction(
        "tr-out", "2024-03-01T10:00:01+11:00", -100,
        Internal(to=spending, from_=home), message="Transfer to Home",
    )
    incoming = make_transaction(
        "tr-in", "2024-03-01T10:00:02+11:00", 100,
        Internal(to=home, from_=spending), message="Transfer from Spending",
    )
    legs = [round_up, outgoing] if first == "ru-out" else [outgoing, round_up]

    source, _, unmatched, reclassified = engine.build_source(legs + [incoming])
    balances = running_balance(source)

    assert [t.id for t in source] == ["tr-in"]
    assert unmatched == [round_up]
    assert reclassified == []
    assert balances[-1].balance_of(spending) == Money.from_minor_units(-100, "AUD")
    assert balances[-1].balance_of(home) == Money.from_minor_units(100, "AUD")
