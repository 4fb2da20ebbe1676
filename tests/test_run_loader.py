import shutil

import pytest

from up_ynab_recon.config import ReconConfig
from up_ynab_recon.parsers.run_loader import RunLoader, RunSnapshot
from up_ynab_recon.utils.exceptions import RunLoadError


@pytest.fixture
def loader():
    return RunLoader(ReconConfig())


def test_read(loader, run_dir):
    snapshot = loader.read(run_dir)

    assert snapshot.path == run_dir
    assert [a.display_name for a in snapshot.up_accounts] == ["Spending", "Home"]
    assert len(snapshot.up_transactions) == 7
    assert snapshot.up_transactions[0].id == "0c4b6f1e-5d2a-4b8e-9f37-1a2b3c4d5e6f"
    assert len(snapshot.ynab_accounts) == 2
    assert len(snapshot.ynab_transactions) == 3
    assert snapshot.ynab_budgets[0].name == "My Budget"


def test_missing_run(loader, tmp_path):
    with pytest.raises(RunLoadError):
        loader.read(tmp_path / "nope")


def test_missing_component_is_empty(loader, run_dir):
    shutil.rmtree(run_dir / "ynab_transactions")

    snapshot = loader.read(run_dir)

    assert snapshot.ynab_transactions == []
    assert len(snapshot.up_transactions) == 7


def test_invalid_json(loader, run_dir):
    (run_dir / "up_accounts" / "999_broken.json").write_text("{not json")

    with pytest.raises(RunLoadError):
        loader.read(run_dir)


def test_invalid_record(loader, run_dir):
    (run_dir / "ynab_budgets" / "999_broken.json").write_text('{"name": "no id"}')

    with pytest.raises(RunLoadError):
        loader.read(run_dir)


def test_custom_layout(run_dir):
    (run_dir / "up_transactions").rename(run_dir / "up-txns")
    config = ReconConfig(input={"up_transactions": "up-txns"})

    snapshot = RunLoader(config).read(run_dir)

    assert len(snapshot.up_transactions) == 7


def test_find_budget(loader, run_dir, budget):
    snapshot = loader.read(run_dir)

    assert snapshot.find_budget() == budget
    assert snapshot.find_budget("6d2b1c55-3f7a-4a7e-9d5e-0c1b2a3d4e5f") == budget
    with pytest.raises(RunLoadError):
        snapshot.find_budget("00000000-0000-4000-8000-000000000000")


def test_find_budget_needs_a_single_budget(budget, tmp_path):
    snapshot = RunSnapshot(path=tmp_path, ynab_budgets=[budget, budget])

    with pytest.raises(RunLoadError):
        snapshot.find_budget()
    with pytest.raises(RunLoadError):
        RunSnapshot(path=tmp_path).find_budget()
