import json
from datetime import datetime
from pathlib import Path
from uuid import UUID

import pytest

from up_ynab_recon.models import (
    Account,
    External,
    Internal,
    Money,
    Transaction,
    UpAccountRecord,
    UpTransactionRecord,
    YnabAccountRecord,
    YnabBudget,
    YnabTransactionRecord,
)

DATA_DIR = Path(__file__).parent / "data"

# Up transactions of the sample run, oldest last as Up lists them
RUN_UP_TRANSACTIONS = [
    "up_cashback.json",
    "up_round_up.json",
    "up_income.json",
    "up_transfer.json",
    "up_transfer_out.json",
    "up_expense.json",
    "up_round_up_transfer.json",
]


def load_json(name):
    with open(DATA_DIR / name) as f:
        return json.load(f)


def up_record(name):
    return UpTransactionRecord.model_validate(load_json(name))


def make_transaction(
    id,
    time,
    cents,
    kind,
    message=None,
    imported_id=None,
    currency="AUD",
):
    """Build a Transaction from an ISO timestamp and an amount in cents."""
    return Transaction(
        id=id,
        time=datetime.fromisoformat(time),
        amount=Money.from_minor_units(cents, currency),
        kind=kind,
        message=message,
        imported_id=imported_id,
    )


@pytest.fixture
def spending():
    return Account(
        name="Spending",
        up_id="2be1c9de-7a89-4e8f-8077-f535150b588d",
        ynab_id=UUID("f6ca888b-327a-45d0-9775-830abdaa3a04"),
        ynab_transfer_id=UUID("89ddd9ef-2510-4b42-a889-e7a68cae291c"),
    )


@pytest.fixture
def home():
    return Account(
        name="Home",
        up_id="328160b1-d7bc-41ee-9d7b-c7da4f2484b0",
        ynab_id=UUID("2b00a77e-9b3c-4277-9c6c-6944f7696705"),
        ynab_transfer_id=UUID("f9b0b92f-70f7-4015-b885-4e5807a78a44"),
    )


@pytest.fixture
def accounts(home, spending):
    return [home, spending]


@pytest.fixture
def up_accounts():
    return [
        UpAccountRecord.model_validate(load_json("up_account_spending.json")),
        UpAccountRecord.model_validate(load_json("up_account_home.json")),
    ]


@pytest.fixture
def ynab_accounts():
    return [YnabAccountRecord.model_validate(x) for x in load_json("ynab_accounts.json")]


@pytest.fixture
def ynab_transactions():
    return [
        YnabTransactionRecord.model_validate(x) for x in load_json("ynab_transactions.json")
    ]


@pytest.fixture
def budget():
    return YnabBudget.model_validate(load_json("ynab_budget.json"))


@pytest.fixture
def expense(spending):
    return make_transaction(
        "5ce7c223-0188-4b68-8d19-227a7cc3464d",
        "2023-12-02T13:44:15+11:00",
        -5784,
        External(to=spending, from_name="7-Eleven"),
    )


@pytest.fixture
def transfer(spending, home):
    return make_transaction(
        "f1b6981f-94d2-42b6-9cae-304dae08a480",
        "2023-12-07T22:35:56+11:00",
        3794,
        Internal(to=spending, from_=home),
        message="Transfer from Home",
    )


def _write_records(directory, records):
    directory.mkdir(parents=True)
    for i, record in enumerate(records):
        with open(directory / f"{i:03d}_{record['id']}.json", "w") as f:
            json.dump(record, f)


@pytest.fixture
def run_dir(tmp_path):
    """A run snapshot directory with one JSON file per record."""
    path = tmp_path / "run-20240106"
    _write_records(
        path / "up_accounts",
        [load_json("up_account_spending.json"), load_json("up_account_home.json")],
    )
    _write_records(
        path / "up_transactions", [load_json(name) for name in RUN_UP_TRANSACTIONS]
    )
    _write_records(path / "ynab_accounts", load_json("ynab_accounts.json"))
    _write_records(path / "ynab_transactions", load_json("ynab_transactions.json"))
    _write_records(path / "ynab_budgets", [load_json("ynab_budget.json")])
    return path
