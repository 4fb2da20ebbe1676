"""
Running account balances over a normalized transaction sequence.
"""

from datetime import datetime
from pathlib import Path
from types import MappingProxyType
from typing import Optional, Sequence
import logging

import pandas as pd

from ..models.account import Account
from ..models.money import Money
from ..models.results import BalanceSnapshot
from ..models.transaction import Internal, Transaction

logger = logging.getLogger(__name__)

BASE_COLUMNS = ["time", "id", "amount", "msg", "kind", "to", "from"]


def running_balance(transactions: Sequence[Transaction]) -> list[BalanceSnapshot]:
    """
    Fold transactions, oldest first, into per-account balances.

    External transactions add their amount to ``to``. Internal transactions
    move their amount from ``from`` to ``to``; only the receiving leg of a
    transfer should be passed in. Each step produces a new snapshot.

    Args:
        transactions: Normalized transactions in any order

    Returns:
        One snapshot per transaction, ordered by time
    """
    snapshots: list[BalanceSnapshot] = []
    values: dict[Account, Money] = {}

    for transaction in sorted(transactions, key=lambda t: t.time):
        values = dict(values)
        amount = transaction.amount
        zero = Money.zero(amount.currency)

        if isinstance(transaction.kind, Internal):
            source = transaction.kind.from_
            values[source] = values.get(source, zero) - amount

        values[transaction.to] = values.get(transaction.to, zero) + amount
        snapshots.append(BalanceSnapshot(MappingProxyType(values), transaction))

    return snapshots


def balance_frame(snapshots: Sequence[BalanceSnapshot]) -> pd.DataFrame:
    """
    Tabulate snapshots, one row per transaction and one column per account.

    Accounts are ordered by name; an account has no value until its first
    transaction.
    """
    accounts = sorted(
        {account for snapshot in snapshots for account in snapshot.values},
        key=lambda a: a.name,
    )
    rows = []
    for snapshot in snapshots:
        transaction = snapshot.transaction
        row = {
            "time": transaction.time.isoformat(),
            "id": transaction.id,
            "amount": transaction.amount.amount,
            "msg": transaction.message,
            "kind": transaction.kind_label,
            "to": transaction.to_name,
            "from": transaction.from_name,
        }
        for account in accounts:
            balance = snapshot.values.get(account)
            row[account.name] = balance.amount if balance is not None else None
        rows.append(row)

    return pd.DataFrame(rows, columns=BASE_COLUMNS + [a.name for a in accounts])


def filter_snapshots(
    snapshots: Sequence[BalanceSnapshot],
    since: Optional[datetime] = None,
    until: Optional[datetime] = None,
) -> list[BalanceSnapshot]:
    """Snapshots strictly between ``since`` and ``until``."""
    selected = []
    for snapshot in snapshots:
        time = snapshot.transaction.time
        if since is not None and time <= since:
            continue
        if until is not None and time >= until:
            continue
        selected.append(snapshot)
    return selected


def write_balance_csv(snapshots: Sequence[BalanceSnapshot], path: Path) -> Path:
    """Write ``balance_frame`` to CSV."""
    path.parent.mkdir(parents=True, exist_ok=True)
    balance_frame(snapshots).to_csv(path, index=False)
    logger.info(f"Wrote {len(snapshots)} balance rows to {path}")
    return path


def format_balance(snapshot: BalanceSnapshot) -> str:
    """Human readable rendering of one snapshot."""
    transaction = snapshot.transaction
    lines = [
        f"Balance at {transaction.time.isoformat()}:",
        "Transaction:",
        f" • amount: {transaction.amount}",
        f" • kind: {transaction.kind_label}",
    ]
    if transaction.message is not None:
        lines.append(f" • msg: {transaction.message}")
    lines.append(f" • {transaction.to_name} ← {transaction.from_name}")
    lines.append("Accounts:")
    lines.extend(
        f" • {account.name}: {balance}"
        for account, balance in sorted(snapshot.values.items(), key=lambda kv: kv[0].name)
    )
    return "\n".join(lines)
