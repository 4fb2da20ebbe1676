"""Data models for reconciliation results."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Mapping, Optional

from .account import Account
from .money import Money
from .records import WriteBackRequest
from .transaction import NormalizationFailure, Transaction, TransferPair


@dataclass(frozen=True)
class BalanceSnapshot:
    """Balances of every account seen so far, right after ``transaction``."""

    values: Mapping[Account, Money]
    transaction: Transaction

    def balance_of(self, account: Account) -> Optional[Money]:
        return self.values.get(account)


@dataclass
class ReconciliationSummary:
    """Summary of one reconciliation run."""

    run_path: str
    budget_name: str
    reconciliation_date: datetime

    # Account resolution
    resolved_account_count: int
    skipped_account_count: int

    # Up side
    up_record_count: int
    source_transaction_count: int
    matched_transfer_count: int
    unmatched_transfer_count: int
    reclassified_count: int

    # YNAB side
    ynab_record_count: int
    remote_transaction_count: int

    # Diff
    missing_count: int
    modified_count: int

    failure_count: int
    processing_time_seconds: float = 0.0
    config_file_used: Optional[str] = None

    @property
    def in_sync(self) -> bool:
        return self.missing_count == 0 and self.modified_count == 0

    @property
    def transfer_match_rate(self) -> float:
        """Percentage of internal candidates consumed by a transfer pair."""
        total = self.matched_transfer_count * 2 + self.unmatched_transfer_count
        if total == 0:
            return 0.0
        return (self.matched_transfer_count * 2 / total) * 100


@dataclass
class ReconciliationResult:
    """Everything a run produced, for display, reports and write-back."""

    accounts: list[Account]
    source: list[Transaction]
    remote: list[Transaction]
    transfers: list[TransferPair]
    unmatched_transfers: list[Transaction]
    reclassified: list[Transaction]
    missing: list[Transaction]
    modified: list[tuple[Transaction, Transaction]]
    balances: list[BalanceSnapshot]
    write_back: WriteBackRequest
    failures: list[NormalizationFailure] = field(default_factory=list)
    summary: Optional[ReconciliationSummary] = None
