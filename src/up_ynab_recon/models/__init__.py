"""Data models for reconciliation."""

from .account import Account
from .money import Money
from .records import (
    UpAccountRecord,
    UpTransactionRecord,
    WriteBackRequest,
    YnabAccountRecord,
    YnabBudget,
    YnabSaveTransaction,
    YnabSaveTransactionWithId,
    YnabTransactionRecord,
)
from .results import BalanceSnapshot, ReconciliationResult, ReconciliationSummary
from .transaction import (
    External,
    Internal,
    Kind,
    NormalizationFailure,
    Transaction,
    TransferMatches,
    TransferPair,
)

__all__ = [
    "Account",
    "Money",
    "UpAccountRecord",
    "UpTransactionRecord",
    "WriteBackRequest",
    "YnabAccountRecord",
    "YnabBudget",
    "YnabSaveTransaction",
    "YnabSaveTransactionWithId",
    "YnabTransactionRecord",
    "BalanceSnapshot",
    "ReconciliationResult",
    "ReconciliationSummary",
    "External",
    "Internal",
    "Kind",
    "NormalizationFailure",
    "Transaction",
    "TransferMatches",
    "TransferPair",
]
