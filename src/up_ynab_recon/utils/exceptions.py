"""Custom exceptions for the reconciliation application."""

from typing import Optional, Sequence


class ReconciliationError(Exception):
    """Base exception for reconciliation errors."""

    pass


class NormalizationError(ReconciliationError):
    """A raw ledger record could not be turned into a transaction."""

    def __init__(self, message: str, record_id: Optional[str] = None):
        super().__init__(message)
        self.record_id = record_id


class UnmatchedAccount(NormalizationError):
    """Record references an account missing from the resolved account table."""

    pass


class MissingPayeeName(NormalizationError):
    """YNAB record without a transfer account has no payee name."""

    pass


class MissingMemo(NormalizationError):
    """YNAB record has no memo."""

    pass


class InvalidAmount(NormalizationError):
    """Currency or numeric parsing failure."""

    pass


class ReconciliationInvariantViolation(ReconciliationError):
    """Transfer pairing lost or duplicated transactions."""

    pass


class SyncMismatch(ReconciliationError):
    """Remote ledger did not echo back what was written."""

    def __init__(
        self,
        message: str,
        missing_count: int = 0,
        mismatched_ids: Sequence[str] = (),
        duplicate_import_ids: Sequence[str] = (),
    ):
        super().__init__(message)
        self.missing_count = missing_count
        self.mismatched_ids = list(mismatched_ids)
        self.duplicate_import_ids = list(duplicate_import_ids)


class ConfigurationError(ReconciliationError):
    """Error in configuration."""

    pass


class RunLoadError(ReconciliationError):
    """Error reading a run snapshot directory."""

    pass


class ReportGenerationError(ReconciliationError):
    """Error generating a report."""

    pass
