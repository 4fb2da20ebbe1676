"""Utility modules."""

from .exceptions import (
    ReconciliationError,
    NormalizationError,
    UnmatchedAccount,
    MissingPayeeName,
    MissingMemo,
    InvalidAmount,
    ReconciliationInvariantViolation,
    SyncMismatch,
    ConfigurationError,
    RunLoadError,
    ReportGenerationError,
)
from .logging_config import setup_logging
from .timestamps import parse_iso_datetime

__all__ = [
    "ReconciliationError",
    "NormalizationError",
    "UnmatchedAccount",
    "MissingPayeeName",
    "MissingMemo",
    "InvalidAmount",
    "ReconciliationInvariantViolation",
    "SyncMismatch",
    "ConfigurationError",
    "RunLoadError",
    "ReportGenerationError",
    "setup_logging",
    "parse_iso_datetime",
]
