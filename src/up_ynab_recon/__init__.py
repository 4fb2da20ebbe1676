"""Up to YNAB transaction reconciliation."""

__version__ = "0.1.0"
