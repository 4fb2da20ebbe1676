"""Account resolution, transfer pairing and the reconciliation engine."""

from .accounts import AccountResolution, identify, resolve_accounts
from .engine import ReconciliationEngine
from .strategies import PairingRule, PrefixFamilyRule, RoundUpRule
from .transfers import TransferMatcher, match_transfers

__all__ = [
    "AccountResolution",
    "identify",
    "resolve_accounts",
    "ReconciliationEngine",
    "PairingRule",
    "PrefixFamilyRule",
    "RoundUpRule",
    "TransferMatcher",
    "match_transfers",
]
