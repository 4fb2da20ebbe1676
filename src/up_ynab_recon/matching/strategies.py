"""
Pairing rules for transfer reconciliation.
Each rule decides whether an outgoing and an incoming leg form one transfer.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence
import logging

from ..config import PrefixFamily
from ..models.transaction import Transaction, TransferPair

logger = logging.getLogger(__name__)


def family_index(message: Optional[str], prefixes: Sequence[str]) -> Optional[int]:
    """Index of the first prefix ``message`` starts with, if any."""
    if message is None:
        return None
    return next(
        (i for i, prefix in enumerate(prefixes) if message.startswith(prefix)), None
    )


class PairingRule(ABC):
    """Abstract base class for pairing rules."""

    name: str = "rule"

    def __init__(self, families: Sequence[PrefixFamily]):
        """
        Initialize with the transfer prefix families.

        Args:
            families: Ordered (to, from) message prefix pairs
        """
        self.families = list(families)
        self.to_prefixes = [family.to for family in self.families]
        self.from_prefixes = [family.from_ for family in self.families]

    @abstractmethod
    def try_pair(self, to: Transaction, from_: Transaction) -> Optional[TransferPair]:
        """
        Attempt to pair two legs already known to be close enough in time.

        Args:
            to: Outgoing (negative) leg
            from_: Incoming (positive) leg

        Returns:
            The pair, or None if this rule does not apply
        """
        pass


class PrefixFamilyRule(PairingRule):
    """
    Both messages use the same prefix family.

    Guards against pairing e.g. a "Transfer to" with a "Cover from".
    """

    name = "prefix_family"

    def try_pair(self, to: Transaction, from_: Transaction) -> Optional[TransferPair]:
        to_index = family_index(to.message, self.to_prefixes)
        if to_index is None:
            return None
        if family_index(from_.message, self.from_prefixes) != to_index:
            return None
        return TransferPair(to=to, from_=from_)


class RoundUpRule(PairingRule):
    """
    Fallback for round ups reported with both legs.

    The incoming leg of such a round up does not follow the naming
    convention, so its message is rewritten to the "from" prefix of the
    outgoing leg's family (the first family when the outgoing leg has none).
    """

    name = "round_up"

    def __init__(self, families: Sequence[PrefixFamily], round_up_message: str = "Round Up"):
        """
        Initialize the rule.

        Args:
            families: Ordered (to, from) message prefix pairs
            round_up_message: Exact message Up gives round up legs
        """
        super().__init__(families)
        self.round_up_message = round_up_message

    def try_pair(self, to: Transaction, from_: Transaction) -> Optional[TransferPair]:
        if not (
            to.is_round_up(self.round_up_message)
            or from_.is_round_up(self.round_up_message)
        ):
            return None

        logger.warning(f"Found round up `{to.id}` in matched transfer pair, fixing message")
        return TransferPair(to=to, from_=from_.with_message(self.corrected_message(to, from_)))

    def corrected_message(self, to: Transaction, from_: Transaction) -> str:
        """Message the incoming leg would carry under the naming convention."""
        index = family_index(to.message, self.to_prefixes)
        prefix = self.from_prefixes[index if index is not None else 0]
        return f"{prefix}{from_.from_name}"
