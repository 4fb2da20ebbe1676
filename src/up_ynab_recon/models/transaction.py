"""Canonical money-movement model shared by both ledgers."""

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Optional, Union

from .account import Account
from .money import Money


@dataclass(frozen=True)
class External:
    """Money entering or leaving the tracked accounts."""

    to: Account
    from_name: str


@dataclass(frozen=True)
class Internal:
    """A transfer between two tracked accounts."""

    to: Account
    from_: Account


Kind = Union[External, Internal]


@dataclass(frozen=True)
class Transaction:
    """
    Normalized transaction built from a raw Up or YNAB record.

    ``time`` is timezone aware. ``imported_id`` is only set for YNAB records
    that were created by a previous sync, and holds the Up id they came from.
    """

    id: str
    time: datetime
    amount: Money
    kind: Kind
    message: Optional[str] = None
    imported_id: Optional[str] = None

    @property
    def to(self) -> Account:
        return self.kind.to

    @property
    def to_name(self) -> str:
        return self.kind.to.name

    @property
    def from_name(self) -> str:
        if isinstance(self.kind, Internal):
            return self.kind.from_.name
        return self.kind.from_name

    @property
    def date(self) -> date:
        """Calendar date in the transaction's own offset."""
        return self.time.date()

    @property
    def kind_label(self) -> str:
        return "internal" if self.is_internal else "external"

    @property
    def is_internal(self) -> bool:
        return isinstance(self.kind, Internal)

    @property
    def is_external(self) -> bool:
        return isinstance(self.kind, External)

    def is_normalized(self) -> bool:
        """
        True if the transaction can be counted without double counting.

        Only the receiving (positive) leg of a transfer is kept.
        """
        if isinstance(self.kind, External):
            return True
        return self.amount.is_positive()

    def is_round_up(self, round_up_message: str = "Round Up") -> bool:
        return self.message == round_up_message

    def with_message(self, message: Optional[str]) -> "Transaction":
        return replace(self, message=message)

    def as_external(self, from_name: Optional[str] = None) -> "Transaction":
        """Reclassify as an external transaction against ``from_name``."""
        return replace(
            self, kind=External(to=self.to, from_name=from_name or self.from_name)
        )

    def is_equivalent(self, other: "Transaction") -> bool:
        """
        Field-level comparison used to detect modified records.

        Ids are ignored and only the calendar date of ``time`` is compared,
        since YNAB stores dates only.
        """
        return (
            self.date == other.date
            and self.amount == other.amount
            and self.message == other.message
            and self.kind == other.kind
        )


@dataclass(frozen=True)
class TransferPair:
    """Both legs of one transfer. ``to`` is the outgoing (negative) leg."""

    to: Transaction
    from_: Transaction

    @property
    def receiving_leg(self) -> Transaction:
        return self.from_


@dataclass
class TransferMatches:
    """Result of pairing internal candidates."""

    matched: list[TransferPair] = field(default_factory=list)
    unmatched: list[Transaction] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.matched) * 2 + len(self.unmatched)


@dataclass(frozen=True)
class NormalizationFailure:
    """A raw record (or account) that was skipped, with the reason."""

    source: str
    record_id: str
    reason: str
