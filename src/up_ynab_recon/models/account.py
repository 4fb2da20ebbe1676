"""Account identity shared by both ledgers."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, order=True)
class Account:
    """
    One tracked account, known to both Up and YNAB.

    ``ynab_transfer_id`` is the payee id YNAB uses when this account is the
    counterpart of a transfer.
    """

    name: str
    up_id: str
    ynab_id: UUID
    ynab_transfer_id: UUID
