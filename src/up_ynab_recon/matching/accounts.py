"""Pairs Up accounts with their YNAB counterparts by display name."""

from dataclasses import dataclass, field
from typing import Iterable
import logging

from ..models.account import Account
from ..models.records import UpAccountRecord, YnabAccountRecord
from ..models.transaction import NormalizationFailure

logger = logging.getLogger(__name__)


@dataclass
class AccountResolution:
    """Resolved accounts plus the Up accounts that could not be paired."""

    accounts: list[Account] = field(default_factory=list)
    failures: list[NormalizationFailure] = field(default_factory=list)


def resolve_accounts(
    up_accounts: Iterable[UpAccountRecord],
    ynab_accounts: Iterable[YnabAccountRecord],
) -> AccountResolution:
    """
    Match every Up account to the YNAB account with the same trimmed name.

    Deleted YNAB accounts are never matched. Accounts without a match, or
    whose YNAB account has no transfer payee id, are logged and skipped;
    resolution carries on with the rest.

    Args:
        up_accounts: Raw Up accounts, in the order to resolve them
        ynab_accounts: Raw YNAB accounts

    Returns:
        AccountResolution in Up account order
    """
    ynab_accounts = [x for x in ynab_accounts if not x.deleted]
    resolution = AccountResolution()

    for up_account in up_accounts:
        name = up_account.display_name
        ynab_account = next(
            (x for x in ynab_accounts if x.name.strip() == name.strip()), None
        )

        if ynab_account is None:
            reason = f"failed to match Up account `{name}` to a YNAB account"
        elif ynab_account.transfer_payee_id is None:
            reason = f"YNAB account `{ynab_account.name}` is missing a transfer payee id"
        else:
            resolution.accounts.append(
                Account(
                    name=name,
                    up_id=up_account.id,
                    ynab_id=ynab_account.id,
                    ynab_transfer_id=ynab_account.transfer_payee_id,
                )
            )
            continue

        logger.error(reason)
        resolution.failures.append(NormalizationFailure("account", up_account.id, reason))

    logger.info(f"Matched {len(resolution.accounts)} accounts")
    return resolution


def identify(
    up_accounts: Iterable[UpAccountRecord],
    ynab_accounts: Iterable[YnabAccountRecord],
) -> list[Account]:
    """Resolved accounts only; see ``resolve_accounts`` for the failures."""
    return resolve_accounts(up_accounts, ynab_accounts).accounts
