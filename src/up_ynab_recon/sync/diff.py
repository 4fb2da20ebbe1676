"""Set difference between the Up source set and what YNAB already holds."""

from typing import Sequence
import logging

from ..models.transaction import Transaction

logger = logging.getLogger(__name__)


def index_source(source: Sequence[Transaction]) -> dict[str, Transaction]:
    return {transaction.id: transaction for transaction in source}


def index_remote(remote: Sequence[Transaction]) -> dict[str, Transaction]:
    """
    Index remote transactions by the Up id they were imported from.

    Remote records without an imported id were not created by a sync and
    cannot correlate to a source record.
    """
    return {
        transaction.imported_id: transaction
        for transaction in remote
        if transaction.imported_id is not None
    }


def find_missing(
    source: Sequence[Transaction], remote: Sequence[Transaction]
) -> list[Transaction]:
    """Source transactions with no remote counterpart, in source order."""
    remote_by_import = index_remote(remote)
    missing = [
        transaction
        for transaction in index_source(source).values()
        if transaction.id not in remote_by_import
    ]
    logger.debug(f"{len(missing)} source transactions missing from remote")
    return missing


def find_modified(
    source: Sequence[Transaction], remote: Sequence[Transaction]
) -> list[tuple[Transaction, Transaction]]:
    """
    Correlated (source, remote) pairs that are no longer equivalent.

    See ``Transaction.is_equivalent`` for what counts as a modification.
    """
    remote_by_import = index_remote(remote)
    modified: list[tuple[Transaction, Transaction]] = []

    for transaction_id, transaction in index_source(source).items():
        counterpart = remote_by_import.get(transaction_id)
        if counterpart is None:
            continue
        if not transaction.is_equivalent(counterpart):
            logger.debug(
                f"Transaction {transaction_id} differs from remote {counterpart.id}:\n"
                f"  source: {transaction}\n  remote: {counterpart}"
            )
            modified.append((transaction, counterpart))

    logger.debug(f"{len(modified)} source transactions modified in remote")
    return modified
