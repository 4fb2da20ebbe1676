"""
Write-back payloads for YNAB and verification of what YNAB echoes back.
The network layer sends these; nothing here performs I/O.
"""

from typing import Sequence, Union
import logging

from ..models.records import (
    WriteBackRequest,
    YnabSaveTransaction,
    YnabSaveTransactionWithId,
    YnabTransactionRecord,
)
from ..models.transaction import External, Transaction
from ..utils.exceptions import SyncMismatch

logger = logging.getLogger(__name__)

CLEARED = "cleared"


def _payload_fields(transaction: Transaction, milliunit_factor: int) -> dict:
    fields = {
        "account_id": transaction.to.ynab_id,
        "date": transaction.date.isoformat(),
        "amount": transaction.amount.to_milliunits(milliunit_factor),
        "memo": transaction.message,
        "import_id": transaction.id,
    }
    if isinstance(transaction.kind, External):
        fields["payee_name"] = transaction.kind.from_name
    else:
        fields["payee_id"] = transaction.kind.from_.ynab_transfer_id
    return fields


def to_new_payload(
    transaction: Transaction, milliunit_factor: int = 10
) -> YnabSaveTransaction:
    """Payload creating ``transaction`` in YNAB, cleared and approved."""
    return YnabSaveTransaction(
        **_payload_fields(transaction, milliunit_factor),
        cleared=CLEARED,
        approved=True,
    )


def to_update_payload(
    transaction: Transaction, remote_id: str, milliunit_factor: int = 10
) -> YnabSaveTransactionWithId:
    """Payload overwriting the YNAB transaction ``remote_id`` with ``transaction``."""
    return YnabSaveTransactionWithId(
        id=remote_id, **_payload_fields(transaction, milliunit_factor)
    )


def build_write_back(
    missing: Sequence[Transaction],
    modified: Sequence[tuple[Transaction, Transaction]],
    milliunit_factor: int = 10,
) -> WriteBackRequest:
    """
    Build the create/update request for one run.

    Args:
        missing: Source transactions YNAB does not have
        modified: (source, remote) pairs that drifted

    Returns:
        WriteBackRequest for the network layer
    """
    return WriteBackRequest(
        create=[to_new_payload(t, milliunit_factor) for t in missing],
        update=[
            to_update_payload(source, remote.id, milliunit_factor)
            for source, remote in modified
        ],
    )


def _differs(
    payload: Union[YnabSaveTransaction, YnabSaveTransactionWithId],
    record: YnabTransactionRecord,
) -> bool:
    return (
        payload.amount != record.amount
        or payload.date != record.date
        or payload.memo != record.memo
        or payload.account_id != record.account_id
    )


def _check_echo(
    payloads: Sequence[YnabSaveTransaction],
    echoed: Sequence[YnabTransactionRecord],
    mismatched_ids: list[str],
) -> int:
    """Compare one batch; returns how many payloads were not echoed at all."""
    echoed_by_import = {r.import_id: r for r in echoed if r.import_id is not None}
    missing = 0
    for payload in payloads:
        record = echoed_by_import.get(payload.import_id)
        if record is None:
            missing += 1
        elif _differs(payload, record):
            mismatched_ids.append(payload.import_id)
    return missing


def verify_write_back(
    request: WriteBackRequest,
    created: Sequence[YnabTransactionRecord] = (),
    updated: Sequence[YnabTransactionRecord] = (),
    duplicate_import_ids: Sequence[str] = (),
) -> int:
    """
    Check YNAB's response against what was sent.

    Args:
        request: What was sent
        created: Transactions YNAB reports as created
        updated: Transactions YNAB reports as updated
        duplicate_import_ids: Import ids YNAB rejected as duplicates

    Returns:
        Number of payloads confirmed

    Raises:
        SyncMismatch: If anything was not echoed, echoed differently or duplicated
    """
    mismatched_ids: list[str] = []
    missing_count = _check_echo(request.create, created, mismatched_ids)
    missing_count += _check_echo(request.update, updated, mismatched_ids)

    if missing_count or mismatched_ids or duplicate_import_ids:
        message = (
            f"write-back mismatch: {missing_count} not echoed, "
            f"{len(mismatched_ids)} echoed with different values, "
            f"{len(duplicate_import_ids)} duplicate import ids"
        )
        logger.error(message)
        raise SyncMismatch(
            message,
            missing_count=missing_count,
            mismatched_ids=mismatched_ids,
            duplicate_import_ids=duplicate_import_ids,
        )

    confirmed = len(request.create) + len(request.update)
    logger.info(f"Write-back confirmed for {confirmed} transactions")
    return confirmed
