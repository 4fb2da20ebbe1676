"""
Up transaction normalizer.
Converts raw Up API transactions into canonical transactions.
"""

from datetime import datetime
from typing import Iterable, Optional
import logging

from ..models.account import Account
from ..models.money import Money
from ..models.records import UpMoney, UpTransactionRecord
from ..models.transaction import External, Internal, NormalizationFailure, Transaction
from ..utils.exceptions import InvalidAmount, NormalizationError, UnmatchedAccount
from ..utils.timestamps import parse_iso_datetime

logger = logging.getLogger(__name__)

SOURCE = "up"


class UpParser:
    """
    Normalizer for Up transactions.

    Up records are the source of truth: they never carry an imported id.
    """

    def __init__(self, accounts: Iterable[Account]):
        """
        Initialize the parser with the resolved account table.

        Args:
            accounts: Accounts resolved for this run
        """
        self.accounts_by_up_id = {account.up_id: account for account in accounts}

    def parse(
        self, records: Iterable[UpTransactionRecord]
    ) -> tuple[list[Transaction], list[NormalizationFailure]]:
        """
        Normalize a batch of records, collecting per-record failures.

        Args:
            records: Raw Up transactions

        Returns:
            Tuple of (transactions, failures)
        """
        transactions: list[Transaction] = []
        failures: list[NormalizationFailure] = []

        for record in records:
            try:
                transactions.append(self.to_transaction(record))
            except NormalizationError as e:
                logger.warning(f"Skipping Up transaction {record.id}: {e}")
                failures.append(NormalizationFailure(SOURCE, record.id, str(e)))

        logger.info(
            f"Normalized {len(transactions)} Up transactions ({len(failures)} skipped)"
        )
        return transactions, failures

    def to_transaction(self, record: UpTransactionRecord) -> Transaction:
        """
        Convert one Up record.

        Raises:
            UnmatchedAccount: If the account or transfer account is unknown
            InvalidAmount: If the amount or cashback cannot be parsed
            NormalizationError: If the creation timestamp is not RFC 3339
        """
        to = self._resolve(record.account_id, record.id)

        from_account: Optional[Account] = None
        if record.transfer_account_id is not None:
            from_account = self._resolve(record.transfer_account_id, record.id)

        attributes = record.attributes
        if from_account is not None:
            kind = Internal(to=to, from_=from_account)
            # The description ("Transfer from Home") names the counterpart
            message = attributes.description
        else:
            kind = External(to=to, from_name=attributes.description)
            message = attributes.message

        amount = self._money(attributes.amount, record.id)
        if attributes.cashback is not None:
            cashback = self._money(attributes.cashback.amount, record.id)
            try:
                amount = amount + cashback
            except InvalidAmount as e:
                raise InvalidAmount(f"failed to add cashback amount: {e}", record.id) from e

        return Transaction(
            id=record.id,
            time=self._parse_time(attributes.created_at, record.id),
            amount=amount,
            kind=kind,
            message=message,
            imported_id=None,
        )

    def _resolve(self, up_id: Optional[str], record_id: str) -> Account:
        if up_id is None:
            raise UnmatchedAccount("missing `to` account", record_id)
        try:
            return self.accounts_by_up_id[up_id]
        except KeyError:
            raise UnmatchedAccount(
                f"failed to match Up account: `{up_id}`", record_id
            ) from None

    @staticmethod
    def _money(value: UpMoney, record_id: str) -> Money:
        try:
            return Money.from_minor_units(value.value_in_base_units, value.currency_code)
        except InvalidAmount as e:
            e.record_id = record_id
            raise

    @staticmethod
    def _parse_time(value: str, record_id: str) -> datetime:
        try:
            parsed = parse_iso_datetime(value)
        except ValueError as e:
            raise NormalizationError(f"invalid timestamp: `{value}`", record_id) from e
        if parsed.tzinfo is None:
            raise NormalizationError(f"timestamp without offset: `{value}`", record_id)
        return parsed
