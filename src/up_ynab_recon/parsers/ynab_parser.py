"""
YNAB transaction normalizer.
Converts raw YNAB API transactions into canonical transactions.
"""

from datetime import datetime, timezone
from typing import Iterable, Optional
from uuid import UUID
import logging

from ..models.account import Account
from ..models.money import Money
from ..models.records import YnabBudget, YnabTransactionRecord
from ..models.transaction import External, Internal, NormalizationFailure, Transaction
from ..utils.exceptions import (
    InvalidAmount,
    MissingMemo,
    MissingPayeeName,
    NormalizationError,
    UnmatchedAccount,
)

logger = logging.getLogger(__name__)

SOURCE = "ynab"

# Money is held in cents, so milliunits only convert for two-digit currencies
CURRENCY_DIGITS = 2


class YnabParser:
    """
    Normalizer for YNAB transactions of a single budget.

    YNAB keeps amounts in milliunits and dates without a time of day.
    """

    def __init__(
        self,
        budget: YnabBudget,
        accounts: Iterable[Account],
        milliunit_factor: int = 10,
    ):
        """
        Initialize the parser.

        Args:
            budget: Budget the records belong to (supplies the currency)
            accounts: Accounts resolved for this run
            milliunit_factor: Milliunits per cent
        """
        self.budget = budget
        self.milliunit_factor = milliunit_factor
        accounts = list(accounts)
        self.accounts_by_ynab_id = {account.ynab_id: account for account in accounts}
        self.accounts_by_transfer_id = {
            account.ynab_transfer_id: account for account in accounts
        }

    @property
    def currency(self) -> Optional[str]:
        currency_format = self.budget.currency_format
        return currency_format.iso_code if currency_format else None

    def parse(
        self, records: Iterable[YnabTransactionRecord]
    ) -> tuple[list[Transaction], list[NormalizationFailure]]:
        """
        Normalize a batch of records, collecting per-record failures.

        Args:
            records: Raw YNAB transactions

        Returns:
            Tuple of (transactions, failures); deleted records are left out
        """
        transactions: list[Transaction] = []
        failures: list[NormalizationFailure] = []

        for record in records:
            if record.deleted:
                logger.debug(f"Ignoring deleted YNAB transaction {record.id}")
                continue
            try:
                transactions.append(self.to_transaction(record))
            except NormalizationError as e:
                logger.warning(f"Skipping YNAB transaction {record.id}: {e}")
                failures.append(NormalizationFailure(SOURCE, record.id, str(e)))

        logger.info(
            f"Normalized {len(transactions)} YNAB transactions ({len(failures)} skipped)"
        )
        return transactions, failures

    def to_transaction(self, record: YnabTransactionRecord) -> Transaction:
        """
        Convert one YNAB record.

        Raises:
            UnmatchedAccount: If the account or transfer account is unknown
            MissingPayeeName: If a non-transfer record has no payee name
            MissingMemo: If the record has no memo field
            InvalidAmount: If the budget has no currency, its currency does not
                use cents, or the amount is bad
        """
        to = self.accounts_by_ynab_id.get(record.account_id)
        if to is None:
            raise UnmatchedAccount(
                f"failed to match YNAB account: `{record.account_id}`", record.id
            )

        if record.transfer_account_id is not None:
            kind = Internal(to=to, from_=self._resolve_transfer(record))
        else:
            if not record.payee_name:
                raise MissingPayeeName("missing payee name", record.id)
            kind = External(to=to, from_name=record.payee_name)

        # An explicit null memo means no message; only an absent field is an error
        if "memo" not in record.model_fields_set:
            raise MissingMemo("missing memo", record.id)

        if self.currency is None:
            raise InvalidAmount(
                f"budget `{self.budget.name}` has no currency format", record.id
            )
        if self.budget.currency_format.decimal_digits != CURRENCY_DIGITS:
            raise InvalidAmount(
                f"budget `{self.budget.name}` uses "
                f"{self.budget.currency_format.decimal_digits} decimal digits, "
                f"expected {CURRENCY_DIGITS}",
                record.id,
            )
        try:
            amount = Money.from_milliunits(
                record.amount, self.currency, self.milliunit_factor
            )
        except InvalidAmount as e:
            e.record_id = record.id
            raise

        return Transaction(
            id=record.id,
            time=self._parse_date(record.date, record.id),
            amount=amount,
            kind=kind,
            message=record.memo,
            imported_id=record.import_id,
        )

    def _resolve_transfer(self, record: YnabTransactionRecord) -> Account:
        transfer_id: UUID = record.transfer_account_id
        # Transfers are keyed by the counterpart's transfer payee id; the API
        # also reports the plain account id here, so accept either
        account = self.accounts_by_transfer_id.get(transfer_id)
        if account is None:
            account = self.accounts_by_ynab_id.get(transfer_id)
        if account is None:
            raise UnmatchedAccount(
                f"failed to match outgoing YNAB account: `{transfer_id}`", record.id
            )
        return account

    @staticmethod
    def _parse_date(value: str, record_id: str) -> datetime:
        try:
            parsed = datetime.strptime(value, "%Y-%m-%d")
        except ValueError as e:
            raise NormalizationError(f"invalid date: `{value}`", record_id) from e
        return parsed.replace(tzinfo=timezone.utc)
