"""
Raw records as returned by the Up and YNAB APIs.

Only the fields used for reconciliation are declared; anything else in a
snapshot file is ignored.
"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class _UpModel(BaseModel):
    # Up uses camelCase keys; allow snake_case when building records in code
    model_config = ConfigDict(populate_by_name=True)


class UpMoney(_UpModel):
    currency_code: str = Field(alias="currencyCode")
    value_in_base_units: int = Field(alias="valueInBaseUnits")


class UpCashback(_UpModel):
    amount: UpMoney


class UpResourceLink(_UpModel):
    type: str = "accounts"
    id: str


class UpRelationship(_UpModel):
    data: Optional[UpResourceLink] = None


class UpTransactionRelationships(_UpModel):
    account: UpRelationship
    transfer_account: UpRelationship = Field(
        default_factory=UpRelationship, alias="transferAccount"
    )


class UpTransactionAttributes(_UpModel):
    description: str
    message: Optional[str] = None
    amount: UpMoney
    cashback: Optional[UpCashback] = None
    created_at: str = Field(alias="createdAt")


class UpTransactionRecord(_UpModel):
    """A transaction resource from the Up API."""

    id: str
    attributes: UpTransactionAttributes
    relationships: UpTransactionRelationships

    @property
    def account_id(self) -> Optional[str]:
        data = self.relationships.account.data
        return data.id if data else None

    @property
    def transfer_account_id(self) -> Optional[str]:
        data = self.relationships.transfer_account.data
        return data.id if data else None


class UpAccountAttributes(_UpModel):
    display_name: str = Field(alias="displayName")


class UpAccountRecord(_UpModel):
    """An account resource from the Up API."""

    id: str
    attributes: UpAccountAttributes

    @property
    def display_name(self) -> str:
        return self.attributes.display_name


class YnabAccountRecord(BaseModel):
    """An account from the YNAB API."""

    id: UUID
    name: str
    transfer_payee_id: Optional[UUID] = None
    deleted: bool = False


class YnabTransactionRecord(BaseModel):
    """A transaction from the YNAB API. ``amount`` is in milliunits."""

    id: str
    date: str
    amount: int
    memo: Optional[str] = None
    account_id: UUID
    transfer_account_id: Optional[UUID] = None
    payee_name: Optional[str] = None
    import_id: Optional[str] = None
    deleted: bool = False


class YnabCurrencyFormat(BaseModel):
    iso_code: str
    decimal_digits: int = 2


class YnabBudget(BaseModel):
    """A budget summary from the YNAB API."""

    id: UUID
    name: str
    currency_format: Optional[YnabCurrencyFormat] = None


class YnabSaveTransaction(BaseModel):
    """Payload for creating a YNAB transaction."""

    account_id: UUID
    date: str
    amount: int
    payee_id: Optional[UUID] = None
    payee_name: Optional[str] = None
    memo: Optional[str] = None
    cleared: Optional[str] = None
    approved: Optional[bool] = None
    import_id: Optional[str] = None


class YnabSaveTransactionWithId(YnabSaveTransaction):
    """Payload for updating an existing YNAB transaction."""

    id: str


class WriteBackRequest(BaseModel):
    """Everything the network layer has to send to YNAB for one run."""

    create: list[YnabSaveTransaction] = Field(default_factory=list)
    update: list[YnabSaveTransactionWithId] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.create and not self.update
