"""Typed shapes for Investec Programmable Banking payloads.

Python attributes are snake_case; the wire names (camelCase, PascalCase for
transfer results) are aliases. Models accept either spelling on input and
ignore keys they do not know about, so new API fields never break parsing.
"""
from __future__ import annotations

from decimal import Decimal
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

__all__ = [
    "AuthResponse",
    "Account",
    "AccountBalance",
    "AccountTransaction",
    "Beneficiary",
    "TransferInstruction",
    "PaymentInstruction",
    "TransferResult",
    "Links",
    "Meta",
    "AccountsResponse",
    "AccountBalanceResponse",
    "AccountTransactionsResponse",
    "BeneficiariesResponse",
    "TransferResponse",
]


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class AuthResponse(BaseModel):
    """Body of ``POST /identity/v2/oauth2/token``."""

    model_config = ConfigDict(extra="ignore")

    access_token: str
    token_type: Optional[str] = None
    expires_in: int
    scope: Optional[str] = None


# ---------------------------------------------------------------------------
# Resources
# ---------------------------------------------------------------------------


class Account(_WireModel):
    account_id: str
    account_number: Optional[str] = None
    account_name: Optional[str] = None
    reference_name: Optional[str] = None
    product_name: Optional[str] = None
    kyc_compliant: Optional[bool] = None
    profile_id: Optional[str] = None
    profile_name: Optional[str] = None


class AccountBalance(_WireModel):
    account_id: str
    current_balance: Optional[float] = None
    available_balance: Optional[float] = None
    budget_balance: Optional[float] = None
    straight_balance: Optional[float] = None
    cash_balance: Optional[float] = None
    currency: Optional[str] = None


class AccountTransaction(_WireModel):
    account_id: str
    type: Optional[str] = None
    transaction_type: Optional[str] = None
    status: Optional[str] = None
    description: Optional[str] = None
    card_number: Optional[str] = None
    posted_order: Optional[int] = None
    posting_date: Optional[str] = None
    value_date: Optional[str] = None
    action_date: Optional[str] = None
    transaction_date: Optional[str] = None
    amount: Optional[float] = None
    running_balance: Optional[float] = None
    uuid: Optional[str] = None


class Beneficiary(_WireModel):
    """A registered payment recipient on the account holder's profile."""

    beneficiary_id: str
    account_number: Optional[str] = None
    code: Optional[str] = None
    bank: Optional[str] = None
    beneficiary_name: Optional[str] = None
    last_payment_amount: Optional[str] = None
    last_payment_date: Optional[str] = None
    cell_no: Optional[str] = None
    email_address: Optional[str] = None
    name: Optional[str] = None
    reference_account_number: Optional[str] = None
    reference_name: Optional[str] = None
    category_id: Optional[str] = None
    profile_id: Optional[str] = None
    faster_payment_allowed: Optional[bool] = None


# ---------------------------------------------------------------------------
# Instructions (request bodies)
# ---------------------------------------------------------------------------


class _Instruction(_WireModel):
    amount: str
    my_reference: str
    their_reference: str

    @field_validator("amount", mode="before")
    @classmethod
    def _amount_as_decimal_string(cls, value: Union[str, int, Decimal]) -> str:
        # floats would leak binary rounding into a monetary amount
        if isinstance(value, float):
            raise ValueError("amount must be a str, int or Decimal, not float")
        if isinstance(value, (int, Decimal)) and not isinstance(value, bool):
            return str(value)
        return value

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


class TransferInstruction(_Instruction):
    """Inter-account transfer to another account on the same profile."""

    beneficiary_account_id: str


class PaymentInstruction(_Instruction):
    """Payment to a registered beneficiary."""

    beneficiary_id: str


class TransferResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    payment_reference_number: Optional[str] = Field(default=None, alias="PaymentReferenceNumber")
    payment_date: Optional[str] = Field(default=None, alias="PaymentDate")
    status: Optional[str] = Field(default=None, alias="Status")
    beneficiary_name: Optional[str] = Field(default=None, alias="BeneficiaryName")
    beneficiary_account_id: Optional[str] = Field(default=None, alias="BeneficiaryAccountId")
    authorisation_required: Optional[bool] = Field(default=None, alias="AuthorisationRequired")


# ---------------------------------------------------------------------------
# Response envelopes
# ---------------------------------------------------------------------------


class Links(_WireModel):
    self_: Optional[str] = Field(default=None, alias="self")


class Meta(_WireModel):
    total_pages: Optional[int] = None


class _Envelope(_WireModel):
    links: Optional[Links] = None
    meta: Optional[Meta] = None


class _AccountsData(_WireModel):
    accounts: List[Account] = Field(default_factory=list)


class AccountsResponse(_Envelope):
    data: _AccountsData

    @property
    def accounts(self) -> List[Account]:
        return self.data.accounts


class AccountBalanceResponse(_Envelope):
    data: AccountBalance


class _TransactionsData(_WireModel):
    transactions: List[AccountTransaction] = Field(default_factory=list)


class AccountTransactionsResponse(_Envelope):
    data: _TransactionsData

    @property
    def transactions(self) -> List[AccountTransaction]:
        return self.data.transactions


class BeneficiariesResponse(_Envelope):
    data: List[Beneficiary] = Field(default_factory=list)

    @property
    def total_pages(self) -> Optional[int]:
        return self.meta.total_pages if self.meta else None


class _TransferData(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    transfer_responses: List[TransferResult] = Field(
        default_factory=list, alias="TransferResponses"
    )


class TransferResponse(_Envelope):
    data: _TransferData

    @property
    def results(self) -> List[TransferResult]:
        return self.data.transfer_responses
