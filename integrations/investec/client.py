"""Async client for Investec Programmable Banking (``/za/pb/v1``).

Each public method maps onto exactly one remote endpoint: validate inputs,
ensure a bearer token, issue the request, and parse the JSON body into the
matching model from :mod:`integrations.investec.models`.

    async with InvestecPbApi(client_id, client_secret, api_key) as api:
        accounts = await api.get_accounts()
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Type, TypeVar, Union
from urllib.parse import quote

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as _SchemaError

from common.secrets import get_secret

from . import API_PREFIX, BASE_URL, REQUEST_TIMEOUT
from .auth import ClientCredentialsTokenProvider, Credentials, Token, TokenProvider
from .errors import ParseError, ValidationError
from .http import InvestecHTTP
from .models import (
    AccountBalanceResponse,
    AccountsResponse,
    AccountTransactionsResponse,
    BeneficiariesResponse,
    PaymentInstruction,
    TransferInstruction,
    TransferResponse,
)

__all__ = ["InvestecPbApi"]

_LOG = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)
InstructionT = TypeVar("InstructionT", TransferInstruction, PaymentInstruction)

DateLike = Union[str, date, None]


def _account_path(account_id: str, suffix: str = "") -> str:
    return f"{API_PREFIX}/accounts/{quote(account_id, safe='')}{suffix}"


def _parse(model: Type[M], body: Any) -> M:
    try:
        return model.model_validate(body)
    except _SchemaError as exc:
        raise ParseError(f"Unexpected {model.__name__} payload: {exc}") from exc


def _as_instruction_list(
    items: Union[InstructionT, Dict[str, Any], Iterable[Union[InstructionT, Dict[str, Any]]], None],
    model: Type[InstructionT],
) -> List[InstructionT]:
    """Normalise one-or-many instructions into a validated, non-empty list."""
    if items is None:
        raise ValidationError()
    if isinstance(items, (model, dict)):
        items = [items]
    items = list(items)
    if not items:
        raise ValidationError()
    try:
        return [item if isinstance(item, model) else model.model_validate(item) for item in items]
    except _SchemaError as exc:
        raise ValidationError(f"Invalid {model.__name__}: {exc}") from exc


def _filter_value(value: DateLike) -> Optional[str]:
    if isinstance(value, date):
        return value.strftime("%Y-%m-%d")
    return value or None


class InvestecPbApi:
    """Typed client for accounts, balances, transactions, beneficiaries and payments."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        api_key: str,
        host: str = BASE_URL,
        *,
        timeout: float = REQUEST_TIMEOUT,
        token_provider: Optional[TokenProvider] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.credentials = Credentials(client_id, client_secret, api_key, host)
        self.token_provider = token_provider or ClientCredentialsTokenProvider(
            self.credentials, timeout=timeout, transport=transport
        )
        self.http = InvestecHTTP(
            self.token_provider, base_url=host, timeout=timeout, transport=transport
        )

    @classmethod
    def from_env(cls, **kwargs: Any) -> "InvestecPbApi":
        """Build a client from ``INVESTEC_*`` secrets (secrets file, then env)."""
        client_id = get_secret("INVESTEC_CLIENT_ID")
        client_secret = get_secret("INVESTEC_CLIENT_SECRET")
        api_key = get_secret("INVESTEC_API_KEY")
        missing = [
            name
            for name, value in (
                ("INVESTEC_CLIENT_ID", client_id),
                ("INVESTEC_CLIENT_SECRET", client_secret),
                ("INVESTEC_API_KEY", api_key),
            )
            if not value
        ]
        if missing:
            raise ValidationError(f"Missing credentials: {', '.join(missing)}")
        host = get_secret("INVESTEC_HOST", BASE_URL)
        return cls(client_id, client_secret, api_key, host, **kwargs)

    @property
    def host(self) -> str:
        return self.credentials.host

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()

    async def aclose(self) -> None:
        await self.http.aclose()

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    async def get_token(self) -> str:
        """Return a valid bearer token, acquiring a new one when expired."""
        return await self.token_provider.token()

    async def get_access_token(self) -> Token:
        """Run a fresh client-credentials exchange without touching the cache."""
        if not isinstance(self.token_provider, ClientCredentialsTokenProvider):
            raise TypeError("get_access_token requires a ClientCredentialsTokenProvider")
        return await self.token_provider.acquire()

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    async def get_accounts(self) -> AccountsResponse:
        body = await self.http.get_json(f"{API_PREFIX}/accounts", endpoint="accounts")
        return _parse(AccountsResponse, body)

    async def get_account_balances(self, account_id: str) -> AccountBalanceResponse:
        if not account_id:
            raise ValidationError()
        body = await self.http.get_json(_account_path(account_id, "/balance"), endpoint="balance")
        return _parse(AccountBalanceResponse, body)

    async def get_account_transactions(
        self,
        account_id: str,
        from_date: DateLike = None,
        to_date: DateLike = None,
        transaction_type: Optional[str] = None,
    ) -> AccountTransactionsResponse:
        """Return transactions for *account_id*.

        Filters are optional and sent as-is (``date`` values as YYYY-MM-DD);
        no query string is attached when none is given.
        """
        if not account_id:
            raise ValidationError()
        filters = {
            "fromDate": _filter_value(from_date),
            "toDate": _filter_value(to_date),
            "transactionType": transaction_type or None,
        }
        params = {key: value for key, value in filters.items() if value}
        body = await self.http.get_json(
            _account_path(account_id, "/transactions"),
            params=params or None,
            endpoint="transactions",
        )
        return _parse(AccountTransactionsResponse, body)

    # ------------------------------------------------------------------
    # Beneficiaries / payments
    # ------------------------------------------------------------------

    async def get_beneficiaries(self) -> BeneficiariesResponse:
        body = await self.http.get_json(
            f"{API_PREFIX}/accounts/beneficiaries", endpoint="beneficiaries"
        )
        return _parse(BeneficiariesResponse, body)

    async def transfer_multiple(
        self,
        account_id: str,
        transfers: Union[TransferInstruction, Dict[str, Any], Iterable[Union[TransferInstruction, Dict[str, Any]]]],
    ) -> TransferResponse:
        """Transfer between accounts on the same profile (one or many)."""
        if not account_id:
            raise ValidationError()
        transfer_list = _as_instruction_list(transfers, TransferInstruction)
        payload = {"transferList": [t.to_wire() for t in transfer_list]}
        _LOG.info("Submitting %d transfer(s) from account", len(transfer_list))
        body = await self.http.post_json(
            _account_path(account_id, "/transfermultiple"), payload, endpoint="transfermultiple"
        )
        return _parse(TransferResponse, body)

    async def pay_multiple(
        self,
        account_id: str,
        payments: Union[PaymentInstruction, Dict[str, Any], Iterable[Union[PaymentInstruction, Dict[str, Any]]]],
    ) -> TransferResponse:
        """Pay one or many registered beneficiaries."""
        if not account_id:
            raise ValidationError()
        payment_list = _as_instruction_list(payments, PaymentInstruction)
        payload = {"paymentList": [p.to_wire() for p in payment_list]}
        _LOG.info("Submitting %d payment(s) from account", len(payment_list))
        body = await self.http.post_json(
            _account_path(account_id, "/paymultiple"), payload, endpoint="paymultiple"
        )
        return _parse(TransferResponse, body)
