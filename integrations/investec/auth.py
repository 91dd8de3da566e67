"""OAuth2 client-credentials token handling for the Investec API.

The provider exchanges ``client_id``/``client_secret`` (HTTP Basic) plus the
``x-api-key`` header for a short-lived bearer token and caches it in memory
until ``expires_in`` seconds have elapsed. Nothing is persisted.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable

import httpx
from prometheus_client import Counter, Gauge
from pydantic import ValidationError as _SchemaError

from . import BASE_URL, REQUEST_TIMEOUT, TOKEN_PATH
from .errors import AuthenticationError, HttpError, ParseError, TimeoutError
from .models import AuthResponse

_LOG = logging.getLogger(__name__)

_TOKENS_ISSUED = Counter(
    "investec_oauth_tokens_issued_total", "OAuth tokens issued"
)
_TOKEN_ERRORS = Counter(
    "investec_oauth_token_errors_total",
    "OAuth token acquisition errors",
    ["reason"],
)
_TOKEN_EXPIRY_SEC = Gauge(
    "investec_oauth_token_expiry_seconds", "Seconds until token expiry"
)

__all__ = [
    "Credentials",
    "Token",
    "TokenProvider",
    "StaticTokenProvider",
    "ClientCredentialsTokenProvider",
]


@dataclass(frozen=True)
class Credentials:
    client_id: str
    client_secret: str
    api_key: str
    host: str = BASE_URL

    def __repr__(self) -> str:
        return f"Credentials(client_id={self.client_id!r}, host={self.host!r})"


@dataclass(frozen=True)
class Token:
    """Bearer token plus its absolute expiry (epoch seconds)."""

    access_token: str
    expires_at: float
    token_type: Optional[str] = None
    scope: Optional[str] = None

    def is_valid(self, now: Optional[float] = None) -> bool:
        now = time.time() if now is None else now
        return now < self.expires_at


@runtime_checkable
class TokenProvider(Protocol):
    """Return a valid OAuth2 bearer token string."""

    async def token(self) -> str:  # noqa: D401 – imperative form
        ...

    async def refresh(self) -> str:  # noqa: D401 – imperative form
        """Force-refresh token ignoring any cache."""


class StaticTokenProvider:
    """Provider for a token minted elsewhere; never refreshes."""

    def __init__(self, token: str) -> None:
        self._token = token

    async def token(self) -> str:
        return self._token

    async def refresh(self) -> str:
        return self._token


class ClientCredentialsTokenProvider:
    """Implements the OAuth2 client-credentials flow against ``/identity/v2``."""

    def __init__(
        self,
        credentials: Credentials,
        *,
        timeout: float = REQUEST_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._credentials = credentials
        self._timeout = timeout
        self._transport = transport
        self._token: Optional[Token] = None
        self._lock = asyncio.Lock()

    @property
    def current(self) -> Optional[Token]:
        return self._token

    @property
    def token_url(self) -> str:
        return str(httpx.URL(self._credentials.host).join(TOKEN_PATH))

    def _cached(self) -> Optional[str]:
        if self._token is not None and self._token.is_valid(time.time()):
            return self._token.access_token
        return None

    async def token(self) -> str:
        cached = self._cached()
        if cached is not None:
            return cached
        async with self._lock:
            # another caller may have refreshed while we waited
            cached = self._cached()
            if cached is not None:
                return cached
            self._token = await self.acquire()
            return self._token.access_token

    async def refresh(self) -> str:
        async with self._lock:
            self._token = await self.acquire()
            return self._token.access_token

    async def acquire(self) -> Token:
        """Run one client-credentials exchange and return the resulting token.

        Does not touch the cache; :meth:`token` and :meth:`refresh` store the
        result only when the exchange succeeds.
        """
        creds = self._credentials
        headers = {
            "x-api-key": creds.api_key,
            "content-type": "application/x-www-form-urlencoded",
        }
        _LOG.debug("Requesting token from %s for client_id=%s", self.token_url, creds.client_id)
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await asyncio.wait_for(
                    client.post(
                        self.token_url,
                        headers=headers,
                        auth=httpx.BasicAuth(creds.client_id, creds.client_secret),
                        content="grant_type=client_credentials",
                    ),
                    timeout=self._timeout,
                )
        except (httpx.TimeoutException, asyncio.TimeoutError) as exc:
            _TOKEN_ERRORS.labels("timeout").inc()
            raise TimeoutError(f"Token request timed out after {self._timeout}s") from exc
        except httpx.RequestError as exc:
            _TOKEN_ERRORS.labels("transport").inc()
            raise HttpError(f"Token request failed: {exc}") from exc

        if resp.status_code != 200:
            _TOKEN_ERRORS.labels(str(resp.status_code)).inc()
            _LOG.warning("Token request rejected: HTTP %s %s", resp.status_code, resp.reason_phrase)
            raise AuthenticationError(resp.reason_phrase, status_code=resp.status_code)

        try:
            payload = AuthResponse.model_validate(resp.json())
        except (ValueError, _SchemaError) as exc:
            _TOKEN_ERRORS.labels("parse").inc()
            raise ParseError(f"Invalid token response: {exc}") from exc

        now = time.time()
        token = Token(
            access_token=payload.access_token,
            expires_at=now + payload.expires_in,
            token_type=payload.token_type,
            scope=payload.scope,
        )
        _TOKENS_ISSUED.inc()
        _TOKEN_EXPIRY_SEC.set(payload.expires_in)
        _LOG.info("Issued client_credentials token; expires_in=%ss scope=%s", payload.expires_in, payload.scope)
        return token
