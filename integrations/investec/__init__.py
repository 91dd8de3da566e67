"""Investec Programmable Banking integration package."""
import os
from typing import Final

BASE_URL: Final[str] = os.getenv("INVESTEC_BASE_URL", "https://openapi.investec.com")
SANDBOX_URL: Final[str] = "https://openapisandbox.investec.com"
API_PREFIX: Final[str] = "/za/pb/v1"
TOKEN_PATH: Final[str] = "/identity/v2/oauth2/token"
REQUEST_TIMEOUT: Final[float] = float(os.getenv("INVESTEC_TIMEOUT_SECONDS", "30"))

# Submodules import the constants above, so they must be defined first.
from .auth import (  # noqa: E402
    ClientCredentialsTokenProvider,
    Credentials,
    StaticTokenProvider,
    Token,
    TokenProvider,
)
from .client import InvestecPbApi  # noqa: E402
from .errors import (  # noqa: E402
    AuthenticationError,
    HttpError,
    InvestecError,
    NotFoundError,
    ParseError,
    TimeoutError,
    ValidationError,
)

__all__ = [
    "BASE_URL",
    "SANDBOX_URL",
    "InvestecPbApi",
    "Credentials",
    "Token",
    "TokenProvider",
    "StaticTokenProvider",
    "ClientCredentialsTokenProvider",
    "InvestecError",
    "ValidationError",
    "AuthenticationError",
    "HttpError",
    "NotFoundError",
    "TimeoutError",
    "ParseError",
]
