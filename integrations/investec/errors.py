"""Exception hierarchy for the Investec client.

Every failure surfaced to callers derives from :class:`InvestecError` so a
single ``except`` clause can catch the whole family.
"""
from __future__ import annotations

import builtins
from typing import Optional

__all__ = [
    "InvestecError",
    "ValidationError",
    "AuthenticationError",
    "HttpError",
    "NotFoundError",
    "TimeoutError",
    "ParseError",
]

MISSING_PARAMETERS = "Missing required parameters"
RESOURCE_NOT_FOUND = "Resource not found"


class InvestecError(Exception):
    """Base class for all client errors."""


class ValidationError(InvestecError):
    """Required input missing or empty; raised before any I/O."""

    def __init__(self, message: str = MISSING_PARAMETERS) -> None:
        super().__init__(message)


class AuthenticationError(InvestecError):
    """The identity endpoint rejected the client-credentials exchange."""

    def __init__(self, reason: str, status_code: Optional[int] = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.status_code = status_code


class HttpError(InvestecError):
    """Non-200 response to a data call (or a transport failure without status)."""

    def __init__(self, reason: str, status_code: Optional[int] = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.status_code = status_code


class NotFoundError(HttpError):
    def __init__(self, message: str = RESOURCE_NOT_FOUND) -> None:
        super().__init__(message, status_code=404)


class TimeoutError(InvestecError, builtins.TimeoutError):  # noqa: A001
    """Request exceeded the configured timeout."""


class ParseError(InvestecError, ValueError):
    """Response body was not valid JSON or did not match the expected shape."""
