"""Shared HTTP helper for Investec data endpoints.

Uses `httpx.AsyncClient` with:
* Absolute URLs resolved against the configured host
* Automatic bearer-token injection via `TokenProvider`
* A per-phase httpx timeout plus an overall deadline per request (no retries)
* One response-mapping rule for every endpoint (200 / 404 / other)
* Prometheus counters + histogram (labels: endpoint, method, status)

Tests swap the transport for `httpx.MockTransport`; nothing here touches the
network on its own.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Dict, Optional

import httpx
from prometheus_client import Counter, Histogram

from . import BASE_URL, REQUEST_TIMEOUT
from .auth import TokenProvider
from .errors import HttpError, NotFoundError, ParseError, TimeoutError

__all__ = ["InvestecHTTP"]

_LOG = logging.getLogger(__name__)

_REQUESTS_TOTAL = Counter(
    "investec_http_requests_total",
    "HTTP requests to the Investec API",
    labelnames=["endpoint", "method", "status"],
)
_LATENCY_SEC = Histogram(
    "investec_http_latency_seconds",
    "Latency for Investec HTTP requests",
    labelnames=["endpoint"],
)


class InvestecHTTP:
    def __init__(
        self,
        token_provider: TokenProvider,
        *,
        base_url: str = BASE_URL,
        timeout: float = REQUEST_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._token_provider = token_provider
        self.base_url = base_url
        self.timeout = timeout
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    def url(self, path: str) -> str:
        return str(httpx.URL(self.base_url).join(path))

    async def _request(
        self,
        method: str,
        path: str,
        *,
        endpoint: Optional[str] = None,
        **kwargs: Any,
    ) -> httpx.Response:
        endpoint_label = endpoint or path.split("?", 1)[0]
        token = await self._token_provider.token()
        headers = {
            "Authorization": f"Bearer {token}",
            "content-type": "application/json",
        }
        url = self.url(path)
        _LOG.debug("%s %s", method, url)

        start = time.perf_counter()
        try:
            # httpx timeouts restart on every read; bound the whole exchange too
            resp = await asyncio.wait_for(
                self._client.request(method, url, headers=headers, **kwargs),
                timeout=self.timeout,
            )
        except (httpx.TimeoutException, asyncio.TimeoutError) as exc:
            _REQUESTS_TOTAL.labels(endpoint_label, method.lower(), "timeout").inc()
            raise TimeoutError(f"{method} {endpoint_label} timed out after {self.timeout}s") from exc
        except httpx.RequestError as exc:
            _REQUESTS_TOTAL.labels(endpoint_label, method.lower(), "error").inc()
            raise HttpError(f"{method} {endpoint_label} failed: {exc}") from exc
        finally:
            _LATENCY_SEC.labels(endpoint_label).observe(time.perf_counter() - start)

        _REQUESTS_TOTAL.labels(endpoint_label, method.lower(), resp.status_code).inc()
        if resp.status_code == 404:
            raise NotFoundError()
        if resp.status_code != 200:
            _LOG.warning("%s %s -> HTTP %s %s", method, endpoint_label, resp.status_code, resp.reason_phrase)
            raise HttpError(resp.reason_phrase, status_code=resp.status_code)
        return resp

    @staticmethod
    def _json(resp: httpx.Response) -> Any:
        try:
            return resp.json()
        except ValueError as exc:
            raise ParseError(f"Response body is not valid JSON: {exc}") from exc

    async def get_json(
        self,
        path: str,
        params: Optional[Dict[str, str]] = None,
        *,
        endpoint: Optional[str] = None,
    ) -> Any:
        resp = await self._request("GET", path, params=params, endpoint=endpoint)
        return self._json(resp)

    async def post_json(
        self,
        path: str,
        payload: Dict[str, Any],
        *,
        endpoint: Optional[str] = None,
    ) -> Any:
        resp = await self._request("POST", path, json=payload, endpoint=endpoint)
        return self._json(resp)

    async def aclose(self) -> None:
        await self._client.aclose()

    # context-manager sugar
    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()
