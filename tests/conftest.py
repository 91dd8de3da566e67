import asyncio
import contextlib
import os

import pytest

from common import secrets as secrets_module


@pytest.fixture
def anyio_backend():
    return "asyncio"


# ---------------------------------------------------------------------------
# Secrets isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _secrets(monkeypatch):
    """Start every test with an empty secrets cache and no INVESTEC_* env."""

    for key in list(os.environ):
        if key.startswith("INVESTEC_"):
            monkeypatch.delenv(key, raising=False)
    secrets_module.secrets.set_override({})
    yield
    secrets_module.secrets.set_override({})


# ---------------------------------------------------------------------------
# Slow local HTTP server
# ---------------------------------------------------------------------------


@contextlib.asynccontextmanager
async def _drip_server(body: bytes, delay: float = 0.1):
    """Local HTTP server that sends *body* one byte per *delay* seconds."""
    writers, tasks = [], []

    async def handle(reader, writer):
        writers.append(writer)
        tasks.append(asyncio.current_task())
        try:
            await reader.readuntil(b"\r\n\r\n")
            writer.write(
                b"HTTP/1.1 200 OK\r\ncontent-type: application/json\r\n"
                + f"content-length: {len(body)}\r\n\r\n".encode()
            )
            for i in range(len(body)):
                if writer.is_closing():
                    break
                writer.write(body[i : i + 1])
                await writer.drain()
                await asyncio.sleep(delay)
        except (ConnectionError, asyncio.IncompleteReadError):
            pass

    server = await asyncio.start_server(handle, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    try:
        yield f"http://127.0.0.1:{port}"
    finally:
        for w in writers:
            w.close()
        await asyncio.gather(*tasks, return_exceptions=True)
        server.close()


@pytest.fixture
def drip_server():
    return _drip_server
