"""Shared test fixtures for the ThrottleProbe test suite."""

from __future__ import annotations

import asyncio
import socket
import threading
from typing import TYPE_CHECKING

import aiohttp
import pytest
from aiohttp import web

from throttleprobe.demo.limiter import FixedWindowLimiter
from throttleprobe.demo.server import create_app

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable, Iterator


# =============================================================================
# Pytest configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-apply markers based on test directory structure."""
    for item in items:
        test_path = str(item.fspath)
        if "/unit/" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
        elif "/e2e/" in test_path:
            item.add_marker(pytest.mark.e2e)


# =============================================================================
# Network utilities
# =============================================================================


def _get_free_port() -> int:
    """Find an available port on localhost."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("", 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


# =============================================================================
# In-memory transport
# =============================================================================


class FakeResponse:
    """Scripted response; optionally fails after ``fail_after`` lines."""

    def __init__(
        self,
        status: int,
        lines: list[str],
        fail_after: int | None = None,
        fail_with: BaseException | None = None,
    ) -> None:
        self._status = status
        self._lines = lines
        self._fail_after = fail_after
        self._fail_with = fail_with
        self.closed = False

    @property
    def status(self) -> int:
        return self._status

    async def iter_lines(self) -> AsyncIterator[str]:
        for i, line in enumerate(self._lines):
            if self._fail_after is not None and i >= self._fail_after:
                raise self._fail_with or aiohttp.ClientPayloadError("connection reset mid-body")
            yield line

    async def close(self) -> None:
        self.closed = True


class FakeTransport:
    """Transport returning canned responses per URL.

    ``errors`` maps a URL to an exception raised instead of responding.
    ``fail_with`` replaces the default mid-body failure raised after
    ``fail_after`` lines.
    """

    def __init__(
        self,
        routes: dict[str, tuple[int, list[str]]] | None = None,
        *,
        default: tuple[int, list[str]] = (200, []),
        errors: dict[str, BaseException] | None = None,
        fail_after: int | None = None,
        fail_with: BaseException | None = None,
    ) -> None:
        self.routes = dict(routes or {})
        self.default = default
        self.errors = dict(errors or {})
        self.fail_after = fail_after
        self.fail_with = fail_with
        self.calls: list[str] = []
        self.responses: list[FakeResponse] = []

    async def get(self, url: str) -> FakeResponse:
        self.calls.append(url)
        if url in self.errors:
            raise self.errors[url]
        status, lines = self.routes.get(url, self.default)
        response = FakeResponse(status, list(lines), self.fail_after, self.fail_with)
        self.responses.append(response)
        return response


@pytest.fixture
def make_transport() -> Callable[..., FakeTransport]:
    """Factory for in-memory transports."""
    return FakeTransport


# =============================================================================
# Demo target servers
# =============================================================================


async def _body_handler(request: web.Request) -> web.Response:
    """Return ``?body=`` (``|`` separates lines) with ``?status=``.

    ``?hex=`` sends raw bytes instead of ``?body=``; ``?charset=`` sets the
    declared charset without re-encoding.
    """
    status = int(request.query.get("status", "200"))
    if "hex" in request.query:
        payload = bytes.fromhex(request.query["hex"])
    else:
        payload = request.query.get("body", "").replace("|", "\n").encode()
    charset = request.query.get("charset", "utf-8")
    return web.Response(
        body=payload,
        status=status,
        headers={"Content-Type": f"text/plain; charset={charset}"},
    )


async def _start_app(app: web.Application) -> tuple[web.AppRunner, str]:
    port = _get_free_port()
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", port)
    await site.start()
    return runner, f"http://127.0.0.1:{port}"


@pytest.fixture
async def body_server() -> AsyncIterator[str]:
    """Server echoing a scripted body and status.

    Returns the base URL (e.g., 'http://127.0.0.1:54321').
    """
    app = web.Application()
    app.router.add_get("/body", _body_handler)
    runner, base_url = await _start_app(app)
    yield base_url
    await runner.cleanup()


@pytest.fixture
async def demo_server() -> AsyncIterator[str]:
    """Demo target allowing 3 requests per client per minute."""
    app = create_app(FixedWindowLimiter(rate=3, window=60.0))
    runner, base_url = await _start_app(app)
    yield base_url
    await runner.cleanup()


@pytest.fixture
def sync_demo_server() -> Iterator[str]:
    """Demo target running in a background thread for sync tests.

    The runner and the CLI block the main thread with their own event
    loop, so the server needs a loop of its own.
    """
    port = _get_free_port()
    started = threading.Event()
    loop_holder: list[asyncio.AbstractEventLoop] = []

    def _thread_target() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        runner = web.AppRunner(create_app(FixedWindowLimiter(rate=3, window=60.0)))
        loop.run_until_complete(runner.setup())
        site = web.TCPSite(runner, "127.0.0.1", port)
        loop.run_until_complete(site.start())
        loop_holder.append(loop)
        started.set()
        loop.run_forever()
        loop.run_until_complete(runner.cleanup())
        loop.close()

    thread = threading.Thread(target=_thread_target, daemon=True)
    thread.start()
    started.wait(timeout=5.0)

    yield f"http://127.0.0.1:{port}"

    if loop_holder:
        loop_holder[0].call_soon_threadsafe(loop_holder[0].stop)
    thread.join(timeout=5.0)
