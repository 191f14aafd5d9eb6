"""HTTP transport used by probe workers.

Workers depend only on the small :class:`Transport` / :class:`ProbeResponse`
protocols below. :class:`HttpTransport` is the production implementation
backed by a shared ``aiohttp.ClientSession``; tests substitute fakes.
"""

from __future__ import annotations

import codecs
import contextlib
from typing import TYPE_CHECKING, Protocol

import aiohttp

from throttleprobe._internal.errors import TransportError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

# Failures a single request may raise without stopping the worker loop.
TRANSPORT_ERRORS: tuple[type[BaseException], ...] = (
    aiohttp.ClientError,
    TimeoutError,
    OSError,
)


class ProbeResponse(Protocol):
    """An open response whose body has not been consumed yet."""

    @property
    def status(self) -> int:
        """HTTP status code."""
        ...

    def iter_lines(self) -> AsyncIterator[str]:
        """Yield the body as text lines without line terminators."""
        ...

    async def close(self) -> None:
        """Release the response. Must not raise."""
        ...


class Transport(Protocol):
    """Capability to open a GET request against a URL."""

    async def get(self, url: str) -> ProbeResponse:
        """Send a GET request and return once the status line is in."""
        ...


def _resolve_encoding(charset: str | None) -> str:
    """Return a codec name for the response charset, falling back to UTF-8."""
    if not charset:
        return "utf-8"
    try:
        return codecs.lookup(charset).name
    except LookupError:
        return "utf-8"


class _AiohttpResponse:
    """Adapts ``aiohttp.ClientResponse`` to :class:`ProbeResponse`."""

    def __init__(self, response: aiohttp.ClientResponse) -> None:
        self._response = response

    @property
    def status(self) -> int:
        return self._response.status

    async def iter_lines(self) -> AsyncIterator[str]:
        encoding = _resolve_encoding(self._response.charset)
        async for raw in self._response.content:
            yield raw.decode(encoding, errors="replace").rstrip("\r\n")

    async def close(self) -> None:
        # Failing to release a connection does not affect the counts.
        with contextlib.suppress(*TRANSPORT_ERRORS):
            self._response.release()


class HttpTransport:
    """GET-only transport wrapping one ``aiohttp.ClientSession``.

    TLS, redirects and connection pooling are left to aiohttp. Use as an
    async context manager; all workers of a run share one instance.

    Attributes:
        headers: Headers sent with every request.
    """

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
        connection_limit: int = 100,
    ) -> None:
        """Initialize the transport.

        Args:
            timeout: Total per-request timeout in seconds.
            headers: Default headers applied to every request.
            connection_limit: Maximum simultaneous connections in the pool.
        """
        self.headers: dict[str, str] = dict(headers or {})
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._connection_limit = connection_limit
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> HttpTransport:
        """Open the underlying aiohttp session."""
        self._session = aiohttp.ClientSession(
            timeout=self._timeout,
            connector=aiohttp.TCPConnector(limit=self._connection_limit),
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object | None,
    ) -> None:
        """Close the underlying aiohttp session."""
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def get(self, url: str) -> ProbeResponse:
        """Send a GET request.

        Args:
            url: Absolute URL to fetch.

        Returns:
            The open response. The caller must ``close()`` it.

        Raises:
            TransportError: If used outside of an async context manager.
            aiohttp.ClientError: On connection or protocol failures.
            TimeoutError: If the request exceeds the configured timeout.
        """
        if self._session is None:
            msg = "HttpTransport must be used as an async context manager"
            raise TransportError(msg)

        response = await self._session.get(url, headers=self.headers)
        return _AiohttpResponse(response)
