"""One-shot HTTP GET executor built on aiohttp.

Each call to :meth:`RequestExecutor.execute` blocks the calling thread for
exactly one request. The thread gets a private event loop, so worker
threads never share a loop, a connector or a session and their requests
run in parallel.

Process-wide state (TLS context, timeout policy, event loop flavour) lives
in an :class:`HttpContext` that is opened once before any worker starts and
closed once after all workers have been joined.
"""

from __future__ import annotations

import asyncio
import ssl
import sys
import time
from typing import TYPE_CHECKING, TypeVar

import aiohttp

from howfast._internal.errors import ClientInitError
from howfast._internal.logging import get_logger
from howfast.engine.outcome import (
    Failure,
    Success,
    TransportError,
    classify_exception,
    describe,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from howfast._internal.types import Headers
    from howfast.engine.outcome import Outcome

logger = get_logger("engine.executor")

_T = TypeVar("_T")


def _select_loop_factory() -> Callable[[], asyncio.AbstractEventLoop]:
    """Return uvloop's loop constructor if available, else asyncio's.

    Falls back to the default asyncio event loop on Windows or if uvloop
    is not installed.
    """
    if sys.platform == "win32":
        return asyncio.new_event_loop

    try:
        import uvloop
    except ImportError:
        logger.debug("uvloop not available, using default asyncio event loop")
        return asyncio.new_event_loop

    logger.debug("using uvloop event loops for worker threads")
    return uvloop.new_event_loop


class HttpContext:
    """Process-wide HTTP client state with an explicit lifecycle.

    Open it exactly once before dispatching workers and close it exactly
    once after every worker has been joined. Usable as a context manager.

    Attributes:
        fail_on_http_error: Treat HTTP status >= 400 as a request error.
        headers: Headers sent with every request.
    """

    def __init__(
        self,
        *,
        request_timeout: float | None = None,
        headers: Headers | None = None,
        fail_on_http_error: bool = True,
    ) -> None:
        """Initialize the context without acquiring anything.

        Args:
            request_timeout: Total per-request timeout in seconds. ``None``
                waits indefinitely.
            headers: Headers sent with every request.
            fail_on_http_error: Treat HTTP status >= 400 as a request error.
        """
        self.fail_on_http_error = fail_on_http_error
        self.headers: Headers = dict(headers or {})
        self._request_timeout = request_timeout
        self._timeout: aiohttp.ClientTimeout | None = None
        self._ssl_context: ssl.SSLContext | None = None
        self._loop_factory: Callable[[], asyncio.AbstractEventLoop] | None = None
        self._state = "created"

    @property
    def is_open(self) -> bool:
        return self._state == "open"

    @property
    def timeout(self) -> aiohttp.ClientTimeout:
        return self._require_open(self._timeout)

    @property
    def ssl_context(self) -> ssl.SSLContext:
        return self._require_open(self._ssl_context)

    @property
    def loop_factory(self) -> Callable[[], asyncio.AbstractEventLoop]:
        return self._require_open(self._loop_factory)

    def open(self) -> HttpContext:
        """Acquire the shared client state.

        Raises:
            RuntimeError: If the context was already opened.
            ClientInitError: If the TLS context cannot be created.
        """
        if self._state != "created":
            msg = f"HttpContext cannot be opened when {self._state}"
            raise RuntimeError(msg)

        try:
            self._ssl_context = ssl.create_default_context()
        except OSError as exc:
            raise ClientInitError(describe(exc)) from exc

        self._timeout = aiohttp.ClientTimeout(total=self._request_timeout)
        self._loop_factory = _select_loop_factory()
        self._state = "open"
        logger.debug("HTTP context opened (timeout=%s)", self._request_timeout)
        return self

    def close(self) -> None:
        """Release the shared client state. Closing twice is a no-op."""
        if self._state == "closed":
            return
        self._ssl_context = None
        self._loop_factory = None
        self._state = "closed"
        logger.debug("HTTP context closed")

    def __enter__(self) -> HttpContext:
        return self.open()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object | None,
    ) -> None:
        self.close()

    def _require_open(self, value: _T | None) -> _T:
        if self._state != "open" or value is None:
            msg = "HttpContext must be opened before requests are executed"
            raise RuntimeError(msg)
        return value


def with_default_scheme(url: str) -> str:
    """Prefix ``http://`` when ``url`` names no scheme, as curl does."""
    if "://" in url:
        return url
    return f"http://{url}"


def _elapsed_us(start_ns: int) -> int:
    return (time.perf_counter_ns() - start_ns) // 1000


async def fetch(
    session: aiohttp.ClientSession,
    url: str,
    *,
    fail_on_http_error: bool = True,
) -> Outcome:
    """Perform one GET request and discard the body.

    Redirects are not followed, so a 3xx response is a Success. Request
    failures are returned, not raised.

    Args:
        session: Open session to issue the request on.
        url: Absolute target URL.
        fail_on_http_error: Report HTTP status >= 400 as a Failure.

    Returns:
        Success or Failure, with status and timing filled in when known.
    """
    start = time.perf_counter_ns()
    status_code = 0

    try:
        async with session.get(url, allow_redirects=False) as resp:
            status_code = resp.status
            async for _chunk in resp.content.iter_any():
                pass
    except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as exc:
        code, os_error_code, message = classify_exception(exc)
        return Failure(
            error_code=code,
            os_error_code=os_error_code,
            error_message=message,
            status_code=status_code,
            total_time_us=_elapsed_us(start),
        )

    total_time_us = _elapsed_us(start)
    if fail_on_http_error and status_code >= 400:
        return Failure(
            error_code=TransportError.HTTP_RETURNED_ERROR,
            os_error_code=0,
            error_message=f"The requested URL returned error: {status_code}",
            status_code=status_code,
            total_time_us=total_time_us,
        )
    return Success(status_code=status_code, total_time_us=total_time_us)


class RequestExecutor:
    """Blocking single-request executor bound to an :class:`HttpContext`.

    Safe to share across threads: every call builds its own event loop,
    connector and session.
    """

    def __init__(self, context: HttpContext) -> None:
        self._context = context

    @property
    def context(self) -> HttpContext:
        return self._context

    def execute(self, url: str) -> Outcome:
        """Perform exactly one GET request against ``url``.

        Args:
            url: Target URL. A URL without a scheme is requested over
                plain HTTP.

        Returns:
            The request outcome. Request failures are values, not errors.

        Raises:
            RuntimeError: If the context is not open.
            ClientInitError: If the event loop or HTTP session could not be
                constructed (e.g. descriptor exhaustion).
        """
        loop_factory = self._context.loop_factory
        runner = asyncio.Runner(loop_factory=loop_factory)
        try:
            runner.get_loop()
        except OSError as exc:
            raise ClientInitError(describe(exc)) from exc

        with runner:
            return runner.run(self._perform(with_default_scheme(url)))

    async def _perform(self, url: str) -> Outcome:
        context = self._context
        try:
            connector = aiohttp.TCPConnector(
                ssl=context.ssl_context,
                limit=1,
                force_close=True,
            )
            session = aiohttp.ClientSession(
                connector=connector,
                timeout=context.timeout,
                headers=context.headers,
            )
        except OSError as exc:
            raise ClientInitError(describe(exc)) from exc

        async with session:
            return await fetch(
                session,
                url,
                fail_on_http_error=context.fail_on_http_error,
            )
