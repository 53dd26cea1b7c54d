"""Request outcome types and transport error classification."""

from __future__ import annotations

import asyncio
import socket
from dataclasses import dataclass
from enum import IntEnum

import aiohttp


class TransportError(IntEnum):
    """Transport-level result codes.

    Numbered after libcurl's ``CURLcode`` values so the ``curl_error_code``
    column stays comparable with logs from curl-based tooling.
    """

    OK = 0
    UNSUPPORTED_PROTOCOL = 1
    FAILED_INIT = 2
    URL_MALFORMAT = 3
    COULDNT_RESOLVE_HOST = 6
    COULDNT_CONNECT = 7
    HTTP_RETURNED_ERROR = 22
    OPERATION_TIMEDOUT = 28
    SSL_CONNECT_ERROR = 35
    BAD_FUNCTION_ARGUMENT = 43
    GOT_NOTHING = 52
    RECV_ERROR = 56
    PEER_FAILED_VERIFICATION = 60


@dataclass(frozen=True)
class Success:
    """A request that completed at the transport level.

    Attributes:
        status_code: HTTP response status code.
        total_time_us: Total request time in microseconds.
    """

    status_code: int
    total_time_us: int

    @property
    def error_code(self) -> TransportError:
        return TransportError.OK

    @property
    def os_error_code(self) -> int:
        return 0

    @property
    def error_message(self) -> str:
        return ""


@dataclass(frozen=True)
class Failure:
    """A request that failed, or a client that could not be initialized.

    Attributes:
        error_code: Non-zero transport error code.
        os_error_code: ``errno`` of the underlying OS error, 0 if none.
        error_message: Single-line description of the failure.
        status_code: HTTP status if a response arrived, else 0.
        total_time_us: Time spent before the failure in microseconds.
    """

    error_code: TransportError
    os_error_code: int
    error_message: str
    status_code: int = 0
    total_time_us: int = 0


Outcome = Success | Failure


def single_line(message: str) -> str:
    """Collapse a message onto one line and drop trailing newlines."""
    return " ".join(part.strip() for part in message.splitlines() if part.strip())


def describe(exc: BaseException) -> str:
    text = str(exc)
    name = type(exc).__name__
    return single_line(f"{name}: {text}" if text else name)


def errno_of(exc: BaseException) -> int:
    os_error = getattr(exc, "os_error", None)
    if isinstance(os_error, OSError) and os_error.errno is not None:
        return os_error.errno
    if isinstance(exc, OSError) and exc.errno is not None:
        return exc.errno
    return 0


def classify_exception(exc: BaseException) -> tuple[TransportError, int, str]:
    """Map a request exception to ``(code, os errno, message)``.

    Args:
        exc: Exception raised while performing a request.

    Returns:
        The transport code, the OS ``errno`` (0 if unknown) and a
        one-line message.
    """
    code = _classify(exc)
    return code, errno_of(exc), describe(exc)


def _classify(exc: BaseException) -> TransportError:
    # Timeouts first: TimeoutError is also an OSError subclass.
    if isinstance(exc, (aiohttp.ServerTimeoutError, asyncio.TimeoutError)):
        return TransportError.OPERATION_TIMEDOUT
    if isinstance(exc, aiohttp.NonHttpUrlClientError):
        return TransportError.UNSUPPORTED_PROTOCOL
    if isinstance(exc, aiohttp.InvalidURL):
        return TransportError.URL_MALFORMAT
    if isinstance(exc, aiohttp.ClientConnectorDNSError):
        return TransportError.COULDNT_RESOLVE_HOST
    if isinstance(exc, aiohttp.ClientConnectorCertificateError):
        return TransportError.PEER_FAILED_VERIFICATION
    if isinstance(exc, aiohttp.ClientSSLError):
        return TransportError.SSL_CONNECT_ERROR
    if isinstance(exc, aiohttp.ClientConnectorError):
        if isinstance(exc.os_error, socket.gaierror):
            return TransportError.COULDNT_RESOLVE_HOST
        return TransportError.COULDNT_CONNECT
    if isinstance(exc, aiohttp.ServerDisconnectedError):
        return TransportError.GOT_NOTHING
    return TransportError.RECV_ERROR
