"""Error hierarchy for oiapi.

Transport and decoding failures are recorded on the ``ResponseResult`` of the
exchange that produced them. Structural misuse (an unknown method, a request
without a target) is raised at the call site.
"""

from __future__ import annotations

import enum


class ErrorCode(enum.IntEnum):
    """Transport error codes, numbered like libcurl's ``CURLcode``."""

    OK = 0
    UNSUPPORTED_PROTOCOL = 1
    URL_MALFORMAT = 3
    COULDNT_RESOLVE_PROXY = 5
    COULDNT_RESOLVE_HOST = 6
    COULDNT_CONNECT = 7
    WEIRD_SERVER_REPLY = 8
    OPERATION_TIMEDOUT = 28
    SSL_CONNECT_ERROR = 35
    TOO_MANY_REDIRECTS = 47
    GOT_NOTHING = 52
    SEND_ERROR = 55
    RECV_ERROR = 56


class ClientError(Exception):
    """Base class of everything oiapi raises or records.

    A ``ClientError`` pairs a short description of what went wrong with the
    request target, when one was composed, and the lower-level exception that
    triggered it, if any.

    Attributes:
        message: What went wrong, without the target or the cause.
        cause: Exception from aiohttp, the OS or the JSON decoder, if any.
        url: Request target the failure belongs to, if known.

    """

    def __init__(
        self,
        message: str,
        *,
        cause: BaseException | None = None,
        url: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.url = url

    def __str__(self) -> str:
        """Render as ``message | URL: target | Caused by: Type: detail``."""
        parts = [self.message]
        if self.url:
            parts.append(f"URL: {self.url}")
        if self.cause:
            parts.append(f"Caused by: {type(self.cause).__name__}: {self.cause}")
        return " | ".join(parts)


class TransportError(ClientError):
    """The exchange itself failed (DNS, connect, TLS, timeout, protocol).

    Stored on ``ResponseResult.error``; never raised by the executors.

    Attributes:
        code: ``ErrorCode`` value, kept as a plain int so unknown codes survive.

    """

    def __init__(
        self,
        code: ErrorCode | int,
        message: str,
        *,
        cause: BaseException | None = None,
        url: str | None = None,
    ) -> None:
        super().__init__(message, cause=cause, url=url)
        self.code = int(code)

    def __str__(self) -> str:
        return f"[{self.code}] {super().__str__()}"



class DecodeError(ClientError):
    """The body could not be parsed in the requested accept format."""


class UnsupportedMethodError(ClientError, ValueError):
    """A request was composed with a method outside the supported set."""


class ConfigurationError(ClientError):
    """A request cannot be composed or executed with its current settings.

    Raised for a missing target and for host name checking without peer
    verification.
    """
