"""Request and response types for oiapi.

This module provides the closed method and accept-format enums, the batch
item description and the result of a single exchange.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from aiohttp import hdrs

from .errors import UnsupportedMethodError

if TYPE_CHECKING:
    from .errors import DecodeError, TransportError


class HttpMethod(enum.Enum):
    """Supported request methods.

    ``FILE`` is an upload alias: it goes out as POST and sends a mapping as a
    multipart/form-data body.
    """

    GET = hdrs.METH_GET
    POST = hdrs.METH_POST
    HEAD = hdrs.METH_HEAD
    PUT = hdrs.METH_PUT
    DELETE = hdrs.METH_DELETE
    PATCH = hdrs.METH_PATCH
    OPTIONS = hdrs.METH_OPTIONS
    FILE = "FILE"

    @classmethod
    def parse(cls, value: HttpMethod | str) -> HttpMethod:
        """Return the member for ``value``, case-insensitively.

        Raises:
            UnsupportedMethodError: If ``value`` names no supported method.

        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            msg = f"Unsupported request method: {value!r}"
            raise UnsupportedMethodError(msg) from None

    @property
    def wire(self) -> str:
        """The verb sent on the request line."""
        return hdrs.METH_POST if self is HttpMethod.FILE else self.value

    @property
    def has_body(self) -> bool:
        return self in _BODY_METHODS


_BODY_METHODS = frozenset({HttpMethod.POST, HttpMethod.PUT, HttpMethod.PATCH, HttpMethod.FILE})


class AcceptFormat(enum.Enum):
    """Response decoding shapes.

    Attributes:
        STRING: Return the body as text (default).
        JSON: Parse the body as JSON into dicts and lists.
        OBJECT: Parse the body as JSON with objects as attribute namespaces.
        BYTES: Return the body as raw bytes.

    """

    STRING = "string"
    JSON = "json"
    OBJECT = "object"
    BYTES = "bytes"

    @classmethod
    def parse(cls, value: AcceptFormat | str) -> AcceptFormat:
        if isinstance(value, cls):
            return value
        return cls(str(value).lower())


class _NoValue:
    """Marker for a body that did not decode in the requested format."""

    _instance: _NoValue | None = None

    def __new__(cls) -> _NoValue:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NO_VALUE"


NO_VALUE = _NoValue()


@dataclass
class BatchItem:
    """One request of a batch.

    Fields left as None inherit from the base configuration the batch is
    derived from. ``method`` defaults to GET.

    Attributes:
        path: Relative path below the configured base path.
        method: Request method.
        data: Query mapping/string or request body.
        accept: Decoding shape for this item's response.
        timeout: Total timeout in seconds for this item only.

    """

    path: str | None = None
    method: HttpMethod | str | None = None
    data: Any = None
    accept: AcceptFormat | str | None = None
    timeout: float | None = None

    @classmethod
    def from_mapping(cls, item: dict[str, Any]) -> BatchItem:
        """Build an item from ``{"url", "method", "body", "accept"}`` style keys."""
        return cls(
            path=item.get("path", item.get("url")),
            method=item.get("method"),
            data=item.get("data", item.get("body")),
            accept=item.get("accept"),
            timeout=item.get("timeout"),
        )


@dataclass
class TransportInfo:
    """Diagnostics reported for one exchange."""

    url: str = ""
    status: int = 0
    reason: str = ""
    content_type: str = ""
    header_size: int = 0
    size_download: int = 0
    size_upload: int = 0
    total_time: float = 0.0
    redirect_count: int = 0
    http_version: str = ""


@dataclass
class ResponseResult:
    """Outcome of one exchange.

    Attributes:
        body: Decoded body, or NO_VALUE when it did not decode.
        meta: Transport diagnostics.
        raw_header: Unparsed response head of every hop, "" if none.
        headers: Parsed headers of the final response.
        cookies: Name to value mapping from Set-Cookie lines.
        error: Transport failure, None on success.
        decode_error: Why ``body`` is NO_VALUE, if it is.
        outbound_headers: Headers to surface at the caller boundary.

    """

    body: Any = ""
    meta: TransportInfo = field(default_factory=TransportInfo)
    raw_header: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    cookies: dict[str, str] = field(default_factory=dict)
    error: TransportError | None = None
    decode_error: DecodeError | None = None
    outbound_headers: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def status(self) -> int:
        return self.meta.status
