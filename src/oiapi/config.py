"""Configuration settings for oiapi."""

from __future__ import annotations

import types
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from aiohttp import hdrs

from .types import AcceptFormat

if TYPE_CHECKING:
    import logging
    from collections.abc import Mapping

DEFAULT_HEADERS: Mapping[str, str] = types.MappingProxyType(
    {
        "User-Agent": (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/86.0.4240.198 Safari/537.36"
        ),
    },
)


@dataclass(frozen=True)
class TransportOptions:
    """Transport-level options of one pending request.

    Instances are immutable; ``RequestConfig`` replaces its snapshot on every
    change, so a snapshot handed to an executor never changes underneath it.

    Attributes:
        url: Fully composed and encoded request URL.
        method: Verb sent on the request line.
        body: Encoded request body, None for no body.
        header_lines: Outgoing headers as ``"Key: value"`` lines.
        connect_timeout: Seconds allowed to establish the connection.
        timeout: Seconds allowed for the whole exchange.
        verify_host: Check the certificate's host name.
        verify_peer: Verify the certificate chain.
        follow_redirects: Follow 3xx Location headers.
        auto_referer: Send the previous URL as Referer when following.
        max_redirects: Redirect hops allowed before failing.
        proxy: Proxy address, e.g. ``"127.0.0.1:8888"``.
        proxy_credentials: ``"user:password"`` for the proxy.
        encoding: Accept-Encoding to negotiate, e.g. ``"gzip"``.
        nobody: Header-only exchange; the body is never retrieved.
        content_type: Content type of this exchange's body. Sent in place of
            any Content-Type header and dropped on the next compose.

    """

    url: str | None = None
    method: str = hdrs.METH_GET
    body: bytes | None = None
    header_lines: tuple[str, ...] = ()
    connect_timeout: float | None = 10
    timeout: float | None = 30
    verify_host: bool = False
    verify_peer: bool = False
    follow_redirects: bool = False
    auto_referer: bool = False
    max_redirects: int = 10
    proxy: str | None = None
    proxy_credentials: str | None = None
    encoding: str | None = None
    nobody: bool = False
    content_type: str | None = None


DEFAULT_OPTIONS = TransportOptions()


@dataclass
class ClientConfig:
    """Configuration for oiapi.

    Attributes:
        scheme: Scheme of every request target.
        host: Host (optionally ``host:port``) of every request target.
        base_path: Path prefix placed before every relative path.
        default_headers: Headers layered over ``DEFAULT_HEADERS``.
        options: Default transport options of a fresh request.
        accept: Default response decoding shape.
        logger: Logger instance for structured logging. If None, uses module logger.

    """

    scheme: str = "http"
    host: str = "oiapi.net"
    base_path: str = "api"
    default_headers: dict[str, str] = field(default_factory=dict)
    options: TransportOptions = DEFAULT_OPTIONS
    accept: AcceptFormat = AcceptFormat.STRING
    logger: logging.Logger | None = None

    @property
    def prefix(self) -> str:
        """``scheme://host/base_path/``, the start of every target."""
        base = self.base_path.strip("/")
        return f"{self.scheme}://{self.host}/{base}/" if base else f"{self.scheme}://{self.host}/"
