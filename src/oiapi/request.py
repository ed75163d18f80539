"""Chainable description of one pending request."""

from __future__ import annotations

import copy
import dataclasses
import json
import typing as t
from collections.abc import Mapping

from . import multipart
from .config import DEFAULT_HEADERS, ClientConfig, TransportOptions
from .errors import ConfigurationError
from .types import AcceptFormat, HttpMethod
from .urlcodec import build_query, encode_url, is_json

if t.TYPE_CHECKING:
    from collections.abc import Iterable

_OPTIONAL_FIELDS = frozenset({"url", "data", "route", "proxy", "encoding"})


def _serialize(data: t.Any) -> str:
    return json.dumps(data, ensure_ascii=False, separators=(",", ":"))


def _to_bytes(data: t.Any) -> bytes | None:
    if data is None:
        return None
    if isinstance(data, bytes):
        return data
    return str(data).encode("utf-8")


class RequestConfig:
    """Mutable, chainable description of one request.

    Setters return the instance so calls can be chained::

        config = RequestConfig().set_timeout(5).add_header("X-Token: abc")
        config.compose("GET", "weather", {"city": "Hangzhou"})

    Every header change re-derives ``transport.header_lines``, so the transport
    snapshot in ``transport`` always matches ``headers``.

    Attributes:
        config: Endpoint and default settings this request is built from.

    """

    def __init__(
        self,
        path: str | None = None,
        data: t.Any = None,
        method: HttpMethod | str = HttpMethod.GET,
        *,
        config: ClientConfig | None = None,
    ) -> None:
        """Initialize the request, composing it when ``path`` is given.

        Args:
            path: Path relative to the configured base path.
            data: Query data or request body.
            method: Request method.
            config: Endpoint and defaults. If None, uses ``ClientConfig()``.

        """
        self.config = config or ClientConfig()
        self._reset()
        if path is not None:
            self.compose(method, path, data)

    @classmethod
    def init(
        cls,
        path: str | None = None,
        data: t.Any = None,
        method: HttpMethod | str = HttpMethod.GET,
        *,
        config: ClientConfig | None = None,
    ) -> t.Self:
        """Create an instance; convenient at the head of a call chain."""
        return cls(path, data, method, config=config)

    def _reset(self) -> None:
        self._method = HttpMethod.GET
        self._path: str | None = None
        self._url: str | None = None
        self._data: t.Any = None
        self._route: tuple[str, ...] = ()
        self._accept = self.config.accept
        self._headers: dict[str, str] = {**DEFAULT_HEADERS, **self.config.default_headers}
        self._options: TransportOptions = self.config.options
        self._sync_headers()

    def _sync_headers(self) -> None:
        lines = tuple(f"{key}: {value}" for key, value in self._headers.items())
        self._options = dataclasses.replace(self._options, header_lines=lines)

    def _set_options(self, **changes: t.Any) -> t.Self:
        self._options = dataclasses.replace(self._options, **changes)
        return self

    def compose(
        self,
        method: HttpMethod | str,
        path: str | None = None,
        data: t.Any = None,
    ) -> t.Self:
        """Build the request target and body for ``method``.

        The target is ``scheme://host/base_path/<path>`` followed by the route
        segments. Body-bearing methods (POST, PUT, PATCH, FILE) carry ``data``
        as the body: POST/PUT/PATCH serialize mappings and lists to JSON and
        announce ``application/json`` when the body is valid JSON, FILE sends
        a mapping as multipart/form-data. HEAD retrieves headers only. Any
        other method appends ``data`` to the target as a query string and
        passes the result through ``encode_url``.

        Args:
            method: Request method.
            path: Relative path. If None, the previously composed path is reused.
            data: Query data or request body.

        Raises:
            UnsupportedMethodError: If ``method`` is not supported.
            ConfigurationError: If no path was given now or before.

        """
        method = HttpMethod.parse(method)
        path = self._path if path is None else path
        if path is None:
            msg = "No request target: a path is required"
            raise ConfigurationError(msg)

        url = self.config.prefix + str(path).lstrip("/")
        if self._route:
            url += "/" + "/".join(self._route)
        self._method, self._path, self._data = method, str(path), data

        transport_url = url
        body = content_type = None
        if method is HttpMethod.FILE:
            if isinstance(data, Mapping):
                boundary = multipart.new_boundary()
                content_type = multipart.content_type(boundary)
                body = multipart.build_multipart(data, boundary)
            else:
                body = _to_bytes(data)
        elif method.has_body:
            if isinstance(data, (Mapping, list, tuple)):
                data = _serialize(data)
            if is_json(data):
                self.add_header("content-type: application/json")
            body = _to_bytes(data)
        elif method is not HttpMethod.HEAD and data:
            query = build_query(data) if isinstance(data, (Mapping, list, tuple)) else str(data)
            url += ("&" if "?" in url else "?") + query
            transport_url = encode_url(url)

        self._url = url
        return self._set_options(url=transport_url, method=method.wire, body=body, content_type=content_type)

    def set_route(self, *segments: str | int) -> t.Self:
        """Set path segments appended after the path on the next compose."""
        self._route = tuple(str(segment) for segment in segments)
        return self

    def add_header(self, key: str, value: str = "") -> t.Self:
        """Set one header; ``add_header("Host: example.com")`` is also accepted."""
        if ": " in key and not value:
            key, value = key.split(": ", 1)
        self._headers[key] = value
        self._sync_headers()
        return self

    def set_headers(self, headers: Mapping[str, str] | Iterable[str]) -> t.Self:
        """Set several headers from a mapping or from ``"Key: value"`` lines."""
        if isinstance(headers, Mapping):
            for key, value in headers.items():
                self.add_header(key, value)
        else:
            for line in headers:
                self.add_header(line)
        return self

    def set_accept(self, accept: AcceptFormat | str = AcceptFormat.STRING) -> t.Self:
        self._accept = AcceptFormat.parse(accept)
        return self

    def set_timeout(self, seconds: float | None) -> t.Self:
        return self._set_options(timeout=seconds)

    def set_connect_timeout(self, seconds: float | None) -> t.Self:
        return self._set_options(connect_timeout=seconds)

    def set_proxy(self, proxy: str | t.Literal[False], credentials: str | None = None) -> t.Self:
        """Route requests through ``proxy``, or pass False to stop using one.

        ``credentials`` are used only in ``"user:password"`` form.
        """
        if proxy is False:
            return self._set_options(proxy=None, proxy_credentials=None)
        if credentials and ":" in credentials:
            return self._set_options(proxy=proxy, proxy_credentials=credentials)
        return self._set_options(proxy=proxy)

    def set_follow_redirects(self, follow: bool = True) -> t.Self:
        """Toggle following redirects together with the automatic Referer."""
        return self._set_options(follow_redirects=follow, auto_referer=follow)

    def set_encoding(self, encoding: str = "gzip") -> t.Self:
        """Negotiate a content encoding; ``""`` accepts every supported one."""
        return self._set_options(encoding=encoding)

    def set_nobody(self, nobody: bool) -> t.Self:
        """Fetch headers only when True."""
        return self._set_options(nobody=nobody)

    def set_verify(self, peer: bool, host: bool | None = None) -> t.Self:
        """Toggle TLS certificate and host name verification.

        Host name checking is only available on a verified chain.

        Raises:
            ConfigurationError: If ``host`` is True while ``peer`` is False.

        """
        if host and not peer:
            msg = "Host name verification requires peer verification"
            raise ConfigurationError(msg)
        return self._set_options(verify_peer=peer, verify_host=peer if host is None else host)

    def clear(self) -> t.Self:
        """Reset to the state of a freshly constructed instance."""
        self._reset()
        return self

    def snapshot(self) -> t.Self:
        """Return an independent copy; later changes to either do not leak."""
        clone = copy.copy(self)
        clone._headers = dict(self._headers)
        return clone

    def has(self, name: str) -> bool:
        """Return whether the optional field ``name`` is currently set.

        Known fields: url, data, route, proxy, encoding.
        """
        if name not in _OPTIONAL_FIELDS:
            msg = f"Unknown optional field: {name!r}"
            raise KeyError(msg)
        value = {
            "url": self._url,
            "data": self._data,
            "route": self._route or None,
            "proxy": self._options.proxy,
            "encoding": self._options.encoding,
        }[name]
        return value is not None

    @property
    def url(self) -> str | None:
        """Composed target (before partial escaping), None until composed."""
        return self._url

    @property
    def path(self) -> str | None:
        return self._path

    @property
    def route(self) -> tuple[str, ...]:
        return self._route

    @property
    def data(self) -> t.Any:
        return self._data

    @property
    def method(self) -> HttpMethod:
        return self._method

    @property
    def headers(self) -> dict[str, str]:
        return dict(self._headers)

    @property
    def accept(self) -> AcceptFormat:
        return self._accept

    @property
    def transport(self) -> TransportOptions:
        return self._options
