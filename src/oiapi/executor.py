"""Single request execution."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import socket
import ssl
import time
import typing as t
from collections.abc import Callable

import aiohttp
from aiohttp import hdrs
from yarl import URL

from .decoder import decode_body
from .errors import ConfigurationError, ErrorCode, TransportError
from .headers import extract_cookies, parse_headers, render_head, split_response
from .types import AcceptFormat, ResponseResult, TransportInfo

if t.TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from .config import TransportOptions
    from .request import RequestConfig

# Module-level logger for structured logging
_logger = logging.getLogger("oiapi")

REDIRECT_STATUSES = frozenset({301, 302, 303, 307, 308})
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

HeaderSink = Callable[[str, str], None]


class _TooManyRedirectsError(Exception):
    pass


def _header_pairs(options: TransportOptions) -> list[tuple[str, str]]:
    pairs = []
    for line in options.header_lines:
        key, _, value = line.partition(": ")
        pairs.append((key, value))
    if options.content_type is not None:
        pairs = [pair for pair in pairs if pair[0].lower() != hdrs.CONTENT_TYPE.lower()]
        pairs.append((hdrs.CONTENT_TYPE, options.content_type))
    names = {key.lower() for key, _ in pairs}
    if options.body is not None and hdrs.CONTENT_TYPE.lower() not in names:
        pairs.append((hdrs.CONTENT_TYPE, FORM_CONTENT_TYPE))
    if options.encoding is not None and hdrs.ACCEPT_ENCODING.lower() not in names:
        pairs.append((hdrs.ACCEPT_ENCODING, options.encoding or "gzip, deflate"))
    return pairs


def _ssl_option(options: TransportOptions) -> ssl.SSLContext | bool:
    if not options.verify_peer:
        return False
    context = ssl.create_default_context()
    context.check_hostname = options.verify_host
    return context


def _proxy_options(options: TransportOptions) -> dict[str, t.Any]:
    if not options.proxy:
        return {}
    proxy = options.proxy if "://" in options.proxy else f"http://{options.proxy}"
    kwargs: dict[str, t.Any] = {"proxy": proxy}
    if options.proxy_credentials:
        login, _, password = options.proxy_credentials.partition(":")
        kwargs["proxy_auth"] = aiohttp.BasicAuth(login, password)
    return kwargs


def _timeout(options: TransportOptions) -> aiohttp.ClientTimeout:
    return aiohttp.ClientTimeout(total=options.timeout, connect=options.connect_timeout)


def transport_error(exc: BaseException, url: str) -> TransportError:
    """Translate an aiohttp/OS failure into a coded ``TransportError``."""
    if isinstance(exc, _TooManyRedirectsError):
        code, message = ErrorCode.TOO_MANY_REDIRECTS, str(exc)
    elif isinstance(exc, TimeoutError):
        code, message = ErrorCode.OPERATION_TIMEDOUT, "Operation timed out"
    elif isinstance(exc, aiohttp.ClientProxyConnectionError):
        code, message = ErrorCode.COULDNT_RESOLVE_PROXY, f"Could not connect to proxy: {exc}"
    elif isinstance(exc, aiohttp.ClientSSLError):
        code, message = ErrorCode.SSL_CONNECT_ERROR, f"SSL connect error: {exc}"
    elif isinstance(exc, aiohttp.ClientConnectorError):
        if isinstance(exc.os_error, socket.gaierror):
            code, message = ErrorCode.COULDNT_RESOLVE_HOST, f"Could not resolve host: {exc.host}"
        else:
            code, message = ErrorCode.COULDNT_CONNECT, f"Failed to connect: {exc}"
    elif isinstance(exc, aiohttp.InvalidURL):
        code, message = ErrorCode.URL_MALFORMAT, f"Malformed URL: {exc}"
    elif isinstance(exc, aiohttp.ServerDisconnectedError):
        code, message = ErrorCode.GOT_NOTHING, "Empty reply from server"
    elif isinstance(exc, aiohttp.ClientResponseError):
        code, message = ErrorCode.WEIRD_SERVER_REPLY, f"Weird server reply: {exc.message}"
    else:
        code, message = ErrorCode.RECV_ERROR, f"Failure receiving data: {exc}"
    return TransportError(code, message, cause=exc, url=url)


class Executor:
    """Performs request/response round trips for ``RequestConfig`` objects.

    ``execute`` blocks the calling thread until the exchange completes or
    times out. ``execute_async`` is the same exchange for callers already
    running an event loop. Each call opens and closes its own session.

    Transport failures never raise: they are recorded on the returned
    ``ResponseResult.error``.
    """

    def __init__(
        self,
        *,
        logger: logging.Logger | None = None,
        header_sink: HeaderSink | None = None,
    ) -> None:
        """Initialize the Executor.

        Args:
            logger: Logger for request logs. If None, uses the module logger.
            header_sink: Called with ``("content-type", value)`` after each
                exchange that reported a content type.

        """
        self._logger = logger or _logger
        self._header_sink = header_sink

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    @contextlib.asynccontextmanager
    async def session(self) -> AsyncIterator[aiohttp.ClientSession]:
        """Open a session that is closed on every exit path.

        The connection pool is unbounded so no exchange queues behind its
        siblings and eats into its own timeout.
        """
        async with aiohttp.ClientSession(
            connector=aiohttp.TCPConnector(limit=0),
            cookie_jar=aiohttp.DummyCookieJar(),
        ) as session:
            yield session

    def execute(self, config: RequestConfig) -> ResponseResult:
        """Run ``config`` and block until its response is decoded.

        Must not be called from a running event loop; use ``execute_async``.

        Raises:
            ConfigurationError: If ``config`` has no composed target.

        """
        self.require_target(config)
        return asyncio.run(self.execute_async(config))

    async def execute_async(self, config: RequestConfig) -> ResponseResult:
        """Run ``config`` and return its decoded response.

        Raises:
            ConfigurationError: If ``config`` has no composed target.

        """
        self.require_target(config)
        async with self.session() as session:
            return await self.exchange(session, config.transport, config.accept)

    @staticmethod
    def require_target(config: RequestConfig) -> None:
        if config.transport.url is None:
            msg = "No request target: compose the request before executing it"
            raise ConfigurationError(msg)

    async def exchange(
        self,
        session: aiohttp.ClientSession,
        options: TransportOptions,
        accept: AcceptFormat,
    ) -> ResponseResult:
        """Perform one exchange on ``session`` and build its result.

        Args:
            session: Open session to send the request on.
            options: Transport snapshot of the request.
            accept: Shape to decode the body into.

        Returns:
            ResponseResult: The decoded response, or the recorded failure.

        Raises:
            ConfigurationError: If ``options`` carries no target.

        """
        if options.url is None:
            msg = "No request target: compose the request before executing it"
            raise ConfigurationError(msg)
        info = TransportInfo(url=options.url, size_upload=len(options.body or b""))
        heads: list[bytes] = []
        content = b""
        charset = None
        error = None

        self._logger.debug("Starting request: %s %s", options.method, options.url)
        start = time.perf_counter()
        try:
            content, charset = await self._send(session, options, info, heads)
        except (aiohttp.ClientError, TimeoutError, OSError, _TooManyRedirectsError) as e:
            error = transport_error(e, info.url)
            self._logger.warning("Request error: %s %s -> %s", options.method, info.url, error)
        info.total_time = time.perf_counter() - start

        head = b"".join(heads)
        info.header_size = len(head)
        head_bytes, body_bytes = split_response(head + content, info.header_size)
        info.size_download = len(body_bytes)

        result = ResponseResult(meta=info, error=error)
        if head_bytes:
            result.raw_header = head_bytes.decode("latin-1")
            result.headers = parse_headers(result.raw_header)
            result.cookies = extract_cookies(result.raw_header)

        result.body, result.decode_error = decode_body(body_bytes, accept, charset)
        if result.decode_error is not None and body_bytes:
            self._logger.warning("Failed to parse JSON response: %s", info.url)

        if info.content_type:
            result.outbound_headers[hdrs.CONTENT_TYPE.lower()] = info.content_type
            if self._header_sink is not None:
                self._header_sink(hdrs.CONTENT_TYPE.lower(), info.content_type)

        if error is None:
            self._logger.debug("Request completed: %s %s -> %d", options.method, info.url, info.status)
        return result

    async def _send(
        self,
        session: aiohttp.ClientSession,
        options: TransportOptions,
        info: TransportInfo,
        heads: list[bytes],
    ) -> tuple[bytes, str | None]:
        """Send the request, following redirects hop by hop when enabled.

        Every hop's head is appended to ``heads``; ``info`` is filled from the
        final response. Returns the final body and its charset.
        """
        url, method, body = info.url, options.method, options.body
        headers = _header_pairs(options)
        nobody = options.nobody or method == hdrs.METH_HEAD
        kwargs = {
            "timeout": _timeout(options),
            "ssl": _ssl_option(options),
            "allow_redirects": False,
            **_proxy_options(options),
        }

        while True:
            async with session.request(
                method,
                URL(url, encoded=True),
                headers=headers,
                data=body,
                **kwargs,
            ) as response:
                heads.append(
                    render_head(
                        f"{response.version.major}.{response.version.minor}",
                        response.status,
                        response.reason or "",
                        response.raw_headers,
                    ),
                )
                location = response.headers.get(hdrs.LOCATION)
                if options.follow_redirects and location and response.status in REDIRECT_STATUSES:
                    if info.redirect_count >= options.max_redirects:
                        msg = f"Maximum ({options.max_redirects}) redirects followed"
                        raise _TooManyRedirectsError(msg)
                    info.redirect_count += 1
                    previous, url = url, str(response.url.join(URL(location)))
                    if method != hdrs.METH_HEAD and (
                        response.status == 303 or (response.status in (301, 302) and method == hdrs.METH_POST)  # noqa: PLR2004
                    ):
                        method, body = hdrs.METH_GET, None
                    if options.auto_referer:
                        headers = [pair for pair in headers if pair[0].lower() != hdrs.REFERER.lower()]
                        headers.append((hdrs.REFERER, previous))
                    self._logger.debug("Following redirect: %s -> %s", previous, url)
                    continue

                info.url = str(response.url)
                info.status = response.status
                info.reason = response.reason or ""
                info.http_version = f"{response.version.major}.{response.version.minor}"
                info.content_type = response.headers.get(hdrs.CONTENT_TYPE, "")
                content = b"" if nobody else await response.read()
                return content, response.charset
