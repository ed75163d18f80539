"""High-level chainable client."""

from __future__ import annotations

import json
import typing as t

from .batch import BatchExecutor
from .decoder import decode_body
from .executor import Executor
from .request import RequestConfig
from .types import NO_VALUE, AcceptFormat, HttpMethod

if t.TYPE_CHECKING:
    from collections.abc import Iterable

    from .batch import BatchRequest
    from .config import ClientConfig
    from .errors import TransportError
    from .types import ResponseResult, TransportInfo


class Client(RequestConfig):
    """A request configuration that executes itself and keeps the result.

    Clients are ordinary values: construct one per use and pass it where it
    is needed. Verb methods compose, execute and return the client so the
    result can be read straight off the chain::

        client = Client(config=ClientConfig(host="example.com"))
        weather = client.set_accept("json").get("weather", {"city": "Hangzhou"}).result

    Attributes:
        executor: Executor performing this client's requests.

    """

    def __init__(
        self,
        path: str | None = None,
        data: t.Any = None,
        method: HttpMethod | str = HttpMethod.GET,
        *,
        config: ClientConfig | None = None,
        executor: Executor | None = None,
    ) -> None:
        """Initialize the Client.

        Args:
            path: Path relative to the configured base path.
            data: Query data or request body.
            method: Request method.
            config: Endpoint and defaults. If None, uses ``ClientConfig()``.
            executor: Executor to use. If None, one logging to ``config.logger``
                is created.

        """
        super().__init__(path, data, method, config=config)
        self.executor = executor or Executor(logger=self.config.logger)
        self._response: ResponseResult | None = None

    def request(
        self,
        method: HttpMethod | str,
        path: str | None = None,
        data: t.Any = None,
    ) -> t.Self:
        """Compose and execute a request, keeping its result.

        Omitted ``path`` and ``data`` reuse the previously composed ones, so
        ``client.get()`` repeats the last request as a GET.

        Raises:
            UnsupportedMethodError: If ``method`` is not supported.
            ConfigurationError: If no path was given now or before.

        """
        self.compose(method, path, self.data if data is None else data)
        self._response = self.executor.execute(self)
        return self

    def get(self, path: str | None = None, data: t.Any = None) -> t.Self:
        return self.request(HttpMethod.GET, path, data)

    def post(self, path: str | None = None, data: t.Any = None) -> t.Self:
        return self.request(HttpMethod.POST, path, data)

    def head(self, path: str | None = None, data: t.Any = None) -> t.Self:
        return self.request(HttpMethod.HEAD, path, data)

    def put(self, path: str | None = None, data: t.Any = None) -> t.Self:
        return self.request(HttpMethod.PUT, path, data)

    def delete(self, path: str | None = None, data: t.Any = None) -> t.Self:
        return self.request(HttpMethod.DELETE, path, data)

    def patch(self, path: str | None = None, data: t.Any = None) -> t.Self:
        return self.request(HttpMethod.PATCH, path, data)

    def options(self, path: str | None = None, data: t.Any = None) -> t.Self:
        """Send an OPTIONS request."""
        return self.request(HttpMethod.OPTIONS, path, data)

    def file(self, path: str | None = None, data: t.Any = None) -> t.Self:
        """Upload ``data`` as multipart/form-data with a POST."""
        return self.request(HttpMethod.FILE, path, data)

    def batch(self, items: Iterable[BatchRequest]) -> list[ResponseResult]:
        """Run ``items`` concurrently, each derived from this client's settings."""
        return BatchExecutor(self.executor).execute_batch(self, items)

    def clear(self) -> t.Self:
        """Reset to a fresh state and forget the last result."""
        super().clear()
        self._response = None
        return self

    @property
    def response(self) -> ResponseResult | None:
        """Full result of the last request, None before the first one."""
        return self._response

    @property
    def result(self) -> t.Any:
        return None if self._response is None else self._response.body

    @property
    def info(self) -> TransportInfo | None:
        return None if self._response is None else self._response.meta

    @property
    def error(self) -> TransportError | None:
        return None if self._response is None else self._response.error

    @property
    def raw_header(self) -> str:
        return "" if self._response is None else self._response.raw_header

    @property
    def cookies(self) -> dict[str, str]:
        return {} if self._response is None else dict(self._response.cookies)

    def _reparse(self, accept: AcceptFormat) -> t.Any:
        body = self.result
        if isinstance(body, str):
            body = body.encode("utf-8")
        if isinstance(body, bytes):
            return decode_body(body, accept)[0]
        if accept is AcceptFormat.JSON and isinstance(body, (dict, list)):
            return body
        return NO_VALUE

    def json(self) -> t.Any:
        """The last body parsed as JSON mappings/lists, NO_VALUE if it is not JSON."""
        return self._reparse(AcceptFormat.JSON)

    def array(self) -> t.Any:
        return self.json()

    def object(self) -> t.Any:
        """The last body parsed as JSON with attribute-access objects."""
        return self._reparse(AcceptFormat.OBJECT)

    def string(self) -> str:
        """The last body as text."""
        body = self.result
        if body is None or body is NO_VALUE:
            return ""
        if isinstance(body, str):
            return body
        if isinstance(body, bytes):
            return body.decode("utf-8", errors="replace")
        return json.dumps(body, ensure_ascii=False, default=vars)

    def __str__(self) -> str:
        return self.string()
