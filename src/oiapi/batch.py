"""Concurrent execution of independent requests."""

from __future__ import annotations

import asyncio
import typing as t
from collections.abc import Mapping

from .executor import Executor
from .types import BatchItem, HttpMethod

if t.TYPE_CHECKING:
    from collections.abc import Iterable

    from .request import RequestConfig
    from .types import ResponseResult

BatchRequest = BatchItem | Mapping[str, t.Any]


class BatchExecutor:
    """Runs many independent requests concurrently on one event loop.

    Every item is composed on its own snapshot of a base ``RequestConfig``;
    the base is never mutated. All exchanges share one session and progress
    together, and results come back in submission order. A transport failure
    fills in the ``error`` of its own item only.

    Attributes:
        executor: Executor performing and decoding each exchange.

    """

    def __init__(self, executor: Executor | None = None) -> None:
        self.executor = executor or Executor()

    def derive(self, base: RequestConfig, item: BatchRequest) -> RequestConfig:
        """Compose ``item`` on an independent snapshot of ``base``.

        Path and data left unset fall back to the base configuration, the
        method defaults to GET and the accept format to the base's.

        Raises:
            UnsupportedMethodError: If the item's method is not supported.
            ConfigurationError: If neither the item nor the base has a path.

        """
        if isinstance(item, Mapping):
            item = BatchItem.from_mapping(dict(item))
        config = base.snapshot()
        if item.accept is not None:
            config.set_accept(item.accept)
        if item.timeout is not None:
            config.set_timeout(item.timeout)
        return config.compose(
            item.method or HttpMethod.GET,
            base.path if item.path is None else item.path,
            base.data if item.data is None else item.data,
        )

    def execute_batch(
        self,
        base: RequestConfig,
        items: Iterable[BatchRequest],
    ) -> list[ResponseResult]:
        """Run ``items`` concurrently and block until every one completes.

        Must not be called from a running event loop; use
        ``execute_batch_async``.
        """
        configs = [self.derive(base, item) for item in items]
        return asyncio.run(self._run(configs))

    async def execute_batch_async(
        self,
        base: RequestConfig,
        items: Iterable[BatchRequest],
    ) -> list[ResponseResult]:
        """Run ``items`` concurrently and return their results in order.

        Every item is derived before anything is sent, so a malformed item
        fails the whole call without dispatching any request.
        """
        configs = [self.derive(base, item) for item in items]
        return await self._run(configs)

    async def _run(self, configs: list[RequestConfig]) -> list[ResponseResult]:
        if not configs:
            return []
        logger = self.executor.logger
        logger.debug("Starting batch of %d requests", len(configs))
        async with self.executor.session() as session:
            tasks = [self.executor.exchange(session, config.transport, config.accept) for config in configs]
            results = await asyncio.gather(*tasks)
        failed = sum(1 for result in results if result.error is not None)
        logger.debug("Batch completed: %d requests, %d failed", len(results), failed)
        return list(results)
