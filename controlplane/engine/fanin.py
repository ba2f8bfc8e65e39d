"""
Fan-in Aggregator - concurrent store reads joined into one result.

Handlers that must read a run-time list of keys (every client record, every
client's events, a batch of stashes) issue all reads at once and resume only
when the last one has completed.

Contract:
- The number of operations is snapshotted before any of them is issued, so
  a list mutated concurrently cannot corrupt the completion count.
- All operations are issued without waiting between them.
- Results are appended in arrival order, not issue order.
- Completion is driven by a countdown of finished operations.
- Zero operations complete immediately with an empty list.
- The first failure cancels the operations still in flight and propagates.
- Without a timeout a lost operation stalls the caller indefinitely.

Version: fanin_v1
"""

import asyncio
from typing import Awaitable, Generic, Iterable, Optional, TypeVar

from controlplane.errors import FanInTimeoutError

T = TypeVar("T")


class FanIn(Generic[T]):
    """
    Issues a fixed group of awaitables concurrently and gathers their results.

    Attributes:
        expected: Number of operations, fixed at construction
        results: Completed results in arrival order
        timeout: Optional bound in seconds for the whole group

    Example:
        >>> names = await store.smembers("clients")
        >>> records = await FanIn(store.get(f"client:{n}") for n in names).collect()
    """

    def __init__(self, operations: Iterable[Awaitable[T]], timeout: Optional[float] = None):
        self._operations = list(operations)
        self.expected = len(self._operations)
        self.timeout = timeout
        self.results: list[T] = []
        self._remaining = self.expected
        self._error: Optional[BaseException] = None
        self._done: Optional[asyncio.Event] = None

    async def collect(self) -> list[T]:
        """
        Run every operation and wait for all of them.

        Returns:
            Results in the order the operations completed

        Raises:
            FanInTimeoutError: If a timeout is set and exceeded
            Exception: The first exception raised by any operation
        """
        if self.expected == 0:
            return []

        self._done = asyncio.Event()
        tasks = [asyncio.ensure_future(op) for op in self._operations]
        for task in tasks:
            task.add_done_callback(self._complete)

        try:
            if self.timeout is None:
                await self._done.wait()
            else:
                await asyncio.wait_for(self._done.wait(), self.timeout)
        except asyncio.TimeoutError:
            raise FanInTimeoutError(self.expected, len(self.results), self.timeout) from None
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()

        if self._error is not None:
            raise self._error
        return self.results

    def _complete(self, task: "asyncio.Future[T]") -> None:
        if task.cancelled():
            return
        error = task.exception()
        if self._done is None or self._done.is_set():
            return
        if error is not None:
            self._error = error
            self._done.set()
            return
        self.results.append(task.result())
        self._remaining -= 1
        if self._remaining == 0:
            self._done.set()


async def fan_in(operations: Iterable[Awaitable[T]], timeout: Optional[float] = None) -> list[T]:
    """Shorthand for ``FanIn(operations, timeout).collect()``."""
    return await FanIn(operations, timeout=timeout).collect()
