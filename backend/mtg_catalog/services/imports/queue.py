"""
Rate-limited work queue for per-row catalog lookups.

Items are processed by a fixed number of workers; each worker waits
``delay_seconds`` between items. Setting the ``abandon`` event stops the
workers after their current item and returns the results gathered so far.
"""
import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Generic, Optional, Sequence, TypeVar

import structlog

logger = structlog.get_logger()

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class QueueResult(Generic[R]):
    """Processed results in input order, and whether the run was cut short."""
    results: list[R] = field(default_factory=list)
    abandoned: bool = False


class RateLimitedWorkQueue(Generic[T, R]):
    """
    Usage:
        queue = RateLimitedWorkQueue(resolve_row, concurrency=1, delay_seconds=0.1)
        outcome = await queue.run(rows, abandon=event)
    """

    def __init__(
        self,
        worker: Callable[[T], Awaitable[R]],
        *,
        concurrency: int = 1,
        delay_seconds: float = 0.0,
    ):
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.worker = worker
        self.concurrency = concurrency
        self.delay_seconds = max(0.0, delay_seconds)

    async def _pause(self, abandon: asyncio.Event) -> None:
        """Inter-item delay that ends early when the run is abandoned."""
        if self.delay_seconds <= 0:
            return
        try:
            await asyncio.wait_for(abandon.wait(), timeout=self.delay_seconds)
        except asyncio.TimeoutError:
            pass

    async def run(self, items: Sequence[T], abandon: Optional[asyncio.Event] = None) -> QueueResult[R]:
        abandon = abandon or asyncio.Event()
        queue: asyncio.Queue[tuple[int, T]] = asyncio.Queue()
        for index, item in enumerate(items):
            queue.put_nowait((index, item))

        results: dict[int, R] = {}

        async def consume() -> None:
            first = True
            while not abandon.is_set():
                try:
                    index, item = queue.get_nowait()
                except asyncio.QueueEmpty:
                    return
                if not first:
                    await self._pause(abandon)
                    if abandon.is_set():
                        return
                first = False
                results[index] = await self.worker(item)
                queue.task_done()

        workers = [asyncio.create_task(consume()) for _ in range(min(self.concurrency, len(items)) or 1)]
        await asyncio.gather(*workers)

        abandoned = len(results) < len(items)
        if abandoned:
            logger.info(
                "Work queue abandoned",
                processed=len(results),
                remaining=len(items) - len(results),
            )
        return QueueResult(
            results=[results[i] for i in sorted(results)],
            abandoned=abandoned,
        )
