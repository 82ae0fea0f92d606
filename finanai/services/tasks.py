"""Background work queue for projection and sync requests."""

import asyncio
import logging
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

TaskFactory = Callable[[], Awaitable[Any]]


class BackgroundTasks:
    """Fire-and-forget queue consumed by worker tasks on the running loop.

    Submitting never blocks the caller. Work is owned by the queue rather
    than by whoever submitted it, so it runs to completion (or failure)
    regardless of what happens to the submitter. Failures are logged and
    counted, never raised.
    """

    def __init__(self, workers: int = 1) -> None:
        self.worker_count = max(1, workers)
        self.completed = 0
        self.failed = 0
        self._queue: asyncio.Queue | None = None
        self._workers: list[asyncio.Task] = []

    def _ensure_started(self) -> asyncio.Queue:
        if self._queue is None:
            self._queue = asyncio.Queue()
            self._workers = [
                asyncio.get_running_loop().create_task(self._worker(i))
                for i in range(self.worker_count)
            ]
        return self._queue

    def submit(self, factory: TaskFactory, label: str) -> None:
        """Queue ``factory()`` to run in the background."""
        self._ensure_started().put_nowait((label, factory))
        logger.debug("Queued background task %s", label)

    @property
    def pending(self) -> int:
        return self._queue.qsize() if self._queue is not None else 0

    async def _worker(self, number: int) -> None:
        assert self._queue is not None
        while True:
            label, factory = await self._queue.get()
            try:
                await factory()
                self.completed += 1
            except Exception:
                self.failed += 1
                logger.exception("Background task %s failed (worker %d)", label, number)
            finally:
                self._queue.task_done()

    async def join(self) -> None:
        """Wait until every queued task has finished."""
        if self._queue is not None:
            await self._queue.join()

    async def close(self) -> None:
        """Drain the queue and stop the workers."""
        await self.join()
        for worker in self._workers:
            worker.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        self._queue = None
