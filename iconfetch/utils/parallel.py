"""Bounded parallel execution of fallible coroutine tasks."""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

Task = Callable[[], Awaitable[None]]


class BoundedRunner:
    """Run zero-argument coroutine functions with at most ``limit`` in flight.

    :meth:`submit` waits for a free slot before starting a task. :meth:`wait`
    blocks until every started task has settled and raises the first error any
    of them raised. After a failure, tasks already running are left to finish
    but later submissions are dropped without being started. Errors raised by
    other tasks after the first one are discarded.

    The runner only schedules work and records failures; state shared between
    tasks must be synchronised by the tasks themselves.
    """

    def __init__(self, limit: int):
        if limit <= 0:
            raise ValueError(f"limit must be positive, got {limit}")
        self.limit = limit
        self._semaphore = asyncio.Semaphore(limit)
        self._running: set[asyncio.Task[None]] = set()
        self._error: Optional[Exception] = None

    @property
    def failed(self) -> bool:
        return self._error is not None

    async def submit(self, task: Task) -> None:
        """Start ``task`` once a slot is free; drop it if a task has already failed."""

        await self._semaphore.acquire()
        if self._error is not None:
            self._semaphore.release()
            return
        running = asyncio.create_task(self._run(task))
        self._running.add(running)
        running.add_done_callback(self._running.discard)

    async def _run(self, task: Task) -> None:
        try:
            await task()
        except Exception as exc:
            if self._error is None:
                logger.warning("Task failed, dropping pending submissions: %s", exc)
                self._error = exc
            else:
                logger.debug("Discarding error from concurrent task: %s", exc)
        finally:
            self._semaphore.release()

    async def wait(self) -> None:
        """Wait for all started tasks and raise the first recorded error, if any."""

        while self._running:
            await asyncio.gather(*self._running)
        if self._error is not None:
            raise self._error


__all__ = ["BoundedRunner", "Task"]
