"""Single sequential worker for all network-bound library work.

Jobs run one at a time in submission order.
Callers get an ``asyncio.Future`` back immediately and never wait on the
network in their own task.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

_Job = tuple[Callable[..., Awaitable[Any]], tuple, asyncio.Future]


class SerialWorker:
    """Drain an ``asyncio.Queue`` of coroutine factories on one task."""

    def __init__(self, name: str = "library-worker"):
        self.name = name
        self._queue: asyncio.Queue[_Job | None] | None = None
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the drain task on the running loop (idempotent)."""
        if self.running:
            return
        self._queue = asyncio.Queue()
        self._task = asyncio.create_task(self._run(), name=self.name)
        logger.debug("%s started", self.name)

    async def stop(self) -> None:
        """Finish queued jobs, then stop the drain task."""
        if not self.running:
            return
        assert self._queue is not None
        await self._queue.put(None)
        await self._task
        self._task = None
        logger.debug("%s stopped", self.name)

    def submit(self, fn: Callable[..., Awaitable[Any]], *args: Any) -> asyncio.Future:
        """Queue ``fn(*args)``; the returned future resolves with its result."""
        if not self.running:
            self.start()
        assert self._queue is not None
        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._queue.put_nowait((fn, args, future))
        return future

    async def _run(self) -> None:
        assert self._queue is not None
        while True:
            job = await self._queue.get()
            if job is None:
                break
            # A cancelled caller does not cancel the job.
            fn, args, future = job
            try:
                result = await fn(*args)
            except Exception as exc:  # delivered to the caller, worker keeps going
                if not future.cancelled():
                    future.set_exception(exc)
            else:
                if not future.cancelled():
                    future.set_result(result)
