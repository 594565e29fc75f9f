"""FIFO serializer for fire-and-forget asynchronous writes."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)

WriteTask = Callable[[], Awaitable[Any]]


class WriteQueue:
    """Run queued tasks one at a time, in submission order.

    ``push`` returns immediately. A single worker coroutine drains the
    pending deque; it is started on the first push and exits once the
    deque is empty, so an idle queue holds no running task. A failing task
    is logged and counted and the worker moves on to the next one.

    The queue is unbounded and tasks cannot be cancelled once pushed.

    Example:
        ```python
        queue = WriteQueue("logs")
        queue.push(lambda: asyncio.to_thread(path.write_text, "first"))
        queue.push(lambda: asyncio.to_thread(path.write_text, "second"))
        await queue.join()  # path now holds "second"
        ```
    """

    def __init__(self, name: str = "write-queue") -> None:
        self.name = name
        self._pending: deque[WriteTask] = deque()
        self._worker: asyncio.Task[None] | None = None
        self._completed = 0
        self._failures = 0

    @property
    def pending(self) -> int:
        """Tasks pushed but not yet started."""
        return len(self._pending)

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    @property
    def completed(self) -> int:
        return self._completed

    @property
    def failures(self) -> int:
        return self._failures

    def push(self, task: WriteTask) -> None:
        """Enqueue ``task`` without waiting for it to run.

        Must be called from a running event loop.
        """
        self._pending.append(task)
        if not self.running:
            loop = asyncio.get_running_loop()
            self._worker = loop.create_task(self._drain(), name=f"{self.name}-worker")

    async def _drain(self) -> None:
        while self._pending:
            task = self._pending.popleft()
            try:
                await task()
                self._completed += 1
            except Exception:
                self._failures += 1
                logger.exception(f"Queued write failed in {self.name}")

    async def join(self) -> None:
        """Wait until every pushed task has finished."""
        while (worker := self._worker) is not None and not worker.done():
            await asyncio.shield(worker)
