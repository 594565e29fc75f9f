"""Store for the shared message log blob."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

from msglogger.storage.base import Storage
from msglogger.storage.directories import DirectoryResolver
from msglogger.storage.errors import StorageCorruptedError, StorageNotFoundError
from msglogger.storage.file import FileStorage
from msglogger.storage.helpers import load_json
from msglogger.storage.write_queue import WriteQueue

logger = logging.getLogger(__name__)

DEFAULT_LOGS_FILENAME = "message-logger-logs.json"


class LogStore:
    """One opaque log blob at a fixed path, written through a WriteQueue.

    The content is a JSON document for the caller; the store only checks
    that it parses when reading it back. Writes replace the whole file
    atomically and are applied in the order ``write`` was called.
    """

    def __init__(
        self,
        resolver: DirectoryResolver,
        *,
        filename: str = DEFAULT_LOGS_FILENAME,
        queue: WriteQueue | None = None,
        storage: Storage | None = None,
    ) -> None:
        self._resolver = resolver
        self._filename = filename
        self._queue = queue or WriteQueue("message-logs")
        self._storage = storage or FileStorage()

    @property
    def queue(self) -> WriteQueue:
        return self._queue

    @property
    def log_path(self) -> Path:
        return self._resolver.resolve_log_dir() / self._filename

    async def read(self) -> Any | None:
        """Return the parsed log blob, or None if there is none yet.

        A file that is not valid JSON counts as no log data.

        Raises:
            StorageError: If the directory cannot be created or the file read
        """
        log_dir = self._resolver.resolve_log_dir()
        await self._resolver.ensure_exists(log_dir)

        log_path = log_dir / self._filename
        try:
            return await asyncio.to_thread(load_json, log_path, storage=self._storage)
        except StorageNotFoundError:
            return None
        except StorageCorruptedError as e:
            logger.warning(f"Ignoring unreadable message log: {e}")
            return None

    async def write(self, content: str) -> None:
        """Queue a replacement of the log blob with ``content``.

        The task is pushed before this coroutine first suspends, so writes
        are applied in the order ``write`` was called even when callers do
        not await each other. Returns before the write happens; failures
        (including creating the log directory) are only logged.
        """
        log_dir = self._resolver.resolve_log_dir()
        log_path = log_dir / self._filename

        async def persist() -> None:
            await self._resolver.ensure_exists(log_dir)
            await asyncio.to_thread(self._storage.save, log_path, content)

        self._queue.push(persist)

    async def flush(self) -> None:
        """Wait for every queued write to finish."""
        await self._queue.join()
