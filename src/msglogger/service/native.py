"""Boundary operations of the message logger's native helper.

``MessageLoggerNative`` owns everything one running helper needs: the
resolved directories, the attachment image cache and the message log
store. Nothing is kept in module globals, so independent instances (and
tests) never share state. The transport that calls these methods (IPC,
CLI, ...) lives outside this package.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any, Protocol

from msglogger.config import (
    Settings,
    get_settings,
    load_directory_preferences,
    save_directory_preferences,
)
from msglogger.service.shell import reveal_in_file_manager
from msglogger.storage.directories import DirectoryKind, DirectoryResolver
from msglogger.storage.errors import StorageError
from msglogger.storage.images import ImageStore
from msglogger.storage.logs import LogStore

logger = logging.getLogger(__name__)


class DirectoryPicker(Protocol):
    """Asks the user for a directory; returns None when cancelled."""

    async def __call__(self, default_path: Path) -> Path | None: ...


class MessageLoggerNative:
    """Image cache, log store and directory settings of one helper instance.

    Example:
        ```python
        native = MessageLoggerNative.from_settings()
        await native.init()
        await native.write_image("1234.png", data)
        await native.write_logs(json.dumps(logs))
        await native.close()
        ```
    """

    def __init__(
        self,
        resolver: DirectoryResolver,
        *,
        images: ImageStore | None = None,
        logs: LogStore | None = None,
        preferences_path: Path | None = None,
        reveal: Callable[[Path], bool] = reveal_in_file_manager,
    ) -> None:
        """Initialize the helper.

        Args:
            resolver: Directory resolver shared by both stores
            images: Image store (default: built on ``resolver``)
            logs: Log store (default: built on ``resolver``)
            preferences_path: Where chosen directories are persisted; when
                None, directory changes are kept in memory only
            reveal: Shell integration used by ``show_item_in_folder``
        """
        self._resolver = resolver
        self._images = images or ImageStore(resolver)
        self._logs = logs or LogStore(resolver)
        self._preferences_path = preferences_path
        self._reveal = reveal

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> MessageLoggerNative:
        """Build a helper from settings and the saved directory preferences."""
        settings = settings or get_settings()
        preferences = load_directory_preferences(settings.preferences_path)
        resolver = DirectoryResolver.from_settings(settings, preferences)
        return cls(resolver, preferences_path=settings.preferences_path)

    @property
    def resolver(self) -> DirectoryResolver:
        return self._resolver

    @property
    def images(self) -> ImageStore:
        return self._images

    @property
    def logs(self) -> LogStore:
        return self._logs

    async def init(self) -> None:
        """Rebuild the image index; required before any image operation."""
        await self._images.init()

    async def get_image(self, attachment_id: str) -> bytes | None:
        return await self._images.read(attachment_id)

    async def write_image(self, filename: str, content: bytes | None) -> None:
        await self._images.write(filename, content)

    async def delete_image(self, attachment_id: str) -> None:
        await self._images.delete(attachment_id)

    async def get_logs(self) -> Any | None:
        return await self._logs.read()

    async def write_logs(self, contents: str) -> None:
        await self._logs.write(contents)

    def default_data_dir(self) -> Path:
        return self._resolver.default_log_dir

    def default_image_dir(self) -> Path:
        return self._resolver.default_image_dir

    async def set_directory(self, kind: DirectoryKind, new_path: Path) -> bool:
        """Persist a new directory choice and use it from now on.

        Existing files stay where they are and already indexed images keep
        their old paths.

        Returns:
            False if the choice could not be persisted (nothing is changed)
        """
        kind = DirectoryKind(kind)
        if self._preferences_path is not None:
            try:
                await asyncio.to_thread(
                    self._persist_directory, self._preferences_path, kind, new_path
                )
            except StorageError as e:
                logger.error(f"Failed to save {kind.value} directory preference: {e}")
                return False

        self._resolver.set_directory(kind, new_path)
        return True

    def _persist_directory(self, path: Path, kind: DirectoryKind, new_path: Path) -> None:
        preferences = load_directory_preferences(path)
        if kind is DirectoryKind.IMAGE:
            preferences.image_cache_dir = new_path
        else:
            preferences.logs_dir = new_path
        save_directory_preferences(path, preferences)

    async def choose_directory(
        self,
        kind: DirectoryKind,
        default_path: Path,
        picker: DirectoryPicker,
    ) -> bool:
        """Let the user pick a directory of ``kind`` and apply the choice.

        Returns:
            False if the picker was cancelled or the choice not persisted
        """
        chosen = await picker(default_path)
        if not chosen:
            return False
        return await self.set_directory(kind, Path(chosen))

    async def show_item_in_folder(self, path: Path) -> None:
        await asyncio.to_thread(self._reveal, Path(path))

    async def close(self) -> None:
        """Wait for queued log writes to reach disk."""
        await self._logs.flush()
