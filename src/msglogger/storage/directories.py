"""Resolution of the image cache and log directories."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from msglogger.storage.base import Storage
from msglogger.storage.file import FileStorage

if TYPE_CHECKING:
    from msglogger.config import DirectoryPreferences, Settings

logger = logging.getLogger(__name__)


class DirectoryKind(str, Enum):
    """Directories that can be reconfigured at runtime."""

    IMAGE = "image"
    LOG = "log"


class DirectoryResolver:
    """Configured-or-default storage directories for one context.

    Resolved values live in memory only. ``set_directory`` changes where
    later operations read and write; it never moves existing files.
    """

    def __init__(
        self,
        *,
        default_image_dir: Path,
        default_log_dir: Path,
        image_dir: Path | None = None,
        log_dir: Path | None = None,
        storage: Storage | None = None,
    ) -> None:
        self._default_image_dir = default_image_dir
        self._default_log_dir = default_log_dir
        self._dirs: dict[DirectoryKind, Path | None] = {
            DirectoryKind.IMAGE: image_dir,
            DirectoryKind.LOG: log_dir,
        }
        self._storage = storage or FileStorage()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        preferences: DirectoryPreferences | None = None,
        *,
        storage: Storage | None = None,
    ) -> DirectoryResolver:
        """Build a resolver: saved preference, then settings value, then default."""
        image_dir = settings.image_cache_dir
        log_dir = settings.logs_dir
        if preferences is not None:
            image_dir = preferences.image_cache_dir or image_dir
            log_dir = preferences.logs_dir or log_dir

        return cls(
            default_image_dir=settings.default_image_cache_dir,
            default_log_dir=settings.default_logs_dir,
            image_dir=image_dir,
            log_dir=log_dir,
            storage=storage,
        )

    @property
    def default_image_dir(self) -> Path:
        return self._default_image_dir

    @property
    def default_log_dir(self) -> Path:
        return self._default_log_dir

    def resolve_image_dir(self) -> Path:
        return self._dirs[DirectoryKind.IMAGE] or self._default_image_dir

    def resolve_log_dir(self) -> Path:
        return self._dirs[DirectoryKind.LOG] or self._default_log_dir

    def resolve(self, kind: DirectoryKind) -> Path:
        if kind is DirectoryKind.IMAGE:
            return self.resolve_image_dir()
        return self.resolve_log_dir()

    def set_directory(self, kind: DirectoryKind, new_path: Path) -> None:
        """Point subsequent operations of ``kind`` at ``new_path``."""
        previous = self.resolve(kind)
        self._dirs[kind] = new_path
        logger.info(f"{kind.value} directory changed: {previous} -> {new_path}")

    async def ensure_exists(self, path: Path) -> Path:
        """Create ``path`` if needed; succeeds when it already exists.

        Raises:
            StoragePermissionError: If create permission denied
            StorageError: If the directory cannot be created
        """
        await asyncio.to_thread(self._storage.ensure_dir, path)
        return path
