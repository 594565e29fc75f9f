"""In-memory index of cached attachment images."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from msglogger.storage.base import Storage
from msglogger.storage.file import FileStorage, is_temp_file
from msglogger.utils.paths import attachment_id_from_filename

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttachmentRecord:
    """A cached attachment: identifier and absolute on-disk location."""

    id: str
    path: Path


class CacheIndex:
    """Mapping from attachment identifier to on-disk path.

    The index is never persisted. It is rebuilt from a directory scan with
    ``load`` and afterwards only changed through ``put_if_absent`` and
    ``remove``. None of the methods suspend, so every mutation is atomic
    with respect to the event loop.
    """

    def __init__(self, storage: Storage | None = None) -> None:
        self._storage = storage or FileStorage()
        self._entries: dict[str, Path] = {}

    def load(self, directory: Path) -> int:
        """Replace the index with one record per file in ``directory``.

        Files are visited in sorted name order and a later file replaces an
        earlier one whose name sanitizes to the same identifier.

        Returns:
            Number of records in the rebuilt index

        Raises:
            StorageNotFoundError: If the directory doesn't exist
            StorageError: If the directory cannot be listed
        """
        return self.rebuild(directory, self._storage.list_files(directory))

    def rebuild(self, directory: Path, files: Iterable[Path]) -> int:
        """Replace the index with one record per path in ``files``.

        Same rules as ``load``, applied to a listing taken elsewhere.
        """
        fresh: dict[str, Path] = {}
        for file_path in files:
            if is_temp_file(file_path):
                continue
            attachment_id = attachment_id_from_filename(file_path.name)
            if not attachment_id:
                continue
            if attachment_id in fresh:
                logger.warning(
                    f"Attachment '{attachment_id}' found twice in {directory}: "
                    f"{fresh[attachment_id].name} replaced by {file_path.name}"
                )
            fresh[attachment_id] = directory / file_path.name

        self._entries = fresh
        logger.debug(f"Indexed {len(fresh)} cached images from {directory}")
        return len(fresh)

    def get(self, attachment_id: str) -> Path | None:
        return self._entries.get(attachment_id)

    def put_if_absent(self, attachment_id: str, path: Path) -> bool:
        """Insert a record unless the identifier is already indexed.

        Returns:
            True if the record was inserted
        """
        if attachment_id in self._entries:
            return False
        self._entries[attachment_id] = path
        return True

    def remove(self, attachment_id: str) -> Path | None:
        """Drop a record and return the path it pointed to, if any."""
        return self._entries.pop(attachment_id, None)

    def records(self) -> list[AttachmentRecord]:
        return [AttachmentRecord(id=key, path=path) for key, path in self._entries.items()]

    def __contains__(self, attachment_id: object) -> bool:
        return attachment_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))
