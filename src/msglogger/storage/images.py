"""Disk-backed cache of attachment images."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from msglogger.storage.base import Storage
from msglogger.storage.cache_index import CacheIndex
from msglogger.storage.directories import DirectoryResolver
from msglogger.storage.errors import StorageNotFoundError, StoreNotInitializedError
from msglogger.storage.file import FileStorage, cleanup_orphaned_temp_files, is_temp_file
from msglogger.utils.logging import TimingContext, reset_attachment_id, set_attachment_id
from msglogger.utils.paths import attachment_id_from_filename, safe_filename

logger = logging.getLogger(__name__)


class ImageStore:
    """Read, write and delete cached attachment bytes.

    One file per attachment lives in the resolved image directory, named
    after the attachment's original filename. The store keeps a
    ``CacheIndex`` of those files and consults it before touching disk.

    Writes are check-index, write-disk, commit-index. Identifiers with a
    write in progress are tracked in ``_in_flight`` so a second write for
    the same identifier is refused while the first one is still on disk
    I/O. The index entry is only created after the file write succeeded.

    Example:
        ```python
        store = ImageStore(resolver)
        await store.init()
        await store.write("1234.png", data)
        assert await store.read("1234") == data
        ```
    """

    def __init__(
        self,
        resolver: DirectoryResolver,
        *,
        index: CacheIndex | None = None,
        storage: Storage | None = None,
    ) -> None:
        self._resolver = resolver
        self._storage = storage or FileStorage()
        self._index = index or CacheIndex(self._storage)
        self._in_flight: set[str] = set()
        # One list per running scan; changes made while it lists the directory
        self._scan_journals: list[list[tuple[str, Path | None]]] = []
        self._initialized = False

    @property
    def index(self) -> CacheIndex:
        return self._index

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def init(self) -> None:
        """Scan the image directory and rebuild the index.

        Orphaned temp files are removed on the first scan only, before any
        write can be in progress. Calling ``init`` again rescans the
        directory; writes and deletes that complete while the listing is
        taken are applied on top of the rescanned index.

        Raises:
            StorageError: If the directory cannot be created or listed
        """
        image_dir = self._resolver.resolve_image_dir()
        await self._resolver.ensure_exists(image_dir)

        journal: list[tuple[str, Path | None]] = []
        self._scan_journals.append(journal)
        try:
            with TimingContext("image_cache_scan", logger):
                if not self._initialized:
                    await asyncio.to_thread(cleanup_orphaned_temp_files, image_dir)
                files = await asyncio.to_thread(self._storage.list_files, image_dir)
        finally:
            self._scan_journals.remove(journal)

        count = self._index.rebuild(image_dir, files)
        for attachment_id, image_path in journal:
            if image_path is None:
                self._index.remove(attachment_id)
            else:
                self._index.put_if_absent(attachment_id, image_path)

        self._initialized = True
        logger.info(f"Image cache ready: {count} images in {image_dir}")

    def _record_change(self, attachment_id: str, image_path: Path | None) -> None:
        for journal in self._scan_journals:
            journal.append((attachment_id, image_path))

    def _require_init(self) -> None:
        if not self._initialized:
            raise StoreNotInitializedError("ImageStore.init() must complete before use")

    async def read(self, attachment_id: str) -> bytes | None:
        """Return the cached bytes for ``attachment_id``, or None if not cached.

        Raises:
            StorageNotFoundError: If the indexed file was removed from disk
            StorageError: If the file cannot be read
        """
        self._require_init()
        image_path = self._index.get(attachment_id)
        if image_path is None:
            return None

        token = set_attachment_id(attachment_id)
        try:
            return await asyncio.to_thread(self._storage.load, image_path)
        finally:
            reset_attachment_id(token)

    async def write(self, filename: str, content: bytes | None) -> bool:
        """Cache ``content`` under the identifier derived from ``filename``.

        Empty input, names reserved for atomic-write temp files and
        identifiers that are already cached (or being written) are ignored.

        Returns:
            True if a new file was written and indexed

        Raises:
            StorageError: If the file cannot be written; no index entry is left
        """
        self._require_init()
        if not filename or not content:
            return False

        # ../../someMaliciousPath.png -> someMaliciousPath
        attachment_id = attachment_id_from_filename(filename)
        disk_name = safe_filename(filename)
        if not attachment_id or not disk_name or is_temp_file(Path(disk_name)):
            logger.debug(f"Ignoring image write with unusable filename {filename!r}")
            return False

        if attachment_id in self._index or attachment_id in self._in_flight:
            return False

        image_path = self._resolver.resolve_image_dir() / disk_name
        token = set_attachment_id(attachment_id)
        self._in_flight.add(attachment_id)
        try:
            await asyncio.to_thread(self._storage.save, image_path, content)
            self._index.put_if_absent(attachment_id, image_path)
            self._record_change(attachment_id, image_path)
            logger.debug(f"Cached image {disk_name} ({len(content)} bytes)")
            return True
        finally:
            self._in_flight.discard(attachment_id)
            reset_attachment_id(token)

    async def delete(self, attachment_id: str) -> bool:
        """Remove an attachment from the index and from disk.

        Returns:
            False if the attachment was not cached

        Raises:
            StorageError: If the file cannot be deleted; the index entry is
                already gone at that point
        """
        self._require_init()
        image_path = self._index.remove(attachment_id)
        if image_path is None:
            return False
        self._record_change(attachment_id, None)

        token = set_attachment_id(attachment_id)
        try:
            await asyncio.to_thread(self._storage.delete, image_path)
        except StorageNotFoundError:
            logger.warning(f"Cached image already missing from disk: {image_path}")
        finally:
            reset_attachment_id(token)
        return True

    def path_of(self, attachment_id: str) -> Path | None:
        """Return the on-disk path of a cached attachment."""
        return self._index.get(attachment_id)
