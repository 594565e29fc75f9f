"""File-based storage implementation with atomic writes."""

from __future__ import annotations

import atexit
import contextlib
import logging
import os
import re
import tempfile
from pathlib import Path

from msglogger.storage.base import Storage
from msglogger.storage.errors import (
    StorageError,
    StorageNotFoundError,
    StoragePermissionError,
)

logger = logging.getLogger(__name__)

TEMP_FILE_PREFIX = ".msglogger-"
TEMP_FILE_SUFFIX = ".tmp"
TEMP_FILE_PATTERN = f"{TEMP_FILE_PREFIX}*{TEMP_FILE_SUFFIX}"

# Exactly what NamedTemporaryFile produces for the prefix and suffix above
_TEMP_NAME = re.compile(r"\.msglogger-[a-z0-9_]{8}\.tmp")

# Temp files still open when the interpreter exits
_temp_files_registry: set[Path] = set()


def _cleanup_temp_files() -> None:
    """Remove temp files left behind by writes interrupted at exit."""
    for temp_path in list(_temp_files_registry):
        try:
            if temp_path.exists():
                temp_path.unlink()
                logger.debug(f"Cleaned up temp file on exit: {temp_path}")
        except OSError as e:
            logger.warning(f"Failed to cleanup temp file {temp_path}: {e}")


atexit.register(_cleanup_temp_files)


def is_temp_file(path: Path) -> bool:
    """Check whether a path is named like one of our atomic-write temp files."""
    return _TEMP_NAME.fullmatch(path.name) is not None


def cleanup_orphaned_temp_files(directory: Path, pattern: str = TEMP_FILE_PATTERN) -> int:
    """Clean up orphaned temporary files from previous crashes.

    Only the top level of ``directory`` is searched; the image cache is flat.

    Args:
        directory: Directory to search for temp files
        pattern: Glob pattern narrowing the search (default: TEMP_FILE_PATTERN)

    Returns:
        Number of files cleaned up
    """
    if not directory.exists() or not directory.is_dir():
        return 0

    cleaned_count = 0
    try:
        for temp_file in directory.glob(pattern):
            if is_temp_file(temp_file) and temp_file.is_file():
                try:
                    temp_file.unlink()
                    logger.info(f"Cleaned up orphaned temp file: {temp_file}")
                    cleaned_count += 1
                except OSError as e:
                    logger.warning(f"Failed to clean up temp file {temp_file}: {e}")
    except OSError as e:
        logger.warning(f"Error scanning directory {directory} for temp files: {e}")

    return cleaned_count


class FileStorage(Storage):
    """File system storage with atomic write operations.

    Features:
    - Atomic writes (write to temp file + rename), so readers never see a
      partially written image or log blob
    - OSError translated into the storage exception hierarchy

    Example:
        ```python
        storage = FileStorage()
        storage.save(path, content)
        data = storage.load(path)
        storage.delete(path)
        ```
    """

    def save(self, path: Path, content: bytes | str) -> None:
        """Save content with atomic write.

        Writes to a temporary file in the target directory first, then
        renames it over the target path.

        Args:
            path: Destination path
            content: Content to save

        Raises:
            StoragePermissionError: If write permission denied
            StorageError: If operation fails
        """
        content_bytes = content.encode("utf-8") if isinstance(content, str) else content

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except PermissionError as e:
            raise StoragePermissionError(
                f"Cannot create directory {path.parent}: permission denied"
            ) from e
        except OSError as e:
            raise StorageError(f"Failed to create directory {path.parent}: {e}") from e

        tmp_path = None
        try:
            # Same directory as the target so the rename stays on one filesystem.
            # The temp name does not depend on the target name, so any name
            # that fits the filesystem can be saved.
            with tempfile.NamedTemporaryFile(
                mode="wb",
                dir=path.parent,
                delete=False,
                prefix=TEMP_FILE_PREFIX,
                suffix=TEMP_FILE_SUFFIX,
            ) as tmp_file:
                tmp_path = Path(tmp_file.name)
                _temp_files_registry.add(tmp_path)

                tmp_file.write(content_bytes)
                tmp_file.flush()
                os.fsync(tmp_file.fileno())

            tmp_path.replace(path)
            _temp_files_registry.discard(tmp_path)
            logger.debug(f"Saved {len(content_bytes)} bytes to {path}")

        except PermissionError as e:
            raise StoragePermissionError(f"Cannot write to {path}: permission denied") from e
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}") from e
        finally:
            # Rename didn't happen
            if tmp_path is not None:
                _temp_files_registry.discard(tmp_path)
                if tmp_path.exists():
                    with contextlib.suppress(OSError):
                        tmp_path.unlink()

    def load(self, path: Path) -> bytes:
        """Load content from file.

        Args:
            path: Source path

        Returns:
            File content as bytes

        Raises:
            StorageNotFoundError: If file doesn't exist
            StoragePermissionError: If read permission denied
            StorageError: If operation fails
        """
        try:
            content = path.read_bytes()
            logger.debug(f"Loaded {len(content)} bytes from {path}")
            return content
        except FileNotFoundError as e:
            raise StorageNotFoundError(f"File not found: {path}") from e
        except PermissionError as e:
            raise StoragePermissionError(f"Cannot read {path}: permission denied") from e
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

    def delete(self, path: Path) -> None:
        """Delete a file.

        Args:
            path: Path to delete

        Raises:
            StorageNotFoundError: If path doesn't exist
            StoragePermissionError: If delete permission denied
            StorageError: If operation fails (including path being a directory)
        """
        try:
            path.unlink()
            logger.debug(f"Deleted file {path}")
        except FileNotFoundError as e:
            raise StorageNotFoundError(f"Path not found: {path}") from e
        except PermissionError as e:
            raise StoragePermissionError(f"Cannot delete {path}: permission denied") from e
        except OSError as e:
            raise StorageError(f"Failed to delete {path}: {e}") from e

    def list_files(self, directory: Path) -> list[Path]:
        """List regular files in a directory.

        Subdirectories are skipped.

        Args:
            directory: Directory to list

        Returns:
            File paths sorted by name

        Raises:
            StorageNotFoundError: If directory doesn't exist
            StoragePermissionError: If list permission denied
            StorageError: If operation fails
        """
        if not directory.exists():
            raise StorageNotFoundError(f"Directory not found: {directory}")

        if not directory.is_dir():
            raise StorageError(f"Not a directory: {directory}")

        try:
            files = sorted(entry for entry in directory.iterdir() if entry.is_file())
            logger.debug(f"Found {len(files)} files in {directory}")
            return files
        except PermissionError as e:
            raise StoragePermissionError(f"Cannot list {directory}: permission denied") from e
        except OSError as e:
            raise StorageError(f"Failed to list {directory}: {e}") from e

    def ensure_dir(self, path: Path) -> None:
        """Ensure directory exists (create if needed).

        Args:
            path: Directory path

        Raises:
            StoragePermissionError: If create permission denied
            StorageError: If operation fails
        """
        try:
            path.mkdir(parents=True, exist_ok=True)
            logger.debug(f"Ensured directory exists: {path}")
        except PermissionError as e:
            raise StoragePermissionError(
                f"Cannot create directory {path}: permission denied"
            ) from e
        except OSError as e:
            raise StorageError(f"Failed to create directory {path}: {e}") from e
