"""Base storage interface for file operations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path


class Storage(ABC):
    """Abstract base class for blocking file operations.

    The image and log stores only talk to disk through this interface,
    which keeps error translation in one place and lets tests swap in
    a failing implementation.
    """

    @abstractmethod
    def save(self, path: Path, content: bytes | str) -> None:
        """Replace the content of a file.

        Args:
            path: Destination path
            content: Content to save (bytes or string)

        Raises:
            StoragePermissionError: If write permission denied
            StorageError: If operation fails
        """

    @abstractmethod
    def load(self, path: Path) -> bytes:
        """Load content from path.

        Args:
            path: Source path

        Returns:
            File content as bytes

        Raises:
            StorageNotFoundError: If file doesn't exist
            StoragePermissionError: If read permission denied
            StorageError: If operation fails
        """

    @abstractmethod
    def delete(self, path: Path) -> None:
        """Delete the file at path.

        Args:
            path: Path to delete

        Raises:
            StorageNotFoundError: If path doesn't exist
            StoragePermissionError: If delete permission denied
            StorageError: If operation fails
        """

    @abstractmethod
    def list_files(self, directory: Path) -> list[Path]:
        """List regular files directly inside a directory.

        Args:
            directory: Directory to list

        Returns:
            File paths sorted by name

        Raises:
            StorageNotFoundError: If directory doesn't exist
            StoragePermissionError: If list permission denied
            StorageError: If operation fails
        """

    @abstractmethod
    def ensure_dir(self, path: Path) -> None:
        """Ensure directory exists (create if needed).

        Raises:
            StoragePermissionError: If create permission denied
            StorageError: If operation fails
        """
