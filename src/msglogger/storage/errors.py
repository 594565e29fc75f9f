"""Storage layer exceptions."""

from __future__ import annotations


class StorageError(Exception):
    """Base exception for storage operations."""


class StorageNotFoundError(StorageError):
    """Raised when a file or directory is not found."""


class StoragePermissionError(StorageError):
    """Raised when operation fails due to insufficient permissions."""


class StorageValidationError(StorageError):
    """Raised when content cannot be serialized for storage."""


class StorageCorruptedError(StorageError):
    """Raised when stored data is corrupted or cannot be parsed."""


class StoreNotInitializedError(StorageError):
    """Raised when a store is used before its init() has completed."""
