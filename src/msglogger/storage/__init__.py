"""Storage layer for the message logger.

Provides:
- ImageStore: disk-backed attachment image cache with an in-memory index
- LogStore: the shared message log blob, written through a FIFO WriteQueue
- FileStorage: atomic file primitives with centralized error handling
- JSON loading and model saving helpers

Example:
    ```python
    from msglogger.storage import DirectoryResolver, ImageStore, LogStore

    resolver = DirectoryResolver(default_image_dir=images, default_log_dir=logs)
    images = ImageStore(resolver)
    await images.init()
    ```
"""

from __future__ import annotations

from msglogger.storage.base import Storage
from msglogger.storage.cache_index import AttachmentRecord, CacheIndex
from msglogger.storage.directories import DirectoryKind, DirectoryResolver
from msglogger.storage.errors import (
    StorageCorruptedError,
    StorageError,
    StorageNotFoundError,
    StoragePermissionError,
    StorageValidationError,
    StoreNotInitializedError,
)
from msglogger.storage.file import FileStorage
from msglogger.storage.helpers import load_json, save_model
from msglogger.storage.images import ImageStore
from msglogger.storage.logs import LogStore
from msglogger.storage.write_queue import WriteQueue

__all__ = [
    # Base classes
    "Storage",
    # Implementations
    "FileStorage",
    "CacheIndex",
    "AttachmentRecord",
    "DirectoryKind",
    "DirectoryResolver",
    "ImageStore",
    "LogStore",
    "WriteQueue",
    # Helpers
    "save_model",
    "load_json",
    # Exceptions
    "StorageError",
    "StorageNotFoundError",
    "StoragePermissionError",
    "StorageValidationError",
    "StorageCorruptedError",
    "StoreNotInitializedError",
]
