"""JSON reading and pydantic model writing on top of a Storage."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel
from pydantic_core import PydanticSerializationError

from msglogger.storage.base import Storage
from msglogger.storage.errors import StorageCorruptedError, StorageValidationError
from msglogger.storage.file import FileStorage

_default_storage = FileStorage()


def load_json(path: Path, *, storage: Storage | None = None) -> Any:
    """Load and parse a UTF-8 JSON file.

    Raises:
        StorageNotFoundError: If file doesn't exist
        StorageCorruptedError: If JSON or its UTF-8 encoding is invalid
        StorageError: If the file cannot be read
    """
    content = (storage or _default_storage).load(path)

    try:
        return json.loads(content.decode("utf-8"))
    except json.JSONDecodeError as e:
        raise StorageCorruptedError(f"Invalid JSON in {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise StorageCorruptedError(f"Invalid UTF-8 encoding in {path}: {e}") from e


def save_model(path: Path, model: BaseModel, *, storage: Storage | None = None) -> None:
    """Write a pydantic model as indented JSON, atomically.

    Raises:
        StorageValidationError: If the model cannot be serialized
        StorageError: If the file cannot be written
    """
    try:
        content = model.model_dump_json(indent=2)
    except PydanticSerializationError as e:
        raise StorageValidationError(f"Cannot serialize {type(model).__name__}: {e}") from e

    (storage or _default_storage).save(path, content)
