"""Utility functions and helpers."""

from __future__ import annotations

from msglogger.utils.paths import attachment_id_from_filename, safe_filename

__all__ = [
    "attachment_id_from_filename",
    "safe_filename",
]
