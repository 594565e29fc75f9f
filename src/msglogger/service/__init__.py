"""Service layer for msglogger.

Wraps the storage layer into the operations the chat client invokes and
delegates shell integration to the operating system.
"""

from __future__ import annotations

from msglogger.service.native import DirectoryPicker, MessageLoggerNative
from msglogger.service.shell import reveal_in_file_manager

__all__ = [
    "DirectoryPicker",
    "MessageLoggerNative",
    "reveal_in_file_manager",
]
