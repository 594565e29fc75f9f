"""Local persistence for a chat message logger: attachment image cache and log store."""

from __future__ import annotations

__version__ = "0.1.0"
