"""Filename utilities for the attachment cache.

Attachment filenames come from the chat client and may carry directory
segments (``../../evil.png``) or Windows separators. Everything here is
purely lexical: the filesystem is never touched and nothing is resolved.
"""

from __future__ import annotations

import re

_SEPARATORS = re.compile(r"[\\/]+")


def safe_filename(filename: str) -> str:
    """Return the last path component of ``filename``, extension kept.

    Both ``/`` and ``\\`` count as separators regardless of platform, and
    trailing separators are ignored. ``"."`` and ``".."`` map to an empty
    string, so the result is always usable as a plain file name or empty.

    Example:
        ```python
        safe_filename("../../someMaliciousPath.png")  # "someMaliciousPath.png"
        ```
    """
    base = _SEPARATORS.split(filename.rstrip("\\/"))[-1]
    if base in (".", ".."):
        return ""
    return base


def attachment_id_from_filename(filename: str) -> str:
    """Derive the attachment identifier from a filename.

    The identifier is the base name with its final extension removed:
    ``"../../x.png"`` gives ``"x"``, ``"a.tar.gz"`` gives ``"a.tar"`` and
    ``"x."`` gives ``"x"``. Leading dots do not start an extension, so a
    dotfile such as ``".hidden"`` keeps its full name. Never raises.
    """
    base = safe_filename(filename)
    stem, dot, _ = base.rpartition(".")
    if dot and stem.strip("."):
        return stem
    return base
