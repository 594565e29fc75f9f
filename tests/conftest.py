"""Pytest configuration and shared fixtures for msglogger tests.

Fixtures:
- isolated_tmp_dir: Isolated temporary directory (auto-cleanup)
- settings: Settings rooted in the isolated directory
- resolver: DirectoryResolver with default image and log directories
- image_dir: Default image directory, created and empty
- make_native: Factory for MessageLoggerNative instances
"""

from __future__ import annotations

from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from msglogger.config import Settings, reset_settings
from msglogger.service.native import MessageLoggerNative
from msglogger.storage.directories import DirectoryResolver


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Keep MSGLOGGER_* variables from the developer's shell out of tests."""
    import os

    for key in list(os.environ):
        if key.startswith("MSGLOGGER_"):
            monkeypatch.delenv(key)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def isolated_tmp_dir(tmp_path: Path) -> Path:
    """Provide an isolated temporary directory that is auto-cleaned."""
    test_dir = tmp_path / "test_workspace"
    test_dir.mkdir(parents=True, exist_ok=True)
    return test_dir


@pytest.fixture
def settings(isolated_tmp_dir: Path) -> Settings:
    return Settings(data_dir=isolated_tmp_dir / "data")


@pytest.fixture
def resolver(settings: Settings) -> DirectoryResolver:
    return DirectoryResolver.from_settings(settings)


@pytest.fixture
def image_dir(resolver: DirectoryResolver) -> Path:
    path = resolver.resolve_image_dir()
    path.mkdir(parents=True)
    return path


@pytest.fixture
def make_native(settings: Settings) -> Callable[..., MessageLoggerNative]:
    """Factory for helpers built from the isolated settings.

    Extra keyword arguments are passed to ``MessageLoggerNative``.
    """

    def factory(**kwargs: object) -> MessageLoggerNative:
        resolver = DirectoryResolver.from_settings(settings)
        kwargs.setdefault("preferences_path", settings.preferences_path)
        return MessageLoggerNative(resolver, **kwargs)  # type: ignore[arg-type]

    return factory
