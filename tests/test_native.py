"""Tests for MessageLoggerNative boundary operations."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from msglogger.config import Settings, load_directory_preferences
from msglogger.service.native import MessageLoggerNative
from msglogger.storage.directories import DirectoryKind
from msglogger.storage.errors import StorageError

NativeFactory = Callable[..., MessageLoggerNative]


class TestImages:
    """Image operations through the helper."""

    @pytest.mark.asyncio
    async def test_write_get_delete(self, make_native: NativeFactory) -> None:
        native = make_native()
        await native.init()

        await native.write_image("555.png", b"png bytes")
        assert await native.get_image("555") == b"png bytes"

        await native.delete_image("555")
        assert await native.get_image("555") is None

    @pytest.mark.asyncio
    async def test_unknown_operations_are_noops(self, make_native: NativeFactory) -> None:
        native = make_native()
        await native.init()

        await native.delete_image("never-cached")
        await native.write_image("", b"x")

        assert await native.get_image("never-cached") is None

    @pytest.mark.asyncio
    async def test_instances_are_independent(
        self, make_native: NativeFactory, isolated_tmp_dir: Path
    ) -> None:
        first = make_native()
        second = make_native()
        second.resolver.set_directory(DirectoryKind.IMAGE, isolated_tmp_dir / "other")
        await first.init()
        await second.init()

        await first.write_image("1.png", b"first")

        assert await first.get_image("1") == b"first"
        assert await second.get_image("1") is None

    @pytest.mark.asyncio
    async def test_restart_rebuilds_index(self, make_native: NativeFactory) -> None:
        native = make_native()
        await native.init()
        await native.write_image("77.webp", b"sticker")

        restarted = make_native()
        await restarted.init()

        assert await restarted.get_image("77") == b"sticker"


class TestLogs:
    """Log operations through the helper."""

    @pytest.mark.asyncio
    async def test_no_logs_yet(self, make_native: NativeFactory) -> None:
        assert await make_native().get_logs() is None

    @pytest.mark.asyncio
    async def test_write_logs_then_close(self, make_native: NativeFactory) -> None:
        native = make_native()

        for n in range(5):
            await native.write_logs(json.dumps({"deletedMessages": {"c": [str(n)]}}))
        await native.close()

        assert await native.get_logs() == {"deletedMessages": {"c": ["4"]}}


class TestDirectories:
    """set_directory and choose_directory."""

    def test_default_dirs(self, make_native: NativeFactory, settings: Settings) -> None:
        native = make_native()

        assert native.default_data_dir() == settings.default_logs_dir
        assert native.default_image_dir() == settings.default_image_cache_dir

    @pytest.mark.asyncio
    async def test_set_directory_persists_choice(
        self, make_native: NativeFactory, settings: Settings, isolated_tmp_dir: Path
    ) -> None:
        native = make_native()
        new_dir = isolated_tmp_dir / "picked-logs"

        assert await native.set_directory(DirectoryKind.LOG, new_dir) is True

        assert native.resolver.resolve_log_dir() == new_dir
        prefs = load_directory_preferences(settings.preferences_path)
        assert prefs.logs_dir == new_dir
        assert prefs.image_cache_dir is None

    @pytest.mark.asyncio
    async def test_choice_survives_restart(
        self, settings: Settings, isolated_tmp_dir: Path
    ) -> None:
        native = MessageLoggerNative.from_settings(settings)
        new_dir = isolated_tmp_dir / "picked-images"
        await native.set_directory(DirectoryKind.IMAGE, new_dir)

        restarted = MessageLoggerNative.from_settings(settings)

        assert restarted.resolver.resolve_image_dir() == new_dir

    @pytest.mark.asyncio
    async def test_set_directory_accepts_kind_string(
        self, make_native: NativeFactory, isolated_tmp_dir: Path
    ) -> None:
        native = make_native(preferences_path=None)

        assert await native.set_directory("image", isolated_tmp_dir / "x") is True  # type: ignore[arg-type]
        assert native.resolver.resolve_image_dir() == isolated_tmp_dir / "x"

    @pytest.mark.asyncio
    async def test_persist_failure_keeps_old_directory(
        self, make_native: NativeFactory, isolated_tmp_dir: Path
    ) -> None:
        native = make_native()
        before = native.resolver.resolve_log_dir()

        with patch(
            "msglogger.service.native.save_directory_preferences",
            side_effect=StorageError("read-only"),
        ):
            result = await native.set_directory(DirectoryKind.LOG, isolated_tmp_dir / "new")

        assert result is False
        assert native.resolver.resolve_log_dir() == before

    @pytest.mark.asyncio
    async def test_choose_directory(
        self, make_native: NativeFactory, isolated_tmp_dir: Path
    ) -> None:
        native = make_native()
        picker = AsyncMock(return_value=isolated_tmp_dir / "chosen")

        result = await native.choose_directory(
            DirectoryKind.IMAGE, native.default_image_dir(), picker
        )

        assert result is True
        picker.assert_awaited_once_with(native.default_image_dir())
        assert native.resolver.resolve_image_dir() == isolated_tmp_dir / "chosen"

    @pytest.mark.asyncio
    async def test_choose_directory_cancelled(self, make_native: NativeFactory) -> None:
        native = make_native()
        before = native.resolver.resolve_image_dir()
        picker = AsyncMock(return_value=None)

        assert await native.choose_directory(DirectoryKind.IMAGE, before, picker) is False
        assert native.resolver.resolve_image_dir() == before


class TestReveal:
    """show_item_in_folder delegates to the shell integration."""

    @pytest.mark.asyncio
    async def test_delegates(self, make_native: NativeFactory, isolated_tmp_dir: Path) -> None:
        reveal = MagicMock(return_value=True)
        native = make_native(reveal=reveal)
        target = isolated_tmp_dir / "file.png"

        await native.show_item_in_folder(target)

        reveal.assert_called_once_with(target)
