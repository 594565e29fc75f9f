"""Tests for the message log store."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import pytest

from msglogger.storage.directories import DirectoryKind, DirectoryResolver
from msglogger.storage.errors import StorageError
from msglogger.storage.file import FileStorage
from msglogger.storage.logs import DEFAULT_LOGS_FILENAME, LogStore


class SlowStorage(FileStorage):
    """FileStorage that records overlapping saves."""

    def __init__(self) -> None:
        self.active = 0
        self.peak = 0

    def save(self, path: Path, content: bytes | str) -> None:
        import time

        self.active += 1
        self.peak = max(self.peak, self.active)
        time.sleep(0.005)
        super().save(path, content)
        self.active -= 1


class FailingStorage(FileStorage):
    def save(self, path: Path, content: bytes | str) -> None:
        raise StorageError("read-only filesystem")


class TestRead:
    """Tests for LogStore.read."""

    @pytest.mark.asyncio
    async def test_missing_file_returns_none(self, resolver: DirectoryResolver) -> None:
        store = LogStore(resolver)

        assert await store.read() is None
        assert resolver.resolve_log_dir().is_dir()

    @pytest.mark.asyncio
    async def test_invalid_json_returns_none(self, resolver: DirectoryResolver) -> None:
        store = LogStore(resolver)
        resolver.resolve_log_dir().mkdir(parents=True)
        store.log_path.write_text('{"deletedMessages": ')

        assert await store.read() is None

    @pytest.mark.asyncio
    async def test_reads_parsed_json(self, resolver: DirectoryResolver) -> None:
        store = LogStore(resolver)
        resolver.resolve_log_dir().mkdir(parents=True)
        blob = {"deletedMessages": {"123": ["456"]}, "editedMessages": {}}
        store.log_path.write_text(json.dumps(blob))

        assert await store.read() == blob

    def test_log_path(self, resolver: DirectoryResolver) -> None:
        store = LogStore(resolver)

        assert store.log_path == resolver.resolve_log_dir() / DEFAULT_LOGS_FILENAME


class TestWrite:
    """Tests for queued log writes."""

    @pytest.mark.asyncio
    async def test_write_then_read(self, resolver: DirectoryResolver) -> None:
        store = LogStore(resolver)

        await store.write(json.dumps({"messages": [1]}))
        await store.flush()

        assert await store.read() == {"messages": [1]}

    @pytest.mark.asyncio
    async def test_last_write_wins(self, resolver: DirectoryResolver) -> None:
        store = LogStore(resolver)
        contents = [json.dumps({"version": n, "pad": "x" * (100 - n)}) for n in range(20)]

        for content in contents:
            await store.write(content)
        await store.flush()

        assert store.log_path.read_text() == contents[-1]
        assert await store.read() == json.loads(contents[-1])

    @pytest.mark.asyncio
    async def test_writes_never_overlap(self, resolver: DirectoryResolver) -> None:
        storage = SlowStorage()
        store = LogStore(resolver, storage=storage)

        await asyncio.gather(*(store.write(f'{{"n": {n}}}') for n in range(8)))
        await store.flush()

        assert storage.peak == 1
        assert await store.read() == {"n": 7}

    @pytest.mark.asyncio
    async def test_write_returns_before_persisting(self, resolver: DirectoryResolver) -> None:
        store = LogStore(resolver)

        await store.write('{"a": 1}')

        assert store.queue.pending == 1
        assert not store.log_path.exists()
        await store.flush()
        assert store.log_path.exists()

    @pytest.mark.asyncio
    async def test_failed_write_is_not_raised(self, resolver: DirectoryResolver) -> None:
        store = LogStore(resolver, storage=FailingStorage())

        await store.write('{"a": 1}')
        await store.flush()

        assert store.queue.failures == 1

    @pytest.mark.asyncio
    async def test_write_follows_directory_change(
        self, resolver: DirectoryResolver, isolated_tmp_dir: Path
    ) -> None:
        store = LogStore(resolver)
        resolver.set_directory(DirectoryKind.LOG, isolated_tmp_dir / "custom-logs")

        await store.write('{"moved": true}')
        await store.flush()

        assert (isolated_tmp_dir / "custom-logs" / DEFAULT_LOGS_FILENAME).exists()
