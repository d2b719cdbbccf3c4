"""
Tests for Registry loading and the read/write lock discipline.
"""

import asyncio
import json

import pytest

from matchbot.core.errors import MigrationError
from matchbot.core.registry import (
    CURRENT_SCHEMA_VERSION,
    AsyncRWLock,
    GlobalData,
    Registry,
)


@pytest.mark.unit
class TestRegistryLoad:

    def test_missing_file_gives_empty_migrated_registry(self, registry_path):
        registry = Registry.load(registry_path)
        snapshot = registry.snapshot()
        assert snapshot == {"schema_version": CURRENT_SCHEMA_VERSION, "guilds": {}}

    def test_empty_file_is_empty_registry(self, registry_path):
        registry_path.write_text("")
        assert Registry.load(registry_path).snapshot()["guilds"] == {}

    def test_loads_existing_document(self, registry_path):
        registry_path.write_text(json.dumps({
            "guilds": {"1": {"users": {"2": {"primary": {
                "results": {"2024-05-01T12:00:00Z": "abc"},
            }}}}},
        }))
        registry = Registry.load(registry_path)
        snapshot = registry.snapshot()
        assert snapshot["schema_version"] == CURRENT_SCHEMA_VERSION
        assert snapshot["guilds"]["1"]["users"]["2"]["primary"]["results"] == {
            "2024-05-01T12:00:00.000000Z": "abc",
        }

    def test_invalid_json_is_fatal(self, registry_path):
        registry_path.write_text("{not json")
        with pytest.raises(MigrationError):
            Registry.load(registry_path)

    def test_non_object_root_is_fatal(self, registry_path):
        registry_path.write_text("[1, 2, 3]")
        with pytest.raises(MigrationError):
            Registry.load(registry_path)

    def test_newer_schema_is_fatal(self, registry_path):
        registry_path.write_text(json.dumps({"schema_version": 99, "guilds": {}}))
        with pytest.raises(MigrationError):
            Registry.load(registry_path)


@pytest.mark.unit
class TestRegistryAccess:

    @pytest.mark.asyncio
    async def test_write_then_read(self):
        registry = Registry()
        async with registry.write() as data:
            data.guild_mut(1).user_mut(2).headmate_mut(None).add_result("abc")

        async with registry.read() as data:
            assert data.guild(1).user(2).headmate(None).most_recent() == "abc"

    @pytest.mark.asyncio
    async def test_yields_same_tree(self):
        tree = GlobalData()
        registry = Registry(tree)
        async with registry.read() as data:
            assert data is tree


@pytest.mark.unit
class TestAsyncRWLock:

    @pytest.mark.asyncio
    async def test_readers_share(self):
        lock = AsyncRWLock()
        inside = []

        async def reader():
            async with lock.read():
                inside.append(lock.readers)
                await asyncio.sleep(0.01)

        await asyncio.gather(reader(), reader(), reader())
        assert max(inside) == 3

    @pytest.mark.asyncio
    async def test_writer_excludes_readers(self):
        lock = AsyncRWLock()
        events = []

        async def writer():
            async with lock.write():
                events.append("write-start")
                await asyncio.sleep(0.02)
                events.append("write-end")

        async def reader():
            await asyncio.sleep(0.005)
            async with lock.read():
                events.append("read")

        await asyncio.gather(writer(), reader())
        assert events == ["write-start", "write-end", "read"]

    @pytest.mark.asyncio
    async def test_waiting_writer_blocks_new_readers(self):
        lock = AsyncRWLock()
        events = []

        async def first_reader():
            async with lock.read():
                await asyncio.sleep(0.02)
                events.append("reader-1")

        async def writer():
            await asyncio.sleep(0.005)
            async with lock.write():
                events.append("writer")

        async def late_reader():
            await asyncio.sleep(0.01)
            async with lock.read():
                events.append("reader-2")

        await asyncio.gather(first_reader(), writer(), late_reader())
        assert events == ["reader-1", "writer", "reader-2"]

    @pytest.mark.asyncio
    async def test_cancelled_writer_releases_waiting_readers(self):
        lock = AsyncRWLock()
        await lock.acquire_read()

        writer = asyncio.create_task(lock.acquire_write())
        await asyncio.sleep(0)
        reader = asyncio.create_task(lock.acquire_read())
        await asyncio.sleep(0)

        writer.cancel()
        with pytest.raises(asyncio.CancelledError):
            await writer

        await asyncio.wait_for(reader, timeout=1)
        assert lock.readers == 2

    @pytest.mark.asyncio
    async def test_reader_never_sees_partial_mutation(self):
        registry = Registry()
        seen = []

        async def mutate():
            async with registry.write() as data:
                user = data.guild_mut(1).user_mut(2)
                user.headmate_mut(None).add_result("a")
                await asyncio.sleep(0.01)
                user.headmate_mut("Alex").add_result("b")

        async def observe():
            await asyncio.sleep(0.001)
            async with registry.read() as data:
                user = data.guild(1).user(2)
                seen.append((user.primary is not None, "Alex" in user.headmates))

        await asyncio.gather(mutate(), observe())
        assert seen == [(True, True)]
