"""Tests for shared/kv_store.py and shared/persistence.py."""

import pytest

from shared.config import Settings
from shared.kv_store import (
    FileKeyValueStore,
    KeyValueStore,
    MemoryKeyValueStore,
    create_key_value_store,
)
from shared.persistence import EmulatorPersistence, StorageKeys


class TestMemoryKeyValueStore:
    @pytest.mark.asyncio
    async def test_set_get_remove(self):
        store = MemoryKeyValueStore()
        await store.set_item("k", "v")
        assert await store.get_item("k") == "v"
        await store.remove_item("k")
        assert await store.get_item("k") is None

    @pytest.mark.asyncio
    async def test_remove_missing_key_is_noop(self):
        store = MemoryKeyValueStore()
        await store.remove_item("missing")
        assert store.keys() == []

    def test_implements_protocol(self):
        assert isinstance(MemoryKeyValueStore(), KeyValueStore)


class TestFileKeyValueStore:
    @pytest.mark.asyncio
    async def test_round_trip(self, tmp_path):
        store = FileKeyValueStore(tmp_path / "state")
        await store.set_item("supabase.auth.token", '{"a": 1}')

        assert store.path_for("supabase.auth.token").exists()
        assert await store.get_item("supabase.auth.token") == '{"a": 1}'

    @pytest.mark.asyncio
    async def test_sanitises_key(self, tmp_path):
        store = FileKeyValueStore(tmp_path)
        path = store.path_for("../escape/key")
        assert path.parent == tmp_path

    @pytest.mark.asyncio
    async def test_missing_and_removed(self, tmp_path):
        store = FileKeyValueStore(tmp_path)
        assert await store.get_item("nothing") is None
        await store.set_item("k", "v")
        await store.remove_item("k")
        assert await store.get_item("k") is None

    @pytest.mark.asyncio
    async def test_write_failure_is_logged_not_raised(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        store = FileKeyValueStore(blocker / "sub")

        await store.set_item("k", "v")

        assert await store.get_item("k") is None


class TestCreateKeyValueStore:
    def test_memory_by_default(self):
        store = create_key_value_store(Settings(emulator_storage_dir=""))
        assert isinstance(store, MemoryKeyValueStore)

    def test_file_when_directory_configured(self, tmp_path):
        store = create_key_value_store(Settings(emulator_storage_dir=str(tmp_path)))
        assert isinstance(store, FileKeyValueStore)
        assert store.directory == tmp_path


class TestEmulatorPersistence:
    @pytest.mark.asyncio
    async def test_documents_round_trip(self, kv_store):
        persistence = EmulatorPersistence(kv_store)
        await persistence.save_session({"access_token": "t"})
        await persistence.save_users([["a@b.c", {"email": "a@b.c"}]])
        await persistence.save_database({"todos": {"1": {"id": 1}}})

        assert await persistence.load_session() == {"access_token": "t"}
        assert await persistence.load_users() == [["a@b.c", {"email": "a@b.c"}]]
        assert await persistence.load_database() == {"todos": {"1": {"id": 1}}}

    @pytest.mark.asyncio
    async def test_corrupt_document_loads_as_none(self):
        store = MemoryKeyValueStore({StorageKeys.DATABASE: "{not json"})
        persistence = EmulatorPersistence(store)
        assert await persistence.load_database() is None

    @pytest.mark.asyncio
    async def test_wrong_shape_loads_as_none(self):
        store = MemoryKeyValueStore({StorageKeys.USERS: '{"a": 1}'})
        persistence = EmulatorPersistence(store)
        assert await persistence.load_users() is None

    @pytest.mark.asyncio
    async def test_clear_removes_every_document(self, kv_store):
        persistence = EmulatorPersistence(kv_store)
        await persistence.save_session({"a": 1})
        await persistence.save_database({})
        await kv_store.set_item("unrelated", "x")

        await persistence.clear()

        assert kv_store.keys() == ["unrelated"]
