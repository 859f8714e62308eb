"""
Integration Tests for the JSON-file store.

Tests cover:
- Persistence across store instances
- Atomic commit (no temp file left behind)
- Corruption detection and recovery
- I/O failures surfacing as StoreIOError
- The full accessor running on a file
"""

import json
import os

import pytest

from scopedb import JsonFileKeyPathStore, ScopedDB, StaticIdentityProvider
from scopedb.errors import StoreCorruptionError, StoreIOError
from scopedb.store.base import MISSING

pytestmark = pytest.mark.integration


class TestPersistence:
    def test_missing_file_starts_empty(self, json_store, json_path):
        assert json_store.snapshot() == {}
        assert not os.path.exists(json_path)

    def test_commit_creates_file_and_parents(self, json_store, json_path):
        json_store.set("db.public.a", 1)
        json_store.commit()
        with open(json_path, encoding="utf-8") as f:
            assert json.load(f) == {"db": {"public": {"a": 1}}}
        assert not os.path.exists(f"{json_path}.tmp")

    def test_data_survives_reopen(self, json_store, json_path):
        json_store.set("db.user.alice.theme", "dark")
        json_store.commit()
        reopened = JsonFileKeyPathStore(json_path)
        assert reopened.get("db.user.alice.theme") == "dark"

    def test_uncommitted_changes_are_not_persisted(self, json_store, json_path):
        json_store.set("a", 1)
        json_store.commit()
        json_store.set("a", 2)
        assert JsonFileKeyPathStore(json_path).get("a") == 1

    def test_reload_discards_uncommitted(self, json_store):
        json_store.set("a", 1)
        json_store.commit()
        json_store.set("a", 2)
        json_store.reload()
        assert json_store.get("a") == 1

    def test_unicode_round_trip(self, json_store, json_path):
        json_store.set("db.public.name", "数据库")
        json_store.commit()
        assert JsonFileKeyPathStore(json_path).get("db.public.name") == "数据库"

    def test_empty_file_is_empty_document(self, json_path):
        os.makedirs(os.path.dirname(json_path))
        open(json_path, "w").close()
        assert JsonFileKeyPathStore(json_path).get("a") is MISSING


class TestCorruption:
    def _write(self, path, text):
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)

    def test_invalid_json_raises(self, json_path):
        self._write(json_path, "{not json")
        with pytest.raises(StoreCorruptionError) as exc_info:
            JsonFileKeyPathStore(json_path)
        assert exc_info.value.error_details.details["filepath"] == json_path

    def test_non_object_document_raises(self, json_path):
        self._write(json_path, "[1, 2, 3]")
        with pytest.raises(StoreCorruptionError, match="expected object"):
            JsonFileKeyPathStore(json_path)

    def test_recover_quarantines_corrupt_file(self, json_path):
        self._write(json_path, "{not json")
        store = JsonFileKeyPathStore(json_path, recover=True)
        assert store.snapshot() == {}
        assert not os.path.exists(json_path)
        with open(f"{json_path}.corrupt", encoding="utf-8") as f:
            assert f.read() == "{not json"

    def test_reload_keeps_recover_flag(self, json_path):
        store = JsonFileKeyPathStore(json_path, recover=True)
        self._write(json_path, "{not json")
        store.reload()
        assert store.snapshot() == {}
        assert os.path.exists(f"{json_path}.corrupt")


class TestIOFailures:
    def test_unwritable_location_raises_store_io_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("a regular file")
        store = JsonFileKeyPathStore(str(blocker / "store.json"))
        store.set("a", 1)
        with pytest.raises(StoreIOError) as exc_info:
            store.commit()
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_unserializable_value_raises_store_io_error(self, json_store):
        json_store.set("a", object())
        with pytest.raises(StoreIOError, match="not JSON serializable"):
            json_store.commit()

    def test_unreadable_path_raises_store_io_error(self, tmp_path):
        directory = tmp_path / "is_a_dir.json"
        directory.mkdir()
        with pytest.raises(StoreIOError):
            JsonFileKeyPathStore(str(directory))

    def test_failed_commit_discards_staged_changes(self, json_store, json_path):
        json_store.set("a", 1)
        json_store.commit()
        json_store.set("bad", object())
        with pytest.raises(StoreIOError):
            json_store.commit()
        assert json_store.get("bad") is MISSING
        json_store.set("b", 2)
        json_store.commit()
        with open(json_path, encoding="utf-8") as f:
            assert json.load(f) == {"a": 1, "b": 2}

    def test_failed_set_leaves_nothing_readable(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        store = JsonFileKeyPathStore(str(blocker / "store.json"))
        db = ScopedDB(store)
        with pytest.raises(StoreIOError):
            db.set("db", "a", "secret")
        assert store.get("db.public.a") is MISSING
        with pytest.raises(StoreIOError):
            db.get("db", "a", "d")
        assert store.snapshot() == {}

    def test_accessor_surfaces_store_io_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        db = ScopedDB(JsonFileKeyPathStore(str(blocker / "store.json")))
        with pytest.raises(StoreIOError):
            db.set("db", "a", 1)


class TestAccessorOnFile:
    def test_scenarios_persist(self, json_path):
        db = ScopedDB(JsonFileKeyPathStore(json_path), StaticIdentityProvider("alice"))
        db.set("db", "a.b", "x")
        db.set_by_user("db", "theme", "dark")
        db.database().set("k", 1).write()

        reopened = ScopedDB(JsonFileKeyPathStore(json_path), StaticIdentityProvider("alice"))
        assert reopened.get("db", "a.b", "default") == "x"
        assert reopened.get_by_user("db", "theme", "light") == "dark"
        assert reopened.database() == {"k": 1}
        assert reopened.database_clear() == {}
        assert ScopedDB(JsonFileKeyPathStore(json_path)).database() == {}

    def test_layout_on_disk(self, json_path):
        db = ScopedDB(JsonFileKeyPathStore(json_path))
        db.set("db", "a", 1)
        db.set_by_user("db", "a", 2)
        with open(json_path, encoding="utf-8") as f:
            assert json.load(f) == {"db": {"public": {"a": 1}, "user": {"ghost-uuid": {"a": 2}}}}
