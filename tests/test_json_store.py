"""
Contract tests for the JSON collection store.
"""
from __future__ import annotations

import json
import os
import stat
import threading

import pytest

from crm.repositories import json_store
from crm.repositories.json_store import (
    CollectionNotFoundError,
    CorruptDataError,
    EncodeError,
    JsonStore,
    StoreIOError,
)


@pytest.fixture()
def store(tmp_path):
    return JsonStore(tmp_path)


def _save_in_thread(store: JsonStore, name: str, value) -> threading.Thread:
    worker = threading.Thread(target=store.save, args=(name, value), daemon=True)
    worker.start()
    return worker


def test_round_trip_list_and_object(store):
    records = [{"id": "1", "title": "Villa", "price": 100, "tags": ["sea", "pool"], "agentId": None}]
    store.save("properties", records)
    assert store.load("properties") == records

    settings = {"jwtSecret": "abc", "tokenExpiry": "1h"}
    store.save("settings.json", settings)
    assert store.load("settings") == settings


def test_save_writes_pretty_printed_json(store, tmp_path):
    store.save("roles", [{"id": "r1", "name": "Administração"}])
    text = (tmp_path / "roles.json").read_text(encoding="utf-8")
    assert text == json.dumps([{"id": "r1", "name": "Administração"}], indent=2, ensure_ascii=False)


def test_empty_file_loads_as_empty_list(store, tmp_path):
    (tmp_path / "users.json").write_text("  \n", encoding="utf-8")
    assert store.load("users") == []


def test_missing_collection_is_not_created_by_load(store, tmp_path):
    with pytest.raises(CollectionNotFoundError):
        store.load("users")
    assert not (tmp_path / "users.json").exists()


def test_corrupt_collection_is_reported(store, tmp_path):
    (tmp_path / "properties.json").write_text('[{"id": "1",', encoding="utf-8")
    with pytest.raises(CorruptDataError):
        store.load("properties")


@pytest.mark.parametrize("name", ["../secrets", "..", "nested/users", "..\\users", "/etc/passwd", ""])
def test_names_outside_root_are_rejected(store, name):
    with pytest.raises(CollectionNotFoundError):
        store.load(name)
    with pytest.raises(CollectionNotFoundError):
        store.save(name, [])


def test_unserializable_value_raises_encode_error(store, tmp_path):
    store.save("properties", [{"id": "1"}])
    with pytest.raises(EncodeError):
        store.save("properties", [{"id": "2", "blob": object()}])
    with pytest.raises(EncodeError):
        store.save("properties", [{"price": float("nan")}])
    assert store.load("properties") == [{"id": "1"}]


def test_write_failure_keeps_previous_content_and_releases_lock(store, tmp_path, monkeypatch):
    store.save("properties", [{"id": "old"}])

    def _boom(src, dst):
        raise OSError(28, "No space left on device")

    monkeypatch.setattr(json_store.os, "replace", _boom)
    with pytest.raises(StoreIOError):
        store.save("properties", [{"id": "new"}])
    monkeypatch.undo()

    assert store.load("properties") == [{"id": "old"}]
    assert [p.name for p in tmp_path.iterdir()] == ["properties.json"]

    worker = _save_in_thread(store, "properties", [{"id": "after"}])
    worker.join(timeout=5)
    assert not worker.is_alive()
    assert store.load("properties") == [{"id": "after"}]


def test_concurrent_saves_leave_exactly_one_complete_value(store):
    values = [[{"id": f"{n}-{i}", "payload": "x" * 2000} for i in range(50)] for n in range(8)]
    workers = [_save_in_thread(store, "properties", value) for value in values]
    for worker in workers:
        worker.join(timeout=10)
    assert store.load("properties") in values


def test_writers_to_different_names_do_not_block_each_other(store):
    lock = store._lock_for("a")
    with lock:
        blocked = _save_in_thread(store, "a", ["from-thread"])
        independent = _save_in_thread(store, "b", ["b"])
        independent.join(timeout=5)
        assert not independent.is_alive()
        blocked.join(timeout=0.2)
        assert blocked.is_alive()
    blocked.join(timeout=5)
    assert not blocked.is_alive()
    assert store.load("a") == ["from-thread"]
    assert store.load("b") == ["b"]


def test_update_serializes_read_modify_write(store):
    store.save("users", [])

    def _append(i):
        store.update("users", lambda users: users.append({"id": str(i)}))

    workers = [threading.Thread(target=_append, args=(i,)) for i in range(20)]
    for worker in workers:
        worker.start()
    for worker in workers:
        worker.join(timeout=10)
    assert sorted(int(u["id"]) for u in store.load("users")) == list(range(20))


def test_update_does_not_write_when_mutator_raises(store, tmp_path):
    store.save("roles", [{"id": "r1"}])
    before = os.stat(tmp_path / "roles.json").st_mtime_ns

    def _fail(roles):
        roles.clear()
        raise LookupError("nope")

    with pytest.raises(LookupError):
        store.update("roles", _fail)
    assert store.load("roles") == [{"id": "r1"}]
    assert os.stat(tmp_path / "roles.json").st_mtime_ns == before


def test_ensure_creates_only_missing_collections(store):
    assert store.ensure("users", []) is True
    store.save("users", [{"id": "u1"}])
    assert store.ensure("users", []) is False
    assert store.load("users") == [{"id": "u1"}]


@pytest.mark.parametrize("document", ['{"oops": 1}', "null", '"text"', "3"])
def test_array_collections_reject_other_shapes(store, tmp_path, document):
    (tmp_path / "properties.json").write_text(document, encoding="utf-8")
    with pytest.raises(CorruptDataError):
        store.load_list("properties")

    calls = []
    with pytest.raises(CorruptDataError):
        store.update_list("properties", calls.append)
    assert calls == []
    assert (tmp_path / "properties.json").read_text(encoding="utf-8") == document


def test_update_list_appends_under_lock(store):
    store.save("roles", [])
    store.update_list("roles", lambda roles: roles.append({"id": "r1"}))
    assert store.load_list("roles") == [{"id": "r1"}]


def test_save_keeps_existing_file_mode(store, tmp_path):
    store.save("users", [])
    target = tmp_path / "users.json"
    os.chmod(target, 0o644)
    store.save("users", [{"id": "u1"}])
    assert stat.S_IMODE(target.stat().st_mode) == 0o644
    store.update("users", lambda users: users.clear())
    assert stat.S_IMODE(target.stat().st_mode) == 0o644
