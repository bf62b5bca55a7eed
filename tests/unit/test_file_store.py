from __future__ import annotations

import json

import pytest

from common.errors import PersistenceError
from state.file_store import JsonFileStore
from state.gateway import PersistenceGateway


def test_load_missing_returns_none(tmp_path):
    store = JsonFileStore(tmp_path / "state")
    assert store.load() is None


def test_save_and_load_roundtrip(tmp_path):
    store = JsonFileStore(tmp_path)
    src = {"row_1": {"L": True, "A": False, "M": False, "I": False, "S": False}}

    store.save(src)
    assert store.path == tmp_path / "lamis_data.json"
    assert store.load() == src


def test_save_overwrites_single_record(tmp_path):
    store = JsonFileStore(tmp_path)
    store.save({"row_1": {"L": True}})
    store.save({"row_2": {"A": True}})

    assert store.load() == {"row_2": {"A": True}}
    assert sorted(p.name for p in tmp_path.iterdir()) == ["lamis_data.json"]


def test_record_is_deterministic_json(tmp_path):
    store = JsonFileStore(tmp_path)
    store.save({"row_2": {"S": False, "L": True}, "row_1": {}})
    assert store.path.read_text(encoding="utf-8") == '{"row_1":{},"row_2":{"L":true,"S":false}}'


def test_corrupt_record_raises_persistence_error(tmp_path):
    (tmp_path / "lamis_data.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(PersistenceError):
        JsonFileStore(tmp_path).load()


def test_non_object_record_raises_persistence_error(tmp_path):
    (tmp_path / "lamis_data.json").write_text(json.dumps([1, 2]), encoding="utf-8")
    with pytest.raises(PersistenceError):
        JsonFileStore(tmp_path).load()


def test_write_failure_raises_persistence_error(tmp_path):
    blocker = tmp_path / "blocked"
    blocker.write_text("a file, not a directory", encoding="utf-8")
    with pytest.raises(PersistenceError):
        JsonFileStore(blocker).save({})


def test_state_dir_from_env(tmp_path, monkeypatch):
    monkeypatch.setenv("LAMIS_STATE_DIR", str(tmp_path / "env-dir"))
    store = JsonFileStore()
    store.save({})
    assert (tmp_path / "env-dir" / "lamis_data.json").exists()


def test_satisfies_gateway_protocol(tmp_path):
    assert isinstance(JsonFileStore(tmp_path), PersistenceGateway)


def test_nan_is_never_written(tmp_path):
    store = JsonFileStore(tmp_path)
    store.save({"row_1": {"L": True}})

    with pytest.raises(PersistenceError):
        store.save({"row_1": {"L": float("inf")}})
    assert store.load() == {"row_1": {"L": True}}


def test_record_with_nan_token_is_rejected(tmp_path):
    (tmp_path / "lamis_data.json").write_text('{"row_1":{"L":NaN}}', encoding="utf-8")
    with pytest.raises(PersistenceError):
        JsonFileStore(tmp_path).load()
