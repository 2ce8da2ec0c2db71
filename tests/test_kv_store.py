# tests/test_kv_store.py

from __future__ import annotations

import sqlite3
from pathlib import Path

from schedule_maker.store.kv_store import SQLiteKeyValueStorage
from schedule_maker.store.schedule_store import ScheduleStore


def test_put_get_delete_roundtrip(tmp_path: Path) -> None:
    kv = SQLiteKeyValueStorage(tmp_path / "nested" / "state.sqlite3")
    assert kv.get("missing") is None

    kv.put("a", {"x": [1, 2], "name": "Ünïcode"})
    kv.put("a", {"x": [3]})
    assert kv.get("a") == {"x": [3]}
    assert kv.count_keys() == 1

    kv.delete("a")
    kv.delete("a")
    assert kv.get("a") is None


def test_values_survive_reopen(tmp_path: Path) -> None:
    db = tmp_path / "state.sqlite3"
    store = ScheduleStore(SQLiteKeyValueStorage(db))
    local_id = store.create_schedule("Persisted")

    reopened = ScheduleStore.load(SQLiteKeyValueStorage(db))
    assert reopened.active_id == local_id
    assert reopened.get(local_id).name == "Persisted"


def test_corrupt_value_reads_as_missing(tmp_path: Path) -> None:
    db = tmp_path / "state.sqlite3"
    kv = SQLiteKeyValueStorage(db)
    kv.put("k", [1])

    conn = sqlite3.connect(str(db))
    try:
        conn.execute("UPDATE kv SET value = ? WHERE key = ?", ("{broken", "k"))
        conn.commit()
    finally:
        conn.close()

    assert kv.get("k") is None
