# tests/test_bootstrap.py

from __future__ import annotations

from types import SimpleNamespace

import pytest

from schedule_maker.cli.bootstrap import DEFAULT_SCHEDULE_NAME, build_backend, create_initial_state
from schedule_maker.store.kv_store import MemoryKeyValueStorage
from schedule_maker.sync.http_backend import HttpBackend
from schedule_maker.sync.memory_backend import InMemoryBackend


def test_default_schedule_is_created_once(settings: SimpleNamespace, storage: MemoryKeyValueStorage) -> None:
    first = create_initial_state(settings=settings, storage=storage)
    assert [s.name for s in first.store.schedules] == [DEFAULT_SCHEDULE_NAME]

    second = create_initial_state(settings=settings, storage=storage)
    assert [s.local_id for s in second.store.schedules] == [s.local_id for s in first.store.schedules]


def test_auto_create_can_be_disabled(settings: SimpleNamespace) -> None:
    settings.auto_create_schedule = False
    state = create_initial_state(settings=settings, storage=MemoryKeyValueStorage())
    assert state.store.schedules == ()


def test_default_storage_is_sqlite_under_data_dir(settings: SimpleNamespace) -> None:
    state = create_initial_state(settings=settings)
    assert settings.state_db_path.exists()
    assert state.store.storage is not None


@pytest.mark.parametrize(
    ("kind", "expected"),
    [("memory", InMemoryBackend), ("http", HttpBackend), ("none", type(None))],
)
def test_build_backend(settings: SimpleNamespace, kind: str, expected: type) -> None:
    settings.backend = kind
    assert isinstance(build_backend(settings), expected)
