# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from schedule_maker.cli.bootstrap import create_initial_state
from schedule_maker.core.state import AppState
from schedule_maker.store.kv_store import MemoryKeyValueStorage
from schedule_maker.store.schedule_store import ScheduleStore
from schedule_maker.sync.memory_backend import InMemoryBackend, RemoteDatabase

from .fakes import FakeClock, RecordingBackend, SequentialIds


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and commands.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the developer's environment.
    """
    return SimpleNamespace(
        app_name="schedule-maker-test",
        log_level="DEBUG",
        data_dir=tmp_path,
        state_db_path=tmp_path / "state.sqlite3",
        backend="memory",
        api_url="http://testserver",
        api_token=None,
        owner_id="alice",
        http_timeout_seconds=5.0,
        auto_create_schedule=True,
        auto_sign_in=False,
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def storage() -> MemoryKeyValueStorage:
    return MemoryKeyValueStorage()


@pytest.fixture()
def store(storage: MemoryKeyValueStorage, clock: FakeClock) -> ScheduleStore:
    return ScheduleStore(storage, clock=clock, id_factory=SequentialIds("local"))


@pytest.fixture()
def remote_db(clock: FakeClock) -> RemoteDatabase:
    return RemoteDatabase(clock=clock)


@pytest.fixture()
def backend(remote_db: RemoteDatabase) -> RecordingBackend:
    return RecordingBackend(InMemoryBackend(remote_db, owner_id="alice"))


@pytest.fixture()
def state(settings: SimpleNamespace, storage: MemoryKeyValueStorage) -> AppState:
    """AppState wired through the real composition root, with in-memory storage."""
    return create_initial_state(settings=settings, storage=storage)
