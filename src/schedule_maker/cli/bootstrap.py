# src/schedule_maker/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (storage/store/sync/backend).
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import KeyValueStorage, RemoteBackend
from ..core.state import AppState
from ..store.kv_store import SQLiteKeyValueStorage
from ..store.preferences import PreferencesStore
from ..store.schedule_store import ScheduleStore
from ..sync.engine import SyncEngine
from ..sync.http_backend import HttpBackend
from ..sync.memory_backend import InMemoryBackend, RemoteDatabase

logger = logging.getLogger(__name__)

DEFAULT_SCHEDULE_NAME = "My Schedule"


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.state_db_path.parent.mkdir(parents=True, exist_ok=True)


def build_backend(settings) -> RemoteBackend | None:
    """Pick the remote backend from settings.backend ("memory" | "http" | "none")."""
    kind = getattr(settings, "backend", "none")
    if kind == "http":
        return HttpBackend(
            settings.api_url,
            token=settings.api_token,
            timeout_seconds=settings.http_timeout_seconds,
        )
    if kind == "memory":
        # Demo remote: lives as long as the process.
        return InMemoryBackend(RemoteDatabase(), owner_id=settings.owner_id or "local-user")
    return None


def create_initial_state(*, settings=None, storage: KeyValueStorage | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    if storage is None:
        _ensure_local_dirs(settings)
        storage = SQLiteKeyValueStorage(settings.state_db_path)

    store = ScheduleStore.load(storage)
    if getattr(settings, "auto_create_schedule", False) and not store.schedules:
        store.create_schedule(DEFAULT_SCHEDULE_NAME)
        logger.info("Created default schedule %r", DEFAULT_SCHEDULE_NAME)

    return AppState(
        settings=settings,
        store=store,
        preferences=PreferencesStore(storage),
        sync=SyncEngine(store),
        backend=build_backend(settings),
    )
