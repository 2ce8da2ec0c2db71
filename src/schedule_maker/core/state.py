# src/schedule_maker/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..store.preferences import PreferencesStore
from ..store.schedule_store import ScheduleStore
from ..sync.engine import SyncEngine
from .ports import RemoteBackend


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: Any

    store: ScheduleStore
    preferences: PreferencesStore
    sync: SyncEngine

    # What /login signs in with (None: no remote configured).
    backend: RemoteBackend | None = None
