# tests/test_transfer.py

from __future__ import annotations

import json

import pytest

from schedule_maker.core.errors import ValidationError
from schedule_maker.core.models import ClockFormat, Day, StartOfWeek
from schedule_maker.store.schedule_store import ScheduleStore
from schedule_maker.store.transfer import dumps_schedule, export_filename, export_schedule, import_schedule
from schedule_maker.sync.memory_backend import InMemoryBackend, RemoteDatabase
from schedule_maker.sync.sharing import fetch_shared, import_shared


def _filled(store: ScheduleStore) -> str:
    local_id = store.create_schedule("Spring / Term #1")
    store.update_settings(start_of_week="monday", clock_format="24h", time_increment=30)
    store.add_task(name="Lab", days=["tue", "thu"], start_time="13:00", end_time="15:30", color="#CCFBF1", description="room 4")
    return local_id


def test_export_shape(store: ScheduleStore) -> None:
    local_id = _filled(store)
    data = export_schedule(store.get(local_id))
    assert set(data) == {"name", "tasks", "settings"}
    assert data["settings"]["startOfWeek"] == "monday"
    assert data["tasks"][0]["days"] == ["tue", "thu"]
    assert data["tasks"][0]["description"] == "room 4"


def test_export_filename_replaces_unsafe_characters(store: ScheduleStore) -> None:
    local_id = _filled(store)
    assert export_filename(store.get(local_id)) == "Spring___Term__1.json"


def test_import_creates_new_active_schedule(store: ScheduleStore) -> None:
    src = _filled(store)
    raw = dumps_schedule(store.get(src))

    new_id = import_schedule(store, raw)
    assert new_id != src
    assert store.active_id == new_id

    imported = store.get(new_id)
    original = store.get(src)
    assert imported.name == original.name
    assert imported.settings.start_of_week == StartOfWeek.MONDAY
    assert imported.settings.clock_format == ClockFormat.H24
    assert imported.remote_id is None
    assert len(imported.tasks) == 1
    assert imported.tasks[0].days == (Day.TUE, Day.THU)
    assert imported.tasks[0].id != original.tasks[0].id


@pytest.mark.parametrize(
    "payload",
    [
        "{not json",
        json.dumps([1, 2]),
        json.dumps({"tasks": []}),
        json.dumps({"name": "x"}),
        json.dumps({"name": "x", "tasks": [{"name": "bad", "days": ["mon"], "startTime": "10:00", "endTime": "09:00"}]}),
        json.dumps({"name": "x", "tasks": [], "settings": {"timeIncrement": 7}}),
    ],
)
def test_invalid_import_leaves_store_untouched(store: ScheduleStore, payload: str) -> None:
    store.create_schedule("Existing")
    before = store.snapshot()
    with pytest.raises(ValidationError):
        import_schedule(store, payload)
    assert store.snapshot() is before


@pytest.mark.asyncio
async def test_shared_schedule_is_imported_as_private_copy(store: ScheduleStore) -> None:
    db = RemoteDatabase()
    owner = InMemoryBackend(db, "bob")
    rid = await owner.create_schedule("Bob's week")
    token = await owner.toggle_public(rid)

    visitor = InMemoryBackend(db, None)
    record = await fetch_shared(visitor, f"  {token} ")
    local_id = import_shared(store, record)

    s = store.get(local_id)
    assert s.name == "Bob's week"
    assert s.remote_id is None
    assert not s.is_public
    assert s.share_token is None
