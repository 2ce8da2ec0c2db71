# tests/test_memory_backend.py

from __future__ import annotations

import pytest

from schedule_maker.core.errors import NotAuthenticatedError, NotFoundError, OwnershipError
from schedule_maker.core.models import Day, ScheduleSettings, Task
from schedule_maker.sync.memory_backend import InMemoryBackend, RemoteDatabase


def _task() -> Task:
    return Task(id="t1", name="Run", color="#DCFCE7", days=(Day.SAT,), start_time="07:00", end_time="08:00")


@pytest.mark.asyncio
async def test_crud_is_scoped_to_owner(remote_db: RemoteDatabase) -> None:
    alice = InMemoryBackend(remote_db, "alice")
    bob = InMemoryBackend(remote_db, "bob")

    rid = await alice.create_schedule("Alice week")
    await alice.update_schedule(rid, tasks=[_task()], settings=ScheduleSettings(show_weekends=True))

    listed = await alice.list_schedules()
    assert [s.id for s in listed] == [rid]
    assert listed[0].task_count == 1
    assert await bob.list_schedules() == []

    rec = await alice.get_schedule(rid)
    assert rec.settings.show_weekends
    assert rec.tasks[0].name == "Run"

    # Another owner's record looks like a missing one on reads...
    with pytest.raises(NotFoundError):
        await bob.get_schedule(rid)
    # ...and is refused on writes.
    with pytest.raises(OwnershipError):
        await bob.update_schedule(rid, name="Hijack")
    with pytest.raises(OwnershipError):
        await bob.delete_schedule(rid)
    with pytest.raises(OwnershipError):
        await bob.toggle_public(rid)

    assert remote_db.records[rid].name == "Alice week"


@pytest.mark.asyncio
async def test_partial_update_keeps_other_fields(remote_db: RemoteDatabase) -> None:
    alice = InMemoryBackend(remote_db, "alice")
    rid = await alice.create_schedule("Week")
    await alice.update_schedule(rid, tasks=[_task()])
    await alice.update_schedule(rid, name="Renamed")

    rec = remote_db.records[rid]
    assert rec.name == "Renamed"
    assert len(rec.tasks) == 1


@pytest.mark.asyncio
async def test_unauthenticated_calls_are_rejected(remote_db: RemoteDatabase) -> None:
    anon = InMemoryBackend(remote_db, None)
    with pytest.raises(NotAuthenticatedError):
        await anon.list_schedules()
    with pytest.raises(NotAuthenticatedError):
        await anon.create_schedule("x")


@pytest.mark.asyncio
async def test_delete_is_idempotent(remote_db: RemoteDatabase) -> None:
    alice = InMemoryBackend(remote_db, "alice")
    rid = await alice.create_schedule("Week")
    await alice.delete_schedule(rid)
    await alice.delete_schedule(rid)
    await alice.delete_schedule("never-existed")
    assert remote_db.records == {}

    with pytest.raises(NotFoundError):
        await alice.update_schedule(rid, name="late")


@pytest.mark.asyncio
async def test_public_lookup_follows_toggle(remote_db: RemoteDatabase) -> None:
    alice = InMemoryBackend(remote_db, "alice")
    anon = InMemoryBackend(remote_db, None)
    rid = await alice.create_schedule("Open house")

    token = await alice.toggle_public(rid)
    assert token
    public = await anon.get_public(token)
    assert public.id == rid
    assert public.owner_id is None

    assert await alice.toggle_public(rid) is None
    with pytest.raises(NotFoundError):
        await anon.get_public(token)

    # A fresh toggle issues a new token.
    again = await alice.toggle_public(rid)
    assert again and again != token
