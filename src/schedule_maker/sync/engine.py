# src/schedule_maker/sync/engine.py

from __future__ import annotations

"""
Sync engine: keeps the local ScheduleStore and a RemoteBackend in step.

State machine per session:

    UNAUTHENTICATED --sign_in--> INITIAL_SYNC_PENDING --full pull ok--> STEADY
          ^                                                               |
          +---------------------------sign_out----------------------------+

Initial sync (once per session):
- pull every owned remote schedule as a full record (list + get),
- keep local guest schedules (no remote_id), drop local copies of synced ones,
- replace the store contents with remote records + guests,
- subscribe write-through, then push each guest (create -> mark_synced -> update).

Write-through (STEADY): every store change is diffed by local id:
- removed + had remote_id        -> delete
- new + no remote_id             -> push as a guest
- kept + remote_id + updated_at  -> full update (name, tasks, settings)

Remote calls are fire-and-forget asyncio tasks: no retry, queue, dedup or
cancellation. Two quick edits can produce two in-flight updates that land in
any order; the remote keeps whichever lands last.
"""

import asyncio
import logging
import uuid
from collections.abc import Coroutine
from enum import StrEnum
from typing import Any

from ..core.errors import NotAuthenticatedError, NotFoundError, RemoteError, ValidationError
from ..core.models import RemoteSchedule, Schedule
from ..core.ports import RemoteBackend
from ..store.schedule_store import ScheduleStore, StoreSnapshot

logger = logging.getLogger(__name__)


class SyncState(StrEnum):
    UNAUTHENTICATED = "unauthenticated"
    INITIAL_SYNC_PENDING = "initial_sync_pending"
    STEADY = "steady"


class SyncEngine:
    def __init__(self, store: ScheduleStore) -> None:
        self._store = store
        self._backend: RemoteBackend | None = None
        self._state = SyncState.UNAUTHENTICATED
        self._pulling = False
        self._unsubscribe: Any = None
        self._inflight: set[asyncio.Task[None]] = set()

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def backend(self) -> RemoteBackend | None:
        return self._backend

    @property
    def pending_operations(self) -> int:
        return len(self._inflight)

    # ---- session ----

    async def sign_in(self, backend: RemoteBackend) -> bool:
        """
        Start a session and run the initial sync.

        Returns True once the engine is STEADY. A call while the initial sync is
        running, or after it finished, does nothing. If the pull fails the engine
        stays INITIAL_SYNC_PENDING and sign_in may be called again.
        """
        if self._state == SyncState.STEADY:
            logger.debug("sign_in ignored: already steady")
            return True
        if self._pulling:
            logger.debug("sign_in ignored: initial sync already running")
            return False

        self._backend = backend
        self._state = SyncState.INITIAL_SYNC_PENDING
        self._pulling = True
        try:
            return await self._initial_sync(backend)
        finally:
            self._pulling = False

    def sign_out(self) -> None:
        """Stop mirroring. In-flight remote calls keep running; local data is kept."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._backend = None
        self._state = SyncState.UNAUTHENTICATED
        logger.info("Sync signed out (in-flight=%d)", len(self._inflight))

    async def drain(self) -> None:
        """Wait until every spawned remote call (and anything they spawned) finished."""
        while self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    # ---- initial sync ----

    async def _pull_all(self, backend: RemoteBackend) -> list[RemoteSchedule]:
        summaries = await backend.list_schedules()
        results = await asyncio.gather(
            *(backend.get_schedule(s.id) for s in summaries),
            return_exceptions=True,
        )
        records: list[RemoteSchedule] = []
        for summary, result in zip(summaries, results):
            if isinstance(result, NotFoundError):
                # Deleted between list and get.
                logger.info("Remote schedule %s vanished during pull", summary.id)
                continue
            if isinstance(result, BaseException):
                raise result
            records.append(result)
        return records

    async def _initial_sync(self, backend: RemoteBackend) -> bool:
        try:
            remote = await self._pull_all(backend)
        except Exception:
            logger.exception("Initial sync failed while fetching remote schedules")
            return False

        if self._backend is not backend or self._state != SyncState.INITIAL_SYNC_PENDING:
            logger.info("Initial sync result dropped: session changed during pull")
            return False

        snap = self._store.snapshot()
        guests = [s for s in snap.schedules if s.remote_id is None]
        local_by_remote = {s.remote_id: s.local_id for s in snap.schedules if s.remote_id}
        taken = {g.local_id for g in guests}

        merged: list[Schedule] = []
        for rec in remote:
            local_id = local_by_remote.get(rec.id) or rec.id
            if local_id in taken:
                local_id = str(uuid.uuid4())
            taken.add(local_id)
            merged.append(rec.to_local(local_id))
        merged.extend(guests)

        self._store.replace_all(merged)

        # Subscribe only now so the replacement above is not echoed back remotely.
        self._unsubscribe = self._store.subscribe(self._on_store_change)
        self._state = SyncState.STEADY
        logger.info("Initial sync done: remote=%d guests=%d", len(remote), len(guests))

        for g in guests:
            self._spawn(self._push_new(backend, g.local_id), f"push guest schedule {g.local_id}")
        return True

    # ---- write-through ----

    def _on_store_change(self, prev: StoreSnapshot, cur: StoreSnapshot) -> None:
        backend = self._backend
        if self._state != SyncState.STEADY or backend is None:
            return

        before = prev.by_id()
        after = cur.by_id()

        for local_id, old in before.items():
            if local_id not in after and old.remote_id:
                self._spawn(backend.delete_schedule(old.remote_id), f"delete {old.remote_id}")

        for local_id, new in after.items():
            old = before.get(local_id)
            if old is None:
                if new.remote_id is None:
                    self._spawn(self._push_new(backend, local_id), f"push new schedule {local_id}")
                continue
            if new.remote_id and new.updated_at != old.updated_at:
                self._spawn(
                    backend.update_schedule(
                        new.remote_id,
                        name=new.name,
                        tasks=new.tasks,
                        settings=new.settings,
                    ),
                    f"update {new.remote_id}",
                )

    async def _push_new(self, backend: RemoteBackend, local_id: str) -> None:
        schedule = self._store.get(local_id)
        if schedule is None or schedule.remote_id is not None:
            return

        remote_id = await backend.create_schedule(schedule.name)
        if not self._store.mark_synced(local_id, remote_id):
            # Deleted (or otherwise claimed) while the create was in flight.
            logger.warning("Remote schedule %s left orphaned (local %s is gone)", remote_id, local_id)
            return

        # Push the latest local copy; edits made while create was in flight had no remote_id to go to.
        current = self._store.get(local_id) or schedule
        await backend.update_schedule(
            remote_id,
            name=current.name,
            tasks=current.tasks,
            settings=current.settings,
        )
        logger.info("Schedule %s synced as %s (%d tasks)", local_id, remote_id, len(current.tasks))

    def _spawn(self, coro: Coroutine[Any, Any, None], what: str) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coro.close()
            logger.error("Dropped remote call (%s): no running event loop", what)
            return
        task = loop.create_task(self._guard(coro, what))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    @staticmethod
    async def _guard(coro: Coroutine[Any, Any, None], what: str) -> None:
        try:
            await coro
        except RemoteError as e:
            logger.warning("Remote call failed (%s): %s: %s", what, e.__class__.__name__, e)
        except Exception:
            logger.exception("Remote call crashed (%s)", what)

    # ---- sharing ----

    async def toggle_sharing(self, local_id: str) -> str | None:
        """
        Flip public sharing of a synced schedule. Returns the new share token,
        or None when sharing got disabled. Errors propagate to the caller.
        """
        backend = self._backend
        if self._state != SyncState.STEADY or backend is None:
            raise NotAuthenticatedError("sign in to share schedules")
        schedule = self._store.get(local_id)
        if schedule is None:
            raise ValidationError(f"unknown schedule {local_id}")
        if schedule.remote_id is None:
            raise ValidationError("schedule is not synced yet")

        token = await backend.toggle_public(schedule.remote_id)
        self._store.set_sharing(local_id, token)
        logger.info("Sharing for %s is now %s", local_id, "on" if token else "off")
        return token
