# src/schedule_maker/sync/memory_backend.py

from __future__ import annotations

"""
In-process RemoteBackend.

RemoteDatabase holds the authoritative records for every owner; an
InMemoryBackend is one owner's authenticated view of it. Used by the offline
demo and by tests. Every call yields to the event loop at least once, so
concurrent calls interleave the way real network calls would.
"""

import asyncio
import logging
import secrets
import time
import uuid
from collections.abc import Callable
from dataclasses import replace

from ..core.errors import NotAuthenticatedError, NotFoundError, OwnershipError
from ..core.models import DEFAULT_SETTINGS, RemoteSchedule, RemoteScheduleSummary, ScheduleSettings, Task

logger = logging.getLogger(__name__)


class RemoteDatabase:
    """Records keyed by schedule id. Owner ids come from the auth collaborator."""

    def __init__(self, *, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self.records: dict[str, RemoteSchedule] = {}

    def now(self) -> int:
        return int(self._clock() * 1000)

    def owned_by(self, owner_id: str) -> list[RemoteSchedule]:
        return [r for r in self.records.values() if r.owner_id == owner_id]


class InMemoryBackend:
    def __init__(self, db: RemoteDatabase, owner_id: str | None, *, latency: float = 0.0) -> None:
        self._db = db
        self._owner_id = owner_id
        self._latency = max(0.0, float(latency))

    @property
    def owner_id(self) -> str | None:
        return self._owner_id

    async def _io(self) -> None:
        await asyncio.sleep(self._latency)

    def _require_owner(self) -> str:
        if not self._owner_id:
            raise NotAuthenticatedError("not authenticated")
        return self._owner_id

    def _owned(self, schedule_id: str) -> RemoteSchedule:
        owner = self._require_owner()
        rec = self._db.records.get(schedule_id)
        if rec is None:
            raise NotFoundError(f"schedule {schedule_id} not found")
        if rec.owner_id != owner:
            raise OwnershipError(f"schedule {schedule_id} is not owned by {owner}")
        return rec

    # ---- RemoteBackend ----

    async def list_schedules(self) -> list[RemoteScheduleSummary]:
        await self._io()
        owner = self._require_owner()
        return [r.summary() for r in self._db.owned_by(owner)]

    async def get_schedule(self, schedule_id: str) -> RemoteSchedule:
        await self._io()
        try:
            return self._owned(schedule_id)
        except OwnershipError as e:
            # Somebody else's schedule looks the same as a missing one.
            raise NotFoundError(f"schedule {schedule_id} not found") from e

    async def get_public(self, share_token: str) -> RemoteSchedule:
        await self._io()
        for rec in self._db.records.values():
            if rec.is_public and rec.share_token and rec.share_token == share_token:
                return replace(rec, owner_id=None)
        raise NotFoundError("no public schedule for this link")

    async def create_schedule(self, name: str) -> str:
        await self._io()
        owner = self._require_owner()
        now = self._db.now()
        schedule_id = uuid.uuid4().hex
        self._db.records[schedule_id] = RemoteSchedule(
            id=schedule_id,
            name=name,
            settings=DEFAULT_SETTINGS,
            created_at=now,
            updated_at=now,
            owner_id=owner,
        )
        logger.debug("remote create id=%s owner=%s", schedule_id, owner)
        return schedule_id

    async def update_schedule(
        self,
        schedule_id: str,
        *,
        name: str | None = None,
        tasks: list[Task] | tuple[Task, ...] | None = None,
        settings: ScheduleSettings | None = None,
    ) -> None:
        await self._io()
        rec = self._owned(schedule_id)
        self._db.records[schedule_id] = replace(
            rec,
            name=rec.name if name is None else name,
            tasks=rec.tasks if tasks is None else tuple(tasks),
            settings=rec.settings if settings is None else settings,
            updated_at=self._db.now(),
        )

    async def delete_schedule(self, schedule_id: str) -> None:
        await self._io()
        try:
            self._owned(schedule_id)
        except NotFoundError:
            return
        del self._db.records[schedule_id]
        logger.debug("remote delete id=%s", schedule_id)

    async def toggle_public(self, schedule_id: str) -> str | None:
        await self._io()
        rec = self._owned(schedule_id)
        token = None if rec.is_public else secrets.token_urlsafe(12)
        self._db.records[schedule_id] = replace(
            rec,
            is_public=token is not None,
            share_token=token,
            updated_at=self._db.now(),
        )
        return token
