# src/schedule_maker/store/schedule_store.py

from __future__ import annotations

import logging
import time
import uuid
from collections import deque
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, fields, replace
from typing import Any

from ..core.errors import ValidationError
from ..core.models import (
    TIME_INCREMENTS,
    ClockFormat,
    Day,
    Schedule,
    ScheduleSettings,
    StartOfWeek,
    Task,
)
from ..core.palette import DEFAULT_TASK_COLOR
from ..core.ports import KeyValueStorage
from ..core.timegrid import is_valid_time, to_minutes

logger = logging.getLogger(__name__)

SCHEDULES_KEY = "schedule-maker-schedules"

_SETTINGS_FIELDS = frozenset(f.name for f in fields(ScheduleSettings))


@dataclass(slots=True, frozen=True)
class StoreSnapshot:
    """Immutable view of the whole store, handed to subscribers."""

    schedules: tuple[Schedule, ...] = ()
    active_id: str | None = None

    def get(self, local_id: str | None) -> Schedule | None:
        if local_id is None:
            return None
        for s in self.schedules:
            if s.local_id == local_id:
                return s
        return None

    def active(self) -> Schedule | None:
        return self.get(self.active_id)

    def by_id(self) -> dict[str, Schedule]:
        return {s.local_id: s for s in self.schedules}

    def to_dict(self) -> dict[str, Any]:
        return {
            "schedules": [s.to_dict() for s in self.schedules],
            "activeScheduleId": self.active_id,
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> StoreSnapshot:
        items = raw.get("schedules")
        schedules: list[Schedule] = []
        seen: set[str] = set()
        for item in items if isinstance(items, list) else []:
            if not isinstance(item, Mapping):
                continue
            s = Schedule.from_dict(item)
            if not s.local_id or s.local_id in seen:
                continue
            seen.add(s.local_id)
            schedules.append(s)
        active = raw.get("activeScheduleId")
        return cls(schedules=tuple(schedules), active_id=str(active) if active else None)


StoreListener = Callable[[StoreSnapshot, StoreSnapshot], None]


# ---- validation ----


def _clean_name(name: str, what: str = "name") -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError(f"{what} is required")
    return cleaned


def clean_task(task: Task) -> Task:
    name = _clean_name(task.name, "task name")
    days = Day.parse_many(task.days)
    if not days:
        raise ValidationError("task needs at least one day")
    if not is_valid_time(task.start_time) or not is_valid_time(task.end_time):
        raise ValidationError(f"invalid time range {task.start_time!r}-{task.end_time!r}")
    if to_minutes(task.start_time) >= to_minutes(task.end_time):
        raise ValidationError("task must end after it starts")
    description = (task.description or "").strip() or None
    return replace(
        task,
        name=name,
        days=days,
        description=description,
        color=task.color or DEFAULT_TASK_COLOR,
    )


def clean_settings(settings: ScheduleSettings) -> ScheduleSettings:
    try:
        start_of_week = StartOfWeek(settings.start_of_week)
        clock_format = ClockFormat(settings.clock_format)
    except ValueError as e:
        raise ValidationError(str(e)) from e
    if settings.time_increment not in TIME_INCREMENTS:
        raise ValidationError(f"time increment must be one of {TIME_INCREMENTS}")
    if not (0 <= settings.start_hour < settings.end_hour <= 24):
        raise ValidationError("hours must satisfy 0 <= start_hour < end_hour <= 24")
    return replace(
        settings,
        show_weekends=bool(settings.show_weekends),
        start_of_week=start_of_week,
        clock_format=clock_format,
    )


def _new_id() -> str:
    return str(uuid.uuid4())


class ScheduleStore:
    """
    Single in-process source of truth for schedules, tasks and the active schedule.

    Every mutation:
    - replaces the affected Schedule value (schedules are immutable),
    - bumps its updated_at (logical ms, strictly increasing per schedule),
    - persists the new snapshot,
    - notifies subscribers with (previous, current) snapshots, synchronously.

    Task/settings operations act on the active schedule and are no-ops when there
    is none. replace_all/mark_synced are sync bookkeeping and do not bump updated_at.
    """

    def __init__(
        self,
        storage: KeyValueStorage | None = None,
        *,
        initial: StoreSnapshot | None = None,
        clock: Callable[[], float] = time.time,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self._storage = storage
        self._clock = clock
        self._new_id = id_factory
        self._listeners: list[StoreListener] = []
        self._pending: deque[tuple[StoreSnapshot, StoreSnapshot]] = deque()
        self._notifying = False

        state = initial or StoreSnapshot()
        self._state = StoreSnapshot(state.schedules, self._valid_active(state.schedules, state.active_id))

    @classmethod
    def load(cls, storage: KeyValueStorage, **kwargs: Any) -> ScheduleStore:
        """Restore the persisted snapshot verbatim (empty store if there is none)."""
        initial = StoreSnapshot()
        try:
            raw = storage.get(SCHEDULES_KEY)
            if isinstance(raw, Mapping):
                initial = StoreSnapshot.from_dict(raw)
        except Exception:
            logger.exception("Failed to load schedules; starting with an empty store")
        logger.info("ScheduleStore loaded schedules=%d active=%s", len(initial.schedules), initial.active_id)
        return cls(storage, initial=initial, **kwargs)

    # ---- reads ----

    @property
    def storage(self) -> KeyValueStorage | None:
        return self._storage

    def snapshot(self) -> StoreSnapshot:
        return self._state

    @property
    def schedules(self) -> tuple[Schedule, ...]:
        return self._state.schedules

    @property
    def active_id(self) -> str | None:
        return self._state.active_id

    def active_schedule(self) -> Schedule | None:
        return self._state.active()

    def get(self, local_id: str) -> Schedule | None:
        return self._state.get(local_id)

    # ---- subscription ----

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Register a change listener. Returns the matching unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ---- internals ----

    def _now(self) -> int:
        return int(self._clock() * 1000)

    def _touch(self, schedule: Schedule, **changes: Any) -> Schedule:
        return replace(schedule, updated_at=max(self._now(), schedule.updated_at + 1), **changes)

    @staticmethod
    def _valid_active(schedules: tuple[Schedule, ...], active_id: str | None) -> str | None:
        ids = [s.local_id for s in schedules]
        if active_id in ids:
            return active_id
        return ids[0] if ids else None

    def _commit(self, schedules: Iterable[Schedule], active_id: str | None) -> None:
        items = tuple(schedules)
        prev = self._state
        cur = StoreSnapshot(items, self._valid_active(items, active_id))
        self._state = cur
        self._persist(cur)
        self._pending.append((prev, cur))
        if self._notifying:
            # Nested commit from a listener: the outer loop delivers it after the current pair.
            return

        self._notifying = True
        try:
            while self._pending:
                before, after = self._pending.popleft()
                # Listeners may mutate the store or unsubscribe while we iterate.
                for listener in list(self._listeners):
                    try:
                        listener(before, after)
                    except Exception:
                        logger.exception("Store listener failed")
        finally:
            self._notifying = False

    def _persist(self, snap: StoreSnapshot) -> None:
        if self._storage is None:
            return
        try:
            self._storage.put(SCHEDULES_KEY, snap.to_dict())
        except Exception:
            logger.exception("Failed to persist schedules")

    def _replace_schedule(self, updated: Schedule, active_id: str | None = None) -> None:
        items = [updated if s.local_id == updated.local_id else s for s in self._state.schedules]
        self._commit(items, self._state.active_id if active_id is None else active_id)

    def _require_active(self, op: str) -> Schedule | None:
        active = self._state.active()
        if active is None:
            logger.debug("%s ignored: no active schedule", op)
        return active

    # ---- schedules ----

    def create_schedule(self, name: str) -> str:
        cleaned = _clean_name(name)
        now = self._now()
        schedule = Schedule(local_id=self._new_id(), name=cleaned, created_at=now, updated_at=now)
        self._commit((*self._state.schedules, schedule), schedule.local_id)
        logger.debug("Schedule created local_id=%s name=%r", schedule.local_id, cleaned)
        return schedule.local_id

    def delete_schedule(self, local_id: str) -> None:
        """Remove a schedule and its tasks. A remote delete, if any, is the sync engine's business."""
        if self._state.get(local_id) is None:
            logger.debug("delete_schedule: unknown local_id=%s", local_id)
            return
        remaining = [s for s in self._state.schedules if s.local_id != local_id]
        active = self._state.active_id
        if active == local_id:
            active = remaining[0].local_id if remaining else None
        self._commit(remaining, active)
        logger.debug("Schedule deleted local_id=%s", local_id)

    def rename_schedule(self, local_id: str, name: str) -> None:
        cleaned = _clean_name(name)
        schedule = self._state.get(local_id)
        if schedule is None:
            logger.debug("rename_schedule: unknown local_id=%s", local_id)
            return
        self._replace_schedule(self._touch(schedule, name=cleaned))

    def set_active(self, local_id: str) -> None:
        if self._state.get(local_id) is None:
            logger.warning("set_active: unknown local_id=%s", local_id)
            return
        if self._state.active_id == local_id:
            return
        self._commit(self._state.schedules, local_id)

    def duplicate_schedule(self, local_id: str) -> str | None:
        """
        Copy a schedule as a new, unsynced, private one (fresh task ids) and make it active.
        Returns None for an unknown id.
        """
        source = self._state.get(local_id)
        if source is None:
            logger.debug("duplicate_schedule: unknown local_id=%s", local_id)
            return None
        now = self._now()
        copy = Schedule(
            local_id=self._new_id(),
            name=f"{source.name} (copy)",
            tasks=tuple(replace(t, id=self._new_id()) for t in source.tasks),
            settings=source.settings,
            created_at=now,
            updated_at=now,
        )
        self._commit((*self._state.schedules, copy), copy.local_id)
        return copy.local_id

    # ---- tasks (active schedule) ----

    def add_task(
        self,
        *,
        name: str,
        days: Iterable[Day | str],
        start_time: str,
        end_time: str,
        color: str = DEFAULT_TASK_COLOR,
        description: str | None = None,
    ) -> str | None:
        """Append a task to the active schedule. Returns its id, or None when nothing is active."""
        task = clean_task(
            Task(
                id=self._new_id(),
                name=name,
                color=color,
                days=Day.parse_many(days),
                start_time=start_time,
                end_time=end_time,
                description=description,
            )
        )
        active = self._require_active("add_task")
        if active is None:
            return None
        self._replace_schedule(self._touch(active, tasks=(*active.tasks, task)))
        return task.id

    def update_task(self, task: Task) -> None:
        """Replace the task with the same id in the active schedule."""
        cleaned = clean_task(task)
        active = self._require_active("update_task")
        if active is None:
            return
        if active.find_task(cleaned.id) is None:
            logger.debug("update_task: unknown task_id=%s", cleaned.id)
            return
        tasks = tuple(cleaned if t.id == cleaned.id else t for t in active.tasks)
        self._replace_schedule(self._touch(active, tasks=tasks))

    def remove_task(self, task_id: str) -> None:
        active = self._require_active("remove_task")
        if active is None:
            return
        if active.find_task(task_id) is None:
            logger.debug("remove_task: unknown task_id=%s", task_id)
            return
        tasks = tuple(t for t in active.tasks if t.id != task_id)
        self._replace_schedule(self._touch(active, tasks=tasks))

    # ---- settings ----

    def update_settings(self, **partial: Any) -> None:
        """Shallow-merge settings fields (snake_case names) into the active schedule."""
        unknown = set(partial) - _SETTINGS_FIELDS
        if unknown:
            raise ValidationError(f"unknown settings: {', '.join(sorted(unknown))}")
        active = self._require_active("update_settings")
        if active is None:
            return
        merged = clean_settings(replace(active.settings, **partial))
        self._replace_schedule(self._touch(active, settings=merged))

    # ---- sharing ----

    def set_share_token(self, local_id: str, token: str | None) -> None:
        schedule = self._state.get(local_id)
        if schedule is None:
            return
        self._replace_schedule(self._touch(schedule, share_token=token or None))

    def set_public(self, local_id: str, is_public: bool) -> None:
        """Making a schedule private also drops its share token."""
        schedule = self._state.get(local_id)
        if schedule is None:
            return
        changes: dict[str, Any] = {"is_public": bool(is_public)}
        if not is_public:
            changes["share_token"] = None
        self._replace_schedule(self._touch(schedule, **changes))

    def set_sharing(self, local_id: str, token: str | None) -> None:
        """Public with `token`, or private with no token, in one change."""
        schedule = self._state.get(local_id)
        if schedule is None:
            return
        token = token or None
        self._replace_schedule(self._touch(schedule, is_public=token is not None, share_token=token))

    # ---- sync bookkeeping ----

    def replace_all(self, schedules: Iterable[Schedule], active_id: str | None = None) -> None:
        """
        Swap the whole schedule list (initial sync).

        active_id defaults to the current one; if it does not survive, the first
        schedule becomes active.
        """
        items = tuple(schedules)
        ids = [s.local_id for s in items]
        if len(ids) != len(set(ids)):
            raise ValidationError("duplicate local ids in replace_all")
        self._commit(items, self._state.active_id if active_id is None else active_id)

    def mark_synced(self, local_id: str, remote_id: str) -> bool:
        """
        Record the remote identity of a schedule. remote_id is write-once and may
        not move between local objects; returns False when nothing was recorded.
        """
        schedule = self._state.get(local_id)
        if schedule is None:
            logger.warning("mark_synced: local_id=%s is gone (remote_id=%s)", local_id, remote_id)
            return False
        if schedule.remote_id == remote_id:
            return True
        if schedule.remote_id is not None:
            logger.warning(
                "mark_synced: local_id=%s already synced as %s, refusing %s",
                local_id,
                schedule.remote_id,
                remote_id,
            )
            return False
        if any(s.remote_id == remote_id for s in self._state.schedules):
            logger.warning("mark_synced: remote_id=%s already belongs to another schedule", remote_id)
            return False
        self._replace_schedule(replace(schedule, remote_id=remote_id))
        logger.debug("Schedule synced local_id=%s remote_id=%s", local_id, remote_id)
        return True
