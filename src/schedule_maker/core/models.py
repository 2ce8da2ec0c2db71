# src/schedule_maker/core/models.py

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class Day(StrEnum):
    SUN = "sun"
    MON = "mon"
    TUE = "tue"
    WED = "wed"
    THU = "thu"
    FRI = "fri"
    SAT = "sat"

    @classmethod
    def parse_many(cls, raw: Iterable[Any] | None) -> tuple[Day, ...]:
        """Tolerant parse: unknown entries and duplicates are dropped, order kept."""
        out: list[Day] = []
        for item in raw or ():
            try:
                day = cls(str(item).strip().lower())
            except ValueError:
                continue
            if day not in out:
                out.append(day)
        return tuple(out)


# Canonical order (Sun..Sat).
ALL_DAYS: tuple[Day, ...] = tuple(Day)

DAY_LABELS: dict[Day, str] = {
    Day.SUN: "Sunday",
    Day.MON: "Monday",
    Day.TUE: "Tuesday",
    Day.WED: "Wednesday",
    Day.THU: "Thursday",
    Day.FRI: "Friday",
    Day.SAT: "Saturday",
}

DAY_SHORT_LABELS: dict[Day, str] = {d: label[:3] for d, label in DAY_LABELS.items()}


class StartOfWeek(StrEnum):
    SUNDAY = "sunday"
    MONDAY = "monday"
    SATURDAY = "saturday"


class ClockFormat(StrEnum):
    H12 = "12h"
    H24 = "24h"


class PaletteMode(StrEnum):
    PASTEL = "pastel"
    BOLD = "bold"


TIME_INCREMENTS: tuple[int, ...] = (15, 30, 60)


def _enum_or(enum_cls, raw: Any, default):
    try:
        return enum_cls(raw)
    except ValueError:
        return default


def _int_or(raw: Any, default: int) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


def _opt_str(raw: Any) -> str | None:
    if raw is None:
        return None
    s = str(raw)
    return s if s else None


@dataclass(slots=True, frozen=True)
class Task:
    """A recurring time block on one or more weekdays ("HH:MM" 24h times)."""

    id: str
    name: str
    color: str
    days: tuple[Day, ...]
    start_time: str
    end_time: str
    description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "days": [d.value for d in self.days],
            "startTime": self.start_time,
            "endTime": self.end_time,
        }
        if self.description is not None:
            out["description"] = self.description
        return out

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> Task:
        return cls(
            id=str(raw.get("id") or ""),
            name=str(raw.get("name") or ""),
            color=str(raw.get("color") or ""),
            days=Day.parse_many(raw.get("days")),
            start_time=str(raw.get("startTime") or "00:00"),
            end_time=str(raw.get("endTime") or "00:00"),
            description=_opt_str(raw.get("description")),
        )


@dataclass(slots=True, frozen=True)
class ScheduleSettings:
    show_weekends: bool = False
    start_of_week: StartOfWeek = StartOfWeek.SUNDAY
    time_increment: int = 60
    start_hour: int = 8
    end_hour: int = 22
    clock_format: ClockFormat = ClockFormat.H12

    def to_dict(self) -> dict[str, Any]:
        return {
            "showWeekends": self.show_weekends,
            "startOfWeek": self.start_of_week.value,
            "timeIncrement": self.time_increment,
            "startHour": self.start_hour,
            "endHour": self.end_hour,
            "clockFormat": self.clock_format.value,
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any] | None) -> ScheduleSettings:
        """Missing or unreadable keys fall back to the defaults."""
        d = DEFAULT_SETTINGS
        if not raw:
            return d
        return cls(
            show_weekends=bool(raw.get("showWeekends", d.show_weekends)),
            start_of_week=_enum_or(StartOfWeek, raw.get("startOfWeek"), d.start_of_week),
            time_increment=_int_or(raw.get("timeIncrement"), d.time_increment),
            start_hour=_int_or(raw.get("startHour"), d.start_hour),
            end_hour=_int_or(raw.get("endHour"), d.end_hour),
            clock_format=_enum_or(ClockFormat, raw.get("clockFormat"), d.clock_format),
        )


DEFAULT_SETTINGS = ScheduleSettings()


@dataclass(slots=True, frozen=True)
class Schedule:
    """
    A named collection of tasks plus its display settings.

    local_id is client-assigned and never changes. remote_id stays None until the
    schedule is first synced; after that it is the only handle used remotely.
    created_at/updated_at are logical millisecond timestamps.
    """

    local_id: str
    name: str
    tasks: tuple[Task, ...] = ()
    settings: ScheduleSettings = DEFAULT_SETTINGS
    remote_id: str | None = None
    is_public: bool = False
    share_token: str | None = None
    created_at: int = 0
    updated_at: int = 0

    @property
    def is_synced(self) -> bool:
        return self.remote_id is not None

    def find_task(self, task_id: str) -> Task | None:
        for t in self.tasks:
            if t.id == task_id:
                return t
        return None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.local_id,
            "name": self.name,
            "tasks": [t.to_dict() for t in self.tasks],
            "settings": self.settings.to_dict(),
            "isPublic": self.is_public,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if self.remote_id is not None:
            out["remoteId"] = self.remote_id
        if self.share_token is not None:
            out["shareToken"] = self.share_token
        return out

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> Schedule:
        tasks_raw = raw.get("tasks")
        tasks = tuple(Task.from_dict(t) for t in tasks_raw if isinstance(t, Mapping)) if isinstance(tasks_raw, list) else ()
        settings_raw = raw.get("settings")
        return cls(
            local_id=str(raw.get("id") or ""),
            name=str(raw.get("name") or ""),
            tasks=tasks,
            settings=ScheduleSettings.from_dict(settings_raw if isinstance(settings_raw, Mapping) else None),
            remote_id=_opt_str(raw.get("remoteId")),
            is_public=bool(raw.get("isPublic", False)),
            share_token=_opt_str(raw.get("shareToken")),
            created_at=_int_or(raw.get("createdAt"), 0),
            updated_at=_int_or(raw.get("updatedAt"), 0),
        )


# ---- remote records ----


@dataclass(slots=True, frozen=True)
class RemoteScheduleSummary:
    """Metadata row returned by RemoteBackend.list_schedules (no task bodies)."""

    id: str
    name: str
    task_count: int
    is_public: bool
    share_token: str | None
    created_at: int
    updated_at: int

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> RemoteScheduleSummary:
        return cls(
            id=str(raw.get("id") or ""),
            name=str(raw.get("name") or ""),
            task_count=_int_or(raw.get("taskCount"), 0),
            is_public=bool(raw.get("isPublic", False)),
            share_token=_opt_str(raw.get("shareToken")),
            created_at=_int_or(raw.get("createdAt"), 0),
            updated_at=_int_or(raw.get("updatedAt"), 0),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "taskCount": self.task_count,
            "isPublic": self.is_public,
            "shareToken": self.share_token,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass(slots=True, frozen=True)
class RemoteSchedule:
    """Full remote record. owner_id is None for records returned by a public lookup."""

    id: str
    name: str
    tasks: tuple[Task, ...] = ()
    settings: ScheduleSettings = DEFAULT_SETTINGS
    is_public: bool = False
    share_token: str | None = None
    created_at: int = 0
    updated_at: int = 0
    owner_id: str | None = field(default=None, compare=False)

    def summary(self) -> RemoteScheduleSummary:
        return RemoteScheduleSummary(
            id=self.id,
            name=self.name,
            task_count=len(self.tasks),
            is_public=self.is_public,
            share_token=self.share_token,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    def to_local(self, local_id: str) -> Schedule:
        return Schedule(
            local_id=local_id,
            name=self.name,
            tasks=self.tasks,
            settings=self.settings,
            remote_id=self.id,
            is_public=self.is_public,
            share_token=self.share_token,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "tasks": [t.to_dict() for t in self.tasks],
            "settings": self.settings.to_dict(),
            "isPublic": self.is_public,
            "shareToken": self.share_token,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> RemoteSchedule:
        local = Schedule.from_dict(raw)
        return cls(
            id=local.local_id,
            name=local.name,
            tasks=local.tasks,
            settings=local.settings,
            is_public=local.is_public,
            share_token=local.share_token,
            created_at=local.created_at,
            updated_at=local.updated_at,
        )
