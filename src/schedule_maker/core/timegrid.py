# src/schedule_maker/core/timegrid.py

from __future__ import annotations

"""
Time/overlap engine for the weekly grid.

Pure functions over plain values. Nothing here raises: malformed time strings
or settings give numerically defined (possibly meaningless) results, and
validation is the caller's job (see store.schedule_store).
"""

import re
from collections.abc import Iterable

from .models import ALL_DAYS, ClockFormat, Day, ScheduleSettings, StartOfWeek, Task

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")

_WEEK_START_INDEX: dict[StartOfWeek, int] = {
    StartOfWeek.SUNDAY: 0,
    StartOfWeek.MONDAY: 1,
    StartOfWeek.SATURDAY: 6,
}


def _part(raw: str) -> int:
    try:
        return int(raw.strip())
    except ValueError:
        return 0


def to_minutes(time: str) -> int:
    """"HH:MM" -> minutes since midnight. Unreadable parts count as 0."""
    hours, _, minutes = (time or "").partition(":")
    return _part(hours) * 60 + _part(minutes)


def from_minutes(minutes: int) -> str:
    """Minutes since midnight -> "HH:MM". The hour wraps at 24."""
    h = (minutes // 60) % 24
    m = minutes % 60
    return f"{h:02d}:{m:02d}"


def is_valid_time(time: str) -> bool:
    m = _TIME_RE.match(time or "")
    if not m:
        return False
    return 0 <= int(m.group(1)) <= 23 and 0 <= int(m.group(2)) <= 59


def format_12h(time: str) -> str:
    """"13:05" -> "1:05 PM", "00:30" -> "12:30 AM"."""
    mins = to_minutes(time)
    h24 = (mins // 60) % 24
    m = mins % 60
    period = "PM" if h24 >= 12 else "AM"
    h12 = 12 if h24 == 0 else (h24 - 12 if h24 > 12 else h24)
    return f"{h12}:{m:02d} {period}"


def format_time(time: str, clock_format: ClockFormat = ClockFormat.H12) -> str:
    if clock_format == ClockFormat.H24:
        return from_minutes(to_minutes(time))
    return format_12h(time)


def duration_label(start_time: str, end_time: str) -> str:
    """Human-readable length: "1h 30m", "2h", "45m"; "0m" for empty or inverted ranges."""
    diff = to_minutes(end_time) - to_minutes(start_time)
    if diff <= 0:
        return "0m"
    h, m = divmod(diff, 60)
    if h == 0:
        return f"{m}m"
    if m == 0:
        return f"{h}h"
    return f"{h}h {m}m"


def _range_labels(start_min: int, end_min: int, step: int) -> list[str]:
    if step <= 0:
        return []
    return [from_minutes(m) for m in range(start_min, end_min, step)]


def slots(settings: ScheduleSettings) -> list[str]:
    """
    Grid rows for [start_hour, end_hour) every time_increment minutes.

    If the span is not a multiple of the increment, the last row is a partial
    period that still starts at the last computed slot (8-10 by 45 -> 08:00, 08:45, 09:30).
    """
    return _range_labels(settings.start_hour * 60, settings.end_hour * 60, settings.time_increment)


def time_suggestions(increment: int, start_hour: int = 0, end_hour: int = 24) -> list[str]:
    """Pick-list of times for a time picker."""
    return _range_labels(start_hour * 60, end_hour * 60, increment)


def week_order(start_of_week: StartOfWeek | str) -> list[Day]:
    """Sun..Sat rotated so that start_of_week comes first."""
    try:
        start = _WEEK_START_INDEX[StartOfWeek(start_of_week)]
    except ValueError:
        start = 0
    return [ALL_DAYS[(start + i) % 7] for i in range(7)]


def weekend_days(start_of_week: StartOfWeek | str) -> tuple[Day, Day]:
    """
    The last two days of the rotation.

    Positional, not calendar-based: a Saturday start hides Thursday and Friday.
    """
    order = week_order(start_of_week)
    return order[5], order[6]


def visible_days(settings: ScheduleSettings) -> list[Day]:
    order = week_order(settings.start_of_week)
    if settings.show_weekends:
        return order
    return order[:5]


def task_position(task: Task, settings: ScheduleSettings) -> tuple[float, float]:
    """
    (top_percent, height_percent) of a task block inside the visible grid.

    Both values are clamped so the block never extends past the grid edges.
    """
    grid_start = settings.start_hour * 60
    total = settings.end_hour * 60 - grid_start
    if total <= 0:
        return 0.0, 0.0

    start = to_minutes(task.start_time)
    end = to_minutes(task.end_time)

    top = max(0.0, (start - grid_start) / total * 100)
    height = max(0.0, (end - start) / total * 100)
    return top, min(100 - top, height)


def tasks_overlap(a: Task, b: Task, day: Day) -> bool:
    """Half-open [start, end): touching intervals do not overlap."""
    if day not in a.days or day not in b.days:
        return False
    a_start, a_end = to_minutes(a.start_time), to_minutes(a.end_time)
    b_start, b_end = to_minutes(b.start_time), to_minutes(b.end_time)
    return a_start < b_end and b_start < a_end


def overlaps(tasks: Iterable[Task], day: Day) -> set[str]:
    """Ids of tasks that take part in at least one overlapping pair on `day`."""
    day_tasks = [t for t in tasks if day in t.days]
    out: set[str] = set()

    # Pairwise; tens of tasks per day at most.
    for i, a in enumerate(day_tasks):
        for b in day_tasks[i + 1 :]:
            if tasks_overlap(a, b, day):
                out.add(a.id)
                out.add(b.id)
    return out


def overlaps_by_day(tasks: Iterable[Task], settings: ScheduleSettings) -> dict[Day, set[str]]:
    """Overlap sets for every visible day, in display order."""
    task_list = list(tasks)
    return {day: overlaps(task_list, day) for day in visible_days(settings)}
