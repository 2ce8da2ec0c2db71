# src/schedule_maker/cli/render.py

from __future__ import annotations

"""Plain-text views of a schedule for the console."""

from ..core.models import DAY_SHORT_LABELS, Schedule
from ..core.timegrid import duration_label, format_time, overlaps_by_day, slots, to_minutes, visible_days

_CELL = 12


def _fit(text: str, width: int = _CELL) -> str:
    if len(text) > width - 1:
        text = text[: width - 2] + "~"
    return text.ljust(width)


def render_tasks(schedule: Schedule) -> str:
    if not schedule.tasks:
        return f"{schedule.name}: no tasks yet. Use /add to create one."

    clock = schedule.settings.clock_format
    flagged: set[str] = set()
    for ids in overlaps_by_day(schedule.tasks, schedule.settings).values():
        flagged |= ids

    lines = [f"Tasks in {schedule.name}:"]
    for i, t in enumerate(schedule.tasks, start=1):
        days = ",".join(DAY_SHORT_LABELS[d] for d in t.days)
        span = f"{format_time(t.start_time, clock)}-{format_time(t.end_time, clock)}"
        warn = "  [overlap]" if t.id in flagged else ""
        lines.append(f"{i}. {t.name} ({days} {span}, {duration_label(t.start_time, t.end_time)}) {t.color}{warn}")
        if t.description:
            lines.append(f"     {t.description}")
    return "\n".join(lines)


def render_grid(schedule: Schedule) -> str:
    """
    Week grid: one row per slot, one column per visible day.

    A cell lists tasks intersecting the slot; "!" marks a task that overlaps another that day.
    """
    settings = schedule.settings
    days = visible_days(settings)
    rows = slots(settings)
    flagged = overlaps_by_day(schedule.tasks, settings)
    step = settings.time_increment
    grid_end = settings.end_hour * 60

    header = " " * 10 + "".join(_fit(DAY_SHORT_LABELS[d]) for d in days)
    lines = [f"{schedule.name}", header]

    for slot in rows:
        start = to_minutes(slot)
        end = min(start + step, grid_end)
        cells: list[str] = []
        for day in days:
            names = [
                ("!" if t.id in flagged[day] else "") + t.name
                for t in schedule.tasks
                if day in t.days and to_minutes(t.start_time) < end and start < to_minutes(t.end_time)
            ]
            cells.append(_fit("/".join(names) if names else "."))
        lines.append(format_time(slot, settings.clock_format).rjust(9) + " " + "".join(cells))
    return "\n".join(lines)
