# tests/test_timegrid.py

from __future__ import annotations

import pytest

from schedule_maker.core.models import ClockFormat, Day, ScheduleSettings, StartOfWeek, Task
from schedule_maker.core.timegrid import (
    duration_label,
    format_12h,
    format_time,
    from_minutes,
    is_valid_time,
    overlaps,
    overlaps_by_day,
    slots,
    task_position,
    tasks_overlap,
    time_suggestions,
    to_minutes,
    visible_days,
    week_order,
    weekend_days,
)


def _task(tid: str, start: str, end: str, days=(Day.MON,)) -> Task:
    return Task(id=tid, name=tid, color="#DBEAFE", days=tuple(days), start_time=start, end_time=end)


def test_minutes_roundtrip_for_every_minute_of_the_day() -> None:
    for m in range(0, 1440, 7):
        assert to_minutes(from_minutes(m)) == m


def test_to_minutes_is_tolerant() -> None:
    assert to_minutes("09:30") == 570
    assert to_minutes("9:05") == 545
    assert to_minutes("xx:15") == 15
    assert to_minutes("") == 0


def test_from_minutes_wraps_hours() -> None:
    assert from_minutes(1440) == "00:00"
    assert from_minutes(1500) == "01:00"


def test_is_valid_time() -> None:
    assert is_valid_time("00:00")
    assert is_valid_time("23:59")
    assert not is_valid_time("24:00")
    assert not is_valid_time("12:60")
    assert not is_valid_time("noon")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("00:30", "12:30 AM"), ("09:05", "9:05 AM"), ("12:00", "12:00 PM"), ("13:05", "1:05 PM"), ("23:59", "11:59 PM")],
)
def test_format_12h(raw: str, expected: str) -> None:
    assert format_12h(raw) == expected


def test_format_time_24h_normalizes() -> None:
    assert format_time("9:05", ClockFormat.H24) == "09:05"
    assert format_time("13:00", ClockFormat.H12) == "1:00 PM"


def test_duration_label() -> None:
    assert duration_label("09:00", "10:30") == "1h 30m"
    assert duration_label("09:00", "11:00") == "2h"
    assert duration_label("09:00", "09:45") == "45m"
    assert duration_label("10:00", "09:00") == "0m"


def test_slots_cover_range_with_step() -> None:
    settings = ScheduleSettings(start_hour=8, end_hour=22, time_increment=60)
    out = slots(settings)
    assert len(out) == 14
    assert out[0] == "08:00"
    assert out[-1] == "21:00"

    half = slots(ScheduleSettings(start_hour=9, end_hour=11, time_increment=30))
    assert half == ["09:00", "09:30", "10:00", "10:30"]


def test_slots_include_final_partial_period() -> None:
    settings = ScheduleSettings(start_hour=8, end_hour=10, time_increment=45)
    assert slots(settings) == ["08:00", "08:45", "09:30"]


def test_slots_empty_for_degenerate_settings() -> None:
    assert slots(ScheduleSettings(start_hour=10, end_hour=10)) == []
    assert slots(ScheduleSettings(time_increment=0)) == []


def test_time_suggestions() -> None:
    out = time_suggestions(15)
    assert len(out) == 96
    assert out[:2] == ["00:00", "00:15"]
    assert out[-1] == "23:45"


@pytest.mark.parametrize(
    ("start", "first", "weekend"),
    [
        (StartOfWeek.SUNDAY, Day.SUN, (Day.FRI, Day.SAT)),
        (StartOfWeek.MONDAY, Day.MON, (Day.SAT, Day.SUN)),
        (StartOfWeek.SATURDAY, Day.SAT, (Day.THU, Day.FRI)),
    ],
)
def test_week_order_rotation_and_positional_weekend(start, first, weekend) -> None:
    order = week_order(start)
    assert order[0] == first
    assert sorted(order) == sorted(Day)
    assert weekend_days(start) == weekend


def test_visible_days_hides_last_two_positions() -> None:
    monday = ScheduleSettings(start_of_week=StartOfWeek.MONDAY)
    assert visible_days(monday) == [Day.MON, Day.TUE, Day.WED, Day.THU, Day.FRI]

    # Saturday start hides Thursday and Friday, not the calendar weekend.
    saturday = ScheduleSettings(start_of_week=StartOfWeek.SATURDAY)
    assert visible_days(saturday) == [Day.SAT, Day.SUN, Day.MON, Day.TUE, Day.WED]

    with_weekends = ScheduleSettings(show_weekends=True)
    assert len(visible_days(with_weekends)) == 7


def test_task_position_is_clamped_to_grid() -> None:
    settings = ScheduleSettings(start_hour=8, end_hour=18)
    top, height = task_position(_task("a", "09:00", "10:00"), settings)
    assert top == pytest.approx(10.0)
    assert height == pytest.approx(10.0)

    top, height = task_position(_task("b", "17:00", "20:00"), settings)
    assert top == pytest.approx(90.0)
    assert top + height == pytest.approx(100.0)

    top, height = task_position(_task("c", "06:00", "09:00"), settings)
    assert top == 0.0
    assert 0.0 <= height <= 100.0


def test_touching_tasks_do_not_overlap() -> None:
    a = _task("a", "09:00", "10:00")
    b = _task("b", "10:00", "11:00")
    assert not tasks_overlap(a, b, Day.MON)
    assert overlaps([a, b], Day.MON) == set()


def test_overlap_is_symmetric_and_day_scoped() -> None:
    a = _task("a", "09:00", "10:30", days=(Day.MON, Day.TUE))
    b = _task("b", "10:00", "11:00", days=(Day.MON,))
    c = _task("c", "12:00", "13:00", days=(Day.MON,))
    assert tasks_overlap(a, b, Day.MON) and tasks_overlap(b, a, Day.MON)
    assert overlaps([a, b, c], Day.MON) == {"a", "b"}
    assert overlaps([a, b, c], Day.TUE) == set()


def test_overlaps_by_day_uses_visible_days() -> None:
    a = _task("a", "09:00", "10:00", days=(Day.SAT,))
    b = _task("b", "09:30", "10:30", days=(Day.SAT,))
    hidden = overlaps_by_day([a, b], ScheduleSettings())
    assert Day.SAT not in hidden

    shown = overlaps_by_day([a, b], ScheduleSettings(show_weekends=True))
    assert shown[Day.SAT] == {"a", "b"}
