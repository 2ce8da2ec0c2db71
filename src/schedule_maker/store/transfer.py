# src/schedule_maker/store/transfer.py

from __future__ import annotations

"""
JSON export/import of a single schedule.

The file format is {"name", "tasks", "settings"}, the same camelCase shapes the
store persists. Imports always create a new local schedule with fresh task ids.
"""

import json
import logging
import re
from collections.abc import Mapping
from typing import Any

from ..core.errors import ValidationError
from ..core.models import Schedule, ScheduleSettings, Task
from .schedule_store import ScheduleStore, clean_settings, clean_task

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME = re.compile(r"[^a-zA-Z0-9]")


def export_schedule(schedule: Schedule) -> dict[str, Any]:
    return {
        "name": schedule.name,
        "tasks": [t.to_dict() for t in schedule.tasks],
        "settings": schedule.settings.to_dict(),
    }


def dumps_schedule(schedule: Schedule) -> str:
    return json.dumps(export_schedule(schedule), ensure_ascii=False, indent=2)


def export_filename(schedule: Schedule) -> str:
    return f"{_UNSAFE_FILENAME.sub('_', schedule.name)}.json"


def import_schedule(store: ScheduleStore, data: Mapping[str, Any] | str) -> str:
    """
    Create a schedule from exported data and make it active. Returns its local id.

    Raises ValidationError before touching the store if the payload is not a
    schedule export or any task in it is invalid.
    """
    if isinstance(data, str):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as e:
            raise ValidationError(f"not valid JSON: {e.msg}") from e

    if not isinstance(data, Mapping) or not data.get("name") or not isinstance(data.get("tasks"), list):
        raise ValidationError("Invalid schedule file format")

    tasks = [clean_task(Task.from_dict(t)) for t in data["tasks"] if isinstance(t, Mapping)]

    settings_raw = data.get("settings")
    settings = clean_settings(
        ScheduleSettings.from_dict(settings_raw if isinstance(settings_raw, Mapping) else None)
    )

    local_id = store.create_schedule(str(data["name"]))
    store.update_settings(
        show_weekends=settings.show_weekends,
        start_of_week=settings.start_of_week,
        time_increment=settings.time_increment,
        start_hour=settings.start_hour,
        end_hour=settings.end_hour,
        clock_format=settings.clock_format,
    )
    for t in tasks:
        store.add_task(
            name=t.name,
            days=t.days,
            start_time=t.start_time,
            end_time=t.end_time,
            color=t.color,
            description=t.description,
        )
    logger.info("Imported schedule %r with %d tasks as local_id=%s", data["name"], len(tasks), local_id)
    return local_id
