# src/schedule_maker/cli/commands.py

from __future__ import annotations

import inspect
import json
import logging
import shlex
from collections.abc import Awaitable, Callable
from pathlib import Path

from ..core.errors import RemoteError, ValidationError
from ..core.models import ALL_DAYS, DAY_SHORT_LABELS, Day, Schedule, Task
from ..core.palette import COLOR_PALETTE, DEFAULT_TASK_COLOR, get_color_option
from ..core.state import AppState
from ..core.timegrid import overlaps_by_day, visible_days
from ..store.transfer import dumps_schedule, export_filename, import_schedule
from ..sync.engine import SyncState
from ..sync.sharing import fetch_shared, import_shared
from .render import render_grid, render_tasks

CommandHandler = Callable[[AppState, list[str]], str | Awaitable[str]]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args" (shell-style quoting for names with spaces).
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError as e:
            return f"Could not parse command: {e}"
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            result = handler(state, args)
            if inspect.isawaitable(result):
                result = await result
        except ValidationError as e:
            return f"Invalid input: {e}"
        except RemoteError as e:
            logger.info("/%s remote failure: %s", name, e)
            return f"Remote error ({e.__class__.__name__}): {e}"
        return result

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- argument helpers ----


def _resolve_schedule(state: AppState, ref: str | None) -> Schedule | None:
    """1-based list index, local id (or prefix), or exact name (case-insensitive). None -> active."""
    schedules = state.store.schedules
    if ref is None:
        return state.store.active_schedule()
    if ref.isdigit():
        idx = int(ref) - 1
        return schedules[idx] if 0 <= idx < len(schedules) else None
    for s in schedules:
        if s.local_id == ref or s.local_id.startswith(ref) or s.name.lower() == ref.lower():
            return s
    return None


def _resolve_task(schedule: Schedule, ref: str) -> Task | None:
    if ref.isdigit():
        idx = int(ref) - 1
        return schedule.tasks[idx] if 0 <= idx < len(schedule.tasks) else None
    for t in schedule.tasks:
        if t.id.startswith(ref):
            return t
    return None


def _parse_days(raw: str, schedule: Schedule | None = None) -> list[Day]:
    """"mon,wed" | "weekdays" (visible days of the schedule) | "all"."""
    key = raw.strip().lower()
    if key == "all":
        return list(ALL_DAYS)
    if key == "weekdays":
        if schedule is None:
            return [Day.MON, Day.TUE, Day.WED, Day.THU, Day.FRI]
        return visible_days(schedule.settings)
    days = Day.parse_many(p for p in key.replace(" ", ",").split(",") if p)
    if not days:
        raise ValidationError(f"no valid days in {raw!r} (use e.g. mon,wed or weekdays)")
    return list(days)


def _parse_color(raw: str) -> str:
    opt = get_color_option(raw)
    return opt.pastel if opt else raw


def _parse_pairs(args: list[str]) -> dict[str, str]:
    out: dict[str, str] = {}
    for a in args:
        key, sep, value = a.partition("=")
        if not sep:
            raise ValidationError(f"expected key=value, got {a!r}")
        out[key.strip().lower()] = value.strip()
    return out


def _parse_on_off(raw: str) -> bool:
    v = raw.lower()
    if v in ("on", "1", "true", "yes"):
        return True
    if v in ("off", "0", "false", "no"):
        return False
    raise ValidationError(f"expected on/off, got {raw!r}")


def _no_active() -> str:
    return "No active schedule. Use /new <name> to create one."


# ---- commands ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    active = state.store.active_schedule()
    synced = sum(1 for s in state.store.schedules if s.is_synced)
    prefs = state.preferences.current
    backend = getattr(state.settings, "backend", "none")
    return (
        "Status:\n"
        f"  Schedules: {len(state.store.schedules)} ({synced} synced)\n"
        f"  Active: {active.name if active else '-'}\n"
        f"  Sync: {state.sync.state.value} (backend={backend}, in-flight={state.sync.pending_operations})\n"
        f"  Display: dark={'on' if prefs.dark_mode else 'off'} palette={prefs.palette_mode.value}"
    )


def cmd_list(state: AppState, args: list[str]) -> str:
    schedules = state.store.schedules
    if not schedules:
        return "No schedules. Use /new <name>."
    lines = ["Schedules:"]
    for i, s in enumerate(schedules, start=1):
        mark = "*" if s.local_id == state.store.active_id else " "
        sync = "synced" if s.is_synced else "local"
        public = ", public" if s.is_public else ""
        lines.append(f"{mark}{i}. {s.name} [{len(s.tasks)} tasks, {sync}{public}] id={s.local_id[:8]}")
    return "\n".join(lines)


def cmd_new(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /new <name>"
    local_id = state.store.create_schedule(" ".join(args))
    return f"Created schedule {state.store.get(local_id).name!r} (now active)."


def cmd_use(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /use <number|id|name>"
    schedule = _resolve_schedule(state, " ".join(args))
    if schedule is None:
        return "No such schedule. See /list."
    state.store.set_active(schedule.local_id)
    return f"Active schedule: {schedule.name}"


def cmd_rename(state: AppState, args: list[str]) -> str:
    active = state.store.active_schedule()
    if active is None:
        return _no_active()
    if not args:
        return "Usage: /rename <new name>"
    state.store.rename_schedule(active.local_id, " ".join(args))
    return f"Renamed to {' '.join(args).strip()!r}."


def cmd_delete(state: AppState, args: list[str]) -> str:
    schedule = _resolve_schedule(state, args[0] if args else None)
    if schedule is None:
        return "No such schedule. See /list."
    state.store.delete_schedule(schedule.local_id)
    return f"Deleted {schedule.name!r}."


def cmd_dup(state: AppState, args: list[str]) -> str:
    schedule = _resolve_schedule(state, args[0] if args else None)
    if schedule is None:
        return "No such schedule. See /list."
    new_id = state.store.duplicate_schedule(schedule.local_id)
    copy = state.store.get(new_id) if new_id else None
    return f"Duplicated as {copy.name!r} (now active)." if copy else "Duplicate failed."


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <name> <days> <start> <end> [color] [description...]
    e.g. /add "Math 101" mon,wed 09:00 10:15 green
    """
    active = state.store.active_schedule()
    if active is None:
        return _no_active()
    if len(args) < 4:
        return "Usage: /add <name> <days> <start HH:MM> <end HH:MM> [color] [description...]"
    name, days_raw, start, end, *rest = args
    color = _parse_color(rest[0]) if rest else DEFAULT_TASK_COLOR
    description = " ".join(rest[1:]) or None
    task_id = state.store.add_task(
        name=name,
        days=_parse_days(days_raw, active),
        start_time=start,
        end_time=end,
        color=color,
        description=description,
    )
    if task_id is None:
        return _no_active()
    return f"Added {name!r} to {active.name}."


def cmd_edit(state: AppState, args: list[str]) -> str:
    """/edit <task#> name=.. days=.. start=.. end=.. color=.. desc=.."""
    active = state.store.active_schedule()
    if active is None:
        return _no_active()
    if len(args) < 2:
        return "Usage: /edit <task#> name=.. days=.. start=.. end=.. color=.. desc=.."
    task = _resolve_task(active, args[0])
    if task is None:
        return "No such task. See /tasks."

    pairs = _parse_pairs(args[1:])
    unknown = set(pairs) - {"name", "days", "start", "end", "color", "desc"}
    if unknown:
        return f"Unknown fields: {', '.join(sorted(unknown))}"

    updated = Task(
        id=task.id,
        name=pairs.get("name", task.name),
        color=_parse_color(pairs["color"]) if "color" in pairs else task.color,
        days=tuple(_parse_days(pairs["days"], active)) if "days" in pairs else task.days,
        start_time=pairs.get("start", task.start_time),
        end_time=pairs.get("end", task.end_time),
        description=pairs.get("desc", task.description),
    )
    state.store.update_task(updated)
    return f"Updated {updated.name!r}."


def cmd_rm(state: AppState, args: list[str]) -> str:
    active = state.store.active_schedule()
    if active is None:
        return _no_active()
    if not args:
        return "Usage: /rm <task#>"
    task = _resolve_task(active, args[0])
    if task is None:
        return "No such task. See /tasks."
    state.store.remove_task(task.id)
    return f"Removed {task.name!r}."


def cmd_tasks(state: AppState, args: list[str]) -> str:
    active = state.store.active_schedule()
    return render_tasks(active) if active else _no_active()


def cmd_grid(state: AppState, args: list[str]) -> str:
    active = state.store.active_schedule()
    return render_grid(active) if active else _no_active()


def cmd_overlaps(state: AppState, args: list[str]) -> str:
    active = state.store.active_schedule()
    if active is None:
        return _no_active()
    names = {t.id: t.name for t in active.tasks}
    lines = []
    for day, ids in overlaps_by_day(active.tasks, active.settings).items():
        if ids:
            lines.append(f"  {DAY_SHORT_LABELS[day]}: {', '.join(sorted(names[i] for i in ids))}")
    if not lines:
        return "No overlapping tasks."
    return "Overlaps:\n" + "\n".join(lines)


def cmd_settings(state: AppState, args: list[str]) -> str:
    """
    /settings                                  -> show
    /settings weekends=on start=monday step=30 hours=7-20 clock=24h
    """
    active = state.store.active_schedule()
    if active is None:
        return _no_active()
    if not args:
        s = active.settings
        return (
            f"Settings for {active.name}:\n"
            f"  weekends={'on' if s.show_weekends else 'off'} start={s.start_of_week.value} "
            f"step={s.time_increment} hours={s.start_hour}-{s.end_hour} clock={s.clock_format.value}"
        )

    partial: dict[str, object] = {}
    for key, value in _parse_pairs(args).items():
        if key == "weekends":
            partial["show_weekends"] = _parse_on_off(value)
        elif key == "start":
            partial["start_of_week"] = value.lower()
        elif key == "step":
            partial["time_increment"] = int(value) if value.isdigit() else -1
        elif key == "hours":
            lo, _, hi = value.partition("-")
            if not (lo.isdigit() and hi.isdigit()):
                raise ValidationError("hours must look like 8-22")
            partial["start_hour"], partial["end_hour"] = int(lo), int(hi)
        elif key == "clock":
            partial["clock_format"] = value.lower()
        else:
            return f"Unknown setting {key!r}. Use weekends/start/step/hours/clock."
    state.store.update_settings(**partial)
    return "Settings updated."


async def cmd_login(state: AppState, args: list[str]) -> str:
    if state.backend is None:
        return "No remote backend configured (SCHEDULE_MAKER_BACKEND=none)."
    if state.sync.state == SyncState.STEADY:
        return "Already signed in."
    ok = await state.sync.sign_in(state.backend)
    if not ok:
        return "Sign-in sync failed; see logs. Try /login again."
    return f"Signed in. {len(state.store.schedules)} schedules after sync; guest schedules are being uploaded."


def cmd_logout(state: AppState, args: list[str]) -> str:
    if state.sync.state == SyncState.UNAUTHENTICATED:
        return "Not signed in."
    state.sync.sign_out()
    return "Signed out. Local schedules are kept."


async def cmd_share(state: AppState, args: list[str]) -> str:
    schedule = _resolve_schedule(state, args[0] if args else None)
    if schedule is None:
        return "No such schedule. See /list."
    token = await state.sync.toggle_sharing(schedule.local_id)
    if token is None:
        return f"Sharing disabled for {schedule.name!r}."
    return f"{schedule.name!r} is public. Share token: {token}"


async def cmd_open(state: AppState, args: list[str]) -> str:
    """/open <share token> -> copy a public schedule into your local schedules."""
    if state.backend is None:
        return "No remote backend configured."
    if not args:
        return "Usage: /open <share token>"
    record = await fetch_shared(state.backend, args[0])
    import_shared(state.store, record)
    return f"Imported shared schedule {record.name!r} ({len(record.tasks)} tasks) as a new local schedule."


def cmd_export(state: AppState, args: list[str]) -> str:
    active = state.store.active_schedule()
    if active is None:
        return _no_active()
    path = Path(args[0]) if args else Path(export_filename(active))
    try:
        path.write_text(dumps_schedule(active), "utf-8")
    except OSError as e:
        return f"Export failed: {e}"
    return f"Exported {active.name!r} to {path}"


def cmd_import(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /import <file.json>"
    path = Path(args[0])
    try:
        raw = path.read_text("utf-8")
    except OSError as e:
        return f"Import failed: {e}"
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        return f"Import failed: not valid JSON ({e.msg})"
    import_schedule(state.store, data)
    return f"Imported {data.get('name')!r} from {path} (now active)."


def cmd_prefs(state: AppState, args: list[str]) -> str:
    """
    /prefs               -> show
    /prefs dark          -> toggle dark mode
    /prefs palette bold  -> pastel | bold
    """
    prefs = state.preferences
    if args and args[0].lower() == "dark":
        on = prefs.toggle_dark_mode()
        return f"Dark mode {'on' if on else 'off'}."
    if len(args) >= 2 and args[0].lower() == "palette":
        try:
            prefs.set_palette_mode(args[1].lower())
        except ValueError:
            return "Palette must be pastel or bold."
        return f"Palette: {prefs.current.palette_mode.value}"
    colors = ", ".join(c.name.lower() for c in COLOR_PALETTE)
    cur = prefs.current
    return (
        f"Display: dark={'on' if cur.dark_mode else 'off'} palette={cur.palette_mode.value}\n"
        f"Colors: {colors}"
    )


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show schedules, sync state and display prefs.")
registry.register("list", cmd_list, help_text="List schedules (* = active).", aliases=["ls"])
registry.register("new", cmd_new, help_text="Create a schedule: /new <name>.")
registry.register("use", cmd_use, help_text="Switch active schedule: /use <number|id|name>.")
registry.register("rename", cmd_rename, help_text="Rename the active schedule.")
registry.register("delete", cmd_delete, help_text="Delete a schedule (default: active).")
registry.register("dup", cmd_dup, help_text="Duplicate a schedule as a new private copy.")
registry.register("add", cmd_add, help_text="Add a task: /add <name> <days> <start> <end> [color] [desc].")
registry.register("edit", cmd_edit, help_text="Edit a task: /edit <task#> field=value ...")
registry.register("rm", cmd_rm, help_text="Remove a task: /rm <task#>.")
registry.register("tasks", cmd_tasks, help_text="List tasks of the active schedule.")
registry.register("grid", cmd_grid, help_text="Show the week grid.")
registry.register("overlaps", cmd_overlaps, help_text="Show overlapping tasks per day.")
registry.register("settings", cmd_settings, help_text="Show/change grid settings.")
registry.register("login", cmd_login, help_text="Sign in and sync with the remote backend.")
registry.register("logout", cmd_logout, help_text="Stop syncing (local data is kept).")
registry.register("share", cmd_share, help_text="Toggle the public share link of a synced schedule.")
registry.register("open", cmd_open, help_text="Import a shared schedule: /open <token>.")
registry.register("export", cmd_export, help_text="Export the active schedule to JSON.")
registry.register("import", cmd_import, help_text="Import a schedule from JSON.")
registry.register("prefs", cmd_prefs, help_text="Display prefs: /prefs dark | /prefs palette pastel|bold.")
