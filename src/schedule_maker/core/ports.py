# src/schedule_maker/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the store and the sync engine.

The core depends on Protocols instead of concrete implementations, so the
remote backend and the local persistence can be swapped (and faked in tests).
"""

from typing import Any, Protocol

from .models import RemoteSchedule, RemoteScheduleSummary, ScheduleSettings, Task


class KeyValueStorage(Protocol):
    """Durable local key/value records (JSON-compatible values)."""

    def get(self, key: str) -> Any | None: ...
    def put(self, key: str, value: Any) -> None: ...
    def delete(self, key: str) -> None: ...


class RemoteBackend(Protocol):
    """
    Ownership-scoped schedule persistence.

    The owner identity is supplied by the authentication collaborator that built
    the backend instance. Every call is independent and at-most-once; failures
    are raised as core.errors.RemoteError subclasses.
    """

    async def list_schedules(self) -> list[RemoteScheduleSummary]: ...

    async def get_schedule(self, schedule_id: str) -> RemoteSchedule: ...

    # No authentication required.
    async def get_public(self, share_token: str) -> RemoteSchedule: ...

    async def create_schedule(self, name: str) -> str: ...

    async def update_schedule(
        self,
        schedule_id: str,
        *,
        name: str | None = None,
        tasks: list[Task] | tuple[Task, ...] | None = None,
        settings: ScheduleSettings | None = None,
    ) -> None: ...

    async def delete_schedule(self, schedule_id: str) -> None: ...

    # Returns the new share token, or None when sharing got disabled.
    async def toggle_public(self, schedule_id: str) -> str | None: ...
