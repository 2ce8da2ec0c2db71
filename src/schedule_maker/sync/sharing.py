# src/schedule_maker/sync/sharing.py

from __future__ import annotations

import logging

from ..core.models import RemoteSchedule
from ..core.ports import RemoteBackend
from ..store.schedule_store import ScheduleStore
from ..store.transfer import import_schedule

logger = logging.getLogger(__name__)


async def fetch_shared(backend: RemoteBackend, share_token: str) -> RemoteSchedule:
    """Read-only public lookup. Raises NotFoundError when the link is not (or no longer) public."""
    record = await backend.get_public(share_token.strip())
    logger.info("Loaded shared schedule %r (%d tasks)", record.name, len(record.tasks))
    return record


def import_shared(store: ScheduleStore, record: RemoteSchedule) -> str:
    """Copy a shared schedule into the local store as a new private guest schedule."""
    return import_schedule(store, record.to_dict())
