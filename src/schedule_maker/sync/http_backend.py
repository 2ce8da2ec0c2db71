# src/schedule_maker/sync/http_backend.py

from __future__ import annotations

"""
RemoteBackend over HTTP (JSON REST).

    GET    /schedules                      -> [summary, ...]
    GET    /schedules/{id}                 -> record
    GET    /public/{token}                 -> record (no auth)
    POST   /schedules                      {"name"} -> {"id"}
    PATCH  /schedules/{id}                 {"name"?, "tasks"?, "settings"?}
    DELETE /schedules/{id}
    POST   /schedules/{id}/toggle-public   -> {"shareToken": str | null}

No retries: every call is at-most-once and failures are
reported to the sync engine as RemoteError subclasses.
"""

import logging
from typing import Any

import httpx

from ..core.errors import NetworkError, NotAuthenticatedError, NotFoundError, OwnershipError, RemoteError
from ..core.models import RemoteSchedule, RemoteScheduleSummary, ScheduleSettings, Task

logger = logging.getLogger(__name__)


def _make_timeout(seconds: float) -> httpx.Timeout:
    connect = min(5.0, seconds)
    return httpx.Timeout(connect=connect, read=seconds, write=seconds, pool=connect)


def _raise_for_status(resp: httpx.Response) -> None:
    code = resp.status_code
    if code < 400:
        return
    detail = resp.text[:200]
    if code == 401:
        raise NotAuthenticatedError(detail or "not authenticated")
    if code == 403:
        raise OwnershipError(detail or "forbidden")
    if code == 404:
        raise NotFoundError(detail or "not found")
    if code >= 500:
        raise NetworkError(f"server error {code}: {detail}")
    raise RemoteError(f"unexpected status {code}: {detail}")


class HttpBackend:
    def __init__(
        self,
        base_url: str,
        *,
        token: str | None = None,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._token = token
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=_make_timeout(float(timeout_seconds)),
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> HttpBackend:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        payload: dict[str, Any] | None = None,
        auth: bool = True,
    ) -> httpx.Response:
        headers: dict[str, str] = {}
        if auth:
            if not self._token:
                raise NotAuthenticatedError("no API token configured")
            headers["Authorization"] = f"Bearer {self._token}"

        try:
            resp = await self._client.request(method, path, json=payload, headers=headers)
        except httpx.TransportError as e:
            raise NetworkError(f"{method} {path}: {e.__class__.__name__}: {e}") from e

        logger.debug("%s %s -> %s", method, path, resp.status_code)
        _raise_for_status(resp)
        return resp

    @staticmethod
    def _json(resp: httpx.Response) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            raise RemoteError(f"invalid JSON from server: {e}") from e

    # ---- RemoteBackend ----

    async def list_schedules(self) -> list[RemoteScheduleSummary]:
        data = self._json(await self._request("GET", "/schedules"))
        if not isinstance(data, list):
            raise RemoteError("expected a list of schedules")
        return [RemoteScheduleSummary.from_dict(item) for item in data if isinstance(item, dict)]

    async def get_schedule(self, schedule_id: str) -> RemoteSchedule:
        data = self._json(await self._request("GET", f"/schedules/{schedule_id}"))
        if not isinstance(data, dict):
            raise RemoteError("expected a schedule object")
        return RemoteSchedule.from_dict(data)

    async def get_public(self, share_token: str) -> RemoteSchedule:
        data = self._json(await self._request("GET", f"/public/{share_token}", auth=False))
        if not isinstance(data, dict):
            raise RemoteError("expected a schedule object")
        return RemoteSchedule.from_dict(data)

    async def create_schedule(self, name: str) -> str:
        data = self._json(await self._request("POST", "/schedules", payload={"name": name}))
        schedule_id = data.get("id") if isinstance(data, dict) else None
        if not schedule_id:
            raise RemoteError("create returned no id")
        return str(schedule_id)

    async def update_schedule(
        self,
        schedule_id: str,
        *,
        name: str | None = None,
        tasks: list[Task] | tuple[Task, ...] | None = None,
        settings: ScheduleSettings | None = None,
    ) -> None:
        patch: dict[str, Any] = {}
        if name is not None:
            patch["name"] = name
        if tasks is not None:
            patch["tasks"] = [t.to_dict() for t in tasks]
        if settings is not None:
            patch["settings"] = settings.to_dict()
        if not patch:
            return
        await self._request("PATCH", f"/schedules/{schedule_id}", payload=patch)

    async def delete_schedule(self, schedule_id: str) -> None:
        try:
            await self._request("DELETE", f"/schedules/{schedule_id}")
        except NotFoundError:
            logger.debug("DELETE /schedules/%s: already gone", schedule_id)

    async def toggle_public(self, schedule_id: str) -> str | None:
        data = self._json(await self._request("POST", f"/schedules/{schedule_id}/toggle-public"))
        token = data.get("shareToken") if isinstance(data, dict) else None
        return str(token) if token else None
