# tests/test_http_backend.py

from __future__ import annotations

import json

import httpx
import pytest

from schedule_maker.core.errors import (
    NetworkError,
    NotAuthenticatedError,
    NotFoundError,
    OwnershipError,
    RemoteError,
)
from schedule_maker.core.models import Day, ScheduleSettings, Task
from schedule_maker.sync.http_backend import HttpBackend

RECORD = {
    "id": "r1",
    "name": "Week",
    "tasks": [
        {"id": "t1", "name": "Math", "color": "#DBEAFE", "days": ["mon", "wed"], "startTime": "09:00", "endTime": "10:00"}
    ],
    "settings": {"showWeekends": True, "startOfWeek": "monday", "timeIncrement": 30, "startHour": 7, "endHour": 20, "clockFormat": "24h"},
    "isPublic": False,
    "shareToken": None,
    "createdAt": 1,
    "updatedAt": 2,
}


class Recorder:
    def __init__(self, responder) -> None:
        self.requests: list[httpx.Request] = []
        self._responder = responder

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._responder(request)


def _backend(responder, token: str | None = "secret") -> tuple[HttpBackend, Recorder]:
    rec = Recorder(responder)
    return HttpBackend("http://api.test/", token=token, transport=httpx.MockTransport(rec)), rec


@pytest.mark.asyncio
async def test_get_schedule_parses_record_and_sends_bearer() -> None:
    backend, rec = _backend(lambda req: httpx.Response(200, json=RECORD))
    async with backend:
        out = await backend.get_schedule("r1")

    assert out.id == "r1"
    assert out.tasks[0].days == (Day.MON, Day.WED)
    assert out.settings.time_increment == 30
    req = rec.requests[0]
    assert req.method == "GET"
    assert req.url.path == "/schedules/r1"
    assert req.headers["Authorization"] == "Bearer secret"


@pytest.mark.asyncio
async def test_list_schedules() -> None:
    summary = {"id": "r1", "name": "Week", "taskCount": 3, "isPublic": True, "shareToken": "tok", "createdAt": 1, "updatedAt": 2}
    backend, _ = _backend(lambda req: httpx.Response(200, json=[summary]))
    async with backend:
        out = await backend.list_schedules()
    assert len(out) == 1
    assert out[0].task_count == 3
    assert out[0].share_token == "tok"


@pytest.mark.asyncio
async def test_create_and_update_payloads() -> None:
    def responder(req: httpx.Request) -> httpx.Response:
        if req.method == "POST":
            return httpx.Response(201, json={"id": "new-id"})
        return httpx.Response(204)

    backend, rec = _backend(responder)
    task = Task(id="t1", name="Gym", color="#DCFCE7", days=(Day.FRI,), start_time="18:00", end_time="19:00")
    async with backend:
        rid = await backend.create_schedule("Fresh")
        await backend.update_schedule(rid, tasks=[task], settings=ScheduleSettings(show_weekends=True))
        await backend.update_schedule(rid)  # nothing to send

    assert rid == "new-id"
    assert len(rec.requests) == 2
    assert json.loads(rec.requests[0].content) == {"name": "Fresh"}

    patch = rec.requests[1]
    assert patch.method == "PATCH"
    assert patch.url.path == "/schedules/new-id"
    body = json.loads(patch.content)
    assert "name" not in body
    assert body["tasks"][0]["startTime"] == "18:00"
    assert body["settings"]["showWeekends"] is True


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("status", "exc"),
    [(401, NotAuthenticatedError), (403, OwnershipError), (404, NotFoundError), (503, NetworkError), (409, RemoteError)],
)
async def test_status_codes_map_to_remote_errors(status: int, exc: type[Exception]) -> None:
    backend, _ = _backend(lambda req: httpx.Response(status, text="nope"))
    async with backend:
        with pytest.raises(exc):
            await backend.get_schedule("r1")


@pytest.mark.asyncio
async def test_transport_failure_is_network_error() -> None:
    def responder(req: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=req)

    backend, _ = _backend(responder)
    async with backend:
        with pytest.raises(NetworkError):
            await backend.list_schedules()


@pytest.mark.asyncio
async def test_missing_token_fails_before_sending() -> None:
    backend, rec = _backend(lambda req: httpx.Response(200, json=[]), token=None)
    async with backend:
        with pytest.raises(NotAuthenticatedError):
            await backend.list_schedules()
    assert rec.requests == []


@pytest.mark.asyncio
async def test_public_lookup_needs_no_token() -> None:
    backend, rec = _backend(lambda req: httpx.Response(200, json={**RECORD, "isPublic": True, "shareToken": "tok"}), token=None)
    async with backend:
        out = await backend.get_public("tok")
    assert out.is_public
    assert rec.requests[0].url.path == "/public/tok"
    assert "Authorization" not in rec.requests[0].headers


@pytest.mark.asyncio
async def test_delete_tolerates_missing_and_toggle_returns_token() -> None:
    def responder(req: httpx.Request) -> httpx.Response:
        if req.method == "DELETE":
            return httpx.Response(404)
        return httpx.Response(200, json={"shareToken": "abc"})

    backend, _ = _backend(responder)
    async with backend:
        await backend.delete_schedule("gone")
        assert await backend.toggle_public("r1") == "abc"


@pytest.mark.asyncio
async def test_invalid_json_is_remote_error() -> None:
    backend, _ = _backend(lambda req: httpx.Response(200, text="<html>"))
    async with backend:
        with pytest.raises(RemoteError):
            await backend.list_schedules()
