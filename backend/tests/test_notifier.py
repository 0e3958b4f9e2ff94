"""Regulation change notifier — best-effort delivery to the upload service."""
import asyncio
import json
import time
from datetime import datetime

import httpx
import pytest
from httpx import AsyncClient

from app.main import app as fastapi_app
from app.services.notifier import (
    EVENTS_PATH,
    RegulationChangedEvent,
    RegulationChangeKind,
    RegulationChangeNotifier,
    get_notifier,
)


def _event() -> RegulationChangedEvent:
    return RegulationChangedEvent(
        kind=RegulationChangeKind.UPDATED,
        project_id=7,
        regulation_name="coverage",
        occurred_at=datetime(2024, 5, 1, 12, 30),
    )


def test_payload():
    assert _event().to_payload() == {
        "event_type": "RegulationChanged",
        "kind": "updated",
        "project_id": 7,
        "regulation_name": "coverage",
        "occurred_at": "2024-05-01T12:30:00",
    }


@pytest.mark.asyncio
async def test_notify_posts_event():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(202)

    notifier = RegulationChangeNotifier("http://upload:8080/", transport=httpx.MockTransport(handler))
    assert await notifier.notify(_event()) is True

    assert len(seen) == 1
    assert seen[0].method == "POST"
    assert str(seen[0].url) == f"http://upload:8080{EVENTS_PATH}"
    assert json.loads(seen[0].content)["regulation_name"] == "coverage"


@pytest.mark.asyncio
async def test_notify_server_error_is_swallowed():
    transport = httpx.MockTransport(lambda request: httpx.Response(500))
    notifier = RegulationChangeNotifier("http://upload:8080", transport=transport)
    assert await notifier.notify(_event()) is False


@pytest.mark.asyncio
async def test_notify_connection_error_is_swallowed():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    notifier = RegulationChangeNotifier("http://upload:8080", transport=httpx.MockTransport(handler))
    assert await notifier.notify(_event()) is False


@pytest.mark.asyncio
async def test_notify_disabled_without_endpoint():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    notifier = RegulationChangeNotifier("", transport=httpx.MockTransport(handler))
    assert notifier.is_enabled is False
    assert await notifier.notify(_event()) is False


def _slow_notifier(seen: list, delay: float) -> RegulationChangeNotifier:
    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(delay)
        seen.append(json.loads(request.content))
        return httpx.Response(202)

    return RegulationChangeNotifier("http://upload:8080", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_notify_later_returns_before_delivery():
    seen = []
    notifier = _slow_notifier(seen, 0.2)

    task = notifier.notify_later(_event())
    assert seen == []
    assert not task.done()

    await notifier.drain()
    assert task.result() is True
    assert len(seen) == 1


@pytest.mark.asyncio
async def test_drain_without_pending_events():
    notifier = RegulationChangeNotifier("http://upload:8080")
    await notifier.drain()


@pytest.mark.asyncio
async def test_slow_upload_service_does_not_delay_response(client: AsyncClient, seed_types, seed_project):
    seen = []
    slow = _slow_notifier(seen, 1.0)
    fastapi_app.dependency_overrides[get_notifier] = lambda: slow

    started = time.monotonic()
    r = await client.post(
        f"/api/v1/projects/{seed_project['id']}/regulations",
        json={"name": "coverage", "type_id": seed_types["Threshold"], "config": "80"},
    )
    elapsed = time.monotonic() - started

    assert r.status_code == 201
    assert elapsed < 0.5
    assert seen == []

    await slow.drain()
    assert [e["kind"] for e in seen] == ["created"]
    assert seen[0]["regulation_name"] == "coverage"
