"""Audit trail — automatic entries for regulation writes."""
import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_regulation_writes_are_logged(client: AsyncClient, seed_types, seed_project):
    pid = seed_project["id"]
    r = await client.post(
        f"/api/v1/projects/{pid}/regulations",
        json={"name": "coverage", "type_id": seed_types["Threshold"], "config": "80"},
        headers={"X-User-Id": "7"},
    )
    rid = r.json()["id"]
    await client.put(f"/api/v1/projects/{pid}/regulations/{rid}", json={"config": "85"})

    r = await client.get("/api/v1/audit-log", params={"entity_type": "regulations", "entity_id": rid})
    assert r.status_code == 200
    page = r.json()
    actions = {(x["action"], x["field_name"]) for x in page["items"]}
    assert ("create", None) in actions
    assert ("update", "config") in actions

    created = next(x for x in page["items"] if x["action"] == "create")
    assert created["module"] == "regulations"
    assert created["user_id"] == 7

    change = next(x for x in page["items"] if x["field_name"] == "config")
    assert change["old_value"] == "80"
    assert change["new_value"] == "85"


@pytest.mark.asyncio
async def test_status_writes_are_logged(client: AsyncClient, seed_types, seed_project):
    pid = seed_project["id"]
    rid = (await client.post(
        f"/api/v1/projects/{pid}/regulations",
        json={"name": "signed", "type_id": seed_types["Boolean"]},
    )).json()["id"]
    await client.post(f"/api/v1/projects/{pid}/regulations/{rid}/versions/cat-100/report",
                      json={"value": "true"})

    r = await client.get("/api/v1/audit-log", params={"entity_type": "regulation_statuses"})
    fields = {x["field_name"]: x["new_value"] for x in r.json()["items"]}
    assert fields["value"] == "true"
    assert fields["is_compliant"] == "True"


@pytest.mark.asyncio
async def test_audit_log_pagination(client: AsyncClient, seed_types, seed_project):
    pid = seed_project["id"]
    for i in range(3):
        await client.post(f"/api/v1/projects/{pid}/regulations",
                          json={"name": f"r{i}", "type_id": seed_types["Boolean"]})

    r = await client.get("/api/v1/audit-log",
                         params={"entity_type": "regulations", "action": "create", "per_page": 2})
    page = r.json()
    assert page["total"] == 3
    assert len(page["items"]) == 2
    assert page["per_page"] == 2
    assert page["pages"] == 2

    r = await client.get("/api/v1/audit-log",
                         params={"entity_type": "regulations", "action": "create", "per_page": 2, "page": 2})
    assert len(r.json()["items"]) == 1


@pytest.mark.asyncio
async def test_audit_log_rejects_unknown_action(client: AsyncClient):
    r = await client.get("/api/v1/audit-log", params={"action": "rename"})
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_status_entries_point_at_status_row(client: AsyncClient, seed_types, seed_project):
    pid = seed_project["id"]
    rid = (await client.post(
        f"/api/v1/projects/{pid}/regulations",
        json={"name": "coverage", "type_id": seed_types["Threshold"], "config": "80"},
    )).json()["id"]
    pair = f"/api/v1/projects/{pid}/regulations/{rid}/versions/cat-100"
    await client.put(f"{pair}/value", json={"value": "70"})
    status_id = (await client.put(f"{pair}/value", json={"value": "75"})).json()["id"]

    r = await client.get("/api/v1/audit-log", params={
        "entity_type": "regulation_statuses", "entity_id": status_id, "per_page": 200,
    })
    value_entries = {x["action"]: x for x in r.json()["items"] if x["field_name"] == "value"}
    assert value_entries["create"]["old_value"] is None
    assert value_entries["create"]["new_value"] == "70"
    assert value_entries["update"]["old_value"] == "70"
    assert value_entries["update"]["new_value"] == "75"

    await client.delete(f"{pair}/status")
    r = await client.get("/api/v1/audit-log", params={
        "entity_type": "regulation_statuses", "entity_id": status_id, "action": "delete",
    })
    assert r.json()["total"] == 1
