"""Test list API routes."""

from __future__ import annotations

import pytest
from httpx import AsyncClient


async def _contact(client: AsyncClient, email: str) -> str:
    resp = await client.post("/crm/v3/objects/contacts", json={"properties": {"email": email}})
    return resp.json()["id"]


async def _list(client: AsyncClient, name: str, **extra) -> dict:
    resp = await client.post(
        "/crm/v3/lists", json={"name": name, "objectTypeId": "0-1", **extra}
    )
    assert resp.status_code == 200
    return resp.json()


@pytest.mark.asyncio
async def test_create_get_and_fetch_many(client: AsyncClient):
    first = await _list(client, "Customers")
    second = await _list(client, "Prospects")
    assert first["processingType"] == "MANUAL"

    resp = await client.get(f"/crm/v3/lists/{first['listId']}")
    assert resp.status_code == 200
    assert resp.json()["name"] == "Customers"

    resp = await client.get(
        "/crm/v3/lists/", params={"listId": f"{first['listId']},{second['listId']},999"}
    )
    assert [lst["name"] for lst in resp.json()["lists"]] == ["Customers", "Prospects"]

    resp = await client.get("/crm/v3/lists")
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_create_errors(client: AsyncClient):
    resp = await client.post("/crm/v3/lists", json={"objectTypeId": "0-1"})
    assert resp.status_code == 400
    assert resp.json()["category"] == "VALIDATION_ERROR"

    await _list(client, "Twice")
    resp = await client.post("/crm/v3/lists", json={"name": "Twice", "objectTypeId": "0-1"})
    assert resp.status_code == 409

    resp = await client.get("/crm/v3/lists/424242")
    assert resp.status_code == 404
    assert resp.json()["category"] == "OBJECT_NOT_FOUND"


@pytest.mark.asyncio
async def test_search(client: AsyncClient):
    for name in ("Alpha", "Alpine", "Beta"):
        await _list(client, name)
    resp = await client.post("/crm/v3/lists/search", json={"query": "Alp", "count": 1})
    body = resp.json()
    assert [lst["name"] for lst in body["lists"]] == ["Alpha"]
    assert body["total"] == 2
    assert body["hasMore"] is True
    assert body["offset"] == 1


@pytest.mark.asyncio
async def test_rename_filters_delete_restore(client: AsyncClient):
    lst = await _list(client, "Draft")
    list_id = lst["listId"]

    resp = await client.put(f"/crm/v3/lists/{list_id}/update-list-name", json={"name": "Final"})
    assert resp.json()["name"] == "Final"
    assert resp.json()["listVersion"] == 2

    branch = {"filterBranchType": "AND", "filters": []}
    resp = await client.put(
        f"/crm/v3/lists/{list_id}/update-list-filters", json={"filterBranch": branch}
    )
    assert resp.json()["filterBranch"] == branch

    assert (await client.delete(f"/crm/v3/lists/{list_id}")).status_code == 204
    assert (await client.get(f"/crm/v3/lists/{list_id}")).status_code == 404
    assert (await client.put(f"/crm/v3/lists/{list_id}/restore")).status_code == 204
    assert (await client.get(f"/crm/v3/lists/{list_id}")).status_code == 200


@pytest.mark.asyncio
async def test_membership_routes(client: AsyncClient):
    a = await _contact(client, "a@example.com")
    b = await _contact(client, "b@example.com")
    list_id = (await _list(client, "Members"))["listId"]

    resp = await client.put(f"/crm/v3/lists/{list_id}/memberships/add", json=[a, int(b), "999999"])
    body = resp.json()
    assert body["recordIdsAdded"] == [a, b]
    assert body["recordsIdsAdded"] == [a, b]
    assert body["recordIdsMissing"] == ["999999"]
    assert body["recordIdsRemoved"] == []

    resp = await client.get(f"/crm/v3/lists/{list_id}/memberships", params={"limit": 1})
    body = resp.json()
    assert body["results"][0]["recordId"] == a
    assert body["results"][0]["listId"] == list_id
    assert body["paging"]["next"]["after"] == a

    resp = await client.put(
        f"/crm/v3/lists/{list_id}/memberships/add-and-remove",
        json={"recordIdsToAdd": [], "recordIdsToRemove": [a]},
    )
    assert resp.json()["recordsIdsRemoved"] == [a]
    assert (await client.get(f"/crm/v3/lists/{list_id}")).json()["size"] == 1

    resp = await client.put(f"/crm/v3/lists/{list_id}/memberships/remove", json=[b])
    assert resp.json()["recordIdsRemoved"] == [b]

    assert (await client.delete(f"/crm/v3/lists/{list_id}/memberships")).status_code == 204


@pytest.mark.asyncio
async def test_dynamic_list_membership_is_read_only(client: AsyncClient):
    a = await _contact(client, "a@example.com")
    list_id = (await _list(client, "Smart", processingType="DYNAMIC"))["listId"]
    resp = await client.put(f"/crm/v3/lists/{list_id}/memberships/add", json=[a])
    assert resp.status_code == 400
    resp = await client.get(f"/crm/v3/lists/{list_id}/memberships")
    assert resp.json() == {"results": []}
