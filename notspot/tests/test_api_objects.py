"""Test CRM object API routes."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

BASE = "/crm/v3/objects"


async def _create(client: AsyncClient, object_type: str, **properties) -> dict:
    resp = await client.post(f"{BASE}/{object_type}", json={"properties": properties})
    assert resp.status_code == 201
    return resp.json()


@pytest.mark.asyncio
async def test_create_and_get_object(client: AsyncClient):
    created = await _create(client, "contacts", email="ada@example.com", firstname="Ada")
    assert created["properties"]["email"] == "ada@example.com"
    assert created["archived"] is False
    assert "createdAt" in created and "updatedAt" in created

    resp = await client.get(f"{BASE}/contacts/{created['id']}", params={"properties": "email,firstname"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["id"] == created["id"]
    assert body["properties"]["firstname"] == "Ada"
    assert "propertiesWithHistory" not in body


@pytest.mark.asyncio
async def test_non_string_values_are_stored_as_text(client: AsyncClient):
    created = await _create(client, "deals", dealname="Big", amount=1200)
    assert created["properties"]["amount"] == "1200"


@pytest.mark.asyncio
async def test_get_by_id_property(client: AsyncClient):
    created = await _create(client, "contacts", email="grace@example.com")
    resp = await client.get(
        f"{BASE}/contacts/grace@example.com", params={"idProperty": "email"}
    )
    assert resp.status_code == 200
    assert resp.json()["id"] == created["id"]


@pytest.mark.asyncio
async def test_properties_with_history(client: AsyncClient):
    created = await _create(client, "contacts", firstname="Ada")
    await client.patch(
        f"{BASE}/contacts/{created['id']}", json={"properties": {"firstname": "Augusta"}}
    )
    resp = await client.get(
        f"{BASE}/contacts/{created['id']}", params={"propertiesWithHistory": "firstname"}
    )
    history = resp.json()["propertiesWithHistory"]["firstname"]
    assert [h["value"] for h in history] == ["Augusta", "Ada"]
    assert history[0]["sourceType"] == "API"


@pytest.mark.asyncio
async def test_not_found_error_envelope(client: AsyncClient):
    resp = await client.get(f"{BASE}/contacts/999999")
    assert resp.status_code == 404
    body = resp.json()
    assert body["status"] == "error"
    assert body["category"] == "OBJECT_NOT_FOUND"
    assert body["correlationId"] == resp.headers["X-Correlation-Id"]

    resp = await client.get(f"{BASE}/spaceships")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_invalid_body_is_validation_error(client: AsyncClient):
    resp = await client.post(f"{BASE}/contacts", json={"nope": True})
    assert resp.status_code == 400
    body = resp.json()
    assert body["category"] == "VALIDATION_ERROR"
    assert body["message"].startswith("Invalid input JSON")


@pytest.mark.asyncio
async def test_number_validation(client: AsyncClient):
    resp = await client.post(f"{BASE}/deals", json={"properties": {"amount": "twelve"}})
    assert resp.status_code == 400
    assert resp.json()["category"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_update_and_archive(client: AsyncClient):
    created = await _create(client, "companies", name="Acme")
    resp = await client.patch(
        f"{BASE}/companies/{created['id']}", json={"properties": {"domain": "acme.test"}}
    )
    assert resp.status_code == 200
    assert resp.json()["properties"]["domain"] == "acme.test"

    resp = await client.delete(f"{BASE}/companies/{created['id']}")
    assert resp.status_code == 204

    listing = (await client.get(f"{BASE}/companies")).json()
    assert listing["results"] == []
    archived = (await client.get(f"{BASE}/companies", params={"archived": "true"})).json()
    assert [o["id"] for o in archived["results"]] == [created["id"]]


@pytest.mark.asyncio
async def test_list_paging_link(client: AsyncClient):
    ids = [(await _create(client, "tickets", subject=f"t{i}"))["id"] for i in range(3)]
    resp = await client.get(f"{BASE}/tickets", params={"limit": 2})
    body = resp.json()
    assert [o["id"] for o in body["results"]] == ids[:2]
    assert body["paging"]["next"]["after"] == ids[1]
    assert body["paging"]["next"]["link"] == f"{BASE}/tickets?after={ids[1]}"


@pytest.mark.asyncio
async def test_search(client: AsyncClient):
    for i in range(5):
        await _create(client, "contacts", email=f"user{i}@example.com", lifecyclestage="lead")
    resp = await client.post(f"{BASE}/contacts/search", json={
        "filterGroups": [{"filters": [
            {"propertyName": "lifecyclestage", "operator": "EQ", "value": "lead"},
        ]}],
        "properties": ["email"],
        "limit": 2,
    })
    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 5
    assert len(body["results"]) == 2
    assert body["paging"]["next"]["after"] == "2"


@pytest.mark.asyncio
async def test_search_rejects_bad_operator(client: AsyncClient):
    resp = await client.post(f"{BASE}/contacts/search", json={
        "filterGroups": [{"filters": [{"propertyName": "email", "operator": "SOUNDS_LIKE"}]}],
    })
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_batch_create_read_update_archive(client: AsyncClient):
    resp = await client.post(f"{BASE}/companies/batch/create", json={"inputs": [
        {"properties": {"name": "One"}},
        {"properties": {"name": "Two"}},
    ]})
    assert resp.status_code == 201
    body = resp.json()
    assert body["status"] == "COMPLETE"
    ids = [o["id"] for o in body["results"]]

    resp = await client.post(f"{BASE}/companies/batch/read", json={
        "inputs": [{"id": ids[0]}, {"id": "987654"}],
        "properties": ["name"],
    })
    read = resp.json()
    assert [o["properties"]["name"] for o in read["results"]] == ["One"]
    assert read["numErrors"] == 1

    resp = await client.post(f"{BASE}/companies/batch/update", json={"inputs": [
        {"id": ids[1], "properties": {"name": "Deux"}},
    ]})
    assert resp.json()["results"][0]["properties"]["name"] == "Deux"

    resp = await client.post(
        f"{BASE}/companies/batch/archive", json={"inputs": [{"id": i} for i in ids]}
    )
    assert resp.status_code == 204
    assert (await client.get(f"{BASE}/companies")).json()["results"] == []


@pytest.mark.asyncio
async def test_batch_upsert_contacts_by_email(client: AsyncClient):
    payload = {"inputs": [{"id": "ada@example.com", "properties": {"email": "ada@example.com"}}]}
    first = (await client.post(f"{BASE}/contacts/batch/upsert", json=payload)).json()
    payload["inputs"][0]["properties"] = {"firstname": "Ada"}
    second = (await client.post(f"{BASE}/contacts/batch/upsert", json=payload)).json()
    assert first["results"][0]["id"] == second["results"][0]["id"]
    assert second["results"][0]["properties"]["firstname"] == "Ada"


@pytest.mark.asyncio
async def test_batch_size_limit(client: AsyncClient):
    inputs = [{"properties": {"name": str(i)}} for i in range(101)]
    resp = await client.post(f"{BASE}/companies/batch/create", json={"inputs": inputs})
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_merge(client: AsyncClient):
    primary = await _create(client, "contacts", firstname="Ada")
    other = await _create(client, "contacts", firstname="Augusta", phone="555-0100")
    resp = await client.post(f"{BASE}/contacts/merge", json={
        "primaryObjectId": primary["id"],
        "objectIdToMerge": int(other["id"]),
    })
    assert resp.status_code == 200
    props = resp.json()["properties"]
    assert props["firstname"] == "Ada"
    assert props["phone"] == "555-0100"
