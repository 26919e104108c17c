"""Health endpoint tests for the NotSpot app."""

from __future__ import annotations

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health_endpoint(client: AsyncClient):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "healthy", "service": "notspot"}


@pytest.mark.asyncio
async def test_ready_endpoint(client: AsyncClient):
    resp = await client.get("/ready")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ready"


@pytest.mark.asyncio
async def test_responses_carry_correlation_id(client: AsyncClient):
    first = await client.get("/health")
    second = await client.get("/health")
    assert first.headers["X-Correlation-Id"]
    assert first.headers["X-Correlation-Id"] != second.headers["X-Correlation-Id"]
