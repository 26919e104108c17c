"""Async test fixtures for NotSpot tests using in-memory SQLite."""

from __future__ import annotations

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from notspot.database import build_engine, get_db
from notspot.models.base import Base
from notspot.services import object_svc, seed_svc


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest_asyncio.fixture
async def engine():
    eng = build_engine("sqlite+aiosqlite:///:memory:")
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    session_factory = async_sessionmaker(eng, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        await seed_svc.seed_all(session)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def db(engine):
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def contact(db: AsyncSession):
    return await object_svc.create_object(
        db, "contacts", {"email": "ada@example.com", "firstname": "Ada", "lastname": "Lovelace"}
    )


@pytest_asyncio.fixture
async def company(db: AsyncSession):
    return await object_svc.create_object(
        db, "companies", {"name": "Analytical Engines", "domain": "engines.example.com"}
    )


@pytest_asyncio.fixture
async def client(engine):
    """HTTPX async test client against the NotSpot app."""
    from notspot.app import app

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
