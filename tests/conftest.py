"""Shared test fixtures and configuration."""

import os
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

# Keep tests away from any real Redis configured in the shell
os.environ.setdefault("REDIS_URL", "redis://127.0.0.1:1")
os.environ.setdefault("CACHE_TTL_WAREHOUSES", "300")

from app.database import create_session_factory, get_session_factory  # noqa: E402
from app.main import app  # noqa: E402
from app.models import Base, Warehouse, WarehouseData  # noqa: E402
from app.services.cache import CacheService, MemoryCacheBackend, get_cache  # noqa: E402
from app.warehouses.repository import WarehouseRepository, get_repository  # noqa: E402
from tests.helpers import FakeClock  # noqa: E402


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return CacheService(MemoryCacheBackend(maxsize=128, timer=clock))


@pytest.fixture
async def engine():
    """In-memory SQLite shared by every session of one test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def repository(session_factory):
    """Real repository with ``fetch_page`` wrapped in a call-count spy."""
    repo = WarehouseRepository(session_factory, isolation_level=None)
    repo.fetch_page = AsyncMock(wraps=repo.fetch_page)
    return repo


@pytest.fixture
def seed(session_factory):
    """Insert warehouses (and optional amenity rows) into the test database."""

    async def _seed(*warehouses: Warehouse, amenities: dict[int, dict] | None = None):
        async with session_factory() as session:
            session.add_all(warehouses)
            await session.flush()
            for warehouse_id, data in (amenities or {}).items():
                session.add(WarehouseData(warehouse_id=warehouse_id, **data))
            await session.commit()

    return _seed


@pytest.fixture
async def client(session_factory, repository, cache):
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_repository] = lambda: repository
    app.dependency_overrides[get_cache] = lambda: cache
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
