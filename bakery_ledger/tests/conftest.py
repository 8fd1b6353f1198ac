"""
Centralized Test Configuration.
"""

import os

# Point the application at SQLite before its engine is created on import
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from bakery_ledger.app.main import app
from bakery_ledger.app.db.session import get_db, Base
from bakery_ledger.app.core.locks import EntityLockRegistry, ledger_locks
from bakery_ledger.app.services.summary_cache import SummaryCache, get_redis
from bakery_ledger.app.domain.ledger.ledger_service import LedgerService
from bakery_ledger.app.domain.ledger.entities import create_entity
from bakery_ledger.app.domain.ledger.records import EntityKey
from bakery_ledger.app.models.ledger_enums import EntityType, PartyType
from bakery_ledger.tests.support import TODAY, MockRedis

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

@pytest.fixture
def redis_mock():
    return MockRedis()


@pytest.fixture
async def engine():
    """Fresh in-memory database per test."""
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(test_engine.sync_engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        """Enable foreign key constraints for SQLite."""
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture(autouse=True)
def reset_ledger_locks():
    """asyncio locks must not outlive the event loop of the test that created them."""
    ledger_locks.clear()
    yield
    ledger_locks.clear()


@pytest.fixture
def lock_registry():
    return EntityLockRegistry()


@pytest.fixture
def make_service(redis_mock, lock_registry):
    """Build a LedgerService over a given session with a fixed clock."""
    def _make(session, cache=None, today=TODAY):
        return LedgerService(
            session,
            cache=cache or SummaryCache(client=redis_mock, enabled=True),
            locks=lock_registry,
            clock=lambda: today,
        )
    return _make


@pytest.fixture
def service(db_session, make_service):
    return make_service(db_session)


@pytest.fixture
async def customer(db_session):
    return await create_entity(db_session, EntityType.CUSTOMER, "Sunrise Cafe")


@pytest.fixture
async def supplier(db_session):
    return await create_entity(db_session, EntityType.PARTY, "Golden Mills", party_type=PartyType.SUPPLIER)


@pytest.fixture
def customer_key(customer):
    return EntityKey(entity_type=EntityType.CUSTOMER, entity_id=customer.id)


@pytest.fixture
def supplier_key(supplier):
    return EntityKey(entity_type=EntityType.PARTY, entity_id=supplier.id)


@pytest.fixture
async def client(session_factory, redis_mock):
    """Async client for testing, wired to the per-test database and mock Redis."""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    async def override_get_redis():
        return redis_mock

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = override_get_redis

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides = {}
