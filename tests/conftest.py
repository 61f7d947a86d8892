"""
Pytest configuration and fixtures
"""
import os

# Settings are read at import time; point them at an in-memory database first
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SEED_CATALOG", "false")

from typing import AsyncGenerator

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app import create_app
from app.core.database import get_db
from app.models import (
    Base, AuditLog, Device, DeviceModel, DeviceStatus, Sector, SimCard, User
)
from app.services.actor import Actor
from app.services.store import AssetStore, KeyedLock

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh in-memory database per test"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_maker = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )

    async with session_maker() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def store(db_session) -> AssetStore:
    return AssetStore(db_session, locks=KeyedLock())


@pytest.fixture
def actor() -> Actor:
    return Actor("Admin Teste")


@pytest.fixture
async def client(db_session) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the test session"""
    app = create_app()

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# --- seed helpers (bypass the registry so histories start empty) ---------------

@pytest.fixture
def seed(db_session):
    """Insert rows directly and return them committed"""

    class Seeder:
        async def _commit(self, instance):
            db_session.add(instance)
            await db_session.commit()
            return instance

        async def sector(self, name="T.I."):
            return await self._commit(Sector(name=name))

        async def model(self, name="Galaxy A54"):
            return await self._commit(DeviceModel(name=name))

        async def user(self, full_name="Maria Silva", cpf="111.111.111-11", **fields):
            fields.setdefault("active", True)
            return await self._commit(User(full_name=full_name, cpf=cpf, terms=[], **fields))

        async def device(self, asset_tag="TAG-001", **fields):
            fields.setdefault("status", DeviceStatus.AVAILABLE.value)
            fields.setdefault("serial_number", f"SN-{asset_tag}")
            fields.setdefault("imei", f"IMEI-{asset_tag}")
            return await self._commit(
                Device(asset_tag=asset_tag, custom_data={}, accessories=[], **fields)
            )

        async def sim(self, phone_number="11 99999-0001", **fields):
            fields.setdefault("status", DeviceStatus.AVAILABLE.value)
            return await self._commit(SimCard(phone_number=phone_number, **fields))

    return Seeder()


@pytest.fixture
def log_count(db_session):
    """Number of audit rows, optionally for one asset"""

    async def count(asset_id: str = None) -> int:
        query = select(func.count(AuditLog.id))
        if asset_id:
            query = query.where(AuditLog.asset_id == asset_id)
        result = await db_session.execute(query)
        return result.scalar()

    return count
