"""
Database connection and initialization
"""

import logging
from typing import AsyncGenerator
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from app.core.config import settings
from app.models.base import Base
from app.models.catalog import AssetType, AccessoryType, Sector

logger = logging.getLogger(__name__)


def _engine_options(url: str) -> dict:
    options = {"echo": settings.DATABASE_ECHO, "future": True, "pool_pre_ping": True}
    if not url.startswith("sqlite"):
        options.update(pool_size=20, max_overflow=0)
    return options


# Create async engine
engine = create_async_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency to get database session"""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db():
    """Initialize database and create tables"""
    async with engine.begin() as conn:
        # Create all tables
        import app.models  # noqa: F401  registers every table on Base.metadata
        await conn.run_sync(Base.metadata.create_all)

    if settings.SEED_CATALOG:
        async with AsyncSessionLocal() as session:
            await seed_catalog(session)


DEFAULT_ASSET_TYPES = ["Notebook", "Smartphone", "Tablet", "Monitor"]
DEFAULT_ACCESSORY_TYPES = ["Carregador Original", "Mouse Sem Fio", "Mochila", "Capa Protetora"]
DEFAULT_SECTORS = ["Vendas", "Administrativo", "T.I.", "Logística"]


async def seed_catalog(session: AsyncSession):
    """Seed the default catalog when the tables are empty"""
    seeds = [
        (AssetType, DEFAULT_ASSET_TYPES),
        (AccessoryType, DEFAULT_ACCESSORY_TYPES),
        (Sector, DEFAULT_SECTORS),
    ]
    for model, names in seeds:
        result = await session.execute(select(model).limit(1))
        if result.scalars().first():
            continue  # Already seeded
        for name in names:
            session.add(model(name=name))
        logger.info("Seeded %d %s rows", len(names), model.__tablename__)

    await session.commit()
