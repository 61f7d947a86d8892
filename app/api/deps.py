"""
Shared endpoint dependencies: the persistence port and the acting admin
"""

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.services.actor import Actor
from app.services.store import AssetStore


async def get_store(db: AsyncSession = Depends(get_db)) -> AssetStore:
    return AssetStore(db)


async def get_actor(admin_user: str = Header(..., alias=settings.ACTOR_HEADER)) -> Actor:
    """Acting admin taken from the actor header; blank names are rejected"""
    return Actor(admin_user)
