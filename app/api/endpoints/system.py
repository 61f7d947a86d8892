"""
System information endpoints
"""

from datetime import datetime, timezone
from fastapi import APIRouter, Depends
from sqlalchemy import select, func

from app.api.deps import get_store
from app.core.config import settings
from app.models import Device, SimCard, User
from app.services.store import AssetStore

router = APIRouter()

# Store server start time
server_start_time = datetime.now(timezone.utc)


def format_uptime(uptime_seconds: float) -> str:
    """1d 2h 3m 4s, leading zero units omitted"""
    days, rest = divmod(int(uptime_seconds), 24 * 3600)
    hours, rest = divmod(rest, 3600)
    minutes, seconds = divmod(rest, 60)
    parts = [f"{value}{unit}" for value, unit in ((days, "d"), (hours, "h"), (minutes, "m")) if value]
    parts.append(f"{seconds}s")
    return " ".join(parts)


async def _count_by_status(store: AssetStore, model) -> dict:
    result = await store.session.execute(
        select(model.status, func.count(model.id)).group_by(model.status)
    )
    return {status: count for status, count in result.all()}


@router.get("/info")
async def get_system_info(store: AssetStore = Depends(get_store)):
    """Service name, version, uptime and a headcount of the registry"""
    current_time = datetime.now(timezone.utc)
    uptime_seconds = (current_time - server_start_time).total_seconds()

    active_users = await store.session.execute(
        select(func.count(User.id)).where(User.active.is_(True))
    )

    return {
        "app_name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "uptime": format_uptime(uptime_seconds),
        "uptime_seconds": int(uptime_seconds),
        "server_start_time": server_start_time.isoformat(),
        "current_time": current_time.isoformat(),
        "devices": await _count_by_status(store, Device),
        "sims": await _count_by_status(store, SimCard),
        "active_users": active_users.scalar() or 0,
    }
