"""
Audit trail: append-only events carrying before/after snapshots
"""

import copy
import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import select, delete, func

from app.core.errors import EntityNotFound
from app.models import AuditLog, ActionType, AuditTarget
from app.services.actor import Actor
from app.services.diff import render_diff
from app.services.lookups import load_lookup_tables
from app.services.store import AssetStore

logger = logging.getLogger(__name__)


def record_event(
    store: AssetStore,
    *,
    asset_id: str,
    asset_type: AuditTarget,
    action: ActionType,
    actor: Actor,
    target_name: str = None,
    notes: str = None,
    previous_data: Optional[dict] = None,
    new_data: Optional[dict] = None,
    backup_data: Optional[dict] = None,
) -> AuditLog:
    """Add one audit entry to the store's current transaction.

    Snapshots are deep-copied at call time so later in-memory mutation of the
    source dicts cannot leak into the recorded history.
    """
    entry = AuditLog(
        asset_id=asset_id,
        asset_type=asset_type.value,
        target_name=target_name or "",
        action=action.value,
        timestamp=datetime.utcnow(),
        admin_user=actor.name,
        notes=notes or "",
        previous_data=copy.deepcopy(previous_data),
        new_data=copy.deepcopy(new_data),
        backup_data=copy.deepcopy(backup_data),
    )
    store.add(entry)
    return entry


def _newest_first(query):
    return query.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc())


async def list_history(store: AssetStore, asset_id: str) -> List[AuditLog]:
    """Every entry recorded for one asset, newest first"""
    result = await store.session.execute(
        _newest_first(select(AuditLog).where(AuditLog.asset_id == asset_id))
    )
    return list(result.scalars().all())


async def list_logs(store: AssetStore, limit: int, search: str = None) -> List[AuditLog]:
    query = select(AuditLog)
    if search:
        pattern = f"%{search}%"
        query = query.where(
            AuditLog.admin_user.ilike(pattern)
            | AuditLog.target_name.ilike(pattern)
            | AuditLog.action.ilike(pattern)
            | AuditLog.notes.ilike(pattern)
        )
    result = await store.session.execute(_newest_first(query).limit(limit))
    return list(result.scalars().all())


async def get_log(store: AssetStore, log_id: int) -> AuditLog:
    result = await store.session.execute(select(AuditLog).where(AuditLog.id == log_id))
    entry = result.scalar_one_or_none()
    if entry is None:
        raise EntityNotFound(f"Log não encontrado: {log_id}")
    return entry


async def clear_logs(store: AssetStore, actor: Actor) -> int:
    """Remove the whole trail in bulk; the clearing itself is recorded afterwards"""
    async with store.transaction("audit_logs"):
        count_result = await store.session.execute(select(func.count(AuditLog.id)))
        removed = count_result.scalar() or 0
        await store.session.execute(delete(AuditLog))
        record_event(
            store,
            asset_id="system",
            asset_type=AuditTarget.SYSTEM,
            action=ActionType.DELETE,
            actor=actor,
            target_name="Administração",
            notes=f"Histórico de auditoria limpo ({removed} registros removidos)",
        )
    logger.warning("Audit trail cleared by %s (%d rows)", actor, removed)
    return removed


async def describe_log(store: AssetStore, log_id: int) -> Tuple[AuditLog, List[dict]]:
    """Log row plus labelled diff rows resolved against the current lookup tables"""
    entry = await get_log(store, log_id)
    lookups = await load_lookup_tables(store)
    return entry, render_diff(entry.previous_data, entry.new_data, lookups)
