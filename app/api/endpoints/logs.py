"""
Audit trail endpoints: listing, detail, diff, per-asset history and administration
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query

from app.api.deps import get_actor, get_store
from app.core.config import settings
from app.schemas.audit import (
    AuditLogSummary,
    AuditLogDetail,
    LogDiffResponse,
    ClearLogsResponse,
    RestoreResponse
)
from app.services import audit, registry
from app.services.actor import Actor
from app.services.store import AssetStore

router = APIRouter()


@router.get("/logs", response_model=List[AuditLogSummary])
async def list_logs(
    limit: int = Query(default=settings.HISTORY_LIMIT, ge=1),
    search: Optional[str] = None,
    store: AssetStore = Depends(get_store)
):
    """Global trail, newest first, capped by HISTORY_LIMIT"""
    return await audit.list_logs(store, min(limit, settings.HISTORY_LIMIT), search)


@router.get("/logs/{log_id}", response_model=AuditLogDetail)
async def get_log(log_id: int, store: AssetStore = Depends(get_store)):
    """Full entry including the snapshot columns"""
    return await audit.get_log(store, log_id)


@router.get("/logs/{log_id}/diff", response_model=LogDiffResponse)
async def get_log_diff(log_id: int, store: AssetStore = Depends(get_store)):
    """Field-level changes of one entry, foreign keys resolved to names"""
    entry, rows = await audit.describe_log(store, log_id)
    changes = [
        {
            "field": row["field"],
            "raw_key": row["rawKey"],
            "old": row["old"],
            "new": row["new"],
            "old_display": row["oldDisplay"],
            "new_display": row["newDisplay"],
        }
        for row in rows
    ]
    return {"log": entry, "changes": changes}


@router.get("/history/{asset_id}", response_model=List[AuditLogSummary])
async def get_history(asset_id: str, store: AssetStore = Depends(get_store)):
    return await audit.list_history(store, asset_id)


@router.delete("/logs", response_model=ClearLogsResponse)
async def clear_logs(store: AssetStore = Depends(get_store), actor: Actor = Depends(get_actor)):
    """Remove the whole trail; the clearing itself stays recorded"""
    return {"removed": await audit.clear_logs(store, actor)}


@router.post("/logs/{log_id}/restore", response_model=RestoreResponse)
async def restore_from_log(
    log_id: int,
    store: AssetStore = Depends(get_store),
    actor: Actor = Depends(get_actor)
):
    """Re-create a deleted SIM card, account or catalog entry from its backup"""
    entry = await audit.get_log(store, log_id)
    instance = await registry.restore_from_log(store, actor, log_id)
    return {"asset_type": entry.asset_type, "asset_id": instance.id, "record": instance.snapshot()}
