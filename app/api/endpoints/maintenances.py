"""
Maintenance record removal
"""

from fastapi import APIRouter, Depends, Response

from app.api.deps import get_actor, get_store
from app.services import registry
from app.services.actor import Actor
from app.services.store import AssetStore

router = APIRouter()


@router.delete("/{record_id}", status_code=204)
async def delete_maintenance(
    record_id: str,
    store: AssetStore = Depends(get_store),
    actor: Actor = Depends(get_actor)
):
    """Delete a maintenance record; the removal is logged on the device"""
    await registry.delete_maintenance(store, actor, record_id)
    return Response(status_code=204)
