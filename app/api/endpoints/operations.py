"""
Assignment endpoints: checkout (entrega) and check-in (devolução)
"""

from fastapi import APIRouter, Depends

from app.api.deps import get_actor, get_store
from app.schemas.operations import CheckoutRequest, CheckinRequest, AssignmentResponse
from app.services import assignment
from app.services.actor import Actor
from app.services.store import AssetStore

router = APIRouter()


def _response(payload, result) -> dict:
    return {
        "ok": True,
        "asset_kind": payload.asset_kind,
        "asset_id": result.asset.id,
        "status": result.asset.status,
        "user_id": result.user.id,
        "user_active": result.user.active,
        "term": result.term,
    }


@router.post("/checkout", response_model=AssignmentResponse)
async def checkout(
    payload: CheckoutRequest,
    store: AssetStore = Depends(get_store),
    actor: Actor = Depends(get_actor)
):
    """Assign an available device or SIM card to an active user"""
    accessories = None
    if payload.accessories is not None:
        accessories = [item.model_dump() for item in payload.accessories]
    result = await assignment.checkout(
        store,
        actor,
        payload.asset_kind,
        payload.asset_id,
        payload.user_id,
        notes=payload.notes,
        accessories=accessories,
        sync_sector=payload.sync_sector,
    )
    return _response(payload, result)


@router.post("/checkin", response_model=AssignmentResponse)
async def checkin(
    payload: CheckinRequest,
    store: AssetStore = Depends(get_store),
    actor: Actor = Depends(get_actor)
):
    """Return an in-use asset; optionally inactivate the holder afterwards"""
    result = await assignment.checkin(
        store,
        actor,
        payload.asset_kind,
        payload.asset_id,
        notes=payload.notes,
        returned_checklist=payload.returned_checklist,
        inactivate_user_after=payload.inactivate_user,
    )
    return _response(payload, result)
