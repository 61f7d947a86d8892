"""
SIM card registry endpoints
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Response

from app.api.deps import get_actor, get_store
from app.schemas.sim import SimCreate, SimUpdate, SimResponse
from app.services import registry
from app.services.actor import Actor
from app.services.store import AssetStore

router = APIRouter()


@router.get("", response_model=List[SimResponse])
async def list_sims(status: Optional[str] = None, store: AssetStore = Depends(get_store)):
    return await registry.list_sims(store, status=status)


@router.post("", response_model=SimResponse, status_code=201)
async def create_sim(
    payload: SimCreate,
    store: AssetStore = Depends(get_store),
    actor: Actor = Depends(get_actor)
):
    """Register a SIM card; phone number and ICCID must be unique"""
    return await registry.create_sim(store, actor, payload.model_dump())


@router.get("/{sim_id}", response_model=SimResponse)
async def get_sim(sim_id: str, store: AssetStore = Depends(get_store)):
    return await store.get_sim(sim_id)


@router.put("/{sim_id}", response_model=SimResponse)
async def update_sim(
    sim_id: str,
    payload: SimUpdate,
    store: AssetStore = Depends(get_store),
    actor: Actor = Depends(get_actor)
):
    return await registry.update_sim(store, actor, sim_id, payload.model_dump(exclude_unset=True))


@router.delete("/{sim_id}", status_code=204)
async def delete_sim(
    sim_id: str,
    reason: Optional[str] = None,
    store: AssetStore = Depends(get_store),
    actor: Actor = Depends(get_actor)
):
    """Hard delete; only an available, unlinked SIM can be removed"""
    await registry.delete_sim(store, actor, sim_id, reason)
    return Response(status_code=204)
