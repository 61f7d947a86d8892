"""
Device registry and lifecycle endpoints
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Body

from app.api.deps import get_actor, get_store
from app.schemas.common import FileUrlResponse, NotesRequest, ReasonRequest
from app.schemas.device import (
    DeviceCreate,
    DeviceUpdate,
    DeviceResponse,
    LinkSimRequest,
    MaintenanceCreate,
    MaintenanceResponse
)
from app.services import lifecycle, registry, terms
from app.services.actor import Actor
from app.services.store import AssetStore

router = APIRouter()


@router.get("", response_model=List[DeviceResponse])
async def list_devices(
    status: Optional[str] = None,
    user_id: Optional[str] = None,
    store: AssetStore = Depends(get_store)
):
    """List devices, optionally filtered by status or holder"""
    return await registry.list_devices(store, status=status, user_id=user_id)


@router.post("", response_model=DeviceResponse, status_code=201)
async def create_device(
    payload: DeviceCreate,
    store: AssetStore = Depends(get_store),
    actor: Actor = Depends(get_actor)
):
    """Register a new device (Available, no holder)"""
    return await registry.create_device(store, actor, payload.model_dump())


@router.get("/{device_id}", response_model=DeviceResponse)
async def get_device(device_id: str, store: AssetStore = Depends(get_store)):
    return await store.get_device(device_id)


@router.put("/{device_id}", response_model=DeviceResponse)
async def update_device(
    device_id: str,
    payload: DeviceUpdate,
    store: AssetStore = Depends(get_store),
    actor: Actor = Depends(get_actor)
):
    """Update registry fields; status and holder are not editable here"""
    return await registry.update_device(store, actor, device_id, payload.model_dump(exclude_unset=True))


@router.post("/{device_id}/retire", response_model=DeviceResponse)
async def retire_device(
    device_id: str,
    payload: ReasonRequest,
    store: AssetStore = Depends(get_store),
    actor: Actor = Depends(get_actor)
):
    """Retire a device, freeing its holder and its linked SIM"""
    return await lifecycle.retire_device(store, actor, device_id, payload.reason)


@router.post("/{device_id}/restore", response_model=DeviceResponse)
async def restore_device(
    device_id: str,
    payload: ReasonRequest,
    store: AssetStore = Depends(get_store),
    actor: Actor = Depends(get_actor)
):
    return await lifecycle.restore_device(store, actor, device_id, payload.reason)


@router.post("/{device_id}/maintenance", response_model=DeviceResponse)
async def toggle_maintenance(
    device_id: str,
    payload: Optional[NotesRequest] = Body(None),
    store: AssetStore = Depends(get_store),
    actor: Actor = Depends(get_actor)
):
    """Send an available device to maintenance, or bring it back"""
    notes = payload.notes if payload else None
    return await lifecycle.toggle_maintenance(store, actor, device_id, notes)


@router.post("/{device_id}/linked-sim", response_model=DeviceResponse)
async def set_linked_sim(
    device_id: str,
    payload: LinkSimRequest,
    store: AssetStore = Depends(get_store),
    actor: Actor = Depends(get_actor)
):
    """Link, swap or unlink (sim_id null) the device's SIM card"""
    return await lifecycle.set_linked_sim(store, actor, device_id, payload.sim_id)


@router.get("/{device_id}/invoice", response_model=FileUrlResponse)
async def get_invoice(device_id: str, store: AssetStore = Depends(get_store)):
    """Lazy fetch of the purchase invoice attachment"""
    return {"id": device_id, "file_url": await terms.fetch_invoice(store, device_id)}


@router.get("/{device_id}/maintenances", response_model=List[MaintenanceResponse])
async def list_maintenances(device_id: str, store: AssetStore = Depends(get_store)):
    return await registry.list_maintenances(store, device_id)


@router.post("/{device_id}/maintenances", response_model=MaintenanceResponse, status_code=201)
async def add_maintenance(
    device_id: str,
    payload: MaintenanceCreate,
    store: AssetStore = Depends(get_store),
    actor: Actor = Depends(get_actor)
):
    return await registry.add_maintenance(store, actor, device_id, payload.model_dump(exclude_unset=True))
