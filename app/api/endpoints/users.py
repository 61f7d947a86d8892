"""
User registry and activation endpoints
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Body

from app.api.deps import get_actor, get_store
from app.schemas.common import ReasonRequest
from app.schemas.user import UserCreate, UserUpdate, UserResponse
from app.services import lifecycle, registry
from app.services.actor import Actor
from app.services.store import AssetStore

router = APIRouter()


@router.get("", response_model=List[UserResponse])
async def list_users(active: Optional[bool] = None, store: AssetStore = Depends(get_store)):
    return await registry.list_users(store, active=active)


@router.post("", response_model=UserResponse, status_code=201)
async def create_user(
    payload: UserCreate,
    store: AssetStore = Depends(get_store),
    actor: Actor = Depends(get_actor)
):
    """Register an active user; CPF and e-mail must be unique"""
    return await registry.create_user(store, actor, payload.model_dump())


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: str, store: AssetStore = Depends(get_store)):
    return await store.get_user(user_id)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    payload: UserUpdate,
    store: AssetStore = Depends(get_store),
    actor: Actor = Depends(get_actor)
):
    return await registry.update_user(store, actor, user_id, payload.model_dump(exclude_unset=True))


def _reason(payload: Optional[ReasonRequest]) -> Optional[str]:
    return payload.reason if payload else None


@router.post("/{user_id}/toggle-active", response_model=UserResponse)
async def toggle_active(
    user_id: str,
    payload: Optional[ReasonRequest] = Body(None),
    store: AssetStore = Depends(get_store),
    actor: Actor = Depends(get_actor)
):
    """Flip the active flag; inactivation requires no assets in the user's possession"""
    return await lifecycle.toggle_user_active(store, actor, user_id, _reason(payload))


@router.post("/{user_id}/activate", response_model=UserResponse)
async def activate(
    user_id: str,
    payload: ReasonRequest,
    store: AssetStore = Depends(get_store),
    actor: Actor = Depends(get_actor)
):
    return await lifecycle.set_user_active(store, actor, user_id, True, payload.reason)


@router.post("/{user_id}/inactivate", response_model=UserResponse)
async def inactivate(
    user_id: str,
    payload: Optional[ReasonRequest] = Body(None),
    store: AssetStore = Depends(get_store),
    actor: Actor = Depends(get_actor)
):
    return await lifecycle.set_user_active(store, actor, user_id, False, _reason(payload))
