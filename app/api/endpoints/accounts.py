"""
Software account endpoints
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Response

from app.api.deps import get_actor, get_store
from app.schemas.account import AccountCreate, AccountUpdate, AccountResponse
from app.services import registry
from app.services.actor import Actor
from app.services.store import AssetStore

router = APIRouter()


@router.get("", response_model=List[AccountResponse])
async def list_accounts(
    user_id: Optional[str] = None,
    device_id: Optional[str] = None,
    store: AssetStore = Depends(get_store)
):
    return await registry.list_accounts(store, user_id=user_id, device_id=device_id)


@router.post("", response_model=AccountResponse, status_code=201)
async def create_account(
    payload: AccountCreate,
    store: AssetStore = Depends(get_store),
    actor: Actor = Depends(get_actor)
):
    """Create an account owned by a user, a device, or neither (never both)"""
    return await registry.create_account(store, actor, payload.model_dump())


@router.get("/{account_id}", response_model=AccountResponse)
async def get_account(account_id: str, store: AssetStore = Depends(get_store)):
    return await registry.get_account(store, account_id)


@router.put("/{account_id}", response_model=AccountResponse)
async def update_account(
    account_id: str,
    payload: AccountUpdate,
    store: AssetStore = Depends(get_store),
    actor: Actor = Depends(get_actor)
):
    return await registry.update_account(store, actor, account_id, payload.model_dump(exclude_unset=True))


@router.delete("/{account_id}", status_code=204)
async def delete_account(
    account_id: str,
    store: AssetStore = Depends(get_store),
    actor: Actor = Depends(get_actor)
):
    await registry.delete_account(store, actor, account_id)
    return Response(status_code=204)
