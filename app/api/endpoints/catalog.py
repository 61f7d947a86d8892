"""
Catalog endpoints: brands, models, asset-types, sectors, accessory-types, custom-fields
"""

from typing import List
from fastapi import APIRouter, Depends, Response

from app.api.deps import get_actor, get_store
from app.schemas.catalog import CatalogEntryCreate, CatalogEntryUpdate, CatalogEntryResponse
from app.services import registry
from app.services.actor import Actor
from app.services.store import AssetStore

router = APIRouter()


@router.get("/{kind}", response_model=List[CatalogEntryResponse])
async def list_entries(kind: str, store: AssetStore = Depends(get_store)):
    return await registry.list_catalog(store, kind)


@router.post("/{kind}", response_model=CatalogEntryResponse, status_code=201)
async def create_entry(
    kind: str,
    payload: CatalogEntryCreate,
    store: AssetStore = Depends(get_store),
    actor: Actor = Depends(get_actor)
):
    """Create a catalog entry; names are unique within a kind (models excepted)"""
    return await registry.create_catalog_entry(store, actor, kind, payload.model_dump(exclude_unset=True))


@router.get("/{kind}/{entry_id}", response_model=CatalogEntryResponse)
async def get_entry(kind: str, entry_id: str, store: AssetStore = Depends(get_store)):
    return await registry.get_catalog_entry(store, kind, entry_id)


@router.put("/{kind}/{entry_id}", response_model=CatalogEntryResponse)
async def update_entry(
    kind: str,
    entry_id: str,
    payload: CatalogEntryUpdate,
    store: AssetStore = Depends(get_store),
    actor: Actor = Depends(get_actor)
):
    return await registry.update_catalog_entry(
        store, actor, kind, entry_id, payload.model_dump(exclude_unset=True)
    )


@router.delete("/{kind}/{entry_id}", status_code=204)
async def delete_entry(
    kind: str,
    entry_id: str,
    store: AssetStore = Depends(get_store),
    actor: Actor = Depends(get_actor)
):
    """Delete an entry that nothing references anymore"""
    await registry.delete_catalog_entry(store, actor, kind, entry_id)
    return Response(status_code=204)
