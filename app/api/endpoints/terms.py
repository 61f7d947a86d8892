"""
Term attachment endpoints
"""

from typing import Optional
from fastapi import APIRouter, Depends

from app.api.deps import get_actor, get_store
from app.schemas.common import FileUrlResponse, ReasonRequest
from app.schemas.user import TermFileRequest, TermResponse
from app.services import terms
from app.services.actor import Actor
from app.services.store import AssetStore

router = APIRouter()


@router.get("/{term_id}/file", response_model=FileUrlResponse)
async def get_term_file(term_id: str, store: AssetStore = Depends(get_store)):
    """Lazy fetch of the signed copy"""
    return {"id": term_id, "file_url": await terms.fetch_term_file(store, term_id)}


@router.put("/{term_id}/file", response_model=TermResponse)
async def attach_term_file(
    term_id: str,
    payload: TermFileRequest,
    store: AssetStore = Depends(get_store),
    actor: Actor = Depends(get_actor)
):
    return await terms.attach_file(store, actor, term_id, payload.file_url)


@router.delete("/{term_id}/file", response_model=TermResponse)
async def remove_term_file(
    term_id: str,
    reason: Optional[str] = None,
    store: AssetStore = Depends(get_store),
    actor: Actor = Depends(get_actor)
):
    """Clear the signed copy; a reason is required"""
    return await terms.remove_file(store, actor, term_id, reason)


@router.post("/{term_id}/resolve", response_model=TermResponse)
async def resolve_pendency(
    term_id: str,
    payload: ReasonRequest,
    store: AssetStore = Depends(get_store),
    actor: Actor = Depends(get_actor)
):
    """Close the missing-file pendency without a scanned copy"""
    return await terms.resolve_pendency(store, actor, term_id, payload.reason)
