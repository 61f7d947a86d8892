"""
Checkout / check-in schemas
"""

from typing import Optional, List, Dict
from pydantic import BaseModel

from app.models.asset import AssetKind
from app.schemas.device import AccessoryItem
from app.schemas.user import TermResponse


class CheckoutRequest(BaseModel):
    """Assign an available asset to a user"""
    asset_kind: AssetKind
    asset_id: str
    user_id: str
    notes: Optional[str] = None
    accessories: Optional[List[AccessoryItem]] = None
    sync_sector: bool = False


class CheckinRequest(BaseModel):
    """Return an in-use asset from its current holder"""
    asset_kind: AssetKind
    asset_id: str
    notes: Optional[str] = None
    returned_checklist: Optional[Dict[str, bool]] = None
    inactivate_user: bool = False


class AssignmentResponse(BaseModel):
    ok: bool = True
    asset_kind: AssetKind
    asset_id: str
    status: str
    user_id: str
    user_active: bool
    term: TermResponse
