"""
User and term schemas
"""

from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict


class UserBase(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=255)
    cpf: str = Field(..., min_length=1, max_length=50)
    rg: Optional[str] = Field(None, max_length=50)
    pis: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None
    email: Optional[str] = Field(None, max_length=255)
    sector_id: Optional[str] = None
    internal_code: Optional[str] = Field(None, max_length=255)


class UserCreate(UserBase):
    """User creation schema. New users start active."""
    pass


class UserUpdate(BaseModel):
    """User update schema. The active flag changes through the lifecycle endpoints."""
    full_name: Optional[str] = Field(None, min_length=1, max_length=255)
    cpf: Optional[str] = Field(None, min_length=1, max_length=50)
    rg: Optional[str] = Field(None, max_length=50)
    pis: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None
    email: Optional[str] = Field(None, max_length=255)
    sector_id: Optional[str] = None
    internal_code: Optional[str] = Field(None, max_length=255)
    has_pending_issues: Optional[bool] = None
    pending_issues_note: Optional[str] = None


class TermResponse(BaseModel):
    """Delivery/return term"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    type: str
    asset_details: str
    asset_kind: Optional[str] = None
    asset_id: Optional[str] = None
    date: datetime
    file_url: Optional[str] = None
    has_file: bool
    is_resolved: bool


class UserResponse(UserBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    active: bool
    has_pending_issues: bool
    pending_issues_note: Optional[str] = None
    terms: List[TermResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class TermFileRequest(BaseModel):
    file_url: str = Field(..., min_length=1)
