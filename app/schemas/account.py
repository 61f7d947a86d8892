"""
Software account schemas
"""

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict

from app.models.account import AccountType


class AccountCreate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    name: str = Field(..., min_length=1, max_length=255)
    type: AccountType = AccountType.OTHER
    login: str = Field(..., min_length=1, max_length=255)
    password: Optional[str] = Field(None, max_length=255)
    access_url: Optional[str] = None
    status: str = Field(default="Ativo", pattern="^(Ativo|Inativo)$")
    user_id: Optional[str] = None
    device_id: Optional[str] = None
    sector_id: Optional[str] = None
    notes: Optional[str] = None


class AccountUpdate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    type: Optional[AccountType] = None
    login: Optional[str] = Field(None, min_length=1, max_length=255)
    password: Optional[str] = Field(None, max_length=255)
    access_url: Optional[str] = None
    status: Optional[str] = Field(None, pattern="^(Ativo|Inativo)$")
    user_id: Optional[str] = None
    device_id: Optional[str] = None
    sector_id: Optional[str] = None
    notes: Optional[str] = None


class AccountResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    type: str
    login: str
    password: Optional[str] = None
    access_url: Optional[str] = None
    status: str
    user_id: Optional[str] = None
    device_id: Optional[str] = None
    sector_id: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
