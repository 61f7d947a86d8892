"""
SIM card schemas
"""

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict


class SimCreate(BaseModel):
    phone_number: str = Field(..., min_length=1, max_length=50)
    operator: Optional[str] = Field(None, max_length=100)
    iccid: Optional[str] = Field(None, max_length=255)
    plan_details: Optional[str] = None


class SimUpdate(BaseModel):
    phone_number: Optional[str] = Field(None, min_length=1, max_length=50)
    operator: Optional[str] = Field(None, max_length=100)
    iccid: Optional[str] = Field(None, max_length=255)
    plan_details: Optional[str] = None


class SimResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    phone_number: str
    operator: Optional[str] = None
    iccid: Optional[str] = None
    status: str
    current_user_id: Optional[str] = None
    plan_details: Optional[str] = None
    created_at: datetime
    updated_at: datetime
