"""
Device and maintenance schemas
"""

from typing import Optional, List, Dict, Any
from datetime import date, datetime
from pydantic import BaseModel, Field, ConfigDict

from app.models.asset import MaintenanceType


class AccessoryItem(BaseModel):
    """Accessory handed out with a device"""
    model_config = ConfigDict(from_attributes=True)

    accessory_type_id: Optional[str] = None
    name: str = Field(..., min_length=1, max_length=255)


class DeviceBase(BaseModel):
    """Registry fields of a device"""
    model_config = ConfigDict(protected_namespaces=())

    model_id: Optional[str] = None
    serial_number: Optional[str] = Field(None, max_length=255)
    asset_tag: Optional[str] = Field(None, max_length=255)
    internal_code: Optional[str] = Field(None, max_length=255)
    imei: Optional[str] = Field(None, max_length=255)
    pulsus_id: Optional[str] = Field(None, max_length=255)
    sector_id: Optional[str] = None
    cost_center: Optional[str] = Field(None, max_length=255)
    purchase_date: Optional[date] = None
    purchase_cost: Optional[float] = Field(None, ge=0)
    invoice_number: Optional[str] = Field(None, max_length=255)
    supplier: Optional[str] = Field(None, max_length=255)
    purchase_invoice_url: Optional[str] = None
    custom_data: Dict[str, str] = Field(default_factory=dict)


class DeviceCreate(DeviceBase):
    """Device creation schema"""
    accessories: List[AccessoryItem] = Field(default_factory=list)


class DeviceUpdate(BaseModel):
    """Device update schema (all fields optional, lifecycle fields excluded)"""
    model_config = ConfigDict(protected_namespaces=())

    model_id: Optional[str] = None
    serial_number: Optional[str] = Field(None, max_length=255)
    asset_tag: Optional[str] = Field(None, max_length=255)
    internal_code: Optional[str] = Field(None, max_length=255)
    imei: Optional[str] = Field(None, max_length=255)
    pulsus_id: Optional[str] = Field(None, max_length=255)
    sector_id: Optional[str] = None
    cost_center: Optional[str] = Field(None, max_length=255)
    purchase_date: Optional[date] = None
    purchase_cost: Optional[float] = Field(None, ge=0)
    invoice_number: Optional[str] = Field(None, max_length=255)
    supplier: Optional[str] = Field(None, max_length=255)
    purchase_invoice_url: Optional[str] = None
    custom_data: Optional[Dict[str, str]] = None


class DeviceResponse(DeviceBase):
    """Device response schema"""
    model_config = ConfigDict(from_attributes=True, protected_namespaces=())

    id: str
    status: str
    current_user_id: Optional[str] = None
    linked_sim_id: Optional[str] = None
    custom_data: Optional[Dict[str, Any]] = None
    accessories: List[AccessoryItem] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class LinkSimRequest(BaseModel):
    """Link, swap (new id) or unlink (null) the SIM card of a device"""
    sim_id: Optional[str] = None


class MaintenanceCreate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    type: MaintenanceType = MaintenanceType.CORRECTIVE
    date: Optional[datetime] = None
    description: Optional[str] = None
    cost: float = Field(default=0.0, ge=0)
    provider: Optional[str] = Field(None, max_length=255)
    invoice_url: Optional[str] = None


class MaintenanceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    device_id: str
    type: str
    date: datetime
    description: Optional[str] = None
    cost: Optional[float] = None
    provider: Optional[str] = None
    invoice_url: Optional[str] = None
