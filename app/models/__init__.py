"""
Database models for IT Asset 360
"""

from app.models.base import Base
from app.models.catalog import Brand, AssetType, DeviceModel, Sector, AccessoryType, CustomField
from app.models.asset import (
    Device, DeviceAccessory, DeviceStatus, AssetKind, MaintenanceRecord, MaintenanceType, SimCard
)
from app.models.user import User, Term, TermType
from app.models.account import SoftwareAccount, AccountType
from app.models.audit import AuditLog, ActionType, AuditTarget

__all__ = [
    "Base",
    "Brand",
    "AssetType",
    "DeviceModel",
    "Sector",
    "AccessoryType",
    "CustomField",
    "Device",
    "DeviceAccessory",
    "DeviceStatus",
    "AssetKind",
    "MaintenanceRecord",
    "MaintenanceType",
    "SimCard",
    "User",
    "Term",
    "TermType",
    "SoftwareAccount",
    "AccountType",
    "AuditLog",
    "ActionType",
    "AuditTarget",
]
