"""
Pydantic schemas for request/response validation
"""

from app.schemas.common import ErrorResponse, ReasonRequest, NotesRequest, FileUrlResponse
from app.schemas.device import (
    AccessoryItem,
    DeviceCreate,
    DeviceUpdate,
    DeviceResponse,
    LinkSimRequest,
    MaintenanceCreate,
    MaintenanceResponse
)
from app.schemas.sim import SimCreate, SimUpdate, SimResponse
from app.schemas.user import UserCreate, UserUpdate, UserResponse, TermResponse, TermFileRequest
from app.schemas.account import AccountCreate, AccountUpdate, AccountResponse
from app.schemas.catalog import CatalogEntryCreate, CatalogEntryUpdate, CatalogEntryResponse
from app.schemas.operations import CheckoutRequest, CheckinRequest, AssignmentResponse
from app.schemas.audit import (
    AuditLogSummary,
    AuditLogDetail,
    DiffRowResponse,
    LogDiffResponse,
    ClearLogsResponse,
    RestoreResponse
)

__all__ = [
    "ErrorResponse",
    "ReasonRequest",
    "NotesRequest",
    "FileUrlResponse",
    "AccessoryItem",
    "DeviceCreate",
    "DeviceUpdate",
    "DeviceResponse",
    "LinkSimRequest",
    "MaintenanceCreate",
    "MaintenanceResponse",
    "SimCreate",
    "SimUpdate",
    "SimResponse",
    "UserCreate",
    "UserUpdate",
    "UserResponse",
    "TermResponse",
    "TermFileRequest",
    "AccountCreate",
    "AccountUpdate",
    "AccountResponse",
    "CatalogEntryCreate",
    "CatalogEntryUpdate",
    "CatalogEntryResponse",
    "CheckoutRequest",
    "CheckinRequest",
    "AssignmentResponse",
    "AuditLogSummary",
    "AuditLogDetail",
    "DiffRowResponse",
    "LogDiffResponse",
    "ClearLogsResponse",
    "RestoreResponse"
]
