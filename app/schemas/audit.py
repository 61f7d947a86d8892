"""
Audit log schemas
"""

from typing import Optional, List, Any, Dict
from datetime import datetime
from pydantic import BaseModel, ConfigDict


class AuditLogSummary(BaseModel):
    """Listing row, without snapshot columns"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    asset_id: str
    asset_type: str
    target_name: Optional[str] = None
    action: str
    timestamp: datetime
    admin_user: str
    notes: Optional[str] = None
    has_diff: bool


class AuditLogDetail(AuditLogSummary):
    previous_data: Optional[Any] = None
    new_data: Optional[Any] = None
    backup_data: Optional[Any] = None


class DiffRowResponse(BaseModel):
    field: str
    raw_key: str
    old: Any = None
    new: Any = None
    old_display: str
    new_display: str


class LogDiffResponse(BaseModel):
    log: AuditLogSummary
    changes: List[DiffRowResponse]


class ClearLogsResponse(BaseModel):
    removed: int


class RestoreResponse(BaseModel):
    asset_type: str
    asset_id: str
    record: Dict[str, Any]
