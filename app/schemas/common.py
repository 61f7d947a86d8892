"""
Common schemas used across the application
"""

from typing import Optional
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Body rendered for every domain error"""
    error: str
    detail: str


class ReasonRequest(BaseModel):
    """Free-text justification recorded in the audit notes"""
    reason: Optional[str] = Field(None, max_length=2000)


class NotesRequest(BaseModel):
    notes: Optional[str] = Field(None, max_length=2000)


class FileUrlResponse(BaseModel):
    """Lazily fetched attachment payload"""
    id: str
    file_url: str
