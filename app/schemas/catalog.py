"""
Catalog schemas shared by brands, models, asset types, sectors,
accessory types and custom fields
"""

from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict


class CatalogEntryCreate(BaseModel):
    """Fields that do not apply to a catalog kind are ignored"""
    name: str = Field(..., min_length=1, max_length=255)
    brand_id: Optional[str] = None
    type_id: Optional[str] = None
    image_url: Optional[str] = None
    custom_field_ids: Optional[List[str]] = None


class CatalogEntryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    brand_id: Optional[str] = None
    type_id: Optional[str] = None
    image_url: Optional[str] = None
    custom_field_ids: Optional[List[str]] = None


class CatalogEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    brand_id: Optional[str] = None
    type_id: Optional[str] = None
    image_url: Optional[str] = None
    custom_field_ids: Optional[List[str]] = None
