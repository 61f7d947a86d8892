"""
Catalog entities referenced by devices, users and custom data
"""

from sqlalchemy import Column, String, ForeignKey, JSON, Text
from sqlalchemy.orm import relationship
from app.models.base import BaseModel


class Brand(BaseModel):
    """Device manufacturer"""

    __tablename__ = "brands"

    name = Column(String(255), unique=True, nullable=False)

    models = relationship("DeviceModel", back_populates="brand")


class AssetType(BaseModel):
    """Kind of device (Notebook, Smartphone...). Scopes the custom fields a device carries."""

    __tablename__ = "asset_types"

    name = Column(String(255), unique=True, nullable=False)
    custom_field_ids = Column(JSON, default=list)  # CustomField ids shown for this type

    models = relationship("DeviceModel", back_populates="asset_type")


class DeviceModel(BaseModel):
    """Commercial model of a device"""

    __tablename__ = "models"

    name = Column(String(255), nullable=False)
    brand_id = Column(String(36), ForeignKey("brands.id"), nullable=True)
    type_id = Column(String(36), ForeignKey("asset_types.id"), nullable=True)
    image_url = Column(Text, nullable=True)

    brand = relationship("Brand", back_populates="models")
    asset_type = relationship("AssetType", back_populates="models")


class Sector(BaseModel):
    """Organizational sector / job category of users and devices"""

    __tablename__ = "sectors"

    name = Column(String(255), unique=True, nullable=False)


class AccessoryType(BaseModel):
    """Kind of accessory delivered with a device (charger, case...)"""

    __tablename__ = "accessory_types"

    name = Column(String(255), unique=True, nullable=False)


class CustomField(BaseModel):
    """User-defined device attribute, stored in Device.custom_data by id"""

    __tablename__ = "custom_fields"

    name = Column(String(255), unique=True, nullable=False)
