"""
Physical assets: devices, their accessories and maintenance records, SIM cards
"""

from enum import Enum
from datetime import datetime
from sqlalchemy import (
    Column, String, Float, Date, DateTime, ForeignKey, JSON, Text, CheckConstraint, Index
)
from sqlalchemy.orm import relationship
from app.models.base import BaseModel


class DeviceStatus(str, Enum):
    """Lifecycle states of a device"""
    AVAILABLE = "Disponível"
    IN_USE = "Em Uso"
    MAINTENANCE = "Manutenção"
    RETIRED = "Descartado"


# SIM cards only ever move between these two states
SIM_STATUSES = (DeviceStatus.AVAILABLE, DeviceStatus.IN_USE)


class AssetKind(str, Enum):
    """Asset kinds that can be checked out and their audit tag"""
    DEVICE = "Device"
    SIM = "Sim"


class MaintenanceType(str, Enum):
    CORRECTIVE = "Corretiva"
    PREVENTIVE = "Preventiva"
    AUDIT = "Auditoria"


_holder_rule = (
    "(status = 'Em Uso' AND current_user_id IS NOT NULL) "
    "OR (status <> 'Em Uso' AND current_user_id IS NULL)"
)


class Device(BaseModel):
    """Device tracked through the lifecycle engine"""

    __tablename__ = "devices"

    model_id = Column(String(36), ForeignKey("models.id"), nullable=True)
    serial_number = Column(String(255), nullable=True)
    asset_tag = Column(String(255), unique=True, nullable=True)
    internal_code = Column(String(255), nullable=True)
    imei = Column(String(255), unique=True, nullable=True)
    pulsus_id = Column(String(255), nullable=True)  # external MDM id

    # Lifecycle
    status = Column(String(50), nullable=False, default=DeviceStatus.AVAILABLE.value)
    current_user_id = Column(String(36), ForeignKey("users.id"), nullable=True)
    linked_sim_id = Column(String(36), ForeignKey("sim_cards.id"), unique=True, nullable=True)

    sector_id = Column(String(36), ForeignKey("sectors.id"), nullable=True)
    cost_center = Column(String(255), nullable=True)

    # Purchase
    purchase_date = Column(Date, nullable=True)
    purchase_cost = Column(Float, nullable=True)
    invoice_number = Column(String(255), nullable=True)
    supplier = Column(String(255), nullable=True)
    purchase_invoice_url = Column(Text, nullable=True)

    custom_data = Column(JSON, default=dict)  # CustomField id -> value

    __table_args__ = (
        CheckConstraint(
            "status IN ('Disponível', 'Em Uso', 'Manutenção', 'Descartado')",
            name="ck_device_status",
        ),
        CheckConstraint(_holder_rule, name="ck_device_holder"),
        CheckConstraint(
            "status <> 'Descartado' OR linked_sim_id IS NULL",
            name="ck_device_retired_unlinked",
        ),
    )

    accessories = relationship(
        "DeviceAccessory",
        back_populates="device",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def snapshot(self):
        data = self.to_dict()
        data["accessories"] = [
            {"accessoryTypeId": acc.accessory_type_id, "name": acc.name}
            for acc in self.accessories
        ]
        return data


class DeviceAccessory(BaseModel):
    """Accessory handed out together with a device on checkout"""

    __tablename__ = "device_accessories"

    device_id = Column(String(36), ForeignKey("devices.id", ondelete="CASCADE"), nullable=False)
    accessory_type_id = Column(String(36), ForeignKey("accessory_types.id"), nullable=True)
    name = Column(String(255), nullable=False)

    device = relationship("Device", back_populates="accessories")


class MaintenanceRecord(BaseModel):
    """Maintenance performed on a device"""

    __tablename__ = "maintenance_records"

    device_id = Column(String(36), ForeignKey("devices.id", ondelete="CASCADE"), nullable=False)
    type = Column(String(50), nullable=False, default=MaintenanceType.CORRECTIVE.value)
    date = Column(DateTime, nullable=False, default=datetime.utcnow)
    description = Column(Text, nullable=True)
    cost = Column(Float, default=0.0)
    provider = Column(String(255), nullable=True)
    invoice_url = Column(Text, nullable=True)

    __table_args__ = (
        Index("idx_maintenance_device_date", "device_id", "date"),
    )


class SimCard(BaseModel):
    """SIM card, assigned directly or through the device it is linked to"""

    __tablename__ = "sim_cards"

    phone_number = Column(String(50), unique=True, nullable=False)
    operator = Column(String(100), nullable=True)
    iccid = Column(String(255), unique=True, nullable=True)
    status = Column(String(50), nullable=False, default=DeviceStatus.AVAILABLE.value)
    current_user_id = Column(String(36), ForeignKey("users.id"), nullable=True)
    plan_details = Column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint("status IN ('Disponível', 'Em Uso')", name="ck_sim_status"),
        CheckConstraint(_holder_rule, name="ck_sim_holder"),
    )
