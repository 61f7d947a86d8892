"""
Audit log model for tracking all changes
"""

from enum import Enum
from datetime import datetime
from sqlalchemy import Column, Integer, String, JSON, Text, DateTime, Index
from app.models.base import Base


class ActionType(str, Enum):
    CREATE = "Criação"
    UPDATE = "Atualização"
    DELETE = "Exclusão"
    RESTORE = "Restauração"
    CHECKOUT = "Entrega"
    CHECKIN = "Devolução"
    MAINTENANCE_START = "Envio Manutenção"
    MAINTENANCE_END = "Retorno Manutenção"
    INACTIVATE = "Inativação"
    ACTIVATE = "Ativação"
    RESOLVE_PENDENCY = "Resolução Manual"


class AuditTarget(str, Enum):
    """Entity kind an audit entry refers to"""
    DEVICE = "Device"
    SIM = "Sim"
    USER = "User"
    SYSTEM = "System"
    MODEL = "Model"
    BRAND = "Brand"
    TYPE = "Type"
    SECTOR = "Sector"
    ACCESSORY = "Accessory"
    CUSTOM_FIELD = "CustomField"
    ACCOUNT = "Account"
    MAINTENANCE = "Maintenance"


class AuditLog(Base):
    """Append-only audit trail. Rows are never edited in place."""

    __tablename__ = "audit_logs"

    # Integer key doubles as insertion order for entries sharing a timestamp
    id = Column(Integer, primary_key=True, autoincrement=True)

    # What was changed
    asset_id = Column(String(36), nullable=False)
    asset_type = Column(String(50), nullable=False)
    target_name = Column(String(255), nullable=True)

    # What action was taken
    action = Column(String(50), nullable=False)
    timestamp = Column(DateTime, nullable=False, default=datetime.utcnow)

    # Who made the change
    admin_user = Column(String(255), nullable=False)
    notes = Column(Text, nullable=True)

    # Snapshots
    previous_data = Column(JSON, nullable=True)
    new_data = Column(JSON, nullable=True)
    backup_data = Column(JSON, nullable=True)  # full record of deleted items

    __table_args__ = (
        Index("idx_audit_asset_timestamp", "asset_id", "timestamp"),
    )

    @property
    def has_diff(self) -> bool:
        return self.previous_data is not None or self.new_data is not None
