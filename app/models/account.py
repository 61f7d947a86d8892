"""
Software/license accounts
"""

from enum import Enum
from sqlalchemy import Column, String, ForeignKey, Text, CheckConstraint
from app.models.base import BaseModel


class AccountType(str, Enum):
    EMAIL = "E-mail"
    GOOGLE = "Google Account"
    ERP = "Licença ERP"
    OFFICE = "Pacote Office"
    OTHER = "Outros"


class SoftwareAccount(BaseModel):
    """Login or license owned by at most one user or one device"""

    __tablename__ = "software_accounts"

    name = Column(String(255), nullable=False)
    type = Column(String(50), nullable=False, default=AccountType.OTHER.value)
    login = Column(String(255), nullable=False)
    password = Column(String(255), nullable=True)
    access_url = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="Ativo")

    user_id = Column(String(36), ForeignKey("users.id"), nullable=True)
    device_id = Column(String(36), ForeignKey("devices.id"), nullable=True)
    sector_id = Column(String(36), ForeignKey("sectors.id"), nullable=True)

    notes = Column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint("user_id IS NULL OR device_id IS NULL", name="ck_account_single_owner"),
    )
