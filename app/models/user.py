"""
Asset holders and their delivery/return terms
"""

from enum import Enum
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Text, Index
from sqlalchemy.orm import relationship
from app.models.base import BaseModel


class TermType(str, Enum):
    DELIVERY = "ENTREGA"
    RETURN = "DEVOLUCAO"


# Stored in Term.file_url when a pendency was closed without a scanned copy
RESOLVED_MANUALLY = "[RESOLVIDO_MANUALMENTE]"


class User(BaseModel):
    """Person who holds devices and SIM cards"""

    __tablename__ = "users"

    full_name = Column(String(255), nullable=False)
    cpf = Column(String(50), unique=True, nullable=False)
    rg = Column(String(50), nullable=True)
    pis = Column(String(50), nullable=True)
    address = Column(Text, nullable=True)
    email = Column(String(255), unique=True, nullable=True)
    sector_id = Column(String(36), ForeignKey("sectors.id"), nullable=True)
    internal_code = Column(String(255), nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    has_pending_issues = Column(Boolean, nullable=False, default=False)
    pending_issues_note = Column(Text, nullable=True)

    terms = relationship(
        "Term",
        back_populates="user",
        order_by="Term.date",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def snapshot(self):
        data = self.to_dict()
        data["terms"] = [
            {k: v for k, v in term.to_dict().items() if k != "userId"}
            for term in self.terms
        ]
        return data


class Term(BaseModel):
    """Delivery/return receipt captured at the moment of checkout or check-in"""

    __tablename__ = "terms"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    type = Column(String(20), nullable=False)
    asset_details = Column(Text, nullable=False)  # description frozen at event time
    asset_kind = Column(String(20), nullable=True)
    asset_id = Column(String(36), nullable=True)  # no FK: the asset may be deleted later
    date = Column(DateTime, nullable=False, default=datetime.utcnow)
    file_url = Column(Text, nullable=True)

    __table_args__ = (
        Index("idx_terms_user_date", "user_id", "date"),
    )

    user = relationship("User", back_populates="terms")

    @property
    def has_file(self) -> bool:
        return bool(self.file_url) and not self.file_url.startswith(RESOLVED_MANUALLY)

    @property
    def is_resolved(self) -> bool:
        return bool(self.file_url)
