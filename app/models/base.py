"""
Base model for all database models
"""

from datetime import date, datetime
from decimal import Decimal
from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import declarative_base
import uuid

Base = declarative_base()

# Bookkeeping columns never take part in audit snapshots
SNAPSHOT_EXCLUDED = {"created_at", "updated_at", "created_by", "updated_by"}


def new_id() -> str:
    return str(uuid.uuid4())


def camel_case(name: str) -> str:
    head, *tail = name.split("_")
    return head + "".join(part.capitalize() for part in tail)


def json_safe(value):
    """Coerce a column value into something json.dumps accepts"""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, uuid.UUID):
        return str(value)
    if hasattr(value, "value") and isinstance(getattr(value, "value"), str):
        return value.value
    return value


class BaseModel(Base):
    """Abstract base model with common fields"""

    __abstract__ = True

    id = Column(String(36), primary_key=True, default=new_id)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    created_by = Column(String(255), nullable=True)
    updated_by = Column(String(255), nullable=True)

    def to_dict(self):
        """Convert model to a JSON-safe dictionary keyed by camelCase field names"""
        return {
            camel_case(column.key): json_safe(getattr(self, column.key))
            for column in self.__table__.columns
            if column.key not in SNAPSHOT_EXCLUDED
        }

    def snapshot(self):
        """Full record as captured in audit previousData/newData"""
        return self.to_dict()
