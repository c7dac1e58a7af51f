# src/campaign_engine/models/audit_record.py
import uuid

from sqlalchemy import Column, String, DateTime, Numeric

from .base import Base


class AuditRecord(Base):
    """Append-only price change record; never updated or deleted by the engine."""
    __tablename__ = "discount_audit_log"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    rule_id = Column(String(36), nullable=False, index=True)
    item_id = Column(String(36), nullable=False, index=True)
    old_price = Column(Numeric(10, 2), nullable=False)
    new_price = Column(Numeric(10, 2), nullable=False)
    discount_amount = Column(Numeric(10, 2), nullable=False)
    timestamp = Column(DateTime, nullable=False)
