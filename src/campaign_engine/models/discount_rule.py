# src/campaign_engine/models/discount_rule.py
import uuid

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Numeric, Enum, Index

from .base import Base
from ..core.constants import RuleType, DiscountType
from ..core.utils import utcnow


class DiscountRule(Base):
    __tablename__ = "discount_rule"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    rule_type = Column(Enum(RuleType, name="discount_rule_type"), nullable=False)
    target_value = Column(String)                       # category id or brand id
    discount_type = Column(Enum(DiscountType, name="discount_type"), nullable=False)
    discount_amount = Column(Numeric(10, 2), nullable=False)
    min_cart_amount = Column(Numeric(10, 2))            # cart-time rules only
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    priority = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    description = Column(String)
    created_at = Column(DateTime, default=utcnow)

    __table_args__ = (
        Index("ix_discount_rule_active_window", "is_active", "start_date", "end_date"),
    )

    def __repr__(self):
        return (
            f"<DiscountRule {self.id} {self.name!r} {self.rule_type.name}:{self.target_value} "
            f"priority={self.priority}>"
        )
