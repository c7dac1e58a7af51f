# src/campaign_engine/models/catalog_item.py
import uuid

from sqlalchemy import Column, String, Boolean, DateTime, Numeric

from .base import Base


class CatalogItem(Base):
    __tablename__ = "catalog_item"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String)
    category_id = Column(String, index=True)
    brand_id = Column(String, index=True)
    base_price = Column(Numeric(10, 2), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    # Campaign assignment, written by the discount engine only
    campaign_price = Column(Numeric(10, 2))
    campaign_start = Column(DateTime)
    campaign_end = Column(DateTime)
    campaign_rule_id = Column(String(36), index=True)   # weak reference, no FK

    @property
    def has_campaign(self) -> bool:
        return self.campaign_rule_id is not None

    def assign_campaign(self, price, start, end, rule_id):
        self.campaign_price = price
        self.campaign_start = start
        self.campaign_end = end
        self.campaign_rule_id = rule_id

    def __repr__(self):
        return f"<CatalogItem {self.id} base={self.base_price} campaign={self.campaign_price}>"
