# src/campaign_engine/models/__init__.py
from .base import Base
from .discount_rule import DiscountRule
from .catalog_item import CatalogItem
from .audit_record import AuditRecord
from .engine_lock import EngineLock
