# src/campaign_engine/services/__init__.py

"""
Discount engine services.

Components are listed leaf-first: pricing, repositories, audit, sweep,
evaluation and the orchestrator that ties them together.
"""

from .price_calculator import compute_discounted_price
from .database_service import DatabaseService
from .rule_repository import RuleRepository
from .catalog_repository import CatalogRepository
from .audit_log import CampaignAuditLog
from .expiry_sweeper import ExpirySweeper
from .rule_evaluator import RuleEvaluator
from .run_lock import RunLock, LocalRunLock, DatabaseRunLock, build_run_lock
from .discount_engine import DiscountEngine
from .audit_report import AuditReport

__all__ = [
    "compute_discounted_price",
    "DatabaseService",
    "RuleRepository",
    "CatalogRepository",
    "CampaignAuditLog",
    "ExpirySweeper",
    "RuleEvaluator",
    "RunLock",
    "LocalRunLock",
    "DatabaseRunLock",
    "build_run_lock",
    "DiscountEngine",
    "AuditReport",
]
