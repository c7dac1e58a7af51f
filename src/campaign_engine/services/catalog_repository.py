# src/campaign_engine/services/catalog_repository.py
from datetime import datetime
from typing import List
import logging

from sqlalchemy import or_, update
from sqlalchemy.orm import Session

from ..core.constants import RuleType
from ..core.exceptions import InvalidRuleError
from ..models import CatalogItem, DiscountRule

logger = logging.getLogger(__name__)

CLEARED_CAMPAIGN = {
    "campaign_price": None,
    "campaign_start": None,
    "campaign_end": None,
    "campaign_rule_id": None,
}


class CatalogRepository:
    """Repository for the campaign fields of catalog items."""

    def __init__(self, session: Session):
        self.session = session

    def find_eligible_items(self, rule: DiscountRule) -> List[CatalogItem]:
        """Active items matching the rule's category or brand target."""
        if rule.rule_type is RuleType.CATEGORY:
            target_column = CatalogItem.category_id
        elif rule.rule_type is RuleType.BRAND:
            target_column = CatalogItem.brand_id
        else:
            raise InvalidRuleError(
                f"Rule type {rule.rule_type.name} has no catalog target",
                details={"rule_id": rule.id},
            )

        return (
            self.session.query(CatalogItem)
            .filter(
                CatalogItem.is_active.is_(True),
                target_column == rule.target_value,
            )
            .order_by(CatalogItem.id.asc())
            .all()
        )

    def clear_campaigns(self, now: datetime, include_not_started: bool = True) -> int:
        """
        Bulk-clear campaign fields whose window no longer contains ``now``.

        Args:
            now: Reference time
            include_not_started: Also clear assignments whose window starts after ``now``

        Returns:
            Number of items cleared
        """
        outside_window = CatalogItem.campaign_end < now
        if include_not_started:
            outside_window = or_(outside_window, CatalogItem.campaign_start > now)

        stmt = (
            update(CatalogItem)
            .where(CatalogItem.campaign_rule_id.isnot(None), outside_window)
            .values(**CLEARED_CAMPAIGN)
            .execution_options(synchronize_session="fetch")
        )
        result = self.session.execute(stmt)
        return result.rowcount
