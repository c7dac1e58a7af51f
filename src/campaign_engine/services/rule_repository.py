# src/campaign_engine/services/rule_repository.py
from datetime import datetime
from typing import Dict, Iterable, List
import logging

from sqlalchemy.orm import Session

from ..core.constants import CAMPAIGN_RULE_TYPES
from ..models import DiscountRule

logger = logging.getLogger(__name__)


class RuleRepository:
    """Read-only access to persisted discount rules."""

    def __init__(self, session: Session):
        self.session = session

    def list_active_rules(self, now: datetime) -> List[DiscountRule]:
        """
        Active campaign rules whose window contains ``now``.

        Ordered by priority descending; rules sharing a priority are
        ordered by id so repeated runs evaluate them in the same order.
        """
        rules = (
            self.session.query(DiscountRule)
            .filter(
                DiscountRule.is_active.is_(True),
                DiscountRule.start_date <= now,
                DiscountRule.end_date >= now,
                DiscountRule.rule_type.in_(CAMPAIGN_RULE_TYPES),
            )
            .order_by(DiscountRule.priority.desc(), DiscountRule.id.asc())
            .all()
        )
        logger.debug(f"Found {len(rules)} active campaign rules at {now.isoformat()}")
        return rules

    def get_priorities(self, rule_ids: Iterable[str]) -> Dict[str, int]:
        """Priorities for the given rule ids in one query, regardless of rule state."""
        ids = set(rule_ids)
        if not ids:
            return {}

        rows = (
            self.session.query(DiscountRule.id, DiscountRule.priority)
            .filter(DiscountRule.id.in_(ids))
            .all()
        )
        return {rule_id: priority for rule_id, priority in rows}
