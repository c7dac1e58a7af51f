# src/campaign_engine/services/rule_evaluator.py
"""
Applies one discount rule to the catalog.

Conflict resolution: an item already owned by another rule changes owner
only when the new rule's priority is strictly greater than the incumbent's.
Each change is committed with its audit record in one transaction. A
failed commit is recorded against its item and the rule moves on to the
next item; a failed read aborts the rule.
"""

from datetime import datetime
from decimal import Decimal
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.constants import (
    CAMPAIGN_RULE_TYPES,
    HUNDRED,
    MISSING_INCUMBENT_PRIORITY,
    ZERO,
    DiscountType,
)
from ..core.exceptions import InvalidRuleError
from ..core.types import RuleOutcome
from ..core.utils import to_decimal
from ..models import CatalogItem, DiscountRule
from .audit_log import CampaignAuditLog
from .catalog_repository import CatalogRepository
from .price_calculator import compute_discounted_price
from .rule_repository import RuleRepository

logger = logging.getLogger(__name__)


class RuleEvaluator:
    """Evaluates a single rule against its eligible catalog items."""

    def __init__(self, session: Session):
        self.session = session
        self.catalog = CatalogRepository(session)
        self.rules = RuleRepository(session)
        self.audit_log = CampaignAuditLog(session)

    def apply_rule(self, rule: DiscountRule, now: datetime) -> RuleOutcome:
        """
        Apply ``rule`` to every eligible item it wins.

        Raises:
            InvalidRuleError: the rule cannot be evaluated
            SQLAlchemyError: a storage error while reading the catalog or
                the incumbent priorities
        """
        self.validate_rule(rule)
        rule_id, rule_name = rule.id, rule.name

        items = self.catalog.find_eligible_items(rule)
        priorities = self.rules.get_priorities(
            {item.campaign_rule_id for item in items if item.campaign_rule_id}
        )

        outcome = RuleOutcome()
        for item in items:
            if item.campaign_rule_id is not None:
                incumbent_priority = priorities.get(item.campaign_rule_id, MISSING_INCUMBENT_PRIORITY)
                if incumbent_priority >= rule.priority:
                    continue

            base_price = to_decimal(item.base_price)
            candidate = compute_discounted_price(base_price, rule.discount_type, rule.discount_amount)
            if candidate >= base_price:
                continue

            item_id = item.id
            try:
                self._commit(item, rule, base_price, candidate, now)
            except SQLAlchemyError as e:
                outcome.errors.append(f"Rule {rule_name} ({rule_id}): item {item_id}: {getattr(e, 'orig', None) or e}")
                continue
            outcome.items_affected += 1

        logger.info(
            f"Rule {rule_name!r} ({rule_id}): {outcome.items_affected} of {len(items)} eligible items updated"
        )
        return outcome

    def validate_rule(self, rule: DiscountRule):
        """Reject rule data the engine cannot price with."""
        if rule.rule_type not in CAMPAIGN_RULE_TYPES:
            raise InvalidRuleError(f"Rule type {rule.rule_type.name} is not a campaign rule")

        if not rule.target_value or not rule.target_value.strip():
            raise InvalidRuleError(f"{rule.rule_type.name} rule has no target value")

        amount = to_decimal(rule.discount_amount)
        if amount < ZERO:
            raise InvalidRuleError(f"Discount amount cannot be negative: {amount}")
        if rule.discount_type is DiscountType.PERCENTAGE and amount > HUNDRED:
            raise InvalidRuleError(f"Percentage discount cannot exceed 100%: {amount}")

    def _commit(self, item: CatalogItem, rule: DiscountRule,
                base_price: Decimal, price: Decimal, now: datetime):
        try:
            item.assign_campaign(price, rule.start_date, rule.end_date, rule.id)
            self.audit_log.append(
                rule_id=rule.id,
                item_id=item.id,
                old_price=base_price,
                new_price=price,
                timestamp=now,
            )
            self.session.commit()
        except SQLAlchemyError as e:
            logger.error(f"❌ Commit failed for item {item.id} under rule {rule.id}: {e}")
            self.session.rollback()
            raise
