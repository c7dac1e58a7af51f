# src/campaign_engine/services/audit_log.py
from datetime import datetime
from decimal import Decimal
import logging

from sqlalchemy.orm import Session

from ..models import AuditRecord

logger = logging.getLogger(__name__)


class CampaignAuditLog:
    """
    Append-only writer of campaign price changes.

    Records are added to the caller's session and become durable with the
    caller's commit, so an item mutation and its audit row share one
    transaction.
    """

    def __init__(self, session: Session):
        self.session = session

    def append(self, rule_id: str, item_id: str, old_price: Decimal,
               new_price: Decimal, timestamp: datetime) -> AuditRecord:
        record = AuditRecord(
            rule_id=rule_id,
            item_id=item_id,
            old_price=old_price,
            new_price=new_price,
            discount_amount=old_price - new_price,
            timestamp=timestamp,
        )
        self.session.add(record)
        logger.debug(f"Audit: rule={rule_id} item={item_id} {old_price} -> {new_price}")
        return record
