"""
Shared fixtures: a throwaway SQLite database per test plus factories for
rules and catalog items.
"""
import itertools
from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from campaign_engine.core.constants import DiscountType, RuleType
from campaign_engine.models import AuditRecord, CatalogItem, DiscountRule
from campaign_engine.services import DatabaseService, DiscountEngine, LocalRunLock

NOW = datetime(2026, 3, 15, 12, 0, 0)

_ids = itertools.count(1)


class Clock:
    """Settable stand-in for utcnow."""

    def __init__(self, start=NOW):
        self.now = start

    def __call__(self):
        return self.now


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def db_service(tmp_path):
    service = DatabaseService(f"sqlite:///{tmp_path / 'campaign_test.db'}")
    service.create_all()
    yield service
    service.dispose()


@pytest.fixture
def session(db_service):
    session = db_service.new_session()
    yield session
    session.close()


@pytest.fixture
def engine(db_service):
    return DiscountEngine(db_service, run_lock=LocalRunLock())


@pytest.fixture
def make_rule(session):
    def _make_rule(priority=10, rule_type=RuleType.CATEGORY, target_value="cat-1",
                   discount_type=DiscountType.PERCENTAGE, discount_amount="20",
                   start_date=NOW - timedelta(days=1), end_date=NOW + timedelta(days=7),
                   is_active=True, name=None, rule_id=None):
        number = next(_ids)
        rule = DiscountRule(
            id=rule_id or f"rule-{number:04d}",
            name=name or f"Rule {number}",
            rule_type=rule_type,
            target_value=target_value,
            discount_type=discount_type,
            discount_amount=Decimal(str(discount_amount)),
            start_date=start_date,
            end_date=end_date,
            priority=priority,
            is_active=is_active,
        )
        session.add(rule)
        session.commit()
        return rule
    return _make_rule


@pytest.fixture
def make_item(session):
    def _make_item(base_price, category_id="cat-1", brand_id="brand-1", is_active=True,
                   item_id=None, **campaign):
        item = CatalogItem(
            id=item_id or f"item-{next(_ids):04d}",
            name="Test item",
            category_id=category_id,
            brand_id=brand_id,
            base_price=Decimal(str(base_price)),
            is_active=is_active,
            **campaign,
        )
        session.add(item)
        session.commit()
        return item
    return _make_item


@pytest.fixture
def fetch(db_service):
    """Read fresh state through a new session."""
    class _Fetch:
        def item(self, item_id):
            with db_service.get_session() as s:
                return s.get(CatalogItem, item_id)

        def audit(self, rule_id=None):
            with db_service.get_session() as s:
                query = s.query(AuditRecord)
                if rule_id is not None:
                    query = query.filter(AuditRecord.rule_id == rule_id)
                return query.order_by(AuditRecord.item_id).all()

    return _Fetch()
