"""
Single-rule evaluation: eligibility, priority conflicts, no-op discounts
and the item + audit commit.
"""
from datetime import timedelta
from decimal import Decimal
from unittest import mock

import pytest
from sqlalchemy.exc import OperationalError

from campaign_engine.core.constants import DiscountType, RuleType
from campaign_engine.core.exceptions import InvalidRuleError
from campaign_engine.services import RuleEvaluator

from conftest import NOW


class TestCommit:
    def test_sets_campaign_fields_and_audit(self, session, make_rule, make_item, fetch):
        rule = make_rule(priority=10, discount_amount="25")
        item = make_item(40)

        outcome = RuleEvaluator(session).apply_rule(rule, NOW)

        assert outcome.items_affected == 1
        stored = fetch.item(item.id)
        assert stored.campaign_price == Decimal("30.00")
        assert stored.campaign_start == rule.start_date
        assert stored.campaign_end == rule.end_date
        assert stored.campaign_rule_id == rule.id
        assert stored.base_price == Decimal("40.00")

        [record] = fetch.audit(rule.id)
        assert record.item_id == item.id
        assert record.old_price == Decimal("40.00")
        assert record.new_price == Decimal("30.00")
        assert record.discount_amount == Decimal("10.00")
        assert record.timestamp == NOW

    def test_fixed_discount_to_zero_is_committed(self, session, make_rule, make_item, fetch):
        rule = make_rule(discount_type=DiscountType.FIXED, discount_amount="50")
        item = make_item(10)

        assert RuleEvaluator(session).apply_rule(rule, NOW).items_affected == 1
        assert fetch.item(item.id).campaign_price == Decimal("0.00")

    def test_brand_rule(self, session, make_rule, make_item, fetch):
        rule = make_rule(rule_type=RuleType.BRAND, target_value="brand-7",
                         discount_type=DiscountType.FIXED, discount_amount="5")
        item = make_item(20, category_id="other", brand_id="brand-7")
        make_item(20, category_id="other", brand_id="brand-8")

        assert RuleEvaluator(session).apply_rule(rule, NOW).items_affected == 1
        assert fetch.item(item.id).campaign_price == Decimal("15.00")


class TestNoOpDiscounts:
    def test_zero_percent_never_commits(self, session, make_rule, make_item, fetch):
        rule = make_rule(discount_amount="0")
        item = make_item(100)

        assert RuleEvaluator(session).apply_rule(rule, NOW).items_affected == 0
        assert fetch.item(item.id).campaign_price is None
        assert fetch.audit() == []

    def test_discount_rounding_to_same_price_is_skipped(self, session, make_rule, make_item, fetch):
        # 1% of 0.20 is 0.002, which rounds back to 0.20
        rule = make_rule(discount_amount="1")
        item = make_item("0.20")

        assert RuleEvaluator(session).apply_rule(rule, NOW).items_affected == 0
        assert fetch.item(item.id).campaign_rule_id is None


class TestPriorityConflicts:
    def test_stronger_rule_takes_over(self, session, make_rule, make_item, fetch):
        weak = make_rule(priority=5, discount_amount="50")
        strong = make_rule(priority=10, discount_amount="10")
        item = make_item(100)
        evaluator = RuleEvaluator(session)

        evaluator.apply_rule(weak, NOW)
        assert evaluator.apply_rule(strong, NOW).items_affected == 1

        stored = fetch.item(item.id)
        assert stored.campaign_rule_id == strong.id
        assert stored.campaign_price == Decimal("90.00")

    def test_equal_priority_keeps_incumbent(self, session, make_rule, make_item, fetch):
        first = make_rule(priority=10, discount_amount="10")
        second = make_rule(priority=10, discount_amount="60")
        item = make_item(100)
        evaluator = RuleEvaluator(session)

        evaluator.apply_rule(first, NOW)
        assert evaluator.apply_rule(second, NOW).items_affected == 0
        assert fetch.item(item.id).campaign_rule_id == first.id
        assert len(fetch.audit()) == 1

    def test_weaker_rule_is_skipped(self, session, make_rule, make_item, fetch):
        strong = make_rule(priority=10, discount_amount="10")
        weak = make_rule(priority=3, discount_amount="90")
        item = make_item(100)
        evaluator = RuleEvaluator(session)

        evaluator.apply_rule(strong, NOW)
        assert evaluator.apply_rule(weak, NOW).items_affected == 0
        assert fetch.item(item.id).campaign_rule_id == strong.id

    def test_reapplying_same_rule_is_noop(self, session, make_rule, make_item, fetch):
        rule = make_rule()
        make_item(100)
        evaluator = RuleEvaluator(session)

        assert evaluator.apply_rule(rule, NOW).items_affected == 1
        assert evaluator.apply_rule(rule, NOW).items_affected == 0
        assert len(fetch.audit()) == 1

    def test_missing_incumbent_counts_as_priority_zero(self, session, make_rule, make_item, fetch):
        orphan = dict(campaign_price=Decimal("1.00"), campaign_start=NOW - timedelta(days=1),
                      campaign_end=NOW + timedelta(days=1), campaign_rule_id="deleted-rule")
        zero = make_rule(priority=0)
        one = make_rule(priority=1)
        item = make_item(100, **orphan)
        evaluator = RuleEvaluator(session)

        assert evaluator.apply_rule(zero, NOW).items_affected == 0
        assert evaluator.apply_rule(one, NOW).items_affected == 1
        assert fetch.item(item.id).campaign_rule_id == one.id

    def test_incumbent_priorities_resolved_in_one_lookup(self, session, make_rule, make_item):
        owner_a = make_rule(priority=1)
        owner_b = make_rule(priority=2)
        challenger = make_rule(priority=5)
        for owner in (owner_a, owner_b, owner_a):
            make_item(100, campaign_price=Decimal("50"), campaign_start=owner.start_date,
                       campaign_end=owner.end_date, campaign_rule_id=owner.id)
        evaluator = RuleEvaluator(session)

        with mock.patch.object(evaluator.rules, "get_priorities",
                               wraps=evaluator.rules.get_priorities) as lookup:
            assert evaluator.apply_rule(challenger, NOW).items_affected == 3

        lookup.assert_called_once()
        assert set(lookup.call_args.args[0]) == {owner_a.id, owner_b.id}


class TestValidation:
    @pytest.mark.parametrize("target", [None, "", "   "])
    def test_missing_target(self, session, make_rule, target):
        rule = make_rule(target_value=target)
        with pytest.raises(InvalidRuleError, match="no target value"):
            RuleEvaluator(session).apply_rule(rule, NOW)

    def test_negative_amount(self, session, make_rule):
        rule = make_rule(discount_type=DiscountType.FIXED, discount_amount="-5")
        with pytest.raises(InvalidRuleError, match="negative"):
            RuleEvaluator(session).apply_rule(rule, NOW)

    def test_percentage_above_hundred(self, session, make_rule):
        rule = make_rule(discount_amount="150")
        with pytest.raises(InvalidRuleError, match="exceed 100%"):
            RuleEvaluator(session).apply_rule(rule, NOW)


class TestCommitFailure:
    def test_failed_commit_rolls_back_item_and_audit_together(self, session, make_rule, make_item, fetch):
        rule = make_rule(name="Spring")
        first = make_item(100, item_id="item-a")
        second = make_item(50, item_id="item-b")
        third = make_item(10, item_id="item-c")
        evaluator = RuleEvaluator(session)

        real_commit = session.commit
        calls = {"n": 0}

        def flaky_commit():
            calls["n"] += 1
            if calls["n"] == 2:
                session.flush()
                raise OperationalError("COMMIT", {}, Exception("disk I/O error"))
            real_commit()

        with mock.patch.object(session, "commit", side_effect=flaky_commit):
            outcome = evaluator.apply_rule(rule, NOW)

        assert outcome.items_affected == 2
        assert outcome.errors == [f"Rule Spring ({rule.id}): item item-b: disk I/O error"]
        assert fetch.item(first.id).campaign_price == Decimal("80.00")
        assert fetch.item(second.id).campaign_price is None
        assert fetch.item(third.id).campaign_price == Decimal("8.00")
        assert sorted(r.item_id for r in fetch.audit()) == [first.id, third.id]
