# src/campaign_engine/services/discount_engine.py
"""
Discount Engine Orchestrator

One run = sweep stale campaign assignments, read the active rules, then
evaluate the rules one after another in priority-descending order.

Rule order is load-bearing: a lower-priority rule must see the commits of
every higher-priority rule before it compares against incumbents, so
rules are never evaluated in parallel.
"""

from datetime import datetime
from typing import Callable, Optional
import logging

from sqlalchemy.orm import Session

from ..core.logging import time_operation
from ..core.types import RuleLogEntry, RunSummary
from ..core.utils import to_naive_utc, utcnow
from .database_service import DatabaseService
from .expiry_sweeper import ExpirySweeper
from .rule_evaluator import RuleEvaluator
from .rule_repository import RuleRepository
from .run_lock import RunLock, build_run_lock

logger = logging.getLogger(__name__)


def _error_message(error: Exception) -> str:
    return getattr(error, "message", None) or str(error) or error.__class__.__name__


class DiscountEngine:
    """
    Usage:
        engine = DiscountEngine(DatabaseService())
        summary = engine.run()
        print(summary.to_dict())
    """

    def __init__(self, db_service: DatabaseService,
                 run_lock: Optional[RunLock] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        self.db_service = db_service
        self.run_lock = run_lock or build_run_lock(db_service)
        self.clock = clock or utcnow

    def run(self, now: Optional[datetime] = None) -> RunSummary:
        """
        Execute one full engine pass.

        Raises:
            EngineBusyError: another run holds the run lock
        """
        now = to_naive_utc(now) if now else self.clock()
        summary = RunSummary()

        with self.run_lock.hold():
            session = self.db_service.new_session()
            try:
                with time_operation("Discount engine run", logger):
                    self._run(session, now, summary)
            finally:
                session.close()

        summary.mark_completed()
        logger.info(
            f"📊 Rules: {summary.rules_processed}, updated: {summary.items_updated}, "
            f"cleared: {summary.items_cleared}, errors: {len(summary.errors)}"
        )
        return summary

    def clear_expired(self, now: Optional[datetime] = None) -> int:
        """Clear ended campaigns without evaluating rules."""
        now = to_naive_utc(now) if now else self.clock()

        with self.run_lock.hold():
            with self.db_service.get_session() as session:
                return ExpirySweeper(session).clear_expired_campaigns(now)

    def _run(self, session: Session, now: datetime, summary: RunSummary):
        try:
            summary.items_cleared = ExpirySweeper(session).sweep_expired_campaigns(now)
            rules = RuleRepository(session).list_active_rules(now)
        except Exception as e:
            logger.exception("❌ Discount engine aborted")
            summary.success = False
            summary.errors.append(f"Engine error: {_error_message(e)}")
            return

        summary.rules_processed = len(rules)
        evaluator = RuleEvaluator(session)
        # A rollback expires every loaded rule, so labels are read up front
        labelled = [(rule.id, rule.name, rule) for rule in rules]

        for rule_id, rule_name, rule in labelled:
            if not self._renew_lock(session, summary):
                return
            try:
                outcome = evaluator.apply_rule(rule, now)
            except Exception as e:
                logger.error(f"❌ Rule {rule_name!r} ({rule_id}) failed: {e}")
                session.rollback()
                summary.errors.append(f"Rule {rule_name} ({rule_id}): {_error_message(e)}")
                continue

            summary.items_updated += outcome.items_affected
            summary.errors.extend(outcome.errors)
            summary.logs.append(RuleLogEntry(
                rule_id=rule_id,
                rule_name=rule_name,
                items_affected=outcome.items_affected,
            ))

    def _renew_lock(self, session: Session, summary: RunSummary) -> bool:
        """Extend the run lock before the next rule; a lost lock stops the run."""
        try:
            # End the read transaction so the lease update is not blocked by it
            session.commit()
            self.run_lock.renew()
        except Exception as e:
            logger.error(f"❌ Discount engine stopped: {e}")
            summary.success = False
            summary.errors.append(f"Engine error: {_error_message(e)}")
            return False
        return True
