# src/campaign_engine/services/expiry_sweeper.py
from datetime import datetime
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .catalog_repository import CatalogRepository

logger = logging.getLogger(__name__)


class ExpirySweeper:
    """
    Clears campaign assignments whose window no longer contains the run time.

    The sweep is a single bulk update and never consults the rule store.
    Assignments whose window has not started yet are cleared too: the engine
    only assigns windows containing the run time, so such a row comes from a
    rule whose dates were edited after it was applied.
    """

    def __init__(self, session: Session):
        self.session = session
        self.catalog = CatalogRepository(session)

    def sweep_expired_campaigns(self, now: datetime) -> int:
        return self._clear(now, include_not_started=True)

    def clear_expired_campaigns(self, now: datetime) -> int:
        """Clear only ended campaigns; future-dated assignments are left alone."""
        return self._clear(now, include_not_started=False)

    def _clear(self, now: datetime, include_not_started: bool) -> int:
        try:
            cleared = self.catalog.clear_campaigns(now, include_not_started=include_not_started)
            self.session.commit()
        except SQLAlchemyError as e:
            logger.error(f"❌ Campaign sweep failed: {e}")
            self.session.rollback()
            raise

        if cleared:
            logger.info(f"🧹 Cleared {cleared} campaign assignments outside their window")
        return cleared
