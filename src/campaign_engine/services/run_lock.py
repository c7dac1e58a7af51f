# src/campaign_engine/services/run_lock.py
"""
Mutual exclusion for engine runs.

Two overlapping runs could both read the same incumbent and both write,
producing duplicate audit rows. Every run therefore holds a RunLock; a
second run that cannot take it fails fast with EngineBusyError.
"""

from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Callable, Optional
import logging
import threading
import uuid

from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError

from ..core.config import Config
from ..core.exceptions import EngineBusyError, RunLockLostError
from ..core.utils import utcnow
from ..models import EngineLock
from .database_service import DatabaseService

logger = logging.getLogger(__name__)


class RunLock:
    """Non-blocking lock interface used by the discount engine."""

    name = "run-lock"

    def acquire(self) -> bool:
        raise NotImplementedError

    def release(self):
        raise NotImplementedError

    def renew(self):
        """Extend the hold between units of work. No-op for locks without a lease."""

    @contextmanager
    def hold(self):
        if not self.acquire():
            raise EngineBusyError(
                "Another discount engine run is in progress",
                details={"lock": self.name},
            )
        try:
            yield self
        finally:
            self.release()


class LocalRunLock(RunLock):
    """Process-local lock; enough when a single worker triggers runs."""

    def __init__(self, name: str = "local"):
        self.name = name
        self._lock = threading.Lock()

    def acquire(self) -> bool:
        return self._lock.acquire(blocking=False)

    def release(self):
        self._lock.release()


class DatabaseRunLock(RunLock):
    """
    Lease stored as a row in the ``engine_lock`` table.

    The row is created on acquire and deleted on release. A lease left
    behind by a crashed run can be taken over once it expires.
    """

    def __init__(self, db_service: DatabaseService, name: str = None,
                 lease_seconds: int = None,
                 clock: Optional[Callable[[], datetime]] = None):
        self.db_service = db_service
        self.name = name or Config.engine.LOCK_NAME
        self.lease = timedelta(seconds=lease_seconds or Config.engine.LOCK_LEASE_SECONDS)
        self.clock = clock or utcnow
        self.token: Optional[str] = None

    def acquire(self) -> bool:
        token = str(uuid.uuid4())
        now = self.clock()

        try:
            with self.db_service.get_session() as session:
                existing = session.get(EngineLock, self.name)
                if existing is None:
                    session.add(EngineLock(
                        name=self.name,
                        holder=token,
                        acquired_at=now,
                        expires_at=now + self.lease,
                    ))
                else:
                    # Take over only an expired lease; the WHERE guards against a racing takeover
                    result = session.execute(
                        update(EngineLock)
                        .where(EngineLock.name == self.name, EngineLock.expires_at <= now)
                        .values(holder=token, acquired_at=now, expires_at=now + self.lease)
                        .execution_options(synchronize_session=False)
                    )
                    if result.rowcount != 1:
                        logger.warning(f"🔒 Lock {self.name!r} held by {existing.holder} until {existing.expires_at}")
                        return False
                    logger.warning(f"🔓 Took over expired lock {self.name!r} from {existing.holder}")
        except IntegrityError:
            logger.warning(f"🔒 Lock {self.name!r} was acquired concurrently")
            return False

        self.token = token
        logger.info(f"🔐 Acquired lock {self.name!r} ({token})")
        return True

    def release(self):
        if self.token is None:
            return

        with self.db_service.get_session() as session:
            session.execute(
                delete(EngineLock)
                .where(EngineLock.name == self.name, EngineLock.holder == self.token)
                .execution_options(synchronize_session=False)
            )
        logger.info(f"🔓 Released lock {self.name!r} ({self.token})")
        self.token = None

    def renew(self):
        """
        Push the lease expiry forward for the current holder.

        Raises:
            RunLockLostError: the lease expired and another run took it over
        """
        if self.token is None:
            raise RunLockLostError(f"Lock {self.name!r} is not held", details={"lock": self.name})

        now = self.clock()
        with self.db_service.get_session() as session:
            result = session.execute(
                update(EngineLock)
                .where(EngineLock.name == self.name, EngineLock.holder == self.token)
                .values(expires_at=now + self.lease)
                .execution_options(synchronize_session=False)
            )
        if result.rowcount != 1:
            logger.error(f"🔒 Lost lock {self.name!r} ({self.token})")
            raise RunLockLostError(
                f"Run lock {self.name!r} was taken over by another run",
                details={"lock": self.name, "holder": self.token},
            )
        logger.debug(f"🔐 Renewed lock {self.name!r} until {now + self.lease}")


def build_run_lock(db_service: DatabaseService) -> RunLock:
    """Lock configured by ENGINE_LOCK_BACKEND."""
    if Config.engine.LOCK_BACKEND == "local":
        return LocalRunLock(Config.engine.LOCK_NAME)
    return DatabaseRunLock(db_service)
