# src/campaign_engine/services/database_service.py
from contextlib import contextmanager
import logging

from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from ..core.config import Config
from ..core.exceptions import DatabaseConnectionError
from ..models import Base


logger = logging.getLogger(__name__)


class DatabaseService:
    """Centralized database connection and session management."""

    def __init__(self, db_url: str = None):
        self.db_url = db_url or Config.database.DATABASE_URL
        options = Config.database.get_engine_options(self.db_url)

        # In-memory SQLite must share one connection across sessions
        if self.db_url in ("sqlite://", "sqlite:///:memory:"):
            options.update({
                "poolclass": StaticPool,
                "connect_args": {"check_same_thread": False},
            })

        self.engine = create_engine(self.db_url, **options)
        self.SessionLocal = sessionmaker(bind=self.engine, expire_on_commit=False)

    def create_all(self):
        """Create any missing tables (migrations are managed by Alembic)."""
        try:
            Base.metadata.create_all(self.engine)
        except OperationalError as e:
            raise DatabaseConnectionError(
                "Could not create schema", details={"url": self.engine.url.render_as_string(hide_password=True)}
            ) from e
        logger.info(f"Database schema ready at {self.engine.url.render_as_string(hide_password=True)}")

    def new_session(self) -> Session:
        """Open a session owned by the caller."""
        return self.SessionLocal()

    @contextmanager
    def get_session(self) -> Session:
        """Context manager for database sessions."""
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception as e:
            session.rollback()
            logger.error(f"Database session error: {e}")
            raise
        finally:
            session.close()

    def dispose(self):
        self.engine.dispose()
