# src/campaign_engine/core/config.py

"""
Application configuration management.

Loads settings from environment variables with sensible defaults.
Provides database, application and engine-level configuration.
"""

import os
from dotenv import load_dotenv

from .exceptions import InvalidConfigError

# Load environment variables
load_dotenv()


class DatabaseConfig:
    """Database connection and settings."""

    DATABASE_URL = os.getenv(
        "DATABASE_URL",
        "sqlite:///campaign_pricing.db"
    )

    # Database engine options
    ECHO_SQL = os.getenv("DB_ECHO", "false").lower() == "true"
    POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "5"))
    MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "10"))

    @classmethod
    def get_engine_options(cls, database_url: str = None) -> dict:
        """Get SQLAlchemy engine options."""
        url = database_url or cls.DATABASE_URL
        options = {
            "echo": cls.ECHO_SQL,
            "future": True,
        }

        # Only add pooling options for non-SQLite databases
        if not url.startswith("sqlite"):
            options.update({
                "pool_size": cls.POOL_SIZE,
                "max_overflow": cls.MAX_OVERFLOW,
                "pool_pre_ping": True,
            })

        return options


class AppConfig:
    """Application-level configuration."""

    # Environment
    ENV = os.getenv("FLASK_ENV", "production")
    DEBUG = os.getenv("DEBUG", "false").lower() == "true"

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    VERBOSE = os.getenv("VERBOSE", "false").lower() == "true"

    # Trigger authentication (bearer token shared with the scheduler)
    AUTH_ENABLED = os.getenv("AUTH_ENABLED", "true").lower() == "true"
    CRON_SECRET = os.getenv("CRON_SECRET", "")

    @classmethod
    def validate(cls):
        """Validate critical configuration."""
        if cls.ENV == "production" and cls.AUTH_ENABLED and not cls.CRON_SECRET:
            raise InvalidConfigError(
                "CRON_SECRET must be set in production environment. "
                "Set the CRON_SECRET environment variable or disable AUTH_ENABLED."
            )


class EngineConfig:
    """Discount engine run settings."""

    # Run serialization
    LOCK_BACKEND = os.getenv("ENGINE_LOCK_BACKEND", "database").lower()
    LOCK_NAME = os.getenv("ENGINE_LOCK_NAME", "discount-engine")
    LOCK_LEASE_SECONDS = int(os.getenv("ENGINE_LOCK_LEASE_SECONDS", "300"))

    @classmethod
    def validate(cls):
        """Validate engine configuration."""
        if cls.LOCK_BACKEND not in ("database", "local"):
            raise InvalidConfigError(
                f"Unknown ENGINE_LOCK_BACKEND: {cls.LOCK_BACKEND!r}",
                details={"allowed": ["database", "local"]},
            )
        if cls.LOCK_LEASE_SECONDS <= 0:
            raise InvalidConfigError("ENGINE_LOCK_LEASE_SECONDS must be positive")


class Config:
    """
    Unified configuration class combining all config sections.

    Usage:
        from campaign_engine.core.config import Config

        db_url = Config.database.DATABASE_URL
        lease = Config.engine.LOCK_LEASE_SECONDS
        log_level = Config.app.LOG_LEVEL
    """

    database = DatabaseConfig
    app = AppConfig
    engine = EngineConfig

    @classmethod
    def initialize(cls):
        """Initialize configuration and validate settings."""
        cls.app.validate()
        cls.engine.validate()

    @classmethod
    def get_flask_config(cls) -> dict:
        """Get configuration dict for Flask app."""
        return {
            "DEBUG": cls.app.DEBUG,
            "AUTH_ENABLED": cls.app.AUTH_ENABLED,
            "CRON_SECRET": cls.app.CRON_SECRET,
            "VERBOSE": cls.app.VERBOSE,
        }

    @classmethod
    def summary(cls) -> str:
        """Get configuration summary for logging."""
        return f"""
Configuration Summary:
  Environment: {cls.app.ENV}
  Debug: {cls.app.DEBUG}
  Auth Enabled: {cls.app.AUTH_ENABLED}
  Database: {cls.database.DATABASE_URL}
  Lock Backend: {cls.engine.LOCK_BACKEND} ({cls.engine.LOCK_NAME}, {cls.engine.LOCK_LEASE_SECONDS}s lease)
  Log Level: {cls.app.LOG_LEVEL}
        """.strip()
