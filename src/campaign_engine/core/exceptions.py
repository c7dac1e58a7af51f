# src/campaign_engine/core/exceptions.py

"""
Custom exceptions for the application.

Separates rule-level failures (recovered by the engine, the run continues)
from engine-level failures (the run stops and reports success=False).
"""


class AppException(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert exception to dictionary for JSON responses."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details
        }


# Engine exceptions
class EngineError(AppException):
    """Base class for discount engine errors."""
    pass


class RuleEvaluationError(EngineError):
    """Error scoped to a single rule pass."""
    pass


class InvalidRuleError(RuleEvaluationError):
    """Rule configuration cannot be evaluated."""
    pass


class EngineBusyError(EngineError):
    """Another engine run currently holds the run lock."""
    pass


class RunLockLostError(EngineError):
    """The run lock expired and was taken over while this run was in progress."""
    pass


# Database exceptions
class DatabaseError(AppException):
    """Base class for database errors."""
    pass


class DatabaseConnectionError(DatabaseError):
    """Error connecting to database."""
    pass


# Configuration exceptions
class ConfigurationError(AppException):
    """Base class for configuration errors."""
    pass


class InvalidConfigError(ConfigurationError):
    """Configuration value is invalid."""
    pass
