# src/campaign_engine/core/types.py

"""
Type definitions and data classes for the application.

Structured results passed between the engine components and returned
to the trigger surfaces (HTTP, CLI).
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Optional, List

from .utils import utcnow


@dataclass
class RuleOutcome:
    """Result of evaluating a single rule."""

    items_affected: int = 0
    errors: List[str] = field(default_factory=list)


@dataclass
class RuleLogEntry:
    """Per-rule line of a run summary."""

    rule_id: str
    rule_name: str
    items_affected: int

    def to_dict(self) -> dict:
        """Convert to the camelCase shape returned to the scheduler."""
        return {
            "ruleId": self.rule_id,
            "ruleName": self.rule_name,
            "itemsAffected": self.items_affected,
        }


@dataclass
class RunSummary:
    """
    Complete result of one discount engine run.

    Partial success is reported as counts plus a non-empty errors list;
    success is False only when the run could not establish a baseline
    or a rule list.
    """

    success: bool = True
    rules_processed: int = 0
    items_updated: int = 0
    items_cleared: int = 0
    errors: List[str] = field(default_factory=list)
    logs: List[RuleLogEntry] = field(default_factory=list)

    # Timestamps
    started_at: datetime = field(default_factory=utcnow)
    completed_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        """Convert to dictionary (JSON-serializable)."""
        return {
            "success": self.success,
            "rulesProcessed": self.rules_processed,
            "itemsUpdated": self.items_updated,
            "itemsCleared": self.items_cleared,
            "errors": list(self.errors),
            "logs": [entry.to_dict() for entry in self.logs],
        }

    def message(self) -> str:
        """Human-readable one-line outcome."""
        if not self.success:
            return "Discount engine completed with errors"
        return (
            f"Discount engine completed. Processed {self.rules_processed} rules, "
            f"updated {self.items_updated} items, cleared {self.items_cleared} expired campaigns."
        )

    def mark_completed(self):
        """Mark the run as completed with current timestamp."""
        self.completed_at = utcnow()

    @property
    def duration(self) -> Optional[float]:
        if self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds()


@dataclass
class AuditStatistics:
    """Aggregate view of the audit trail."""

    records: int = 0
    rules: int = 0
    items: int = 0
    total_discount: float = 0.0
    first_change: Optional[datetime] = None
    last_change: Optional[datetime] = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        result = asdict(self)
        for key in ("first_change", "last_change"):
            if result[key] is not None:
                result[key] = result[key].isoformat()
        return result
