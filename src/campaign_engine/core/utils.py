# src/campaign_engine/core/utils.py

"""
Utility functions used across the application.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Union


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, matching stored column values."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_decimal(value: Union[Decimal, int, float, str]) -> Decimal:
    """
    Coerce a numeric value to Decimal.

    Floats go through their string form so 19.99 stays 19.99 instead of
    picking up binary noise.
    """
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def to_naive_utc(value: datetime) -> datetime:
    """Offset-aware values are converted to UTC; naive values are taken as UTC already."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def parse_timestamp(value: str) -> datetime:
    """
    argparse type for ISO 8601 timestamps.

    >>> parse_timestamp("2026-03-15T17:00:00+06:00")
    datetime.datetime(2026, 3, 15, 11, 0)
    """
    return to_naive_utc(datetime.fromisoformat(value))
