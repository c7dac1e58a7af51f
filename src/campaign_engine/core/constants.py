# src/campaign_engine/core/constants.py

"""
Application-wide constants and enumerations.

Defines rule and discount kinds and the monetary precision used
throughout the engine.
"""

from decimal import Decimal
from enum import Enum


class RuleType(Enum):
    """What a discount rule targets."""
    CATEGORY = "CATEGORY"
    BRAND = "BRAND"
    CART_AMOUNT = "CART_AMOUNT"
    USER_GROUP = "USER_GROUP"


# Rule types the campaign pricing pass evaluates; the others are cart-time rules
CAMPAIGN_RULE_TYPES = (RuleType.CATEGORY, RuleType.BRAND)


class DiscountType(Enum):
    """How a discount amount is applied to a price."""
    PERCENTAGE = "PERCENTAGE"
    FIXED = "FIXED"


# Money
CENT = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")

# Fallback priority for an incumbent rule id that no longer resolves to a rule
MISSING_INCUMBENT_PRIORITY = 0
