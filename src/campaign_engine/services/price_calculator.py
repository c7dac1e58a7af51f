# src/campaign_engine/services/price_calculator.py
"""
Campaign price computation.

Prices are Decimal end to end and rounded to the cent with ROUND_HALF_UP.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

from ..core.constants import CENT, HUNDRED, ZERO, DiscountType
from ..core.utils import to_decimal

Number = Union[Decimal, int, float, str]


def round_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def compute_discounted_price(original_price: Number,
                             discount_type: DiscountType,
                             amount: Number) -> Decimal:
    """
    Apply a discount to a price.

    PERCENTAGE takes ``amount`` percent off; FIXED subtracts ``amount`` and
    floors at zero. Callers validate that ``amount`` is not negative.

    >>> compute_discounted_price(100, DiscountType.PERCENTAGE, 20)
    Decimal('80.00')
    >>> compute_discounted_price(10, DiscountType.FIXED, 50)
    Decimal('0.00')
    """
    price = to_decimal(original_price)
    amount = to_decimal(amount)

    if discount_type is DiscountType.PERCENTAGE:
        return round_money(price - price * amount / HUNDRED)
    if discount_type is DiscountType.FIXED:
        return round_money(max(ZERO, price - amount))
    raise ValueError(f"Unsupported discount type: {discount_type!r}")
