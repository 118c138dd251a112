"""Money / rounding helpers.

Only the reporting layer rounds; engine values keep full precision. Home
amounts use two places, foreign balances the currency's own decimal places.
"""

from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP


def round_places(value: float, places: int) -> float:
    """Half-up rounding through the decimal text of ``value``."""
    exponent = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP))


def round2(value: float) -> float:
    return round_places(value, 2)
