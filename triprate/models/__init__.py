"""Domain models for trip exchange tracking.

Only the leaf modules are re-exported here; `exchange`, `purchase` and `trip`
depend on the calculation services and are imported from their modules.
"""

from .constants import (
    HIGH_FEE_THRESHOLD_PCT,
    RATE_NOT_COMPUTABLE,
    ErrorMessages,
)  # re-export
from .currency import CURRENCY_CATALOG, Currency, CurrencyLimits, find_currency
from .rate_input import RateInput, RateInputMode

__all__ = [
    "HIGH_FEE_THRESHOLD_PCT",
    "RATE_NOT_COMPUTABLE",
    "ErrorMessages",
    "CURRENCY_CATALOG",
    "Currency",
    "CurrencyLimits",
    "find_currency",
    "RateInput",
    "RateInputMode",
]
