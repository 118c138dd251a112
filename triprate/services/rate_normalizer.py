"""Rate normalization.

Every quote convention is reduced to the canonical rate: home-currency units
per one foreign-currency unit. When the computation is undefined (division
by zero, missing second leg) the result is ``RATE_NOT_COMPUTABLE`` (0.0)
instead of an exception; the validation layer turns that into a message.
"""

from __future__ import annotations

from typing import Optional

from triprate.models.constants import RATE_NOT_COMPUTABLE
from triprate.models.rate_input import RateInput, RateInputMode


def normalize(
    mode: RateInputMode, value1: float, value2: Optional[float] = None
) -> float:
    mode = RateInputMode(mode)
    if mode is RateInputMode.LEGACY or mode is RateInputMode.PER_FOREIGN_UNIT:
        return float(value1)
    if mode is RateInputMode.EXCHANGE_OFFICE:
        if value2 is None or value2 == 0:
            return RATE_NOT_COMPUTABLE
        return value1 / value2
    if mode is RateInputMode.PER_HOME_UNIT:
        if value1 == 0:
            return RATE_NOT_COMPUTABLE
        return 1.0 / value1
    raise ValueError(f"unsupported rate input mode {mode!r}")


def normalize_input(rate_input: RateInput) -> float:
    return normalize(rate_input.mode, rate_input.value1, rate_input.value2)


def is_computable(rate: Optional[float]) -> bool:
    """True when ``rate`` is a usable measurement rather than the sentinel."""
    return rate is not None and rate > RATE_NOT_COMPUTABLE


__all__ = ["normalize", "normalize_input", "is_computable"]
