"""Per-currency numeric policy.

Large-denomination currencies (KRW, IDR, VND) and JPY are entered without
decimals and allow amounts up to hundreds of millions; every other code
falls back to the default bucket (0.01 .. 1,000,000 with 2 decimals).

The table is built once at import and exposed read-only, so lookups are safe
from any number of callers.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from triprate.models.constants import LARGE_DENOMINATION_CURRENCIES
from triprate.models.currency import CurrencyLimits
from triprate.models.rate_input import RateInputMode

DEFAULT_LIMITS = CurrencyLimits(
    min_amount=0.01,
    max_amount=1_000_000.0,
    decimal_places=2,
    sample_rate="6.5",
    display_name="Foreign currency",
)

_LIMITS: Mapping[str, CurrencyLimits] = MappingProxyType(
    {
        "KRW": CurrencyLimits(1.0, 100_000_000.0, 0, "917", "South Korean Won"),
        "IDR": CurrencyLimits(1.0, 500_000_000.0, 0, "1500", "Indonesian Rupiah"),
        "VND": CurrencyLimits(1.0, 1_000_000_000.0, 0, "2700", "Vietnamese Dong"),
        "JPY": CurrencyLimits(1.0, 100_000_000.0, 0, "1", "Japanese Yen"),
    }
)


def _key(code: str) -> str:
    return (code or "").strip().upper()


def get_limits(code: str) -> CurrencyLimits:
    return _LIMITS.get(_key(code), DEFAULT_LIMITS)


def get_decimal_places(code: str) -> int:
    return get_limits(code).decimal_places


def get_sample_rate(code: str) -> str:
    return get_limits(code).sample_rate


def get_display_name(code: str) -> str:
    return get_limits(code).display_name


def is_large_denomination(code: str) -> bool:
    return _key(code) in LARGE_DENOMINATION_CURRENCIES


def placeholder_values(
    mode: RateInputMode, code: str
) -> Tuple[str, Optional[str]]:
    """Sample raw inputs shown in empty rate fields for the given mode."""
    large = is_large_denomination(code)
    if mode in (RateInputMode.LEGACY, RateInputMode.PER_FOREIGN_UNIT):
        return ("150.0", None)
    if mode is RateInputMode.EXCHANGE_OFFICE:
        return ("100", get_sample_rate(code) if large else "6.5")
    if mode is RateInputMode.PER_HOME_UNIT:
        return ("9.17" if large else "0.0067", None)
    raise ValueError(f"unsupported rate input mode {mode!r}")


__all__ = [
    "DEFAULT_LIMITS",
    "get_limits",
    "get_decimal_places",
    "get_sample_rate",
    "get_display_name",
    "is_large_denomination",
    "placeholder_values",
]
