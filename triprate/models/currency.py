from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator


class Currency(BaseModel):
    """Destination currency of a trip. Shared lookup value, never mutated."""

    model_config = ConfigDict(frozen=True)

    code: str
    display_name: str

    @field_validator("code")
    def _normalize_code(cls, v: str) -> str:
        code = v.strip().upper()
        if not code:
            raise ValueError("currency code cannot be empty")
        return code


@dataclass(frozen=True)
class CurrencyLimits:
    min_amount: float
    max_amount: float
    decimal_places: int
    sample_rate: str
    display_name: str = "Foreign currency"

    def __post_init__(self) -> None:
        if not (0 < self.min_amount < self.max_amount):
            raise ValueError(
                f"invalid limits: require 0 < min_amount < max_amount "
                f"(got {self.min_amount}, {self.max_amount})"
            )

    def contains(self, amount: float) -> bool:
        return self.min_amount <= amount <= self.max_amount


CURRENCY_CATALOG: Tuple[Currency, ...] = (
    # Americas
    Currency(code="USD", display_name="US Dollar"),
    Currency(code="CAD", display_name="Canadian Dollar"),
    Currency(code="MXN", display_name="Mexican Peso"),
    # Europe
    Currency(code="EUR", display_name="Euro"),
    Currency(code="GBP", display_name="British Pound"),
    Currency(code="CHF", display_name="Swiss Franc"),
    # East Asia
    Currency(code="CNY", display_name="Chinese Yuan"),
    Currency(code="HKD", display_name="Hong Kong Dollar"),
    Currency(code="TWD", display_name="Taiwan Dollar"),
    Currency(code="KRW", display_name="South Korean Won"),
    # Southeast Asia
    Currency(code="THB", display_name="Thai Baht"),
    Currency(code="SGD", display_name="Singapore Dollar"),
    Currency(code="MYR", display_name="Malaysian Ringgit"),
    Currency(code="IDR", display_name="Indonesian Rupiah"),
    Currency(code="VND", display_name="Vietnamese Dong"),
    Currency(code="PHP", display_name="Philippine Peso"),
    # Oceania
    Currency(code="AUD", display_name="Australian Dollar"),
    Currency(code="NZD", display_name="New Zealand Dollar"),
)


def find_currency(code: str) -> Optional[Currency]:
    wanted = code.strip().upper()
    for currency in CURRENCY_CATALOG:
        if currency.code == wanted:
            return currency
    return None
