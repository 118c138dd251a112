from __future__ import annotations

import math
from datetime import date as date_type
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from triprate.models.constants import HIGH_FEE_THRESHOLD_PCT, RATE_NOT_COMPUTABLE
from triprate.models.fields import numeric_text
from triprate.models.rate_input import RateInputMode
from triprate.services.rate_normalizer import is_computable, normalize


class ExchangeTransaction(BaseModel):
    """One currency exchange at a counter or ATM.

    Amounts are not constrained here: historical records may carry zero or
    negative placeholders and must still load. New records only come from
    `triprate.services.transactions.build_exchange` after validation.

    `actual_rate`, `fee_percent` and `is_high_fee` are derived on every
    access so an edit to either leg keeps the fee economics consistent.
    """

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    date: date_type = Field(default_factory=date_type.today)
    home_amount_spent: float
    foreign_amount_received: float
    canonical_rate: float
    input_mode: RateInputMode = RateInputMode.LEGACY
    raw_value1: float
    raw_value2: Optional[float] = None

    @property
    def actual_rate(self) -> float:
        if self.foreign_amount_received <= 0:
            return RATE_NOT_COMPUTABLE
        return self.home_amount_spent / self.foreign_amount_received

    @property
    def fee_percent(self) -> Optional[float]:
        """Markup of the realized rate over the quoted rate, None if undefined."""
        actual = self.actual_rate
        if not is_computable(actual) or not is_computable(self.canonical_rate):
            return None
        return (actual - self.canonical_rate) * 100 / self.canonical_rate

    @property
    def is_high_fee(self) -> bool:
        fee = self.fee_percent
        return fee is not None and fee > HIGH_FEE_THRESHOLD_PCT

    @property
    def is_rate_consistent(self) -> bool:
        derived = normalize(self.input_mode, self.raw_value1, self.raw_value2)
        return math.isclose(derived, self.canonical_rate, rel_tol=1e-12, abs_tol=0.0)

    @property
    def has_valid_amounts(self) -> bool:
        return self.home_amount_spent > 0 and self.foreign_amount_received > 0


class ExchangeIn(BaseModel):
    """Raw exchange form input; values stay text until validated."""

    mode: RateInputMode
    value1: Optional[str] = None
    value2: Optional[str] = None
    home_amount: Optional[str] = None
    foreign_amount: Optional[str] = None
    date: Optional[date_type] = None

    _numbers_as_text = field_validator(
        "value1", "value2", "home_amount", "foreign_amount", mode="before"
    )(numeric_text)
