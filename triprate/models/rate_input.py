from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class RateInputMode(str, Enum):
    """How the quoted exchange rate was entered."""

    LEGACY = "legacy"  # canonical rate stored directly (pre-variant records)
    EXCHANGE_OFFICE = "exchange_office"  # "value1 home buys value2 foreign"
    PER_HOME_UNIT = "per_home_unit"  # foreign units for one home unit
    PER_FOREIGN_UNIT = "per_foreign_unit"  # home cost of one foreign unit

    @property
    def requires_second_value(self) -> bool:
        return self is RateInputMode.EXCHANGE_OFFICE


class RateInput(BaseModel):
    """A rate quote in one of the four input conventions."""

    model_config = ConfigDict(frozen=True)

    mode: RateInputMode
    value1: float = Field(..., gt=0)
    value2: Optional[float] = Field(None, gt=0)

    @model_validator(mode="before")
    @classmethod
    def _drop_unused_second_value(cls, data: Any) -> Any:
        # Single-value modes carry no second leg
        if isinstance(data, dict) and data.get("mode") not in (
            RateInputMode.EXCHANGE_OFFICE,
            RateInputMode.EXCHANGE_OFFICE.value,
        ):
            data = {**data, "value2": None}
        return data

    @model_validator(mode="after")
    def _second_value_present(self) -> "RateInput":
        if self.mode.requires_second_value and self.value2 is None:
            raise ValueError("exchange_office input requires value2")
        return self
