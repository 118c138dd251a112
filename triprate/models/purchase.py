from __future__ import annotations

from datetime import date as date_type
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from triprate.models.fields import numeric_text


class PurchaseTransaction(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    date: date_type = Field(default_factory=date_type.today)
    foreign_amount_spent: float
    description: str

    def home_amount_equivalent(self, rate: float) -> float:
        """Home-currency value at ``rate``; 0.0 when the rate is not usable."""
        if rate <= 0:
            return 0.0
        return self.foreign_amount_spent * rate


class PurchaseIn(BaseModel):
    foreign_amount: Optional[str] = None
    description: Optional[str] = None
    date: Optional[date_type] = None

    _number_as_text = field_validator("foreign_amount", mode="before")(numeric_text)
