from __future__ import annotations

from datetime import date, timedelta
from typing import List, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from triprate.models.currency import Currency, find_currency
from triprate.models.exchange import ExchangeTransaction
from triprate.models.purchase import PurchaseTransaction
from triprate.services import aggregator


def _default_end() -> date:
    return date.today() + timedelta(days=7)


class Trip(BaseModel):
    """Aggregate root owning a trip's exchanges and purchases.

    Records inside the collections are frozen, so sharing them between trips
    never leaks mutations. Every aggregate below is recomputed on access.
    """

    id: UUID = Field(default_factory=uuid4)
    name: str
    country: str = ""
    currency: Currency
    start_date: date = Field(default_factory=date.today)
    end_date: date = Field(default_factory=_default_end)
    exchanges: List[ExchangeTransaction] = Field(default_factory=list)
    purchases: List[PurchaseTransaction] = Field(default_factory=list)

    # ------------------------------------------------------------------
    # Collection mutations
    def add_exchange(self, exchange: ExchangeTransaction) -> None:
        self.exchanges.append(exchange)

    def replace_exchange(self, exchange: ExchangeTransaction) -> None:
        for index, current in enumerate(self.exchanges):
            if current.id == exchange.id:
                self.exchanges[index] = exchange
                return
        raise LookupError(f"exchange {exchange.id} not found in trip {self.id}")

    def remove_exchange(self, exchange_id: UUID) -> ExchangeTransaction:
        for index, current in enumerate(self.exchanges):
            if current.id == exchange_id:
                return self.exchanges.pop(index)
        raise LookupError(f"exchange {exchange_id} not found in trip {self.id}")

    def add_purchase(self, purchase: PurchaseTransaction) -> None:
        self.purchases.append(purchase)

    def replace_purchase(self, purchase: PurchaseTransaction) -> None:
        for index, current in enumerate(self.purchases):
            if current.id == purchase.id:
                self.purchases[index] = purchase
                return
        raise LookupError(f"purchase {purchase.id} not found in trip {self.id}")

    def remove_purchase(self, purchase_id: UUID) -> PurchaseTransaction:
        for index, current in enumerate(self.purchases):
            if current.id == purchase_id:
                return self.purchases.pop(index)
        raise LookupError(f"purchase {purchase_id} not found in trip {self.id}")

    # ------------------------------------------------------------------
    # Derived values
    @property
    def duration_days(self) -> int:
        """Inclusive day count, at least 1."""
        return max(1, (self.end_date - self.start_date).days + 1)

    def is_active(self, as_of: Optional[date] = None) -> bool:
        today = as_of or date.today()
        return self.start_date <= today <= self.end_date

    def recent_exchanges(self, limit: int = 3) -> List[ExchangeTransaction]:
        return sorted(self.exchanges, key=lambda e: e.date, reverse=True)[:limit]

    def recent_purchases(self, limit: int = 3) -> List[PurchaseTransaction]:
        return sorted(self.purchases, key=lambda p: p.date, reverse=True)[:limit]

    @property
    def weighted_average_rate(self) -> float:
        return aggregator.weighted_average_rate(self.exchanges)

    @property
    def total_home_equivalent(self) -> float:
        return aggregator.total_home_equivalent(
            self.purchases, self.weighted_average_rate
        )

    @property
    def total_exchanged_home(self) -> float:
        return aggregator.total_exchanged_home(self.exchanges)

    @property
    def total_foreign_obtained(self) -> float:
        return aggregator.total_foreign_obtained(self.exchanges)

    @property
    def total_foreign_spent(self) -> float:
        return aggregator.total_foreign_spent(self.purchases)

    @property
    def remaining_foreign(self) -> float:
        return aggregator.remaining_foreign(self.exchanges, self.purchases)

    def validate_data(self) -> List[str]:
        """Integrity problems found in the stored data (reported, not fixed)."""
        issues: List[str] = []
        if self.start_date > self.end_date:
            issues.append("start date is after end date")
        for position, exchange in enumerate(self.exchanges, start=1):
            if exchange.home_amount_spent <= 0:
                issues.append(f"exchange {position}: home-currency amount is invalid")
            if exchange.foreign_amount_received <= 0:
                issues.append(f"exchange {position}: foreign-currency amount is invalid")
            if not exchange.is_rate_consistent:
                issues.append(
                    f"exchange {position}: stored rate does not match its rate input"
                )
        for position, purchase in enumerate(self.purchases, start=1):
            if purchase.foreign_amount_spent <= 0:
                issues.append(f"purchase {position}: foreign-currency amount is invalid")
        return issues


def _currency_from_code(code: str) -> str:
    normalized = code.strip().upper()
    if find_currency(normalized) is None:
        raise ValueError("unsupported currency")
    return normalized


class TripCreate(BaseModel):
    name: str
    country: str
    currency_code: str
    start_date: date
    end_date: date

    @field_validator("currency_code")
    def _valid_currency(cls, v: str) -> str:
        return _currency_from_code(v)


class TripUpdate(BaseModel):
    """Editable trip metadata.

    The currency is fixed at creation: recorded exchanges and purchases are
    denominated in it, so a `currency_code` field is rejected.
    """

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    country: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def _at_least_one(self) -> "TripUpdate":
        if not any(
            getattr(self, field) is not None
            for field in ("name", "country", "start_date", "end_date")
        ):
            raise ValueError("at least one field must be provided")
        return self
