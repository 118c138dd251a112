from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Sequence
from uuid import UUID

from triprate.models.exchange import ExchangeTransaction
from triprate.models.purchase import PurchaseTransaction
from triprate.models.trip import Trip
from triprate.services import aggregator
from triprate.services.currency_policy import get_decimal_places
from triprate.services.money import round2, round_places
from triprate.services.rate_normalizer import is_computable

"""Trip summary and statistics for the presentation layer.

Builds immutable result objects out of aggregator outputs so routers never
re-derive business numbers. Sentinel rates become ``None`` ("not
computable") here. Home-currency totals are rounded with `round2` and the
foreign balance to the currency's decimal places; rates and fee percentages
keep full precision.
"""


def _rate_or_none(rate: float) -> Optional[float]:
    return rate if is_computable(rate) else None


@dataclass(frozen=True)
class ExchangeLine:
    id: UUID
    date: date
    input_mode: str
    home_amount_spent: float
    foreign_amount_received: float
    canonical_rate: Optional[float]
    actual_rate: Optional[float]
    fee_percent: Optional[float]
    is_high_fee: bool


@dataclass(frozen=True)
class PurchaseLine:
    id: UUID
    date: date
    description: str
    foreign_amount_spent: float
    home_amount_equivalent: Optional[float]


@dataclass(frozen=True)
class ExchangeAnalysis:
    count: int
    total_home_spent: float
    total_foreign_received: float
    weighted_average_rate: Optional[float]
    min_actual_rate: Optional[float]
    max_actual_rate: Optional[float]
    average_fee_percent: Optional[float]
    high_fee_count: int
    mode_breakdown: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class PurchaseAnalysis:
    count: int
    total_foreign_spent: float
    total_home_equivalent: Optional[float]
    largest: Optional[PurchaseLine]
    smallest: Optional[PurchaseLine]


@dataclass(frozen=True)
class TripSummary:
    trip_id: UUID
    name: str
    country: str
    currency_code: str
    start_date: date
    end_date: date
    duration_days: int
    exchange: ExchangeAnalysis
    purchase: PurchaseAnalysis
    remaining_foreign: float
    exchanges: List[ExchangeLine]
    purchases: List[PurchaseLine]
    issues: List[str]


@dataclass(frozen=True)
class TripStatistics:
    completed: int
    active: int
    upcoming: int
    total: int


def exchange_line(exchange: ExchangeTransaction) -> ExchangeLine:
    return ExchangeLine(
        id=exchange.id,
        date=exchange.date,
        input_mode=exchange.input_mode.value,
        home_amount_spent=exchange.home_amount_spent,
        foreign_amount_received=exchange.foreign_amount_received,
        canonical_rate=_rate_or_none(exchange.canonical_rate),
        actual_rate=_rate_or_none(exchange.actual_rate),
        fee_percent=exchange.fee_percent,
        is_high_fee=exchange.is_high_fee,
    )


def purchase_line(purchase: PurchaseTransaction, rate: float) -> PurchaseLine:
    home = None
    if is_computable(rate) and purchase.foreign_amount_spent > 0:
        home = round2(purchase.home_amount_equivalent(rate))
    return PurchaseLine(
        id=purchase.id,
        date=purchase.date,
        description=purchase.description,
        foreign_amount_spent=purchase.foreign_amount_spent,
        home_amount_equivalent=home,
    )


def analyze_exchanges(exchanges: Sequence[ExchangeTransaction]) -> ExchangeAnalysis:
    valid = aggregator.usable_exchanges(exchanges)
    actual_rates = [e.actual_rate for e in valid]
    fees = [e.fee_percent for e in valid if e.fee_percent is not None]
    breakdown: Dict[str, int] = {}
    for exchange in exchanges:
        key = exchange.input_mode.value
        breakdown[key] = breakdown.get(key, 0) + 1
    return ExchangeAnalysis(
        count=len(exchanges),
        total_home_spent=round2(aggregator.total_exchanged_home(exchanges)),
        total_foreign_received=aggregator.total_foreign_obtained(exchanges),
        weighted_average_rate=_rate_or_none(aggregator.weighted_average_rate(exchanges)),
        min_actual_rate=min(actual_rates) if actual_rates else None,
        max_actual_rate=max(actual_rates) if actual_rates else None,
        average_fee_percent=sum(fees) / len(fees) if fees else None,
        high_fee_count=sum(1 for e in exchanges if e.is_high_fee),
        mode_breakdown=breakdown,
    )


def analyze_purchases(
    purchases: Sequence[PurchaseTransaction], rate: float
) -> PurchaseAnalysis:
    valid = aggregator.usable_purchases(purchases)
    largest = max(valid, key=lambda p: p.foreign_amount_spent) if valid else None
    smallest = min(valid, key=lambda p: p.foreign_amount_spent) if valid else None
    total_home = None
    if is_computable(rate):
        total_home = round2(aggregator.total_home_equivalent(purchases, rate))
    return PurchaseAnalysis(
        count=len(purchases),
        total_foreign_spent=aggregator.total_foreign_spent(purchases),
        total_home_equivalent=total_home,
        largest=purchase_line(largest, rate) if largest else None,
        smallest=purchase_line(smallest, rate) if smallest else None,
    )


def build_trip_summary(trip: Trip) -> TripSummary:
    rate = trip.weighted_average_rate
    exchanges = sorted(trip.exchanges, key=lambda e: e.date)
    purchases = sorted(trip.purchases, key=lambda p: p.date)
    return TripSummary(
        trip_id=trip.id,
        name=trip.name,
        country=trip.country,
        currency_code=trip.currency.code,
        start_date=trip.start_date,
        end_date=trip.end_date,
        duration_days=trip.duration_days,
        exchange=analyze_exchanges(trip.exchanges),
        purchase=analyze_purchases(trip.purchases, rate),
        remaining_foreign=round_places(
            trip.remaining_foreign, get_decimal_places(trip.currency.code)
        ),
        exchanges=[exchange_line(e) for e in exchanges],
        purchases=[purchase_line(p, rate) for p in purchases],
        issues=trip.validate_data(),
    )


def build_trip_statistics(
    trips: Sequence[Trip], as_of: Optional[date] = None
) -> TripStatistics:
    today = as_of or date.today()
    completed = sum(1 for t in trips if t.end_date < today)
    active = sum(1 for t in trips if t.is_active(today))
    upcoming = sum(1 for t in trips if t.start_date > today)
    return TripStatistics(
        completed=completed, active=active, upcoming=upcoming, total=len(trips)
    )


__all__ = [
    "ExchangeLine",
    "PurchaseLine",
    "ExchangeAnalysis",
    "PurchaseAnalysis",
    "TripSummary",
    "TripStatistics",
    "exchange_line",
    "purchase_line",
    "analyze_exchanges",
    "analyze_purchases",
    "build_trip_summary",
    "build_trip_statistics",
]
