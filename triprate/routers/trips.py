from __future__ import annotations

from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from triprate.core.config import Settings
from triprate.core.errors import reject_invalid
from triprate.db.dal import Database
from triprate.models.currency import Currency, find_currency
from triprate.models.trip import Trip, TripCreate, TripUpdate
from triprate.routers.deps import get_app_settings, get_db, get_trip_or_404
from triprate.routers.exchanges import ExchangeOut
from triprate.services.reporting import (
    PurchaseLine,
    TripStatistics,
    build_trip_statistics,
    purchase_line,
)
from triprate.services.validation import validate_trip

router = APIRouter(prefix="/trips", tags=["trips"])


class TripOut(BaseModel):
    id: UUID
    name: str
    country: str
    currency: Currency
    start_date: date
    end_date: date
    duration_days: int
    exchange_count: int
    purchase_count: int


class TripDetail(TripOut):
    recent_exchanges: List[ExchangeOut]
    recent_purchases: List[PurchaseLine]


class TripIssues(BaseModel):
    trip_id: UUID
    issues: List[str]


def _trip_out(trip: Trip) -> TripOut:
    return TripOut(
        id=trip.id,
        name=trip.name,
        country=trip.country,
        currency=trip.currency,
        start_date=trip.start_date,
        end_date=trip.end_date,
        duration_days=trip.duration_days,
        exchange_count=len(trip.exchanges),
        purchase_count=len(trip.purchases),
    )


def _currency(code: str) -> Currency:
    currency = find_currency(code)
    if currency is None:
        raise HTTPException(status_code=400, detail=f"unsupported currency {code!r}")
    return currency


@router.get("/", response_model=List[TripOut], summary="List trips")
async def list_trips(db: Database = Depends(get_db)):
    return [_trip_out(t) for t in db.list_trips()]


@router.post(
    "/",
    response_model=TripOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create trip",
)
async def create_trip(payload: TripCreate, db: Database = Depends(get_db)):
    reject_invalid(
        validate_trip(payload.name, payload.country, payload.start_date, payload.end_date)
    )
    trip = Trip(
        name=payload.name.strip(),
        country=payload.country.strip(),
        currency=_currency(payload.currency_code),
        start_date=payload.start_date,
        end_date=payload.end_date,
    )
    try:
        db.create_trip(trip)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return _trip_out(trip)


# Declared before /{trip_id} so "statistics" is not parsed as an id.
@router.get(
    "/statistics",
    response_model=TripStatistics,
    summary="Completed / active / upcoming trip counts",
)
async def trip_statistics(
    as_of: Optional[date] = Query(None, description="Reference date (defaults to today)"),
    db: Database = Depends(get_db),
):
    return build_trip_statistics(db.load_trips(), as_of=as_of)


@router.get("/{trip_id}", response_model=TripDetail, summary="Get trip details")
async def get_trip(
    trip: Trip = Depends(get_trip_or_404),
    settings: Settings = Depends(get_app_settings),
):
    limit = settings.recent_records_limit
    rate = trip.weighted_average_rate
    return TripDetail(
        **_trip_out(trip).model_dump(),
        recent_exchanges=[ExchangeOut.from_record(e) for e in trip.recent_exchanges(limit)],
        recent_purchases=[purchase_line(p, rate) for p in trip.recent_purchases(limit)],
    )


@router.patch("/{trip_id}", response_model=TripOut, summary="Update trip metadata")
async def update_trip(
    payload: TripUpdate,
    trip: Trip = Depends(get_trip_or_404),
    db: Database = Depends(get_db),
):
    updates = payload.model_dump(exclude_none=True)
    for key in ("name", "country"):
        if key in updates:
            updates[key] = updates[key].strip()
    updated = trip.model_copy(update=updates)
    reject_invalid(
        validate_trip(updated.name, updated.country, updated.start_date, updated.end_date)
    )
    try:
        db.update_trip(updated)
    except LookupError:
        raise HTTPException(status_code=404, detail="trip not found")
    return _trip_out(updated)


@router.delete(
    "/{trip_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete trip with its exchanges and purchases",
)
async def delete_trip(trip_id: UUID, db: Database = Depends(get_db)):
    try:
        db.delete_trip(trip_id)
    except LookupError:
        raise HTTPException(status_code=404, detail="trip not found")


@router.get(
    "/{trip_id}/issues",
    response_model=TripIssues,
    summary="Integrity problems in stored trip data",
)
async def trip_issues(trip: Trip = Depends(get_trip_or_404)):
    return TripIssues(trip_id=trip.id, issues=trip.validate_data())
