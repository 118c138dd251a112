from __future__ import annotations

from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from triprate.core.errors import require_valid
from triprate.db.dal import Database
from triprate.models.exchange import ExchangeIn, ExchangeTransaction
from triprate.models.rate_input import RateInputMode
from triprate.models.trip import Trip
from triprate.routers.deps import get_db, get_trip_or_404
from triprate.services.reporting import exchange_line
from triprate.services.transactions import (
    exchange_from_input,
    exchange_preview,
    rebuild_exchange,
    validate_exchange_input,
)
from triprate.services.validation import quick_validate

router = APIRouter(prefix="/trips/{trip_id}/exchanges", tags=["exchanges"])


class ExchangeOut(BaseModel):
    id: UUID
    date: date
    input_mode: RateInputMode
    raw_value1: float
    raw_value2: Optional[float] = None
    home_amount_spent: float
    foreign_amount_received: float
    canonical_rate: Optional[float] = None
    actual_rate: Optional[float] = None
    fee_percent: Optional[float] = None
    is_high_fee: bool

    @classmethod
    def from_record(cls, exchange: ExchangeTransaction) -> "ExchangeOut":
        line = exchange_line(exchange)
        return cls(
            id=exchange.id,
            date=exchange.date,
            input_mode=exchange.input_mode,
            raw_value1=exchange.raw_value1,
            raw_value2=exchange.raw_value2,
            home_amount_spent=exchange.home_amount_spent,
            foreign_amount_received=exchange.foreign_amount_received,
            canonical_rate=line.canonical_rate,
            actual_rate=line.actual_rate,
            fee_percent=line.fee_percent,
            is_high_fee=line.is_high_fee,
        )


class PreviewOut(BaseModel):
    canonical_rate: float
    actual_rate: float
    fee_percent: Optional[float] = None
    is_high_fee: bool


class CheckResult(BaseModel):
    ok: bool
    message: Optional[str] = None
    preview: Optional[PreviewOut] = None


def _find(trip: Trip, exchange_id: UUID) -> ExchangeTransaction:
    for exchange in trip.exchanges:
        if exchange.id == exchange_id:
            return exchange
    raise HTTPException(status_code=404, detail="exchange not found")


@router.get("/", response_model=List[ExchangeOut], summary="List exchanges of a trip")
async def list_exchanges(trip: Trip = Depends(get_trip_or_404)):
    return [ExchangeOut.from_record(e) for e in sorted(trip.exchanges, key=lambda e: e.date)]


@router.post(
    "/",
    response_model=ExchangeOut,
    status_code=status.HTTP_201_CREATED,
    summary="Record an exchange",
)
async def create_exchange(
    payload: ExchangeIn,
    trip: Trip = Depends(get_trip_or_404),
    db: Database = Depends(get_db),
):
    """Validate the raw form input and persist the exchange.

    The rate is normalized from the chosen input mode; nothing is written
    when validation fails.
    """
    result, exchange = exchange_from_input(payload, trip.currency.code)
    exchange = require_valid(result, exchange)
    try:
        db.insert_exchange(trip.id, exchange)
    except LookupError:
        raise HTTPException(status_code=404, detail="trip not found")
    return ExchangeOut.from_record(exchange)


@router.post(
    "/check",
    response_model=CheckResult,
    summary="Validate exchange input without saving",
)
async def check_exchange(
    payload: ExchangeIn,
    quick: bool = Query(False, description="Only check parsing and positivity"),
    trip: Trip = Depends(get_trip_or_404),
):
    """Feedback for a form being filled in.

    ``quick=true`` runs the light check used while typing and never returns
    a preview; the full check also returns the calculated rates.
    """
    if quick:
        result = quick_validate(
            payload.mode,
            payload.value1,
            payload.value2,
            payload.home_amount,
            payload.foreign_amount,
        )
        return CheckResult(ok=result.ok, message=result.message)
    result = validate_exchange_input(payload, trip.currency.code)
    if not result:
        return CheckResult(ok=False, message=result.message)
    preview = exchange_preview(payload, trip.currency.code)
    return CheckResult(
        ok=True,
        preview=PreviewOut(
            canonical_rate=preview.canonical_rate,
            actual_rate=preview.actual_rate,
            fee_percent=preview.fee_percent,
            is_high_fee=preview.is_high_fee,
        )
        if preview
        else None,
    )


@router.put(
    "/{exchange_id}",
    response_model=ExchangeOut,
    summary="Replace an exchange with re-validated input",
)
async def replace_exchange(
    exchange_id: UUID,
    payload: ExchangeIn,
    trip: Trip = Depends(get_trip_or_404),
    db: Database = Depends(get_db),
):
    existing = _find(trip, exchange_id)
    result, exchange = rebuild_exchange(existing, payload, trip.currency.code)
    exchange = require_valid(result, exchange)
    try:
        db.replace_exchange(trip.id, exchange)
    except LookupError:
        raise HTTPException(status_code=404, detail="exchange not found")
    return ExchangeOut.from_record(exchange)


@router.delete(
    "/{exchange_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an exchange",
)
async def delete_exchange(
    exchange_id: UUID,
    trip: Trip = Depends(get_trip_or_404),
    db: Database = Depends(get_db),
):
    try:
        db.delete_exchange(trip.id, exchange_id)
    except LookupError:
        raise HTTPException(status_code=404, detail="exchange not found")
