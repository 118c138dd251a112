from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from triprate.core.errors import require_valid
from triprate.db.dal import Database
from triprate.models.purchase import PurchaseIn, PurchaseTransaction
from triprate.models.trip import Trip
from triprate.routers.deps import get_db, get_trip_or_404
from triprate.services.reporting import PurchaseLine, purchase_line
from triprate.services.transactions import purchase_from_input, rebuild_purchase

router = APIRouter(prefix="/trips/{trip_id}/purchases", tags=["purchases"])


def _find(trip: Trip, purchase_id: UUID) -> PurchaseTransaction:
    for purchase in trip.purchases:
        if purchase.id == purchase_id:
            return purchase
    raise HTTPException(status_code=404, detail="purchase not found")


@router.get(
    "/",
    response_model=List[PurchaseLine],
    summary="List purchases with home-currency equivalents",
)
async def list_purchases(trip: Trip = Depends(get_trip_or_404)):
    rate = trip.weighted_average_rate
    return [purchase_line(p, rate) for p in sorted(trip.purchases, key=lambda p: p.date)]


@router.post(
    "/",
    response_model=PurchaseLine,
    status_code=status.HTTP_201_CREATED,
    summary="Record a purchase",
)
async def create_purchase(
    payload: PurchaseIn,
    trip: Trip = Depends(get_trip_or_404),
    db: Database = Depends(get_db),
):
    result, purchase = purchase_from_input(payload, trip.currency.code)
    purchase = require_valid(result, purchase)
    try:
        db.insert_purchase(trip.id, purchase)
    except LookupError:
        raise HTTPException(status_code=404, detail="trip not found")
    return purchase_line(purchase, trip.weighted_average_rate)


@router.put("/{purchase_id}", response_model=PurchaseLine, summary="Replace a purchase")
async def replace_purchase(
    purchase_id: UUID,
    payload: PurchaseIn,
    trip: Trip = Depends(get_trip_or_404),
    db: Database = Depends(get_db),
):
    existing = _find(trip, purchase_id)
    result, purchase = rebuild_purchase(existing, payload, trip.currency.code)
    purchase = require_valid(result, purchase)
    try:
        db.replace_purchase(trip.id, purchase)
    except LookupError:
        raise HTTPException(status_code=404, detail="purchase not found")
    return purchase_line(purchase, trip.weighted_average_rate)


@router.delete(
    "/{purchase_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a purchase",
)
async def delete_purchase(
    purchase_id: UUID,
    trip: Trip = Depends(get_trip_or_404),
    db: Database = Depends(get_db),
):
    try:
        db.delete_purchase(trip.id, purchase_id)
    except LookupError:
        raise HTTPException(status_code=404, detail="purchase not found")
