from __future__ import annotations

from fastapi import APIRouter, Depends

from triprate.models.trip import Trip
from triprate.routers.deps import get_trip_or_404
from triprate.services.reporting import TripSummary, build_trip_summary

router = APIRouter(tags=["summary"])


@router.get("/trips/{trip_id}/summary", response_model=TripSummary, summary="Trip summary")
async def trip_summary(trip: Trip = Depends(get_trip_or_404)):
    """Exchange and purchase analysis, remaining balance and integrity issues.

    Rates that cannot be computed (no usable exchanges, zero foreign legs)
    are reported as null rather than zero.
    """
    return build_trip_summary(trip)
