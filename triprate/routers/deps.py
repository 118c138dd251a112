from __future__ import annotations

from uuid import UUID

from fastapi import Depends, HTTPException, Request

from triprate.core.config import Settings
from triprate.db.dal import Database
from triprate.models.trip import Trip

# Dependencies shared by the trip-scoped routers ------------------


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db(settings: Settings = Depends(get_app_settings)) -> Database:
    return Database(settings.db_path)  # type: ignore[arg-type]


def get_trip_or_404(trip_id: UUID, db: Database = Depends(get_db)) -> Trip:
    trip = db.get_trip(trip_id)
    if trip is None:
        raise HTTPException(status_code=404, detail="trip not found")
    return trip
