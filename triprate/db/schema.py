"""Database schema DDL definitions and initialization utilities.

Tables:
  - trips: trip records with their destination currency
  - exchanges: currency exchanges, scoped per trip (cascade delete)
  - purchases: foreign-currency purchases, scoped per trip (cascade delete)
  - metadata: key/value store (schema version)

Exchange rows keep the raw rate input (input_mode, raw_value1, raw_value2)
next to the cached canonical_rate so the rate can be re-derived. Rows written
by schema version 1 have no input mode; the repair pass fills it in.
"""

from __future__ import annotations
import sqlite3
from typing import Sequence
from pathlib import Path

BASIC_UTC_NOW = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"

TRIPS_DDL = f"""
CREATE TABLE IF NOT EXISTS trips (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    country TEXT NOT NULL DEFAULT '',
    currency_code TEXT NOT NULL,
    currency_name TEXT NOT NULL,
    start_date TEXT NOT NULL, -- ISO date (YYYY-MM-DD)
    end_date TEXT NOT NULL,
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

EXCHANGES_DDL = f"""
CREATE TABLE IF NOT EXISTS exchanges (
    id TEXT PRIMARY KEY,
    trip_id TEXT NOT NULL,
    date TEXT NOT NULL, -- ISO date (YYYY-MM-DD)
    home_amount_spent REAL NOT NULL,
    foreign_amount_received REAL NOT NULL,
    canonical_rate REAL NOT NULL,
    input_mode TEXT, -- NULL for records predating rate input modes
    raw_value1 REAL,
    raw_value2 REAL,
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    FOREIGN KEY (trip_id) REFERENCES trips(id) ON DELETE CASCADE
);
"""

PURCHASES_DDL = f"""
CREATE TABLE IF NOT EXISTS purchases (
    id TEXT PRIMARY KEY,
    trip_id TEXT NOT NULL,
    date TEXT NOT NULL, -- ISO date (YYYY-MM-DD)
    foreign_amount_spent REAL NOT NULL,
    description TEXT NOT NULL,
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    FOREIGN KEY (trip_id) REFERENCES trips(id) ON DELETE CASCADE
);
"""

METADATA_DDL = f"""
CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

TRIPS_START_INDEX_DDL = "CREATE INDEX IF NOT EXISTS idx_trips_start ON trips(start_date);"
EXCHANGES_TRIP_INDEX_DDL = (
    "CREATE INDEX IF NOT EXISTS idx_exchanges_trip_date ON exchanges(trip_id, date);"
)
PURCHASES_TRIP_INDEX_DDL = (
    "CREATE INDEX IF NOT EXISTS idx_purchases_trip_date ON purchases(trip_id, date);"
)

DDL_ORDER: Sequence[str] = (
    TRIPS_DDL,
    EXCHANGES_DDL,
    PURCHASES_DDL,
    METADATA_DDL,
)


def init_db(path: Path) -> None:
    """Create all tables idempotently.

    Parameters
    ----------
    path: Path to SQLite database file.
    """
    conn = sqlite3.connect(path)
    try:
        cur = conn.cursor()
        for ddl in DDL_ORDER:
            cur.execute(ddl)
        _ensure_indexes(cur)
        conn.commit()
    finally:
        conn.close()


def _ensure_indexes(cur: sqlite3.Cursor) -> None:
    for ddl in (
        TRIPS_START_INDEX_DDL,
        EXCHANGES_TRIP_INDEX_DDL,
        PURCHASES_TRIP_INDEX_DDL,
    ):
        cur.execute(ddl)
