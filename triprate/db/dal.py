"""Data Access Layer for trips and their transactions.

Responsibilities
----------------
- Load and save whole `Trip` aggregates (the persistence boundary) with every
  exchange field preserved, including the raw rate input.
- Provide the fine-grained CRUD helpers used by the HTTP routers.
- Keep transactions scoped to their trip; deleting a trip cascades.

Rows lacking an input mode are passed through the repair step on read, so a
database that has not been migrated yet still loads consistent records.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path
import sqlite3
from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

from triprate.models.currency import Currency
from triprate.models.exchange import ExchangeTransaction
from triprate.models.purchase import PurchaseTransaction
from triprate.models.trip import Trip
from triprate.services.repair import repair_exchange_record

UTC_NOW_SQL = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"


def _row_to_exchange(row: Dict[str, Any]) -> ExchangeTransaction:
    record, _ = repair_exchange_record(row)
    return ExchangeTransaction(
        id=UUID(record["id"]),
        date=date.fromisoformat(record["date"]),
        home_amount_spent=record["home_amount_spent"],
        foreign_amount_received=record["foreign_amount_received"],
        canonical_rate=record["canonical_rate"],
        input_mode=record["input_mode"],
        raw_value1=record["raw_value1"],
        raw_value2=record["raw_value2"],
    )


def _row_to_purchase(row: Dict[str, Any]) -> PurchaseTransaction:
    return PurchaseTransaction(
        id=UUID(row["id"]),
        date=date.fromisoformat(row["date"]),
        foreign_amount_spent=row["foreign_amount_spent"],
        description=row["description"],
    )


def _exchange_params(trip_id: UUID, exchange: ExchangeTransaction) -> tuple:
    return (
        str(exchange.id),
        str(trip_id),
        exchange.date.isoformat(),
        exchange.home_amount_spent,
        exchange.foreign_amount_received,
        exchange.canonical_rate,
        exchange.input_mode.value,
        exchange.raw_value1,
        exchange.raw_value2,
    )


def _purchase_params(trip_id: UUID, purchase: PurchaseTransaction) -> tuple:
    return (
        str(purchase.id),
        str(trip_id),
        purchase.date.isoformat(),
        purchase.foreign_amount_spent,
        purchase.description,
    )


class Database:
    def __init__(self, db_path: Path):
        self.db_path = db_path

    # ------------------------------------------------------------------
    # Connection helpers
    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys=ON")
        return conn

    def _trip_exists(self, cur: sqlite3.Cursor, trip_id: UUID) -> bool:
        cur.execute("SELECT 1 FROM trips WHERE id = ?", (str(trip_id),))
        return cur.fetchone() is not None

    def _require_trip(self, cur: sqlite3.Cursor, trip_id: UUID) -> None:
        if not self._trip_exists(cur, trip_id):
            raise LookupError(f"trip {trip_id} not found")

    def _build_trip(self, cur: sqlite3.Cursor, row: sqlite3.Row) -> Trip:
        trip_id = row["id"]
        cur.execute(
            "SELECT * FROM exchanges WHERE trip_id = ? ORDER BY date ASC, created_at ASC",
            (trip_id,),
        )
        exchanges = [_row_to_exchange(dict(r)) for r in cur.fetchall()]
        cur.execute(
            "SELECT * FROM purchases WHERE trip_id = ? ORDER BY date ASC, created_at ASC",
            (trip_id,),
        )
        purchases = [_row_to_purchase(dict(r)) for r in cur.fetchall()]
        return Trip(
            id=UUID(trip_id),
            name=row["name"],
            country=row["country"],
            currency=Currency(code=row["currency_code"], display_name=row["currency_name"]),
            start_date=date.fromisoformat(row["start_date"]),
            end_date=date.fromisoformat(row["end_date"]),
            exchanges=exchanges,
            purchases=purchases,
        )

    # ------------------------------------------------------------------
    # Whole-aggregate persistence
    def load_trips(self) -> List[Trip]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT * FROM trips ORDER BY start_date ASC, created_at ASC")
            rows = cur.fetchall()
            return [self._build_trip(cur, r) for r in rows]

    def save_trips(self, trips: Iterable[Trip]) -> None:
        """Upsert each trip and replace its collections with the given ones."""
        with self._connect() as conn:
            cur = conn.cursor()
            for trip in trips:
                self._upsert_trip(cur, trip)
                cur.execute("DELETE FROM exchanges WHERE trip_id = ?", (str(trip.id),))
                cur.execute("DELETE FROM purchases WHERE trip_id = ?", (str(trip.id),))
                for exchange in trip.exchanges:
                    self._insert_exchange(cur, trip.id, exchange)
                for purchase in trip.purchases:
                    self._insert_purchase(cur, trip.id, purchase)
            conn.commit()

    # ------------------------------------------------------------------
    # Trip CRUD
    def _upsert_trip(self, cur: sqlite3.Cursor, trip: Trip) -> None:
        cur.execute(
            f"""
            INSERT INTO trips (id, name, country, currency_code, currency_name, start_date, end_date)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                name = excluded.name,
                country = excluded.country,
                currency_code = excluded.currency_code,
                currency_name = excluded.currency_name,
                start_date = excluded.start_date,
                end_date = excluded.end_date,
                updated_at = ({UTC_NOW_SQL})
            """,
            (
                str(trip.id),
                trip.name,
                trip.country,
                trip.currency.code,
                trip.currency.display_name,
                trip.start_date.isoformat(),
                trip.end_date.isoformat(),
            ),
        )

    def list_trips(self) -> List[Trip]:
        return self.load_trips()

    def get_trip(self, trip_id: UUID) -> Optional[Trip]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT * FROM trips WHERE id = ?", (str(trip_id),))
            row = cur.fetchone()
            return self._build_trip(cur, row) if row else None

    def create_trip(self, trip: Trip) -> Trip:
        with self._connect() as conn:
            cur = conn.cursor()
            if self._trip_exists(cur, trip.id):
                raise ValueError(f"trip {trip.id} already exists")
            self._upsert_trip(cur, trip)
            for exchange in trip.exchanges:
                self._insert_exchange(cur, trip.id, exchange)
            for purchase in trip.purchases:
                self._insert_purchase(cur, trip.id, purchase)
            conn.commit()
        return trip

    def update_trip(self, trip: Trip) -> Trip:
        """Persist trip metadata; collections are untouched."""
        with self._connect() as conn:
            cur = conn.cursor()
            self._require_trip(cur, trip.id)
            self._upsert_trip(cur, trip)
            conn.commit()
        return trip

    def delete_trip(self, trip_id: UUID) -> None:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("DELETE FROM trips WHERE id = ?", (str(trip_id),))
            if cur.rowcount == 0:
                raise LookupError(f"trip {trip_id} not found")
            conn.commit()

    # ------------------------------------------------------------------
    # Exchanges (trip scoped)
    def _insert_exchange(
        self, cur: sqlite3.Cursor, trip_id: UUID, exchange: ExchangeTransaction
    ) -> None:
        cur.execute(
            """
            INSERT INTO exchanges (
                id, trip_id, date, home_amount_spent, foreign_amount_received,
                canonical_rate, input_mode, raw_value1, raw_value2
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            _exchange_params(trip_id, exchange),
        )

    def insert_exchange(self, trip_id: UUID, exchange: ExchangeTransaction) -> None:
        with self._connect() as conn:
            cur = conn.cursor()
            self._require_trip(cur, trip_id)
            self._insert_exchange(cur, trip_id, exchange)
            conn.commit()

    def replace_exchange(self, trip_id: UUID, exchange: ExchangeTransaction) -> None:
        """Overwrite every field of an existing exchange."""
        with self._connect() as conn:
            cur = conn.cursor()
            params = _exchange_params(trip_id, exchange)
            cur.execute(
                f"""
                UPDATE exchanges SET
                    date = ?, home_amount_spent = ?, foreign_amount_received = ?,
                    canonical_rate = ?, input_mode = ?, raw_value1 = ?, raw_value2 = ?,
                    updated_at = ({UTC_NOW_SQL})
                WHERE id = ? AND trip_id = ?
                """,
                params[2:] + params[:2],
            )
            if cur.rowcount == 0:
                raise LookupError(f"exchange {exchange.id} not found")
            conn.commit()

    def delete_exchange(self, trip_id: UUID, exchange_id: UUID) -> None:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                "DELETE FROM exchanges WHERE id = ? AND trip_id = ?",
                (str(exchange_id), str(trip_id)),
            )
            if cur.rowcount == 0:
                raise LookupError(f"exchange {exchange_id} not found")
            conn.commit()

    # ------------------------------------------------------------------
    # Purchases (trip scoped)
    def _insert_purchase(
        self, cur: sqlite3.Cursor, trip_id: UUID, purchase: PurchaseTransaction
    ) -> None:
        cur.execute(
            """
            INSERT INTO purchases (id, trip_id, date, foreign_amount_spent, description)
            VALUES (?, ?, ?, ?, ?)
            """,
            _purchase_params(trip_id, purchase),
        )

    def insert_purchase(self, trip_id: UUID, purchase: PurchaseTransaction) -> None:
        with self._connect() as conn:
            cur = conn.cursor()
            self._require_trip(cur, trip_id)
            self._insert_purchase(cur, trip_id, purchase)
            conn.commit()

    def replace_purchase(self, trip_id: UUID, purchase: PurchaseTransaction) -> None:
        with self._connect() as conn:
            cur = conn.cursor()
            params = _purchase_params(trip_id, purchase)
            cur.execute(
                f"""
                UPDATE purchases SET
                    date = ?, foreign_amount_spent = ?, description = ?,
                    updated_at = ({UTC_NOW_SQL})
                WHERE id = ? AND trip_id = ?
                """,
                params[2:] + params[:2],
            )
            if cur.rowcount == 0:
                raise LookupError(f"purchase {purchase.id} not found")
            conn.commit()

    def delete_purchase(self, trip_id: UUID, purchase_id: UUID) -> None:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                "DELETE FROM purchases WHERE id = ? AND trip_id = ?",
                (str(purchase_id), str(trip_id)),
            )
            if cur.rowcount == 0:
                raise LookupError(f"purchase {purchase_id} not found")
            conn.commit()
