"""Database migration utilities.

Handles schema evolution by applying idempotent migrations keyed by an integer
`schema_version` stored in the metadata table, then runs the exchange repair
pass. The repair pass runs on every start because it is a no-op once every
exchange row carries an input mode.
"""

from __future__ import annotations
from pathlib import Path
import logging
import sqlite3
from typing import Optional

from triprate.services.repair import RepairReport, repair_exchange_records

from . import schema as schema_def
from .schema import init_db

CURRENT_SCHEMA_VERSION = 2
SCHEMA_VERSION_KEY = "schema_version"
RATE_INPUT_COLUMNS = (
    ("input_mode", "TEXT"),
    ("raw_value1", "REAL"),
    ("raw_value2", "REAL"),
)

logger = logging.getLogger("triprate.migrate")


def _get_schema_version(conn: sqlite3.Connection) -> Optional[int]:
    try:
        cur = conn.cursor()
        cur.execute("SELECT value FROM metadata WHERE key=?", (SCHEMA_VERSION_KEY,))
        row = cur.fetchone()
        if row:
            return int(row[0])
    except sqlite3.OperationalError:
        # metadata table may not exist yet (first run before init_db)
        return None
    return None


def apply_migrations(db_path: Path) -> int:
    """Apply required migrations and repairs; return resulting schema version."""
    init_db(db_path)
    conn = sqlite3.connect(db_path)
    try:
        version = _get_schema_version(conn) or 1
        if version < 2:
            _migrate_to_v2(conn)
            version = 2
        _set_schema_version(conn, version)
        conn.commit()
        report = repair_legacy_exchanges(conn)
        if report.repaired:
            logger.info("repaired %d legacy exchange rows", report.repaired)
        return version
    finally:
        conn.close()


def _set_schema_version(conn: sqlite3.Connection, version: int) -> None:
    cur = conn.cursor()
    cur.execute(
        "INSERT INTO metadata (key, value) VALUES (?, ?) "
        "ON CONFLICT(key) DO UPDATE SET value=excluded.value, "
        f"updated_at=({schema_def.BASIC_UTC_NOW})",
        (SCHEMA_VERSION_KEY, str(version)),
    )


def _migrate_to_v2(conn: sqlite3.Connection) -> None:
    """Upgrade schema to version 2 (rate input columns on exchanges)."""
    cur = conn.cursor()
    try:
        for column, column_type in RATE_INPUT_COLUMNS:
            if not _column_exists(cur, "exchanges", column):
                cur.execute(f"ALTER TABLE exchanges ADD COLUMN {column} {column_type}")
        conn.commit()
    except Exception:
        conn.rollback()
        raise


def repair_legacy_exchanges(conn: sqlite3.Connection) -> RepairReport:
    """Fill in input mode and raw values for rows lacking an input mode."""
    conn.row_factory = sqlite3.Row
    cur = conn.cursor()
    try:
        cur.execute(
            """
            SELECT e.*, COALESCE(t.name, '-') AS trip_name
            FROM exchanges e LEFT JOIN trips t ON t.id = e.trip_id
            WHERE e.input_mode IS NULL OR e.input_mode = ''
            """
        )
        rows = [dict(r) for r in cur.fetchall()]
        report = RepairReport()
        for row in rows:
            fixed, row_report = repair_exchange_records([row], trip_name=row["trip_name"])
            report.merge(row_report)
            record = fixed[0]
            cur.execute(
                f"""
                UPDATE exchanges
                SET input_mode = ?, raw_value1 = ?, raw_value2 = ?,
                    updated_at = ({schema_def.BASIC_UTC_NOW})
                WHERE id = ?
                """,
                (
                    record["input_mode"],
                    record["raw_value1"],
                    record["raw_value2"],
                    record["id"],
                ),
            )
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    for warning in report.warnings:
        logger.warning(warning)
    return report


def _column_exists(cur: sqlite3.Cursor, table: str, column: str) -> bool:
    cur.execute(f"PRAGMA table_info({table})")
    return any(row[1] == column for row in cur.fetchall())
