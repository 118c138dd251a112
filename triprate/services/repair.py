"""Data repair for exchange records written before rate input modes existed.

Such records only carry ``canonical_rate``. Repair marks them as
``legacy`` input with ``raw_value1 = canonical_rate`` and no second value,
leaving ``canonical_rate`` untouched. Records that already have an input
mode are returned as-is, so the pass can run on every load.

Non-positive amounts are reported as warnings but not changed; the
aggregator filters them out of every sum.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from triprate.models.rate_input import RateInputMode

logger = logging.getLogger("triprate.repair")

ExchangeRecord = Dict[str, Any]


@dataclass
class RepairReport:
    repaired: int = 0
    warnings: List[str] = field(default_factory=list)

    def merge(self, other: "RepairReport") -> None:
        self.repaired += other.repaired
        self.warnings.extend(other.warnings)


def needs_repair(record: ExchangeRecord) -> bool:
    return not record.get("input_mode")


def repair_exchange_record(record: ExchangeRecord) -> Tuple[ExchangeRecord, bool]:
    """Return ``(record, repaired)``; the input mapping is never mutated."""
    if not needs_repair(record):
        return record, False
    repaired = dict(record)
    repaired["input_mode"] = RateInputMode.LEGACY.value
    repaired["raw_value1"] = record.get("canonical_rate")
    repaired["raw_value2"] = None
    return repaired, True


def _amount_warnings(trip_name: str, record: ExchangeRecord) -> List[str]:
    home = record.get("home_amount_spent") or 0
    foreign = record.get("foreign_amount_received") or 0
    if home > 0 and foreign > 0:
        return []
    return [
        f"trip {trip_name!r}: exchange {record.get('id')} has non-positive amounts "
        f"(home={home}, foreign={foreign})"
    ]


def repair_exchange_records(
    records: List[ExchangeRecord], trip_name: str = "-"
) -> Tuple[List[ExchangeRecord], RepairReport]:
    report = RepairReport()
    fixed: List[ExchangeRecord] = []
    for record in records:
        repaired_record, changed = repair_exchange_record(record)
        if changed:
            report.repaired += 1
        report.warnings.extend(_amount_warnings(trip_name, repaired_record))
        fixed.append(repaired_record)
    return fixed, report


def repair_trip_records(
    trips: List[Dict[str, Any]],
) -> Tuple[List[Dict[str, Any]], RepairReport]:
    """Repair every exchange of every raw trip mapping."""
    report = RepairReport()
    repaired_trips: List[Dict[str, Any]] = []
    for trip in trips:
        exchanges, trip_report = repair_exchange_records(
            list(trip.get("exchanges") or []), trip_name=str(trip.get("name", "-"))
        )
        report.merge(trip_report)
        repaired_trips.append({**trip, "exchanges": exchanges})
    for warning in report.warnings:
        logger.warning(warning)
    if report.repaired:
        logger.info("repaired %d legacy exchange records", report.repaired)
    return repaired_trips, report


__all__ = [
    "RepairReport",
    "needs_repair",
    "repair_exchange_record",
    "repair_exchange_records",
    "repair_trip_records",
]
