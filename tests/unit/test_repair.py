"""
Unit tests for repairing exchange records that predate rate input modes.
"""

import pytest

from triprate.services.repair import (
    needs_repair,
    repair_exchange_record,
    repair_exchange_records,
    repair_trip_records,
)


def _old_record(**overrides):
    record = {
        "id": "e1",
        "home_amount_spent": 10000.0,
        "foreign_amount_received": 91700.0,
        "canonical_rate": 0.109,
    }
    record.update(overrides)
    return record


class TestRepairExchangeRecord:
    def test_missing_mode_becomes_legacy(self):
        record, repaired = repair_exchange_record(_old_record())
        assert repaired
        assert record["input_mode"] == "legacy"
        assert record["raw_value1"] == 0.109
        assert record["raw_value2"] is None
        assert record["canonical_rate"] == 0.109

    def test_empty_mode_counts_as_missing(self):
        assert needs_repair(_old_record(input_mode=""))
        assert needs_repair(_old_record(input_mode=None))

    def test_input_is_not_mutated(self):
        original = _old_record()
        repair_exchange_record(original)
        assert "input_mode" not in original

    def test_idempotent(self):
        once, _ = repair_exchange_record(_old_record())
        twice, repaired_again = repair_exchange_record(once)
        assert not repaired_again
        assert twice == once

    def test_records_with_mode_untouched(self):
        record = _old_record(input_mode="exchange_office", raw_value1=100.0, raw_value2=917.0)
        fixed, repaired = repair_exchange_record(record)
        assert not repaired
        assert fixed is record


class TestRepairCollections:
    def test_counts_and_amount_warnings(self):
        records = [
            _old_record(),
            _old_record(id="e2", foreign_amount_received=0.0),
            _old_record(id="e3", input_mode="per_home_unit", raw_value1=9.17),
        ]
        fixed, report = repair_exchange_records(records, trip_name="Seoul")
        assert report.repaired == 2
        assert len(report.warnings) == 1
        assert "e2" in report.warnings[0]
        assert all(r["input_mode"] for r in fixed)

    def test_repair_trip_records(self, caplog):
        trips = [
            {"name": "Seoul", "exchanges": [_old_record(), _old_record(id="e2", home_amount_spent=-1.0)]},
            {"name": "Bali", "exchanges": []},
        ]
        with caplog.at_level("WARNING", logger="triprate.repair"):
            repaired, report = repair_trip_records(trips)
        assert report.repaired == 2
        assert repaired[0]["exchanges"][1]["raw_value1"] == 0.109
        assert repaired[1]["exchanges"] == []
        assert any("Seoul" in r.getMessage() for r in caplog.records)

    @pytest.mark.parametrize("runs", [2, 3])
    def test_repeated_passes_repair_nothing_new(self, runs):
        trips = [{"name": "Seoul", "exchanges": [_old_record()]}]
        for _ in range(runs - 1):
            trips, _ = repair_trip_records(trips)
        _, report = repair_trip_records(trips)
        assert report.repaired == 0
