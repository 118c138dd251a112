"""
Unit tests for trip summaries and statistics.
"""

from datetime import date

import pytest

from triprate.models.rate_input import RateInputMode
from triprate.services.money import round2, round_places
from triprate.services.reporting import (
    analyze_exchanges,
    analyze_purchases,
    build_trip_statistics,
    build_trip_summary,
    exchange_line,
)


class TestRound2:
    @pytest.mark.parametrize("value,expected", [(1.005, 1.01), (2.675, 2.68), (-1.005, -1.01), (3.0, 3.0)])
    def test_half_up(self, value, expected):
        assert round2(value) == expected

    def test_round_places_uses_currency_decimals(self):
        assert round_places(1234.5, 0) == 1235.0
        assert round_places(0.125, 2) == 0.13
        assert round_places(7.0, 0) == 7.0


class TestExchangeAnalysis:
    def test_rates_and_fees(self, make_exchange):
        cheap = make_exchange(home=100, foreign=1, mode=RateInputMode.PER_FOREIGN_UNIT, value1=100)
        pricey = make_exchange(home=104, foreign=1, mode=RateInputMode.PER_FOREIGN_UNIT, value1=100)
        analysis = analyze_exchanges([cheap, pricey])
        assert analysis.count == 2
        assert analysis.total_home_spent == 204.0
        assert analysis.weighted_average_rate == pytest.approx(102.0)
        assert analysis.min_actual_rate == 100
        assert analysis.max_actual_rate == 104
        assert analysis.average_fee_percent == pytest.approx(2.0)
        assert analysis.high_fee_count == 1
        assert analysis.mode_breakdown == {"per_foreign_unit": 2}

    def test_empty(self):
        analysis = analyze_exchanges([])
        assert analysis.count == 0
        assert analysis.weighted_average_rate is None
        assert analysis.min_actual_rate is None
        assert analysis.average_fee_percent is None

    def test_line_maps_sentinels_to_none(self, make_exchange):
        line = exchange_line(make_exchange(foreign=0))
        assert line.actual_rate is None
        assert line.fee_percent is None
        assert line.canonical_rate == pytest.approx(100 / 917)


class TestPurchaseAnalysis:
    def test_largest_and_smallest(self, make_purchase):
        purchases = [make_purchase(500, "Taxi"), make_purchase(15000, "Dinner"), make_purchase(1200, "Coffee")]
        analysis = analyze_purchases(purchases, 0.1)
        assert analysis.total_foreign_spent == 16700.0
        assert analysis.total_home_equivalent == 1670.0
        assert analysis.largest.description == "Dinner"
        assert analysis.smallest.description == "Taxi"
        assert analysis.largest.home_amount_equivalent == 1500.0

    def test_without_rate_home_values_are_none(self, make_purchase):
        analysis = analyze_purchases([make_purchase(500)], 0.0)
        assert analysis.total_home_equivalent is None
        assert analysis.largest.home_amount_equivalent is None


class TestTripSummary:
    def test_summary(self, make_trip, make_exchange, make_purchase):
        trip = make_trip(
            exchanges=[make_exchange(on=date(2024, 5, 3)), make_exchange(on=date(2024, 5, 1))],
            purchases=[make_purchase(20000)],
        )
        summary = build_trip_summary(trip)
        assert summary.trip_id == trip.id
        assert summary.currency_code == "KRW"
        assert summary.duration_days == 7
        assert summary.remaining_foreign == 183400 - 20000
        assert summary.exchange.total_home_spent == 20000.0
        assert summary.purchase.total_home_equivalent == pytest.approx(2181.03)
        assert [e.date.day for e in summary.exchanges] == [1, 3]
        assert summary.issues == []

    def test_remaining_foreign_rounded_to_currency_places(self, make_trip, make_exchange, make_purchase):
        trip = make_trip(
            code="USD",
            exchanges=[make_exchange(foreign=0.1), make_exchange(foreign=0.2)],
            purchases=[make_purchase(0.1)],
        )
        assert build_trip_summary(trip).remaining_foreign == 0.2

    def test_trip_without_exchanges_has_no_rates(self, make_trip, make_purchase):
        summary = build_trip_summary(make_trip(purchases=[make_purchase()]))
        assert summary.exchange.weighted_average_rate is None
        assert summary.purchase.total_home_equivalent is None
        assert summary.purchases[0].home_amount_equivalent is None
        assert summary.remaining_foreign == -15000.0


class TestTripStatistics:
    def test_counts_by_phase(self, make_trip):
        trips = [
            make_trip(start=date(2024, 1, 1), end=date(2024, 1, 5)),
            make_trip(start=date(2024, 5, 1), end=date(2024, 5, 7)),
            make_trip(start=date(2024, 9, 1), end=date(2024, 9, 5)),
        ]
        stats = build_trip_statistics(trips, as_of=date(2024, 5, 3))
        assert (stats.completed, stats.active, stats.upcoming, stats.total) == (1, 1, 1, 3)
