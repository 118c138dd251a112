"""
API tests for exchange and purchase endpoints.

Tests cover:
- Create exchanges in every input mode
- Validation failures persist nothing
- Replace (PUT) keeps the id and recomputes derived values
- Form checks (quick and full)
- Purchase CRUD with home-currency equivalents
"""

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient


def _exchange(**overrides):
    payload = {
        "mode": "exchange_office",
        "value1": "100",
        "value2": "917",
        "home_amount": "10000",
        "foreign_amount": "91700",
        "date": "2024-05-01",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def trip_id(created_trip) -> str:
    return created_trip["id"]


class TestCreateExchangeAPI:
    def test_exchange_office(self, client: TestClient, trip_id):
        response = client.post(f"/trips/{trip_id}/exchanges/", json=_exchange())

        assert response.status_code == 201
        data = response.json()
        assert data["input_mode"] == "exchange_office"
        assert data["raw_value1"] == 100.0
        assert data["raw_value2"] == 917.0
        assert data["canonical_rate"] == pytest.approx(100 / 917)
        assert data["actual_rate"] == pytest.approx(10000 / 91700)
        assert data["fee_percent"] == pytest.approx(0.0, abs=1e-9)
        assert data["is_high_fee"] is False

    @pytest.mark.parametrize(
        "mode,value1,rate",
        [("per_home_unit", "9.17", 1 / 9.17), ("per_foreign_unit", "0.11", 0.11), ("legacy", "0.109", 0.109)],
    )
    def test_single_value_modes(self, client: TestClient, trip_id, mode, value1, rate):
        response = client.post(
            f"/trips/{trip_id}/exchanges/",
            json=_exchange(mode=mode, value1=value1, value2=None),
        )

        assert response.status_code == 201
        assert response.json()["canonical_rate"] == pytest.approx(rate)
        assert response.json()["raw_value2"] is None

    def test_numeric_json_values(self, client: TestClient, trip_id):
        response = client.post(
            f"/trips/{trip_id}/exchanges/",
            json=_exchange(value1=100, value2=917, home_amount=10000, foreign_amount=91700),
        )

        assert response.status_code == 201

    def test_high_fee_flag(self, client: TestClient, trip_id):
        response = client.post(
            f"/trips/{trip_id}/exchanges/",
            json=_exchange(mode="per_foreign_unit", value1="0.1", value2=None, home_amount="10400", foreign_amount="100000"),
        )

        assert response.json()["fee_percent"] == pytest.approx(4.0)
        assert response.json()["is_high_fee"] is True

    def test_invalid_input_is_not_persisted(self, client: TestClient, trip_id):
        response = client.post(f"/trips/{trip_id}/exchanges/", json=_exchange(value1="0"))

        assert response.status_code == 422
        assert response.json() == {
            "error": "validation_error",
            "detail": "Please enter a positive number",
        }
        assert client.get(f"/trips/{trip_id}/exchanges/").json() == []

    def test_missing_second_value(self, client: TestClient, trip_id):
        response = client.post(f"/trips/{trip_id}/exchanges/", json=_exchange(value2=""))

        assert response.json()["detail"] == "Please enter both values"

    def test_out_of_range_amount_uses_currency_limits(self, client: TestClient, trip_id):
        response = client.post(
            f"/trips/{trip_id}/exchanges/", json=_exchange(foreign_amount="0.5")
        )

        assert response.status_code == 422
        assert response.json()["detail"] == "KRW amount must be between 1 and 100,000,000"

    def test_unknown_mode(self, client: TestClient, trip_id):
        response = client.post(f"/trips/{trip_id}/exchanges/", json=_exchange(mode="wire"))

        assert response.status_code == 422
        assert isinstance(response.json()["detail"], list)

    def test_unknown_trip(self, client: TestClient):
        response = client.post(f"/trips/{uuid4()}/exchanges/", json=_exchange())

        assert response.status_code == 404


class TestReplaceDeleteExchangeAPI:
    def test_replace_keeps_id_and_date(self, client: TestClient, trip_id):
        created = client.post(f"/trips/{trip_id}/exchanges/", json=_exchange()).json()
        payload = _exchange(mode="per_home_unit", value1="9.17", value2=None, home_amount="10400")
        del payload["date"]

        response = client.put(f"/trips/{trip_id}/exchanges/{created['id']}", json=payload)

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == created["id"]
        assert data["date"] == "2024-05-01"
        assert data["input_mode"] == "per_home_unit"
        assert data["raw_value2"] is None
        assert data["fee_percent"] > created["fee_percent"]
        assert len(client.get(f"/trips/{trip_id}/exchanges/").json()) == 1

    def test_replace_with_invalid_input_keeps_original(self, client: TestClient, trip_id):
        created = client.post(f"/trips/{trip_id}/exchanges/", json=_exchange()).json()

        response = client.put(
            f"/trips/{trip_id}/exchanges/{created['id']}", json=_exchange(home_amount="abc")
        )

        assert response.status_code == 422
        [stored] = client.get(f"/trips/{trip_id}/exchanges/").json()
        assert stored == created

    def test_replace_unknown_exchange(self, client: TestClient, trip_id):
        response = client.put(f"/trips/{trip_id}/exchanges/{uuid4()}", json=_exchange())

        assert response.status_code == 404

    def test_delete(self, client: TestClient, trip_id):
        created = client.post(f"/trips/{trip_id}/exchanges/", json=_exchange()).json()

        assert client.delete(f"/trips/{trip_id}/exchanges/{created['id']}").status_code == 204
        assert client.delete(f"/trips/{trip_id}/exchanges/{created['id']}").status_code == 404


class TestCheckExchangeAPI:
    def test_full_check_returns_preview(self, client: TestClient, trip_id):
        response = client.post(f"/trips/{trip_id}/exchanges/check", json=_exchange())

        assert response.status_code == 200
        data = response.json()
        assert data["ok"] is True
        assert data["message"] is None
        assert data["preview"]["canonical_rate"] == pytest.approx(100 / 917)

    def test_full_check_reports_range_errors(self, client: TestClient, trip_id):
        response = client.post(
            f"/trips/{trip_id}/exchanges/check", json=_exchange(home_amount="0.5")
        )

        assert response.json() == {
            "ok": False,
            "message": "Amount must be between 1 and 100,000,000",
            "preview": None,
        }

    def test_quick_check_skips_ranges(self, client: TestClient, trip_id):
        response = client.post(
            f"/trips/{trip_id}/exchanges/check",
            params={"quick": "true"},
            json=_exchange(home_amount="0.5"),
        )

        assert response.json() == {"ok": True, "message": None, "preview": None}

    def test_quick_check_rejects_negative(self, client: TestClient, trip_id):
        response = client.post(
            f"/trips/{trip_id}/exchanges/check",
            params={"quick": "true"},
            json=_exchange(foreign_amount="-3"),
        )

        assert response.json()["message"] == "Negative values are not allowed"

    def test_check_never_persists(self, client: TestClient, trip_id):
        client.post(f"/trips/{trip_id}/exchanges/check", json=_exchange())

        assert client.get(f"/trips/{trip_id}/exchanges/").json() == []


class TestPurchasesAPI:
    def test_purchase_without_exchanges_has_no_home_value(self, client: TestClient, trip_id):
        response = client.post(
            f"/trips/{trip_id}/purchases/",
            json={"foreign_amount": "15000", "description": "Bibimbap", "date": "2024-05-02"},
        )

        assert response.status_code == 201
        assert response.json()["home_amount_equivalent"] is None

    def test_purchase_uses_weighted_average_rate(self, client: TestClient, trip_id):
        client.post(f"/trips/{trip_id}/exchanges/", json=_exchange())

        response = client.post(
            f"/trips/{trip_id}/purchases/",
            json={"foreign_amount": 9170, "description": "Taxi"},
        )

        assert response.json()["home_amount_equivalent"] == 1000.0

    def test_invalid_purchase(self, client: TestClient, trip_id):
        response = client.post(
            f"/trips/{trip_id}/purchases/", json={"foreign_amount": "15000", "description": ""}
        )

        assert response.status_code == 422
        assert response.json()["detail"] == "Please describe the purchase"

    def test_replace_and_delete(self, client: TestClient, trip_id):
        created = client.post(
            f"/trips/{trip_id}/purchases/",
            json={"foreign_amount": "15000", "description": "Bibimbap", "date": "2024-05-02"},
        ).json()

        response = client.put(
            f"/trips/{trip_id}/purchases/{created['id']}",
            json={"foreign_amount": "18000", "description": "Bulgogi"},
        )

        assert response.status_code == 200
        assert response.json()["id"] == created["id"]
        assert response.json()["date"] == "2024-05-02"
        assert response.json()["foreign_amount_spent"] == 18000.0
        assert client.delete(f"/trips/{trip_id}/purchases/{created['id']}").status_code == 204
        assert client.get(f"/trips/{trip_id}/purchases/").json() == []

    def test_replace_unknown_purchase(self, client: TestClient, trip_id):
        response = client.put(
            f"/trips/{trip_id}/purchases/{uuid4()}",
            json={"foreign_amount": "18000", "description": "Bulgogi"},
        )

        assert response.status_code == 404
