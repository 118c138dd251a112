"""
Pytest configuration and fixtures for the trip exchange tracker tests.

This module provides:
- An isolated SQLite file per test (tmp_path)
- A TestClient built through the application factory
- Factory helpers for exchanges, purchases and trips
"""

import os
import tempfile
from datetime import date
from typing import Callable, Optional

import pytest

# Importing triprate.main builds a module-level app; keep its database out of
# the working tree.
os.environ.setdefault("DATA_DIR", tempfile.mkdtemp(prefix="triprate-tests-"))

from fastapi.testclient import TestClient  # noqa: E402

from triprate.core.config import Settings  # noqa: E402
from triprate.db.dal import Database  # noqa: E402
from triprate.db.migrate import apply_migrations  # noqa: E402
from triprate.main import create_app  # noqa: E402
from triprate.models.currency import find_currency  # noqa: E402
from triprate.models.exchange import ExchangeTransaction  # noqa: E402
from triprate.models.purchase import PurchaseTransaction  # noqa: E402
from triprate.models.rate_input import RateInputMode  # noqa: E402
from triprate.models.trip import Trip  # noqa: E402
from triprate.services.rate_normalizer import normalize  # noqa: E402


# =============================================================================
# SETTINGS / DATABASE / CLIENT
# =============================================================================


@pytest.fixture
def settings(tmp_path) -> Settings:
    s = Settings(data_dir=tmp_path, db_filename="test.sqlite3", debug=False)
    s.init_post_load()
    return s


@pytest.fixture
def db(settings: Settings) -> Database:
    apply_migrations(settings.db_path)
    return Database(settings.db_path)


@pytest.fixture
def client(settings: Settings) -> TestClient:
    app = create_app(settings_override=settings)
    with TestClient(app) as c:
        yield c


# =============================================================================
# FACTORIES
# =============================================================================


@pytest.fixture
def make_exchange() -> Callable[..., ExchangeTransaction]:
    def _make(
        home: float = 10000.0,
        foreign: float = 91700.0,
        mode: RateInputMode = RateInputMode.EXCHANGE_OFFICE,
        value1: float = 100.0,
        value2: Optional[float] = 917.0,
        on: date = date(2024, 5, 1),
    ) -> ExchangeTransaction:
        if mode is not RateInputMode.EXCHANGE_OFFICE:
            value2 = None
        return ExchangeTransaction(
            date=on,
            home_amount_spent=home,
            foreign_amount_received=foreign,
            canonical_rate=normalize(mode, value1, value2),
            input_mode=mode,
            raw_value1=value1,
            raw_value2=value2,
        )

    return _make


@pytest.fixture
def make_purchase() -> Callable[..., PurchaseTransaction]:
    def _make(
        amount: float = 15000.0,
        description: str = "Bibimbap",
        on: date = date(2024, 5, 2),
    ) -> PurchaseTransaction:
        return PurchaseTransaction(
            date=on, foreign_amount_spent=amount, description=description
        )

    return _make


@pytest.fixture
def make_trip() -> Callable[..., Trip]:
    def _make(
        name: str = "Seoul",
        country: str = "South Korea",
        code: str = "KRW",
        start: date = date(2024, 5, 1),
        end: date = date(2024, 5, 7),
        exchanges=None,
        purchases=None,
    ) -> Trip:
        return Trip(
            name=name,
            country=country,
            currency=find_currency(code),
            start_date=start,
            end_date=end,
            exchanges=list(exchanges or []),
            purchases=list(purchases or []),
        )

    return _make


@pytest.fixture
def created_trip(client: TestClient) -> dict:
    response = client.post(
        "/trips/",
        json={
            "name": "Seoul",
            "country": "South Korea",
            "currency_code": "KRW",
            "start_date": "2024-05-01",
            "end_date": "2024-05-07",
        },
    )
    assert response.status_code == 201
    return response.json()
