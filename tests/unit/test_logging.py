"""
Unit tests for structured logging and the request context middleware.
"""

import json
import logging

from fastapi.testclient import TestClient

from triprate.core.logging import (
    JsonFormatter,
    RequestContextFilter,
    request_id_ctx,
    trip_id_from_path,
)


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("triprate.test", logging.WARNING, __file__, 1, "skipped %s", ("e1",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:
    def test_fields(self):
        record = _record(status=201)
        RequestContextFilter().filter(record)

        line = json.loads(JsonFormatter().format(record))

        assert line["level"] == "WARNING"
        assert line["message"] == "skipped e1"
        assert line["logger"] == "triprate.test"
        assert line["request_id"] == "-"
        assert line["trip_id"] == "-"
        assert line["status"] == 201
        assert "duration_ms" not in line

    def test_request_id_from_context(self):
        token = request_id_ctx.set("abc")
        try:
            record = _record()
            RequestContextFilter().filter(record)
        finally:
            request_id_ctx.reset(token)

        assert json.loads(JsonFormatter().format(record))["request_id"] == "abc"


class TestTripIdFromPath:
    def test_trip_scoped_paths(self):
        trip_id = "3F2504E0-4F89-11D3-9A0C-0305E82C3301"
        assert trip_id_from_path(f"/trips/{trip_id}") == trip_id.lower()
        assert trip_id_from_path(f"/trips/{trip_id}/exchanges/") == trip_id.lower()

    def test_other_paths(self):
        assert trip_id_from_path("/trips/") is None
        assert trip_id_from_path("/trips/statistics") is None
        assert trip_id_from_path("/currencies/") is None


class TestMiddleware:
    def test_request_id_is_echoed(self, client: TestClient):
        response = client.get("/", headers={"x-request-id": "req-42"})

        assert response.headers["x-request-id"] == "req-42"

    def test_request_id_is_generated(self, client: TestClient):
        response = client.get("/")

        assert len(response.headers["x-request-id"]) == 36
