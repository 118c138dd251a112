"""
Unit tests for the error helpers shared by the routers.
"""

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from triprate.core.errors import reject_invalid, require_valid
from triprate.services.validation import ValidationResult


class TestRequireValid:
    def test_returns_record_for_valid_input(self):
        record = object()

        assert require_valid(ValidationResult.valid(), record) is record

    def test_failed_validation_raises_422_with_message(self):
        with pytest.raises(HTTPException) as exc_info:
            require_valid(ValidationResult.invalid("Please enter an amount"), None)

        assert exc_info.value.status_code == 422
        assert exc_info.value.detail == "Please enter an amount"

    def test_missing_record_raises_422(self):
        with pytest.raises(HTTPException) as exc_info:
            require_valid(ValidationResult.valid(), None)

        assert exc_info.value.status_code == 422

    def test_reject_invalid_passes_valid_result(self):
        assert reject_invalid(ValidationResult.valid()) is None


class TestErrorEnvelope:
    def test_request_validation_is_422_envelope(self, client: TestClient):
        response = client.post("/trips/", json={"name": "Seoul"})

        assert response.status_code == 422
        assert response.json()["error"] == "validation_error"
