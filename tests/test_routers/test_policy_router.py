"""
API Endpoint Tests for the policy form

Test Coverage:
- GET /api/v1/policy returns the snapshot
- PUT /api/v1/policy applies partial edits
- PUT rejects a maturity age that is not a valid choice (422)
- GET /api/v1/policy/quote returns null until the inputs are complete
"""

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from pli_assistant.main import app
from pli_assistant.services.policy_store import get_policy_store


@pytest.fixture
def client(store):
    app.dependency_overrides[get_policy_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestGetPolicy:
    def test_empty_snapshot(self, client):
        response = client.get("/api/v1/policy")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["inputs"] == {
            "date_of_birth": None,
            "sum_assured": None,
            "maturity_age": None,
            "payment_frequency": "monthly",
        }
        assert data["current_age"] is None
        assert data["valid_maturity_choices"] == [35, 40, 45, 50, 55, 58, 60]
        assert data["result"] is None


class TestUpdatePolicy:
    def test_full_edit_returns_quote(self, client):
        response = client.put(
            "/api/v1/policy",
            json={"date_of_birth": "1996-01-15", "sum_assured": 100000, "maturity_age": 55},
        )

        assert response.status_code == status.HTTP_200_OK
        result = response.json()["result"]
        assert result["final_premium"] == 395
        assert result["policy_term"] == 25
        assert result["payment_text"] == "Monthly"

    def test_date_of_birth_syncs_maturity(self, client):
        response = client.put("/api/v1/policy", json={"date_of_birth": "1988-01-15"})

        data = response.json()
        assert data["current_age"] == 38
        assert data["inputs"]["maturity_age"] == 60
        assert data["valid_maturity_choices"] == [45, 50, 55, 58, 60]

    def test_frequency_change(self, client, store):
        response = client.put("/api/v1/policy", json={"payment_frequency": "half-yearly"})

        assert response.status_code == status.HTTP_200_OK
        assert store.inputs.payment_frequency.value == "half-yearly"

    def test_invalid_maturity_rejected(self, client, store):
        client.put("/api/v1/policy", json={"date_of_birth": "1988-01-15"})

        response = client.put("/api/v1/policy", json={"maturity_age": 40})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert "40" in response.json()["detail"]
        assert store.inputs.maturity_age == 60

    def test_ineligible_age_reported(self, client):
        response = client.put("/api/v1/policy", json={"date_of_birth": "1966-01-15"})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["age_eligible"] is False

    def test_malformed_body(self, client):
        response = client.put("/api/v1/policy", json={"date_of_birth": "15/01/1996"})
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_negative_sum_assured(self, client):
        response = client.put("/api/v1/policy", json={"sum_assured": -5000})
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


class TestQuote:
    def test_null_until_complete(self, client):
        response = client.get("/api/v1/policy/quote")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() is None

    def test_quote_after_edit(self, client):
        client.put(
            "/api/v1/policy",
            json={"date_of_birth": "1996-01-15", "sum_assured": 100000, "maturity_age": 55},
        )

        data = client.get("/api/v1/policy/quote").json()

        assert data["base_premium"] == 400
        assert data["rebate"] == 5
        assert data["maturity_amount"] == pytest.approx(230000.0)
