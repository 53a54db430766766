"""Tests for the FastAPI projection and validator endpoints."""

import httpx
import pytest
from fastapi.testclient import TestClient

from stakesim.api.beacon_client import BeaconClient
from stakesim.config import Settings
from stakesim.web.app import create_app
from stakesim.web.dependencies import get_beacon_client


def make_app(handler=None, **settings_overrides):
    settings = Settings(**settings_overrides)
    app = create_app(settings)
    if handler is not None:
        def _client():
            client = BeaconClient(
                base_url="https://beacon.test/api/v1",
                max_retries=1,
                backoff=0.0,
                transport=httpx.MockTransport(handler),
            )
            try:
                yield client
            finally:
                client.close()

        app.dependency_overrides[get_beacon_client] = _client
    return app


@pytest.fixture
def client():
    with TestClient(make_app()) as c:
        yield c


# ---------------------------------------------------------------------------
# System
# ---------------------------------------------------------------------------

def test_health(client):
    resp = client.get("/api/v1/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "version": "0.1.0"}


# ---------------------------------------------------------------------------
# Projection
# ---------------------------------------------------------------------------

class TestProjection:
    def test_compounding_yearly(self, client):
        resp = client.post("/api/v1/projection", json={
            "initial_balance": 32.1,
            "credential_type": "compounding",
            "annual_reward_rate": 0.042,
            "time_period_years": 1,
            "cadence": "yearly",
        })
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["credential_type"] == "compounding"
        assert data["cadence"] == "yearly"
        assert len(data["series"]) == 2
        assert data["series"][0] == {
            "year_fraction": 0.0, "total_balance": 32.1, "effective_balance": 32.0,
        }
        assert data["summary"]["final_effective_balance"] == 33.25
        assert data["summary"]["final_balance"] == pytest.approx(33.444)
        assert resp.json()["meta"]["cached"] is False

    def test_defaults_from_settings(self):
        app = make_app(default_cadence="monthly", default_time_period_years=5)
        with TestClient(app) as c:
            resp = c.post("/api/v1/projection", json={
                "initial_balance": 32.0, "credential_type": "capped",
            })
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["cadence"] == "monthly"
        assert len(data["series"]) == 61

    def test_zero_balance_rejected(self, client):
        resp = client.post("/api/v1/projection", json={
            "initial_balance": 0, "time_period_years": 1,
        })
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "invalid_input"
        assert "initial_balance" in resp.json()["error"]["message"]

    def test_negative_years_rejected(self, client):
        resp = client.post("/api/v1/projection", json={
            "initial_balance": 32.0, "time_period_years": -2,
        })
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "invalid_input"

    def test_unknown_cadence_rejected(self, client):
        resp = client.post("/api/v1/projection", json={
            "initial_balance": 32.0, "cadence": "weekly",
        })
        assert resp.status_code == 422

    def test_interval_ceiling(self):
        with TestClient(make_app(max_intervals=100)) as c:
            resp = c.post("/api/v1/projection", json={
                "initial_balance": 32.0, "time_period_years": 1, "cadence": "daily",
            })
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "out_of_range"


# ---------------------------------------------------------------------------
# Comparison
# ---------------------------------------------------------------------------

class TestComparison:
    def test_compare(self, client):
        resp = client.post("/api/v1/projection/compare", json={
            "initial_balance": 64.0,
            "annual_reward_rate": 0.042,
            "time_period_years": 2,
            "cadence": "monthly",
        })
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["capped"]["credential_type"] == "capped"
        assert data["compounding"]["credential_type"] == "compounding"
        assert len(data["capped"]["series"]) == len(data["compounding"]["series"]) == 25

        deltas = data["deltas"]
        capped = data["capped"]["summary"]
        compounding = data["compounding"]["summary"]
        assert deltas["final_balance_delta"] == pytest.approx(
            compounding["final_balance"] - capped["final_balance"]
        )
        assert deltas["final_balance_delta"] > 0
        assert deltas["final_effective_balance_delta"] > 0

    def test_compare_invalid(self, client):
        resp = client.post("/api/v1/projection/compare", json={"initial_balance": -1})
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "invalid_input"


# ---------------------------------------------------------------------------
# Validators
# ---------------------------------------------------------------------------

class TestValidators:
    def test_lookup_is_cached(self, validator_payload):
        calls = []

        def handler(request):
            calls.append(request.url.path)
            return httpx.Response(200, json={"status": "OK", "data": validator_payload})

        with TestClient(make_app(handler)) as c:
            first = c.get("/api/v1/validators/12345")
            second = c.get("/api/v1/validators/12345")

        assert first.status_code == 200
        data = first.json()["data"]
        assert data["validator_index"] == 12345
        assert data["credential_prefix"] == "0x01"
        assert data["credential_type"] == "compounding"
        assert data["effective_balance_eth"] == 32.0
        assert first.json()["meta"]["cached"] is False

        assert second.status_code == 200
        assert second.json()["meta"]["cached"] is True
        assert second.json()["data"] == data
        assert calls == ["/api/v1/validator/12345"]

    def test_upstream_failure(self):
        def handler(request):
            return httpx.Response(404, json={"status": "ERROR"})

        with TestClient(make_app(handler)) as c:
            resp = c.get("/api/v1/validators/12345")
        assert resp.status_code == 502
        assert resp.json()["error"]["code"] == "upstream_unavailable"

    def test_bad_identifier(self):
        def handler(request):
            return httpx.Response(500)

        with TestClient(make_app(handler)) as c:
            resp = c.get("/api/v1/validators/foo")
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "invalid_input"
