# tests/api/test_router.py
import pytest
from fastapi.testclient import TestClient

from api.router import get_settings_store
from core.settings_store import InMemorySettingsStore
from main import app

client = TestClient(app)


@pytest.fixture(autouse=True)
def settings_store():
    """Each test gets a fresh in-memory settings store instead of the JSON file."""
    store = InMemorySettingsStore()
    app.dependency_overrides[get_settings_store] = lambda: store
    yield store
    app.dependency_overrides.clear()


def _payload(count=6):
    return [
        {
            "timestamp": 1_700_000_000_000 + i * 60_000,
            "temperature": 40.0 + i,
            "moisture": 62.0,
            "nitrogen": 420.0,
            "phosphorus": 110.0,
            "potassium": 310.0,
        }
        for i in range(count)
    ]


def test_health_endpoint():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_analyze_valid_payload():
    """Payload with valid readings should succeed (200) and use camelCase keys."""
    response = client.post("/analyze", json=_payload())
    assert response.status_code == 200
    data = response.json()
    assert data["sampleCount"] == 6
    assert data["fields"]["temperature"]["trend"]["trend"] == "Rising"
    assert "slopeNorm" in data["fields"]["temperature"]["trend"]
    assert "movingAverage" in data["fields"]["moisture"]
    assert isinstance(data["stabilityScore"], int)
    assert "cdhSeries" in data["harvest"]
    # constant moisture has no variance
    assert data["temperatureMoistureCorrelation"] is None


def test_analyze_accepts_iso_timestamps():
    payload = [
        {"timestamp": "2025-08-01T10:00:00Z", "temperature": 25.0},
        {"timestamp": "2025-08-01T10:01:00Z", "temperature": 25.5},
    ]
    response = client.post("/analyze", json=payload)
    assert response.status_code == 200
    assert response.json()["health"]["medianIntervalMin"] == 1.0


def test_analyze_empty_payload():
    response = client.post("/analyze", json=[])
    assert response.status_code == 422


def test_analyze_invalid_timestamp():
    payload = [{"timestamp": "not-a-timestamp", "temperature": 30.0}]
    response = client.post("/analyze", json=payload)
    assert response.status_code == 422
    assert "timestamp" in str(response.json())


def test_analyze_out_of_range_values():
    payload = [
        {
            "timestamp": 1_700_000_000_000,
            "temperature": -100.0,   # invalid
            "moisture": 150.0,       # invalid
            "nitrogen": -5.0         # invalid
        }
    ]
    response = client.post("/analyze", json=payload)
    assert response.status_code == 422
    errors = response.json()["detail"]
    assert any("temperature" in str(err) for err in errors)
    assert any("moisture" in str(err) for err in errors)
    assert any("nitrogen" in str(err) for err in errors)


def test_analyze_unknown_window():
    response = client.post("/analyze?window=30d", json=_payload())
    assert response.status_code == 422


def test_analyze_uses_stored_thresholds():
    client.put(
        "/settings/thresholds",
        json={
            "temperature": {"min": 10, "max": 30},
            "moisture": {"min": 40, "max": 80},
            "n": {"min": 150, "max": 900},
            "p": {"min": 50, "max": 300},
            "k": {"min": 100, "max": 800},
        },
    )
    response = client.post("/analyze", json=_payload())
    assert response.json()["fields"]["temperature"]["status"] == "high"


def test_trend_endpoint_reads_stored_settings():
    body = {"values": [100, 100, 102]}

    assert client.post("/trend", json=body).json()["trend"] == "Slightly rising"

    client.put("/settings/trend", json={"pctThreshold": 1})
    assert client.post("/trend", json=body).json()["trend"] == "Rising"


def test_trend_endpoint_short_series():
    data = client.post("/trend", json={"values": [1]}).json()
    assert data == {"pct": 0, "slope": 0, "slopeNorm": 0, "trend": "N/A", "interp": "Not enough data"}


def test_harvest_endpoint():
    body = {
        "temperatures": [30, 30, 30],
        "timestamps": [0, 3_600_000, 7_200_000],
        "targetCdh": 100,
    }
    response = client.post("/harvest", json=body)
    assert response.status_code == 200
    data = response.json()
    assert data["cdh"] == 30.0
    assert data["etaHours"] == 7.0
    assert data["ratePerHour"] == 10.0


def test_harvest_endpoint_rejects_empty_temperatures():
    response = client.post("/harvest", json={"temperatures": []})
    assert response.status_code == 422


def test_trend_settings_round_trip_defaults():
    data = client.get("/settings/trend").json()
    assert data == {"slopeNormThreshold": 0.6, "pctThreshold": 3.0, "slightPct": 1.5}


def test_thresholds_reject_inverted_band():
    response = client.put(
        "/settings/thresholds",
        json={"moisture": {"min": 80, "max": 40}},
    )
    assert response.status_code == 422
    assert "moisture" in response.json()["detail"]


def test_thresholds_defaults():
    data = client.get("/settings/thresholds").json()
    assert data["temperature"] == {"min": 15.0, "max": 65.0}
    assert data["k"] == {"min": 100.0, "max": 800.0}


def test_analyze_reports_overall_health():
    data = client.post("/analyze", json=_payload()).json()
    assert data["overall"] == {"rank": "ok", "alerts": []}


def test_maintenance_defaults_to_everything_due():
    data = client.get("/maintenance").json()
    assert data["last"] == {"water": None, "feed": None, "turn": None}
    assert data["due"] == {"water": True, "feed": True, "turn": True}


def test_logging_maintenance_action_clears_its_reminder(settings_store):
    response = client.post("/maintenance/water")
    assert response.status_code == 200
    data = response.json()
    assert data["last"]["water"] is not None
    assert data["due"]["water"] is False
    assert data["due"]["turn"] is True
    assert settings_store.get("tt_last_water") == str(data["last"]["water"])


def test_unknown_maintenance_action():
    response = client.post("/maintenance/dig")
    assert response.status_code == 422
