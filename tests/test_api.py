import pytest
from fastapi.testclient import TestClient

from planetracker.config import settings
from planetracker.main import app
from planetracker.models import (
    AirbornePosition,
    AirborneVelocity,
    GeodeticPosition,
    IdentificationAndCategory,
    TransponderId,
)

ABCDEF = TransponderId.from_hex("ABCDEF")


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "recording_dir", str(tmp_path))
    monkeypatch.setattr(settings, "autoconnect", False)
    monkeypatch.setattr(settings, "outbound_port", 0)
    monkeypatch.setattr(settings, "observer", GeodeticPosition(lat=51.47, lon=-0.45))
    with TestClient(app) as test_client:
        yield test_client


def _track_aircraft(client):
    store = client.app.state.program.store
    store.apply(IdentificationAndCategory(id=ABCDEF, callsign="BAW123"))
    store.apply(AirborneVelocity(id=ABCDEF, ground_speed=200.0, track=90.0))
    store.apply(
        AirbornePosition(
            id=ABCDEF, altitude=3000.0, position=GeodeticPosition(lat=51.5, lon=-0.1)
        )
    )


def test_health_and_root(client):
    assert client.get("/healthz").json()["status"] == "ok"
    assert client.get("/").json() == {
        "service": "planetracker",
        "connection": "disconnected",
        "server_address": None,
        "aircraft": 0,
        "selected": [],
    }

    _track_aircraft(client)
    client.post("/api/v1/aircraft/ABCDEF/select")
    body = client.get("/").json()
    assert body["aircraft"] == 1
    assert body["selected"] == ["ABCDEF"]


def test_aircraft_listing(client):
    assert client.get("/api/v1/aircraft").json() == []

    _track_aircraft(client)
    body = client.get("/api/v1/aircraft").json()

    assert len(body) == 1
    assert body[0]["id"] == "ABCDEF"
    assert body[0]["callsign"] == "BAW123"
    assert body[0]["altitude_m"] == 3000.0
    assert body[0]["selected"] is False


def test_get_single_aircraft(client):
    _track_aircraft(client)

    assert client.get("/api/v1/aircraft/abcdef").json()["callsign"] == "BAW123"
    assert client.get("/api/v1/aircraft/123456").status_code == 404
    assert client.get("/api/v1/aircraft/XYZ").status_code == 400


def test_selection(client):
    assert client.post("/api/v1/aircraft/ABCDEF/select").status_code == 404
    assert client.post("/api/v1/aircraft/not-hex/select").status_code == 400

    _track_aircraft(client)
    response = client.post("/api/v1/aircraft/ABCDEF/select")
    assert response.status_code == 200
    assert response.json()["selected"] is True

    assert client.delete("/api/v1/selection").status_code == 204
    assert client.get("/api/v1/aircraft/ABCDEF").json()["selected"] is False


def test_settings_update(client, tmp_path):
    response = client.put(
        "/api/v1/settings",
        json={"interpolate_positions": False, "filter_out_of_order": False, "recording": True},
    )

    body = response.json()
    assert response.status_code == 200
    assert body["interpolate_positions"] is False
    assert body["filter_out_of_order"] is False
    assert body["recording"] is True
    assert body["recording_path"].startswith(str(tmp_path))

    body = client.put("/api/v1/settings", json={"recording": False}).json()
    assert body["recording"] is False
    assert body["recording_path"] is None


def test_connect_errors(client, closed_port_address):
    assert client.post("/api/v1/connect", json={"address": "no-port"}).status_code == 400

    response = client.post("/api/v1/connect", json={"address": closed_port_address})
    assert response.status_code == 502
    assert client.get("/api/v1/status").json()["connection"] == "disconnected"


def test_connect_and_disconnect(client, feed_server):
    server = feed_server([], hold_open=True)

    body = client.post("/api/v1/connect", json={"address": server.address}).json()
    assert body["connection"] == "streaming"
    assert body["server_address"] == server.address

    _track_aircraft(client)
    body = client.post("/api/v1/disconnect").json()
    assert body["connection"] == "disconnected"
    assert body["aircraft"] == 0


def test_range_rings(client):
    rings = client.get("/api/v1/range-rings", params={"plot_range_km": 100, "step_km": 20}).json()

    assert [ring["surface_distance_m"] for ring in rings] == [20000.0, 40000.0, 60000.0, 80000.0]
    assert all(ring["projected_radius_m"] < ring["surface_distance_m"] for ring in rings)
