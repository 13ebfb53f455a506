import httpx
import pytest
from fastapi.testclient import TestClient

from app.main import app, get_sessions
from app.services.sessions import SessionStore
from conftest import PLACES, RequestLog, make_geocoder, make_router, nominatim_handler, osrm_handler, osrm_ok


class SwitchableRoute:
    def __init__(self):
        self.handler = osrm_handler(osrm_ok(distance=6500, duration=900))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        return self.handler(request)


@pytest.fixture
def route_switch():
    return SwitchableRoute()


@pytest.fixture
def store(geocode_log, route_log, route_switch):
    return SessionStore(
        make_geocoder(nominatim_handler(PLACES), geocode_log),
        make_router(route_switch, route_log),
        fit_padding_px=50,
    )


@pytest.fixture
def client(store):
    app.dependency_overrides[get_sessions] = lambda: store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_search_tokyo_to_shibuya(client, route_log):
    resp = client.post("/search/route", json={"start": "Tokyo Station", "destination": "Shibuya Station"})
    assert resp.status_code == 200
    body = resp.json()

    assert body["sessionId"] == "default"
    assert body["state"] == "success"
    assert body["failure"] is None
    assert body["result"] == {"visible": True, "distance": "6.5 km", "duration": "15 分"}
    assert body["overlays"]["startMarker"]["label"] == "出発地"
    assert body["overlays"]["destinationMarker"]["label"] == "目的地"
    assert len(body["overlays"]["routeLine"]["coordinates"]) == 3
    assert body["viewport"]["paddingPx"] == 50
    assert body["busy"] is False
    assert body["buttonLabel"] == "経路を検索"
    assert body["startPlace"].startswith("東京駅")
    assert route_log.paths() == ["/route/v1/driving/139.7671,35.6812;139.7016,35.658"]


def test_empty_start_is_validation_failure_without_calls(client, geocode_log, route_log):
    resp = client.post("/search/route", json={"start": "", "destination": "Osaka"})
    assert resp.status_code == 200
    body = resp.json()

    assert body["state"] == "failed"
    assert body["failure"]["reason"] == "validation"
    assert body["error"] == "出発地と目的地を入力してください"
    assert geocode_log.requests == []
    assert route_log.requests == []


def test_unknown_start_place(client, route_log):
    body = client.post("/search/route", json={"start": "Nonexistent Place", "destination": "Tokyo"}).json()

    assert body["failure"] == {
        "reason": "place_not_found",
        "side": "start",
        "message": "「Nonexistent Place」が見つかりませんでした",
    }
    assert route_log.requests == []


def test_route_failure_keeps_previous_map(client, route_switch):
    first = client.post("/search/route", json={"start": "Tokyo Station", "destination": "Shibuya Station"}).json()

    route_switch.handler = osrm_handler({"code": "NoRoute", "message": "Impossible route"}, status_code=400)
    second = client.post("/search/route", json={"start": "Tokyo", "destination": "Osaka"}).json()

    assert second["state"] == "failed"
    assert second["failure"]["reason"] == "route_service_error"
    assert second["error"] == "経路が見つかりませんでした"
    assert second["overlays"] == first["overlays"]
    assert second["viewport"] == first["viewport"]
    assert second["result"]["visible"] is False


def test_sessions_are_independent(client):
    client.post("/search/route", json={"start": "Tokyo Station", "destination": "Shibuya Station", "sessionId": "a"})
    client.post("/search/route", json={"start": "", "destination": "Osaka", "sessionId": "b"})

    assert client.get("/search/route/a").json()["state"] == "success"
    assert client.get("/search/route/b").json()["state"] == "failed"


def test_get_unknown_session_is_404(client):
    assert client.get("/search/route/nobody").status_code == 404
    assert client.delete("/search/route/nobody").status_code == 404


def test_delete_resets_session(client):
    client.post("/search/route", json={"start": "Tokyo Station", "destination": "Shibuya Station"})

    resp = client.delete("/search/route/default")
    assert resp.status_code == 200
    body = resp.json()
    assert body["state"] == "idle"
    assert body["overlays"] == {"startMarker": None, "destinationMarker": None, "routeLine": None}
    assert body["result"]["visible"] is False
    assert body["error"] is None


def test_session_id_must_not_be_empty(client):
    resp = client.post("/search/route", json={"start": "Tokyo", "destination": "Osaka", "sessionId": ""})
    assert resp.status_code == 422
