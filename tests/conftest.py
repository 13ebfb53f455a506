import json
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import unquote

import httpx
import pytest

from app.services.geocode_client import GeocodeClient
from app.services.route_client import RouteClient

GEOCODE_URL = "https://geocode.test/search"
ROUTE_URL = "https://route.test/route/v1/driving"

# query -> Nominatim candidate
PLACES: Dict[str, Dict[str, Any]] = {
    "Tokyo Station": {"lat": "35.6812", "lon": "139.7671", "display_name": "東京駅, 千代田区, 東京都, 日本"},
    "Shibuya Station": {"lat": "35.6580", "lon": "139.7016", "display_name": "渋谷駅, 渋谷区, 東京都, 日本"},
    "Tokyo": {"lat": "35.6895", "lon": "139.6917", "display_name": "東京都, 日本"},
    "Osaka": {"lat": "34.6937", "lon": "135.5023", "display_name": "大阪市, 大阪府, 日本"},
}


def osrm_ok(distance: float = 6500, duration: float = 900, coordinates: Optional[List[List[float]]] = None) -> Dict[str, Any]:
    return {
        "code": "Ok",
        "routes": [
            {
                "geometry": {
                    "type": "LineString",
                    "coordinates": coordinates or [[139.7671, 35.6812], [139.7300, 35.6700], [139.7016, 35.6580]],
                },
                "distance": distance,
                "duration": duration,
            }
        ],
    }


def nominatim_handler(places: Dict[str, Dict[str, Any]]) -> Callable[[httpx.Request], httpx.Response]:
    def handler(request: httpx.Request) -> httpx.Response:
        query = request.url.params.get("q")
        candidate = places.get(query)
        return httpx.Response(200, json=[candidate] if candidate else [])

    return handler


def osrm_handler(body: Dict[str, Any], status_code: int = 200) -> Callable[[httpx.Request], httpx.Response]:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, content=json.dumps(body).encode(), headers={"content-type": "application/json"})

    return handler


class RequestLog:
    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []

    def wrap(self, handler: Callable[[httpx.Request], httpx.Response]) -> Callable[[httpx.Request], httpx.Response]:
        def recorded(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        return recorded

    def paths(self) -> List[str]:
        return [unquote(r.url.path) for r in self.requests]


def make_geocoder(handler, log: Optional[RequestLog] = None) -> GeocodeClient:
    if log is not None:
        handler = log.wrap(handler)
    return GeocodeClient(
        base_url=GEOCODE_URL,
        user_agent="route-finder-tests/1.0",
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


def make_router(handler, log: Optional[RequestLog] = None) -> RouteClient:
    if log is not None:
        handler = log.wrap(handler)
    return RouteClient(base_url=ROUTE_URL, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


@pytest.fixture
def geocode_log():
    return RequestLog()


@pytest.fixture
def route_log():
    return RequestLog()
