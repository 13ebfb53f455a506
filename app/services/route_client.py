from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from app.config import DEFAULT_ROUTE_URL
from app.models.schemas import Coordinate, RouteResult
from app.services.errors import NoRouteError, TransportError

logger = logging.getLogger(__name__)

SERVICE_NAME = "route"

# OSRM answers these with HTTP 400, so they have to be read off the body
NO_ROUTE_CODES = {"NoRoute", "NoSegment"}


def format_coordinates(start: Coordinate, dest: Coordinate) -> str:
    """OSRM wants 'lon,lat;lon,lat'."""
    return ";".join(f"{c.lon},{c.lat}" for c in (start, dest))


def _map_route(route: Dict[str, Any]) -> RouteResult:
    geometry = route["geometry"]
    if not isinstance(geometry, dict) or geometry.get("type") != "LineString":
        raise ValueError(f"expected a GeoJSON LineString, got {geometry!r:.80}")
    # GeoJSON positions are [lon, lat]
    points: List[Coordinate] = [Coordinate(lat=pos[1], lon=pos[0]) for pos in geometry["coordinates"]]
    return RouteResult(
        geometry=points,
        distanceMeters=route["distance"],
        durationSeconds=route["duration"],
    )


class RouteClient:
    def __init__(
        self,
        base_url: str = DEFAULT_ROUTE_URL,
        timeout: float = 20.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def route(self, start: Coordinate, dest: Coordinate) -> RouteResult:
        url = f"{self.base_url}/{format_coordinates(start, dest)}"
        try:
            resp = await self._client.get(url, params={"overview": "full", "geometries": "geojson"})
        except httpx.HTTPError as exc:
            logger.warning("Route request failed: %s", exc)
            raise TransportError(SERVICE_NAME, str(exc) or exc.__class__.__name__) from exc

        try:
            data = resp.json()
        except ValueError:
            data = None
        code = data.get("code") if isinstance(data, dict) else None

        if code in NO_ROUTE_CODES:
            raise NoRouteError(data.get("message") or code)
        if not resp.is_success:
            logger.warning("Route service returned %s (code=%s)", resp.status_code, code)
            raise TransportError(SERVICE_NAME, f"HTTP {resp.status_code}")
        if data is None:
            raise TransportError(SERVICE_NAME, "response body is not JSON")
        if code != "Ok":
            raise TransportError(SERVICE_NAME, f"{code}: {data.get('message', 'Unknown error')}")

        routes = data.get("routes") or []
        if not routes:
            raise NoRouteError("service returned no routes")
        try:
            return _map_route(routes[0])
        except (KeyError, TypeError, ValueError, IndexError, ValidationError) as exc:
            raise TransportError(SERVICE_NAME, f"malformed route: {exc}") from exc

    async def aclose(self) -> None:
        await self._client.aclose()
