from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from app.config import DEFAULT_GEOCODE_URL, FALLBACK_USER_AGENT
from app.models.schemas import Coordinate, GeocodeResult
from app.services.errors import TransportError

logger = logging.getLogger(__name__)

SERVICE_NAME = "geocode"


def _map_candidate(candidate: Dict[str, Any]) -> GeocodeResult:
    # Nominatim sends lat/lon as numeric strings
    return GeocodeResult(
        coordinate=Coordinate(lat=float(candidate["lat"]), lon=float(candidate["lon"])),
        displayName=candidate.get("display_name") or "",
    )


class GeocodeClient:
    """Forward geocoding against a Nominatim-compatible /search endpoint.

    Returns None when the service knows no such place. Raises TransportError for
    everything else that goes wrong (network, status, body shape).
    """

    def __init__(
        self,
        base_url: str = DEFAULT_GEOCODE_URL,
        user_agent: str = FALLBACK_USER_AGENT,
        timeout: float = 20.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url
        self.headers = {"User-Agent": user_agent, "Accept": "application/json"}
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def _get(self, params: Dict[str, Any]) -> Any:
        try:
            resp = await self._client.get(self.base_url, params=params, headers=self.headers)
        except httpx.HTTPError as exc:
            logger.warning("Geocode request failed for %r: %s", params.get("q"), exc)
            raise TransportError(SERVICE_NAME, str(exc) or exc.__class__.__name__) from exc
        if not resp.is_success:
            logger.warning("Geocode service returned %s for %r", resp.status_code, params.get("q"))
            raise TransportError(SERVICE_NAME, f"HTTP {resp.status_code}")
        try:
            return resp.json()
        except ValueError as exc:
            raise TransportError(SERVICE_NAME, "response body is not JSON") from exc

    async def geocode(self, query: str) -> Optional[GeocodeResult]:
        data = await self._get({"format": "json", "q": query, "limit": 1})
        if not isinstance(data, list):
            raise TransportError(SERVICE_NAME, "expected a JSON array")
        if not data:
            logger.info("No geocode candidate for %r", query)
            return None
        # First match wins; ranking is the service's business
        try:
            return _map_candidate(data[0])
        except (KeyError, TypeError, ValueError, ValidationError) as exc:
            raise TransportError(SERVICE_NAME, f"malformed candidate: {exc}") from exc

    async def aclose(self) -> None:
        await self._client.aclose()
