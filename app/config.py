from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_GEOCODE_URL = "https://nominatim.openstreetmap.org/search"
DEFAULT_ROUTE_URL = "https://router.project-osrm.org/route/v1/driving"
FALLBACK_USER_AGENT = "route-finder/1.0"


class Settings(BaseModel):
    geocode_url: str = DEFAULT_GEOCODE_URL
    route_url: str = DEFAULT_ROUTE_URL
    http_timeout: float = Field(default=20.0, gt=0)
    geocode_user_agent: str = FALLBACK_USER_AGENT
    fit_padding_px: int = Field(default=50, ge=0)
    max_sessions: int = Field(default=1000, ge=1)
    allowed_origins: List[str] = Field(default_factory=list)
    log_level: str = "INFO"


def _split_origins(raw: str | None) -> List[str]:
    if not raw:
        return []
    return [o.strip() for o in raw.split(",") if o.strip()]


def load_settings() -> Settings:
    """Read settings from the process environment (and .env, if present)."""
    load_dotenv()
    user_agent = os.getenv("GEOCODE_USER_AGENT")
    if not user_agent:
        logger.warning(
            "GEOCODE_USER_AGENT not set; using fallback UA %r. "
            "Nominatim's usage policy asks for an identifying User-Agent.",
            FALLBACK_USER_AGENT,
        )
        user_agent = FALLBACK_USER_AGENT
    return Settings(
        geocode_url=os.getenv("GEOCODE_URL", DEFAULT_GEOCODE_URL),
        route_url=os.getenv("ROUTE_URL", DEFAULT_ROUTE_URL).rstrip("/"),
        http_timeout=os.getenv("HTTP_TIMEOUT", "20.0"),
        geocode_user_agent=user_agent,
        fit_padding_px=os.getenv("FIT_PADDING_PX", "50"),
        max_sessions=os.getenv("MAX_SESSIONS", "1000"),
        allowed_origins=_split_origins(os.getenv("ALLOWED_ORIGINS")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
