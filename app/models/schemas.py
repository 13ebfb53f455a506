from __future__ import annotations

from typing import List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator


class Coordinate(BaseModel):
    """A (latitude, longitude) pair. Always lat first, whatever the wire format says."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    lat: float = Field(ge=-90.0, le=90.0)
    lon: float = Field(ge=-180.0, le=180.0)

    def as_tuple(self) -> Tuple[float, float]:
        return (self.lat, self.lon)


class GeocodeResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    coordinate: Coordinate
    displayName: str


class RouteResult(BaseModel):
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    geometry: List[Coordinate] = Field(min_length=2)
    distanceMeters: float = Field(ge=0)
    durationSeconds: float = Field(ge=0)


class RouteStyle(BaseModel):
    color: str = "#3b82f6"
    weight: int = 6
    opacity: float = 0.8


class RouteSearchRequest(BaseModel):
    start: str = Field(default="", description="Free-form start place like 'Tokyo Station'")
    destination: str = Field(default="", description="Free-form destination place")
    sessionId: str = Field(default="default", min_length=1, max_length=128)

    @field_validator("start", "destination")
    @classmethod
    def strip_query(cls, v: str) -> str:
        # Emptiness is reported by the orchestrator as a failed search, not as a 422
        return v.strip()


class MarkerOut(BaseModel):
    layerId: int
    lat: float
    lon: float
    label: str


class RouteLineOut(BaseModel):
    layerId: int
    coordinates: List[Tuple[float, float]]
    style: RouteStyle


class OverlaysOut(BaseModel):
    startMarker: Optional[MarkerOut] = None
    destinationMarker: Optional[MarkerOut] = None
    routeLine: Optional[RouteLineOut] = None


class ViewportOut(BaseModel):
    south: float
    west: float
    north: float
    east: float
    paddingPx: int


class ResultPanelOut(BaseModel):
    visible: bool = False
    distance: Optional[str] = None
    duration: Optional[str] = None


class FailureOut(BaseModel):
    reason: str
    side: Optional[str] = None
    message: str


class SearchSnapshot(BaseModel):
    sessionId: str
    state: str
    failure: Optional[FailureOut] = None
    busy: bool = False
    buttonLabel: str
    error: Optional[str] = None
    result: ResultPanelOut = Field(default_factory=ResultPanelOut)
    overlays: OverlaysOut = Field(default_factory=OverlaysOut)
    viewport: Optional[ViewportOut] = None
    startPlace: Optional[str] = None
    destinationPlace: Optional[str] = None
