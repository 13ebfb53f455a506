from __future__ import annotations

from enum import Enum
from typing import Literal, Optional, Union
from pydantic import BaseModel, ConfigDict

from app.models.schemas import GeocodeResult, RouteResult


class SearchSide(str, Enum):
    START = "start"
    DESTINATION = "destination"


class FailureReason(str, Enum):
    VALIDATION = "validation"
    PLACE_NOT_FOUND = "place_not_found"
    GEOCODE_SERVICE_ERROR = "geocode_service_error"
    ROUTE_SERVICE_ERROR = "route_service_error"


class IdleState(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["idle"] = "idle"


class InFlightState(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["in_flight"] = "in_flight"
    token: int
    startQuery: str
    destinationQuery: str


class SuccessState(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["success"] = "success"
    route: RouteResult
    startPlace: GeocodeResult
    destinationPlace: GeocodeResult


class FailedState(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["failed"] = "failed"
    reason: FailureReason
    # None when the failure is not tied to one query (validation, routing)
    side: Optional[SearchSide] = None
    message: str


SearchState = Union[IdleState, InFlightState, SuccessState, FailedState]
