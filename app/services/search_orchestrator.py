from __future__ import annotations

import asyncio
import logging
from typing import Optional, Protocol, Sequence, Tuple, Union

from app.models.schemas import Coordinate, GeocodeResult, RouteResult, RouteStyle
from app.models.state import (
    FailedState,
    FailureReason,
    IdleState,
    InFlightState,
    SearchSide,
    SearchState,
    SuccessState,
)
from app.services.errors import NoRouteError, TransportError
from app.utils.formatting import (
    DESTINATION_MARKER_LABEL,
    NO_ROUTE_MESSAGE,
    ROUTE_SERVICE_MESSAGE,
    START_MARKER_LABEL,
    VALIDATION_MESSAGE,
    geocode_service_message,
    meters_to_km,
    place_not_found_message,
    seconds_to_minutes,
)

logger = logging.getLogger(__name__)


class Geocoder(Protocol):
    async def geocode(self, query: str) -> Optional[GeocodeResult]: ...


class Router(Protocol):
    async def route(self, start: Coordinate, dest: Coordinate) -> RouteResult: ...


class MapPresenter(Protocol):
    def clear_overlays(self) -> None: ...

    def add_marker(self, coordinate: Coordinate, label: str) -> None: ...

    def add_route_line(self, coordinates: Sequence[Coordinate], style: RouteStyle) -> None: ...

    def fit_bounds(self, coordinates: Sequence[Coordinate], padding_px: int) -> None: ...


class ResultView(Protocol):
    def show_error(self, message: str) -> None: ...

    def clear_error(self) -> None: ...

    def show_result(self, distance_km: str, duration_min: int) -> None: ...

    def set_busy(self, busy: bool) -> None: ...


GeocodeOutcome = Union[GeocodeResult, None, BaseException]


class SearchOrchestrator:
    """Owns one search box: geocode both ends, route between them, render.

    Every run() takes a new generation token. After each await the token is
    compared with the latest one and a superseded run drops its result, so
    only the most recent search can touch the state, the map or the view.
    In-flight requests are never cancelled.
    """

    def __init__(
        self,
        geocoder: Geocoder,
        router: Router,
        presenter: MapPresenter,
        view: ResultView,
        fit_padding_px: int = 50,
        route_style: Optional[RouteStyle] = None,
    ) -> None:
        self._geocoder = geocoder
        self._router = router
        self._presenter = presenter
        self._view = view
        self.fit_padding_px = fit_padding_px
        self.route_style = route_style or RouteStyle()
        self._state: SearchState = IdleState()
        self._generation = 0

    @property
    def state(self) -> SearchState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    def _is_current(self, token: int) -> bool:
        return token == self._generation

    def _fail(self, reason: FailureReason, message: str, side: Optional[SearchSide] = None) -> None:
        self._state = FailedState(reason=reason, side=side, message=message)
        self._view.show_error(message)
        logger.info("Search failed: %s (side=%s)", reason.value, side.value if side else None)

    async def run(self, start_query: str, dest_query: str) -> SearchState:
        self._generation += 1
        token = self._generation
        start_query = (start_query or "").strip()
        dest_query = (dest_query or "").strip()

        if not start_query or not dest_query:
            # May supersede a run that will no longer clear the busy flag itself
            self._view.set_busy(False)
            self._fail(FailureReason.VALIDATION, VALIDATION_MESSAGE)
            return self._state

        logger.info("Search #%d: %r -> %r", token, start_query, dest_query)
        self._state = InFlightState(token=token, startQuery=start_query, destinationQuery=dest_query)
        self._view.clear_error()
        self._view.set_busy(True)
        try:
            await self._search(token, start_query, dest_query)
        finally:
            # The newer run owns the busy flag once this one is superseded
            if self._is_current(token):
                self._view.set_busy(False)
        return self._state

    async def _search(self, token: int, start_query: str, dest_query: str) -> None:
        outcomes: Tuple[GeocodeOutcome, GeocodeOutcome] = await asyncio.gather(
            self._geocoder.geocode(start_query),
            self._geocoder.geocode(dest_query),
            return_exceptions=True,
        )
        if not self._is_current(token):
            logger.debug("Search #%d superseded during geocoding", token)
            return

        for outcome in outcomes:
            if isinstance(outcome, BaseException) and not isinstance(outcome, TransportError):
                raise outcome

        sides = (
            (SearchSide.START, start_query, outcomes[0]),
            (SearchSide.DESTINATION, dest_query, outcomes[1]),
        )
        for side, query, outcome in sides:
            if isinstance(outcome, TransportError):
                self._fail(FailureReason.GEOCODE_SERVICE_ERROR, geocode_service_message(query), side)
                return
            if outcome is None:
                self._fail(FailureReason.PLACE_NOT_FOUND, place_not_found_message(query), side)
                return

        start_place, dest_place = outcomes
        try:
            route = await self._router.route(start_place.coordinate, dest_place.coordinate)
        except NoRouteError:
            if self._is_current(token):
                self._fail(FailureReason.ROUTE_SERVICE_ERROR, NO_ROUTE_MESSAGE)
            return
        except TransportError:
            if self._is_current(token):
                self._fail(FailureReason.ROUTE_SERVICE_ERROR, ROUTE_SERVICE_MESSAGE)
            return

        if not self._is_current(token):
            logger.debug("Search #%d superseded during routing", token)
            return
        self._render(route, start_place, dest_place)

    def _render(self, route: RouteResult, start_place: GeocodeResult, dest_place: GeocodeResult) -> None:
        self._presenter.clear_overlays()
        self._presenter.add_marker(start_place.coordinate, START_MARKER_LABEL)
        self._presenter.add_marker(dest_place.coordinate, DESTINATION_MARKER_LABEL)
        self._presenter.add_route_line(route.geometry, self.route_style)
        self._presenter.fit_bounds(route.geometry, self.fit_padding_px)

        distance_km = meters_to_km(route.distanceMeters)
        duration_min = seconds_to_minutes(route.durationSeconds)
        self._view.show_result(distance_km, duration_min)
        self._state = SuccessState(route=route, startPlace=start_place, destinationPlace=dest_place)
        logger.info("Search succeeded: %s km, %d min", distance_km, duration_min)

    def reset(self) -> SearchState:
        """Back to Idle with an empty map. Any in-flight run becomes stale."""
        self._generation += 1
        self._presenter.clear_overlays()
        self._view.clear_error()
        self._view.set_busy(False)
        self._state = IdleState()
        return self._state
