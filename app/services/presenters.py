from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from app.models.schemas import (
    Coordinate,
    MarkerOut,
    OverlaysOut,
    ResultPanelOut,
    RouteLineOut,
    RouteStyle,
    ViewportOut,
)
from app.utils.formatting import (
    BUSY_BUTTON_LABEL,
    SEARCH_BUTTON_LABEL,
    distance_label,
    duration_label,
)
from app.utils.geometry import bounding_box


@dataclass
class Marker:
    layer_id: int
    coordinate: Coordinate
    label: str


@dataclass
class RouteLine:
    layer_id: int
    coordinates: List[Coordinate]
    style: RouteStyle


@dataclass
class Viewport:
    south: float
    west: float
    north: float
    east: float
    padding_px: int


class RecordingMapPresenter:
    """Map state kept in memory so it can be shipped to a browser as JSON.

    Layers get ids from a counter that never repeats; `last_released` holds the
    ids removed by the most recent clear_overlays().
    """

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self.markers: List[Marker] = []
        self.route_line: Optional[RouteLine] = None
        self.viewport: Optional[Viewport] = None
        self.last_released: List[int] = []

    def clear_overlays(self) -> None:
        self.last_released = self.layer_ids()
        self.markers = []
        self.route_line = None

    def add_marker(self, coordinate: Coordinate, label: str) -> None:
        self.markers.append(Marker(next(self._ids), coordinate, label))

    def add_route_line(self, coordinates: Sequence[Coordinate], style: RouteStyle) -> None:
        if self.route_line is not None:
            self.last_released.append(self.route_line.layer_id)
        self.route_line = RouteLine(next(self._ids), list(coordinates), style)

    def fit_bounds(self, coordinates: Sequence[Coordinate], padding_px: int) -> None:
        box = bounding_box(coordinates)
        self.viewport = Viewport(box.south, box.west, box.north, box.east, padding_px)

    def layer_ids(self) -> List[int]:
        ids = [m.layer_id for m in self.markers]
        if self.route_line is not None:
            ids.append(self.route_line.layer_id)
        return ids

    def overlays_out(self) -> OverlaysOut:
        def marker_out(m: Marker) -> MarkerOut:
            return MarkerOut(layerId=m.layer_id, lat=m.coordinate.lat, lon=m.coordinate.lon, label=m.label)

        out = OverlaysOut()
        if len(self.markers) >= 1:
            out.startMarker = marker_out(self.markers[0])
        if len(self.markers) >= 2:
            out.destinationMarker = marker_out(self.markers[1])
        if self.route_line is not None:
            out.routeLine = RouteLineOut(
                layerId=self.route_line.layer_id,
                coordinates=[c.as_tuple() for c in self.route_line.coordinates],
                style=self.route_line.style,
            )
        return out

    def viewport_out(self) -> Optional[ViewportOut]:
        if self.viewport is None:
            return None
        v = self.viewport
        return ViewportOut(south=v.south, west=v.west, north=v.north, east=v.east, paddingPx=v.padding_px)


@dataclass
class RecordingResultView:
    error: Optional[str] = None
    busy: bool = False
    result_visible: bool = False
    distance_km: Optional[str] = None
    duration_min: Optional[int] = None
    busy_history: List[bool] = field(default_factory=list)

    def show_error(self, message: str) -> None:
        self.error = message
        self.result_visible = False

    def clear_error(self) -> None:
        self.error = None

    def show_result(self, distance_km: str, duration_min: int) -> None:
        self.distance_km = distance_km
        self.duration_min = duration_min
        self.result_visible = True

    def set_busy(self, busy: bool) -> None:
        self.busy = busy
        self.busy_history.append(busy)

    def reset(self) -> None:
        self.error = None
        self.busy = False
        self.result_visible = False
        self.distance_km = None
        self.duration_min = None

    @property
    def button_label(self) -> str:
        return BUSY_BUTTON_LABEL if self.busy else SEARCH_BUTTON_LABEL

    def result_out(self) -> ResultPanelOut:
        if not self.result_visible or self.distance_km is None or self.duration_min is None:
            return ResultPanelOut(visible=False)
        return ResultPanelOut(
            visible=True,
            distance=distance_label(self.distance_km),
            duration=duration_label(self.duration_min),
        )
