from __future__ import annotations

from typing import NamedTuple, Sequence

from app.models.schemas import Coordinate


class Bounds(NamedTuple):
    south: float
    west: float
    north: float
    east: float


def bounding_box(points: Sequence[Coordinate]) -> Bounds:
    if not points:
        raise ValueError("bounding_box requires at least one coordinate")
    lats = [p.lat for p in points]
    lons = [p.lon for p in points]
    return Bounds(south=min(lats), west=min(lons), north=max(lats), east=max(lons))
