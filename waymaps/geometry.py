from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Iterable, Tuple

TILE_SIZE = 256
_MAX_SIN_LAT = 0.9999

PositionKey = Tuple[float, float]
PathKey = Tuple[PositionKey, ...]


@dataclass(frozen=True)
class LatLon:
    lat: float
    lon: float

    def to_list(self) -> list[float]:
        return [self.lat, self.lon]

    @classmethod
    def from_list(cls, value: Iterable[float]) -> "LatLon":
        lat, lon = value
        return cls(float(lat), float(lon))

    def __str__(self) -> str:
        return f"({self.lat:.6f}, {self.lon:.6f})"


@dataclass(frozen=True)
class Point:
    x: float
    y: float


def position_key(position: LatLon) -> PositionKey:
    return (position.lat, position.lon)


def path_key(positions: Iterable[LatLon]) -> PathKey:
    """Value key for an ordered path.

    Point order is significant: a path drawn A->B does not match B->A.
    """
    return tuple(position_key(p) for p in positions)


def _world_xy(position: LatLon, zoom: float) -> Tuple[float, float]:
    scale = TILE_SIZE * (2 ** zoom)
    siny = math.sin(math.radians(position.lat))
    siny = min(max(siny, -_MAX_SIN_LAT), _MAX_SIN_LAT)
    x = (position.lon + 180.0) / 360.0 * scale
    y = (0.5 - math.log((1 + siny) / (1 - siny)) / (4 * math.pi)) * scale
    return x, y


def lat_lng_to_point(
    position: LatLon,
    center: LatLon,
    zoom: float,
    width: float,
    height: float,
) -> Point:
    """Project a position into widget pixels for a Web Mercator view."""
    px, py = _world_xy(position, zoom)
    cx, cy = _world_xy(center, zoom)
    return Point(px - cx + width / 2.0, py - cy + height / 2.0)
