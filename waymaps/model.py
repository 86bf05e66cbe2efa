from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
import re
from typing import Any, Dict, List, Optional, Sequence
import uuid

from waymaps.config import (
    DEFAULT_LINE_COLOR,
    DEFAULT_LINE_OPACITY,
    DEFAULT_LINE_WEIGHT,
    DEFAULT_START_ZOOM,
)
from waymaps.errors import RouteIndexError
from waymaps.geometry import LatLon, PathKey, path_key

_LABEL_COUNTERS: Dict[str, int] = {}
_LABEL_RE = re.compile(r"^M(\d+)$")


def _new_id() -> str:
    return uuid.uuid4().hex


class MarkerType(Enum):
    GREEN = "green"
    RED = "red"
    BLUE = "blue"
    ORANGE = "orange"
    BROWN = "brown"
    PURPLE = "purple"

    def next_label(self) -> str:
        count = _LABEL_COUNTERS.get(self.value, 0) + 1
        _LABEL_COUNTERS[self.value] = count
        return f"M{count}"

    def note_label(self, label: str) -> None:
        # Keeps reloaded labels from being handed out again.
        match = _LABEL_RE.match(label or "")
        if match:
            count = int(match.group(1))
            if count > _LABEL_COUNTERS.get(self.value, 0):
                _LABEL_COUNTERS[self.value] = count


class MapType(Enum):
    ROADMAP = "roadmap"
    TERRAIN = "terrain"
    SATELLITE = "satellite"


@dataclass
class MarkerOptions:
    position: LatLon
    title: str = "Waypoint"
    label: str = ""
    marker_type: MarkerType = MarkerType.GREEN
    visible: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "position": self.position.to_list(),
            "title": self.title,
            "label": self.label,
            "marker_type": self.marker_type.value,
            "visible": self.visible,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MarkerOptions":
        marker_type = MarkerType(data.get("marker_type", MarkerType.GREEN.value))
        label = data.get("label", "")
        marker_type.note_label(label)
        return cls(
            position=LatLon.from_list(data["position"]),
            title=data.get("title", "Waypoint"),
            label=label,
            marker_type=marker_type,
            visible=bool(data.get("visible", True)),
        )


@dataclass(eq=False)
class Marker:
    options: MarkerOptions
    id: str = field(default_factory=_new_id)

    @property
    def position(self) -> LatLon:
        return self.options.position

    @property
    def label(self) -> str:
        return self.options.label

    def to_dict(self) -> Dict[str, Any]:
        return self.options.to_dict()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Marker":
        return cls(MarkerOptions.from_dict(data))


@dataclass
class PolylineOptions:
    path: List[LatLon] = field(default_factory=list)
    stroke_color: str = DEFAULT_LINE_COLOR
    stroke_weight: float = DEFAULT_LINE_WEIGHT
    stroke_opacity: float = DEFAULT_LINE_OPACITY
    visible: bool = True
    clickable: bool = True

    def copy(self) -> "PolylineOptions":
        return replace(self, path=list(self.path))

    def with_path(self, path: Sequence[LatLon]) -> "PolylineOptions":
        return replace(self, path=list(path))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": [p.to_list() for p in self.path],
            "stroke_color": self.stroke_color,
            "stroke_weight": self.stroke_weight,
            "stroke_opacity": self.stroke_opacity,
            "visible": self.visible,
            "clickable": self.clickable,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PolylineOptions":
        return cls(
            path=[LatLon.from_list(p) for p in data.get("path", [])],
            stroke_color=data.get("stroke_color", DEFAULT_LINE_COLOR),
            stroke_weight=float(data.get("stroke_weight", DEFAULT_LINE_WEIGHT)),
            stroke_opacity=float(data.get("stroke_opacity", DEFAULT_LINE_OPACITY)),
            visible=bool(data.get("visible", True)),
            clickable=bool(data.get("clickable", True)),
        )


def default_polyline_options() -> PolylineOptions:
    return PolylineOptions()


@dataclass(eq=False)
class Polyline:
    options: PolylineOptions
    id: str = field(default_factory=_new_id)

    @property
    def path(self) -> List[LatLon]:
        return self.options.path

    @property
    def path_key(self) -> PathKey:
        return path_key(self.options.path)

    def to_dict(self) -> Dict[str, Any]:
        return self.options.to_dict()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Polyline":
        return cls(PolylineOptions.from_dict(data))


@dataclass(eq=False)
class Waypoint:
    """A position on a route plus the line back to its predecessor."""

    position: LatLon
    marker: Marker
    connection: Optional[Polyline] = None

    def __post_init__(self) -> None:
        if self.position is None:
            raise ValueError("Waypoint requires a position.")

    @classmethod
    def create(cls, position: LatLon, marker_type: MarkerType = MarkerType.GREEN) -> "Waypoint":
        if position is None:
            raise ValueError("Waypoint requires a position.")
        options = MarkerOptions(
            position=position,
            title="Waypoint",
            label=marker_type.next_label(),
            marker_type=marker_type,
            visible=True,
        )
        return cls(position, Marker(options))

    def set_connection(self, line: Optional[Polyline]) -> None:
        self.connection = line

    def to_dict(self) -> Dict[str, Any]:
        return {
            "position": self.position.to_list(),
            "marker": self.marker.to_dict(),
            "connection": self.connection.to_dict() if self.connection is not None else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Waypoint":
        connection = data.get("connection")
        return cls(
            position=LatLon.from_list(data["position"]),
            marker=Marker.from_dict(data["marker"]),
            connection=Polyline.from_dict(connection) if connection else None,
        )


class Route:
    """Ordered waypoints of a named route and the lines joining them.

    ``add_waypoint`` and ``add_line`` are independent so callers can choose
    the style of each connecting line. ``remove_waypoint`` leaves ``lines``
    untouched; callers erase the rendering first and call
    ``rebuild_lines`` before displaying the route again.
    """

    def __init__(self, name: str, interim_markers_visible: bool = True) -> None:
        self.name = name
        self.interim_markers_visible = interim_markers_visible
        self._waypoints: List[Waypoint] = []
        self._lines: List[Polyline] = []
        self.revision = 0

    def __repr__(self) -> str:
        return f"Route({self.name!r}, waypoints={len(self._waypoints)}, lines={len(self._lines)})"

    def __len__(self) -> int:
        return len(self._waypoints)

    def _touch(self) -> None:
        self.revision += 1

    @property
    def waypoints(self) -> List[Waypoint]:
        return list(self._waypoints)

    @property
    def lines(self) -> List[Polyline]:
        return list(self._lines)

    @property
    def origin(self) -> Optional[Waypoint]:
        return self._waypoints[0] if self._waypoints else None

    @property
    def destination(self) -> Optional[Waypoint]:
        return self._waypoints[-1] if self._waypoints else None

    def size(self) -> int:
        return len(self._waypoints)

    def get_waypoint(self, index: int) -> Waypoint:
        if index < 0 or index >= len(self._waypoints):
            raise RouteIndexError(self.name, index, len(self._waypoints))
        return self._waypoints[index]

    def index_of(self, waypoint: Waypoint) -> Optional[int]:
        for i, wp in enumerate(self._waypoints):
            if wp is waypoint:
                return i
        return None

    def add_waypoint(self, waypoint: Waypoint) -> None:
        self._waypoints.append(waypoint)
        self._touch()

    def add_line(self, line: Polyline) -> None:
        self._lines.append(line)
        self._touch()

    def remove_waypoint(self, waypoint: Waypoint) -> bool:
        index = self.index_of(waypoint)
        if index is None:
            return False
        del self._waypoints[index]
        self._touch()
        return True

    def remove_all_waypoints(self) -> None:
        self._waypoints.clear()
        self._lines.clear()
        self._touch()

    def is_endpoint(self, waypoint: Waypoint) -> bool:
        return waypoint is self.origin or waypoint is self.destination

    def rebuild_lines(self, default_options: Optional[PolylineOptions] = None) -> List[Polyline]:
        """Reconnect consecutive waypoints, returning the lines it had to create.

        Lines whose path still matches a consecutive pair are kept as-is.
        """
        existing: Dict[PathKey, List[Polyline]] = {}
        for line in self._lines:
            existing.setdefault(line.path_key, []).append(line)

        created: List[Polyline] = []
        lines: List[Polyline] = []
        if self._waypoints:
            self._waypoints[0].set_connection(None)
        for prev, wp in zip(self._waypoints, self._waypoints[1:]):
            path = [prev.position, wp.position]
            key = path_key(path)
            # each kept line serves one pair only
            matches = existing.get(key)
            line = matches.pop(0) if matches else None
            if (
                line is None
                and wp.connection is not None
                and wp.connection.path_key == key
                and all(wp.connection is not kept for kept in lines)
            ):
                line = wp.connection
            if line is None:
                if wp.connection is not None:
                    base = wp.connection.options
                else:
                    base = default_options or default_polyline_options()
                line = Polyline(base.with_path(path))
                created.append(line)
            wp.set_connection(line)
            lines.append(line)
        self._lines = lines
        self._touch()
        return created

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "interim_markers_visible": self.interim_markers_visible,
            "waypoints": [wp.to_dict() for wp in self._waypoints],
            "lines": [line.to_dict() for line in self._lines],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Route":
        route = cls(data["name"], bool(data.get("interim_markers_visible", True)))
        for wp in data.get("waypoints", []):
            route.add_waypoint(Waypoint.from_dict(wp))
        for line in data.get("lines", []):
            route.add_line(Polyline.from_dict(line))
        return route


@dataclass
class MapOptions:
    center: Optional[LatLon] = None
    zoom: int = DEFAULT_START_ZOOM
    map_type: MapType = MapType.ROADMAP
    zoom_control: bool = False
    scale_control: bool = False
    dragging: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "center": self.center.to_list() if self.center else None,
            "zoom": self.zoom,
            "map_type": self.map_type.value,
            "zoom_control": self.zoom_control,
            "scale_control": self.scale_control,
            "dragging": self.dragging,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MapOptions":
        center = data.get("center")
        return cls(
            center=LatLon.from_list(center) if center else None,
            zoom=int(data.get("zoom", DEFAULT_START_ZOOM)),
            map_type=MapType(data.get("map_type", MapType.ROADMAP.value)),
            zoom_control=bool(data.get("zoom_control", False)),
            scale_control=bool(data.get("scale_control", False)),
            dragging=bool(data.get("dragging", True)),
        )


class PersistentMap:
    """A named, stored collection of routes with unique names."""

    def __init__(self, name: str, map_options: Optional[MapOptions] = None) -> None:
        self.name = name
        self.map_options = map_options or MapOptions()
        self._routes: Dict[str, Route] = {}
        self.revision = 0

    def __repr__(self) -> str:
        return f"PersistentMap({self.name!r}, routes={list(self._routes)})"

    @property
    def routes(self) -> List[Route]:
        return list(self._routes.values())

    @property
    def route_names(self) -> List[str]:
        return list(self._routes)

    def get_route(self, name: str) -> Optional[Route]:
        return self._routes.get(name)

    def add_route(self, route: Route) -> bool:
        if route.name in self._routes:
            return False
        self._routes[route.name] = route
        self.revision += 1
        return True

    def remove_route(self, route: Route) -> bool:
        if self._routes.get(route.name) is not route:
            return False
        del self._routes[route.name]
        self.revision += 1
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "map_options": self.map_options.to_dict(),
            "routes": [route.to_dict() for route in self._routes.values()],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PersistentMap":
        pmap = cls(data["name"], MapOptions.from_dict(data.get("map_options") or {}))
        for route in data.get("routes", []):
            pmap.add_route(Route.from_dict(route))
        return pmap
