"""Resolve rendered or reloaded copies back to the entities a route holds.

The stored model and the rendered model can each hold their own instance of
a waypoint or line with identical geometry. Everything here matches by value
(position or ordered path) and never by identity, so a line object handed
over by a UI event still finds the line the route actually renders.
"""
from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Optional, Tuple

from waymaps.geometry import PathKey, PositionKey, position_key
from waymaps.model import Polyline, Route, Waypoint

RoutesProvider = Callable[[], Iterable[Route]]


def canonical_waypoint(route: Route, waypoint: Waypoint) -> Optional[Waypoint]:
    if route.index_of(waypoint) is not None:
        return waypoint
    key = position_key(waypoint.position)
    for wp in route.waypoints:
        if position_key(wp.position) == key:
            return wp
    return None


def waypoint_for_line(route: Route, line: Polyline) -> Optional[Waypoint]:
    key = line.path_key
    for wp in route.waypoints:
        if wp.connection is not None and wp.connection.path_key == key:
            return wp
    return None


def line_for_waypoint(route: Route, waypoint: Waypoint) -> Optional[Polyline]:
    if waypoint.connection is None:
        return None
    key = waypoint.connection.path_key
    for line in route.lines:
        if line.path_key == key:
            return line
    return None


class RouteIndex:
    """Value-keyed index from positions and paths to their owning route.

    When several routes share a position or path the first route in the
    provider's order wins, matching a left-to-right scan.
    """

    def __init__(self, routes_provider: RoutesProvider) -> None:
        self._provider = routes_provider
        self._signature: Optional[Tuple[Tuple[int, int], ...]] = None
        self._by_position: Dict[PositionKey, Route] = {}
        self._by_path: Dict[PathKey, Route] = {}

    def _routes(self) -> List[Route]:
        return list(self._provider() or [])

    def _refresh(self) -> None:
        routes = self._routes()
        signature = tuple((id(r), r.revision) for r in routes)
        if signature == self._signature:
            return
        by_position: Dict[PositionKey, Route] = {}
        by_path: Dict[PathKey, Route] = {}
        for route in routes:
            for wp in route.waypoints:
                by_position.setdefault(position_key(wp.position), route)
            for line in route.lines:
                by_path.setdefault(line.path_key, route)
        self._by_position = by_position
        self._by_path = by_path
        self._signature = signature

    def invalidate(self) -> None:
        self._signature = None

    def find_route_for_waypoint(self, waypoint: Waypoint) -> Optional[Route]:
        self._refresh()
        return self._by_position.get(position_key(waypoint.position))

    def find_route_for_line(self, line: Polyline) -> Optional[Route]:
        self._refresh()
        return self._by_path.get(line.path_key)
