from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
from pathlib import Path
from typing import Callable, List, Optional, Union

from waymaps.config import DEFAULT_MAP_NAME, DEFAULT_STORE_PATH, TEMP_ROUTE_NAME
from waymaps.errors import InitializationError, StoreError
from waymaps.geolocation import Locator
from waymaps.geometry import LatLon, Point
from waymaps.lookup import (
    RouteIndex,
    canonical_waypoint,
    line_for_waypoint,
    waypoint_for_line,
)
from waymaps.model import (
    Marker,
    MarkerType,
    PersistentMap,
    Polyline,
    PolylineOptions,
    Route,
    Waypoint,
    default_polyline_options,
)
from waymaps.store import MapStore
from waymaps.surface import MapEvent, MapEventHandler, MapEventType, MapSurface

logger = logging.getLogger(__name__)

MapObject = Union[Waypoint, Polyline]
ContextListener = Callable[[str, Point], None]


class Mode(Enum):
    NORMAL = "normal"
    ADD_WAYPOINTS = "add_waypoints"


@dataclass
class EditorSession:
    mode: Mode = Mode.NORMAL
    current_route: Optional[Route] = None
    current_object: Optional[MapObject] = None


class MapController:
    """Keeps the stored routes and the rendered map surface in step.

    Every change is applied to the model first, then rendered, then
    persisted. Failed surface calls are logged and never undo the model.
    """

    def __init__(
        self,
        surface: MapSurface,
        locator: Optional[Locator] = None,
        store_path: Path | str = DEFAULT_STORE_PATH,
        session: Optional[EditorSession] = None,
    ) -> None:
        self.surface = surface
        self.locator = locator
        self.store_path = Path(store_path)
        self.session = session or EditorSession()
        self.default_polyline_options = default_polyline_options()
        self._store: Optional[MapStore] = None
        self._index = RouteIndex(self._selected_routes)
        self._ready_listeners: List[Callable[[], None]] = []
        self._mode_listeners: List[Callable[[Mode], None]] = []
        self._context_listeners: List[ContextListener] = []
        self._default_handler_installed = True
        self._initialized = False
        self._ready = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        if self._initialized:
            return
        self._initialized = True
        self.surface.add_ready_listener(self._on_surface_ready)
        if self._default_handler_installed:
            self.add_map_event_handler(MapEventType.CLICK, self._on_map_click)

    def remove_default_map_event_handler(self) -> None:
        """Skip the click-to-add-waypoint handler. Call before ``initialize``."""
        self._default_handler_installed = False

    @property
    def is_ready(self) -> bool:
        return self._ready

    def add_ready_listener(self, listener: Callable[[], None]) -> None:
        if listener not in self._ready_listeners:
            self._ready_listeners.append(listener)

    def remove_ready_listener(self, listener: Callable[[], None]) -> None:
        if listener in self._ready_listeners:
            self._ready_listeners.remove(listener)

    def _on_surface_ready(self) -> None:
        if self._ready:
            return
        self.center_map_on_local()
        try:
            self._store = MapStore.load(self.store_path)
        except StoreError:
            logger.exception("Could not load map store, starting with an empty one")
            self._store = MapStore(self.store_path)
        self._ready = True
        for listener in list(self._ready_listeners):
            try:
                listener()
            except Exception:
                logger.exception("Ready listener %r failed", listener)

    @property
    def map_store(self) -> MapStore:
        if self._store is None:
            raise RuntimeError("Map store is not loaded until the map is ready.")
        return self._store

    def _persist(self) -> None:
        if self._store is None:
            return
        try:
            self._store.store()
        except StoreError:
            logger.exception("Failed to persist map store")

    def _render(self, action: str, fn: Callable[..., object], *args: object) -> None:
        try:
            fn(*args)
        except Exception:
            logger.exception("Surface call %s failed", action)

    # ------------------------------------------------------------------
    # Mode, selection and listeners
    # ------------------------------------------------------------------

    @property
    def mode(self) -> Mode:
        return self.session.mode

    def set_mode(self, mode: Mode) -> None:
        self.session.mode = mode
        logger.debug("Mode set to %s", mode.name)
        for listener in list(self._mode_listeners):
            listener(mode)

    def add_mode_listener(self, listener: Callable[[Mode], None]) -> None:
        self._mode_listeners.append(listener)

    def add_context_listener(self, listener: ContextListener) -> None:
        self._context_listeners.append(listener)

    @property
    def current_route(self) -> Optional[Route]:
        return self.session.current_route

    def set_current_route(self, route: Optional[Route]) -> None:
        self.session.current_route = route

    def select_route(self, route: Optional[Route]) -> None:
        self.session.current_route = route

    # ------------------------------------------------------------------
    # View
    # ------------------------------------------------------------------

    def center_map_on_local(self) -> None:
        if self.locator is None:
            return
        try:
            position = self.locator.resolve_local_position()
        except InitializationError as exc:
            logger.warning("Could not center on local position: %s", exc)
            return
        self.set_center(position)

    def set_center(self, position: LatLon) -> None:
        self._render("set_center", self.surface.set_center, position)

    @property
    def zoom(self) -> int:
        return self.surface.zoom

    def set_zoom(self, zoom: int) -> None:
        self._render("set_zoom", self.surface.set_zoom, zoom)

    def refresh(self) -> None:
        zoom = self.surface.zoom
        self.set_zoom(zoom + 1)
        self.set_zoom(zoom)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def add_map_event_handler(self, event_type: MapEventType, handler: MapEventHandler) -> None:
        self.surface.add_ui_event_handler(event_type, handler)

    def add_object_event_handler(
        self, map_object: Union[Marker, Polyline], event_type: MapEventType, handler: MapEventHandler
    ) -> None:
        self.surface.add_ui_event_handler(event_type, handler, target=map_object.id)

    def _on_map_click(self, event: MapEvent) -> None:
        if self.session.mode is not Mode.ADD_WAYPOINTS:
            return
        waypoint = self.create_waypoint(event.lat_lng)
        self.add_new_waypoint(waypoint)
        logger.debug("Added waypoint at %s", event.lat_lng)

    def _show_context(self, label: str, position: LatLon) -> None:
        try:
            point = self.surface.lat_lng_to_point(position)
        except Exception:
            logger.exception("Could not project %s to the screen", position)
            return
        for listener in list(self._context_listeners):
            listener(label, point)

    def _on_waypoint_context(self, waypoint: Waypoint, event: MapEvent) -> None:
        route = self.route_for_waypoint(waypoint)
        if route is None:
            logger.debug("No route owns waypoint at %s", waypoint.position)
            return
        target = canonical_waypoint(route, waypoint) or waypoint
        self.session.current_object = target
        self.session.current_route = route
        self._show_context(f"Clear {target.marker.label}", event.lat_lng)

    def _on_line_context(self, line: Polyline, event: MapEvent) -> None:
        route = self.route_for_line(line)
        if route is None:
            logger.debug("No route owns line %s", line.path)
            return
        owner = waypoint_for_line(route, line)
        if owner is None:
            return
        self.session.current_object = line
        self.session.current_route = route
        self._show_context(f"Clear {owner.marker.label}'s connection", event.lat_lng)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def _selected_routes(self) -> List[Route]:
        if self._store is None:
            return []
        pmap = self._store.selected_map
        return pmap.routes if pmap is not None else []

    def route_for_waypoint(self, waypoint: Waypoint) -> Optional[Route]:
        return self._index.find_route_for_waypoint(waypoint)

    def route_for_line(self, line: Polyline) -> Optional[Route]:
        return self._index.find_route_for_line(line)

    def waypoint_for_line(self, route: Route, line: Polyline) -> Optional[Waypoint]:
        return waypoint_for_line(route, line)

    def line_for_waypoint(self, route: Route, waypoint: Waypoint) -> Optional[Polyline]:
        return line_for_waypoint(route, waypoint)

    # ------------------------------------------------------------------
    # Markers, waypoints and shapes
    # ------------------------------------------------------------------

    def display_marker(self, marker: Marker) -> None:
        self._render("add_marker", self.surface.add_marker, marker)

    def erase_marker(self, marker: Marker) -> None:
        self._render("remove_marker", self.surface.remove_marker, marker)

    def create_waypoint(self, position: LatLon) -> Waypoint:
        return Waypoint.create(position, MarkerType.GREEN)

    def display_waypoint(self, waypoint: Waypoint) -> None:
        self.display_marker(waypoint.marker)
        self.add_object_event_handler(
            waypoint.marker,
            MapEventType.RIGHTCLICK,
            lambda event: self._on_waypoint_context(waypoint, event),
        )

    def add_new_waypoint(self, waypoint: Waypoint, options: Optional[PolylineOptions] = None) -> None:
        """Append to the current route, connect, render, then persist."""
        route = self._ensure_current_route()
        route.add_waypoint(waypoint)
        line = None
        if route.size() > 1:
            line = self._connect_last_waypoint(route, waypoint, options)

        self.display_waypoint(waypoint)
        if line is not None:
            self.display_shape(line, route)
        self._persist()

    def _connect_last_waypoint(
        self, route: Route, waypoint: Waypoint, options: Optional[PolylineOptions]
    ) -> Polyline:
        path = [
            route.get_waypoint(route.size() - 2).position,
            route.get_waypoint(route.size() - 1).position,
        ]
        base = options if options is not None else self.default_polyline_options
        line = Polyline(base.with_path(path))
        waypoint.set_connection(line)
        route.add_line(line)
        return line

    def remove_waypoint(self, waypoint: Waypoint, route: Optional[Route] = None) -> bool:
        """Remove from the route only; the rendering and lines are left alone."""
        route = route or self.session.current_route
        if route is None:
            return False
        return route.remove_waypoint(waypoint)

    def delete_waypoint(self, waypoint: Waypoint) -> bool:
        route = self.route_for_waypoint(waypoint)
        target = canonical_waypoint(route, waypoint) if route is not None else None
        if route is None or target is None:
            logger.warning("Cannot delete waypoint at %s: no owning route", waypoint.position)
            return False
        self._delete_from_route(route, target)
        return True

    def delete_line(self, line: Polyline) -> bool:
        route = self.route_for_line(line)
        owner = waypoint_for_line(route, line) if route is not None else None
        if route is None or owner is None:
            logger.warning("Cannot delete line %s: no owning waypoint", line.path)
            return False
        self._delete_from_route(route, owner)
        return True

    def delete_current_object(self) -> bool:
        obj = self.session.current_object
        self.session.current_object = None
        if isinstance(obj, Waypoint):
            return self.delete_waypoint(obj)
        if isinstance(obj, Polyline):
            return self.delete_line(obj)
        return False

    def _delete_from_route(self, route: Route, waypoint: Waypoint) -> None:
        self.erase_route(route)
        route.remove_waypoint(waypoint)
        route.rebuild_lines(self.default_polyline_options)
        self.display_route(route)
        self._persist()

    def display_shape(self, shape: Polyline, route: Optional[Route] = None) -> None:
        route = route or self.session.current_route
        owner = waypoint_for_line(route, shape) if route is not None else None
        if owner is not None:
            self.add_object_event_handler(
                shape,
                MapEventType.RIGHTCLICK,
                lambda event: self._on_line_context(shape, event),
            )
        self._render("add_line", self.surface.add_line, shape)

    def erase_shape(self, shape: Polyline) -> None:
        self._render("remove_line", self.surface.remove_line, shape)

    # ------------------------------------------------------------------
    # Routes
    # ------------------------------------------------------------------

    def _ensure_selected_map(self) -> PersistentMap:
        store = self.map_store
        pmap = store.selected_map
        if pmap is None:
            pmap = store.add_map(DEFAULT_MAP_NAME)
            store.select_map(pmap.name)
            logger.info("No map selected, using '%s'", pmap.name)
            for route in pmap.routes:
                self.display_route(route)
        return pmap

    def _ensure_current_route(self) -> Route:
        if self.session.current_route is None:
            self.session.current_route = self.create_route(TEMP_ROUTE_NAME)
        return self.session.current_route

    def create_route(self, name: str) -> Route:
        pmap = self._ensure_selected_map()
        route = pmap.get_route(name)
        if route is None:
            route = Route(name)
            self.add_route(route)
        return route

    def get_route(self, name: str) -> Optional[Route]:
        if self._store is None or self._store.selected_map is None:
            return None
        return self._store.selected_map.get_route(name)

    def add_route(self, route: Route) -> None:
        pmap = self._ensure_selected_map()
        if pmap.get_route(route.name) is None:
            pmap.add_route(route)
            self._persist()

    def remove_route(self, route: Route) -> None:
        pmap = self._ensure_selected_map()
        self.erase_route(route)
        if pmap.remove_route(route):
            if self.session.current_route is route:
                self.session.current_route = None
            self._persist()

    def clear_route(self, route: Union[Route, str]) -> None:
        if isinstance(route, str):
            found = self.get_route(route)
            if found is None:
                return
            route = found
        self.erase_route(route)
        route.remove_all_waypoints()
        self._persist()

    def erase_route(self, route: Route) -> None:
        """Remove a route's markers and lines from the display only."""
        for wp in route.waypoints:
            self.erase_marker(wp.marker)
        for line in route.lines:
            self.erase_shape(line)

    def display_route(self, route: Route) -> None:
        for wp in route.waypoints:
            if route.interim_markers_visible or route.is_endpoint(wp):
                self.display_waypoint(wp)

        for line in route.lines:
            owner = waypoint_for_line(route, line)
            if owner is not None:
                owner.set_connection(line)
            self.display_shape(line, route)

    def display_routes(self, routes: List[Route]) -> None:
        for route in routes:
            self.session.current_route = route
            self.display_route(route)
        self.refresh()

    # ------------------------------------------------------------------
    # Maps
    # ------------------------------------------------------------------

    def add_map(self, name: str) -> Optional[PersistentMap]:
        if not name:
            return None
        pmap = self.map_store.add_map(name)
        self._persist()
        return pmap

    def select_map(self, name: str) -> PersistentMap:
        self.erase_map()
        self.map_store.select_map(name)
        self.session.current_route = None
        self.session.current_object = None
        pmap = self.map_store.get_map(name)
        if pmap.map_options.center is not None:
            self.set_center(pmap.map_options.center)
        self.display_routes(pmap.routes)
        self._persist()
        return pmap

    def delete_map(self, name: str) -> None:
        if self.map_store.selected_map_name == name:
            self.erase_map()
            self.session.current_route = None
            self.session.current_object = None
        if self.map_store.delete_map(name):
            self._persist()

    def clear_map(self) -> None:
        """Empty every route of the selected map."""
        self.session.current_route = None
        pmap = self._store.selected_map if self._store is not None else None
        if pmap is None:
            return
        for route in pmap.routes:
            self.clear_route(route)

    def erase_map(self) -> None:
        for route in self._selected_routes():
            self.erase_route(route)
