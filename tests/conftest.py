"""Shared fakes for the map controller tests."""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Tuple

import pytest

from waymaps.controller import MapController
from waymaps.errors import InitializationError
from waymaps.geometry import LatLon, Point
from waymaps.model import Marker, Polyline
from waymaps.surface import MapEvent, MapEventHandler, MapEventType


class FakeSurface:
    """Records what is rendered and lets tests fire UI events."""

    def __init__(self) -> None:
        self.markers: Dict[str, Marker] = {}
        self.lines: Dict[str, Polyline] = {}
        self.calls: List[Tuple[str, str]] = []
        self.handlers: Dict[Tuple[Optional[str], MapEventType], List[MapEventHandler]] = {}
        self.center: Optional[LatLon] = None
        self._zoom = 15
        self._ready: List[Callable[[], None]] = []
        self.fail_on: set = set()

    def _check(self, name: str) -> None:
        if name in self.fail_on:
            raise RuntimeError(f"{name} failed")

    def add_marker(self, marker: Marker) -> None:
        self._check("add_marker")
        self.calls.append(("add_marker", marker.id))
        self.markers[marker.id] = marker

    def remove_marker(self, marker: Marker) -> None:
        if marker.id not in self.markers:
            return
        self.calls.append(("remove_marker", marker.id))
        del self.markers[marker.id]
        self._drop(marker.id)

    def add_line(self, line: Polyline) -> None:
        self._check("add_line")
        self.calls.append(("add_line", line.id))
        self.lines[line.id] = line

    def remove_line(self, line: Polyline) -> None:
        if line.id not in self.lines:
            return
        self.calls.append(("remove_line", line.id))
        del self.lines[line.id]
        self._drop(line.id)

    def _drop(self, target: str) -> None:
        for key in [k for k in self.handlers if k[0] == target]:
            del self.handlers[key]

    def set_center(self, position: LatLon) -> None:
        self.center = position

    @property
    def zoom(self) -> int:
        return self._zoom

    def set_zoom(self, zoom: int) -> None:
        self._zoom = zoom

    def lat_lng_to_point(self, position: LatLon) -> Point:
        return Point(100.0, 200.0)

    def add_ui_event_handler(
        self, event_type: MapEventType, handler: MapEventHandler, target: Optional[str] = None
    ) -> None:
        key = (target, event_type)
        if target is None:
            self.handlers.setdefault(key, []).append(handler)
        else:
            self.handlers[key] = [handler]

    def add_ready_listener(self, listener: Callable[[], None]) -> None:
        self._ready.append(listener)

    def fire_ready(self) -> None:
        for listener in list(self._ready):
            listener()

    def fire(self, event_type: MapEventType, position: LatLon, target: Optional[str] = None) -> None:
        event = MapEvent(event_type, position, target)
        for handler in list(self.handlers.get((target, event_type), [])):
            handler(event)

    def state(self) -> Tuple[frozenset, frozenset]:
        return frozenset(self.markers), frozenset(self.lines)


class FakeLocator:
    def __init__(self, position: Optional[LatLon] = None) -> None:
        self.position = position
        self.calls = 0

    def resolve_local_position(self) -> LatLon:
        self.calls += 1
        if self.position is None:
            raise InitializationError("offline")
        return self.position


@pytest.fixture
def surface():
    return FakeSurface()


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "mapstore.json"


@pytest.fixture
def controller(surface, store_path):
    ctl = MapController(surface, locator=FakeLocator(LatLon(1.0, 2.0)), store_path=store_path)
    ctl.initialize()
    surface.fire_ready()
    return ctl


@pytest.fixture
def make_locator():
    return FakeLocator
