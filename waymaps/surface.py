"""Contract between the map controller and whatever renders the map."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Protocol

from waymaps.geometry import LatLon, Point
from waymaps.model import Marker, Polyline


class MapEventType(Enum):
    CLICK = "click"
    RIGHTCLICK = "contextmenu"
    DBLCLICK = "dblclick"


@dataclass(frozen=True)
class MapEvent:
    event_type: MapEventType
    lat_lng: LatLon
    target_id: Optional[str] = None


MapEventHandler = Callable[[MapEvent], None]


class MapSurface(Protocol):
    """Rendering delegate.

    Handlers registered with ``target=None`` receive events from the map
    itself and accumulate. Otherwise ``target`` is the id of a rendered
    marker or line, and a new registration replaces the previous handler for
    that target and event type. Removing something that is not rendered
    does nothing.
    """

    def add_marker(self, marker: Marker) -> None:
        ...

    def remove_marker(self, marker: Marker) -> None:
        ...

    def add_line(self, line: Polyline) -> None:
        ...

    def remove_line(self, line: Polyline) -> None:
        ...

    def set_center(self, position: LatLon) -> None:
        ...

    @property
    def zoom(self) -> int:
        ...

    def set_zoom(self, zoom: int) -> None:
        ...

    def lat_lng_to_point(self, position: LatLon) -> Point:
        ...

    def add_ui_event_handler(
        self, event_type: MapEventType, handler: MapEventHandler, target: Optional[str] = None
    ) -> None:
        ...

    def add_ready_listener(self, listener: Callable[[], None]) -> None:
        ...
