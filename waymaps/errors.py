from __future__ import annotations


class WaymapsError(Exception):
    """Base class for errors raised by waymaps."""


class RouteIndexError(WaymapsError, IndexError):
    def __init__(self, route_name: str, index: int, size: int) -> None:
        super().__init__(f"Waypoint index {index} out of range for route '{route_name}' (size {size}).")
        self.route_name = route_name
        self.index = index
        self.size = size


class InitializationError(WaymapsError):
    """Geolocation or rendering-surface setup failed."""


class StoreError(WaymapsError):
    """The map store could not be read or written."""
