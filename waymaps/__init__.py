"""Route and waypoint editing on an embedded web map."""

__version__ = "0.1.0"
