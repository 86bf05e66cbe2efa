from __future__ import annotations

import os
from pathlib import Path

DATA_DIR = Path.home() / ".waymaps"
DEFAULT_STORE_PATH = DATA_DIR / "mapstore.json"

APP_TITLE = "Waymaps Route Editor"
WINDOW_SIZE = (1000, 780)

DEFAULT_CENTER_LAT = 37.5665
DEFAULT_CENTER_LON = 126.978
DEFAULT_START_ZOOM = 15

DEFAULT_MAP_NAME = "default"
TEMP_ROUTE_NAME = "temp"

TILE_LAYERS = {
    "roadmap": ("OpenStreetMap", None),
    "terrain": (
        "https://{s}.tile.opentopomap.org/{z}/{x}/{y}.png",
        "Map data: © OpenStreetMap contributors, SRTM | Map style: © OpenTopoMap",
    ),
    "satellite": (
        "https://server.arcgisonline.com/ArcGIS/rest/services/World_Imagery/MapServer/tile/{z}/{y}/{x}",
        "Tiles © Esri",
    ),
}

DEFAULT_LINE_COLOR = "red"
DEFAULT_LINE_WEIGHT = 2
DEFAULT_LINE_OPACITY = 1.0

IP_LOOKUP_URL = "https://api.ipify.org?format=json"
GEO_LOOKUP_URL = "http://ip-api.com/json/{ip}"
GEO_TIMEOUT_S = 5
GEO_USER_AGENT = "waymaps/0.1"

OVERLAY_MESSAGE = (
    'Click "New Map" or pick one from the map list to:\n\n'
    "• Create a new map\n\n"
    "-- or --\n\n"
    "• Select a stored map"
)

LOG_LEVEL = os.getenv("WAYMAPS_LOG_LEVEL", "INFO")
