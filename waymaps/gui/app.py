from __future__ import annotations

from pathlib import Path
import sys
from typing import Optional

from waymaps.config import DEFAULT_CENTER_LAT, DEFAULT_CENTER_LON, DEFAULT_START_ZOOM, WINDOW_SIZE
from waymaps.controller import MapController
from waymaps.geolocation import Locator
from waymaps.geometry import LatLon
from waymaps.gui.qt import QtWidgets
from waymaps.gui.web_map import MapView
from waymaps.gui.window import MapWindow
from waymaps.model import MapOptions


def run_app(store_path: Path, locate: bool = True, title: Optional[str] = None) -> int:
    app = QtWidgets.QApplication(sys.argv)
    options = MapOptions(center=LatLon(DEFAULT_CENTER_LAT, DEFAULT_CENTER_LON), zoom=DEFAULT_START_ZOOM)
    view = MapView(options)
    controller = MapController(view, locator=Locator() if locate else None, store_path=store_path)
    window = MapWindow(controller, view, title=title)
    controller.initialize()
    window.resize(*WINDOW_SIZE)
    window.show()
    return app.exec()
