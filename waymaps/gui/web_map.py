from __future__ import annotations

import logging
import os
from pathlib import Path
import tempfile
from typing import Callable, Dict, List, Optional, Set, Tuple

from waymaps.geometry import LatLon, Point, lat_lng_to_point
from waymaps.gui import mapkit
from waymaps.gui.qt import QtCore, QtWebChannel, QtWebEngineWidgets, QtWidgets, QUrl, pyqtSignal, pyqtSlot
from waymaps.model import MapOptions, Marker, Polyline
from waymaps.surface import MapEvent, MapEventHandler, MapEventType

logger = logging.getLogger(__name__)

HandlerKey = Tuple[Optional[str], MapEventType]


class MapBridge(QtCore.QObject):
    eventFired = pyqtSignal(str, str, float, float)
    viewUpdated = pyqtSignal(int, float, float)

    @pyqtSlot(str, str, float, float)
    def mapEvent(self, kind, target_id, lat, lon):
        self.eventFired.emit(kind, target_id, lat, lon)

    @pyqtSlot(int, float, float)
    def viewChanged(self, zoom, lat, lon):
        self.viewUpdated.emit(zoom, lat, lon)


class MapView(QtWebEngineWidgets.QWebEngineView):
    """Leaflet map in a web view, driven through ``window.WM``.

    Commands issued before the page finishes loading are queued and flushed
    on ``loadFinished``.
    """

    def __init__(
        self,
        options: Optional[MapOptions] = None,
        parent: Optional[QtWidgets.QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self._options = options or MapOptions()
        self._loaded = False
        self._pending_js: List[str] = []
        self._handlers: Dict[HandlerKey, List[MapEventHandler]] = {}
        self._ready_listeners: List[Callable[[], None]] = []
        self._markers: Set[str] = set()
        self._lines: Set[str] = set()
        self._tmp: Optional[str] = None

        fmap = mapkit.build_map(self._options)
        self._center = LatLon(*fmap.location)
        self._zoom = int(self._options.zoom)

        self.setContextMenuPolicy(QtCore.Qt.ContextMenuPolicy.NoContextMenu)
        self.channel = QtWebChannel.QWebChannel(self.page())
        self.bridge = MapBridge(self)
        self.channel.registerObject(mapkit.BRIDGE_NAME, self.bridge)
        self.page().setWebChannel(self.channel)
        self.bridge.eventFired.connect(self._on_bridge_event)
        self.bridge.viewUpdated.connect(self._on_view_changed)
        self.loadFinished.connect(self._on_load)

        tmp = tempfile.NamedTemporaryFile(suffix=".html", delete=False)
        fmap.save(tmp.name); tmp.close()
        self._tmp = tmp.name
        self.load(QUrl.fromLocalFile(str(Path(tmp.name).resolve())))

    def _run_js(self, code: str) -> None:
        if self._loaded:
            self.page().runJavaScript(code)
        else:
            self._pending_js.append(code)

    def _on_load(self, ok: bool) -> None:
        if not ok:
            logger.error("Map page failed to load: %s", self._tmp)
            return
        if self._loaded:
            return
        self._loaded = True
        pending, self._pending_js = self._pending_js, []
        for code in pending:
            self.page().runJavaScript(code)
        for listener in list(self._ready_listeners):
            listener()

    def _on_bridge_event(self, kind: str, target_id: str, lat: float, lon: float) -> None:
        try:
            event_type = MapEventType(kind)
        except ValueError:
            logger.debug("Ignoring map event %s", kind)
            return
        event = MapEvent(event_type, LatLon(lat, lon), target_id or None)
        for handler in list(self._handlers.get((event.target_id, event_type), [])):
            try:
                handler(event)
            except Exception:
                logger.exception("Handler for %s on %s failed", kind, target_id or "map")

    def _on_view_changed(self, zoom: int, lat: float, lon: float) -> None:
        self._zoom = int(zoom)
        self._center = LatLon(lat, lon)

    def _drop_handlers(self, target_id: str) -> None:
        for key in [k for k in self._handlers if k[0] == target_id]:
            del self._handlers[key]

    # MapSurface

    def add_ready_listener(self, listener: Callable[[], None]) -> None:
        self._ready_listeners.append(listener)
        if self._loaded:
            listener()

    def add_ui_event_handler(
        self, event_type: MapEventType, handler: MapEventHandler, target: Optional[str] = None
    ) -> None:
        key = (target, event_type)
        if target is None:
            self._handlers.setdefault(key, []).append(handler)
        else:
            self._handlers[key] = [handler]

    def add_marker(self, marker: Marker) -> None:
        self._markers.add(marker.id)
        self._run_js(mapkit.add_marker(marker))

    def remove_marker(self, marker: Marker) -> None:
        if marker.id not in self._markers:
            return
        self._markers.discard(marker.id)
        self._drop_handlers(marker.id)
        self._run_js(mapkit.remove_marker(marker.id))

    def add_line(self, line: Polyline) -> None:
        self._lines.add(line.id)
        self._run_js(mapkit.add_line(line))

    def remove_line(self, line: Polyline) -> None:
        if line.id not in self._lines:
            return
        self._lines.discard(line.id)
        self._drop_handlers(line.id)
        self._run_js(mapkit.remove_line(line.id))

    def set_center(self, position: LatLon) -> None:
        self._center = position
        self._run_js(mapkit.set_center(position))

    @property
    def zoom(self) -> int:
        return self._zoom

    def set_zoom(self, zoom: int) -> None:
        self._zoom = int(zoom)
        self._run_js(mapkit.set_zoom(zoom))

    def lat_lng_to_point(self, position: LatLon) -> Point:
        return lat_lng_to_point(position, self._center, self._zoom, self.width(), self.height())

    def closeEvent(self, e):
        if self._tmp and os.path.exists(self._tmp):
            os.remove(self._tmp)
        super().closeEvent(e)
