from __future__ import annotations

import logging
from typing import Optional

from waymaps.config import OVERLAY_MESSAGE
from waymaps.controller import MapController, Mode
from waymaps.geometry import Point
from waymaps.gui.qt import QAction, QtCore, QtWidgets
from waymaps.gui.web_map import MapView
from waymaps.surface import MapEvent, MapEventType

logger = logging.getLogger(__name__)

MODE_BORDER = "#MapFrame { border: 5px solid green; }"


class MapWindow(QtWidgets.QMainWindow):
    def __init__(self, controller: MapController, view: MapView, title: Optional[str] = None) -> None:
        super().__init__()
        self.controller = controller
        self._view = view
        if title:
            self.setWindowTitle(title)

        self._frame = QtWidgets.QFrame(self)
        self._frame.setObjectName("MapFrame")
        layout = QtWidgets.QVBoxLayout(self._frame)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(view)
        self.setCentralWidget(self._frame)
        self.setMinimumSize(800, 600)

        self._overlay = QtWidgets.QLabel(OVERLAY_MESSAGE, self._frame)
        self._overlay.setAlignment(QtCore.Qt.AlignmentFlag.AlignCenter)
        self._overlay.setStyleSheet(
            "QLabel { background: rgba(0, 0, 0, 0.6); color: white; font: bold 18px; }"
        )
        self._overlay.hide()

        self._build_toolbar()
        self._build_context_menu()

        controller.add_ready_listener(self._on_ready)
        controller.add_mode_listener(self._on_mode_changed)
        controller.add_context_listener(self._show_context_menu)

    def _build_toolbar(self) -> None:
        bar = self.addToolBar("Map")
        bar.setMovable(False)

        self._map_combo = QtWidgets.QComboBox(bar)
        self._map_combo.setMinimumWidth(160)
        self._map_combo.activated.connect(self._on_map_chosen)
        bar.addWidget(QtWidgets.QLabel(" Map: ", bar))
        bar.addWidget(self._map_combo)

        new_map = QAction("New Map", self)
        new_map.triggered.connect(self._on_new_map)
        bar.addAction(new_map)

        delete_map = QAction("Delete Map", self)
        delete_map.triggered.connect(self._on_delete_map)
        bar.addAction(delete_map)
        bar.addSeparator()

        self._route_combo = QtWidgets.QComboBox(bar)
        self._route_combo.setMinimumWidth(140)
        self._route_combo.activated.connect(self._on_route_chosen)
        bar.addWidget(QtWidgets.QLabel(" Route: ", bar))
        bar.addWidget(self._route_combo)

        new_route = QAction("New Route", self)
        new_route.triggered.connect(self._on_new_route)
        bar.addAction(new_route)

        clear_route = QAction("Clear Route", self)
        clear_route.triggered.connect(self._on_clear_route)
        bar.addAction(clear_route)
        bar.addSeparator()

        self._add_action = QAction("Add Waypoints", self)
        self._add_action.setCheckable(True)
        self._add_action.toggled.connect(self._on_add_toggled)
        bar.addAction(self._add_action)

        self._toolbar = bar
        bar.setEnabled(False)

    def _build_context_menu(self) -> None:
        self._context_menu = QtWidgets.QMenu(self)
        self._delete_action = QAction("Delete Object...", self)
        self._delete_action.triggered.connect(self._on_delete_object)
        self._context_menu.addAction(self._delete_action)

    # controller callbacks

    def _on_ready(self) -> None:
        self._toolbar.setEnabled(True)
        self.controller.add_map_event_handler(MapEventType.CLICK, self._after_map_click)
        self._reload_maps()
        selected = self.controller.map_store.selected_map_name
        if selected is not None:
            self.controller.select_map(selected)
        self._reload_routes()
        self._set_overlay_visible(selected is None)

    def _after_map_click(self, event: MapEvent) -> None:
        if self.controller.mode is not Mode.ADD_WAYPOINTS:
            return
        if self._map_combo.currentText() != (self.controller.map_store.selected_map_name or ""):
            self._reload_maps()
            self._set_overlay_visible(False)
        self._reload_routes()

    def _on_mode_changed(self, mode: Mode) -> None:
        self._frame.setStyleSheet(MODE_BORDER if mode is Mode.ADD_WAYPOINTS else "")
        if self._add_action.isChecked() != (mode is Mode.ADD_WAYPOINTS):
            self._add_action.setChecked(mode is Mode.ADD_WAYPOINTS)
        if mode is Mode.ADD_WAYPOINTS:
            self._reload_routes()

    def _show_context_menu(self, label: str, point: Point) -> None:
        self._delete_action.setText(label)
        pos = self._view.mapToGlobal(QtCore.QPoint(int(point.x) + 10, int(point.y)))
        self._context_menu.popup(pos)

    # toolbar actions

    def _on_map_chosen(self, index: int) -> None:
        name = self._map_combo.itemText(index)
        if not name:
            return
        self.controller.select_map(name)
        self._reload_routes()
        self._set_overlay_visible(False)

    def _on_new_map(self) -> None:
        name, ok = QtWidgets.QInputDialog.getText(self, "New Map", "Map name:")
        name = name.strip()
        if not ok or not name:
            return
        self.controller.add_map(name)
        self.controller.select_map(name)
        self._reload_maps()
        self._reload_routes()
        self._set_overlay_visible(False)

    def _on_delete_map(self) -> None:
        name = self.controller.map_store.selected_map_name
        if name is None:
            return
        answer = QtWidgets.QMessageBox.question(self, "Delete Map", f"Delete map '{name}' and all its routes?")
        if answer != QtWidgets.QMessageBox.StandardButton.Yes:
            return
        self.controller.delete_map(name)
        self._reload_maps()
        self._reload_routes()
        self._set_overlay_visible(True)

    def _on_route_chosen(self, index: int) -> None:
        route = self.controller.get_route(self._route_combo.itemText(index))
        if route is not None:
            self.controller.select_route(route)

    def _on_new_route(self) -> None:
        if self.controller.map_store.selected_map is None:
            return
        name, ok = QtWidgets.QInputDialog.getText(self, "New Route", "Route name:")
        name = name.strip()
        if not ok or not name:
            return
        route = self.controller.create_route(name)
        self.controller.select_route(route)
        self._reload_routes()

    def _on_clear_route(self) -> None:
        route = self.controller.current_route
        if route is not None:
            self.controller.clear_route(route)

    def _on_add_toggled(self, checked: bool) -> None:
        mode = Mode.ADD_WAYPOINTS if checked else Mode.NORMAL
        if self.controller.mode is not mode:
            self.controller.set_mode(mode)

    def _on_delete_object(self) -> None:
        if not self.controller.delete_current_object():
            logger.info("Nothing to delete")

    # helpers

    def _reload_maps(self) -> None:
        store = self.controller.map_store
        self._map_combo.blockSignals(True)
        self._map_combo.clear()
        self._map_combo.addItems(store.map_names)
        if store.selected_map_name is not None:
            self._map_combo.setCurrentText(store.selected_map_name)
        else:
            self._map_combo.setCurrentIndex(-1)
        self._map_combo.blockSignals(False)

    def _reload_routes(self) -> None:
        pmap = self.controller.map_store.selected_map
        self._route_combo.blockSignals(True)
        self._route_combo.clear()
        if pmap is not None:
            self._route_combo.addItems(pmap.route_names)
        current = self.controller.current_route
        if current is not None:
            self._route_combo.setCurrentText(current.name)
        else:
            self._route_combo.setCurrentIndex(-1)
        self._route_combo.blockSignals(False)

    def _set_overlay_visible(self, visible: bool) -> None:
        self._overlay.setVisible(visible)
        if visible:
            self._overlay.raise_()
            self._place_overlay()

    def _place_overlay(self) -> None:
        self._overlay.setGeometry(self._view.geometry())

    def resizeEvent(self, event) -> None:
        super().resizeEvent(event)
        if self._overlay.isVisible():
            self._place_overlay()
