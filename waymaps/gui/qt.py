from __future__ import annotations

try:
    from PyQt6 import QtCore, QtGui, QtWidgets, QtWebChannel, QtWebEngineWidgets
    from PyQt6.QtCore import QUrl, pyqtSignal, pyqtSlot
    from PyQt6.QtGui import QAction
except ImportError:
    from PyQt5 import QtCore, QtGui, QtWidgets, QtWebChannel, QtWebEngineWidgets
    from PyQt5.QtCore import QUrl, pyqtSignal, pyqtSlot
    from PyQt5.QtWidgets import QAction

__all__ = [
    "QtCore",
    "QtGui",
    "QtWidgets",
    "QtWebChannel",
    "QtWebEngineWidgets",
    "QUrl",
    "QAction",
    "pyqtSignal",
    "pyqtSlot",
]
