"""
conftest.py — shared fixtures for the costsketch test suite.

Everything runs on Qt's offscreen platform, so no display is needed. One
QApplication lives for the whole session; each controller fixture is
disposed at teardown.
"""

import os
import sys

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PySide6.QtWidgets import QApplication

_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _ROOT not in sys.path:
    sys.path.insert(0, _ROOT)


@pytest.fixture(scope="session")
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def controller(qapp):
    """Headless CanvasController on the default 800x500 canvas."""
    from costsketch.controller import CanvasController
    ctl = CanvasController()
    yield ctl
    ctl.dispose()


@pytest.fixture
def scene(controller):
    return controller.scene


@pytest.fixture
def drawing(controller):
    return controller.drawing


@pytest.fixture
def png_bytes(qapp):
    """Factory for in-memory PNG images of a given size."""
    from PySide6.QtCore import QBuffer, QByteArray, QIODevice
    from PySide6.QtGui import QColor, QImage

    def make(w: int = 400, h: int = 200) -> bytes:
        img = QImage(w, h, QImage.Format_ARGB32)
        img.fill(QColor("#3B82F6"))
        ba = QByteArray()
        buf = QBuffer(ba)
        buf.open(QIODevice.WriteOnly)
        img.save(buf, "PNG")
        buf.close()
        return bytes(ba.data())

    return make
