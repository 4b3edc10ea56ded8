from __future__ import annotations
import math
from typing import Optional
from PySide6.QtCore import Qt, QLineF, QRectF
from PySide6.QtGui import QPainter, QPen
from PySide6.QtWidgets import QGraphicsScene

from .utils import GRID_STEP, MAJOR_EVERY, GRID_LINE, GRID_MINOR_W, GRID_MAJOR_W, GRID_OPACITY


class GridRenderer:
    """Passive grid painted behind the scene.

    Shown only while the user wants it and no background layer suppresses it.
    """

    def __init__(self, scene: Optional[QGraphicsScene] = None, step: float = GRID_STEP):
        self.scene = scene
        self.step = step
        self.user_visible = True
        self.suppressed = False

    @property
    def is_shown(self) -> bool:
        return self.user_visible and not self.suppressed

    def toggle(self) -> bool:
        self.user_visible = not self.user_visible
        self._refresh()
        return self.user_visible

    def set_suppressed(self, on: bool):
        self.suppressed = bool(on)
        self._refresh()

    def reset(self):
        self.user_visible = True
        self.suppressed = False
        self._refresh()

    def _refresh(self):
        if self.scene is not None:
            self.scene.invalidate(self.scene.sceneRect(), QGraphicsScene.BackgroundLayer)

    def paint(self, painter: QPainter, rect: QRectF, bounds: QRectF):
        if not self.is_shown:
            return
        area = rect.intersected(bounds)
        if area.isEmpty():
            return
        step = self.step
        painter.save()
        painter.setOpacity(GRID_OPACITY)
        x = math.floor(area.left() / step) * step; i = int(round(x / step))
        while x <= area.right():
            is_major = (i % MAJOR_EVERY == 0)
            painter.setPen(QPen(GRID_LINE, GRID_MAJOR_W if is_major else GRID_MINOR_W, Qt.SolidLine, Qt.SquareCap))
            painter.drawLine(QLineF(x, area.top(), x, area.bottom()))
            x += step; i += 1
        y = math.floor(area.top() / step) * step; j = int(round(y / step))
        while y <= area.bottom():
            is_major = (j % MAJOR_EVERY == 0)
            painter.setPen(QPen(GRID_LINE, GRID_MAJOR_W if is_major else GRID_MINOR_W, Qt.SolidLine, Qt.SquareCap))
            painter.drawLine(QLineF(area.left(), y, area.right(), y))
            y += step; j += 1
        painter.restore()
