from __future__ import annotations
import logging
from typing import Optional

from PySide6.QtCore import QObject, QPointF, Signal
from PySide6.QtGui import QTransform
from PySide6.QtWidgets import QGraphicsView

from .utils import (ZOOM_MIN, ZOOM_MAX, ZOOM_IN_FACTOR, ZOOM_OUT_FACTOR, WHEEL_ZOOM_BASE,
                    WHEEL_DELTA_LIMIT, clamp)

log = logging.getLogger(__name__)


class ViewportController(QObject):
    """Zoom/pan state of the drawing surface.

    The view maps a scene point ``p`` to ``p * zoom + pan``. While
    :attr:`locked` is set (multi-click polygon in progress) zoom changes are
    refused so every vertex is captured in one coordinate space.
    """

    zoomChanged = Signal(float)

    def __init__(self, view: Optional[QGraphicsView] = None,
                 zoom_min: float = ZOOM_MIN, zoom_max: float = ZOOM_MAX):
        super().__init__()
        self.zoom_min = zoom_min
        self.zoom_max = zoom_max
        self.zoom = 1.0
        self.pan = QPointF(0, 0)
        self.locked = False
        self._view: Optional[QGraphicsView] = None
        self._pan_last: Optional[QPointF] = None
        if view is not None:
            self.attach(view)

    # ---- view binding ----
    def attach(self, view: QGraphicsView):
        self._view = view
        self._apply()

    def detach(self):
        self._view = None

    def _apply(self):
        if self._view is None:
            return
        # QGraphicsView drops the translation part of its transform, so pan rides on the scroll bars
        self._view.setTransform(QTransform.fromScale(self.zoom, self.zoom))
        self._view.horizontalScrollBar().setValue(round(-self.pan.x()))
        self._view.verticalScrollBar().setValue(round(-self.pan.y()))

    def map_to_view(self, scene_pt: QPointF) -> QPointF:
        return scene_pt * self.zoom + self.pan

    def map_to_scene(self, view_pt: QPointF) -> QPointF:
        return (view_pt - self.pan) / self.zoom

    # ---- zoom ----
    def zoom_at(self, factor: float, anchor: Optional[QPointF] = None) -> bool:
        if self.locked:
            log.debug("zoom refused while a polygon is being accumulated")
            return False
        anchor = QPointF(anchor) if anchor is not None else self._default_anchor()
        new_zoom = clamp(self.zoom * factor, self.zoom_min, self.zoom_max)
        if new_zoom == self.zoom:
            return False
        under = self.map_to_scene(anchor)
        self.zoom = new_zoom
        self.pan = anchor - under * new_zoom
        self._apply()
        self.zoomChanged.emit(self.zoom)
        return True

    def wheel(self, delta: float, anchor: QPointF) -> bool:
        """Browser-style wheel delta: positive scrolls down and zooms out."""
        # beyond this the factor saturates the zoom range anyway; also keeps pow() finite
        delta = clamp(delta, -WHEEL_DELTA_LIMIT, WHEEL_DELTA_LIMIT)
        return self.zoom_at(WHEEL_ZOOM_BASE ** delta, anchor)

    def zoom_in(self) -> bool:
        return self.zoom_at(ZOOM_IN_FACTOR)

    def zoom_out(self) -> bool:
        return self.zoom_at(ZOOM_OUT_FACTOR)

    def zoom_to_fit(self) -> bool:
        if self.locked:
            return False
        self.zoom = 1.0
        self.pan = QPointF(0, 0)
        self._apply()
        self.zoomChanged.emit(self.zoom)
        return True

    def _default_anchor(self) -> QPointF:
        if self._view is not None:
            vp = self._view.viewport().rect()
            return QPointF(vp.width() / 2, vp.height() / 2)
        return QPointF(0, 0)

    # ---- pan ----
    @property
    def is_panning(self) -> bool:
        return self._pan_last is not None

    def begin_pan(self, pos: QPointF):
        self._pan_last = QPointF(pos)

    def pan_to(self, pos: QPointF):
        if self._pan_last is None:
            return
        self.pan = self.pan + (pos - self._pan_last)
        self._pan_last = QPointF(pos)
        self._apply()

    def end_pan(self):
        self._pan_last = None
