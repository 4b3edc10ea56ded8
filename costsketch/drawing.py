"""Pointer-driven shape construction.

States::

    Idle --down--> Rect/Circle/Line drawing --move*--> --up--> Idle (commit)
    Idle --down--> PolygonAccumulating --down*--> --double-click--> Idle
    Idle --down--> FreehandTracing --move*--> --up--> Idle (commit)
    Idle | PolygonAccumulating --pan down--> Panning --up--> previous state

Pointer-up always commits, even a zero-size shape; there is no cancel
gesture. A polygon closed with fewer than three vertices is dropped.
"""
from __future__ import annotations
import logging
import math
from typing import Callable, Optional

from PySide6.QtCore import Qt, QPointF, QRectF, QLineF
from PySide6.QtGui import QColor, QPainterPath, QPen
from PySide6.QtWidgets import QGraphicsItem, QGraphicsPathItem, QGraphicsScene

from .factory import ItemFactory
from .models import DrawState, DrawingSession, Room, ShapeType
from .utils import PREVIEW_Z, norm_rect
from .viewport import ViewportController

log = logging.getLogger(__name__)

CommitFn = Callable[[QGraphicsItem, str], Optional[Room]]

_DRAG_STATES = {
    ShapeType.RECTANGLE: DrawState.RECT,
    ShapeType.CIRCLE: DrawState.CIRCLE,
    ShapeType.LINE: DrawState.LINE,
}


def is_pan_gesture(button, modifiers) -> bool:
    return button == Qt.MiddleButton or (button == Qt.LeftButton and bool(modifiers & Qt.ShiftModifier))


class DrawingStateMachine:
    def __init__(self, scene: QGraphicsScene, viewport: ViewportController,
                 commit: CommitFn, color_for_current: Callable[[], str]):
        self.scene = scene
        self.viewport = viewport
        self.factory = ItemFactory(scene)
        self._commit = commit
        self._color = color_for_current
        self.shape_type = ShapeType.RECTANGLE
        self.state = DrawState.IDLE
        self.session = DrawingSession()
        self._resume_state = DrawState.IDLE

    @property
    def is_idle(self) -> bool:
        return self.state == DrawState.IDLE

    @property
    def is_active(self) -> bool:
        return self.state != DrawState.IDLE

    def set_shape(self, shape_type: str):
        if shape_type not in ShapeType.ALL:
            raise ValueError(f"unknown shape type: {shape_type!r}")
        if shape_type != self.shape_type:
            self.reset()
        self.shape_type = shape_type

    # ---- events ----
    def pointer_down(self, pos: QPointF, button=Qt.LeftButton, modifiers=Qt.NoModifier,
                     screen_pos: Optional[QPointF] = None) -> bool:
        if is_pan_gesture(button, modifiers):
            if self.state in (DrawState.IDLE, DrawState.POLYGON):
                self._resume_state = self.state
                self.state = DrawState.PANNING
                self.viewport.begin_pan(QPointF(screen_pos if screen_pos is not None else pos))
                return True
            return False
        if self.state == DrawState.PANNING or button != Qt.LeftButton:
            return False

        if self.shape_type == ShapeType.POLYGON:
            self._add_vertex(pos)
            return True
        if not self.is_idle:
            return False

        self.session = DrawingSession(anchor=QPointF(pos))
        self.session.preview = self.factory.create_preview(self.shape_type, pos, self._color())
        if self.shape_type == ShapeType.FREEHAND:
            self.state = DrawState.FREEHAND
        else:
            self.state = _DRAG_STATES[self.shape_type]
        return True

    def pointer_move(self, pos: QPointF, screen_pos: Optional[QPointF] = None) -> bool:
        st = self.state
        if st == DrawState.PANNING:
            self.viewport.pan_to(QPointF(screen_pos if screen_pos is not None else pos))
            return True
        if st == DrawState.IDLE:
            return False
        s = self.session
        if st == DrawState.RECT:
            r = norm_rect(s.anchor, pos)
            s.preview.setPos(r.topLeft())
            s.preview.setRect(QRectF(0, 0, r.width(), r.height()))
        elif st == DrawState.CIRCLE:
            d = pos - s.anchor
            s.preview.set_radius(math.hypot(d.x(), d.y()))
        elif st == DrawState.LINE:
            d = pos - s.anchor
            s.preview.setLine(QLineF(0, 0, d.x(), d.y()))
        elif st == DrawState.FREEHAND:
            d = pos - s.anchor
            s.preview.add_sample(d.x(), d.y())
        elif st == DrawState.POLYGON:
            self._update_guide(pos)
        return True

    def pointer_up(self, pos: QPointF, button=Qt.LeftButton, screen_pos: Optional[QPointF] = None) -> Optional[Room]:
        st = self.state
        if st == DrawState.PANNING:
            self.viewport.end_pan()
            self.state = self._resume_state
            self._resume_state = DrawState.IDLE
            return None
        if st in (DrawState.RECT, DrawState.CIRCLE, DrawState.LINE, DrawState.FREEHAND):
            item = self.session.preview
            self.session = DrawingSession()
            self.state = DrawState.IDLE
            item.commit()
            return self._commit(item, self.shape_type)
        return None

    def double_click(self, pos: QPointF) -> Optional[Room]:
        if self.state != DrawState.POLYGON:
            return None
        vertices = list(self.session.vertices)
        self._discard_session()
        if len(vertices) < 3:
            log.debug("polygon with %d vertices discarded", len(vertices))
            return None
        item = self.factory.create_polygon(vertices, self._color())
        item.commit()
        return self._commit(item, ShapeType.POLYGON)

    def reset(self):
        if self.state == DrawState.PANNING:
            self.viewport.end_pan()
        self._discard_session()

    # ---- polygon ----
    def _add_vertex(self, pos: QPointF):
        s = self.session
        if self.state == DrawState.IDLE:
            self.session = s = DrawingSession(anchor=QPointF(pos))
            s.preview = self._make_outline()
            s.guide = self._make_outline(Qt.DotLine)
            self.state = DrawState.POLYGON
            self.viewport.locked = True
        s.vertices.append(QPointF(pos))
        path = QPainterPath(s.vertices[0])
        for v in s.vertices[1:]:
            path.lineTo(v)
        s.preview.setPath(path)
        self._update_guide(pos)

    def _update_guide(self, pos: QPointF):
        s = self.session
        if s.guide is None or not s.vertices:
            return
        path = QPainterPath(s.vertices[-1])
        path.lineTo(pos)
        s.guide.setPath(path)

    def _make_outline(self, style=Qt.DashLine) -> QGraphicsPathItem:
        item = QGraphicsPathItem()
        item.setPen(QPen(QColor(self._color()), 2, style))
        item.setZValue(PREVIEW_Z)
        item.setAcceptedMouseButtons(Qt.NoButton)
        self.scene.addItem(item)
        return item

    def _discard_session(self):
        for it in (self.session.preview, self.session.guide):
            if it is not None and it.scene() is not None:
                it.scene().removeItem(it)
        self.session = DrawingSession()
        self.state = DrawState.IDLE
        self._resume_state = DrawState.IDLE
        self.viewport.locked = False
