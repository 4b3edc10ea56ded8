from __future__ import annotations
from typing import Optional

from PySide6.QtCore import Qt, QRectF, QPointF, Signal
from PySide6.QtGui import QPainter, QPen, QWheelEvent
from PySide6.QtWidgets import QGraphicsScene, QGraphicsView

from .grid import GridRenderer
from .items import ResizeHandle, is_room_shape
from .utils import CANVAS_BG, SCENE_W, SCENE_H

SCENE_BORDER = Qt.lightGray
# room for panning: the view never clamps the transform to the canvas
VIEW_EXTENT = 100_000.0


class PlanScene(QGraphicsScene):
    shapeModified = Signal(object)
    shapeDetached = Signal(object)
    deleteRequested = Signal()

    def __init__(self, width: float = SCENE_W, height: float = SCENE_H, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.setItemIndexMethod(QGraphicsScene.NoIndex)
        self.setSceneRect(0, 0, width, height)
        self.grid = GridRenderer(self)
        self.drawing = None  # set by the owning controller

    # ---- item callbacks ----
    def shape_geometry_changed(self, item):
        self.shapeModified.emit(item)

    def shape_detached(self, item):
        self.shapeDetached.emit(item)

    # ---- painting ----
    def drawBackground(self, painter: QPainter, rect: QRectF):
        painter.fillRect(rect, CANVAS_BG)
        self.grid.paint(painter, rect, self.sceneRect())
        painter.setPen(QPen(SCENE_BORDER, 1)); painter.setBrush(Qt.NoBrush)
        painter.drawRect(self.sceneRect())

    # ---- input ----
    def _interactive_at(self, pos: QPointF) -> bool:
        for it in self.items(pos):
            if isinstance(it, ResizeHandle) or (is_room_shape(it) and not it.is_preview):
                return True
        return False

    def mousePressEvent(self, event):
        d = self.drawing
        if d is None:
            return super().mousePressEvent(event)
        # clicks on committed shapes select/move them; pan gestures always go to the machine
        if d.is_idle and self._interactive_at(event.scenePos()) and \
                not (event.button() == Qt.MiddleButton or event.modifiers() & Qt.ShiftModifier):
            return super().mousePressEvent(event)
        if d.is_idle:
            self.clearSelection()
        if d.pointer_down(event.scenePos(), event.button(), event.modifiers(), QPointF(event.screenPos())):
            event.accept()
            return
        if d.is_active:
            # mid-gesture presses never reach selection or item dragging
            event.accept()
            return
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event):
        d = self.drawing
        if d is not None and d.is_active:
            d.pointer_move(event.scenePos(), QPointF(event.screenPos()))
            event.accept()
            return
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event):
        d = self.drawing
        if d is not None and d.is_active:
            d.pointer_up(event.scenePos(), event.button(), QPointF(event.screenPos()))
            event.accept()
            return
        super().mouseReleaseEvent(event)

    def mouseDoubleClickEvent(self, event):
        d = self.drawing
        if d is not None and d.is_active:
            d.double_click(event.scenePos())
            event.accept()
            return
        super().mouseDoubleClickEvent(event)

    def keyPressEvent(self, event):
        if event.key() in (Qt.Key_Delete, Qt.Key_Backspace) and self.selectedItems():
            self.deleteRequested.emit()
            event.accept()
            return
        super().keyPressEvent(event)


class PlanView(QGraphicsView):
    # current zoom, mirrored from the viewport controller
    scaleChanged = Signal(float)

    def __init__(self, scene: Optional[PlanScene] = None, parent=None):
        super().__init__(parent)
        self.viewport_ctl = None  # set by the owning controller
        self.setRenderHint(QPainter.Antialiasing, True)
        self.setViewportUpdateMode(QGraphicsView.FullViewportUpdate)
        self.setTransformationAnchor(QGraphicsView.NoAnchor)
        self.setResizeAnchor(QGraphicsView.NoAnchor)
        self.setAlignment(Qt.AlignLeft | Qt.AlignTop)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        self.setVerticalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        self.setDragMode(QGraphicsView.NoDrag)
        self.setMouseTracking(True)
        if scene is not None:
            self.setScene(scene)

    def setScene(self, scene):
        super().setScene(scene)
        if scene is not None:
            self.setSceneRect(-VIEW_EXTENT, -VIEW_EXTENT, 2 * VIEW_EXTENT, 2 * VIEW_EXTENT)

    def wheelEvent(self, event: QWheelEvent):
        vc = self.viewport_ctl
        if vc is None:
            return super().wheelEvent(event)
        # Qt reports scroll-up as positive; the controller wants browser-style deltas
        if vc.wheel(-event.angleDelta().y(), event.position()):
            self.scaleChanged.emit(vc.zoom)
        event.accept()
