from __future__ import annotations
from typing import List, Optional, Tuple
from PySide6.QtCore import Qt, QRectF, QPointF, QLineF
from PySide6.QtGui import QBrush, QColor, QPainterPath, QPen, QPolygonF
from PySide6.QtWidgets import (
    QGraphicsItem, QGraphicsRectItem, QGraphicsEllipseItem, QGraphicsLineItem,
    QGraphicsPolygonItem, QGraphicsPathItem,
)

from . import geometry
from .models import ShapeType, Point
from .utils import (SHAPE_STROKE_W, LINE_STROKE_W, FREEHAND_STROKE_W, PREVIEW_Z, fill_color)

GHOST_PEN_STYLE = Qt.DashLine
SELECTED_PEN = QPen(QColor(255, 140, 0), 2, Qt.DashLine)
SELECTED_BRUSH = QBrush(QColor(255, 240, 180, 160))


class ResizeHandle(QGraphicsRectItem):
    SIZE = 10.0

    def __init__(self, owner: "RoomRectItem", cx: float, cy: float, corner: str):
        super().__init__(0, 0, self.SIZE, self.SIZE, owner)
        self.owner = owner
        self.corner = corner
        self.setZValue(1000)
        self.setBrush(QBrush(QColor(255, 255, 255)))
        self.setPen(QPen(QColor(80, 80, 80), 1))
        self.setFlag(QGraphicsItem.ItemIsMovable, True)
        self.setFlag(QGraphicsItem.ItemSendsGeometryChanges, True)
        self.setCursor({
            "tl": Qt.SizeFDiagCursor, "br": Qt.SizeFDiagCursor,
            "tr": Qt.SizeBDiagCursor, "bl": Qt.SizeBDiagCursor,
        }[corner])
        self.update_pos(cx, cy)

    def update_pos(self, cx: float, cy: float):
        self.setPos(cx - self.SIZE/2, cy - self.SIZE/2)

    def itemChange(self, change, value):
        if change == QGraphicsItem.ItemPositionChange and not self.owner._laying_out:
            if self.owner.scene() is None:
                return super().itemChange(change, value)
            lx = value.x() + self.SIZE/2
            ly = value.y() + self.SIZE/2
            r = self.owner.rect()
            L, T, R, B = 0.0, 0.0, r.width(), r.height()
            if self.corner == "tl":
                new = QRectF(QPointF(lx, ly), QPointF(R, B))
            elif self.corner == "tr":
                new = QRectF(QPointF(L, ly), QPointF(lx, B))
            elif self.corner == "bl":
                new = QRectF(QPointF(lx, T), QPointF(R, ly))
            else:
                new = QRectF(QPointF(L, T), QPointF(lx, ly))
            self.owner.resize_to(new.normalized())
            # the owner has already laid this handle out
            return self.pos()
        return super().itemChange(change, value)


class ShapeItemMixin:
    """Shared behaviour of every drawable room shape.

    A shape starts life as a non-interactive preview ("ghost") and becomes a
    selectable, movable committed shape via :meth:`commit`. Geometry changes
    and scene removal of committed shapes are reported to the owning scene.
    """

    shape_type = ""
    stroke_width = SHAPE_STROKE_W

    def _init_shape(self, color: str):
        self._is_preview = True
        self._handles: List[ResizeHandle] = []
        self._laying_out = False
        self.setFlag(QGraphicsItem.ItemIsSelectable, False)
        self.setFlag(QGraphicsItem.ItemIsMovable, False)
        self.set_material_color(color)
        self.set_view_mode("ghost")
        self.setZValue(PREVIEW_Z)

    @property
    def is_preview(self) -> bool:
        return self._is_preview

    def set_material_color(self, color: str):
        self.pen_normal = QPen(QColor(color), self.stroke_width, Qt.SolidLine)
        self.brush_normal = QBrush(fill_color(color))
        self._apply_style()

    def _apply_style(self):
        selected = self.isSelected()
        pen = QPen(SELECTED_PEN if selected else self.pen_normal)
        if self._is_preview:
            pen.setStyle(GHOST_PEN_STYLE)
        self.setPen(pen)
        if self.has_fill():
            self.setBrush(SELECTED_BRUSH if selected else self.brush_normal)

    def has_fill(self) -> bool:
        return hasattr(self, "setBrush")

    def set_view_mode(self, mode: str):
        self.setOpacity(0.5 if mode == "ghost" else 1.0)
        self._apply_style()

    def commit(self):
        self._is_preview = False
        self.setZValue(0)
        self.setFlag(QGraphicsItem.ItemIsSelectable, True)
        self.setFlag(QGraphicsItem.ItemIsMovable, True)
        self.setFlag(QGraphicsItem.ItemSendsGeometryChanges, True)
        self.set_view_mode("active")

    def _notify_geometry(self):
        # intermediate steps of a resize report once, from resize_to
        if self._laying_out:
            return
        scene = self.scene()
        if scene is not None and not self._is_preview and hasattr(scene, "shape_geometry_changed"):
            scene.shape_geometry_changed(self)

    # handles are only meaningful for rectangles, see RoomRectItem
    def _create_handles(self):
        pass

    def _remove_handles(self):
        for h in self._handles:
            h.setParentItem(None)
            scene = h.scene()
            if scene:
                scene.removeItem(h)
        self._handles.clear()

    def itemChange(self, change, value):
        if change == QGraphicsItem.ItemSelectedHasChanged:
            self._apply_style()
            if bool(value):
                self._create_handles()
            else:
                self._remove_handles()
        elif change in (QGraphicsItem.ItemPositionHasChanged, QGraphicsItem.ItemTransformHasChanged,
                        QGraphicsItem.ItemScaleHasChanged):
            self._notify_geometry()
        elif change == QGraphicsItem.ItemSceneChange and value is None:
            scene = self.scene()
            if scene is not None and hasattr(scene, "shape_detached"):
                scene.shape_detached(self)
        return super().itemChange(change, value)


class RoomRectItem(ShapeItemMixin, QGraphicsRectItem):
    shape_type = ShapeType.RECTANGLE

    def __init__(self, color: str, rect: Optional[QRectF] = None):
        QGraphicsRectItem.__init__(self, rect or QRectF())
        self._init_shape(color)

    def _create_handles(self):
        if self._handles or self._is_preview:
            return
        r = self.rect()
        self._laying_out = True
        try:
            self._handles = [
                ResizeHandle(self, r.left(),  r.top(),    "tl"),
                ResizeHandle(self, r.right(), r.top(),    "tr"),
                ResizeHandle(self, r.left(),  r.bottom(), "bl"),
                ResizeHandle(self, r.right(), r.bottom(), "br"),
            ]
        finally:
            self._laying_out = False

    def _layout_handles(self):
        if not self._handles:
            return
        r = self.rect()
        self._laying_out = True
        try:
            for h in self._handles:
                if   h.corner == "tl": h.update_pos(r.left(),  r.top())
                elif h.corner == "tr": h.update_pos(r.right(), r.top())
                elif h.corner == "bl": h.update_pos(r.left(),  r.bottom())
                elif h.corner == "br": h.update_pos(r.right(), r.bottom())
        finally:
            self._laying_out = False

    def setRect(self, *args, **kwargs):
        super().setRect(*args, **kwargs)
        self._layout_handles()

    def resize_to(self, local: QRectF):
        """Resize to ``local`` (item coordinates), keeping the rect anchored at (0, 0)."""
        self._laying_out = True
        try:
            self.setPos(self.pos() + local.topLeft())
        finally:
            self._laying_out = False
        self.setRect(QRectF(0, 0, local.width(), local.height()))
        self._notify_geometry()


class RoomEllipseItem(ShapeItemMixin, QGraphicsEllipseItem):
    shape_type = ShapeType.CIRCLE

    def __init__(self, color: str, radius: float = 0.0):
        QGraphicsEllipseItem.__init__(self, QRectF(-radius, -radius, 2*radius, 2*radius))
        self._init_shape(color)

    def set_radius(self, radius: float):
        self.setRect(QRectF(-radius, -radius, 2*radius, 2*radius))

    def radius(self) -> float:
        return self.rect().width() / 2.0


class RoomLineItem(ShapeItemMixin, QGraphicsLineItem):
    shape_type = ShapeType.LINE
    stroke_width = LINE_STROKE_W

    def __init__(self, color: str, line: Optional[QLineF] = None):
        QGraphicsLineItem.__init__(self, line or QLineF())
        self._init_shape(color)

    def has_fill(self) -> bool:
        return False


class RoomPolygonItem(ShapeItemMixin, QGraphicsPolygonItem):
    shape_type = ShapeType.POLYGON

    def __init__(self, color: str, points: Optional[List[Point]] = None):
        QGraphicsPolygonItem.__init__(self, QPolygonF([QPointF(x, y) for x, y in (points or [])]))
        self._init_shape(color)

    def local_points(self) -> List[Point]:
        return [(p.x(), p.y()) for p in self.polygon()]


class RoomPathItem(ShapeItemMixin, QGraphicsPathItem):
    """Freehand trace; samples are kept in item-local coordinates."""

    shape_type = ShapeType.FREEHAND
    stroke_width = FREEHAND_STROKE_W

    def __init__(self, color: str):
        QGraphicsPathItem.__init__(self)
        self._samples: List[Point] = [(0.0, 0.0)]
        self.setPath(self._build_path())
        self._init_shape(color)

    def add_sample(self, x: float, y: float):
        self._samples.append((float(x), float(y)))
        self.setPath(self._build_path())

    def local_points(self) -> List[Point]:
        return list(self._samples)

    def _build_path(self) -> QPainterPath:
        path = QPainterPath(QPointF(*self._samples[0]))
        for x, y in self._samples[1:]:
            path.lineTo(x, y)
        return path

    def has_fill(self) -> bool:
        return False


def is_room_shape(item) -> bool:
    return isinstance(item, ShapeItemMixin)


def item_scale(item: QGraphicsItem) -> Tuple[float, float]:
    t = item.transform()
    s = item.scale()
    return t.m11() * s, t.m22() * s


def local_geometry_rect(item: QGraphicsItem) -> QRectF:
    if isinstance(item, (QGraphicsRectItem, QGraphicsEllipseItem)):
        return QRectF(item.rect())
    if isinstance(item, QGraphicsLineItem):
        ln = item.line()
        return QRectF(ln.p1(), ln.p2()).normalized()
    if isinstance(item, QGraphicsPolygonItem):
        return item.polygon().boundingRect()
    if isinstance(item, QGraphicsPathItem):
        return item.path().boundingRect()
    return item.boundingRect()


def scene_bounds(item: QGraphicsItem) -> QRectF:
    return item.sceneTransform().mapRect(local_geometry_rect(item))


def shape_record(item: QGraphicsItem) -> geometry.Shape:
    """Geometry record of a visual shape in its local, pre-transform space."""
    if isinstance(item, RoomRectItem):
        r = item.rect()
        return geometry.Rectangle(r.width(), r.height())
    if isinstance(item, RoomEllipseItem):
        return geometry.Circle(item.radius())
    if isinstance(item, RoomLineItem):
        ln = item.line()
        return geometry.Line(ln.x1(), ln.y1(), ln.x2(), ln.y2())
    if isinstance(item, RoomPolygonItem):
        return geometry.Polygon(tuple(item.local_points()))
    if isinstance(item, RoomPathItem):
        return geometry.Freehand(tuple(item.local_points()))
    raise TypeError(f"not a room shape: {type(item).__name__}")


def local_points(item: QGraphicsItem) -> Optional[List[Point]]:
    if isinstance(item, (RoomPolygonItem, RoomPathItem)):
        return item.local_points()
    return None
