from __future__ import annotations
from typing import List
from PySide6.QtCore import QPointF, QRectF, QLineF
from PySide6.QtWidgets import QGraphicsItem

from .items import RoomRectItem, RoomEllipseItem, RoomLineItem, RoomPolygonItem, RoomPathItem
from .models import ShapeType, Point
from .utils import (TEMPLATE_W, TEMPLATE_H, TEMPLATE_RADIUS, TEMPLATE_PENTAGON, TEMPLATE_LINE)


class ItemFactory:
    def __init__(self, scene):
        self.scene = scene

    def _add(self, item: QGraphicsItem, pos: QPointF) -> QGraphicsItem:
        item.setPos(pos)
        self.scene.addItem(item)
        return item

    def create_preview(self, shape_type: str, anchor: QPointF, color: str) -> QGraphicsItem:
        """Zero-size rubber-band shape anchored at ``anchor``."""
        if shape_type == ShapeType.RECTANGLE:
            item = RoomRectItem(color, QRectF(0, 0, 0, 0))
        elif shape_type == ShapeType.CIRCLE:
            item = RoomEllipseItem(color, 0.0)
        elif shape_type == ShapeType.LINE:
            item = RoomLineItem(color, QLineF(0, 0, 0, 0))
        elif shape_type == ShapeType.FREEHAND:
            item = RoomPathItem(color)
        else:
            raise ValueError(f"no rubber-band preview for {shape_type!r}")
        return self._add(item, anchor)

    def create_polygon(self, vertices: List[QPointF], color: str) -> RoomPolygonItem:
        origin = QPointF(vertices[0])
        pts: List[Point] = [(v.x() - origin.x(), v.y() - origin.y()) for v in vertices]
        return self._add(RoomPolygonItem(color, pts), origin)

    def create_template(self, shape_type: str, color: str, center: QPointF) -> QGraphicsItem:
        """Fixed-size shape placed around ``center`` for programmatic insertion."""
        pos = QPointF(center.x() - TEMPLATE_W / 2, center.y() - TEMPLATE_H / 2)
        if shape_type == ShapeType.CIRCLE:
            item = RoomEllipseItem(color, TEMPLATE_RADIUS)
            pos = QPointF(center)
        elif shape_type == ShapeType.POLYGON:
            item = RoomPolygonItem(color, [(float(x), float(y)) for x, y in TEMPLATE_PENTAGON])
        elif shape_type == ShapeType.LINE:
            item = RoomLineItem(color, QLineF(*TEMPLATE_LINE))
        else:
            # freehand has no template, fall back to a rectangle like the toolbar does
            item = RoomRectItem(color, QRectF(0, 0, TEMPLATE_W, TEMPLATE_H))
        self._add(item, pos)
        item.commit()
        return item
