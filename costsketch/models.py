from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Tuple
from PySide6.QtCore import QPointF
from PySide6.QtWidgets import QGraphicsItem

Point = Tuple[float, float]


class ShapeType:
    RECTANGLE = "rectangle"
    CIRCLE = "circle"
    POLYGON = "polygon"
    LINE = "line"
    FREEHAND = "freehand"

    ALL = (RECTANGLE, CIRCLE, POLYGON, LINE, FREEHAND)
    LABELS = {
        RECTANGLE: "Rectangle",
        CIRCLE: "Circle",
        POLYGON: "Polygon",
        LINE: "Line",
        FREEHAND: "Freehand",
    }


class DrawState:
    IDLE = "idle"
    RECT = "rect_drawing"
    CIRCLE = "circle_drawing"
    LINE = "line_drawing"
    POLYGON = "polygon_accumulating"
    FREEHAND = "freehand_tracing"
    PANNING = "panning"


@dataclass
class Room:
    id: str
    name: str
    shape_type: str
    material: str
    cost: int = 0
    width: float = 0.0
    height: float = 0.0
    x: float = 0.0
    y: float = 0.0
    points: Optional[List[Point]] = None
    quantity: float = 0.0
    unit: str = "m²"


@dataclass
class DrawingSession:
    anchor: Optional[QPointF] = None
    vertices: List[QPointF] = field(default_factory=list)
    samples: List[QPointF] = field(default_factory=list)
    preview: Optional[QGraphicsItem] = None
    guide: Optional[QGraphicsItem] = None


@dataclass(frozen=True)
class BackgroundAsset:
    name: str
    data: bytes
    mime_type: str = ""


@dataclass(frozen=True)
class ConversionResult:
    success: bool
    data: Optional[bytes] = None
    message: str = ""
