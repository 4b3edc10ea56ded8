"""Quantity math for drawn shapes.

Every shape kind is a small frozen record; :func:`quantity` dispatches on the
record type and returns a non-negative scene quantity (px² for areas, px for
lines). Degenerate input gives ``0.0`` rather than an error.
"""
from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Sequence, Tuple, Union

Point = Tuple[float, float]


@dataclass(frozen=True)
class Rectangle:
    width: float
    height: float


@dataclass(frozen=True)
class Circle:
    radius: float


@dataclass(frozen=True)
class Line:
    x1: float
    y1: float
    x2: float
    y2: float


@dataclass(frozen=True)
class Polygon:
    points: Tuple[Point, ...]


@dataclass(frozen=True)
class Freehand:
    points: Tuple[Point, ...]


Shape = Union[Rectangle, Circle, Line, Polygon, Freehand]


def shoelace_area(points: Sequence[Point]) -> float:
    n = len(points)
    if n < 3:
        return 0.0
    acc = 0.0
    for i in range(n):
        x0, y0 = points[i]
        x1, y1 = points[(i + 1) % n]
        acc += x0 * y1 - x1 * y0
    return 0.5 * abs(acc)


def polyline_closed(points: Sequence[Point]) -> Tuple[Point, ...]:
    """Return the samples with a closing vertex appended when first != last."""
    pts = tuple((float(x), float(y)) for x, y in points)
    if len(pts) > 1 and pts[0] != pts[-1]:
        pts = pts + (pts[0],)
    return pts


def is_linear(shape: Shape) -> bool:
    return isinstance(shape, Line)


def quantity(shape: Shape, sx: float = 1.0, sy: float = 1.0) -> float:
    k = abs(sx * sy)
    if isinstance(shape, Rectangle):
        return abs(shape.width * shape.height) * k
    if isinstance(shape, Circle):
        return math.pi * shape.radius ** 2 * k
    if isinstance(shape, Line):
        return math.hypot((shape.x2 - shape.x1) * sx, (shape.y2 - shape.y1) * sy)
    if isinstance(shape, Polygon):
        return shoelace_area(shape.points) * k
    if isinstance(shape, Freehand):
        # the repeated closing vertex adds a zero term, so the area is the same
        return shoelace_area(polyline_closed(shape.points)) * k
    raise TypeError(f"not a shape: {shape!r}")
