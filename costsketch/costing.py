from __future__ import annotations
from typing import Iterable, Optional

from . import geometry
from .geometry import Shape
from .materials import MATERIALS, MaterialRateTable
from .models import Room
from .utils import AREA_UNIT_PX, LINEAR_UNIT_PX, round_half_up


class CostEngine:
    """Turns scene quantities into billable units and whole-dollar costs."""

    def __init__(self, rates: Optional[MaterialRateTable] = None,
                 linear_scale: float = LINEAR_UNIT_PX, area_scale: float = AREA_UNIT_PX):
        self.rates = rates if rates is not None else MATERIALS
        self.linear_scale = float(linear_scale)
        self.area_scale = float(area_scale)

    def unit_scale(self, shape: Shape) -> float:
        return self.linear_scale if geometry.is_linear(shape) else self.area_scale

    def unit_label(self, shape: Shape) -> str:
        return "m" if geometry.is_linear(shape) else "m²"

    def real_quantity(self, shape: Shape, sx: float = 1.0, sy: float = 1.0) -> float:
        return geometry.quantity(shape, sx, sy) / self.unit_scale(shape)

    def cost_for_quantity(self, real_qty: float, material: str) -> int:
        rate = self.rates[material]
        return max(0, round_half_up(real_qty * rate.cost_per_unit))

    def cost_of(self, shape: Shape, material: str, sx: float = 1.0, sy: float = 1.0) -> int:
        return self.cost_for_quantity(self.real_quantity(shape, sx, sy), material)

    @staticmethod
    def total(rooms: Iterable[Room]) -> int:
        return sum(r.cost for r in rooms)
