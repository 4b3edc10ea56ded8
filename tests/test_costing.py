"""
test_costing.py — material rates and quantity-to-dollar conversion.
"""

import pytest

from costsketch.costing import CostEngine
from costsketch.errors import UnknownMaterialError
from costsketch.geometry import Circle, Freehand, Line, Rectangle
from costsketch.materials import MATERIALS, MaterialRate, MaterialRateTable
from costsketch.models import Room
from costsketch.utils import round_half_up


@pytest.fixture
def engine():
    return CostEngine()


# ===========================================================================
# Rate table
# ===========================================================================

class TestMaterialRateTable:

    def test_timber_rate(self):
        rate = MATERIALS["timber"]
        assert rate.cost_per_unit == 120
        assert rate.color == "#8B4513"
        assert rate.name == "Timber Flooring"

    def test_unknown_material(self):
        with pytest.raises(UnknownMaterialError) as exc:
            MATERIALS["unobtainium"]
        assert exc.value.material == "unobtainium"
        # still behaves like a mapping miss
        assert isinstance(exc.value, KeyError)
        assert "unobtainium" not in MATERIALS

    def test_tiers_partition_the_catalogue(self):
        free = MATERIALS.by_tier("free")
        pro = MATERIALS.by_tier("pro")
        assert len(free) + len(pro) == len(MATERIALS)
        assert {r.key for r in free} == {"timber", "carpet", "tiles", "laminate", "vinyl"}

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            MATERIALS["timber"] = MaterialRate("timber", "x", "#000", 1)

    def test_custom_table(self):
        table = MaterialRateTable({"slab": MaterialRate("slab", "Slab", "#777777", 10)})
        assert list(table) == ["slab"]
        assert CostEngine(table).cost_of(Rectangle(100, 100), "slab") == 10


# ===========================================================================
# Cost engine
# ===========================================================================

class TestCostEngine:

    def test_one_square_metre_of_timber(self, engine):
        assert engine.cost_of(Rectangle(100, 100), "timber") == 120

    @pytest.mark.parametrize("w,h,s", [(100, 100, 1), (250, 80, 1.5), (33, 77, 3)])
    def test_rectangle_cost_formula(self, engine, w, h, s):
        expected = round_half_up(w * h * s * s / 10_000 * 120)
        assert engine.cost_of(Rectangle(w, h), "timber", s, s) == expected

    def test_freehand_triangle(self, engine):
        tri = Freehand(((0, 0), (100, 0), (0, 100)))
        assert engine.real_quantity(tri) == pytest.approx(0.5)
        assert engine.cost_of(tri, "timber") == 60
        # 0.5 * 43 = 21.5 rounds half up
        assert engine.cost_of(tri, "carpet") == 22

    def test_line_uses_linear_scale(self, engine):
        ln = Line(0, 0, 300, 400)
        assert engine.unit_label(ln) == "m"
        assert engine.real_quantity(ln) == pytest.approx(5)
        assert engine.cost_of(ln, "vinyl") == 140

    def test_area_unit_label(self, engine):
        assert engine.unit_label(Circle(10)) == "m²"

    def test_zero_size_costs_nothing(self, engine):
        assert engine.cost_of(Rectangle(0, 0), "marble") == 0

    def test_unknown_material(self, engine):
        with pytest.raises(UnknownMaterialError):
            engine.cost_of(Rectangle(10, 10), "nope")

    def test_custom_scales(self):
        eng = CostEngine(area_scale=1.0)
        assert eng.cost_of(Rectangle(2, 3), "vinyl") == 6 * 28

    def test_total(self):
        rooms = [Room(f"room_{i}", "r", "rectangle", "timber", cost=c) for i, c in enumerate((5, 0, 120))]
        assert CostEngine.total(rooms) == 125
        assert CostEngine.total([]) == 0


@pytest.mark.parametrize("v,expected", [(0.5, 1), (1.5, 2), (2.4999, 2), (21.5, 22), (0.0, 0)])
def test_round_half_up(v, expected):
    assert round_half_up(v) == expected
