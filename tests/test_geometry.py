"""
test_geometry.py — quantity math for every shape record.

Pure functions, no Qt objects involved.
"""

import math
import random

import pytest

from costsketch.geometry import (
    Circle, Freehand, Line, Polygon, Rectangle, is_linear, polyline_closed, quantity, shoelace_area,
)


# ===========================================================================
# Rectangles and circles
# ===========================================================================

class TestRectangle:

    @pytest.mark.parametrize("w,h,s", [(100, 100, 1), (120, 80, 2), (35.5, 12.25, 0.5), (1, 1, 20)])
    def test_area_under_uniform_scale(self, w, h, s):
        assert quantity(Rectangle(w, h), s, s) == pytest.approx(w * h * s * s)

    def test_non_uniform_scale(self):
        assert quantity(Rectangle(100, 50), 2, 3) == pytest.approx(30_000)

    def test_zero_size_is_zero(self):
        assert quantity(Rectangle(0, 0)) == 0.0
        assert quantity(Rectangle(0, 40)) == 0.0

    def test_never_negative(self):
        assert quantity(Rectangle(-10, 20)) == pytest.approx(200)
        assert quantity(Rectangle(10, 20), -1, 1) == pytest.approx(200)


class TestCircle:

    def test_area_formula(self):
        assert quantity(Circle(50)) == pytest.approx(math.pi * 2500)

    def test_area_strictly_increases_with_radius(self):
        radii = [0.1, 1, 2.5, 10, 50, 333]
        areas = [quantity(Circle(r)) for r in radii]
        assert all(a < b for a, b in zip(areas, areas[1:]))

    def test_zero_radius(self):
        assert quantity(Circle(0)) == 0.0


# ===========================================================================
# Lines
# ===========================================================================

class TestLine:

    def test_length(self):
        assert quantity(Line(0, 0, 30, 40)) == pytest.approx(50)

    def test_scale_applies_per_axis(self):
        assert quantity(Line(0, 0, 30, 40), 2, 1) == pytest.approx(math.hypot(60, 40))

    def test_zero_length(self):
        assert quantity(Line(5, 5, 5, 5)) == 0.0

    def test_is_linear(self):
        assert is_linear(Line(0, 0, 1, 1))
        assert not is_linear(Rectangle(1, 1))


# ===========================================================================
# Polygons and freehand traces
# ===========================================================================

class TestShoelace:

    def test_unit_square(self):
        assert shoelace_area([(0, 0), (1, 0), (1, 1), (0, 1)]) == pytest.approx(1)

    def test_fewer_than_three_points(self):
        assert shoelace_area([]) == 0.0
        assert shoelace_area([(0, 0), (10, 10)]) == 0.0

    def test_collinear_points_are_degenerate(self):
        assert shoelace_area([(0, 0), (50, 50), (100, 100)]) == 0.0
        assert quantity(Polygon(((0, 0), (10, 0), (20, 0), (30, 0)))) == 0.0

    @pytest.mark.parametrize("seed", [1, 7, 42, 2024])
    def test_direction_invariant(self, seed):
        rng = random.Random(seed)
        pts = [(rng.uniform(-500, 500), rng.uniform(-500, 500)) for _ in range(rng.randint(3, 12))]
        assert shoelace_area(pts) == pytest.approx(shoelace_area(list(reversed(pts))))

    def test_concave_polygon(self):
        # L-shape: 100x100 minus the 50x50 top-right corner
        pts = ((0, 0), (50, 0), (50, 50), (100, 50), (100, 100), (0, 100))
        assert quantity(Polygon(pts)) == pytest.approx(7500)


class TestFreehand:

    def test_triangle_is_implicitly_closed(self):
        assert quantity(Freehand(((0, 0), (100, 0), (0, 100)))) == pytest.approx(5000)

    def test_already_closed_trace(self):
        assert quantity(Freehand(((0, 0), (100, 0), (0, 100), (0, 0)))) == pytest.approx(5000)

    def test_polyline_closed_appends_first_point(self):
        assert polyline_closed([(0, 0), (1, 0), (1, 1)]) == ((0, 0), (1, 0), (1, 1), (0, 0))
        assert polyline_closed([(0, 0), (1, 0), (0, 0)]) == ((0, 0), (1, 0), (0, 0))

    def test_single_sample(self):
        assert quantity(Freehand(((3, 4),))) == 0.0


def test_unknown_record_rejected():
    with pytest.raises(TypeError):
        quantity(object())
