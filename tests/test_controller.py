"""
test_controller.py — the public canvas API, initialization retry and teardown.
"""

import math

import pytest
from PySide6.QtCore import QPointF

from costsketch.controller import CanvasController
from costsketch.errors import InitializationFailure, UnknownMaterialError
from costsketch.items import RoomEllipseItem, RoomLineItem, RoomPolygonItem, RoomRectItem
from costsketch.models import ShapeType
from costsketch.scene import PlanScene, PlanView


class FakeScheduler:
    """Collects QTimer.singleShot-style callbacks so tests can fire them by hand."""

    def __init__(self):
        self.pending = []

    def __call__(self, delay_ms, fn):
        self.pending.append((delay_ms, fn))

    def run_all(self):
        while self.pending:
            _, fn = self.pending.pop(0)
            fn()


def flaky_factory(failures):
    state = {"calls": 0}

    def make(width, height):
        state["calls"] += 1
        if state["calls"] <= failures:
            raise RuntimeError("graphics context unavailable")
        return PlanScene(width, height)

    make.state = state
    return make


# ===========================================================================
# Templates and room edits
# ===========================================================================

class TestAddRoom:

    def test_default_rectangle_template(self, controller):
        room = controller.add_room()
        assert room.name == "New Room"
        assert (room.width, room.height) == (100, 80)
        assert (room.x, room.y) == (350, 210)
        assert room.cost == round(0.8 * 120)
        assert isinstance(controller.registry.item_for(room.id), RoomRectItem)

    def test_new_room_becomes_the_selection(self, controller):
        a = controller.add_room()
        b = controller.add_room()
        assert controller.get_selected_room() is b
        assert not controller.registry.item_for(a.id).isSelected()
        assert controller.scene.selectedItems() == [controller.registry.item_for(b.id)]

    def test_circle_template(self, controller):
        controller.set_current_shape(ShapeType.CIRCLE)
        room = controller.add_room("Round")
        assert isinstance(controller.registry.item_for(room.id), RoomEllipseItem)
        assert room.quantity == pytest.approx(math.pi * 0.25)
        assert (room.x, room.y) == (350, 200)

    def test_polygon_template_is_a_pentagon(self, controller):
        controller.set_current_shape(ShapeType.POLYGON)
        room = controller.add_room()
        assert isinstance(controller.registry.item_for(room.id), RoomPolygonItem)
        assert len(room.points) == 5
        assert room.quantity > 0

    def test_line_template(self, controller):
        controller.set_current_shape(ShapeType.LINE)
        room = controller.add_room()
        assert isinstance(controller.registry.item_for(room.id), RoomLineItem)
        assert room.unit == "m"
        assert room.quantity == pytest.approx(math.sqrt(2))

    def test_freehand_falls_back_to_rectangle(self, controller):
        controller.set_current_shape(ShapeType.FREEHAND)
        room = controller.add_room()
        assert room.shape_type == ShapeType.RECTANGLE
        assert isinstance(controller.registry.item_for(room.id), RoomRectItem)

    def test_template_uses_selected_material(self, controller):
        controller.set_selected_material("marble")
        room = controller.add_room()
        assert room.material == "marble"
        assert room.cost == 180


class TestRoomEdits:

    def test_delete_reduces_total_by_room_cost(self, controller):
        a = controller.add_room()
        controller.set_selected_material("marble")
        b = controller.add_room()
        total = controller.get_total_cost()
        assert controller.delete_room(b.id) is True
        assert controller.get_total_cost() == total - b.cost
        assert [r.id for r in controller.get_rooms()] == [a.id]

    def test_unknown_ids_are_ignored(self, controller):
        assert controller.delete_room("room_999") is False
        assert controller.update_room_name("room_999", "x") is None
        assert controller.update_room_material("room_999", "timber") is None
        assert controller.scale_room("room_999", 2, 2) is None

    def test_unknown_material_rejected(self, controller):
        room = controller.add_room()
        with pytest.raises(UnknownMaterialError):
            controller.update_room_material(room.id, "adamantium")
        with pytest.raises(UnknownMaterialError):
            controller.set_selected_material("adamantium")
        assert controller.selected_material == "timber"

    def test_material_update(self, controller):
        room = controller.add_room()
        controller.update_room_material(room.id, "carpet")
        assert room.cost == round(0.8 * 43)

    def test_scale_room(self, controller):
        room = controller.add_room()
        scaled = controller.scale_room(room.id, 2, 1.5)
        assert scaled is room
        assert room.quantity == pytest.approx(0.8 * 3)
        assert room.cost == round(2.4 * 120)
        assert room.width == pytest.approx(200)

    def test_selected_room(self, controller):
        assert controller.get_selected_room() is None
        a = controller.add_room()
        controller.registry.item_for(a.id).setSelected(True)
        assert controller.get_selected_room() is a

    def test_delete_key_removes_selection(self, controller):
        a = controller.add_room()
        controller.registry.item_for(a.id).setSelected(True)
        controller.scene.deleteRequested.emit()
        assert len(controller.registry) == 0

    def test_total_area(self, controller):
        controller.add_room()
        controller.add_room()
        controller.set_current_shape(ShapeType.LINE)
        controller.add_room()
        assert controller.get_total_area() == pytest.approx(1.6)


# ===========================================================================
# Canvas-wide operations
# ===========================================================================

class TestCanvas:

    def test_clear_canvas_notifies_once(self, controller):
        for _ in range(3):
            controller.add_room()
        calls = []
        controller.on_rooms_change(calls.append)
        controller.clear_canvas()
        assert calls == [[]]
        assert controller.get_total_cost() == 0
        assert controller.scene.grid.is_shown

    def test_clear_canvas_resets_hidden_grid(self, controller):
        assert controller.toggle_grid() is False
        controller.clear_canvas()
        assert controller.scene.grid.is_shown

    def test_toggle_grid(self, controller):
        assert controller.toggle_grid() is False
        assert controller.toggle_grid() is True

    def test_zoom_controls(self, controller):
        controller.zoom_in()
        assert controller.zoom_level == pytest.approx(1.2)
        controller.zoom_out()
        controller.zoom_to_fit()
        assert controller.zoom_level == 1.0

    def test_callback_replaced(self, controller):
        first, second = [], []
        controller.on_rooms_change(first.append)
        controller.on_rooms_change(second.append)
        controller.add_room()
        assert first == [] and len(second) == 1

    def test_view_is_wired(self, qapp):
        view = PlanView()
        with CanvasController(view=view) as ctl:
            assert view.scene() is ctl.scene
            assert view.viewport_ctl is ctl.viewport
            ctl.zoom_in()
            assert view.transform().m11() == pytest.approx(1.2)
        assert view.scene() is None


# ===========================================================================
# Initialization and teardown
# ===========================================================================

class TestLifecycle:

    def test_ready_immediately(self, controller):
        assert controller.is_ready
        assert controller.attempts == 1

    def test_retries_until_surface_appears(self, qapp):
        sched = FakeScheduler()
        factory = flaky_factory(2)
        ctl = CanvasController(scheduler=sched, surface_factory=factory)
        try:
            assert not ctl.is_ready
            assert sched.pending[0][0] == 250
            with pytest.raises(InitializationFailure):
                ctl.add_room()
            sched.run_all()
            assert ctl.is_ready
            assert factory.state["calls"] == 3
            assert ctl.add_room().cost == 96
        finally:
            ctl.dispose()

    def test_retry_is_bounded(self, qapp):
        sched = FakeScheduler()
        failures = []
        ctl = CanvasController(scheduler=sched, surface_factory=flaky_factory(100), max_attempts=5)
        ctl.initFailed.connect(failures.append)
        sched.run_all()
        assert not ctl.is_ready
        assert ctl.attempts == 5
        assert isinstance(ctl.init_error, InitializationFailure)
        assert ctl.init_error.attempts == 5
        assert len(failures) == 1 and "5 attempts" in failures[0]
        with pytest.raises(InitializationFailure):
            ctl.toggle_grid()
        ctl.dispose()

    def test_dispose_removes_everything(self, qapp):
        ctl = CanvasController()
        scene = ctl.scene
        ctl.add_room()
        ctl.drawing.pointer_down(QPointF(5, 5))
        ctl.dispose()
        assert scene.items() == []
        assert not ctl.is_ready
        assert ctl.get_rooms() == []

    def test_dispose_is_idempotent(self, qapp):
        ctl = CanvasController()
        ctl.dispose()
        ctl.dispose()
        with pytest.raises(InitializationFailure):
            ctl.add_room()

    def test_dispose_cancels_pending_retry(self, qapp):
        sched = FakeScheduler()
        factory = flaky_factory(1)
        ctl = CanvasController(scheduler=sched, surface_factory=factory)
        ctl.dispose()
        sched.run_all()
        assert factory.state["calls"] == 1
        assert not ctl.is_ready
