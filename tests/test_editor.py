"""
test_editor.py — smoke tests for the editor shell widgets.
"""

import asyncio

import pytest
from PySide6.QtCore import Qt

from costsketch.hud import CostHUD
from costsketch.models import ShapeType
from costsketch.palette import ToolPalette
from costsketch.properties import RoomPanel
from costsketch.scene import PlanView


class TestToolPalette:

    def test_lists_every_material(self, qapp):
        pal = ToolPalette()
        keys = [pal.list_materials.item(i).data(Qt.UserRole) for i in range(pal.list_materials.count())]
        assert len(keys) == 19
        assert pal.list_materials.currentItem().data(Qt.UserRole) == "timber"

    def test_signals(self, qapp):
        pal = ToolPalette()
        shapes, materials = [], []
        pal.shapeChosen.connect(shapes.append)
        pal.materialChosen.connect(materials.append)
        pal._shape_buttons[ShapeType.POLYGON].click()
        pal.select_material("cork")
        assert shapes == [ShapeType.POLYGON]
        assert materials == ["cork"]

    def test_opacity_slider(self, qapp):
        pal = ToolPalette()
        seen = []
        pal.opacityChanged.connect(seen.append)
        pal.sl_opacity.setValue(40)
        assert seen == [pytest.approx(0.4)]


class TestRoomPanel:

    def test_breakdown_and_edits(self, controller):
        panel = RoomPanel(controller)
        controller.on_rooms_change(panel.set_rooms)
        room = controller.add_room()
        assert panel.list_rooms.count() == 1
        assert "$96" in panel.lbl_total.text()

        panel.load_room(room)
        assert not panel.frm_room.isHidden()
        panel.cmb_material.setCurrentIndex(panel.cmb_material.findData("marble"))
        assert room.material == "marble"
        assert panel.lbl_cost.text() == "$180"

        panel.ed_name.setText("Lounge")
        panel._apply_name("Lounge")
        assert room.name == "Lounge"

        panel._delete()
        assert controller.get_rooms() == []
        assert panel.list_rooms.count() == 0

    def test_clear(self, controller):
        panel = RoomPanel(controller)
        panel.load_room(None)
        assert panel.frm_room.isHidden()
        assert panel.lbl_title.text() == "Nothing selected"


def test_hud_tracks_totals_and_zoom(qapp):
    from costsketch.controller import CanvasController
    view = PlanView()
    with CanvasController(view=view) as ctl:
        hud = CostHUD(view, ctl)
        ctl.add_room()
        hud.refresh()
        assert hud.lbl_total.text() == "$96"
        assert hud.lbl_area.text() == "0.8 m²"
        hud.btn_zoom_in.click()
        assert hud.lbl_zoom.text() == "120%"
        hud.btn_grid.click()
        assert not hud.btn_grid.isChecked()
        assert not ctl.scene.grid.user_visible


def test_main_window_builds(qapp):
    from costsketch_editor import MainWindow
    win = MainWindow()
    try:
        win.ctl.add_room()
        assert win.props_panel.list_rooms.count() == 1
        assert win.props_panel.lbl_title.text() == "Room: room_1"
        assert "$96" in win.hud.lbl_total.text()
    finally:
        win.ctl.dispose()
        win.deleteLater()


def test_background_task_is_retained_until_done(qapp, tmp_path, png_bytes):
    from costsketch_editor import MainWindow
    path = tmp_path / "plan.png"
    path.write_bytes(png_bytes())
    win = MainWindow()
    try:
        async def go():
            task = win._spawn(win._load_background(str(path)))
            assert task in win._tasks
            await task
            await asyncio.sleep(0)

        asyncio.run(go())
        assert win._tasks == set()
        assert win.ctl.background.has_background
        assert not win.ctl.background.is_placeholder
    finally:
        win.ctl.dispose()
        win.deleteLater()


def test_read_bytes(tmp_path):
    from costsketch_editor import read_bytes
    path = tmp_path / "a.bin"
    path.write_bytes(b"\x00\x01")
    assert read_bytes(str(path)) == b"\x00\x01"
    with pytest.raises(OSError):
        read_bytes(str(tmp_path / "missing.bin"))
