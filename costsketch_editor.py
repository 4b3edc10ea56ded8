#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from __future__ import annotations
import sys, os, asyncio, logging, mimetypes
from typing import Set
from PySide6.QtCore import Qt, QSizeF
from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import (
    QApplication, QMainWindow, QToolBar, QStatusBar, QFileDialog, QMessageBox,
    QDockWidget, QStyle
)
from PySide6 import QtAsyncio

from costsketch import CanvasController, PlanView, BackgroundAsset, AssetLoadFailure
from costsketch.hud import CostHUD
from costsketch.logging_config import setup_logging
from costsketch.palette import ToolPalette
from costsketch.properties import RoomPanel
from costsketch.utils import RASTER_EXTENSIONS, CONVERTIBLE_EXTENSIONS, SCENE_W, SCENE_H

log = logging.getLogger("costsketch.editor")

BACKGROUND_FILTER = "Plans ({});;All files (*)".format(
    " ".join("*" + e for e in RASTER_EXTENSIONS + tuple(CONVERTIBLE_EXTENSIONS)))


def read_bytes(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()


class MainWindow(QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("CostSketch — floor plan takeoff")
        self.resize(1280, 860)
        self._tasks: Set[asyncio.Future] = set()

        # 1) canvas
        self.view = PlanView()
        self.setCentralWidget(self.view)
        self.ctl = CanvasController(SCENE_W, SCENE_H, view=self.view, parent=self)
        self.ctl.initFailed.connect(lambda msg: QMessageBox.critical(self, "Canvas unavailable", msg))
        self.ctl.ready.connect(self._on_ready)

        # 2) room panel, created before any addDockWidget()
        self.props_panel = RoomPanel(self.ctl, self)
        self.props_dock = QDockWidget("Room", self)
        self.props_dock.setWidget(self.props_panel)
        self.props_dock.setAllowedAreas(Qt.LeftDockWidgetArea | Qt.RightDockWidgetArea)
        self.props_dock.setMinimumWidth(280)
        self.props_dock.setMaximumWidth(560)
        self.addDockWidget(Qt.RightDockWidgetArea, self.props_dock)

        # 3) palette
        self.palette = ToolPalette(self.ctl.costing.rates)
        self.palette_dock = QDockWidget("Tools", self)
        self.palette_dock.setWidget(self.palette)
        self.palette_dock.setAllowedAreas(Qt.LeftDockWidgetArea | Qt.RightDockWidgetArea)
        self.palette_dock.setMinimumWidth(220)
        self.palette_dock.setMaximumWidth(520)
        self.addDockWidget(Qt.LeftDockWidgetArea, self.palette_dock)

        self.hud = CostHUD(self.view, self.ctl)

        # 4) toolbar/status
        self._build_toolbar()
        self.setStatusBar(QStatusBar(self))

        # 5) wiring
        self.palette.shapeChosen.connect(self.ctl.set_current_shape)
        self.palette.materialChosen.connect(self.ctl.set_selected_material)
        self.palette.addRoomRequested.connect(self._add_room)
        self.palette.clearRequested.connect(self._clear)
        self.palette.backgroundRequested.connect(self._open_background_dialog)
        self.palette.backgroundRemoveRequested.connect(self._remove_background)
        self.palette.opacityChanged.connect(self._set_opacity)
        self.props_panel.requestFocusRoom.connect(self._focus_room)
        self.ctl.on_rooms_change(self._on_rooms)
        self.view.scaleChanged.connect(lambda s: self._status(f"Zoom: {round(s*100)}%"))

        self._on_ready()

    def _on_ready(self):
        if not self.ctl.is_ready:
            return
        self.ctl.scene.selectionChanged.connect(self._on_scene_selection)
        self._update_status()

    def _build_toolbar(self):
        tb = QToolBar("Toolbar", self)
        tb.setMovable(False)
        tb.setIconSize(QSizeF(18, 18).toSize())
        tb.setToolButtonStyle(Qt.ToolButtonTextBesideIcon)
        self.addToolBar(Qt.TopToolBarArea, tb)
        style = self.style()

        self.act_background = QAction(style.standardIcon(QStyle.SP_DirOpenIcon), "Background…", self)
        self.act_background.setShortcut(QKeySequence("Ctrl+O"))
        self.act_background.triggered.connect(self._open_background_dialog)

        self.act_add = QAction(style.standardIcon(QStyle.SP_FileDialogNewFolder), "Add room", self)
        self.act_add.setShortcut(QKeySequence("Ctrl+N"))
        self.act_add.triggered.connect(self._add_room)

        self.act_clear = QAction(style.standardIcon(QStyle.SP_DialogResetButton), "Clear", self)
        self.act_clear.triggered.connect(self._clear)

        self.act_zoom_in = QAction("Zoom in", self)
        self.act_zoom_in.setShortcut(QKeySequence.ZoomIn)
        self.act_zoom_in.triggered.connect(self.ctl.zoom_in)
        self.act_zoom_out = QAction("Zoom out", self)
        self.act_zoom_out.setShortcut(QKeySequence.ZoomOut)
        self.act_zoom_out.triggered.connect(self.ctl.zoom_out)
        self.act_fit = QAction("Fit", self)
        self.act_fit.setShortcut(QKeySequence("Ctrl+0"))
        self.act_fit.triggered.connect(self.ctl.zoom_to_fit)

        self.act_toggle_props = QAction(style.standardIcon(QStyle.SP_FileDialogInfoView),
                                        "Room panel", self, checkable=True)
        self.act_toggle_palette = QAction(style.standardIcon(QStyle.SP_DirIcon),
                                          "Tools", self, checkable=True)
        def _sync():
            self.act_toggle_props.setChecked(not self.props_dock.isHidden())
            self.act_toggle_palette.setChecked(not self.palette_dock.isHidden())
        _sync()
        self.act_toggle_props.toggled.connect(lambda on: (self.props_dock.show() if on else self.props_dock.hide()))
        self.act_toggle_palette.toggled.connect(lambda on: (self.palette_dock.show() if on else self.palette_dock.hide()))
        self.props_dock.visibilityChanged.connect(lambda _: _sync())
        self.palette_dock.visibilityChanged.connect(lambda _: _sync())

        for a in (self.act_background, self.act_add, self.act_clear):
            tb.addAction(a)
        tb.addSeparator()
        for a in (self.act_zoom_out, self.act_zoom_in, self.act_fit):
            tb.addAction(a)
        tb.addSeparator()
        tb.addAction(self.act_toggle_palette)
        tb.addAction(self.act_toggle_props)

    # ---------- handlers ----------
    def _on_rooms(self, rooms):
        self.props_panel.set_rooms(rooms)
        self.hud.refresh()
        self.hud.reposition()
        self._update_status()

    def _on_scene_selection(self):
        room = self.ctl.get_selected_room()
        self.props_panel.load_room(room)
        if room is not None and self.props_dock.isHidden():
            self.props_dock.show()
            self.props_dock.raise_()

    def _focus_room(self, room_id: str):
        item = self.ctl.registry.item_for(room_id)
        if item is None: return
        self.ctl.scene.clearSelection()
        item.setSelected(True)
        room = self.ctl.registry.get(room_id)
        self._status(f"Selected: {room.name}")

    def _add_room(self):
        room = self.ctl.add_room()
        self._status(f"Added {room.name}: ${room.cost:,}")

    def _clear(self):
        if QMessageBox.question(self, "Clear canvas", "Remove every room and the background?") \
                != QMessageBox.Yes:
            return
        self.ctl.clear_canvas()
        self.palette.sl_opacity.setValue(int(self.ctl.background.opacity * 100))

    def _remove_background(self):
        self.ctl.remove_background_image()

    def _set_opacity(self, value: float):
        self.ctl.set_background_opacity(value)

    def _open_background_dialog(self):
        path, _ = QFileDialog.getOpenFileName(self, "Load background plan", "", BACKGROUND_FILTER)
        if not path:
            return
        self._spawn(self._load_background(path))

    def _spawn(self, coro) -> asyncio.Future:
        # the loop only keeps weak references to tasks
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _load_background(self, path: str):
        name = os.path.basename(path)
        self._status(f"Loading {name}…")
        try:
            data = await asyncio.to_thread(read_bytes, path)
        except OSError as e:
            log.warning("cannot read %s: %s", path, e, extra={"asset": name})
            QMessageBox.critical(self, "Background", str(e))
            return
        asset = BackgroundAsset(name, data, mimetypes.guess_type(path)[0] or "")
        try:
            if await self.ctl.load_background_image(asset):
                self._status(f"Background: {asset.name}")
        except AssetLoadFailure as e:
            if e.convertible:
                self._status(f"{asset.name} shown as placeholder: {e}")
            else:
                QMessageBox.warning(self, "Background", str(e))

    def _status(self, text: str):
        self.statusBar().showMessage(text, 3000)

    def _update_status(self):
        self.statusBar().showMessage(
            f"Rooms: {len(self.ctl.registry)} | "
            f"Total: ${self.ctl.get_total_cost():,} | "
            f"Canvas: {int(SCENE_W)}×{int(SCENE_H)} px"
        )

    def resizeEvent(self, e):
        super().resizeEvent(e)
        self.hud.reposition()

    def closeEvent(self, e):
        self.ctl.dispose()
        super().closeEvent(e)


def main():
    setup_logging(os.environ.get("COSTSKETCH_LOG_LEVEL", "INFO"),
                  json_output=os.environ.get("COSTSKETCH_LOG_JSON") == "1")
    app = QApplication(sys.argv)
    log.info("starting editor, canvas %dx%d", SCENE_W, SCENE_H)
    win = MainWindow()
    win.show()
    QtAsyncio.run(handle_sigint=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())
