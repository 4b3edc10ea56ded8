"""The drawing surface and everything that hangs off it.

:class:`CanvasController` is the single owner of the scene, the room
registry, the drawing state machine, the viewport, the background layer and
the grid. Create one per editor canvas and :meth:`~CanvasController.dispose`
it (or use it as a context manager) when the canvas goes away.
"""
from __future__ import annotations
import logging
from typing import Callable, List, Optional

from PySide6.QtCore import QObject, QPointF, QSizeF, QTimer, Signal
from PySide6.QtGui import QTransform
from PySide6.QtWidgets import QGraphicsItem

from .background import BackgroundOverlayManager, FileConverter
from .costing import CostEngine
from .drawing import DrawingStateMachine
from .errors import AssetLoadFailure, InitializationFailure, UnknownMaterialError
from .materials import MaterialRateTable
from .models import BackgroundAsset, Room, ShapeType
from .registry import RoomRegistry
from .scene import PlanScene, PlanView
from .utils import (DEFAULT_MATERIAL, INIT_MAX_ATTEMPTS, INIT_RETRY_DELAY_MS, SCENE_H, SCENE_W)
from .viewport import ViewportController

log = logging.getLogger(__name__)

RoomsCallback = Callable[[List[Room]], None]


class CanvasController(QObject):
    ready = Signal()
    initFailed = Signal(str)

    def __init__(self, width: float = SCENE_W, height: float = SCENE_H,
                 view: Optional[PlanView] = None,
                 rates: Optional[MaterialRateTable] = None,
                 converter: Optional[FileConverter] = None,
                 scheduler: Callable = QTimer.singleShot,
                 surface_factory: Callable[..., PlanScene] = PlanScene,
                 retry_delay_ms: int = INIT_RETRY_DELAY_MS,
                 max_attempts: int = INIT_MAX_ATTEMPTS,
                 parent: Optional[QObject] = None):
        super().__init__(parent)
        self.width = float(width)
        self.height = float(height)
        self.view = view
        self.costing = CostEngine(rates)
        self.registry = RoomRegistry(self.costing)
        self.viewport = ViewportController()
        self.converter = converter
        self.selected_material = DEFAULT_MATERIAL
        self.current_shape = ShapeType.RECTANGLE

        self.scene: Optional[PlanScene] = None
        self.drawing: Optional[DrawingStateMachine] = None
        self.background: Optional[BackgroundOverlayManager] = None
        self.init_error: Optional[InitializationFailure] = None

        self._scheduler = scheduler
        self._surface_factory = surface_factory
        self._retry_delay_ms = retry_delay_ms
        self._max_attempts = max(1, int(max_attempts))
        self._attempts = 0
        self._rooms_cb: Optional[RoomsCallback] = None
        self._disposed = False

        self.registry.roomsChanged.connect(self._on_rooms_changed)
        self._attempt_init()

    # ---- lifecycle ----
    @property
    def is_ready(self) -> bool:
        return self.scene is not None and not self._disposed

    @property
    def attempts(self) -> int:
        return self._attempts

    def _attempt_init(self):
        if self._disposed or self.scene is not None:
            return
        self._attempts += 1
        try:
            scene = self._surface_factory(self.width, self.height)
        except Exception as e:
            if self._attempts >= self._max_attempts:
                self.init_error = InitializationFailure(
                    f"Drawing surface unavailable after {self._attempts} attempts: {e}", self._attempts)
                log.error("%s", self.init_error)
                self.initFailed.emit(str(self.init_error))
                return
            log.warning("surface init attempt %d/%d failed (%s), retrying in %d ms",
                        self._attempts, self._max_attempts, e, self._retry_delay_ms)
            self._scheduler(self._retry_delay_ms, self._attempt_init)
            return
        self._wire(scene)
        log.info("drawing surface ready (%dx%d) after %d attempt(s)",
                 self.width, self.height, self._attempts)
        self.ready.emit()

    def _wire(self, scene: PlanScene):
        self.scene = scene
        self.drawing = DrawingStateMachine(scene, self.viewport, self._commit_shape, self._current_color)
        self.drawing.set_shape(self.current_shape)
        scene.drawing = self.drawing
        self.background = BackgroundOverlayManager(scene, QSizeF(self.width, self.height), self.converter)

        scene.shapeModified.connect(self.registry.refresh_item)
        scene.shapeDetached.connect(self.registry.forget_item)
        scene.deleteRequested.connect(self._delete_selected)
        self.background.layerChanged.connect(scene.grid.set_suppressed)

        if self.view is not None:
            self.view.setScene(scene)
            self.view.viewport_ctl = self.viewport
            self.viewport.attach(self.view)

    def _require_surface(self) -> PlanScene:
        if self._disposed:
            raise InitializationFailure("Canvas controller has been disposed", self._attempts)
        if self.scene is None:
            raise self.init_error or InitializationFailure("Drawing surface is not ready yet", self._attempts)
        return self.scene

    def dispose(self):
        """Tear down every owned item and release the surface. Safe to call twice."""
        if self._disposed:
            return
        self._disposed = True
        scene = self.scene
        try:
            if scene is not None:
                self.drawing.reset()
                self.registry.clear()
                self.background.remove()
                scene.shapeModified.disconnect(self.registry.refresh_item)
                scene.shapeDetached.disconnect(self.registry.forget_item)
                scene.deleteRequested.disconnect(self._delete_selected)
                scene.drawing = None
                scene.clear()
        finally:
            self.viewport.detach()
            if self.view is not None:
                self.view.viewport_ctl = None
                self.view.setScene(None)
            self._rooms_cb = None
            self.scene = None
            self.drawing = None
            self.background = None
            if scene is not None:
                scene.deleteLater()
            log.info("canvas controller disposed")

    def __enter__(self) -> "CanvasController":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.dispose()
        return False

    # ---- drawing callbacks ----
    def _current_color(self) -> str:
        return self.costing.rates[self.selected_material].color

    def _commit_shape(self, item: QGraphicsItem, shape_type: str) -> Room:
        return self.registry.add(item, shape_type, self.selected_material,
                                 f"{ShapeType.LABELS[shape_type]} Room")

    def _on_rooms_changed(self, rooms: List[Room]):
        if self._rooms_cb is not None:
            self._rooms_cb(rooms)

    def _delete_selected(self):
        room = self.get_selected_room()
        if room is not None:
            self.delete_room(room.id)

    # ---- tools ----
    def set_selected_material(self, material: str):
        self.costing.rates[material]  # raises UnknownMaterialError
        self.selected_material = material

    def set_current_shape(self, shape_type: str):
        if shape_type not in ShapeType.ALL:
            raise ValueError(f"unknown shape type: {shape_type!r}")
        self.current_shape = shape_type
        if self.drawing is not None:
            self.drawing.set_shape(shape_type)

    def get_current_shape(self) -> str:
        return self.current_shape

    # ---- rooms ----
    def add_room(self, name: str = "New Room") -> Room:
        """Drop a fixed-size template of the current shape in the middle of the canvas."""
        self._require_surface()
        shape_type = self.current_shape
        # freehand has no template; the rectangle stands in for it
        if shape_type == ShapeType.FREEHAND:
            shape_type = ShapeType.RECTANGLE
        center = QPointF(self.width / 2, self.height / 2)
        item = self.drawing.factory.create_template(shape_type, self._current_color(), center)
        room = self.registry.add(item, shape_type, self.selected_material, name)
        # the new room becomes the active selection
        self.scene.clearSelection()
        item.setSelected(True)
        return room

    def delete_room(self, room_id: str) -> bool:
        if self.registry.remove(room_id) is None:
            log.warning("delete_room: unknown room id %r", room_id, extra={"room_id": room_id})
            return False
        return True

    def update_room_material(self, room_id: str, material: str) -> Optional[Room]:
        if material not in self.costing.rates:
            raise UnknownMaterialError(material)
        room = self.registry.update_material(room_id, material)
        if room is None:
            log.warning("update_room_material: unknown room id %r", room_id, extra={"room_id": room_id})
        return room

    def update_room_name(self, room_id: str, name: str) -> Optional[Room]:
        room = self.registry.update_name(room_id, name)
        if room is None:
            log.warning("update_room_name: unknown room id %r", room_id, extra={"room_id": room_id})
        return room

    def scale_room(self, room_id: str, sx: float, sy: float) -> Optional[Room]:
        """Apply a scale transform to a room's shape; its quantity and cost follow."""
        item = self.registry.item_for(room_id)
        if item is None:
            log.warning("scale_room: unknown room id %r", room_id, extra={"room_id": room_id})
            return None
        item.setTransform(QTransform.fromScale(sx, sy))
        # the transform change has already re-measured the room
        return self.registry.get(room_id)

    def clear_canvas(self):
        """Remove every room and the background; one change notification."""
        self._require_surface()
        with self.registry.batch():
            self.drawing.reset()
            self.registry.clear()
            self.background.remove()
            self.scene.grid.reset()
        log.info("canvas cleared")

    # ---- viewport / grid ----
    def zoom_in(self) -> bool:
        return self.viewport.zoom_in()

    def zoom_out(self) -> bool:
        return self.viewport.zoom_out()

    def zoom_to_fit(self) -> bool:
        return self.viewport.zoom_to_fit()

    @property
    def zoom_level(self) -> float:
        return self.viewport.zoom

    def toggle_grid(self) -> bool:
        return self._require_surface().grid.toggle()

    # ---- background ----
    async def load_background_image(self, asset: BackgroundAsset) -> bool:
        """Load ``asset`` under the drawing.

        Assets that needed conversion and failed still get a labeled
        placeholder layer before the :class:`AssetLoadFailure` propagates,
        unless a newer load or a removal has overtaken the failed one.
        """
        self._require_surface()
        background = self.background
        try:
            return await background.load(asset)
        except AssetLoadFailure as e:
            log.warning("background %s failed: %s", asset.name, e, extra={"asset": asset.name})
            if e.convertible and not self._disposed:
                background.insert_placeholder(asset, e.generation)
            raise

    def remove_background_image(self):
        self._require_surface()
        self.background.remove()

    def set_background_opacity(self, opacity: float):
        self._require_surface()
        self.background.set_opacity(opacity)

    # ---- queries ----
    def on_rooms_change(self, callback: Optional[RoomsCallback]):
        self._rooms_cb = callback

    def get_selected_room(self) -> Optional[Room]:
        if self.scene is None:
            return None
        return self.registry.find_by_active_selection(self.scene.selectedItems())

    def get_total_cost(self) -> int:
        return self.registry.total_cost()

    def get_total_area(self) -> float:
        return self.registry.total_area()

    def get_rooms(self) -> List[Room]:
        return self.registry.list_all()
