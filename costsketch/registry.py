from __future__ import annotations
import itertools
import logging
from contextlib import contextmanager
from typing import Dict, Iterable, List, Optional

from PySide6.QtCore import QObject, Signal
from PySide6.QtWidgets import QGraphicsItem

from .costing import CostEngine
from .items import local_points, scene_bounds, shape_record, item_scale
from .models import Room

log = logging.getLogger(__name__)


class RoomRegistry(QObject):
    """Authoritative ``id -> Room`` map plus the ``id -> visual item`` arena.

    Visual items never reference their Room; the reverse lookup goes through
    ``_ids`` instead. Every public mutation ends in exactly one
    ``roomsChanged`` emission, and :meth:`batch` folds several mutations into
    one.
    """

    roomsChanged = Signal(list)

    def __init__(self, costing: CostEngine, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.costing = costing
        self._rooms: Dict[str, Room] = {}
        self._items: Dict[str, QGraphicsItem] = {}
        self._ids: Dict[QGraphicsItem, str] = {}
        self._seq = itertools.count(1)
        self._batch_depth = 0
        self._dirty = False

    # ---- notifications ----
    @contextmanager
    def batch(self):
        self._batch_depth += 1
        try:
            yield self
        finally:
            self._batch_depth -= 1
            if self._batch_depth == 0 and self._dirty:
                self._dirty = False
                self.roomsChanged.emit(self.list_all())

    def _changed(self):
        if self._batch_depth:
            self._dirty = True
        else:
            self.roomsChanged.emit(self.list_all())

    # ---- queries ----
    def __len__(self) -> int:
        return len(self._rooms)

    def __contains__(self, room_id: str) -> bool:
        return room_id in self._rooms

    def get(self, room_id: str) -> Optional[Room]:
        return self._rooms.get(room_id)

    def item_for(self, room_id: str) -> Optional[QGraphicsItem]:
        return self._items.get(room_id)

    def list_all(self) -> List[Room]:
        return list(self._rooms.values())

    def total_cost(self) -> int:
        return self.costing.total(self._rooms.values())

    def total_area(self) -> float:
        return sum(r.quantity for r in self._rooms.values() if r.unit == "m²")

    def find_by_item(self, item: Optional[QGraphicsItem]) -> Optional[Room]:
        if item is None:
            return None
        room_id = self._ids.get(item)
        return self._rooms.get(room_id) if room_id else None

    def find_by_active_selection(self, selected: Iterable[QGraphicsItem]) -> Optional[Room]:
        for it in selected:
            room = self.find_by_item(it)
            if room is not None:
                return room
        return None

    # ---- mutations ----
    def add(self, item: QGraphicsItem, shape_type: str, material: str, name: str) -> Room:
        room = Room(id=f"room_{next(self._seq)}", name=name, shape_type=shape_type, material=material)
        self._measure(room, item)
        self._rooms[room.id] = room
        self._items[room.id] = item
        self._ids[item] = room.id
        log.info("room %s added: %s %s, %.2f %s, $%d",
                 room.id, shape_type, material, room.quantity, room.unit, room.cost,
                 extra={"room_id": room.id})
        self._changed()
        return room

    def remove(self, room_id: str) -> Optional[Room]:
        room = self._rooms.pop(room_id, None)
        if room is None:
            return None
        item = self._items.pop(room_id)
        self._ids.pop(item, None)
        scene = item.scene()
        if scene is not None:
            scene.removeItem(item)
        log.info("room %s removed ($%d)", room_id, room.cost, extra={"room_id": room_id})
        self._changed()
        return room

    def update_material(self, room_id: str, material: str) -> Optional[Room]:
        room = self._rooms.get(room_id)
        if room is None:
            return None
        rate = self.costing.rates[material]
        room.material = material
        room.cost = self.costing.cost_for_quantity(room.quantity, material)
        item = self._items[room_id]
        if hasattr(item, "set_material_color"):
            item.set_material_color(rate.color)
        self._tooltip(room, item)
        self._changed()
        return room

    def update_name(self, room_id: str, name: str) -> Optional[Room]:
        room = self._rooms.get(room_id)
        if room is None:
            return None
        room.name = name
        self._tooltip(room, self._items[room_id])
        self._changed()
        return room

    def refresh_item(self, item: QGraphicsItem) -> Optional[Room]:
        """Re-measure a room after its shape was moved, resized or scaled."""
        room_id = self._ids.get(item)
        if room_id is None:
            return None
        room = self._rooms[room_id]
        self._measure(room, item)
        self._changed()
        return room

    def forget_item(self, item: QGraphicsItem) -> Optional[Room]:
        """Drop the room whose shape left the scene without going through :meth:`remove`."""
        room_id = self._ids.pop(item, None)
        if room_id is None:
            return None
        self._items.pop(room_id, None)
        room = self._rooms.pop(room_id)
        log.info("room %s dropped with its shape", room_id, extra={"room_id": room_id})
        self._changed()
        return room

    def clear(self):
        with self.batch():
            for room_id in list(self._rooms):
                self.remove(room_id)
            self._dirty = True

    # ---- helpers ----
    def _measure(self, room: Room, item: QGraphicsItem):
        shape = shape_record(item)
        sx, sy = item_scale(item)
        bounds = scene_bounds(item)
        room.width, room.height = bounds.width(), bounds.height()
        room.x, room.y = bounds.left(), bounds.top()
        room.points = local_points(item)
        room.quantity = self.costing.real_quantity(shape, sx, sy)
        room.unit = self.costing.unit_label(shape)
        room.cost = self.costing.cost_for_quantity(room.quantity, room.material)
        self._tooltip(room, item)

    @staticmethod
    def _tooltip(room: Room, item: QGraphicsItem):
        item.setToolTip(f"{room.name}\n{room.quantity:.1f} {room.unit} · ${room.cost}")
