from __future__ import annotations
from typing import List, Optional
from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QColor
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QFormLayout, QLineEdit, QComboBox,
    QListWidget, QListWidgetItem, QLabel, QPushButton,
)

from .controller import CanvasController
from .models import Room, ShapeType
from .palette import make_icon


class RoomPanel(QWidget):
    """Selected-room editor plus the running cost breakdown."""

    # room id, for the window to select/focus it
    requestFocusRoom = Signal(str)

    def __init__(self, controller: CanvasController, parent=None):
        super().__init__(parent)
        self.ctl = controller
        self._current: Optional[Room] = None

        self.setMinimumWidth(280)
        root = QVBoxLayout(self)
        root.setContentsMargins(8, 8, 8, 8)
        root.setSpacing(10)

        self.lbl_title = QLabel("Nothing selected")
        self.lbl_title.setStyleSheet("font-weight: 600;")
        root.addWidget(self.lbl_title)

        # ------- room -------
        self.frm_room = QWidget()
        fr = QFormLayout(self.frm_room)
        fr.setLabelAlignment(Qt.AlignRight)

        self.ed_name = QLineEdit()
        self.cmb_material = QComboBox()
        for key, rate in self.ctl.costing.rates.items():
            self.cmb_material.addItem(make_icon(22, 16, QColor(rate.color)), rate.name, key)
        self.lbl_shape = QLabel("-")
        self.lbl_quantity = QLabel("-")
        self.lbl_cost = QLabel("-")
        self.btn_delete = QPushButton("Delete room")

        fr.addRow("Name:", self.ed_name)
        fr.addRow("Material:", self.cmb_material)
        fr.addRow("Shape:", self.lbl_shape)
        fr.addRow("Quantity:", self.lbl_quantity)
        fr.addRow("Cost:", self.lbl_cost)
        fr.addRow(self.btn_delete)

        self.ed_name.textEdited.connect(self._apply_name)
        self.cmb_material.currentIndexChanged.connect(self._apply_material)
        self.btn_delete.clicked.connect(self._delete)
        root.addWidget(self.frm_room)

        # ------- breakdown -------
        root.addWidget(QLabel("Cost breakdown:"))
        self.list_rooms = QListWidget()
        self.list_rooms.setMinimumHeight(160)
        self.list_rooms.setStyleSheet("QListWidget{ background:#fafafa; }")
        self.list_rooms.itemDoubleClicked.connect(self._go_to_room)
        root.addWidget(self.list_rooms, 1)

        self.lbl_total = QLabel()
        self.lbl_total.setStyleSheet("font-weight: 600;")
        root.addWidget(self.lbl_total)

        self.clear()
        self.set_rooms([])

    # ---------- API ----------
    def clear(self):
        self._current = None
        self.lbl_title.setText("Nothing selected")
        self.frm_room.setVisible(False)

    def load_room(self, room: Optional[Room]):
        if room is None:
            self.clear()
            return
        self._current = room
        self.lbl_title.setText(f"Room: {room.id}")
        self.frm_room.setVisible(True)

        self.ed_name.blockSignals(True)
        self.cmb_material.blockSignals(True)
        if self.ed_name.text() != room.name:
            self.ed_name.setText(room.name)
        self.cmb_material.setCurrentIndex(self.cmb_material.findData(room.material))
        self.ed_name.blockSignals(False)
        self.cmb_material.blockSignals(False)

        self.lbl_shape.setText(ShapeType.LABELS.get(room.shape_type, room.shape_type))
        self.lbl_quantity.setText(f"{room.quantity:.2f} {room.unit}")
        self.lbl_cost.setText(f"${room.cost:,}")

    def set_rooms(self, rooms: List[Room]):
        self.list_rooms.clear()
        for r in rooms:
            li = QListWidgetItem(f"{r.name}  ·  {r.quantity:.1f} {r.unit}  ·  ${r.cost:,}")
            li.setData(Qt.UserRole, r.id)
            self.list_rooms.addItem(li)
        self.lbl_total.setText(f"Total: ${self.ctl.get_total_cost():,}  ·  {self.ctl.get_total_area():.1f} m²")
        if self._current is not None:
            self.load_room(self.ctl.registry.get(self._current.id))

    # ---------- apply handlers ----------
    def _apply_name(self, text: str):
        if self._current is None: return
        self.ctl.update_room_name(self._current.id, text.strip())

    def _apply_material(self, index: int):
        if self._current is None or index < 0: return
        self.ctl.update_room_material(self._current.id, self.cmb_material.itemData(index))

    def _delete(self):
        if self._current is None: return
        room_id = self._current.id
        self.clear()
        self.ctl.delete_room(room_id)

    def _go_to_room(self, item: QListWidgetItem):
        self.requestFocusRoom.emit(item.data(Qt.UserRole))
