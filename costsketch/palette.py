from __future__ import annotations
from typing import Dict, Optional
from PySide6.QtCore import Qt, QPointF, QRectF, QSize, Signal
from PySide6.QtGui import QIcon, QPixmap, QPainter, QPainterPath, QPen, QFont, QColor, QPolygonF
from PySide6.QtWidgets import (QWidget, QVBoxLayout, QHBoxLayout, QGridLayout, QToolButton, QLabel,
                               QListWidget, QListWidgetItem, QPushButton, QSlider)

from .materials import MATERIALS, MaterialRateTable
from .models import ShapeType
from .utils import BACKGROUND_OPACITY, DEFAULT_MATERIAL


def make_icon(w: int, h: int, color: QColor, label: str = "") -> QIcon:
    pm = QPixmap(w, h); pm.fill(Qt.transparent)
    p = QPainter(pm); p.setRenderHint(QPainter.Antialiasing, True)
    p.setBrush(color); p.setPen(QPen(QColor(70,70,70), 1))
    r = QRectF(2, 2, w-4, h-4)
    p.drawRoundedRect(r, 4, 4)
    if label:
        p.setPen(Qt.black); p.setFont(QFont("", 8, QFont.Bold))
        p.drawText(r, Qt.AlignCenter, label)
    p.end()
    return QIcon(pm)


def make_shape_icon(shape_type: str, size: int = 28) -> QIcon:
    pm = QPixmap(size, size); pm.fill(Qt.transparent)
    p = QPainter(pm); p.setRenderHint(QPainter.Antialiasing, True)
    p.setPen(QPen(QColor(55, 65, 81), 2)); p.setBrush(QColor(59, 130, 246, 60))
    m = 5.0; r = QRectF(m, m, size - 2*m, size - 2*m)
    if shape_type == ShapeType.RECTANGLE:
        p.drawRect(r)
    elif shape_type == ShapeType.CIRCLE:
        p.drawEllipse(r)
    elif shape_type == ShapeType.LINE:
        p.drawLine(r.topLeft(), r.bottomRight())
    elif shape_type == ShapeType.POLYGON:
        c = r.center(); w = r.width() / 2
        p.drawPolygon(QPolygonF([QPointF(c.x(), r.top()), QPointF(r.right(), c.y() - w*0.2),
                                 QPointF(c.x() + w*0.6, r.bottom()), QPointF(c.x() - w*0.6, r.bottom()),
                                 QPointF(r.left(), c.y() - w*0.2)]))
    else:
        path = QPainterPath(r.bottomLeft())
        path.cubicTo(r.topLeft(), r.bottomRight(), r.topRight())
        p.setBrush(Qt.NoBrush); p.drawPath(path)
    p.end()
    return QIcon(pm)


class ToolPalette(QWidget):
    """Shape tools, material catalogue and background controls."""

    shapeChosen = Signal(str)
    materialChosen = Signal(str)
    addRoomRequested = Signal()
    clearRequested = Signal()
    backgroundRequested = Signal()
    backgroundRemoveRequested = Signal()
    opacityChanged = Signal(float)

    def __init__(self, rates: Optional[MaterialRateTable] = None, parent=None):
        super().__init__(parent)
        self.rates = rates if rates is not None else MATERIALS
        self._shape_buttons: Dict[str, QToolButton] = {}
        self._build_ui()

    def _build_ui(self):
        root = QVBoxLayout(self)
        root.setContentsMargins(8, 8, 8, 8)
        root.setSpacing(8)

        # ------- shapes -------
        root.addWidget(self._caption("Shapes"))
        shapes = QWidget(self); grid = QGridLayout(shapes)
        grid.setContentsMargins(0, 0, 0, 0)
        grid.setHorizontalSpacing(6); grid.setVerticalSpacing(6)
        for i, st in enumerate(ShapeType.ALL):
            b = QToolButton(shapes)
            b.setProperty("class", "category")
            b.setCheckable(True)
            b.setAutoExclusive(True)
            b.setIcon(make_shape_icon(st))
            b.setIconSize(QSize(28, 28))
            b.setFixedSize(44, 44)
            b.setToolTip(ShapeType.LABELS[st])
            b.clicked.connect(lambda _=False, s=st: self.shapeChosen.emit(s))
            self._shape_buttons[st] = b
            grid.addWidget(b, i // 3, i % 3)
        self._shape_buttons[ShapeType.RECTANGLE].setChecked(True)
        root.addWidget(shapes)

        row = QHBoxLayout()
        self.btn_add = QPushButton("Add Room")
        self.btn_clear = QPushButton("Clear")
        self.btn_add.clicked.connect(lambda: self.addRoomRequested.emit())
        self.btn_clear.clicked.connect(lambda: self.clearRequested.emit())
        row.addWidget(self.btn_add); row.addWidget(self.btn_clear)
        root.addLayout(row)

        # ------- materials -------
        root.addWidget(self._caption("Materials"))
        self.list_materials = QListWidget()
        self.list_materials.setStyleSheet("QListWidget{ background:#fafafa; }")
        self.list_materials.setIconSize(QSize(22, 16))
        for tier in ("free", "pro"):
            for rate in self.rates.by_tier(tier):
                li = QListWidgetItem(make_icon(22, 16, QColor(rate.color)),
                                     f"{rate.name}  ${rate.cost_per_unit:g}/m²")
                li.setData(Qt.UserRole, rate.key)
                self.list_materials.addItem(li)
        self.list_materials.currentItemChanged.connect(self._on_material)
        root.addWidget(self.list_materials, 1)
        self.select_material(DEFAULT_MATERIAL)

        # ------- background -------
        root.addWidget(self._caption("Background"))
        row = QHBoxLayout()
        self.btn_bg = QPushButton("Load…")
        self.btn_bg_remove = QPushButton("Remove")
        self.btn_bg.clicked.connect(lambda: self.backgroundRequested.emit())
        self.btn_bg_remove.clicked.connect(lambda: self.backgroundRemoveRequested.emit())
        row.addWidget(self.btn_bg); row.addWidget(self.btn_bg_remove)
        root.addLayout(row)

        self.sl_opacity = QSlider(Qt.Horizontal)
        self.sl_opacity.setRange(0, 100)
        self.sl_opacity.setValue(int(BACKGROUND_OPACITY * 100))
        self.sl_opacity.valueChanged.connect(lambda v: self.opacityChanged.emit(v / 100.0))
        root.addWidget(self.sl_opacity)

    def _caption(self, text: str) -> QLabel:
        lbl = QLabel(text)
        lbl.setStyleSheet("color:#667085; font-weight:600;")
        return lbl

    def _on_material(self, cur: Optional[QListWidgetItem], _prev=None):
        if cur is not None:
            self.materialChosen.emit(cur.data(Qt.UserRole))

    # ---------- API ----------
    def select_shape(self, shape_type: str):
        b = self._shape_buttons.get(shape_type)
        if b is not None:
            b.setChecked(True)

    def select_material(self, key: str):
        for i in range(self.list_materials.count()):
            li = self.list_materials.item(i)
            if li.data(Qt.UserRole) == key:
                self.list_materials.setCurrentItem(li)
                return
