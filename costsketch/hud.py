from __future__ import annotations
from PySide6.QtCore import Qt
from PySide6.QtWidgets import QWidget, QHBoxLayout, QToolButton, QLabel

from .controller import CanvasController


class CostHUD(QWidget):
    """Floating overlay in the view's corner: running totals, zoom and grid controls."""

    def __init__(self, view, controller: CanvasController):
        super().__init__(view.viewport())
        self.view = view
        self.ctl = controller
        self.setObjectName("CostHUD")
        self.setAttribute(Qt.WA_StyledBackground, True)
        self.setAttribute(Qt.WA_TransparentForMouseEvents, False)
        self.setStyleSheet("""
            QWidget#CostHUD { background: rgba(255,255,255,0.95); border:1px solid #e7e8ee; border-radius:12px; }
            QToolButton.hud { border:none; padding:6px; border-radius:10px; font-weight:600; }
            QToolButton.hud:hover { background:#f2f4f7; }
            QToolButton.hud:checked { background:#dbe7ff; }
            QLabel#total { font-weight:700; color:#111827; }
        """)

        lay = QHBoxLayout(self)
        lay.setContentsMargins(8,8,8,8)
        lay.setSpacing(6)

        self.lbl_total = QLabel(self); self.lbl_total.setObjectName("total")
        self.lbl_area = QLabel(self)
        self.lbl_zoom = QLabel(self)
        lay.addWidget(self.lbl_total)
        lay.addWidget(self.lbl_area)

        self.btn_zoom_out = QToolButton(self)
        self.btn_zoom_in = QToolButton(self)
        self.btn_fit = QToolButton(self)
        self.btn_grid = QToolButton(self)

        buttons = [
            (self.btn_zoom_out, "−",    "Zoom out",     self.ctl.zoom_out),
            (self.btn_zoom_in,  "+",    "Zoom in",      self.ctl.zoom_in),
            (self.btn_fit,      "1:1",  "Zoom to fit",  self.ctl.zoom_to_fit),
            (self.btn_grid,     "#",    "Toggle grid",  self._toggle_grid),
        ]
        for btn, text, tooltip, slot in buttons:
            btn.setProperty("class", "hud")
            btn.setText(text)
            btn.setToolTip(tooltip)
            btn.setFixedSize(36,36)
            btn.clicked.connect(lambda _=False, fn=slot: fn())
            lay.addWidget(btn)
        lay.addWidget(self.lbl_zoom)

        self.btn_grid.setCheckable(True)
        self.btn_grid.setChecked(True)

        self.ctl.viewport.zoomChanged.connect(self.set_zoom)
        self.refresh()
        self.set_zoom(self.ctl.zoom_level)
        self.show()
        self.raise_()

    def refresh(self):
        self.lbl_total.setText(f"${self.ctl.get_total_cost():,}")
        self.lbl_area.setText(f"{self.ctl.get_total_area():.1f} m²")
        self.resize(self.sizeHint())

    def set_zoom(self, zoom: float):
        self.lbl_zoom.setText(f"{round(zoom * 100)}%")
        self.resize(self.sizeHint())

    def _toggle_grid(self):
        self.btn_grid.setChecked(self.ctl.toggle_grid())

    def reposition(self):
        margin = 12
        vw = self.view.viewport().width()
        vh = self.view.viewport().height()
        self.move(vw - self.width() - margin, vh - self.height() - margin)
