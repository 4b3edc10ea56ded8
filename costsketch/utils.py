from __future__ import annotations
import math
from PySide6.QtCore import QRectF, QPointF
from PySide6.QtGui import QColor

# ===== Canvas =====
SCENE_W = 800.0
SCENE_H = 500.0
CANVAS_BG = QColor("#F9FAFB")

# ===== Grid visuals =====
GRID_STEP = 20.0
MAJOR_EVERY = 5
GRID_LINE = QColor("#E5E7EB")
GRID_MINOR_W = 0.5
GRID_MAJOR_W = 1.5
GRID_OPACITY = 0.7

# ===== Viewport =====
ZOOM_MIN = 0.1
ZOOM_MAX = 20.0
ZOOM_IN_FACTOR = 1.2
ZOOM_OUT_FACTOR = 0.8
WHEEL_ZOOM_BASE = 0.999
WHEEL_DELTA_LIMIT = 10_000

# ===== Takeoff units =====
LINEAR_UNIT_PX = 100.0       # px per metre
AREA_UNIT_PX = 10_000.0      # px² per m²
DEFAULT_MATERIAL = "timber"

# ===== Shapes =====
SHAPE_FILL_ALPHA = 0x40
SHAPE_STROKE_W = 2
LINE_STROKE_W = 4
FREEHAND_STROKE_W = 3
TEMPLATE_W = 100.0
TEMPLATE_H = 80.0
TEMPLATE_RADIUS = 50.0
TEMPLATE_PENTAGON = [(50, 0), (100, 25), (75, 75), (25, 75), (0, 25)]
TEMPLATE_LINE = (0.0, 0.0, 100.0, 100.0)

# ===== Background =====
BACKGROUND_OPACITY = 0.7
BACKGROUND_Z = -10_000
PREVIEW_Z = 10_000
RASTER_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif", ".bmp", ".webp")
CONVERTIBLE_EXTENSIONS = {".pdf": "PDF", ".dwg": "DWG CAD", ".dxf": "DXF CAD"}
PLACEHOLDER_CAD_COLOR = QColor("#10B981")
PLACEHOLDER_PDF_COLOR = QColor("#3B82F6")

# ===== Surface init =====
INIT_RETRY_DELAY_MS = 250
INIT_MAX_ATTEMPTS = 5


def clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))


def round_half_up(v: float) -> int:
    return int(math.floor(v + 0.5))


def fill_color(hex_color: str, alpha: int = SHAPE_FILL_ALPHA) -> QColor:
    c = QColor(hex_color)
    c.setAlpha(alpha)
    return c


def norm_rect(a: QPointF, b: QPointF) -> QRectF:
    x = min(a.x(), b.x()); y = min(a.y(), b.y())
    return QRectF(x, y, abs(b.x() - a.x()), abs(b.y() - a.y()))
