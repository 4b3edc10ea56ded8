from .errors import CostSketchError, InitializationFailure, AssetLoadFailure, UnknownMaterialError
from .models import Room, ShapeType, DrawState, BackgroundAsset, ConversionResult
from .materials import MaterialRate, MaterialRateTable, MATERIALS
from .geometry import Rectangle, Circle, Line, Polygon, Freehand, Shape
from .costing import CostEngine
from .registry import RoomRegistry
from .viewport import ViewportController
from .grid import GridRenderer
from .background import BackgroundOverlayManager, FileConverter, NullConverter
from .drawing import DrawingStateMachine
from .scene import PlanScene, PlanView
from .controller import CanvasController

__all__ = [
    "CanvasController", "PlanScene", "PlanView",
    "RoomRegistry", "DrawingStateMachine", "ViewportController", "GridRenderer",
    "BackgroundOverlayManager", "FileConverter", "NullConverter",
    "CostEngine", "MaterialRate", "MaterialRateTable", "MATERIALS",
    "Rectangle", "Circle", "Line", "Polygon", "Freehand", "Shape",
    "Room", "ShapeType", "DrawState", "BackgroundAsset", "ConversionResult",
    "CostSketchError", "InitializationFailure", "AssetLoadFailure", "UnknownMaterialError",
]
