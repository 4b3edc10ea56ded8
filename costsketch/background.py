"""Calibration background layer.

Raster images are decoded off the event-loop thread, fitted to the canvas and
placed under every drawn shape. PDF and CAD files are handed to a converter
collaborator; the surface itself never parses those formats.
"""
from __future__ import annotations
import asyncio
import logging
import os
from typing import List, Optional, Protocol

from PySide6.QtCore import Qt, QObject, QRectF, QSizeF, Signal
from PySide6.QtGui import QBrush, QColor, QFont, QImage, QPen, QPixmap
from PySide6.QtWidgets import (QGraphicsItem, QGraphicsPixmapItem, QGraphicsRectItem,
                               QGraphicsScene, QGraphicsSimpleTextItem)

from .errors import AssetLoadFailure
from .models import BackgroundAsset, ConversionResult
from .utils import (BACKGROUND_OPACITY, BACKGROUND_Z, CONVERTIBLE_EXTENSIONS,
                    PLACEHOLDER_CAD_COLOR, PLACEHOLDER_PDF_COLOR, clamp)

log = logging.getLogger(__name__)

LAYER_KEY = 0
LAYER_TAG = "background"


class FileConverter(Protocol):
    async def convert(self, asset: BackgroundAsset) -> ConversionResult: ...


class NullConverter:
    """Converter used when no conversion service is wired in."""

    async def convert(self, asset: BackgroundAsset) -> ConversionResult:
        return ConversionResult(False, None, f"No converter available for {asset.name}")


def convertible_kind(asset: BackgroundAsset) -> Optional[str]:
    ext = os.path.splitext(asset.name.lower())[1]
    if ext in CONVERTIBLE_EXTENSIONS:
        return CONVERTIBLE_EXTENSIONS[ext]
    if asset.mime_type == "application/pdf":
        return "PDF"
    return None


def fit_scale(img_w: float, img_h: float, canvas_w: float, canvas_h: float) -> float:
    if img_w <= 0 or img_h <= 0:
        return 1.0
    return min(canvas_w / img_w, canvas_h / img_h)


def decode_image(data: bytes) -> Optional[QImage]:
    img = QImage()
    if not img.loadFromData(data) or img.isNull():
        return None
    return img


class BackgroundOverlayManager(QObject):
    layerChanged = Signal(bool)

    def __init__(self, scene: QGraphicsScene, canvas_size: QSizeF,
                 converter: Optional[FileConverter] = None, opacity: float = BACKGROUND_OPACITY):
        super().__init__()
        self.scene = scene
        self.canvas_size = QSizeF(canvas_size)
        self.converter = converter or NullConverter()
        self.opacity = clamp(opacity, 0.0, 1.0)
        self.layer: Optional[QGraphicsItem] = None
        self.is_placeholder = False
        self._generation = 0

    @property
    def has_background(self) -> bool:
        return self.layer is not None

    def layers_in_scene(self) -> List[QGraphicsItem]:
        return [it for it in self.scene.items() if it.data(LAYER_KEY) == LAYER_TAG]

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    async def load(self, asset: BackgroundAsset) -> bool:
        """Load ``asset`` as the background; False if a newer load superseded it.

        Failures raise :class:`AssetLoadFailure` tagged with this load's
        generation.
        """
        self._generation += 1
        gen = self._generation
        data = asset.data
        kind = convertible_kind(asset)
        if kind is not None:
            data = await self._convert(asset, kind, gen)
        image = await asyncio.to_thread(decode_image, data)
        if image is None:
            raise AssetLoadFailure(f"Failed to load: {asset.name}", asset.name,
                                   convertible=kind is not None, generation=gen)
        if gen != self._generation:
            log.info("background %s superseded before insertion", asset.name,
                     extra={"asset": asset.name})
            return False
        self._insert_image(image)
        log.info("background %s loaded (%dx%d)", asset.name, image.width(), image.height(),
                 extra={"asset": asset.name})
        return True

    async def _convert(self, asset: BackgroundAsset, kind: str, gen: int) -> bytes:
        try:
            result = await self.converter.convert(asset)
        except Exception as e:
            raise AssetLoadFailure(f"{kind} conversion failed for {asset.name}: {e}",
                                   asset.name, convertible=True, generation=gen) from e
        if not result.success or not result.data:
            raise AssetLoadFailure(result.message or f"{kind} conversion failed for {asset.name}",
                                   asset.name, convertible=True, generation=gen)
        return result.data

    def _insert_image(self, image: QImage):
        self._drop_layer()
        item = QGraphicsPixmapItem(QPixmap.fromImage(image))
        item.setTransformationMode(Qt.SmoothTransformation)
        item.setScale(fit_scale(image.width(), image.height(),
                                self.canvas_size.width(), self.canvas_size.height()))
        item.setPos(0, 0)
        self._adopt(item, placeholder=False)

    def insert_placeholder(self, asset: BackgroundAsset,
                           generation: Optional[int] = None) -> Optional[QGraphicsItem]:
        """Labeled stand-in for an asset that could not be converted.

        With ``generation`` set, the placeholder belongs to that load and is
        skipped when a newer load or a removal has happened since. Without it
        the placeholder supersedes any load still in flight.
        """
        if generation is None:
            self._generation += 1
        elif not self.is_current(generation):
            log.info("placeholder for %s skipped, superseded by a newer load", asset.name,
                     extra={"asset": asset.name})
            return None
        self._drop_layer()
        kind = convertible_kind(asset) or "File"
        color = QColor(PLACEHOLDER_CAD_COLOR if "CAD" in kind else PLACEHOLDER_PDF_COLOR)
        w, h = self.canvas_size.width(), self.canvas_size.height()

        fill = QColor(color); fill.setAlpha(20)
        frame = QGraphicsRectItem(QRectF(10, 10, w - 20, h - 20))
        frame.setBrush(QBrush(fill))
        frame.setPen(QPen(color, 2, Qt.DashLine))

        cs = 20.0
        for cx, cy in ((20, 20), (w - 40, 20), (20, h - 40), (w - 40, h - 40)):
            marker = QGraphicsRectItem(QRectF(cx, cy, cs, cs), frame)
            marker.setBrush(QBrush(Qt.NoBrush))
            marker.setPen(QPen(color, 2))

        label = QGraphicsSimpleTextItem(
            f"{kind}: {asset.name}\n\nReady for Drawing!\nDraw rooms and shapes over this base layer", frame)
        label.setFont(QFont("Arial", 12))
        label.setBrush(QBrush(color))
        br = label.boundingRect()
        label.setPos(w / 2 - br.width() / 2, h / 2 - br.height() / 2)

        self._adopt(frame, placeholder=True)
        log.info("placeholder inserted for %s (%s)", asset.name, kind, extra={"asset": asset.name})
        return frame

    def _adopt(self, item: QGraphicsItem, placeholder: bool):
        item.setData(LAYER_KEY, LAYER_TAG)
        item.setZValue(BACKGROUND_Z)
        item.setOpacity(self.opacity)
        item.setAcceptedMouseButtons(Qt.NoButton)
        for child in item.childItems():
            child.setAcceptedMouseButtons(Qt.NoButton)
        item.setFlag(QGraphicsItem.ItemIsSelectable, False)
        item.setFlag(QGraphicsItem.ItemIsMovable, False)
        self.scene.addItem(item)
        self.layer = item
        self.is_placeholder = placeholder
        self.layerChanged.emit(True)

    def _drop_layer(self) -> bool:
        if self.layer is None:
            return False
        if self.layer.scene() is not None:
            self.layer.scene().removeItem(self.layer)
        self.layer = None
        self.is_placeholder = False
        return True

    def remove(self):
        # also invalidates a load still in flight
        self._generation += 1
        if self._drop_layer():
            self.layerChanged.emit(False)

    def set_opacity(self, opacity: float):
        self.opacity = clamp(float(opacity), 0.0, 1.0)
        if self.layer is not None:
            self.layer.setOpacity(self.opacity)
