from __future__ import annotations


class CostSketchError(Exception):
    """Base class for failures surfaced by the drawing surface."""


class InitializationFailure(CostSketchError):
    def __init__(self, message: str, attempts: int = 0):
        super().__init__(message)
        self.attempts = attempts


class AssetLoadFailure(CostSketchError):
    """A background asset could not be turned into a visual layer.

    ``convertible`` is True when the asset needed external conversion; the
    caller inserts a labeled placeholder for those instead of leaving the
    surface without a base layer. ``generation`` identifies the load that
    failed, so a failure overtaken by a newer load can be told apart.
    """

    def __init__(self, message: str, asset_name: str = "", convertible: bool = False,
                 generation: int = 0):
        super().__init__(message)
        self.asset_name = asset_name
        self.convertible = convertible
        self.generation = generation


class UnknownMaterialError(CostSketchError, KeyError):
    def __init__(self, material: str):
        super().__init__(material)
        self.material = material

    def __str__(self) -> str:
        return f"Unknown material: {self.material!r}"
