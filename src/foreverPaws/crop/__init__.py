"""
Square photo crop editing.

The package is split into pure geometry (``geometry``), the per-edit state
machine (``session``), Pillow raster helpers (``raster``) and the Qt-facing
coordinator (``controller``).
"""

from .geometry import ClampMode, fit_display_size
from .model import CropData, Offset, Size
from .session import CropSession, ZoomPolicy

__all__ = [
    "ClampMode",
    "CropData",
    "CropSession",
    "Offset",
    "Size",
    "ZoomPolicy",
    "fit_display_size",
]
