"""
Value objects shared by the crop editor, the photo library and the CLI.

``CropData`` is the persisted result of a crop interaction.  It is expressed in
normalised coordinates so it stays valid for any resolution of the source
image.
"""

from __future__ import annotations

import json
import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, ClassVar

import numpy as np
from jsonschema import Draft202012Validator, ValidationError

from ..config import MIN_SCALE
from ..errors import InvalidCropDataError

CROP_DATA_SCHEMA: dict[str, Any] = {
    "$id": "ForeverPaws/crop_data.schema.json",
    "type": "object",
    "required": ["x", "y", "width", "height"],
    "properties": {
        "x": {"type": "number"},
        "y": {"type": "number"},
        "width": {"type": "number"},
        "height": {"type": "number"},
        "scale": {"type": "number"},
    },
    "additionalProperties": True,
}

_validator = Draft202012Validator(CROP_DATA_SCHEMA)


def clamp(value: float, lower: float, upper: float) -> float:
    """Return *value* limited to ``[lower, upper]``; NaN maps to *lower*."""

    numeric = float(value)
    if math.isnan(numeric):
        return float(lower)
    return max(float(lower), min(float(upper), numeric))


def clamp_unit(value: float) -> float:
    return clamp(value, 0.0, 1.0)


@dataclass(frozen=True)
class Size:
    """Width/height pair in display units or pixels."""

    width: float = 0.0
    height: float = 0.0

    def is_empty(self) -> bool:
        return self.width <= 0.0 or self.height <= 0.0


@dataclass(frozen=True)
class Offset:
    """Pan translation in display units."""

    width: float = 0.0
    height: float = 0.0

    ZERO: ClassVar["Offset"]

    def __add__(self, other: Offset) -> Offset:
        return Offset(self.width + other.width, self.height + other.height)

    def is_close(self, other: Offset, tolerance: float = 1e-6) -> bool:
        return (
            abs(self.width - other.width) <= tolerance
            and abs(self.height - other.height) <= tolerance
        )


Offset.ZERO = Offset(0.0, 0.0)


@dataclass(frozen=True)
class CropData:
    """Normalised square crop plus the zoom factor that produced it."""

    x: float = 0.0
    y: float = 0.0
    width: float = 1.0
    height: float = 1.0
    scale: float = 1.0

    IDENTITY: ClassVar["CropData"]

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------
    def to_mapping(self) -> dict[str, float]:
        return {
            "x": float(self.x),
            "y": float(self.y),
            "width": float(self.width),
            "height": float(self.height),
            "scale": float(self.scale),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_mapping(), sort_keys=True)

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> CropData:
        """Build a crop from stored values, clamping every field into range.

        Raises :class:`InvalidCropDataError` when required keys are missing or
        are not numbers.
        """

        try:
            _validator.validate(dict(values))
        except ValidationError as exc:
            raise InvalidCropDataError(exc.message) from exc
        width = clamp_unit(values["width"])
        height = clamp_unit(values["height"])
        scale = float(values.get("scale", 1.0))
        if not math.isfinite(scale):
            scale = 1.0
        return cls(
            x=clamp(values["x"], 0.0, 1.0 - width),
            y=clamp(values["y"], 0.0, 1.0 - height),
            width=width,
            height=height,
            scale=max(MIN_SCALE, scale),
        )

    @classmethod
    def from_json(cls, payload: str) -> CropData:
        try:
            values = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise InvalidCropDataError(f"Crop data is not valid JSON: {exc}") from exc
        if not isinstance(values, dict):
            raise InvalidCropDataError("Crop data must be a JSON object")
        return cls.from_mapping(values)

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------
    def is_identity(self, tolerance: float = 1e-3) -> bool:
        return (
            self.x <= tolerance
            and self.y <= tolerance
            and self.width >= 1.0 - tolerance
            and self.height >= 1.0 - tolerance
        )

    def pixel_box(self, source_width: int, source_height: int) -> tuple[int, int, int, int]:
        """Return ``(left, top, right, bottom)`` in source pixels.

        The box is rounded to whole pixels, kept inside the image and is at
        least one pixel wide and tall.
        """

        if source_width <= 0 or source_height <= 0:
            return (0, 0, 0, 0)
        extent = np.array([source_width, source_height, source_width, source_height], dtype=float)
        edges = np.array(
            [self.x, self.y, self.x + self.width, self.y + self.height], dtype=float
        )
        box = np.clip(np.rint(edges * extent), 0.0, extent).astype(int)
        left, top, right, bottom = (int(v) for v in box)
        if right - left < 1:
            left = min(left, source_width - 1)
            right = left + 1
        if bottom - top < 1:
            top = min(top, source_height - 1)
            bottom = top + 1
        return (left, top, right, bottom)


CropData.IDENTITY = CropData(0.0, 0.0, 1.0, 1.0, 1.0)


__all__ = ["CROP_DATA_SCHEMA", "CropData", "Offset", "Size", "clamp", "clamp_unit"]
