"""
Crop session model for state management.

A :class:`CropSession` owns the zoom/pan state of one crop interaction and
turns it into a normalised :class:`~foreverPaws.crop.model.CropData` on commit.
It has no UI dependencies: gesture callbacks feed it raw values and the
rendering layer reads :meth:`CropSession.view_transform` back.

Every input is clamped rather than rejected, so none of the operations can
fail once the display size is known.
"""

from __future__ import annotations

import enum
import logging
import math
from collections.abc import Mapping
from typing import Any

from ..config import DEFAULT_MAX_SCALE, MIN_SCALE
from .geometry import (
    ClampMode,
    clamp_offset,
    crop_rect_display,
    fit_display_size,
    normalise_rect,
)
from .model import CropData, Offset, Size, clamp

_LOGGER = logging.getLogger(__name__)


class ZoomPolicy(str, enum.Enum):
    """How pinch magnification maps onto the session scale."""

    # Each pinch multiplies the scale left by the previous one.
    MULTIPLICATIVE = "multiplicative"
    # The pinch factor is the scale; a new pinch starts again from 1.0.
    ABSOLUTE = "absolute"


def _sanitise_factor(value: float) -> float:
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return 1.0
    if not math.isfinite(numeric) or numeric <= 0.0:
        return 1.0
    return numeric


class CropSession:
    """Zoom and pan state for one square crop interaction."""

    def __init__(
        self,
        *,
        max_scale: float = DEFAULT_MAX_SCALE,
        zoom_policy: ZoomPolicy | str = ZoomPolicy.MULTIPLICATIVE,
        clamp_mode: ClampMode | str = ClampMode.RECT,
        display_size: Size | None = None,
    ) -> None:
        self._max_scale = max(MIN_SCALE, float(max_scale))
        self._zoom_policy = ZoomPolicy(zoom_policy)
        self._clamp_mode = ClampMode(clamp_mode)
        self._display_size = display_size or Size()

        self._scale: float = MIN_SCALE
        # Scale in effect when the current pinch started.
        self._gesture_base_scale: float = MIN_SCALE
        self._offset = Offset.ZERO
        self._committed_offset = Offset.ZERO

    @classmethod
    def from_options(cls, options: Mapping[str, Any] | None) -> CropSession:
        """Create a session from the ``crop`` settings section."""

        options = options or {}
        return cls(
            max_scale=float(options.get("max_scale", DEFAULT_MAX_SCALE)),
            zoom_policy=options.get("zoom_policy", ZoomPolicy.MULTIPLICATIVE),
            clamp_mode=options.get("clamp_mode", ClampMode.RECT),
        )

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def scale(self) -> float:
        return self._scale

    @property
    def offset(self) -> Offset:
        return self._offset

    @property
    def committed_offset(self) -> Offset:
        return self._committed_offset

    @property
    def display_size(self) -> Size:
        return self._display_size

    @property
    def max_scale(self) -> float:
        return self._max_scale

    @property
    def zoom_policy(self) -> ZoomPolicy:
        return self._zoom_policy

    @property
    def clamp_mode(self) -> ClampMode:
        return self._clamp_mode

    def view_transform(self) -> tuple[float, Offset]:
        """Return the ``(scale, offset)`` pair the rendering layer applies."""
        return (self._scale, self._offset)

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------
    def fit_display_size(
        self,
        source_width: float,
        source_height: float,
        container_width: float,
        container_height: float,
    ) -> Size:
        """Aspect-fit the source into the container and store the result.

        Must run whenever the container geometry changes and before any
        gesture is applied.  Existing offsets are re-clamped to the new bounds.
        """

        self._display_size = fit_display_size(
            source_width, source_height, container_width, container_height
        )
        self._reclamp_offsets()
        return self._display_size

    # ------------------------------------------------------------------
    # Gestures
    # ------------------------------------------------------------------
    def apply_zoom(self, raw_scale: float) -> float:
        """Apply an in-progress pinch magnification and return the new scale.

        *raw_scale* is the gesture's cumulative factor (1.0 at gesture start),
        so repeated calls with the same value are idempotent.
        """

        factor = _sanitise_factor(raw_scale)
        if self._zoom_policy == ZoomPolicy.MULTIPLICATIVE:
            candidate = self._gesture_base_scale * factor
        else:
            candidate = factor
        self._scale = clamp(candidate, MIN_SCALE, self._max_scale)
        self._reclamp_offsets()
        return self._scale

    def end_zoom(self, raw_scale: float | None = None) -> float:
        """Finish a pinch; the clamped scale becomes the next pinch's baseline."""

        if raw_scale is not None:
            self.apply_zoom(raw_scale)
        self._gesture_base_scale = self._scale
        _LOGGER.debug("Zoom gesture ended at scale %.3f", self._scale)
        return self._scale

    def apply_pan(self, translation: Offset | tuple[float, float]) -> Offset:
        """Apply a drag translation accumulated since the gesture started."""

        if not isinstance(translation, Offset):
            translation = Offset(float(translation[0]), float(translation[1]))
        candidate = self._committed_offset + translation
        self._offset = clamp_offset(candidate, self._display_size, self._scale)
        return self._offset

    def commit_pan(self) -> None:
        """Use the current offset as the base for the next drag."""
        self._committed_offset = self._offset

    def reset(self) -> None:
        """Return to the unzoomed, centred view."""
        self._scale = MIN_SCALE
        self._gesture_base_scale = MIN_SCALE
        self._offset = Offset.ZERO
        self._committed_offset = Offset.ZERO

    # ------------------------------------------------------------------
    # Commit / restore
    # ------------------------------------------------------------------
    def commit_crop(
        self, source_width: int | None = None, source_height: int | None = None
    ) -> CropData:
        """Return the normalised crop for the current view.

        The crop viewport is a square sized to the narrower display dimension.
        When *source_width* and *source_height* are given the matching pixel
        box is logged for diagnostics; cropping the raster is left to
        :func:`foreverPaws.crop.raster.crop_image`.
        """

        if self._display_size.is_empty():
            _LOGGER.warning("Committing crop without a display size; using the full image")
            return CropData(0.0, 0.0, 1.0, 1.0, self._scale)

        rect = crop_rect_display(self._display_size, self._offset, self._scale)
        x, y, width, height = normalise_rect(rect, self._display_size, self._clamp_mode)
        crop = CropData(x=x, y=y, width=width, height=height, scale=self._scale)
        if source_width and source_height:
            _LOGGER.debug(
                "Committed crop %s -> pixel box %s",
                crop.to_mapping(),
                crop.pixel_box(source_width, source_height),
            )
        return crop

    def restore(self, crop_data: CropData) -> None:
        """Seed the view from a previously committed crop.

        The scale is copied and the offset is back-computed from the crop
        origin.  This is an approximation of the inverse of
        :meth:`commit_crop`: re-committing without further gestures does not
        generally reproduce *crop_data* exactly.
        """

        self._scale = clamp(_sanitise_factor(crop_data.scale), MIN_SCALE, self._max_scale)
        self._gesture_base_scale = self._scale
        candidate = Offset(
            -crop_data.x * self._display_size.width,
            -crop_data.y * self._display_size.height,
        )
        self._offset = clamp_offset(candidate, self._display_size, self._scale)
        self._committed_offset = self._offset

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _reclamp_offsets(self) -> None:
        self._offset = clamp_offset(self._offset, self._display_size, self._scale)
        self._committed_offset = clamp_offset(
            self._committed_offset, self._display_size, self._scale
        )


__all__ = ["CropSession", "ZoomPolicy"]
