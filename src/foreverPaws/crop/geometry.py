"""
Pure geometry helpers for the square crop editor.

The functions in this module have no knowledge of gestures or widgets.  They
convert between the three spaces involved in a crop:

* source pixels - the decoded raster,
* display units - the aspect-fit rendering of the raster inside its container,
* normalised coordinates - fractions of the full source width/height.
"""

from __future__ import annotations

import enum

from .model import Offset, Size, clamp, clamp_unit


class ClampMode(str, enum.Enum):
    """How a normalised crop rectangle is forced back into the unit square."""

    # Clamp the rectangle as a whole: size first, then the origin so that
    # ``x + width <= 1`` and ``y + height <= 1``.
    RECT = "rect"
    # Clamp each component on its own; the far edge may exceed 1.
    INDEPENDENT = "independent"


def fit_display_size(
    source_width: float,
    source_height: float,
    container_width: float,
    container_height: float,
) -> Size:
    """Return the size at which the source is rendered inside the container.

    Parameters
    ----------
    source_width, source_height:
        Decoded raster dimensions.
    container_width, container_height:
        Display box reported by the hosting layout.

    Returns
    -------
    Size
        When the source is relatively wider than the container the width
        matches the container and the height is derived from it; otherwise
        the height matches and the width is derived.  Non-positive inputs
        yield an empty size.
    """

    if min(source_width, source_height, container_width, container_height) <= 0:
        return Size(0.0, 0.0)

    image_aspect = float(source_width) / float(source_height)
    container_aspect = float(container_width) / float(container_height)
    if image_aspect > container_aspect:
        width = float(container_width)
        return Size(width, width / image_aspect)
    height = float(container_height)
    return Size(height * image_aspect, height)


def max_pan_offset(display_size: Size, scale: float) -> Offset:
    """Return the largest pan on each axis that keeps the image edges covered."""

    return Offset(
        max(0.0, (display_size.width * scale - display_size.width) / 2.0),
        max(0.0, (display_size.height * scale - display_size.height) / 2.0),
    )


def clamp_offset(candidate: Offset, display_size: Size, scale: float) -> Offset:
    """Clamp *candidate* independently per axis to the pan bounds at *scale*."""

    bounds = max_pan_offset(display_size, scale)
    return Offset(
        clamp(candidate.width, -bounds.width, bounds.width),
        clamp(candidate.height, -bounds.height, bounds.height),
    )


def crop_viewport_size(display_size: Size) -> float:
    """Return the edge length of the square crop viewport in display units."""

    return min(display_size.width, display_size.height)


def crop_rect_display(
    display_size: Size, offset: Offset, scale: float
) -> tuple[float, float, float, float]:
    """Return the visible square as ``(x, y, width, height)`` in pre-zoom display units.

    Dividing by *scale* maps the zoomed viewport back onto the unzoomed
    rendering of the image.
    """

    crop_size = crop_viewport_size(display_size)
    return (
        (display_size.width - crop_size) / 2.0 - offset.width / scale,
        (display_size.height - crop_size) / 2.0 - offset.height / scale,
        crop_size / scale,
        crop_size / scale,
    )


def normalise_rect(
    rect: tuple[float, float, float, float],
    display_size: Size,
    mode: ClampMode = ClampMode.RECT,
) -> tuple[float, float, float, float]:
    """Express *rect* as fractions of *display_size* and clamp it into ``[0, 1]``."""

    x, y, width, height = rect
    norm_w = clamp_unit(width / display_size.width)
    norm_h = clamp_unit(height / display_size.height)
    if mode == ClampMode.INDEPENDENT:
        return (
            clamp_unit(x / display_size.width),
            clamp_unit(y / display_size.height),
            norm_w,
            norm_h,
        )
    return (
        clamp(x / display_size.width, 0.0, 1.0 - norm_w),
        clamp(y / display_size.height, 0.0, 1.0 - norm_h),
        norm_w,
        norm_h,
    )


__all__ = [
    "ClampMode",
    "clamp_offset",
    "crop_rect_display",
    "crop_viewport_size",
    "fit_display_size",
    "max_pan_offset",
    "normalise_rect",
]
