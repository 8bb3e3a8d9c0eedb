"""Pillow helpers for decoding source images and cropping their pixels."""

from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image, ImageOps, UnidentifiedImageError

from ..config import DEFAULT_JPEG_QUALITY
from ..errors import ExportError, ImageLoadError
from .model import CropData

_LOGGER = logging.getLogger(__name__)


def load_image(source: Path) -> Image.Image:
    """Return the decoded image at *source* with EXIF orientation applied.

    Raises :class:`ImageLoadError` when the file is missing or cannot be
    decoded, so callers never start a crop session on a broken image.
    """

    try:
        with Image.open(source) as img:
            img.load()
            oriented = ImageOps.exif_transpose(img)
            # ``exif_transpose`` returns the same object when no rotation is
            # needed; copy so the result outlives the context manager.
            return oriented.copy() if oriented is img else oriented
    except FileNotFoundError as exc:
        raise ImageLoadError(f"Image not found: {source}") from exc
    except Image.DecompressionBombError as exc:
        _LOGGER.warning("Refusing oversized image %s: %s", source, exc)
        raise ImageLoadError(f"Image too large to decode: {source}") from exc
    except (UnidentifiedImageError, OSError) as exc:
        _LOGGER.warning("Pillow failed to decode %s: %s", source, exc)
        raise ImageLoadError(f"Cannot decode image: {source}") from exc


def probe_size(source: Path) -> tuple[int, int]:
    """Return the oriented ``(width, height)`` of *source*."""

    image = load_image(source)
    return image.size


def crop_image(image: Image.Image, crop_data: CropData) -> Image.Image:
    """Return the region of *image* described by *crop_data*."""

    width, height = image.size
    if crop_data.is_identity(tolerance=1e-6):
        return image.copy()
    box = crop_data.pixel_box(width, height)
    return image.crop(box)


def save_jpeg(image: Image.Image, destination: Path, quality: int = DEFAULT_JPEG_QUALITY) -> Path:
    """Write *image* as a JPEG at *destination* and return the path."""

    destination.parent.mkdir(parents=True, exist_ok=True)
    if image.mode not in ("RGB", "L"):
        image = image.convert("RGB")
    try:
        image.save(destination, format="JPEG", quality=int(quality))
    except OSError as exc:
        raise ExportError(f"Cannot write {destination}: {exc}") from exc
    return destination


__all__ = ["crop_image", "load_image", "probe_size", "save_jpeg"]
