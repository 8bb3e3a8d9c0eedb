"""Default configuration values for Forever Paws."""

from __future__ import annotations

from typing import Final

# ---------------------------------------------------------------------------
# Crop editor
# ---------------------------------------------------------------------------

# Zoom can never go below the aspect-fit presentation of the source image.
MIN_SCALE: Final[float] = 1.0

# Default upper zoom bound. Editing a stored photo used to stop at 3.0; both
# entry points now share the configurable ``crop.max_scale`` setting.
DEFAULT_MAX_SCALE: Final[float] = 5.0

# Duration and frame interval of the eased "Reset" transition.
RESET_ANIMATION_SEC: Final[float] = 0.3
RESET_ANIMATION_FRAME_MS: Final[int] = 16

# ---------------------------------------------------------------------------
# Library layout
# ---------------------------------------------------------------------------

WORK_DIR_NAME: Final[str] = ".foreverpaws"
LIBRARY_DB_NAME: Final[str] = "library.db"
PHOTOS_DIR_NAME: Final[str] = "photos"
EXPORT_DIR_NAME: Final[str] = "exported"

# JPEG quality used for stored uploads and cropped exports (0.8 in the mobile
# client, expressed on Pillow's 1-95 scale).
DEFAULT_JPEG_QUALITY: Final[int] = 80

SUPPORTED_IMAGE_SUFFIXES: Final[frozenset[str]] = frozenset(
    {".jpg", ".jpeg", ".png", ".webp", ".bmp", ".tif", ".tiff"}
)
