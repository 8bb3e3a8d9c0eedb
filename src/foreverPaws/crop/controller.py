"""
Crop editor controller (coordinator).

This module hosts one crop interaction: it asks the image source for the
decoded dimensions, owns the :class:`CropSession` while the editor is open,
forwards gesture events to it and hands the committed crop to the
persistence callback.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from PySide6.QtCore import QObject, Signal

from ..errors import ImageLoadError
from ..errors.handler import ErrorHandler, ErrorSeverity
from ..events import CropCommittedEvent, EventBus
from .animator import ResetAnimator
from .model import CropData, Offset
from .raster import probe_size
from .session import CropSession

_LOGGER = logging.getLogger(__name__)


class CropEditorController(QObject):
    """Translate editor events into :class:`CropSession` operations."""

    sessionChanged = Signal(float, float, float)
    viewTransformChanged = Signal(float, float, float)
    cropCommitted = Signal(object)
    cancelled = Signal()
    loadFailed = Signal(str)

    def __init__(
        self,
        *,
        crop_options: Callable[[], Mapping[str, Any]] | None = None,
        image_size_provider: Callable[[Path], tuple[int, int]] = probe_size,
        on_commit: Callable[[CropData], None] | None = None,
        error_handler: ErrorHandler | None = None,
        event_bus: EventBus | None = None,
        parent: QObject | None = None,
    ) -> None:
        """Initialise the controller.

        Parameters
        ----------
        crop_options:
            Callable returning the ``crop`` settings section; read every time
            a session opens so preference changes apply to the next edit.
        image_size_provider:
            Callable returning the decoded ``(width, height)`` of an image or
            raising :class:`ImageLoadError`.
        on_commit:
            Persistence callback receiving the committed crop.
        error_handler:
            Receives image load failures.
        event_bus:
            When given, a :class:`CropCommittedEvent` is published on commit.
        parent:
            Parent QObject (optional).
        """
        super().__init__(parent)
        self._crop_options = crop_options or (lambda: {})
        self._image_size_provider = image_size_provider
        self._on_commit = on_commit
        self._error_handler = error_handler
        self._event_bus = event_bus

        self._session: CropSession | None = None
        self._source_size: tuple[int, int] = (0, 0)
        self._container_size: tuple[float, float] = (0.0, 0.0)
        self._photo_id: str | None = None
        self._animator = ResetAnimator(
            on_frame=self._on_animation_frame,
            timer_parent=self,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def is_active(self) -> bool:
        """Return True while a crop session is open."""
        return self._session is not None

    def session(self) -> CropSession | None:
        return self._session

    def source_size(self) -> tuple[int, int]:
        return self._source_size

    def open_image(
        self,
        path: Path,
        container_size: tuple[float, float],
        crop_data: CropData | None = None,
        *,
        photo_id: str | None = None,
    ) -> bool:
        """Decode *path* and open a session for it.

        Returns False (and emits ``loadFailed``) when the image cannot be
        loaded; no session exists afterwards, so the host can offer a retry.
        """

        try:
            source_size = self._image_size_provider(Path(path))
        except ImageLoadError as exc:
            self._session = None
            if self._error_handler is not None:
                self._error_handler.handle(
                    exc, ErrorSeverity.ERROR, context={"path": str(path)}
                )
            else:
                _LOGGER.warning("Failed to load %s for cropping: %s", path, exc)
            self.loadFailed.emit(str(exc))
            return False
        self.open_session(source_size, container_size, crop_data, photo_id=photo_id)
        return True

    def open_session(
        self,
        source_size: tuple[int, int],
        container_size: tuple[float, float],
        crop_data: CropData | None = None,
        *,
        photo_id: str | None = None,
    ) -> CropSession:
        """Open a session for an image whose dimensions are already known."""

        self._animator.stop()
        self._source_size = (int(source_size[0]), int(source_size[1]))
        self._container_size = (float(container_size[0]), float(container_size[1]))
        self._photo_id = photo_id

        session = CropSession.from_options(self._crop_options())
        session.fit_display_size(*self._source_size, *self._container_size)
        if crop_data is not None:
            session.restore(crop_data)
        self._session = session
        _LOGGER.info(
            "Crop session opened for %sx%s image (display %.1fx%.1f, max scale %.1f)",
            self._source_size[0],
            self._source_size[1],
            session.display_size.width,
            session.display_size.height,
            session.max_scale,
        )
        self._emit_session_changed()
        return session

    def container_resized(self, width: float, height: float) -> None:
        """Refit the display size after a layout change (e.g. rotation)."""
        session = self._require_session("container_resized")
        if session is None:
            return
        self._container_size = (float(width), float(height))
        session.fit_display_size(*self._source_size, *self._container_size)
        self._emit_session_changed()

    # ------------------------------------------------------------------
    # Gesture slots
    # ------------------------------------------------------------------
    def zoom_changed(self, factor: float) -> None:
        session = self._require_session("zoom_changed")
        if session is None:
            return
        self._animator.stop()
        session.apply_zoom(factor)
        self._emit_session_changed()

    def zoom_ended(self, factor: float | None = None) -> None:
        session = self._require_session("zoom_ended")
        if session is None:
            return
        session.end_zoom(factor)
        self._emit_session_changed()

    def pan_changed(self, dx: float, dy: float) -> None:
        session = self._require_session("pan_changed")
        if session is None:
            return
        self._animator.stop()
        session.apply_pan(Offset(float(dx), float(dy)))
        self._emit_session_changed()

    def pan_ended(self) -> None:
        session = self._require_session("pan_ended")
        if session is None:
            return
        session.commit_pan()

    def reset_requested(self, *, animated: bool = True) -> None:
        """Reset the session and ease the displayed transform back to identity."""

        session = self._require_session("reset_requested")
        if session is None:
            return
        start_scale, start_offset = session.view_transform()
        session.reset()
        if animated:
            target_scale, target_offset = session.view_transform()
            self._animator.start(start_scale, start_offset, target_scale, target_offset)
        else:
            self._animator.stop()
        self._emit_session_changed()

    def commit_requested(self) -> CropData | None:
        """Commit the crop, hand it to the persistence callback and close."""

        session = self._require_session("commit_requested")
        if session is None:
            return None
        self._animator.stop()
        crop = session.commit_crop(*self._source_size)
        _LOGGER.info("Crop committed: %s", crop.to_mapping())
        if self._on_commit is not None:
            self._on_commit(crop)
        if self._event_bus is not None:
            self._event_bus.publish(CropCommittedEvent(photo_id=self._photo_id, crop_data=crop))
        self._close()
        self.cropCommitted.emit(crop)
        return crop

    def cancel_requested(self) -> None:
        """Close the editor without persisting anything."""
        if self._session is None:
            return
        self._animator.stop()
        self._close()
        _LOGGER.debug("Crop session cancelled")
        self.cancelled.emit()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _require_session(self, action: str) -> CropSession | None:
        if self._session is None:
            _LOGGER.debug("Ignoring %s without an open crop session", action)
        return self._session

    def _close(self) -> None:
        self._session = None
        self._photo_id = None

    def _emit_session_changed(self) -> None:
        session = self._session
        if session is None:
            return
        scale, offset = session.view_transform()
        self.sessionChanged.emit(float(scale), float(offset.width), float(offset.height))
        if not self._animator.is_animating():
            self.viewTransformChanged.emit(float(scale), float(offset.width), float(offset.height))

    def _on_animation_frame(self, scale: float, offset: Offset) -> None:
        self.viewTransformChanged.emit(float(scale), float(offset.width), float(offset.height))
