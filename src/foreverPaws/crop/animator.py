"""
Animation helper for the eased "Reset" transition of the crop editor.

The session state changes synchronously; this module only interpolates the
transform the view displays while it catches up.
"""

from __future__ import annotations

import time
from collections.abc import Callable

from PySide6.QtCore import QObject, QTimer

from ..config import RESET_ANIMATION_FRAME_MS, RESET_ANIMATION_SEC
from .model import Offset


def ease_out_cubic(t: float) -> float:
    """Cubic easing function for smooth animations (ease-out)."""
    return 1.0 - (1.0 - t) ** 3


def interpolate_view(
    start_scale: float,
    start_offset: Offset,
    target_scale: float,
    target_offset: Offset,
    progress: float,
) -> tuple[float, Offset]:
    """Return the eased view transform at *progress* (clamped to ``[0, 1]``)."""

    eased = ease_out_cubic(max(0.0, min(1.0, float(progress))))
    scale = start_scale + (target_scale - start_scale) * eased
    offset = Offset(
        start_offset.width + (target_offset.width - start_offset.width) * eased,
        start_offset.height + (target_offset.height - start_offset.height) * eased,
    )
    return scale, offset


class ResetAnimator:
    """Drive a short view-transform animation with a Qt timer."""

    def __init__(
        self,
        *,
        on_frame: Callable[[float, Offset], None],
        on_complete: Callable[[], None] | None = None,
        timer_parent: QObject | None = None,
    ) -> None:
        self._on_frame = on_frame
        self._on_complete = on_complete

        self._timer = QTimer(timer_parent)
        self._timer.setInterval(RESET_ANIMATION_FRAME_MS)
        self._timer.timeout.connect(self._handle_tick)

        self._active: bool = False
        self._start_time: float = 0.0
        self._duration: float = RESET_ANIMATION_SEC
        self._start_scale: float = 1.0
        self._target_scale: float = 1.0
        self._start_offset = Offset.ZERO
        self._target_offset = Offset.ZERO

    def is_animating(self) -> bool:
        return self._active

    def start(
        self,
        start_scale: float,
        start_offset: Offset,
        target_scale: float,
        target_offset: Offset,
        duration: float = RESET_ANIMATION_SEC,
    ) -> None:
        """Begin interpolating from the start transform to the target transform.

        A zero *duration*, or a start transform that already matches the
        target, emits the target frame immediately.
        """

        self._start_scale = float(start_scale)
        self._target_scale = float(target_scale)
        self._start_offset = start_offset
        self._target_offset = target_offset
        self._duration = max(0.0, float(duration))
        unchanged = abs(self._start_scale - self._target_scale) <= 1e-6 and start_offset.is_close(
            target_offset
        )
        if self._duration <= 0.0 or unchanged:
            self._finish()
            return
        self._active = True
        self._start_time = time.monotonic()
        self._timer.start()

    def stop(self) -> None:
        """Abandon the running animation without emitting further frames."""
        if self._active:
            self._active = False
            self._timer.stop()

    def progress_at(self, elapsed: float) -> float:
        if self._duration <= 0.0:
            return 1.0
        return max(0.0, min(1.0, elapsed / self._duration))

    def _handle_tick(self) -> None:
        if not self._active:
            self._timer.stop()
            return
        progress = self.progress_at(time.monotonic() - self._start_time)
        if progress >= 1.0:
            self._finish()
            return
        scale, offset = interpolate_view(
            self._start_scale,
            self._start_offset,
            self._target_scale,
            self._target_offset,
            progress,
        )
        self._on_frame(scale, offset)

    def _finish(self) -> None:
        self._active = False
        self._timer.stop()
        self._on_frame(self._target_scale, self._target_offset)
        if self._on_complete is not None:
            self._on_complete()


__all__ = ["ResetAnimator", "ease_out_cubic", "interpolate_view"]
