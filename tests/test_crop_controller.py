"""Tests for the Qt-facing crop editor controller."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

pytest.importorskip("PySide6", reason="PySide6 is required for controller tests", exc_type=ImportError)

from foreverPaws.crop.controller import CropEditorController
from foreverPaws.crop.model import CropData, Offset, Size
from foreverPaws.errors import ImageLoadError
from foreverPaws.errors.handler import ErrorSeverity
from foreverPaws.events import CropCommittedEvent, EventBus


@pytest.fixture
def controller(qapp):
    ctrl = CropEditorController(image_size_provider=MagicMock(return_value=(800, 800)))
    yield ctrl
    ctrl._animator.stop()


def _record(signal):
    received = []
    signal.connect(lambda *args: received.append(args))
    return received


def test_open_image_creates_fitted_session(controller):
    changes = _record(controller.sessionChanged)
    assert controller.open_image(Path("dog.jpg"), (400.0, 400.0))
    assert controller.is_active()
    assert controller.source_size() == (800, 800)
    assert controller.session().display_size == Size(400.0, 400.0)
    assert changes == [(1.0, 0.0, 0.0)]


def test_open_image_failure_reports_and_leaves_no_session(qapp):
    provider = MagicMock(side_effect=ImageLoadError("Cannot decode image: cat.heic"))
    handler = MagicMock()
    ctrl = CropEditorController(image_size_provider=provider, error_handler=handler)
    failures = _record(ctrl.loadFailed)

    assert not ctrl.open_image(Path("cat.heic"), (400.0, 400.0))

    assert not ctrl.is_active()
    assert failures == [("Cannot decode image: cat.heic",)]
    error, severity = handler.handle.call_args.args[:2]
    assert isinstance(error, ImageLoadError)
    assert severity is ErrorSeverity.ERROR


def test_gestures_and_commit_persist_crop(qapp):
    on_commit = MagicMock()
    bus = EventBus()
    published = []
    bus.subscribe(CropCommittedEvent, published.append)
    ctrl = CropEditorController(on_commit=on_commit, event_bus=bus)
    committed = _record(ctrl.cropCommitted)

    ctrl.open_session((800, 800), (400.0, 400.0), photo_id="photo-1")
    ctrl.zoom_changed(2.0)
    ctrl.zoom_ended()
    ctrl.pan_changed(100.0, 0.0)
    ctrl.pan_ended()
    crop = ctrl.commit_requested()

    assert crop.x == pytest.approx(0.0)
    assert crop.width == pytest.approx(0.5)
    assert crop.height == pytest.approx(0.5)
    assert crop.scale == pytest.approx(2.0)
    on_commit.assert_called_once_with(crop)
    assert committed == [(crop,)]
    assert published[0].photo_id == "photo-1"
    assert published[0].crop_data == crop
    assert not ctrl.is_active()


def test_cancel_discards_session(qapp):
    on_commit = MagicMock()
    ctrl = CropEditorController(on_commit=on_commit)
    cancelled = _record(ctrl.cancelled)
    ctrl.open_session((800, 600), (400.0, 400.0))
    ctrl.zoom_changed(3.0)

    ctrl.cancel_requested()

    assert cancelled == [()]
    assert not ctrl.is_active()
    on_commit.assert_not_called()


def test_gestures_without_session_are_ignored(controller):
    changes = _record(controller.sessionChanged)
    controller.zoom_changed(2.0)
    controller.pan_changed(10.0, 10.0)
    controller.reset_requested(animated=False)
    assert controller.commit_requested() is None
    assert changes == []


def test_session_uses_current_crop_options(qapp):
    options = {"max_scale": 3.0}
    ctrl = CropEditorController(crop_options=lambda: options)
    ctrl.open_session((800, 800), (400.0, 400.0))
    ctrl.zoom_changed(10.0)
    assert ctrl.session().scale == pytest.approx(3.0)

    options["max_scale"] = 4.0
    ctrl.open_session((800, 800), (400.0, 400.0))
    ctrl.zoom_changed(10.0)
    assert ctrl.session().scale == pytest.approx(4.0)


def test_open_session_restores_crop(controller):
    controller.open_session((800, 800), (400.0, 400.0), CropData(0.25, 0.25, 0.5, 0.5, 2.0))
    session = controller.session()
    assert session.scale == pytest.approx(2.0)
    assert session.offset == Offset(-100.0, -100.0)


def test_reset_without_animation_emits_identity(controller):
    controller.open_session((800, 800), (400.0, 400.0))
    controller.zoom_changed(2.5)
    controller.pan_changed(80.0, 40.0)
    views = _record(controller.viewTransformChanged)

    controller.reset_requested(animated=False)

    assert controller.session().scale == 1.0
    assert controller.session().offset == Offset.ZERO
    assert views == [(1.0, 0.0, 0.0)]


def test_animated_reset_defers_view_updates_to_animator(controller):
    controller.open_session((800, 800), (400.0, 400.0))
    controller.zoom_changed(2.0)
    changes = _record(controller.sessionChanged)
    views = _record(controller.viewTransformChanged)

    controller.reset_requested()

    assert controller.session().scale == 1.0
    assert changes == [(1.0, 0.0, 0.0)]
    assert views == []
    assert controller._animator.is_animating()


def test_container_resize_refits_display(controller):
    controller.open_session((800, 400), (400.0, 400.0))
    assert controller.session().display_size == Size(400.0, 200.0)
    controller.container_resized(200.0, 400.0)
    assert controller.session().display_size == Size(200.0, 100.0)


def test_oversized_image_emits_load_failed(qapp, make_image, monkeypatch):
    from PIL import Image

    path = make_image(size=(400, 400))
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)
    ctrl = CropEditorController()
    failures = _record(ctrl.loadFailed)

    assert not ctrl.open_image(path, (400.0, 400.0))

    assert not ctrl.is_active()
    assert len(failures) == 1
    assert "too large" in failures[0][0]
