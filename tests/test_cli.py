from pathlib import Path

import pytest
from PIL import Image
from typer.testing import CliRunner

from foreverPaws.cli import app
from foreverPaws.infrastructure.db.pool import ConnectionPool
from foreverPaws.infrastructure.repositories import SQLitePetPhotoRepository

runner = CliRunner()


@pytest.fixture
def settings_args(tmp_path):
    return ["--settings", str(tmp_path / "settings.json")]


@pytest.fixture
def library(tmp_path):
    return tmp_path / "library"


def _stored_photos(library: Path, pet_id: str):
    pool = ConnectionPool(library / ".foreverpaws" / "library.db")
    try:
        return SQLitePetPhotoRepository(pool).get_by_pet(pet_id)
    finally:
        pool.close_all()


def _add(settings_args, library, pet_id, image, *extra):
    result = runner.invoke(
        app, [*settings_args, "photos", "add", pet_id, str(image), "--library", str(library), *extra]
    )
    assert result.exit_code == 0, result.output
    return result.output.split()[2]


def test_crop_preview_prints_normalised_crop(settings_args, make_image):
    image = make_image(size=(800, 800))
    result = runner.invoke(
        app,
        [*settings_args, "crop", "preview", str(image), "--container", "400x400", "--zoom", "2", "--pan=100,0"],
    )
    assert result.exit_code == 0, result.output
    assert "x=0.0000 y=0.0000 width=0.5000 height=0.5000 scale=2.000" in result.output
    assert "pixels: (0, 0, 400, 400)" in result.output


def test_crop_preview_rejects_bad_container(settings_args, make_image):
    result = runner.invoke(
        app, [*settings_args, "crop", "preview", str(make_image()), "--container", "wide"]
    )
    assert result.exit_code == 2


def test_crop_apply_writes_cropped_jpeg(settings_args, make_image, tmp_path):
    image = make_image(size=(800, 800))
    output = tmp_path / "out" / "crop.jpg"
    result = runner.invoke(
        app, [*settings_args, "crop", "apply", str(image), str(output), "--zoom", "2"]
    )
    assert result.exit_code == 0, result.output
    with Image.open(output) as cropped:
        assert cropped.size == (400, 400)


def test_crop_preview_reports_unreadable_image(settings_args, tmp_path):
    broken = tmp_path / "broken.jpg"
    broken.write_bytes(b"nope")
    result = runner.invoke(app, [*settings_args, "crop", "preview", str(broken)])
    assert result.exit_code == 1
    assert "Error:" in result.output


def test_photo_library_workflow(settings_args, library, make_image, tmp_path):
    first = _add(settings_args, library, "rex", make_image("a.png", size=(64, 64)))
    second = _add(settings_args, library, "rex", make_image("b.png", size=(64, 64)))

    result = runner.invoke(app, [*settings_args, "photos", "list", "rex", "--library", str(library)])
    assert result.exit_code == 0, result.output
    assert "Photos of rex" in result.output

    result = runner.invoke(
        app, [*settings_args, "photos", "primary", "rex", second, "--library", str(library)]
    )
    assert result.exit_code == 0, result.output
    primary = [p.id for p in _stored_photos(library, "rex") if p.is_primary]
    assert primary == [second]

    result = runner.invoke(
        app, [*settings_args, "photos", "crop", second, "--zoom", "2", "--library", str(library)]
    )
    assert result.exit_code == 0, result.output
    cropped = {p.id: p for p in _stored_photos(library, "rex")}[second]
    assert cropped.crop_data.width == pytest.approx(0.5)

    result = runner.invoke(app, [*settings_args, "photos", "export", second, "--library", str(library)])
    assert result.exit_code == 0, result.output
    exported = library / ".foreverpaws" / "exported" / f"{second}.jpg"
    with Image.open(exported) as image:
        assert image.size == (32, 32)

    result = runner.invoke(app, [*settings_args, "photos", "delete", second, "--library", str(library)])
    assert result.exit_code == 0, result.output
    remaining = _stored_photos(library, "rex")
    assert [p.id for p in remaining] == [first]
    assert remaining[0].is_primary


def test_photos_crop_clear(settings_args, library, make_image):
    photo_id = _add(settings_args, library, "rex", make_image())
    runner.invoke(app, [*settings_args, "photos", "crop", photo_id, "--zoom", "2", "--library", str(library)])
    result = runner.invoke(
        app, [*settings_args, "photos", "crop", photo_id, "--clear", "--library", str(library)]
    )
    assert result.exit_code == 0, result.output
    assert _stored_photos(library, "rex")[0].crop_data is None


def test_unknown_photo_exits_with_error(settings_args, library):
    result = runner.invoke(app, [*settings_args, "photos", "delete", "missing", "--library", str(library)])
    assert result.exit_code == 1
    assert "Photo not found" in result.output


def test_photos_without_library_is_usage_error(settings_args):
    result = runner.invoke(app, [*settings_args, "photos", "list", "rex"])
    assert result.exit_code == 2


def test_malformed_settings_file_exits_with_error(tmp_path, make_image):
    settings_path = tmp_path / "settings.json"
    settings_path.write_text('{"library_path": []}', encoding="utf-8")
    result = runner.invoke(
        app, ["--settings", str(settings_path), "crop", "preview", str(make_image())]
    )
    assert result.exit_code == 1
    assert "Error:" in result.output
