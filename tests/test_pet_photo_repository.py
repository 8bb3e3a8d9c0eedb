from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from foreverPaws.crop.model import CropData
from foreverPaws.domain.models import PetPhoto
from foreverPaws.infrastructure.db.pool import ConnectionPool
from foreverPaws.infrastructure.repositories import SQLitePetPhotoRepository


@pytest.fixture
def pool(tmp_path):
    pool = ConnectionPool(tmp_path / ".foreverpaws" / "library.db")
    yield pool
    pool.close_all()


@pytest.fixture
def repo(pool):
    return SQLitePetPhotoRepository(pool)


def _photo(pet_id, minutes, **kwargs):
    photo = PetPhoto.create(pet_id, Path("photos") / pet_id / f"{minutes}.jpg", **kwargs)
    photo.uploaded_at = datetime(2026, 5, 1, tzinfo=timezone.utc) + timedelta(minutes=minutes)
    return photo


def test_save_and_get_roundtrip(repo):
    photo = _photo("rex", 0, crop_data=CropData(0.1, 0.2, 0.5, 0.5, 2.0), is_primary=True)
    repo.save(photo)

    loaded = repo.get(photo.id)
    assert loaded == photo
    assert loaded.photo_path == Path("photos/rex/0.jpg")
    assert repo.get("missing") is None


def test_get_by_pet_is_newest_first(repo):
    older = _photo("rex", 0)
    newer = _photo("rex", 5)
    other = _photo("bella", 10)
    for photo in (older, newer, other):
        repo.save(photo)

    assert [p.id for p in repo.get_by_pet("rex")] == [newer.id, older.id]
    assert repo.get_by_pet("nobody") == []


def test_set_primary_clears_previous_primary(repo):
    first = _photo("rex", 0, is_primary=True)
    second = _photo("rex", 1)
    other_pet = _photo("bella", 2, is_primary=True)
    for photo in (first, second, other_pet):
        repo.save(photo)

    repo.set_primary("rex", second.id)

    assert repo.get_primary("rex").id == second.id
    assert not repo.get(first.id).is_primary
    assert repo.get(other_pet.id).is_primary


def test_update_crop_data_replaces_row(repo):
    photo = _photo("rex", 0)
    repo.save(photo)
    photo.crop_data = CropData(0.0, 0.25, 1.0, 0.5, 1.0)
    repo.save(photo)

    assert len(repo.get_by_pet("rex")) == 1
    assert repo.get(photo.id).crop_data == CropData(0.0, 0.25, 1.0, 0.5, 1.0)


def test_delete_removes_row(repo):
    photo = _photo("rex", 0)
    repo.save(photo)
    repo.delete(photo.id)
    assert repo.get(photo.id) is None


def test_malformed_crop_data_loads_as_uncropped(repo, pool, caplog):
    with pool.connection() as conn:
        conn.execute(
            "INSERT INTO pet_photos (id, pet_id, photo_path, crop_data, is_primary, uploaded_at)"
            " VALUES (?, ?, ?, ?, ?, ?)",
            ("legacy", "rex", "photos/rex/legacy.jpg", '{"x": 0.1}', 0, "2024-01-02T03:04:05"),
        )

    with caplog.at_level("WARNING"):
        photo = repo.get("legacy")

    assert photo.crop_data is None
    assert not photo.is_cropped
    assert photo.uploaded_at.tzinfo == timezone.utc
    assert "legacy" in caplog.text
