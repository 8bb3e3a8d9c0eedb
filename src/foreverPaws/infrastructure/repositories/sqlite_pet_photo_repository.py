import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from ...crop.model import CropData
from ...domain.models import PetPhoto
from ...domain.repositories import IPetPhotoRepository
from ...errors import InvalidCropDataError
from ..db.pool import ConnectionPool

_logger = logging.getLogger(__name__)


class SQLitePetPhotoRepository(IPetPhotoRepository):
    """Pet photo records stored in the ``pet_photos`` table.

    ``crop_data`` is kept as JSON text, the same shape the mobile client
    writes, so rows can be exchanged with it unchanged.
    """

    def __init__(self, pool: ConnectionPool):
        self._pool = pool
        _logger.debug("SQLitePetPhotoRepository created, db_path=%s", pool.db_path)
        self._init_table()

    def _init_table(self) -> None:
        with self._pool.connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS pet_photos (
                    id TEXT PRIMARY KEY,
                    pet_id TEXT NOT NULL,
                    photo_path TEXT NOT NULL,
                    crop_data TEXT,
                    is_primary INTEGER NOT NULL DEFAULT 0,
                    uploaded_at TEXT NOT NULL
                )
            """)
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_pet_photos_pet ON pet_photos(pet_id, uploaded_at)"
            )

    def get(self, id: str) -> Optional[PetPhoto]:
        with self._pool.connection() as conn:
            row = conn.execute("SELECT * FROM pet_photos WHERE id = ?", (id,)).fetchone()
        return self._map_row_to_photo(row) if row else None

    def get_by_pet(self, pet_id: str) -> List[PetPhoto]:
        with self._pool.connection() as conn:
            rows = conn.execute(
                "SELECT * FROM pet_photos WHERE pet_id = ? ORDER BY uploaded_at DESC, rowid DESC",
                (pet_id,),
            ).fetchall()
        return [self._map_row_to_photo(row) for row in rows]

    def get_primary(self, pet_id: str) -> Optional[PetPhoto]:
        with self._pool.connection() as conn:
            row = conn.execute(
                "SELECT * FROM pet_photos WHERE pet_id = ? AND is_primary = 1 "
                "ORDER BY uploaded_at DESC LIMIT 1",
                (pet_id,),
            ).fetchone()
        return self._map_row_to_photo(row) if row else None

    def save(self, photo: PetPhoto) -> None:
        with self._pool.connection() as conn:
            conn.execute("""
                INSERT OR REPLACE INTO pet_photos
                (id, pet_id, photo_path, crop_data, is_primary, uploaded_at)
                VALUES (?, ?, ?, ?, ?, ?)
            """, (
                photo.id,
                photo.pet_id,
                photo.photo_path.as_posix(),
                photo.crop_data.to_json() if photo.crop_data is not None else None,
                1 if photo.is_primary else 0,
                photo.uploaded_at.isoformat(),
            ))

    def set_primary(self, pet_id: str, photo_id: str) -> None:
        # Both updates share one transaction so a pet never ends up with two
        # primary photos.
        with self._pool.connection() as conn:
            conn.execute("UPDATE pet_photos SET is_primary = 0 WHERE pet_id = ?", (pet_id,))
            conn.execute(
                "UPDATE pet_photos SET is_primary = 1 WHERE id = ? AND pet_id = ?",
                (photo_id, pet_id),
            )

    def delete(self, id: str) -> None:
        with self._pool.connection() as conn:
            conn.execute("DELETE FROM pet_photos WHERE id = ?", (id,))

    def _map_row_to_photo(self, row) -> PetPhoto:
        crop_data = None
        if row["crop_data"]:
            try:
                crop_data = CropData.from_json(row["crop_data"])
            except InvalidCropDataError as exc:
                _logger.warning("Ignoring malformed crop_data for photo %s: %s", row["id"], exc)
        uploaded_at = datetime.fromisoformat(row["uploaded_at"])
        if uploaded_at.tzinfo is None:
            uploaded_at = uploaded_at.replace(tzinfo=timezone.utc)
        return PetPhoto(
            id=row["id"],
            pet_id=row["pet_id"],
            photo_path=Path(row["photo_path"]),
            crop_data=crop_data,
            is_primary=bool(row["is_primary"]),
            uploaded_at=uploaded_at,
        )
