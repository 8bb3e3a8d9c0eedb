"""Application service managing the photos of each pet and their crops."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from ...config import DEFAULT_JPEG_QUALITY, PHOTOS_DIR_NAME, SUPPORTED_IMAGE_SUFFIXES
from ...crop.model import CropData
from ...crop.raster import crop_image, load_image, save_jpeg
from ...domain.models import PetPhoto
from ...domain.repositories import IPetPhotoRepository
from ...errors import ExportError, ImageLoadError, PhotoImportError, PhotoNotFoundError
from ...events import EventBus, PetPhotoUpdatedEvent

_LOGGER = logging.getLogger(__name__)


def _check_pet_id(pet_id: str) -> None:
    """Reject ids that cannot be used as a single directory name."""

    if (
        not pet_id
        or pet_id in (".", "..")
        or "/" in pet_id
        or "\\" in pet_id
        or Path(pet_id).is_absolute()
    ):
        raise PhotoImportError(f"Invalid pet id: {pet_id!r}")


class PetPhotoService:
    """Add, crop, promote and remove pet photos stored under a library root."""

    def __init__(
        self,
        repository: IPetPhotoRepository,
        library_root: Path,
        event_bus: EventBus,
        jpeg_quality: int = DEFAULT_JPEG_QUALITY,
    ) -> None:
        self._repo = repository
        self._root = Path(library_root)
        self._events = event_bus
        self._jpeg_quality = int(jpeg_quality)

    @property
    def library_root(self) -> Path:
        return self._root

    def absolute_path(self, photo: PetPhoto) -> Path:
        return self._root / photo.photo_path

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def fetch_pet_photos(self, pet_id: str) -> List[PetPhoto]:
        return self._repo.get_by_pet(pet_id)

    def get_primary_photo(self, pet_id: str) -> Optional[PetPhoto]:
        return self._repo.get_primary(pet_id)

    def get_photo(self, photo_id: str) -> PetPhoto:
        photo = self._repo.get(photo_id)
        if photo is None:
            raise PhotoNotFoundError(f"Photo not found: {photo_id}")
        return photo

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def add_pet_photo(
        self,
        pet_id: str,
        source: Path,
        crop_data: Optional[CropData] = None,
        is_primary: Optional[bool] = None,
    ) -> PetPhoto:
        """Store *source* as a new photo of *pet_id*.

        The image is re-encoded as JPEG inside the library.  When
        *is_primary* is ``None`` the pet's first photo becomes primary.
        """

        _check_pet_id(pet_id)
        source = Path(source)
        if source.suffix.lower() not in SUPPORTED_IMAGE_SUFFIXES:
            raise PhotoImportError(f"Unsupported image type: {source.name}")
        try:
            image = load_image(source)
        except ImageLoadError as exc:
            raise PhotoImportError(str(exc)) from exc

        if is_primary is None:
            is_primary = not self._repo.get_by_pet(pet_id)

        photo = PetPhoto.create(pet_id, Path(), crop_data=crop_data, is_primary=False)
        photo.photo_path = Path(PHOTOS_DIR_NAME) / pet_id / f"pet_photo_{photo.id}.jpg"
        stored = save_jpeg(image, self.absolute_path(photo), quality=self._jpeg_quality)
        try:
            self._repo.save(photo)
        except Exception:
            stored.unlink(missing_ok=True)
            raise
        if is_primary:
            self._repo.set_primary(pet_id, photo.id)
            photo.is_primary = True

        _LOGGER.info("Added photo %s for pet %s (primary=%s)", photo.id, pet_id, photo.is_primary)
        self._publish(pet_id, photo.id, "added")
        return photo

    def set_primary_photo(self, photo_id: str, pet_id: str) -> PetPhoto:
        photo = self.get_photo(photo_id)
        if photo.pet_id != pet_id:
            raise PhotoNotFoundError(f"Photo {photo_id} does not belong to pet {pet_id}")
        self._repo.set_primary(pet_id, photo_id)
        photo.is_primary = True
        _LOGGER.info("Photo %s is now primary for pet %s", photo_id, pet_id)
        self._publish(pet_id, photo_id, "primary")
        return photo

    def update_crop_data(self, photo_id: str, crop_data: Optional[CropData]) -> PetPhoto:
        """Replace the stored crop of *photo_id*; ``None`` clears it."""

        photo = self.get_photo(photo_id)
        photo.crop_data = crop_data
        self._repo.save(photo)
        _LOGGER.info(
            "Updated crop for photo %s: %s",
            photo_id,
            crop_data.to_mapping() if crop_data is not None else None,
        )
        self._publish(photo.pet_id, photo_id, "crop")
        return photo

    def delete_pet_photo(self, photo_id: str) -> None:
        """Remove the record and stored file; promote the newest survivor if needed."""

        photo = self.get_photo(photo_id)
        self._repo.delete(photo_id)
        self.absolute_path(photo).unlink(missing_ok=True)
        if photo.is_primary:
            remaining = self._repo.get_by_pet(photo.pet_id)
            if remaining:
                self._repo.set_primary(photo.pet_id, remaining[0].id)
                _LOGGER.info("Promoted photo %s to primary for pet %s", remaining[0].id, photo.pet_id)
        _LOGGER.info("Deleted photo %s of pet %s", photo_id, photo.pet_id)
        self._publish(photo.pet_id, photo_id, "deleted")

    def export_cropped(self, photo_id: str, destination: Path) -> Path:
        """Write the cropped rendition of *photo_id* to *destination* as JPEG."""

        photo = self.get_photo(photo_id)
        try:
            image = load_image(self.absolute_path(photo))
        except ImageLoadError as exc:
            raise ExportError(str(exc)) from exc
        if photo.crop_data is not None:
            image = crop_image(image, photo.crop_data)
        return save_jpeg(image, Path(destination), quality=self._jpeg_quality)

    def _publish(self, pet_id: str, photo_id: Optional[str], action: str) -> None:
        self._events.publish(PetPhotoUpdatedEvent(pet_id=pet_id, photo_id=photo_id, action=action))
