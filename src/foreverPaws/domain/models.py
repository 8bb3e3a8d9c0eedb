from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from ..crop.model import CropData


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class PetPhoto:
    id: str
    pet_id: str
    photo_path: Path  # Relative to the library root
    crop_data: Optional[CropData] = None
    is_primary: bool = False
    uploaded_at: datetime = field(default_factory=_utcnow)

    @property
    def is_cropped(self) -> bool:
        return self.crop_data is not None and not self.crop_data.is_identity()

    @classmethod
    def create(
        cls,
        pet_id: str,
        photo_path: Path,
        crop_data: Optional[CropData] = None,
        is_primary: bool = False,
    ) -> PetPhoto:
        return cls(
            id=str(uuid.uuid4()),
            pet_id=pet_id,
            photo_path=photo_path,
            crop_data=crop_data,
            is_primary=is_primary,
        )
