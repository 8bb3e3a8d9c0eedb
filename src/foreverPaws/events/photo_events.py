"""Events describing changes to the pet photo library and crop editor."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .bus import Event


@dataclass(kw_only=True)
class PetPhotoUpdatedEvent(Event):
    """Published after any mutation of a pet's photo collection.

    ``action`` is one of ``"added"``, ``"deleted"``, ``"primary"`` or ``"crop"``.
    """

    pet_id: str
    photo_id: Optional[str] = None
    action: str = "updated"


@dataclass(kw_only=True)
class CropCommittedEvent(Event):
    """Published by the crop editor when the user confirms a crop."""

    photo_id: Optional[str]
    crop_data: object
