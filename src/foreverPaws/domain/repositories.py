from abc import ABC, abstractmethod
from typing import List, Optional

from .models import PetPhoto


class IPetPhotoRepository(ABC):
    @abstractmethod
    def get(self, id: str) -> Optional[PetPhoto]:
        """Find single photo by ID"""

    @abstractmethod
    def get_by_pet(self, pet_id: str) -> List[PetPhoto]:
        """Return the photos of *pet_id*, newest first"""

    @abstractmethod
    def get_primary(self, pet_id: str) -> Optional[PetPhoto]:
        """Return the primary photo of *pet_id*, if any"""

    @abstractmethod
    def save(self, photo: PetPhoto) -> None:
        """Save photo (insert or update)"""

    @abstractmethod
    def set_primary(self, pet_id: str, photo_id: str) -> None:
        """Mark *photo_id* as the only primary photo of *pet_id*"""

    @abstractmethod
    def delete(self, id: str) -> None:
        """Delete photo by ID"""
