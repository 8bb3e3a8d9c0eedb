from .sqlite_pet_photo_repository import SQLitePetPhotoRepository

__all__ = ["SQLitePetPhotoRepository"]
