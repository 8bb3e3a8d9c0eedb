from __future__ import annotations

from pathlib import Path
from typing import Optional

from ..application.services.pet_photo_service import PetPhotoService
from ..config import DEFAULT_JPEG_QUALITY, LIBRARY_DB_NAME, WORK_DIR_NAME
from ..crop.controller import CropEditorController
from ..domain.repositories import IPetPhotoRepository
from ..errors.handler import ErrorHandler
from ..events.bus import EventBus
from ..infrastructure.db.pool import ConnectionPool
from ..infrastructure.repositories import SQLitePetPhotoRepository
from ..settings.manager import SettingsManager
from ..utils.logging import get_logger
from .container import Container
from .lifetime import Lifetime


def bootstrap(
    container: Container,
    library_root: Optional[Path] = None,
    settings_path: Optional[Path] = None,
) -> None:
    """Register all application services in the DI container.

    The settings file is loaded eagerly.  Library services are only
    registered when a library root is known, either from *library_root* or
    from the ``library_path`` setting.
    """

    settings = SettingsManager(settings_path)
    settings.load()
    container.register_instance(SettingsManager, settings)
    container.register_instance(EventBus, EventBus(logger=get_logger()))
    container.register_factory(
        ErrorHandler,
        lambda c: ErrorHandler(get_logger(), c.resolve(EventBus)),
        Lifetime.SINGLETON,
    )
    container.register_factory(
        CropEditorController,
        lambda c: CropEditorController(
            crop_options=c.resolve(SettingsManager).crop_options,
            error_handler=c.resolve(ErrorHandler),
            event_bus=c.resolve(EventBus),
        ),
    )

    if library_root is None:
        configured = settings.get("library_path")
        if not configured:
            return
        library_root = Path(configured).expanduser()
    library_root = Path(library_root)

    def _create_pool(_: Container) -> ConnectionPool:
        work_dir = library_root / WORK_DIR_NAME
        work_dir.mkdir(parents=True, exist_ok=True)
        return ConnectionPool(work_dir / LIBRARY_DB_NAME)

    container.register_factory(ConnectionPool, _create_pool, Lifetime.SINGLETON)
    container.register_factory(
        IPetPhotoRepository,
        lambda c: SQLitePetPhotoRepository(c.resolve(ConnectionPool)),
        Lifetime.SINGLETON,
    )
    container.register_factory(
        PetPhotoService,
        lambda c: PetPhotoService(
            c.resolve(IPetPhotoRepository),
            library_root,
            c.resolve(EventBus),
            jpeg_quality=c.resolve(SettingsManager).get("crop.jpeg_quality", DEFAULT_JPEG_QUALITY),
        ),
        Lifetime.SINGLETON,
    )
