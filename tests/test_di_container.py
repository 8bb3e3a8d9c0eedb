import pytest

from foreverPaws.di import Container, Lifetime
from foreverPaws.errors import CircularDependencyError, ResolutionError


class Clock:
    pass


class Greeter:
    def __init__(self, name="paws"):
        self.name = name


def test_singleton_is_cached():
    container = Container()
    container.register_singleton(Clock)
    assert container.resolve(Clock) is container.resolve(Clock)


def test_transient_creates_new_instances_with_kwargs():
    container = Container()
    container.register_transient(Greeter, name="rex")
    first, second = container.resolve(Greeter), container.resolve(Greeter)
    assert first is not second
    assert first.name == "rex"


def test_scoped_instances_are_shared_within_scope():
    container = Container()
    container.register_scoped(Clock)
    scope = container.create_scope()
    other = container.create_scope()
    assert scope.resolve(Clock) is scope.resolve(Clock)
    assert scope.resolve(Clock) is not other.resolve(Clock)


def test_factory_receives_container():
    container = Container()
    container.register_instance(Clock, Clock())
    container.register_factory(
        Greeter, lambda c: Greeter(name=type(c.resolve(Clock)).__name__), Lifetime.SINGLETON
    )
    assert container.resolve(Greeter).name == "Clock"
    assert container.resolve(Greeter) is container.resolve(Greeter)


def test_unknown_interface_raises():
    with pytest.raises(ResolutionError):
        Container().resolve(Clock)


def test_circular_dependency_detected():
    container = Container()
    container.register_factory(Clock, lambda c: c.resolve(Greeter))
    container.register_factory(Greeter, lambda c: c.resolve(Clock))
    with pytest.raises(CircularDependencyError):
        container.resolve(Clock)


def test_bootstrap_wires_library_services(tmp_path, qapp):
    from foreverPaws.application.services.pet_photo_service import PetPhotoService
    from foreverPaws.crop.controller import CropEditorController
    from foreverPaws.di.bootstrap import bootstrap
    from foreverPaws.errors.handler import ErrorHandler
    from foreverPaws.infrastructure.db.pool import ConnectionPool

    container = Container()
    bootstrap(container, tmp_path / "library", tmp_path / "settings.json")

    service = container.resolve(PetPhotoService)
    assert service is container.resolve(PetPhotoService)
    assert service.library_root == tmp_path / "library"
    assert (tmp_path / "library" / ".foreverpaws" / "library.db").exists()
    assert container.resolve(ErrorHandler) is container.resolve(ErrorHandler)
    assert isinstance(container.resolve(CropEditorController), CropEditorController)
    container.resolve(ConnectionPool).close_all()


def test_bootstrap_without_library_skips_library_services(tmp_path):
    from foreverPaws.application.services.pet_photo_service import PetPhotoService
    from foreverPaws.di.bootstrap import bootstrap
    from foreverPaws.settings.manager import SettingsManager

    container = Container()
    bootstrap(container, settings_path=tmp_path / "settings.json")

    assert container.is_registered(SettingsManager)
    assert not container.is_registered(PetPhotoService)
