"""Typer-based CLI entry point."""

from __future__ import annotations

import functools
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Tuple

import typer
from rich import print
from rich.table import Table

from .application.services.pet_photo_service import PetPhotoService
from .config import DEFAULT_JPEG_QUALITY, EXPORT_DIR_NAME, WORK_DIR_NAME
from .crop.model import CropData, Offset
from .crop.raster import crop_image, load_image, save_jpeg
from .crop.session import CropSession
from .di import Container
from .di.bootstrap import bootstrap
from .errors import (
    ExportError,
    ForeverPawsError,
    ImageLoadError,
    PhotoImportError,
    PhotoNotFoundError,
    SettingsError,
)
from .infrastructure.db.pool import ConnectionPool
from .settings.manager import SettingsManager
from .utils.logging import get_logger

app = typer.Typer(help="Square crop editing and pet photo library tools")
crop_app = typer.Typer(help="Preview and apply square crops")
photos_app = typer.Typer(help="Manage the photos of each pet")
app.add_typer(crop_app, name="crop")
app.add_typer(photos_app, name="photos")


def _handle_errors(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (PhotoNotFoundError, PhotoImportError, ImageLoadError, ExportError, SettingsError) as exc:
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(1) from exc
        except ForeverPawsError as exc:
            typer.echo(f"Unexpected error: {exc}", err=True)
            raise typer.Exit(1) from exc

    return wrapper


def _parse_pair(value: str, separator: str, name: str) -> Tuple[float, float]:
    parts = value.lower().split(separator)
    if len(parts) != 2:
        raise typer.BadParameter(f"expected two numbers separated by '{separator}'", param_hint=name)
    try:
        return float(parts[0]), float(parts[1])
    except ValueError as exc:
        raise typer.BadParameter(f"not a number: {value}", param_hint=name) from exc


def _settings(ctx: typer.Context) -> SettingsManager:
    settings = SettingsManager((ctx.obj or {}).get("settings_path"))
    settings.load()
    return settings


@contextmanager
def _library(ctx: typer.Context, library: Optional[Path]) -> Iterator[PetPhotoService]:
    container = Container()
    bootstrap(container, library, (ctx.obj or {}).get("settings_path"))
    if not container.is_registered(PetPhotoService):
        raise typer.BadParameter(
            "no library given and no library_path configured", param_hint="--library"
        )
    try:
        yield container.resolve(PetPhotoService)
    finally:
        container.resolve(ConnectionPool).close_all()


def _session_crop(
    settings: SettingsManager,
    source_size: Tuple[int, int],
    container: str,
    zoom: float,
    pan: str,
) -> CropData:
    """Replay one pinch and one drag on a fresh session and commit it."""

    container_w, container_h = _parse_pair(container, "x", "--container")
    dx, dy = _parse_pair(pan, ",", "--pan")
    session = CropSession.from_options(settings.crop_options())
    session.fit_display_size(source_size[0], source_size[1], container_w, container_h)
    session.end_zoom(zoom)
    session.apply_pan(Offset(dx, dy))
    session.commit_pan()
    return session.commit_crop(*source_size)


def _print_crop(crop: CropData, source_size: Tuple[int, int]) -> None:
    left, top, right, bottom = crop.pixel_box(*source_size)
    print(
        f"x={crop.x:.4f} y={crop.y:.4f} width={crop.width:.4f} "
        f"height={crop.height:.4f} scale={crop.scale:.3f}"
    )
    print(f"pixels: ({left}, {top}, {right}, {bottom})")


_CONTAINER_OPTION = typer.Option("400x400", "--container", help="Display box as WIDTHxHEIGHT")
_ZOOM_OPTION = typer.Option(1.0, "--zoom", help="Pinch magnification")
_PAN_OPTION = typer.Option("0,0", "--pan", help="Drag translation as DX,DY in display units")
_LIBRARY_OPTION = typer.Option(None, "--library", "-l", help="Library root directory")


@app.callback()
def main(
    ctx: typer.Context,
    settings: Optional[Path] = typer.Option(
        None, "--settings", envvar="PAWS_SETTINGS", help="Path to settings.json"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Forever Paws photo tools."""

    get_logger(logging.DEBUG if verbose else logging.WARNING)
    ctx.obj = {"settings_path": settings}


@crop_app.command("preview")
@_handle_errors
def crop_preview(
    ctx: typer.Context,
    image: Path = typer.Argument(..., exists=True, dir_okay=False),
    container: str = _CONTAINER_OPTION,
    zoom: float = _ZOOM_OPTION,
    pan: str = _PAN_OPTION,
) -> None:
    """Print the crop a zoom and pan would commit for IMAGE."""

    size = load_image(image).size
    crop = _session_crop(_settings(ctx), size, container, zoom, pan)
    _print_crop(crop, size)


@crop_app.command("apply")
@_handle_errors
def crop_apply(
    ctx: typer.Context,
    image: Path = typer.Argument(..., exists=True, dir_okay=False),
    output: Path = typer.Argument(...),
    container: str = _CONTAINER_OPTION,
    zoom: float = _ZOOM_OPTION,
    pan: str = _PAN_OPTION,
) -> None:
    """Crop IMAGE and write the result to OUTPUT as JPEG."""

    settings = _settings(ctx)
    source = load_image(image)
    crop = _session_crop(settings, source.size, container, zoom, pan)
    quality = settings.get("crop.jpeg_quality", DEFAULT_JPEG_QUALITY)
    save_jpeg(crop_image(source, crop), output, quality=quality)
    _print_crop(crop, source.size)
    print(f"[green]Wrote {output}")


@photos_app.command("add")
@_handle_errors
def photos_add(
    ctx: typer.Context,
    pet_id: str,
    image: Path = typer.Argument(..., exists=True, dir_okay=False),
    primary: bool = typer.Option(False, "--primary", help="Make this the primary photo"),
    library: Optional[Path] = _LIBRARY_OPTION,
) -> None:
    """Add IMAGE to the photos of PET_ID."""

    with _library(ctx, library) as service:
        photo = service.add_pet_photo(pet_id, image, is_primary=True if primary else None)
    suffix = " (primary)" if photo.is_primary else ""
    print(f"[green]Added photo {photo.id}{suffix}")


@photos_app.command("list")
@_handle_errors
def photos_list(
    ctx: typer.Context,
    pet_id: str,
    library: Optional[Path] = _LIBRARY_OPTION,
) -> None:
    """List the photos of PET_ID, newest first."""

    with _library(ctx, library) as service:
        photos = service.fetch_pet_photos(pet_id)
    if not photos:
        print(f"No photos for {pet_id}")
        return
    table = Table(title=f"Photos of {pet_id}")
    table.add_column("id")
    table.add_column("primary")
    table.add_column("crop")
    table.add_column("uploaded")
    for photo in photos:
        crop = photo.crop_data
        table.add_row(
            photo.id,
            "*" if photo.is_primary else "",
            (
                f"{crop.x:.2f},{crop.y:.2f} {crop.width:.2f}x{crop.height:.2f}"
                if photo.is_cropped
                else "-"
            ),
            photo.uploaded_at.isoformat(timespec="seconds"),
        )
    print(table)


@photos_app.command("primary")
@_handle_errors
def photos_primary(
    ctx: typer.Context,
    pet_id: str,
    photo_id: str,
    library: Optional[Path] = _LIBRARY_OPTION,
) -> None:
    """Make PHOTO_ID the primary photo of PET_ID."""

    with _library(ctx, library) as service:
        service.set_primary_photo(photo_id, pet_id)
    print(f"[green]Primary photo of {pet_id} is now {photo_id}")


@photos_app.command("delete")
@_handle_errors
def photos_delete(
    ctx: typer.Context,
    photo_id: str,
    library: Optional[Path] = _LIBRARY_OPTION,
) -> None:
    """Delete PHOTO_ID and its stored file."""

    with _library(ctx, library) as service:
        service.delete_pet_photo(photo_id)
    print(f"[green]Deleted {photo_id}")


@photos_app.command("crop")
@_handle_errors
def photos_crop(
    ctx: typer.Context,
    photo_id: str,
    container: str = _CONTAINER_OPTION,
    zoom: float = _ZOOM_OPTION,
    pan: str = _PAN_OPTION,
    clear: bool = typer.Option(False, "--clear", help="Remove the stored crop"),
    library: Optional[Path] = _LIBRARY_OPTION,
) -> None:
    """Commit a new crop for PHOTO_ID."""

    with _library(ctx, library) as service:
        if clear:
            service.update_crop_data(photo_id, None)
            print(f"[green]Cleared crop of {photo_id}")
            return
        photo = service.get_photo(photo_id)
        size = load_image(service.absolute_path(photo)).size
        crop = _session_crop(_settings(ctx), size, container, zoom, pan)
        service.update_crop_data(photo_id, crop)
    _print_crop(crop, size)


@photos_app.command("export")
@_handle_errors
def photos_export(
    ctx: typer.Context,
    photo_id: str,
    output: Optional[Path] = typer.Argument(None),
    library: Optional[Path] = _LIBRARY_OPTION,
) -> None:
    """Write the cropped rendition of PHOTO_ID as JPEG."""

    with _library(ctx, library) as service:
        if output is None:
            output = service.library_root / WORK_DIR_NAME / EXPORT_DIR_NAME / f"{photo_id}.jpg"
        written = service.export_cropped(photo_id, output)
    print(f"[green]Exported {written}")


if __name__ == "__main__":  # pragma: no cover
    app()
