"""Typer-based CLI entry point."""

from __future__ import annotations

import functools
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich import print
from rich.table import Table

from .appctx import ReviewContext, build_review_context
from .errors import GeoReviewError
from .infrastructure.seen_store import JsonSeenSetStore
from .settings.manager import SettingsManager
from .utils.logging import configure_logging

app = typer.Typer(help="Review estimated locations for photos without GPS data")


def _handle_errors(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except GeoReviewError as exc:
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(1) from exc

    return wrapper


AssetsArg = typer.Argument(..., exists=True, dir_okay=False, help="Asset export (JSON)")
TrackArg = typer.Argument(..., exists=True, dir_okay=False, help="Movement timeline (JSON)")
TagOpt = typer.Option(None, "--tag", "-t", help="Only assets carrying this tag id (repeatable)")
NotInAlbumOpt = typer.Option(False, "--not-in-album", help="Only assets that belong to no album")
CameraOpt = typer.Option(None, "--camera-model", help="Only assets shot with this camera model")
PageSizeOpt = typer.Option(None, "--page-size", min=1, help="Assets per page (defaults to settings)")
SettingsOpt = typer.Option(None, "--settings", dir_okay=False, help="Settings file to use")
GeocodeOpt = typer.Option(True, "--geocode/--no-geocode", help="Label saved coordinates with a place name")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output")) -> None:
    configure_logging(logging.DEBUG if verbose else logging.WARNING)


def _open_session(
    assets: Path,
    track: Path,
    tags: Optional[List[str]],
    not_in_album: bool,
    camera_model: Optional[str],
    page_size: Optional[int],
    settings_path: Optional[Path],
    geocode: bool = False,
) -> ReviewContext:
    context = build_review_context(assets, track, settings_path=settings_path, geocode=geocode)
    criteria = context.criteria(
        tag_ids=tags or (),
        is_not_in_album=not_in_album,
        camera_model=camera_model,
        page_size=page_size,
    )
    outcome = context.viewmodel.set_filter(criteria)
    if not outcome.success:
        raise outcome.error
    return context


def _load_pages(context: ReviewContext, limit: Optional[int]) -> None:
    """Keep fetching until the store runs out of pages or *limit* is reached."""

    loaded = 1
    vm = context.viewmodel
    while vm.has_next_page.value and (limit is None or loaded < limit):
        outcome = vm.load_next_page()
        if not outcome.success:
            raise outcome.error
        loaded += 1


def _candidate_table(context: ReviewContext) -> Table:
    table = Table(title="Location candidates")
    table.add_column("Asset")
    table.add_column("File")
    table.add_column("Taken")
    table.add_column("Estimate")
    table.add_column("Source")
    table.add_column("Accept", justify="center")
    for candidate in context.viewmodel.candidates.value:
        estimate = candidate.estimate
        if estimate is None:
            where, source = "-", "-"
        else:
            where = f"{estimate.point.lat:.5f}, {estimate.point.lng:.5f}"
            source = estimate.confidence_source.value
        table.add_row(
            candidate.asset.id,
            candidate.asset.original_file_name,
            candidate.asset.created_at.isoformat(timespec="seconds"),
            where,
            source,
            "[green]yes" if candidate.accepted else "[red]no",
        )
    return table


@app.command()
@_handle_errors
def review(
    assets: Path = AssetsArg,
    track: Path = TrackArg,
    tags: Optional[List[str]] = TagOpt,
    not_in_album: bool = NotInAlbumOpt,
    camera_model: Optional[str] = CameraOpt,
    page_size: Optional[int] = PageSizeOpt,
    pages: int = typer.Option(1, "--pages", min=1, help="Number of pages to load"),
    settings: Optional[Path] = SettingsOpt,
) -> None:
    """List the candidates of the first pages without changing anything."""

    context = _open_session(assets, track, tags, not_in_album, camera_model, page_size, settings)
    _load_pages(context, pages)
    vm = context.viewmodel
    print(_candidate_table(context))
    print(
        f"{vm.visible_count} to review, {vm.confirmed_count.value} accepted, "
        f"{vm.hidden_count.value} hidden" + (" (more pages available)" if vm.has_next_page.value else "")
    )


@app.command()
@_handle_errors
def commit(
    assets: Path = AssetsArg,
    track: Path = TrackArg,
    tags: Optional[List[str]] = TagOpt,
    not_in_album: bool = NotInAlbumOpt,
    camera_model: Optional[str] = CameraOpt,
    page_size: Optional[int] = PageSizeOpt,
    pages: Optional[int] = typer.Option(None, "--pages", min=1, help="Limit the pages loaded before committing"),
    hide_rest: bool = typer.Option(False, "--hide-rest", help="Hide candidates that were not accepted"),
    settings: Optional[Path] = SettingsOpt,
    geocode: bool = GeocodeOpt,
) -> None:
    """Save every automatically accepted estimate to the asset file."""

    context = _open_session(assets, track, tags, not_in_album, camera_model, page_size, settings, geocode)
    _load_pages(context, pages)
    hide_rest = hide_rest or bool(context.settings.get("review.hide_rest_by_default"))
    outcome = context.viewmodel.commit(hide_rest=hide_rest)
    if not outcome.success:
        raise outcome.error
    result = outcome.result
    print(f"[green]Saved {result.committed_count} locations to {assets}")
    if result.hidden_ids:
        print(f"[yellow]Hid {len(result.hidden_ids)} unaccepted assets")
    if result.hide_error is not None:
        print(f"[red]Locations saved, but unaccepted assets were not hidden: {result.hide_error}")
    print(f"Resume review at page {result.resume_page}")


@app.command()
@_handle_errors
def unhide(
    assets: Path = AssetsArg,
    track: Path = TrackArg,
    tags: Optional[List[str]] = TagOpt,
    not_in_album: bool = NotInAlbumOpt,
    camera_model: Optional[str] = CameraOpt,
    page_size: Optional[int] = PageSizeOpt,
    settings: Optional[Path] = SettingsOpt,
) -> None:
    """Restore hidden assets that match the given filter."""

    context = _open_session(assets, track, tags, not_in_album, camera_model, page_size, settings)
    _load_pages(context, None)
    restored = context.viewmodel.unhide_all()
    print(f"[green]Restored {len(restored)} hidden assets")


@app.command()
@_handle_errors
def hidden(settings: Optional[Path] = SettingsOpt) -> None:
    """Print how many assets are currently hidden."""

    manager = SettingsManager(settings)
    manager.load()
    store = JsonSeenSetStore(manager.seen_store_path())
    store.load()
    print(f"{len(store)} hidden assets ({store.path})")


if __name__ == "__main__":  # pragma: no cover
    app()
