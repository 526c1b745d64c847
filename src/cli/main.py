"""CLI principal (Typer).

Comandos:
- `file`, `thumbnail`, `render`: descargan vía `GetFilesApi` y guardan en disco.
- `doctor`: diagnósticos de entorno (sub-app).
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Awaitable, Callable, Optional

import httpx
import typer
from rich.console import Console
from rich.logging import RichHandler

from adapters.file_response import FileApiResponse
from adapters.file_store import save_file_response
from adapters.get_files_api import GetFilesApi
from cli import doctor
from cli.config_loader import field_default, load_settings, try_load_settings
from cli.ui_components import build_download_table, print_banner
from core.config import LOG_LEVELS
from core.domain.models import FileIdentifier, RenderOptions
from core.errors import HydrusFilesError

app = typer.Typer(no_args_is_help=True, help="Download files from a Hydrus client API.")
app.add_typer(doctor.app, name="doctor")

_console = Console()

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.strip().upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=False, show_path=False)],
    )


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override HYDRUS_GETFILES_LOG_LEVEL."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Hide the banner."),
) -> None:
    if log_level is not None and log_level.strip().upper() not in LOG_LEVELS:
        raise typer.BadParameter(
            f"unknown log level {log_level!r} (choose from {', '.join(LOG_LEVELS)})",
            param_hint="--log-level",
        )

    # Una config inválida se reporta en cada comando (o se corrige con `doctor setup`).
    settings, _ = try_load_settings()
    level = log_level or (settings.log_level if settings is not None else field_default("log_level"))
    configure_logging(level)
    if not quiet:
        print_banner(_console)


def _identifier(file_id: Optional[int], file_hash: Optional[str]) -> FileIdentifier:
    try:
        return FileIdentifier(file_id=file_id, hash=file_hash)
    except ValueError as exc:
        raise typer.BadParameter("pass exactly one of --file-id or --hash (64 hex chars)") from exc


def _fetch_and_save(
    fetch: Callable[[GetFilesApi], Awaitable[FileApiResponse]],
    *,
    fallback_stem: str,
    out: Optional[Path],
    name: Optional[str],
    overwrite: bool,
) -> None:
    settings = load_settings(_console)

    async def _run() -> FileApiResponse:
        async with GetFilesApi(settings) as api:
            return await fetch(api)

    try:
        holder = asyncio.run(_run())
        record = save_file_response(
            holder,
            directory=out or settings.download_dir,
            fallback_stem=fallback_stem,
            filename=name,
            overwrite=overwrite,
        )
    except (HydrusFilesError, httpx.HTTPError, FileExistsError) as exc:
        logger.debug("download failed", exc_info=True)
        _console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    _console.print(build_download_table(record))


_FILE_ID = typer.Option(None, "--file-id", help="Numeric file id.")
_HASH = typer.Option(None, "--hash", help="SHA256 hash (hex).")
_OUT = typer.Option(None, "--out", "-o", help="Output directory (default: HYDRUS_GETFILES_DOWNLOAD_DIR).")
_NAME = typer.Option(None, "--name", help="Output filename.")
_OVERWRITE = typer.Option(False, "--overwrite", help="Replace an existing file.")


@app.command()
def file(
    file_id: Optional[int] = _FILE_ID,
    file_hash: Optional[str] = _HASH,
    out: Optional[Path] = _OUT,
    name: Optional[str] = _NAME,
    overwrite: bool = _OVERWRITE,
) -> None:
    """Download the original file."""

    identifier = _identifier(file_id, file_hash)
    _fetch_and_save(
        lambda api: api.get_file(identifier, download=True),
        fallback_stem=identifier.stem(),
        out=out,
        name=name,
        overwrite=overwrite,
    )


@app.command()
def thumbnail(
    file_id: Optional[int] = _FILE_ID,
    file_hash: Optional[str] = _HASH,
    out: Optional[Path] = _OUT,
    name: Optional[str] = _NAME,
    overwrite: bool = _OVERWRITE,
) -> None:
    """Download the file's thumbnail."""

    identifier = _identifier(file_id, file_hash)
    _fetch_and_save(
        lambda api: api.get_thumbnail(identifier),
        fallback_stem=f"{identifier.stem()}_thumb",
        out=out,
        name=name,
        overwrite=overwrite,
    )


@app.command()
def render(
    file_id: Optional[int] = _FILE_ID,
    file_hash: Optional[str] = _HASH,
    render_format: Optional[int] = typer.Option(None, "--format", help="Hydrus filetype id (1 jpeg, 2 png, 33 webp...)."),
    quality: Optional[int] = typer.Option(None, "--quality", help="Render quality/compression."),
    width: Optional[int] = typer.Option(None, "--width"),
    height: Optional[int] = typer.Option(None, "--height"),
    out: Optional[Path] = _OUT,
    name: Optional[str] = _NAME,
    overwrite: bool = _OVERWRITE,
) -> None:
    """Download a server-side render (resized/converted)."""

    identifier = _identifier(file_id, file_hash)
    try:
        options = RenderOptions(render_format=render_format, render_quality=quality, width=width, height=height)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    _fetch_and_save(
        lambda api: api.get_render(identifier, options, download=True),
        fallback_stem=f"{identifier.stem()}_render",
        out=out,
        name=name,
        overwrite=overwrite,
    )


def run() -> None:
    app()
