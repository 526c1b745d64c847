"""Persistencia en disco de ficheros materializados.

Por qué aparte:
- La materialización deja los bytes en memoria; decidir nombre y destino es
  cosa de la CLI/llamador, no de la seam HTTP.
"""

from __future__ import annotations

import hashlib
import logging
import mimetypes
from pathlib import Path, PurePosixPath, PureWindowsPath

from adapters.file_response import FileApiResponse
from core.domain.models import DownloadRecord
from core.errors import NotMaterializedError

logger = logging.getLogger(__name__)


def _safe_name(name: str) -> str | None:
    # Solo el último componente: nunca seguir rutas que vengan del servidor.
    base = PureWindowsPath(PurePosixPath(name).name).name.strip()
    if base in {"", ".", ".."}:
        return None
    return base


def pick_filename(holder: FileApiResponse, *, fallback_stem: str, filename: str | None = None) -> str:
    """Precedencia: argumento explícito, `Content-Disposition`, stem + extensión."""

    for candidate in (filename, holder.filename):
        if candidate:
            safe = _safe_name(candidate)
            if safe:
                return safe

    ext = ""
    if holder.content_type:
        mime = holder.content_type.split(";", 1)[0].strip().lower()
        ext = mimetypes.guess_extension(mime) or ""
    return f"{fallback_stem}{ext}"


def save_file_response(
    holder: FileApiResponse,
    *,
    directory: Path,
    fallback_stem: str,
    filename: str | None = None,
    overwrite: bool = False,
) -> DownloadRecord:
    """Escribe `content_bytes` en `directory` y devuelve un `DownloadRecord`."""

    if holder.content_bytes is None:
        raise NotMaterializedError(f"response for {holder.url} has no content yet")

    directory.mkdir(parents=True, exist_ok=True)
    output_path = directory / pick_filename(holder, fallback_stem=fallback_stem, filename=filename)
    # "xb" falla de forma atómica si el fichero ya existe.
    with output_path.open("wb" if overwrite else "xb") as f:
        f.write(holder.content_bytes)
    logger.info("wrote %d bytes to %s", len(holder.content_bytes), output_path)

    return DownloadRecord(
        path=output_path,
        size=len(holder.content_bytes),
        content_type=holder.content_type,
        sha256=hashlib.sha256(holder.content_bytes).hexdigest(),
    )
