"""Materialización de respuestas binarias de `/get_files/*`.

Por qué existe:
- Los endpoints de ficheros devuelven bytes, no JSON: el resultado útil es
  "cuerpo completo + headers".
- Se ejecuta como hook post-construcción de la seam (`GetFilesApi`), de forma
  que el caller recibe el holder ya poblado o una excepción, nunca un estado
  intermedio.
"""

from __future__ import annotations

import logging
from email.message import Message

import httpx
from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from core.errors import AlreadyMaterializedError, ResponseAlreadyConsumedError

logger = logging.getLogger(__name__)


class FileApiResponse(BaseModel):
    """Holder de una respuesta de fichero.

    `content_bytes` y `content_headers` valen `None` hasta que la
    materialización termina; entonces se asignan juntos y una sola vez.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    status_code: int = Field(..., description="Status HTTP de la respuesta.")
    url: str = Field(..., description="URL final solicitada.")
    content_bytes: bytes | None = Field(
        default=None,
        description="Cuerpo completo de la respuesta.",
    )
    content_headers: httpx.Headers | None = Field(
        default=None,
        description="Copia de los headers (lookup case-insensitive, multi-valor).",
    )

    @property
    def is_materialized(self) -> bool:
        return self.content_bytes is not None

    @property
    def content_type(self) -> str | None:
        if self.content_headers is None:
            return None
        return self.content_headers.get("content-type")

    @property
    def content_length(self) -> int | None:
        if self.content_bytes is None:
            return None
        return len(self.content_bytes)

    @property
    def filename(self) -> str | None:
        """Nombre sugerido por `Content-Disposition` (incluye `filename*`)."""

        if self.content_headers is None:
            return None
        disposition = self.content_headers.get("content-disposition")
        if not disposition:
            return None
        msg = Message()
        msg["content-disposition"] = disposition
        return msg.get_filename()

    def set_content(self, content: bytes, headers: httpx.Headers) -> None:
        if self.is_materialized:
            raise AlreadyMaterializedError(f"response for {self.url} is already materialized")
        self.content_bytes = content
        self.content_headers = headers


async def materialize_file_response(
    request: httpx.Request,
    response: httpx.Response,
    holder: FileApiResponse,
) -> None:
    """Lee el cuerpo completo y copia los headers al holder.

    Reglas:
    - `await response.aread()` drena y cierra el stream; no hay entrega parcial.
    - Errores de transporte (reset, cuerpo truncado) se propagan sin traducir
      y el holder queda sin contenido.
    - Un stream ya consumido o cerrado falla con
      `ResponseAlreadyConsumedError` en vez de devolver bytes vacíos.
    """

    if holder.is_materialized:
        raise AlreadyMaterializedError(f"response for {holder.url} is already materialized")
    if response.is_stream_consumed or response.is_closed:
        raise ResponseAlreadyConsumedError(f"response body for {request.url} was already consumed")

    content = await response.aread()
    headers = httpx.Headers(response.headers.raw, encoding=response.headers.encoding)
    holder.set_content(content, headers)

    logger.debug(
        "materialized %s %s: %d bytes (%s)",
        request.method,
        request.url,
        len(content),
        headers.get("content-type", "unknown type"),
    )
