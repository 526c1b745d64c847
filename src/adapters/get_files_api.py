"""Seam de la Client API: familia `/get_files/*` binaria.

Por qué una seam mínima:
- Hace el papel del cliente generado: construye la request, la envía con el
  cuerpo en streaming, crea el holder y ejecuta los hooks post-construcción.
- El hook por defecto es `materialize_file_response`; los tests o llamadores
  pueden añadir los suyos (p.ej. verificar hashes) sin heredar nada.
"""

from __future__ import annotations

import logging
from typing import Sequence

import httpx

from adapters.file_response import FileApiResponse, materialize_file_response
from adapters.http_client import build_async_client
from core.config import AppSettings
from core.domain.models import FileIdentifier, RenderOptions
from core.errors import ApiStatusError
from core.interfaces.hooks import ResponseHook

logger = logging.getLogger(__name__)

_ERROR_MESSAGE_LIMIT = 500


class GetFilesApi:
    """Endpoints binarios: fichero completo, thumbnail y render."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        on_created: Sequence[ResponseHook] | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._owns_client = client is None
        self._client = client or build_async_client(self._settings)
        self._hooks: list[ResponseHook] = (
            list(on_created) if on_created is not None else [materialize_file_response]
        )

    async def __aenter__(self) -> "GetFilesApi":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def get_file(self, identifier: FileIdentifier, *, download: bool = False) -> FileApiResponse:
        """`GET /get_files/file`.

        `download=True` pide `Content-Disposition: attachment` al servidor.
        """

        params = identifier.to_params()
        if download:
            params["download"] = "true"
        return await self._send("/get_files/file", params)

    async def get_thumbnail(self, identifier: FileIdentifier) -> FileApiResponse:
        return await self._send("/get_files/thumbnail", identifier.to_params())

    async def get_render(
        self,
        identifier: FileIdentifier,
        options: RenderOptions | None = None,
        *,
        download: bool = False,
    ) -> FileApiResponse:
        """`GET /get_files/render` (imágenes, ugoiras y animaciones renderizadas)."""

        params = identifier.to_params()
        if options is not None:
            params.update(options.to_params())
        if download:
            params["download"] = "true"
        return await self._send("/get_files/render", params)

    async def _send(self, path: str, params: dict[str, str]) -> FileApiResponse:
        request = self._client.build_request("GET", path, params=params)
        logger.info("GET %s", request.url)

        response = await self._client.send(request, stream=True)
        try:
            holder = FileApiResponse(status_code=response.status_code, url=str(request.url))
            if response.status_code >= 400:
                message = await _read_error_message(response)
                raise ApiStatusError(response.status_code, str(request.url), message)

            for hook in self._hooks:
                await hook(request, response, holder)
            return holder
        finally:
            await response.aclose()


async def _read_error_message(response: httpx.Response) -> str:
    """Lee como mucho `_ERROR_MESSAGE_LIMIT` bytes del cuerpo de error."""

    buffer = bytearray()
    async for chunk in response.aiter_bytes():
        buffer.extend(chunk)
        if len(buffer) >= _ERROR_MESSAGE_LIMIT:
            break
    text = bytes(buffer[:_ERROR_MESSAGE_LIMIT]).decode(response.encoding or "utf-8", errors="replace")
    return text.strip()
