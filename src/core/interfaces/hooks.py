"""Contrato de hooks post-construcción.

Por qué Protocol:
- La seam de la API construye el holder y luego invoca, en orden, cada hook
  registrado. Es la versión explícita de un "partial method" generado.
- Cualquier callable asíncrono con esta firma sirve (funciones o instancias).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    import httpx

    from adapters.file_response import FileApiResponse


@runtime_checkable
class ResponseHook(Protocol):
    """Hook invocado una vez por intercambio HTTP completado.

    Reglas de diseño:
    - Es asíncrono: puede leer el cuerpo (`await response.aread()`).
    - Los errores se propagan; la seam no los captura.
    """

    async def __call__(
        self,
        request: "httpx.Request",
        response: "httpx.Response",
        holder: "FileApiResponse",
    ) -> None:
        ...
