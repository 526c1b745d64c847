"""Errores del dominio.

Los fallos de transporte (`httpx.TransportError`, `httpx.StreamError`) no se
traducen aquí: suben tal cual hasta quien invocó la API.
"""

from __future__ import annotations


class HydrusFilesError(Exception):
    """Base de los errores propios del proyecto."""


class ResponseAlreadyConsumedError(HydrusFilesError):
    """El cuerpo de la respuesta ya fue leído o cerrado antes de materializar."""


class AlreadyMaterializedError(HydrusFilesError):
    """El holder ya tiene contenido; la materialización ocurre una sola vez."""


class NotMaterializedError(HydrusFilesError):
    """Se pidió el contenido de un holder que todavía no se ha materializado."""


class ApiStatusError(HydrusFilesError):
    """La Client API respondió con un status >= 400."""

    def __init__(self, status_code: int, url: str, message: str = "") -> None:
        self.status_code = status_code
        self.url = url
        self.message = message
        detail = f": {message}" if message else ""
        super().__init__(f"HTTP {status_code} for {url}{detail}")
