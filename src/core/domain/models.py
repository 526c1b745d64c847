"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Validación estricta de los parámetros que aceptan los endpoints de ficheros
  antes de tocar la red.
- Documentación autocontenida (Field) y serialización estable para la CLI.

Nota:
- Estos modelos describen *qué* se pide y *qué* se guardó, no *cómo* se obtiene.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, model_validator
from pydantic.config import ConfigDict


class FileIdentifier(BaseModel):
    """Identifica un fichero del cliente Hydrus.

    La API acepta `file_id` o `hash`, nunca ambos.
    """

    model_config = ConfigDict(frozen=True)

    file_id: int | None = Field(
        default=None,
        ge=0,
        description="Identificador numérico interno del fichero.",
    )
    hash: str | None = Field(
        default=None,
        pattern=r"^[0-9a-f]{64}$",
        description="SHA256 del fichero en hexadecimal (minúsculas).",
    )

    @model_validator(mode="before")
    @classmethod
    def _normalize_hash(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("hash"), str):
            data = {**data, "hash": data["hash"].strip().lower()}
        return data

    @model_validator(mode="after")
    def _exactly_one(self) -> "FileIdentifier":
        if (self.file_id is None) == (self.hash is None):
            raise ValueError("exactly one of file_id or hash is required")
        return self

    def to_params(self) -> dict[str, str]:
        if self.file_id is not None:
            return {"file_id": str(self.file_id)}
        assert self.hash is not None
        return {"hash": self.hash}

    def stem(self) -> str:
        """Nombre base usado cuando el servidor no sugiere uno."""

        return self.hash if self.hash is not None else f"file_{self.file_id}"


class RenderOptions(BaseModel):
    """Parámetros opcionales de `/get_files/render`."""

    model_config = ConfigDict(frozen=True)

    render_format: int | None = Field(
        default=None,
        ge=0,
        description="Filetype numérico de Hydrus (p.ej. 1 jpeg, 2 png, 33 webp).",
    )
    render_quality: int | None = Field(
        default=None,
        ge=0,
        le=100,
        description="Calidad/compresión; su significado depende del formato.",
    )
    width: int | None = Field(default=None, gt=0)
    height: int | None = Field(default=None, gt=0)

    @model_validator(mode="after")
    def _both_dimensions(self) -> "RenderOptions":
        if (self.width is None) != (self.height is None):
            raise ValueError("width and height must be given together")
        return self

    def to_params(self) -> dict[str, str]:
        params: dict[str, str] = {}
        for key, value in self.model_dump(exclude_none=True).items():
            params[key] = str(value)
        return params


class DownloadRecord(BaseModel):
    """Resultado de guardar en disco un fichero materializado."""

    path: Path = Field(..., description="Ruta del fichero escrito.")
    size: int = Field(..., ge=0, description="Bytes escritos.")
    content_type: str | None = Field(
        default=None,
        description="Content-Type devuelto por el servidor (si lo hubo).",
    )
    sha256: str = Field(
        ...,
        min_length=64,
        max_length=64,
        description="SHA256 del contenido escrito.",
    )
