"""Carga de configuración para los comandos de la CLI.

Por qué aquí:
- Un `.env` o una variable de entorno inválida debe acabar en un mensaje claro
  y exit code 1, no en un traceback de pydantic.
- `doctor setup` necesita poder arrancar aunque la config actual sea inválida.
"""

from __future__ import annotations

import typer
from pydantic import ValidationError
from rich.console import Console

from core.config import AppSettings


def describe_validation_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error.get("loc", ())) or "settings"
        parts.append(f"{field}: {error.get('msg', 'invalid value')}")
    return "; ".join(parts)


def try_load_settings() -> tuple[AppSettings | None, ValidationError | None]:
    try:
        return AppSettings(), None
    except ValidationError as exc:
        return None, exc


def load_settings(console: Console) -> AppSettings:
    """Devuelve `AppSettings` o termina con exit code 1 si la config es inválida."""

    settings, error = try_load_settings()
    if error is not None:
        console.print(f"[red]Invalid configuration:[/red] {describe_validation_error(error)}")
        console.print("[yellow]Fix the HYDRUS_GETFILES_* variables or run `doctor setup`.[/yellow]")
        raise typer.Exit(code=1)
    assert settings is not None
    return settings


def field_default(name: str) -> str:
    default = AppSettings.model_fields[name].default
    return "" if default is None else str(default)
