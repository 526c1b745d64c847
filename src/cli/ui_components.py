"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import DownloadRecord


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida."""

    title = Text("hydrus-getfiles", style="bold cyan")
    subtitle = Text("Ficheros • Thumbnails • Renders", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def _human_size(size: int) -> str:
    value = float(size)
    for unit in ("B", "KiB", "MiB", "GiB"):
        if value < 1024 or unit == "GiB":
            return f"{value:.0f} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{size} B"


def build_download_table(record: DownloadRecord) -> Table:
    """Tabla Rich con el resultado de una descarga."""

    table = Table(title="Download")
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")
    table.add_row("Path", str(record.path))
    table.add_row("Size", f"{_human_size(record.size)} ({record.size} bytes)")
    table.add_row("Content-Type", record.content_type or "-")
    table.add_row("SHA256", record.sha256)
    return table
