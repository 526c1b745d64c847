"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import click
import httpx
import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_async_client
from cli.config_loader import describe_validation_error, field_default, load_settings, try_load_settings
from core.config import LOG_LEVELS, AppSettings, write_user_env_vars

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_endpoint(settings: AppSettings, path: str) -> tuple[bool, str, httpx.Response | None]:
    try:
        async with build_async_client(settings) as client:
            response = await client.get(path)
    except httpx.HTTPError as exc:
        return False, str(exc) or type(exc).__name__, None
    if response.status_code != 200:
        return False, f"HTTP {response.status_code}: {response.text.strip()[:200]}", response
    return True, f"HTTP {response.status_code}", response


def _describe_api_version(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return "unexpected payload"
    if not isinstance(data, dict):
        return "unexpected payload"
    return f"api {data.get('version', '?')}, hydrus {data.get('hydrus_version', '?')}"


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = load_settings(_console)

    table = Table(title="hydrus-getfiles Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    table.add_row("API URL", "OK", settings.api_url)
    if settings.access_key:
        table.add_row("Access key", "OK", "Configured")
    else:
        table.add_row("Access key", "MISSING", "Run `doctor setup` or set HYDRUS_GETFILES_ACCESS_KEY")
    table.add_row("Download dir", "OK", str(settings.download_dir))

    ok_api, detail_api, api_response = asyncio.run(_check_endpoint(settings, "/api_version"))
    if ok_api and api_response is not None:
        detail_api = f"{detail_api} ({_describe_api_version(api_response)})"
    table.add_row("API reachable", "OK" if ok_api else "FAIL", detail_api)

    ok_key = False
    if settings.access_key and ok_api:
        ok_key, detail_key, _ = asyncio.run(_check_endpoint(settings, "/verify_access_key"))
        table.add_row("Key accepted", "OK" if ok_key else "FAIL", detail_key)

    _console.print(table)

    if ok_api and not ok_key:
        _console.print(
            "\n[yellow]Note:[/yellow] /get_files/* needs an access key with the 'search and fetch files' permission."
        )


@app.command(name="setup")
def setup() -> None:
    """Interactive setup (stores config in the user config .env).

    Works even when the current configuration is invalid, so it can repair it.
    """

    current, error = try_load_settings()
    if error is not None:
        _console.print(f"[yellow]Current configuration is invalid:[/yellow] {describe_validation_error(error)}")

    api_url = typer.prompt(
        "Client API URL",
        default=current.api_url if current is not None else field_default("api_url"),
        show_default=True,
    ).strip()
    access_key = typer.prompt("Access key", hide_input=True, confirmation_prompt=False).strip()
    log_level = typer.prompt(
        "Log level",
        default=current.log_level if current is not None else field_default("log_level"),
        type=click.Choice(LOG_LEVELS, case_sensitive=False),
        show_default=True,
    )

    if not api_url or not access_key:
        raise typer.BadParameter("api_url and access_key are required")

    env_path = write_user_env_vars(
        {
            "HYDRUS_GETFILES_API_URL": api_url,
            "HYDRUS_GETFILES_ACCESS_KEY": access_key,
            "HYDRUS_GETFILES_LOG_LEVEL": log_level.upper(),
        }
    )

    _console.print(f"[green]Saved config to:[/green] {env_path}")
