"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import httpx
import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_async_client
from adapters.local_storage import JsonFileStorage
from core.config import AppSettings, get_user_env_file
from core.services.session_store import ROLE_KEY, TOKEN_KEY

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_backend(settings: AppSettings) -> tuple[bool, str]:
    """Any HTTP answer from GET /books counts as reachable (401 included)."""

    try:
        async with build_async_client(settings) as client:
            response = await client.get("/books")
        return True, f"HTTP {response.status_code}"
    except httpx.HTTPError as exc:
        return False, f"{exc.__class__.__name__}: {exc}"


def _check_session_file(settings: AppSettings) -> tuple[str, str]:
    storage = JsonFileStorage(settings.storage_path)
    keys = set(storage.keys())
    if not keys:
        return "EMPTY", f"{settings.storage_path} (no session)"
    if {TOKEN_KEY, ROLE_KEY} <= keys:
        return "OK", f"{settings.storage_path} (role={storage.get(ROLE_KEY)})"
    return "WARN", f"{settings.storage_path} (incomplete, cleared on next start)"


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="Biblioteca Nube Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    table.add_row("API URL", "OK", settings.base_url)
    table.add_row("User .env", "OK" if get_user_env_file().exists() else "OPTIONAL", str(get_user_env_file()))
    table.add_row("Language", "OK", settings.default_language.label())

    # Connectivity (best-effort)
    ok_http, detail_http = asyncio.run(_check_backend(settings))
    table.add_row("Backend", "OK" if ok_http else "FAIL", detail_http)

    status, detail = _check_session_file(settings)
    table.add_row("Session", status, detail)

    _console.print(table)

    if not ok_http:
        _console.print(
            "\n[yellow]Note:[/yellow] set the backend with `biblioteca config set-api <url>` "
            "or the BIBLIOTECA_API_URL environment variable."
        )
        raise typer.Exit(code=1)
