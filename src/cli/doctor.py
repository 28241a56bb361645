"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from adapters.enso_client import EnsoClient
from core.config import AppSettings, write_user_env_vars
from core.domain.models import ClientConfig
from core.errors import ApiError, EnsoError

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_api(config: ClientConfig) -> tuple[str, str]:
    try:
        async with EnsoClient(config) as enso:
            networks = await enso.get_networks()
        return "OK", f"{len(networks)} networks"
    except ApiError as exc:
        if exc.status_code in (401, 403):
            return "FAIL", f"HTTP {exc.status_code}: API key rejected"
        return "FAIL", str(exc)
    except EnsoError as exc:
        return "FAIL", str(exc)


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()
    config = ClientConfig.from_settings(settings)

    table = Table(title="enso-cli Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    if settings.api_key:
        table.add_row("API key", "OK", "Sent as Bearer token")
    else:
        table.add_row("API key", "MISSING", "Run `enso doctor setup` or set ENSO_API_KEY")
    table.add_row("API URL", "OK", config.api_url)
    table.add_row("Timeout", "OK", f"{settings.http_timeout_seconds:.1f}s")

    status, detail = asyncio.run(_check_api(config))
    table.add_row("API connectivity", status, detail)

    _console.print(table)

    if status != "OK":
        raise typer.Exit(code=1)


@app.command(name="setup")
def setup() -> None:
    """Interactive setup (stores config in the user config .env)."""

    settings = AppSettings()
    base_url = typer.prompt("Enso base URL", default=settings.base_url, show_default=True).strip()
    api_key = typer.prompt("Enso API key", hide_input=True, confirmation_prompt=False).strip()

    if not base_url or not api_key:
        raise typer.BadParameter("base_url and api_key are required")

    env_path = write_user_env_vars(
        {
            "ENSO_BASE_URL": base_url,
            "ENSO_API_KEY": api_key,
        }
    )

    _console.print(f"[green]Saved Enso config to:[/green] {env_path}")
