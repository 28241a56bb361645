"""CLI principal (Typer).

Un comando por endpoint del API, más utilidades para bundles. Los comandos
son finos: piden datos vía `core.services.explorer` / `EnsoClient` y delegan
el render en `cli.ui_components`.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Awaitable, Optional, TypeVar

import typer
from rich.console import Console

from adapters.enso_client import EnsoClient
from adapters.json_exporter import dumps, export_json
from cli import doctor
from cli.ui_components import (
    build_actions_table,
    build_bundle_panel,
    build_networks_table,
    build_protocols_table,
    build_tokens_table,
    print_banner,
)
from core.config import AppSettings
from core.domain.models import ClientConfig
from core.errors import ApiError, EnsoError
from core.logging_config import setup_logging
from core.services.explorer import (
    ExplorerHooks,
    bundle_template,
    collect_token_addresses,
    load_bundle,
)

T = TypeVar("T")

app = typer.Typer(no_args_is_help=True, help="Command line client for the Enso DeFi API.")
bundle_app = typer.Typer(no_args_is_help=True, help="Build and send Enso bundles.")
app.add_typer(bundle_app, name="bundle")
app.add_typer(doctor.app, name="doctor")
app.command(name="setup", help="Store the API key and base URL in the user config .env.")(doctor.setup)

_console = Console()
_err_console = Console(stderr=True)


def build_client(settings: AppSettings) -> EnsoClient:
    return EnsoClient(ClientConfig.from_settings(settings))


def _run(coro: Awaitable[T]) -> T:
    """Ejecuta una corrutina y traduce errores a salida legible + exit code 1."""

    try:
        return asyncio.run(coro)  # type: ignore[arg-type]
    except ApiError as exc:
        hint = " (check ENSO_API_KEY)" if exc.status_code in (401, 403) else ""
        _err_console.print(f"[red]API error {exc.status_code}:[/red] {exc.detail}{hint}")
    except EnsoError as exc:
        _err_console.print(f"[red]{exc.__class__.__name__}:[/red] {exc}")
    except (KeyError, ValueError) as exc:
        _err_console.print(f"[red]Invalid input:[/red] {exc}")
    raise typer.Exit(code=1)


def _emit(payload: Any, *, as_json: bool, output: Path | None) -> bool:
    """Salida JSON (stdout o fichero). Devuelve True si ya se emitió."""

    if output is not None:
        export_json(payload=payload, output_path=output)
        _err_console.print(f"[green]Saved:[/green] {output}")
        return True
    if as_json:
        typer.echo(dumps(payload))
        return True
    return False


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log HTTP activity (DEBUG)."),
) -> None:
    settings = AppSettings()
    setup_logging("DEBUG" if verbose else settings.log_level, console=_err_console)
    ctx.obj = settings


@app.command()
def banner() -> None:
    """Print the welcome banner."""

    print_banner(_console)


@app.command()
def networks(
    ctx: typer.Context,
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write JSON to a file."),
) -> None:
    """List the networks supported by Enso."""

    async def fetch():
        async with build_client(ctx.obj) as enso:
            return await enso.get_networks()

    result = _run(fetch())
    if not _emit(result, as_json=as_json, output=output):
        _console.print(build_networks_table(result))


@app.command()
def protocols(
    ctx: typer.Context,
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write JSON to a file."),
) -> None:
    """List the protocols Enso can route through."""

    async def fetch():
        async with build_client(ctx.obj) as enso:
            return await enso.get_protocols()

    result = _run(fetch())
    if not _emit(result, as_json=as_json, output=output):
        _console.print(build_protocols_table(result))


@app.command()
def actions(
    ctx: typer.Context,
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write JSON to a file."),
) -> None:
    """List bundle actions and their inputs."""

    async def fetch():
        async with build_client(ctx.obj) as enso:
            return await enso.get_actions()

    result = _run(fetch())
    if not _emit(result, as_json=as_json, output=output):
        _console.print(build_actions_table(result))


@app.command()
def tokens(
    ctx: typer.Context,
    chain_id: Optional[int] = typer.Option(None, "--chain-id", "-c", help="Chain ID (default: ENSO_DEFAULT_CHAIN_ID)."),
    page: int = typer.Option(1, "--page", min=1, help="Page to fetch (ignored with --all)."),
    all_pages: bool = typer.Option(False, "--all", help="Walk every page."),
    protocol: Optional[str] = typer.Option(None, "--protocol", help="Filter by protocol slug."),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write JSON to a file."),
) -> None:
    """List token addresses for a chain."""

    settings: AppSettings = ctx.obj
    chain = chain_id or settings.default_chain_id
    filters: dict[str, Any] = {}
    if protocol:
        filters["protocolSlug"] = protocol

    if all_pages:
        hooks = ExplorerHooks(warning=lambda msg: _err_console.print(f"[yellow]Warning:[/yellow] {msg}"))

        async def collect():
            async with build_client(settings) as enso:
                return await collect_token_addresses(enso, chain_id=chain, filters=filters, hooks=hooks)

        collection = _run(collect())
        addresses = collection.addresses
        payload: Any = {"chainId": chain, "complete": collection.complete, "addresses": addresses}
    else:

        async def fetch():
            async with build_client(settings) as enso:
                return await enso.get_tokens({**filters, "chainId": chain, "page": page})

        result = _run(fetch())
        addresses = result.addresses()
        payload = result

    if not _emit(payload, as_json=as_json, output=output):
        _console.print(build_tokens_table(addresses, chain_id=chain))


@bundle_app.command("template")
def bundle_template_cmd(
    ctx: typer.Context,
    action_names: list[str] = typer.Argument(..., help="Actions in execution order (e.g. route call)."),
    chain_id: Optional[int] = typer.Option(None, "--chain-id", "-c"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the template to a file."),
) -> None:
    """Print a bundle skeleton with placeholder arguments."""

    settings: AppSettings = ctx.obj

    async def build():
        async with build_client(settings) as enso:
            known = await enso.get_actions()
        return bundle_template(known, action_names, chain_id=chain_id or settings.default_chain_id)

    template = _run(build())
    _emit(template, as_json=True, output=output)


@bundle_app.command("send")
def bundle_send(
    ctx: typer.Context,
    file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Bundle JSON file."),
    from_address: str = typer.Option(..., "--from-address", "-f", help="Sender address."),
    chain_id: Optional[int] = typer.Option(None, "--chain-id", "-c", help="Overrides the chainId in the file."),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON."),
) -> None:
    """Send a bundle described in a JSON file and show the resulting transaction."""

    settings: AppSettings = ctx.obj
    try:
        document = json.loads(file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"{file} is not valid JSON: {exc}") from exc

    async def send():
        async with build_client(settings) as enso:
            known_actions, known_protocols = await asyncio.gather(enso.get_actions(), enso.get_protocols())
            bundle = load_bundle(
                document,
                actions=known_actions,
                protocols=known_protocols,
                chain_id=chain_id,
            )
            return await enso.send_bundle(bundle, from_address)

    response = _run(send())
    if not _emit(response, as_json=as_json, output=None):
        _console.print(build_bundle_panel(response))


def run() -> None:
    app(prog_name="enso")


if __name__ == "__main__":
    run()
