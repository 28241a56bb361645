"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

from typing import Sequence

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.bundle import classify_input
from core.domain.models import Action, BundleResponse, Network, Protocol


def print_banner(console: Console) -> None:
    title = Text("enso-cli", style="bold cyan")
    subtitle = Text("Networks • Protocols • Tokens • Bundles", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_networks_table(networks: Sequence[Network]) -> Table:
    table = Table(title="Networks")
    table.add_column("Chain ID", style="cyan", justify="right", no_wrap=True)
    table.add_column("Name", style="white")
    for network in networks:
        table.add_row(str(network.id), network.name)
    return table


def build_protocols_table(protocols: Sequence[Protocol]) -> Table:
    table = Table(title="Protocols")
    table.add_column("Slug", style="cyan", no_wrap=True)
    table.add_column("URL", style="magenta")
    for protocol in protocols:
        table.add_row(protocol.slug, protocol.url)
    return table


def build_actions_table(actions: Sequence[Action]) -> Table:
    """Una fila por acción; los inputs se listan con su tipo sugerido."""

    table = Table(title="Actions")
    table.add_column("Action", style="cyan", no_wrap=True)
    table.add_column("Inputs", style="white")
    for action in actions:
        inputs = "\n".join(
            f"{name} [dim]({classify_input(name)})[/dim]" + (f" - {desc}" if desc else "")
            for name, desc in action.inputs
        )
        table.add_row(action.action, inputs or "-")
    return table


def build_tokens_table(addresses: Sequence[str], *, chain_id: int) -> Table:
    table = Table(title=f"Tokens (chain {chain_id})")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Address", style="magenta", no_wrap=True)
    for index, address in enumerate(addresses, start=1):
        table.add_row(str(index), address)
    return table


def build_bundle_panel(response: BundleResponse) -> Panel:
    """Panel con la transacción devuelta por `/shortcuts/bundle`."""

    body = Text()
    tx = response.tx or {}
    for key in ("to", "from", "value"):
        if key in tx:
            body.append(f"{key}: ", style="bold")
            body.append(f"{tx[key]}\n")
    if "data" in tx:
        data = str(tx["data"])
        body.append("data: ", style="bold")
        body.append((data[:66] + "…" if len(data) > 66 else data) + "\n")
    if response.gas is not None:
        body.append("gas: ", style="bold")
        body.append(f"{response.gas}\n")
    if not body.plain:
        body.append("Bundle accepted (no tx returned).", style="dim")
    return Panel(body, title=Text("Bundle", style="bold yellow"), border_style="yellow")
