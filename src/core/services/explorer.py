"""Casos de uso sobre el API de Enso.

Este módulo agrupa lo que hace la CLI entre "pedir datos" y "mostrarlos":
recorrer la paginación de tokens, traer el catálogo (networks, protocols,
actions) en paralelo y convertir una descripción JSON en un `Bundle`.
Todo depende de `EnsoGateway`, así que se puede ejecutar contra un fake.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping, Sequence

from core.domain.bundle import (
    ACTION_CALL,
    ENSO_PROTOCOL,
    Bundle,
    ParamValue,
    default_args,
    param_value_from_json,
    parse_non_negative_int,
)
from core.domain.models import Action, Network, Protocol
from core.errors import EnsoError
from core.interfaces.gateway import EnsoGateway

logger = logging.getLogger(__name__)


@dataclass
class ExplorerHooks:
    """Optional callbacks for UI layers (progress, warnings)."""

    warning: Callable[[str], None] | None = None
    page_loaded: Callable[[int, int], None] | None = None


@dataclass
class TokenCollection:
    """Token addresses collected for one chain."""

    chain_id: int
    addresses: list[str] = field(default_factory=list)
    pages: int = 0
    total: int | None = None
    complete: bool = True
    warnings: list[str] = field(default_factory=list)


@dataclass
class Catalog:
    networks: list[Network]
    protocols: list[Protocol]
    actions: list[Action]

    def action(self, name: str) -> Action:
        return find_action(self.actions, name)


def dedupe_addresses(addresses: Iterable[str]) -> list[str]:
    """Remove duplicated addresses (case-insensitive) keeping the first occurrence."""

    seen: set[str] = set()
    out: list[str] = []
    for address in addresses:
        key = address.lower()
        if key in seen:
            continue
        seen.add(key)
        out.append(address)
    return out


async def collect_token_addresses(
    gateway: EnsoGateway,
    *,
    chain_id: int,
    filters: Mapping[str, Any] | None = None,
    hooks: ExplorerHooks | None = None,
) -> TokenCollection:
    """Walk every `/tokens` page for `chain_id` and gather the addresses.

    Best-effort: a failing page stops the walk, is reported as a warning and
    the addresses gathered so far are returned with `complete=False`.
    """

    hooks = hooks or ExplorerHooks()
    result = TokenCollection(chain_id=chain_id)
    params = {**(filters or {}), "chainId": chain_id}

    try:
        async for page in gateway.iter_tokens(params):
            result.pages += 1
            result.total = page.meta.total
            result.addresses.extend(page.addresses())
            if hooks.page_loaded:
                hooks.page_loaded(page.meta.current_page, page.meta.last_page)
    except EnsoError as exc:
        message = f"Token listing for chain {chain_id} stopped after {result.pages} page(s): {exc}"
        logger.warning(message)
        result.complete = False
        result.warnings.append(message)
        if hooks.warning:
            hooks.warning(message)

    result.addresses = dedupe_addresses(result.addresses)
    return result


async def fetch_catalog(gateway: EnsoGateway) -> Catalog:
    """Fetch networks, protocols and actions concurrently."""

    networks, protocols, actions = await asyncio.gather(
        gateway.get_networks(),
        gateway.get_protocols(),
        gateway.get_actions(),
    )
    return Catalog(networks=networks, protocols=protocols, actions=actions)


def find_action(actions: Sequence[Action], name: str) -> Action:
    """Look up an action by name; the built-in `call` is always available."""

    for action in actions:
        if action.action == name:
            return action
    if name == ACTION_CALL.action:
        return ACTION_CALL
    raise KeyError(f"Unknown action: {name}")


def _resolve_protocol(slug: str, protocols: Sequence[Protocol] | None) -> Protocol:
    if slug == ENSO_PROTOCOL.slug:
        return ENSO_PROTOCOL
    if protocols is None:
        return Protocol(slug=slug, url="")
    for protocol in protocols:
        if protocol.slug == slug:
            return protocol
    raise KeyError(f"Unknown protocol: {slug}")


def _step_args(action: Action, raw_args: Any) -> list[ParamValue]:
    if isinstance(raw_args, list):
        return [param_value_from_json(item) for item in raw_args]
    if not isinstance(raw_args, dict):
        raise ValueError(f"args for '{action.action}' must be an object or a list")

    unknown = set(raw_args) - set(action.input_names)
    if unknown:
        raise ValueError(f"Unknown input(s) for '{action.action}': {', '.join(sorted(unknown))}")
    missing = [name for name in action.input_names if name not in raw_args]
    if missing:
        raise ValueError(f"Missing input(s) for '{action.action}': {', '.join(missing)}")
    return [param_value_from_json(raw_args[name]) for name in action.input_names]


def load_bundle(
    data: Any,
    *,
    actions: Sequence[Action],
    protocols: Sequence[Protocol] | None = None,
    chain_id: int | None = None,
) -> Bundle:
    """Build a `Bundle` from its JSON description.

    Accepted shapes:
    - `[{"protocol": ..., "action": ..., "args": {...}}, ...]`
    - `{"chainId": 1, "actions": [...]}`

    `args` may be an object keyed by input name (every input required) or a
    positional list. `chain_id` overrides the one in the document.
    """

    steps = data
    if isinstance(data, dict):
        steps = data.get("actions")
        if chain_id is None and data.get("chainId") is not None:
            chain_id = parse_non_negative_int(data["chainId"], "chainId")
    if not isinstance(steps, list) or not steps:
        raise ValueError("bundle must contain a non-empty list of actions")

    bundle = Bundle(chain_id if chain_id is not None else 1)
    for index, step in enumerate(steps):
        if not isinstance(step, dict) or "action" not in step:
            raise ValueError(f"bundle step {index} must be an object with an 'action'")
        action = find_action(actions, str(step["action"]))
        protocol = _resolve_protocol(str(step.get("protocol") or ENSO_PROTOCOL.slug), protocols)
        bundle.add_action(protocol, action, _step_args(action, step.get("args", {})))
    return bundle


def bundle_template(actions: Sequence[Action], names: Sequence[str], *, chain_id: int = 1) -> dict[str, Any]:
    """JSON skeleton for `load_bundle` with placeholder arguments."""

    bundle = Bundle(chain_id)
    for name in names:
        action = find_action(actions, name)
        bundle.add_enso_action(action, default_args(action))
    return {"chainId": chain_id, "actions": bundle.to_payload()}


__all__ = [
    "Catalog",
    "ExplorerHooks",
    "TokenCollection",
    "bundle_template",
    "collect_token_addresses",
    "dedupe_addresses",
    "fetch_catalog",
    "find_action",
    "load_bundle",
]
