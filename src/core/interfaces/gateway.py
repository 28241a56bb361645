"""Contrato del gateway hacia el API de Enso.

Por qué Protocol:
- Los servicios (`core.services`) solo necesitan "algo que hable con Enso".
- Permite sustituir el cliente HTTP real por un fake en tests sin herencia.
"""

from __future__ import annotations

from typing import Any, AsyncIterator, Mapping, Protocol, runtime_checkable

from core.domain.bundle import Bundle
from core.domain.models import Action, BundleResponse, Network, Protocol as EnsoProtocol, TokensPage


@runtime_checkable
class EnsoGateway(Protocol):
    """Una corrutina por endpoint; los errores son `core.errors.EnsoError`."""

    async def get_networks(self) -> list[Network]:
        ...

    async def get_protocols(self) -> list[EnsoProtocol]:
        ...

    async def get_actions(self) -> list[Action]:
        ...

    async def get_tokens(self, params: Mapping[str, Any] | None = None) -> TokensPage:
        ...

    def iter_tokens(self, params: Mapping[str, Any] | None = None) -> AsyncIterator[TokensPage]:
        ...

    async def send_bundle(self, bundle: Bundle, from_address: str) -> BundleResponse:
        ...
