"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza timeouts, headers y autenticación para todas las llamadas.
- Facilita testeo: se puede inyectar un `httpx.MockTransport`.
"""

from __future__ import annotations

import httpx

from core.domain.models import ClientConfig


def build_headers(config: ClientConfig, extra_headers: dict[str, str] | None = None) -> dict[str, str]:
    headers: dict[str, str] = {
        "User-Agent": config.user_agent,
        "Accept": "application/json",
    }
    if config.api_key:
        headers["Authorization"] = f"Bearer {config.api_key}"
    if extra_headers:
        headers.update(extra_headers)
    return headers


def build_async_client(
    config: ClientConfig | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Crea un `httpx.AsyncClient` apuntando a `<base_url>/api/<version>`.

    Por qué un builder:
    - Centraliza timeouts/headers para que todos los endpoints se comporten igual.
    - Un único cliente reutilizable = pool de conexiones compartido.
    """

    config = config or ClientConfig()
    return httpx.AsyncClient(
        base_url=config.api_url,
        timeout=httpx.Timeout(config.timeout_seconds),
        follow_redirects=True,
        headers=build_headers(config, extra_headers),
        transport=transport,
    )
