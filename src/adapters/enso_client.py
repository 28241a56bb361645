"""Cliente asíncrono del API de Enso.

Responsabilidad:
- Una corrutina por endpoint (`/networks`, `/protocols`, `/actions`,
  `/tokens`, `/shortcuts/bundle`).
- Traducir fallos a la taxonomía de `core.errors`:
  red/timeout -> `TransportError`, status no-2xx -> `ApiError`,
  cuerpo inválido -> `DecodeError`.

El cliente no guarda estado entre llamadas salvo el `httpx.AsyncClient`, que
es seguro para requests concurrentes. No hay reintentos: el error llega tal
cual a quien llama.
"""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Mapping, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from adapters.http_client import build_async_client
from core.domain.bundle import Bundle
from core.domain.models import (
    Action,
    BundleResponse,
    ClientConfig,
    Network,
    Protocol,
    TokensPage,
)
from core.errors import ApiError, DecodeError, TransportError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_NETWORKS = TypeAdapter(list[Network])
_PROTOCOLS = TypeAdapter(list[Protocol])
_ACTIONS = TypeAdapter(list[Action])
_TOKENS_PAGE = TypeAdapter(TokensPage)
_BUNDLE_RESPONSE = TypeAdapter(BundleResponse)


def _error_payload(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class EnsoClient:
    """Cliente tipado de Enso.

    Uso:

        async with EnsoClient(ClientConfig(api_key="...")) as enso:
            networks = await enso.get_networks()

    `transport` permite inyectar un `httpx.MockTransport` (tests) o cualquier
    transporte httpx propio.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config or ClientConfig()
        self._http = build_async_client(self._config, transport=transport)

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def closed(self) -> bool:
        return self._http.is_closed

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "EnsoClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
        timeout: float | None = None,
    ) -> Any:
        """Envía la request y devuelve el cuerpo JSON ya decodificado."""

        request_timeout: Any = httpx.USE_CLIENT_DEFAULT if timeout is None else httpx.Timeout(timeout)
        try:
            response = await self._http.request(
                method,
                path,
                params=dict(params) if params else None,
                json=json,
                timeout=request_timeout,
            )
        except httpx.TimeoutException as exc:
            logger.warning("%s %s timed out", method, path)
            raise TransportError(f"Request to {path} timed out", url=path) from exc
        except httpx.TransportError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise TransportError(f"Couldn't reach Enso API ({exc.__class__.__name__}): {exc}", url=path) from exc

        logger.debug("%s %s -> %s", method, response.request.url, response.status_code)

        if not response.is_success:
            payload = _error_payload(response)
            logger.warning("%s %s returned HTTP %s", method, path, response.status_code)
            raise ApiError(response.status_code, payload, url=str(response.request.url))

        try:
            return response.json()
        except ValueError as exc:
            raise DecodeError(f"Response from {path} is not valid JSON", body=response.text[:500]) from exc

    @staticmethod
    def _decode(adapter: TypeAdapter[T], data: Any, path: str) -> T:
        try:
            return adapter.validate_python(data)
        except ValidationError as exc:
            raise DecodeError(
                f"Unexpected response shape from {path}: {exc.error_count()} validation error(s)",
                body=str(data)[:500],
            ) from exc

    async def get_networks(self, *, timeout: float | None = None) -> list[Network]:
        """Redes (chains) soportadas por Enso."""

        data = await self._request("GET", "/networks", timeout=timeout)
        return self._decode(_NETWORKS, data, "/networks")

    async def get_protocols(self, *, timeout: float | None = None) -> list[Protocol]:
        data = await self._request("GET", "/protocols", timeout=timeout)
        return self._decode(_PROTOCOLS, data, "/protocols")

    async def get_actions(self, *, timeout: float | None = None) -> list[Action]:
        """Acciones disponibles para bundles, con sus inputs ordenados."""

        data = await self._request("GET", "/actions", timeout=timeout)
        return self._decode(_ACTIONS, data, "/actions")

    async def get_tokens(
        self,
        params: Mapping[str, Any] | None = None,
        *,
        timeout: float | None = None,
    ) -> TokensPage:
        """Una página de `/tokens`. Filtros típicos: `chainId`, `protocolSlug`, `page`."""

        data = await self._request("GET", "/tokens", params=params, timeout=timeout)
        return self._decode(_TOKENS_PAGE, data, "/tokens")

    async def iter_tokens(
        self,
        params: Mapping[str, Any] | None = None,
        *,
        timeout: float | None = None,
    ) -> AsyncIterator[TokensPage]:
        """Recorre todas las páginas de `/tokens` desde la 1 hasta `lastPage`.

        Un fallo en cualquier página se propaga y termina la iteración.
        """

        base = {key: value for key, value in (params or {}).items() if key != "page"}
        page = 1
        while True:
            tokens = await self.get_tokens({**base, "page": page}, timeout=timeout)
            yield tokens
            if page >= tokens.meta.last_page:
                return
            page += 1

    async def send_bundle(
        self,
        bundle: Bundle,
        from_address: str,
        *,
        timeout: float | None = None,
    ) -> BundleResponse:
        """Envía un bundle a `/shortcuts/bundle` y devuelve la transacción calculada.

        La firma y el broadcast quedan fuera: Enso solo devuelve el `tx`.
        """

        if not from_address:
            raise ValueError("from_address is required")
        if not len(bundle):
            raise ValueError("bundle has no actions")

        params = {"chainId": bundle.chain_id, "fromAddress": from_address}
        data = await self._request(
            "POST",
            "/shortcuts/bundle",
            params=params,
            json=bundle.to_payload(),
            timeout=timeout,
        )
        return self._decode(_BUNDLE_RESPONSE, data, "/shortcuts/bundle")
