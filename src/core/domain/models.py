"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Validación estricta de las respuestas del API en el borde: si el servidor
  cambia el esquema lo detectamos como `DecodeError`, no como un campo vacío.
- El JSON de Enso es camelCase; los modelos exponen snake_case y conservan
  los alias para volver a serializar sin pérdida.

Nota:
- Estos modelos describen *qué* devuelve Enso, no *cómo* se obtiene.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel
from pydantic.config import ConfigDict

from core.config import AppSettings


class ClientConfig(BaseModel):
    """Configuración inmutable de un `EnsoClient`."""

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(
        default="https://api.enso.finance",
        min_length=8,
        description="URL base del API (sin '/api/<version>').",
    )
    api_key: str | None = Field(
        default=None,
        description="API key; si es None no se envía cabecera Authorization.",
    )
    timeout_seconds: float | None = Field(
        default=20.0,
        gt=0,
        description="Timeout por llamada (segundos). None desactiva el timeout.",
    )
    api_version: str = Field(default="v1", min_length=1)
    user_agent: str = Field(default="enso-cli/0.1", min_length=1)

    @property
    def api_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/api/{self.api_version}"

    @classmethod
    def from_settings(cls, settings: AppSettings | None = None) -> "ClientConfig":
        settings = settings or AppSettings()
        return cls(
            base_url=settings.base_url,
            api_key=settings.api_key,
            timeout_seconds=settings.http_timeout_seconds,
            api_version=settings.api_version,
            user_agent=settings.user_agent,
        )


class EnsoModel(BaseModel):
    """Base de los DTOs de respuesta.

    - camelCase en el wire, snake_case en Python.
    - `extra="allow"`: campos nuevos del servidor sobreviven a `model_dump`.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_wire(self) -> dict[str, Any]:
        """Serializa de vuelta al formato JSON del API."""

        return self.model_dump(mode="json", by_alias=True)


class Network(EnsoModel):
    id: int = Field(..., description="Chain ID de la red.")
    name: str = Field(..., min_length=1, description="Nombre legible de la red.")


class Protocol(EnsoModel):
    slug: str = Field(..., min_length=1, description="Identificador del protocolo (p.ej. 'enso', 'aave-v3').")
    url: str = Field(..., description="Web del protocolo.")


class Action(EnsoModel):
    """Acción soportada por el motor de bundles.

    En el wire `inputs` es un objeto `{nombre: descripción}`; aquí se expone
    como lista ordenada de pares porque el orden de los inputs es el orden de
    los argumentos posicionales de un bundle.
    """

    action: str = Field(..., min_length=1)
    inputs: list[tuple[str, str]]

    @field_validator("inputs", mode="before")
    @classmethod
    def _inputs_from_object(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return [
                (str(name), description if isinstance(description, str) else "")
                for name, description in value.items()
            ]
        raise ValueError("inputs must be a JSON object of name -> description")

    @field_serializer("inputs")
    def _inputs_to_object(self, inputs: list[tuple[str, str]]) -> dict[str, str]:
        return {name: description for name, description in inputs}

    @property
    def input_names(self) -> list[str]:
        return [name for name, _ in self.inputs]


class Token(EnsoModel):
    chain_id: int
    address: str = Field(..., min_length=1)
    kind: str = Field(..., alias="type", description="Tipo de token ('base', 'defi', ...).")
    protocol_slug: str | None = None
    underlying_tokens: list[str] | None = None
    primary_address: str | None = None


class TokensMeta(EnsoModel):
    total: int = Field(..., ge=0)
    last_page: int = Field(..., ge=0)
    current_page: int = Field(..., ge=0)
    per_page: int = Field(..., ge=0)
    prev: int | None = None
    next: int | None = None

    @property
    def has_next(self) -> bool:
        return self.current_page < self.last_page


class TokensPage(EnsoModel):
    meta: TokensMeta
    data: list[Token]

    def addresses(self) -> list[str]:
        return [token.address for token in self.data]


class BundleResponse(EnsoModel):
    """Respuesta de `/shortcuts/bundle`.

    El esquema lo define Enso; tipamos los campos conocidos y el resto viaja
    como extra.
    """

    bundle: list[dict[str, Any]] | None = None
    tx: dict[str, Any] | None = None
    gas: str | int | None = None
    created_at: int | str | None = None
    route: list[dict[str, Any]] | None = None
