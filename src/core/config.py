"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que el cliente HTTP y la CLI lean config de forma consistente.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "enso-cli"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "enso-cli"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "enso-cli"
    return Path.home() / ".config" / "enso-cli"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str], *, env_path: Path | None = None) -> Path:
    """Guarda variables `ENSO_*` en el .env del usuario (lo usa `enso setup`).

    - Solo se aceptan claves con prefijo `ENSO_`: es lo único que lee `AppSettings`.
    - Las claves existentes que no aparecen en `values` se conservan.
    - El fichero guarda la API key, así que queda con permisos 0600.
    """

    invalid = [key for key in values if not key.startswith("ENSO_")]
    if invalid:
        raise ValueError(f"Only ENSO_* settings can be stored: {', '.join(sorted(invalid))}")
    if any(v is not None and ("\n" in v or "\r" in v) for v in values.values()):
        raise ValueError("Setting values must be single-line")

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# enso-cli user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    env_path.chmod(0o600)
    return env_path


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="ENSO_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    api_key: str | None = Field(
        default=None,
        description="API key de Enso (se envía como 'Authorization: Bearer ...').",
    )
    base_url: str = Field(
        default="https://api.enso.finance",
        min_length=8,
        description="URL base del API de Enso.",
    )
    api_version: str = Field(
        default="v1",
        min_length=1,
        description="Versión del API (segmento '/api/<version>').",
    )
    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout por request (segundos).",
    )
    user_agent: str = Field(
        default="enso-cli/0.1",
        min_length=1,
        description="User-Agent enviado al API.",
    )
    default_chain_id: int = Field(
        default=1,
        ge=1,
        description="Chain ID usado cuando la CLI no recibe --chain-id.",
    )
    log_level: str = Field(
        default="WARNING",
        description="Nivel de logging por defecto (DEBUG, INFO, WARNING, ...).",
    )
