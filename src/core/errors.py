"""Errores tipados del cliente Enso.

Tres familias, una por cada forma de fallo de una llamada:
- `TransportError`: no hubo respuesta (conexión, DNS, timeout).
- `ApiError`: hubo respuesta pero con status no-2xx.
- `DecodeError`: hubo respuesta 2xx pero el cuerpo no encaja con el esquema.
"""

from __future__ import annotations

from typing import Any


class EnsoError(Exception):
    """Base común para todos los errores del cliente."""


class TransportError(EnsoError):
    """Fallo de red o timeout antes de obtener una respuesta."""

    def __init__(self, message: str, *, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class ApiError(EnsoError):
    """El servidor respondió con un status no exitoso."""

    def __init__(self, status_code: int, payload: Any = None, *, url: str | None = None) -> None:
        self.status_code = status_code
        self.payload = payload
        self.url = url
        super().__init__(f"Enso API returned HTTP {status_code}: {self.detail}")

    @property
    def detail(self) -> str:
        """Mensaje legible extraído del cuerpo de error (si lo hay)."""

        if isinstance(self.payload, dict):
            for key in ("message", "error", "detail"):
                value = self.payload.get(key)
                if isinstance(value, str) and value.strip():
                    return value.strip()
                # Errores de validación: `message` llega como lista de strings.
                if isinstance(value, list):
                    parts = [item.strip() for item in value if isinstance(item, str) and item.strip()]
                    if parts:
                        return "; ".join(parts)
        if isinstance(self.payload, str) and self.payload.strip():
            return self.payload.strip()[:200]
        return "no error body"


class DecodeError(EnsoError):
    """El cuerpo de la respuesta no es JSON o no valida contra el DTO esperado."""

    def __init__(self, message: str, *, body: str | None = None) -> None:
        super().__init__(message)
        self.body = body
