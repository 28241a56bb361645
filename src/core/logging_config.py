"""Configuración de logging.

Los módulos solo hacen `logging.getLogger(__name__)`; quien arranca la
aplicación (la CLI) decide handler y nivel llamando a `setup_logging`.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(level: str | int = logging.WARNING, *, console: Console | None = None) -> None:
    """Configura el root logger con un `RichHandler` (stderr por defecto)."""

    if isinstance(level, str):
        level = logging.getLevelName(level.strip().upper())
        if not isinstance(level, int):
            level = logging.WARNING

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    logging.basicConfig(
        level=level,
        format="%(name)s  %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[handler],
        force=True,
    )
    # httpx registra cada request en INFO; el cliente ya lo hace en DEBUG.
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
