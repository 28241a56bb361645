"""
enso-cli Test Configuration
---------------------------
Shared fixtures. No test touches the network: every HTTP exchange goes
through `httpx.MockTransport`.
"""

import os
import sys
from pathlib import Path
from typing import Callable

import httpx
import pytest

# Add src/ to path (the package uses a src layout)
SRC_ROOT = Path(__file__).parent.parent / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from adapters.enso_client import EnsoClient  # noqa: E402
from core.domain.models import ClientConfig  # noqa: E402

API_KEY = "1e02632d-6feb-4a75-a157-documentation"
BASE_URL = "https://api.test.enso"


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep developer .env files and ENSO_* variables out of the tests."""

    for name in list(os.environ):
        if name.startswith("ENSO_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(base_url=BASE_URL, api_key=API_KEY, timeout_seconds=5.0)


@pytest.fixture
def make_client(config) -> Callable[..., EnsoClient]:
    """Build an `EnsoClient` whose requests are answered by `handler`."""

    def _make(handler, *, client_config: ClientConfig | None = None) -> EnsoClient:
        return EnsoClient(client_config or config, transport=httpx.MockTransport(handler))

    return _make


NETWORKS = [
    {"id": 1, "name": "Ethereum"},
    {"id": 10, "name": "Optimism"},
]

PROTOCOLS = [
    {"slug": "enso", "url": "https://api.enso.finance"},
    {"slug": "aave-v3", "url": "https://aave.com"},
]

ACTIONS = [
    {
        "action": "route",
        "inputs": {
            "amountIn": "Raw amount to sell",
            "slippage": "Amount of slippage",
            "tokenIn": "Address of token to sell",
            "tokenOut": "Address of token to buy",
        },
    },
    {
        "action": "call",
        "inputs": {"address": "", "method": "", "abi": "", "args": ""},
    },
]


def token(address: str, chain_id: int = 10) -> dict:
    return {
        "chainId": chain_id,
        "address": address,
        "type": "base",
        "protocolSlug": None,
        "underlyingTokens": None,
        "primaryAddress": None,
    }


def tokens_page(addresses: list[str], *, page: int, last_page: int, total: int) -> dict:
    return {
        "meta": {
            "total": total,
            "lastPage": last_page,
            "currentPage": page,
            "perPage": 2,
            "prev": page - 1 if page > 1 else None,
            "next": page + 1 if page < last_page else None,
        },
        "data": [token(a) for a in addresses],
    }
