"""
CLI Tests
---------
Typer commands wired to a mocked Enso API.
"""

import json

import httpx
import pytest
from typer.testing import CliRunner

import cli.main as cli_main
from adapters.enso_client import EnsoClient
from core.domain.models import ClientConfig

from conftest import ACTIONS, API_KEY, BASE_URL, NETWORKS, PROTOCOLS, tokens_page

runner = CliRunner()


@pytest.fixture
def api(monkeypatch):
    """Route every CLI client to a MockTransport; returns the list of requests."""

    state = {"requests": [], "routes": {}}

    def handler(request: httpx.Request) -> httpx.Response:
        state["requests"].append(request)
        route = state["routes"].get((request.method, request.url.path.removeprefix("/api/v1")))
        if route is None:
            return httpx.Response(404, json={"message": "not found"})
        return route(request) if callable(route) else httpx.Response(200, json=route)

    def build_client(settings):
        config = ClientConfig(base_url=BASE_URL, api_key=API_KEY)
        return EnsoClient(config, transport=httpx.MockTransport(handler))

    monkeypatch.setattr(cli_main, "build_client", build_client)
    return state


class TestListingCommands:
    def test_networks_json(self, api):
        api["routes"][("GET", "/networks")] = NETWORKS

        result = runner.invoke(cli_main.app, ["networks", "--json"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == NETWORKS

    def test_protocols_table(self, api):
        api["routes"][("GET", "/protocols")] = PROTOCOLS

        result = runner.invoke(cli_main.app, ["protocols"])

        assert result.exit_code == 0, result.output
        assert "aave-v3" in result.stdout

    def test_actions_to_file(self, api, tmp_path):
        api["routes"][("GET", "/actions")] = ACTIONS
        output = tmp_path / "out" / "actions.json"

        result = runner.invoke(cli_main.app, ["actions", "--output", str(output)])

        assert result.exit_code == 0, result.output
        assert json.loads(output.read_text(encoding="utf-8")) == ACTIONS

    def test_tokens_single_page(self, api):
        api["routes"][("GET", "/tokens")] = tokens_page(["0xa"], page=3, last_page=4, total=7)

        result = runner.invoke(cli_main.app, ["tokens", "--chain-id", "10", "--page", "3", "--json"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["data"][0]["address"] == "0xa"
        params = api["requests"][0].url.params
        assert params["chainId"] == "10"
        assert params["page"] == "3"

    def test_tokens_all_pages(self, api):
        def tokens(request):
            page = int(request.url.params["page"])
            return httpx.Response(200, json=tokens_page([f"0x{page}"], page=page, last_page=2, total=2))

        api["routes"][("GET", "/tokens")] = tokens

        result = runner.invoke(cli_main.app, ["tokens", "--all", "--json"])

        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload == {"chainId": 1, "complete": True, "addresses": ["0x1", "0x2"]}


class TestErrors:
    def test_invalid_key_exits_with_code_1(self, api):
        api["routes"][("GET", "/networks")] = lambda request: httpx.Response(
            401, json={"message": "Invalid API key"}
        )

        result = runner.invoke(cli_main.app, ["networks"])

        assert result.exit_code == 1
        assert "401" in result.output

    def test_decode_error_exits_with_code_1(self, api):
        api["routes"][("GET", "/protocols")] = {"unexpected": True}

        result = runner.invoke(cli_main.app, ["protocols"])

        assert result.exit_code == 1
        assert "DecodeError" in result.output


class TestBundleCommands:
    def test_template(self, api):
        api["routes"][("GET", "/actions")] = ACTIONS

        result = runner.invoke(cli_main.app, ["bundle", "template", "route", "call", "--chain-id", "10"])

        assert result.exit_code == 0, result.output
        template = json.loads(result.stdout)
        assert template["chainId"] == 10
        assert [step["action"] for step in template["actions"]] == ["route", "call"]

    def test_template_unknown_action(self, api):
        api["routes"][("GET", "/actions")] = ACTIONS

        result = runner.invoke(cli_main.app, ["bundle", "template", "teleport"])

        assert result.exit_code == 1
        assert "Unknown action" in result.output

    def test_send(self, api, tmp_path):
        api["routes"][("GET", "/actions")] = ACTIONS
        api["routes"][("GET", "/protocols")] = PROTOCOLS
        api["routes"][("POST", "/shortcuts/bundle")] = {"tx": {"to": "0xrouter", "data": "0x"}, "gas": "1"}
        document = {
            "chainId": 10,
            "actions": [
                {
                    "protocol": "enso",
                    "action": "route",
                    "args": {"amountIn": "1", "slippage": "300", "tokenIn": "0xin", "tokenOut": "0xout"},
                }
            ],
        }
        bundle_file = tmp_path / "bundle.json"
        bundle_file.write_text(json.dumps(document), encoding="utf-8")

        result = runner.invoke(
            cli_main.app,
            ["bundle", "send", str(bundle_file), "--from-address", "0xme", "--json"],
        )

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["tx"]["to"] == "0xrouter"
        post = [r for r in api["requests"] if r.method == "POST"][0]
        assert post.url.params["chainId"] == "10"
        assert post.url.params["fromAddress"] == "0xme"
        assert json.loads(post.content) == document["actions"]

    @pytest.mark.parametrize(
        "document, message",
        [
            ([{"action": "call", "args": ["0x1", "m", "a", [{"useOutputOfCallAt": None}]]}], "useOutputOfCallAt"),
            ({"chainId": [10], "actions": [{"action": "call", "args": ["0x1", "m", "a", []]}]}, "chainId"),
        ],
    )
    def test_send_rejects_bad_numbers_in_file(self, api, tmp_path, document, message):
        api["routes"][("GET", "/actions")] = ACTIONS
        api["routes"][("GET", "/protocols")] = PROTOCOLS
        bundle_file = tmp_path / "bundle.json"
        bundle_file.write_text(json.dumps(document), encoding="utf-8")

        result = runner.invoke(cli_main.app, ["bundle", "send", str(bundle_file), "-f", "0xme"])

        assert result.exit_code == 1
        assert "Invalid input" in result.output
        assert message in result.output
        assert not [r for r in api["requests"] if r.method == "POST"]

    def test_send_rejects_invalid_json_file(self, api, tmp_path):
        bundle_file = tmp_path / "bundle.json"
        bundle_file.write_text("{", encoding="utf-8")

        result = runner.invoke(cli_main.app, ["bundle", "send", str(bundle_file), "-f", "0xme"])

        assert result.exit_code == 2
