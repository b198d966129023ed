"""
Tests for the HTTP API.

The app runs against a real ``ForgeContext`` whose RPC client is served by
``httpx.MockTransport``.
"""

import json

import httpx
import pytest
from eth_utils import to_checksum_address
from fastapi.testclient import TestClient

from tokenforge.config import Settings
from tokenforge.context import ForgeContext
from tokenforge.core.constants import CREATION_FEE_WEI, TOKEN_FACTORY_ADDRESS
from tokenforge.core.tx_builder import CREATE_TOKEN_SELECTOR
from tokenforge.main import create_app
from tokenforge.providers.rpc import JsonRpcClient


class FakeNode:
    """Minimal JSON-RPC node for the methods the API touches."""

    def __init__(self, chain_id: int = 8453, base_fee: int = 5_000_000):
        self.chain_id = chain_id
        self.base_fee = base_fee
        self.fail_blocks = False

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        method = body["method"]

        if method == "eth_chainId":
            result = hex(self.chain_id)
        elif method == "eth_getBlockByNumber":
            if self.fail_blocks:
                return httpx.Response(500)
            result = {"number": "0x1", "timestamp": "0x1", "baseFeePerGas": hex(self.base_fee)}
        else:
            return httpx.Response(
                200,
                json={"jsonrpc": "2.0", "id": body["id"], "error": {"code": -32601, "message": "method not found"}},
            )
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})


@pytest.fixture
def node() -> FakeNode:
    return FakeNode()


def _client_for(node: FakeNode, **settings_overrides) -> TestClient:
    settings = Settings(_env_file=None, fee_refresh_interval_seconds=0, **settings_overrides)
    rpc = JsonRpcClient(
        settings.rpc_url,
        client=httpx.AsyncClient(transport=httpx.MockTransport(node)),
    )
    return TestClient(create_app(ForgeContext.from_settings(settings, rpc=rpc)))


@pytest.fixture
def client(node):
    with _client_for(node) as test_client:
        yield test_client


# =============================================================================
# Health
# =============================================================================

def test_root(client):
    body = client.get("/").json()
    assert body["name"] == "Token Forge API"
    assert body["chain_id"] == 8453


def test_healthz(client):
    response = client.get("/healthz")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["providers"]["rpc"] == {"status": "healthy", "chain_id": 8453}
    assert body["providers"]["fees"]["has_estimate"] is False


def test_healthz_chain_mismatch(node):
    with _client_for(node, chain_id=84532) as client:
        body = client.get("/healthz").json()

    assert body["status"] == "degraded"
    assert body["providers"]["rpc"]["status"] == "error"


def test_request_id_echoed(client):
    response = client.get("/healthz", headers={"x-request-id": "abc123"})
    assert response.headers["x-request-id"] == "abc123"


# =============================================================================
# Fees
# =============================================================================

class TestFeesApi:
    def test_no_estimate_before_refresh(self, client):
        body = client.get("/fees").json()

        assert body["estimate"] is None
        assert body["error"] is None
        assert body["is_stale"] is False

    def test_refresh(self, client):
        body = client.post("/fees/refresh").json()

        assert body["estimate"]["base_fee_wei"] == "5000000"
        assert body["estimate"]["gas_price_wei"] == "6000000"
        assert body["estimate"]["gas_price_gwei"] == "0.006"
        assert body["error"] is None
        assert client.get("/fees").json()["estimate"]["gas_price_wei"] == "6000000"

    def test_refresh_failure_keeps_stale_estimate(self, client, node):
        client.post("/fees/refresh")
        node.fail_blocks = True

        body = client.post("/fees/refresh").json()

        assert body["estimate"]["gas_price_wei"] == "6000000"
        assert body["error"]
        assert body["is_stale"] is True

    def test_cost_by_operation(self, client):
        client.post("/fees/refresh")

        body = client.post("/fees/cost", json={"operation": "transfer", "eth_price_usd": 2500}).json()

        assert body["gas_units"] == 65_000
        assert body["total_gas"] == 67_100
        assert body["estimated_cost_wei"] == str(67_100 * 6_000_000)
        assert body["estimated_cost_usd"] is not None

    def test_cost_by_gas_units_without_price(self, client):
        body = client.post("/fees/cost", json={"gas_units": 21_000}).json()

        assert body["total_gas"] == 23_100
        assert body["estimated_cost_usd"] is None

    def test_cost_unknown_operation(self, client):
        response = client.post("/fees/cost", json={"operation": "teleport"})
        assert response.status_code == 400

    def test_cost_requires_units_or_operation(self, client):
        assert client.post("/fees/cost", json={}).status_code == 400


# =============================================================================
# Tokens
# =============================================================================

VALID_TOKEN = {"name": "My Token", "symbol": "MTK", "decimals": 18, "supply": "1000000"}


class TestTokensApi:
    def test_validate_valid(self, client):
        body = client.post("/tokens/validate", json=VALID_TOKEN).json()

        assert body == {"is_valid": True, "errors": [], "warnings": []}

    def test_validate_reports_field_errors(self, client):
        body = client.post("/tokens/validate", json={**VALID_TOKEN, "symbol": "mtk", "supply": "0"}).json()

        assert body["is_valid"] is False
        assert {e["field"] for e in body["errors"]} == {"symbol", "supply"}

    def test_validate_oversized_supply_is_a_field_error(self, client):
        response = client.post("/tokens/validate", json={**VALID_TOKEN, "supply": "9" * 5000})

        assert response.status_code == 200
        assert response.json()["errors"] == [
            {"field": "supply", "message": "Supply is too large to represent on-chain"}
        ]

    def test_create_tx_rejects_oversized_supply(self, client):
        response = client.post("/tokens/create-tx", json={**VALID_TOKEN, "supply": "9" * 5000})

        assert response.status_code == 422
        assert response.json()["detail"]["errors"][0]["field"] == "supply"

    def test_create_tx(self, client):
        response = client.post("/tokens/create-tx", json=VALID_TOKEN)

        assert response.status_code == 200
        body = response.json()
        assert body["tx"]["to"] == to_checksum_address(TOKEN_FACTORY_ADDRESS)
        assert body["tx"]["value"] == hex(CREATION_FEE_WEI)
        assert body["tx"]["data"].startswith("0x" + CREATE_TOKEN_SELECTOR.hex())
        assert body["supply_units"] == str(10**24)
        assert body["estimated_gas_units"] == 2_500_000
        assert body["data_size_bytes"] > 4

    def test_create_tx_carries_warnings(self, client):
        body = client.post("/tokens/create-tx", json={**VALID_TOKEN, "symbol": "USDC"}).json()
        assert [w["field"] for w in body["warnings"]] == ["symbol"]

    def test_create_tx_rejects_invalid_form(self, client):
        response = client.post("/tokens/create-tx", json={**VALID_TOKEN, "decimals": 19})

        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["is_valid"] is False
        assert detail["errors"][0]["field"] == "decimals"
