"""Tests for the API routes functionality."""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from camp_ecosystem.app import create_application
from camp_ecosystem.config import BatchConfig, CacheConfig, EcosystemConfig
from camp_ecosystem.constants import PECOIN_MINT
from camp_ecosystem.dependencies import build_container
from tests.fixtures.common import DAS_ENDPOINTS, WALLET_A, WALLET_B

RPC_RESULTS = {
    "getTokenAccountBalance": {"context": {"slot": 1}, "value": {"uiAmount": 5.0}},
    "getBalance": {"context": {"slot": 1}, "value": 1_000_000_000},
    "getAssetsByOwner": {"total": 2, "items": []},
    "getTokenAccountsByOwner": {"context": {"slot": 1}, "value": []},
}


def fake_rpc(request: httpx.Request) -> httpx.Response:
    """Answer JSON-RPC calls with canned results."""
    payload = json.loads(request.content)
    return httpx.Response(200, json={
        "jsonrpc": "2.0",
        "id": payload["id"],
        "result": RPC_RESULTS.get(payload["method"])
    })


def unreachable(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


@pytest.fixture
def make_client(rpc_config):
    """Build a TestClient around a container whose RPC traffic is mocked."""
    clients = []

    def _make(handler=fake_rpc, environment="testing"):
        container = build_container(
            rpc_config=rpc_config,
            cache_config=CacheConfig(),
            batch_config=BatchConfig(chunk_delay=0),
            ecosystem_config=EcosystemConfig(
                cron_secret="cron-secret",
                tracked_wallets=[WALLET_A, WALLET_B],
                environment=environment,
            ),
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )
        client = TestClient(create_application(container=container))
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client):
    return make_client()


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["environment"] == "testing"


def test_token_balances(client):
    body = {"wallets": [WALLET_A, WALLET_B], "mint": PECOIN_MINT}

    first = client.post("/api/token-balances", json=body)
    second = client.post("/api/token-balances", json=body)

    assert first.status_code == 200
    assert first.json()["balances"] == {WALLET_A: 5.0, WALLET_B: 5.0}
    assert first.json()["cached"] is False
    assert first.json()["timing"]["walletsCount"] == 2
    assert second.json()["cached"] is True


def test_token_balances_marks_malformed_wallets(client):
    response = client.post("/api/token-balances", json={"wallets": [WALLET_A, "bogus"], "mint": PECOIN_MINT})

    assert response.status_code == 200
    data = response.json()
    assert data["balances"]["bogus"] == 0.0
    assert data["unresolved"] == ["bogus"]


def test_token_balances_requires_mint(client):
    response = client.post("/api/token-balances", json={"wallets": [WALLET_A]})

    assert response.status_code == 400
    data = response.json()
    assert data["success"] is False
    assert data["error_code"] == "VALIDATION_ERROR"


def test_solana_balances(client):
    client.post("/api/solana-balances", json={"wallets": [WALLET_A]})
    response = client.post("/api/solana-balances", json={"wallets": [WALLET_A, WALLET_B]})

    assert response.status_code == 200
    data = response.json()
    assert data["balances"] == {WALLET_A: 1.0, WALLET_B: 1.0}
    assert data["timing"]["fromCache"] == 1
    assert data["timing"]["fromAPI"] == 1


def test_nft_batch_counts(client):
    response = client.post("/api/nft-collection/batch-counts", json={"wallets": [WALLET_A, WALLET_B, "bogus"]})

    assert response.status_code == 200
    data = response.json()
    assert data["counts"] == {WALLET_A: 2, WALLET_B: 2, "bogus": 0}
    assert data["unresolved"] == ["bogus"]
    assert data["totalNFTs"] == 4
    assert data["meta"]["rpcUsed"] == DAS_ENDPOINTS[0]
    assert data["meta"]["batchSize"] == 5


def test_nft_batch_counts_empty(client):
    response = client.post("/api/nft-collection/batch-counts", json={"wallets": []})

    assert response.status_code == 200
    assert response.json()["counts"] == {}


def test_nft_batch_counts_unreachable_upstream(make_client):
    client = make_client(handler=unreachable)

    response = client.post("/api/nft-collection/batch-counts", json={"wallets": [WALLET_A]})

    assert response.status_code == 503
    assert response.json()["error_code"] == "UPSTREAM_UNREACHABLE"


def test_nft_collection(client):
    response = client.post("/api/nft-collection", json={"wallets": [WALLET_A]})

    assert response.status_code == 200
    assert response.json() == {WALLET_A: []}


def test_pecoin_history_empty(client):
    response = client.post("/api/pecoin-history", json={"walletAddress": WALLET_A})

    assert response.status_code == 200
    assert response.json() == {"transactions": [], "nextBeforeSignature": None}


def test_pecoin_history_requires_wallet(client):
    response = client.post("/api/pecoin-history", json={"limit": 5})

    assert response.status_code == 400
    assert response.json()["error_code"] == "VALIDATION_ERROR"


def test_pecoin_history_invalid_wallet(client):
    response = client.post("/api/pecoin-history", json={"wallet": "bogus"})

    assert response.status_code == 400
    assert response.json()["error_code"] == "INVALID_ACCOUNT"


def test_cache_stats_and_maintenance(client):
    client.post("/api/solana-balances", json={"wallets": [WALLET_A, WALLET_B]})

    stats = client.get("/api/cache-stats").json()
    assert stats["stats"]["total_items"] == 2

    removed = client.request("DELETE", "/api/cache-stats", params={"pattern": f"owner:{WALLET_A}"}).json()
    assert removed["removed"] == 1

    cleared = client.post("/api/cache-stats", json={"action": "clear"}).json()
    assert cleared["removed"] == 1
    assert cleared["stats"]["total_items"] == 0


def test_cache_unknown_action(client):
    response = client.post("/api/cache-stats", json={"action": "explode"})

    assert response.status_code == 400
    assert response.json()["error"] == "Unknown action: explode"


def test_cron_refresh_outside_production(client):
    response = client.get("/api/cron/refresh-balances")

    assert response.status_code == 200
    data = response.json()
    assert data["refreshed"] == 2
    assert data["unresolved"] == []


def test_cron_refresh_requires_secret_in_production(make_client):
    client = make_client(environment="production")

    assert client.get("/api/cron/refresh-balances").status_code == 401
    assert client.get(
        "/api/cron/refresh-balances", headers={"Authorization": "Bearer wrong"}
    ).status_code == 401

    response = client.get("/api/cron/refresh-balances", headers={"Authorization": "Bearer cron-secret"})
    assert response.status_code == 200


def test_unknown_route(client):
    response = client.get("/api/nothing-here")

    assert response.status_code == 404
    assert response.json()["error_code"] == "HTTP_404"


def test_pecoin_history_rejects_malformed_cursor(client):
    response = client.post("/api/pecoin-history", json={"walletAddress": WALLET_A, "beforeSignature": "0xdead"})

    assert response.status_code == 400
    assert response.json()["details"] == {"beforeSignature": "0xdead"}
