"""Unit tests for the RPC clients, using an httpx mock transport."""

import json

import httpx
import pytest

from camp_ecosystem.clients.alchemy_client import AlchemyClient
from camp_ecosystem.clients.base_client import BaseRpcClient
from camp_ecosystem.clients.das_client import DasClient
from camp_ecosystem.utils.errors import (
    CapabilityNotSupportedError, RpcConnectionError, RpcTimeoutError, SolanaRpcError
)
from tests.fixtures.common import WALLET_B


def transport_for(handler):
    """Wrap ``handler(payload, request)`` as a mock transport, recording requests."""
    requests = []

    def _handle(request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        requests.append((str(request.url).rstrip("/"), payload))
        return handler(payload, request)

    return httpx.MockTransport(_handle), requests


def rpc_result(result):
    return lambda payload, request: httpx.Response(200, json={"jsonrpc": "2.0", "id": payload["id"], "result": result})


class TestBaseRpcClient:
    """Test suite for BaseRpcClient request handling."""

    @pytest.mark.asyncio
    async def test_returns_result_member(self, rpc_config):
        transport, requests = transport_for(rpc_result({"value": 5}))
        client = BaseRpcClient(rpc_config, httpx.AsyncClient(transport=transport))

        assert await client._make_request("getBalance", [WALLET_B]) == {"value": 5}

        url, payload = requests[0]
        assert url == "https://rpc.test"
        assert payload == {"jsonrpc": "2.0", "id": 1, "method": "getBalance", "params": [WALLET_B]}

    @pytest.mark.asyncio
    async def test_url_override(self, rpc_config):
        transport, requests = transport_for(rpc_result(None))
        client = BaseRpcClient(rpc_config, httpx.AsyncClient(transport=transport))

        await client._make_request("getHealth", url="https://other.test")

        assert requests[0][0] == "https://other.test"
        assert requests[0][1]["params"] == []

    @pytest.mark.asyncio
    async def test_error_payload_raises(self, rpc_config):
        def handler(payload, request):
            return httpx.Response(200, json={
                "jsonrpc": "2.0", "id": 1,
                "error": {"code": -32602, "message": "Invalid params"}
            })

        transport, _ = transport_for(handler)
        client = BaseRpcClient(rpc_config, httpx.AsyncClient(transport=transport))

        with pytest.raises(SolanaRpcError) as exc_info:
            await client._make_request("getBalance", [WALLET_B])

        assert "Invalid params" in exc_info.value.message
        assert exc_info.value.rpc_code == -32602

    @pytest.mark.asyncio
    async def test_http_error_status(self, rpc_config):
        transport, _ = transport_for(lambda payload, request: httpx.Response(429, text="slow down"))
        client = BaseRpcClient(rpc_config, httpx.AsyncClient(transport=transport))

        with pytest.raises(SolanaRpcError) as exc_info:
            await client._make_request("getBalance")

        assert exc_info.value.error_data["status"] == 429

    @pytest.mark.asyncio
    async def test_invalid_json(self, rpc_config):
        transport, _ = transport_for(lambda payload, request: httpx.Response(200, text="<html>"))
        client = BaseRpcClient(rpc_config, httpx.AsyncClient(transport=transport))

        with pytest.raises(SolanaRpcError):
            await client._make_request("getBalance")

    @pytest.mark.asyncio
    async def test_timeout_maps_to_rpc_timeout(self, rpc_config):
        def handler(payload, request):
            raise httpx.ReadTimeout("read timed out", request=request)

        transport, _ = transport_for(handler)
        client = BaseRpcClient(rpc_config, httpx.AsyncClient(transport=transport))

        with pytest.raises(RpcTimeoutError):
            await client._make_request("getBalance")

    @pytest.mark.asyncio
    async def test_connect_error_maps_to_connection_error(self, rpc_config):
        def handler(payload, request):
            raise httpx.ConnectError("connection refused", request=request)

        transport, _ = transport_for(handler)
        client = BaseRpcClient(rpc_config, httpx.AsyncClient(transport=transport))

        with pytest.raises(RpcConnectionError):
            await client._make_request("getBalance")

    @pytest.mark.asyncio
    async def test_close_leaves_injected_client_open(self, rpc_config):
        http_client = httpx.AsyncClient(transport=transport_for(rpc_result(None))[0])

        async with BaseRpcClient(rpc_config, http_client):
            pass

        assert not http_client.is_closed
        await http_client.aclose()


class TestAlchemyClient:
    """Test suite for AlchemyClient."""

    @pytest.mark.asyncio
    async def test_uses_alchemy_endpoint(self, rpc_config):
        transport, requests = transport_for(rpc_result({"value": {"uiAmount": 12.5}}))
        client = AlchemyClient(rpc_config, httpx.AsyncClient(transport=transport))

        assert await client.get_token_account_balance(WALLET_B) == 12.5
        assert requests[0][0] == "https://solana-mainnet.g.alchemy.com/v2/test-key"
        assert requests[0][1]["method"] == "getTokenAccountBalance"

    @pytest.mark.asyncio
    async def test_missing_account_reads_as_zero(self, rpc_config):
        def handler(payload, request):
            return httpx.Response(200, json={
                "jsonrpc": "2.0", "id": 1,
                "error": {"code": -32602, "message": "Invalid param: could not find account"}
            })

        transport, _ = transport_for(handler)
        client = AlchemyClient(rpc_config, httpx.AsyncClient(transport=transport))

        assert await client.get_token_account_balance(WALLET_B) == 0.0

    @pytest.mark.asyncio
    async def test_sol_balance_converts_lamports(self, rpc_config):
        transport, _ = transport_for(rpc_result({"context": {"slot": 1}, "value": 2_500_000_000}))
        client = AlchemyClient(rpc_config, httpx.AsyncClient(transport=transport))

        assert await client.get_sol_balance(WALLET_B) == 2.5

    @pytest.mark.asyncio
    async def test_token_metadata(self, rpc_config):
        transport, requests = transport_for(rpc_result({
            "uri": "https://meta.test/pe.json",
            "offChainMetadata": {"image": "https://img.test/pe.png"}
        }))
        client = AlchemyClient(rpc_config, httpx.AsyncClient(transport=transport))

        metadata = await client.get_token_metadata(WALLET_B)

        assert metadata == {"image": "https://img.test/pe.png", "uri": "https://meta.test/pe.json"}
        assert requests[0][1]["params"] == {"mint": WALLET_B}

    @pytest.mark.asyncio
    async def test_signatures_pass_before(self, rpc_config):
        transport, requests = transport_for(rpc_result([{"signature": "sig1"}]))
        client = AlchemyClient(rpc_config, httpx.AsyncClient(transport=transport))

        result = await client.get_signatures_for_address(WALLET_B, before="sig0", limit=5)

        assert result == [{"signature": "sig1"}]
        assert requests[0][1]["params"][1] == {"limit": 5, "before": "sig0"}


class TestDasClient:
    """Test suite for DasClient."""

    @pytest.mark.asyncio
    async def test_count_assets(self, rpc_config):
        transport, requests = transport_for(rpc_result({"total": 17, "items": []}))
        client = DasClient(rpc_config, httpx.AsyncClient(transport=transport))

        assert await client.count_assets(WALLET_B, url="https://das.test") == 17
        assert requests[0][0] == "https://das.test"
        assert requests[0][1]["params"]["ownerAddress"] == WALLET_B

    @pytest.mark.asyncio
    async def test_probe_rejects_endpoint_without_das(self, rpc_config):
        def handler(payload, request):
            return httpx.Response(200, json={
                "jsonrpc": "2.0", "id": payload["id"],
                "error": {"code": -32601, "message": "Method not found"}
            })

        transport, _ = transport_for(handler)
        client = DasClient(rpc_config, httpx.AsyncClient(transport=transport))

        with pytest.raises(CapabilityNotSupportedError):
            await client.probe("https://plain-rpc.test")

    @pytest.mark.asyncio
    async def test_probe_propagates_connection_errors(self, rpc_config):
        def handler(payload, request):
            raise httpx.ConnectError("refused", request=request)

        transport, _ = transport_for(handler)
        client = DasClient(rpc_config, httpx.AsyncClient(transport=transport))

        with pytest.raises(RpcConnectionError):
            await client.probe("https://down.test")
