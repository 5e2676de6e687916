"""Common test fixtures for Camp Ecosystem tests.

This module provides fixtures that can be reused across different test modules.
"""

from unittest.mock import AsyncMock

import pytest

from camp_ecosystem.clients.alchemy_client import AlchemyClient
from camp_ecosystem.clients.das_client import DasClient
from camp_ecosystem.config import EcosystemConfig, RpcConfig
from camp_ecosystem.constants import PECOIN_MINT
from camp_ecosystem.services.balance_service import BalanceService
from camp_ecosystem.services.cache_service import CacheService
from camp_ecosystem.services.nft_service import NftService
from camp_ecosystem.services.transaction_service import TransactionService
from camp_ecosystem.utils.addresses import AddressResolver
from camp_ecosystem.utils.batching import BatchProfile

# Well-known valid addresses
WALLET_A = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
WALLET_B = "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB"
WALLET_C = "675kPX9MHTjS2zt1qfr1NYHuzeLXfQM9H24wFSUt1Mp8"
WALLET_D = "9W959DqEETiGZocYWCQPaJ6sBmUzgfxXfqGeTEdp3aQP"
USDC_MINT = WALLET_A

DAS_ENDPOINTS = ["https://user-rpc.test", "https://backup-rpc.test"]


class FakeClock:
    """Manually advanced clock for cache expiry tests."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def fast_profiles():
    """Batch profiles with no inter-chunk delay and short deadlines."""
    return {
        "nft_count": BatchProfile("nft_count", chunk_size=5, item_timeout=0.5, chunk_delay=0, fallback=0),
        "nft_metadata": BatchProfile("nft_metadata", chunk_size=3, item_timeout=0.5, chunk_delay=0, fallback=[]),
        "token_balance": BatchProfile("token_balance", chunk_size=10, item_timeout=0.5, chunk_delay=0, fallback=0.0),
        "sol_balance": BatchProfile("sol_balance", chunk_size=10, item_timeout=0.5, chunk_delay=0, fallback=0.0),
    }


@pytest.fixture
def clock():
    """Create a fake clock."""
    return FakeClock()


@pytest.fixture
def cache(clock):
    """Create a CacheService driven by the fake clock."""
    return CacheService(time_func=clock)


@pytest.fixture
def rpc_config():
    """Create an RPC configuration pointing at test endpoints."""
    return RpcConfig(
        rpc_url="https://rpc.test",
        alchemy_api_key="test-key",
        das_rpc_urls=list(DAS_ENDPOINTS),
        timeout=1.0,
        max_retries=2,
        retry_base_delay=0.0,
    )


@pytest.fixture
def ecosystem_config():
    """Create an ecosystem configuration."""
    return EcosystemConfig(
        pecoin_mint=PECOIN_MINT,
        cron_secret="cron-secret",
        tracked_wallets=[WALLET_A, WALLET_B],
        environment="testing",
    )


@pytest.fixture
def mock_alchemy_client():
    """Create a mock Alchemy client."""
    client = AsyncMock(spec=AlchemyClient)
    client.get_token_account_balance.return_value = 42.0
    client.get_sol_balance.return_value = 1.5
    client.get_token_metadata.return_value = {"image": "https://img.test/pe.png", "uri": "https://meta.test/pe.json"}
    client.get_token_accounts_by_owner.return_value = []
    client.get_signatures_for_address.return_value = []
    client.get_transaction.return_value = None
    return client


@pytest.fixture
def mock_das_client():
    """Create a mock DAS client."""
    client = AsyncMock(spec=DasClient)
    client.probe.return_value = None
    client.count_assets.return_value = 3
    client.get_assets_by_owner.return_value = {"total": 0, "items": []}
    return client


@pytest.fixture
def resolver():
    """Create an AddressResolver with the default program table."""
    return AddressResolver()


@pytest.fixture
def balance_service(mock_alchemy_client, cache, resolver):
    """Create a BalanceService with mock dependencies."""
    return BalanceService(
        mock_alchemy_client, cache, resolver,
        profiles=fast_profiles(), max_attempts=2, retry_base_delay=0.0
    )


@pytest.fixture
def nft_service(mock_das_client, cache):
    """Create an NftService with mock dependencies."""
    return NftService(mock_das_client, cache, DAS_ENDPOINTS, profiles=fast_profiles())


@pytest.fixture
def transaction_service(mock_alchemy_client, cache):
    """Create a TransactionService with mock dependencies."""
    return TransactionService(mock_alchemy_client, cache, max_attempts=3, retry_base_delay=0.0)
