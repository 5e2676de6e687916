"""
Dependency injection and service provider management for the Camp Ecosystem API.

This module builds the single set of services shared by every request and
exposes FastAPI dependency providers that read it from the application
state.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx
from fastapi import Request

from camp_ecosystem.clients.alchemy_client import AlchemyClient
from camp_ecosystem.clients.das_client import DasClient
from camp_ecosystem.config import (
    BatchConfig, CacheConfig, EcosystemConfig, RpcConfig, get_batch_config,
    get_cache_config, get_ecosystem_config, get_rpc_config
)
from camp_ecosystem.constants import TOKEN_2022_PROGRAM_ID
from camp_ecosystem.services.balance_service import BalanceService
from camp_ecosystem.services.cache_service import CacheKind, CacheService
from camp_ecosystem.services.nft_service import NftService
from camp_ecosystem.services.transaction_service import TransactionService
from camp_ecosystem.utils.addresses import AddressResolver
from camp_ecosystem.utils.batching import profiles_from_config
from camp_ecosystem.utils.errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Everything the routes need, built once per application."""

    rpc_config: RpcConfig
    ecosystem_config: EcosystemConfig
    cache: CacheService
    alchemy_client: AlchemyClient
    das_client: DasClient
    resolver: AddressResolver
    balance_service: BalanceService
    nft_service: NftService
    transaction_service: TransactionService

    async def close(self) -> None:
        """Stop background work and release HTTP connections."""
        await self.cache.stop_cleanup_task()
        await self.alchemy_client.close()
        await self.das_client.close()
        logger.info("Service container closed")


def build_container(
    rpc_config: Optional[RpcConfig] = None,
    cache_config: Optional[CacheConfig] = None,
    batch_config: Optional[BatchConfig] = None,
    ecosystem_config: Optional[EcosystemConfig] = None,
    http_client: Optional[httpx.AsyncClient] = None
) -> ServiceContainer:
    """
    Build the service container.

    Missing configuration sections are read from the environment.

    Args:
        rpc_config: RPC endpoints and timeouts
        cache_config: Cache TTL overrides and sweep interval
        batch_config: Batch chunk sizes and deadlines
        ecosystem_config: Mint, cron and tracked wallet settings
        http_client: Optional HTTP client shared by the RPC clients

    Returns:
        The initialized container
    """
    rpc_config = rpc_config or get_rpc_config()
    cache_config = cache_config or get_cache_config()
    batch_config = batch_config or get_batch_config()
    ecosystem_config = ecosystem_config or get_ecosystem_config()

    ttl_config = {}
    for kind, ttl in cache_config.ttl_overrides.items():
        try:
            ttl_config[CacheKind(kind)] = ttl
        except ValueError:
            raise ConfigurationError(
                f"Unknown cache kind in CACHE_TTL_{kind}",
                details={"setting": f"CACHE_TTL_{kind}"}
            )

    cache = CacheService(
        ttl_config=ttl_config,
        cleanup_interval=cache_config.cleanup_interval
    )
    alchemy_client = AlchemyClient(rpc_config, http_client=http_client)
    das_client = DasClient(rpc_config, http_client=http_client)

    overrides = {mint: TOKEN_2022_PROGRAM_ID for mint in ecosystem_config.token_2022_mints}
    overrides[ecosystem_config.pecoin_mint] = TOKEN_2022_PROGRAM_ID
    resolver = AddressResolver(program_overrides=overrides)

    profiles = profiles_from_config(batch_config)

    container = ServiceContainer(
        rpc_config=rpc_config,
        ecosystem_config=ecosystem_config,
        cache=cache,
        alchemy_client=alchemy_client,
        das_client=das_client,
        resolver=resolver,
        balance_service=BalanceService(
            alchemy_client, cache, resolver,
            profiles=profiles,
            max_attempts=rpc_config.max_retries,
            retry_base_delay=rpc_config.retry_base_delay,
            attempt_timeout=rpc_config.attempt_timeout
        ),
        nft_service=NftService(das_client, cache, rpc_config.das_rpc_urls, profiles=profiles),
        transaction_service=TransactionService(alchemy_client, cache),
    )
    logger.info("Service providers initialized successfully")
    return container


# FastAPI dependency providers
def get_container(request: Request) -> ServiceContainer:
    """Dependency provider for the service container."""
    return request.app.state.container


def get_cache_service(request: Request) -> CacheService:
    """Dependency provider for CacheService."""
    return get_container(request).cache


def get_balance_service(request: Request) -> BalanceService:
    """Dependency provider for BalanceService."""
    return get_container(request).balance_service


def get_nft_service(request: Request) -> NftService:
    """Dependency provider for NftService."""
    return get_container(request).nft_service


def get_transaction_service(request: Request) -> TransactionService:
    """Dependency provider for TransactionService."""
    return get_container(request).transaction_service


def get_ecosystem_settings(request: Request) -> EcosystemConfig:
    """Dependency provider for the ecosystem configuration."""
    return get_container(request).ecosystem_config
