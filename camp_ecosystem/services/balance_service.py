"""Balance service for Camp Ecosystem.

This module provides cached token and SOL balance lookups for single
wallets and for batches of wallets.
"""

import time
from dataclasses import replace
from typing import Any, Dict, Iterable, Optional, Set, Tuple

from camp_ecosystem.clients.alchemy_client import AlchemyClient
from camp_ecosystem.constants import (
    NFT_WALLET_PREFIX, SOL_BALANCE_PREFIX, TOKEN_BALANCE_PREFIX, TOKEN_METADATA_PREFIX
)
from camp_ecosystem.logging_config import short_address
from camp_ecosystem.services.base_service import BaseService
from camp_ecosystem.services.cache_service import CacheKind, CacheService
from camp_ecosystem.utils.addresses import AddressResolver
from camp_ecosystem.utils.batching import (
    SOL_BALANCE_PROFILE, TOKEN_BALANCE_PROFILE, BatchProfile, BatchResult, batch_resolve
)
from camp_ecosystem.utils.retry import retry_budget, with_retries


class BalanceService(BaseService):
    """Service for token and SOL balances."""

    def __init__(
        self,
        client: AlchemyClient,
        cache: CacheService,
        resolver: AddressResolver,
        profiles: Optional[Dict[str, BatchProfile]] = None,
        max_attempts: int = 2,
        retry_base_delay: float = 0.3,
        attempt_timeout: float = 5.0
    ):
        """Initialize the balance service.

        Args:
            client: Alchemy RPC client
            cache: Shared server cache
            resolver: Associated token account resolver
            profiles: Batch profiles by name (token_balance, sol_balance)
            max_attempts: Attempts per balance read
            retry_base_delay: Backoff unit for balance reads in seconds
            attempt_timeout: Deadline for each attempt of a balance read in seconds
        """
        super().__init__(timeout=attempt_timeout)
        self.client = client
        self.cache = cache
        self.resolver = resolver
        profiles = profiles or {}
        self.token_profile = profiles.get("token_balance", TOKEN_BALANCE_PROFILE)
        self.sol_profile = profiles.get("sol_balance", SOL_BALANCE_PROFILE)
        self.max_attempts = max_attempts
        self.retry_base_delay = retry_base_delay

        # A wallet's batch deadline must leave room for every attempt and backoff
        budget = retry_budget(max_attempts, attempt_timeout, retry_base_delay)
        if self.token_profile.item_timeout < budget:
            self.logger.debug(
                f"Raising {self.token_profile.name} deadline from "
                f"{self.token_profile.item_timeout}s to {budget}s"
            )
            self.token_profile = replace(self.token_profile, item_timeout=budget)

    @staticmethod
    def token_balance_key(owner: str, mint: str) -> str:
        return CacheService.create_key(TOKEN_BALANCE_PREFIX, {"owner": owner, "mint": mint})

    @staticmethod
    def sol_balance_key(owner: str) -> str:
        return CacheService.create_key(SOL_BALANCE_PREFIX, {"owner": owner})

    async def get_token_balance(self, owner: str, mint: str) -> float:
        """Get the balance ``owner`` holds of ``mint``.

        The associated token account is derived locally, so one account
        read answers the query. Concurrent calls for the same pair share a
        single fetch.

        Raises:
            InvalidPublicKeyError: If the owner or mint is malformed
            RpcTimeoutError: If every attempt timed out
        """
        balance, _ = await self._token_balance_with_status(owner, mint)
        return balance

    async def _token_balance_with_status(self, owner: str, mint: str) -> Tuple[float, bool]:
        account = self.resolver.derive(owner, mint)

        async def fetch() -> float:
            return await with_retries(
                lambda: self.with_timeout(self.client.get_token_account_balance(account)),
                max_attempts=self.max_attempts,
                base_delay=self.retry_base_delay,
                operation_name=f"token balance {short_address(owner)}"
            )

        return await self.cache.get_or_fetch_with_status(
            self.token_balance_key(owner, mint), fetch, CacheKind.TOKEN_BALANCE
        )

    async def get_token_balances(self, wallets: Iterable[str], mint: str) -> BatchResult:
        """Get token balances for many wallets.

        Every wallet gets an entry. Wallets whose lookup failed get 0.0 and
        are listed in ``unresolved``.
        """
        hits: Set[str] = set()

        async def resolve(wallet: str, _endpoint: Optional[str]) -> float:
            balance, cached = await self._token_balance_with_status(wallet, mint)
            if cached:
                hits.add(wallet)
            return balance

        result = await batch_resolve(wallets, resolve, self.token_profile)
        result.from_cache = hits
        return result

    async def get_sol_balances(self, wallets: Iterable[str]) -> BatchResult:
        """Get SOL balances for many wallets, cached per wallet."""
        hits: Set[str] = set()

        async def resolve(wallet: str, _endpoint: Optional[str]) -> float:
            balance, cached = await self.cache.get_or_fetch_with_status(
                self.sol_balance_key(wallet),
                lambda: self.client.get_sol_balance(wallet),
                CacheKind.SOL_BALANCE
            )
            if cached:
                hits.add(wallet)
            return balance

        result = await batch_resolve(wallets, resolve, self.sol_profile)
        result.from_cache = hits
        return result

    async def get_token_metadata(self, mint: str) -> Optional[Dict[str, Any]]:
        """Get token image/URI metadata, or None if it cannot be fetched."""
        key = CacheService.create_key(TOKEN_METADATA_PREFIX, {"mint": mint})
        return await self.execute_with_fallback(
            self.cache.get_or_fetch(
                key, lambda: self.client.get_token_metadata(mint), CacheKind.TOKEN_METADATA
            ),
            None,
            f"Token metadata unavailable for {short_address(mint)}"
        )

    def invalidate_wallet(self, wallet: str) -> int:
        """Drop every cached value derived from ``wallet``.

        Called when the wallet's entity is edited so that the next read
        goes to upstream.

        Returns:
            Number of entries removed
        """
        removed = self.cache.invalidate_suffix(f"owner:{wallet}")
        removed += self.cache.invalidate_suffix(f"{NFT_WALLET_PREFIX}:{wallet}")
        self.log_with_context("info", "Invalidated wallet cache", wallet=wallet, removed=removed)
        return removed

    async def refresh_balances(self, wallets: Iterable[str], mint: str) -> Dict[str, Any]:
        """Invalidate all token balances and re-resolve ``wallets``.

        Returns:
            Summary with ``invalidated``, ``refreshed``, ``unresolved`` and ``elapsed_ms``
        """
        start_time = time.perf_counter()
        invalidated = self.cache.invalidate(TOKEN_BALANCE_PREFIX)
        result = await self.get_token_balances(wallets, mint)
        summary = {
            "invalidated": invalidated,
            "refreshed": result.resolved_count,
            "unresolved": sorted(result.unresolved),
            "elapsed_ms": self.elapsed_ms(start_time),
        }
        self.log_with_context("info", "Refreshed token balances", **summary)
        return summary
