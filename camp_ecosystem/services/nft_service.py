"""NFT service for Camp Ecosystem.

This module provides NFT counts and compressed NFT collections for
wallets, resolved against whichever DAS-capable endpoint answers first.
"""

from typing import Dict, Iterable, List, Optional, Sequence

from camp_ecosystem.clients.das_client import DasClient
from camp_ecosystem.constants import NFT_COUNT_PREFIX, NFT_WALLET_PREFIX
from camp_ecosystem.models.nft import NftAsset
from camp_ecosystem.services.base_service import BaseService
from camp_ecosystem.services.cache_service import CacheKind, CacheService
from camp_ecosystem.utils.batching import (
    NFT_COUNT_PROFILE, NFT_METADATA_PROFILE, BatchProfile, BatchResult, batch_resolve, dedupe
)
from camp_ecosystem.utils.validation import partition_addresses


class NftService(BaseService):
    """Service for NFT counts and collections."""

    def __init__(
        self,
        das_client: DasClient,
        cache: CacheService,
        endpoints: Sequence[str],
        profiles: Optional[Dict[str, BatchProfile]] = None
    ):
        """Initialize the NFT service.

        Args:
            das_client: DAS client
            cache: Shared server cache
            endpoints: DAS candidate endpoints in priority order
            profiles: Batch profiles by name (nft_count, nft_metadata)
        """
        super().__init__()
        self.das = das_client
        self.cache = cache
        self.endpoints = list(endpoints)
        profiles = profiles or {}
        self.count_profile = profiles.get("nft_count", NFT_COUNT_PROFILE)
        self.metadata_profile = profiles.get("nft_metadata", NFT_METADATA_PROFILE)

    @staticmethod
    def count_key(wallet: str) -> str:
        return CacheService.create_key(NFT_COUNT_PREFIX, {"owner": wallet})

    async def get_batch_counts(self, wallets: Iterable[str]) -> BatchResult:
        """Count NFTs for many wallets.

        Cached counts are used first. Malformed addresses count as 0 without
        a network call. The remaining wallets are resolved in chunks against
        the first DAS-capable endpoint, and their counts are cached.

        Raises:
            UpstreamUnreachableError: If no DAS endpoint can be reached
        """
        ordered = dedupe(wallets)
        values: Dict[str, int] = {}
        unresolved = set()

        missing: List[str] = []
        for wallet in ordered:
            cached = self.cache.get(self.count_key(wallet))
            if cached is not None:
                values[wallet] = cached
            else:
                missing.append(wallet)
        self.logger.info(f"NFT counts: {len(values)} from cache, {len(missing)} to fetch")

        valid, invalid = partition_addresses(missing)
        for wallet in invalid:
            self.logger.warning(f"Invalid wallet address format: {wallet}")
            values[wallet] = 0
            unresolved.add(wallet)

        endpoint: Optional[str] = None
        elapsed = 0.0
        if valid:
            fetched = await batch_resolve(
                valid,
                lambda wallet, url: self.das.count_assets(wallet, url=url),
                self.count_profile,
                endpoints=self.endpoints,
                probe=self.das.probe
            )
            for wallet, count in fetched.items():
                values[wallet] = count
                if fetched.is_resolved(wallet):
                    self.cache.set(self.count_key(wallet), count, CacheKind.NFT_COUNT)
            unresolved |= fetched.unresolved
            endpoint = fetched.endpoint
            elapsed = fetched.elapsed

        ordered_values = {wallet: values[wallet] for wallet in ordered}
        return BatchResult(ordered_values, unresolved, endpoint=endpoint, elapsed=elapsed)

    async def _fetch_wallet_nfts(self, wallet: str, endpoint: Optional[str]) -> List[NftAsset]:
        result = await self.das.get_assets_by_owner(wallet, url=endpoint)
        assets = [NftAsset.from_das(item) for item in result.get("items") or []]
        nfts = [asset for asset in assets if asset is not None and asset.name.strip()]
        self.logger.debug(f"Found {len(nfts)} compressed NFTs for {wallet[:8]}...")
        return nfts

    async def get_wallet_nfts(self, wallet: str, endpoint: Optional[str] = None) -> List[NftAsset]:
        """Get the compressed NFTs owned by ``wallet``."""
        if endpoint is None and self.endpoints:
            endpoint = self.endpoints[0]
        return await self.cache.get_or_fetch(
            f"{NFT_WALLET_PREFIX}:{wallet}",
            lambda: self._fetch_wallet_nfts(wallet, endpoint),
            CacheKind.NFT_COLLECTION
        )

    async def get_batch_collections(self, wallets: Iterable[str]) -> Dict[str, List[NftAsset]]:
        """Get compressed NFTs for many wallets.

        Whole-batch and per-wallet cache entries are used first; only the
        missing wallets are fetched. Wallets that fail get an empty list
        and are not cached.
        """
        ordered = dedupe(wallets)
        cached, missing = self.cache.get_cached_batch_results(ordered)
        if not missing:
            return {wallet: cached.get(wallet, []) for wallet in ordered}

        fetched = await batch_resolve(
            missing,
            self.get_wallet_nfts,
            self.metadata_profile,
            endpoints=self.endpoints,
            probe=self.das.probe
        )

        results = dict(cached)
        results.update(fetched)
        if fetched.unresolved:
            self.logger.warning(f"{len(fetched.unresolved)} wallets failed, batch not cached")
        else:
            self.cache.cache_batch_results(ordered, results, CacheKind.NFT_COLLECTION)
        return {wallet: results.get(wallet, []) for wallet in ordered}
