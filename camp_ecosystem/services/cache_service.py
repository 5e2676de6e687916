"""
Cache service for Camp Ecosystem.

This module provides the process-wide server cache: a TTL key/value store
with per-kind lifetimes, request coalescing for concurrent misses, and a
periodic sweep of expired entries.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import (
    Any, Awaitable, Callable, Dict, Generic, Iterable, List, Mapping,
    Optional, Tuple, TypeVar, Union
)

from camp_ecosystem.constants import NFT_BATCH_PREFIX, NFT_WALLET_PREFIX
from camp_ecosystem.services.base_service import BaseService

T = TypeVar('T')


class CacheKind(str, Enum):
    """Kinds of cached data. Each kind has its own lifetime."""

    NFT_COLLECTION = "NFT_COLLECTION"
    TOKEN_BALANCE = "TOKEN_BALANCE"
    NFT_METADATA = "NFT_METADATA"
    WALLET_INFO = "WALLET_INFO"
    TRANSACTION_HISTORY = "TRANSACTION_HISTORY"
    TRANSACTION_HISTORY_EMPTY = "TRANSACTION_HISTORY_EMPTY"
    NFT_TRANSACTIONS = "NFT_TRANSACTIONS"
    NFT_COUNT = "NFT_COUNT"
    SOL_BALANCE = "SOL_BALANCE"
    TOKEN_METADATA = "TOKEN_METADATA"


# Lifetimes in seconds
DEFAULT_TTL: Dict[CacheKind, float] = {
    CacheKind.NFT_COLLECTION: 10 * 60,
    CacheKind.TOKEN_BALANCE: 2 * 60,
    CacheKind.NFT_METADATA: 30 * 60,
    CacheKind.WALLET_INFO: 3 * 60,
    CacheKind.TRANSACTION_HISTORY: 2 * 60,
    CacheKind.TRANSACTION_HISTORY_EMPTY: 30,
    CacheKind.NFT_TRANSACTIONS: 90,
    CacheKind.NFT_COUNT: 2 * 60,
    CacheKind.SOL_BALANCE: 2 * 60,
    CacheKind.TOKEN_METADATA: 6 * 60 * 60,
}

KindLike = Union[CacheKind, str]
# A fixed kind, or a function choosing the kind from the fetched value
KindSelector = Union[KindLike, Callable[[Any], KindLike]]


@dataclass
class CacheEntry(Generic[T]):
    """Cache entry with payload, creation time and access statistics."""

    key: str
    data: T
    timestamp: float
    ttl: float
    access_count: int = 1
    last_access: float = field(default=0.0)

    def is_valid(self, now: float) -> bool:
        """An entry is valid strictly before ``timestamp + ttl``."""
        return now - self.timestamp < self.ttl

    def touch(self, now: float) -> None:
        """Record a cache hit."""
        self.access_count += 1
        self.last_access = now


class CacheService(BaseService):
    """
    Server cache with per-kind TTLs and single-flight fetches.

    Features:
    - Time based expiry only; entries are never evicted by size
    - At most one in-flight fetch per key; concurrent callers share it
    - Substring invalidation for write-through from entity edits
    - Periodic cleanup of expired entries

    All mutations are synchronous. The pending-request check and
    registration in ``get_or_fetch`` happen without yielding to the event
    loop, which is what keeps two callers from fetching the same key.
    """

    def __init__(
        self,
        ttl_config: Optional[Mapping[KindLike, float]] = None,
        cleanup_interval: float = 300.0,
        time_func: Callable[[], float] = time.time,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the cache service.

        Args:
            ttl_config: Per-kind TTL overrides in seconds
            cleanup_interval: Interval between expiry sweeps in seconds
            time_func: Clock used for timestamps and expiry
            logger: Optional logger instance
        """
        super().__init__(logger=logger or logging.getLogger(__name__))
        self.ttl_config: Dict[CacheKind, float] = dict(DEFAULT_TTL)
        for kind, ttl in (ttl_config or {}).items():
            self.ttl_config[CacheKind(kind)] = float(ttl)
        self.cleanup_interval = cleanup_interval
        self._now = time_func
        self._cache: Dict[str, CacheEntry[Any]] = {}
        self._pending: Dict[str, "asyncio.Task[Any]"] = {}
        self._cleanup_task: Optional[asyncio.Task] = None
        self.hits = 0
        self.misses = 0
        self.pending_waits = 0

    def ttl_for(self, kind: KindLike) -> float:
        """Lifetime in seconds for a cache kind."""
        return self.ttl_config[CacheKind(kind)]

    def _fresh_entry(self, key: str) -> Optional[CacheEntry[Any]]:
        entry = self._cache.get(key)
        if entry is None:
            return None
        now = self._now()
        if not entry.is_valid(now):
            return None
        entry.touch(now)
        return entry

    def get(self, key: str) -> Optional[Any]:
        """
        Read a value without fetching.

        Args:
            key: Cache key

        Returns:
            The cached value, or None if absent or expired
        """
        entry = self._fresh_entry(key)
        return entry.data if entry is not None else None

    def set(self, key: str, data: Any, kind: KindLike = CacheKind.NFT_COLLECTION) -> None:
        """
        Store a value, replacing any previous entry for the key.

        Args:
            key: Cache key
            data: Value to cache
            kind: Cache kind selecting the TTL
        """
        now = self._now()
        self._cache[key] = CacheEntry(
            key=key,
            data=data,
            timestamp=now,
            ttl=self.ttl_for(kind),
            access_count=1,
            last_access=now
        )

    async def get_or_fetch(
        self,
        key: str,
        fetcher: Callable[[], Awaitable[T]],
        kind: KindSelector = CacheKind.NFT_COLLECTION
    ) -> T:
        """
        Return the cached value for ``key`` or fetch it once.

        Concurrent callers for the same key await the same fetch. Errors
        from ``fetcher`` reach every waiter and are never cached.

        Args:
            key: Cache key
            fetcher: Async function to call on a miss
            kind: Cache kind selecting the TTL for the fetched value, or a
                function of the fetched value returning the kind

        Returns:
            The cached or freshly fetched value
        """
        value, _ = await self.get_or_fetch_with_status(key, fetcher, kind)
        return value

    async def get_or_fetch_with_status(
        self,
        key: str,
        fetcher: Callable[[], Awaitable[T]],
        kind: KindSelector = CacheKind.NFT_COLLECTION
    ) -> Tuple[T, bool]:
        """
        Like ``get_or_fetch``, also telling whether this call was a cache hit.

        Returns:
            Tuple of (value, True if served from a stored entry)
        """
        entry = self._fresh_entry(key)
        if entry is not None:
            self.hits += 1
            age = round(self._now() - entry.timestamp)
            self.logger.debug(f"Cache HIT: {key[:50]} (age: {age}s, accesses: {entry.access_count})")
            return entry.data, True

        pending = self._pending.get(key)
        if pending is not None and not pending.done():
            self.pending_waits += 1
            self.logger.debug(f"Waiting for in-flight request: {key[:50]}")
            return await asyncio.shield(pending), False

        self.misses += 1
        stale = key in self._cache
        self.logger.debug(f"Cache MISS: {key[:50]} ({'expired' if stale else 'new key'})")

        task = asyncio.ensure_future(self._execute_fetch(key, fetcher, kind))
        self._pending[key] = task
        task.add_done_callback(lambda done: self._release(key, done))
        return await asyncio.shield(task), False

    async def _execute_fetch(
        self,
        key: str,
        fetcher: Callable[[], Awaitable[T]],
        kind: KindSelector
    ) -> T:
        """Run the fetcher and store its result."""
        try:
            data = await fetcher()
        except Exception as e:
            self.logger.error(f"Error fetching data for key {key[:50]}: {str(e)}")
            raise
        self.set(key, data, kind(data) if callable(kind) else kind)
        return data

    def _release(self, key: str, task: "asyncio.Task[Any]") -> None:
        """Drop the pending marker once its fetch has settled."""
        if self._pending.get(key) is task:
            del self._pending[key]
        if not task.cancelled() and task.exception() is not None:
            # Retrieved here so a fetch with no remaining waiters is not reported as unhandled
            self.logger.debug(f"Fetch failed for {key[:50]}: {task.exception()!r}")

    def invalidate(self, key_pattern: str) -> int:
        """
        Remove every entry whose key contains ``key_pattern``.

        Args:
            key_pattern: Substring to match; an empty string matches all keys

        Returns:
            Number of entries removed
        """
        matching = [key for key in self._cache if key_pattern in key]
        for key in matching:
            del self._cache[key]
        if matching:
            self.logger.info(f"Invalidated {len(matching)} cache entries matching: {key_pattern!r}")
        return len(matching)

    def invalidate_suffix(self, suffix: str) -> int:
        """
        Remove every entry whose key ends with ``suffix``.

        Keys built by ``create_key`` end with their last parameter, so this
        matches one parameter value exactly where ``invalidate`` would also
        match longer values that start with it.

        Returns:
            Number of entries removed
        """
        matching = [key for key in self._cache if key.endswith(suffix)]
        for key in matching:
            del self._cache[key]
        if matching:
            self.logger.info(f"Invalidated {len(matching)} cache entries ending with: {suffix!r}")
        return len(matching)

    def cleanup(self) -> int:
        """
        Remove expired entries from the cache.

        Returns:
            Number of entries removed
        """
        now = self._now()
        expired = [key for key, entry in self._cache.items() if not entry.is_valid(now)]
        for key in expired:
            del self._cache[key]
        if expired:
            self.logger.info(f"Cleaned up {len(expired)} expired cache entries")
        return len(expired)

    async def start_cleanup_task(self) -> None:
        """Start the periodic cleanup task."""
        if self._cleanup_task is None or self._cleanup_task.done():
            self._cleanup_task = asyncio.create_task(self._cleanup_loop())
            self.logger.info(f"Cache cleanup scheduled every {self.cleanup_interval}s")

    async def stop_cleanup_task(self) -> None:
        """Stop the periodic cleanup task."""
        if self._cleanup_task is not None and not self._cleanup_task.done():
            self._cleanup_task.cancel()
            try:
                await self._cleanup_task
            except asyncio.CancelledError:
                pass
        self._cleanup_task = None

    async def _cleanup_loop(self) -> None:
        """Run the cleanup loop periodically."""
        while True:
            await asyncio.sleep(self.cleanup_interval)
            try:
                self.cleanup()
            except Exception as e:
                self.logger.error(f"Error in cache cleanup: {str(e)}")

    def get_stats(self) -> Dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dictionary with cache statistics
        """
        now = self._now()
        entries = list(self._cache.values())
        avg_age = (
            round(sum(now - entry.timestamp for entry in entries) / len(entries))
            if entries else 0
        )
        return {
            "total_items": len(entries),
            "total_accesses": sum(entry.access_count for entry in entries),
            "avg_age": avg_age,
            "pending_requests": len(self._pending),
            "hits": self.hits,
            "misses": self.misses,
            "pending_waits": self.pending_waits,
        }

    def clear(self) -> int:
        """Remove every entry. Returns the number removed."""
        return self.invalidate("")

    @staticmethod
    def create_key(prefix: str, params: Mapping[str, Any]) -> str:
        """
        Build a cache key from a prefix and parameters.

        Parameters are sorted by name so that equivalent parameter sets map
        to the same key.
        """
        parts = "|".join(f"{name}:{params[name]}" for name in sorted(params))
        return f"{prefix}:{parts}"

    @staticmethod
    def batch_key(wallets: Iterable[str]) -> str:
        """Order-independent key for a whole batch of wallets."""
        return f"{NFT_BATCH_PREFIX}:{','.join(sorted(set(wallets)))}"

    def cache_batch_results(
        self,
        wallets: Iterable[str],
        results: Mapping[str, Any],
        kind: KindLike = CacheKind.NFT_COLLECTION,
        is_success: Callable[[Any], bool] = lambda result: result is not None
    ) -> None:
        """
        Cache a batch result both per wallet and as a whole.

        Only per-wallet results accepted by ``is_success`` are cached
        individually, so failed wallets are retried on the next request.
        """
        for wallet, result in results.items():
            if is_success(result):
                self.set(f"{NFT_WALLET_PREFIX}:{wallet}", result, kind)
        self.set(self.batch_key(wallets), dict(results), kind)
        self.logger.info(f"Cached batch result for {len(results)} wallets")

    def get_cached_batch_results(self, wallets: List[str]) -> Tuple[Dict[str, Any], List[str]]:
        """
        Look up cached results for a batch of wallets.

        Returns:
            Tuple of (cached results by wallet, wallets still missing)
        """
        batch_cached = self.get(self.batch_key(wallets))
        if isinstance(batch_cached, dict):
            self.logger.debug(f"Batch cache HIT for {len(wallets)} wallets")
            return dict(batch_cached), []

        cached: Dict[str, Any] = {}
        missing: List[str] = []
        for wallet in wallets:
            result = self.get(f"{NFT_WALLET_PREFIX}:{wallet}")
            if result is not None:
                cached[wallet] = result
            else:
                missing.append(wallet)

        if cached:
            self.logger.debug(f"Partial batch cache: {len(cached)} cached, {len(missing)} to fetch")
        return cached, missing
