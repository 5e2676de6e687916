"""Batching utilities for Camp Ecosystem.

This module resolves many wallets against a rate-limited upstream:
entities are deduplicated and split into fixed-size chunks. Chunks run one
after another while the entities inside a chunk run concurrently, each
under its own deadline. Every entity ends up in the result, with a
fallback value when its lookup fails.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import (
    Any, Awaitable, Callable, Dict, Generic, Hashable, Iterable, Iterator,
    List, Mapping, Optional, Sequence, Set, TypeVar
)

from camp_ecosystem.config import BatchConfig
from camp_ecosystem.logging_config import short_address
from camp_ecosystem.utils.errors import (
    NoCapableEndpointError, RpcConnectionError, UpstreamUnreachableError
)

K = TypeVar('K', bound=Hashable)  # Entity type
V = TypeVar('V')  # Value type

# resolver(entity, endpoint) -> value; endpoint is None when no probing is done
Resolver = Callable[[K, Optional[str]], Awaitable[V]]
Probe = Callable[[str], Awaitable[Any]]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchProfile:
    """Chunking and deadline settings for one kind of lookup."""

    name: str
    chunk_size: int
    item_timeout: float
    chunk_delay: float = 0.2
    fallback: Any = 0

    def __post_init__(self):
        if self.chunk_size < 1:
            raise ValueError("chunk_size must be at least 1")
        if self.item_timeout <= 0:
            raise ValueError("item_timeout must be positive")

    def fallback_value(self) -> Any:
        """A fresh copy of the fallback, so mutable fallbacks are not shared."""
        if isinstance(self.fallback, (list, dict, set)):
            return type(self.fallback)()
        return self.fallback


NFT_COUNT_PROFILE = BatchProfile("nft_count", chunk_size=5, item_timeout=6.0, fallback=0)
NFT_METADATA_PROFILE = BatchProfile("nft_metadata", chunk_size=3, item_timeout=15.0, fallback=[])
TOKEN_BALANCE_PROFILE = BatchProfile("token_balance", chunk_size=10, item_timeout=5.0, fallback=0.0)
SOL_BALANCE_PROFILE = BatchProfile("sol_balance", chunk_size=10, item_timeout=5.0, fallback=0.0)


def profiles_from_config(config: BatchConfig) -> Dict[str, BatchProfile]:
    """Build the four lookup profiles from configuration."""
    return {
        "nft_count": BatchProfile(
            "nft_count", config.nft_count_chunk_size, config.nft_count_timeout,
            config.chunk_delay, fallback=0
        ),
        "nft_metadata": BatchProfile(
            "nft_metadata", config.nft_metadata_chunk_size, config.nft_metadata_timeout,
            config.chunk_delay, fallback=[]
        ),
        "token_balance": BatchProfile(
            "token_balance", config.token_balance_chunk_size, config.token_balance_timeout,
            config.chunk_delay, fallback=0.0
        ),
        "sol_balance": BatchProfile(
            "sol_balance", config.sol_balance_chunk_size, config.sol_balance_timeout,
            config.chunk_delay, fallback=0.0
        ),
    }


class BatchResult(Mapping[K, V], Generic[K, V]):
    """Read-only mapping of entity to value for one batch call.

    ``unresolved`` holds the entities whose value is the profile fallback
    rather than an answer from upstream. ``from_cache`` holds the entities
    the resolver answered from a stored cache entry during this call.
    """

    def __init__(self, values: Dict[K, V], unresolved: Set[K],
                 endpoint: Optional[str] = None, elapsed: float = 0.0,
                 from_cache: Optional[Set[K]] = None):
        self.values = values
        self.unresolved = unresolved
        self.from_cache = from_cache if from_cache is not None else set()
        self.endpoint = endpoint
        self.elapsed = elapsed

    def __getitem__(self, entity: K) -> V:
        return self.values[entity]

    def __iter__(self) -> Iterator[K]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)

    def is_resolved(self, entity: K) -> bool:
        return entity in self.values and entity not in self.unresolved

    @property
    def resolved_count(self) -> int:
        return len(self.values) - len(self.unresolved)

    def __repr__(self) -> str:
        return (f"BatchResult(size={len(self.values)}, unresolved={len(self.unresolved)}, "
                f"endpoint={self.endpoint!r})")


def chunked(items: Sequence[K], size: int) -> List[List[K]]:
    """Split ``items`` into consecutive lists of at most ``size``."""
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


def dedupe(entities: Iterable[K]) -> List[K]:
    """Drop repeated entities, keeping first-seen order."""
    return list(dict.fromkeys(entities))


async def select_endpoint(endpoints: Sequence[str], probe: Probe) -> str:
    """
    Return the first endpoint, in priority order, whose probe succeeds.

    Raises:
        UpstreamUnreachableError: If every endpoint failed at the connection level
        NoCapableEndpointError: If no endpoint supports the probed capability
    """
    if not endpoints:
        raise NoCapableEndpointError(endpoints)

    connection_failures = 0
    for endpoint in endpoints:
        try:
            await probe(endpoint)
        except RpcConnectionError as e:
            connection_failures += 1
            logger.info(f"Endpoint unreachable: {endpoint} ({str(e)})")
            continue
        except Exception as e:
            logger.info(f"Endpoint does not support the query: {endpoint} ({str(e)})")
            continue
        logger.info(f"Using endpoint: {endpoint}")
        return endpoint

    if connection_failures == len(endpoints):
        raise UpstreamUnreachableError(
            "All upstream endpoints are unreachable",
            details={"candidates": list(endpoints)}
        )
    raise NoCapableEndpointError(endpoints)


async def _resolve_one(entity: K, resolver: Resolver, endpoint: Optional[str],
                       profile: BatchProfile) -> V:
    # wait_for cancels the abandoned call on expiry
    return await asyncio.wait_for(resolver(entity, endpoint), timeout=profile.item_timeout)


async def batch_resolve(
    entities: Iterable[K],
    resolver: Resolver,
    profile: BatchProfile,
    endpoints: Optional[Sequence[str]] = None,
    probe: Optional[Probe] = None
) -> BatchResult:
    """
    Resolve every entity, chunk by chunk, never failing the whole batch
    because of one entity.

    Args:
        entities: Entities to resolve; duplicates are resolved once
        resolver: Async ``resolver(entity, endpoint)`` for a single entity
        profile: Chunk size, per-entity deadline, delay and fallback
        endpoints: Optional candidate endpoints in priority order
        probe: Capability check run against ``endpoints`` before resolving

    Returns:
        BatchResult with an entry for every distinct entity

    Raises:
        UpstreamUnreachableError: If every candidate endpoint is unreachable
    """
    start_time = time.perf_counter()
    unique = dedupe(entities)
    values: Dict[K, V] = {}
    unresolved: Set[K] = set()

    if not unique:
        return BatchResult(values, unresolved, elapsed=0.0)

    endpoint: Optional[str] = None
    if endpoints is not None and probe is not None:
        try:
            endpoint = await select_endpoint(endpoints, probe)
        except NoCapableEndpointError:
            logger.warning(f"[{profile.name}] No capable endpoint, using fallback for {len(unique)} entities")
            for entity in unique:
                values[entity] = profile.fallback_value()
                unresolved.add(entity)
            return BatchResult(values, unresolved, elapsed=time.perf_counter() - start_time)

    chunks = chunked(unique, profile.chunk_size)
    logger.info(f"[{profile.name}] Resolving {len(unique)} entities in {len(chunks)} chunks of <= {profile.chunk_size}")

    for index, chunk in enumerate(chunks):
        chunk_start = time.perf_counter()
        outcomes = await asyncio.gather(
            *[_resolve_one(entity, resolver, endpoint, profile) for entity in chunk],
            return_exceptions=True
        )

        for entity, outcome in zip(chunk, outcomes):
            if isinstance(outcome, BaseException):
                if isinstance(outcome, asyncio.CancelledError):
                    raise outcome
                reason = "timeout" if isinstance(outcome, asyncio.TimeoutError) else str(outcome)
                logger.warning(f"[{profile.name}] Lookup failed for {short_address(str(entity))}: {reason}")
                values[entity] = profile.fallback_value()
                unresolved.add(entity)
            else:
                values[entity] = outcome

        logger.debug(
            f"[{profile.name}] Chunk {index + 1}/{len(chunks)} done in "
            f"{(time.perf_counter() - chunk_start) * 1000:.0f}ms"
        )
        if index < len(chunks) - 1 and profile.chunk_delay > 0:
            await asyncio.sleep(profile.chunk_delay)

    elapsed = time.perf_counter() - start_time
    logger.info(
        f"[{profile.name}] Resolved {len(values) - len(unresolved)}/{len(values)} "
        f"entities in {elapsed * 1000:.0f}ms"
    )
    return BatchResult(values, unresolved, endpoint=endpoint, elapsed=elapsed)
