"""NFT API routes.

This module defines routes for NFT counts and compressed NFT collections.
"""

import time
from typing import Dict, List

from fastapi import APIRouter, Depends

from camp_ecosystem.dependencies import get_nft_service
from camp_ecosystem.models.nft import NftAsset
from camp_ecosystem.models.requests import NftCountsRequest
from camp_ecosystem.models.responses import NftCountsMeta, NftCountsResponse, Timing
from camp_ecosystem.services.base_service import BaseService
from camp_ecosystem.services.nft_service import NftService

# Create router
router = APIRouter(tags=["nft"])


@router.post(
    "/nft-collection/batch-counts",
    response_model=NftCountsResponse,
    summary="Count NFTs for wallets",
    description="Counts the NFTs held by each wallet in a batch."
)
async def get_batch_counts(
    body: NftCountsRequest,
    service: NftService = Depends(get_nft_service)
) -> NftCountsResponse:
    """Count NFTs for a batch of wallets.

    An empty batch returns empty counts without touching upstream.
    """
    start_time = time.perf_counter()
    if not body.wallets:
        return NftCountsResponse(counts={}, timing=Timing(total=0, walletsCount=0))

    result = await service.get_batch_counts(body.wallets)
    counts = dict(result)
    return NftCountsResponse(
        counts=counts,
        unresolved=sorted(result.unresolved),
        totalNFTs=sum(counts.values()),
        timing=Timing(
            total=BaseService.elapsed_ms(start_time),
            walletsCount=len(body.wallets)
        ),
        meta=NftCountsMeta(
            rpcUsed=result.endpoint or "none",
            batchSize=service.count_profile.chunk_size
        )
    )


@router.post(
    "/nft-collection",
    response_model=Dict[str, List[NftAsset]],
    summary="Get compressed NFTs for wallets",
    description="Retrieves the compressed NFTs held by each wallet in a batch."
)
async def get_collections(
    body: NftCountsRequest,
    service: NftService = Depends(get_nft_service)
) -> Dict[str, List[NftAsset]]:
    """Get compressed NFTs for a batch of wallets."""
    if not body.wallets:
        return {}
    return await service.get_batch_collections(body.wallets)
