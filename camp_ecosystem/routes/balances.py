"""Balance API routes.

This module defines routes for token and SOL balances of wallet batches.
"""

import time

from fastapi import APIRouter, Depends

from camp_ecosystem.dependencies import get_balance_service
from camp_ecosystem.models.requests import TokenBalancesRequest, WalletsRequest
from camp_ecosystem.models.responses import BalancesResponse, Timing
from camp_ecosystem.services.balance_service import BalanceService
from camp_ecosystem.services.base_service import BaseService

# Create router
router = APIRouter(tags=["balances"])


@router.post(
    "/token-balances",
    response_model=BalancesResponse,
    summary="Get token balances",
    description="Retrieves the balance of one token mint for a batch of wallets."
)
async def get_token_balances(
    body: TokenBalancesRequest,
    service: BalanceService = Depends(get_balance_service)
) -> BalancesResponse:
    """Get token balances for a batch of wallets.

    Wallets whose balance could not be read get 0 and are listed in
    ``unresolved``.
    """
    start_time = time.perf_counter()
    result = await service.get_token_balances(body.wallets, body.mint)
    return BalancesResponse(
        balances=dict(result),
        unresolved=sorted(result.unresolved),
        cached=bool(result.from_cache),
        timing=Timing(
            total=BaseService.elapsed_ms(start_time),
            walletsCount=len(body.wallets)
        )
    )


@router.post(
    "/solana-balances",
    response_model=BalancesResponse,
    summary="Get SOL balances",
    description="Retrieves SOL balances for a batch of wallets."
)
async def get_solana_balances(
    body: WalletsRequest,
    service: BalanceService = Depends(get_balance_service)
) -> BalancesResponse:
    """Get SOL balances for a batch of wallets."""
    start_time = time.perf_counter()
    result = await service.get_sol_balances(body.wallets)
    from_cache = len(result.from_cache)
    return BalancesResponse(
        balances=dict(result),
        unresolved=sorted(result.unresolved),
        cached=from_cache > 0,
        timing=Timing(
            total=BaseService.elapsed_ms(start_time),
            walletsCount=len(body.wallets),
            fromCache=from_cache,
            fromAPI=len(result) - from_cache
        )
    )
