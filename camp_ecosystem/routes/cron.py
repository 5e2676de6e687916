"""Scheduled job routes.

The balance refresh is triggered by an external scheduler with the cron
secret as a bearer token.
"""

import time
from typing import Optional

from fastapi import APIRouter, Depends, Header

from camp_ecosystem.config import EcosystemConfig
from camp_ecosystem.dependencies import get_balance_service, get_ecosystem_settings
from camp_ecosystem.models.responses import RefreshResponse, Timing
from camp_ecosystem.services.balance_service import BalanceService
from camp_ecosystem.services.base_service import BaseService
from camp_ecosystem.utils.errors import UnauthorizedError

# Create router
router = APIRouter(tags=["cron"])


def require_cron_secret(
    authorization: Optional[str] = Header(None),
    settings: EcosystemConfig = Depends(get_ecosystem_settings)
) -> None:
    """Reject production calls that do not carry ``Bearer <CRON_SECRET>``."""
    if not settings.is_production:
        return
    if not settings.cron_secret or authorization != f"Bearer {settings.cron_secret}":
        raise UnauthorizedError()


@router.get(
    "/cron/refresh-balances",
    response_model=RefreshResponse,
    dependencies=[Depends(require_cron_secret)],
    summary="Refresh cached token balances"
)
async def refresh_balances(
    service: BalanceService = Depends(get_balance_service),
    settings: EcosystemConfig = Depends(get_ecosystem_settings)
) -> RefreshResponse:
    """Invalidate every cached token balance and re-read the tracked wallets."""
    start_time = time.perf_counter()
    summary = await service.refresh_balances(settings.tracked_wallets, settings.pecoin_mint)
    return RefreshResponse(
        invalidated=summary["invalidated"],
        refreshed=summary["refreshed"],
        unresolved=summary["unresolved"],
        timing=Timing(
            total=BaseService.elapsed_ms(start_time),
            walletsCount=len(settings.tracked_wallets)
        )
    )
