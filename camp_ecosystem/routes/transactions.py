"""Transaction history API routes."""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from camp_ecosystem.config import EcosystemConfig
from camp_ecosystem.dependencies import get_ecosystem_settings, get_transaction_service
from camp_ecosystem.models.requests import HistoryRequest
from camp_ecosystem.services.transaction_service import TransactionService
from camp_ecosystem.utils.errors import ValidationError
from camp_ecosystem.utils.validation import validate_transaction_signature

# Create router
router = APIRouter(tags=["transactions"])


@router.post(
    "/pecoin-history",
    summary="Get PEcoin transaction history",
    description="Retrieves PEcoin transactions of a wallet, newest first."
)
async def get_pecoin_history(
    body: HistoryRequest,
    service: TransactionService = Depends(get_transaction_service),
    settings: EcosystemConfig = Depends(get_ecosystem_settings)
) -> Dict[str, Any]:
    """Get the PEcoin transaction history of a wallet."""
    wallet = body.walletAddress or body.wallet
    if not wallet:
        raise ValidationError("Wallet address is required")
    if body.beforeSignature and not validate_transaction_signature(body.beforeSignature):
        raise ValidationError(
            "Invalid before signature", details={"beforeSignature": body.beforeSignature}
        )
    return await service.get_history(wallet, settings.pecoin_mint, body.limit, body.beforeSignature)
