"""Request validation models for the API.

This module defines Pydantic models for validating API request data.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

# Regex for Solana public keys
SOLANA_PUBLIC_KEY_REGEX = r"^[1-9A-HJ-NP-Za-km-z]{32,44}$"


class WalletsRequest(BaseModel):
    """Model for requests that carry a list of wallets.

    Wallets are not pattern-checked here: malformed entries still get an
    entry in the response.
    """

    wallets: List[str] = Field(
        ...,
        description="Wallet addresses to look up"
    )


class TokenBalancesRequest(WalletsRequest):
    """Model for token balance requests."""

    mint: str = Field(
        ...,
        pattern=SOLANA_PUBLIC_KEY_REGEX,
        description="Token mint address"
    )


class CacheActionRequest(BaseModel):
    """Model for cache maintenance requests."""

    action: str = Field(
        ...,
        description="Maintenance action: clear or cleanup"
    )
    type: Optional[str] = Field(
        None,
        description="Key pattern to clear; all entries when omitted"
    )


class NftCountsRequest(BaseModel):
    """Model for batch NFT count requests. A missing list counts as empty."""

    wallets: List[str] = Field(
        default_factory=list,
        description="Wallet addresses to count NFTs for"
    )


class HistoryRequest(BaseModel):
    """Model for PEcoin history requests. ``wallet`` is accepted as a legacy name."""

    walletAddress: Optional[str] = Field(None, description="Wallet address")
    wallet: Optional[str] = Field(None, description="Wallet address (legacy name)")
    limit: int = Field(10, ge=1, le=100, description="Maximum number of transactions")
    beforeSignature: Optional[str] = Field(None, description="Signature to page backwards from")
