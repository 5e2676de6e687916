"""Response models for the API.

This module defines Pydantic models for standardized API responses.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class Timing(BaseModel):
    """Model for request timing information."""

    total: int = Field(..., description="Total handling time in milliseconds")
    walletsCount: int = Field(0, description="Number of wallets in the request")
    fromCache: Optional[int] = Field(None, description="Wallets answered from cache")
    fromAPI: Optional[int] = Field(None, description="Wallets fetched from upstream")


class BalancesResponse(BaseModel):
    """Model for token and SOL balance responses."""

    success: bool = Field(True, description="Whether the request succeeded")
    balances: Dict[str, float] = Field(..., description="Balance per wallet")
    unresolved: List[str] = Field(
        default_factory=list,
        description="Wallets whose balance is a fallback, not an upstream answer"
    )
    cached: bool = Field(False, description="Whether any balance came from cache")
    timing: Timing = Field(..., description="Timing information")


class NftCountsMeta(BaseModel):
    """Model for NFT count metadata."""

    rpcUsed: str = Field("none", description="DAS endpoint used for the batch")
    batchSize: int = Field(..., description="Wallets per chunk")


class NftCountsResponse(BaseModel):
    """Model for batch NFT count responses."""

    success: bool = Field(True, description="Whether the request succeeded")
    counts: Dict[str, int] = Field(..., description="NFT count per wallet")
    unresolved: List[str] = Field(default_factory=list, description="Wallets counted as fallback 0")
    totalNFTs: int = Field(0, description="Sum of all counts")
    timing: Timing = Field(..., description="Timing information")
    meta: Optional[NftCountsMeta] = Field(None, description="Batch metadata")


class CacheStatsResponse(BaseModel):
    """Model for cache statistics responses."""

    success: bool = Field(True, description="Whether the request succeeded")
    stats: Dict[str, Any] = Field(..., description="Cache statistics")
    timestamp: str = Field(..., description="ISO timestamp of the snapshot")


class CacheActionResponse(BaseModel):
    """Model for cache maintenance responses."""

    success: bool = Field(True, description="Whether the request succeeded")
    message: str = Field(..., description="What was done")
    removed: int = Field(0, description="Entries removed")
    stats: Optional[Dict[str, Any]] = Field(None, description="Cache statistics after the action")


class RefreshResponse(BaseModel):
    """Model for balance refresh responses."""

    success: bool = Field(True, description="Whether the refresh succeeded")
    invalidated: int = Field(..., description="Cache entries invalidated")
    refreshed: int = Field(..., description="Wallets re-resolved")
    unresolved: List[str] = Field(default_factory=list, description="Wallets that could not be refreshed")
    timing: Timing = Field(..., description="Timing information")


class HealthResponse(BaseModel):
    """Model for health check responses."""

    status: str = Field(..., description="Service status")
    version: str = Field(..., description="Service version")
    timestamp: str = Field(..., description="ISO timestamp")
    environment: str = Field(..., description="Deployment environment")
    cache: Dict[str, Any] = Field(default_factory=dict, description="Cache summary")
