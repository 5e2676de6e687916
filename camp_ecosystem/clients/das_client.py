"""Digital Asset Standard (DAS) client.

DAS queries (compressed NFTs and other assets) are only answered by some
RPC providers, so every call takes the endpoint explicitly.
"""

from typing import Any, Dict, Optional

from camp_ecosystem.clients.base_client import BaseRpcClient
from camp_ecosystem.constants import DAS_PROBE_ADDRESS
from camp_ecosystem.utils.errors import CapabilityNotSupportedError, SolanaRpcError


class DasClient(BaseRpcClient):
    """Client for DAS ``getAssetsByOwner`` queries."""

    async def get_assets_by_owner(self, owner: str, url: Optional[str] = None,
                                  page: int = 1, limit: int = 1000) -> Dict[str, Any]:
        """Get one page of assets owned by ``owner``.

        Returns:
            The DAS result with ``total`` and ``items``
        """
        result = await self._make_request(
            "getAssetsByOwner",
            {"ownerAddress": owner, "page": page, "limit": limit},
            url=url,
            request_id="camp-ecosystem-das"
        )
        return result or {}

    async def count_assets(self, owner: str, url: Optional[str] = None) -> int:
        """Number of assets owned by ``owner``."""
        result = await self.get_assets_by_owner(owner, url=url)
        return int(result.get("total") or 0)

    async def probe(self, url: str) -> None:
        """Check that ``url`` answers DAS queries.

        Raises:
            RpcConnectionError: If the endpoint cannot be reached
            CapabilityNotSupportedError: If it answers but not to DAS
        """
        try:
            await self._make_request(
                "getAssetsByOwner",
                {"ownerAddress": DAS_PROBE_ADDRESS, "limit": 1},
                url=url,
                request_id="camp-ecosystem-probe"
            )
        except SolanaRpcError as e:
            raise CapabilityNotSupportedError(url, "getAssetsByOwner") from e
