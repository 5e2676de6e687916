"""Alchemy Solana RPC client operations.

This module provides the token, balance and transaction calls the
dashboard makes against Alchemy's Solana endpoint.
"""

from typing import Any, Dict, List, Optional

from camp_ecosystem.clients.base_client import BaseRpcClient
from camp_ecosystem.constants import LAMPORTS_PER_SOL
from camp_ecosystem.utils.errors import SolanaRpcError
from camp_ecosystem.utils.validation import require_public_key

# Node answers for an associated token account that was never created
_MISSING_ACCOUNT_MARKERS = ("could not find account", "invalid param: could not find")


class AlchemyClient(BaseRpcClient):
    """Client for Alchemy-backed Solana RPC calls."""

    @property
    def default_url(self) -> str:
        return self.config.alchemy_url or self.config.rpc_url

    async def get_token_accounts_by_owner(self, owner: str, mint: str) -> List[Dict[str, Any]]:
        """Get the parsed token accounts ``owner`` holds for ``mint``.

        Raises:
            InvalidPublicKeyError: If the owner or mint is malformed
        """
        require_public_key(owner)
        require_public_key(mint)
        result = await self._make_request(
            "getTokenAccountsByOwner",
            [owner, {"mint": mint}, {"encoding": "jsonParsed"}]
        )
        return (result or {}).get("value", [])

    async def get_token_account_balance(self, account: str) -> float:
        """Get the UI balance of a single token account.

        An account that does not exist holds nothing, so it reads as 0.

        Args:
            account: The token account address

        Returns:
            Balance in token units
        """
        require_public_key(account)
        try:
            result = await self._make_request(
                "getTokenAccountBalance",
                [account, {"commitment": self.config.commitment}]
            )
        except SolanaRpcError as e:
            if any(marker in e.message.lower() for marker in _MISSING_ACCOUNT_MARKERS):
                return 0.0
            raise
        value = (result or {}).get("value") or {}
        return float(value.get("uiAmount") or 0)

    async def get_sol_balance(self, address: str) -> float:
        """Get a wallet's SOL balance.

        Returns:
            Balance in SOL
        """
        require_public_key(address)
        result = await self._make_request(
            "getBalance",
            [address, {"commitment": self.config.commitment}]
        )
        lamports = result.get("value", 0) if isinstance(result, dict) else (result or 0)
        return lamports / LAMPORTS_PER_SOL

    async def get_token_metadata(self, mint: str) -> Optional[Dict[str, Any]]:
        """Get image and URI metadata for a token mint.

        Returns:
            Dict with ``image`` and ``uri`` keys, or None if unknown
        """
        require_public_key(mint)
        metadata = await self._make_request("getTokenMetadata", {"mint": mint})
        if not metadata:
            return None
        return {
            "image": (metadata.get("offChainMetadata") or {}).get("image"),
            "uri": metadata.get("uri"),
        }

    async def get_signatures_for_address(
        self,
        address: str,
        before: Optional[str] = None,
        limit: int = 100
    ) -> List[Dict[str, Any]]:
        """Get transaction signatures for an address, newest first.

        Args:
            address: The account address
            before: Signature to start searching backwards from
            limit: Maximum number of signatures to return

        Returns:
            List of signature records
        """
        require_public_key(address)
        options: Dict[str, Any] = {"limit": limit}
        if before:
            options["before"] = before
        return await self._make_request("getSignaturesForAddress", [address, options]) or []

    async def get_transaction(self, signature: str) -> Optional[Dict[str, Any]]:
        """Get a parsed transaction.

        Returns:
            The transaction, or None if the node has not indexed it yet
        """
        return await self._make_request(
            "getTransaction",
            [signature, {
                "encoding": "jsonParsed",
                "maxSupportedTransactionVersion": 0,
                "commitment": self.config.commitment
            }]
        )
