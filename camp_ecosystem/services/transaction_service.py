"""Transaction history service for Camp Ecosystem.

This module provides token transaction history for a wallet, read from the
signatures of its token accounts.
"""

import asyncio
from typing import Any, Dict, List, Optional

from camp_ecosystem.clients.alchemy_client import AlchemyClient
from camp_ecosystem.constants import TX_HISTORY_PREFIX
from camp_ecosystem.logging_config import short_address
from camp_ecosystem.services.base_service import BaseService, handle_errors
from camp_ecosystem.services.cache_service import CacheKind, CacheService
from camp_ecosystem.utils.batching import dedupe
from camp_ecosystem.utils.retry import with_retries
from camp_ecosystem.utils.validation import require_public_key


def summarize_transaction(transaction: Dict[str, Any]) -> Dict[str, Any]:
    """Reduce a parsed transaction to the fields the dashboard lists."""
    meta = transaction.get("meta") or {}
    signatures = (transaction.get("transaction") or {}).get("signatures") or [""]
    return {
        "signature": signatures[0],
        "slot": transaction.get("slot", 0),
        "block_time": transaction.get("blockTime"),
        "success": meta.get("err") is None,
    }


class TransactionService(BaseService):
    """Service for wallet token transaction history."""

    def __init__(self, client: AlchemyClient, cache: CacheService,
                 max_attempts: int = 3, retry_base_delay: float = 1.0):
        """Initialize the transaction service.

        Args:
            client: Alchemy RPC client
            cache: Shared server cache
            max_attempts: Attempts per transaction fetch
            retry_base_delay: Backoff unit for transaction fetches in seconds
        """
        super().__init__()
        self.client = client
        self.cache = cache
        self.max_attempts = max_attempts
        self.retry_base_delay = retry_base_delay

    async def _fetch_transaction(self, signature: str) -> Optional[Dict[str, Any]]:
        # A null transaction usually means "not indexed yet"
        return await with_retries(
            lambda: self.client.get_transaction(signature),
            max_attempts=self.max_attempts,
            base_delay=self.retry_base_delay,
            retry_on_empty=True,
            operation_name=f"getTransaction {signature[:8]}"
        )

    async def _fetch_transactions(self, signatures: List[str]) -> List[Dict[str, Any]]:
        outcomes = await asyncio.gather(
            *[self._fetch_transaction(signature) for signature in signatures],
            return_exceptions=True
        )
        transactions = []
        for signature, outcome in zip(signatures, outcomes):
            if isinstance(outcome, Exception):
                self.logger.error(f"Failed to fetch transaction {signature}: {str(outcome)}")
            elif outcome:
                transactions.append(outcome)
        return transactions

    @staticmethod
    def _history_kind(result: Dict[str, Any]) -> CacheKind:
        if result["transactions"]:
            return CacheKind.TRANSACTION_HISTORY
        return CacheKind.TRANSACTION_HISTORY_EMPTY

    @handle_errors()
    async def get_history(self, wallet: str, mint: str, limit: int = 10,
                          before: Optional[str] = None) -> Dict[str, Any]:
        """
        Get the ``mint`` transaction history of ``wallet``, newest first.

        Empty histories are cached for a shorter time than non-empty ones.
        Concurrent requests for the same page share one upstream read.

        Args:
            wallet: Wallet address
            mint: Token mint address
            limit: Maximum number of transactions to return
            before: Signature to page backwards from

        Returns:
            Dict with ``transactions`` and ``nextBeforeSignature``
        """
        require_public_key(wallet)
        key = CacheService.create_key(
            TX_HISTORY_PREFIX,
            {"owner": wallet, "mint": mint, "limit": limit, "before": before or ""}
        )
        return await self.cache.get_or_fetch(
            key, lambda: self._load_history(wallet, mint, limit, before), self._history_kind
        )

    async def _load_history(self, wallet: str, mint: str, limit: int,
                            before: Optional[str]) -> Dict[str, Any]:
        empty_result: Dict[str, Any] = {"transactions": [], "nextBeforeSignature": None}

        accounts = await self.client.get_token_accounts_by_owner(wallet, mint)
        token_accounts = [account["pubkey"] for account in accounts if account.get("pubkey")]
        if not token_accounts:
            return empty_result

        signatures: List[str] = []
        for token_account in token_accounts:
            records = await self.client.get_signatures_for_address(token_account, before=before, limit=limit)
            signatures.extend(record["signature"] for record in records if record.get("signature"))
        signatures = dedupe(signatures)

        if not signatures:
            return empty_result

        transactions = [summarize_transaction(tx) for tx in await self._fetch_transactions(signatures)]
        transactions.sort(key=lambda tx: tx["block_time"] or 0, reverse=True)
        transactions = transactions[:limit]

        next_before = None
        if transactions and len(transactions) == limit and len(signatures) >= limit:
            next_before = transactions[-1]["signature"]

        self.logger.info(f"Transaction history loaded: {short_address(wallet)} ({len(transactions)} txs)")
        return {"transactions": transactions, "nextBeforeSignature": next_before}
