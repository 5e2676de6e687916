"""Associated token account derivation.

Balances live in associated token accounts whose addresses are a pure
function of (owner, token program, mint). Computing them locally turns an
owner-wide account scan into a lookup of one known account.
"""

import logging
from typing import Dict, Iterable, Mapping, Optional

from cachetools import LRUCache, cached
from solders.pubkey import Pubkey

from camp_ecosystem.constants import (
    ASSOCIATED_TOKEN_PROGRAM_ID, TOKEN_PROGRAM_BY_MINT, TOKEN_PROGRAM_ID
)
from camp_ecosystem.logging_config import short_address
from camp_ecosystem.utils.errors import InvalidPublicKeyError
from camp_ecosystem.utils.validation import require_public_key

logger = logging.getLogger(__name__)

_ASSOCIATED_TOKEN_PROGRAM = Pubkey.from_string(ASSOCIATED_TOKEN_PROGRAM_ID)


@cached(cache=LRUCache(maxsize=4096))
def derive_associated_token_address(owner: str, mint: str,
                                    token_program: str = TOKEN_PROGRAM_ID) -> str:
    """Derive the associated token account of ``owner`` for ``mint``.

    Args:
        owner: Wallet address (base58)
        mint: Token mint address (base58)
        token_program: Token program that owns the mint

    Returns:
        The associated token account address (base58)

    Raises:
        InvalidPublicKeyError: If any input is not a valid address
    """
    owner_key = Pubkey.from_string(require_public_key(owner))
    mint_key = Pubkey.from_string(require_public_key(mint))
    program_key = Pubkey.from_string(require_public_key(token_program))

    address, _bump = Pubkey.find_program_address(
        [bytes(owner_key), bytes(program_key), bytes(mint_key)],
        _ASSOCIATED_TOKEN_PROGRAM
    )
    return str(address)


class AddressResolver:
    """Derives associated token accounts with table-driven program selection.

    Most mints belong to the legacy SPL Token program. Mints migrated to
    another program (Token-2022 for PEcoin) are listed in
    ``program_overrides``.
    """

    def __init__(self, program_overrides: Optional[Mapping[str, str]] = None,
                 default_program: str = TOKEN_PROGRAM_ID):
        self.default_program = default_program
        self.program_overrides: Dict[str, str] = dict(TOKEN_PROGRAM_BY_MINT)
        self.program_overrides.update(program_overrides or {})

    def token_program_for(self, mint: str) -> str:
        """Token program owning ``mint``."""
        return self.program_overrides.get(mint, self.default_program)

    def derive(self, owner: str, mint: str) -> str:
        """Associated token account of ``owner`` for ``mint``.

        Raises:
            InvalidPublicKeyError: If either address is malformed
        """
        return derive_associated_token_address(owner, mint, self.token_program_for(mint))

    def derive_many(self, owners: Iterable[str], mint: str) -> Dict[str, str]:
        """Derive accounts for many owners, skipping malformed ones."""
        results: Dict[str, str] = {}
        owners = list(owners)
        for owner in owners:
            try:
                results[owner] = self.derive(owner, mint)
            except InvalidPublicKeyError:
                logger.warning(f"Skipping {short_address(str(owner))}: not a valid address")
        logger.debug(f"Derived {len(results)}/{len(owners)} associated token accounts")
        return results
