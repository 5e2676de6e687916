"""Validation utilities for Camp Ecosystem.

This module provides utilities for validating Solana-specific data.
"""

import re
from typing import Any, Iterable, List, Tuple

import base58

from camp_ecosystem.utils.errors import InvalidPublicKeyError

# Solana public key validation pattern (base58 format)
PUBKEY_PATTERN = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")


def validate_public_key(pubkey: Any) -> bool:
    """Validate a Solana public key.

    Args:
        pubkey: The public key to validate

    Returns:
        True if the public key is valid, False otherwise
    """
    if not pubkey or not isinstance(pubkey, str):
        return False
    if not PUBKEY_PATTERN.match(pubkey):
        return False
    try:
        return len(base58.b58decode(pubkey)) == 32
    except ValueError:
        return False


def require_public_key(pubkey: Any) -> str:
    """Return the key unchanged, or raise if it is malformed.

    Raises:
        InvalidPublicKeyError: If the key is not a valid Solana address
    """
    if not validate_public_key(pubkey):
        raise InvalidPublicKeyError(pubkey)
    return pubkey


def partition_addresses(addresses: Iterable[Any]) -> Tuple[List[str], List[Any]]:
    """Split addresses into (valid, invalid), preserving order."""
    valid: List[str] = []
    invalid: List[Any] = []
    for address in addresses:
        if validate_public_key(address):
            valid.append(address)
        else:
            invalid.append(address)
    return valid, invalid


def validate_transaction_signature(signature: str) -> bool:
    """Validate a Solana transaction signature.

    Args:
        signature: The transaction signature to validate

    Returns:
        True if the signature is valid, False otherwise
    """
    if not signature or not isinstance(signature, str):
        return False

    # Transaction signatures are also base58 encoded but longer than public keys
    return bool(re.match(r"^[1-9A-HJ-NP-Za-km-z]{43,128}$", signature))
