"""Constants used throughout the Camp Ecosystem application.

This module defines program IDs, well-known mints and RPC defaults in one
place to avoid duplication across clients and services.
"""

# Solana program IDs
TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
TOKEN_2022_PROGRAM_ID = "TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCXEpPxuEb"
ASSOCIATED_TOKEN_PROGRAM_ID = "ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL"

# Camp ecosystem token
PECOIN_MINT = "FDT9EMUytSwaP8GKiKdyv59rRAsT7gAB57wHUPm7wY9r"

# Mints that live under the Token-2022 program. Everything else is SPL Token.
TOKEN_PROGRAM_BY_MINT = {
    PECOIN_MINT: TOKEN_2022_PROGRAM_ID,
}

# Lamports per SOL
LAMPORTS_PER_SOL = 1_000_000_000

# Alchemy endpoint template
ALCHEMY_URL_TEMPLATE = "https://solana-mainnet.g.alchemy.com/v2/{key}"

# Public fallbacks tried after the configured endpoints, in priority order
PUBLIC_DAS_FALLBACK_URLS = [
    "https://solana-api.projectserum.com",
    "https://rpc.ankr.com/solana",
    "https://api.mainnet-beta.solana.com",
]

# Owner used to probe whether an endpoint answers DAS queries
DAS_PROBE_ADDRESS = "11111111111111111111111111111112"

# Cache key prefixes
TOKEN_BALANCE_PREFIX = "token-balance"
SOL_BALANCE_PREFIX = "sol-balance"
NFT_COUNT_PREFIX = "nft-count"
NFT_WALLET_PREFIX = "wallet"
NFT_BATCH_PREFIX = "batch"
TOKEN_METADATA_PREFIX = "token-metadata"
TX_HISTORY_PREFIX = "tx-history"
