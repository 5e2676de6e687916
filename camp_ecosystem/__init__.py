"""Camp Ecosystem package.

Server-side caching and batch coordination for the camp token/NFT
dashboard on Solana: balances, NFT counts and transaction history served
from an in-memory TTL cache in front of rate-limited RPC providers.
"""

__version__ = "0.1.0"
__author__ = "Camp Ecosystem Team"
__email__ = "dev@camp-ecosystem.example"
