"""Solana client modules for Camp Ecosystem.

This package provides the JSON-RPC clients used by the services.
"""

from camp_ecosystem.clients.base_client import BaseRpcClient
from camp_ecosystem.clients.alchemy_client import AlchemyClient
from camp_ecosystem.clients.das_client import DasClient

__all__ = [
    'BaseRpcClient',
    'AlchemyClient',
    'DasClient',
]
