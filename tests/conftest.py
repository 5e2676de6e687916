"""Test configuration for pytest.

This module imports fixtures that should be available to all tests.
"""

# Import fixtures
from tests.fixtures.common import (  # noqa
    clock,
    cache,
    rpc_config,
    ecosystem_config,
    mock_alchemy_client,
    mock_das_client,
    resolver,
    balance_service,
    nft_service,
    transaction_service,
)
