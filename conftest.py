"""
Root-level conftest for pytest configuration
"""
import os

import pytest

from camp_ecosystem.config import clear_config_cache


def pytest_configure(config):
    """Configure pytest"""
    os.environ.setdefault("ENVIRONMENT", "testing")

    # Set log format for pytest
    import logging
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


@pytest.fixture(autouse=True)
def fresh_config():
    """Re-read configuration from the environment in every test."""
    clear_config_cache()
    yield
    clear_config_cache()
