"""
Shared fixtures for all tests.
"""

import pytest
from unittest.mock import MagicMock

from config import BotConfig
from helpers import POOL_ID, POSITION_ID, make_pool, make_position


@pytest.fixture
def bot_config():
    """BotConfig с дефолтными порогами."""
    return BotConfig(
        rpc_url="https://fullnode.testnet.sui.io:443",
        pool_id=POOL_ID,
        position_id=POSITION_ID,
        check_interval_seconds=0.01,
        max_gas_price=1000,
        dry_run=True,
    )


@pytest.fixture
def mock_client():
    """Мок SuiRpcClient: позиция в диапазоне, газ 750 MIST."""
    client = MagicMock()
    client.get_pool_and_position.return_value = (make_pool(0), make_position(-1000, 1000))
    client.get_reference_gas_price.return_value = 750
    return client
