"""
Tests for rebalancer.monitor and rebalancer.bot with a mocked chain client.
"""

import logging

import pytest
import requests
from unittest.mock import MagicMock, Mock

from config import CETUS_POOL_TYPE, CETUS_POSITION_TYPE
from helpers import make_pool, make_pool_object, make_position, make_position_object
from rebalancer.bot import DryRunExecutor, RebalanceExecutor, RebalancingBot
from rebalancer.encoding import TickEncoding
from rebalancer.exceptions import ConfigError, SuiRpcError, SuiRpcTimeoutError
from rebalancer.models import TickRange
from rebalancer.monitor import PositionMonitor
from rebalancer.sui_client import SuiRpcClient


def out_of_range(client):
    client.get_pool_and_position.return_value = (make_pool(0), make_position(-2000, -1000))


def rpc_response(body):
    resp = Mock(spec=requests.Response)
    resp.status_code = 200
    resp.json.return_value = body
    return resp


def rpc_client(*bodies):
    """SuiRpcClient поверх мок-сессии, отдающей bodies по очереди."""
    session = MagicMock()
    session.post.side_effect = [rpc_response(body) for body in bodies]
    return SuiRpcClient("https://rpc", session=session, pool_type=CETUS_POOL_TYPE, position_type=CETUS_POSITION_TYPE)


class TestPositionMonitor:

    def test_fetches_configured_objects(self, mock_client, bot_config):
        PositionMonitor(mock_client, bot_config).check_rebalance_needed()
        mock_client.get_pool_and_position.assert_called_once_with(
            bot_config.pool_id, bot_config.position_id
        )

    def test_returns_snapshots_with_decision(self, mock_client, bot_config):
        decision, pool, position = PositionMonitor(mock_client, bot_config).check_rebalance_needed()
        assert decision.should_rebalance is False
        assert pool.current_tick == 0
        assert position.tick_range == TickRange(-1000, 1000)

    def test_warns_when_rebalance_needed(self, mock_client, bot_config, caplog):
        out_of_range(mock_client)
        with caplog.at_level(logging.WARNING, logger="rebalancer.monitor"):
            decision, _, _ = PositionMonitor(mock_client, bot_config).check_rebalance_needed()
        assert decision.should_rebalance is True
        assert "Rebalance needed" in caplog.text


class TestDryRunExecutor:

    def test_records_plan(self, mock_client, bot_config):
        out_of_range(mock_client)
        executor = DryRunExecutor(TickEncoding.SIGN_MAGNITUDE)
        bot = RebalancingBot(bot_config, client=mock_client, executor=executor)

        plan = bot.check_and_rebalance()

        assert list(executor.executed) == [plan]
        assert executor.last_plan is plan

    def test_history_is_bounded(self, mock_client, bot_config):
        out_of_range(mock_client)
        executor = DryRunExecutor(history_size=2)
        bot = RebalancingBot(bot_config, client=mock_client, executor=executor)

        plans = [bot.check_and_rebalance() for _ in range(5)]

        assert list(executor.executed) == plans[-2:]
        assert executor.last_plan is plans[-1]

    def test_empty_history(self):
        assert DryRunExecutor().last_plan is None

    def test_is_executor(self):
        assert isinstance(DryRunExecutor(), RebalanceExecutor)


class TestRebalancingBot:

    def test_in_range_does_nothing(self, mock_client, bot_config):
        executor = MagicMock(spec=RebalanceExecutor)
        bot = RebalancingBot(bot_config, client=mock_client, executor=executor)

        assert bot.check_and_rebalance() is None
        executor.execute.assert_not_called()
        mock_client.get_reference_gas_price.assert_not_called()

    def test_out_of_range_executes_plan(self, mock_client, bot_config):
        out_of_range(mock_client)
        executor = MagicMock(spec=RebalanceExecutor)
        bot = RebalancingBot(bot_config, client=mock_client, executor=executor)

        plan = bot.check_and_rebalance()

        assert plan.new_range == TickRange(-300, 300)
        executor.execute.assert_called_once_with(plan)

    def test_gas_too_high_skips(self, mock_client, bot_config):
        out_of_range(mock_client)
        mock_client.get_reference_gas_price.return_value = 5000
        executor = MagicMock(spec=RebalanceExecutor)
        bot = RebalancingBot(bot_config, client=mock_client, executor=executor)

        assert bot.check_and_rebalance() is None
        executor.execute.assert_not_called()

    def test_live_mode_without_executor_rejected(self, mock_client, bot_config):
        bot_config.dry_run = False
        with pytest.raises(ConfigError, match="executor"):
            RebalancingBot(bot_config, client=mock_client)

    def test_dry_run_default_executor(self, mock_client, bot_config):
        bot = RebalancingBot(bot_config, client=mock_client)
        assert isinstance(bot.executor, DryRunExecutor)

    def test_run_stops_after_max_cycles(self, mock_client, bot_config):
        bot = RebalancingBot(bot_config, client=mock_client)
        assert bot.run(max_cycles=3) == 3
        assert mock_client.get_pool_and_position.call_count == 3
        assert bot.is_running is False

    def test_run_survives_rpc_errors(self, mock_client, bot_config, caplog):
        mock_client.get_pool_and_position.side_effect = [
            SuiRpcTimeoutError("Timeout calling sui_multiGetObjects (5s)"),
            (make_pool(0), make_position(-1000, 1000)),
        ]
        bot = RebalancingBot(bot_config, client=mock_client)

        with caplog.at_level(logging.ERROR, logger="rebalancer.bot"):
            assert bot.run(max_cycles=2) == 2
        assert "Timeout" in caplog.text

    def test_stop_before_loop(self, mock_client, bot_config):
        bot = RebalancingBot(bot_config, client=mock_client)
        bot.stop()
        # run() сбрасывает событие и выполняет хотя бы один цикл
        assert bot.run(max_cycles=1) == 1

    def test_run_survives_gas_price_error(self, mock_client, bot_config, caplog):
        out_of_range(mock_client)
        mock_client.get_reference_gas_price.side_effect = SuiRpcError("Invalid reference gas price: 'n/a'")
        bot = RebalancingBot(bot_config, client=mock_client)

        with caplog.at_level(logging.ERROR, logger="rebalancer.bot"):
            assert bot.run(max_cycles=2) == 2
        assert "Invalid reference gas price" in caplog.text
        assert bot.executor.last_plan is None

    def test_run_survives_array_rpc_body(self, bot_config, caplog):
        client = rpc_client([], [])
        bot = RebalancingBot(bot_config, client=client)

        with caplog.at_level(logging.ERROR, logger="rebalancer.bot"):
            assert bot.run(max_cycles=2) == 2
        assert "Unexpected list response" in caplog.text

    def test_run_survives_non_numeric_gas_price(self, bot_config, caplog):
        objects = [make_pool_object(current_tick=0), make_position_object(tick_lower=-2000, tick_upper=-1000)]
        result = {"jsonrpc": "2.0", "id": 1, "result": objects}
        gas = {"jsonrpc": "2.0", "id": 2, "result": "n/a"}
        client = rpc_client(result, gas, result, gas)
        bot = RebalancingBot(bot_config, client=client)

        with caplog.at_level(logging.ERROR, logger="rebalancer.bot"):
            assert bot.run(max_cycles=2) == 2
        assert caplog.text.count("Invalid reference gas price") == 2

    def test_run_survives_foreign_object_type(self, bot_config, caplog):
        pool = make_pool_object()
        pool["data"]["content"]["type"] = "0xdead::pool::Pool<0x2::sui::SUI, 0x2::sui::SUI>"
        result = {"jsonrpc": "2.0", "id": 1, "result": [pool, make_position_object()]}
        client = rpc_client(result, result)
        bot = RebalancingBot(bot_config, client=client)

        with caplog.at_level(logging.ERROR, logger="rebalancer.bot"):
            assert bot.run(max_cycles=2) == 2
        assert "expected" in caplog.text

    def test_client_from_config_checks_types(self, bot_config):
        bot = RebalancingBot(bot_config)
        assert bot.client.pool_type == CETUS_POOL_TYPE
        assert bot.client.position_type == CETUS_POSITION_TYPE
