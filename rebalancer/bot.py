"""
Бот ребалансировки: цикл опроса monitor -> planner -> executor.

Сборка, подпись и отправка транзакций делаются внешним executor'ом;
DryRunExecutor только логирует то, что было бы отправлено.
"""

import logging
import threading
from abc import ABC, abstractmethod
from collections import deque
from typing import Optional

from .encoding import TickEncoding
from .exceptions import ConfigError, RebalancerError
from .math.ticks import ClmmMathConfig, DEFAULT_CLMM_CONFIG
from .monitor import PositionMonitor
from .planner import RebalancePlan, build_rebalance_plan
from .sui_client import SuiRpcClient

logger = logging.getLogger(__name__)


class RebalanceExecutor(ABC):
    """Интерфейс сборщика транзакций: remove_liquidity -> collect_fee -> open_position + add_liquidity."""

    @abstractmethod
    def execute(self, plan: RebalancePlan) -> None:
        ...


class DryRunExecutor(RebalanceExecutor):
    """Логирует план вместо отправки транзакций. Хранит последние history_size планов."""

    def __init__(self, tick_encoding: TickEncoding = TickEncoding.I32, history_size: int = 100):
        self.tick_encoding = tick_encoding
        self.executed = deque(maxlen=history_size)

    @property
    def last_plan(self) -> Optional[RebalancePlan]:
        return self.executed[-1] if self.executed else None

    def execute(self, plan: RebalancePlan) -> None:
        expected = plan.expected_withdrawal
        logger.info("[DRY RUN] Step 1: remove_liquidity")
        logger.info(
            f"[DRY RUN]   liquidity={expected.liquidity}, "
            f"min_a={plan.amount_a_min}, min_b={plan.amount_b_min}"
        )
        logger.info("[DRY RUN] Step 2: collect_fee")
        logger.info(f"[DRY RUN] Step 3: open_position {plan.new_range}")
        logger.info(
            f"[DRY RUN]   encoded ({self.tick_encoding.value}): "
            f"{plan.encoded_range(self.tick_encoding)}"
        )
        self.executed.append(plan)


class RebalancingBot:
    """
    Периодическая проверка позиции и ребаланс.

    Использование:
        bot = RebalancingBot(load_config_from_env())
        bot.run()              # до stop() / Ctrl+C
        bot.check_and_rebalance()  # один цикл
    """

    def __init__(
        self,
        bot_config,
        client: SuiRpcClient = None,
        executor: RebalanceExecutor = None,
        math_config: ClmmMathConfig = DEFAULT_CLMM_CONFIG,
    ):
        self.config = bot_config
        self.client = client or SuiRpcClient(
            bot_config.rpc_url,
            timeout=bot_config.rpc_timeout,
            pool_type=bot_config.pool_object_type,
            position_type=bot_config.position_object_type,
        )
        if executor is None:
            if not bot_config.dry_run:
                raise ConfigError("No transaction executor configured; set DRY_RUN=true")
            executor = DryRunExecutor()
        self.executor = executor
        self.math_config = math_config
        self.monitor = PositionMonitor(self.client, bot_config, math_config)
        self._stop_event = threading.Event()
        self.is_running = False

    def check_and_rebalance(self) -> Optional[RebalancePlan]:
        """
        Один цикл: оценить позицию и при необходимости передать план executor'у.

        Returns:
            Исполненный план или None
        """
        logger.info("=== Checking position ===")

        decision, pool, position = self.monitor.check_rebalance_needed()
        if not decision.should_rebalance:
            return None

        gas_price = self.client.get_reference_gas_price()
        if gas_price > self.config.max_gas_price:
            logger.warning(
                f"Gas price {gas_price} exceeds max {self.config.max_gas_price}, skipping rebalance"
            )
            return None

        plan = build_rebalance_plan(
            decision,
            pool,
            position,
            self.config.range_width_percent,
            self.config.max_slippage_percent,
            self.math_config,
        )
        logger.info(f"New range: {plan.new_range}")
        logger.info(
            f"Expected withdrawal: A={plan.expected_withdrawal.amount_a}, "
            f"B={plan.expected_withdrawal.amount_b}"
        )

        self.executor.execute(plan)
        logger.info("=== Rebalance completed successfully ===")
        return plan

    def run(self, max_cycles: int = None) -> int:
        """
        Основной цикл опроса.

        Ошибка одного цикла логируется и не останавливает бота.

        Args:
            max_cycles: Остановиться после N циклов (None = бесконечно)

        Returns:
            Количество выполненных циклов
        """
        if self.is_running:
            logger.warning("Bot is already running")
            return 0

        self.is_running = True
        self._stop_event.clear()
        logger.info("Starting rebalancing bot...")
        logger.info(f"Check interval: {self.config.check_interval_seconds}s")
        logger.info(f"Rebalance threshold: {self.config.rebalance_threshold_percent}%")
        logger.info(f"Range width: {self.config.range_width_percent}%")

        cycles = 0
        try:
            while not self._stop_event.is_set():
                try:
                    self.check_and_rebalance()
                except RebalancerError as e:
                    logger.error(f"Error during check and rebalance: {e}")

                cycles += 1
                if max_cycles is not None and cycles >= max_cycles:
                    break
                self._stop_event.wait(self.config.check_interval_seconds)
        finally:
            self.is_running = False
            logger.info("Bot stopped")
        return cycles

    def stop(self) -> None:
        if not self.is_running:
            logger.warning("Bot is not running")
        self._stop_event.set()
