"""
Position Monitor

Чтение согласованной пары пул/позиция и оценка необходимости ребаланса.
"""

import logging
from typing import Tuple

from .decision import evaluate
from .math.ticks import ClmmMathConfig, DEFAULT_CLMM_CONFIG
from .models import PoolSnapshot, PositionSnapshot, RebalanceDecision

logger = logging.getLogger(__name__)


class PositionMonitor:
    """
    Проверка необходимости ребаланса.

    Использование:
        monitor = PositionMonitor(client, bot_config)
        decision, pool, position = monitor.check_rebalance_needed()
    """

    def __init__(self, client, bot_config, math_config: ClmmMathConfig = DEFAULT_CLMM_CONFIG):
        self.client = client
        self.config = bot_config
        self.math_config = math_config

    def get_current_state(self) -> Tuple[PoolSnapshot, PositionSnapshot]:
        return self.client.get_pool_and_position(self.config.pool_id, self.config.position_id)

    def check_rebalance_needed(self) -> Tuple[RebalanceDecision, PoolSnapshot, PositionSnapshot]:
        """
        Получить снапшоты и оценить позицию.

        Returns:
            (decision, pool, position): снапшоты с того же чекпоинта, что и решение.
        """
        pool, position = self.get_current_state()

        logger.info(f"Current tick: {pool.current_tick}")
        logger.info(f"Position range: [{position.tick_lower}, {position.tick_upper}]")

        decision = evaluate(
            pool, position, self.config.rebalance_threshold_percent, self.math_config
        )

        if decision.should_rebalance:
            logger.warning(f"Rebalance needed! {decision.reason}")
        else:
            logger.info(
                f"No rebalance: {decision.reason} "
                f"(deviation {decision.price_deviation_percent:.2f}%)"
            )
        return decision, pool, position
