"""
Rebalance Planning

Решение -> новый диапазон -> минимумы с защитой от проскальзывания.

План потребляет сборщик транзакций. Нулевой минимум для стороны с
ненулевым ожидаемым количеством в плане не встречается.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, localcontext
from typing import Optional

from .decision import evaluate
from .encoding import TickEncoding, encode_range
from .math.liquidity import (
    LiquidityAmounts,
    get_expected_withdrawal_amounts,
    get_liquidity_from_amounts,
)
from .math.ticks import ClmmMathConfig, DEFAULT_CLMM_CONFIG, tick_to_sqrt_price_x64
from .models import PoolSnapshot, PositionSnapshot, RebalanceDecision, TickRange
from .ranges import calculate_tick_range

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RebalancePlan:
    """Всё, что нужно сборщику транзакции для ребаланса."""
    decision: RebalanceDecision
    new_range: TickRange
    expected_withdrawal: LiquidityAmounts
    amount_a_min: int
    amount_b_min: int

    def encoded_range(self, encoding: TickEncoding = TickEncoding.I32) -> tuple:
        """Новый диапазон в on-chain кодировке нужной версии пакета."""
        return encode_range(self.new_range, encoding)


def apply_slippage(amount: int, slippage_percent: float) -> int:
    """
    Минимум на выходе: floor(amount * (1 - slippage / 100)).

    Ненулевой amount никогда не даёт нулевой минимум (пока slippage < 100).
    """
    if amount < 0:
        raise ValueError(f"amount must be non-negative, got {amount}")
    slippage = Decimal(str(slippage_percent))
    if slippage < 0 or slippage > 100:
        raise ValueError(f"slippage_percent must be in [0, 100], got {slippage_percent}")

    if amount == 0 or slippage == 100:
        return 0

    with localcontext() as ctx:
        ctx.prec = 80
        minimum = int(Decimal(amount) * (Decimal(100) - slippage) / Decimal(100))
    return max(minimum, 1)


def build_rebalance_plan(
    decision: RebalanceDecision,
    pool: PoolSnapshot,
    position: PositionSnapshot,
    range_width_percent: float,
    max_slippage_percent: float,
    config: ClmmMathConfig = DEFAULT_CLMM_CONFIG,
) -> RebalancePlan:
    """
    Рассчитать новый диапазон и минимумы remove_liquidity для уже принятого решения.

    Args:
        decision: Результат evaluate() (should_rebalance=True)
        pool: Снапшот пула (тот же чекпоинт, что и decision)
        position: Закрываемая позиция
        range_width_percent: Ширина нового диапазона, %
        max_slippage_percent: Допустимое проскальзывание, %
    """
    new_range = calculate_tick_range(
        pool.current_tick, range_width_percent, pool.tick_spacing, config
    )
    expected = get_expected_withdrawal_amounts(pool, position, config)

    plan = RebalancePlan(
        decision=decision,
        new_range=new_range,
        expected_withdrawal=expected,
        amount_a_min=apply_slippage(expected.amount_a, max_slippage_percent),
        amount_b_min=apply_slippage(expected.amount_b, max_slippage_percent),
    )

    logger.debug(
        f"Plan: range {position.tick_range} -> {new_range}, "
        f"expected A={expected.amount_a} B={expected.amount_b} ({expected.regime.value}), "
        f"min A={plan.amount_a_min} B={plan.amount_b_min}"
    )
    return plan


def plan_rebalance(
    pool: PoolSnapshot,
    position: PositionSnapshot,
    bot_config,
    config: ClmmMathConfig = DEFAULT_CLMM_CONFIG,
) -> Optional[RebalancePlan]:
    """
    evaluate() + build_rebalance_plan(), если ребаланс нужен.

    Args:
        bot_config: BotConfig (threshold, width, slippage)

    Returns:
        RebalancePlan или None, если позиция в допуске
    """
    decision = evaluate(pool, position, bot_config.rebalance_threshold_percent, config)
    if not decision.should_rebalance:
        return None

    return build_rebalance_plan(
        decision,
        pool,
        position,
        bot_config.range_width_percent,
        bot_config.max_slippage_percent,
        config,
    )


def get_deposit_liquidity(
    pool: PoolSnapshot,
    new_range: TickRange,
    amount_a: int,
    amount_b: int,
    config: ClmmMathConfig = DEFAULT_CLMM_CONFIG,
) -> int:
    """Liquidity для нового диапазона, когда балансы после вывода уже известны."""
    return get_liquidity_from_amounts(
        pool.current_sqrt_price_x64,
        tick_to_sqrt_price_x64(new_range.tick_lower, config),
        tick_to_sqrt_price_x64(new_range.tick_upper, config),
        amount_a,
        amount_b,
        config,
    )
