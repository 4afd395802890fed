"""
Rebalance Decision Engine

Два порога:
1. структурный: лежит ли тик пула в [tick_lower, tick_upper)?
2. величина: насколько (в ценах) цена ушла от нарушенной границы?

Ребаланс только при решительном выходе за границу; пересечение тика
рядом с краем транзакций не вызывает.
"""

from .exceptions import InvalidRangeError
from .math.liquidity import PriceRegime, classify_tick
from .math.ticks import ClmmMathConfig, DEFAULT_CLMM_CONFIG, tick_to_price
from .models import PoolSnapshot, PositionSnapshot, RebalanceDecision


def calculate_price_deviation(
    current_tick: int,
    tick_lower: int,
    tick_upper: int,
    config: ClmmMathConfig = DEFAULT_CLMM_CONFIG,
    regime: PriceRegime = None,
) -> float:
    """
    Знаковое отклонение текущей цены от нарушенной границы, в процентах.

    deviation = (price(current) - price(boundary)) / price(boundary) * 100

    Положительное выше tick_upper, отрицательное ниже tick_lower, 0.0 в диапазоне.
    """
    if tick_lower >= tick_upper:
        raise InvalidRangeError(
            f"tick_lower {tick_lower} must be < tick_upper {tick_upper}", tick_lower, tick_upper
        )
    if regime is None:
        regime = classify_tick(current_tick, tick_lower, tick_upper)

    if regime is PriceRegime.IN_RANGE:
        return 0.0

    boundary = tick_lower if regime is PriceRegime.BELOW_RANGE else tick_upper
    price_current = tick_to_price(current_tick, config)
    price_boundary = tick_to_price(boundary, config)

    return float((price_current - price_boundary) / price_boundary * 100)


def evaluate(
    pool: PoolSnapshot,
    position: PositionSnapshot,
    threshold_percent: float,
    config: ClmmMathConfig = DEFAULT_CLMM_CONFIG,
) -> RebalanceDecision:
    """
    Классификация позиции относительно пула и решение о ребалансе.

    Чистая функция: без I/O и состояния. Пул и позиция должны быть
    прочитаны с одного чекпоинта.
    """
    if threshold_percent < 0:
        raise ValueError(f"threshold_percent must be non-negative, got {threshold_percent}")

    current_tick = pool.current_tick
    regime = classify_tick(current_tick, position.tick_lower, position.tick_upper)
    deviation = calculate_price_deviation(
        current_tick, position.tick_lower, position.tick_upper, config, regime
    )

    def decision(should_rebalance: bool, reason: str) -> RebalanceDecision:
        return RebalanceDecision(
            should_rebalance=should_rebalance,
            reason=reason,
            current_tick=current_tick,
            tick_lower=position.tick_lower,
            tick_upper=position.tick_upper,
            price_deviation_percent=deviation,
        )

    if regime is PriceRegime.IN_RANGE:
        return decision(False, "Position is in range")

    if abs(deviation) < threshold_percent:
        return decision(
            False, f"Deviation {deviation:.2f}% below threshold {threshold_percent:.2f}%"
        )

    if regime is PriceRegime.BELOW_RANGE:
        reason = f"Price moved {deviation:.2f}% below lower boundary {position.tick_lower}"
    else:
        reason = f"Price moved {deviation:.2f}% above upper boundary {position.tick_upper}"
    return decision(True, reason)
