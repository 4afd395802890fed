"""
Cetus CLMM Liquidity Mathematics

Формулы в fixed-point домене sqrtPriceX64 (sqrt_a < sqrt_b):
- amount_a = L * (sqrt_b - sqrt_a) * 2^64 / (sqrt_a * sqrt_b)
- amount_b = L * (sqrt_b - sqrt_a) / 2^64
- L = amount_a * sqrt_a * sqrt_b / ((sqrt_b - sqrt_a) * 2^64)
- L = amount_b * 2^64 / (sqrt_b - sqrt_a)

Когда текущая цена в диапазоне, current подставляется вместо одной из
границ для каждой стороны.

Все деления целочисленные с усечением (как в контракте), поэтому
минимумы для slippage-защиты никогда не получаются оптимистичными.
"""

from dataclasses import dataclass
from enum import Enum

from ..exceptions import DivisionDomainError
from .ticks import ClmmMathConfig, DEFAULT_CLMM_CONFIG, tick_to_sqrt_price_x64


class PriceRegime(Enum):
    """Положение цены относительно диапазона позиции."""
    BELOW_RANGE = "below_range"   # Позиция целиком в coin A
    IN_RANGE = "in_range"         # Участвуют оба токена
    ABOVE_RANGE = "above_range"   # Позиция целиком в coin B


def classify_sqrt_price(sqrt_price_current: int, sqrt_price_lower: int, sqrt_price_upper: int) -> PriceRegime:
    """
    Режим по sqrt-ценам.

    current <= lower -> BELOW_RANGE, current >= upper -> ABOVE_RANGE.
    """
    if sqrt_price_current <= sqrt_price_lower:
        return PriceRegime.BELOW_RANGE
    if sqrt_price_current >= sqrt_price_upper:
        return PriceRegime.ABOVE_RANGE
    return PriceRegime.IN_RANGE


def classify_tick(current_tick: int, tick_lower: int, tick_upper: int) -> PriceRegime:
    """
    Режим по тикам: нижняя граница включена, верхняя нет.

    tick_lower <= current < tick_upper -> IN_RANGE.
    """
    if current_tick < tick_lower:
        return PriceRegime.BELOW_RANGE
    if current_tick >= tick_upper:
        return PriceRegime.ABOVE_RANGE
    return PriceRegime.IN_RANGE


@dataclass(frozen=True)
class LiquidityAmounts:
    """Результат расчёта количества токенов."""
    amount_a: int  # В минимальных единицах coin A
    amount_b: int  # В минимальных единицах coin B
    liquidity: int
    regime: PriceRegime = PriceRegime.IN_RANGE


def _ordered(sqrt_price_a: int, sqrt_price_b: int) -> tuple[int, int]:
    """Нормализация: меньшая цена первой. Нулевая ширина или цена -> DivisionDomainError."""
    if sqrt_price_a > sqrt_price_b:
        sqrt_price_a, sqrt_price_b = sqrt_price_b, sqrt_price_a

    if sqrt_price_a <= 0:
        raise DivisionDomainError(f"sqrt price must be positive, got {sqrt_price_a}")
    if sqrt_price_a == sqrt_price_b:
        raise DivisionDomainError(f"Zero-width range: both sqrt prices are {sqrt_price_a}")
    return sqrt_price_a, sqrt_price_b


def _div(numerator: int, denominator: int, round_up: bool) -> int:
    if round_up:
        return -(-numerator // denominator)
    return numerator // denominator


def _check_non_negative(name: str, value: int) -> None:
    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")


def get_amount_a_from_liquidity(
    sqrt_price_a: int,
    sqrt_price_b: int,
    liquidity: int,
    round_up: bool = False,
    config: ClmmMathConfig = DEFAULT_CLMM_CONFIG,
) -> int:
    """
    Количество coin A для liquidity между двумя ценами.

    amount_a = L * (sqrt_b - sqrt_a) * 2^64 / (sqrt_a * sqrt_b)

    round_up=True даёт потолок (максимум для депозита), по умолчанию усечение.
    """
    _check_non_negative("liquidity", liquidity)
    sqrt_price_a, sqrt_price_b = _ordered(sqrt_price_a, sqrt_price_b)

    numerator = liquidity * (sqrt_price_b - sqrt_price_a) * config.q
    denominator = sqrt_price_a * sqrt_price_b
    return _div(numerator, denominator, round_up)


def get_amount_b_from_liquidity(
    sqrt_price_a: int,
    sqrt_price_b: int,
    liquidity: int,
    round_up: bool = False,
    config: ClmmMathConfig = DEFAULT_CLMM_CONFIG,
) -> int:
    """
    Количество coin B для liquidity между двумя ценами.

    amount_b = L * (sqrt_b - sqrt_a) / 2^64
    """
    _check_non_negative("liquidity", liquidity)
    sqrt_price_a, sqrt_price_b = _ordered(sqrt_price_a, sqrt_price_b)

    return _div(liquidity * (sqrt_price_b - sqrt_price_a), config.q, round_up)


def get_liquidity_from_amount_a(
    sqrt_price_a: int,
    sqrt_price_b: int,
    amount_a: int,
    config: ClmmMathConfig = DEFAULT_CLMM_CONFIG,
) -> int:
    """
    Расчёт liquidity по количеству coin A.

    L = amount_a * sqrt_a * sqrt_b / ((sqrt_b - sqrt_a) * 2^64)

    Используется когда цена НИЖЕ диапазона (позиция полностью в coin A).
    """
    _check_non_negative("amount_a", amount_a)
    sqrt_price_a, sqrt_price_b = _ordered(sqrt_price_a, sqrt_price_b)

    numerator = amount_a * sqrt_price_a * sqrt_price_b
    denominator = (sqrt_price_b - sqrt_price_a) * config.q
    return numerator // denominator


def get_liquidity_from_amount_b(
    sqrt_price_a: int,
    sqrt_price_b: int,
    amount_b: int,
    config: ClmmMathConfig = DEFAULT_CLMM_CONFIG,
) -> int:
    """
    Расчёт liquidity по количеству coin B.

    L = amount_b * 2^64 / (sqrt_b - sqrt_a)

    Используется когда цена ВЫШЕ диапазона (позиция полностью в coin B).
    """
    _check_non_negative("amount_b", amount_b)
    sqrt_price_a, sqrt_price_b = _ordered(sqrt_price_a, sqrt_price_b)

    return (amount_b * config.q) // (sqrt_price_b - sqrt_price_a)


def get_liquidity_from_amounts(
    sqrt_price_current: int,
    sqrt_price_lower: int,
    sqrt_price_upper: int,
    amount_a: int,
    amount_b: int,
    config: ClmmMathConfig = DEFAULT_CLMM_CONFIG,
) -> int:
    """
    Расчёт liquidity для заданного диапазона и балансов.

    Три случая:
    1. current <= lower: учитывается только amount_a
    2. current >= upper: учитывается только amount_b
    3. lower < current < upper: минимум из двух liquidity (лимитирующий токен)

    Returns:
        Liquidity (L)
    """
    sqrt_price_lower, sqrt_price_upper = _ordered(sqrt_price_lower, sqrt_price_upper)
    regime = classify_sqrt_price(sqrt_price_current, sqrt_price_lower, sqrt_price_upper)

    if regime is PriceRegime.BELOW_RANGE:
        return get_liquidity_from_amount_a(sqrt_price_lower, sqrt_price_upper, amount_a, config)

    if regime is PriceRegime.ABOVE_RANGE:
        return get_liquidity_from_amount_b(sqrt_price_lower, sqrt_price_upper, amount_b, config)

    liquidity_a = get_liquidity_from_amount_a(sqrt_price_current, sqrt_price_upper, amount_a, config)
    liquidity_b = get_liquidity_from_amount_b(sqrt_price_lower, sqrt_price_current, amount_b, config)
    return min(liquidity_a, liquidity_b)


def get_amounts_from_liquidity(
    sqrt_price_current: int,
    sqrt_price_lower: int,
    sqrt_price_upper: int,
    liquidity: int,
    round_up: bool = False,
    config: ClmmMathConfig = DEFAULT_CLMM_CONFIG,
) -> LiquidityAmounts:
    """
    Расчёт количества обоих токенов для заданной liquidity.

    Неучаствующая сторона всегда 0.

    Args:
        sqrt_price_current: Текущий sqrtPriceX64 пула
        sqrt_price_lower: sqrtPriceX64 нижней границы
        sqrt_price_upper: sqrtPriceX64 верхней границы
        liquidity: Liquidity (L)
        round_up: Потолок вместо усечения (для максимумов депозита)

    Returns:
        LiquidityAmounts с amount_a, amount_b и режимом
    """
    sqrt_price_lower, sqrt_price_upper = _ordered(sqrt_price_lower, sqrt_price_upper)
    regime = classify_sqrt_price(sqrt_price_current, sqrt_price_lower, sqrt_price_upper)

    amount_a = 0
    amount_b = 0

    if regime is PriceRegime.BELOW_RANGE:
        amount_a = get_amount_a_from_liquidity(
            sqrt_price_lower, sqrt_price_upper, liquidity, round_up, config
        )
    elif regime is PriceRegime.ABOVE_RANGE:
        amount_b = get_amount_b_from_liquidity(
            sqrt_price_lower, sqrt_price_upper, liquidity, round_up, config
        )
    else:
        amount_a = get_amount_a_from_liquidity(
            sqrt_price_current, sqrt_price_upper, liquidity, round_up, config
        )
        amount_b = get_amount_b_from_liquidity(
            sqrt_price_lower, sqrt_price_current, liquidity, round_up, config
        )

    return LiquidityAmounts(amount_a=amount_a, amount_b=amount_b, liquidity=liquidity, regime=regime)


def get_expected_withdrawal_amounts(
    pool,
    position,
    config: ClmmMathConfig = DEFAULT_CLMM_CONFIG,
) -> LiquidityAmounts:
    """
    Сколько вернёт закрываемая позиция при текущей цене пула.

    Используются собственные границы позиции и current_sqrt_price_x64 пула.
    Это основа для минимумов remove_liquidity, НЕ для нового диапазона
    (для него см. get_liquidity_from_amounts после получения балансов).

    Args:
        pool: PoolSnapshot
        position: PositionSnapshot

    Returns:
        LiquidityAmounts (с усечением вниз)
    """
    sqrt_price_lower = tick_to_sqrt_price_x64(position.tick_lower, config)
    sqrt_price_upper = tick_to_sqrt_price_x64(position.tick_upper, config)

    return get_amounts_from_liquidity(
        pool.current_sqrt_price_x64,
        sqrt_price_lower,
        sqrt_price_upper,
        position.liquidity,
        round_up=False,
        config=config,
    )
