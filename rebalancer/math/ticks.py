"""
Cetus CLMM Tick Mathematics

Основные формулы:
- price(i) = 1.0001^i
- sqrtPriceX64 = sqrt(price) * 2^64

Все конверсии, результат которых уходит в контракт, считаются в Decimal
с точностью из ClmmMathConfig (float допустим только для оценок).
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_FLOOR, ROUND_HALF_UP, localcontext

from ..exceptions import OutOfBoundsError, DivisionDomainError

# Константы Cetus (Sui)
MIN_TICK = -443636
MAX_TICK = 443636
RESOLUTION_BITS = 64
Q64 = 2 ** 64

TICK_BASE = Decimal("1.0001")

# 2^64 * 1.0001^221818 ~ 7.9e28: 29 целых цифр + запас на floor и ln
DEFAULT_DECIMAL_PRECISION = 80


@dataclass(frozen=True)
class ClmmMathConfig:
    """
    Неизменяемые параметры тик-математики.

    Передаётся в каждую функцию ядра через config=, чтобы тесты
    могли подставить синтетические границы.
    """
    min_tick: int = MIN_TICK
    max_tick: int = MAX_TICK
    resolution_bits: int = RESOLUTION_BITS
    decimal_precision: int = DEFAULT_DECIMAL_PRECISION

    def __post_init__(self):
        if self.min_tick >= self.max_tick:
            raise ValueError(f"min_tick {self.min_tick} must be < max_tick {self.max_tick}")
        if self.resolution_bits <= 0:
            raise ValueError("resolution_bits must be positive")

    @property
    def q(self) -> int:
        """Масштаб fixed-point: 2^resolution_bits."""
        return 1 << self.resolution_bits

    def check_tick(self, tick: int) -> None:
        """OutOfBoundsError если тик вне [min_tick, max_tick]. Никогда не клампит."""
        if tick < self.min_tick or tick > self.max_tick:
            raise OutOfBoundsError(tick, self.min_tick, self.max_tick)


DEFAULT_CLMM_CONFIG = ClmmMathConfig()


def tick_to_sqrt_price_x64(tick: int, config: ClmmMathConfig = DEFAULT_CLMM_CONFIG) -> int:
    """
    Конвертация тика в sqrtPriceX64.

    sqrtPriceX64 = floor(sqrt(1.0001^tick) * 2^64)

    Args:
        tick: Номер тика
        config: Границы тиков и точность

    Returns:
        sqrtPriceX64 (целое число)

    Raises:
        OutOfBoundsError: тик вне [min_tick, max_tick]
    """
    config.check_tick(tick)

    with localcontext() as ctx:
        ctx.prec = config.decimal_precision
        sqrt_price = (TICK_BASE ** tick).sqrt()
        scaled = sqrt_price * config.q
        return int(scaled.to_integral_value(rounding=ROUND_FLOOR))


def sqrt_price_x64_to_tick(sqrt_price_x64: int, config: ClmmMathConfig = DEFAULT_CLMM_CONFIG) -> int:
    """
    Конвертация sqrtPriceX64 в тик (приближённо).

    tick = round(log(price) / log(1.0001)), price = (sqrtPriceX64 / 2^64)^2

    Из-за дискретности тиков обратная конверсия точна только до ±1.

    Raises:
        DivisionDomainError: sqrtPriceX64 <= 0
        OutOfBoundsError: полученный тик вне границ
    """
    sqrt_price_x64 = int(sqrt_price_x64)
    if sqrt_price_x64 <= 0:
        raise DivisionDomainError(f"sqrtPriceX64 must be positive, got {sqrt_price_x64}")

    with localcontext() as ctx:
        ctx.prec = config.decimal_precision
        sqrt_price = Decimal(sqrt_price_x64) / config.q
        price = sqrt_price * sqrt_price
        tick_exact = price.ln() / TICK_BASE.ln()
        tick = int(tick_exact.to_integral_value(rounding=ROUND_HALF_UP))

    config.check_tick(tick)
    return tick


def sqrt_price_x64_to_price(
    sqrt_price_x64: int | str,
    decimals_a: int,
    decimals_b: int,
    config: ClmmMathConfig = DEFAULT_CLMM_CONFIG,
) -> Decimal:
    """
    Конвертация sqrtPriceX64 в человекочитаемую цену.

    price = (sqrtPriceX64 / 2^64)^2 * 10^(decimals_b - decimals_a)

    Args:
        sqrt_price_x64: sqrtPriceX64 (int или строка из RPC)
        decimals_a: Decimals coin A
        decimals_b: Decimals coin B

    Returns:
        Цена как Decimal
    """
    sqrt_price_x64 = int(sqrt_price_x64)
    if sqrt_price_x64 < 0:
        raise ValueError(f"sqrtPriceX64 must be non-negative, got {sqrt_price_x64}")

    with localcontext() as ctx:
        ctx.prec = config.decimal_precision
        sqrt_price = Decimal(sqrt_price_x64) / config.q
        price = sqrt_price * sqrt_price
        return price * (Decimal(10) ** (decimals_b - decimals_a))


def tick_to_price(tick: int, config: ClmmMathConfig = DEFAULT_CLMM_CONFIG) -> Decimal:
    """Сырая цена тика 1.0001^tick (без поправки на decimals)."""
    config.check_tick(tick)
    with localcontext() as ctx:
        ctx.prec = config.decimal_precision
        return TICK_BASE ** tick


def price_to_tick(price, config: ClmmMathConfig = DEFAULT_CLMM_CONFIG) -> int:
    """
    Конвертация сырой цены в тик.

    tick = floor(log(price) / log(1.0001))

    В отличие от UI-хелперов не клампит: цена за пределами диапазона
    тиков даёт OutOfBoundsError.
    """
    d_price = Decimal(str(price))
    if d_price <= 0:
        raise ValueError("Price must be positive")

    with localcontext() as ctx:
        ctx.prec = config.decimal_precision
        tick_exact = d_price.ln() / TICK_BASE.ln()
        tick = int(tick_exact.to_integral_value(rounding=ROUND_FLOOR))

    config.check_tick(tick)
    return tick


def align_tick_to_spacing(tick: int, tick_spacing: int, round_down: bool = True) -> int:
    """
    Выравнивание тика к tick_spacing.

    Args:
        tick: Исходный тик
        tick_spacing: Шаг тиков пула
        round_down: True = округление вниз (к -∞), False = вверх (к +∞)

    Returns:
        Выровненный тик
    """
    if tick_spacing <= 0:
        raise ValueError(f"tick_spacing must be positive, got {tick_spacing}")

    if tick % tick_spacing == 0:
        return tick

    # Floor division корректно работает и для отрицательных тиков
    if round_down:
        return (tick // tick_spacing) * tick_spacing
    return ((tick // tick_spacing) + 1) * tick_spacing


def is_tick_aligned(tick: int, tick_spacing: int) -> bool:
    return tick % tick_spacing == 0


def get_tick_bounds_for_spacing(
    tick_spacing: int,
    config: ClmmMathConfig = DEFAULT_CLMM_CONFIG,
) -> tuple[int, int]:
    """
    Крайние тики, кратные tick_spacing и лежащие в [min_tick, max_tick].

    Returns:
        (min_usable_tick, max_usable_tick)
    """
    min_usable = align_tick_to_spacing(config.min_tick, tick_spacing, round_down=False)
    max_usable = align_tick_to_spacing(config.max_tick, tick_spacing, round_down=True)
    return min_usable, max_usable


def get_min_sqrt_price_x64(config: ClmmMathConfig = DEFAULT_CLMM_CONFIG) -> int:
    return tick_to_sqrt_price_x64(config.min_tick, config)


def get_max_sqrt_price_x64(config: ClmmMathConfig = DEFAULT_CLMM_CONFIG) -> int:
    return tick_to_sqrt_price_x64(config.max_tick, config)
