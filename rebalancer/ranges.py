"""
Расчёт нового диапазона тиков вокруг текущей цены.

Диапазон всегда "накрывает" живую цену (tick_lower < current < tick_upper),
а не тянется за ней, и обе границы кратны tick_spacing пула.
"""

import math

from .exceptions import InvalidRangeError
from .math.ticks import (
    ClmmMathConfig,
    DEFAULT_CLMM_CONFIG,
    align_tick_to_spacing,
    get_tick_bounds_for_spacing,
    tick_to_sqrt_price_x64,
)
from .models import TickRange

LOG_TICK_BASE = math.log(1.0001)


def width_percent_to_half_width_ticks(width_percent: float) -> int:
    """
    Полуширина диапазона в тиках для заданной ценовой ширины.

    half = round(log(1 + width/200) / log(1.0001)), так что
    price(upper) / price(lower) = 1.0001^(2 * half) ~ 1 + width/100.

    Float здесь допустим: это оценка, результат потом выравнивается.
    """
    if width_percent < 0:
        raise InvalidRangeError(f"width_percent must be non-negative, got {width_percent}")
    return round(math.log(1 + width_percent / 200) / LOG_TICK_BASE)


def calculate_tick_range(
    current_tick: int,
    width_percent: float,
    tick_spacing: int,
    config: ClmmMathConfig = DEFAULT_CLMM_CONFIG,
) -> TickRange:
    """
    Центрированный диапазон для новой позиции.

    1. width_percent -> симметричная полуширина в тиках
    2. центр на current_tick
    3. нижняя граница вниз, верхняя вверх к кратному tick_spacing;
       если граница попала ровно на current_tick, сдвигаем её наружу на шаг
    4. проверка границ [min_tick, max_tick]

    Args:
        current_tick: Текущий тик пула
        width_percent: Ширина диапазона в % цены (5.0 = ±2.5%)
        tick_spacing: Шаг тиков пула

    Returns:
        TickRange

    Raises:
        InvalidRangeError: spacing <= 0, отрицательная ширина или выход за границы
        OutOfBoundsError: current_tick вне [min_tick, max_tick]
    """
    if tick_spacing <= 0:
        raise InvalidRangeError(f"tick_spacing must be positive, got {tick_spacing}")
    config.check_tick(current_tick)

    half_width = width_percent_to_half_width_ticks(width_percent)

    tick_lower = align_tick_to_spacing(current_tick - half_width, tick_spacing, round_down=True)
    tick_upper = align_tick_to_spacing(current_tick + half_width, tick_spacing, round_down=False)

    # Текущий тик не должен лежать на границе
    if tick_lower == current_tick:
        tick_lower -= tick_spacing
    if tick_upper == current_tick:
        tick_upper += tick_spacing

    min_usable, max_usable = get_tick_bounds_for_spacing(tick_spacing, config)
    if tick_lower < min_usable or tick_upper > max_usable:
        raise InvalidRangeError(
            f"Range [{tick_lower}, {tick_upper}] around tick {current_tick} cannot be aligned "
            f"within [{min_usable}, {max_usable}] (spacing {tick_spacing})",
            tick_lower, tick_upper,
        )

    return TickRange(tick_lower, tick_upper)


def closest_active_range(
    current_tick: int,
    tick_spacing: int,
    multiplier: int = 1,
    sqrt_price_x64: int = None,
    config: ClmmMathConfig = DEFAULT_CLMM_CONFIG,
) -> TickRange:
    """
    Самый узкий выровненный диапазон шириной multiplier * tick_spacing вокруг текущего тика.

    Если живая sqrt-цена ниже цены самого current_tick (цена внутри шага
    current_tick - 1), а кандидат начинается ровно на current_tick,
    диапазон сдвигается на один шаг вниз.
    """
    if tick_spacing <= 0 or multiplier <= 0:
        raise InvalidRangeError(
            f"tick_spacing and multiplier must be positive, got {tick_spacing}, {multiplier}"
        )

    half_range = multiplier * tick_spacing / 2
    # round half up
    tick_lower = math.floor((current_tick - half_range) / tick_spacing + 0.5) * tick_spacing

    if sqrt_price_x64 is not None and tick_lower == current_tick:
        if sqrt_price_x64 < tick_to_sqrt_price_x64(current_tick, config):
            tick_lower -= tick_spacing

    return TickRange(tick_lower, tick_lower + multiplier * tick_spacing)


def is_range_off_center(position, pool, multiplier: int = 1,
                        config: ClmmMathConfig = DEFAULT_CLMM_CONFIG) -> bool:
    """Позиция не совпадает с ближайшим активным диапазоном пула."""
    active = closest_active_range(
        pool.current_tick, pool.tick_spacing, multiplier, pool.current_sqrt_price_x64, config
    )
    return position.tick_lower != active.tick_lower or position.tick_upper != active.tick_upper
