"""
Value objects одного цикла ребаланса.

Снапшоты читаются из сети и используются только на чтение; каждый цикл
оценки создаёт новые.
"""

from dataclasses import dataclass

from .exceptions import InvalidRangeError
from .math.ticks import ClmmMathConfig, DEFAULT_CLMM_CONFIG


@dataclass(frozen=True)
class TickRange:
    """Диапазон тиков позиции. Инвариант: tick_lower < tick_upper."""
    tick_lower: int
    tick_upper: int

    def __post_init__(self):
        if self.tick_lower >= self.tick_upper:
            raise InvalidRangeError(
                f"tick_lower {self.tick_lower} must be < tick_upper {self.tick_upper}",
                self.tick_lower, self.tick_upper,
            )

    @property
    def width(self) -> int:
        return self.tick_upper - self.tick_lower

    def contains(self, tick: int) -> bool:
        """Нижняя граница включена, верхняя нет (тик обозначает нижнюю границу своего шага)."""
        return self.tick_lower <= tick < self.tick_upper

    def validate(self, tick_spacing: int, config: ClmmMathConfig = DEFAULT_CLMM_CONFIG) -> None:
        """
        Проверка что обе границы кратны tick_spacing и лежат в [min_tick, max_tick].

        Raises:
            InvalidRangeError
        """
        if tick_spacing <= 0:
            raise InvalidRangeError(f"tick_spacing must be positive, got {tick_spacing}")
        if self.tick_lower % tick_spacing != 0 or self.tick_upper % tick_spacing != 0:
            raise InvalidRangeError(
                f"Range [{self.tick_lower}, {self.tick_upper}] is not aligned to spacing {tick_spacing}",
                self.tick_lower, self.tick_upper,
            )
        if self.tick_lower < config.min_tick or self.tick_upper > config.max_tick:
            raise InvalidRangeError(
                f"Range [{self.tick_lower}, {self.tick_upper}] exceeds "
                f"[{config.min_tick}, {config.max_tick}]",
                self.tick_lower, self.tick_upper,
            )

    def __str__(self) -> str:
        return f"[{self.tick_lower}, {self.tick_upper}]"


@dataclass(frozen=True)
class PoolSnapshot:
    """Состояние пула на момент чтения."""
    current_tick: int
    current_sqrt_price_x64: int
    tick_spacing: int
    fee_rate: int              # В миллионных долях (2500 = 0.25%)
    coin_type_a: str
    coin_type_b: str
    pool_id: str = ""
    liquidity: int = 0         # Активная ликвидность пула (информационно)


@dataclass(frozen=True)
class PositionSnapshot:
    """Состояние позиции (NFT) на момент чтения."""
    tick_lower: int
    tick_upper: int
    liquidity: int
    coin_a: str
    coin_b: str
    position_id: str = ""
    pool_id: str = ""

    def __post_init__(self):
        if self.liquidity < 0:
            raise ValueError(f"Position liquidity must be non-negative, got {self.liquidity}")

    @property
    def tick_range(self) -> TickRange:
        return TickRange(self.tick_lower, self.tick_upper)


@dataclass(frozen=True)
class RebalanceDecision:
    """Результат одной оценки. Пересчитывается каждый цикл, не мутируется."""
    should_rebalance: bool
    reason: str
    current_tick: int
    tick_lower: int
    tick_upper: int
    price_deviation_percent: float
