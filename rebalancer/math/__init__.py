from .ticks import (
    tick_to_sqrt_price_x64,
    sqrt_price_x64_to_tick,
    sqrt_price_x64_to_price,
    tick_to_price,
    price_to_tick,
    align_tick_to_spacing,
    ClmmMathConfig,
    DEFAULT_CLMM_CONFIG,
)
from .liquidity import (
    get_liquidity_from_amounts,
    get_amounts_from_liquidity,
    get_expected_withdrawal_amounts,
    LiquidityAmounts,
    PriceRegime,
)
