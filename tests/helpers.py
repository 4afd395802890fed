"""
Фабрики тестовых снапшотов и RPC-объектов.
"""

from config import CETUS_POOL_TYPE, CETUS_POSITION_TYPE
from rebalancer.encoding import encode_tick_i32
from rebalancer.math.ticks import tick_to_sqrt_price_x64
from rebalancer.models import PoolSnapshot, PositionSnapshot

# Тестовые идентификаторы
POOL_ID = "0x" + "a1" * 32
POSITION_ID = "0x" + "b2" * 32
SUI_TYPE = "0x2::sui::SUI"
USDC_TYPE = "0xdba34672e30cb065b1f93e3ab55318768fd6fef66c15942c9f7cb846e2f900e7::usdc::USDC"


def make_pool(current_tick: int = 0, tick_spacing: int = 60, sqrt_price_x64: int = None, **kwargs) -> PoolSnapshot:
    """PoolSnapshot с sqrt ценой ровно на current_tick (если не задана явно)."""
    if sqrt_price_x64 is None:
        sqrt_price_x64 = tick_to_sqrt_price_x64(current_tick)
    params = dict(
        current_tick=current_tick,
        current_sqrt_price_x64=sqrt_price_x64,
        tick_spacing=tick_spacing,
        fee_rate=2500,
        coin_type_a=USDC_TYPE,
        coin_type_b=SUI_TYPE,
        pool_id=POOL_ID,
    )
    params.update(kwargs)
    return PoolSnapshot(**params)


def make_position(tick_lower: int = -1000, tick_upper: int = 1000, liquidity: int = 10**9, **kwargs) -> PositionSnapshot:
    params = dict(
        tick_lower=tick_lower,
        tick_upper=tick_upper,
        liquidity=liquidity,
        coin_a=USDC_TYPE,
        coin_b=SUI_TYPE,
        position_id=POSITION_ID,
        pool_id=POOL_ID,
    )
    params.update(kwargs)
    return PositionSnapshot(**params)


def make_pool_object(object_id: str = POOL_ID, current_tick: int = 0, tick_spacing: int = 60,
                     sqrt_price_x64: int = None, fee_rate: int = 2500) -> dict:
    """Ответ sui_multiGetObjects для Cetus Pool."""
    if sqrt_price_x64 is None:
        sqrt_price_x64 = tick_to_sqrt_price_x64(current_tick)
    object_type = f"{CETUS_POOL_TYPE}<{USDC_TYPE}, {SUI_TYPE}>"
    return {
        "data": {
            "objectId": object_id,
            "version": "1",
            "type": object_type,
            "content": {
                "dataType": "moveObject",
                "type": object_type,
                "fields": {
                    "current_sqrt_price": str(sqrt_price_x64),
                    "current_tick_index": {
                        "type": "0x1eab::i32::I32",
                        "fields": {"bits": encode_tick_i32(current_tick)},
                    },
                    "tick_spacing": tick_spacing,
                    "fee_rate": str(fee_rate),
                    "liquidity": "5000000000",
                },
            },
        }
    }


def make_position_object(object_id: str = POSITION_ID, pool_id: str = POOL_ID,
                         tick_lower: int = -1000, tick_upper: int = 1000,
                         liquidity: int = 10**9) -> dict:
    """Ответ sui_multiGetObjects для Cetus Position."""
    return {
        "data": {
            "objectId": object_id,
            "version": "1",
            "type": CETUS_POSITION_TYPE,
            "content": {
                "dataType": "moveObject",
                "type": CETUS_POSITION_TYPE,
                "fields": {
                    "pool": pool_id,
                    "liquidity": str(liquidity),
                    "tick_lower_index": {"type": "0x1eab::i32::I32", "fields": {"bits": encode_tick_i32(tick_lower)}},
                    "tick_upper_index": {"type": "0x1eab::i32::I32", "fields": {"bits": encode_tick_i32(tick_upper)}},
                    "coin_type_a": {
                        "type": "0x1::type_name::TypeName",
                        "fields": {"name": USDC_TYPE[2:]},
                    },
                    "coin_type_b": {
                        "type": "0x1::type_name::TypeName",
                        "fields": {"name": "0000000000000000000000000000000000000000000000000000000000000002::sui::SUI"},
                    },
                },
            },
        }
    }

