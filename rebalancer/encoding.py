"""
Protocol Encodings

Разные версии пакета Cetus принимают тики по-разному:
- I32: 32-битный дополнительный код `I32 { bits: u32 }` (текущие пулы и позиции)
- SIGN_MAGNITUDE: модуль `u32` плюс `bool` is_negative (старый open_position)

Математическое ядро работает с обычными знаковыми int, конверсия только здесь.
"""

import logging
import re
from enum import Enum

logger = logging.getLogger(__name__)

I32_MIN = -(2 ** 31)
I32_MAX = 2 ** 31 - 1
U32_MAX = 2 ** 32 - 1

SUI_ADDRESS_LENGTH = 64  # hex chars without 0x

_ADDRESS_IN_TYPE_RE = re.compile(r"0x([0-9a-fA-F]{1,64})(?=::)")


class TickEncoding(Enum):
    I32 = "i32"
    SIGN_MAGNITUDE = "sign_magnitude"


def encode_tick_i32(tick: int) -> int:
    """Signed tick -> u32 bits (two's complement)."""
    if tick < I32_MIN or tick > I32_MAX:
        raise ValueError(f"Tick {tick} does not fit into i32")
    return tick & U32_MAX


def decode_tick_i32(bits: int) -> int:
    """u32 bits (как в I32 { bits }) -> signed tick."""
    bits = int(bits)
    if bits < 0 or bits > U32_MAX:
        raise ValueError(f"I32 bits {bits} out of u32 range")
    if bits > I32_MAX:
        return bits - (U32_MAX + 1)
    return bits


def encode_tick_sign_magnitude(tick: int) -> tuple[int, bool]:
    """Signed tick -> (abs(tick), is_negative)."""
    magnitude = abs(tick)
    if magnitude > U32_MAX:
        raise ValueError(f"Tick {tick} magnitude does not fit into u32")
    return magnitude, tick < 0


def encode_range(tick_range, encoding: TickEncoding = TickEncoding.I32) -> tuple:
    """
    Закодировать обе границы диапазона.

    Returns:
        I32: (lower_bits, upper_bits)
        SIGN_MAGNITUDE: (lower_abs, lower_is_neg, upper_abs, upper_is_neg)
    """
    if encoding is TickEncoding.I32:
        return encode_tick_i32(tick_range.tick_lower), encode_tick_i32(tick_range.tick_upper)

    if encoding is TickEncoding.SIGN_MAGNITUDE:
        return (
            *encode_tick_sign_magnitude(tick_range.tick_lower),
            *encode_tick_sign_magnitude(tick_range.tick_upper),
        )

    raise ValueError(f"Unknown tick encoding: {encoding}")


def normalize_type_argument(type_arg: str) -> str:
    """
    Нормализация Move type tag: короткие адреса -> 64 hex символа в нижнем регистре.

    "0x2::sui::SUI" -> "0x0000...0002::sui::SUI", в т.ч. внутри generic-параметров.
    """
    normalized = _ADDRESS_IN_TYPE_RE.sub(
        lambda m: "0x" + m.group(1).lower().zfill(SUI_ADDRESS_LENGTH),
        type_arg.strip(),
    )
    if normalized != type_arg:
        logger.debug(f"Type arg normalized: {type_arg} -> {normalized}")
    return normalized


def normalize_type_arguments(type_args: list[str]) -> list[str]:
    return [normalize_type_argument(t) for t in type_args]


def split_type_parameters(type_str: str) -> list[str]:
    """
    Параметры generic-типа верхнего уровня.

    "0x1::pool::Pool<0x2::sui::SUI, 0xabc::usdc::USDC>" -> ["0x2::sui::SUI", "0xabc::usdc::USDC"]
    """
    start = type_str.find("<")
    if start < 0 or not type_str.endswith(">"):
        return []

    params = []
    depth = 0
    current = []
    for char in type_str[start + 1:-1]:
        if char == "<":
            depth += 1
        elif char == ">":
            depth -= 1
        if char == "," and depth == 0:
            params.append("".join(current).strip())
            current = []
            continue
        current.append(char)
    if current:
        params.append("".join(current).strip())
    return params
