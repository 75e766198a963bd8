"""
Tick Math - tick <-> sqrt price codec

Bit-exact port of the on-chain tick math: every tick maps to exactly one
Q64.96 sqrt price, and every price in [MIN_SQRT_RATIO, MAX_SQRT_RATIO) maps to
the greatest tick whose price does not exceed it.

References:
- Uniswap V3 Core: contracts/libraries/TickMath.sol
- Whitepaper Section 6.1: Ticks and Tick Spacing

Key formulas:
    price = 1.0001^tick
    tick = floor(log_1.0001(price))
    sqrtPriceX96 = sqrt(price) * 2^96
"""

import math

from ..constants import (
    MIN_TICK,
    MAX_TICK,
    MIN_SQRT_RATIO,
    MAX_SQRT_RATIO,
    TICK_SPACINGS,
    UINT256_MAX,
)
from ..exceptions import TickBounds, PriceBounds

# 1 / sqrt(1.0001)^(2^i) in Q128.128, for i = 1..19
_RATIO_FACTORS = (
    (0x2, 0xfff97272373d413259a46990580e213a),
    (0x4, 0xfff2e50f5f656932ef12357cf3c7fdcc),
    (0x8, 0xffe5caca7e10e4e61c3624eaa0941cd0),
    (0x10, 0xffcb9843d60f6159c9db58835c926644),
    (0x20, 0xff973b41fa98c081472e6896dfb254c0),
    (0x40, 0xff2ea16466c96a3843ec78b326b52861),
    (0x80, 0xfe5dee046a99a2a811c461f1969c3053),
    (0x100, 0xfcbe86c7900a88aedcffc83b479aa3a4),
    (0x200, 0xf987a7253ac413176f2b074cf7815e54),
    (0x400, 0xf3392b0822b70005940c7a398e4b70f3),
    (0x800, 0xe7159475a2c29b7443b29c7fa6e889d9),
    (0x1000, 0xd097f3bdfd2022b8845ad8f792aa5825),
    (0x2000, 0xa9f746462d870fdf8a65dc1f90e061e5),
    (0x4000, 0x70d869a156d2a1b890bb3df62baf32f7),
    (0x8000, 0x31be135f97d08fd981231505542fcfa6),
    (0x10000, 0x9aa508b5b7a84e1c677de54f3e99bc9),
    (0x20000, 0x5d6af8dedb81196699c329225ee604),
    (0x40000, 0x2216e584f5fa1ea926041bedfe98),
    (0x80000, 0x48a170391f7dc42444e8fa2),
)


def get_sqrt_ratio_at_tick(tick: int) -> int:
    """Compute sqrtPriceX96 at a tick

    Same integer sequence as TickMath.getSqrtRatioAtTick().

    Args:
        tick: tick index (-887272 ~ 887272)

    Returns:
        sqrtPriceX96 (Q64.96), rounded up

    Raises:
        TickBounds: tick outside [MIN_TICK, MAX_TICK]
    """
    if tick < MIN_TICK or tick > MAX_TICK:
        raise TickBounds(f"tick out of range: {tick} (range: {MIN_TICK} ~ {MAX_TICK})")

    abs_tick = abs(tick)

    ratio = 0xfffcb933bd6fad37aa2d162d1a594001 if abs_tick & 0x1 \
        else 0x100000000000000000000000000000000

    for bit, factor in _RATIO_FACTORS:
        if abs_tick & bit:
            ratio = (ratio * factor) >> 128

    if tick > 0:
        ratio = UINT256_MAX // ratio

    # Q128.128 -> Q64.96, rounding up
    return (ratio >> 32) + (1 if ratio % (1 << 32) != 0 else 0)


def _most_significant_bit(r: int) -> int:
    msb = 0
    for shift, threshold in (
        (7, 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFF),
        (6, 0xFFFFFFFFFFFFFFFF),
        (5, 0xFFFFFFFF),
        (4, 0xFFFF),
        (3, 0xFF),
        (2, 0xF),
        (1, 0x3),
    ):
        f = (1 if r > threshold else 0) << shift
        msb |= f
        r >>= f
    return msb | (1 if r > 0x1 else 0)


def get_tick_at_sqrt_ratio(sqrt_price_x96: int) -> int:
    """Compute the greatest tick whose sqrt price is <= sqrt_price_x96

    Same integer sequence as TickMath.getTickAtSqrtRatio().

    Args:
        sqrt_price_x96: sqrtPriceX96 (Q64.96)

    Returns:
        tick index

    Raises:
        PriceBounds: price outside [MIN_SQRT_RATIO, MAX_SQRT_RATIO)
    """
    if sqrt_price_x96 < MIN_SQRT_RATIO or sqrt_price_x96 >= MAX_SQRT_RATIO:
        raise PriceBounds(f"sqrtPriceX96 out of range: {sqrt_price_x96}")

    ratio = sqrt_price_x96 << 32
    msb = _most_significant_bit(ratio)

    if msb >= 128:
        r = ratio >> (msb - 127)
    else:
        r = ratio << (127 - msb)

    log_2 = (msb - 128) << 64

    # 14 bits of fractional log2 refinement
    for i in range(14):
        r = (r * r) >> 127
        f = r >> 128
        log_2 |= f << (63 - i)
        r >>= f

    log_sqrt10001 = log_2 * 255738958999603826347141

    tick_low = (log_sqrt10001 - 3402992956809132418596140100660247210) >> 128
    tick_high = (log_sqrt10001 + 291339464771989622907027621153398088495) >> 128

    if tick_low == tick_high:
        return tick_low

    if get_sqrt_ratio_at_tick(tick_high) <= sqrt_price_x96:
        return tick_high
    return tick_low


def tick_to_price(tick: int, token0_decimals: int = 18, token1_decimals: int = 18) -> float:
    """Convert a tick to a human-readable price (token1 per token0)

    price = 1.0001^tick * 10^(token0_decimals - token1_decimals)
    """
    ratio = 1.0001 ** tick
    return ratio * (10 ** (token0_decimals - token1_decimals))


def price_to_tick(price: float, token0_decimals: int = 18, token1_decimals: int = 18) -> int:
    """Convert a human-readable price to the tick at or below it

    tick = floor(log_1.0001(price * 10^(token1_decimals - token0_decimals)))
    """
    if price <= 0:
        raise ValueError("price must be positive")

    ratio = price * (10 ** (token1_decimals - token0_decimals))
    tick = math.floor(math.log(ratio) / math.log(1.0001))
    return max(MIN_TICK, min(MAX_TICK, tick))


def round_tick_to_spacing(tick: int, tick_spacing: int) -> int:
    """Round a tick to the nearest usable tick (ties go up)"""
    lower = (tick // tick_spacing) * tick_spacing
    upper = lower + tick_spacing

    if tick - lower < upper - tick:
        return lower
    return upper


def get_tick_spacing_for_fee(fee_tier: int) -> int:
    """Tick spacing of a standard fee tier"""
    if fee_tier not in TICK_SPACINGS:
        raise ValueError(f"unsupported fee tier: {fee_tier}")
    return TICK_SPACINGS[fee_tier]
