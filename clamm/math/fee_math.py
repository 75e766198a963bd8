"""
Fee Math - fee growth accounting

Global fee growth is tracked per unit of liquidity in Q128.128. Ticks keep
the growth on their "outside", positions snapshot the growth "inside" their
range. All differences wrap modulo 2^256 like the on-chain uint256 math.

References:
- Whitepaper Section 6.3: Tick-Indexed State (feeGrowthOutside)
- Whitepaper Section 6.4.1: Position-Indexed State (uncollected fees)

Key formulas:
    f_a(i) = f_g - f_o(i)  if i_c >= i else f_o(i)     # growth above tick i
    f_b(i) = f_o(i)        if i_c >= i else f_g - f_o(i) # growth below tick i
    f_r = f_g - f_b(i_l) - f_a(i_u)                     # growth inside range
    f_u = l × (f_r(t_1) - f_r(t_0))                     # uncollected fees
"""

from ..constants import Q128, UINT256_MAX
from .full_math import mul_div

_MOD_256 = UINT256_MAX + 1


def wrap_uint256(value: int) -> int:
    """Reduce a value modulo 2^256"""
    return value % _MOD_256


def calculate_fee_growth_delta(
    fee_growth_current: int,
    fee_growth_previous: int
) -> int:
    """Fee growth between two snapshots (uint256 wraparound)"""
    return wrap_uint256(fee_growth_current - fee_growth_previous)


def fee_growth_increment(fee_amount: int, liquidity: int) -> int:
    """Per-liquidity fee growth (Q128) contributed by a fee amount

    No growth accrues when no liquidity is in range.
    """
    if liquidity == 0:
        return 0
    return mul_div(fee_amount, Q128, liquidity)


def fee_growth_above(
    tick_idx: int,
    current_tick: int,
    fee_growth_global: int,
    fee_growth_outside: int
) -> int:
    """Fee growth above tick i (f_a)"""
    if current_tick >= tick_idx:
        return wrap_uint256(fee_growth_global - fee_growth_outside)
    return fee_growth_outside


def fee_growth_below(
    tick_idx: int,
    current_tick: int,
    fee_growth_global: int,
    fee_growth_outside: int
) -> int:
    """Fee growth below tick i (f_b)"""
    if current_tick >= tick_idx:
        return fee_growth_outside
    return wrap_uint256(fee_growth_global - fee_growth_outside)


def fee_growth_inside(
    tick_lower: int,
    tick_upper: int,
    current_tick: int,
    fee_growth_global: int,
    fee_growth_outside_lower: int,
    fee_growth_outside_upper: int
) -> int:
    """Fee growth inside a range (f_r)

    Args:
        tick_lower: lower tick (i_l)
        tick_upper: upper tick (i_u)
        current_tick: current tick (i_c)
        fee_growth_global: global fee growth (f_g)
        fee_growth_outside_lower: f_o(i_l)
        fee_growth_outside_upper: f_o(i_u)

    Returns:
        fee growth inside the range, modulo 2^256
    """
    f_b = fee_growth_below(tick_lower, current_tick, fee_growth_global, fee_growth_outside_lower)
    f_a = fee_growth_above(tick_upper, current_tick, fee_growth_global, fee_growth_outside_upper)
    return wrap_uint256(fee_growth_global - f_b - f_a)


def calculate_uncollected_fees(
    liquidity: int,
    fee_growth_inside_current: int,
    fee_growth_inside_last: int
) -> int:
    """Uncollected fees in token units (f_u, decoded from Q128)"""
    delta = calculate_fee_growth_delta(fee_growth_inside_current, fee_growth_inside_last)
    return mul_div(delta, liquidity, Q128)
