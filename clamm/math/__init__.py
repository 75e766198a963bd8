"""
Math layer for the pool engine

Integer math with on-chain precision:
- full_math: wide multiply/divide with rounding control
- tick_math: tick <-> sqrt price codec
- sqrt_price_math: amount deltas and price movement
- liquidity_math: liquidity deltas and position sizing
- swap_math: single swap step
- fee_math: fee growth accounting
"""

from .full_math import (
    mul_div,
    mul_div_rounding_up,
    div_rounding_up,
)
from .tick_math import (
    get_tick_at_sqrt_ratio,
    get_sqrt_ratio_at_tick,
    tick_to_price,
    price_to_tick,
    round_tick_to_spacing,
)
from .sqrt_price_math import (
    get_amount0_delta,
    get_amount1_delta,
    get_next_sqrt_price_from_input,
    get_next_sqrt_price_from_output,
    sqrt_price_x96_to_price,
    price_to_sqrt_price_x96,
)
from .liquidity_math import (
    add_delta,
    get_liquidity_for_amounts,
    get_amounts_for_liquidity,
)
from .swap_math import compute_swap_step
from .fee_math import (
    fee_growth_inside,
    calculate_uncollected_fees,
    calculate_fee_growth_delta,
)
