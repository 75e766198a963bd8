"""
Tick registry - per-tick liquidity bookkeeping

Only initialized ticks are stored. A tick is created the first time a
position uses it as a boundary and erased when its gross liquidity returns
to zero on a decreasing update.

References:
- Uniswap V3 Core: contracts/libraries/Tick.sol
"""

from typing import Dict, Iterator, Tuple

from ..constants import MIN_TICK, MAX_TICK, UINT128_MAX
from ..exceptions import LiquidityCapExceeded
from ..math.fee_math import fee_growth_inside, wrap_uint256
from ..math.liquidity_math import add_delta
from .types import TickInfo


def tick_spacing_to_max_liquidity_per_tick(tick_spacing: int) -> int:
    """Static per-tick liquidity cap for a tick spacing

    The uint128 range is split evenly over every usable tick so that the sum
    of all tick liquidity can never overflow the active liquidity.
    """
    # usable bounds truncate toward zero
    min_tick = -(-MIN_TICK // tick_spacing) * tick_spacing
    max_tick = (MAX_TICK // tick_spacing) * tick_spacing
    num_ticks = (max_tick - min_tick) // tick_spacing + 1
    return UINT128_MAX // num_ticks


class TickRegistry:
    """Initialized ticks of one pool"""

    def __init__(self):
        self._ticks: Dict[int, TickInfo] = {}

    def __contains__(self, tick: int) -> bool:
        return tick in self._ticks

    def __len__(self) -> int:
        return len(self._ticks)

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._ticks))

    def items(self) -> Iterator[Tuple[int, TickInfo]]:
        for tick in sorted(self._ticks):
            yield tick, self._ticks[tick]

    def get(self, tick: int) -> TickInfo:
        """Stored record, or an empty one for an uninitialized tick"""
        return self._ticks.get(tick) or TickInfo()

    def update(
        self,
        tick: int,
        tick_current: int,
        liquidity_delta: int,
        fee_growth_global_0_x128: int,
        fee_growth_global_1_x128: int,
        upper: bool,
        max_liquidity: int
    ) -> bool:
        """Apply a position's liquidity delta to one of its boundary ticks

        Args:
            tick: boundary tick
            tick_current: current pool tick
            liquidity_delta: signed liquidity change of the position
            fee_growth_global_0_x128: current global token0 fee growth
            fee_growth_global_1_x128: current global token1 fee growth
            upper: True if tick is the position's upper boundary
            max_liquidity: per-tick gross liquidity cap

        Returns:
            True if the tick flipped between initialized and uninitialized

        Raises:
            LiquidityCapExceeded: gross liquidity would pass max_liquidity
        """
        info = self._ticks.get(tick) or TickInfo()

        liquidity_gross_before = info.liquidity_gross
        liquidity_gross_after = add_delta(liquidity_gross_before, liquidity_delta)

        if liquidity_gross_after > max_liquidity:
            raise LiquidityCapExceeded(
                f"tick {tick} liquidity {liquidity_gross_after} exceeds cap {max_liquidity}"
            )

        flipped = (liquidity_gross_after == 0) != (liquidity_gross_before == 0)

        if liquidity_gross_before == 0:
            # growth so far is assumed to have happened below the tick
            if tick <= tick_current:
                info.fee_growth_outside_0_x128 = fee_growth_global_0_x128
                info.fee_growth_outside_1_x128 = fee_growth_global_1_x128
            info.initialized = True

        info.liquidity_gross = liquidity_gross_after
        if upper:
            info.liquidity_net -= liquidity_delta
        else:
            info.liquidity_net += liquidity_delta

        self._ticks[tick] = info
        return flipped

    def cross(
        self,
        tick: int,
        fee_growth_global_0_x128: int,
        fee_growth_global_1_x128: int
    ) -> int:
        """Transition a tick as the price crosses it

        Returns:
            liquidity_net of the tick (the caller negates it when moving down)
        """
        info = self._ticks[tick]
        info.fee_growth_outside_0_x128 = wrap_uint256(fee_growth_global_0_x128 - info.fee_growth_outside_0_x128)
        info.fee_growth_outside_1_x128 = wrap_uint256(fee_growth_global_1_x128 - info.fee_growth_outside_1_x128)
        return info.liquidity_net

    def clear(self, tick: int) -> None:
        """Erase a tick whose gross liquidity reached zero"""
        del self._ticks[tick]

    def get_fee_growth_inside(
        self,
        tick_lower: int,
        tick_upper: int,
        tick_current: int,
        fee_growth_global_0_x128: int,
        fee_growth_global_1_x128: int
    ) -> Tuple[int, int]:
        """Fee growth per unit liquidity inside [tick_lower, tick_upper)"""
        lower = self.get(tick_lower)
        upper = self.get(tick_upper)

        inside_0 = fee_growth_inside(
            tick_lower, tick_upper, tick_current,
            fee_growth_global_0_x128,
            lower.fee_growth_outside_0_x128,
            upper.fee_growth_outside_0_x128
        )
        inside_1 = fee_growth_inside(
            tick_lower, tick_upper, tick_current,
            fee_growth_global_1_x128,
            lower.fee_growth_outside_1_x128,
            upper.fee_growth_outside_1_x128
        )
        return inside_0, inside_1
