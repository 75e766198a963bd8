"""
Swap engine - walks the price curve across tick boundaries

Each step moves toward the nearest of: the next initialized tick (or word
boundary), and the caller's price limit, and stops early once the specified
amount is used up. Crossing an initialized tick applies its liquidity_net.

References:
- Uniswap V3 Core: contracts/UniswapV3Pool.sol (swap)
"""

import logging

from ..config import settings
from ..constants import MIN_TICK, MAX_TICK
from ..math.fee_math import fee_growth_increment, wrap_uint256
from ..math.full_math import to_int256
from ..math.liquidity_math import add_delta
from ..math.swap_math import compute_swap_step
from ..math.tick_math import get_sqrt_ratio_at_tick, get_tick_at_sqrt_ratio
from .tick import TickRegistry
from .tick_bitmap import TickBitmap
from .types import PoolState, StepComputations, SwapResult, SwapState

logger = logging.getLogger(__name__)


class SwapEngine:
    """Swap loop over one pool's ticks and bitmap"""

    def __init__(self, ticks: TickRegistry, tick_bitmap: TickBitmap, tick_spacing: int, fee: int):
        self.ticks = ticks
        self.tick_bitmap = tick_bitmap
        self.tick_spacing = tick_spacing
        self.fee = fee

    def run(
        self,
        pool_state: PoolState,
        zero_for_one: bool,
        amount_specified: int,
        sqrt_price_limit_x96: int,
        commit: bool = True
    ) -> SwapResult:
        """Run a swap from the pool's current state

        The caller validates the amount and the price limit. With commit=False
        crossed ticks are only read, so the registry is left untouched.

        Args:
            pool_state: current pool state (not modified)
            zero_for_one: True sells token0 (price moves down)
            amount_specified: exact input if positive, exact output if negative
            sqrt_price_limit_x96: price the swap may not pass
            commit: flip fee growth outside on crossed ticks

        Returns:
            SwapResult with signed amounts and the final price, tick and
            liquidity. fee_growth_global_x128 is the input token's.
        """
        exact_input = amount_specified > 0

        state = SwapState(
            amount_specified_remaining=amount_specified,
            amount_calculated=0,
            sqrt_price_x96=pool_state.sqrt_price_x96,
            tick=pool_state.tick,
            fee_growth_global_x128=(
                pool_state.fee_growth_global_0_x128 if zero_for_one
                else pool_state.fee_growth_global_1_x128
            ),
            liquidity=pool_state.liquidity,
        )
        steps = 0
        ticks_crossed = []

        while state.amount_specified_remaining != 0 and state.sqrt_price_x96 != sqrt_price_limit_x96:
            step = StepComputations()
            step.sqrt_price_start_x96 = state.sqrt_price_x96

            step.tick_next, step.initialized = self.tick_bitmap.next_initialized_tick_within_one_word(
                state.tick, self.tick_spacing, zero_for_one
            )

            # the bitmap is not aware of the tick domain bounds
            if step.tick_next < MIN_TICK:
                step.tick_next = MIN_TICK
            elif step.tick_next > MAX_TICK:
                step.tick_next = MAX_TICK

            step.sqrt_price_next_x96 = get_sqrt_ratio_at_tick(step.tick_next)

            if zero_for_one:
                overshoots = step.sqrt_price_next_x96 < sqrt_price_limit_x96
            else:
                overshoots = step.sqrt_price_next_x96 > sqrt_price_limit_x96
            sqrt_price_target_x96 = sqrt_price_limit_x96 if overshoots else step.sqrt_price_next_x96

            (
                state.sqrt_price_x96,
                step.amount_in,
                step.amount_out,
                step.fee_amount,
            ) = compute_swap_step(
                state.sqrt_price_x96,
                sqrt_price_target_x96,
                state.liquidity,
                state.amount_specified_remaining,
                self.fee,
            )

            if exact_input:
                state.amount_specified_remaining -= step.amount_in + step.fee_amount
                state.amount_calculated = to_int256(state.amount_calculated - step.amount_out)
            else:
                state.amount_specified_remaining += step.amount_out
                state.amount_calculated = to_int256(
                    state.amount_calculated + step.amount_in + step.fee_amount
                )

            if state.liquidity > 0:
                state.fee_growth_global_x128 = wrap_uint256(
                    state.fee_growth_global_x128 + fee_growth_increment(step.fee_amount, state.liquidity)
                )

            if settings.LOG_SWAP_STEPS:
                logger.debug(
                    "Swap step",
                    extra={
                        "event": "swap.step",
                        "tick_next": step.tick_next,
                        "initialized": step.initialized,
                        "sqrt_price_x96": state.sqrt_price_x96,
                        "amount_in": step.amount_in,
                        "amount_out": step.amount_out,
                        "fee_amount": step.fee_amount,
                        "liquidity": state.liquidity,
                    }
                )

            # shift tick if we reached the next price
            if state.sqrt_price_x96 == step.sqrt_price_next_x96:
                if step.initialized:
                    liquidity_net = self._cross(step.tick_next, zero_for_one, state, pool_state, commit)
                    if zero_for_one:
                        liquidity_net = -liquidity_net
                    state.liquidity = add_delta(state.liquidity, liquidity_net)
                    ticks_crossed.append(step.tick_next)

                state.tick = step.tick_next - 1 if zero_for_one else step.tick_next

            elif state.sqrt_price_x96 != step.sqrt_price_start_x96:
                # stopped inside a range, recompute unless the price did not move
                state.tick = get_tick_at_sqrt_ratio(state.sqrt_price_x96)

            steps += 1

        if zero_for_one == exact_input:
            amount0 = amount_specified - state.amount_specified_remaining
            amount1 = state.amount_calculated
        else:
            amount0 = state.amount_calculated
            amount1 = amount_specified - state.amount_specified_remaining

        return SwapResult(
            amount0=amount0,
            amount1=amount1,
            sqrt_price_x96=state.sqrt_price_x96,
            tick=state.tick,
            liquidity=state.liquidity,
            fee_growth_global_x128=state.fee_growth_global_x128,
            steps=steps,
            ticks_crossed=ticks_crossed,
        )

    def _cross(
        self,
        tick: int,
        zero_for_one: bool,
        state: SwapState,
        pool_state: PoolState,
        commit: bool
    ) -> int:
        if not commit:
            return self.ticks.get(tick).liquidity_net

        if zero_for_one:
            fee_growth_0, fee_growth_1 = state.fee_growth_global_x128, pool_state.fee_growth_global_1_x128
        else:
            fee_growth_0, fee_growth_1 = pool_state.fee_growth_global_0_x128, state.fee_growth_global_x128
        return self.ticks.cross(tick, fee_growth_0, fee_growth_1)
