"""
Position registry - per (owner, range) liquidity and owed tokens

Positions are created on first write and never erased; a fully burned
position stays as a zero-liquidity record until its owed tokens are
collected (and after).

References:
- Uniswap V3 Core: contracts/libraries/Position.sol
"""

from typing import Dict, Iterator, Tuple

from ..exceptions import NoLiquidity
from ..math.fee_math import calculate_uncollected_fees
from ..math.liquidity_math import add_delta
from .types import PositionInfo, PositionKey


class PositionRegistry:
    """Positions of one pool, keyed by (owner, tick_lower, tick_upper)"""

    def __init__(self):
        self._positions: Dict[PositionKey, PositionInfo] = {}

    def __contains__(self, key: PositionKey) -> bool:
        return key in self._positions

    def __len__(self) -> int:
        return len(self._positions)

    def items(self) -> Iterator[Tuple[PositionKey, PositionInfo]]:
        return iter(self._positions.items())

    def get(self, owner: str, tick_lower: int, tick_upper: int) -> PositionInfo:
        """Stored record, or a zero record for a never-touched range"""
        return self._positions.get((owner, tick_lower, tick_upper)) or PositionInfo()

    def update(
        self,
        owner: str,
        tick_lower: int,
        tick_upper: int,
        liquidity_delta: int,
        fee_growth_inside_0_x128: int,
        fee_growth_inside_1_x128: int
    ) -> PositionInfo:
        """Apply a liquidity delta and credit fees earned since the last update

        A zero delta only settles fees ("poke") and needs existing liquidity.

        Raises:
            NoLiquidity: zero delta on an empty position
            LiquidityUnderflow: burning more than the position holds
        """
        key = (owner, tick_lower, tick_upper)
        position = self._positions.get(key) or PositionInfo()

        if liquidity_delta == 0:
            if position.liquidity == 0:
                raise NoLiquidity(f"position {key} holds no liquidity")
            liquidity_next = position.liquidity
        else:
            liquidity_next = add_delta(position.liquidity, liquidity_delta)

        tokens_owed_0 = calculate_uncollected_fees(
            position.liquidity, fee_growth_inside_0_x128, position.fee_growth_inside_0_last_x128
        )
        tokens_owed_1 = calculate_uncollected_fees(
            position.liquidity, fee_growth_inside_1_x128, position.fee_growth_inside_1_last_x128
        )

        position.liquidity = liquidity_next
        position.fee_growth_inside_0_last_x128 = fee_growth_inside_0_x128
        position.fee_growth_inside_1_last_x128 = fee_growth_inside_1_x128
        position.tokens_owed_0 += tokens_owed_0
        position.tokens_owed_1 += tokens_owed_1

        self._positions[key] = position
        return position

    def credit(self, owner: str, tick_lower: int, tick_upper: int, amount0: int, amount1: int) -> PositionInfo:
        """Add burned principal to the owed counters"""
        position = self._positions[(owner, tick_lower, tick_upper)]
        position.tokens_owed_0 += amount0
        position.tokens_owed_1 += amount1
        return position

    def debit(self, owner: str, tick_lower: int, tick_upper: int, amount0: int, amount1: int) -> PositionInfo:
        """Remove collected amounts from the owed counters"""
        position = self._positions[(owner, tick_lower, tick_upper)]
        position.tokens_owed_0 -= amount0
        position.tokens_owed_1 -= amount1
        return position
