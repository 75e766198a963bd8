"""
Pool engine data types

Every numeric field is a Python int so that the on-chain integer precision is
kept exactly. Records are plain dataclasses; the registries own them.
"""

from dataclasses import dataclass, field
from typing import Tuple


@dataclass
class PoolState:
    """Global pool state (Whitepaper Section 6.2, Table 1)

    - sqrt_price_x96: current √price (Q64.96), 0 until initialized
    - tick: current tick, get_tick_at_sqrt_ratio(sqrt_price_x96) except one
      below a boundary the price has just crossed moving down
    - liquidity: liquidity of the positions whose range holds the current tick
    - fee_growth_global_0_x128: token0 fees per unit liquidity (Q128)
    - fee_growth_global_1_x128: token1 fees per unit liquidity (Q128)
    """
    sqrt_price_x96: int = 0
    tick: int = 0
    liquidity: int = 0
    fee_growth_global_0_x128: int = 0
    fee_growth_global_1_x128: int = 0

    @property
    def initialized(self) -> bool:
        return self.sqrt_price_x96 != 0


@dataclass
class TickInfo:
    """Tick-Indexed State (Whitepaper Section 6.3, Table 2)

    - liquidity_gross: total liquidity of the positions bounded by this tick
    - liquidity_net: liquidity added when the tick is crossed left to right
    - fee_growth_outside_0_x128: f_o,0
    - fee_growth_outside_1_x128: f_o,1
    """
    liquidity_gross: int = 0
    liquidity_net: int = 0
    fee_growth_outside_0_x128: int = 0
    fee_growth_outside_1_x128: int = 0
    initialized: bool = False


@dataclass
class PositionInfo:
    """Position-Indexed State (Whitepaper Section 6.4, Table 3)

    - liquidity: liquidity owned (l)
    - fee_growth_inside_0_last_x128: f_r,0(t_0)
    - fee_growth_inside_1_last_x128: f_r,1(t_0)
    - tokens_owed_0 / tokens_owed_1: tokens collectable by the owner
    """
    liquidity: int = 0
    fee_growth_inside_0_last_x128: int = 0
    fee_growth_inside_1_last_x128: int = 0
    tokens_owed_0: int = 0
    tokens_owed_1: int = 0


PositionKey = Tuple[str, int, int]


@dataclass
class ModifyPositionParams:
    """A liquidity change on one position"""
    owner: str  # position owner
    tick_lower: int
    tick_upper: int
    liquidity_delta: int  # signed change in liquidity


@dataclass
class SwapState:
    """Running state of the swap loop"""
    amount_specified_remaining: int
    amount_calculated: int
    sqrt_price_x96: int
    tick: int
    fee_growth_global_x128: int  # of the input token
    liquidity: int


@dataclass
class StepComputations:
    """Scratch values of one swap step"""
    sqrt_price_start_x96: int = 0
    tick_next: int = 0
    initialized: bool = False
    sqrt_price_next_x96: int = 0
    amount_in: int = 0
    amount_out: int = 0
    fee_amount: int = 0


@dataclass
class SwapResult:
    """Outcome of a swap (committed or quoted)

    Positive amounts are owed to the pool, negative amounts are paid out.
    """
    amount0: int
    amount1: int
    sqrt_price_x96: int
    tick: int
    liquidity: int
    fee_growth_global_x128: int
    steps: int = 0
    ticks_crossed: list = field(default_factory=list)
