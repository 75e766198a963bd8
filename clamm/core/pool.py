"""
Pool - a single concentrated-liquidity pool

Holds the price, tick and active liquidity of one token pair and exposes
initialize / mint / burn / collect / swap. Every mutating call runs under the
pool lock: re-entry is rejected, and any failure (including a ledger failure)
restores the state captured at entry.
"""

import copy
import logging
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Tuple

import pandas as pd

from ..constants import MIN_TICK, MAX_TICK, MIN_SQRT_RATIO, MAX_SQRT_RATIO
from ..exceptions import (
    AlreadyInitialized,
    AmountZero,
    NotInitialized,
    PriceLimitError,
    ReentrantCall,
    TickBounds,
    TickOrder,
)
from ..math.liquidity_math import add_delta
from ..math.sqrt_price_math import get_amount0_delta_signed, get_amount1_delta_signed
from ..math.tick_math import get_sqrt_ratio_at_tick, get_tick_at_sqrt_ratio, tick_to_price
from .ledger import Ledger
from .position import PositionRegistry
from .swap import SwapEngine
from .tick import TickRegistry, tick_spacing_to_max_liquidity_per_tick
from .tick_bitmap import TickBitmap
from .types import ModifyPositionParams, PoolState, PositionInfo, SwapResult, TickInfo

logger = logging.getLogger(__name__)

Transfer = Tuple[str, str, str, int]


def check_ticks(tick_lower: int, tick_upper: int) -> None:
    """Validate a position range

    Raises:
        TickOrder: tick_lower >= tick_upper
        TickBounds: a tick outside [MIN_TICK, MAX_TICK]
    """
    if tick_lower >= tick_upper:
        raise TickOrder(f"tick_lower {tick_lower} must be below tick_upper {tick_upper}")
    if tick_lower < MIN_TICK:
        raise TickBounds(f"tick_lower {tick_lower} below {MIN_TICK}")
    if tick_upper > MAX_TICK:
        raise TickBounds(f"tick_upper {tick_upper} above {MAX_TICK}")


class Pool:
    """Concentrated-liquidity pool for one token pair

    Usage:
        ledger = InMemoryLedger()
        pool = Pool("DAI", "WETH", fee=3000, tick_spacing=60, ledger=ledger)
        pool.initialize(get_sqrt_ratio_at_tick(0))
        amount0, amount1 = pool.mint("alice", -600, 600, 10**18)
        amount0, amount1 = pool.swap("bob", True, 10**15, MIN_SQRT_RATIO + 1)
    """

    def __init__(
        self,
        token0: str,
        token1: str,
        fee: int,
        tick_spacing: int,
        ledger: Ledger
    ):
        """
        Args:
            token0: token0 identifier (sorts before token1, enforced by the caller)
            token1: token1 identifier
            fee: swap fee in hundredths of a basis point
            tick_spacing: spacing between usable ticks
            ledger: value-transfer collaborator holding both tokens
        """
        if tick_spacing <= 0:
            raise ValueError(f"tick_spacing must be positive: {tick_spacing}")

        self.token0 = token0
        self.token1 = token1
        self.fee = fee
        self.tick_spacing = tick_spacing
        self.ledger = ledger
        self.address = f"pool:{token0}/{token1}/{fee}"
        self.max_liquidity_per_tick = tick_spacing_to_max_liquidity_per_tick(tick_spacing)

        self._state = PoolState()
        self._ticks = TickRegistry()
        self._tick_bitmap = TickBitmap()
        self._positions = PositionRegistry()
        self._locked = False

    @classmethod
    def from_params(cls, params, ledger: Ledger) -> "Pool":
        """Build a pool from validated PoolParams"""
        return cls(params.token0, params.token1, params.fee, params.tick_spacing, ledger)

    def __repr__(self) -> str:
        return (
            f"Pool({self.token0}/{self.token1}, fee={self.fee}, tick={self._state.tick}, "
            f"liquidity={self._state.liquidity})"
        )

    # ---- read-only queries ----

    @property
    def sqrt_price_x96(self) -> int:
        return self._state.sqrt_price_x96

    @property
    def tick(self) -> int:
        return self._state.tick

    @property
    def liquidity(self) -> int:
        return self._state.liquidity

    @property
    def fee_growth_global_0_x128(self) -> int:
        return self._state.fee_growth_global_0_x128

    @property
    def fee_growth_global_1_x128(self) -> int:
        return self._state.fee_growth_global_1_x128

    @property
    def locked(self) -> bool:
        return self._locked

    @property
    def initialized(self) -> bool:
        return self._state.initialized

    @property
    def state(self) -> PoolState:
        return copy.copy(self._state)

    @property
    def ticks(self) -> Dict[int, TickInfo]:
        return {tick: copy.copy(info) for tick, info in self._ticks.items()}

    @property
    def positions(self) -> Dict[Tuple[str, int, int], PositionInfo]:
        return {key: copy.copy(info) for key, info in self._positions.items()}

    @property
    def tick_bitmap(self) -> TickBitmap:
        return self._tick_bitmap

    def get_tick(self, tick: int) -> TickInfo:
        return copy.copy(self._ticks.get(tick))

    def get_position(self, owner: str, tick_lower: int, tick_upper: int) -> PositionInfo:
        return copy.copy(self._positions.get(owner, tick_lower, tick_upper))

    def initialized_ticks(self, tick_lower: int = MIN_TICK, tick_upper: int = MAX_TICK) -> List[int]:
        """Initialized ticks within [tick_lower, tick_upper], ascending"""
        return list(self._tick_bitmap.iter_initialized_ticks(
            tick_lower - 1, self.tick_spacing, False, tick_upper
        ))

    def liquidity_distribution(self, token0_decimals: int = 18, token1_decimals: int = 18) -> pd.DataFrame:
        """Initialized ticks with the active liquidity to the right of each

        Columns: tick, price, liquidity_gross, liquidity_net, active_liquidity
        """
        rows = []
        active = 0
        for tick, info in self._ticks.items():
            active += info.liquidity_net
            rows.append({
                "tick": tick,
                "price": tick_to_price(tick, token0_decimals, token1_decimals),
                "liquidity_gross": info.liquidity_gross,
                "liquidity_net": info.liquidity_net,
                "active_liquidity": active,
            })
        return pd.DataFrame(
            rows, columns=["tick", "price", "liquidity_gross", "liquidity_net", "active_liquidity"]
        )

    def quote(self, zero_for_one: bool, amount_specified: int, sqrt_price_limit_x96: int) -> SwapResult:
        """Simulate a swap without touching pool state or balances"""
        self._require_initialized()
        self._check_swap_args(zero_for_one, amount_specified, sqrt_price_limit_x96)
        return self._engine().run(
            self._state, zero_for_one, amount_specified, sqrt_price_limit_x96, commit=False
        )

    # ---- state-mutating calls ----

    @contextmanager
    def _lock(self, require_initialized: bool = True) -> Iterator[None]:
        """Exclusive, all-or-nothing section over the pool state"""
        if self._locked:
            raise ReentrantCall("pool is locked")
        if require_initialized:
            self._require_initialized()

        snapshot = copy.deepcopy((self._state, self._ticks, self._tick_bitmap, self._positions))
        self._locked = True
        try:
            yield
        except BaseException:
            self._state, self._ticks, self._tick_bitmap, self._positions = snapshot
            raise
        finally:
            self._locked = False

    def initialize(self, sqrt_price_x96: int) -> int:
        """Set the first price of the pool

        Returns:
            the tick of the initial price

        Raises:
            AlreadyInitialized: price was already set
            PriceBounds: price outside [MIN_SQRT_RATIO, MAX_SQRT_RATIO)
        """
        with self._lock(require_initialized=False):
            if self._state.initialized:
                raise AlreadyInitialized(f"{self.address} already initialized")

            tick = get_tick_at_sqrt_ratio(sqrt_price_x96)
            self._state.sqrt_price_x96 = sqrt_price_x96
            self._state.tick = tick

        logger.info(
            "Pool initialized",
            extra={
                "event": "pool.initialize",
                "pool": self.address,
                "sqrt_price_x96": sqrt_price_x96,
                "tick": tick,
            }
        )
        return tick

    def mint(
        self,
        recipient: str,
        tick_lower: int,
        tick_upper: int,
        amount: int,
        payer: Optional[str] = None
    ) -> Tuple[int, int]:
        """Add liquidity to a position

        Args:
            recipient: owner of the minted liquidity
            tick_lower: lower bound of the range
            tick_upper: upper bound of the range
            amount: liquidity to add, > 0
            payer: account the tokens are pulled from (defaults to recipient)

        Returns:
            (amount0, amount1) paid into the pool, rounded up
        """
        if amount <= 0:
            raise AmountZero("mint amount must be positive")

        with self._lock():
            _, amount0, amount1 = self._modify_position(
                ModifyPositionParams(recipient, tick_lower, tick_upper, amount)
            )
            payer = payer or recipient
            self._settle([
                (payer, self.address, self.token0, amount0),
                (payer, self.address, self.token1, amount1),
            ])

        logger.info(
            "Position minted",
            extra={
                "event": "pool.mint",
                "pool": self.address,
                "owner": recipient,
                "range": f"[{tick_lower}, {tick_upper})",
                "liquidity": amount,
                "amount0": amount0,
                "amount1": amount1,
            }
        )
        return amount0, amount1

    def burn(self, owner: str, tick_lower: int, tick_upper: int, amount: int) -> Tuple[int, int]:
        """Remove liquidity from a position

        The released tokens are added to the position's owed amounts and paid
        out by collect(). A zero amount only settles accrued fees.

        Returns:
            (amount0, amount1) released, rounded down
        """
        if amount < 0:
            raise AmountZero("burn amount must not be negative")

        with self._lock():
            _, amount0_int, amount1_int = self._modify_position(
                ModifyPositionParams(owner, tick_lower, tick_upper, -amount)
            )
            amount0, amount1 = -amount0_int, -amount1_int

            if amount0 > 0 or amount1 > 0:
                self._positions.credit(owner, tick_lower, tick_upper, amount0, amount1)

        logger.info(
            "Position burned",
            extra={
                "event": "pool.burn",
                "pool": self.address,
                "owner": owner,
                "range": f"[{tick_lower}, {tick_upper})",
                "liquidity": amount,
                "amount0": amount0,
                "amount1": amount1,
            }
        )
        return amount0, amount1

    def collect(
        self,
        owner: str,
        recipient: str,
        tick_lower: int,
        tick_upper: int,
        amount0_requested: int,
        amount1_requested: int
    ) -> Tuple[int, int]:
        """Pay out owed tokens of a position, up to the requested amounts

        Returns:
            (amount0, amount1) actually paid, zero when nothing is owed or the
            request is not positive
        """
        with self._lock():
            position = self._positions.get(owner, tick_lower, tick_upper)

            amount0 = max(0, min(amount0_requested, position.tokens_owed_0))
            amount1 = max(0, min(amount1_requested, position.tokens_owed_1))

            if amount0 > 0 or amount1 > 0:
                self._positions.debit(owner, tick_lower, tick_upper, amount0, amount1)
                self._settle([
                    (self.address, recipient, self.token0, amount0),
                    (self.address, recipient, self.token1, amount1),
                ])

        if amount0 > 0 or amount1 > 0:
            logger.info(
                "Fees and principal collected",
                extra={
                    "event": "pool.collect",
                    "pool": self.address,
                    "owner": owner,
                    "recipient": recipient,
                    "amount0": amount0,
                    "amount1": amount1,
                }
            )
        return amount0, amount1

    def swap(
        self,
        recipient: str,
        zero_for_one: bool,
        amount_specified: int,
        sqrt_price_limit_x96: int,
        payer: Optional[str] = None
    ) -> Tuple[int, int]:
        """Swap token0 for token1, or token1 for token0

        Args:
            recipient: account receiving the output token
            zero_for_one: True sells token0 (price moves down)
            amount_specified: exact input if positive, exact output if negative
            sqrt_price_limit_x96: price the swap may not pass
            payer: account the input is pulled from (defaults to recipient)

        Returns:
            (amount0, amount1) from the pool's side: positive amounts are
            paid in, negative amounts are paid out
        """
        if amount_specified == 0:
            raise AmountZero("swap amount must be non-zero")

        with self._lock():
            self._check_swap_args(zero_for_one, amount_specified, sqrt_price_limit_x96)

            result = self._engine().run(self._state, zero_for_one, amount_specified, sqrt_price_limit_x96)

            self._state.sqrt_price_x96 = result.sqrt_price_x96
            self._state.tick = result.tick
            self._state.liquidity = result.liquidity
            if zero_for_one:
                self._state.fee_growth_global_0_x128 = result.fee_growth_global_x128
            else:
                self._state.fee_growth_global_1_x128 = result.fee_growth_global_x128

            payer = payer or recipient
            if zero_for_one:
                transfers = [
                    (self.address, recipient, self.token1, -result.amount1),
                    (payer, self.address, self.token0, result.amount0),
                ]
            else:
                transfers = [
                    (self.address, recipient, self.token0, -result.amount0),
                    (payer, self.address, self.token1, result.amount1),
                ]
            self._settle(transfers)

        logger.info(
            "Swap executed",
            extra={
                "event": "pool.swap",
                "pool": self.address,
                "recipient": recipient,
                "zero_for_one": zero_for_one,
                "amount0": result.amount0,
                "amount1": result.amount1,
                "tick": result.tick,
                "steps": result.steps,
                "ticks_crossed": len(result.ticks_crossed),
            }
        )
        return result.amount0, result.amount1

    # ---- internals ----

    def _require_initialized(self) -> None:
        if not self._state.initialized:
            raise NotInitialized(f"{self.address} has no price yet")

    def _engine(self) -> SwapEngine:
        return SwapEngine(self._ticks, self._tick_bitmap, self.tick_spacing, self.fee)

    def _check_swap_args(self, zero_for_one: bool, amount_specified: int, sqrt_price_limit_x96: int) -> None:
        if amount_specified == 0:
            raise AmountZero("swap amount must be non-zero")

        price = self._state.sqrt_price_x96
        if zero_for_one:
            if not MIN_SQRT_RATIO < sqrt_price_limit_x96 < price:
                raise PriceLimitError(
                    f"limit {sqrt_price_limit_x96} must be in ({MIN_SQRT_RATIO}, {price})"
                )
        elif not price < sqrt_price_limit_x96 < MAX_SQRT_RATIO:
            raise PriceLimitError(
                f"limit {sqrt_price_limit_x96} must be in ({price}, {MAX_SQRT_RATIO})"
            )

    def _settle(self, transfers: List[Transfer]) -> None:
        """Run ledger transfers all-or-nothing

        Completed transfers are reversed if a later one fails.
        """
        done = []
        try:
            for sender, recipient, token, amount in transfers:
                if amount > 0:
                    self.ledger.transfer_token(sender, recipient, token, amount)
                    done.append((sender, recipient, token, amount))
        except Exception:
            for sender, recipient, token, amount in reversed(done):
                self.ledger.transfer_token(recipient, sender, token, amount)
            raise

    def _modify_position(self, params: ModifyPositionParams) -> Tuple[PositionInfo, int, int]:
        """Apply a liquidity change and compute the token deltas it implies

        Returns:
            (position, amount0, amount1) with positive amounts owed to the
            pool and negative amounts owed to the owner
        """
        check_ticks(params.tick_lower, params.tick_upper)

        position = self._update_position(
            params.owner, params.tick_lower, params.tick_upper, params.liquidity_delta, self._state.tick
        )

        amount0 = amount1 = 0
        delta = params.liquidity_delta
        if delta != 0:
            sqrt_lower = get_sqrt_ratio_at_tick(params.tick_lower)
            sqrt_upper = get_sqrt_ratio_at_tick(params.tick_upper)

            if self._state.tick < params.tick_lower:
                # range is above the price, only token0 is needed
                amount0 = get_amount0_delta_signed(sqrt_lower, sqrt_upper, delta)
            elif self._state.tick < params.tick_upper:
                amount0 = get_amount0_delta_signed(self._state.sqrt_price_x96, sqrt_upper, delta)
                amount1 = get_amount1_delta_signed(sqrt_lower, self._state.sqrt_price_x96, delta)
                self._state.liquidity = add_delta(self._state.liquidity, delta)
            else:
                # range is below the price, only token1 is needed
                amount1 = get_amount1_delta_signed(sqrt_lower, sqrt_upper, delta)

        return position, amount0, amount1

    def _update_position(
        self,
        owner: str,
        tick_lower: int,
        tick_upper: int,
        liquidity_delta: int,
        tick: int
    ) -> PositionInfo:
        fee_growth_0 = self._state.fee_growth_global_0_x128
        fee_growth_1 = self._state.fee_growth_global_1_x128

        flipped_lower = flipped_upper = False
        if liquidity_delta != 0:
            flipped_lower = self._ticks.update(
                tick_lower, tick, liquidity_delta, fee_growth_0, fee_growth_1,
                False, self.max_liquidity_per_tick
            )
            flipped_upper = self._ticks.update(
                tick_upper, tick, liquidity_delta, fee_growth_0, fee_growth_1,
                True, self.max_liquidity_per_tick
            )
            if flipped_lower:
                self._tick_bitmap.flip_tick(tick_lower, self.tick_spacing)
            if flipped_upper:
                self._tick_bitmap.flip_tick(tick_upper, self.tick_spacing)

        fee_growth_inside_0, fee_growth_inside_1 = self._ticks.get_fee_growth_inside(
            tick_lower, tick_upper, tick, fee_growth_0, fee_growth_1
        )
        position = self._positions.update(
            owner, tick_lower, tick_upper, liquidity_delta, fee_growth_inside_0, fee_growth_inside_1
        )

        # ticks that are no longer referenced are forgotten
        if liquidity_delta < 0:
            if flipped_lower:
                self._ticks.clear(tick_lower)
            if flipped_upper:
                self._ticks.clear(tick_upper)

        return position
