"""
clamm - concentrated liquidity AMM engine

In-memory state machine of a single concentrated-liquidity pool with
on-chain integer precision: tick/price codec, tick bitmap, tick and position
bookkeeping, and a swap loop that walks the price across tick boundaries.
"""

__version__ = "0.1.0"

from .constants import Q96, Q128, MIN_TICK, MAX_TICK, MIN_SQRT_RATIO, MAX_SQRT_RATIO, FEE_TIERS, TICK_SPACINGS
from .core import Pool, InMemoryLedger, Ledger
from .config import PoolParams, load_pool_params, settings
