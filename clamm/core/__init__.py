"""
Core layer for the pool engine

Pool state machine and the registries it owns.
"""

from .types import PoolState, TickInfo, PositionInfo, SwapResult
from .tick_bitmap import TickBitmap
from .tick import TickRegistry, tick_spacing_to_max_liquidity_per_tick
from .position import PositionRegistry
from .ledger import Ledger, InMemoryLedger
from .swap import SwapEngine
from .pool import Pool
