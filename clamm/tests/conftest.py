"""Shared pool fixtures"""

import pytest

from ..core.ledger import InMemoryLedger
from ..core.pool import Pool
from ..math.tick_math import get_sqrt_ratio_at_tick

TOKEN0 = "TKA"
TOKEN1 = "TKB"
FUNDING = 10 ** 30


@pytest.fixture
def ledger():
    ledger = InMemoryLedger()
    for account in ("alice", "bob", "carol"):
        ledger.mint(account, TOKEN0, FUNDING)
        ledger.mint(account, TOKEN1, FUNDING)
    return ledger


@pytest.fixture
def pool(ledger):
    """fee 0.3%, spacing 60, initialized at price 1 (tick 0)"""
    pool = Pool(TOKEN0, TOKEN1, 3000, 60, ledger)
    pool.initialize(get_sqrt_ratio_at_tick(0))
    return pool

