"""
Swap tests

Walks through gaps, range boundaries and price limits on a 0.3% / spacing 60
pool initialized at tick 0.
"""

import pytest

from ..constants import MIN_SQRT_RATIO, MAX_SQRT_RATIO, UINT128_MAX
from ..exceptions import AmountZero, InsufficientBalance, PriceLimitError
from ..math.tick_math import get_sqrt_ratio_at_tick, get_tick_at_sqrt_ratio
from .conftest import TOKEN0, TOKEN1, FUNDING

L = 10 ** 18


def active_liquidity(pool) -> int:
    """Sum of position liquidity whose range contains the current tick"""
    return sum(
        info.liquidity
        for (_, lower, upper), info in pool.positions.items()
        if lower <= pool.tick < upper
    )


@pytest.fixture
def three_ranges(pool):
    """[-1200, -600), [-300, 300), [600, 1200) with gaps in between"""
    pool.mint("alice", -1200, -600, L)
    pool.mint("alice", -300, 300, L)
    pool.mint("alice", 600, 1200, L)
    return pool


class TestGapCrossing:

    def test_cross_empty_gap_into_range(self, pool):
        """the price walks through [0, 180) for free and trades inside [180, 240)"""
        pool.mint("alice", 180, 240, L)
        assert pool.liquidity == 0

        limit = get_sqrt_ratio_at_tick(239)
        quote = pool.quote(False, 10 ** 15, limit)
        assert quote.ticks_crossed == [180]
        assert quote.steps == 2

        amount0, amount1 = pool.swap("bob", False, 10 ** 15, limit)

        assert amount1 == 10 ** 15
        assert amount0 < 0
        assert 180 <= pool.tick < 240
        assert pool.tick == get_tick_at_sqrt_ratio(pool.sqrt_price_x96)
        assert pool.liquidity == L

    def test_swap_with_no_liquidity(self, pool, ledger):
        """nothing to trade against: the price moves to the limit at no cost"""
        limit = get_sqrt_ratio_at_tick(1000)

        assert pool.swap("bob", False, 1000, limit) == (0, 0)
        assert pool.sqrt_price_x96 == limit
        assert pool.tick == 1000
        assert ledger.balance_of("bob", TOKEN0) == FUNDING
        assert ledger.balance_of("bob", TOKEN1) == FUNDING

    def test_exact_input_across_ranges(self, three_ranges):
        pool = three_ranges
        assert pool.liquidity == L

        result = pool.quote(False, 3 * 10 ** 16, MAX_SQRT_RATIO - 1)
        assert result.ticks_crossed == [300, 600]

        amount0, amount1 = pool.swap("bob", False, 3 * 10 ** 16, MAX_SQRT_RATIO - 1)

        assert amount1 == 3 * 10 ** 16
        assert amount0 < 0
        assert 600 <= pool.tick < 1200
        assert pool.liquidity == L
        assert pool.liquidity == active_liquidity(pool)

    def test_round_trip_back_down(self, three_ranges):
        pool = three_ranges
        pool.swap("bob", False, 3 * 10 ** 16, MAX_SQRT_RATIO - 1)

        limit = get_sqrt_ratio_at_tick(-900)
        result = pool.quote(True, L, limit)
        assert result.ticks_crossed == [600, 300, -300, -600]

        amount0, amount1 = pool.swap("bob", True, L, limit)

        assert amount0 > 0
        assert amount1 < 0
        assert pool.sqrt_price_x96 == limit
        assert pool.tick == -900
        assert pool.liquidity == L
        assert pool.liquidity == active_liquidity(pool)


class TestPriceLimit:

    def test_stops_exactly_at_limit(self, pool):
        pool.mint("alice", -600, 600, L)
        limit = get_sqrt_ratio_at_tick(-300)

        amount0, amount1 = pool.swap("bob", True, 10 ** 20, limit)

        assert pool.sqrt_price_x96 == limit
        assert pool.tick == -300
        assert 0 < amount0 < 10 ** 20
        assert amount1 < 0
        assert pool.liquidity == L

    def test_stops_on_crossed_boundary_moving_down(self, three_ranges):
        """ending exactly on a crossed lower-side boundary leaves the tick one below it"""
        pool = three_ranges
        limit = get_sqrt_ratio_at_tick(-600)

        pool.swap("bob", True, 10 ** 20, limit)

        assert pool.sqrt_price_x96 == limit
        assert pool.tick == -601
        assert pool.liquidity == L
        assert pool.liquidity == active_liquidity(pool)

    def test_limit_on_wrong_side(self, pool):
        pool.mint("alice", -600, 600, L)
        price = pool.sqrt_price_x96
        with pytest.raises(PriceLimitError):
            pool.swap("bob", True, 10 ** 15, price)
        with pytest.raises(PriceLimitError):
            pool.swap("bob", True, 10 ** 15, price + 1)
        with pytest.raises(PriceLimitError):
            pool.swap("bob", False, 10 ** 15, price)
        with pytest.raises(PriceLimitError):
            pool.swap("bob", False, 10 ** 15, price - 1)

    def test_limit_outside_domain(self, pool):
        with pytest.raises(PriceLimitError):
            pool.swap("bob", True, 10 ** 15, MIN_SQRT_RATIO)
        with pytest.raises(PriceLimitError):
            pool.swap("bob", False, 10 ** 15, MAX_SQRT_RATIO)

    def test_zero_amount(self, pool):
        with pytest.raises(AmountZero):
            pool.swap("bob", True, 0, MIN_SQRT_RATIO + 1)
        with pytest.raises(AmountZero):
            pool.quote(True, 0, MIN_SQRT_RATIO + 1)


class TestExactOutput:

    def test_receives_exact_amount(self, pool, ledger):
        pool.mint("alice", -600, 600, L)

        amount0, amount1 = pool.swap("bob", True, -(10 ** 15), MIN_SQRT_RATIO + 1)

        assert amount1 == -(10 ** 15)
        assert amount0 > 10 ** 15
        assert ledger.balance_of("bob", TOKEN1) == FUNDING + 10 ** 15
        assert ledger.balance_of("bob", TOKEN0) == FUNDING - amount0

    def test_token0_out(self, pool):
        pool.mint("alice", -600, 600, L)

        amount0, amount1 = pool.swap("bob", False, -(10 ** 15), MAX_SQRT_RATIO - 1)

        assert amount0 == -(10 ** 15)
        assert amount1 > 10 ** 15


class TestSettlement:

    def test_balances_follow_amounts(self, pool, ledger):
        pool.mint("alice", -600, 600, L)
        pool_token0 = ledger.balance_of(pool.address, TOKEN0)
        pool_token1 = ledger.balance_of(pool.address, TOKEN1)

        amount0, amount1 = pool.swap("bob", True, 10 ** 15, MIN_SQRT_RATIO + 1)

        assert amount0 == 10 ** 15
        assert ledger.balance_of("bob", TOKEN0) == FUNDING - amount0
        assert ledger.balance_of("bob", TOKEN1) == FUNDING - amount1
        assert ledger.balance_of(pool.address, TOKEN0) == pool_token0 + amount0
        assert ledger.balance_of(pool.address, TOKEN1) == pool_token1 + amount1

    def test_recipient_and_payer(self, pool, ledger):
        pool.mint("alice", -600, 600, L)

        amount0, amount1 = pool.swap("carol", True, 10 ** 15, MIN_SQRT_RATIO + 1, payer="bob")

        assert ledger.balance_of("bob", TOKEN0) == FUNDING - amount0
        assert ledger.balance_of("bob", TOKEN1) == FUNDING
        assert ledger.balance_of("carol", TOKEN1) == FUNDING - amount1

    def test_unpaid_input_rolls_back(self, pool, ledger):
        """the output already sent is taken back when the input cannot be pulled"""
        pool.mint("alice", -600, 600, L)
        state = pool.state
        pool_token1 = ledger.balance_of(pool.address, TOKEN1)

        with pytest.raises(InsufficientBalance):
            pool.swap("eve", True, 10 ** 15, MIN_SQRT_RATIO + 1)

        assert pool.state == state
        assert ledger.balance_of("eve", TOKEN1) == 0
        assert ledger.balance_of(pool.address, TOKEN1) == pool_token1
        assert not pool.locked


class TestQuote:

    def test_quote_matches_swap(self, three_ranges):
        pool = three_ranges
        state = pool.state
        ticks = pool.ticks

        result = pool.quote(False, 3 * 10 ** 16, MAX_SQRT_RATIO - 1)

        assert pool.state == state
        assert pool.ticks == ticks

        amounts = pool.swap("bob", False, 3 * 10 ** 16, MAX_SQRT_RATIO - 1)
        assert amounts == (result.amount0, result.amount1)
        assert pool.sqrt_price_x96 == result.sqrt_price_x96
        assert pool.tick == result.tick


class TestFees:

    def test_fee_growth_on_input_token(self, pool):
        pool.mint("alice", -600, 600, L)

        pool.swap("bob", True, 10 ** 16, MIN_SQRT_RATIO + 1)
        assert pool.fee_growth_global_0_x128 > 0
        assert pool.fee_growth_global_1_x128 == 0

        pool.swap("bob", False, 10 ** 16, MAX_SQRT_RATIO - 1)
        assert pool.fee_growth_global_1_x128 > 0

    def test_fees_accrue_to_position(self, pool, ledger):
        pool.mint("alice", -600, 600, L)
        pool.swap("bob", True, 10 ** 16, MIN_SQRT_RATIO + 1)

        assert pool.burn("alice", -600, 600, 0) == (0, 0)
        position = pool.get_position("alice", -600, 600)
        # 0.3% of the input
        assert abs(position.tokens_owed_0 - 3 * 10 ** 13) <= 2
        assert position.tokens_owed_1 == 0

        before = ledger.balance_of("alice", TOKEN0)
        collected0, collected1 = pool.collect("alice", "alice", -600, 600, UINT128_MAX, UINT128_MAX)
        assert collected0 == position.tokens_owed_0
        assert collected1 == 0
        assert ledger.balance_of("alice", TOKEN0) == before + collected0

    def test_fees_split_by_liquidity(self, pool):
        pool.mint("alice", -600, 600, L)
        pool.mint("carol", -600, 600, 3 * L)
        pool.swap("bob", True, 10 ** 16, MIN_SQRT_RATIO + 1)

        pool.burn("alice", -600, 600, 0)
        pool.burn("carol", -600, 600, 0)
        owed_alice = pool.get_position("alice", -600, 600).tokens_owed_0
        owed_carol = pool.get_position("carol", -600, 600).tokens_owed_0

        assert owed_alice > 0
        assert abs(owed_carol - 3 * owed_alice) <= 3

    def test_no_fees_out_of_range(self, pool):
        pool.mint("alice", -600, 600, L)
        pool.mint("carol", 600, 1200, L)
        pool.swap("bob", True, 10 ** 16, MIN_SQRT_RATIO + 1)

        pool.burn("carol", 600, 1200, 0)
        position = pool.get_position("carol", 600, 1200)
        assert position.tokens_owed_0 == 0
        assert position.tokens_owed_1 == 0

    def test_fees_after_crossing(self, three_ranges):
        """fees are only earned while the range is active"""
        pool = three_ranges
        pool.swap("bob", False, 3 * 10 ** 16, MAX_SQRT_RATIO - 1)

        pool.burn("alice", -1200, -600, 0)
        pool.burn("alice", -300, 300, 0)
        pool.burn("alice", 600, 1200, 0)

        assert pool.get_position("alice", -1200, -600).tokens_owed_1 == 0
        assert pool.get_position("alice", -300, 300).tokens_owed_1 > 0
        assert pool.get_position("alice", 600, 1200).tokens_owed_1 > 0
        assert pool.get_position("alice", -300, 300).tokens_owed_0 == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
