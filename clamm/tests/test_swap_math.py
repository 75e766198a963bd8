"""
Swap Math tests

compute_swap_step: price movement and amounts of one step
"""

import math
import random

import pytest

from ..exceptions import MathError
from ..math.swap_math import compute_swap_step
from ..math.tick_math import get_sqrt_ratio_at_tick, MIN_SQRT_RATIO, MAX_SQRT_RATIO


def encode_price_sqrt(reserve1: int, reserve0: int) -> int:
    return math.isqrt(reserve1 * 2 ** 192 // reserve0)


class TestExactInput:
    """Positive amount_remaining"""

    def test_capped_at_target_one_for_zero(self):
        price = encode_price_sqrt(1, 1)
        target = encode_price_sqrt(101, 100)
        amount = 10 ** 18

        sqrt_q, amount_in, amount_out, fee = compute_swap_step(price, target, 2 * 10 ** 18, amount, 600)

        assert sqrt_q == target
        assert amount_in == 9975124224178055
        assert fee == 5988667735148
        assert amount_out == 9925619580021728
        assert amount_in + fee < amount

    def test_fully_spent_one_for_zero(self):
        price = encode_price_sqrt(1, 1)
        target = encode_price_sqrt(1000, 100)
        amount = 10 ** 18

        sqrt_q, amount_in, amount_out, fee = compute_swap_step(price, target, 2 * 10 ** 18, amount, 600)

        assert amount_in == 999400000000000000
        assert fee == 600000000000000
        assert amount_in + fee == amount
        assert sqrt_q < target
        assert amount_out > 0

    def test_entire_input_taken_as_fee(self):
        """a remainder too small to move the price is charged as fee"""
        sqrt_q, amount_in, amount_out, fee = compute_swap_step(
            2413, 79887613182836312, 1985041575832132834610021537970, 10, 1872
        )
        assert (sqrt_q, amount_in, amount_out, fee) == (2413, 0, 0, 10)

    def test_zero_for_one_direction_from_prices(self):
        price = encode_price_sqrt(1, 1)
        target = encode_price_sqrt(99, 100)

        sqrt_q, amount_in, amount_out, fee = compute_swap_step(price, target, 2 * 10 ** 18, 10 ** 15, 3000)

        assert target <= sqrt_q < price
        assert amount_in + fee == 10 ** 15

    def test_budget_is_never_exceeded(self):
        rng = random.Random(1)
        for _ in range(200):
            price = rng.randrange(MIN_SQRT_RATIO, MAX_SQRT_RATIO)
            target = rng.randrange(MIN_SQRT_RATIO, MAX_SQRT_RATIO)
            liquidity = rng.randrange(1, 2 ** 100)
            amount = rng.randrange(1, 2 ** 100)
            fee_pips = rng.randrange(0, 10000)

            sqrt_q, amount_in, amount_out, fee = compute_swap_step(price, target, liquidity, amount, fee_pips)

            assert amount_in + fee <= amount
            if sqrt_q != target:
                assert amount_in + fee == amount
            if price >= target:
                assert target <= sqrt_q <= price
            else:
                assert price <= sqrt_q <= target


class TestExactOutput:
    """Negative amount_remaining"""

    def test_capped_at_target_one_for_zero(self):
        price = encode_price_sqrt(1, 1)
        target = encode_price_sqrt(101, 100)

        sqrt_q, amount_in, amount_out, fee = compute_swap_step(price, target, 2 * 10 ** 18, -(10 ** 18), 600)

        assert sqrt_q == target
        assert amount_out < 10 ** 18
        assert amount_in > 0
        assert fee > 0

    def test_fully_received_one_for_zero(self):
        price = encode_price_sqrt(1, 1)
        target = encode_price_sqrt(10000, 100)

        sqrt_q, amount_in, amount_out, fee = compute_swap_step(price, target, 2 * 10 ** 18, -(10 ** 18), 600)

        assert amount_out == 10 ** 18
        assert sqrt_q < target

    def test_output_capped_at_request(self):
        rng = random.Random(2)
        for _ in range(200):
            price = rng.randrange(MIN_SQRT_RATIO, MAX_SQRT_RATIO)
            target = rng.randrange(MIN_SQRT_RATIO, MAX_SQRT_RATIO)
            liquidity = rng.randrange(1, 2 ** 100)
            amount = rng.randrange(1, 2 ** 60)
            try:
                sqrt_q, amount_in, amount_out, fee = compute_swap_step(price, target, liquidity, -amount, 3000)
            except MathError:
                # demand larger than the virtual reserves
                continue
            assert amount_out <= amount


class TestZeroLiquidity:

    def test_moves_to_target_for_free(self):
        price = get_sqrt_ratio_at_tick(0)
        target = get_sqrt_ratio_at_tick(180)
        assert compute_swap_step(price, target, 0, 10 ** 18, 3000) == (target, 0, 0, 0)
        assert compute_swap_step(target, price, 0, -(10 ** 18), 3000) == (price, 0, 0, 0)


class TestFeeBounds:

    def test_fee_out_of_range(self):
        with pytest.raises(MathError):
            compute_swap_step(encode_price_sqrt(1, 1), encode_price_sqrt(2, 1), 10 ** 18, 10 ** 18, 1_000_000)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
