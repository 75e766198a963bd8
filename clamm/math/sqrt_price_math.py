"""
Sqrt Price Math - amount deltas and price movement

Token amounts between two sqrt prices for a given liquidity, and the price
reached after adding or removing a token amount.

References:
- Uniswap V3 Core: contracts/libraries/SqrtPriceMath.sol
- Whitepaper Section 6.2.1: Concentrated Liquidity

Key formulas:
    Δx = L * (1/√P_a - 1/√P_b)
    Δy = L * (√P_b - √P_a)
"""

import math

from ..constants import Q96, RESOLUTION, UINT160_MAX, UINT256_MAX
from ..exceptions import MathError
from .full_math import (
    mul_div,
    mul_div_rounding_up,
    div_rounding_up,
    to_uint160,
    to_int256,
)


def get_next_sqrt_price_from_amount0_rounding_up(
    sqrt_price_x96: int,
    liquidity: int,
    amount: int,
    add: bool
) -> int:
    """Next sqrtPriceX96 after adding/removing amount0 (rounded up)

    Rounding up keeps the price from moving too far in either direction.

    Args:
        sqrt_price_x96: starting sqrtPriceX96
        liquidity: available liquidity
        amount: amount0 to add or remove
        add: True to add amount0, False to remove it

    Returns:
        new sqrtPriceX96
    """
    if amount == 0:
        return sqrt_price_x96

    numerator1 = liquidity << RESOLUTION
    product = amount * sqrt_price_x96

    if add:
        if product <= UINT256_MAX:
            denominator = numerator1 + product
            if denominator <= UINT256_MAX:
                return mul_div_rounding_up(numerator1, sqrt_price_x96, denominator)

        return div_rounding_up(numerator1, (numerator1 // sqrt_price_x96) + amount)

    if product > UINT256_MAX or numerator1 <= product:
        raise MathError("amount0 removal exceeds available reserves")
    denominator = numerator1 - product
    return to_uint160(mul_div_rounding_up(numerator1, sqrt_price_x96, denominator))


def get_next_sqrt_price_from_amount1_rounding_down(
    sqrt_price_x96: int,
    liquidity: int,
    amount: int,
    add: bool
) -> int:
    """Next sqrtPriceX96 after adding/removing amount1 (rounded down)

    Args:
        sqrt_price_x96: starting sqrtPriceX96
        liquidity: available liquidity
        amount: amount1 to add or remove
        add: True to add amount1, False to remove it

    Returns:
        new sqrtPriceX96
    """
    if add:
        if amount <= UINT160_MAX:
            quotient = (amount << RESOLUTION) // liquidity
        else:
            quotient = mul_div(amount, Q96, liquidity)
        return to_uint160(sqrt_price_x96 + quotient)

    if amount <= UINT160_MAX:
        quotient = div_rounding_up(amount << RESOLUTION, liquidity)
    else:
        quotient = mul_div_rounding_up(amount, Q96, liquidity)

    if sqrt_price_x96 <= quotient:
        raise MathError("amount1 removal exceeds available reserves")
    return sqrt_price_x96 - quotient


def get_next_sqrt_price_from_input(
    sqrt_price_x96: int,
    liquidity: int,
    amount_in: int,
    zero_for_one: bool
) -> int:
    """Price reached after swapping amount_in of the input token"""
    if sqrt_price_x96 <= 0 or liquidity <= 0:
        raise MathError("price and liquidity must be positive")

    if zero_for_one:
        return get_next_sqrt_price_from_amount0_rounding_up(sqrt_price_x96, liquidity, amount_in, True)
    return get_next_sqrt_price_from_amount1_rounding_down(sqrt_price_x96, liquidity, amount_in, True)


def get_next_sqrt_price_from_output(
    sqrt_price_x96: int,
    liquidity: int,
    amount_out: int,
    zero_for_one: bool
) -> int:
    """Price reached after taking amount_out of the output token"""
    if sqrt_price_x96 <= 0 or liquidity <= 0:
        raise MathError("price and liquidity must be positive")

    if zero_for_one:
        return get_next_sqrt_price_from_amount1_rounding_down(sqrt_price_x96, liquidity, amount_out, False)
    return get_next_sqrt_price_from_amount0_rounding_up(sqrt_price_x96, liquidity, amount_out, False)


def get_amount0_delta(
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    liquidity: int,
    round_up: bool = True
) -> int:
    """token0 amount between two prices

    Δx = L * (√P_b - √P_a) / (√P_a * √P_b)

    Args:
        sqrt_ratio_a_x96: one sqrtPriceX96 bound
        sqrt_ratio_b_x96: the other sqrtPriceX96 bound
        liquidity: liquidity magnitude
        round_up: True rounds up (pool receives), False rounds down (pool pays)

    Returns:
        amount0 in smallest units
    """
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96

    if sqrt_ratio_a_x96 <= 0:
        raise MathError("sqrt price must be positive")

    numerator1 = liquidity << RESOLUTION
    numerator2 = sqrt_ratio_b_x96 - sqrt_ratio_a_x96

    if round_up:
        return div_rounding_up(
            mul_div_rounding_up(numerator1, numerator2, sqrt_ratio_b_x96),
            sqrt_ratio_a_x96
        )
    return mul_div(numerator1, numerator2, sqrt_ratio_b_x96) // sqrt_ratio_a_x96


def get_amount1_delta(
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    liquidity: int,
    round_up: bool = True
) -> int:
    """token1 amount between two prices

    Δy = L * (√P_b - √P_a)
    """
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96

    if round_up:
        return mul_div_rounding_up(liquidity, sqrt_ratio_b_x96 - sqrt_ratio_a_x96, Q96)
    return mul_div(liquidity, sqrt_ratio_b_x96 - sqrt_ratio_a_x96, Q96)


def get_amount0_delta_signed(sqrt_ratio_a_x96: int, sqrt_ratio_b_x96: int, liquidity_delta: int) -> int:
    """Signed token0 delta: rounded up when adding liquidity, down and negated when removing"""
    if liquidity_delta < 0:
        return -to_int256(get_amount0_delta(sqrt_ratio_a_x96, sqrt_ratio_b_x96, -liquidity_delta, False))
    return to_int256(get_amount0_delta(sqrt_ratio_a_x96, sqrt_ratio_b_x96, liquidity_delta, True))


def get_amount1_delta_signed(sqrt_ratio_a_x96: int, sqrt_ratio_b_x96: int, liquidity_delta: int) -> int:
    """Signed token1 delta: rounded up when adding liquidity, down and negated when removing"""
    if liquidity_delta < 0:
        return -to_int256(get_amount1_delta(sqrt_ratio_a_x96, sqrt_ratio_b_x96, -liquidity_delta, False))
    return to_int256(get_amount1_delta(sqrt_ratio_a_x96, sqrt_ratio_b_x96, liquidity_delta, True))


def sqrt_price_x96_to_price(
    sqrt_price_x96: int,
    decimal0: int = 18,
    decimal1: int = 18
) -> float:
    """Convert sqrtPriceX96 to a human-readable price (token1 per token0)

    price = (sqrtPriceX96 / 2^96)^2 / 10^(decimal1 - decimal0)
    """
    sqrt_price = sqrt_price_x96 / Q96
    return sqrt_price ** 2 / (10 ** (decimal1 - decimal0))


def price_to_sqrt_price_x96(
    price: float,
    decimal0: int = 18,
    decimal1: int = 18
) -> int:
    """Convert a human-readable price to sqrtPriceX96

    sqrtPriceX96 = sqrt(price * 10^(decimal1 - decimal0)) * 2^96
    """
    if price <= 0:
        raise ValueError("price must be positive")

    adjusted_price = price * (10 ** (decimal1 - decimal0))
    return int(math.sqrt(adjusted_price) * Q96)
