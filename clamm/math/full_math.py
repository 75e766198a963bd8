"""
Full Math - wide multiply/divide primitives

Python ints are unbounded, so the 512-bit intermediate of the on-chain
FullMath is implicit. The result still has to fit 256 bits.

References:
- Uniswap V3 Core: contracts/libraries/FullMath.sol
- Uniswap V3 Core: contracts/libraries/SafeCast.sol
"""

from ..constants import (
    UINT128_MAX,
    UINT160_MAX,
    UINT256_MAX,
    INT128_MIN,
    INT128_MAX,
    INT256_MIN,
    INT256_MAX,
)
from ..exceptions import MathError


def mul_div(a: int, b: int, denominator: int) -> int:
    """floor(a * b / denominator)

    Args:
        a: multiplicand (uint256)
        b: multiplier (uint256)
        denominator: divisor, non-zero

    Returns:
        Floor of the full-precision quotient

    Raises:
        MathError: zero denominator or result wider than 256 bits
    """
    if denominator <= 0:
        raise MathError(f"mul_div: invalid denominator {denominator}")
    result = (a * b) // denominator
    if result > UINT256_MAX:
        raise MathError("mul_div: result overflows uint256")
    return result


def mul_div_rounding_up(a: int, b: int, denominator: int) -> int:
    """ceil(a * b / denominator)"""
    result = mul_div(a, b, denominator)
    if (a * b) % denominator > 0:
        if result >= UINT256_MAX:
            raise MathError("mul_div_rounding_up: result overflows uint256")
        result += 1
    return result


def div_rounding_up(numerator: int, denominator: int) -> int:
    """ceil(numerator / denominator)"""
    if denominator <= 0:
        raise MathError(f"div_rounding_up: invalid denominator {denominator}")
    result = numerator // denominator
    if numerator % denominator > 0:
        result += 1
    return result


def to_uint128(value: int) -> int:
    if not 0 <= value <= UINT128_MAX:
        raise MathError(f"value does not fit uint128: {value}")
    return value


def to_uint160(value: int) -> int:
    if not 0 <= value <= UINT160_MAX:
        raise MathError(f"value does not fit uint160: {value}")
    return value


def to_int128(value: int) -> int:
    if not INT128_MIN <= value <= INT128_MAX:
        raise MathError(f"value does not fit int128: {value}")
    return value


def to_int256(value: int) -> int:
    if not INT256_MIN <= value <= INT256_MAX:
        raise MathError(f"value does not fit int256: {value}")
    return value
