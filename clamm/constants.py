"""
clamm constants

Fixed-point encodings and domain bounds shared by the math and core layers:
- Q96: sqrt price encoding (2^96)
- Q128: fee growth encoding (2^128)
- FEE_TIERS: supported fee tiers (hundredths of a basis point)
- TICK_SPACINGS: tick spacing per fee tier
"""

from typing import Dict

# Fixed-point encodings
Q96: int = 2 ** 96
Q128: int = 2 ** 128
Q192: int = 2 ** 192
RESOLUTION: int = 96

# Fee tiers in pips (1e-6)
# 500 = 0.05%, 3000 = 0.30%, 10000 = 1.00%
FEE_TIERS: Dict[int, str] = {
    100: "0.01%",
    500: "0.05%",
    3000: "0.30%",
    10000: "1.00%",
}
FEE_DENOMINATOR: int = 1_000_000

TICK_SPACINGS: Dict[int, int] = {
    100: 1,
    500: 10,
    3000: 60,
    10000: 200,
}

# Tick domain, price at tick t is 1.0001^t
MIN_TICK: int = -887272
MAX_TICK: int = 887272
MAX_TICK_SPACING: int = 16384

# sqrt price bounds, equal to get_sqrt_ratio_at_tick(MIN_TICK / MAX_TICK)
MIN_SQRT_RATIO: int = 4295128739
MAX_SQRT_RATIO: int = 1461446703485210103287273052203988822378723970342

UINT128_MAX: int = 2 ** 128 - 1
UINT160_MAX: int = 2 ** 160 - 1
UINT256_MAX: int = 2 ** 256 - 1
INT128_MIN: int = -(2 ** 127)
INT128_MAX: int = 2 ** 127 - 1
INT256_MIN: int = -(2 ** 255)
INT256_MAX: int = 2 ** 255 - 1
