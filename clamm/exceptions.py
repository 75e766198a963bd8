"""
Pool errors

Every failed pool call raises one of these and leaves pool state untouched.
Each class carries a short ``code`` matching the on-chain revert reason.
"""


class PoolError(Exception):
    """Base class for all pool failures"""
    code = "POOL"

    def __init__(self, message: str = ""):
        super().__init__(message or self.code)
        self.message = message or self.code

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class AlreadyInitialized(PoolError):
    code = "AI"


class NotInitialized(PoolError):
    code = "NI"


class ReentrantCall(PoolError):
    code = "LOK"


class TickOrder(PoolError):
    code = "TLU"


class Bounds(PoolError):
    """Price/tick codec domain violation"""
    code = "R"


class TickBounds(Bounds):
    code = "T"


class PriceBounds(Bounds):
    code = "R"


class MathError(Bounds):
    """Fixed-point result does not fit its declared width"""
    code = "MATH"


class AmountZero(PoolError):
    code = "AS"


class NoLiquidity(AmountZero):
    """Zero-delta update of a position that holds no liquidity"""
    code = "NP"


class PriceLimitError(PoolError):
    code = "SPL"


class SpacingError(PoolError):
    code = "TS"


class LiquidityCapExceeded(PoolError):
    code = "LO"


class LiquidityUnderflow(PoolError):
    code = "LS"


class LiquidityOverflow(PoolError):
    code = "LA"


class TransferError(PoolError):
    """The value-transfer collaborator rejected a movement"""
    code = "TF"


class InsufficientBalance(TransferError):
    code = "STF"
