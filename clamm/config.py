"""
Configuration settings for the pool engine

Loads environment variables and provides engine defaults, plus the validated
pool construction parameters.
"""
import logging
import os
from pathlib import Path
from typing import Optional, Union

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, model_validator

from .constants import FEE_DENOMINATOR, MAX_TICK_SPACING, TICK_SPACINGS

# Load environment variables from .env file
load_dotenv()


class Settings:
    """Engine settings"""

    # Pool defaults
    DEFAULT_FEE: int = int(os.getenv("CLAMM_DEFAULT_FEE", 3000))
    DEFAULT_TICK_SPACING: int = int(
        os.getenv("CLAMM_DEFAULT_TICK_SPACING", TICK_SPACINGS.get(DEFAULT_FEE, 60))
    )

    # Logging
    LOG_LEVEL: str = os.getenv("CLAMM_LOG_LEVEL", "INFO").upper()
    LOG_SWAP_STEPS: bool = os.getenv("CLAMM_LOG_SWAP_STEPS", "False").lower() == "true"

    def get_tick_spacing(self, fee: int) -> int:
        """Get tick spacing for a fee tier, falling back to the default"""
        return TICK_SPACINGS.get(fee, self.DEFAULT_TICK_SPACING)


# Create global settings instance
settings = Settings()


def configure_logging(level: Optional[str] = None) -> None:
    """Install a basic stderr handler for scripts"""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


class PoolParams(BaseModel):
    """Construction parameters of a single pool"""
    token0: str = Field(..., min_length=1, description="Token0 identifier")
    token1: str = Field(..., min_length=1, description="Token1 identifier")
    fee: int = Field(default=settings.DEFAULT_FEE, ge=0, lt=FEE_DENOMINATOR,
                     description="Fee in hundredths of a basis point")
    tick_spacing: Optional[int] = Field(default=None, ge=1, le=MAX_TICK_SPACING,
                                        description="Tick spacing, derived from the fee tier if omitted")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "token0": "DAI",
                "token1": "WETH",
                "fee": 3000,
                "tick_spacing": 60
            }
        }
    )

    @model_validator(mode="after")
    def _check_tokens(self) -> "PoolParams":
        if not self.token0 < self.token1:
            raise ValueError("token0 must sort strictly before token1")
        if self.tick_spacing is None:
            self.tick_spacing = settings.get_tick_spacing(self.fee)
        return self


def load_pool_params(path: Union[str, Path]) -> PoolParams:
    """Load pool parameters from a YAML file

    The file holds either the parameters at top level or under a ``pool`` key.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    return PoolParams(**data.get("pool", data))
