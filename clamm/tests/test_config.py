"""
Configuration tests
"""

import pytest
from pydantic import ValidationError

from ..config import PoolParams, Settings, load_pool_params, settings


class TestSettings:

    def test_tick_spacing_for_fee_tiers(self):
        assert settings.get_tick_spacing(100) == 1
        assert settings.get_tick_spacing(500) == 10
        assert settings.get_tick_spacing(3000) == 60
        assert settings.get_tick_spacing(10000) == 200

    def test_unknown_fee_uses_default_spacing(self):
        assert settings.get_tick_spacing(1234) == Settings.DEFAULT_TICK_SPACING


class TestPoolParams:

    def test_valid(self):
        params = PoolParams(token0="DAI", token1="WETH", fee=3000, tick_spacing=60)
        assert params.token0 == "DAI"
        assert params.tick_spacing == 60

    def test_derived_tick_spacing(self):
        assert PoolParams(token0="DAI", token1="WETH", fee=500).tick_spacing == 10

    def test_default_fee(self):
        assert PoolParams(token0="DAI", token1="WETH").fee == settings.DEFAULT_FEE

    def test_token_order(self):
        with pytest.raises(ValidationError):
            PoolParams(token0="WETH", token1="DAI")
        with pytest.raises(ValidationError):
            PoolParams(token0="DAI", token1="DAI")

    def test_fee_range(self):
        with pytest.raises(ValidationError):
            PoolParams(token0="DAI", token1="WETH", fee=1_000_000)
        with pytest.raises(ValidationError):
            PoolParams(token0="DAI", token1="WETH", fee=-1)

    def test_tick_spacing_range(self):
        with pytest.raises(ValidationError):
            PoolParams(token0="DAI", token1="WETH", tick_spacing=0)
        with pytest.raises(ValidationError):
            PoolParams(token0="DAI", token1="WETH", tick_spacing=16385)

    def test_schema_example_is_valid(self):
        example = PoolParams.model_json_schema()["example"]
        assert PoolParams(**example).tick_spacing == 60

    def test_empty_token(self):
        with pytest.raises(ValidationError):
            PoolParams(token0="", token1="WETH")


class TestLoadPoolParams:

    def test_top_level(self, tmp_path):
        path = tmp_path / "pool.yaml"
        path.write_text("token0: DAI\ntoken1: WETH\nfee: 10000\n")
        params = load_pool_params(path)
        assert params.fee == 10000
        assert params.tick_spacing == 200

    def test_nested(self, tmp_path):
        path = tmp_path / "scenario.yaml"
        path.write_text("pool:\n  token0: DAI\n  token1: WETH\n  fee: 500\n  tick_spacing: 20\nactions: []\n")
        params = load_pool_params(path)
        assert params.tick_spacing == 20


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
