#!/usr/bin/env python3
"""
Simulate - run a YAML scenario against a fresh pool

Usage:
    python -m clamm.scripts.simulate scenario.yaml
    python -m clamm.scripts.simulate scenario.yaml --decimals 18,6 --log-level DEBUG

Scenario format:
    pool: {token0: DAI, token1: WETH, fee: 3000, tick_spacing: 60}
    initial_tick: 0
    balances:
      alice: {DAI: 1000000000000000000000, WETH: 1000000000000000000000}
    actions:
      - mint: {owner: alice, tick_lower: -600, tick_upper: 600, liquidity: 1000000000000000000}
      - mint: {owner: alice, tick_lower: 600, tick_upper: 1200, amount0: 1000000000000000000}
      - swap: {account: alice, zero_for_one: true, amount: 1000000000000000, limit_tick: -600}
      - burn: {owner: alice, tick_lower: -600, tick_upper: 600, liquidity: 1000000000000000000}
      - collect: {owner: alice, tick_lower: -600, tick_upper: 600}
"""

import argparse
from typing import Any, Dict, List, Tuple

import yaml

from clamm.config import PoolParams, configure_logging
from clamm.constants import MIN_SQRT_RATIO, MAX_SQRT_RATIO, UINT128_MAX
from clamm.core import InMemoryLedger, Pool
from clamm.exceptions import PoolError
from clamm.math.liquidity_math import get_liquidity_for_amounts
from clamm.math.tick_math import get_sqrt_ratio_at_tick


def _swap_limit(fields: Dict[str, Any]) -> int:
    if "limit_tick" in fields:
        return get_sqrt_ratio_at_tick(int(fields["limit_tick"]))
    return MIN_SQRT_RATIO + 1 if fields["zero_for_one"] else MAX_SQRT_RATIO - 1


def _mint_liquidity(pool: Pool, fields: Dict[str, Any]) -> int:
    """Explicit liquidity, or the most that the amount0/amount1 budgets buy"""
    if "liquidity" in fields:
        return int(fields["liquidity"])
    return get_liquidity_for_amounts(
        pool.sqrt_price_x96,
        get_sqrt_ratio_at_tick(fields["tick_lower"]),
        get_sqrt_ratio_at_tick(fields["tick_upper"]),
        int(fields.get("amount0", 0)),
        int(fields.get("amount1", 0)),
    )


def _run_action(pool: Pool, name: str, fields: Dict[str, Any]) -> Tuple[int, int]:
    if name == "mint":
        return pool.mint(fields["owner"], fields["tick_lower"], fields["tick_upper"], _mint_liquidity(pool, fields))
    if name == "burn":
        return pool.burn(fields["owner"], fields["tick_lower"], fields["tick_upper"], int(fields["liquidity"]))
    if name == "collect":
        return pool.collect(
            fields["owner"], fields.get("recipient", fields["owner"]),
            fields["tick_lower"], fields["tick_upper"],
            int(fields.get("amount0", UINT128_MAX)), int(fields.get("amount1", UINT128_MAX)),
        )
    if name == "swap":
        return pool.swap(
            fields["account"], bool(fields["zero_for_one"]), int(fields["amount"]), _swap_limit(fields)
        )
    raise ValueError(f"unknown action: {name}")


def run_scenario(scenario: Dict[str, Any]) -> Tuple[Pool, InMemoryLedger, List[Dict[str, Any]]]:
    """Build a pool from a scenario and apply its actions in order

    Failed actions are recorded with their error and do not stop the run.
    """
    params = PoolParams(**scenario["pool"])
    ledger = InMemoryLedger()
    for account, balances in (scenario.get("balances") or {}).items():
        for token, amount in balances.items():
            ledger.mint(account, token, int(amount))

    pool = Pool.from_params(params, ledger)
    pool.initialize(get_sqrt_ratio_at_tick(int(scenario.get("initial_tick", 0))))

    results = []
    for action in scenario.get("actions") or []:
        (name, fields), = action.items()
        try:
            amount0, amount1 = _run_action(pool, name, fields)
            results.append({"action": name, "amount0": amount0, "amount1": amount1,
                            "tick": pool.tick, "liquidity": pool.liquidity, "error": None})
        except PoolError as e:
            results.append({"action": name, "amount0": 0, "amount1": 0,
                            "tick": pool.tick, "liquidity": pool.liquidity, "error": str(e)})
    return pool, ledger, results


def print_results(pool: Pool, results: List[Dict[str, Any]], decimals: Tuple[int, int]) -> None:
    print("=" * 70)
    print(f"{pool.token0}/{pool.token1}  fee={pool.fee}  spacing={pool.tick_spacing}")
    print("=" * 70)
    for i, r in enumerate(results, 1):
        status = r["error"] or "ok"
        print(f"{i:>3}. {r['action']:<8} amount0={r['amount0']:>+28} amount1={r['amount1']:>+28} "
              f"tick={r['tick']:>8}  {status}")
    print("-" * 70)
    print(f"final tick={pool.tick} sqrtPriceX96={pool.sqrt_price_x96} liquidity={pool.liquidity}")
    print()
    table = pool.liquidity_distribution(*decimals)
    print(table.to_string(index=False) if not table.empty else "(no initialized ticks)")
    print("=" * 70)


def main():
    parser = argparse.ArgumentParser(
        description="Run a pool scenario from a YAML file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("scenario", type=str, help="scenario YAML path")
    parser.add_argument("--decimals", type=str, default="18,18", help="token0,token1 decimals for prices")
    parser.add_argument("--log-level", type=str, default=None, help="logging level (default: CLAMM_LOG_LEVEL)")
    args = parser.parse_args()

    configure_logging(args.log_level)

    with open(args.scenario) as f:
        scenario = yaml.safe_load(f)

    decimals = tuple(int(d.strip()) for d in args.decimals.split(","))
    pool, _, results = run_scenario(scenario)
    print_results(pool, results, decimals)


if __name__ == "__main__":
    main()
