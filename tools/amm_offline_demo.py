#!/usr/bin/env python3

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List

import yaml

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from xyamm.core.controller import PoolController
from xyamm.core.settings import load_settings
from xyamm.integration.custody import InMemoryCustody
from xyamm.integration.operations import execute, result_to_dict


MINT_X = "0x" + "11" * 32
MINT_Y = "0x" + "22" * 32
ALICE = "alice"
BOB = "bob"


def _default_script() -> Dict[str, Any]:
    pool = {"mint_x": MINT_X, "mint_y": MINT_Y, "seed": 7}
    return {
        "fund": [
            [ALICE, MINT_X, 100_000],
            [ALICE, MINT_Y, 100_000],
            [BOB, MINT_X, 50_000],
        ],
        "ops": [
            {"op": "initialize", **pool, "fee_bps": 500},
            {"op": "deposit", **pool, "user": ALICE, "max_x": 100_000, "max_y": 100_000, "min_lp_out": 0},
            {"op": "swap", **pool, "user": BOB, "amount_in": 50_000, "min_amount_out": 1, "x_to_y": True},
            {"op": "withdraw", **pool, "user": ALICE, "lp_amount": 100_000, "min_x_out": 0, "min_y_out": 0},
        ],
    }


def _load_script(path: Path) -> Dict[str, Any]:
    obj = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(obj, dict):
        raise ValueError(f"script must be a mapping: {path}")
    return obj


def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Run pool operations against an in-memory engine.")
    ap.add_argument("--script", type=Path, default=None, help="YAML file with `fund` and `ops` lists")
    ap.add_argument("--settings", type=Path, default=None, help="YAML settings layered over the defaults")
    args = ap.parse_args(argv)

    settings = load_settings(args.settings)
    logging.basicConfig(level=settings.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    script = _load_script(args.script) if args.script is not None else _default_script()

    custody = InMemoryCustody()
    events: List[Any] = []
    controller = PoolController(custody=custody, settings=settings, on_event=events.append)

    for owner, asset, amount in script.get("fund", []):
        custody.fund(owner, asset, int(amount))

    failures = 0
    for i, op in enumerate(script.get("ops", [])):
        res = execute(controller, op)
        print(f"[amm-demo] op[{i}] {op.get('op')}: {result_to_dict(res)}")
        if not res.ok:
            failures += 1

    for event in events:
        print(f"[amm-demo] event {type(event).__name__}: {event}")

    for pool in controller.registry.pools():
        print(
            f"[amm-demo] pool {pool.accounts.pool}: reserves=({pool.reserve_x}, {pool.reserve_y}) "
            f"lp_supply={pool.lp_supply} k={pool.get_constant_product()}"
        )

    if failures:
        print(f"[amm-demo] {failures} operation(s) rejected")
        return 1
    print("[amm-demo] OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
