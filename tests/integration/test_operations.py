# [TESTER] v1

from __future__ import annotations

import dataclasses
import logging

import pytest

from xyamm.core.controller import DepositResult, PoolController, SwapResult
from xyamm.integration.custody import InMemoryCustody
from xyamm.integration.operations import MALFORMED, execute, execute_all, parse_accounts, result_to_dict

MINT_X = "0x" + "11" * 32
MINT_Y = "0x" + "22" * 32
POOL = {"mint_x": MINT_X, "mint_y": MINT_Y, "seed": 7}


def _controller() -> tuple[PoolController, InMemoryCustody]:
    custody = InMemoryCustody()
    custody.fund("alice", MINT_X, 100_000)
    custody.fund("alice", MINT_Y, 100_000)
    custody.fund("bob", MINT_X, 50_000)
    return PoolController(custody=custody), custody


def test_execute_runs_the_full_lifecycle() -> None:
    ctl, custody = _controller()
    results = execute_all(
        ctl,
        [
            {"op": "initialize", **POOL, "fee_bps": 500},
            {"op": "deposit", **POOL, "user": "alice", "max_x": 100_000, "max_y": 100_000},
            {"op": "swap", **POOL, "user": "bob", "amount_in": 50_000, "min_amount_out": 1, "x_to_y": True},
            {"op": "withdraw", **POOL, "user": "alice", "lp_amount": 100_000},
        ],
    )
    assert [r.ok for r in results] == [True, True, True, True]
    assert results[1].value == DepositResult(used_x=100_000, used_y=100_000, lp_minted=100_000)
    assert isinstance(results[2].value, SwapResult)
    assert results[2].value.amount_out == 32_203
    assert custody.balance_of("alice", MINT_X) == 150_000
    assert custody.balance_of("alice", MINT_Y) == 67_797


def test_engine_failures_are_tagged_not_raised(caplog: pytest.LogCaptureFixture) -> None:
    ctl, _ = _controller()
    assert execute(ctl, {"op": "initialize", **POOL, "fee_bps": 30}).ok

    with caplog.at_level(logging.WARNING, logger="xyamm.integration.operations"):
        dup = execute(ctl, {"op": "initialize", **POOL, "fee_bps": 30})
    assert not dup.ok
    assert dup.code == "PoolAlreadyExists"
    assert "PoolAlreadyExists" in caplog.text

    empty = execute(ctl, {"op": "swap", **POOL, "user": "bob", "amount_in": 10, "x_to_y": True})
    assert (empty.ok, empty.code) == (False, "PoolEmpty")

    missing = execute(ctl, {"op": "swap", **POOL, "seed": 8, "user": "bob", "amount_in": 10, "x_to_y": True})
    assert missing.code == "PoolNotFound"

    fee = execute(ctl, {"op": "initialize", **POOL, "seed": 9, "fee_bps": 10_001})
    assert fee.code == "InvalidFee"


@pytest.mark.parametrize(
    "op",
    [
        {"op": "teleport"},
        {"mint_x": MINT_X},
        {"op": "initialize", **POOL},
        {"op": "swap", **POOL, "user": "bob", "amount_in": True, "x_to_y": True},
        {"op": "swap", **POOL, "user": "bob", "amount_in": 10, "x_to_y": 1},
        {"op": "deposit", **POOL, "user": "bob", "max_x": -1, "max_y": 1},
        {"op": "deposit", "mint_x": "0x12", "mint_y": MINT_Y, "seed": 7, "user": "bob", "max_x": 1, "max_y": 1},
    ],
)
def test_malformed_payloads(op: dict) -> None:
    ctl, _ = _controller()
    execute(ctl, {"op": "initialize", **POOL, "fee_bps": 30})
    res = execute(ctl, op)
    assert not res.ok
    assert res.code == MALFORMED


def test_non_mapping_payload() -> None:
    ctl, _ = _controller()
    res = execute(ctl, ["initialize"])  # type: ignore[arg-type]
    assert res.code == MALFORMED


def test_explicit_accounts_are_checked() -> None:
    ctl, _ = _controller()
    accounts = ctl.initialize(MINT_X, MINT_Y, 7, 30)
    asserted = dataclasses.asdict(accounts)
    assert parse_accounts(asserted) == accounts

    ok = execute(ctl, {"op": "deposit", "accounts": asserted, "user": "alice", "max_x": 5_000, "max_y": 5_000})
    assert ok.ok

    asserted["vault_y"] = asserted["vault_x"]
    bad = execute(ctl, {"op": "deposit", "accounts": asserted, "user": "alice", "max_x": 5_000, "max_y": 5_000})
    assert bad.code == "AccountMismatch"


def test_result_to_dict() -> None:
    ctl, _ = _controller()
    execute(ctl, {"op": "initialize", **POOL, "fee_bps": 30})
    ok = execute(ctl, {"op": "deposit", **POOL, "user": "alice", "max_x": 4_000, "max_y": 9_000})
    assert result_to_dict(ok) == {"ok": True, "value": {"used_x": 4_000, "used_y": 9_000, "lp_minted": 6_000}}
    bad = execute(ctl, {"op": "withdraw", **POOL, "user": "bob", "lp_amount": 1})
    assert result_to_dict(bad) == {"ok": False, "error": bad.error, "code": "InsufficientLpBalance"}


def test_custody_refusal_is_tagged() -> None:
    shared = InMemoryCustody()
    assert execute(PoolController(custody=shared), {"op": "initialize", **POOL, "fee_bps": 30}).ok

    other = PoolController(custody=shared)
    res = execute(other, {"op": "initialize", **POOL, "fee_bps": 30})
    assert (res.ok, res.code) == (False, "CustodyError")
    assert len(other.registry) == 0


def test_swapped_mint_in_asserted_accounts_is_a_mismatch() -> None:
    ctl, _ = _controller()
    accounts = ctl.initialize(MINT_X, MINT_Y, 7, 30)
    asserted = dataclasses.asdict(accounts)
    asserted["mint_x"] = "0x" + "33" * 32
    res = execute(ctl, {"op": "deposit", "accounts": asserted, "user": "alice", "max_x": 5_000, "max_y": 5_000})
    assert res.code == "AccountMismatch"
