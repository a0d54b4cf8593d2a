# [TESTER] v1

from __future__ import annotations

import dataclasses
from typing import Any, List, Tuple

import pytest

from xyamm.core.controller import DepositResult, PoolController, WithdrawResult
from xyamm.core.events import LiquidityDeposited, LiquidityWithdrawn, PoolInitialized, Swapped
from xyamm.core.settings import AmmSettings
from xyamm.errors import (
    AccountMismatch,
    CustodyError,
    IdenticalMints,
    InsufficientFunds,
    InsufficientLpBalance,
    InvalidAmount,
    InvalidFee,
    PoolAlreadyExists,
    PoolEmpty,
    PoolLocked,
    PoolNotFound,
    SlippageExceeded,
)
from xyamm.integration.custody import InMemoryCustody
from xyamm.state.pools import PoolAccounts

MINT_X = "0x" + "11" * 32
MINT_Y = "0x" + "22" * 32
ALICE = "alice"
BOB = "bob"


def _setup(fee_bps: int = 500) -> Tuple[PoolController, InMemoryCustody, PoolAccounts, List[Any]]:
    custody = InMemoryCustody()
    events: List[Any] = []
    ctl = PoolController(custody=custody, settings=AmmSettings(), on_event=events.append)
    accounts = ctl.initialize(MINT_X, MINT_Y, 7, fee_bps)
    return ctl, custody, accounts, events


def _seeded(fee_bps: int = 500) -> Tuple[PoolController, InMemoryCustody, PoolAccounts, List[Any]]:
    ctl, custody, accounts, events = _setup(fee_bps)
    custody.fund(ALICE, MINT_X, 100_000)
    custody.fund(ALICE, MINT_Y, 100_000)
    ctl.deposit(accounts, ALICE, 100_000, 100_000, 0)
    return ctl, custody, accounts, events


def _snapshot(ctl: PoolController, custody: InMemoryCustody, accounts: PoolAccounts) -> Tuple[Any, ...]:
    pool = ctl.get_pool(accounts)
    return (
        pool.reserve_x,
        pool.reserve_y,
        pool.lp_supply,
        custody.balances.get_all_balances(),
        custody.supply_of(accounts.lp_mint),
    )


def _assert_vaults_match_reserves(ctl: PoolController, custody: InMemoryCustody, accounts: PoolAccounts) -> None:
    pool = ctl.get_pool(accounts)
    assert custody.balance_of(accounts.vault_x, accounts.mint_x) == pool.reserve_x
    assert custody.balance_of(accounts.vault_y, accounts.mint_y) == pool.reserve_y
    assert custody.supply_of(accounts.lp_mint) == pool.lp_supply


def test_deposit_swap_withdraw_round_trip() -> None:
    ctl, custody, accounts, events = _setup(fee_bps=500)
    custody.fund(ALICE, MINT_X, 100_000)
    custody.fund(ALICE, MINT_Y, 100_000)
    custody.fund(BOB, MINT_X, 50_000)

    dep = ctl.deposit(accounts, ALICE, 100_000, 100_000, 0)
    assert dep == DepositResult(used_x=100_000, used_y=100_000, lp_minted=100_000)
    assert custody.balance_of(ALICE, accounts.lp_mint) == 100_000
    _assert_vaults_match_reserves(ctl, custody, accounts)

    swap = ctl.swap(accounts, BOB, 50_000, 1, True)
    assert swap.amount_out == 32_203
    assert swap.fee == 2_500
    assert custody.balance_of(BOB, MINT_X) == 0
    assert custody.balance_of(BOB, MINT_Y) == 32_203
    pool = ctl.get_pool(accounts)
    assert (pool.reserve_x, pool.reserve_y) == (150_000, 67_797)
    assert pool.get_constant_product() >= 100_000 * 100_000
    _assert_vaults_match_reserves(ctl, custody, accounts)

    out = ctl.withdraw(accounts, ALICE, 100_000, 0, 0)
    assert out == WithdrawResult(out_x=150_000, out_y=67_797)
    pool = ctl.get_pool(accounts)
    assert (pool.reserve_x, pool.reserve_y, pool.lp_supply) == (0, 0, 0)
    assert custody.balance_of(ALICE, MINT_X) == 150_000
    assert custody.balance_of(ALICE, MINT_Y) == 67_797
    assert custody.balance_of(ALICE, accounts.lp_mint) == 0
    _assert_vaults_match_reserves(ctl, custody, accounts)

    assert [type(e) for e in events] == [PoolInitialized, LiquidityDeposited, Swapped, LiquidityWithdrawn]


def test_initialize_creates_empty_pool_and_lp_mint() -> None:
    ctl, custody, accounts, events = _setup(fee_bps=30)
    pool = ctl.get_pool(accounts)
    assert (pool.reserve_x, pool.reserve_y, pool.lp_supply) == (0, 0, 0)
    assert pool.fee_bps == 30
    assert pool.locked is False
    assert custody.supply_of(accounts.lp_mint) == 0
    assert custody.decimals_of(accounts.lp_mint) == 6
    assert events[0] == PoolInitialized(
        pool=accounts.pool,
        mint_x=MINT_X,
        mint_y=MINT_Y,
        seed=7,
        fee_bps=30,
        lp_mint=accounts.lp_mint,
        authority=None,
    )


def test_initialize_twice_is_rejected() -> None:
    ctl, _, _, _ = _setup()
    with pytest.raises(PoolAlreadyExists):
        ctl.initialize(MINT_X, MINT_Y, 7, 30)
    # Same key with a different fee is still the same pool.
    with pytest.raises(PoolAlreadyExists):
        ctl.initialize("11" * 32, MINT_Y, 7, 500)
    ctl.initialize(MINT_X, MINT_Y, 8, 30)
    assert len(ctl.registry) == 2


def test_initialize_validation_registers_nothing() -> None:
    ctl = PoolController()
    with pytest.raises(IdenticalMints):
        ctl.initialize(MINT_X, MINT_X, 1, 30)
    with pytest.raises(InvalidFee):
        ctl.initialize(MINT_X, MINT_Y, 1, 10_001)
    assert len(ctl.registry) == 0


def test_authority_is_recorded_but_not_required() -> None:
    ctl = PoolController()
    authority = "0x" + "aa" * 32
    accounts = ctl.initialize(MINT_X, MINT_Y, 1, 30, authority=authority)
    assert ctl.get_pool(accounts).authority == authority

    ctl.custody.fund(BOB, MINT_X, 10_000)  # type: ignore[attr-defined]
    ctl.custody.fund(BOB, MINT_Y, 10_000)  # type: ignore[attr-defined]
    assert ctl.deposit(accounts, BOB, 10_000, 10_000, 0).lp_minted == 10_000


def test_unknown_pool_is_not_found() -> None:
    ctl, _, _, _ = _setup()
    other = ctl.accounts_for(MINT_X, MINT_Y, 99)
    with pytest.raises(PoolNotFound):
        ctl.swap(other, BOB, 10, 0, True)


@pytest.mark.parametrize(
    "field", ["pool", "mint_x", "mint_y", "vault_x", "vault_y", "lp_mint", "seed", "config_bump", "lp_bump"]
)
def test_mismatched_accounts_are_rejected_without_side_effects(field: str) -> None:
    ctl, custody, accounts, _ = _seeded()
    custody.fund(BOB, MINT_X, 1_000)
    before = _snapshot(ctl, custody, accounts)

    if field == "seed":
        bad = dataclasses.replace(accounts, seed=accounts.seed + 1)
    elif field in ("config_bump", "lp_bump"):
        bad = dataclasses.replace(accounts, **{field: (getattr(accounts, field) + 1) % 256})
    elif field == "vault_x":
        bad = dataclasses.replace(accounts, vault_x=accounts.vault_y)
    elif field in ("mint_x", "mint_y"):
        bad = dataclasses.replace(accounts, **{field: "0x" + "33" * 32})
    else:
        bad = dataclasses.replace(accounts, **{field: "0x" + "ee" * 32})

    with pytest.raises(AccountMismatch) as excinfo:
        ctl.swap(bad, BOB, 1_000, 0, True)
    assert excinfo.value.field == field
    assert _snapshot(ctl, custody, accounts) == before


def test_nested_operation_on_leased_pool_is_rejected() -> None:
    ctl, custody, accounts, _ = _seeded()
    custody.fund(BOB, MINT_X, 1_000)

    with ctl.registry.lease(accounts.key) as pool:
        assert pool.locked is True
        with pytest.raises(PoolLocked):
            ctl.swap(accounts, BOB, 1_000, 0, True)

    assert ctl.registry.require(accounts.key).locked is False
    assert ctl.swap(accounts, BOB, 1_000, 0, True).amount_out > 0


def test_failed_operation_releases_lock_and_changes_nothing() -> None:
    ctl, custody, accounts, events = _seeded()
    custody.fund(BOB, MINT_X, 50_000)
    before = _snapshot(ctl, custody, accounts)
    n_events = len(events)

    with pytest.raises(SlippageExceeded):
        ctl.swap(accounts, BOB, 50_000, 32_204, True)

    assert ctl.registry.require(accounts.key).locked is False
    assert _snapshot(ctl, custody, accounts) == before
    assert len(events) == n_events
    assert ctl.swap(accounts, BOB, 50_000, 32_203, True).amount_out == 32_203


def test_swap_zero_input_and_empty_pool() -> None:
    ctl, custody, accounts, _ = _setup()
    custody.fund(BOB, MINT_X, 10)
    with pytest.raises(PoolEmpty):
        ctl.swap(accounts, BOB, 10, 0, True)

    ctl, custody, accounts, _ = _seeded()
    with pytest.raises(InvalidAmount):
        ctl.swap(accounts, BOB, 0, 0, True)


def test_swap_requires_caller_funds() -> None:
    ctl, custody, accounts, _ = _seeded()
    custody.fund(BOB, MINT_Y, 99)
    before = _snapshot(ctl, custody, accounts)
    with pytest.raises(InsufficientFunds):
        ctl.swap(accounts, BOB, 100, 0, False)
    assert _snapshot(ctl, custody, accounts) == before


def test_deposit_requires_caller_funds_for_used_amounts() -> None:
    ctl, custody, accounts, _ = _seeded()
    custody.fund(BOB, MINT_X, 1_000)
    custody.fund(BOB, MINT_Y, 10)
    before = _snapshot(ctl, custody, accounts)
    with pytest.raises(InsufficientFunds):
        ctl.deposit(accounts, BOB, 1_000, 1_000, 0)
    assert _snapshot(ctl, custody, accounts) == before


def test_subsequent_deposit_is_proportional() -> None:
    ctl, custody, accounts, _ = _seeded()
    custody.fund(BOB, MINT_X, 500)
    custody.fund(BOB, MINT_Y, 1_000)
    dep = ctl.deposit(accounts, BOB, 500, 1_000, 500)
    assert dep == DepositResult(used_x=500, used_y=500, lp_minted=500)
    assert custody.balance_of(BOB, MINT_Y) == 500
    _assert_vaults_match_reserves(ctl, custody, accounts)


def test_deposit_for_shares_after_swap() -> None:
    ctl, custody, accounts, _ = _seeded()
    custody.fund(BOB, MINT_X, 52_000)
    custody.fund(BOB, MINT_Y, 1_000)
    ctl.swap(accounts, BOB, 50_000, 0, True)

    dep = ctl.deposit_for_shares(accounts, BOB, 1_000, 2_000, 1_000)
    assert dep == DepositResult(used_x=1_500, used_y=678, lp_minted=1_000)
    assert custody.balance_of(BOB, accounts.lp_mint) == 1_000
    _assert_vaults_match_reserves(ctl, custody, accounts)


def test_withdraw_requires_lp_balance() -> None:
    ctl, custody, accounts, _ = _seeded()
    with pytest.raises(InsufficientLpBalance):
        ctl.withdraw(accounts, BOB, 1, 0, 0)
    with pytest.raises(InsufficientLpBalance):
        ctl.withdraw(accounts, ALICE, 100_001, 0, 0)


def test_withdraw_slippage_leaves_state_untouched() -> None:
    ctl, custody, accounts, _ = _seeded()
    before = _snapshot(ctl, custody, accounts)
    with pytest.raises(SlippageExceeded):
        ctl.withdraw(accounts, ALICE, 50_000, 50_001, 0)
    assert _snapshot(ctl, custody, accounts) == before


def test_partial_withdraw_keeps_pool_live() -> None:
    ctl, custody, accounts, _ = _seeded()
    out = ctl.withdraw(accounts, ALICE, 25_000, 25_000, 25_000)
    assert out == WithdrawResult(out_x=25_000, out_y=25_000)
    pool = ctl.get_pool(accounts)
    assert (pool.reserve_x, pool.reserve_y, pool.lp_supply) == (75_000, 75_000, 75_000)
    assert pool.check_invariants() == []


def test_get_pool_returns_a_detached_copy() -> None:
    ctl, _, accounts, _ = _seeded()
    copy = ctl.get_pool(accounts)
    copy.reserve_x = 0
    assert ctl.get_pool(accounts).reserve_x == 100_000


def test_min_initial_liquidity_comes_from_settings() -> None:
    ctl = PoolController(settings=AmmSettings(min_initial_liquidity=0))
    accounts = ctl.initialize(MINT_X, MINT_Y, 1, 0)
    ctl.custody.fund(ALICE, MINT_X, 4)  # type: ignore[attr-defined]
    ctl.custody.fund(ALICE, MINT_Y, 9)  # type: ignore[attr-defined]
    assert ctl.deposit(accounts, ALICE, 4, 9, 0).lp_minted == 6


class _RefusingCustody(InMemoryCustody):
    def create_holding(self, owner: str, asset: str) -> None:
        raise CustodyError("backend unavailable")


def test_initialize_refused_by_custody_leaves_no_pool() -> None:
    shared = InMemoryCustody()
    first = PoolController(custody=shared)
    first.initialize(MINT_X, MINT_Y, 7, 30)

    second = PoolController(custody=shared)
    with pytest.raises(CustodyError, match="mint already exists"):
        second.initialize(MINT_X, MINT_Y, 7, 30)
    assert len(second.registry) == 0
    with pytest.raises(PoolNotFound):
        second.get_pool(second.accounts_for(MINT_X, MINT_Y, 7))


def test_initialize_can_be_retried_after_custody_failure() -> None:
    ctl = PoolController(custody=_RefusingCustody())
    with pytest.raises(CustodyError):
        ctl.initialize(MINT_X, MINT_Y, 7, 30)
    assert len(ctl.registry) == 0

    # A second attempt reaches custody again instead of reporting PoolAlreadyExists.
    with pytest.raises(CustodyError, match="mint already exists"):
        ctl.initialize(MINT_X, MINT_Y, 7, 30)
    assert len(ctl.registry) == 0
