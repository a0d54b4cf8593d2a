"""
Pool record and invariant checks.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, List, Optional

from .balances import Address, Amount, AssetId

if TYPE_CHECKING:
    from ..core.pool_config import PoolConfig


@dataclass(frozen=True)
class PoolKey:
    """Identity of a pool: one pool per (mint_x, mint_y, seed)."""

    mint_x: AssetId
    mint_y: AssetId
    seed: int


@dataclass(frozen=True)
class PoolAccounts:
    """
    Addresses that belong to one pool, as supplied by the derivation collaborator.

    Callers assert the same structure on every operation; the controller compares
    it field by field against what the pool stored at initialization.
    """

    pool: Address
    mint_x: AssetId
    mint_y: AssetId
    vault_x: Address
    vault_y: Address
    lp_mint: AssetId
    seed: int
    config_bump: int
    lp_bump: int

    @property
    def key(self) -> PoolKey:
        return PoolKey(mint_x=self.mint_x, mint_y=self.mint_y, seed=self.seed)


@dataclass
class Pool:
    """
    State of one two-asset pool.

    Attributes:
        config: Immutable descriptor (accounts, fee, authority)
        reserve_x: Custodial balance of mint_x
        reserve_y: Custodial balance of mint_y
        lp_supply: Total outstanding LP shares
        locked: True only while an operation holds the pool's lease
    """

    config: "PoolConfig"
    reserve_x: Amount = 0
    reserve_y: Amount = 0
    lp_supply: Amount = 0
    locked: bool = False

    def __post_init__(self):
        if self.reserve_x < 0 or self.reserve_y < 0:
            raise ValueError(
                f"Reserves must be non-negative: ({self.reserve_x}, {self.reserve_y})"
            )
        if self.lp_supply < 0:
            raise ValueError(f"LP supply must be non-negative: {self.lp_supply}")

    @property
    def accounts(self) -> PoolAccounts:
        return self.config.accounts

    @property
    def key(self) -> PoolKey:
        return self.accounts.key

    @property
    def fee_bps(self) -> int:
        return self.config.fee_bps

    @property
    def authority(self) -> Optional[Address]:
        return self.config.authority

    @property
    def seed(self) -> int:
        return self.accounts.seed

    @property
    def mint_x(self) -> AssetId:
        return self.accounts.mint_x

    @property
    def mint_y(self) -> AssetId:
        return self.accounts.mint_y

    @property
    def lp_mint(self) -> AssetId:
        return self.accounts.lp_mint

    @property
    def is_empty(self) -> bool:
        return self.lp_supply == 0

    def get_constant_product(self) -> int:
        """Compute k = reserve_x * reserve_y."""
        return self.reserve_x * self.reserve_y

    def check_invariants(self) -> List[str]:
        """Return the names of violated invariants (empty = all hold)."""
        return check_all(self.reserve_x, self.reserve_y, self.lp_supply)

    def __repr__(self) -> str:
        return (
            f"Pool(pool={self.accounts.pool[:18]}..., seed={self.seed}, "
            f"reserves=({self.reserve_x}, {self.reserve_y}), "
            f"lp_supply={self.lp_supply}, fee_bps={self.fee_bps}, locked={self.locked})"
        )


# -- invariants ---------------------------------------------------------------


def inv_reserves_non_negative(reserve_x: int, reserve_y: int, lp_supply: int) -> bool:
    return reserve_x >= 0 and reserve_y >= 0 and lp_supply >= 0


def inv_live_pool_has_both_reserves(reserve_x: int, reserve_y: int, lp_supply: int) -> bool:
    if lp_supply == 0:
        return True
    return reserve_x > 0 and reserve_y > 0


def inv_empty_supply_iff_empty_reserves(reserve_x: int, reserve_y: int, lp_supply: int) -> bool:
    return (lp_supply == 0) == (reserve_x == 0 and reserve_y == 0)


_ALL_INVARIANTS: list[tuple[str, Callable[[int, int, int], bool]]] = [
    ("reserves_non_negative", inv_reserves_non_negative),
    ("live_pool_has_both_reserves", inv_live_pool_has_both_reserves),
    ("empty_supply_iff_empty_reserves", inv_empty_supply_iff_empty_reserves),
]


def check_all(reserve_x: int, reserve_y: int, lp_supply: int) -> list[str]:
    """Check every pool invariant. Returns list of violated invariant names."""
    return [name for name, fn in _ALL_INVARIANTS if not fn(reserve_x, reserve_y, lp_supply)]
