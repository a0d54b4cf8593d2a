"""
Structured records emitted once per committed pool operation.

Reserves and supply are the post-operation values.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..state.balances import Address, Amount, AssetId


@dataclass(frozen=True)
class PoolInitialized:
    pool: Address
    mint_x: AssetId
    mint_y: AssetId
    seed: int
    fee_bps: int
    lp_mint: AssetId
    authority: Optional[Address] = None


@dataclass(frozen=True)
class LiquidityDeposited:
    pool: Address
    user: Address
    amount_x: Amount
    amount_y: Amount
    lp_minted: Amount
    reserve_x: Amount
    reserve_y: Amount
    lp_supply: Amount


@dataclass(frozen=True)
class LiquidityWithdrawn:
    pool: Address
    user: Address
    amount_x: Amount
    amount_y: Amount
    lp_burned: Amount
    reserve_x: Amount
    reserve_y: Amount
    lp_supply: Amount


@dataclass(frozen=True)
class Swapped:
    pool: Address
    user: Address
    amount_in: Amount
    amount_out: Amount
    fee: Amount
    x_to_y: bool
    reserve_x: Amount
    reserve_y: Amount


PoolEvent = PoolInitialized | LiquidityDeposited | LiquidityWithdrawn | Swapped
