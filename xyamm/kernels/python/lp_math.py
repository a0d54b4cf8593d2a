"""
Liquidity math kernel.

Pure functions with explicit rounding rules:
- shares minted are rounded *down*,
- assets taken from a depositor are rounded *up*,
- assets returned to a withdrawer are rounded *down*.

Every rounding step therefore favors the liquidity already in the pool, so a
deposit followed by a withdrawal of the same shares can never return more than
was put in.
"""

from __future__ import annotations

from dataclasses import dataclass

from ...errors import (
    InsufficientInitialLiquidity,
    InvalidAmount,
    PoolEmpty,
    SlippageExceeded,
    ZeroDeposit,
)
from .fixed_point import checked_add, checked_sub, isqrt, mul_div, mul_div_round_up, require_u64


MIN_INITIAL_LIQUIDITY = 1000


@dataclass(frozen=True)
class MintLiquidityResult:
    liquidity_minted: int
    amount_x_used: int
    amount_y_used: int
    new_reserve_x: int
    new_reserve_y: int
    new_total_supply: int


@dataclass(frozen=True)
class BurnLiquidityResult:
    amount_x_out: int
    amount_y_out: int
    new_reserve_x: int
    new_reserve_y: int
    new_total_supply: int


def mint_liquidity_initial(
    *,
    amount_x: int,
    amount_y: int,
    min_initial_liquidity: int = MIN_INITIAL_LIQUIDITY,
) -> MintLiquidityResult:
    """
    First deposit into an empty pool: `shares = isqrt(amount_x * amount_y)`.

    The whole amount is minted to the depositor; `min_initial_liquidity` is a
    floor on the size of that first deposit, not a locked amount.
    """
    require_u64("amount_x", amount_x)
    require_u64("amount_y", amount_y)
    require_u64("min_initial_liquidity", min_initial_liquidity)
    if amount_x == 0 or amount_y == 0:
        raise ZeroDeposit(f"initial amounts must be positive: ({amount_x}, {amount_y})")

    minted = isqrt(amount_x * amount_y)
    if minted == 0 or minted < min_initial_liquidity:
        raise InsufficientInitialLiquidity(
            f"isqrt(amount_x*amount_y) = {minted} < min_initial_liquidity {min_initial_liquidity}"
        )

    return MintLiquidityResult(
        liquidity_minted=minted,
        amount_x_used=amount_x,
        amount_y_used=amount_y,
        new_reserve_x=amount_x,
        new_reserve_y=amount_y,
        new_total_supply=minted,
    )


def _require_live_pool(reserve_x: int, reserve_y: int, total_supply: int) -> None:
    require_u64("reserve_x", reserve_x)
    require_u64("reserve_y", reserve_y)
    require_u64("total_supply", total_supply)
    if total_supply == 0:
        raise PoolEmpty("pool has no liquidity")
    if reserve_x == 0 or reserve_y == 0:
        raise PoolEmpty("cannot price liquidity against an empty reserve")


def mint_liquidity(
    *,
    reserve_x: int,
    reserve_y: int,
    total_supply: int,
    max_x: int,
    max_y: int,
    min_liquidity: int = 0,
) -> MintLiquidityResult:
    """
    Ratio-preserving deposit into a live pool.

        shares = min(floor(max_x * S / reserve_x), floor(max_y * S / reserve_y))
        used_x = ceil(shares * reserve_x / S)
        used_y = ceil(shares * reserve_y / S)

    Since `shares <= max_x * S / reserve_x`, `used_x <= max_x` (same for y).
    """
    require_u64("max_x", max_x)
    require_u64("max_y", max_y)
    require_u64("min_liquidity", min_liquidity)
    _require_live_pool(reserve_x, reserve_y, total_supply)
    if max_x == 0 or max_y == 0:
        raise ZeroDeposit(f"deposit amounts must be positive: ({max_x}, {max_y})")

    shares_x = mul_div(max_x, total_supply, reserve_x)
    shares_y = mul_div(max_y, total_supply, reserve_y)
    minted = min(shares_x, shares_y)
    if minted == 0:
        raise ZeroDeposit("liquidity_minted is zero (deposit too small)")
    if minted < min_liquidity:
        raise SlippageExceeded(f"liquidity_minted {minted} < min_liquidity {min_liquidity}")

    used_x = mul_div_round_up(minted, reserve_x, total_supply)
    used_y = mul_div_round_up(minted, reserve_y, total_supply)
    if used_x > max_x or used_y > max_y:
        raise AssertionError("used amounts exceed deposit bounds")

    return MintLiquidityResult(
        liquidity_minted=minted,
        amount_x_used=used_x,
        amount_y_used=used_y,
        new_reserve_x=checked_add(reserve_x, used_x),
        new_reserve_y=checked_add(reserve_y, used_y),
        new_total_supply=checked_add(total_supply, minted),
    )


def mint_exact_liquidity(
    *,
    reserve_x: int,
    reserve_y: int,
    total_supply: int,
    liquidity: int,
    max_x: int,
    max_y: int,
) -> MintLiquidityResult:
    """
    Mint exactly `liquidity` shares, charging whatever that costs up to the bounds.

    On an empty pool the bounds are taken as the exact initial amounts and
    `liquidity` may not exceed `isqrt(max_x * max_y)`.
    """
    require_u64("liquidity", liquidity)
    require_u64("max_x", max_x)
    require_u64("max_y", max_y)
    if liquidity == 0:
        raise InvalidAmount("liquidity must be positive")

    if total_supply == 0:
        if reserve_x != 0 or reserve_y != 0:
            raise AssertionError("reserves are non-zero while total_supply is zero")
        if max_x == 0 or max_y == 0:
            raise ZeroDeposit(f"initial amounts must be positive: ({max_x}, {max_y})")
        if liquidity > isqrt(max_x * max_y):
            raise SlippageExceeded("requested liquidity exceeds isqrt(max_x * max_y)")
        return MintLiquidityResult(
            liquidity_minted=liquidity,
            amount_x_used=max_x,
            amount_y_used=max_y,
            new_reserve_x=max_x,
            new_reserve_y=max_y,
            new_total_supply=liquidity,
        )

    _require_live_pool(reserve_x, reserve_y, total_supply)
    used_x = mul_div_round_up(liquidity, reserve_x, total_supply)
    used_y = mul_div_round_up(liquidity, reserve_y, total_supply)
    if used_x > max_x or used_y > max_y:
        raise SlippageExceeded(f"required ({used_x}, {used_y}) exceeds bounds ({max_x}, {max_y})")

    return MintLiquidityResult(
        liquidity_minted=liquidity,
        amount_x_used=used_x,
        amount_y_used=used_y,
        new_reserve_x=checked_add(reserve_x, used_x),
        new_reserve_y=checked_add(reserve_y, used_y),
        new_total_supply=checked_add(total_supply, liquidity),
    )


def burn_liquidity(
    *,
    lp_amount: int,
    reserve_x: int,
    reserve_y: int,
    total_supply: int,
    min_x_out: int = 0,
    min_y_out: int = 0,
) -> BurnLiquidityResult:
    """
    Burn LP shares for underlying assets (floor rounding).
    """
    require_u64("lp_amount", lp_amount)
    require_u64("reserve_x", reserve_x)
    require_u64("reserve_y", reserve_y)
    require_u64("total_supply", total_supply)
    require_u64("min_x_out", min_x_out)
    require_u64("min_y_out", min_y_out)

    if total_supply == 0:
        raise PoolEmpty("pool has no liquidity")
    if lp_amount == 0:
        raise InvalidAmount("lp_amount must be positive")
    if lp_amount > total_supply:
        raise InvalidAmount(f"cannot burn more than total_supply: {lp_amount} > {total_supply}")

    amount_x_out = mul_div(reserve_x, lp_amount, total_supply)
    amount_y_out = mul_div(reserve_y, lp_amount, total_supply)

    if amount_x_out < min_x_out or amount_y_out < min_y_out:
        raise SlippageExceeded(
            f"outputs ({amount_x_out}, {amount_y_out}) below minimums ({min_x_out}, {min_y_out})"
        )
    if amount_x_out == 0 or amount_y_out == 0:
        raise InvalidAmount("withdrawal would return zero of one asset")

    return BurnLiquidityResult(
        amount_x_out=amount_x_out,
        amount_y_out=amount_y_out,
        new_reserve_x=checked_sub(reserve_x, amount_x_out),
        new_reserve_y=checked_sub(reserve_y, amount_y_out),
        new_total_supply=checked_sub(total_supply, lp_amount),
    )
