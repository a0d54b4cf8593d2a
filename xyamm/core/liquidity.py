"""
Liquidity management: quote deposits and withdrawals against a pool.

Quotes are pure: they read the pool and return the amounts and post-state the
controller will apply. Nothing here mutates a pool or moves assets.
"""

from ..errors import (
    InsufficientInitialLiquidity,
    InsufficientLpBalance,
    InvalidAmount,
    PoolEmpty,
    SlippageExceeded,
)
from ..kernels.python.fixed_point import require_u64
from ..kernels.python.lp_math import (
    MIN_INITIAL_LIQUIDITY,
    BurnLiquidityResult,
    MintLiquidityResult,
    burn_liquidity,
    mint_exact_liquidity,
    mint_liquidity,
    mint_liquidity_initial,
)
from ..state.balances import Amount
from ..state.pools import Pool


def quote_deposit(
    pool: Pool,
    max_x: Amount,
    max_y: Amount,
    min_lp_out: Amount,
    *,
    min_initial_liquidity: int = MIN_INITIAL_LIQUIDITY,
) -> MintLiquidityResult:
    """
    Quote a deposit bounded by (max_x, max_y).

    First deposit (lp_supply == 0):
        used = (max_x, max_y), lp = isqrt(max_x * max_y)

    Subsequent deposits:
        lp = min(floor(max_x * S / reserve_x), floor(max_y * S / reserve_y))
        used_x = ceil(lp * reserve_x / S), used_y = ceil(lp * reserve_y / S)

    Raises:
        ZeroDeposit: a bound is zero, or the deposit is too small to mint a share
        InsufficientInitialLiquidity: first deposit below `min_initial_liquidity`
        SlippageExceeded: lp < min_lp_out
    """
    require_u64("min_lp_out", min_lp_out)

    if pool.is_empty:
        res = mint_liquidity_initial(
            amount_x=max_x,
            amount_y=max_y,
            min_initial_liquidity=min_initial_liquidity,
        )
        if res.liquidity_minted < min_lp_out:
            raise SlippageExceeded(
                f"liquidity_minted {res.liquidity_minted} < min_lp_out {min_lp_out}"
            )
        return res

    return mint_liquidity(
        reserve_x=pool.reserve_x,
        reserve_y=pool.reserve_y,
        total_supply=pool.lp_supply,
        max_x=max_x,
        max_y=max_y,
        min_liquidity=min_lp_out,
    )


def quote_deposit_for_shares(
    pool: Pool,
    lp_amount: Amount,
    max_x: Amount,
    max_y: Amount,
    *,
    min_initial_liquidity: int = MIN_INITIAL_LIQUIDITY,
) -> MintLiquidityResult:
    """
    Quote a deposit that mints exactly `lp_amount` shares.

    The required assets are rounded up; if either exceeds its bound the deposit
    is rejected with SlippageExceeded. Into an empty pool the same
    `min_initial_liquidity` floor applies as for a bounded first deposit.
    """
    require_u64("lp_amount", lp_amount)
    if lp_amount == 0:
        raise InvalidAmount("lp_amount must be positive")
    if pool.is_empty and lp_amount < min_initial_liquidity:
        raise InsufficientInitialLiquidity(
            f"lp_amount {lp_amount} < min_initial_liquidity {min_initial_liquidity}"
        )
    return mint_exact_liquidity(
        reserve_x=pool.reserve_x,
        reserve_y=pool.reserve_y,
        total_supply=pool.lp_supply,
        liquidity=lp_amount,
        max_x=max_x,
        max_y=max_y,
    )


def quote_withdraw(
    pool: Pool,
    lp_amount: Amount,
    caller_lp_balance: Amount,
    min_x_out: Amount,
    min_y_out: Amount,
) -> BurnLiquidityResult:
    """
    Quote a withdrawal of `lp_amount` shares.

    Outputs:
        out_x = floor(reserve_x * lp_amount / lp_supply)
        out_y = floor(reserve_y * lp_amount / lp_supply)

    Raises:
        PoolEmpty: lp_supply == 0
        InvalidAmount: lp_amount == 0, or an output would be zero
        InsufficientLpBalance: lp_amount exceeds the caller's LP balance
        SlippageExceeded: out_x < min_x_out or out_y < min_y_out
    """
    require_u64("lp_amount", lp_amount)
    require_u64("caller_lp_balance", caller_lp_balance)

    if pool.is_empty:
        raise PoolEmpty("cannot withdraw from an empty pool")
    if lp_amount == 0:
        raise InvalidAmount("lp_amount must be positive")
    if lp_amount > caller_lp_balance:
        raise InsufficientLpBalance(
            f"lp_amount {lp_amount} exceeds caller balance {caller_lp_balance}"
        )

    return burn_liquidity(
        lp_amount=lp_amount,
        reserve_x=pool.reserve_x,
        reserve_y=pool.reserve_y,
        total_supply=pool.lp_supply,
        min_x_out=min_x_out,
        min_y_out=min_y_out,
    )
