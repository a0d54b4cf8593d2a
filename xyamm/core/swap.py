"""
Directional swap quoting against a pool.

Maps (reserve_x, reserve_y) onto the kernel's (reserve_in, reserve_out)
according to the swap direction and back again.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..errors import PoolEmpty
from ..kernels.python.cpmm_swap import swap_exact_in
from ..state.balances import Amount
from ..state.pools import Pool

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SwapQuote:
    x_to_y: bool
    amount_in: Amount
    amount_out: Amount
    fee: Amount
    new_reserve_x: Amount
    new_reserve_y: Amount
    k_before: int
    k_after: int


def quote_swap(pool: Pool, amount_in: Amount, min_amount_out: Amount, x_to_y: bool) -> SwapQuote:
    """
    Quote an exact-in swap.

        fee = floor(amount_in * fee_bps / 10_000)
        net_in = amount_in - fee
        amount_out = floor(reserve_out * net_in / (reserve_in + net_in))

    Raises:
        PoolEmpty: the pool has no liquidity
        InvalidAmount: amount_in == 0 or the output rounds to zero
        SlippageExceeded: amount_out < min_amount_out
        InsufficientLiquidity: amount_out would exhaust the output reserve
    """
    if not isinstance(x_to_y, bool):
        raise TypeError("x_to_y must be a bool")
    if pool.is_empty:
        raise PoolEmpty("cannot swap against a pool with no liquidity")

    if x_to_y:
        reserve_in, reserve_out = pool.reserve_x, pool.reserve_y
    else:
        reserve_in, reserve_out = pool.reserve_y, pool.reserve_x

    res = swap_exact_in(
        reserve_in=reserve_in,
        reserve_out=reserve_out,
        amount_in=amount_in,
        fee_bps=pool.fee_bps,
        min_amount_out=min_amount_out,
    )

    if x_to_y:
        new_x, new_y = res.new_reserve_in, res.new_reserve_out
    else:
        new_x, new_y = res.new_reserve_out, res.new_reserve_in

    logger.debug(
        "swap quote x_to_y=%s amount_in=%d fee=%d amount_out=%d k=%d->%d",
        x_to_y,
        amount_in,
        res.fee,
        res.amount_out,
        res.k_before,
        res.k_after,
    )

    return SwapQuote(
        x_to_y=x_to_y,
        amount_in=amount_in,
        amount_out=res.amount_out,
        fee=res.fee,
        new_reserve_x=new_x,
        new_reserve_y=new_y,
        k_before=res.k_before,
        k_after=res.k_after,
    )
