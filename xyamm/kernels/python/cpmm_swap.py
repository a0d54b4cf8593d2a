"""
CPMM exact-in swap kernel.

- Fee is charged on the *gross* input amount with floor rounding:
  `fee = floor(amount_in * fee_bps / 10_000)`.
- Pricing uses `net_in = amount_in - fee`:
  `amount_out = floor(reserve_out * net_in / (reserve_in + net_in))`.
- The whole gross input (fee included) is credited to the input reserve, so the
  fee stays in the pool and accrues to liquidity providers.

Because `amount_out` is rounded down and the reserve keeps the fee,
`new_reserve_in * new_reserve_out >= reserve_in * reserve_out` for every
accepted swap.
"""

from __future__ import annotations

from dataclasses import dataclass

from ...errors import (
    InsufficientLiquidity,
    InvalidAmount,
    InvalidFee,
    PoolEmpty,
    SlippageExceeded,
)
from .fixed_point import checked_add, checked_sub, mul_div, require_u64


BPS_DENOM = 10_000


@dataclass(frozen=True)
class SwapExactInResult:
    amount_out: int
    fee: int
    net_in: int
    gross_in: int
    new_reserve_in: int
    new_reserve_out: int
    k_before: int
    k_after: int


def compute_fee(*, gross_in: int, fee_bps: int) -> int:
    """
    Compute `fee = floor(gross_in * fee_bps / 10_000)`.
    """
    require_u64("gross_in", gross_in)
    if not isinstance(fee_bps, int) or isinstance(fee_bps, bool):
        raise TypeError("fee_bps must be an int")
    if not (0 <= fee_bps <= BPS_DENOM):
        raise InvalidFee(f"fee_bps must be in [0, {BPS_DENOM}]: {fee_bps}")
    return mul_div(gross_in, fee_bps, BPS_DENOM)


def swap_exact_in(
    *,
    reserve_in: int,
    reserve_out: int,
    amount_in: int,
    fee_bps: int,
    min_amount_out: int = 0,
) -> SwapExactInResult:
    """
    Exact-in swap quote + post-state.

    Check order matches the pool program: empty pool, zero input, slippage,
    zero output, then reserve exhaustion.
    """
    for name, v in (
        ("reserve_in", reserve_in),
        ("reserve_out", reserve_out),
        ("amount_in", amount_in),
        ("min_amount_out", min_amount_out),
    ):
        require_u64(name, v)

    if reserve_in == 0 or reserve_out == 0:
        raise PoolEmpty("cannot swap against an empty reserve")
    if amount_in == 0:
        raise InvalidAmount("amount_in must be positive")

    k_before = reserve_in * reserve_out

    fee = compute_fee(gross_in=amount_in, fee_bps=fee_bps)
    net_in = checked_sub(amount_in, fee)

    denominator = checked_add(reserve_in, net_in)
    amount_out = mul_div(reserve_out, net_in, denominator)

    if amount_out < min_amount_out:
        raise SlippageExceeded(f"amount_out {amount_out} < min_amount_out {min_amount_out}")
    if amount_out == 0:
        raise InvalidAmount("amount_out is zero (trade too small)")
    if amount_out >= reserve_out:
        raise InsufficientLiquidity(f"amount_out {amount_out} would drain reserve_out {reserve_out}")

    new_reserve_in = checked_add(reserve_in, amount_in)
    new_reserve_out = checked_sub(reserve_out, amount_out)
    k_after = new_reserve_in * new_reserve_out

    return SwapExactInResult(
        amount_out=amount_out,
        fee=fee,
        net_in=net_in,
        gross_in=amount_in,
        new_reserve_in=new_reserve_in,
        new_reserve_out=new_reserve_out,
        k_before=k_before,
        k_after=k_after,
    )
