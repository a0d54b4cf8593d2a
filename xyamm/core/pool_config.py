"""
Immutable pool descriptor and initialization checks.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..errors import IdenticalMints, InvalidFee
from ..kernels.python.cpmm_swap import BPS_DENOM, compute_fee
from ..kernels.python.fixed_point import require_u64
from ..state.balances import Address, Amount, AssetId
from ..state.canonical import canonical_hex_fixed_allow_0x
from ..state.pools import PoolAccounts


@dataclass(frozen=True)
class PoolConfig:
    """
    Everything about a pool that is fixed at initialization.

    Attributes:
        accounts: Pool, vault and LP mint addresses plus derivation bumps
        fee_bps: Swap fee in basis points (0-10000)
        authority: Optional administrative authority; recorded, never consulted
    """

    accounts: PoolAccounts
    fee_bps: int
    authority: Optional[Address] = None

    def __post_init__(self) -> None:
        validate_fee_bps(self.fee_bps)
        if self.accounts.mint_x == self.accounts.mint_y:
            raise IdenticalMints(f"mint_x and mint_y are identical: {self.accounts.mint_x}")

    def fee_for(self, amount_in: Amount) -> Amount:
        """Swap fee charged on a gross input amount (floor rounding)."""
        return compute_fee(gross_in=amount_in, fee_bps=self.fee_bps)


def validate_fee_bps(fee_bps: int, *, max_fee_bps: int = BPS_DENOM) -> int:
    if not isinstance(fee_bps, int) or isinstance(fee_bps, bool):
        raise TypeError("fee_bps must be an int")
    if not (0 <= fee_bps <= min(max_fee_bps, BPS_DENOM)):
        raise InvalidFee(f"fee_bps must be in [0, {min(max_fee_bps, BPS_DENOM)}]: {fee_bps}")
    return fee_bps


def validate_init_params(
    mint_x: AssetId,
    mint_y: AssetId,
    seed: int,
    fee_bps: int,
    *,
    max_fee_bps: int = BPS_DENOM,
) -> tuple[AssetId, AssetId]:
    """
    Check `initialize` arguments and return the canonicalized mints.

    Raises:
        IdenticalMints: mint_x == mint_y (after canonicalization)
        InvalidFee: fee_bps outside [0, max_fee_bps]
    """
    mx = canonical_hex_fixed_allow_0x(mint_x, name="mint_x")
    my = canonical_hex_fixed_allow_0x(mint_y, name="mint_y")
    if mx == my:
        raise IdenticalMints(f"mint_x and mint_y are identical: {mx}")
    validate_fee_bps(fee_bps, max_fee_bps=max_fee_bps)
    require_u64("seed", seed)
    return mx, my
