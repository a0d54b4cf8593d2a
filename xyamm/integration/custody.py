"""
Asset custody collaborator.

The engine moves value only through this interface, and only after every
validation and arithmetic step of an operation has succeeded. It calls each
method at most once per affected balance per operation.

`InMemoryCustody` backs the interface with a `BalanceTable` plus a mint
registry; it is what the tests and the offline demo run against.
"""

from __future__ import annotations

import logging
from typing import Dict, Protocol

from ..errors import CustodyError
from ..state.balances import Address, Amount, AssetId, BalanceTable

logger = logging.getLogger(__name__)


class AssetCustody(Protocol):
    def create_mint(self, mint: AssetId, authority: Address, decimals: int) -> None:
        ...

    def create_holding(self, owner: Address, asset: AssetId) -> None:
        ...

    def balance_of(self, owner: Address, asset: AssetId) -> Amount:
        ...

    def supply_of(self, mint: AssetId) -> Amount:
        ...

    def transfer_in(self, asset: AssetId, owner: Address, reserve: Address, amount: Amount) -> None:
        ...

    def transfer_out(self, asset: AssetId, reserve: Address, recipient: Address, amount: Amount) -> None:
        ...

    def mint_to(self, mint: AssetId, recipient: Address, amount: Amount) -> None:
        ...

    def burn_from(self, mint: AssetId, owner: Address, amount: Amount) -> None:
        ...


class InMemoryCustody:
    """
    Reference custody over a `BalanceTable`.

    Notes:
    - Mints created through `create_mint` track their supply here; assets that
      were never registered (the pool's reserve mints) are treated as external
      and may be credited freely with `fund`.
    - Holdings created through `create_holding` are only bookkeeping markers;
      the balance table stays sparse.
    """

    def __init__(self, balances: BalanceTable | None = None) -> None:
        self.balances = balances if balances is not None else BalanceTable()
        self._supply: Dict[AssetId, Amount] = {}
        self._mint_authority: Dict[AssetId, Address] = {}
        self._decimals: Dict[AssetId, int] = {}
        self._holdings: set[tuple[Address, AssetId]] = set()

    # -- setup ---------------------------------------------------------------

    def create_mint(self, mint: AssetId, authority: Address, decimals: int) -> None:
        if mint in self._supply:
            raise CustodyError(f"mint already exists: {mint}")
        self._supply[mint] = 0
        self._mint_authority[mint] = authority
        self._decimals[mint] = decimals
        logger.debug("created mint %s (authority=%s, decimals=%d)", mint, authority, decimals)

    def create_holding(self, owner: Address, asset: AssetId) -> None:
        if (owner, asset) in self._holdings:
            raise CustodyError(f"holding already exists: ({owner}, {asset})")
        self._holdings.add((owner, asset))

    def fund(self, owner: Address, asset: AssetId, amount: Amount) -> None:
        """Credit an external asset to `owner` (faucet for tests and demos)."""
        if asset in self._supply:
            raise CustodyError("use mint_to for engine-issued mints")
        self.balances.add(owner, asset, amount)

    # -- queries -------------------------------------------------------------

    def balance_of(self, owner: Address, asset: AssetId) -> Amount:
        return self.balances.get(owner, asset)

    def supply_of(self, mint: AssetId) -> Amount:
        if mint not in self._supply:
            raise CustodyError(f"unknown mint: {mint}")
        return self._supply[mint]

    def decimals_of(self, mint: AssetId) -> int:
        return self._decimals[mint]

    # -- movements -----------------------------------------------------------

    def _move(self, asset: AssetId, src: Address, dst: Address, amount: Amount) -> None:
        if amount < 0:
            raise CustodyError(f"amount must be non-negative: {amount}")
        if self.balances.get(src, asset) < amount:
            raise CustodyError(f"insufficient balance in {src} for {amount} of {asset}")
        self.balances.subtract(src, asset, amount)
        self.balances.add(dst, asset, amount)

    def transfer_in(self, asset: AssetId, owner: Address, reserve: Address, amount: Amount) -> None:
        self._move(asset, owner, reserve, amount)

    def transfer_out(self, asset: AssetId, reserve: Address, recipient: Address, amount: Amount) -> None:
        self._move(asset, reserve, recipient, amount)

    def mint_to(self, mint: AssetId, recipient: Address, amount: Amount) -> None:
        if mint not in self._supply:
            raise CustodyError(f"unknown mint: {mint}")
        self._supply[mint] += amount
        self.balances.add(recipient, mint, amount)

    def burn_from(self, mint: AssetId, owner: Address, amount: Amount) -> None:
        if mint not in self._supply:
            raise CustodyError(f"unknown mint: {mint}")
        if self.balances.get(owner, mint) < amount:
            raise CustodyError(f"insufficient {mint} in {owner} to burn {amount}")
        self.balances.subtract(owner, mint, amount)
        self._supply[mint] -= amount

    def __repr__(self) -> str:
        return f"InMemoryCustody({len(self._supply)} mints, {self.balances!r})"
