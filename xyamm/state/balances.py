"""
Holdings table for the in-memory custody collaborator.

Implements BalanceTable[Address, AssetId] -> Amount
"""

from typing import Dict, Tuple


# Type aliases
Address = str  # 32-byte account identifier as 0x-prefixed hex
AssetId = str  # mint identifier, same encoding as Address
Amount = int  # Non-negative integer (u64 on the ledger)


class BalanceTable:
    """
    Balance table mapping (owner, asset) -> amount.

    Owners are either user accounts or pool reserve accounts; the table does not
    distinguish them. Zero balances are dropped to keep the table sparse.
    """

    def __init__(self):
        self._balances: Dict[Tuple[Address, AssetId], Amount] = {}

    def get(self, owner: Address, asset: AssetId) -> Amount:
        """Get balance for (owner, asset). Returns 0 if not found."""
        return self._balances.get((owner, asset), 0)

    def set(self, owner: Address, asset: AssetId, amount: Amount) -> None:
        """
        Set balance for (owner, asset).

        Raises:
            ValueError: If amount is negative
        """
        if amount < 0:
            raise ValueError(f"Balance cannot be negative: {amount}")
        if amount == 0:
            self._balances.pop((owner, asset), None)
        else:
            self._balances[(owner, asset)] = amount

    def add(self, owner: Address, asset: AssetId, delta: int) -> None:
        """
        Add delta to balance (delta may be negative).

        Raises:
            ValueError: If resulting balance would be negative
        """
        current = self.get(owner, asset)
        new_balance = current + delta
        if new_balance < 0:
            raise ValueError(
                f"Insufficient balance: {current} + {delta} = {new_balance} < 0"
            )
        self.set(owner, asset, new_balance)

    def subtract(self, owner: Address, asset: AssetId, delta: Amount) -> None:
        """Subtract a non-negative amount from a balance."""
        if delta < 0:
            raise ValueError(f"Delta must be non-negative: {delta}")
        self.add(owner, asset, -delta)

    def total(self, asset: AssetId) -> Amount:
        """Sum of all holdings of `asset`."""
        return sum(amount for (_, a), amount in self._balances.items() if a == asset)

    def get_all_balances(self) -> Dict[Tuple[Address, AssetId], Amount]:
        return dict(self._balances)

    def __repr__(self) -> str:
        return f"BalanceTable({len(self._balances)} entries)"
