"""
Collaborators and host-facing operation payloads
"""

from .custody import AssetCustody, CustodyError, InMemoryCustody
from .derivation import AddressDeriver, Sha256AddressDeriver, find_address
from .operations import OpResult, execute, execute_all, parse_accounts

__all__ = [
    "AssetCustody",
    "CustodyError",
    "InMemoryCustody",
    "AddressDeriver",
    "Sha256AddressDeriver",
    "find_address",
    "OpResult",
    "execute",
    "execute_all",
    "parse_accounts",
]
