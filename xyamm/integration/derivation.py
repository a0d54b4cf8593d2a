"""
Address derivation collaborator.

The engine never derives addresses itself; it consumes the `PoolAccounts`
produced here as opaque, stable identifiers. `Sha256AddressDeriver` is the
reference implementation used by tests and the offline demo:

    config  = find_address(["config", mint_x, mint_y, seed_le_u64])
    lp_mint = find_address(["lp", config])
    vault_x = H("vault" || config || mint_x)
    vault_y = H("vault" || config || mint_y)

`find_address` walks bumps from 255 downward and takes the first digest whose
top bit is clear, giving each derived authority a recorded bump.
"""

from __future__ import annotations

import hashlib
from typing import Protocol, Sequence, Tuple

from ..kernels.python.fixed_point import require_u64
from ..state.balances import Address, AssetId
from ..state.canonical import address_bytes, domain_sep_bytes
from ..state.pools import PoolAccounts


class AddressDeriver(Protocol):
    def derive(self, mint_x: AssetId, mint_y: AssetId, seed: int) -> PoolAccounts:
        ...


def _hash_address(parts: Sequence[bytes]) -> bytes:
    h = hashlib.sha256()
    h.update(domain_sep_bytes("address"))
    for part in parts:
        h.update(len(part).to_bytes(2, "little"))
        h.update(part)
    return h.digest()


def find_address(parts: Sequence[bytes]) -> Tuple[Address, int]:
    """Return (address, bump) for the first accepted bump in 255..0."""
    for bump in range(255, -1, -1):
        digest = _hash_address([*parts, bytes([bump])])
        if digest[0] & 0x80 == 0:
            return "0x" + digest.hex(), bump
    raise ValueError("no valid bump found for seeds")


def _plain_address(parts: Sequence[bytes]) -> Address:
    return "0x" + _hash_address(parts).hex()


class Sha256AddressDeriver:
    """Deterministic derivation of pool addresses from (mint_x, mint_y, seed)."""

    def derive(self, mint_x: AssetId, mint_y: AssetId, seed: int) -> PoolAccounts:
        require_u64("seed", seed)
        mx = address_bytes(mint_x, name="mint_x")
        my = address_bytes(mint_y, name="mint_y")

        config, config_bump = find_address([b"config", mx, my, seed.to_bytes(8, "little")])
        config_raw = bytes.fromhex(config[2:])
        lp_mint, lp_bump = find_address([b"lp", config_raw])

        return PoolAccounts(
            pool=config,
            mint_x="0x" + mx.hex(),
            mint_y="0x" + my.hex(),
            vault_x=_plain_address([b"vault", config_raw, mx]),
            vault_y=_plain_address([b"vault", config_raw, my]),
            lp_mint=lp_mint,
            seed=seed,
            config_bump=config_bump,
            lp_bump=lp_bump,
        )
