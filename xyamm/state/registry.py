"""
Pool registry keyed by (mint_x, mint_y, seed).

A registry is an ordinary object owned by whoever hosts the engine; there is
no process-wide instance. Each pool gets its own lease lock so operations on
distinct pools never contend.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from ..errors import PoolAlreadyExists, PoolLocked, PoolNotFound
from .balances import Address
from .pools import Pool, PoolAccounts, PoolKey


class PoolRegistry:
    def __init__(self) -> None:
        self._pools: Dict[PoolKey, Pool] = {}
        self._leases: Dict[PoolKey, threading.Lock] = {}
        self._by_address: Dict[Address, PoolKey] = {}
        self._guard = threading.Lock()

    def __contains__(self, key: PoolKey) -> bool:
        return key in self._pools

    def __len__(self) -> int:
        return len(self._pools)

    def get(self, key: PoolKey) -> Optional[Pool]:
        return self._pools.get(key)

    def require(self, key: PoolKey) -> Pool:
        pool = self._pools.get(key)
        if pool is None:
            raise PoolNotFound(f"no pool for mints ({key.mint_x}, {key.mint_y}) seed {key.seed}")
        return pool

    def pools(self) -> List[Pool]:
        return list(self._pools.values())

    def resolve(self, accounts: PoolAccounts) -> PoolKey:
        """
        Key of the pool a caller addresses.

        The claimed pool address wins; the claimed (mint_x, mint_y, seed) is only
        used when the address is unknown, so diverging fields reach the account
        check instead of failing the lookup.
        """
        key = self._by_address.get(accounts.pool)
        return key if key is not None else accounts.key

    def insert(self, pool: Pool) -> None:
        with self._guard:
            if pool.key in self._pools:
                raise PoolAlreadyExists(f"pool already exists for seed {pool.seed}")
            self._pools[pool.key] = pool
            self._leases[pool.key] = threading.Lock()
            self._by_address[pool.accounts.pool] = pool.key

    def remove(self, key: PoolKey) -> None:
        """Drop a pool that never finished initializing."""
        with self._guard:
            pool = self._pools.pop(key, None)
            self._leases.pop(key, None)
            if pool is not None:
                self._by_address.pop(pool.accounts.pool, None)

    @contextmanager
    def lease(self, key: PoolKey) -> Iterator[Pool]:
        """
        Hold exclusive access to one pool for the duration of an operation.

        Never blocks: a nested or concurrent attempt fails with `PoolLocked`.
        `pool.locked` mirrors the lease and is cleared on every exit path.
        """
        pool = self.require(key)
        lock = self._leases[key]
        if not lock.acquire(blocking=False):
            raise PoolLocked(f"pool {pool.accounts.pool} is locked")
        pool.locked = True
        try:
            yield pool
        finally:
            pool.locked = False
            lock.release()

    def __repr__(self) -> str:
        return f"PoolRegistry({len(self._pools)} pools)"
