"""
Pool controller: the engine's four public operations plus exact-share deposit.

Every mutating operation follows the same shape:

1. Take the pool's lease (rejects nested or concurrent use with PoolLocked).
2. Check the caller-asserted accounts against the pool's stored accounts.
3. Quote the operation with the pure kernels.
4. Check caller holdings and the invariants of the computed post-state.
5. Move assets through the custody collaborator, once per affected balance.
6. Commit the new reserves/supply and emit an event.

Any failure in steps 1-4 raises before a single balance or pool field changes.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from ..errors import (
    AccountMismatch,
    InsufficientFunds,
    InvariantViolation,
    PoolAlreadyExists,
)
from ..integration.custody import AssetCustody, InMemoryCustody
from ..integration.derivation import AddressDeriver, Sha256AddressDeriver
from ..kernels.python.lp_math import MintLiquidityResult
from ..state.balances import Address, Amount, AssetId
from ..state.pools import Pool, PoolAccounts, check_all
from ..state.registry import PoolRegistry
from .events import LiquidityDeposited, LiquidityWithdrawn, PoolEvent, PoolInitialized, Swapped
from .liquidity import quote_deposit, quote_deposit_for_shares, quote_withdraw
from .pool_config import PoolConfig, validate_init_params
from .settings import AmmSettings, default_settings
from .swap import quote_swap

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DepositResult:
    used_x: Amount
    used_y: Amount
    lp_minted: Amount


@dataclass(frozen=True)
class WithdrawResult:
    out_x: Amount
    out_y: Amount


@dataclass(frozen=True)
class SwapResult:
    amount_out: Amount
    amount_in: Amount
    fee: Amount
    x_to_y: bool


_ACCOUNT_FIELDS = (
    "pool",
    "mint_x",
    "mint_y",
    "vault_x",
    "vault_y",
    "lp_mint",
    "seed",
    "config_bump",
    "lp_bump",
)


class PoolController:
    def __init__(
        self,
        registry: Optional[PoolRegistry] = None,
        custody: Optional[AssetCustody] = None,
        deriver: Optional[AddressDeriver] = None,
        settings: Optional[AmmSettings] = None,
        on_event: Optional[Callable[[PoolEvent], None]] = None,
    ) -> None:
        self.registry = registry if registry is not None else PoolRegistry()
        self.custody = custody if custody is not None else InMemoryCustody()
        self.deriver = deriver if deriver is not None else Sha256AddressDeriver()
        self.settings = settings if settings is not None else default_settings()
        self._on_event = on_event

    # -- lookups -------------------------------------------------------------

    def accounts_for(self, mint_x: AssetId, mint_y: AssetId, seed: int) -> PoolAccounts:
        """Addresses the derivation collaborator assigns to (mint_x, mint_y, seed)."""
        mx, my = validate_init_params(mint_x, mint_y, seed, 0)
        return self.deriver.derive(mx, my, seed)

    def get_pool(self, accounts: PoolAccounts) -> Pool:
        """Return a detached copy of the pool identified by `accounts`."""
        pool = self.registry.require(self.registry.resolve(accounts))
        _verify_accounts(pool, accounts)
        return dataclasses.replace(pool)

    # -- operations ----------------------------------------------------------

    def initialize(
        self,
        mint_x: AssetId,
        mint_y: AssetId,
        seed: int,
        fee_bps: int,
        authority: Optional[Address] = None,
    ) -> PoolAccounts:
        """
        Create an empty pool for (mint_x, mint_y, seed).

        Raises:
            IdenticalMints, InvalidFee: invalid arguments
            PoolAlreadyExists: the key is already taken
            CustodyError: custody refused to create the LP mint or a vault;
                the pool is not registered
        """
        mx, my = validate_init_params(
            mint_x, mint_y, seed, fee_bps, max_fee_bps=self.settings.max_fee_bps
        )
        accounts = self.deriver.derive(mx, my, seed)
        if accounts.key in self.registry:
            raise PoolAlreadyExists(f"pool already exists: {accounts.pool}")

        pool = Pool(config=PoolConfig(accounts=accounts, fee_bps=fee_bps, authority=authority))
        # Claim the key first so a concurrent initialize fails before touching custody.
        self.registry.insert(pool)
        try:
            self.custody.create_mint(accounts.lp_mint, accounts.pool, self.settings.lp_decimals)
            self.custody.create_holding(accounts.vault_x, accounts.mint_x)
            self.custody.create_holding(accounts.vault_y, accounts.mint_y)
        except Exception:
            self.registry.remove(accounts.key)
            raise

        logger.info("initialized pool %s seed=%d fee_bps=%d", accounts.pool, seed, fee_bps)
        self._emit(
            PoolInitialized(
                pool=accounts.pool,
                mint_x=accounts.mint_x,
                mint_y=accounts.mint_y,
                seed=seed,
                fee_bps=fee_bps,
                lp_mint=accounts.lp_mint,
                authority=authority,
            )
        )
        return accounts

    def deposit(
        self,
        accounts: PoolAccounts,
        user: Address,
        max_x: Amount,
        max_y: Amount,
        min_lp_out: Amount,
    ) -> DepositResult:
        """Deposit at most (max_x, max_y) at the pool's current ratio."""
        with self.registry.lease(self.registry.resolve(accounts)) as pool:
            _verify_accounts(pool, accounts)
            quote = quote_deposit(
                pool,
                max_x,
                max_y,
                min_lp_out,
                min_initial_liquidity=self.settings.min_initial_liquidity,
            )
            return self._apply_deposit(pool, user, quote)

    def deposit_for_shares(
        self,
        accounts: PoolAccounts,
        user: Address,
        lp_amount: Amount,
        max_x: Amount,
        max_y: Amount,
    ) -> DepositResult:
        """Mint exactly `lp_amount` shares, paying at most (max_x, max_y)."""
        with self.registry.lease(self.registry.resolve(accounts)) as pool:
            _verify_accounts(pool, accounts)
            quote = quote_deposit_for_shares(
                pool,
                lp_amount,
                max_x,
                max_y,
                min_initial_liquidity=self.settings.min_initial_liquidity,
            )
            return self._apply_deposit(pool, user, quote)

    def withdraw(
        self,
        accounts: PoolAccounts,
        user: Address,
        lp_amount: Amount,
        min_x_out: Amount,
        min_y_out: Amount,
    ) -> WithdrawResult:
        """Burn `lp_amount` shares for the proportional share of both reserves."""
        with self.registry.lease(self.registry.resolve(accounts)) as pool:
            _verify_accounts(pool, accounts)
            caller_lp = self.custody.balance_of(user, pool.lp_mint)
            quote = quote_withdraw(pool, lp_amount, caller_lp, min_x_out, min_y_out)
            _check_post_state(quote.new_reserve_x, quote.new_reserve_y, quote.new_total_supply)

            self.custody.burn_from(pool.lp_mint, user, lp_amount)
            self.custody.transfer_out(pool.mint_x, pool.accounts.vault_x, user, quote.amount_x_out)
            self.custody.transfer_out(pool.mint_y, pool.accounts.vault_y, user, quote.amount_y_out)

            pool.reserve_x = quote.new_reserve_x
            pool.reserve_y = quote.new_reserve_y
            pool.lp_supply = quote.new_total_supply

            logger.info(
                "withdraw pool=%s user=%s lp_burned=%d out=(%d, %d) reserves=(%d, %d)",
                pool.accounts.pool,
                user,
                lp_amount,
                quote.amount_x_out,
                quote.amount_y_out,
                pool.reserve_x,
                pool.reserve_y,
            )
            self._emit(
                LiquidityWithdrawn(
                    pool=pool.accounts.pool,
                    user=user,
                    amount_x=quote.amount_x_out,
                    amount_y=quote.amount_y_out,
                    lp_burned=lp_amount,
                    reserve_x=pool.reserve_x,
                    reserve_y=pool.reserve_y,
                    lp_supply=pool.lp_supply,
                )
            )
            return WithdrawResult(out_x=quote.amount_x_out, out_y=quote.amount_y_out)

    def swap(
        self,
        accounts: PoolAccounts,
        user: Address,
        amount_in: Amount,
        min_amount_out: Amount,
        x_to_y: bool,
    ) -> SwapResult:
        """Exact-in swap in the given direction."""
        with self.registry.lease(self.registry.resolve(accounts)) as pool:
            _verify_accounts(pool, accounts)
            quote = quote_swap(pool, amount_in, min_amount_out, x_to_y)

            if x_to_y:
                mint_in, vault_in = pool.mint_x, pool.accounts.vault_x
                mint_out, vault_out = pool.mint_y, pool.accounts.vault_y
            else:
                mint_in, vault_in = pool.mint_y, pool.accounts.vault_y
                mint_out, vault_out = pool.mint_x, pool.accounts.vault_x

            self._require_funds(user, mint_in, amount_in)
            _check_post_state(quote.new_reserve_x, quote.new_reserve_y, pool.lp_supply)
            if quote.k_after < quote.k_before:
                raise InvariantViolation(["k_non_decreasing"])

            self.custody.transfer_in(mint_in, user, vault_in, amount_in)
            self.custody.transfer_out(mint_out, vault_out, user, quote.amount_out)

            pool.reserve_x = quote.new_reserve_x
            pool.reserve_y = quote.new_reserve_y

            logger.info(
                "swap pool=%s user=%s x_to_y=%s in=%d out=%d fee=%d reserves=(%d, %d)",
                pool.accounts.pool,
                user,
                x_to_y,
                amount_in,
                quote.amount_out,
                quote.fee,
                pool.reserve_x,
                pool.reserve_y,
            )
            self._emit(
                Swapped(
                    pool=pool.accounts.pool,
                    user=user,
                    amount_in=amount_in,
                    amount_out=quote.amount_out,
                    fee=quote.fee,
                    x_to_y=x_to_y,
                    reserve_x=pool.reserve_x,
                    reserve_y=pool.reserve_y,
                )
            )
            return SwapResult(
                amount_out=quote.amount_out,
                amount_in=amount_in,
                fee=quote.fee,
                x_to_y=x_to_y,
            )

    # -- helpers -------------------------------------------------------------

    def _apply_deposit(self, pool: Pool, user: Address, quote: MintLiquidityResult) -> DepositResult:
        self._require_funds(user, pool.mint_x, quote.amount_x_used)
        self._require_funds(user, pool.mint_y, quote.amount_y_used)
        _check_post_state(quote.new_reserve_x, quote.new_reserve_y, quote.new_total_supply)

        self.custody.transfer_in(pool.mint_x, user, pool.accounts.vault_x, quote.amount_x_used)
        self.custody.transfer_in(pool.mint_y, user, pool.accounts.vault_y, quote.amount_y_used)
        self.custody.mint_to(pool.lp_mint, user, quote.liquidity_minted)

        pool.reserve_x = quote.new_reserve_x
        pool.reserve_y = quote.new_reserve_y
        pool.lp_supply = quote.new_total_supply

        logger.info(
            "deposit pool=%s user=%s used=(%d, %d) lp_minted=%d reserves=(%d, %d)",
            pool.accounts.pool,
            user,
            quote.amount_x_used,
            quote.amount_y_used,
            quote.liquidity_minted,
            pool.reserve_x,
            pool.reserve_y,
        )
        self._emit(
            LiquidityDeposited(
                pool=pool.accounts.pool,
                user=user,
                amount_x=quote.amount_x_used,
                amount_y=quote.amount_y_used,
                lp_minted=quote.liquidity_minted,
                reserve_x=pool.reserve_x,
                reserve_y=pool.reserve_y,
                lp_supply=pool.lp_supply,
            )
        )
        return DepositResult(
            used_x=quote.amount_x_used,
            used_y=quote.amount_y_used,
            lp_minted=quote.liquidity_minted,
        )

    def _require_funds(self, owner: Address, asset: AssetId, amount: Amount) -> None:
        held = self.custody.balance_of(owner, asset)
        if held < amount:
            raise InsufficientFunds(f"{owner} holds {held} of {asset}, needs {amount}")

    def _emit(self, event: PoolEvent) -> None:
        if self._on_event is not None:
            self._on_event(event)


def _verify_accounts(pool: Pool, asserted: PoolAccounts) -> None:
    stored = pool.accounts
    for name in _ACCOUNT_FIELDS:
        expected = getattr(stored, name)
        actual = getattr(asserted, name)
        if expected != actual:
            raise AccountMismatch(name, str(expected), str(actual))


def _check_post_state(reserve_x: int, reserve_y: int, lp_supply: int) -> None:
    violations = check_all(reserve_x, reserve_y, lp_supply)
    if violations:
        raise InvariantViolation(violations)
