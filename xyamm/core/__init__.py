"""
Core pool accounting: quotes, settings and the pool controller
"""

from .controller import DepositResult, PoolController, SwapResult, WithdrawResult
from .events import LiquidityDeposited, LiquidityWithdrawn, PoolEvent, PoolInitialized, Swapped
from .liquidity import quote_deposit, quote_deposit_for_shares, quote_withdraw
from .pool_config import PoolConfig, validate_fee_bps, validate_init_params
from .settings import AmmSettings, default_settings, load_settings
from .swap import SwapQuote, quote_swap

__all__ = [
    "PoolController",
    "DepositResult",
    "WithdrawResult",
    "SwapResult",
    "PoolInitialized",
    "LiquidityDeposited",
    "LiquidityWithdrawn",
    "Swapped",
    "PoolEvent",
    "quote_deposit",
    "quote_deposit_for_shares",
    "quote_withdraw",
    "PoolConfig",
    "validate_fee_bps",
    "validate_init_params",
    "AmmSettings",
    "default_settings",
    "load_settings",
    "SwapQuote",
    "quote_swap",
]
