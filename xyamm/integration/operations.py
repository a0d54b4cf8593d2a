"""
Operation payloads for the pool controller.

Hosts that speak plain mappings (JSON/YAML scripts, RPC payloads) go through
here instead of calling `PoolController` directly:

    {"op": "initialize", "mint_x": ..., "mint_y": ..., "seed": 7, "fee_bps": 30}
    {"op": "deposit", "mint_x": ..., "mint_y": ..., "seed": 7,
     "user": ..., "max_x": ..., "max_y": ..., "min_lp_out": 0}

Pool-targeting operations identify the pool either by a full "accounts"
object (checked against the stored accounts) or by (mint_x, mint_y, seed),
in which case the accounts are derived.

`execute` never raises for engine failures: it returns an `OpResult` tagged
with the failure's code.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional

from ..errors import AmmError
from ..state.pools import PoolAccounts

if TYPE_CHECKING:
    from ..core.controller import PoolController

logger = logging.getLogger(__name__)

MALFORMED = "MalformedOperation"

OP_KINDS = ("initialize", "deposit", "deposit_for_shares", "withdraw", "swap")


def _require_str(value: Any, *, name: str, non_empty: bool = True, max_len: int = 4096) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{name} must be a string")
    if non_empty and not value:
        raise ValueError(f"{name} must be non-empty")
    if max_len > 0 and len(value) > max_len:
        raise ValueError(f"{name} too large")
    return value


def _require_int(value: Any, *, name: str, non_negative: bool = False) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"{name} must be an int")
    if non_negative and value < 0:
        raise ValueError(f"{name} must be non-negative")
    return int(value)


def _require_bool(value: Any, *, name: str) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"{name} must be a bool")
    return value


def _optional_str(value: Any, *, name: str) -> Optional[str]:
    if value is None:
        return None
    return _require_str(value, name=name)


def _field(op: Mapping[str, Any], key: str) -> Any:
    if key not in op:
        raise ValueError(f"missing field: {key}")
    return op[key]


@dataclass(frozen=True)
class OpResult:
    """
    Outcome of one operation.

    `value` is the controller's return value on success. On failure `error`
    holds the message and `code` the stable failure tag.
    """

    ok: bool
    value: Any = None
    error: Optional[str] = None
    code: Optional[str] = None


def parse_accounts(data: Any) -> PoolAccounts:
    """Parse a caller-asserted accounts object."""
    if not isinstance(data, Mapping):
        raise ValueError("accounts must be an object")
    return PoolAccounts(
        pool=_require_str(_field(data, "pool"), name="accounts.pool"),
        mint_x=_require_str(_field(data, "mint_x"), name="accounts.mint_x"),
        mint_y=_require_str(_field(data, "mint_y"), name="accounts.mint_y"),
        vault_x=_require_str(_field(data, "vault_x"), name="accounts.vault_x"),
        vault_y=_require_str(_field(data, "vault_y"), name="accounts.vault_y"),
        lp_mint=_require_str(_field(data, "lp_mint"), name="accounts.lp_mint"),
        seed=_require_int(_field(data, "seed"), name="accounts.seed", non_negative=True),
        config_bump=_require_int(_field(data, "config_bump"), name="accounts.config_bump", non_negative=True),
        lp_bump=_require_int(_field(data, "lp_bump"), name="accounts.lp_bump", non_negative=True),
    )


def _resolve_accounts(controller: "PoolController", op: Mapping[str, Any]) -> PoolAccounts:
    if "accounts" in op:
        return parse_accounts(op["accounts"])
    mint_x = _require_str(_field(op, "mint_x"), name="mint_x")
    mint_y = _require_str(_field(op, "mint_y"), name="mint_y")
    seed = _require_int(_field(op, "seed"), name="seed", non_negative=True)
    return controller.accounts_for(mint_x, mint_y, seed)


def _amount(op: Mapping[str, Any], key: str, default: Optional[int] = None) -> int:
    if key not in op and default is not None:
        return default
    return _require_int(_field(op, key), name=key, non_negative=True)


def _dispatch(controller: "PoolController", kind: str, op: Mapping[str, Any]) -> Any:
    if kind == "initialize":
        return controller.initialize(
            _require_str(_field(op, "mint_x"), name="mint_x"),
            _require_str(_field(op, "mint_y"), name="mint_y"),
            _require_int(_field(op, "seed"), name="seed", non_negative=True),
            _require_int(_field(op, "fee_bps"), name="fee_bps", non_negative=True),
            authority=_optional_str(op.get("authority"), name="authority"),
        )

    accounts = _resolve_accounts(controller, op)
    user = _require_str(_field(op, "user"), name="user")

    if kind == "deposit":
        return controller.deposit(
            accounts,
            user,
            _amount(op, "max_x"),
            _amount(op, "max_y"),
            _amount(op, "min_lp_out", default=0),
        )
    if kind == "deposit_for_shares":
        return controller.deposit_for_shares(
            accounts,
            user,
            _amount(op, "lp_amount"),
            _amount(op, "max_x"),
            _amount(op, "max_y"),
        )
    if kind == "withdraw":
        return controller.withdraw(
            accounts,
            user,
            _amount(op, "lp_amount"),
            _amount(op, "min_x_out", default=0),
            _amount(op, "min_y_out", default=0),
        )
    if kind == "swap":
        return controller.swap(
            accounts,
            user,
            _amount(op, "amount_in"),
            _amount(op, "min_amount_out", default=0),
            _require_bool(_field(op, "x_to_y"), name="x_to_y"),
        )
    raise ValueError(f"unknown op: {kind}")


def execute(controller: "PoolController", op: Mapping[str, Any]) -> OpResult:
    """
    Run one operation payload against `controller`.

    Engine failures come back as `OpResult(ok=False, code=<error code>)`.
    Payloads that do not parse come back with code "MalformedOperation"; in
    both cases nothing has changed.
    """
    if not isinstance(op, Mapping):
        return OpResult(ok=False, error="operation must be an object", code=MALFORMED)

    try:
        kind = _require_str(_field(op, "op"), name="op")
        if kind not in OP_KINDS:
            raise ValueError(f"unknown op: {kind}")
        value = _dispatch(controller, kind, op)
    except AmmError as exc:
        logger.warning("%s rejected: %s (%s)", op.get("op"), exc.code, exc)
        return OpResult(ok=False, error=str(exc), code=exc.code)
    except (ValueError, TypeError) as exc:
        logger.warning("malformed %s operation: %s", op.get("op"), exc)
        return OpResult(ok=False, error=str(exc), code=MALFORMED)

    return OpResult(ok=True, value=value)


def execute_all(controller: "PoolController", ops: Iterable[Mapping[str, Any]]) -> List[OpResult]:
    """Run operations in order; a failed operation does not stop later ones."""
    return [execute(controller, op) for op in ops]


def result_to_dict(result: OpResult) -> Dict[str, Any]:
    """Plain-mapping view of a result, for printing or JSON output."""
    out: Dict[str, Any] = {"ok": result.ok}
    if result.ok:
        value = result.value
        if hasattr(value, "__dataclass_fields__"):
            out["value"] = {name: getattr(value, name) for name in value.__dataclass_fields__}
        else:
            out["value"] = value
    else:
        out["error"] = result.error
        out["code"] = result.code
    return out
