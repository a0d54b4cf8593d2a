"""
Fixed-point integer kernel.

Amounts are unsigned 64-bit magnitudes; intermediate products are allowed to
use a 128-bit working width. Python ints never wrap, so the widths are enforced
explicitly: every helper fails closed instead of silently producing a value the
on-ledger representation could not hold.

Rounding is always explicit:
- `mul_div` rounds toward zero (floor, all operands are non-negative),
- `mul_div_round_up` rounds away from zero (ceil).
"""

from __future__ import annotations

import math

from ...errors import (
    ArithmeticOverflow,
    ArithmeticUnderflow,
    DivisionByZero,
    InvalidAmount,
)


U64_MAX = (1 << 64) - 1
U128_MAX = (1 << 128) - 1


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def require_u64(name: str, value: int) -> int:
    """Validate that `value` is an int in [0, U64_MAX] and return it."""
    _require_int(name, value)
    if value < 0:
        raise InvalidAmount(f"{name} must be non-negative: {value}")
    if value > U64_MAX:
        raise ArithmeticOverflow(f"{name} exceeds u64: {value}")
    return value


def _checked_product(a: int, b: int) -> int:
    _require_int("a", a)
    _require_int("b", b)
    if a < 0 or b < 0:
        raise InvalidAmount("operands must be non-negative")
    product = a * b
    if product > U128_MAX:
        raise ArithmeticOverflow(f"product exceeds u128: {a} * {b}")
    return product


def mul_div(a: int, b: int, c: int) -> int:
    """Compute `floor(a * b / c)`."""
    product = _checked_product(a, b)
    _require_int("c", c)
    if c == 0:
        raise DivisionByZero("mul_div denominator is zero")
    if c < 0:
        raise InvalidAmount("denominator must be positive")
    return product // c


def mul_div_round_up(a: int, b: int, c: int) -> int:
    """Compute `ceil(a * b / c)`."""
    product = _checked_product(a, b)
    _require_int("c", c)
    if c == 0:
        raise DivisionByZero("mul_div_round_up denominator is zero")
    if c < 0:
        raise InvalidAmount("denominator must be positive")
    return (product + c - 1) // c


def checked_add(a: int, b: int, *, limit: int = U64_MAX) -> int:
    _require_int("a", a)
    _require_int("b", b)
    out = a + b
    if out > limit:
        raise ArithmeticOverflow(f"{a} + {b} exceeds {limit}")
    if out < 0:
        raise ArithmeticUnderflow(f"{a} + {b} is negative")
    return out


def checked_sub(a: int, b: int) -> int:
    _require_int("a", a)
    _require_int("b", b)
    out = a - b
    if out < 0:
        raise ArithmeticUnderflow(f"{a} - {b} is negative")
    return out


def isqrt(n: int) -> int:
    """Floor integer square root. Exact for arbitrarily large ints (no float rounding)."""
    _require_int("n", n)
    if n < 0:
        raise InvalidAmount(f"isqrt of negative value: {n}")
    return math.isqrt(n)
