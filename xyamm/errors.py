"""Exception types for the pool-accounting engine.

Every failure the engine can report is a subclass of ``AmmError`` carrying a
stable ``code`` string. ``execute()`` in ``xyamm.integration.operations`` turns
these into tagged ``OpResult`` failures for callers that prefer results over
exceptions.

Errors are grouped by kind:

- validation: bad arguments (also ``ValueError``)
- state: the pool or caller is not in a state that allows the operation
- economic guard: a caller-supplied slippage bound did not hold
- arithmetic: fixed-point overflow/underflow/division by zero (also ``ArithmeticError``)
- integrity: caller-asserted accounts, a computed post-state or the custody
  collaborator are inconsistent with the engine
"""

from __future__ import annotations


class AmmError(Exception):
    """Base class for all tagged engine failures."""

    code = "AmmError"


# -- validation ---------------------------------------------------------------


class AmmValidationError(AmmError, ValueError):
    code = "ValidationError"


class InvalidFee(AmmValidationError):
    code = "InvalidFee"


class IdenticalMints(AmmValidationError):
    code = "IdenticalMints"


class ZeroDeposit(AmmValidationError):
    code = "ZeroDeposit"


class InvalidAmount(AmmValidationError):
    code = "InvalidAmount"


class InsufficientInitialLiquidity(AmmValidationError):
    code = "InsufficientInitialLiquidity"


# -- state --------------------------------------------------------------------


class AmmStateError(AmmError):
    code = "StateError"


class PoolAlreadyExists(AmmStateError):
    code = "PoolAlreadyExists"


class PoolNotFound(AmmStateError):
    code = "PoolNotFound"


class PoolEmpty(AmmStateError):
    code = "PoolEmpty"


class PoolLocked(AmmStateError):
    code = "PoolLocked"


class InsufficientLpBalance(AmmStateError):
    code = "InsufficientLpBalance"


class InsufficientLiquidity(AmmStateError):
    code = "InsufficientLiquidity"


class InsufficientFunds(AmmStateError):
    code = "InsufficientFunds"


# -- economic guard -----------------------------------------------------------


class SlippageExceeded(AmmError):
    code = "SlippageExceeded"


# -- arithmetic ---------------------------------------------------------------


class AmmArithmeticError(AmmError, ArithmeticError):
    code = "ArithmeticError"


class ArithmeticOverflow(AmmArithmeticError):
    code = "ArithmeticOverflow"


class ArithmeticUnderflow(AmmArithmeticError):
    code = "ArithmeticUnderflow"


class DivisionByZero(AmmArithmeticError):
    code = "DivisionByZero"


# -- integrity ----------------------------------------------------------------


class AmmIntegrityError(AmmError):
    code = "IntegrityError"


class AccountMismatch(AmmIntegrityError):
    code = "AccountMismatch"

    def __init__(self, field: str, expected: str, actual: str) -> None:
        self.field = field
        self.expected = expected
        self.actual = actual
        super().__init__(f"{field}: expected {expected}, got {actual}")


class CustodyError(AmmIntegrityError):
    """Raised when the custody collaborator refuses a setup step or a movement."""

    code = "CustodyError"


class InvariantViolation(AmmIntegrityError):
    """Raised when a computed post-state violates one or more pool invariants."""

    code = "InvariantViolation"

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(f"invariant violations: {', '.join(violations)}")
