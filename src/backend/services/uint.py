"""
uint.py: Bounded unsigned integer arithmetic (Uint128 / Uint64).

Deterministic, integer-only. Python ints never overflow on their own, so
every operation here checks the result against the declared bit width and
raises instead of wrapping:

  - addition/multiplication beyond the range -> ArithmeticOverflow
  - subtraction below zero                    -> ArithmeticUnderflow (or the
                                                 caller-supplied error kind)
  - division by zero                          -> DivideByZero

Division always truncates (floor for non-negative operands).
"""

from __future__ import annotations

from typing import Type

from errors import ArithmeticOverflow, ArithmeticUnderflow, DivideByZero, TreasuryError

UINT64_MAX = (1 << 64) - 1
UINT128_MAX = (1 << 128) - 1


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")


def uint128(value: int, *, name: str = "value") -> int:
    """Validate that ``value`` fits in an unsigned 128-bit integer."""
    _require_int(name, value)
    if value < 0:
        raise ArithmeticUnderflow(f"{name} must be non-negative: {value}")
    if value > UINT128_MAX:
        raise ArithmeticOverflow(f"{name} exceeds Uint128: {value}")
    return value


def uint64(value: int, *, name: str = "value") -> int:
    """Validate that ``value`` fits in an unsigned 64-bit integer."""
    _require_int(name, value)
    if value < 0:
        raise ArithmeticUnderflow(f"{name} must be non-negative: {value}")
    if value > UINT64_MAX:
        raise ArithmeticOverflow(f"{name} exceeds Uint64: {value}")
    return value


def checked_add(a: int, b: int) -> int:
    result = uint128(a, name="lhs") + uint128(b, name="rhs")
    if result > UINT128_MAX:
        raise ArithmeticOverflow(f"Overflow: {a} + {b}")
    return result


def checked_sub(
    a: int,
    b: int,
    *,
    error: Type[TreasuryError] = ArithmeticUnderflow,
) -> int:
    """Subtract ``b`` from ``a``; raise ``error`` instead of going negative."""
    uint128(a, name="lhs")
    uint128(b, name="rhs")
    if b > a:
        raise error(f"Cannot subtract {b} from {a}")
    return a - b


def checked_mul(a: int, b: int) -> int:
    result = uint128(a, name="lhs") * uint128(b, name="rhs")
    if result > UINT128_MAX:
        raise ArithmeticOverflow(f"Overflow: {a} * {b}")
    return result


def checked_div(a: int, b: int) -> int:
    uint128(a, name="lhs")
    uint128(b, name="rhs")
    if b == 0:
        raise DivideByZero(f"Cannot divide {a} by zero")
    return a // b


def multiply_ratio(value: int, numerator: int, denominator: int) -> int:
    """floor(value * numerator / denominator), multiplication first.

    The intermediate product must itself fit in Uint128.
    """
    return checked_div(checked_mul(value, numerator), denominator)
