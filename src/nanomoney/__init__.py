"""
nanomoney — Exact (units, nanos) Money arithmetic

Fixed-point monetary amounts in the google.type.Money shape, and a
multiplication by decimal rates (VAT, tax) that never drifts through
binary floating point.

================================================================================
QUICK START
================================================================================

Basic usage:

    from nanomoney import Money, shift_decimal_left_two

    price = Money.from_int64(1913, 100, "EUR")   # 19.13 EUR

    # 15.11% as an exact fraction
    rate = shift_decimal_left_two(15.11)          # 0.1511

    vat = price * rate
    # vat == Money(2, 890543000, "EUR")

Error handling:

    from nanomoney import Money, MoneyError, multiply

    try:
        multiply(Money(5, -300_000_000), 0.22)
    except MoneyError as e:
        print(e.kind)   # ErrorKind.INVALID_VALUE

================================================================================
"""

# Money value model
from .core import (
    Money,
    ErrorKind,
    MoneyError,
    InvalidMultiplierError,
    InvalidValueError,
    NANOS_MIN,
    NANOS_MAX,
    NANOS_MOD,
    is_greater_than,
    as_int64,
    as_int32,
    multiply,
    normalize,
)

# Rate decomposition and decimal shift
from .arith import (
    Decomposition,
    decompose,
    shift_decimal_left_two,
)

__version__ = "1.0.0"

__all__ = [
    # Core
    "Money",
    "ErrorKind",
    "MoneyError",
    "InvalidMultiplierError",
    "InvalidValueError",
    "NANOS_MIN",
    "NANOS_MAX",
    "NANOS_MOD",
    "is_greater_than",
    "as_int64",
    "as_int32",
    "multiply",
    "normalize",
    # Arithmetic
    "Decomposition",
    "decompose",
    "shift_decimal_left_two",
]
