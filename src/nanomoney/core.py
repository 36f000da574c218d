"""
core.py — Money value model with (units, nanos) representation

================================================================================
DESIGN PRINCIPLES
================================================================================

1. INTERNAL REPRESENTATION
   Two integers: whole units and billionths of a unit (nanos).
   Same shape as google.type.Money, so values move across APIs unchanged.

2. VALIDITY IS DERIVED
   A Money can be built in an invalid state (e.g. units=+5, nanos=-3).
   Operations that consume Money check is_valid() themselves.

3. IMMUTABILITY
   Frozen dataclass. Every operation returns a new instance.

4. NO CURRENCY SEMANTICS
   currency_code is an opaque label carried through unchanged.
   Nothing here converts or cross-checks currencies.

5. INTEGER CONVERSIONS
   from_int64/as_int64 map between Money and a single integer expressed in
   minor units (cents for multiplier=100). The 32-bit variants wrap exactly
   like a narrowing cast: large values silently lose their high bits.

================================================================================
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .arith import decompose, div_round_half_up, trunc_div, trunc_rem


NANOS_MIN = -999_999_999
NANOS_MAX = 999_999_999
NANOS_MOD = 1_000_000_000

FRACTION_DIGITS = 9


# ==============================================================================
# ERRORS
# ==============================================================================

class ErrorKind(Enum):
    """Closed set of failures the multiplication engine can report."""
    INVALID_MULTIPLIER = "invalid_multiplier"
    INVALID_VALUE = "invalid_value"


class MoneyError(ValueError):
    """
    Base class for engine failures.

    Failures are deterministic: the same inputs always fail the same way,
    so callers skip or report the input instead of retrying.
    """
    kind: ErrorKind

    def __init__(self, message: str, kind: ErrorKind):
        super().__init__(message)
        self.kind = kind


class InvalidMultiplierError(MoneyError):
    """Raised when a negative multiplier is provided."""

    def __init__(self, multiplier: float):
        super().__init__(
            f"multiplier provided is negative which is invalid: {multiplier!r}",
            ErrorKind.INVALID_MULTIPLIER,
        )
        self.multiplier = multiplier


class InvalidValueError(MoneyError):
    """Raised when a Money operand breaks the sign or nanos-range invariant."""

    def __init__(self, value: Money):
        super().__init__(
            f"money value is invalid: units={value.units}, nanos={value.nanos}",
            ErrorKind.INVALID_VALUE,
        )
        self.value = value


# ==============================================================================
# INTEGER HELPERS
# ==============================================================================

def _wrap_int32(value: int) -> int:
    return ((value + 2**31) % 2**32) - 2**31


def _is_digits(text: str) -> bool:
    # str.isdigit alone accepts non-ASCII digits such as "²"
    return text.isascii() and text.isdigit()


# ==============================================================================
# MONEY CLASS
# ==============================================================================

@dataclass(frozen=True, slots=True)
class Money:
    """
    Exact monetary amount as (units, nanos).

    INVARIANTS (checked by is_valid, not enforced at construction):
    1. units and nanos have the same sign, unless either is zero
    2. NANOS_MIN <= nanos <= NANOS_MAX

    USAGE:
        price = Money(19, 130_000_000, "EUR")     # 19.13 EUR
        price = Money.from_int64(1913, 100, "EUR")
        vat = price * 0.22

    Money() is the zero value with an empty currency code.
    """
    units: int = 0
    nanos: int = 0
    currency_code: str = ""

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------

    @classmethod
    def zero(cls, currency_code: str = "") -> Money:
        return cls(0, 0, currency_code)

    @classmethod
    def from_int64(cls, amount: int, multiplier: int, currency_code: str = "") -> Money:
        """
        Build Money from an integer expressed in 1/multiplier of a unit.

        Example: from_int64(1913, 100, "EUR") -> 19.130000000 EUR

        multiplier must be positive. It is not validated: 0 raises
        ZeroDivisionError and a negative multiplier gives meaningless output.
        """
        if amount == 0:
            return cls.zero(currency_code)

        units = trunc_div(amount, multiplier)
        remainder = trunc_rem(amount, multiplier)
        nanos = trunc_div(remainder * NANOS_MOD, multiplier)

        return cls(units, nanos, currency_code)

    @classmethod
    def from_int32(cls, amount: int, multiplier: int, currency_code: str = "") -> Money:
        """from_int64 with both arguments narrowed to signed 32 bits."""
        return cls.from_int64(_wrap_int32(amount), _wrap_int32(multiplier), currency_code)

    @classmethod
    def parse(cls, text: str, currency_code: str = "") -> Money:
        """
        Parse "<units>[.<fraction>]".

        The fraction is right-padded with zeros to nine digits, or truncated
        when longer. A leading "-" applies to the whole amount, so "-0.5"
        gives units=0, nanos=-500000000.

        Raises:
            ValueError: if the text is not plain ASCII digits around the dot
        """
        text = text.strip()
        negative = text.startswith("-")
        whole, _, fraction = text.partition(".")

        magnitude = whole[1:] if negative else whole
        if not _is_digits(magnitude) or not (fraction == "" or _is_digits(fraction)):
            raise ValueError(f"Malformed amount: {text!r}")

        units = int(whole)
        nanos = int(fraction[:FRACTION_DIGITS].ljust(FRACTION_DIGITS, "0"))

        return cls(units, -nanos if negative else nanos, currency_code)

    # -------------------------------------------------------------------------
    # Predicates
    # -------------------------------------------------------------------------

    def is_valid(self) -> bool:
        return self._sign_matches() and NANOS_MIN <= self.nanos <= NANOS_MAX

    def _sign_matches(self) -> bool:
        return self.nanos == 0 or self.units == 0 or (self.nanos < 0) == (self.units < 0)

    def is_zero(self) -> bool:
        return self.units == 0 and self.nanos == 0

    def is_positive(self) -> bool:
        """True if the value is valid and strictly greater than zero."""
        return self.is_valid() and (
            self.units > 0 or (self.units == 0 and self.nanos > 0)
        )

    # -------------------------------------------------------------------------
    # Integer conversion
    # -------------------------------------------------------------------------

    def as_int64(self, multiplier: int) -> int:
        """
        Convert to an integer in 1/multiplier of a unit.

        Fractions smaller than 1/multiplier are truncated toward zero:
        Money(1, 999_999_999).as_int64(100) == 199
        """
        return self.units * multiplier + trunc_div(self.nanos * multiplier, NANOS_MOD)

    def as_int32(self, multiplier: int) -> int:
        """as_int64 narrowed to signed 32 bits, wrapping on overflow."""
        return _wrap_int32(self.as_int64(_wrap_int32(multiplier)))

    # -------------------------------------------------------------------------
    # Arithmetic
    # -------------------------------------------------------------------------

    def mul(self, rate: float) -> Money:
        """Multiply by a non-negative decimal rate. See multiply()."""
        return multiply(self, rate)

    def __mul__(self, rate: float) -> Money:
        if isinstance(rate, bool) or not isinstance(rate, (int, float)):
            return NotImplemented
        return self.mul(float(rate))

    def __rmul__(self, rate: float) -> Money:
        return self.__mul__(rate)

    # -------------------------------------------------------------------------
    # Comparison
    # -------------------------------------------------------------------------
    #
    # Currency codes are not compared. Ordering is total only on valid values.

    def __gt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return is_greater_than(self, other)

    def __lt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return is_greater_than(other, self)

    def __ge__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return not is_greater_than(other, self)

    def __le__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return not is_greater_than(self, other)

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------

    def __str__(self) -> str:
        sign = "-" if self.units < 0 or self.nanos < 0 else ""
        text = f"{sign}{abs(self.units)}.{abs(self.nanos):09d}"
        if self.currency_code:
            return f"{text} {self.currency_code}"
        return text

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict:
        """
        Serialize for persistence/API.

        Format: {"units": int, "nanos": int, "currency_code": str}
        NEVER serialize as float.
        """
        return {
            "units": self.units,
            "nanos": self.nanos,
            "currency_code": self.currency_code,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Money:
        """Missing keys default to the zero value's fields."""
        return cls(
            units=int(data.get("units", 0)),
            nanos=int(data.get("nanos", 0)),
            currency_code=data.get("currency_code", ""),
        )


# ==============================================================================
# MODULE-LEVEL HELPERS
# ==============================================================================

def is_greater_than(a: Optional[Money], b: Optional[Money]) -> bool:
    """
    Return a > b, comparing units first and nanos as tie-break.

    An absent a is never greater; an absent b is always less.
    """
    if a is None:
        return False
    if b is None:
        return True
    if a.units != b.units:
        return a.units > b.units
    return a.nanos > b.nanos


def as_int64(money: Optional[Money], multiplier: int) -> int:
    """Money.as_int64 where an absent value converts to 0."""
    if money is None:
        return 0
    return money.as_int64(multiplier)


def as_int32(money: Optional[Money], multiplier: int) -> int:
    """Money.as_int32 where an absent value converts to 0."""
    if money is None:
        return 0
    return money.as_int32(multiplier)


# ==============================================================================
# MULTIPLICATION
# ==============================================================================
#
# With rate = integer_part + numerator / scale, every term is an integer:
#
#     units * integer_part                   -> whole units
#     units * numerator / scale              -> whole units (carry)
#     units * numerator % scale              -> nanos
#     nanos * integer_part                   -> nanos
#     nanos * numerator / scale              -> nanos (rounded half up)
#
# The raw (units, nanos) pair is then normalized back to a valid Money.

def normalize(units: int, nanos: int) -> tuple[int, int]:
    """
    Restore the sign-matching and range invariants of a raw (units, nanos).

    Same signs: carry whole units out of nanos.
    Opposite signs: borrow one unit from the units side. In that branch
    nanos never exceeds one unit in magnitude, so a single borrow suffices.
    """
    if (units >= 0 and nanos >= 0) or (units <= 0 and nanos <= 0):
        return units + trunc_div(nanos, NANOS_MOD), trunc_rem(nanos, NANOS_MOD)

    if units > 0:
        return units - 1, nanos + NANOS_MOD
    return units + 1, nanos - NANOS_MOD


def multiply(money: Money, rate: float) -> Money:
    """
    Multiply money by a non-negative decimal rate without float drift.

    The result keeps money's currency code and is always valid.
    A NaN or infinite rate is not supported and fails inside decompose()
    with ValueError or OverflowError.

    Raises:
        InvalidMultiplierError: if rate < 0
        InvalidValueError: if money is not valid
    """
    # Negative multipliers have no meaning for prices and rates.
    if rate < 0:
        raise InvalidMultiplierError(rate)

    if not money.is_valid():
        raise InvalidValueError(money)

    if money.is_zero() or rate == 0:
        return Money.zero(money.currency_code)

    integer_part, numerator, scale = decompose(rate)

    nanos_from_int = money.nanos * integer_part
    nanos_from_frac = div_round_half_up(money.nanos * numerator, scale)

    units_from_int = money.units * integer_part
    units_frac = money.units * numerator
    units_frac_carry = trunc_div(units_frac, scale)
    units_frac_remainder = trunc_rem(units_frac, scale)

    # Multiply before dividing: scales beyond 10**9 must not collapse to zero.
    nanos_from_units_frac = trunc_div(units_frac_remainder * NANOS_MOD, scale)

    units, nanos = normalize(
        units_from_int + units_frac_carry,
        nanos_from_units_frac + nanos_from_int + nanos_from_frac,
    )

    return Money(units, nanos, money.currency_code)
