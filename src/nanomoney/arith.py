"""
arith.py — Integer and decimal-text helpers behind exact Money arithmetic

================================================================================
DECOMPOSITION
================================================================================

A rate such as 0.22 (VAT) cannot be stored exactly in binary floating point.
Multiplying units and nanos by the float directly drifts by a few nanos on
large amounts. Instead the rate is split once into integers:

    rate = integer_part + fractional_numerator / fractional_scale

    0.29   -> (0, 29, 100)
    15.11  -> (15, 11, 100)
    1.5    -> (1, 5, 10)

core.multiply then computes every term of the product with integer
arithmetic only.

================================================================================
DECIMAL SHIFT
================================================================================

Rates are often supplied as percentages (15.11 for 15.11%). Dividing by 100
in floating point can corrupt the digits; shift_decimal_left_two moves the
decimal point in the text representation instead.

================================================================================
"""

from __future__ import annotations
from decimal import Decimal
from typing import NamedTuple
import logging
import math


logger = logging.getLogger(__name__)

# Minimum relative deviation (in percent) that triggers the numerator correction.
CORRECTION_THRESHOLD_PERCENT = 1


# ==============================================================================
# INTEGER HELPERS
# ==============================================================================
#
# Python's // and % floor toward negative infinity. Money arithmetic truncates
# toward zero and the remainder takes the sign of the dividend.

def trunc_div(a: int, b: int) -> int:
    """Integer division truncated toward zero."""
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


def trunc_rem(a: int, b: int) -> int:
    """Remainder of trunc_div; has the sign of the dividend."""
    return a - b * trunc_div(a, b)


def div_round_half_up(numerator: int, denominator: int) -> int:
    """numerator / denominator rounded to nearest, halves away from zero."""
    quotient, remainder = divmod(abs(numerator), denominator)
    if 2 * remainder >= denominator:
        quotient += 1
    return -quotient if numerator < 0 else quotient


# ==============================================================================
# DECIMAL TEXT
# ==============================================================================

def decimal_text(value: float) -> str:
    """
    Shortest decimal text that round-trips to value, in fixed notation.

    repr() gives the shortest digits but switches to exponent notation for
    small and large magnitudes; Decimal formats them back without exponent.
    Trailing fractional zeros are dropped: 15.0 -> "15".
    """
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def decimal_places(value: float) -> int:
    """Number of digits after the decimal point in decimal_text(value)."""
    _, dot, fraction = decimal_text(value).partition(".")
    return len(fraction) if dot else 0


# ==============================================================================
# DECOMPOSITION
# ==============================================================================

class Decomposition(NamedTuple):
    """A non-negative rate as integer_part + fractional_numerator / fractional_scale."""
    integer_part: int
    fractional_numerator: int
    fractional_scale: int


def decompose(rate: float) -> Decomposition:
    """
    Split a non-negative rate into integer part and fraction numerator/scale.

    The fraction is read back from the float, which may hold a value just
    below the decimal one (0.29 is stored as 0.28999...). When truncating
    loses at least CORRECTION_THRESHOLD_PERCENT of the fraction, the
    numerator is bumped by one, so 0.29 gives 29/100 and not 28/100.
    Smaller losses are kept: 0.0705 gives 704/10000.

    Rates that are negative, non-finite or too small to scale in floating
    point are not supported.
    """
    scale = 10 ** decimal_places(rate)

    fraction, whole = math.modf(rate)
    integer_part = int(whole)
    numerator = int(fraction * scale)

    recomputed = numerator / scale
    if recomputed < fraction:
        deviation = ((fraction - recomputed) / fraction) * 100
        if deviation >= CORRECTION_THRESHOLD_PERCENT:
            logger.debug(
                "Corrected fraction numerator of %r from %d to %d (deviation %.4f%%)",
                rate, numerator, numerator + 1, deviation,
            )
            numerator += 1

    return Decomposition(integer_part, numerator, scale)


# ==============================================================================
# DECIMAL SHIFT
# ==============================================================================

def shift_decimal_left_two(value: float) -> float:
    """
    Exact value / 100 for a non-negative value, computed on decimal digits.

        15.11        -> 0.1511
        999.9        -> 9.999
        99999999999  -> 999999999.99

    Negative values are not supported.
    """
    whole, _, fraction = decimal_text(value).partition(".")
    whole = whole.zfill(2)
    return float(f"{whole[:-2] or '0'}.{whole[-2:]}{fraction}")
