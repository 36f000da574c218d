"""
test_arith.py — Test suite for exact Money multiplication

================================================================================
TEST STRUCTURE
================================================================================

1. UNIT TESTS
   Decomposition, normalization, multiplication and decimal shift on
   hand-checked values.

2. PROPERTY-BASED TESTS (Hypothesis)
   - zero absorbs any rate, zero rate absorbs any amount
   - negative rates and invalid amounts are always rejected
   - every result is a valid Money
   - for cent amounts and two-decimal rates the result equals the exact
     Decimal product

================================================================================
"""

from decimal import Decimal

import pytest
from hypothesis import given
from hypothesis import strategies as st

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from nanomoney import (
    Money,
    Decomposition,
    ErrorKind,
    InvalidMultiplierError,
    InvalidValueError,
    NANOS_MAX,
    decompose,
    multiply,
    normalize,
    shift_decimal_left_two,
)
from nanomoney.arith import decimal_places, decimal_text


# ==============================================================================
# TEST HELPERS
# ==============================================================================

@st.composite
def valid_money_strategy(draw, max_units=10**12):
    """Money with matching signs and nanos in range."""
    units = draw(st.integers(min_value=-max_units, max_value=max_units))
    nanos = draw(st.integers(min_value=0, max_value=NANOS_MAX))
    if units < 0 or (units == 0 and draw(st.booleans())):
        nanos = -nanos
    currency = draw(st.sampled_from(["", "EUR", "USD"]))
    return Money(units, nanos, currency)


@st.composite
def invalid_money_strategy(draw):
    """Money breaking either the sign or the range invariant."""
    if draw(st.booleans()):
        units = draw(st.integers(min_value=1, max_value=10**12))
        nanos = draw(st.integers(min_value=1, max_value=NANOS_MAX))
        if draw(st.booleans()):
            return Money(units, -nanos)
        return Money(-units, nanos)
    nanos = draw(st.integers(min_value=NANOS_MAX + 1, max_value=10**12))
    return Money(0, nanos if draw(st.booleans()) else -nanos)


rates = st.one_of(
    st.just(0.0),
    st.integers(min_value=0, max_value=10**6).map(lambda n: n / 10**4),
    st.floats(min_value=1e-9, max_value=1e4, allow_nan=False, allow_infinity=False),
)


# ==============================================================================
# UNIT TESTS: Decimal text
# ==============================================================================

class TestDecimalText:

    @pytest.mark.parametrize("value, text", [
        (15.11, "15.11"),
        (15.0, "15"),
        (0.0, "0"),
        (1e-05, "0.00001"),
        (1e16, "10000000000000000"),
        (0.000003432, "0.000003432"),
    ])
    def test_decimal_text(self, value, text):
        assert decimal_text(value) == text

    @pytest.mark.parametrize("value, places", [
        (0.29, 2),
        (15.0, 0),
        (0.1511, 4),
        (1e-10, 10),
    ])
    def test_decimal_places(self, value, places):
        assert decimal_places(value) == places


# ==============================================================================
# UNIT TESTS: Decomposition
# ==============================================================================

class TestDecompose:

    def test_correction_fires_for_029(self):
        """0.29 * 100 is 28.999... in binary; must still give 29/100."""
        assert decompose(0.29) == Decomposition(0, 29, 100)

    def test_integer_and_fraction(self):
        # frac(15.11) * 100 truncates to 10 before correction
        assert decompose(15.11) == Decomposition(15, 11, 100)

    def test_whole_rate(self):
        assert decompose(2.0) == Decomposition(2, 0, 1)

    def test_exact_binary_fraction(self):
        assert decompose(1.5) == Decomposition(1, 5, 10)

    def test_four_decimals(self):
        assert decompose(0.1511) == Decomposition(0, 1511, 10_000)

    def test_truncation_below_threshold_is_kept(self):
        """0.0705 * 10000 is 704.99999999999989; losing 1/705 is under 1%."""
        d = decompose(0.0705)
        assert d.fractional_scale == 10_000
        assert d.fractional_numerator / d.fractional_scale < 0.0705
        assert d == Decomposition(0, 704, 10_000)

    def test_scale_beyond_nanos(self):
        d = decompose(1e-10)
        assert d.fractional_scale == 10**10
        assert d.fractional_numerator == 1

    def test_fields_are_named(self):
        d = decompose(0.29)
        assert d.integer_part == 0
        assert d.fractional_numerator == 29
        assert d.fractional_scale == 100


# ==============================================================================
# UNIT TESTS: Normalization
# ==============================================================================

class TestNormalize:

    @pytest.mark.parametrize("raw, expected", [
        ((0, 0), (0, 0)),
        ((1, 1_500_000_000), (2, 500_000_000)),
        ((-1, -1_500_000_000), (-2, -500_000_000)),
        ((0, 2_000_000_000), (2, 0)),
        ((0, -1_500_000_000), (-1, -500_000_000)),
        ((5, -300_000_000), (4, 700_000_000)),
        ((-5, 300_000_000), (-4, -700_000_000)),
    ])
    def test_normalize(self, raw, expected):
        assert normalize(*raw) == expected


# ==============================================================================
# UNIT TESTS: Multiplication
# ==============================================================================

class TestMultiply:

    def test_vat_on_percent_rate(self):
        """19.13 at 15.11%, with the rate shifted from percent notation."""
        rate = shift_decimal_left_two(15.11)
        assert multiply(Money(19, 130_000_000), rate) == Money(2, 890_543_000)

    def test_negative_amount(self):
        assert multiply(Money(-19, -130_000_000), 0.1511) == Money(-2, -890_543_000)

    def test_keeps_currency_code(self):
        assert multiply(Money(100, 0, "EUR"), 0.22) == Money(22, 0, "EUR")

    def test_carry_into_units(self):
        assert multiply(Money(10, 500_000_000), 2) == Money(21, 0)

    def test_fraction_of_units_becomes_nanos(self):
        assert multiply(Money(1, 0), 1.5) == Money(1, 500_000_000)

    def test_nanos_fraction_rounds_half_up(self):
        assert multiply(Money(0, 5), 0.5) == Money(0, 3)
        assert multiply(Money(0, -5), 0.5) == Money(0, -3)

    def test_scale_beyond_nanos_keeps_fraction(self):
        # 1000 * 1e-10 = 0.0000001
        assert multiply(Money(1000, 0), 1e-10) == Money(0, 100)

    def test_operator_and_method(self):
        m = Money(19, 130_000_000, "EUR")
        expected = Money(2, 890_543_000, "EUR")
        assert m * 0.1511 == expected
        assert 0.1511 * m == expected
        assert m.mul(0.1511) == expected

    def test_operator_rejects_non_numbers(self):
        with pytest.raises(TypeError):
            Money(1, 0) * "2"
        with pytest.raises(TypeError):
            Money(1, 0) * True

    def test_zero_amount(self):
        assert multiply(Money.zero("EUR"), 0.5) == Money.zero("EUR")

    def test_zero_rate(self):
        assert multiply(Money(5, 0, "USD"), 0) == Money.zero("USD")

    def test_negative_rate(self):
        with pytest.raises(InvalidMultiplierError) as exc_info:
            multiply(Money(5, 0), -0.01)
        assert exc_info.value.kind is ErrorKind.INVALID_MULTIPLIER

    def test_negative_rate_checked_before_value(self):
        with pytest.raises(InvalidMultiplierError):
            multiply(Money(5, -3), -1)

    def test_invalid_value(self):
        with pytest.raises(InvalidValueError) as exc_info:
            multiply(Money(5, -300_000_000), 0.22)
        assert exc_info.value.kind is ErrorKind.INVALID_VALUE

    def test_invalid_value_with_zero_rate(self):
        with pytest.raises(InvalidValueError):
            multiply(Money(0, 1_000_000_000), 0)


# ==============================================================================
# PROPERTY-BASED TESTS: Multiplication
# ==============================================================================

class TestMultiplyProperties:

    @given(rate=rates, currency=st.sampled_from(["", "EUR"]))
    def test_zero_absorbs_rate(self, rate, currency):
        assert multiply(Money.zero(currency), rate) == Money.zero(currency)

    @given(m=valid_money_strategy())
    def test_zero_rate_absorbs_amount(self, m):
        assert multiply(m, 0.0) == Money.zero(m.currency_code)

    @given(m=valid_money_strategy())
    def test_negative_rate_always_rejected(self, m):
        with pytest.raises(InvalidMultiplierError):
            multiply(m, -0.01)

    @given(m=invalid_money_strategy(), rate=rates)
    def test_invalid_value_always_rejected(self, m, rate):
        with pytest.raises(InvalidValueError):
            multiply(m, rate)

    @given(m=valid_money_strategy(), rate=rates)
    def test_result_is_valid(self, m, rate):
        result = multiply(m, rate)
        assert result.is_valid()
        assert result.currency_code == m.currency_code

    @given(
        cents=st.integers(min_value=-10**12, max_value=10**12),
        hundredths=st.integers(min_value=0, max_value=10**4),
    )
    def test_matches_exact_product(self, cents, hundredths):
        """Cents times a two-decimal rate fits in nanos, so no rounding applies."""
        amount = Money.from_int64(cents, 100)
        exact = (Decimal(cents) * Decimal(hundredths)).scaleb(-4)

        result = multiply(amount, hundredths / 100)

        assert result == Money.parse(format(exact, "f"))


# ==============================================================================
# UNIT TESTS: Decimal shift
# ==============================================================================

class TestShiftDecimalLeftTwo:

    @pytest.mark.parametrize("value, expected", [
        (15.11, 0.1511),
        (0.1511, 0.001511),
        (0.1, 0.001),
        (0.01, 0.0001),
        (0.0003432, 0.000003432),
        (0.000003432, 0.00000003432),
        (129392.493093, 1293.92493093),
        (999.9, 9.999),
        (9999999999.99, 99999999.9999),
        (99999999999, 999999999.99),
        (0.0, 0.0),
        (5, 0.05),
    ])
    def test_shift(self, value, expected):
        assert shift_decimal_left_two(value) == expected

    @given(n=st.integers(min_value=0, max_value=2**53))
    def test_integers_match_correctly_rounded_division(self, n):
        assert shift_decimal_left_two(float(n)) == n / 100
