"""
fixtures.py — Regression fixtures for the multiplication engine

A fixture file is a CSV with one case per row:

    amount,rate,expected
    19.13,0.1511,2.890543

Amounts use Money.parse text. Rates are plain floats, or percentages
(15.11 for 15.11%) when read with percent_rates=True.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_DOWN
from pathlib import Path
from typing import Iterable, Iterator, List, Tuple, Union
import csv
import logging
import math

from .arith import shift_decimal_left_two
from .core import FRACTION_DIGITS, Money, MoneyError, multiply


logger = logging.getLogger(__name__)


# ==============================================================================
# READING AND CHECKING
# ==============================================================================

@dataclass(frozen=True)
class FixtureRow:
    line: int
    amount: Money
    rate: float
    expected: Money


@dataclass(frozen=True)
class MalformedRow:
    """A CSV row that could not be turned into a FixtureRow."""
    line: int
    record: Tuple[str, ...]
    reason: str


@dataclass
class FixtureReport:
    """Outcome of a fixture run. Bad rows are recorded and never stop the run."""
    passed: int = 0
    mismatches: List[Tuple[FixtureRow, Money]] = field(default_factory=list)
    errors: List[Tuple[FixtureRow, MoneyError]] = field(default_factory=list)
    malformed: List[MalformedRow] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.passed + len(self.mismatches) + len(self.errors) + len(self.malformed)

    @property
    def ok(self) -> bool:
        return not self.mismatches and not self.errors and not self.malformed


def read_fixtures(
    path: Path | str,
    percent_rates: bool = False,
) -> Iterator[Union[FixtureRow, MalformedRow]]:
    """
    Yield fixture rows from a CSV file.

    Blank lines and lines starting with "#" are skipped. A row with fewer
    than three columns, a malformed amount or a non-finite rate is yielded
    as a MalformedRow so the rest of the file is still read.

    Raises:
        OSError: if the file cannot be opened
    """
    with open(path, newline="") as handle:
        for line, record in enumerate(csv.reader(handle), start=1):
            if not record or record[0].lstrip().startswith("#"):
                continue
            try:
                row = _parse_record(line, record, percent_rates)
            except ValueError as e:
                row = MalformedRow(line=line, record=tuple(record), reason=str(e))
            yield row


def _parse_record(line: int, record: List[str], percent_rates: bool) -> FixtureRow:
    if len(record) < 3:
        raise ValueError(f"expected 3 columns, got {len(record)}")

    rate = float(record[1])
    if not math.isfinite(rate):
        raise ValueError(f"rate must be finite: {record[1]!r}")
    if percent_rates:
        rate = shift_decimal_left_two(rate)

    return FixtureRow(
        line=line,
        amount=Money.parse(record[0]),
        rate=rate,
        expected=Money.parse(record[2]),
    )


def check_fixtures(rows: Iterable[Union[FixtureRow, MalformedRow]]) -> FixtureReport:
    """Multiply every row and compare units/nanos with the expected value."""
    report = FixtureReport()

    for row in rows:
        if isinstance(row, MalformedRow):
            logger.error("line %d: malformed row %r: %s", row.line, row.record, row.reason)
            report.malformed.append(row)
            continue

        try:
            actual = multiply(row.amount, row.rate)
        except MoneyError as e:
            logger.error("line %d: %s * %r failed: %s", row.line, row.amount, row.rate, e)
            report.errors.append((row, e))
            continue

        if (actual.units, actual.nanos) != (row.expected.units, row.expected.nanos):
            logger.warning(
                "line %d: %s * %r = %s, expected %s",
                row.line, row.amount, row.rate, actual, row.expected,
            )
            report.mismatches.append((row, actual))
        else:
            report.passed += 1

    logger.info(
        "Checked %d fixtures: %d passed, %d mismatched, %d failed, %d malformed",
        report.total, report.passed, len(report.mismatches), len(report.errors),
        len(report.malformed),
    )
    return report


# ==============================================================================
# GENERATION
# ==============================================================================

def generate_fixtures(amounts: Iterable[int], rates: Iterable[int]) -> Iterator[Tuple[str, str, str]]:
    """
    Yield (amount, rate, expected) text rows for every amount/rate pair.

    amounts are in cents, rates in hundredths of a percent (1511 -> 15.11%).
    The expected product is computed with Decimal and truncated to nanos.
    Rates are written as percentages, to be read back with percent_rates=True.
    """
    rates = list(rates)
    quantum = Decimal(1).scaleb(-FRACTION_DIGITS)

    for cents in amounts:
        amount = Decimal(cents).scaleb(-2)
        for basis in rates:
            percent = Decimal(basis).scaleb(-2)
            expected = (amount * percent / 100).quantize(quantum, rounding=ROUND_DOWN)
            yield (str(amount), str(percent), format(expected, "f"))


def write_fixtures(path: Path | str, rows: Iterable[Tuple[str, str, str]]) -> int:
    """Write rows as CSV and return how many were written."""
    count = 0
    with open(path, "w", newline="") as handle:
        writer = csv.writer(handle)
        for row in rows:
            writer.writerow(row)
            count += 1
    logger.info("Wrote %d fixtures to %s", count, path)
    return count
