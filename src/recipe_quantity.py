#!/usr/bin/env python3
"""
Quantity Model
Immutable ingredient quantities whose amount is a number, a range or free
text, with unit-aware merging, scaling and display.
"""

import math
import re
from typing import Optional, Union, Any
from dataclasses import dataclass
from fractions import Fraction

UNICODE_FRACTIONS = {
    '½': 0.5, '¼': 0.25, '¾': 0.75, '⅓': 1 / 3, '⅔': 2 / 3,
    '⅛': 0.125, '⅜': 0.375, '⅝': 0.625, '⅞': 0.875,
}

_NUMBER_PATTERN = re.compile(r'^(?:\d+\s+\d+/\d+|\d+/\d+|\d+(?:\.\d+)?|\.\d+)$')
_RANGE_PATTERN = re.compile(r'^(.+?)\s*[-–]\s*(.+)$')


def format_number(value: float) -> str:
    """
    Render a number without a trailing '.0' and with at most 3 decimals.
    Values too small for 3 decimals keep 3 significant digits instead.
    """
    if value == int(value):
        return str(int(value))
    text = f"{value:.3f}".rstrip('0').rstrip('.')
    if text in ("0", "-0"):
        decimals = 2 - math.floor(math.log10(abs(value)))
        text = f"{value:.{decimals}f}".rstrip('0').rstrip('.')
    return text


def normalize_unit(unit: Optional[str]) -> Optional[str]:
    """Strip a unit; empty units become None."""
    if unit is None:
        return None
    unit = str(unit).strip()
    return unit or None


@dataclass(frozen=True)
class AmountRange:
    """Two-ended numeric amount such as 1-2."""
    start: float
    end: float

    def __add__(self, other: Union["AmountRange", float]) -> "AmountRange":
        if isinstance(other, AmountRange):
            return AmountRange(self.start + other.start, self.end + other.end)
        return AmountRange(self.start + other, self.end + other)

    __radd__ = __add__

    def scaled(self, factor: float) -> "AmountRange":
        return AmountRange(self.start * factor, self.end * factor)

    def __str__(self) -> str:
        return f"{format_number(self.start)}-{format_number(self.end)}"


Amount = Union[float, AmountRange, str]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass(frozen=True)
class Quantity:
    """An amount with an optional unit."""
    amount: Amount
    unit: Optional[str] = None

    def __post_init__(self):
        if _is_number(self.amount):
            object.__setattr__(self, 'amount', float(self.amount))
        elif not isinstance(self.amount, (AmountRange, str)):
            raise TypeError(f"Unsupported quantity amount: {self.amount!r}")
        object.__setattr__(self, 'unit', normalize_unit(self.unit))

    @property
    def is_number(self) -> bool:
        return isinstance(self.amount, float)

    @property
    def is_range(self) -> bool:
        return isinstance(self.amount, AmountRange)

    @property
    def is_text(self) -> bool:
        return isinstance(self.amount, str)

    @property
    def value(self) -> str:
        """Amount as display text, without the unit."""
        if self.is_number:
            return format_number(self.amount)
        return str(self.amount)

    def unit_compatible(self, other: "Quantity") -> bool:
        return self.unit == other.unit

    def scaled(self, factor: float) -> "Quantity":
        """Scale numeric and range amounts; text amounts do not scale."""
        if self.is_number:
            return Quantity(self.amount * factor, self.unit)
        if self.is_range:
            return Quantity(self.amount.scaled(factor), self.unit)
        return self

    def __str__(self) -> str:
        if self.unit:
            return f"{self.value} {self.unit}"
        return self.value


@dataclass(frozen=True)
class MergeResult:
    """Outcome of merging two quantities; merged is None when unmergeable."""
    merged: Optional[Quantity] = None

    @property
    def mergeable(self) -> bool:
        return self.merged is not None


UNMERGEABLE = MergeResult()


def merge(a: Quantity, b: Quantity) -> MergeResult:
    """
    Merge two quantities.

    Args:
        a: First quantity
        b: Second quantity

    Returns:
        MergeResult holding the sum when units are compatible and both amounts
        are numeric or ranges; an unmergeable result otherwise
    """
    if not a.unit_compatible(b) or a.is_text or b.is_text:
        return UNMERGEABLE

    if a.is_number and b.is_number:
        return MergeResult(Quantity(a.amount + b.amount, a.unit))

    # At least one side is a range: sum component-wise
    if a.is_range:
        return MergeResult(Quantity(a.amount + b.amount, a.unit))
    return MergeResult(Quantity(b.amount + a.amount, a.unit))


def parse_number(text: str) -> Optional[float]:
    """Parse '2', '1.5', '1/2', '1 1/2' or a unicode fraction; None otherwise."""
    text = text.strip()
    if not text:
        return None

    if text in UNICODE_FRACTIONS:
        return UNICODE_FRACTIONS[text]
    if len(text) > 1 and text[-1] in UNICODE_FRACTIONS and text[:-1].strip().isdigit():
        return int(text[:-1].strip()) + UNICODE_FRACTIONS[text[-1]]

    if not _NUMBER_PATTERN.match(text):
        return None

    parts = text.split()
    try:
        return float(sum(Fraction(part) for part in parts))
    except (ValueError, ZeroDivisionError):
        return None


def parse_amount(value: Any) -> Amount:
    """Convert a raw amount into a number, a range or text."""
    if _is_number(value):
        return float(value)
    if isinstance(value, AmountRange):
        return value

    text = str(value).strip()
    number = parse_number(text)
    if number is not None:
        return number

    match = _RANGE_PATTERN.match(text)
    if match:
        start = parse_number(match.group(1))
        end = parse_number(match.group(2))
        if start is not None and end is not None:
            return AmountRange(start, end)

    return text


def parse_quantity(value: Any, unit: Optional[str] = None) -> Quantity:
    """
    Build a Quantity from raw parser or template output.

    Args:
        value: Amount as a number, AmountRange or text such as '1-2' or 'a pinch'
        unit: Optional unit

    Returns:
        Parsed quantity
    """
    if isinstance(value, Quantity):
        return value
    return Quantity(parse_amount(value), unit)
