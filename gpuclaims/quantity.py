"""Resource quantities such as ``16Gi``, ``500m`` or ``1e3``."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from fractions import Fraction

__all__ = ["Quantity", "QuantityError", "parse_quantity"]

_NUMBER = re.compile(r"([+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+))(.*)", re.DOTALL)
_EXPONENT = re.compile(r"[eE]([+-]?[0-9]+)")

_BINARY_SUFFIXES = {
    "Ki": 2**10,
    "Mi": 2**20,
    "Gi": 2**30,
    "Ti": 2**40,
    "Pi": 2**50,
    "Ei": 2**60,
}

_DECIMAL_SUFFIXES = {
    "n": Fraction(1, 10**9),
    "u": Fraction(1, 10**6),
    "m": Fraction(1, 10**3),
    "": Fraction(1),
    "k": Fraction(10**3),
    "M": Fraction(10**6),
    "G": Fraction(10**9),
    "T": Fraction(10**12),
    "P": Fraction(10**15),
    "E": Fraction(10**18),
}


class QuantityError(ValueError):
    """Raised when a quantity string cannot be parsed."""


def _suffix_multiplier(suffix: str) -> Fraction:
    if suffix in _BINARY_SUFFIXES:
        return Fraction(_BINARY_SUFFIXES[suffix])
    if suffix in _DECIMAL_SUFFIXES:
        return _DECIMAL_SUFFIXES[suffix]
    match = _EXPONENT.fullmatch(suffix)
    if match:
        return Fraction(10) ** int(match.group(1))
    raise QuantityError(f"unable to parse quantity's suffix: {suffix!r}")


def _format_amount(amount: Fraction) -> str:
    if amount.denominator == 1:
        return str(amount.numerator)
    milli = amount * 1000
    if milli.denominator == 1:
        return f"{milli.numerator}m"
    return repr(float(amount))


@dataclass(frozen=True, order=True)
class Quantity:
    """An exact, comparable amount of a resource."""

    amount: Fraction
    text: str = field(default="", compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", Fraction(self.amount))

    def value(self) -> int:
        """Return the amount as an integer, rounded away from zero."""
        if self.amount >= 0:
            return math.ceil(self.amount)
        return math.floor(self.amount)

    def cmp(self, other: Quantity) -> int:
        """Return -1, 0 or 1 as this quantity is less than, equal to or greater than ``other``."""
        if self.amount < other.amount:
            return -1
        if self.amount > other.amount:
            return 1
        return 0

    def __str__(self) -> str:
        return self.text or _format_amount(self.amount)


def parse_quantity(text: str) -> Quantity:
    """Parse a quantity string into a :class:`Quantity`."""
    if not text:
        raise QuantityError("quantities must not be empty")
    match = _NUMBER.fullmatch(text)
    if match is None:
        raise QuantityError(f"quantities must match the regular expression: {text!r}")
    number, suffix = match.groups()
    amount = Fraction(number) * _suffix_multiplier(suffix)
    return Quantity(amount, text)