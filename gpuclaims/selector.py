"""Boolean selectors over property sets and the property matchers they use."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generic, Iterable, Optional, TypeVar, Union

from . import semver
from .quantity import Quantity

__all__ = [
    "Selector",
    "ComparatorOperator",
    "IntProperty",
    "StringProperty",
    "BoolProperty",
    "GlobProperty",
    "QuantityComparator",
    "VersionComparator",
    "and_all",
    "or_any",
    "check_compare_value",
    "wildcard_to_regexp",
]

T = TypeVar("T")


@dataclass
class Selector(Generic[T]):
    """A single property set, or a list of selectors combined with 'and' or 'or'."""

    properties: Optional[T] = None
    and_expression: Optional[list[Selector[T]]] = None
    or_expression: Optional[list[Selector[T]]] = None

    def matches(self, compare: Callable[[T], bool]) -> bool:
        """Evaluate the expression, passing each property set to ``compare``."""
        if self.properties is not None:
            return compare(self.properties)
        if self.and_expression is not None:
            return and_all(self.and_expression, compare)
        if self.or_expression is not None:
            return or_any(self.or_expression, compare)
        return False


def and_all(selectors: Iterable[Selector[T]], compare: Callable[[T], bool]) -> bool:
    """Return True when every selector matches (True for none)."""
    return all(s.matches(compare) for s in selectors)


def or_any(selectors: Iterable[Selector[T]], compare: Callable[[T], bool]) -> bool:
    """Return True when any selector matches (False for none)."""
    return any(s.matches(compare) for s in selectors)


class ComparatorOperator(str, Enum):
    """Operators for quantity and version comparators."""

    EQUALS = "Equals"
    LESS_THAN = "LessThan"
    LESS_THAN_OR_EQUAL_TO = "LessThanOrEqualTo"
    GREATER_THAN = "GreaterThan"
    GREATER_THAN_OR_EQUAL_TO = "GreaterThanOrEqualTo"


_ACCEPTED_RESULTS = {
    ComparatorOperator.EQUALS.value: {0},
    ComparatorOperator.LESS_THAN.value: {-1},
    ComparatorOperator.LESS_THAN_OR_EQUAL_TO.value: {0, -1},
    ComparatorOperator.GREATER_THAN.value: {1},
    ComparatorOperator.GREATER_THAN_OR_EQUAL_TO.value: {0, 1},
}


def check_compare_value(value: int, operator: Union[ComparatorOperator, str]) -> bool:
    """Check a -1/0/1 comparison result against an operator name."""
    key = operator.value if isinstance(operator, ComparatorOperator) else operator
    return value in _ACCEPTED_RESULTS.get(key, ())


def wildcard_to_regexp(pattern: str) -> str:
    """Turn a ``*`` wildcard pattern into a regular expression."""
    return ".*".join(re.escape(literal) for literal in pattern.split("*"))


@dataclass(frozen=True)
class IntProperty:
    value: int

    def matches(self, value: int) -> bool:
        return self.value == value


@dataclass(frozen=True)
class StringProperty:
    value: str

    def matches(self, value: str) -> bool:
        return self.value == value


@dataclass(frozen=True)
class BoolProperty:
    value: bool

    def matches(self, value: bool) -> bool:
        return self.value == value


@dataclass(frozen=True)
class GlobProperty:
    """A case-insensitive wildcard pattern, matched anywhere in the string."""

    value: str

    def matches(self, value: str) -> bool:
        regexp = wildcard_to_regexp(self.value.lower())
        return re.search(regexp, value.lower()) is not None


@dataclass(frozen=True)
class QuantityComparator:
    value: Quantity
    operator: Union[ComparatorOperator, str]

    def matches(self, quantity: Quantity) -> bool:
        """Check ``quantity`` against the value using the operator."""
        return check_compare_value(quantity.cmp(self.value), self.operator)


def _v_version(version: str) -> str:
    if not version:
        raise ValueError("version must not be empty")
    return version if version.startswith("v") else "v" + version


@dataclass(frozen=True)
class VersionComparator:
    value: str
    operator: Union[ComparatorOperator, str]

    def matches(self, version: str) -> bool:
        """Check ``version`` against the value using the operator."""
        result = semver.compare(_v_version(version), _v_version(self.value))
        return check_compare_value(result, self.operator)