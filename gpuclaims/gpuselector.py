"""Selectors that pick GPUs by their properties, nested at most three levels deep."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Union

from .quantity import Quantity, parse_quantity
from .selector import (
    BoolProperty,
    ComparatorOperator,
    GlobProperty,
    IntProperty,
    QuantityComparator,
    Selector,
    StringProperty,
    VersionComparator,
)

__all__ = [
    "MAX_NESTING_DEPTH",
    "GpuSelectorProperties",
    "GpuSelector",
    "SelectorDepthError",
    "parse_gpu_selector",
]

# Selectors below the top level may nest this many times; the deepest level
# may hold properties only.
MAX_NESTING_DEPTH = 3


class SelectorDepthError(ValueError):
    """Raised when a GPU selector is nested deeper than allowed."""


@dataclass
class GpuSelectorProperties:
    """The GPU properties a selector can test."""

    index: Optional[IntProperty] = None
    uuid: Optional[StringProperty] = None
    mig_enabled: Optional[BoolProperty] = None
    memory: Optional[QuantityComparator] = None
    product_name: Optional[GlobProperty] = None
    brand: Optional[GlobProperty] = None
    architecture: Optional[GlobProperty] = None
    cuda_compute_capability: Optional[VersionComparator] = None
    driver_version: Optional[VersionComparator] = None
    cuda_runtime_version: Optional[VersionComparator] = None


@dataclass
class GpuSelector:
    """A property set, or GPU selectors combined with 'and' or 'or'."""

    properties: Optional[GpuSelectorProperties] = None
    and_expression: list[GpuSelector] = field(default_factory=list)
    or_expression: list[GpuSelector] = field(default_factory=list)

    def matches(self, compare: Callable[[GpuSelectorProperties], bool]) -> bool:
        """Evaluate the selector, passing each property set to ``compare``."""
        return self.to_selector().matches(compare)

    def to_selector(self) -> Selector[GpuSelectorProperties]:
        """Convert into a generic selector, checking the nesting depth."""
        return _convert(self, 0)


def _depth_error() -> SelectorDepthError:
    return SelectorDepthError(
        f"GPU selectors may be nested at most {MAX_NESTING_DEPTH} levels deep"
    )


def _convert(selector: GpuSelector, depth: int) -> Selector[GpuSelectorProperties]:
    if depth >= MAX_NESTING_DEPTH and (selector.and_expression or selector.or_expression):
        raise _depth_error()
    and_expression = [_convert(e, depth + 1) for e in selector.and_expression]
    or_expression = [_convert(e, depth + 1) for e in selector.or_expression]
    return Selector(
        properties=selector.properties,
        and_expression=and_expression or None,
        or_expression=or_expression or None,
    )


def _int(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"expected an integer, got {value!r}")
    return value


def _str(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError(f"expected a string, got {value!r}")
    return value


def _bool(value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"expected a boolean, got {value!r}")
    return value


def _mapping(value: Any) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ValueError(f"expected an object, got {value!r}")
    return value


def _operator(value: Any) -> Union[ComparatorOperator, str]:
    text = _str(value)
    try:
        return ComparatorOperator(text)
    except ValueError:
        return text


def _quantity_comparator(value: Any) -> QuantityComparator:
    data = _mapping(value)
    raw = data.get("value")
    quantity = parse_quantity(str(raw)) if raw is not None else Quantity(0)
    return QuantityComparator(quantity, _operator(data.get("operator", "")))


def _version_comparator(value: Any) -> VersionComparator:
    data = _mapping(value)
    return VersionComparator(_str(data.get("value", "")), _operator(data.get("operator", "")))


_PROPERTY_PARSERS: dict[str, tuple[str, Callable[[Any], Any]]] = {
    "index": ("index", lambda v: IntProperty(_int(v))),
    "uuid": ("uuid", lambda v: StringProperty(_str(v))),
    "migEnabled": ("mig_enabled", lambda v: BoolProperty(_bool(v))),
    "memory": ("memory", _quantity_comparator),
    "productName": ("product_name", lambda v: GlobProperty(_str(v))),
    "brand": ("brand", lambda v: GlobProperty(_str(v))),
    "architecture": ("architecture", lambda v: GlobProperty(_str(v))),
    "cudaComputeCapability": ("cuda_compute_capability", _version_comparator),
    "driverVersion": ("driver_version", _version_comparator),
    "cudaRuntimeVersion": ("cuda_runtime_version", _version_comparator),
}


def _parse(value: Any, depth: int) -> GpuSelector:
    data = _mapping(value)
    props = {
        attr: parser(data[key])
        for key, (attr, parser) in _PROPERTY_PARSERS.items()
        if data.get(key) is not None
    }
    and_data = data.get("andExpression") or []
    or_data = data.get("orExpression") or []
    if depth >= MAX_NESTING_DEPTH and (and_data or or_data):
        raise _depth_error()
    if not isinstance(and_data, list) or not isinstance(or_data, list):
        raise ValueError("selector expressions must be lists")
    return GpuSelector(
        properties=GpuSelectorProperties(**props) if props else None,
        and_expression=[_parse(e, depth + 1) for e in and_data],
        or_expression=[_parse(e, depth + 1) for e in or_data],
    )


def parse_gpu_selector(data: Mapping[str, Any]) -> GpuSelector:
    """Build a selector from its JSON-ready form; unknown keys are ignored."""
    return _parse(data, 0)