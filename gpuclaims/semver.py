"""Semantic version validation and comparison for ``v``-prefixed versions."""

from __future__ import annotations

import re
from typing import NamedTuple

__all__ = ["is_valid", "compare"]

_NUM = r"(0|[1-9][0-9]*)"
_IDENTS = r"[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*"
_PATTERN = re.compile(
    rf"v{_NUM}(?:\.{_NUM}(?:\.{_NUM}(?:-({_IDENTS}))?(?:\+({_IDENTS}))?)?)?"
)


class _Version(NamedTuple):
    major: int
    minor: int
    patch: int
    prerelease: str


def _is_number(ident: str) -> bool:
    return ident.isascii() and ident.isdigit()


def _parse(version: str) -> _Version | None:
    match = _PATTERN.fullmatch(version)
    if match is None:
        return None
    major, minor, patch, prerelease, _build = match.groups()
    prerelease = prerelease or ""
    if prerelease:
        for ident in prerelease.split("."):
            if _is_number(ident) and len(ident) > 1 and ident[0] == "0":
                return None
    return _Version(int(major), int(minor or 0), int(patch or 0), prerelease)


def is_valid(version: str) -> bool:
    """Report whether ``version`` is a valid semantic version."""
    return _parse(version) is not None


def _sign(a, b) -> int:
    return (a > b) - (a < b)


def _compare_ident(x: str, y: str) -> int:
    x_num, y_num = _is_number(x), _is_number(y)
    if x_num and y_num:
        return _sign(int(x), int(y))
    if x_num:
        return -1
    if y_num:
        return 1
    return _sign(x, y)


def _compare_prerelease(x: str, y: str) -> int:
    if x == y:
        return 0
    if not x:
        return 1
    if not y:
        return -1
    xs, ys = x.split("."), y.split(".")
    for a, b in zip(xs, ys):
        result = _compare_ident(a, b)
        if result:
            return result
    return _sign(len(xs), len(ys))


def compare(v: str, w: str) -> int:
    """Compare two versions, returning -1, 0 or 1.

    An invalid version is less than any valid one; two invalid versions are equal.
    Build metadata is ignored.
    """
    pv, pw = _parse(v), _parse(w)
    if pv is None and pw is None:
        return 0
    if pv is None:
        return -1
    if pw is None:
        return 1
    result = _sign(pv[:3], pw[:3])
    if result:
        return result
    return _compare_prerelease(pv.prerelease, pw.prerelease)