"""GPU and MIG device sharing strategies and their configuration."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Iterable, Mapping, Optional, Union

from .quantity import Quantity

__all__ = [
    "SharingError",
    "GpuSharingStrategy",
    "TimeSliceDuration",
    "TimeSlicingConfig",
    "MpsConfig",
    "GpuSharing",
    "MigDeviceSharing",
    "is_time_slicing",
    "is_mps",
    "time_slicing_config",
    "mps_config",
    "normalize_pinned_memory_limits",
]

_MEBIBYTE = 1024 * 1024
_INTEGER_KEY = re.compile(r"[+-]?[0-9]+")


class SharingError(ValueError):
    """Raised when a sharing configuration is requested or given inconsistently."""


class GpuSharingStrategy(str, Enum):
    TIME_SLICING = "TimeSlicing"
    MPS = "MPS"


class TimeSliceDuration(str, Enum):
    DEFAULT = "Default"
    SHORT = "Short"
    MEDIUM = "Medium"
    LONG = "Long"

    def to_int(self) -> int:
        """Return the integer form of the duration."""
        return _TIME_SLICE_INTS.get(self, -1)


_TIME_SLICE_INTS = {
    TimeSliceDuration.DEFAULT: 0,
    TimeSliceDuration.SHORT: 1,
    TimeSliceDuration.MEDIUM: 2,
    TimeSliceDuration.LONG: 3,
}


@dataclass
class TimeSlicingConfig:
    """Settings for CUDA time-slicing."""

    time_slice: Optional[TimeSliceDuration] = None


@dataclass
class MpsConfig:
    """Settings for an MPS control daemon."""

    default_active_thread_percentage: Optional[int] = None
    default_pinned_device_memory_limit: Optional[Quantity] = None
    default_per_device_pinned_memory_limit: dict[str, Quantity] = field(default_factory=dict)


def _strategy_error(strategy: GpuSharingStrategy) -> SharingError:
    return SharingError(f"strategy is not set to '{strategy.value}'")


@dataclass
class GpuSharing:
    """The sharing strategy for GPUs and its settings."""

    strategy: GpuSharingStrategy = GpuSharingStrategy.TIME_SLICING
    time_slicing_config: Optional[TimeSlicingConfig] = None
    mps_config: Optional[MpsConfig] = None

    def is_time_slicing(self) -> bool:
        return self.strategy == GpuSharingStrategy.TIME_SLICING

    def is_mps(self) -> bool:
        return self.strategy == GpuSharingStrategy.MPS

    def get_time_slicing_config(self) -> Optional[TimeSlicingConfig]:
        """Return the time-slicing settings; the strategy must be time-slicing."""
        if self.strategy != GpuSharingStrategy.TIME_SLICING:
            raise _strategy_error(GpuSharingStrategy.TIME_SLICING)
        return self.time_slicing_config

    def get_mps_config(self) -> Optional[MpsConfig]:
        """Return the MPS settings; the strategy must be MPS."""
        if self.strategy != GpuSharingStrategy.MPS:
            raise _strategy_error(GpuSharingStrategy.MPS)
        if self.time_slicing_config is not None:
            raise SharingError(
                f"cannot use TimeSlicingConfig with the '{GpuSharingStrategy.MPS.value}' strategy"
            )
        return self.mps_config


@dataclass
class MigDeviceSharing:
    """The sharing strategy for MIG devices and its settings."""

    strategy: GpuSharingStrategy = GpuSharingStrategy.TIME_SLICING
    mps_config: Optional[MpsConfig] = None

    # MIG devices carry no time-slicing settings of their own.
    time_slicing_config: ClassVar[Optional[TimeSlicingConfig]] = None

    def is_time_slicing(self) -> bool:
        return False

    def is_mps(self) -> bool:
        return self.strategy == GpuSharingStrategy.MPS

    def get_time_slicing_config(self) -> Optional[TimeSlicingConfig]:
        """Return the time-slicing settings, which MIG devices never have."""
        return type(self).time_slicing_config

    def get_mps_config(self) -> Optional[MpsConfig]:
        """Return the MPS settings; the strategy must be MPS."""
        if self.strategy != GpuSharingStrategy.MPS:
            raise _strategy_error(GpuSharingStrategy.MPS)
        return self.mps_config


Sharing = Union[GpuSharing, MigDeviceSharing]


def is_time_slicing(sharing: Optional[Sharing]) -> bool:
    """Report time-slicing; unset sharing means time-slicing, the default."""
    if sharing is None:
        return True
    return sharing.is_time_slicing()


def is_mps(sharing: Optional[Sharing]) -> bool:
    """Report whether MPS is selected; unset sharing is not MPS."""
    if sharing is None:
        return False
    return sharing.is_mps()


def time_slicing_config(sharing: Optional[Sharing]) -> Optional[TimeSlicingConfig]:
    """Return the time-slicing settings, with the default time slice when unset."""
    if sharing is None:
        return TimeSlicingConfig(TimeSliceDuration.DEFAULT)
    return sharing.get_time_slicing_config()


def mps_config(sharing: Optional[Sharing]) -> Optional[MpsConfig]:
    """Return the MPS settings; unset sharing is an error."""
    if sharing is None:
        raise SharingError("no sharing set to get config from")
    return sharing.get_mps_config()


def _mebibytes(quantity: Quantity) -> int:
    value = quantity.value()
    megs = abs(value) // _MEBIBYTE
    return -megs if value < 0 else megs


def normalize_pinned_memory_limits(
    per_device: Optional[Mapping[str, Quantity]],
    uuids: Optional[Iterable[str]],
    default_limit: Optional[Quantity],
) -> dict[str, str]:
    """Turn pinned-memory limits into per-device-index limits in megabytes.

    The default limit, if given, is applied to every device in ``uuids`` and
    then overridden by the per-device entries, whose keys must be integers.
    """
    limits: dict[str, str] = {}

    if default_limit is not None:
        value = _mebibytes(default_limit)
        if value == 0:
            raise SharingError(f"default value set too low: {default_limit}")
        for index, _uuid in enumerate(uuids or ()):
            limits[str(index)] = f"{value}M"

    for key, limit in (per_device or {}).items():
        if not _INTEGER_KEY.fullmatch(key):
            raise SharingError(f"unable to parse key as an integer: {key}")
        value = _mebibytes(limit)
        if value == 0:
            raise SharingError(f"value set too low: {key}: {limit}")
        limits[key] = f"{value}M"

    return limits