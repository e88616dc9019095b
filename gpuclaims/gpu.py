"""Claim and class parameter objects for the GPU resource API group."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Optional

from .gpuselector import GpuSelector
from .meta import GroupResource, GroupVersion, ListMeta, ObjectMeta, TypeMeta
from .sharing import GpuSharing, MigDeviceSharing

__all__ = [
    "GROUP_NAME",
    "VERSION",
    "GPU_CLAIM_PARAMETERS_KIND",
    "MIG_DEVICE_CLAIM_PARAMETERS_KIND",
    "SCHEME_GROUP_VERSION",
    "DeviceClassParametersSpec",
    "DeviceClassParameters",
    "DeviceClassParametersList",
    "GpuClaimParametersSpec",
    "GpuClaimParameters",
    "GpuClaimParametersList",
    "MigDeviceClaimParametersSpec",
    "MigDeviceClaimParameters",
    "MigDeviceClaimParametersList",
    "ComputeInstanceClaimParametersSpec",
    "ComputeInstanceClaimParameters",
    "ComputeInstanceClaimParametersList",
    "update_device_class_parameters_spec_with_defaults",
    "update_gpu_claim_parameters_spec_with_defaults",
    "update_mig_device_claim_parameters_spec_with_defaults",
    "resource",
    "known_types",
]

GROUP_NAME = "gpu.resource.nvidia.com"
VERSION = "v1alpha1"

GPU_CLAIM_PARAMETERS_KIND = "GpuClaimParameters"
MIG_DEVICE_CLAIM_PARAMETERS_KIND = "MigDeviceClaimParameters"

SCHEME_GROUP_VERSION = GroupVersion(GROUP_NAME, VERSION)


@dataclass
class DeviceClassParametersSpec:
    shareable: Optional[bool] = None


@dataclass
class DeviceClassParameters:
    """Parameters given when creating a resource class for this driver."""

    type_meta: TypeMeta = field(default_factory=TypeMeta)
    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: DeviceClassParametersSpec = field(default_factory=DeviceClassParametersSpec)


@dataclass
class DeviceClassParametersList:
    type_meta: TypeMeta = field(default_factory=TypeMeta)
    metadata: ListMeta = field(default_factory=ListMeta)
    items: list[DeviceClassParameters] = field(default_factory=list)


@dataclass
class GpuClaimParametersSpec:
    count: Optional[int] = None
    selector: Optional[GpuSelector] = None
    sharing: Optional[GpuSharing] = None


@dataclass
class GpuClaimParameters:
    """Parameters given when creating a resource claim for a GPU."""

    type_meta: TypeMeta = field(default_factory=TypeMeta)
    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: GpuClaimParametersSpec = field(default_factory=GpuClaimParametersSpec)


@dataclass
class GpuClaimParametersList:
    type_meta: TypeMeta = field(default_factory=TypeMeta)
    metadata: ListMeta = field(default_factory=ListMeta)
    items: list[GpuClaimParameters] = field(default_factory=list)


@dataclass
class MigDeviceClaimParametersSpec:
    profile: str = ""
    sharing: Optional[MigDeviceSharing] = None
    gpu_claim_parameters_name: str = ""


@dataclass
class MigDeviceClaimParameters:
    """Parameters given when creating a resource claim for a MIG device."""

    type_meta: TypeMeta = field(default_factory=TypeMeta)
    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: MigDeviceClaimParametersSpec = field(default_factory=MigDeviceClaimParametersSpec)


@dataclass
class MigDeviceClaimParametersList:
    type_meta: TypeMeta = field(default_factory=TypeMeta)
    metadata: ListMeta = field(default_factory=ListMeta)
    items: list[MigDeviceClaimParameters] = field(default_factory=list)


@dataclass
class ComputeInstanceClaimParametersSpec:
    profile: str = ""
    mig_device_claim_parameters_name: str = ""


@dataclass
class ComputeInstanceClaimParameters:
    """Parameters given when creating a resource claim for a compute instance."""

    type_meta: TypeMeta = field(default_factory=TypeMeta)
    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: ComputeInstanceClaimParametersSpec = field(
        default_factory=ComputeInstanceClaimParametersSpec
    )


@dataclass
class ComputeInstanceClaimParametersList:
    type_meta: TypeMeta = field(default_factory=TypeMeta)
    metadata: ListMeta = field(default_factory=ListMeta)
    items: list[ComputeInstanceClaimParameters] = field(default_factory=list)


def update_device_class_parameters_spec_with_defaults(
    spec: Optional[DeviceClassParametersSpec],
) -> DeviceClassParametersSpec:
    """Return a copy of ``spec`` with defaults filled in: shareable is True."""
    result = copy.deepcopy(spec) if spec is not None else DeviceClassParametersSpec()
    if result.shareable is None:
        result.shareable = True
    return result


def update_gpu_claim_parameters_spec_with_defaults(
    spec: Optional[GpuClaimParametersSpec],
) -> GpuClaimParametersSpec:
    """Return a copy of ``spec`` with defaults filled in: a count of one."""
    result = copy.deepcopy(spec) if spec is not None else GpuClaimParametersSpec()
    if result.count is None:
        result.count = 1
    return result


def update_mig_device_claim_parameters_spec_with_defaults(
    spec: Optional[MigDeviceClaimParametersSpec],
) -> MigDeviceClaimParametersSpec:
    """Return a copy of ``spec``, or an empty spec when none is given."""
    return copy.deepcopy(spec) if spec is not None else MigDeviceClaimParametersSpec()


def resource(resource: str) -> GroupResource:
    """Return ``resource`` qualified by this API group."""
    return SCHEME_GROUP_VERSION.with_resource(resource)


def known_types() -> dict[str, type]:
    """Return the object kinds this API group version registers."""
    return {
        "DeviceClassParameters": DeviceClassParameters,
        "DeviceClassParametersList": DeviceClassParametersList,
        "GpuClaimParameters": GpuClaimParameters,
        "GpuClaimParametersList": GpuClaimParametersList,
        "MigDeviceClaimParameters": MigDeviceClaimParameters,
        "MigDeviceClaimParametersList": MigDeviceClaimParametersList,
        "ComputeInstanceClaimParameters": ComputeInstanceClaimParameters,
        "ComputeInstanceClaimParametersList": ComputeInstanceClaimParametersList,
    }