"""Node allocation state: the devices a node offers, has allocated and has prepared."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from .meta import GroupResource, GroupVersion, ListMeta, ObjectMeta, OwnerReference, TypeMeta
from .quantity import Quantity, parse_quantity
from .sharing import (
    GpuSharing,
    GpuSharingStrategy,
    MigDeviceSharing,
    MpsConfig,
    TimeSliceDuration,
    TimeSlicingConfig,
)

__all__ = [
    "GROUP_NAME",
    "VERSION",
    "NODE_ALLOCATION_STATE_STATUS_READY",
    "NODE_ALLOCATION_STATE_STATUS_NOT_READY",
    "SCHEME_GROUP_VERSION",
    "DeviceType",
    "ClaimInfo",
    "MigDevicePlacement",
    "AllocatableGpu",
    "AllocatableMigDevice",
    "AllocatableDevice",
    "AllocatedGpu",
    "AllocatedMigDevice",
    "AllocatedGpus",
    "AllocatedMigDevices",
    "AllocatedDevices",
    "PreparedGpu",
    "PreparedMigDevice",
    "PreparedGpus",
    "PreparedMigDevices",
    "PreparedDevices",
    "NodeAllocationStateSpec",
    "NodeAllocationState",
    "NodeAllocationStateList",
    "NodeAllocationStateConfig",
    "new_node_allocation_state",
    "resource",
    "known_types",
]

GROUP_NAME = "nas.gpu.resource.nvidia.com"
VERSION = "v1alpha1"

NODE_ALLOCATION_STATE_STATUS_READY = "Ready"
NODE_ALLOCATION_STATE_STATUS_NOT_READY = "NotReady"

SCHEME_GROUP_VERSION = GroupVersion(GROUP_NAME, VERSION)


class DeviceType(str, Enum):
    GPU = "gpu"
    MIG = "mig"
    UNKNOWN = "unknown"


def _type_of(gpu: Any, mig: Any) -> DeviceType:
    if gpu is not None:
        return DeviceType.GPU
    if mig is not None:
        return DeviceType.MIG
    return DeviceType.UNKNOWN


@dataclass
class ClaimInfo:
    namespace: str
    name: str
    uid: str


@dataclass
class MigDevicePlacement:
    start: int
    size: int


@dataclass
class AllocatableGpu:
    index: int
    uuid: str
    mig_enabled: bool
    memory_bytes: int
    product_name: str
    brand: str
    architecture: str
    cuda_compute_capability: str


@dataclass
class AllocatableMigDevice:
    """A MIG profile and its possible placements on a given type of GPU."""

    profile: str
    parent_product_name: str
    placements: list[MigDevicePlacement] = field(default_factory=list)


@dataclass
class AllocatableDevice:
    gpu: Optional[AllocatableGpu] = None
    mig: Optional[AllocatableMigDevice] = None

    def type(self) -> DeviceType:
        return _type_of(self.gpu, self.mig)


@dataclass
class AllocatedGpu:
    uuid: str = ""


@dataclass
class AllocatedMigDevice:
    profile: str
    parent_uuid: str
    placement: MigDevicePlacement


@dataclass
class AllocatedGpus:
    devices: list[AllocatedGpu] = field(default_factory=list)
    sharing: Optional[GpuSharing] = None


@dataclass
class AllocatedMigDevices:
    devices: list[AllocatedMigDevice] = field(default_factory=list)
    sharing: Optional[MigDeviceSharing] = None


@dataclass
class AllocatedDevices:
    claim_info: Optional[ClaimInfo] = None
    gpu: Optional[AllocatedGpus] = None
    mig: Optional[AllocatedMigDevices] = None

    def type(self) -> DeviceType:
        return _type_of(self.gpu, self.mig)


@dataclass
class PreparedGpu:
    uuid: str


@dataclass
class PreparedMigDevice:
    uuid: str
    profile: str
    parent_uuid: str
    placement: MigDevicePlacement


@dataclass
class PreparedGpus:
    devices: list[PreparedGpu] = field(default_factory=list)


@dataclass
class PreparedMigDevices:
    devices: list[PreparedMigDevice] = field(default_factory=list)


@dataclass
class PreparedDevices:
    gpu: Optional[PreparedGpus] = None
    mig: Optional[PreparedMigDevices] = None

    def type(self) -> DeviceType:
        return _type_of(self.gpu, self.mig)


@dataclass
class NodeAllocationStateSpec:
    allocatable_devices: list[AllocatableDevice] = field(default_factory=list)
    allocated_claims: dict[str, AllocatedDevices] = field(default_factory=dict)
    prepared_claims: dict[str, PreparedDevices] = field(default_factory=dict)


@dataclass
class NodeAllocationState:
    """The allocation state of one node."""

    type_meta: TypeMeta = field(default_factory=TypeMeta)
    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: NodeAllocationStateSpec = field(default_factory=NodeAllocationStateSpec)
    status: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready form of the object."""
        data: dict[str, Any] = {}
        if self.type_meta.kind:
            data["kind"] = self.type_meta.kind
        if self.type_meta.api_version:
            data["apiVersion"] = self.type_meta.api_version
        data["metadata"] = _object_meta_to_dict(self.metadata)
        data["spec"] = _spec_to_dict(self.spec)
        if self.status:
            data["status"] = self.status
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NodeAllocationState:
        """Build an object from its JSON-ready form."""
        return cls(
            type_meta=TypeMeta(data.get("kind", ""), data.get("apiVersion", "")),
            metadata=_object_meta_from_dict(data.get("metadata") or {}),
            spec=_spec_from_dict(data.get("spec") or {}),
            status=data.get("status", ""),
        )


@dataclass
class NodeAllocationStateList:
    type_meta: TypeMeta = field(default_factory=TypeMeta)
    metadata: ListMeta = field(default_factory=ListMeta)
    items: list[NodeAllocationState] = field(default_factory=list)


@dataclass
class NodeAllocationStateConfig:
    name: str
    namespace: str
    owner: Optional[OwnerReference] = None


def new_node_allocation_state(config: NodeAllocationStateConfig) -> NodeAllocationState:
    """Create an empty allocation state named and owned as ``config`` says."""
    metadata = ObjectMeta(name=config.name, namespace=config.namespace)
    if config.owner is not None:
        metadata.owner_references = [config.owner]
    return NodeAllocationState(metadata=metadata)


def resource(resource: str) -> GroupResource:
    """Return ``resource`` qualified by this API group."""
    return SCHEME_GROUP_VERSION.with_resource(resource)


def known_types() -> dict[str, type]:
    """Return the object kinds this API group version registers."""
    return {
        "NodeAllocationState": NodeAllocationState,
        "NodeAllocationStateList": NodeAllocationStateList,
    }


# Serialization helpers.


def _owner_to_dict(ref: OwnerReference) -> dict[str, Any]:
    data: dict[str, Any] = {
        "apiVersion": ref.api_version,
        "kind": ref.kind,
        "name": ref.name,
        "uid": ref.uid,
    }
    if ref.controller is not None:
        data["controller"] = ref.controller
    if ref.block_owner_deletion is not None:
        data["blockOwnerDeletion"] = ref.block_owner_deletion
    return data


def _owner_from_dict(data: dict[str, Any]) -> OwnerReference:
    return OwnerReference(
        api_version=data.get("apiVersion", ""),
        kind=data.get("kind", ""),
        name=data.get("name", ""),
        uid=data.get("uid", ""),
        controller=data.get("controller"),
        block_owner_deletion=data.get("blockOwnerDeletion"),
    )


def _object_meta_to_dict(meta: ObjectMeta) -> dict[str, Any]:
    data: dict[str, Any] = {}
    for key, value in (
        ("name", meta.name),
        ("namespace", meta.namespace),
        ("uid", meta.uid),
        ("resourceVersion", meta.resource_version),
    ):
        if value:
            data[key] = value
    if meta.labels:
        data["labels"] = dict(meta.labels)
    if meta.annotations:
        data["annotations"] = dict(meta.annotations)
    if meta.owner_references:
        data["ownerReferences"] = [_owner_to_dict(r) for r in meta.owner_references]
    return data


def _object_meta_from_dict(data: dict[str, Any]) -> ObjectMeta:
    return ObjectMeta(
        name=data.get("name", ""),
        namespace=data.get("namespace", ""),
        uid=data.get("uid", ""),
        resource_version=data.get("resourceVersion", ""),
        labels=dict(data.get("labels") or {}),
        annotations=dict(data.get("annotations") or {}),
        owner_references=[_owner_from_dict(r) for r in data.get("ownerReferences") or ()],
    )


def _quantity_from(value: Any) -> Quantity:
    return parse_quantity(str(value))


def _mps_to_dict(config: MpsConfig) -> dict[str, Any]:
    data: dict[str, Any] = {}
    if config.default_active_thread_percentage is not None:
        data["defaultActiveThreadPercentage"] = config.default_active_thread_percentage
    if config.default_pinned_device_memory_limit is not None:
        data["defaultPinnedDeviceMemoryLimit"] = str(config.default_pinned_device_memory_limit)
    if config.default_per_device_pinned_memory_limit:
        data["defaultPerDevicePinnedMemoryLimit"] = {
            key: str(limit) for key, limit in config.default_per_device_pinned_memory_limit.items()
        }
    return data


def _mps_from_dict(data: dict[str, Any]) -> MpsConfig:
    default_limit = data.get("defaultPinnedDeviceMemoryLimit")
    return MpsConfig(
        default_active_thread_percentage=data.get("defaultActiveThreadPercentage"),
        default_pinned_device_memory_limit=(
            _quantity_from(default_limit) if default_limit is not None else None
        ),
        default_per_device_pinned_memory_limit={
            key: _quantity_from(limit)
            for key, limit in (data.get("defaultPerDevicePinnedMemoryLimit") or {}).items()
        },
    )


def _gpu_sharing_to_dict(sharing: GpuSharing) -> dict[str, Any]:
    data: dict[str, Any] = {"strategy": GpuSharingStrategy(sharing.strategy).value}
    if sharing.time_slicing_config is not None:
        slicing: dict[str, Any] = {}
        if sharing.time_slicing_config.time_slice is not None:
            slicing["timeSlice"] = TimeSliceDuration(sharing.time_slicing_config.time_slice).value
        data["timeSlicingConfig"] = slicing
    if sharing.mps_config is not None:
        data["mpsConfig"] = _mps_to_dict(sharing.mps_config)
    return data


def _gpu_sharing_from_dict(data: dict[str, Any]) -> GpuSharing:
    slicing = data.get("timeSlicingConfig")
    mps = data.get("mpsConfig")
    time_slicing_config = None
    if slicing is not None:
        time_slice = slicing.get("timeSlice")
        time_slicing_config = TimeSlicingConfig(
            TimeSliceDuration(time_slice) if time_slice is not None else None
        )
    return GpuSharing(
        strategy=GpuSharingStrategy(data.get("strategy", GpuSharingStrategy.TIME_SLICING.value)),
        time_slicing_config=time_slicing_config,
        mps_config=_mps_from_dict(mps) if mps is not None else None,
    )


def _mig_sharing_to_dict(sharing: MigDeviceSharing) -> dict[str, Any]:
    data: dict[str, Any] = {"strategy": GpuSharingStrategy(sharing.strategy).value}
    if sharing.mps_config is not None:
        data["mpsConfig"] = _mps_to_dict(sharing.mps_config)
    return data


def _mig_sharing_from_dict(data: dict[str, Any]) -> MigDeviceSharing:
    mps = data.get("mpsConfig")
    return MigDeviceSharing(
        strategy=GpuSharingStrategy(data.get("strategy", GpuSharingStrategy.TIME_SLICING.value)),
        mps_config=_mps_from_dict(mps) if mps is not None else None,
    )


def _placement_to_dict(placement: MigDevicePlacement) -> dict[str, Any]:
    return {"start": placement.start, "size": placement.size}


def _placement_from_dict(data: dict[str, Any]) -> MigDevicePlacement:
    return MigDevicePlacement(start=data.get("start", 0), size=data.get("size", 0))


def _allocatable_to_dict(device: AllocatableDevice) -> dict[str, Any]:
    data: dict[str, Any] = {}
    if device.gpu is not None:
        gpu = device.gpu
        data["gpu"] = {
            "index": gpu.index,
            "uuid": gpu.uuid,
            "migEnabled": gpu.mig_enabled,
            "memoryBytes": gpu.memory_bytes,
            "productName": gpu.product_name,
            "brand": gpu.brand,
            "architecture": gpu.architecture,
            "cudaComputeCapability": gpu.cuda_compute_capability,
        }
    if device.mig is not None:
        mig = device.mig
        data["mig"] = {
            "profile": mig.profile,
            "parentProductName": mig.parent_product_name,
            "placements": [_placement_to_dict(p) for p in mig.placements],
        }
    return data


def _allocatable_from_dict(data: dict[str, Any]) -> AllocatableDevice:
    gpu = data.get("gpu")
    mig = data.get("mig")
    return AllocatableDevice(
        gpu=AllocatableGpu(
            index=gpu.get("index", 0),
            uuid=gpu.get("uuid", ""),
            mig_enabled=gpu.get("migEnabled", False),
            memory_bytes=gpu.get("memoryBytes", 0),
            product_name=gpu.get("productName", ""),
            brand=gpu.get("brand", ""),
            architecture=gpu.get("architecture", ""),
            cuda_compute_capability=gpu.get("cudaComputeCapability", ""),
        )
        if gpu is not None
        else None,
        mig=AllocatableMigDevice(
            profile=mig.get("profile", ""),
            parent_product_name=mig.get("parentProductName", ""),
            placements=[_placement_from_dict(p) for p in mig.get("placements") or ()],
        )
        if mig is not None
        else None,
    )


def _allocated_to_dict(devices: AllocatedDevices) -> dict[str, Any]:
    info = devices.claim_info
    data: dict[str, Any] = {
        "claimInfo": (
            {"namespace": info.namespace, "name": info.name, "uid": info.uid}
            if info is not None
            else None
        )
    }
    if devices.gpu is not None:
        gpus: dict[str, Any] = {
            "devices": [{"uuid": d.uuid} if d.uuid else {} for d in devices.gpu.devices]
        }
        if devices.gpu.sharing is not None:
            gpus["sharing"] = _gpu_sharing_to_dict(devices.gpu.sharing)
        data["gpu"] = gpus
    if devices.mig is not None:
        migs: dict[str, Any] = {
            "devices": [
                {
                    "profile": d.profile,
                    "parentUUID": d.parent_uuid,
                    "placement": _placement_to_dict(d.placement),
                }
                for d in devices.mig.devices
            ]
        }
        if devices.mig.sharing is not None:
            migs["sharing"] = _mig_sharing_to_dict(devices.mig.sharing)
        data["mig"] = migs
    return data


def _allocated_from_dict(data: dict[str, Any]) -> AllocatedDevices:
    info = data.get("claimInfo")
    gpu = data.get("gpu")
    mig = data.get("mig")
    result = AllocatedDevices(
        claim_info=(
            ClaimInfo(info.get("namespace", ""), info.get("name", ""), info.get("uid", ""))
            if info is not None
            else None
        )
    )
    if gpu is not None:
        sharing = gpu.get("sharing")
        result.gpu = AllocatedGpus(
            devices=[AllocatedGpu(d.get("uuid", "")) for d in gpu.get("devices") or ()],
            sharing=_gpu_sharing_from_dict(sharing) if sharing is not None else None,
        )
    if mig is not None:
        sharing = mig.get("sharing")
        result.mig = AllocatedMigDevices(
            devices=[
                AllocatedMigDevice(
                    profile=d.get("profile", ""),
                    parent_uuid=d.get("parentUUID", ""),
                    placement=_placement_from_dict(d.get("placement") or {}),
                )
                for d in mig.get("devices") or ()
            ],
            sharing=_mig_sharing_from_dict(sharing) if sharing is not None else None,
        )
    return result


def _prepared_to_dict(devices: PreparedDevices) -> dict[str, Any]:
    data: dict[str, Any] = {}
    if devices.gpu is not None:
        data["gpu"] = {"devices": [{"uuid": d.uuid} for d in devices.gpu.devices]}
    if devices.mig is not None:
        data["mig"] = {
            "devices": [
                {
                    "uuid": d.uuid,
                    "profile": d.profile,
                    "parentUUID": d.parent_uuid,
                    "placement": _placement_to_dict(d.placement),
                }
                for d in devices.mig.devices
            ]
        }
    return data


def _prepared_from_dict(data: dict[str, Any]) -> PreparedDevices:
    gpu = data.get("gpu")
    mig = data.get("mig")
    return PreparedDevices(
        gpu=PreparedGpus([PreparedGpu(d.get("uuid", "")) for d in gpu.get("devices") or ()])
        if gpu is not None
        else None,
        mig=PreparedMigDevices(
            [
                PreparedMigDevice(
                    uuid=d.get("uuid", ""),
                    profile=d.get("profile", ""),
                    parent_uuid=d.get("parentUUID", ""),
                    placement=_placement_from_dict(d.get("placement") or {}),
                )
                for d in mig.get("devices") or ()
            ]
        )
        if mig is not None
        else None,
    )


def _spec_to_dict(spec: NodeAllocationStateSpec) -> dict[str, Any]:
    data: dict[str, Any] = {}
    if spec.allocatable_devices:
        data["allocatableDevices"] = [_allocatable_to_dict(d) for d in spec.allocatable_devices]
    if spec.allocated_claims:
        data["allocatedClaims"] = {
            uid: _allocated_to_dict(d) for uid, d in spec.allocated_claims.items()
        }
    if spec.prepared_claims:
        data["preparedClaims"] = {
            uid: _prepared_to_dict(d) for uid, d in spec.prepared_claims.items()
        }
    return data


def _spec_from_dict(data: dict[str, Any]) -> NodeAllocationStateSpec:
    return NodeAllocationStateSpec(
        allocatable_devices=[
            _allocatable_from_dict(d) for d in data.get("allocatableDevices") or ()
        ],
        allocated_claims={
            uid: _allocated_from_dict(d)
            for uid, d in (data.get("allocatedClaims") or {}).items()
        },
        prepared_claims={
            uid: _prepared_from_dict(d)
            for uid, d in (data.get("preparedClaims") or {}).items()
        },
    )