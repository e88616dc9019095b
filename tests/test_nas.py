import json

import pytest

from gpuclaims.meta import GroupResource, ObjectMeta, OwnerReference, TypeMeta
from gpuclaims.nas import (
    GROUP_NAME,
    NODE_ALLOCATION_STATE_STATUS_READY,
    AllocatableDevice,
    AllocatableGpu,
    AllocatableMigDevice,
    AllocatedDevices,
    AllocatedGpu,
    AllocatedGpus,
    AllocatedMigDevice,
    AllocatedMigDevices,
    ClaimInfo,
    DeviceType,
    MigDevicePlacement,
    NodeAllocationState,
    NodeAllocationStateConfig,
    NodeAllocationStateList,
    NodeAllocationStateSpec,
    PreparedDevices,
    PreparedGpu,
    PreparedGpus,
    PreparedMigDevice,
    PreparedMigDevices,
    known_types,
    new_node_allocation_state,
    resource,
)
from gpuclaims.quantity import parse_quantity
from gpuclaims.sharing import (
    GpuSharing,
    GpuSharingStrategy,
    MigDeviceSharing,
    MpsConfig,
    TimeSliceDuration,
    TimeSlicingConfig,
)


def _gpu():
    return AllocatableGpu(0, "GPU-0000", True, 42949672960, "A100", "Tesla", "Ampere", "8.0")


def _full_state():
    placement = MigDevicePlacement(start=0, size=1)
    spec = NodeAllocationStateSpec(
        allocatable_devices=[
            AllocatableDevice(gpu=_gpu()),
            AllocatableDevice(mig=AllocatableMigDevice("1g.5gb", "A100", [placement])),
        ],
        allocated_claims={
            "claim-1": AllocatedDevices(
                claim_info=ClaimInfo("default", "claim-1", "claim-1"),
                gpu=AllocatedGpus(
                    [AllocatedGpu("GPU-0000")],
                    GpuSharing(
                        GpuSharingStrategy.TIME_SLICING,
                        time_slicing_config=TimeSlicingConfig(TimeSliceDuration.LONG),
                    ),
                ),
            ),
            "claim-2": AllocatedDevices(
                claim_info=ClaimInfo("default", "claim-2", "claim-2"),
                mig=AllocatedMigDevices(
                    [AllocatedMigDevice("1g.5gb", "GPU-0000", placement)],
                    MigDeviceSharing(
                        GpuSharingStrategy.MPS,
                        MpsConfig(
                            default_active_thread_percentage=50,
                            default_pinned_device_memory_limit=parse_quantity("2Gi"),
                            default_per_device_pinned_memory_limit={"0": parse_quantity("1Gi")},
                        ),
                    ),
                ),
            ),
        },
        prepared_claims={
            "claim-1": PreparedDevices(gpu=PreparedGpus([PreparedGpu("GPU-0000")])),
            "claim-2": PreparedDevices(
                mig=PreparedMigDevices(
                    [PreparedMigDevice("MIG-0000", "1g.5gb", "GPU-0000", placement)]
                )
            ),
        },
    )
    return NodeAllocationState(
        type_meta=TypeMeta("NodeAllocationState", "nas.gpu.resource.nvidia.com/v1alpha1"),
        metadata=ObjectMeta(name="node-a", namespace="drivers"),
        spec=spec,
        status=NODE_ALLOCATION_STATE_STATUS_READY,
    )


def test_device_types():
    assert AllocatableDevice(gpu=_gpu()).type() == DeviceType.GPU
    assert AllocatableDevice(mig=AllocatableMigDevice("p", "A100")).type() == DeviceType.MIG
    assert AllocatableDevice().type() == "unknown"


def test_allocated_and_prepared_types():
    assert AllocatedDevices(gpu=AllocatedGpus()).type() == "gpu"
    assert AllocatedDevices(mig=AllocatedMigDevices()).type() == "mig"
    assert AllocatedDevices().type() == DeviceType.UNKNOWN
    assert PreparedDevices(gpu=PreparedGpus()).type() == DeviceType.GPU
    assert PreparedDevices(mig=PreparedMigDevices()).type() == DeviceType.MIG
    assert PreparedDevices().type() == DeviceType.UNKNOWN


def test_gpu_takes_precedence_in_type():
    device = AllocatableDevice(gpu=_gpu(), mig=AllocatableMigDevice("p", "A100"))
    assert device.type() == DeviceType.GPU


def test_new_state_without_owner():
    state = new_node_allocation_state(NodeAllocationStateConfig("node-a", "drivers"))
    assert state.metadata.name == "node-a"
    assert state.metadata.namespace == "drivers"
    assert state.metadata.owner_references == []
    assert state.spec == NodeAllocationStateSpec()


def test_new_state_with_owner():
    owner = OwnerReference("v1", "Node", "node-a", "uid-1")
    state = new_node_allocation_state(NodeAllocationStateConfig("node-a", "drivers", owner))
    assert state.metadata.owner_references == [owner]


def test_empty_state_to_dict_omits_empty_fields():
    state = new_node_allocation_state(NodeAllocationStateConfig("node-a", "drivers"))
    assert state.to_dict() == {
        "metadata": {"name": "node-a", "namespace": "drivers"},
        "spec": {},
    }


def test_status_serialized_when_set():
    state = NodeAllocationState(status=NODE_ALLOCATION_STATE_STATUS_READY)
    assert state.to_dict()["status"] == "Ready"


def test_full_round_trip_through_json():
    state = _full_state()
    restored = NodeAllocationState.from_dict(json.loads(json.dumps(state.to_dict())))
    assert restored == state


def test_round_trip_keeps_owner_references():
    owner = OwnerReference("v1", "Node", "node-a", "uid-1", controller=True)
    state = new_node_allocation_state(NodeAllocationStateConfig("node-a", "drivers", owner))
    restored = NodeAllocationState.from_dict(state.to_dict())
    assert restored.metadata.owner_references == [owner]


def test_to_dict_uses_wire_names():
    data = _full_state().to_dict()
    assert set(data["spec"]) == {"allocatableDevices", "allocatedClaims", "preparedClaims"}
    assert data["spec"]["allocatedClaims"]["claim-2"]["mig"]["sharing"]["strategy"] == "MPS"
    mps = data["spec"]["allocatedClaims"]["claim-2"]["mig"]["sharing"]["mpsConfig"]
    assert mps["defaultPinnedDeviceMemoryLimit"] == "2Gi"
    assert data["spec"]["allocatedClaims"]["claim-1"]["gpu"]["sharing"]["timeSlicingConfig"] == {
        "timeSlice": "Long"
    }


def test_from_dict_rejects_unknown_strategy():
    data = _full_state().to_dict()
    data["spec"]["allocatedClaims"]["claim-1"]["gpu"]["sharing"]["strategy"] = "Bogus"
    with pytest.raises(ValueError):
        NodeAllocationState.from_dict(data)


def test_resource_is_group_qualified():
    assert resource("nodeallocationstates") == GroupResource(GROUP_NAME, "nodeallocationstates")


def test_known_types():
    types = known_types()
    assert types["NodeAllocationState"] is NodeAllocationState
    assert types["NodeAllocationStateList"] is NodeAllocationStateList
    assert len(types) == 2