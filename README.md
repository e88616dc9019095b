# gpuclaims

Data types and matching logic for describing GPU resource claims: which GPUs
or MIG devices a workload asks for, how they may be shared, and what a node
has available, allocated and prepared. The package has no dependencies
beyond the standard library.

## Installation

```
pip install gpuclaims
```

For running the test suite:

```
pip install "gpuclaims[test]"
pytest
```

## What is in the package

- `gpuclaims.quantity`: exact resource quantities such as `"1Gi"`, `"500m"`
  or `"1e3"`. `parse_quantity(text)` returns a `Quantity`;
  `Quantity.value()` gives an integer rounded away from zero and
  `Quantity.cmp(other)` gives -1, 0 or 1. Malformed text raises
  `QuantityError`.
- `gpuclaims.semver`: validation and comparison of `v`-prefixed semantic
  versions (`is_valid`, `compare`). Missing minor and patch numbers count as
  zero, build metadata is ignored, and an invalid version sorts below any
  valid one.
- `gpuclaims.selector`: the generic `Selector` (a property set, or a list of
  selectors joined by 'and' or 'or'), the helpers `and_all` and `or_any`, and
  the property matchers `IntProperty`, `StringProperty`, `BoolProperty`,
  `GlobProperty` (case-insensitive `*` wildcards, matched anywhere in the
  string), `QuantityComparator` and `VersionComparator`, with their
  operators in `ComparatorOperator`. `check_compare_value` and
  `wildcard_to_regexp` are the building blocks they use.
- `gpuclaims.gpuselector`: `GpuSelector` and `GpuSelectorProperties`, with
  `parse_gpu_selector` to build a selector from its JSON-ready form.
  Selectors may nest at most three levels below the top; deeper nesting
  raises `SelectorDepthError`.
- `gpuclaims.sharing`: the time-slicing and MPS strategies (`GpuSharing`,
  `MigDeviceSharing`, `TimeSlicingConfig`, `MpsConfig`, `TimeSliceDuration`,
  `GpuSharingStrategy`). The functions `is_time_slicing`, `is_mps`,
  `time_slicing_config` and `mps_config` also accept `None` for unset
  sharing, which means time-slicing with the default time slice.
  `normalize_pinned_memory_limits` turns pinned-memory limits into
  per-device-index limits in megabytes.
- `gpuclaims.meta`: object metadata (`TypeMeta`, `ObjectMeta`, `ListMeta`,
  `OwnerReference`) and API identifiers (`GroupVersion`, `GroupResource`).
- `gpuclaims.nas`: the per-node allocation state (`NodeAllocationState`, its
  spec and the allocatable, allocated and prepared device types, each
  reporting its `DeviceType`). `NodeAllocationState.to_dict()` and
  `NodeAllocationState.from_dict()` convert to and from the JSON-ready form;
  `new_node_allocation_state` creates an empty, optionally owned state.
- `gpuclaims.gpu`: device class and claim parameters for GPUs, MIG devices
  and compute instances, with the functions that fill in their defaults.

Both `gpuclaims.nas` and `gpuclaims.gpu` provide `resource(name)`, which
qualifies a resource name with the module's API group, and `known_types()`,
which maps each kind the group registers to its class.

## Examples

Quantities and versions:

```python
from gpuclaims.quantity import parse_quantity
from gpuclaims.semver import compare

parse_quantity("2Gi").value()      # 2147483648
compare("v8.0", "v8.6")            # -1
```

Selecting a GPU:

```python
from gpuclaims.gpuselector import parse_gpu_selector

selector = parse_gpu_selector({
    "andExpression": [
        {"productName": "*a100*"},
        {"memory": {"value": "40Gi", "operator": "GreaterThanOrEqualTo"}},
    ]
})

def compare(properties):
    ...  # check one set of properties against a concrete GPU

selector.matches(compare)
```

Sharing settings and per-device pinned memory limits:

```python
from gpuclaims.quantity import parse_quantity
from gpuclaims.sharing import normalize_pinned_memory_limits

normalize_pinned_memory_limits(
    {"0": parse_quantity("1Gi")},
    ["GPU-0"],
    parse_quantity("2Gi"),
)
# {"0": "1024M"}
```

Claim parameter defaults:

```python
from gpuclaims.gpu import update_gpu_claim_parameters_spec_with_defaults

spec = update_gpu_claim_parameters_spec_with_defaults(None)
spec.count  # 1
```

## Errors

Errors are raised as exceptions: `QuantityError` for malformed quantities,
`SharingError` for inconsistent or missing sharing settings and for
pinned-memory limits that are too low or keyed by something other than an
integer, and `SelectorDepthError` for selectors nested deeper than allowed.
`parse_gpu_selector` raises `ValueError` for values of the wrong type.

## What the package does not do

The package holds data and the logic over it only. It has no client for
storing, fetching, updating or watching node allocation states or claim
parameters in a cluster, no driver or controller that allocates devices,
and no command-line program.