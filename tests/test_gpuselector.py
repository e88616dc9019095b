import pytest

from gpuclaims.gpuselector import (
    GpuSelector,
    GpuSelectorProperties,
    SelectorDepthError,
    parse_gpu_selector,
)
from gpuclaims.quantity import parse_quantity
from gpuclaims.selector import (
    ComparatorOperator,
    GlobProperty,
    IntProperty,
    QuantityComparator,
    Selector,
    VersionComparator,
)

GPU = {
    "index": 0,
    "uuid": "GPU-made-up-uuid",
    "productName": "NVIDIA A100-SXM4-40GB",
    "memory": parse_quantity("40Gi"),
    "cudaComputeCapability": "8.0",
}


def matcher(gpu):
    def compare(p):
        if p.index is not None:
            return p.index.matches(gpu["index"])
        if p.uuid is not None:
            return p.uuid.matches(gpu["uuid"])
        if p.product_name is not None:
            return p.product_name.matches(gpu["productName"])
        if p.memory is not None:
            return p.memory.matches(gpu["memory"])
        if p.cuda_compute_capability is not None:
            return p.cuda_compute_capability.matches(gpu["cudaComputeCapability"])
        return False

    return compare


def index(i):
    return GpuSelector(properties=GpuSelectorProperties(index=IntProperty(i)))


def test_properties_are_passed_to_compare():
    props = GpuSelectorProperties(index=IntProperty(0))
    seen = []
    assert GpuSelector(properties=props).matches(lambda p: seen.append(p) or True) is True
    assert seen == [props]


def test_empty_selector_does_not_match():
    calls = []
    assert GpuSelector().matches(lambda p: calls.append(p) or True) is False
    assert calls == []


def test_empty_expression_lists_do_not_match():
    selector = GpuSelector(and_expression=[], or_expression=[])
    assert selector.matches(lambda p: True) is False


def test_properties_take_precedence_over_expressions():
    selector = GpuSelector(
        properties=GpuSelectorProperties(index=IntProperty(0)),
        or_expression=[index(5)],
    )
    assert selector.matches(matcher(GPU)) is True


def test_and_expression():
    glob = GpuSelector(properties=GpuSelectorProperties(product_name=GlobProperty("*a100*")))
    assert GpuSelector(and_expression=[index(0), glob]).matches(matcher(GPU)) is True
    assert GpuSelector(and_expression=[index(1), glob]).matches(matcher(GPU)) is False


def test_or_expression():
    assert GpuSelector(or_expression=[index(1), index(0)]).matches(matcher(GPU)) is True
    assert GpuSelector(or_expression=[index(1), index(2)]).matches(matcher(GPU)) is False


def test_to_selector_structure():
    generic = GpuSelector(and_expression=[index(0)]).to_selector()
    assert generic.properties is None
    assert generic.or_expression is None
    assert generic.and_expression == [
        Selector(properties=GpuSelectorProperties(index=IntProperty(0)))
    ]


def nested(levels, leaf):
    selector = leaf
    for _ in range(levels):
        selector = GpuSelector(and_expression=[selector])
    return selector


def test_three_levels_of_nesting_are_allowed():
    assert nested(3, index(0)).matches(matcher(GPU)) is True
    assert nested(3, index(1)).matches(matcher(GPU)) is False


def test_four_levels_of_nesting_are_rejected():
    with pytest.raises(SelectorDepthError):
        nested(4, index(0)).matches(matcher(GPU))


def test_parse_glob_property():
    selector = parse_gpu_selector({"productName": "*a100*"})
    assert selector.properties == GpuSelectorProperties(product_name=GlobProperty("*a100*"))
    assert selector.matches(matcher(GPU)) is True


def test_parse_memory_comparator():
    selector = parse_gpu_selector({"memory": {"value": "16Gi", "operator": "GreaterThan"}})
    memory = selector.properties.memory
    assert memory == QuantityComparator(parse_quantity("16Gi"), ComparatorOperator.GREATER_THAN)
    assert memory.matches(parse_quantity("40Gi")) is True
    assert memory.matches(parse_quantity("16Gi")) is False


def test_parse_nested_version_comparator():
    data = {
        "orExpression": [
            {"index": 3},
            {"andExpression": [{"cudaComputeCapability": {"value": "8.0", "operator": "GreaterThanOrEqualTo"}}]},
        ]
    }
    selector = parse_gpu_selector(data)
    inner = selector.or_expression[1].and_expression[0].properties
    assert inner.cuda_compute_capability == VersionComparator(
        "8.0", ComparatorOperator.GREATER_THAN_OR_EQUAL_TO
    )
    assert selector.matches(matcher(GPU)) is True


def test_parse_unknown_operator_never_matches():
    selector = parse_gpu_selector({"memory": {"value": "1Gi", "operator": "Near"}})
    assert selector.properties.memory.operator == "Near"
    assert selector.matches(matcher(GPU)) is False


def test_parse_too_deep_is_rejected():
    data = {"index": 0}
    for _ in range(4):
        data = {"andExpression": [data]}
    with pytest.raises(SelectorDepthError):
        parse_gpu_selector(data)


def test_parse_rejects_wrong_types():
    with pytest.raises(ValueError):
        parse_gpu_selector({"index": "0"})
    with pytest.raises(ValueError):
        parse_gpu_selector({"migEnabled": "yes"})