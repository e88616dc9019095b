import pytest

from gpuclaims.quantity import Quantity, QuantityError, parse_quantity


@pytest.mark.parametrize(
    "left, right",
    [
        ("1Gi", "1024Mi"),
        ("1Mi", "1024Ki"),
        ("1k", "1000"),
        ("1e3", "1k"),
        ("1E3", "1000"),
        ("1500m", "1.5"),
        ("1M", "1000k"),
        ("+5", "5"),
        (".5", "500m"),
    ],
)
def test_equivalent_notations_are_equal(left, right):
    assert parse_quantity(left) == parse_quantity(right)
    assert parse_quantity(left).cmp(parse_quantity(right)) == 0


def test_plain_integer_value():
    assert parse_quantity("1000").value() == 1000


def test_binary_value_matches_kibibytes():
    assert parse_quantity("1Gi").value() == parse_quantity("1048576Ki").value()


def test_value_rounds_away_from_zero():
    assert parse_quantity("100m").value() == 1
    assert parse_quantity("-100m").value() == -1
    assert parse_quantity("1.5").value() == 2


def test_cmp_orders_binary_and_decimal():
    assert parse_quantity("1Gi").cmp(parse_quantity("1G")) == 1
    assert parse_quantity("1G").cmp(parse_quantity("1Gi")) == -1


def test_cmp_is_antisymmetric():
    pairs = [("1", "2"), ("16Gi", "40Gi"), ("-1", "1m"), ("1e2", "99")]
    for a, b in pairs:
        qa, qb = parse_quantity(a), parse_quantity(b)
        assert qa.cmp(qb) == -qb.cmp(qa)


def test_ordering_operators_follow_cmp():
    small, large = parse_quantity("16Gi"), parse_quantity("40Gi")
    assert small < large
    assert sorted([large, small]) == [small, large]


def test_str_keeps_original_text():
    assert str(parse_quantity("2Gi")) == "2Gi"


def test_str_round_trip_for_built_quantity():
    q = Quantity(parse_quantity("250m").amount)
    assert parse_quantity(str(q)) == q


@pytest.mark.parametrize("text", ["", "abc", "1K", "1.2.3", "1Zi", "Gi", " 1", "1 Gi", "1e"])
def test_invalid_quantities_raise(text):
    with pytest.raises(QuantityError):
        parse_quantity(text)


def test_quantity_error_is_value_error():
    with pytest.raises(ValueError):
        parse_quantity("bogus")