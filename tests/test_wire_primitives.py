import pytest

from openwire.core.exceptions import MalformedWireValue
from openwire.core.wire import (
    expect_bool,
    expect_float,
    expect_int,
    expect_str_map,
    json_type_name,
    list_of,
    nested,
)


@pytest.mark.parametrize(
    "value,name",
    [
        (None, "null"),
        (True, "boolean"),
        (1, "number"),
        (1.5, "number"),
        ("x", "string"),
        ([], "array"),
        ({}, "object"),
    ],
)
def test_json_type_name(value, name):
    assert json_type_name(value) == name


def test_booleans_are_not_numbers():
    with pytest.raises(MalformedWireValue, match="expected integer, got boolean"):
        expect_int(True, "n")
    with pytest.raises(MalformedWireValue, match="expected number, got boolean"):
        expect_float(False, "temperature")


def test_expect_float_accepts_integers():
    assert expect_float(1, "temperature") == 1.0


def test_expect_bool_rejects_numbers():
    with pytest.raises(MalformedWireValue):
        expect_bool(0, "stream")


def test_list_of_reports_item_index():
    parse = list_of(expect_int)

    with pytest.raises(MalformedWireValue) as exc:
        parse([1, 2, "three"], "tokens", "Req")

    assert exc.value.field == "tokens[2]"


def test_nested_requires_an_object():
    parse = nested(dict)

    with pytest.raises(MalformedWireValue, match="expected object, got array"):
        parse([], "usage", "Resp")


def test_expect_str_map_checks_values():
    assert expect_str_map({"a": "1"}, "metadata") == {"a": "1"}
    with pytest.raises(MalformedWireValue) as exc:
        expect_str_map({"a": 1}, "metadata")
    assert exc.value.field == "metadata.a"
