from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional

from openwire.core.exceptions import MalformedWireValue


def json_type_name(value: Any) -> str:
    """Name of the JSON type a decoded wire value came from."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    return type(value).__name__


def is_number(value: Any) -> bool:
    # bool is an int subclass but a distinct JSON type
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def expect_str(value: Any, field: str, owner: Optional[str] = None) -> str:
    if not isinstance(value, str):
        raise MalformedWireValue(field, expected="string", received=json_type_name(value), owner=owner)
    return value


def expect_int(value: Any, field: str, owner: Optional[str] = None) -> int:
    if not is_integer(value):
        raise MalformedWireValue(field, expected="integer", received=json_type_name(value), owner=owner)
    return value


def expect_float(value: Any, field: str, owner: Optional[str] = None) -> float:
    if not is_number(value):
        raise MalformedWireValue(field, expected="number", received=json_type_name(value), owner=owner)
    return float(value)


def expect_bool(value: Any, field: str, owner: Optional[str] = None) -> bool:
    if not isinstance(value, bool):
        raise MalformedWireValue(field, expected="boolean", received=json_type_name(value), owner=owner)
    return value


def expect_list(value: Any, field: str, owner: Optional[str] = None) -> List[Any]:
    if not isinstance(value, list):
        raise MalformedWireValue(field, expected="array", received=json_type_name(value), owner=owner)
    return value


def expect_object(value: Any, field: str, owner: Optional[str] = None) -> Dict[str, Any]:
    if not isinstance(value, Mapping):
        raise MalformedWireValue(field, expected="object", received=json_type_name(value), owner=owner)
    return dict(value)


def expect_str_map(value: Any, field: str, owner: Optional[str] = None) -> Dict[str, str]:
    obj = expect_object(value, field, owner)
    for key, item in obj.items():
        expect_str(item, f"{field}.{key}", owner)
    return obj


def nested(from_wire: Callable[[Dict[str, Any]], Any]) -> Callable[[Any, str, Optional[str]], Any]:
    """Parser for a nested object decoded by ``from_wire``."""

    def parse(value: Any, field: str, owner: Optional[str] = None) -> Any:
        return from_wire(expect_object(value, field, owner))

    return parse


def list_of(parse_item: Callable[[Any, str, Optional[str]], Any]) -> Callable[[Any, str, Optional[str]], Any]:
    """Parser for a JSON array whose items are each read by ``parse_item``."""

    def parse(value: Any, field: str, owner: Optional[str] = None) -> List[Any]:
        items = expect_list(value, field, owner)
        return [parse_item(item, f"{field}[{i}]", owner) for i, item in enumerate(items)]

    return parse
