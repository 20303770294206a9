"""
Three-state optional fields.

Partial-update endpoints treat a missing key ("leave unchanged") differently
from an explicit ``null`` ("clear the value"). ``OptionalField`` keeps the two
apart so encoding never conflates them:

    >>> encode_fields({"name": OptionalField.of("docs"), "metadata": NULL, "expires_after": ABSENT})
    {'name': 'docs', 'metadata': None}
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Generic, Mapping, Optional, TypeVar

from openwire.core.exceptions import MalformedWireValue, MissingRequiredField

T = TypeVar("T")
U = TypeVar("U")

# (raw wire value, field name, owner type name) -> parsed value
Parser = Callable[[Any, str, Optional[str]], Any]
Encoder = Callable[[Any], Any]


class FieldState(Enum):
    ABSENT = "absent"
    NULL = "null"
    PRESENT = "present"


@dataclass(frozen=True)
class OptionalField(Generic[T]):
    state: FieldState
    value: Optional[T] = None

    def __post_init__(self) -> None:
        if self.state is FieldState.PRESENT and self.value is None:
            raise ValueError("Present fields need a value; use OptionalField.null() for an explicit null")
        if self.state is not FieldState.PRESENT and self.value is not None:
            raise ValueError(f"{self.state.value} fields cannot carry a value")

    @classmethod
    def absent(cls) -> "OptionalField[Any]":
        return ABSENT

    @classmethod
    def null(cls) -> "OptionalField[Any]":
        return NULL

    @classmethod
    def of(cls, value: T) -> "OptionalField[T]":
        return cls(FieldState.PRESENT, value)

    @classmethod
    def wrap(cls, value: Any) -> "OptionalField[Any]":
        """Lift a plain value: ``None`` becomes Null, an OptionalField passes through."""
        if isinstance(value, OptionalField):
            return value
        if value is None:
            return NULL
        return cls.of(value)

    @property
    def is_absent(self) -> bool:
        return self.state is FieldState.ABSENT

    @property
    def is_null(self) -> bool:
        return self.state is FieldState.NULL

    @property
    def is_present(self) -> bool:
        return self.state is FieldState.PRESENT

    def get(self) -> T:
        if self.state is not FieldState.PRESENT:
            raise ValueError(f"No value: field is {self.state.value}")
        return self.value  # type: ignore[return-value]

    def or_none(self) -> Optional[T]:
        return self.value

    def map(self, fn: Callable[[T], U]) -> "OptionalField[U]":
        if self.state is not FieldState.PRESENT:
            return self  # type: ignore[return-value]
        return OptionalField.of(fn(self.value))  # type: ignore[arg-type]

    def __repr__(self) -> str:
        if self.state is FieldState.PRESENT:
            return f"Present({self.value!r})"
        return self.state.value.capitalize()


ABSENT: OptionalField[Any] = OptionalField(FieldState.ABSENT)
NULL: OptionalField[Any] = OptionalField(FieldState.NULL)


def encode_fields(
    fields: Mapping[str, OptionalField[Any]],
    encoders: Optional[Mapping[str, Encoder]] = None,
) -> Dict[str, Any]:
    """Build a wire object holding only the Present and Null fields."""
    out: Dict[str, Any] = {}
    for name, field_value in fields.items():
        if not isinstance(field_value, OptionalField):
            raise TypeError(f"{name!r} must be an OptionalField, got {type(field_value).__name__}")
        if field_value.is_absent:
            continue
        if field_value.is_null:
            out[name] = None
            continue
        encoder = encoders.get(name) if encoders else None
        out[name] = encoder(field_value.value) if encoder else field_value.value
    return out


def decode_field(
    obj: Mapping[str, Any],
    name: str,
    parse: Optional[Parser] = None,
    owner: Optional[str] = None,
) -> OptionalField[Any]:
    """Missing key -> Absent, JSON null -> Null, anything else -> Present(parse(value))."""
    if name not in obj:
        return ABSENT
    raw = obj[name]
    if raw is None:
        return NULL
    return OptionalField.of(parse(raw, name, owner) if parse else raw)


def require_field(
    obj: Mapping[str, Any],
    name: str,
    owner: str,
    parse: Optional[Parser] = None,
    *,
    nullable: bool = False,
) -> Any:
    field_value = decode_field(obj, name, parse, owner)
    if field_value.is_absent:
        raise MissingRequiredField(name, owner)
    if field_value.is_null and not nullable:
        raise MalformedWireValue(name, expected="non-null value", received="null", owner=owner)
    return field_value.value
