"""
Union value codec.

A union field accepts one of several unrelated wire shapes (a number array or a
base64 string, a bare mode string or a function object). Each shape is a
member class exposing:

- ``matches(raw) -> bool`` (classmethod): shape predicate, no semantic checks
- ``from_wire(raw)`` (classmethod): build the member from a matching value
- ``to_wire()``: re-emit exactly the member's shape

Members are tried in declared order, so list the most specific shape first.
"""

from __future__ import annotations

from typing import Any, Generic, Optional, Sequence, Tuple, Type, TypeVar

from openwire.core.exceptions import UnrecognizedUnionShape
from openwire.core.wire import json_type_name

U = TypeVar("U")


class UnionCodec(Generic[U]):
    def __init__(self, name: str, members: Sequence[Type[Any]]):
        if not members:
            raise ValueError(f"Union {name!r} needs at least one member")
        if len(set(members)) != len(members):
            raise ValueError(f"Union {name!r} lists a member more than once")
        self.name = name
        self._members: Tuple[Type[Any], ...] = tuple(members)

    @property
    def members(self) -> Tuple[Type[Any], ...]:
        return self._members

    def decode(self, raw: Any, field: Optional[str] = None) -> U:
        for member in self._members:
            if member.matches(raw):
                return member.from_wire(raw)
        raise UnrecognizedUnionShape(field, received=json_type_name(raw), union=self.name)

    def encode(self, value: U) -> Any:
        if type(value) not in self._members:
            raise TypeError(f"{type(value).__name__} is not a member of union {self.name!r}")
        return value.to_wire()  # type: ignore[attr-defined]

    def parse(self, raw: Any, field: str, owner: Optional[str] = None) -> U:
        """Adapter matching the ``decode_field`` parser signature."""
        return self.decode(raw, field)

    def __contains__(self, value: Any) -> bool:
        return type(value) in self._members

    def __repr__(self) -> str:
        names = ", ".join(m.__name__ for m in self._members)
        return f"UnionCodec({self.name!r}, [{names}])"
