from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional

from openwire.core.exceptions import MalformedWireValue
from openwire.core.optional import ABSENT, OptionalField, decode_field, encode_fields, require_field
from openwire.core.wire import expect_int, expect_str, expect_str_map, nested
from openwire.models.pagination import PageBounds

VECTOR_STORE_PAGE_BOUNDS = PageBounds(min_limit=1, max_limit=100, default_limit=20)


@dataclass(frozen=True)
class ExpiresAfter:
    days: int
    anchor: Literal["last_active_at"] = "last_active_at"

    def __post_init__(self) -> None:
        if self.anchor != "last_active_at":
            raise MalformedWireValue("anchor", expected="'last_active_at'", received=repr(self.anchor), owner="ExpiresAfter")

    @classmethod
    def from_wire(cls, obj: Dict[str, Any]) -> "ExpiresAfter":
        owner = cls.__name__
        return cls(
            days=require_field(obj, "days", owner, expect_int),
            anchor=require_field(obj, "anchor", owner, expect_str),
        )

    def to_wire(self) -> Dict[str, Any]:
        return {"anchor": self.anchor, "days": self.days}


@dataclass(frozen=True)
class FileCounts:
    in_progress: int = 0
    completed: int = 0
    failed: int = 0
    cancelled: int = 0
    total: int = 0

    @classmethod
    def from_wire(cls, obj: Dict[str, Any]) -> "FileCounts":
        owner = cls.__name__
        return cls(
            in_progress=require_field(obj, "in_progress", owner, expect_int),
            completed=require_field(obj, "completed", owner, expect_int),
            failed=require_field(obj, "failed", owner, expect_int),
            cancelled=require_field(obj, "cancelled", owner, expect_int),
            total=require_field(obj, "total", owner, expect_int),
        )

    def to_wire(self) -> Dict[str, Any]:
        return {
            "in_progress": self.in_progress,
            "completed": self.completed,
            "failed": self.failed,
            "cancelled": self.cancelled,
            "total": self.total,
        }


@dataclass(frozen=True)
class VectorStore:
    id: str
    created_at: int
    name: Optional[str]
    usage_bytes: int
    file_counts: FileCounts
    status: str
    expires_after: Optional[ExpiresAfter] = None
    expires_at: Optional[int] = None
    last_active_at: Optional[int] = None
    metadata: Optional[Dict[str, str]] = None
    object: str = "vector_store"

    @classmethod
    def from_wire(cls, obj: Dict[str, Any]) -> "VectorStore":
        owner = cls.__name__
        return cls(
            id=require_field(obj, "id", owner, expect_str),
            created_at=require_field(obj, "created_at", owner, expect_int),
            name=require_field(obj, "name", owner, expect_str, nullable=True),
            usage_bytes=require_field(obj, "usage_bytes", owner, expect_int),
            file_counts=require_field(obj, "file_counts", owner, nested(FileCounts.from_wire)),
            status=require_field(obj, "status", owner, expect_str),
            expires_after=decode_field(obj, "expires_after", nested(ExpiresAfter.from_wire), owner).or_none(),
            expires_at=decode_field(obj, "expires_at", expect_int, owner).or_none(),
            last_active_at=decode_field(obj, "last_active_at", expect_int, owner).or_none(),
            metadata=decode_field(obj, "metadata", expect_str_map, owner).or_none(),
            object=require_field(obj, "object", owner, expect_str),
        )


@dataclass(frozen=True)
class VectorStoreModifyRequest:
    """Partial update of a vector store.

    Absent fields are left unchanged by the server; Null clears the stored value.
    """

    name: OptionalField[str] = ABSENT
    expires_after: OptionalField[ExpiresAfter] = ABSENT
    metadata: OptionalField[Dict[str, str]] = ABSENT

    @classmethod
    def create(cls, **changes: Any) -> "VectorStoreModifyRequest":
        return cls(**{name: OptionalField.wrap(value) for name, value in changes.items()})

    def to_wire(self) -> Dict[str, Any]:
        return encode_fields(
            {
                "name": self.name,
                "expires_after": self.expires_after,
                "metadata": self.metadata,
            },
            {"expires_after": lambda expires_after: expires_after.to_wire()},
        )

    @classmethod
    def from_wire(cls, obj: Dict[str, Any]) -> "VectorStoreModifyRequest":
        owner = cls.__name__
        return cls(
            name=decode_field(obj, "name", expect_str, owner),
            expires_after=decode_field(obj, "expires_after", nested(ExpiresAfter.from_wire), owner),
            metadata=decode_field(obj, "metadata", expect_str_map, owner),
        )
