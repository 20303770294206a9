"""
Embedding request/response models.

The ``embedding`` field of a returned embedding is a union: a JSON array of
floats when the request asked for ``encoding_format="float"``, or a base64
string of little-endian float32 values for ``encoding_format="base64"``. The
codec decides by shape only; which form to expect is the caller's business.
"""

from __future__ import annotations

import base64
import binascii
import struct
from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Optional, Tuple, Union

from openwire.codecs.union import UnionCodec
from openwire.core.exceptions import MalformedWireValue
from openwire.core.optional import ABSENT, OptionalField, decode_field, encode_fields, require_field
from openwire.core.wire import expect_int, expect_str, is_integer, is_number, list_of, nested

EncodingFormat = Literal["float", "base64"]
ENCODING_FORMATS: Tuple[str, ...] = ("float", "base64")


# =============================================================================
# Embedding vector union
# =============================================================================


@dataclass(frozen=True)
class NumericVector:
    values: Tuple[float, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", tuple(float(v) for v in self.values))

    @classmethod
    def matches(cls, raw: Any) -> bool:
        return isinstance(raw, list) and all(is_number(v) for v in raw)

    @classmethod
    def from_wire(cls, raw: List[Any]) -> "NumericVector":
        return cls(tuple(raw))

    def to_wire(self) -> List[float]:
        return list(self.values)

    def as_floats(self) -> Tuple[float, ...]:
        return self.values

    def to_blob(self) -> "EncodedBlob":
        packed = struct.pack(f"<{len(self.values)}f", *self.values)
        return EncodedBlob(base64.b64encode(packed).decode("ascii"))


@dataclass(frozen=True)
class EncodedBlob:
    data: str

    @classmethod
    def matches(cls, raw: Any) -> bool:
        return isinstance(raw, str)

    @classmethod
    def from_wire(cls, raw: str) -> "EncodedBlob":
        return cls(raw)

    def to_wire(self) -> str:
        return self.data

    def as_floats(self) -> Tuple[float, ...]:
        try:
            packed = base64.b64decode(self.data, validate=True)
        except (binascii.Error, ValueError):
            raise MalformedWireValue("embedding", expected="base64 string", received="string") from None
        if len(packed) % 4:
            raise MalformedWireValue("embedding", expected="float32 byte sequence", received="string")
        return struct.unpack(f"<{len(packed) // 4}f", packed)

    def to_numeric(self) -> NumericVector:
        return NumericVector(self.as_floats())


EmbeddingVector = Union[NumericVector, EncodedBlob]
EMBEDDING_VECTOR: UnionCodec[EmbeddingVector] = UnionCodec("embedding_vector", [NumericVector, EncodedBlob])


# =============================================================================
# Embedding input union
# =============================================================================


@dataclass(frozen=True)
class TokenInput:
    tokens: Tuple[int, ...]

    @classmethod
    def matches(cls, raw: Any) -> bool:
        # Also claims the empty array.
        return isinstance(raw, list) and all(is_integer(v) for v in raw)

    @classmethod
    def from_wire(cls, raw: List[int]) -> "TokenInput":
        return cls(tuple(raw))

    def to_wire(self) -> List[int]:
        return list(self.tokens)


@dataclass(frozen=True)
class TokenBatch:
    batches: Tuple[Tuple[int, ...], ...]

    def __post_init__(self) -> None:
        # an empty batch would encode to [], which decodes as TokenInput
        if not self.batches:
            raise ValueError("TokenBatch needs at least one token list")

    @classmethod
    def matches(cls, raw: Any) -> bool:
        return (
            isinstance(raw, list)
            and bool(raw)
            and all(isinstance(row, list) and all(is_integer(v) for v in row) for row in raw)
        )

    @classmethod
    def from_wire(cls, raw: List[List[int]]) -> "TokenBatch":
        return cls(tuple(tuple(row) for row in raw))

    def to_wire(self) -> List[List[int]]:
        return [list(row) for row in self.batches]


@dataclass(frozen=True)
class TextBatch:
    texts: Tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.texts:
            raise ValueError("TextBatch needs at least one string")

    @classmethod
    def matches(cls, raw: Any) -> bool:
        return isinstance(raw, list) and bool(raw) and all(isinstance(v, str) for v in raw)

    @classmethod
    def from_wire(cls, raw: List[str]) -> "TextBatch":
        return cls(tuple(raw))

    def to_wire(self) -> List[str]:
        return list(self.texts)


@dataclass(frozen=True)
class TextInput:
    text: str

    @classmethod
    def matches(cls, raw: Any) -> bool:
        return isinstance(raw, str)

    @classmethod
    def from_wire(cls, raw: str) -> "TextInput":
        return cls(raw)

    def to_wire(self) -> str:
        return self.text


EmbeddingInput = Union[TokenInput, TokenBatch, TextBatch, TextInput]
EMBEDDING_INPUT: UnionCodec[EmbeddingInput] = UnionCodec(
    "embedding_input", [TokenInput, TokenBatch, TextBatch, TextInput]
)


# =============================================================================
# Request / response
# =============================================================================


def _expect_encoding_format(value: Any, field_name: str, owner: Optional[str] = None) -> str:
    value = expect_str(value, field_name, owner)
    if value not in ENCODING_FORMATS:
        raise MalformedWireValue(field_name, expected=" | ".join(ENCODING_FORMATS), received=repr(value), owner=owner)
    return value


@dataclass(frozen=True)
class EmbeddingsCreateRequest:
    input: EmbeddingInput
    model: str
    encoding_format: OptionalField[EncodingFormat] = ABSENT
    dimensions: OptionalField[int] = ABSENT
    user: OptionalField[str] = ABSENT

    def __post_init__(self) -> None:
        if self.encoding_format.is_present:
            _expect_encoding_format(self.encoding_format.value, "encoding_format", type(self).__name__)

    @classmethod
    def create(cls, model: str, input: Any, **options: Any) -> "EmbeddingsCreateRequest":
        """Build a request from plain values; ``input`` may be raw wire JSON or a union member."""
        if input not in EMBEDDING_INPUT:
            input = EMBEDDING_INPUT.decode(input, "input")
        return cls(input=input, model=model, **{k: OptionalField.wrap(v) for k, v in options.items()})

    def to_wire(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "input": EMBEDDING_INPUT.encode(self.input),
            "model": self.model,
        }
        body.update(
            encode_fields(
                {
                    "encoding_format": self.encoding_format,
                    "dimensions": self.dimensions,
                    "user": self.user,
                }
            )
        )
        return body

    @classmethod
    def from_wire(cls, obj: Dict[str, Any]) -> "EmbeddingsCreateRequest":
        owner = cls.__name__
        return cls(
            input=require_field(obj, "input", owner, EMBEDDING_INPUT.parse),
            model=require_field(obj, "model", owner, expect_str),
            encoding_format=decode_field(obj, "encoding_format", _expect_encoding_format, owner),
            dimensions=decode_field(obj, "dimensions", expect_int, owner),
            user=decode_field(obj, "user", expect_str, owner),
        )


@dataclass(frozen=True)
class Embedding:
    index: int
    embedding: EmbeddingVector
    object: str = "embedding"

    @classmethod
    def from_wire(cls, obj: Dict[str, Any]) -> "Embedding":
        owner = cls.__name__
        return cls(
            index=require_field(obj, "index", owner, expect_int),
            embedding=require_field(obj, "embedding", owner, EMBEDDING_VECTOR.parse),
            object=require_field(obj, "object", owner, expect_str),
        )

    def to_wire(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "embedding": EMBEDDING_VECTOR.encode(self.embedding),
            "object": self.object,
        }


@dataclass(frozen=True)
class EmbeddingUsage:
    prompt_tokens: int
    total_tokens: int

    @classmethod
    def from_wire(cls, obj: Dict[str, Any]) -> "EmbeddingUsage":
        owner = cls.__name__
        return cls(
            prompt_tokens=require_field(obj, "prompt_tokens", owner, expect_int),
            total_tokens=require_field(obj, "total_tokens", owner, expect_int),
        )

    def to_wire(self) -> Dict[str, Any]:
        return {"prompt_tokens": self.prompt_tokens, "total_tokens": self.total_tokens}


@dataclass(frozen=True)
class EmbeddingsResponse:
    data: Tuple[Embedding, ...]
    model: str
    usage: Optional[EmbeddingUsage] = None
    object: str = "list"

    @classmethod
    def from_wire(cls, obj: Dict[str, Any]) -> "EmbeddingsResponse":
        owner = cls.__name__
        return cls(
            data=tuple(require_field(obj, "data", owner, list_of(nested(Embedding.from_wire)))),
            model=require_field(obj, "model", owner, expect_str),
            usage=decode_field(obj, "usage", nested(EmbeddingUsage.from_wire), owner).or_none(),
            object=require_field(obj, "object", owner, expect_str),
        )

    def to_wire(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "object": self.object,
            "data": [item.to_wire() for item in self.data],
            "model": self.model,
        }
        if self.usage is not None:
            body["usage"] = self.usage.to_wire()
        return body

    def vectors(self) -> List[Tuple[float, ...]]:
        """Float vectors in ``index`` order, decoding base64 entries."""
        return [item.embedding.as_floats() for item in sorted(self.data, key=lambda e: e.index)]
