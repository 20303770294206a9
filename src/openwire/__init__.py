"""openwire.

Typed wire model for an OpenAI-style JSON API: three-state optional fields,
shape-discriminated union values, tag-discriminated variant records, and the
cursor pagination envelope shared by list endpoints.

Encoding and decoding are pure functions over immutable values; sending the
result is left to an HTTP layer (see ``openwire.transport.http``).
"""

from openwire.codecs.union import UnionCodec
from openwire.codecs.variants import VariantRecord, VariantRegistry
from openwire.config import ClientConfig, load_client_config
from openwire.core.exceptions import (
    InvalidPageParameter,
    MalformedWireValue,
    MissingRequiredField,
    OpenwireException,
    UnknownVariantTag,
    UnrecognizedUnionShape,
    VariantRegistryError,
    WireFormatError,
)
from openwire.core.optional import ABSENT, NULL, OptionalField, decode_field, encode_fields, require_field
from openwire.models.pagination import PageBounds, PageRequest, PageResponse, iter_items, iter_pages

# Importing the resource models populates their variant registries.
from openwire.models import chat, embeddings, run_steps, vector_stores  # noqa: F401

__version__ = "0.1.0"

__all__ = [
    "ABSENT",
    "NULL",
    "ClientConfig",
    "InvalidPageParameter",
    "MalformedWireValue",
    "MissingRequiredField",
    "OpenwireException",
    "OptionalField",
    "PageBounds",
    "PageRequest",
    "PageResponse",
    "UnionCodec",
    "UnknownVariantTag",
    "UnrecognizedUnionShape",
    "VariantRecord",
    "VariantRegistry",
    "VariantRegistryError",
    "WireFormatError",
    "decode_field",
    "encode_fields",
    "iter_items",
    "iter_pages",
    "load_client_config",
    "require_field",
]
