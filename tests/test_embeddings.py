import pytest

from openwire.core.exceptions import MalformedWireValue, MissingRequiredField, UnrecognizedUnionShape
from openwire.core.optional import ABSENT, OptionalField
from openwire.models.embeddings import (
    Embedding,
    EmbeddingsCreateRequest,
    EmbeddingsResponse,
    EncodedBlob,
    NumericVector,
    TextBatch,
    TextInput,
)


def test_create_request_omits_unset_options():
    request = EmbeddingsCreateRequest.create("text-embedding-3-small", "hello")

    assert request.input == TextInput("hello")
    assert request.encoding_format is ABSENT
    assert request.to_wire() == {"input": "hello", "model": "text-embedding-3-small"}


def test_create_request_with_options():
    request = EmbeddingsCreateRequest.create(
        "text-embedding-3-small",
        ["a", "b"],
        encoding_format="base64",
        dimensions=256,
    )

    assert request.input == TextBatch(("a", "b"))
    assert request.to_wire() == {
        "input": ["a", "b"],
        "model": "text-embedding-3-small",
        "encoding_format": "base64",
        "dimensions": 256,
    }


def test_request_decodes_from_wire():
    request = EmbeddingsCreateRequest.from_wire({"input": [1, 2], "model": "m", "user": None})

    assert request.user.is_null
    assert request.dimensions.is_absent
    assert request.to_wire() == {"input": [1, 2], "model": "m", "user": None}


def test_request_rejects_unknown_encoding_format():
    with pytest.raises(MalformedWireValue, match="int8"):
        EmbeddingsCreateRequest.from_wire({"input": "x", "model": "m", "encoding_format": "int8"})


def test_create_rejects_unknown_encoding_format():
    with pytest.raises(MalformedWireValue) as exc:
        EmbeddingsCreateRequest.create("m", "x", encoding_format="bogus")

    assert exc.value.field == "encoding_format"
    assert exc.value.owner == "EmbeddingsCreateRequest"

    with pytest.raises(MalformedWireValue, match="bogus"):
        EmbeddingsCreateRequest(input=TextInput("x"), model="m", encoding_format=OptionalField.of("bogus"))


def test_request_requires_input():
    with pytest.raises(MissingRequiredField, match="'input'"):
        EmbeddingsCreateRequest.from_wire({"model": "m"})


def test_float_response_decodes_numeric_vectors():
    response = EmbeddingsResponse.from_wire(
        {
            "object": "list",
            "data": [{"object": "embedding", "index": 0, "embedding": [0.5, -1.0]}],
            "model": "text-embedding-3-small",
            "usage": {"prompt_tokens": 2, "total_tokens": 2},
        }
    )

    assert response.data[0].embedding == NumericVector((0.5, -1.0))
    assert response.usage is not None and response.usage.total_tokens == 2
    assert response.vectors() == [(0.5, -1.0)]


def test_base64_response_keeps_string_form_until_asked():
    blob = NumericVector((1.0, 2.0, -0.5)).to_blob()
    response = EmbeddingsResponse.from_wire(
        {
            "object": "list",
            "data": [
                {"object": "embedding", "index": 1, "embedding": blob.data},
                {"object": "embedding", "index": 0, "embedding": [3.0]},
            ],
            "model": "m",
        }
    )

    assert response.data[0].embedding == blob
    assert response.usage is None
    assert response.vectors() == [(3.0,), (1.0, 2.0, -0.5)]


def test_blob_and_vector_convert_explicitly():
    blob = EncodedBlob("AACAPwAAAMA=")

    assert blob.to_numeric() == NumericVector((1.0, -2.0))
    assert NumericVector((1.0, -2.0)).to_blob() == blob


def test_invalid_base64_is_malformed():
    with pytest.raises(MalformedWireValue, match="base64"):
        EncodedBlob("not base64!").as_floats()


def test_embedding_field_boolean_is_unrecognized_union_shape():
    with pytest.raises(UnrecognizedUnionShape) as exc:
        Embedding.from_wire({"object": "embedding", "index": 0, "embedding": True})

    assert exc.value.field == "embedding"
    assert exc.value.received == "boolean"


def test_embedding_to_wire_reemits_chosen_shape():
    assert Embedding(index=0, embedding=EncodedBlob("AAAAAA==")).to_wire() == {
        "index": 0,
        "embedding": "AAAAAA==",
        "object": "embedding",
    }


def test_optional_fields_can_be_passed_explicitly():
    request = EmbeddingsCreateRequest(
        input=TextInput("x"),
        model="m",
        dimensions=OptionalField.of(8),
    )

    assert request.to_wire()["dimensions"] == 8
