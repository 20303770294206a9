import pytest

from openwire.codecs.union import UnionCodec
from openwire.core.exceptions import MalformedWireValue, UnrecognizedUnionShape
from openwire.models.chat import (
    STOP,
    TOOL_CHOICE,
    TOOL_CHOICE_AUTO,
    NamedFunctionChoice,
    StopSequence,
    StopSequences,
    ToolChoiceMode,
)
from openwire.models.embeddings import (
    EMBEDDING_INPUT,
    EMBEDDING_VECTOR,
    EncodedBlob,
    NumericVector,
    TextBatch,
    TextInput,
    TokenBatch,
    TokenInput,
)


def test_embedding_vector_array_decodes_to_numeric_vector():
    value = EMBEDDING_VECTOR.decode([0.1, -2, 3.5])

    assert value == NumericVector((0.1, -2.0, 3.5))
    assert EMBEDDING_VECTOR.encode(value) == [0.1, -2.0, 3.5]


def test_embedding_vector_string_decodes_to_encoded_blob():
    value = EMBEDDING_VECTOR.decode("AACAPw==")

    assert value == EncodedBlob("AACAPw==")
    assert EMBEDDING_VECTOR.encode(value) == "AACAPw=="


def test_embedding_vector_boolean_is_unrecognized():
    with pytest.raises(UnrecognizedUnionShape) as exc:
        EMBEDDING_VECTOR.decode(True, "embedding")

    assert exc.value.received == "boolean"
    assert exc.value.field == "embedding"
    assert exc.value.union == "embedding_vector"


def test_embedding_vector_rejects_mixed_arrays():
    with pytest.raises(UnrecognizedUnionShape, match="array"):
        EMBEDDING_VECTOR.decode([1.0, "2"])


def test_embedding_vector_does_not_check_length():
    assert EMBEDDING_VECTOR.decode([]) == NumericVector(())


@pytest.mark.parametrize(
    "value",
    [
        NumericVector((1.0, 0.25)),
        EncodedBlob("AAAAAA=="),
        TokenInput((1, 2, 3)),
        TokenBatch(((1, 2), (3,))),
        TextBatch(("a", "b")),
        TextInput("hello"),
        NamedFunctionChoice("lookup"),
        ToolChoiceMode("none"),
        StopSequences(("\n", "END")),
        StopSequence("END"),
    ],
)
def test_every_union_member_survives_encode_decode(value):
    for codec in (EMBEDDING_VECTOR, EMBEDDING_INPUT, TOOL_CHOICE, STOP):
        if value in codec:
            assert codec.decode(codec.encode(value)) == value
            break
    else:
        pytest.fail(f"{value!r} belongs to no codec")


def test_embedding_input_tries_members_in_declared_order():
    assert EMBEDDING_INPUT.decode([1, 2]) == TokenInput((1, 2))
    assert EMBEDDING_INPUT.decode([[1], [2, 3]]) == TokenBatch(((1,), (2, 3)))
    assert EMBEDDING_INPUT.decode(["a"]) == TextBatch(("a",))
    assert EMBEDDING_INPUT.decode("a") == TextInput("a")
    # empty array is claimed by the first member
    assert EMBEDDING_INPUT.decode([]) == TokenInput(())


@pytest.mark.parametrize("build", [lambda: TokenBatch(()), lambda: TextBatch(())], ids=["tokens", "texts"])
def test_empty_batches_cannot_be_built(build):
    with pytest.raises(ValueError, match="at least one"):
        build()


def test_tool_choice_wire_shapes():
    assert TOOL_CHOICE.encode(TOOL_CHOICE_AUTO) == "auto"
    assert TOOL_CHOICE.encode(NamedFunctionChoice("get_weather")) == {
        "type": "function",
        "function": {"name": "get_weather"},
    }
    assert TOOL_CHOICE.decode({"type": "function", "function": {"name": "f"}}) == NamedFunctionChoice("f")


def test_tool_choice_object_of_wrong_shape_is_unrecognized():
    with pytest.raises(UnrecognizedUnionShape) as exc:
        TOOL_CHOICE.decode({"type": "retrieval"}, "tool_choice")

    assert exc.value.received == "object"


def test_tool_choice_unknown_mode_is_malformed():
    with pytest.raises(MalformedWireValue, match="required"):
        TOOL_CHOICE.decode("sometimes")


def test_encode_rejects_foreign_members():
    with pytest.raises(TypeError, match="not a member of union 'stop'"):
        STOP.encode(TextInput("x"))


def test_codec_requires_unique_members():
    with pytest.raises(ValueError, match="more than once"):
        UnionCodec("dup", [TextInput, TextInput])

    with pytest.raises(ValueError, match="at least one"):
        UnionCodec("empty", [])
