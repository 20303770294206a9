import pytest

from openwire.core.exceptions import MalformedWireValue, MissingRequiredField, UnknownVariantTag
from openwire.models.chat import CHAT_MESSAGES, CHAT_TOOL_CALLS, CHAT_TOOLS, RESPONSE_FORMATS
from openwire.models.pagination import PageRequest, PageResponse
from openwire.models.run_steps import (
    CODE_INTERPRETER_OUTPUTS,
    RUN_STEP_PAGE_BOUNDS,
    STEP_DETAILS,
    TOOL_CALLS,
    CodeInterpreterToolCall,
    FunctionToolCall,
    ImageOutput,
    LogsOutput,
    MessageCreationDetails,
    RetrievalToolCall,
    RunStep,
    ToolCallsDetails,
)

TOOL_CALL_SAMPLES = [
    CodeInterpreterToolCall(
        id="call_ci",
        input="print(1)",
        outputs=(LogsOutput("1\n"), ImageOutput("file-abc")),
    ),
    RetrievalToolCall(id="call_r"),
    FunctionToolCall(id="call_f", name="lookup", arguments='{"q": "x"}', output=None),
    FunctionToolCall(id="call_f2", name="lookup", arguments="{}", output="42"),
]


def _run_step_wire(step_details):
    return {
        "id": "step_1",
        "object": "thread.run.step",
        "created_at": 1700000000,
        "assistant_id": "asst_1",
        "thread_id": "thread_1",
        "run_id": "run_1",
        "type": step_details["type"],
        "status": "completed",
        "step_details": step_details,
        "last_error": None,
        "expired_at": None,
        "cancelled_at": None,
        "failed_at": None,
        "completed_at": 1700000005,
        "metadata": {},
    }


@pytest.mark.parametrize("payload", TOOL_CALL_SAMPLES)
def test_tool_call_payloads_survive_encode_decode(payload):
    assert TOOL_CALLS.decode_payload(TOOL_CALLS.encode(payload)) == payload


@pytest.mark.parametrize(
    "registry",
    [TOOL_CALLS, CODE_INTERPRETER_OUTPUTS, STEP_DETAILS, CHAT_MESSAGES, CHAT_TOOL_CALLS, CHAT_TOOLS, RESPONSE_FORMATS],
    ids=lambda r: r.name,
)
def test_every_registered_tag_is_symmetric(registry):
    assert len(registry) > 0
    for tag in registry.tags:
        variant_class = registry.resolve(tag)
        assert registry.discriminator_of(variant_class) == tag
        assert tag == tag.strip()


def test_tool_call_tags_match_the_api():
    assert set(TOOL_CALLS.tags) == {"code_interpreter", "retrieval", "function"}
    assert TOOL_CALLS.discriminator_of(FunctionToolCall) == "function"
    assert TOOL_CALLS.discriminator_of(RetrievalToolCall) == "retrieval"


def test_function_tool_call_wire_shape():
    wire = TOOL_CALLS.encode(FunctionToolCall(id="call_1", name="f", arguments="{}"))

    assert wire == {
        "type": "function",
        "id": "call_1",
        "function": {"name": "f", "arguments": "{}", "output": None},
    }


def test_code_interpreter_outputs_are_variants():
    wire = TOOL_CALLS.encode(TOOL_CALL_SAMPLES[0])

    assert wire["code_interpreter"]["outputs"] == [
        {"type": "logs", "logs": "1\n"},
        {"type": "image", "image": {"file_id": "file-abc"}},
    ]


def test_unknown_tool_call_tag():
    with pytest.raises(UnknownVariantTag) as exc:
        TOOL_CALLS.decode({"type": "not_a_real_type", "x": 1})

    assert exc.value.tag == "not_a_real_type"


def test_trailing_space_tag_is_unknown():
    with pytest.raises(UnknownVariantTag):
        TOOL_CALLS.decode({"type": "function ", "id": "c", "function": {}})


def test_function_tool_call_requires_output_key():
    with pytest.raises(MissingRequiredField) as exc:
        TOOL_CALLS.decode({"type": "function", "id": "c", "function": {"name": "f", "arguments": "{}"}})

    assert exc.value.field == "output"
    assert exc.value.owner == "FunctionToolCall"


def test_run_step_with_tool_calls_decodes_nested_variants():
    details = STEP_DETAILS.encode(ToolCallsDetails(tuple(TOOL_CALL_SAMPLES)))
    step = RunStep.from_wire(_run_step_wire(details))

    assert isinstance(step.step_details, ToolCallsDetails)
    assert step.step_details.tool_calls == tuple(TOOL_CALL_SAMPLES)
    assert step.last_error is None
    assert step.completed_at == 1700000005


def test_run_step_encode_matches_wire():
    wire = _run_step_wire({"type": "message_creation", "message_creation": {"message_id": "msg_1"}})
    step = RunStep.from_wire(wire)

    assert step.step_details == MessageCreationDetails("msg_1")
    assert step.to_wire() == wire


def test_run_step_rejects_non_object_step_details():
    wire = _run_step_wire({"type": "tool_calls", "tool_calls": []})
    wire["step_details"] = "tool_calls"

    with pytest.raises(MalformedWireValue, match="expected object, got string"):
        RunStep.from_wire(wire)


def test_run_steps_list_page():
    first = _run_step_wire({"type": "message_creation", "message_creation": {"message_id": "m1"}})
    second = dict(first, id="step_2")
    page = PageResponse.from_wire(
        {"object": "list", "data": [first, second], "first_id": "step_1", "last_id": "step_2", "has_more": True},
        RunStep.from_wire,
    )
    request = PageRequest(limit=2, order="asc", bounds=RUN_STEP_PAGE_BOUNDS)

    assert [step.id for step in page.data] == ["step_1", "step_2"]
    assert request.next_request(page) == PageRequest(limit=2, order="asc", after="step_2")
