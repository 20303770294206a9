"""
Run step models for the assistants API.

A run step's ``step_details`` is one of two shapes (``message_creation`` or
``tool_calls``), each tool call is one of three, and a code interpreter call's
outputs are one of two. Every closed set is a ``VariantRegistry`` keyed on the
``type`` field, populated when this module is imported.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

from openwire.codecs.variants import VariantRegistry
from openwire.core.optional import decode_field, require_field
from openwire.core.wire import expect_int, expect_object, expect_str, expect_str_map, list_of, nested
from openwire.models.pagination import PageBounds

TOOL_CALLS = VariantRegistry("tool_call")
CODE_INTERPRETER_OUTPUTS = VariantRegistry("code_interpreter_output")
STEP_DETAILS = VariantRegistry("step_details")

RUN_STEP_PAGE_BOUNDS = PageBounds(min_limit=1, max_limit=100, default_limit=20)


# =============================================================================
# Code interpreter outputs
# =============================================================================


@CODE_INTERPRETER_OUTPUTS.variant("logs")
@dataclass(frozen=True)
class LogsOutput:
    logs: str

    @classmethod
    def from_wire(cls, obj: Dict[str, Any]) -> "LogsOutput":
        return cls(logs=require_field(obj, "logs", cls.__name__, expect_str))

    def to_wire(self) -> Dict[str, Any]:
        return {"logs": self.logs}


@CODE_INTERPRETER_OUTPUTS.variant("image")
@dataclass(frozen=True)
class ImageOutput:
    file_id: str

    @classmethod
    def from_wire(cls, obj: Dict[str, Any]) -> "ImageOutput":
        owner = cls.__name__
        image = require_field(obj, "image", owner, expect_object)
        return cls(file_id=require_field(image, "file_id", owner, expect_str))

    def to_wire(self) -> Dict[str, Any]:
        return {"image": {"file_id": self.file_id}}


CodeInterpreterOutput = Union[LogsOutput, ImageOutput]


# =============================================================================
# Tool calls
# =============================================================================


@TOOL_CALLS.variant("code_interpreter")
@dataclass(frozen=True)
class CodeInterpreterToolCall:
    id: str
    input: str
    outputs: Tuple[CodeInterpreterOutput, ...] = ()

    @classmethod
    def from_wire(cls, obj: Dict[str, Any]) -> "CodeInterpreterToolCall":
        owner = cls.__name__
        body = require_field(obj, "code_interpreter", owner, expect_object)
        return cls(
            id=require_field(obj, "id", owner, expect_str),
            input=require_field(body, "input", owner, expect_str),
            outputs=tuple(require_field(body, "outputs", owner, list_of(CODE_INTERPRETER_OUTPUTS.parse))),
        )

    def to_wire(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "code_interpreter": {
                "input": self.input,
                "outputs": [CODE_INTERPRETER_OUTPUTS.encode(output) for output in self.outputs],
            },
        }


@TOOL_CALLS.variant("retrieval")
@dataclass(frozen=True)
class RetrievalToolCall:
    id: str
    # Always an empty object on the wire for now.
    retrieval: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_wire(cls, obj: Dict[str, Any]) -> "RetrievalToolCall":
        owner = cls.__name__
        return cls(
            id=require_field(obj, "id", owner, expect_str),
            retrieval=decode_field(obj, "retrieval", expect_object, owner).or_none() or {},
        )

    def to_wire(self) -> Dict[str, Any]:
        return {"id": self.id, "retrieval": dict(self.retrieval)}


@TOOL_CALLS.variant("function")
@dataclass(frozen=True)
class FunctionToolCall:
    id: str
    name: str
    arguments: str
    # None until the tool outputs have been submitted
    output: Optional[str] = None

    @classmethod
    def from_wire(cls, obj: Dict[str, Any]) -> "FunctionToolCall":
        owner = cls.__name__
        function = require_field(obj, "function", owner, expect_object)
        return cls(
            id=require_field(obj, "id", owner, expect_str),
            name=require_field(function, "name", owner, expect_str),
            arguments=require_field(function, "arguments", owner, expect_str),
            output=require_field(function, "output", owner, expect_str, nullable=True),
        )

    def to_wire(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "function": {"name": self.name, "arguments": self.arguments, "output": self.output},
        }


ToolCall = Union[CodeInterpreterToolCall, RetrievalToolCall, FunctionToolCall]


# =============================================================================
# Step details
# =============================================================================


@STEP_DETAILS.variant("message_creation")
@dataclass(frozen=True)
class MessageCreationDetails:
    message_id: str

    @classmethod
    def from_wire(cls, obj: Dict[str, Any]) -> "MessageCreationDetails":
        owner = cls.__name__
        body = require_field(obj, "message_creation", owner, expect_object)
        return cls(message_id=require_field(body, "message_id", owner, expect_str))

    def to_wire(self) -> Dict[str, Any]:
        return {"message_creation": {"message_id": self.message_id}}


@STEP_DETAILS.variant("tool_calls")
@dataclass(frozen=True)
class ToolCallsDetails:
    tool_calls: Tuple[ToolCall, ...] = ()

    @classmethod
    def from_wire(cls, obj: Dict[str, Any]) -> "ToolCallsDetails":
        return cls(tool_calls=tuple(require_field(obj, "tool_calls", cls.__name__, list_of(TOOL_CALLS.parse))))

    def to_wire(self) -> Dict[str, Any]:
        return {"tool_calls": [TOOL_CALLS.encode(call) for call in self.tool_calls]}


StepDetails = Union[MessageCreationDetails, ToolCallsDetails]


# =============================================================================
# Run step
# =============================================================================


@dataclass(frozen=True)
class LastError:
    code: str
    message: str

    @classmethod
    def from_wire(cls, obj: Dict[str, Any]) -> "LastError":
        owner = cls.__name__
        return cls(
            code=require_field(obj, "code", owner, expect_str),
            message=require_field(obj, "message", owner, expect_str),
        )

    def to_wire(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message}


@dataclass(frozen=True)
class RunStep:
    id: str
    created_at: int
    assistant_id: str
    thread_id: str
    run_id: str
    type: str
    status: str
    step_details: StepDetails
    last_error: Optional[LastError] = None
    expired_at: Optional[int] = None
    cancelled_at: Optional[int] = None
    failed_at: Optional[int] = None
    completed_at: Optional[int] = None
    metadata: Optional[Dict[str, str]] = None
    object: str = "thread.run.step"

    @classmethod
    def from_wire(cls, obj: Dict[str, Any]) -> "RunStep":
        owner = cls.__name__
        return cls(
            id=require_field(obj, "id", owner, expect_str),
            created_at=require_field(obj, "created_at", owner, expect_int),
            assistant_id=require_field(obj, "assistant_id", owner, expect_str),
            thread_id=require_field(obj, "thread_id", owner, expect_str),
            run_id=require_field(obj, "run_id", owner, expect_str),
            type=require_field(obj, "type", owner, expect_str),
            status=require_field(obj, "status", owner, expect_str),
            step_details=require_field(obj, "step_details", owner, STEP_DETAILS.parse),
            last_error=decode_field(obj, "last_error", nested(LastError.from_wire), owner).or_none(),
            expired_at=decode_field(obj, "expired_at", expect_int, owner).or_none(),
            cancelled_at=decode_field(obj, "cancelled_at", expect_int, owner).or_none(),
            failed_at=decode_field(obj, "failed_at", expect_int, owner).or_none(),
            completed_at=decode_field(obj, "completed_at", expect_int, owner).or_none(),
            metadata=decode_field(obj, "metadata", expect_str_map, owner).or_none(),
            object=require_field(obj, "object", owner, expect_str),
        )

    def to_wire(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "object": self.object,
            "created_at": self.created_at,
            "assistant_id": self.assistant_id,
            "thread_id": self.thread_id,
            "run_id": self.run_id,
            "type": self.type,
            "status": self.status,
            "step_details": STEP_DETAILS.encode(self.step_details),
            "last_error": self.last_error.to_wire() if self.last_error else None,
            "expired_at": self.expired_at,
            "cancelled_at": self.cancelled_at,
            "failed_at": self.failed_at,
            "completed_at": self.completed_at,
            "metadata": self.metadata,
        }
