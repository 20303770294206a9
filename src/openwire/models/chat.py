from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

from openwire.codecs.union import UnionCodec
from openwire.codecs.variants import VariantRegistry
from openwire.core.exceptions import MalformedWireValue
from openwire.core.optional import ABSENT, OptionalField, decode_field, encode_fields, require_field
from openwire.core.wire import (
    expect_bool,
    expect_float,
    expect_int,
    expect_object,
    expect_str,
    list_of,
    nested,
)

CHAT_MESSAGES = VariantRegistry("chat_message", tag_key="role")
CHAT_TOOL_CALLS = VariantRegistry("chat_tool_call")
CHAT_TOOLS = VariantRegistry("chat_tool")
RESPONSE_FORMATS = VariantRegistry("response_format")


# =============================================================================
# Tools
# =============================================================================


@dataclass(frozen=True)
class FunctionDefinition:
    name: str
    description: OptionalField[str] = ABSENT
    parameters: OptionalField[Dict[str, Any]] = ABSENT

    @classmethod
    def from_wire(cls, obj: Dict[str, Any]) -> "FunctionDefinition":
        owner = cls.__name__
        return cls(
            name=require_field(obj, "name", owner, expect_str),
            description=decode_field(obj, "description", expect_str, owner),
            parameters=decode_field(obj, "parameters", expect_object, owner),
        )

    def to_wire(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"name": self.name}
        body.update(encode_fields({"description": self.description, "parameters": self.parameters}))
        return body


@CHAT_TOOLS.variant("function")
@dataclass(frozen=True)
class FunctionTool:
    function: FunctionDefinition

    @classmethod
    def from_wire(cls, obj: Dict[str, Any]) -> "FunctionTool":
        return cls(function=require_field(obj, "function", cls.__name__, nested(FunctionDefinition.from_wire)))

    def to_wire(self) -> Dict[str, Any]:
        return {"function": self.function.to_wire()}


@CHAT_TOOL_CALLS.variant("function")
@dataclass(frozen=True)
class FunctionCall:
    """A function invocation requested by the model in an assistant message."""

    id: str
    name: str
    arguments: str

    @classmethod
    def from_wire(cls, obj: Dict[str, Any]) -> "FunctionCall":
        owner = cls.__name__
        function = require_field(obj, "function", owner, expect_object)
        return cls(
            id=require_field(obj, "id", owner, expect_str),
            name=require_field(function, "name", owner, expect_str),
            arguments=require_field(function, "arguments", owner, expect_str),
        )

    def to_wire(self) -> Dict[str, Any]:
        return {"id": self.id, "function": {"name": self.name, "arguments": self.arguments}}


# =============================================================================
# Messages
# =============================================================================


@CHAT_MESSAGES.variant("system")
@dataclass(frozen=True)
class SystemMessage:
    content: str
    name: OptionalField[str] = ABSENT

    @classmethod
    def from_wire(cls, obj: Dict[str, Any]) -> "SystemMessage":
        owner = cls.__name__
        return cls(
            content=require_field(obj, "content", owner, expect_str),
            name=decode_field(obj, "name", expect_str, owner),
        )

    def to_wire(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"content": self.content}
        body.update(encode_fields({"name": self.name}))
        return body


@CHAT_MESSAGES.variant("user")
@dataclass(frozen=True)
class UserMessage:
    content: str
    name: OptionalField[str] = ABSENT

    @classmethod
    def from_wire(cls, obj: Dict[str, Any]) -> "UserMessage":
        owner = cls.__name__
        return cls(
            content=require_field(obj, "content", owner, expect_str),
            name=decode_field(obj, "name", expect_str, owner),
        )

    def to_wire(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"content": self.content}
        body.update(encode_fields({"name": self.name}))
        return body


@CHAT_MESSAGES.variant("assistant")
@dataclass(frozen=True)
class AssistantMessage:
    # null content is legal when the message only carries tool calls
    content: OptionalField[str] = ABSENT
    name: OptionalField[str] = ABSENT
    refusal: OptionalField[str] = ABSENT
    tool_calls: OptionalField[Tuple[FunctionCall, ...]] = ABSENT

    @classmethod
    def from_wire(cls, obj: Dict[str, Any]) -> "AssistantMessage":
        owner = cls.__name__
        return cls(
            content=decode_field(obj, "content", expect_str, owner),
            name=decode_field(obj, "name", expect_str, owner),
            refusal=decode_field(obj, "refusal", expect_str, owner),
            tool_calls=decode_field(obj, "tool_calls", list_of(CHAT_TOOL_CALLS.parse), owner).map(tuple),
        )

    def to_wire(self) -> Dict[str, Any]:
        return encode_fields(
            {
                "content": self.content,
                "name": self.name,
                "refusal": self.refusal,
                "tool_calls": self.tool_calls,
            },
            {"tool_calls": lambda calls: [CHAT_TOOL_CALLS.encode(call) for call in calls]},
        )


@CHAT_MESSAGES.variant("tool")
@dataclass(frozen=True)
class ToolMessage:
    content: str
    tool_call_id: str

    @classmethod
    def from_wire(cls, obj: Dict[str, Any]) -> "ToolMessage":
        owner = cls.__name__
        return cls(
            content=require_field(obj, "content", owner, expect_str),
            tool_call_id=require_field(obj, "tool_call_id", owner, expect_str),
        )

    def to_wire(self) -> Dict[str, Any]:
        return {"content": self.content, "tool_call_id": self.tool_call_id}


ChatMessage = Union[SystemMessage, UserMessage, AssistantMessage, ToolMessage]


# =============================================================================
# Response format
# =============================================================================


@RESPONSE_FORMATS.variant("text")
@dataclass(frozen=True)
class TextFormat:
    @classmethod
    def from_wire(cls, obj: Dict[str, Any]) -> "TextFormat":
        return cls()

    def to_wire(self) -> Dict[str, Any]:
        return {}


@RESPONSE_FORMATS.variant("json_object")
@dataclass(frozen=True)
class JsonObjectFormat:
    @classmethod
    def from_wire(cls, obj: Dict[str, Any]) -> "JsonObjectFormat":
        return cls()

    def to_wire(self) -> Dict[str, Any]:
        return {}


ResponseFormat = Union[TextFormat, JsonObjectFormat]


# =============================================================================
# Tool choice: "none" | "auto" | "required" | {"type": "function", "function": {"name": ...}}
# =============================================================================

TOOL_CHOICE_MODES: Tuple[str, ...] = ("none", "auto", "required")


@dataclass(frozen=True)
class NamedFunctionChoice:
    name: str

    @classmethod
    def matches(cls, raw: Any) -> bool:
        return (
            isinstance(raw, dict)
            and raw.get("type") == "function"
            and isinstance(raw.get("function"), dict)
            and isinstance(raw["function"].get("name"), str)
        )

    @classmethod
    def from_wire(cls, raw: Dict[str, Any]) -> "NamedFunctionChoice":
        return cls(raw["function"]["name"])

    def to_wire(self) -> Dict[str, Any]:
        return {"type": "function", "function": {"name": self.name}}


@dataclass(frozen=True)
class ToolChoiceMode:
    mode: str

    def __post_init__(self) -> None:
        if self.mode not in TOOL_CHOICE_MODES:
            raise MalformedWireValue(
                "tool_choice",
                expected=" | ".join(TOOL_CHOICE_MODES),
                received=repr(self.mode),
            )

    @classmethod
    def matches(cls, raw: Any) -> bool:
        return isinstance(raw, str)

    @classmethod
    def from_wire(cls, raw: str) -> "ToolChoiceMode":
        return cls(raw)

    def to_wire(self) -> str:
        return self.mode


ToolChoice = Union[NamedFunctionChoice, ToolChoiceMode]
TOOL_CHOICE: UnionCodec[ToolChoice] = UnionCodec("tool_choice", [NamedFunctionChoice, ToolChoiceMode])

TOOL_CHOICE_NONE = ToolChoiceMode("none")
TOOL_CHOICE_AUTO = ToolChoiceMode("auto")
TOOL_CHOICE_REQUIRED = ToolChoiceMode("required")


def tool_choice_function(name: str) -> NamedFunctionChoice:
    return NamedFunctionChoice(name)


# =============================================================================
# Stop: "x" | ["x", "y"]
# =============================================================================


@dataclass(frozen=True)
class StopSequences:
    sequences: Tuple[str, ...]

    @classmethod
    def matches(cls, raw: Any) -> bool:
        return isinstance(raw, list) and all(isinstance(s, str) for s in raw)

    @classmethod
    def from_wire(cls, raw: List[str]) -> "StopSequences":
        return cls(tuple(raw))

    def to_wire(self) -> List[str]:
        return list(self.sequences)


@dataclass(frozen=True)
class StopSequence:
    sequence: str

    @classmethod
    def matches(cls, raw: Any) -> bool:
        return isinstance(raw, str)

    @classmethod
    def from_wire(cls, raw: str) -> "StopSequence":
        return cls(raw)

    def to_wire(self) -> str:
        return self.sequence


Stop = Union[StopSequences, StopSequence]
STOP: UnionCodec[Stop] = UnionCodec("stop", [StopSequences, StopSequence])


# =============================================================================
# Request
# =============================================================================


def _expect_float_map(value: Any, field_name: str, owner: Optional[str] = None) -> Dict[str, float]:
    obj = expect_object(value, field_name, owner)
    return {key: expect_float(item, f"{field_name}.{key}", owner) for key, item in obj.items()}


def _as_union(codec: UnionCodec[Any], field_name: str) -> Any:
    def coerce(value: Any) -> Any:
        return value if value in codec else codec.decode(value, field_name)

    return coerce


def _as_variant(registry: VariantRegistry, field_name: str) -> Any:
    def coerce(value: Any) -> Any:
        return registry.decode_payload(value, field_name) if isinstance(value, dict) else value

    return coerce


@dataclass(frozen=True)
class ChatCompletionsCreateRequest:
    """Body of ``POST /chat/completions``.

    ``model`` and ``messages`` are required; every other field is an
    ``OptionalField`` and stays out of the body unless set.
    """

    model: str
    messages: Tuple[ChatMessage, ...]
    frequency_penalty: OptionalField[float] = ABSENT
    logit_bias: OptionalField[Dict[str, float]] = ABSENT
    max_tokens: OptionalField[int] = ABSENT
    n: OptionalField[int] = ABSENT
    presence_penalty: OptionalField[float] = ABSENT
    response_format: OptionalField[ResponseFormat] = ABSENT
    seed: OptionalField[int] = ABSENT
    stop: OptionalField[Stop] = ABSENT
    stream: OptionalField[bool] = ABSENT
    temperature: OptionalField[float] = ABSENT
    top_p: OptionalField[float] = ABSENT
    tools: OptionalField[Tuple[FunctionTool, ...]] = ABSENT
    tool_choice: OptionalField[ToolChoice] = ABSENT
    user: OptionalField[str] = ABSENT

    def __post_init__(self) -> None:
        object.__setattr__(self, "messages", tuple(self.messages))
        if not self.messages:
            raise ValueError("messages must not be empty")

    @classmethod
    def create(cls, model: str, messages: List[ChatMessage], **options: Any) -> "ChatCompletionsCreateRequest":
        """Build a request from plain values.

        Options left out stay Absent, ``None`` becomes an explicit Null, and raw
        wire JSON is accepted for ``stop``, ``tool_choice``, ``response_format``
        and the items of ``tools``.
        """
        coercers = {
            "stop": _as_union(STOP, "stop"),
            "tool_choice": _as_union(TOOL_CHOICE, "tool_choice"),
            "response_format": _as_variant(RESPONSE_FORMATS, "response_format"),
            "tools": lambda tools: tuple(map(_as_variant(CHAT_TOOLS, "tools"), tools)),
        }
        fields: Dict[str, OptionalField[Any]] = {}
        for name, value in options.items():
            field_value = OptionalField.wrap(value)
            if name in coercers:
                field_value = field_value.map(coercers[name])
            fields[name] = field_value
        return cls(model=model, messages=tuple(messages), **fields)

    def _optional_fields(self) -> Dict[str, OptionalField[Any]]:
        return {
            "frequency_penalty": self.frequency_penalty,
            "logit_bias": self.logit_bias,
            "max_tokens": self.max_tokens,
            "n": self.n,
            "presence_penalty": self.presence_penalty,
            "response_format": self.response_format,
            "seed": self.seed,
            "stop": self.stop,
            "stream": self.stream,
            "temperature": self.temperature,
            "top_p": self.top_p,
            "tools": self.tools,
            "tool_choice": self.tool_choice,
            "user": self.user,
        }

    def to_wire(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "model": self.model,
            "messages": [CHAT_MESSAGES.encode(message) for message in self.messages],
        }
        body.update(
            encode_fields(
                self._optional_fields(),
                {
                    "response_format": RESPONSE_FORMATS.encode,
                    "stop": STOP.encode,
                    "tools": lambda tools: [CHAT_TOOLS.encode(tool) for tool in tools],
                    "tool_choice": TOOL_CHOICE.encode,
                },
            )
        )
        return body

    @classmethod
    def from_wire(cls, obj: Dict[str, Any]) -> "ChatCompletionsCreateRequest":
        owner = cls.__name__
        return cls(
            model=require_field(obj, "model", owner, expect_str),
            messages=tuple(require_field(obj, "messages", owner, list_of(CHAT_MESSAGES.parse))),
            frequency_penalty=decode_field(obj, "frequency_penalty", expect_float, owner),
            logit_bias=decode_field(obj, "logit_bias", _expect_float_map, owner),
            max_tokens=decode_field(obj, "max_tokens", expect_int, owner),
            n=decode_field(obj, "n", expect_int, owner),
            presence_penalty=decode_field(obj, "presence_penalty", expect_float, owner),
            response_format=decode_field(obj, "response_format", RESPONSE_FORMATS.parse, owner),
            seed=decode_field(obj, "seed", expect_int, owner),
            stop=decode_field(obj, "stop", STOP.parse, owner),
            stream=decode_field(obj, "stream", expect_bool, owner),
            temperature=decode_field(obj, "temperature", expect_float, owner),
            top_p=decode_field(obj, "top_p", expect_float, owner),
            tools=decode_field(obj, "tools", list_of(CHAT_TOOLS.parse), owner).map(tuple),
            tool_choice=decode_field(obj, "tool_choice", TOOL_CHOICE.parse, owner),
            user=decode_field(obj, "user", expect_str, owner),
        )


# =============================================================================
# Response
# =============================================================================


@dataclass(frozen=True)
class ChatCompletionUsage:
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int

    @classmethod
    def from_wire(cls, obj: Dict[str, Any]) -> "ChatCompletionUsage":
        owner = cls.__name__
        return cls(
            prompt_tokens=require_field(obj, "prompt_tokens", owner, expect_int),
            completion_tokens=require_field(obj, "completion_tokens", owner, expect_int),
            total_tokens=require_field(obj, "total_tokens", owner, expect_int),
        )


@dataclass(frozen=True)
class ChatCompletionChoice:
    index: int
    message: AssistantMessage
    finish_reason: Optional[str] = None

    @classmethod
    def from_wire(cls, obj: Dict[str, Any]) -> "ChatCompletionChoice":
        owner = cls.__name__
        message = require_field(obj, "message", owner, CHAT_MESSAGES.parse)
        if not isinstance(message, AssistantMessage):
            raise MalformedWireValue(
                "message",
                expected="assistant message",
                received=f"{CHAT_MESSAGES.discriminator_of(type(message))} message",
                owner=owner,
            )
        return cls(
            index=require_field(obj, "index", owner, expect_int),
            message=message,
            finish_reason=decode_field(obj, "finish_reason", expect_str, owner).or_none(),
        )


@dataclass(frozen=True)
class ChatCompletion:
    id: str
    created: int
    model: str
    choices: Tuple[ChatCompletionChoice, ...]
    usage: Optional[ChatCompletionUsage] = None
    system_fingerprint: Optional[str] = None
    object: str = "chat.completion"

    @classmethod
    def from_wire(cls, obj: Dict[str, Any]) -> "ChatCompletion":
        owner = cls.__name__
        return cls(
            id=require_field(obj, "id", owner, expect_str),
            created=require_field(obj, "created", owner, expect_int),
            model=require_field(obj, "model", owner, expect_str),
            choices=tuple(require_field(obj, "choices", owner, list_of(nested(ChatCompletionChoice.from_wire)))),
            usage=decode_field(obj, "usage", nested(ChatCompletionUsage.from_wire), owner).or_none(),
            system_fingerprint=decode_field(obj, "system_fingerprint", expect_str, owner).or_none(),
            object=require_field(obj, "object", owner, expect_str),
        )
