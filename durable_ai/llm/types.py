"""
Chat data model.

Messages, responses and stream events exchanged with LLM providers. Every
model is a pydantic model so requests and results can be journaled.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field

from ..errors import StreamErrorInfo


class Role(str, Enum):
    """Role of a message in the conversation."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"
    TOOL = "tool"


class TextPart(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ImageUrlPart(BaseModel):
    type: Literal["image-url"] = "image-url"
    url: str
    detail: Optional[str] = None


ContentPart = Annotated[Union[TextPart, ImageUrlPart], Field(discriminator="type")]


class Message(BaseModel):
    """
    A message in the conversation.

    Attributes:
        role: Role of the message sender
        content: Content parts (text, images)
        name: Optional name for the sender
    """

    type: Literal["message"] = "message"
    role: Role
    content: list[ContentPart] = Field(default_factory=list)
    name: Optional[str] = None

    @property
    def text(self) -> str:
        return "".join(part.text for part in self.content if isinstance(part, TextPart))

    @classmethod
    def system(cls, text: str) -> Message:
        return cls(role=Role.SYSTEM, content=[TextPart(text=text)])

    @classmethod
    def user(cls, text: str) -> Message:
        return cls(role=Role.USER, content=[TextPart(text=text)])

    @classmethod
    def assistant(cls, text: str) -> Message:
        return cls(role=Role.ASSISTANT, content=[TextPart(text=text)])


class ToolDefinition(BaseModel):
    name: str
    description: Optional[str] = None
    parameters_schema: str = "{}"


class ToolCall(BaseModel):
    id: str
    name: str
    arguments_json: str = "{}"


class ToolResult(BaseModel):
    """Outcome of a tool call, fed back to the model."""

    id: str
    name: str
    result_json: Optional[str] = None
    error_message: Optional[str] = None
    error_code: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.error_message is not None


class ToolResults(BaseModel):
    type: Literal["tool-results"] = "tool-results"
    results: list[ToolResult] = Field(default_factory=list)


class Usage(BaseModel):
    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None
    total_tokens: Optional[int] = None


class ResponseMetadata(BaseModel):
    finish_reason: Optional[str] = None
    usage: Optional[Usage] = None
    provider_id: Optional[str] = None
    timestamp: Optional[str] = None
    provider_metadata_json: Optional[str] = None


class Response(BaseModel):
    """Complete (non-streamed) model response."""

    type: Literal["response"] = "response"
    id: str = ""
    content: list[ContentPart] = Field(default_factory=list)
    tool_calls: list[ToolCall] = Field(default_factory=list)
    metadata: ResponseMetadata = Field(default_factory=ResponseMetadata)

    @property
    def text(self) -> str:
        return "".join(part.text for part in self.content if isinstance(part, TextPart))


ChatEvent = Annotated[Union[Message, Response, ToolResults], Field(discriminator="type")]


class Config(BaseModel):
    """
    Request configuration.

    Attributes:
        model: Model identifier (e.g., "gpt-4o-mini")
        temperature: Sampling temperature
        max_tokens: Maximum tokens to generate
        stop_sequences: Sequences that end generation
        tools: Tools the model may call
        tool_choice: Provider-specific tool choice
        provider_options: Extra provider parameters, passed through verbatim
    """

    model: str
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    stop_sequences: Optional[list[str]] = None
    tools: list[ToolDefinition] = Field(default_factory=list)
    tool_choice: Optional[str] = None
    provider_options: dict[str, Any] = Field(default_factory=dict)


class ChatRequest(BaseModel):
    """Journaled input of send/stream."""

    events: list[ChatEvent]
    config: Config


# =============================================================================
# Streaming
# =============================================================================


class StreamDelta(BaseModel):
    content: Optional[list[ContentPart]] = None
    tool_calls: Optional[list[ToolCall]] = None


class DeltaEvent(BaseModel):
    type: Literal["delta"] = "delta"
    delta: StreamDelta

    @classmethod
    def text(cls, text: str) -> DeltaEvent:
        return cls(delta=StreamDelta(content=[TextPart(text=text)]))


class FinishEvent(BaseModel):
    type: Literal["finish"] = "finish"
    metadata: ResponseMetadata = Field(default_factory=ResponseMetadata)


class ErrorEvent(BaseModel):
    type: Literal["error"] = "error"
    error: StreamErrorInfo


StreamEvent = Annotated[Union[DeltaEvent, FinishEvent, ErrorEvent], Field(discriminator="type")]


__all__ = [
    "ChatEvent",
    "ChatRequest",
    "Config",
    "ContentPart",
    "DeltaEvent",
    "ErrorEvent",
    "FinishEvent",
    "ImageUrlPart",
    "Message",
    "Response",
    "ResponseMetadata",
    "Role",
    "StreamDelta",
    "StreamEvent",
    "TextPart",
    "ToolCall",
    "ToolDefinition",
    "ToolResult",
    "ToolResults",
    "Usage",
]
