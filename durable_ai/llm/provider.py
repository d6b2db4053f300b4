"""
LLM Provider Protocol.

Defines the interface chat providers implement to be wrapped by DurableLLM,
and the default continuation prompt used to resume an interrupted stream.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from ..durability import Pollable, ProviderStream
from .types import ChatEvent, Config, Message, Response, Role, StreamDelta, StreamEvent, TextPart

INTERRUPTED_INSTRUCTIONS = (
    "You were asked the same question previously, but the response was interrupted "
    "before completion.\n"
    "Please continue your response from where you left off.\n"
    "Do not include the part of the response that was already seen."
)
ORIGINAL_QUESTION_HEADER = "Here is the original question:"
PARTIAL_RESPONSE_HEADER = "Here is the partial response that was successfully received:"

ChatStream = ProviderStream[list[StreamEvent]]


def tool_call_marker(id: str, name: str, arguments_json: str) -> str:
    return f'<tool-call id="{id}" name="{name}" arguments="{arguments_json}"/>'


def default_retry_prompt(
    original_events: Sequence[ChatEvent],
    partial_result: Sequence[StreamDelta],
    prefix_role: Role = Role.SYSTEM,
) -> list[ChatEvent]:
    """
    Build the events that ask a model to continue an interrupted answer.

    The result is: an instruction message, the original events, then one
    message carrying the visible prefix (text inlined, tool calls as
    <tool-call .../> markers). Pure: equal inputs give equal outputs.

    Args:
        original_events: Events of the interrupted request
        partial_result: Deltas the caller already observed
        prefix_role: Role of the prefix message (some providers prefer USER)
    """
    events: list[ChatEvent] = [
        Message(
            role=Role.SYSTEM,
            content=[
                TextPart(text=INTERRUPTED_INSTRUCTIONS),
                TextPart(text=ORIGINAL_QUESTION_HEADER),
            ],
        )
    ]
    events.extend(event.model_copy(deep=True) for event in original_events)

    prefix = [TextPart(text=PARTIAL_RESPONSE_HEADER)]
    for delta in partial_result:
        for part in delta.content or []:
            prefix.append(part.model_copy(deep=True))
        for call in delta.tool_calls or []:
            prefix.append(TextPart(text=tool_call_marker(call.id, call.name, call.arguments_json)))

    events.append(Message(role=prefix_role, content=prefix))
    return events


@runtime_checkable
class LLMProvider(Protocol):
    """
    Protocol for chat providers.

    Implementations must provide:
    - send(): one complete response
    - stream(): a live stream of StreamEvent chunks
    - retry_prompt(): continuation events for an interrupted stream
    - name: Provider identifier
    """

    @property
    def name(self) -> str:
        ...

    async def send(self, events: list[ChatEvent], config: Config) -> Response:
        ...

    async def stream(self, events: list[ChatEvent], config: Config) -> ChatStream:
        ...

    def retry_prompt(
        self, original_events: list[ChatEvent], partial_result: list[StreamDelta]
    ) -> list[ChatEvent]:
        ...


class BaseLLMProvider(ABC):
    """
    Base class for chat provider implementations.

    Subclasses implement send() and stream(); the continuation prompt
    defaults to default_retry_prompt() with the prefix tagged as
    `prefix_role`.
    """

    prefix_role: Role = Role.SYSTEM

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    async def send(self, events: list[ChatEvent], config: Config) -> Response:
        pass

    @abstractmethod
    async def stream(self, events: list[ChatEvent], config: Config) -> ChatStream:
        pass

    def retry_prompt(
        self, original_events: list[ChatEvent], partial_result: list[StreamDelta]
    ) -> list[ChatEvent]:
        return default_retry_prompt(original_events, partial_result, self.prefix_role)

    def subscribe(self, stream: ChatStream) -> Pollable:
        return stream.subscribe()


__all__ = [
    "BaseLLMProvider",
    "ChatStream",
    "LLMProvider",
    "default_retry_prompt",
    "tool_call_marker",
]
