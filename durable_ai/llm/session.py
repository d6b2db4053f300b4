"""
Chat session.

Keeps the event history of a conversation and appends every completed
response to it, whether it came from send() or from a finished stream.
"""

from __future__ import annotations

import logging
from typing import Any

from .durable import DurableLLM
from .types import (
    ChatEvent,
    Config,
    DeltaEvent,
    FinishEvent,
    Message,
    Response,
    StreamEvent,
    ToolResult,
    ToolResults,
)

logger = logging.getLogger(__name__)


class ChatSession:
    """
    Stateful conversation over a DurableLLM.

    Example:
        session = ChatSession(llm, Config(model="gpt-4o-mini"))
        session.add_message(Message.user("What is 2 + 2?"))
        response = await session.send()
        session.add_message(Message.user("And times 3?"))
        response = await session.send()
    """

    def __init__(self, llm: DurableLLM, config: Config):
        self.llm = llm
        self.config = config
        self._events: list[ChatEvent] = []

    def add_message(self, message: Message) -> None:
        self._events.append(message)

    def add_messages(self, messages: list[Message]) -> None:
        self._events.extend(messages)

    def add_tool_result(self, result: ToolResult) -> None:
        self._events.append(ToolResults(results=[result]))

    def add_tool_results(self, results: list[ToolResult]) -> None:
        self._events.append(ToolResults(results=list(results)))

    def get_chat_events(self) -> list[ChatEvent]:
        return list(self._events)

    def set_chat_events(self, events: list[ChatEvent]) -> None:
        self._events = list(events)

    async def send(self) -> Response:
        """Send the history; on success the response is appended to it."""
        response = await self.llm.send(self.get_chat_events(), self.config)
        self._events.append(response)
        return response

    async def stream(self) -> ChatSessionStream:
        inner = await self.llm.stream(self.get_chat_events(), self.config)
        return ChatSessionStream(self, inner)

    def _append(self, event: ChatEvent) -> None:
        self._events.append(event)


class ChatSessionStream:
    """
    Stream adapter that assembles the streamed response.

    When the finish event arrives, the assembled response is appended to
    the session history.
    """

    def __init__(self, session: ChatSession, inner: Any):
        self._session = session
        self._inner = inner
        self._response: Response | None = Response()

    @property
    def inner(self) -> Any:
        return self._inner

    @property
    def finished(self) -> bool:
        return getattr(self._inner, "finished", self._response is None)

    @property
    def done(self) -> bool:
        return getattr(self._inner, "done", self.finished)

    def _absorb(self, events: list[StreamEvent]) -> None:
        for event in events:
            if self._response is None:
                break
            if isinstance(event, DeltaEvent):
                self._response.content.extend(event.delta.content or [])
                self._response.tool_calls.extend(event.delta.tool_calls or [])
            elif isinstance(event, FinishEvent):
                response, self._response = self._response, None
                response.metadata = event.metadata
                self._session._append(response)
                logger.debug(f"Chat session appended streamed response ({len(response.content)} parts)")

    async def poll_next(self) -> list[StreamEvent] | None:
        events = await self._inner.poll_next()
        if events:
            self._absorb(events)
        return events

    async def get_next(self) -> list[StreamEvent]:
        events = await self._inner.get_next()
        self._absorb(events)
        return events

    def subscribe(self):
        return self._inner.subscribe()

    async def aclose(self) -> None:
        await self._inner.aclose()

    async def __aenter__(self) -> ChatSessionStream:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()


__all__ = ["ChatSession", "ChatSessionStream"]
