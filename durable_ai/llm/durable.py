"""
Durable LLM wrapper.

DurableLLM wraps an LLMProvider so every send() and stream() is journaled.
On replay, send() returns the recorded response and stream() rebuilds a
DurableChatStream in replay mode; when the replayed prefix runs out before
the stream finished, the stream resumes with the provider's retry_prompt().
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar

from ..durability import (
    DurabilityHost,
    DurableStream,
    DurableWrapper,
    FunctionType,
    PassthroughStream,
    open_durable_stream,
)
from ..durability.stream import FailedStream
from ..errors import LLMError, ProviderError, StreamErrorInfo
from .provider import ChatStream, LLMProvider
from .types import (
    ChatEvent,
    ChatRequest,
    Config,
    DeltaEvent,
    ErrorEvent,
    FinishEvent,
    Response,
    StreamDelta,
    StreamEvent,
)

logger = logging.getLogger(__name__)

NAMESPACE = "durable_llm"


class DurableChatStream(DurableStream[ChatRequest, list[StreamEvent]]):
    """Chat stream whose polls are journaled and resumable."""

    namespace: ClassVar[str] = NAMESPACE
    chunk_type: ClassVar[Any] = list[StreamEvent]

    def __init__(self, state, *, provider: LLMProvider, host: DurabilityHost | None = None):
        super().__init__(state, host=host)
        self._provider = provider

    async def _open_upstream(self, request: ChatRequest) -> ChatStream:
        return await self._provider.stream(list(request.events), request.config)

    def _continuation(self, original: ChatRequest, partial: list[StreamDelta]) -> ChatRequest:
        events = self._provider.retry_prompt(list(original.events), partial)
        return ChatRequest(events=events, config=original.config)

    def _deltas(self, chunk: list[StreamEvent]) -> list[StreamDelta]:
        return [event.delta for event in chunk if isinstance(event, DeltaEvent)]

    def _is_terminal(self, chunk: list[StreamEvent] | None) -> bool:
        if not chunk:
            return False
        return any(isinstance(event, (FinishEvent, ErrorEvent)) for event in chunk)

    def _is_upstream_end(self, chunk: list[StreamEvent] | None) -> bool:
        # provider streams return [] once their response body is exhausted
        return chunk is not None and len(chunk) == 0

    def _error_chunk(self, error: ProviderError) -> list[StreamEvent]:
        return [ErrorEvent(error=StreamErrorInfo.from_error(error))]


class DurableLLM(DurableWrapper[LLMProvider]):
    """
    Journaling wrapper around an LLM provider.

    Usage:
        llm = DurableLLM(OpenAIChatProvider.from_config())
        response = await llm.send([Message.user("Hi")], Config(model="gpt-4o-mini"))

        async with await llm.stream(events, config) as stream:
            while not stream.done:
                events = await stream.get_next()

    A stream whose connection dropped without a finish event is done but
    not finished (stream.upstream_ended); after a restart its replay
    resumes it with the provider's retry_prompt().

    With durable=False every call goes straight to the provider.
    """

    namespace = NAMESPACE
    error_cls = LLMError

    async def send(self, events: list[ChatEvent], config: Config) -> Response:
        """
        Send the events and return the complete response.

        Raises:
            LLMError: The provider failed (journaled and replayed like a result)
        """
        request = ChatRequest(events=events, config=config)
        return await self._call(
            "send",
            FunctionType.WRITE_REMOTE,
            request,
            lambda: self.provider.send(list(request.events), request.config.model_copy(deep=True)),
            Response,
        )

    async def stream(
        self, events: list[ChatEvent], config: Config
    ) -> DurableChatStream | PassthroughStream[list[StreamEvent]]:
        """
        Open a chat stream.

        A failure to open the provider stream is not raised; it is reported
        as an ErrorEvent in the stream's first chunk.
        """
        if not self.durable:
            try:
                upstream = await self.provider.stream(events, config)
            except ProviderError as e:
                error = e.with_domain(LLMError)
                upstream = FailedStream([ErrorEvent(error=StreamErrorInfo.from_error(error))])
            return PassthroughStream(upstream)

        request = ChatRequest(events=events, config=config)
        return await open_durable_stream(
            DurableChatStream,
            NAMESPACE,
            "stream",
            request,
            lambda: self.provider.stream(list(request.events), request.config),
            error_cls=LLMError,
            host=self._host,
            provider=self.provider,
        )


__all__ = ["DurableChatStream", "DurableLLM", "NAMESPACE"]
