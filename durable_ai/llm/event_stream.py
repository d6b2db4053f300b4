"""
Server-sent events chat stream.

EventSourceStream reads an SSE response line by line and turns each
message's data into a StreamEvent via decode_message(). Providers subclass
it and implement only the decoder.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

import httpx

from ..durability import Pollable, ReadyPollable
from ..errors import ErrorKind, ProviderError, StreamErrorInfo
from .types import ErrorEvent, FinishEvent, StreamEvent

logger = logging.getLogger(__name__)

DONE_MARKER = "[DONE]"


class EventSourceStream(ABC):
    """
    Live chat stream over an SSE response.

    poll_next() returns:
    - [event, ...] for each decoded message
    - None for messages that decode to nothing (keep-alives, [DONE])
    - [ErrorEvent] once on a transport or decode failure, then finishes
    - [] once the stream has ended

    A stream created with `failure` instead of a response reports that
    failure as its first chunk.
    """

    def __init__(
        self,
        response: httpx.Response | None = None,
        *,
        failure: ProviderError | None = None,
    ):
        self._response = response
        self._failure = failure
        self._lines: AsyncIterator[str] | None = None
        self._finished = False
        self.last_event_type: str | None = None

    @property
    def finished(self) -> bool:
        return self._finished

    @abstractmethod
    def decode_message(self, data: str) -> StreamEvent | list[StreamEvent] | None:
        """
        Decode one SSE data payload.

        Returns None for payloads that carry no event, or a list when one
        payload carries several (a final delta together with the finish). Raises ProviderError
        when the payload reports a provider failure.
        """
        ...

    async def _next_data(self) -> str | None:
        """Read lines until a complete SSE message is available."""
        assert self._response is not None
        if self._lines is None:
            self._lines = self._response.aiter_lines()

        data_lines: list[str] = []
        async for line in self._lines:
            if not line:
                if data_lines:
                    return "\n".join(data_lines)
                continue
            if line.startswith(":"):
                continue
            field, _, value = line.partition(":")
            if value.startswith(" "):
                value = value[1:]
            if field == "data":
                data_lines.append(value)
            elif field == "event":
                self.last_event_type = value

        if data_lines:
            return "\n".join(data_lines)
        return None

    def _fail(self, error: ProviderError) -> list[StreamEvent]:
        self._finished = True
        return [ErrorEvent(error=StreamErrorInfo.from_error(error))]

    async def poll_next(self) -> list[StreamEvent] | None:
        if self._finished:
            return []

        if self._response is None:
            if self._failure is not None:
                return self._fail(self._failure)
            return None

        try:
            data = await self._next_data()
        except httpx.HTTPError as e:
            logger.warning(f"SSE stream failed: {e}")
            return self._fail(ProviderError(ErrorKind.INTERNAL, str(e)))

        if data is None:
            self._finished = True
            return []

        if data == DONE_MARKER:
            return None

        try:
            event = self.decode_message(data)
        except ProviderError as e:
            return self._fail(e)

        if event is None:
            return None
        events = event if isinstance(event, list) else [event]
        if not events:
            return None
        if any(isinstance(e, FinishEvent) for e in events):
            self._finished = True
        return events

    def subscribe(self) -> Pollable:
        return ReadyPollable()

    async def aclose(self) -> None:
        if self._response is not None:
            await self._response.aclose()
            self._response = None
        self._finished = True


__all__ = ["DONE_MARKER", "EventSourceStream"]
