"""
Durable streams.

A DurableStream exposes poll_next()/get_next() over a provider stream and
survives worker restarts mid-stream. Its state is exactly one of:

    Live:   the provider stream plus pollables handed out during replay
    Replay: the original request, the partial result observed so far,
            a finished flag and the lazy pollables handed out so far

Every poll is journaled as one read-remote entry holding the returned chunk.
While the host replays, polls return recorded chunks and accumulate the
partial result. On the first live poll after replay, an unfinished stream
asks the domain for a continuation request built from (original, partial),
opens a new provider stream with it, binds every lazy pollable to it, polls
it once, journals that chunk and switches to Live. Replay -> Live happens
at most once; there is no way back.

Once a stream has seen a terminal chunk (finish marker or error) every
further poll returns None.

An upstream can also end without a terminal chunk (a dropped connection).
Domains that can tell (via _is_upstream_end) mark the stream upstream_ended:
the ended upstream is not polled again and get_next() stops blocking, but
the stream is not finished. The end chunk is journaled like any other, so
a replayed stream reaches the same state at the same point.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, ClassVar, Generic, Optional, Protocol, TypeVar, runtime_checkable

from ..errors import ProviderError
from ..observability import DurabilityLogger, init_logging
from .durability import Durability
from .host import DurabilityHost, get_host
from .persistence import suppress_journaling
from .pollable import LazyPollable, Pollable, ReadyPollable
from .types import DurabilityError, FunctionType

logger = logging.getLogger(__name__)

I = TypeVar("I")
C = TypeVar("C")
S = TypeVar("S", bound="DurableStream")


@runtime_checkable
class ProviderStream(Protocol[C]):
    """Live stream owned by a provider adapter."""

    async def poll_next(self) -> C | None:
        """Next chunk, or None if nothing is available yet."""
        ...

    def subscribe(self) -> Pollable:
        """Pollable that becomes ready when poll_next may have data."""
        ...

    async def aclose(self) -> None:
        """Release the underlying connection."""
        ...


@dataclass
class _LiveState(Generic[C]):
    upstream: ProviderStream[C]
    pollables: list[LazyPollable] = field(default_factory=list)
    finished: bool = False
    upstream_ended: bool = False


@dataclass
class _ReplayState(Generic[I]):
    original: I
    partial: list[Any] = field(default_factory=list)
    finished: bool = False
    pollables: list[LazyPollable] = field(default_factory=list)
    upstream_ended: bool = False


class DurableStream(ABC, Generic[I, C]):
    """
    Replay/Live state machine over a provider stream.

    Subclasses set `namespace`, `chunk_type` and implement:
    - _open_upstream(request): open a provider stream
    - _continuation(original, partial): pure continuation request builder
    - _deltas(chunk): items of a chunk that belong in the partial result
    - _is_terminal(chunk): whether a chunk ends the stream
    - _error_chunk(error): chunk representing a provider failure
    - _is_upstream_end(chunk): whether a non-terminal chunk means the
      upstream ended (default: never)
    """

    namespace: ClassVar[str]
    poll_function: ClassVar[str] = "poll_next"
    chunk_type: ClassVar[Any] = Any

    def __init__(
        self,
        state: _LiveState[C] | _ReplayState[I],
        *,
        host: DurabilityHost | None = None,
    ):
        self._state: _LiveState[C] | _ReplayState[I] | None = state
        self._subscription: Pollable | None = None
        self._host = host or get_host()
        self._log = DurabilityLogger(operation=f"{self.namespace}.{self.poll_function}")

    # ------------------------------------------------------------------
    # Domain hooks
    # ------------------------------------------------------------------

    @abstractmethod
    async def _open_upstream(self, request: I) -> ProviderStream[C]:
        ...

    @abstractmethod
    def _continuation(self, original: I, partial: list[Any]) -> I:
        ...

    @abstractmethod
    def _deltas(self, chunk: C) -> list[Any]:
        ...

    @abstractmethod
    def _is_terminal(self, chunk: C | None) -> bool:
        ...

    def _error_chunk(self, error: ProviderError) -> C | None:
        raise error

    def _is_upstream_end(self, chunk: C | None) -> bool:
        return False

    def _subscribe_upstream(self, upstream: ProviderStream[C]) -> Pollable:
        return upstream.subscribe()

    # ------------------------------------------------------------------
    # State inspection
    # ------------------------------------------------------------------

    def _require_state(self) -> _LiveState[C] | _ReplayState[I]:
        if self._state is None:
            raise DurabilityError(f"{type(self).__name__} is closed")
        return self._state

    @property
    def closed(self) -> bool:
        return self._state is None

    @property
    def is_live_state(self) -> bool:
        return isinstance(self._state, _LiveState)

    @property
    def finished(self) -> bool:
        return self._state is not None and self._state.finished

    @property
    def upstream_ended(self) -> bool:
        """True once the upstream ended without a finish marker or error."""
        return self._state is not None and self._state.upstream_ended

    @property
    def done(self) -> bool:
        """Nothing more will arrive without a continuation: finished or ended."""
        return self.finished or self.upstream_ended

    @property
    def partial_result(self) -> list[Any]:
        """Partial result accumulated during replay (empty once live)."""
        if isinstance(self._state, _ReplayState):
            return list(self._state.partial)
        return []

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    def _durability(self) -> Durability[Optional[C]]:
        return Durability(
            self.namespace,
            self.poll_function,
            FunctionType.READ_REMOTE,
            Optional[self.chunk_type],
            host=self._host,
        )

    async def _poll_upstream(self, upstream: ProviderStream[C]) -> C | None:
        try:
            return await upstream.poll_next()
        except ProviderError as e:
            logger.warning(f"{type(self).__name__}: upstream failed: {e}")
            return self._error_chunk(e)

    async def poll_next(self) -> C | None:
        """
        Return the next chunk, or None if nothing is available.

        Live polls are journaled; replayed polls return the journaled chunk.
        """
        init_logging()
        state = self._require_state()
        durability = self._durability()

        if not durability.is_live():
            if isinstance(state, _LiveState):
                raise DurabilityError(
                    f"{type(self).__name__} cannot be in live mode during replay"
                )
            result = await durability.replay_infallible()
            if result is not None:
                state.partial.extend(self._deltas(result))
            if not state.finished and self._is_terminal(result):
                state.finished = True
                self._log.stream_finished_on_replay()
            elif self._is_upstream_end(result):
                state.upstream_ended = True
            return result

        if isinstance(state, _LiveState):
            if state.finished:
                return await durability.persist_infallible(None, None)
            if state.upstream_ended:
                return await durability.persist_infallible(None, self._empty_chunk())
            with suppress_journaling():
                result = await self._poll_upstream(state.upstream)
            if self._is_terminal(result):
                state.finished = True
            elif self._is_upstream_end(result):
                logger.warning(f"{type(self).__name__}: upstream ended without a finish marker")
                state.upstream_ended = True
            return await durability.persist_infallible(None, result)

        if state.finished:
            return await durability.persist_infallible(None, None)

        request = self._continuation(state.original, list(state.partial))
        self._log.stream_resumed(len(state.partial), len(state.pollables))
        with suppress_journaling():
            try:
                upstream = await self._open_upstream(request)
            except ProviderError as e:
                upstream = FailedStream(self._error_chunk(e))
            for lazy in state.pollables:
                lazy.set(self._subscribe_upstream(upstream))
            result = await self._poll_upstream(upstream)

        self._state = _LiveState(
            upstream=upstream,
            pollables=state.pollables,
            finished=self._is_terminal(result),
            upstream_ended=not self._is_terminal(result) and self._is_upstream_end(result),
        )
        return await durability.persist_infallible(None, result)

    def subscribe(self) -> Pollable:
        """
        Get a notifier for this stream.

        In replay mode this is a lazy subscription that is bound to the live
        upstream when the stream switches to live.
        """
        state = self._require_state()
        if isinstance(state, _LiveState):
            return self._subscribe_upstream(state.upstream)
        lazy = LazyPollable()
        state.pollables.append(lazy)
        return lazy.subscribe()

    async def get_next(self) -> C:
        """
        Block until a chunk is available and return it.

        Replayed polls never wait. A finished stream, or one whose upstream
        ended, returns an empty chunk instead of blocking forever. Call
        poll_next() on an ended replayed stream to resume it live.
        """
        if self._subscription is None:
            self._subscription = self.subscribe()
        while True:
            if self.done:
                return self._empty_chunk()
            if self.is_live_state:
                await self._subscription.block()
            result = await self.poll_next()
            if result is not None:
                return result

    def _empty_chunk(self) -> C:
        return []  # type: ignore[return-value]

    # ------------------------------------------------------------------
    # Tear-down
    # ------------------------------------------------------------------

    async def aclose(self) -> None:
        """Release the upstream and pollables without journaling anything."""
        self._subscription = None
        state, self._state = self._state, None
        if isinstance(state, _LiveState):
            with suppress_journaling():
                state.pollables.clear()
                await state.upstream.aclose()
        elif isinstance(state, _ReplayState):
            state.pollables.clear()

    async def __aenter__(self: S) -> S:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()


class FailedStream(Generic[C]):
    """Provider stream that reports one failure chunk and then ends."""

    def __init__(self, chunk: C | None):
        self._chunk = chunk
        self._delivered = False

    @property
    def finished(self) -> bool:
        return self._delivered

    async def poll_next(self) -> C | None:
        if self._delivered:
            return None
        self._delivered = True
        return self._chunk

    def subscribe(self) -> Pollable:
        return ReadyPollable()

    async def aclose(self) -> None:
        return None


class PassthroughStream(Generic[C]):
    """
    Non-durable view of a provider stream.

    Used when a wrapper is built with durable=False: polls go straight to
    the provider stream and nothing is journaled.
    """

    def __init__(self, upstream: ProviderStream[C]):
        self._upstream: ProviderStream[C] | None = upstream
        self._subscription: Pollable | None = None

    def _require_upstream(self) -> ProviderStream[C]:
        if self._upstream is None:
            raise DurabilityError("PassthroughStream is closed")
        return self._upstream

    @property
    def finished(self) -> bool:
        return bool(getattr(self._upstream, "finished", self._upstream is None))

    @property
    def done(self) -> bool:
        return self.finished

    async def poll_next(self) -> C | None:
        return await self._require_upstream().poll_next()

    def subscribe(self) -> Pollable:
        return self._require_upstream().subscribe()

    async def get_next(self) -> C:
        if self._subscription is None:
            self._subscription = self.subscribe()
        while True:
            await self._subscription.block()
            result = await self.poll_next()
            if result is not None:
                return result

    async def aclose(self) -> None:
        upstream, self._upstream = self._upstream, None
        self._subscription = None
        if upstream is not None:
            await upstream.aclose()

    async def __aenter__(self) -> PassthroughStream[C]:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()


async def open_durable_stream(
    stream_cls: type[S],
    namespace: str,
    function: str,
    request: Any,
    open_upstream: Callable[[], Awaitable[ProviderStream[Any]]],
    *,
    fallible: bool = False,
    function_type: FunctionType = FunctionType.WRITE_REMOTE,
    error_cls: type[ProviderError] = ProviderError,
    host: DurabilityHost | None = None,
    **stream_kwargs: Any,
) -> S:
    """
    Create a durable stream through one journaled call (write-remote unless
    function_type says otherwise).

    Live: open the provider stream without journaling its internals, then
    journal the request. Replay: consume the entry and build a Replay-state
    stream carrying the request, so a continuation can be opened later.

    When fallible is False, a failure to open is delivered as the stream's
    first chunk (via the stream's _error_chunk). When True, it is journaled
    as err(error) and raised.
    """
    init_logging()
    host = host or get_host()
    durability: Durability[None] = Durability(
        namespace, function, function_type, None, error_cls=error_cls, host=host
    )

    if not durability.is_live():
        if fallible:
            await durability.replay()
        else:
            await durability.replay_infallible()
        return stream_cls(_ReplayState(original=request), host=host, **stream_kwargs)

    upstream: ProviderStream[Any]
    try:
        with suppress_journaling():
            upstream = await open_upstream()
    except ProviderError as e:
        error = e.with_domain(error_cls)
        if fallible:
            await durability.persist_error(request, error)
            raise error from e
        await durability.persist_infallible(request, None)
        stream = stream_cls(_ReplayState(original=request), host=host, **stream_kwargs)
        stream._state = _LiveState(upstream=FailedStream(stream._error_chunk(error)))
        return stream

    await durability.persist_infallible(request, None)
    return stream_cls(_LiveState(upstream=upstream), host=host, **stream_kwargs)


__all__ = [
    "DurableStream",
    "FailedStream",
    "PassthroughStream",
    "ProviderStream",
    "open_durable_stream",
]
