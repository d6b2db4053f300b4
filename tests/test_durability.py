"""
Tests for the durability layer: journaled calls, durable streams, lazy
pollables and the persistence-scope guard.
"""

import pytest

from durable_ai.durability import (
    DurabilityError,
    FunctionType,
    InMemoryJournalHost,
    LazyPollable,
    OperationId,
    PersistenceLevel,
    ReadyPollable,
    current_persistence_level,
    durable_call,
    get_host,
    journaling_suppressed,
    suppress_journaling,
)
from durable_ai.errors import ErrorKind, LLMError, ProviderError, VectorError, rate_limited
from durable_ai.llm import (
    BaseLLMProvider,
    Config,
    DeltaEvent,
    DurableLLM,
    ErrorEvent,
    FinishEvent,
    Message,
    Response,
    TextPart,
)


# =============================================================================
# Fakes
# =============================================================================


class ScriptedStream:
    """Provider stream replaying a fixed list of chunks (exceptions are raised)."""

    def __init__(self, chunks):
        self._chunks = list(chunks)
        self.closed = False
        self.pollable = ReadyPollable()

    async def poll_next(self):
        if not self._chunks:
            return None
        chunk = self._chunks.pop(0)
        if isinstance(chunk, Exception):
            raise chunk
        return chunk

    def subscribe(self):
        return self.pollable

    async def aclose(self):
        self.closed = True


class ScriptedLLM(BaseLLMProvider):
    """LLM provider whose responses and stream scripts are fixed up front."""

    def __init__(self, response=None, error=None, streams=None):
        self.response = response
        self.error = error
        self.streams = list(streams or [])
        self.send_calls = 0
        self.opened = []
        self.retry_prompt_calls = []

    @property
    def name(self):
        return "scripted"

    async def send(self, events, config):
        self.send_calls += 1
        if self.error is not None:
            raise self.error
        return self.response

    async def stream(self, events, config):
        self.opened.append(list(events))
        script = self.streams.pop(0)
        if isinstance(script, Exception):
            raise script
        stream = ScriptedStream(script)
        self.last_stream = stream
        return stream

    def retry_prompt(self, original_events, partial_result):
        self.retry_prompt_calls.append(list(partial_result))
        return super().retry_prompt(original_events, partial_result)


CONFIG = Config(model="test-model")
EVENTS = [Message.user("Say foobar")]


def texts(chunk):
    """Flatten a chunk of stream events into comparable tuples."""
    result = []
    for event in chunk:
        if isinstance(event, DeltaEvent):
            result.append(("delta", event.delta.content[0].text))
        elif isinstance(event, FinishEvent):
            result.append(("finish",))
        elif isinstance(event, ErrorEvent):
            result.append(("error", event.error.kind))
    return result


# =============================================================================
# Durable call
# =============================================================================


class TestDurableCall:
    """Tests for durable_call live/replay behavior."""

    @pytest.mark.asyncio
    async def test_live_then_replay_returns_same_output(self, host):
        calls = []

        async def call():
            calls.append(1)
            return "hello"

        live = await durable_call("ns", "op", FunctionType.WRITE_REMOTE, {"x": 1}, call, output_type=str)
        host.restart()
        replayed = await durable_call("ns", "op", FunctionType.WRITE_REMOTE, {"x": 1}, call, output_type=str)

        assert live == "hello"
        assert replayed == "hello"
        assert len(calls) == 1
        assert host.persist_calls == 1

    @pytest.mark.asyncio
    async def test_error_is_journaled_and_replayed(self, host):
        calls = []

        async def call():
            calls.append(1)
            raise rate_limited(5, LLMError)

        with pytest.raises(LLMError) as live:
            await durable_call("ns", "op", FunctionType.WRITE_REMOTE, None, call, error_cls=LLMError)
        host.restart()
        with pytest.raises(LLMError) as replayed:
            await durable_call("ns", "op", FunctionType.WRITE_REMOTE, None, call, error_cls=LLMError)

        assert live.value.kind == ErrorKind.RATE_LIMITED
        assert replayed.value.kind == ErrorKind.RATE_LIMITED
        assert replayed.value.retry_after == 5
        assert replayed.value == live.value
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_foreign_error_is_retagged_to_domain(self, host):
        async def call():
            raise ProviderError(ErrorKind.TIMEOUT, "slow")

        with pytest.raises(VectorError) as exc_info:
            await durable_call("ns", "op", FunctionType.READ_REMOTE, None, call, error_cls=VectorError)

        assert exc_info.value.kind == ErrorKind.TIMEOUT
        assert host.entries[0].output["domain"] == "vector"

    @pytest.mark.asyncio
    async def test_entry_records_operation_and_input(self, host):
        async def call():
            return 3

        await durable_call("durable_llm", "send", FunctionType.WRITE_REMOTE, {"a": [1, 2]}, call)

        entry = host.entries[0]
        assert entry.operation == OperationId("durable_llm", "send")
        assert entry.function_type == FunctionType.WRITE_REMOTE
        assert entry.input == {"a": [1, 2]}
        assert entry.ok is True
        assert entry.output == 3

    @pytest.mark.asyncio
    async def test_input_mutation_by_adapter_is_not_journaled(self, host):
        request = {"items": [1]}

        async def call():
            request["items"].append(2)
            return None

        await durable_call("ns", "op", FunctionType.WRITE_REMOTE, request, call)

        assert host.entries[0].input == {"items": [1]}

    @pytest.mark.asyncio
    async def test_nested_calls_persist_once(self, host):
        async def inner():
            return "inner"

        async def outer():
            assert journaling_suppressed()
            value = await durable_call("ns", "inner", FunctionType.READ_REMOTE, None, inner)
            return value + "+outer"

        result = await durable_call("ns", "outer", FunctionType.WRITE_REMOTE, None, outer)

        assert result == "inner+outer"
        assert host.persist_calls == 1
        assert host.suppressed_calls == 1
        assert [e.operation.function for e in host.entries] == ["outer"]

    @pytest.mark.asyncio
    async def test_replay_of_wrong_operation_is_fatal(self, host):
        async def call():
            return 1

        await durable_call("ns", "first", FunctionType.WRITE_REMOTE, None, call)
        host.restart()

        with pytest.raises(DurabilityError):
            await durable_call("ns", "second", FunctionType.WRITE_REMOTE, None, call)

    @pytest.mark.asyncio
    async def test_replay_of_wrong_function_type_is_fatal(self, host):
        async def call():
            return 1

        await durable_call("ns", "op", FunctionType.WRITE_REMOTE, None, call)
        host.restart()

        with pytest.raises(DurabilityError):
            await durable_call("ns", "op", FunctionType.READ_REMOTE, None, call)

    @pytest.mark.asyncio
    async def test_replay_with_wrong_shape_is_fatal(self, host):
        async def call():
            return "not a number"

        await durable_call("ns", "op", FunctionType.WRITE_REMOTE, None, call, output_type=str)
        host.restart()

        with pytest.raises(DurabilityError):
            await durable_call("ns", "op", FunctionType.WRITE_REMOTE, None, call, output_type=int)

    @pytest.mark.asyncio
    async def test_journal_write_failure_is_fatal(self, host):
        async def call():
            return 1

        host.fail_next_persist()

        with pytest.raises(DurabilityError):
            await durable_call("ns", "op", FunctionType.WRITE_REMOTE, None, call)

    @pytest.mark.asyncio
    async def test_uses_process_wide_host_by_default(self):
        async def call():
            return 1

        await durable_call("ns", "op", FunctionType.WRITE_REMOTE, None, call)

        assert isinstance(get_host(), InMemoryJournalHost)
        assert len(get_host().entries) == 1


class TestPersistenceScope:
    """Tests for the persistence-scope guard."""

    def test_default_level_is_smart(self):
        assert current_persistence_level() == PersistenceLevel.SMART
        assert not journaling_suppressed()

    def test_guard_restores_level(self):
        with suppress_journaling():
            assert current_persistence_level() == PersistenceLevel.PERSIST_NOTHING
            with suppress_journaling():
                assert journaling_suppressed()
            assert journaling_suppressed()
        assert not journaling_suppressed()

    def test_guard_restores_level_on_error(self):
        with pytest.raises(ValueError):
            with suppress_journaling():
                raise ValueError("boom")
        assert not journaling_suppressed()


# =============================================================================
# Durable LLM send
# =============================================================================


class TestDurableSend:
    """Tests for DurableLLM.send."""

    @pytest.mark.asyncio
    async def test_send_replays_without_provider(self, host):
        provider = ScriptedLLM(response=Response(id="r1", content=[TextPart(text="hello")]))
        llm = DurableLLM(provider, host=host)

        live = await llm.send(EVENTS, CONFIG)
        host.restart()
        replayed = await llm.send(EVENTS, CONFIG)

        assert live.text == "hello"
        assert replayed == live
        assert provider.send_calls == 1

    @pytest.mark.asyncio
    async def test_send_error_replays(self, host):
        provider = ScriptedLLM(error=rate_limited(5))
        llm = DurableLLM(provider, host=host)

        with pytest.raises(LLMError) as first:
            await llm.send(EVENTS, CONFIG)
        host.restart()
        with pytest.raises(LLMError) as second:
            await llm.send(EVENTS, CONFIG)

        assert first.value.retry_after == 5
        assert second.value.retry_after == 5
        assert provider.send_calls == 1

    @pytest.mark.asyncio
    async def test_non_durable_send_skips_journal(self, host):
        provider = ScriptedLLM(error=ProviderError(ErrorKind.TIMEOUT, "slow"))
        llm = DurableLLM(provider, durable=False, host=host)

        with pytest.raises(LLMError):
            await llm.send(EVENTS, CONFIG)

        assert host.entries == ()


# =============================================================================
# Durable streams
# =============================================================================


async def consume(stream, count):
    """Collect `count` non-empty chunks via get_next()."""
    seen = []
    for _ in range(count):
        seen.extend(texts(await stream.get_next()))
    return seen


class TestDurableStream:
    """Tests for the Replay -> Live stream state machine."""

    @pytest.mark.asyncio
    async def test_live_stream_journals_every_poll(self, host):
        provider = ScriptedLLM(
            streams=[[[DeltaEvent.text("foo")], [DeltaEvent.text("bar")], [FinishEvent()]]]
        )
        llm = DurableLLM(provider, host=host)

        stream = await llm.stream(EVENTS, CONFIG)
        seen = await consume(stream, 3)

        assert seen == [("delta", "foo"), ("delta", "bar"), ("finish",)]
        assert stream.finished
        assert [e.operation.function for e in host.entries] == [
            "stream",
            "poll_next",
            "poll_next",
            "poll_next",
        ]
        assert all(e.function_type == FunctionType.READ_REMOTE for e in host.entries[1:])

    @pytest.mark.asyncio
    async def test_resume_after_crash_uses_continuation(self, host):
        provider = ScriptedLLM(
            streams=[
                [[DeltaEvent.text("foo")], [DeltaEvent.text("bar")], [FinishEvent()]],
                [[DeltaEvent.text("bar")], [FinishEvent()]],
            ]
        )
        llm = DurableLLM(provider, host=host)

        stream = await llm.stream(EVENTS, CONFIG)
        assert await consume(stream, 1) == [("delta", "foo")]

        # Crash: the first stream's upstream is gone, the journal survives
        host.restart()
        resumed = await llm.stream(EVENTS, CONFIG)
        seen = await consume(resumed, 3)

        assert seen == [("delta", "foo"), ("delta", "bar"), ("finish",)]
        assert len(provider.opened) == 2
        assert len(provider.retry_prompt_calls) == 1
        partial = provider.retry_prompt_calls[0]
        assert [d.content[0].text for d in partial] == ["foo"]
        assert resumed.finished

    @pytest.mark.asyncio
    async def test_resume_after_connection_drop(self, host):
        provider = ScriptedLLM(
            streams=[
                [[DeltaEvent.text("a")]],
                [[DeltaEvent.text("b")], [FinishEvent()]],
            ]
        )
        llm = DurableLLM(provider, host=host)

        stream = await llm.stream(EVENTS, CONFIG)
        assert await consume(stream, 1) == [("delta", "a")]

        host.restart()
        resumed = await llm.stream(EVENTS, CONFIG)
        seen = await consume(resumed, 3)

        assert seen == [("delta", "a"), ("delta", "b"), ("finish",)]
        assert [d.content[0].text for d in provider.retry_prompt_calls[0]] == ["a"]
        assert resumed.finished
        assert await resumed.get_next() == []
        assert await resumed.poll_next() is None

    @pytest.mark.asyncio
    async def test_second_crash_replays_continuation(self, host):
        provider = ScriptedLLM(
            streams=[
                [[DeltaEvent.text("a")]],
                [[DeltaEvent.text("b")]],
                [[DeltaEvent.text("c")], [FinishEvent()]],
            ]
        )
        llm = DurableLLM(provider, host=host)

        stream = await llm.stream(EVENTS, CONFIG)
        assert await consume(stream, 1) == [("delta", "a")]

        host.restart()
        resumed = await llm.stream(EVENTS, CONFIG)
        assert await consume(resumed, 2) == [("delta", "a"), ("delta", "b")]
        assert len(provider.opened) == 2

        # Crash again after the first live continuation chunk was journaled
        host.restart()
        again = await llm.stream(EVENTS, CONFIG)
        seen = await consume(again, 4)

        assert seen == [("delta", "a"), ("delta", "b"), ("delta", "c"), ("finish",)]
        assert again.finished
        assert len(provider.opened) == 3
        partials = [[d.content[0].text for d in p] for p in provider.retry_prompt_calls]
        assert partials == [["a"], ["a", "b"]]
        assert provider.opened[2][-1].content[-1].text == "b"

    @pytest.mark.asyncio
    async def test_ended_upstream_is_done_but_not_finished(self, host):
        provider = ScriptedLLM(streams=[[[DeltaEvent.text("a")], []]])
        llm = DurableLLM(provider, host=host)

        stream = await llm.stream(EVENTS, CONFIG)
        chunks = []
        while not stream.done:
            chunks.append(await stream.get_next())

        assert chunks == [[DeltaEvent.text("a")], []]
        assert stream.upstream_ended
        assert not stream.finished
        entries = len(host.entries)
        assert await stream.get_next() == []
        assert len(host.entries) == entries
        assert await stream.poll_next() == []
        assert len(host.entries) == entries + 1

    @pytest.mark.asyncio
    async def test_continuation_request_carries_prefix(self, host):
        provider = ScriptedLLM(
            streams=[[[DeltaEvent.text("foo")]], [[FinishEvent()]]]
        )
        llm = DurableLLM(provider, host=host)

        stream = await llm.stream(EVENTS, CONFIG)
        await consume(stream, 1)
        host.restart()
        resumed = await llm.stream(EVENTS, CONFIG)
        await consume(resumed, 2)

        continuation = provider.opened[1]
        assert continuation[1] == EVENTS[0]
        assert continuation[-1].content[-1].text == "foo"

    @pytest.mark.asyncio
    async def test_stream_finished_during_replay_does_not_reopen(self, host):
        provider = ScriptedLLM(streams=[[[DeltaEvent.text("x")], [FinishEvent()]]])
        llm = DurableLLM(provider, host=host)

        stream = await llm.stream(EVENTS, CONFIG)
        await consume(stream, 2)
        host.restart()
        resumed = await llm.stream(EVENTS, CONFIG)
        seen = await consume(resumed, 2)

        assert seen == [("delta", "x"), ("finish",)]
        assert resumed.finished
        assert len(provider.opened) == 1
        assert provider.retry_prompt_calls == []
        assert await resumed.get_next() == []

    @pytest.mark.asyncio
    async def test_finished_live_stream_keeps_returning_nothing(self, host):
        provider = ScriptedLLM(streams=[[[FinishEvent()]]])
        llm = DurableLLM(provider, host=host)

        stream = await llm.stream(EVENTS, CONFIG)
        await consume(stream, 1)

        assert await stream.poll_next() is None
        assert await stream.poll_next() is None
        assert stream.finished

    @pytest.mark.asyncio
    async def test_upstream_failure_becomes_error_chunk(self, host):
        provider = ScriptedLLM(
            streams=[[[DeltaEvent.text("a")], ProviderError(ErrorKind.CONNECTION_FAILED, "reset")]]
        )
        llm = DurableLLM(provider, host=host)

        stream = await llm.stream(EVENTS, CONFIG)
        seen = await consume(stream, 2)

        assert seen == [("delta", "a"), ("error", ErrorKind.CONNECTION_FAILED)]
        assert stream.finished

    @pytest.mark.asyncio
    async def test_open_failure_is_first_chunk(self, host):
        provider = ScriptedLLM(streams=[ProviderError(ErrorKind.UNAUTHORIZED, "bad key")])
        llm = DurableLLM(provider, host=host)

        stream = await llm.stream(EVENTS, CONFIG)
        seen = await consume(stream, 1)

        assert seen == [("error", ErrorKind.UNAUTHORIZED)]
        assert stream.finished
        assert host.entries[0].ok is True

    @pytest.mark.asyncio
    async def test_lazy_pollables_bound_once_on_resume(self, host):
        provider = ScriptedLLM(
            streams=[[[DeltaEvent.text("foo")]], [[DeltaEvent.text("bar")], [FinishEvent()]]]
        )
        llm = DurableLLM(provider, host=host)

        stream = await llm.stream(EVENTS, CONFIG)
        await consume(stream, 1)
        host.restart()
        resumed = await llm.stream(EVENTS, CONFIG)

        early = resumed.subscribe()
        assert not early.ready()
        assert not early.lazy.is_set

        await consume(resumed, 2)

        assert early.lazy.set_count == 1
        assert early.lazy.target is provider.last_stream.pollable
        assert early.ready()

        await consume(resumed, 1)
        assert early.lazy.set_count == 1

    @pytest.mark.asyncio
    async def test_live_stream_in_replay_is_fatal(self, host):
        provider = ScriptedLLM(streams=[[[DeltaEvent.text("a")], [FinishEvent()]]])
        llm = DurableLLM(provider, host=host)

        stream = await llm.stream(EVENTS, CONFIG)
        await consume(stream, 1)
        host.restart()

        with pytest.raises(DurabilityError):
            await stream.poll_next()

    @pytest.mark.asyncio
    async def test_closed_stream_journals_nothing(self, host):
        provider = ScriptedLLM(streams=[[[DeltaEvent.text("a")]]])
        llm = DurableLLM(provider, host=host)

        stream = await llm.stream(EVENTS, CONFIG)
        upstream = provider.last_stream
        before = len(host.entries)
        await stream.aclose()

        assert upstream.closed
        assert len(host.entries) == before
        with pytest.raises(DurabilityError):
            await stream.poll_next()

    @pytest.mark.asyncio
    async def test_passthrough_stream(self, host):
        provider = ScriptedLLM(streams=[[[DeltaEvent.text("a")], [FinishEvent()]]])
        llm = DurableLLM(provider, durable=False, host=host)

        async with await llm.stream(EVENTS, CONFIG) as stream:
            seen = await consume(stream, 2)

        assert seen == [("delta", "a"), ("finish",)]
        assert host.entries == ()


# =============================================================================
# Pollables
# =============================================================================


class TestLazyPollable:
    """Tests for LazyPollable."""

    def test_set_only_once(self):
        lazy = LazyPollable()
        lazy.set(ReadyPollable())

        with pytest.raises(DurabilityError):
            lazy.set(ReadyPollable())
        assert lazy.set_count == 1

    @pytest.mark.asyncio
    async def test_subscription_forwards_after_set(self):
        lazy = LazyPollable()
        subscription = lazy.subscribe()
        assert not subscription.ready()

        lazy.set(ReadyPollable())

        assert subscription.ready()
        await subscription.block()
