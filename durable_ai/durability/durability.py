"""
Durable call wrapper.

Durability binds one operation id and function type to an output
serializer and journals through the host. durable_call() runs the full
live/replay algorithm for a single non-streaming remote operation:

    live:   run the adapter under a PERSIST_NOTHING scope, then persist
            (input, ok(output) | err(error)) and return/raise it
    replay: read the next entry and return/raise it without touching
            the adapter

Outputs are (de)serialized with pydantic TypeAdapters; inputs are dumped
with to_jsonable_python before the adapter runs, so an adapter mutating
its arguments cannot change what is journaled.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any, Generic, TypeVar

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError, to_jsonable_python

from ..errors import ErrorPayload, ProviderError
from ..observability import DurabilityLogger, init_logging
from .host import DurabilityHost, get_host
from .persistence import suppress_journaling
from .types import DurabilityError, FunctionType, JournalEntry, OperationId

logger = logging.getLogger(__name__)

O = TypeVar("O")

_adapters: dict[Any, TypeAdapter] = {}


def _adapter_for(output_type: Any) -> TypeAdapter:
    try:
        adapter = _adapters.get(output_type)
    except TypeError:
        return TypeAdapter(output_type)
    if adapter is None:
        adapter = TypeAdapter(output_type)
        _adapters[output_type] = adapter
    return adapter


def serialize_input(value: Any) -> Any:
    """Dump a request value into its JSON-compatible journal form."""
    try:
        return to_jsonable_python(value)
    except PydanticSerializationError as e:
        raise DurabilityError(f"Input is not serializable: {e}") from e


class Durability(Generic[O]):
    """
    Journaling handle for one wrapped operation.

    Example:
        durability = Durability("durable_llm", "send", FunctionType.WRITE_REMOTE, Response)
        if durability.is_live():
            ...
            return await durability.persist(request, response)
        return await durability.replay()
    """

    def __init__(
        self,
        namespace: str,
        function: str,
        function_type: FunctionType,
        output_type: Any = Any,
        *,
        error_cls: type[ProviderError] = ProviderError,
        host: DurabilityHost | None = None,
    ):
        self.operation = OperationId(namespace, function)
        self.function_type = function_type
        self.error_cls = error_cls
        self._adapter = _adapter_for(output_type)
        self._host = host or get_host()

    def is_live(self) -> bool:
        return self._host.is_live()

    async def _write(self, input: Any, ok: bool, output: Any) -> None:
        entry = JournalEntry(
            operation=self.operation,
            function_type=self.function_type,
            input=input,
            ok=ok,
            output=output,
        )
        try:
            await self._host.persist(entry)
        except DurabilityError:
            raise
        except Exception as e:
            raise DurabilityError(f"Failed to persist {self.operation}: {e}") from e

    def _dump_output(self, output: O) -> Any:
        try:
            return self._adapter.dump_python(output, mode="json")
        except PydanticSerializationError as e:
            raise DurabilityError(f"Output of {self.operation} is not serializable: {e}") from e

    async def persist(self, input: Any, output: O, *, serialized: bool = False) -> O:
        """Journal ok(output) and return output."""
        await self._write(
            input if serialized else serialize_input(input), True, self._dump_output(output)
        )
        return output

    async def persist_error(
        self, input: Any, error: ProviderError, *, serialized: bool = False
    ) -> ProviderError:
        """Journal err(error) and return the error for the caller to raise."""
        await self._write(
            input if serialized else serialize_input(input),
            False,
            error.to_payload().model_dump(mode="json"),
        )
        return error

    async def persist_infallible(self, input: Any, output: O) -> O:
        return await self.persist(input, output)

    async def _next_entry(self) -> JournalEntry:
        return await self._host.replay(self.operation, self.function_type)

    def _load_output(self, raw: Any) -> O:
        try:
            return self._adapter.validate_python(raw)
        except ValidationError as e:
            raise DurabilityError(f"Unexpected journal shape for {self.operation}: {e}") from e

    async def replay(self) -> O:
        """Return the next recorded output, or raise the recorded error."""
        entry = await self._next_entry()
        if entry.ok:
            return self._load_output(entry.output)
        try:
            payload = ErrorPayload.model_validate(entry.output)
        except ValidationError as e:
            raise DurabilityError(f"Unexpected error shape for {self.operation}: {e}") from e
        raise ProviderError.from_payload(payload)

    async def replay_infallible(self) -> O:
        entry = await self._next_entry()
        if not entry.ok:
            raise DurabilityError(f"Infallible operation {self.operation} replayed an error")
        return self._load_output(entry.output)


async def durable_call(
    namespace: str,
    function: str,
    function_type: FunctionType,
    input: Any,
    call: Callable[[], Awaitable[O]],
    *,
    output_type: Any = Any,
    error_cls: type[ProviderError] = ProviderError,
    host: DurabilityHost | None = None,
) -> O:
    """
    Run one remote operation with exactly-once observable effect.

    Args:
        namespace: Operation namespace (e.g. "durable_llm")
        function: Operation name (e.g. "send")
        function_type: Replay policy hint
        input: Request value to journal
        call: Zero-argument coroutine factory invoking the adapter
        output_type: Type used to (de)serialize the output
        error_cls: Domain error type; other ProviderErrors are re-tagged to it
        host: Journal host (defaults to the process-wide host)

    Returns:
        The live or replayed output

    Raises:
        ProviderError: The live or replayed domain error
        DurabilityError: The journal could not be written or read
    """
    init_logging()
    durability: Durability[O] = Durability(
        namespace, function, function_type, output_type, error_cls=error_cls, host=host
    )
    log = DurabilityLogger(operation=str(durability.operation))

    if not durability.is_live():
        try:
            result = await durability.replay()
        except ProviderError:
            log.call_replayed(ok=False)
            raise
        log.call_replayed(ok=True)
        return result

    request = serialize_input(input)
    try:
        with suppress_journaling():
            result = await call()
    except ProviderError as e:
        error = e.with_domain(error_cls)
        await durability.persist_error(request, error, serialized=True)
        log.call_live(ok=False, error_kind=error.kind.value)
        if error is e:
            raise
        raise error from e

    await durability.persist(request, result, serialized=True)
    log.call_live(ok=True)
    return result


__all__ = ["Durability", "durable_call", "serialize_input"]
