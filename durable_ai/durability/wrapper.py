"""
Base class for domain wrappers.

A DurableWrapper holds a provider adapter and routes every operation either
through durable_call() or, when built with durable=False, straight to the
adapter. Either way provider failures surface as the domain's error type.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, ClassVar, Generic, TypeVar

from ..errors import ProviderError
from .durability import durable_call
from .host import DurabilityHost
from .types import FunctionType

P = TypeVar("P")
O = TypeVar("O")


class DurableWrapper(Generic[P]):
    """
    Subclasses set `namespace` and `error_cls`.

    Example:
        class DurableEmbed(DurableWrapper[EmbedProvider]):
            namespace = "durable_embed"
            error_cls = EmbedError

            async def generate(self, inputs, config):
                request = GenerateRequest(inputs=inputs, config=config)
                return await self._call(
                    "generate", FunctionType.WRITE_REMOTE, request,
                    lambda: self.provider.generate(inputs, config),
                    EmbeddingResponse,
                )
    """

    namespace: ClassVar[str]
    error_cls: ClassVar[type[ProviderError]] = ProviderError

    def __init__(
        self,
        provider: P,
        *,
        durable: bool = True,
        host: DurabilityHost | None = None,
    ):
        self.provider = provider
        self.durable = durable
        self._host = host

    async def _direct(self, call: Callable[[], Awaitable[O]]) -> O:
        try:
            return await call()
        except ProviderError as e:
            error = e.with_domain(self.error_cls)
            if error is e:
                raise
            raise error from e

    async def _call(
        self,
        function: str,
        function_type: FunctionType,
        input: Any,
        call: Callable[[], Awaitable[O]],
        output_type: Any = Any,
    ) -> O:
        if not self.durable:
            return await self._direct(call)
        return await durable_call(
            self.namespace,
            function,
            function_type,
            input,
            call,
            output_type=output_type,
            error_cls=self.error_cls,
            host=self._host,
        )


__all__ = ["DurableWrapper"]
