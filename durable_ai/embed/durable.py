"""Durable embedding wrapper."""

from __future__ import annotations

from ..durability import DurableWrapper, FunctionType
from ..errors import EmbedError
from .provider import EmbedProvider
from .types import (
    ContentPart,
    EmbedConfig,
    EmbeddingResponse,
    GenerateRequest,
    RerankRequest,
    RerankResponse,
)

NAMESPACE = "durable_embed"


class DurableEmbed(DurableWrapper[EmbedProvider]):
    """
    Journals generate() and rerank().

    Both are tagged write-remote: embedding calls are billed, so a host
    migrating the worker must not re-issue them.
    """

    namespace = NAMESPACE
    error_cls = EmbedError

    async def generate(self, inputs: list[ContentPart], config: EmbedConfig) -> EmbeddingResponse:
        request = GenerateRequest(inputs=inputs, config=config)
        return await self._call(
            "generate",
            FunctionType.WRITE_REMOTE,
            request,
            lambda: self.provider.generate(list(request.inputs), request.config.model_copy()),
            EmbeddingResponse,
        )

    async def rerank(
        self, query: str, documents: list[str], config: EmbedConfig
    ) -> RerankResponse:
        request = RerankRequest(query=query, documents=documents, config=config)
        return await self._call(
            "rerank",
            FunctionType.WRITE_REMOTE,
            request,
            lambda: self.provider.rerank(
                request.query, list(request.documents), request.config.model_copy()
            ),
            RerankResponse,
        )


__all__ = ["DurableEmbed", "NAMESPACE"]
