"""
Embedding Provider Protocol.

Providers that cannot rerank inherit BaseEmbedProvider.rerank(), which
raises unsupported-operation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Protocol, runtime_checkable

from ..errors import EmbedError, unsupported
from .types import ContentPart, EmbedConfig, EmbeddingResponse, RerankResponse


@runtime_checkable
class EmbedProvider(Protocol):
    @property
    def name(self) -> str:
        ...

    async def generate(self, inputs: list[ContentPart], config: EmbedConfig) -> EmbeddingResponse:
        ...

    async def rerank(
        self, query: str, documents: list[str], config: EmbedConfig
    ) -> RerankResponse:
        ...


class BaseEmbedProvider(ABC):
    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    async def generate(self, inputs: list[ContentPart], config: EmbedConfig) -> EmbeddingResponse:
        pass

    async def rerank(
        self, query: str, documents: list[str], config: EmbedConfig
    ) -> RerankResponse:
        raise unsupported(f"rerank on {self.name}", EmbedError)


__all__ = ["BaseEmbedProvider", "EmbedProvider"]
