"""
Embedding domain.

- EmbedProvider / BaseEmbedProvider: adapter interface
- DurableEmbed: journaling wrapper for generate() and rerank()
"""

from .durable import DurableEmbed
from .provider import BaseEmbedProvider, EmbedProvider
from .types import (
    ContentPart,
    EmbedConfig,
    EmbedUsage,
    Embedding,
    EmbeddingResponse,
    ImageInput,
    OutputFormat,
    RerankResponse,
    RerankResult,
    TaskType,
    TextInput,
)

__all__ = [
    "BaseEmbedProvider",
    "ContentPart",
    "DurableEmbed",
    "EmbedConfig",
    "EmbedProvider",
    "EmbedUsage",
    "Embedding",
    "EmbeddingResponse",
    "ImageInput",
    "OutputFormat",
    "RerankResponse",
    "RerankResult",
    "TaskType",
    "TextInput",
]
