"""Embedding and rerank data model."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field


class TaskType(str, Enum):
    RETRIEVAL_QUERY = "retrieval-query"
    RETRIEVAL_DOCUMENT = "retrieval-document"
    SEMANTIC_SIMILARITY = "semantic-similarity"
    CLASSIFICATION = "classification"
    CLUSTERING = "clustering"


class OutputFormat(str, Enum):
    FLOAT_ARRAY = "float-array"
    BINARY = "binary"
    BASE64 = "base64"


class TextInput(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ImageInput(BaseModel):
    type: Literal["image"] = "image"
    url: str


ContentPart = Annotated[Union[TextInput, ImageInput], Field(discriminator="type")]


class EmbedConfig(BaseModel):
    """
    Embedding request configuration.

    Attributes:
        model: Model identifier (provider default if None)
        task_type: Intended use of the embeddings
        dimensions: Requested output dimensionality
        truncation: Truncate over-long inputs instead of failing
        output_format: Vector encoding
        user: End-user identifier forwarded to the provider
        provider_options: Extra provider parameters
    """

    model: Optional[str] = None
    task_type: Optional[TaskType] = None
    dimensions: Optional[int] = None
    truncation: Optional[bool] = None
    output_format: Optional[OutputFormat] = None
    user: Optional[str] = None
    provider_options: dict[str, Any] = Field(default_factory=dict)


class Embedding(BaseModel):
    index: int
    vector: list[float]


class EmbedUsage(BaseModel):
    input_tokens: Optional[int] = None
    total_tokens: Optional[int] = None


class EmbeddingResponse(BaseModel):
    embeddings: list[Embedding] = Field(default_factory=list)
    usage: Optional[EmbedUsage] = None
    model: str = ""
    provider_metadata_json: Optional[str] = None


class RerankResult(BaseModel):
    index: int
    relevance_score: float
    document: Optional[str] = None


class RerankResponse(BaseModel):
    results: list[RerankResult] = Field(default_factory=list)
    usage: Optional[EmbedUsage] = None
    model: str = ""
    provider_metadata_json: Optional[str] = None


class GenerateRequest(BaseModel):
    inputs: list[ContentPart]
    config: EmbedConfig


class RerankRequest(BaseModel):
    query: str
    documents: list[str]
    config: EmbedConfig


__all__ = [
    "ContentPart",
    "EmbedConfig",
    "EmbedUsage",
    "Embedding",
    "EmbeddingResponse",
    "GenerateRequest",
    "ImageInput",
    "OutputFormat",
    "RerankRequest",
    "RerankResponse",
    "RerankResult",
    "TaskType",
    "TextInput",
]
