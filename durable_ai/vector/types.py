"""
Vector database data model.

Records, collections, filters and search queries shared by every vector
provider (Pinecone, Qdrant, Milvus, pgvector, ...).
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, SecretStr, model_validator

Metadata = dict[str, Any]


class DistanceMetric(str, Enum):
    COSINE = "cosine"
    EUCLIDEAN = "euclidean"
    DOT_PRODUCT = "dot-product"
    MANHATTAN = "manhattan"


class ConnectionConfig(BaseModel):
    """
    Connection settings.

    Attributes:
        endpoint: Provider endpoint (resolved from <PROVIDER>_ENDPOINT if None)
        api_key: Credential (resolved from <PROVIDER>_API_KEY if None)
        timeout_ms: Per-request timeout
        options: Provider-specific options; also searched for config keys
    """

    endpoint: Optional[str] = None
    api_key: Optional[SecretStr] = None
    timeout_ms: Optional[int] = None
    options: dict[str, Any] = Field(default_factory=dict)


class VectorRecord(BaseModel):
    id: str
    vector: list[float] = Field(default_factory=list)
    metadata: Optional[Metadata] = None


class CollectionInfo(BaseModel):
    name: str
    dimension: int
    metric: DistanceMetric = DistanceMetric.COSINE
    description: Optional[str] = None
    vector_count: Optional[int] = None
    size_bytes: Optional[int] = None
    index_ready: bool = True
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class FilterOperator(str, Enum):
    EQ = "eq"
    NE = "ne"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    IN = "in"
    NIN = "nin"
    CONTAINS = "contains"
    EXISTS = "exists"


class FilterCondition(BaseModel):
    type: Literal["condition"] = "condition"
    field: str
    operator: FilterOperator = FilterOperator.EQ
    value: Any = None


class FilterGroup(BaseModel):
    type: Literal["and", "or"] = "and"
    filters: list[FilterExpression] = Field(default_factory=list)


class FilterNot(BaseModel):
    type: Literal["not"] = "not"
    filter: FilterExpression


FilterExpression = Annotated[
    Union[FilterCondition, FilterGroup, FilterNot], Field(discriminator="type")
]

FilterGroup.model_rebuild()
FilterNot.model_rebuild()


class SearchQuery(BaseModel):
    """Either a query vector or the id of a stored vector to search around."""

    vector: Optional[list[float]] = None
    id: Optional[str] = None

    @model_validator(mode="after")
    def _exactly_one(self) -> SearchQuery:
        if (self.vector is None) == (self.id is None):
            raise ValueError("SearchQuery needs exactly one of vector or id")
        return self


class SearchResult(BaseModel):
    id: str
    score: float
    distance: Optional[float] = None
    vector: Optional[list[float]] = None
    metadata: Optional[Metadata] = None


class BatchError(BaseModel):
    index: int
    message: str


class BatchResult(BaseModel):
    success_count: int = 0
    failure_count: int = 0
    errors: list[BatchError] = Field(default_factory=list)


class NamespaceInfo(BaseModel):
    name: str
    collection: str
    vector_count: Optional[int] = None
    size_bytes: Optional[int] = None
    created_at: Optional[str] = None


__all__ = [
    "BatchError",
    "BatchResult",
    "CollectionInfo",
    "ConnectionConfig",
    "DistanceMetric",
    "FilterCondition",
    "FilterExpression",
    "FilterGroup",
    "FilterNot",
    "FilterOperator",
    "Metadata",
    "NamespaceInfo",
    "SearchQuery",
    "SearchResult",
    "VectorRecord",
]
