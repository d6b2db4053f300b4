"""
Vector database domain.

- VectorProvider / VectorConnection: adapter interface
- DurableVector: journaled connect(), returning a DurableVectorConnection
  whose collection, record, search and namespace operations are journaled
"""

from .durable import DurableVector, DurableVectorConnection
from .provider import BaseVectorConnection, BaseVectorProvider, VectorConnection, VectorProvider
from .types import (
    BatchError,
    BatchResult,
    CollectionInfo,
    ConnectionConfig,
    DistanceMetric,
    FilterCondition,
    FilterExpression,
    FilterGroup,
    FilterNot,
    FilterOperator,
    Metadata,
    NamespaceInfo,
    SearchQuery,
    SearchResult,
    VectorRecord,
)

__all__ = [
    "BaseVectorConnection",
    "BaseVectorProvider",
    "BatchError",
    "BatchResult",
    "CollectionInfo",
    "ConnectionConfig",
    "DistanceMetric",
    "DurableVector",
    "DurableVectorConnection",
    "FilterCondition",
    "FilterExpression",
    "FilterGroup",
    "FilterNot",
    "FilterOperator",
    "Metadata",
    "NamespaceInfo",
    "SearchQuery",
    "SearchResult",
    "VectorConnection",
    "VectorProvider",
    "VectorRecord",
]
