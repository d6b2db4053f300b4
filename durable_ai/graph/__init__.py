"""
Graph database domain.

- GraphProvider / GraphConnection / GraphTransaction: adapter interface
- DurableGraph: journaled connect(); DurableTransaction journals vertex,
  edge and query operations plus commit and rollback
"""

from .durable import DurableGraph, DurableGraphConnection, DurableTransaction
from .provider import BaseGraphProvider, GraphConnection, GraphProvider, GraphTransaction
from .types import (
    ComparisonOperator,
    ConnectionConfig,
    Edge,
    ElementId,
    FilterCondition,
    FindVerticesOptions,
    PropertyMap,
    QueryResult,
    SortSpec,
    Vertex,
)

__all__ = [
    "BaseGraphProvider",
    "ComparisonOperator",
    "ConnectionConfig",
    "DurableGraph",
    "DurableGraphConnection",
    "DurableTransaction",
    "Edge",
    "ElementId",
    "FilterCondition",
    "FindVerticesOptions",
    "GraphConnection",
    "GraphProvider",
    "GraphTransaction",
    "PropertyMap",
    "QueryResult",
    "SortSpec",
    "Vertex",
]
