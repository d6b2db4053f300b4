"""
Full-text search domain.

- SearchProvider / BaseSearchProvider: adapter interface with paged
  streaming and the default retry_query()
- DurableSearch / DurableSearchStream: journaling wrapper
"""

from .durable import DurableSearch, DurableSearchStream
from .provider import (
    BaseSearchProvider,
    HitStream,
    PagedSearchStream,
    SearchProvider,
    default_retry_query,
)
from .types import (
    CreateIndexOptions,
    Doc,
    FieldType,
    HighlightConfig,
    Schema,
    SchemaField,
    SearchHit,
    SearchQuery,
    SearchResults,
    StreamSearchRequest,
)

__all__ = [
    "BaseSearchProvider",
    "CreateIndexOptions",
    "Doc",
    "DurableSearch",
    "DurableSearchStream",
    "FieldType",
    "HighlightConfig",
    "HitStream",
    "PagedSearchStream",
    "Schema",
    "SchemaField",
    "SearchHit",
    "SearchProvider",
    "SearchQuery",
    "SearchResults",
    "StreamSearchRequest",
    "default_retry_query",
]
