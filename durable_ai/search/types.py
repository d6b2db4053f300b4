"""Full-text search data model."""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class Doc(BaseModel):
    id: str
    content: dict[str, Any] = Field(default_factory=dict)


class HighlightConfig(BaseModel):
    fields: list[str] = Field(default_factory=list)
    pre_tag: Optional[str] = None
    post_tag: Optional[str] = None
    max_length: Optional[int] = None


class SearchQuery(BaseModel):
    """
    Search request.

    Attributes:
        q: Query text
        filters: Provider filter expressions
        sort: Sort clauses (e.g. "price:desc")
        facets: Fields to facet on
        page: 1-based page number
        per_page: Page size
        offset: Number of hits to skip (takes precedence over page)
        highlight: Highlighting settings
        provider_params: Extra provider parameters
    """

    q: Optional[str] = None
    filters: list[str] = Field(default_factory=list)
    sort: list[str] = Field(default_factory=list)
    facets: list[str] = Field(default_factory=list)
    page: Optional[int] = None
    per_page: Optional[int] = None
    offset: Optional[int] = None
    highlight: Optional[HighlightConfig] = None
    provider_params: dict[str, Any] = Field(default_factory=dict)


class SearchHit(BaseModel):
    id: str
    score: Optional[float] = None
    content: Optional[dict[str, Any]] = None
    highlights: Optional[dict[str, Any]] = None


class SearchResults(BaseModel):
    total: Optional[int] = None
    page: Optional[int] = None
    per_page: Optional[int] = None
    hits: list[SearchHit] = Field(default_factory=list)
    facets: Optional[dict[str, Any]] = None
    took_ms: Optional[int] = None


class FieldType(str, Enum):
    TEXT = "text"
    KEYWORD = "keyword"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    DATE = "date"
    GEO_POINT = "geo-point"


class SchemaField(BaseModel):
    name: str
    type: FieldType = FieldType.TEXT
    required: bool = False
    facet: bool = False
    sort: bool = False
    index: bool = True


class Schema(BaseModel):
    fields: list[SchemaField] = Field(default_factory=list)
    primary_key: Optional[str] = None


class CreateIndexOptions(BaseModel):
    name: str
    schema_: Optional[Schema] = Field(default=None, alias="schema")

    model_config = {"populate_by_name": True}


class StreamSearchRequest(BaseModel):
    """Journaled input of stream_search, kept to build continuations."""

    index: str
    query: SearchQuery


__all__ = [
    "CreateIndexOptions",
    "Doc",
    "FieldType",
    "HighlightConfig",
    "Schema",
    "SchemaField",
    "SearchHit",
    "SearchQuery",
    "SearchResults",
    "StreamSearchRequest",
]
