"""Graph database data model."""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, Field, SecretStr

ElementId = Union[str, int]
PropertyMap = dict[str, Any]


class ConnectionConfig(BaseModel):
    """
    Connection settings.

    Attributes:
        hosts: Server hosts (resolved from <PROVIDER>_HOST if empty)
        port: Server port
        database_name: Database / graph name
        username: User name (resolved from <PROVIDER>_USER if None)
        password: Password (resolved from <PROVIDER>_PASSWORD if None)
        timeout_seconds: Per-request timeout
        options: Provider-specific options; also searched for config keys
    """

    hosts: list[str] = Field(default_factory=list)
    port: Optional[int] = None
    database_name: Optional[str] = None
    username: Optional[str] = None
    password: Optional[SecretStr] = None
    timeout_seconds: Optional[int] = None
    options: dict[str, Any] = Field(default_factory=dict)


class Vertex(BaseModel):
    id: ElementId
    vertex_type: str
    additional_labels: list[str] = Field(default_factory=list)
    properties: PropertyMap = Field(default_factory=dict)


class Edge(BaseModel):
    id: ElementId
    edge_type: str
    from_vertex: ElementId
    to_vertex: ElementId
    properties: PropertyMap = Field(default_factory=dict)


class ComparisonOperator(str, Enum):
    EQUAL = "equal"
    NOT_EQUAL = "not-equal"
    LESS_THAN = "less-than"
    LESS_THAN_OR_EQUAL = "less-than-or-equal"
    GREATER_THAN = "greater-than"
    GREATER_THAN_OR_EQUAL = "greater-than-or-equal"
    CONTAINS = "contains"
    STARTS_WITH = "starts-with"
    IN_LIST = "in-list"


class FilterCondition(BaseModel):
    property: str
    operator: ComparisonOperator = ComparisonOperator.EQUAL
    value: Any = None


class SortSpec(BaseModel):
    property: str
    ascending: bool = True


class FindVerticesOptions(BaseModel):
    vertex_type: Optional[str] = None
    filters: list[FilterCondition] = Field(default_factory=list)
    sort: list[SortSpec] = Field(default_factory=list)
    limit: Optional[int] = None
    offset: Optional[int] = None


class QueryResult(BaseModel):
    """Rows of a raw query, each a column -> value mapping."""

    rows: list[dict[str, Any]] = Field(default_factory=list)
    execution_time_ms: Optional[int] = None


__all__ = [
    "ComparisonOperator",
    "ConnectionConfig",
    "Edge",
    "ElementId",
    "FilterCondition",
    "FindVerticesOptions",
    "PropertyMap",
    "QueryResult",
    "SortSpec",
    "Vertex",
]
