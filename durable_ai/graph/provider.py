"""
Graph Provider Protocol.

GraphProvider.connect() returns a GraphConnection; transactions carry the
vertex, edge and query operations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional, Protocol, runtime_checkable

from pydantic import SecretStr

from ..config import optional_config, resolve_config
from ..errors import GraphError
from .types import (
    ConnectionConfig,
    Edge,
    ElementId,
    FindVerticesOptions,
    PropertyMap,
    QueryResult,
    Vertex,
)


@runtime_checkable
class GraphTransaction(Protocol):
    async def create_vertex(
        self, vertex_type: str, properties: PropertyMap, additional_labels: list[str]
    ) -> Vertex:
        ...

    async def get_vertex(self, id: ElementId) -> Optional[Vertex]:
        ...

    async def update_vertex(self, id: ElementId, properties: PropertyMap) -> Vertex:
        ...

    async def delete_vertex(self, id: ElementId, delete_edges: bool) -> None:
        ...

    async def find_vertices(self, options: FindVerticesOptions) -> list[Vertex]:
        ...

    async def create_edge(
        self,
        edge_type: str,
        from_vertex: ElementId,
        to_vertex: ElementId,
        properties: PropertyMap,
    ) -> Edge:
        ...

    async def get_edge(self, id: ElementId) -> Optional[Edge]:
        ...

    async def delete_edge(self, id: ElementId) -> None:
        ...

    async def execute_query(self, query: str, parameters: dict[str, Any]) -> QueryResult:
        ...

    async def commit(self) -> None:
        ...

    async def rollback(self) -> None:
        ...


@runtime_checkable
class GraphConnection(Protocol):
    async def begin_transaction(self) -> GraphTransaction:
        ...

    async def close(self) -> None:
        ...


@runtime_checkable
class GraphProvider(Protocol):
    @property
    def name(self) -> str:
        ...

    async def connect(self, config: ConnectionConfig) -> GraphConnection:
        ...


class BaseGraphProvider(ABC):
    """
    Base class for graph providers.

    Fills username, password and hosts from <PREFIX>_USER, <PREFIX>_PASSWORD
    and <PREFIX>_HOST before calling _connect().
    """

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @property
    def env_prefix(self) -> str:
        return self.name.upper()

    def resolve(self, config: ConnectionConfig) -> ConnectionConfig:
        prefix = self.env_prefix
        updates: dict[str, Any] = {}
        if not config.hosts:
            host = resolve_config(f"{prefix}_HOST", config.options, error_cls=GraphError)
            updates["hosts"] = [host]
        if config.username is None:
            updates["username"] = optional_config(f"{prefix}_USER", config.options)
        if config.password is None:
            password = optional_config(f"{prefix}_PASSWORD", config.options)
            if password is not None:
                updates["password"] = SecretStr(password)
        return config.model_copy(update=updates) if updates else config

    async def connect(self, config: ConnectionConfig) -> GraphConnection:
        return await self._connect(self.resolve(config))

    @abstractmethod
    async def _connect(self, config: ConnectionConfig) -> GraphConnection:
        pass


__all__ = [
    "BaseGraphProvider",
    "GraphConnection",
    "GraphProvider",
    "GraphTransaction",
]
