"""
Durable graph wrapper.

connect() and begin_transaction() are journaled like any write, but their
handles are rebuilt rather than replayed: after a replayed connect() the
connection is re-opened locally, and a replayed transaction opens its
provider transaction lazily, the first time one of its operations runs live.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any, Optional, TypeVar

from ..durability import DurableWrapper, FunctionType, suppress_journaling
from ..errors import GraphError
from .provider import GraphConnection, GraphProvider, GraphTransaction
from .types import (
    ConnectionConfig,
    Edge,
    ElementId,
    FindVerticesOptions,
    PropertyMap,
    QueryResult,
    Vertex,
)

logger = logging.getLogger(__name__)

NAMESPACE = "durable_graph"

READ = FunctionType.READ_REMOTE
WRITE = FunctionType.WRITE_REMOTE

T = TypeVar("T")


class DurableGraph(DurableWrapper[GraphProvider]):
    """
    Journaling wrapper around a graph provider.

    Usage:
        graph = DurableGraph(provider)
        conn = await graph.connect(ConnectionConfig(hosts=["localhost"]))
        tx = await conn.begin_transaction()
        alice = await tx.create_vertex("Person", {"name": "Alice"})
        await tx.commit()
    """

    namespace = NAMESPACE
    error_cls = GraphError

    async def connect(self, config: ConnectionConfig) -> DurableGraphConnection:
        connection: GraphConnection | None = None

        async def open_connection() -> None:
            nonlocal connection
            connection = await self.provider.connect(config)

        await self._call("connect", WRITE, config, open_connection, None)

        if connection is None:
            logger.debug("Re-establishing graph connection after replayed connect")
            with suppress_journaling():
                connection = await self._direct(lambda: self.provider.connect(config))

        return DurableGraphConnection(connection, durable=self.durable, host=self._host)


class DurableGraphConnection(DurableWrapper[GraphConnection]):
    namespace = NAMESPACE
    error_cls = GraphError

    async def begin_transaction(self) -> DurableTransaction:
        transaction: GraphTransaction | None = None

        async def begin() -> None:
            nonlocal transaction
            transaction = await self.provider.begin_transaction()

        await self._call("begin_transaction", WRITE, None, begin, None)
        return DurableTransaction(
            self.provider, transaction, durable=self.durable, host=self._host
        )

    async def close(self) -> None:
        """Close the provider connection. Not journaled."""
        with suppress_journaling():
            await self._direct(self.provider.close)


class DurableTransaction(DurableWrapper[GraphConnection]):
    """Transaction whose operations are journaled one entry per call."""

    namespace = NAMESPACE
    error_cls = GraphError

    def __init__(
        self,
        connection: GraphConnection,
        transaction: GraphTransaction | None = None,
        **kwargs: Any,
    ):
        super().__init__(connection, **kwargs)
        self._transaction = transaction

    @property
    def is_open(self) -> bool:
        """True once a provider transaction backs this handle."""
        return self._transaction is not None

    async def _provider_transaction(self) -> GraphTransaction:
        if self._transaction is None:
            logger.debug("Opening provider transaction for replayed transaction handle")
            self._transaction = await self.provider.begin_transaction()
        return self._transaction

    async def _run(
        self,
        function: str,
        function_type: FunctionType,
        input: Any,
        op: Callable[[GraphTransaction], Awaitable[T]],
        output_type: Any,
    ) -> T:
        async def call() -> T:
            return await op(await self._provider_transaction())

        return await self._call(function, function_type, input, call, output_type)

    # ------------------------------------------------------------------
    # Vertices
    # ------------------------------------------------------------------

    async def create_vertex(
        self,
        vertex_type: str,
        properties: Optional[PropertyMap] = None,
        additional_labels: Optional[list[str]] = None,
    ) -> Vertex:
        properties = properties or {}
        additional_labels = additional_labels or []
        return await self._run(
            "create_vertex",
            WRITE,
            {
                "vertex_type": vertex_type,
                "properties": properties,
                "additional_labels": additional_labels,
            },
            lambda tx: tx.create_vertex(vertex_type, dict(properties), list(additional_labels)),
            Vertex,
        )

    async def get_vertex(self, id: ElementId) -> Optional[Vertex]:
        return await self._run(
            "get_vertex", READ, {"id": id}, lambda tx: tx.get_vertex(id), Optional[Vertex]
        )

    async def update_vertex(self, id: ElementId, properties: PropertyMap) -> Vertex:
        return await self._run(
            "update_vertex",
            WRITE,
            {"id": id, "properties": properties},
            lambda tx: tx.update_vertex(id, dict(properties)),
            Vertex,
        )

    async def delete_vertex(self, id: ElementId, delete_edges: bool = False) -> None:
        await self._run(
            "delete_vertex",
            WRITE,
            {"id": id, "delete_edges": delete_edges},
            lambda tx: tx.delete_vertex(id, delete_edges),
            None,
        )

    async def find_vertices(self, options: Optional[FindVerticesOptions] = None) -> list[Vertex]:
        options = options or FindVerticesOptions()
        return await self._run(
            "find_vertices",
            READ,
            options,
            lambda tx: tx.find_vertices(options.model_copy(deep=True)),
            list[Vertex],
        )

    # ------------------------------------------------------------------
    # Edges
    # ------------------------------------------------------------------

    async def create_edge(
        self,
        edge_type: str,
        from_vertex: ElementId,
        to_vertex: ElementId,
        properties: Optional[PropertyMap] = None,
    ) -> Edge:
        properties = properties or {}
        return await self._run(
            "create_edge",
            WRITE,
            {
                "edge_type": edge_type,
                "from_vertex": from_vertex,
                "to_vertex": to_vertex,
                "properties": properties,
            },
            lambda tx: tx.create_edge(edge_type, from_vertex, to_vertex, dict(properties)),
            Edge,
        )

    async def get_edge(self, id: ElementId) -> Optional[Edge]:
        return await self._run(
            "get_edge", READ, {"id": id}, lambda tx: tx.get_edge(id), Optional[Edge]
        )

    async def delete_edge(self, id: ElementId) -> None:
        await self._run("delete_edge", WRITE, {"id": id}, lambda tx: tx.delete_edge(id), None)

    # ------------------------------------------------------------------
    # Queries and completion
    # ------------------------------------------------------------------

    async def execute_query(
        self, query: str, parameters: Optional[dict[str, Any]] = None
    ) -> QueryResult:
        """Run a raw query. Journaled as a write: the query may mutate."""
        parameters = parameters or {}
        return await self._run(
            "execute_query",
            WRITE,
            {"query": query, "parameters": parameters},
            lambda tx: tx.execute_query(query, dict(parameters)),
            QueryResult,
        )

    async def commit(self) -> None:
        await self._run("commit", WRITE, None, lambda tx: tx.commit(), None)

    async def rollback(self) -> None:
        await self._run("rollback", WRITE, None, lambda tx: tx.rollback(), None)


__all__ = ["DurableGraph", "DurableGraphConnection", "DurableTransaction", "NAMESPACE"]
