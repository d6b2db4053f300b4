"""
Durable vector wrapper.

connect() is journaled as a write-remote call whose output carries nothing:
a live connection handle cannot be serialized, so on replay the recorded
outcome is consumed and the connection is re-established locally without
journaling. Every connection operation is then journaled on its own;
mutations are write-remote, queries read-remote.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..durability import DurableWrapper, FunctionType, suppress_journaling
from ..errors import VectorError
from .provider import VectorConnection, VectorProvider
from .types import (
    BatchResult,
    CollectionInfo,
    ConnectionConfig,
    DistanceMetric,
    FilterExpression,
    Metadata,
    NamespaceInfo,
    SearchQuery,
    SearchResult,
    VectorRecord,
)

logger = logging.getLogger(__name__)

NAMESPACE = "durable_vector"

READ = FunctionType.READ_REMOTE
WRITE = FunctionType.WRITE_REMOTE


class DurableVector(DurableWrapper[VectorProvider]):
    """
    Journaling wrapper around a vector provider.

    Usage:
        vectors = DurableVector(provider)
        conn = await vectors.connect(ConnectionConfig(endpoint="https://..."))
        await conn.upsert_vectors("docs", [VectorRecord(id="a", vector=[0.1, 0.2])])
        hits = await conn.search_vectors("docs", SearchQuery(vector=[0.1, 0.2]), limit=5)
    """

    namespace = NAMESPACE
    error_cls = VectorError

    async def connect(self, config: ConnectionConfig) -> DurableVectorConnection:
        connection: VectorConnection | None = None

        async def open_connection() -> None:
            nonlocal connection
            connection = await self.provider.connect(config)

        await self._call("connect", WRITE, config, open_connection, None)

        if connection is None:
            logger.debug("Re-establishing vector connection after replayed connect")
            with suppress_journaling():
                connection = await self._direct(lambda: self.provider.connect(config))

        return DurableVectorConnection(connection, durable=self.durable, host=self._host)


class DurableVectorConnection(DurableWrapper[VectorConnection]):
    """Connection whose operations are journaled one entry per call."""

    namespace = NAMESPACE
    error_cls = VectorError

    @property
    def connection(self) -> VectorConnection:
        return self.provider

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------

    async def upsert_collection(
        self,
        name: str,
        dimension: int,
        metric: DistanceMetric = DistanceMetric.COSINE,
        description: Optional[str] = None,
        metadata: Optional[Metadata] = None,
    ) -> CollectionInfo:
        return await self._call(
            "upsert_collection",
            WRITE,
            {
                "name": name,
                "dimension": dimension,
                "metric": metric,
                "description": description,
                "metadata": metadata,
            },
            lambda: self.provider.upsert_collection(name, dimension, metric, description, metadata),
            CollectionInfo,
        )

    async def list_collections(self) -> list[str]:
        return await self._call(
            "list_collections", READ, None, self.provider.list_collections, list[str]
        )

    async def get_collection(self, name: str) -> CollectionInfo:
        return await self._call(
            "get_collection",
            READ,
            {"name": name},
            lambda: self.provider.get_collection(name),
            CollectionInfo,
        )

    async def delete_collection(self, name: str) -> None:
        await self._call(
            "delete_collection",
            WRITE,
            {"name": name},
            lambda: self.provider.delete_collection(name),
            None,
        )

    async def collection_exists(self, name: str) -> bool:
        return await self._call(
            "collection_exists",
            READ,
            {"name": name},
            lambda: self.provider.collection_exists(name),
            bool,
        )

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    async def upsert_vectors(
        self,
        collection: str,
        vectors: list[VectorRecord],
        namespace: Optional[str] = None,
    ) -> BatchResult:
        return await self._call(
            "upsert_vectors",
            WRITE,
            {"collection": collection, "vectors": vectors, "namespace": namespace},
            lambda: self.provider.upsert_vectors(
                collection, [v.model_copy(deep=True) for v in vectors], namespace
            ),
            BatchResult,
        )

    async def get_vectors(
        self,
        collection: str,
        ids: list[str],
        namespace: Optional[str] = None,
        include_vectors: bool = True,
        include_metadata: bool = True,
    ) -> list[VectorRecord]:
        return await self._call(
            "get_vectors",
            READ,
            {
                "collection": collection,
                "ids": ids,
                "namespace": namespace,
                "include_vectors": include_vectors,
                "include_metadata": include_metadata,
            },
            lambda: self.provider.get_vectors(
                collection, list(ids), namespace, include_vectors, include_metadata
            ),
            list[VectorRecord],
        )

    async def delete_vectors(
        self, collection: str, ids: list[str], namespace: Optional[str] = None
    ) -> int:
        return await self._call(
            "delete_vectors",
            WRITE,
            {"collection": collection, "ids": ids, "namespace": namespace},
            lambda: self.provider.delete_vectors(collection, list(ids), namespace),
            int,
        )

    async def delete_by_filter(
        self,
        collection: str,
        filter: FilterExpression,
        namespace: Optional[str] = None,
    ) -> int:
        """
        Delete every record matching filter.

        The returned count is advisory: providers that do not report
        affected rows return 0.
        """
        return await self._call(
            "delete_by_filter",
            WRITE,
            {"collection": collection, "filter": filter, "namespace": namespace},
            lambda: self.provider.delete_by_filter(collection, filter, namespace),
            int,
        )

    async def count_vectors(
        self,
        collection: str,
        filter: Optional[FilterExpression] = None,
        namespace: Optional[str] = None,
    ) -> int:
        return await self._call(
            "count_vectors",
            READ,
            {"collection": collection, "filter": filter, "namespace": namespace},
            lambda: self.provider.count_vectors(collection, filter, namespace),
            int,
        )

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def search_vectors(
        self,
        collection: str,
        query: SearchQuery,
        limit: int = 10,
        filter: Optional[FilterExpression] = None,
        namespace: Optional[str] = None,
        include_vectors: bool = False,
        include_metadata: bool = True,
        min_score: Optional[float] = None,
    ) -> list[SearchResult]:
        return await self._call(
            "search_vectors",
            READ,
            {
                "collection": collection,
                "query": query,
                "limit": limit,
                "filter": filter,
                "namespace": namespace,
                "include_vectors": include_vectors,
                "include_metadata": include_metadata,
                "min_score": min_score,
            },
            lambda: self.provider.search_vectors(
                collection,
                query,
                limit,
                filter,
                namespace,
                include_vectors,
                include_metadata,
                min_score,
            ),
            list[SearchResult],
        )

    # ------------------------------------------------------------------
    # Namespaces
    # ------------------------------------------------------------------

    async def list_namespaces(self, collection: str) -> list[NamespaceInfo]:
        return await self._call(
            "list_namespaces",
            READ,
            {"collection": collection},
            lambda: self.provider.list_namespaces(collection),
            list[NamespaceInfo],
        )

    async def delete_namespace(self, collection: str, namespace: str) -> None:
        await self._call(
            "delete_namespace",
            WRITE,
            {"collection": collection, "namespace": namespace},
            lambda: self.provider.delete_namespace(collection, namespace),
            None,
        )


__all__ = ["DurableVector", "DurableVectorConnection", "NAMESPACE"]
