"""
Durable search wrapper.

Index and document operations are journaled one entry per call.
stream_search() returns a DurableSearchStream: each page is journaled, and
a stream interrupted mid-way resumes with retry_query(), which skips the
hits already seen.
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar, Optional

from ..durability import (
    DurabilityHost,
    DurableStream,
    DurableWrapper,
    FunctionType,
    PassthroughStream,
    open_durable_stream,
)
from ..errors import ProviderError, SearchError
from .provider import HitStream, SearchProvider
from .types import (
    CreateIndexOptions,
    Doc,
    Schema,
    SearchHit,
    SearchQuery,
    SearchResults,
    StreamSearchRequest,
)

logger = logging.getLogger(__name__)

NAMESPACE = "durable_search"

READ = FunctionType.READ_REMOTE
WRITE = FunctionType.WRITE_REMOTE


class DurableSearchStream(DurableStream[StreamSearchRequest, list[SearchHit]]):
    """
    Journaled stream of hit pages.

    A None chunk marks the end of the stream, both live and on replay.
    """

    namespace: ClassVar[str] = NAMESPACE
    chunk_type: ClassVar[Any] = list[SearchHit]

    def __init__(self, state, *, provider: SearchProvider, host: DurabilityHost | None = None):
        super().__init__(state, host=host)
        self._provider = provider

    async def _open_upstream(self, request: StreamSearchRequest) -> HitStream:
        return await self._provider.stream_search(request.index, request.query)

    def _continuation(
        self, original: StreamSearchRequest, partial: list[SearchHit]
    ) -> StreamSearchRequest:
        query = self._provider.retry_query(original.query, partial)
        return StreamSearchRequest(index=original.index, query=query)

    def _deltas(self, chunk: list[SearchHit]) -> list[SearchHit]:
        return list(chunk)

    def _is_terminal(self, chunk: list[SearchHit] | None) -> bool:
        return chunk is None

    def _error_chunk(self, error: ProviderError) -> None:
        logger.warning(f"Search stream ended early: {error}")
        return None


class DurableSearch(DurableWrapper[SearchProvider]):
    """
    Journaling wrapper around a search provider.

    Usage:
        search = DurableSearch(provider)
        await search.upsert("products", Doc(id="1", content={"name": "Lamp"}))
        results = await search.search("products", SearchQuery(q="lamp"))
    """

    namespace = NAMESPACE
    error_cls = SearchError

    # ------------------------------------------------------------------
    # Indexes
    # ------------------------------------------------------------------

    async def create_index(self, options: CreateIndexOptions) -> None:
        await self._call(
            "create_index",
            WRITE,
            options,
            lambda: self.provider.create_index(options.model_copy(deep=True)),
            None,
        )

    async def delete_index(self, name: str) -> None:
        await self._call(
            "delete_index", WRITE, {"name": name}, lambda: self.provider.delete_index(name), None
        )

    async def list_indexes(self) -> list[str]:
        return await self._call("list_indexes", READ, None, self.provider.list_indexes, list[str])

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    async def upsert(self, index: str, doc: Doc) -> None:
        await self._call(
            "upsert",
            WRITE,
            {"index": index, "doc": doc},
            lambda: self.provider.upsert(index, doc.model_copy(deep=True)),
            None,
        )

    async def upsert_many(self, index: str, docs: list[Doc]) -> None:
        await self._call(
            "upsert_many",
            WRITE,
            {"index": index, "docs": docs},
            lambda: self.provider.upsert_many(index, [d.model_copy(deep=True) for d in docs]),
            None,
        )

    async def delete(self, index: str, id: str) -> None:
        await self._call(
            "delete", WRITE, {"index": index, "id": id}, lambda: self.provider.delete(index, id), None
        )

    async def delete_many(self, index: str, ids: list[str]) -> None:
        await self._call(
            "delete_many",
            WRITE,
            {"index": index, "ids": ids},
            lambda: self.provider.delete_many(index, list(ids)),
            None,
        )

    async def get(self, index: str, id: str) -> Optional[Doc]:
        return await self._call(
            "get", READ, {"index": index, "id": id}, lambda: self.provider.get(index, id), Optional[Doc]
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def search(self, index: str, query: SearchQuery) -> SearchResults:
        return await self._call(
            "search",
            READ,
            {"index": index, "query": query},
            lambda: self.provider.search(index, query.model_copy(deep=True)),
            SearchResults,
        )

    async def stream_search(
        self, index: str, query: SearchQuery
    ) -> DurableSearchStream | PassthroughStream[list[SearchHit]]:
        """
        Stream hits page by page.

        Raises:
            SearchError: The provider could not open the stream (journaled)
        """
        if not self.durable:
            upstream = await self._direct(lambda: self.provider.stream_search(index, query))
            return PassthroughStream(upstream)

        request = StreamSearchRequest(index=index, query=query)
        return await open_durable_stream(
            DurableSearchStream,
            NAMESPACE,
            "stream_search",
            request,
            lambda: self.provider.stream_search(request.index, request.query),
            fallible=True,
            function_type=READ,
            error_cls=SearchError,
            host=self._host,
            provider=self.provider,
        )

    # ------------------------------------------------------------------
    # Schema
    # ------------------------------------------------------------------

    async def get_schema(self, index: str) -> Schema:
        return await self._call(
            "get_schema", READ, {"index": index}, lambda: self.provider.get_schema(index), Schema
        )

    async def update_schema(self, index: str, schema: Schema) -> None:
        await self._call(
            "update_schema",
            WRITE,
            {"index": index, "schema": schema},
            lambda: self.provider.update_schema(index, schema.model_copy(deep=True)),
            None,
        )


__all__ = ["DurableSearch", "DurableSearchStream", "NAMESPACE"]
