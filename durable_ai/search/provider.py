"""
Search Provider Protocol.

BaseSearchProvider streams results by paging through search() and supplies
the default retry_query(), which advances the query's offset past the hits
the caller has already seen.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Optional, Protocol, runtime_checkable

from ..durability import Pollable, ProviderStream, ReadyPollable
from .types import CreateIndexOptions, Doc, Schema, SearchHit, SearchQuery, SearchResults

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20

HitStream = ProviderStream[list[SearchHit]]


def default_retry_query(original: SearchQuery, partial_hits: Sequence[SearchHit]) -> SearchQuery:
    """Clone the query with its offset advanced by the number of hits seen."""
    query = original.model_copy(deep=True)
    if partial_hits:
        query.offset = (original.offset or 0) + len(partial_hits)
    return query


@runtime_checkable
class SearchProvider(Protocol):
    @property
    def name(self) -> str:
        ...

    async def create_index(self, options: CreateIndexOptions) -> None:
        ...

    async def delete_index(self, name: str) -> None:
        ...

    async def list_indexes(self) -> list[str]:
        ...

    async def upsert(self, index: str, doc: Doc) -> None:
        ...

    async def upsert_many(self, index: str, docs: list[Doc]) -> None:
        ...

    async def delete(self, index: str, id: str) -> None:
        ...

    async def delete_many(self, index: str, ids: list[str]) -> None:
        ...

    async def get(self, index: str, id: str) -> Optional[Doc]:
        ...

    async def search(self, index: str, query: SearchQuery) -> SearchResults:
        ...

    async def stream_search(self, index: str, query: SearchQuery) -> HitStream:
        ...

    async def get_schema(self, index: str) -> Schema:
        ...

    async def update_schema(self, index: str, schema: Schema) -> None:
        ...

    def retry_query(self, original: SearchQuery, partial_hits: list[SearchHit]) -> SearchQuery:
        ...


class PagedSearchStream:
    """
    Stream of hit pages obtained by repeated search() calls.

    poll_next() returns one page per call and None once a page comes back
    empty or short. For search streams None always means end of stream.
    """

    def __init__(self, provider: SearchProvider, index: str, query: SearchQuery):
        self._provider = provider
        self._index = index
        self._query = query.model_copy(deep=True)
        self._page_size = query.per_page or DEFAULT_PAGE_SIZE
        self._offset = query.offset or 0
        self._done = False

    async def poll_next(self) -> list[SearchHit] | None:
        if self._done:
            return None
        page_query = self._query.model_copy(
            update={"offset": self._offset, "per_page": self._page_size, "page": None}
        )
        results = await self._provider.search(self._index, page_query)
        if not results.hits:
            self._done = True
            return None
        self._offset += len(results.hits)
        if len(results.hits) < self._page_size:
            self._done = True
        return results.hits

    def subscribe(self) -> Pollable:
        return ReadyPollable()

    async def aclose(self) -> None:
        self._done = True


class BaseSearchProvider(ABC):
    """Base class for search providers."""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    async def search(self, index: str, query: SearchQuery) -> SearchResults:
        pass

    async def upsert_many(self, index: str, docs: list[Doc]) -> None:
        for doc in docs:
            await self.upsert(index, doc)

    async def delete_many(self, index: str, ids: list[str]) -> None:
        for id in ids:
            await self.delete(index, id)

    @abstractmethod
    async def upsert(self, index: str, doc: Doc) -> None:
        pass

    @abstractmethod
    async def delete(self, index: str, id: str) -> None:
        pass

    async def stream_search(self, index: str, query: SearchQuery) -> HitStream:
        return PagedSearchStream(self, index, query)

    def retry_query(self, original: SearchQuery, partial_hits: list[SearchHit]) -> SearchQuery:
        return default_retry_query(original, partial_hits)


__all__ = [
    "BaseSearchProvider",
    "HitStream",
    "PagedSearchStream",
    "SearchProvider",
    "default_retry_query",
]
