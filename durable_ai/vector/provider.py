"""
Vector Provider Protocol.

A VectorProvider creates connections; a VectorConnection performs the
collection, record, search and namespace operations. BaseVectorConnection
raises unsupported-operation for namespace calls, which several providers
(e.g. pgvector) lack.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Protocol, runtime_checkable

from ..config import optional_config, resolve_config
from ..errors import VectorError, unsupported
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


@runtime_checkable
class VectorConnection(Protocol):
    async def upsert_collection(
        self,
        name: str,
        dimension: int,
        metric: DistanceMetric,
        description: Optional[str],
        metadata: Optional[Metadata],
    ) -> CollectionInfo:
        ...

    async def list_collections(self) -> list[str]:
        ...

    async def get_collection(self, name: str) -> CollectionInfo:
        ...

    async def delete_collection(self, name: str) -> None:
        ...

    async def collection_exists(self, name: str) -> bool:
        ...

    async def upsert_vectors(
        self, collection: str, vectors: list[VectorRecord], namespace: Optional[str]
    ) -> BatchResult:
        ...

    async def get_vectors(
        self,
        collection: str,
        ids: list[str],
        namespace: Optional[str],
        include_vectors: bool,
        include_metadata: bool,
    ) -> list[VectorRecord]:
        ...

    async def delete_vectors(
        self, collection: str, ids: list[str], namespace: Optional[str]
    ) -> int:
        ...

    async def delete_by_filter(
        self, collection: str, filter: FilterExpression, namespace: Optional[str]
    ) -> int:
        ...

    async def count_vectors(
        self, collection: str, filter: Optional[FilterExpression], namespace: Optional[str]
    ) -> int:
        ...

    async def search_vectors(
        self,
        collection: str,
        query: SearchQuery,
        limit: int,
        filter: Optional[FilterExpression],
        namespace: Optional[str],
        include_vectors: bool,
        include_metadata: bool,
        min_score: Optional[float],
    ) -> list[SearchResult]:
        ...

    async def list_namespaces(self, collection: str) -> list[NamespaceInfo]:
        ...

    async def delete_namespace(self, collection: str, namespace: str) -> None:
        ...


@runtime_checkable
class VectorProvider(Protocol):
    @property
    def name(self) -> str:
        ...

    async def connect(self, config: ConnectionConfig) -> VectorConnection:
        ...


class BaseVectorProvider(ABC):
    """
    Base class for vector providers.

    Subclasses implement _connect() with fully resolved credentials.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @property
    def env_prefix(self) -> str:
        return self.name.upper()

    def resolve_api_key(self, config: ConnectionConfig) -> str:
        """Explicit api_key, then options/env <PREFIX>_API_KEY."""
        if config.api_key is not None:
            return config.api_key.get_secret_value()
        return resolve_config(f"{self.env_prefix}_API_KEY", config.options, error_cls=VectorError)

    def resolve_endpoint(self, config: ConnectionConfig) -> str | None:
        if config.endpoint:
            return config.endpoint
        return optional_config(f"{self.env_prefix}_ENDPOINT", config.options)

    async def connect(self, config: ConnectionConfig) -> VectorConnection:
        return await self._connect(
            self.resolve_endpoint(config), self.resolve_api_key(config), config
        )

    @abstractmethod
    async def _connect(
        self, endpoint: str | None, api_key: str, config: ConnectionConfig
    ) -> VectorConnection:
        pass


class BaseVectorConnection(ABC):
    """Connection base with unsupported defaults for optional capabilities."""

    provider_name: str = "vector"

    async def list_namespaces(self, collection: str) -> list[NamespaceInfo]:
        raise unsupported(f"namespaces on {self.provider_name}", VectorError)

    async def delete_namespace(self, collection: str, namespace: str) -> None:
        raise unsupported(f"namespaces on {self.provider_name}", VectorError)

    async def collection_exists(self, name: str) -> bool:
        return name in await self.list_collections()

    @abstractmethod
    async def list_collections(self) -> list[str]:
        pass


__all__ = [
    "BaseVectorConnection",
    "BaseVectorProvider",
    "VectorConnection",
    "VectorProvider",
]
