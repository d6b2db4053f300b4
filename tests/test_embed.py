"""
Tests for the embedding domain.
"""

from unittest.mock import AsyncMock

import pytest

from durable_ai.errors import EmbedError, ErrorKind, ProviderError
from durable_ai.embed import (
    BaseEmbedProvider,
    DurableEmbed,
    EmbedConfig,
    Embedding,
    EmbeddingResponse,
    ImageInput,
    RerankResponse,
    RerankResult,
    TaskType,
    TextInput,
)


class FakeEmbedProvider(BaseEmbedProvider):
    def __init__(self):
        self.generate_mock = AsyncMock(
            return_value=EmbeddingResponse(
                embeddings=[Embedding(index=0, vector=[0.1, 0.2])], model="fake-embed"
            )
        )

    @property
    def name(self):
        return "fake-embed"

    async def generate(self, inputs, config):
        return await self.generate_mock(inputs, config)


class TestDurableEmbed:
    """Tests for journaled embedding calls."""

    @pytest.mark.asyncio
    async def test_generate_replays(self, host):
        provider = FakeEmbedProvider()
        embed = DurableEmbed(provider, host=host)
        inputs = [TextInput(text="hello"), ImageInput(url="https://img.test/cat.png")]
        config = EmbedConfig(task_type=TaskType.RETRIEVAL_QUERY, dimensions=2)

        live = await embed.generate(inputs, config)
        host.restart()
        replayed = await embed.generate(inputs, config)

        assert replayed == live
        assert provider.generate_mock.await_count == 1
        entry = host.entries[0]
        assert entry.function_type.value == "write-remote"
        assert entry.input["inputs"][1]["type"] == "image"
        assert entry.input["config"]["task_type"] == "retrieval-query"

    @pytest.mark.asyncio
    async def test_rerank_unsupported_by_default(self, host):
        embed = DurableEmbed(FakeEmbedProvider(), host=host)

        with pytest.raises(EmbedError) as exc_info:
            await embed.rerank("q", ["a", "b"], EmbedConfig())

        assert exc_info.value.kind == ErrorKind.UNSUPPORTED_OPERATION
        assert host.entries[0].ok is False

    @pytest.mark.asyncio
    async def test_rerank(self, host):
        provider = FakeEmbedProvider()
        provider.rerank = AsyncMock(
            return_value=RerankResponse(results=[RerankResult(index=1, relevance_score=0.9)])
        )

        response = await DurableEmbed(provider, host=host).rerank("q", ["a", "b"], EmbedConfig())

        assert response.results[0].index == 1
        provider.rerank.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_provider_error_retagged(self, host):
        provider = FakeEmbedProvider()
        provider.generate_mock.side_effect = ProviderError(ErrorKind.QUOTA_EXCEEDED, "out of credit")

        with pytest.raises(EmbedError) as exc_info:
            await DurableEmbed(provider, host=host).generate([TextInput(text="x")], EmbedConfig())

        assert exc_info.value.kind == ErrorKind.QUOTA_EXCEEDED
