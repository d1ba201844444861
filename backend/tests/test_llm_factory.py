"""
TESTES - FÁBRICA DE LLM
=======================
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from corretor.infrastructure.llm import LLMFactory, OpenAIProvider


@pytest.fixture(autouse=True)
def clean_factory():
    LLMFactory.reset()
    yield
    LLMFactory.reset()


def test_default_provider_is_shared():
    first = LLMFactory.get_provider()

    assert isinstance(first, OpenAIProvider)
    assert LLMFactory.get_provider() is first


def test_unknown_provider():
    with pytest.raises(ValueError, match="Provedor LLM desconhecido: anthropic"):
        LLMFactory.get_provider("anthropic")


def test_set_provider_overrides_instance():
    fake = MagicMock()

    LLMFactory.set_provider(fake)

    assert LLMFactory.get_provider() is fake


@pytest.mark.asyncio
async def test_embeddings_request_configured_dimensions():
    provider = OpenAIProvider(api_key="sk-test")
    provider.client = MagicMock()
    provider.client.embeddings.create = AsyncMock(return_value=SimpleNamespace(
        data=[SimpleNamespace(embedding=[0.1, 0.2])],
        usage=SimpleNamespace(total_tokens=7),
    ))

    result = await provider.generate_embeddings("Apartamento no Centro")

    assert result == {"embedding": [0.1, 0.2], "tokens_used": 7}
    kwargs = provider.client.embeddings.create.call_args.kwargs
    assert kwargs["dimensions"] == 1536
    assert kwargs["model"] == "text-embedding-3-small"
