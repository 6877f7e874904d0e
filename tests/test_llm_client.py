"""Tests for the OpenAI-compatible client adapters."""
import sys
import types
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from marketlens.llm_client import (
    ChatMessagesAdapter,
    EmbeddingsAdapter,
    get_client,
    get_embedding_model,
    get_model,
)


class TestGetModel:
    def test_get_model_returns_default(self):
        with patch("marketlens.llm_client.settings") as mock_settings:
            mock_settings.default_model = "gpt-4o-mini"
            assert get_model() == "gpt-4o-mini"

    def test_get_embedding_model(self):
        with patch("marketlens.llm_client.settings") as mock_settings:
            mock_settings.embedding_model = "text-embedding-3-large"
            assert get_embedding_model() == "text-embedding-3-large"


class TestGetClient:
    def _build(self, base_url: str):
        with patch("marketlens.llm_client.settings") as mock_settings:
            mock_settings.openai_api_key = "sk-test"
            mock_settings.openai_base_url = base_url

            openai_module = types.ModuleType("openai")
            mock_openai = MagicMock()
            openai_module.AsyncOpenAI = mock_openai

            with patch.dict(sys.modules, {"openai": openai_module}):
                get_client()
        return mock_openai

    def test_default_endpoint(self):
        mock_openai = self._build("")
        mock_openai.assert_called_once_with(api_key="sk-test")

    def test_custom_base_url(self):
        mock_openai = self._build(" https://llm.internal/v1 ")
        mock_openai.assert_called_once_with(api_key="sk-test", base_url="https://llm.internal/v1")


class TestChatMessagesAdapter:
    @pytest.mark.asyncio
    async def test_create_maps_request_and_response(self):
        openai_client = MagicMock()
        openai_client.chat.completions.create = AsyncMock(
            return_value=SimpleNamespace(
                choices=[SimpleNamespace(message=SimpleNamespace(content="전기차"))],
                usage=SimpleNamespace(prompt_tokens=12, completion_tokens=3),
            )
        )

        response = await ChatMessagesAdapter(openai_client).create(
            model="gpt-4",
            max_tokens=64,
            system="system text",
            messages=[{"role": "user", "content": "hello"}],
            temperature=0.2,
        )

        assert response.text == "전기차"
        assert response.usage.input_tokens == 12
        assert response.usage.output_tokens == 3
        kwargs = openai_client.chat.completions.create.await_args.kwargs
        assert kwargs["messages"] == [
            {"role": "system", "content": "system text"},
            {"role": "user", "content": "hello"},
        ]
        assert kwargs["max_tokens"] == 64
        assert kwargs["temperature"] == 0.2

    @pytest.mark.asyncio
    async def test_create_reraises_provider_errors(self):
        openai_client = MagicMock()
        openai_client.chat.completions.create = AsyncMock(side_effect=RuntimeError("timeout"))

        with pytest.raises(RuntimeError, match="timeout"):
            await ChatMessagesAdapter(openai_client).create(
                model="gpt-4", max_tokens=10, system="", messages=[]
            )


class TestEmbeddingsAdapter:
    @pytest.mark.asyncio
    async def test_vectors_follow_response_index(self):
        openai_client = MagicMock()
        openai_client.embeddings.create = AsyncMock(
            return_value=SimpleNamespace(
                data=[
                    SimpleNamespace(index=1, embedding=[0.3, 0.4]),
                    SimpleNamespace(index=0, embedding=[0.1, 0.2]),
                ]
            )
        )

        vectors = await EmbeddingsAdapter(openai_client).create(model="m", texts=["a", "b"])

        assert vectors == [[0.1, 0.2], [0.3, 0.4]]
        openai_client.embeddings.create.assert_awaited_once_with(model="m", input=["a", "b"])
