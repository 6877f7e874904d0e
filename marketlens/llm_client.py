"""OpenAI-compatible client factory for chat and embedding calls."""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any

from marketlens.config import settings
from marketlens.services import logger as log_service


@dataclass
class Usage:
    input_tokens: int = 0
    output_tokens: int = 0


@dataclass
class ChatResponse:
    text: str
    usage: Usage


class ChatMessagesAdapter:
    def __init__(self, openai_client: Any):
        self._client = openai_client

    @staticmethod
    def _to_openai_messages(system: str, messages: list[dict[str, Any]]) -> list[dict[str, Any]]:
        openai_messages: list[dict[str, Any]] = []
        if system:
            openai_messages.append({"role": "system", "content": system})
        for message in messages:
            openai_messages.append({"role": message["role"], "content": str(message["content"])})
        return openai_messages

    @staticmethod
    def _from_openai_response(response: Any) -> ChatResponse:
        choices = getattr(response, "choices", None) or []
        text = ""
        if choices:
            text = getattr(choices[0].message, "content", None) or ""

        usage = getattr(response, "usage", None)
        mapped_usage = Usage(
            input_tokens=getattr(usage, "prompt_tokens", 0) or 0,
            output_tokens=getattr(usage, "completion_tokens", 0) or 0,
        )
        return ChatResponse(text=text, usage=mapped_usage)

    async def create(
        self,
        *,
        model: str,
        max_tokens: int,
        system: str,
        messages: list[dict[str, Any]],
        temperature: float = 0.7,
        caller: str = "chat",
    ) -> ChatResponse:
        t0 = time.monotonic()
        try:
            response = await self._client.chat.completions.create(
                model=model,
                messages=self._to_openai_messages(system, messages),
                max_tokens=max_tokens,
                temperature=temperature,
            )
        except Exception as e:
            log_service.log_llm_call(
                model=model,
                caller=caller,
                duration_ms=int((time.monotonic() - t0) * 1000),
                status="error",
                error=str(e),
            )
            raise

        mapped = self._from_openai_response(response)
        log_service.log_llm_call(
            model=model,
            caller=caller,
            input_tokens=mapped.usage.input_tokens,
            output_tokens=mapped.usage.output_tokens,
            duration_ms=int((time.monotonic() - t0) * 1000),
        )
        return mapped


class EmbeddingsAdapter:
    def __init__(self, openai_client: Any):
        self._client = openai_client

    async def create(self, *, model: str, texts: list[str]) -> list[list[float]]:
        response = await self._client.embeddings.create(model=model, input=texts)
        # The API may return items out of order; `index` is authoritative.
        items = sorted(response.data, key=lambda item: getattr(item, "index", 0))
        return [list(map(float, item.embedding)) for item in items]


class LLMClientAdapter:
    def __init__(self, openai_client: Any):
        self.messages = ChatMessagesAdapter(openai_client)
        self.embeddings = EmbeddingsAdapter(openai_client)


def get_client() -> LLMClientAdapter:
    """Build the adapter around an ``AsyncOpenAI`` client."""
    from openai import AsyncOpenAI

    kwargs: dict[str, Any] = {"api_key": settings.openai_api_key}
    base_url = settings.openai_base_url.strip()
    if base_url:
        kwargs["base_url"] = base_url
    return LLMClientAdapter(AsyncOpenAI(**kwargs))


def get_model() -> str:
    """Get the chat model id."""
    return settings.default_model


def get_embedding_model() -> str:
    return settings.embedding_model


_client: LLMClientAdapter | None = None


def client() -> LLMClientAdapter:
    """Get or create the LLM client."""
    global _client
    if _client is None:
        _client = get_client()
    return _client
