from __future__ import annotations

import asyncio
import re

from loguru import logger

from marketlens.config import settings
from marketlens.errors import NamingDegradation
from marketlens.llm_client import client as llm_client, get_model
from marketlens.services.prompt_store import render_prompt

_QUOTES = re.compile(r"[\"']")


def fallback_topic_name(keywords: list[str]) -> str:
    return f"주제: {keywords[0] if keywords else '미분류'}"


class TopicNamer:
    """Turns per-cluster keyword lists into short Korean topic labels."""

    name = "topic_namer"

    def __init__(self, model: str | None = None):
        self.model = model or get_model()
        self.client = None

    async def _name_one(self, keywords: list[str]) -> str:
        active_client = self.client or llm_client()
        try:
            response = await active_client.messages.create(
                model=self.model,
                max_tokens=settings.naming_max_tokens,
                system=render_prompt("naming.system_prompt"),
                messages=[
                    {
                        "role": "user",
                        "content": render_prompt("naming.user_prompt", keywords=", ".join(keywords)),
                    }
                ],
                temperature=settings.insight_temperature,
                caller=self.name,
            )
        except Exception as e:
            raise NamingDegradation(str(e)) from e
        return _QUOTES.sub("", response.text.strip())

    async def _name_or_fallback(self, keywords: list[str]) -> str:
        try:
            return await self._name_one(keywords)
        except NamingDegradation as e:
            fallback = fallback_topic_name(keywords)
            logger.warning(f"Topic naming failed, using '{fallback}': {e}")
            return fallback

    async def name_clusters(self, keyword_sets: list[list[str]]) -> list[str]:
        """One name per keyword set, in input order."""
        if not keyword_sets:
            return []
        return list(await asyncio.gather(*(self._name_or_fallback(kws) for kws in keyword_sets)))
