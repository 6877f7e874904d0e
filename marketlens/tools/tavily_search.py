from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from tavily import AsyncTavilyClient

from marketlens.config import settings


@dataclass
class SearchHit:
    """One raw Tavily result, before scoring."""

    title: str
    url: str
    content: str
    score: Any
    published_date: str | None = None


async def search(
    query: str,
    *,
    search_depth: str = "advanced",
    max_results: int = 10,
    topic: str = "general",
    include_domains: list[str] | None = None,
    exclude_domains: list[str] | None = None,
) -> list[SearchHit]:
    """Execute a Tavily web search and return the raw hits in response order."""
    client = AsyncTavilyClient(api_key=settings.tavily_api_key)

    response = await client.search(
        query=query,
        search_depth=search_depth,
        max_results=max_results,
        topic=topic,
        include_domains=include_domains or [],
        exclude_domains=exclude_domains or [],
    )

    return [
        SearchHit(
            title=r.get("title") or "",
            url=r.get("url") or "",
            content=r.get("content") or "",
            score=r.get("score"),
            published_date=r.get("published_date") or None,
        )
        for r in response.get("results") or []
    ]
