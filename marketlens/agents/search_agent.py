from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone

from loguru import logger

from marketlens.config import settings
from marketlens.errors import CollectionError
from marketlens.models.state import SearchResult
from marketlens.tools import tavily_search, web_utils


def recency_boost(published_date: str | None, now: datetime | None = None) -> float:
    """Score multiplier for fresh documents: 1.5 within 2 days, 1.2 within a week."""
    published = web_utils.parse_published_date(published_date)
    if published is None:
        if published_date:
            logger.debug(f"Failed to parse date '{published_date}'")
        return 1.0

    now = now or datetime.now(timezone.utc)
    days_ago = (now - published).days  # floored, also for future dates
    if days_ago <= 2:
        return 1.5
    if days_ago <= 7:
        return 1.2
    return 1.0


def diversify_sources(results: list[SearchResult], max_per_domain: int = 5) -> list[SearchResult]:
    """Keep results in order while each domain has fewer than ``max_per_domain`` kept."""
    domain_count: Counter[str] = Counter()
    diversified: list[SearchResult] = []

    for result in results:
        domain = result.source or "unknown"
        if domain_count[domain] < max_per_domain:
            diversified.append(result)
            domain_count[domain] += 1

    if domain_count:
        logger.info(
            f"Source diversity: {len(domain_count)} unique domains, "
            f"max {max(domain_count.values())} per domain"
        )
    return diversified


class SearchAgent:
    """Collects documents for a query: search, recency-weighted ranking, domain cap."""

    name = "search"

    def __init__(
        self,
        *,
        search_depth: str | None = None,
        max_per_domain: int | None = None,
    ):
        self.search_depth = search_depth or settings.search_depth
        self.max_per_domain = max(int(max_per_domain or settings.max_results_per_domain), 1)

    async def search(self, query: str, max_results: int = 30) -> list[SearchResult]:
        try:
            hits = await tavily_search.search(
                query,
                search_depth=self.search_depth,
                max_results=max_results,
                include_domains=[],
                exclude_domains=[],
            )
        except Exception as e:
            logger.error(f"Search failed for query '{query}': {e}")
            raise CollectionError(str(e) or "Search provider request failed") from e

        now = datetime.now(timezone.utc)
        results = [
            SearchResult(
                title=hit.title,
                url=hit.url,
                content=hit.content,
                score=web_utils.parse_score(hit.score) * recency_boost(hit.published_date, now),
                published_date=hit.published_date,
                source=web_utils.extract_domain(hit.url),
            )
            for hit in hits
        ]

        # sorted() is stable with reverse=True: equal scores keep provider order.
        results = sorted(results, key=lambda r: r.score, reverse=True)
        diversified = diversify_sources(results, self.max_per_domain)

        logger.info(
            f"Search completed: {len(diversified)} results for query '{query}' "
            f"(diversified from {len(results)} total)"
        )
        return diversified
