"""Tests for document collection and ranking."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

import pytest

from marketlens.agents.search_agent import SearchAgent, diversify_sources, recency_boost
from marketlens.errors import CollectionError
from marketlens.tools.tavily_search import SearchHit
from marketlens.tools.web_utils import extract_domain, parse_score

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def _hit(url: str, score, published_date: str | None = None, title: str = "t") -> SearchHit:
    return SearchHit(title=title, url=url, content="c", score=score, published_date=published_date)


class TestRecencyBoost:
    def test_within_two_days(self):
        assert recency_boost((NOW - timedelta(days=1)).isoformat(), NOW) == 1.5

    def test_days_are_floored(self):
        published = NOW - timedelta(days=2, hours=23)
        assert recency_boost(published.isoformat(), NOW) == 1.5

    def test_within_a_week(self):
        assert recency_boost((NOW - timedelta(days=5)).isoformat(), NOW) == 1.2

    def test_older_documents_are_not_boosted(self):
        assert recency_boost((NOW - timedelta(days=30)).isoformat(), NOW) == 1.0

    def test_zulu_suffix_is_accepted(self):
        assert recency_boost("2024-06-14T08:00:00Z", NOW) == 1.5

    def test_missing_or_unparseable_date(self):
        assert recency_boost(None, NOW) == 1.0
        assert recency_boost("", NOW) == 1.0
        assert recency_boost("last tuesday", NOW) == 1.0


class TestParsing:
    def test_parse_score(self):
        assert parse_score("0.75") == 0.75
        assert parse_score(0.5) == 0.5
        assert parse_score("abc") == 0.0
        assert parse_score(None) == 0.0
        assert parse_score("nan") == 0.0

    def test_extract_domain(self):
        assert extract_domain("https://www.example.com/path?q=1") == "www.example.com"
        assert extract_domain("not a url") == "unknown"


class TestDiversifySources:
    def test_keeps_everything_under_the_cap(self):
        from marketlens.models.state import SearchResult

        results = [
            SearchResult(title=f"a{i}", url=f"https://a.com/{i}", content="", score=1.0, source="a.com")
            for i in range(4)
        ] + [
            SearchResult(title=f"b{i}", url=f"https://b.com/{i}", content="", score=1.0, source="b.com")
            for i in range(2)
        ]

        assert diversify_sources(results, max_per_domain=5) == results


class TestSearchAgent:
    @pytest.mark.asyncio
    async def test_mixed_domains_all_kept(self):
        hits = [_hit(f"https://a.com/{i}", 0.9 - i * 0.1) for i in range(4)]
        hits += [_hit(f"https://b.com/{i}", 0.3 - i * 0.1) for i in range(2)]

        with patch("marketlens.tools.tavily_search.search", new=AsyncMock(return_value=hits)):
            results = await SearchAgent().search("ev market")

        assert len(results) == 6
        assert [r.source for r in results].count("a.com") == 4
        assert [r.source for r in results].count("b.com") == 2

    @pytest.mark.asyncio
    async def test_single_domain_capped_at_five_in_score_order(self):
        hits = [_hit(f"https://a.com/{i}", score) for i, score in enumerate([0.2, 0.9, 0.4, 0.8, 0.1, 0.7, 0.6])]

        with patch("marketlens.tools.tavily_search.search", new=AsyncMock(return_value=hits)):
            results = await SearchAgent().search("ev market")

        assert [r.score for r in results] == [0.9, 0.8, 0.7, 0.6, 0.4]

    @pytest.mark.asyncio
    async def test_equal_scores_keep_provider_order(self):
        hits = [_hit(f"https://site{i}.com/", 0.5, title=f"doc{i}") for i in range(3)]

        with patch("marketlens.tools.tavily_search.search", new=AsyncMock(return_value=hits)):
            results = await SearchAgent().search("query")

        assert [r.title for r in results] == ["doc0", "doc1", "doc2"]

    @pytest.mark.asyncio
    async def test_recent_document_outranks_older_one(self):
        recent = datetime.now(timezone.utc) - timedelta(hours=6)
        hits = [
            _hit("https://old.com/", 0.6, "2001-01-01T00:00:00"),
            _hit("https://new.com/", 0.5, recent.isoformat()),
        ]

        with patch("marketlens.tools.tavily_search.search", new=AsyncMock(return_value=hits)):
            results = await SearchAgent().search("query")

        assert results[0].source == "new.com"
        assert results[0].score == pytest.approx(0.75)

    @pytest.mark.asyncio
    async def test_bad_score_becomes_zero(self):
        hits = [_hit("https://a.com/", "n/a")]

        with patch("marketlens.tools.tavily_search.search", new=AsyncMock(return_value=hits)):
            results = await SearchAgent().search("query")

        assert results[0].score == 0.0

    @pytest.mark.asyncio
    async def test_provider_failure_raises_collection_error(self):
        failing = AsyncMock(side_effect=RuntimeError("quota exceeded"))

        with patch("marketlens.tools.tavily_search.search", new=failing):
            with pytest.raises(CollectionError, match="quota exceeded"):
                await SearchAgent().search("query")

    @pytest.mark.asyncio
    async def test_empty_provider_response(self):
        with patch("marketlens.tools.tavily_search.search", new=AsyncMock(return_value=[])):
            assert await SearchAgent().search("query") == []
