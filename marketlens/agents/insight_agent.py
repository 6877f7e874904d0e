from __future__ import annotations

from typing import Sequence

from loguru import logger

from marketlens.config import settings
from marketlens.errors import SynthesisError
from marketlens.llm_client import client as llm_client, get_model
from marketlens.models.state import ClusterInfo, InsightResult, SearchResult
from marketlens.services.insight_parser import parse_insight_response
from marketlens.services.prompt_store import render_prompt

LLM_REQUIRED_PLACEHOLDER = "상세 분석을 위해서는 LLM이 필요합니다"
UNAVAILABLE_SUMMARY = "Basic statistical summary (LLM unavailable)"


def build_cluster_summary(clusters: Sequence[ClusterInfo]) -> str:
    return "\n".join(
        f"- {c.name}: {c.size} documents, keywords: {', '.join(c.keywords[:5])}"
        for c in clusters
    )


def build_document_details(raw_results: Sequence[SearchResult] | None) -> str:
    """Numbered document appendix; the numbers are what the model cites."""
    if not raw_results:
        return ""
    blocks = [
        f"### [{idx}] {doc.title}\n출처: {doc.source or doc.url}\n내용: {doc.content}\n---"
        for idx, doc in enumerate(raw_results, start=1)
    ]
    return "\n\n## 검색 결과 상세 내용\n\n" + "\n\n".join(blocks)


def statistical_insights(query: str, clusters: Sequence[ClusterInfo]) -> list[str]:
    total = sum(c.size for c in clusters)
    largest = query
    if clusters:
        top = clusters[0]
        for cluster in clusters[1:]:
            if cluster.size > top.size:
                top = cluster
        largest = top.name
    return [
        f"'{query}' 관련 {len(clusters)}개의 주요 주제 발견",
        f"총 {total}개 문서 분석",
        f"가장 큰 주제: {largest}",
    ]


def fallback_insights(query: str, clusters: Sequence[ClusterInfo]) -> InsightResult:
    """Complete record used when the model could not be reached at all."""
    return InsightResult(
        insights=statistical_insights(query, clusters),
        success_cases=[LLM_REQUIRED_PLACEHOLDER],
        failure_cases=[LLM_REQUIRED_PLACEHOLDER],
        market_outlook=[LLM_REQUIRED_PLACEHOLDER],
        summary=UNAVAILABLE_SUMMARY,
        cluster_count=len(clusters),
        total_documents=sum(c.size for c in clusters),
    )


class InsightAgent:
    """Writes the narrative market analysis for a set of topic clusters.

    The model is asked for four Korean sections (key insights, success cases,
    failure cases, market outlook), each followed by a ``참고: [..]`` line
    citing the numbered search results. The answer is parsed into an
    ``InsightResult``; any failure yields a statistical fallback instead of an
    exception.
    """

    name = "insight"

    def __init__(self, model: str | None = None):
        self.model = model or get_model()
        self.client = None
        logger.info(f"Initialized InsightAgent with model: {self.model}")

    def build_messages(
        self,
        query: str,
        clusters: Sequence[ClusterInfo],
        raw_results: Sequence[SearchResult] | None = None,
    ) -> list[dict[str, str]]:
        return [
            {
                "role": "user",
                "content": render_prompt(
                    "insight.user_prompt",
                    query=query,
                    clusters=build_cluster_summary(clusters),
                    document_details=build_document_details(raw_results),
                ),
            }
        ]

    async def _complete(
        self,
        query: str,
        clusters: Sequence[ClusterInfo],
        raw_results: Sequence[SearchResult] | None,
    ) -> str:
        active_client = self.client or llm_client()
        try:
            response = await active_client.messages.create(
                model=self.model,
                max_tokens=settings.insight_max_tokens,
                system=render_prompt("insight.system_prompt"),
                messages=self.build_messages(query, clusters, raw_results),
                temperature=settings.insight_temperature,
                caller=self.name,
            )
        except Exception as e:
            raise SynthesisError(str(e)) from e
        return response.text or ""

    async def generate_insights(
        self,
        query: str,
        clusters: Sequence[ClusterInfo],
        raw_results: Sequence[SearchResult] | None = None,
    ) -> InsightResult:
        logger.info(f"Generating insights for query: {query}")
        try:
            content = await self._complete(query, clusters, raw_results)
        except SynthesisError as e:
            logger.error(f"Failed to generate insights: {e}")
            return fallback_insights(query, clusters)

        parsed = parse_insight_response(content)

        insights = parsed.insights or statistical_insights(query, clusters)
        return InsightResult(
            insights=insights,
            success_cases=parsed.success_cases,
            failure_cases=parsed.failure_cases,
            market_outlook=parsed.market_outlook,
            summary=content,
            cluster_count=len(clusters),
            total_documents=sum(c.size for c in clusters),
            insights_refs=parsed.insights_refs,
            success_refs=parsed.success_refs,
            failure_refs=parsed.failure_refs,
            outlook_refs=parsed.outlook_refs,
        )
