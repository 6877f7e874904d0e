from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from loguru import logger

from marketlens.agents.insight_agent import InsightAgent
from marketlens.agents.search_agent import SearchAgent
from marketlens.agents.topic_namer import TopicNamer
from marketlens.config import settings
from marketlens.models.state import (
    ClusterInfo,
    ResearchState,
    ResearchStatus,
    SearchResult,
    utc_now_iso,
)
from marketlens.services import logger as log_service
from marketlens.services.clustering import cluster_embeddings, cluster_ids
from marketlens.services.embeddings import EmbeddingService, document_text
from marketlens.services.keywords import extract_cluster_keywords
from marketlens.services.state_store import StateStore

NO_RESULTS_MESSAGE = "검색 결과를 찾을 수 없습니다. 다른 키워드로 다시 시도해주세요."
NOTHING_TO_ANALYZE_MESSAGE = "분석할 검색 결과가 없습니다."


@dataclass(slots=True)
class StageOutcome:
    """Fields a stage changed, tagged with whether the workflow must stop."""

    updates: dict[str, Any] = field(default_factory=dict)

    @property
    def failed(self) -> bool:
        return self.updates.get("status") == ResearchStatus.FAILED

    @classmethod
    def failure(cls, message: str) -> "StageOutcome":
        return cls({"status": ResearchStatus.FAILED, "error": message})


Stage = Callable[[ResearchState], Awaitable[StageOutcome]]


class ResearchOrchestrator:
    """Runs one research request through search, analysis and insight.

    Flow:
      1. search: collect and rank documents (empty result = failure)
      2. analysis: embed, cluster, extract keywords, name topics
      3. insight: narrative sections with document citations

    Every stage is announced with its in-progress status, then its outcome is
    merged into a fresh snapshot and published to the state store. A failed
    stage ends the run.
    """

    def __init__(
        self,
        store: StateStore,
        *,
        search_agent: SearchAgent | None = None,
        embedder: EmbeddingService | None = None,
        topic_namer: TopicNamer | None = None,
        insight_agent: InsightAgent | None = None,
        max_search_results: int | None = None,
    ):
        self.store = store
        self.search_agent = search_agent or SearchAgent()
        self.embedder = embedder or EmbeddingService()
        self.topic_namer = topic_namer or TopicNamer()
        self.insight_agent = insight_agent or InsightAgent()
        self.max_search_results = max(int(max_search_results or settings.max_search_results), 1)
        self.min_documents_for_clustering = int(settings.min_documents_for_clustering)
        self.min_cluster_size = int(settings.min_cluster_size)
        self.keywords_top_k = int(settings.cluster_keywords_top_k)
        self.representative_documents = int(settings.representative_documents)

    def _stages(self) -> list[tuple[str, ResearchStatus, Stage]]:
        return [
            ("search", ResearchStatus.SEARCHING, self._search_stage),
            ("analysis", ResearchStatus.ANALYZING, self._analysis_stage),
            ("insight", ResearchStatus.GENERATING_INSIGHTS, self._insight_stage),
        ]

    def _publish(self, request_id: str, state: ResearchState, updates: dict[str, Any]) -> ResearchState:
        merged = dataclasses.replace(state, **updates)
        self.store.set(request_id, merged)
        return merged

    async def run(self, request_id: str, state: ResearchState) -> ResearchState:
        """Drive ``state`` to a terminal status, publishing after every step."""
        self.store.set(request_id, state)

        for stage_name, running_status, stage in self._stages():
            state = self._publish(request_id, state, {"status": running_status})
            log_service.log_research_step(request_id, stage_name, running_status.value)

            try:
                outcome = await stage(state)
            except Exception as e:
                logger.exception(f"{stage_name} stage failed: {e}")
                outcome = StageOutcome.failure(str(e) or type(e).__name__)

            state = self._publish(request_id, state, outcome.updates)
            log_service.log_research_step(
                request_id,
                stage_name,
                state.status.value,
                {"error": state.error} if state.error else None,
            )

            if outcome.failed:
                logger.info(f"{stage_name} stage failed, skipping remaining stages")
                break

        return state

    # --- search ---

    async def _search_stage(self, state: ResearchState) -> StageOutcome:
        logger.info(f"Search stage: querying '{state.query}'")
        try:
            results = await self.search_agent.search(state.query, self.max_search_results)
        except Exception as e:
            logger.error(f"Search failed: {e}")
            return StageOutcome.failure(str(e) or "Search failed")

        if not results:
            logger.warning(f"No search results found for query: '{state.query}'")
            return StageOutcome({
                "raw_results": [],
                "status": ResearchStatus.FAILED,
                "error": NO_RESULTS_MESSAGE,
            })

        logger.info(f"Found {len(results)} results")
        return StageOutcome({"raw_results": results, "status": ResearchStatus.SEARCH_COMPLETED})

    # --- analysis ---

    def _single_cluster(self, state: ResearchState) -> ClusterInfo:
        return ClusterInfo(
            id=0,
            name=state.query,
            size=len(state.raw_results),
            keywords=[],
            documents=list(state.raw_results[: self.representative_documents]),
        )

    async def _build_clusters(
        self,
        raw_results: list[SearchResult],
        texts: list[str],
        labels: list[int],
    ) -> list[ClusterInfo]:
        ids = cluster_ids(labels)
        keywords_map = extract_cluster_keywords(texts, labels, self.keywords_top_k)
        names = await self.topic_namer.name_clusters([keywords_map.get(cid, []) for cid in ids])

        clusters: list[ClusterInfo] = []
        for cid, name in zip(ids, names):
            docs = [doc for doc, label in zip(raw_results, labels) if label == cid]
            if not docs:
                continue
            clusters.append(
                ClusterInfo(
                    id=cid,
                    name=name or f"주제 {cid}",
                    size=len(docs),
                    keywords=keywords_map.get(cid, []),
                    documents=docs[: self.representative_documents],
                )
            )
        logger.info(f"Created {len(clusters)} clusters from {len(ids)} unique labels")
        return clusters

    async def _analysis_stage(self, state: ResearchState) -> StageOutcome:
        logger.info("Analysis stage: generating embeddings")
        if not state.raw_results:
            logger.error("No search results to analyze")
            return StageOutcome.failure(NOTHING_TO_ANALYZE_MESSAGE)

        raw_results = list(state.raw_results)
        texts = [document_text(r.title, r.content) for r in raw_results]
        embeddings = await self.embedder.embed_texts(texts)
        n_docs = len(raw_results)

        if n_docs < self.min_documents_for_clustering:
            logger.info(f"Only {n_docs} documents, skipping clustering")
            return StageOutcome({
                "embeddings": embeddings,
                "cluster_labels": [0] * n_docs,
                "clusters": [self._single_cluster(state)],
                "status": ResearchStatus.CLUSTERING_SKIPPED,
            })

        labels = cluster_embeddings(embeddings, self.min_cluster_size)
        if not cluster_ids(labels):
            logger.warning("All documents classified as noise, creating single cluster")
            return StageOutcome({
                "embeddings": embeddings,
                "cluster_labels": [0] * n_docs,
                "clusters": [self._single_cluster(state)],
                "status": ResearchStatus.CLUSTERING_SKIPPED,
            })

        clusters = await self._build_clusters(raw_results, texts, labels)
        return StageOutcome({
            "embeddings": embeddings,
            "cluster_labels": labels,
            "clusters": clusters,
            "status": ResearchStatus.CLUSTERING_COMPLETED,
        })

    # --- insight ---

    async def _insight_stage(self, state: ResearchState) -> StageOutcome:
        logger.info("Insight stage: generating insights")
        insights = await self.insight_agent.generate_insights(
            state.query, state.clusters, state.raw_results
        )
        return StageOutcome({
            "insights": insights,
            "status": ResearchStatus.COMPLETED,
            "completed_at": utc_now_iso(),
        })
