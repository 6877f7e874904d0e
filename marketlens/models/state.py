from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any


class ResearchStatus(StrEnum):
    INITIALIZED = "initialized"
    SEARCHING = "searching"
    SEARCH_COMPLETED = "search_completed"
    ANALYZING = "analyzing"
    CLUSTERING_COMPLETED = "clustering_completed"
    CLUSTERING_SKIPPED = "clustering_skipped"
    GENERATING_INSIGHTS = "generating_insights"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ResearchStatus.COMPLETED, ResearchStatus.FAILED)


@dataclass(frozen=True, slots=True)
class SearchResult:
    title: str
    url: str
    content: str
    score: float
    source: str
    published_date: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class ClusterInfo:
    id: int
    name: str
    size: int
    keywords: list[str] = field(default_factory=list)
    documents: list[SearchResult] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "size": self.size,
            "keywords": list(self.keywords),
            "documents": [doc.to_dict() for doc in self.documents],
        }


@dataclass(slots=True)
class InsightResult:
    insights: list[str] = field(default_factory=list)
    success_cases: list[str] = field(default_factory=list)
    failure_cases: list[str] = field(default_factory=list)
    market_outlook: list[str] = field(default_factory=list)
    summary: str = ""
    cluster_count: int = 0
    total_documents: int = 0
    insights_refs: list[int] | None = None
    success_refs: list[int] | None = None
    failure_refs: list[int] | None = None
    outlook_refs: list[int] | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        # Reference lists are omitted entirely when the model produced none.
        return {key: value for key, value in data.items() if value is not None}


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(slots=True)
class ResearchState:
    """Snapshot of one research request.

    Stages never mutate a published snapshot; the orchestrator builds a new
    one per merge (see ``ResearchOrchestrator._publish``).
    """

    query: str
    raw_results: list[SearchResult] = field(default_factory=list)
    embeddings: list[list[float]] | None = None
    cluster_labels: list[int] | None = None
    clusters: list[ClusterInfo] = field(default_factory=list)
    insights: InsightResult | None = None
    status: ResearchStatus = ResearchStatus.INITIALIZED
    error: str | None = None
    created_at: str = field(default_factory=utc_now_iso)
    completed_at: str | None = None

    def to_dict(self, *, include_embeddings: bool = False) -> dict[str, Any]:
        data: dict[str, Any] = {
            "query": self.query,
            "status": self.status.value,
            "raw_results": [r.to_dict() for r in self.raw_results],
            "cluster_labels": self.cluster_labels,
            "clusters": [c.to_dict() for c in self.clusters],
            "insights": self.insights.to_dict() if self.insights else {},
            "error": self.error,
            "created_at": self.created_at,
            "completed_at": self.completed_at,
        }
        if include_embeddings:
            data["embeddings"] = self.embeddings
        return data
