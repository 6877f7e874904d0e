from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


# --- Requests ---


class ResearchRequest(BaseModel):
    query: str = Field(min_length=1, max_length=500)


# --- Responses ---


class ResearchStartResponse(BaseModel):
    request_id: str
    status: str


class SearchResultResponse(BaseModel):
    title: str
    url: str
    content: str = ""
    score: float = 0.0
    published_date: str | None = None
    source: str = "unknown"


class ClusterResponse(BaseModel):
    id: int
    name: str
    size: int
    keywords: list[str]
    documents: list[SearchResultResponse]


class ResearchResultResponse(BaseModel):
    request_id: str
    query: str
    status: str
    raw_results: list[SearchResultResponse]
    clusters: list[ClusterResponse]
    insights: dict[str, Any]
    error: str | None = None
    created_at: str
    completed_at: str | None = None


class ClusterNode(BaseModel):
    id: str
    label: str
    group: int
    value: int


class ClusterLink(BaseModel):
    source: str
    target: str
    value: int


class ClusterGraphResponse(BaseModel):
    nodes: list[ClusterNode]
    links: list[ClusterLink]


class TrendPoint(BaseModel):
    date: str
    value: int
    topic: str


class TrendTimelineResponse(BaseModel):
    points: list[TrendPoint]
