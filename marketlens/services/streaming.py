from __future__ import annotations

import asyncio
from typing import Any, AsyncGenerator, Awaitable, Callable

from marketlens.config import settings
from marketlens.models.events import EventType, SSEEvent
from marketlens.models.state import ResearchState, ResearchStatus
from marketlens.services.state_store import StateStore

STATUS_MESSAGES: dict[ResearchStatus, str] = {
    ResearchStatus.INITIALIZED: "리서치 요청이 접수되었습니다.",
    ResearchStatus.SEARCHING: "관련 문서를 검색하고 있습니다...",
    ResearchStatus.SEARCH_COMPLETED: "문서 검색이 완료되었습니다.",
    ResearchStatus.ANALYZING: "문서를 분석하고 주제를 분류하고 있습니다...",
    ResearchStatus.CLUSTERING_COMPLETED: "주제 분류가 완료되었습니다.",
    ResearchStatus.CLUSTERING_SKIPPED: "문서 수가 적어 단일 주제로 분석합니다.",
    ResearchStatus.GENERATING_INSIGHTS: "인사이트를 생성하고 있습니다...",
    ResearchStatus.COMPLETED: "리서치가 완료되었습니다.",
    ResearchStatus.FAILED: "리서치 중 오류가 발생했습니다.",
}

STATUS_NODES: dict[ResearchStatus, str] = {
    ResearchStatus.SEARCHING: "search",
    ResearchStatus.SEARCH_COMPLETED: "search",
    ResearchStatus.ANALYZING: "analysis",
    ResearchStatus.CLUSTERING_COMPLETED: "analysis",
    ResearchStatus.CLUSTERING_SKIPPED: "analysis",
    ResearchStatus.GENERATING_INSIGHTS: "insight",
    ResearchStatus.COMPLETED: "insight",
}


def progress(state: ResearchState) -> SSEEvent:
    """Progress event describing one snapshot."""
    data: dict[str, Any] = {
        "status": state.status.value,
        "query": state.query,
        "message": STATUS_MESSAGES[state.status],
    }
    node = STATUS_NODES.get(state.status)
    if node:
        data["node"] = node
    if state.raw_results:
        data["results_count"] = len(state.raw_results)
    if state.clusters:
        data["clusters_count"] = len(state.clusters)
    if state.insights and state.insights.insights:
        data["insights_count"] = len(state.insights.insights)
    if state.error:
        data["error"] = state.error
    return SSEEvent(event=EventType.PROGRESS, data=data)


def not_found(request_id: str) -> SSEEvent:
    return SSEEvent(
        event=EventType.NOT_FOUND,
        data={"request_id": request_id, "error": "Research request not found"},
    )


def error(message: str) -> SSEEvent:
    return SSEEvent(event=EventType.ERROR, data={"message": message})


async def watch_progress(
    store: StateStore,
    request_id: str,
    *,
    poll_interval: float | None = None,
    is_disconnected: Callable[[], Awaitable[bool]] | None = None,
) -> AsyncGenerator[SSEEvent, None]:
    """Poll ``store`` and yield one progress event per status change.

    Ends after a terminal status has been emitted, after a not-found event,
    or as soon as ``is_disconnected`` reports the client gone.
    """
    interval = settings.stream_poll_interval_ms / 1000 if poll_interval is None else poll_interval
    last_status: ResearchStatus | None = None

    while True:
        if is_disconnected is not None and await is_disconnected():
            return

        state = store.get(request_id)
        if state is None:
            yield not_found(request_id)
            return

        if state.status != last_status:
            last_status = state.status
            yield progress(state)

        if state.status.is_terminal:
            return

        await asyncio.sleep(interval)
