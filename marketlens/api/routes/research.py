from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sse_starlette.sse import EventSourceResponse

from marketlens.api.deps import get_research_service, require_state
from marketlens.models.schemas import (
    ClusterGraphResponse,
    ResearchRequest,
    ResearchResultResponse,
    ResearchStartResponse,
    TrendTimelineResponse,
)
from marketlens.models.state import ResearchStatus
from marketlens.services import logger as log_service
from marketlens.services import streaming
from marketlens.services.research_service import ResearchService
from marketlens.services.visualization import build_cluster_graph, build_trend_timeline

router = APIRouter(prefix="/api/research", tags=["research"])


@router.post("", response_model=ResearchStartResponse)
async def start_research(
    request: ResearchRequest,
    service: ResearchService = Depends(get_research_service),
):
    """Start a research run. Returns the request_id to poll or stream."""
    request_id = service.submit(request.query)
    return ResearchStartResponse(request_id=request_id, status=ResearchStatus.INITIALIZED.value)


@router.get("/{request_id}", response_model=ResearchResultResponse)
async def get_research(
    request_id: str,
    service: ResearchService = Depends(get_research_service),
):
    state = require_state(service, request_id)
    return ResearchResultResponse(request_id=request_id, **state.to_dict())


@router.get("/{request_id}/stream")
async def stream_research(
    request_id: str,
    request: Request,
    service: ResearchService = Depends(get_research_service),
):
    """SSE endpoint that streams one progress event per status change."""
    require_state(service, request_id)

    async def event_generator():
        try:
            async for event in service.subscribe(request_id, request.is_disconnected):
                yield event.to_sse()
        except Exception as e:
            log_service.log_event(
                event_type="stream_error",
                message="Unhandled error in research stream",
                error=str(e),
                request_id=request_id,
            )
            yield streaming.error("Research stream failed unexpectedly.").to_sse()

    return EventSourceResponse(event_generator())


@router.get("/{request_id}/graph", response_model=ClusterGraphResponse)
async def get_cluster_graph(
    request_id: str,
    service: ResearchService = Depends(get_research_service),
):
    state = require_state(service, request_id)
    return build_cluster_graph(state.clusters)


@router.get("/{request_id}/timeline", response_model=TrendTimelineResponse)
async def get_trend_timeline(
    request_id: str,
    service: ResearchService = Depends(get_research_service),
):
    state = require_state(service, request_id)
    return {"points": build_trend_timeline(state.clusters)}
