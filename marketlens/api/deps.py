from __future__ import annotations

from fastapi import HTTPException, Request

from marketlens.models.state import ResearchState
from marketlens.services.research_service import ResearchService

NOT_FOUND_DETAIL = "Research request not found"


def get_research_service(request: Request) -> ResearchService:
    """The service created by the app lifespan."""
    return request.app.state.research_service


def require_state(service: ResearchService, request_id: str) -> ResearchState:
    state = service.fetch(request_id)
    if state is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND_DETAIL)
    return state
