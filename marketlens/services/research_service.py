from __future__ import annotations

import asyncio
import uuid
from typing import AsyncGenerator, Awaitable, Callable

from loguru import logger

from marketlens.agents.orchestrator import ResearchOrchestrator
from marketlens.models.events import SSEEvent
from marketlens.models.state import ResearchState
from marketlens.services import logger as log_service
from marketlens.services.state_store import StateStore, get_state_store
from marketlens.services.streaming import watch_progress


class ResearchService:
    """Accepts research requests and runs each one as a background task."""

    def __init__(
        self,
        store: StateStore | None = None,
        orchestrator: ResearchOrchestrator | None = None,
    ):
        self.store = store if store is not None else get_state_store()
        self.orchestrator = orchestrator or ResearchOrchestrator(self.store)
        self._tasks: set[asyncio.Task] = set()

    def submit(self, query: str) -> str:
        """Store an initial snapshot and start the workflow; returns the request id."""
        request_id = str(uuid.uuid4())
        state = ResearchState(query=query)
        self.store.set(request_id, state)

        log_service.log_event(
            event_type="research_started",
            message="Research started",
            request_id=request_id,
            query=query[:100],
        )

        task = asyncio.create_task(self._run(request_id, state))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return request_id

    async def _run(self, request_id: str, state: ResearchState) -> None:
        try:
            final = await self.orchestrator.run(request_id, state)
        except asyncio.CancelledError:
            logger.info(f"Research {request_id} cancelled")
            raise
        except Exception as e:
            log_service.log_event(
                event_type="research_error",
                message="Unhandled error in research workflow",
                error=str(e),
                request_id=request_id,
            )
            raise
        log_service.log_event(
            event_type="research_finished",
            message="Research finished",
            request_id=request_id,
            status=final.status.value,
        )

    def fetch(self, request_id: str) -> ResearchState | None:
        return self.store.get(request_id)

    def subscribe(
        self,
        request_id: str,
        is_disconnected: Callable[[], Awaitable[bool]] | None = None,
    ) -> AsyncGenerator[SSEEvent, None]:
        return watch_progress(self.store, request_id, is_disconnected=is_disconnected)

    @property
    def active_count(self) -> int:
        return len(self._tasks)

    async def shutdown(self) -> None:
        """Cancel workflows still in flight and wait for them to unwind."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info(f"Cancelled {len(tasks)} running research workflows")
