from __future__ import annotations

import time
from typing import Callable, Protocol

from loguru import logger

from marketlens.config import settings
from marketlens.models.state import ResearchState


class StateStore(Protocol):
    def get(self, request_id: str) -> ResearchState | None: ...
    def set(self, request_id: str, state: ResearchState) -> None: ...


class InMemoryStateStore:
    """Process-local snapshot map keyed by request id.

    Each ``set`` replaces the whole snapshot. Once a snapshot is terminal it
    stays readable for ``ttl_seconds`` (long enough for streaming readers to
    drain) and is then evicted on the next access.
    """

    def __init__(self, ttl_seconds: float | None = None, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = float(settings.state_ttl_seconds if ttl_seconds is None else ttl_seconds)
        self._clock = clock
        self._states: dict[str, ResearchState] = {}
        self._terminal_since: dict[str, float] = {}

    def get(self, request_id: str) -> ResearchState | None:
        self.evict_expired()
        return self._states.get(request_id)

    def set(self, request_id: str, state: ResearchState) -> None:
        self._states[request_id] = state
        if state.status.is_terminal:
            self._terminal_since.setdefault(request_id, self._clock())
        else:
            self._terminal_since.pop(request_id, None)

    def evict_expired(self) -> list[str]:
        now = self._clock()
        expired = [
            request_id
            for request_id, since in self._terminal_since.items()
            if now - since >= self.ttl_seconds
        ]
        for request_id in expired:
            self._states.pop(request_id, None)
            self._terminal_since.pop(request_id, None)
        if expired:
            logger.debug(f"Evicted {len(expired)} finished research states")
        return expired

    def __contains__(self, request_id: object) -> bool:
        return isinstance(request_id, str) and self.get(request_id) is not None

    def __len__(self) -> int:
        return len(self._states)


_store: StateStore | None = None


def get_state_store() -> StateStore:
    global _store
    if _store is None:
        _store = InMemoryStateStore()
    return _store
