from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class EventType(str, Enum):
    PROGRESS = "progress"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass
class SSEEvent:
    event: EventType
    data: dict[str, Any] = field(default_factory=dict)

    def to_sse(self) -> dict[str, str]:
        """Shape expected by ``sse_starlette.EventSourceResponse``."""
        return {
            "event": self.event.value,
            "data": json.dumps(self.data, ensure_ascii=False),
        }
