from __future__ import annotations

import math
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from urllib.parse import urlparse


def extract_domain(url: str) -> str:
    """Hostname of ``url``, or ``"unknown"`` when it has none."""
    try:
        hostname = urlparse(url).hostname
    except ValueError:
        return "unknown"
    return hostname or "unknown"


def parse_score(raw: object) -> float:
    """Relevance score as a float; unparseable or NaN values become 0.0."""
    try:
        score = float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(score):
        return 0.0
    return score


def parse_published_date(value: str | None) -> datetime | None:
    """Parse an ISO-8601 or RFC 2822 timestamp into an aware UTC datetime."""
    if not value:
        return None
    text = value.strip()
    parsed: datetime | None = None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        try:
            parsed = parsedate_to_datetime(text)
        except (TypeError, ValueError):
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)
