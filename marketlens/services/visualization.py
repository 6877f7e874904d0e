"""Chart-ready views over finished clusters (topic graph and trend timeline)."""
from __future__ import annotations

from collections import Counter
from itertools import combinations
from typing import Any, Sequence

from marketlens.models.state import ClusterInfo
from marketlens.tools.web_utils import parse_published_date

TIMELINE_MAX_TOPICS = 5


def build_cluster_graph(clusters: Sequence[ClusterInfo]) -> dict[str, list[dict[str, Any]]]:
    nodes = [
        {"id": str(cluster.id), "label": cluster.name, "group": index, "value": cluster.size}
        for index, cluster in enumerate(clusters)
    ]

    links: list[dict[str, Any]] = []
    for first, second in combinations(clusters, 2):
        shared = set(first.keywords) & set(second.keywords)
        if shared:
            links.append({
                "source": str(first.id),
                "target": str(second.id),
                "value": len(shared),
            })

    return {"nodes": nodes, "links": links}


def build_trend_timeline(clusters: Sequence[ClusterInfo]) -> list[dict[str, Any]]:
    """Per-day document counts for the leading topics.

    Only representative documents with a parseable ``published_date`` count.
    Points are ordered by date, then by topic order.
    """
    points: list[tuple[str, int, dict[str, Any]]] = []
    for order, cluster in enumerate(clusters[:TIMELINE_MAX_TOPICS]):
        per_day: Counter[str] = Counter()
        for doc in cluster.documents:
            published = parse_published_date(doc.published_date)
            if published is not None:
                per_day[published.date().isoformat()] += 1
        for day, count in per_day.items():
            points.append((day, order, {"date": day, "value": count, "topic": cluster.name}))

    points.sort(key=lambda item: (item[0], item[1]))
    return [point for _, _, point in points]
