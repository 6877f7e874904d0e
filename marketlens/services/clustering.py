"""Topic clustering of document embeddings.

k-means with k = clamp(floor(sqrt(n)), 2, 5) and k-means++ seeding. A fixed
random seed keeps labels reproducible for identical input. Failures degrade to
a single cluster instead of propagating.
"""
from __future__ import annotations

import math
from typing import Sequence

import numpy as np
from loguru import logger
from sklearn.cluster import KMeans

from marketlens.config import settings
from marketlens.errors import ClusteringDegradation

NOISE_LABEL = -1


def choose_cluster_count(
    n_docs: int,
    min_clusters: int | None = None,
    max_clusters: int | None = None,
) -> int:
    low = settings.min_clusters if min_clusters is None else min_clusters
    high = settings.max_clusters if max_clusters is None else max_clusters
    return max(low, min(high, math.floor(math.sqrt(n_docs))))


def _run_kmeans(matrix: np.ndarray, n_clusters: int, seed: int) -> list[int]:
    try:
        kmeans = KMeans(n_clusters=n_clusters, init="k-means++", random_state=seed, n_init="auto")
        labels = kmeans.fit_predict(matrix)
    except Exception as e:
        raise ClusteringDegradation(f"k-means with k={n_clusters} failed: {e}") from e
    return [int(label) for label in labels]


def cluster_embeddings(
    embeddings: Sequence[Sequence[float]],
    min_cluster_size: int = 2,
    *,
    seed: int | None = None,
) -> list[int]:
    """Assign one integer label per embedding, in input order.

    ``min_cluster_size`` belongs to the density-based contract (where points
    can be labelled ``NOISE_LABEL``); k-means labels every point.
    """
    n_docs = len(embeddings)
    if n_docs == 0:
        return []

    n_clusters = choose_cluster_count(n_docs)
    seed = settings.kmeans_seed if seed is None else seed
    logger.info(
        f"Clustering {n_docs} embeddings with k-means (k={n_clusters}, "
        f"min_cluster_size={min_cluster_size})"
    )

    try:
        matrix = np.asarray(embeddings, dtype=float)
        labels = _run_kmeans(matrix, n_clusters, seed)
    except (ClusteringDegradation, ValueError) as e:
        logger.warning(f"Clustering failed, assigning all documents to one cluster: {e}")
        return [0] * n_docs

    logger.info(f"K-means created {len(set(labels))} clusters")
    return labels


def cluster_ids(labels: Sequence[int]) -> list[int]:
    """Distinct non-noise labels, ascending."""
    return sorted({label for label in labels if label != NOISE_LABEL})
