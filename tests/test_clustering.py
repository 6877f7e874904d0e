from __future__ import annotations

from unittest.mock import patch

import pytest

from marketlens.errors import ClusteringDegradation
from marketlens.services.clustering import choose_cluster_count, cluster_embeddings, cluster_ids

TWO_GROUPS = [
    [0.0, 0.0],
    [0.0, 0.1],
    [0.1, 0.0],
    [10.0, 10.0],
    [10.0, 10.1],
    [10.1, 10.0],
]


@pytest.mark.parametrize(
    ("n_docs", "expected"),
    [(1, 2), (4, 2), (5, 2), (8, 2), (9, 3), (16, 4), (25, 5), (30, 5), (200, 5)],
)
def test_choose_cluster_count_is_clamped(n_docs, expected):
    assert choose_cluster_count(n_docs, 2, 5) == expected


def test_separated_groups_get_separate_labels():
    labels = cluster_embeddings(TWO_GROUPS)

    assert len(labels) == len(TWO_GROUPS)
    assert labels[0] == labels[1] == labels[2]
    assert labels[3] == labels[4] == labels[5]
    assert labels[0] != labels[3]


def test_identical_input_gives_identical_labels():
    assert cluster_embeddings(TWO_GROUPS) == cluster_embeddings(TWO_GROUPS)


def test_empty_input():
    assert cluster_embeddings([]) == []


def test_kmeans_failure_falls_back_to_single_cluster():
    with patch(
        "marketlens.services.clustering._run_kmeans",
        side_effect=ClusteringDegradation("boom"),
    ):
        assert cluster_embeddings(TWO_GROUPS) == [0] * len(TWO_GROUPS)


def test_malformed_vectors_fall_back_to_single_cluster():
    ragged = [[1.0, 2.0], [1.0], [0.5, 0.5, 0.5]]
    assert cluster_embeddings(ragged) == [0, 0, 0]


def test_cluster_ids_skip_noise():
    assert cluster_ids([1, -1, 0, 1, -1]) == [0, 1]
    assert cluster_ids([-1, -1]) == []
