from __future__ import annotations

from typing import Sequence

import numpy as np
from loguru import logger
from sklearn.feature_extraction.text import TfidfVectorizer

from marketlens.errors import KeywordExtractionDegradation
from marketlens.services.clustering import cluster_ids

MIN_KEYWORD_LENGTH = 3


def _cluster_keywords(texts: list[str], top_k: int) -> list[str]:
    """Top ``top_k`` terms by TF-IDF summed over ``texts``, IDF fitted on ``texts`` alone."""
    vectorizer = TfidfVectorizer(lowercase=True, stop_words="english", norm=None)
    try:
        matrix = vectorizer.fit_transform(texts)
    except ValueError as e:
        # Raised for an empty vocabulary (e.g. only stop words or symbols).
        raise KeywordExtractionDegradation(str(e)) from e

    scores = np.asarray(matrix.sum(axis=0)).ravel()
    terms = vectorizer.get_feature_names_out()

    # Terms come back alphabetically; the stable sort keeps that order for ties.
    ranked = sorted(
        ((str(term), float(score)) for term, score in zip(terms, scores)),
        key=lambda item: item[1],
        reverse=True,
    )
    return [term for term, _ in ranked if len(term) >= MIN_KEYWORD_LENGTH][:top_k]


def extract_cluster_keywords(
    texts: Sequence[str],
    labels: Sequence[int],
    top_k: int = 5,
) -> dict[int, list[str]]:
    """Map each non-noise cluster id to its most characteristic terms."""
    cluster_keywords: dict[int, list[str]] = {}

    for label in cluster_ids(labels):
        cluster_texts = [text for text, lbl in zip(texts, labels) if lbl == label]
        if not cluster_texts:
            continue
        try:
            cluster_keywords[label] = _cluster_keywords(cluster_texts, top_k)
        except KeywordExtractionDegradation as e:
            logger.warning(f"Failed to extract keywords for cluster {label}: {e}")
            cluster_keywords[label] = []

    return cluster_keywords
