"""Failure taxonomy for the research workflow.

Only ``CollectionError`` and ``EmbeddingError`` fail a workflow. The
degradation types are raised inside a component and absorbed at its boundary,
where a fallback value is substituted.
"""
from __future__ import annotations


class ResearchError(Exception):
    """Base class for research workflow failures."""


class CollectionError(ResearchError):
    """The search capability failed or was unreachable."""


class EmbeddingError(ResearchError):
    """The embedding capability failed; no partial result is returned."""


class ClusteringDegradation(ResearchError):
    """Clustering failed; callers fall back to a single cluster."""


class KeywordExtractionDegradation(ResearchError):
    """Keyword extraction failed for one cluster; its keyword list is empty."""


class NamingDegradation(ResearchError):
    """Topic naming failed for one keyword set; a deterministic name is used."""


class SynthesisError(ResearchError):
    """Insight generation failed; a statistical fallback record is returned."""
