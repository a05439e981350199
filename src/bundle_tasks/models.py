"""Data models for the bundle_tasks stage."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class SimilarityEdge:
    """A pair of tasks whose similarity reached the threshold."""

    a: str
    b: str
    score: float


@dataclass
class ProposedBundle:
    """A bundle created by one analysis run."""

    bundle_id: str
    task_ids: list[str]
    titles: list[str]
    similarity_score: float
    auto_label: str
    status: str
    created_at: datetime | None = None


@dataclass
class BundleAnalysisResult:
    bundles: list[ProposedBundle] = field(default_factory=list)
    analyzed: int = 0
    clusters_found: int = 0
    skipped_overlapping: int = 0
    unembedded: int = 0
    message: str | None = None
