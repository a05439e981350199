"""Group open tasks into suggested bundles by embedding similarity.

A run loads the eligible tasks, makes sure each one has a vector, links every
pair whose cosine similarity reaches the threshold, and turns each connected
group of two or more tasks into a SUGGESTED bundle for human review. Groups
touching a task that is already in a SUGGESTED bundle are left alone, so
re-running on unchanged data creates nothing new.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bundle_tasks.models import BundleAnalysisResult, ProposedBundle, SimilarityEdge
from bundle_tasks.similarity import cosine_similarity, parse_embedding
from bundle_tasks.union_find import UnionFind
from common.config import DEFAULT_SIMILARITY_THRESHOLD, validate_threshold
from common.utils import truncate
from embed_tasks.embed_tasks import resolve_embeddings
from embed_tasks.embeddings import EmbeddingProvider
from task_db.models import Task
from task_db.stores import (
    create_bundle,
    find_suggested_bundles_overlapping,
    load_eligible_tasks,
    save_task_embedding,
)

logger = logging.getLogger(__name__)

MAX_LABEL_LENGTH = 200
LABEL_SEPARATOR = " / "
NOT_ENOUGH_TASKS_MESSAGE = "Not enough open tasks to analyze"


def build_label(titles: Iterable[str]) -> str:
    """Join member titles and cut the result to MAX_LABEL_LENGTH characters."""
    return truncate(LABEL_SEPARATOR.join(titles), MAX_LABEL_LENGTH)


def find_similarity_edges(
    task_ids: Sequence[str],
    vectors: dict[str, list[float]],
    threshold: float,
) -> list[SimilarityEdge]:
    """Compare every unordered pair of vectorised tasks; keep pairs scoring >= threshold."""
    ids = [task_id for task_id in task_ids if task_id in vectors]
    edges = []
    for i, a in enumerate(ids):
        for b in ids[i + 1:]:
            score = cosine_similarity(vectors[a], vectors[b])
            if score >= threshold:
                edges.append(SimilarityEdge(a=a, b=b, score=score))
    return edges


def cluster_tasks(task_ids: Sequence[str], edges: Iterable[SimilarityEdge]) -> list[list[str]]:
    """Connected groups of two or more tasks, members in task order."""
    uf = UnionFind()
    for edge in edges:
        uf.union(edge.a, edge.b)
    return [group for group in uf.groups(task_ids) if len(group) >= 2]


def score_cluster(members: Iterable[str], edges: Iterable[SimilarityEdge], threshold: float) -> float:
    """Mean score of the edges that formed the cluster, or the threshold if there are none."""
    member_set = set(members)
    scores = [edge.score for edge in edges if edge.a in member_set and edge.b in member_set]
    if not scores:
        return threshold
    return sum(scores) / len(scores)


def _collect_vectors(
    session: Session,
    tasks: list[Task],
    provider: EmbeddingProvider,
    max_workers: int,
) -> dict[str, list[float]]:
    """Build the task id -> vector map for this run, embedding and saving missing vectors."""
    vectors: dict[str, list[float]] = {}
    missing: list[Task] = []
    for task in tasks:
        if not task.embedding:
            missing.append(task)
            continue
        vector = parse_embedding(task.embedding)
        if vector is None:
            logger.warning("Stored embedding for task %s is unreadable; skipping it", task.id)
            continue
        vectors[task.id] = vector

    if missing:
        computed = resolve_embeddings(missing, provider, max_workers=max_workers)
        for task_id, vector in computed.items():
            try:
                save_task_embedding(session, task_id, vector)
            except (SQLAlchemyError, LookupError):
                session.rollback()
                logger.exception("Failed to save embedding for task %s", task_id)
            vectors[task_id] = vector

    return vectors


def run_bundle_analysis(
    session: Session,
    provider: EmbeddingProvider,
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
    max_workers: int = 4,
) -> BundleAnalysisResult:
    """
    Propose bundles of similar open tasks.

    Args:
        session: Database session used for all reads and writes
        provider: Embedding adapter used for tasks without a stored vector
        threshold: Minimum cosine similarity for two tasks to be linked, in (0, 1]
        max_workers: Upper bound on concurrent embedding calls

    Returns:
        BundleAnalysisResult with the bundles created by this run

    Raises:
        ValueError: If threshold is not in (0, 1]. Checked before any task is
            read; provider and per-bundle write failures are logged instead.
    """
    threshold = validate_threshold(threshold)

    tasks = load_eligible_tasks(session)
    if len(tasks) < 2:
        logger.info("Only %d eligible tasks; nothing to bundle", len(tasks))
        return BundleAnalysisResult(analyzed=len(tasks), message=NOT_ENOUGH_TASKS_MESSAGE)

    titles = {task.id: task.title for task in tasks}
    task_ids = [task.id for task in tasks]

    vectors = _collect_vectors(session, tasks, provider, max_workers)
    unembedded = len(task_ids) - len(vectors)
    logger.info("Comparing %d tasks with vectors (%d without)", len(vectors), unembedded)

    edges = find_similarity_edges(task_ids, vectors, threshold)
    clusters = cluster_tasks(task_ids, edges)
    logger.info("Found %d similar pairs forming %d clusters (threshold=%.2f)", len(edges), len(clusters), threshold)

    result = BundleAnalysisResult(analyzed=len(tasks), unembedded=unembedded)
    for members in clusters:
        try:
            if find_suggested_bundles_overlapping(session, members):
                logger.info("Skipping cluster of %d tasks already covered by a suggestion", len(members))
                result.skipped_overlapping += 1
                continue

            member_titles = [titles[task_id] for task_id in members]
            score = score_cluster(members, edges, threshold)
            label = build_label(member_titles)
            bundle = create_bundle(session, members, score, label)
        except SQLAlchemyError:
            session.rollback()
            logger.exception("Failed to create bundle for tasks %s", ", ".join(members))
            continue

        result.bundles.append(
            ProposedBundle(
                bundle_id=bundle.id,
                task_ids=list(members),
                titles=member_titles,
                similarity_score=score,
                auto_label=label,
                status=bundle.status.value,
                created_at=bundle.created_at,
            )
        )

    result.clusters_found = len(result.bundles)
    result.message = f"Analyzed {result.analyzed} tasks, created {result.clusters_found} bundles"
    logger.info(result.message)
    return result
