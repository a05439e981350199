"""Resolve missing task embeddings with bounded concurrency."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from common.utils import get_value
from embed_tasks.embeddings import EmbeddingProvider

logger = logging.getLogger(__name__)


def build_task_text(title: str | None, description: str | None) -> str:
    """Build the representation text of a task: title and description, trimmed."""
    return f"{title or ''} {description or ''}".strip()


def resolve_embeddings(
    tasks: list[Any],
    provider: EmbeddingProvider,
    max_workers: int = 4,
) -> dict[str, list[float]]:
    """
    Embed each task once and return the vectors that came back.

    Args:
        tasks: Task objects or dicts with id, title and description
        provider: Adapter whose embed() returns a vector or None
        max_workers: Upper bound on concurrent provider calls

    Returns:
        Mapping of task id to vector. Tasks the provider could not embed are
        absent. The mapping is only returned once every call has finished.
    """
    pending: dict[str, str] = {}
    for task in tasks:
        task_id = get_value(task, "id")
        if task_id in pending:
            continue
        pending[task_id] = build_task_text(get_value(task, "title"), get_value(task, "description"))

    if not pending:
        return {}

    logger.info("Computing embeddings for %d tasks (max_workers=%d)", len(pending), max_workers)
    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
        futures = {task_id: executor.submit(provider.embed, text) for task_id, text in pending.items()}

    vectors: dict[str, list[float]] = {}
    for task_id, future in futures.items():
        try:
            vector = future.result()
        except Exception:
            logger.exception("Embedding provider raised for task %s", task_id)
            continue
        if vector is None:
            logger.warning("No embedding available for task %s", task_id)
            continue
        vectors[task_id] = vector

    logger.info("Resolved %d of %d embeddings", len(vectors), len(pending))
    return vectors
