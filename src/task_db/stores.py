"""Task and bundle persistence operations.

Every function takes an open SQLAlchemy session. Writes commit on success so
that each task vector and each bundle is an independent unit of work.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from task_db.models import ELIGIBLE_STATUSES, Bundle, BundleMember, BundleStatus, Task

logger = logging.getLogger(__name__)


def load_eligible_tasks(session: Session) -> list[Task]:
    """Load OPEN and IN_PROGRESS tasks in a stable order."""
    stmt = (
        select(Task)
        .where(Task.status.in_(ELIGIBLE_STATUSES))
        .order_by(Task.created_at, Task.id)
    )
    tasks = list(session.scalars(stmt).all())
    logger.info("Loaded %d eligible tasks", len(tasks))
    return tasks


def save_task_embedding(session: Session, task_id: str, embedding: Sequence[float]) -> None:
    """Persist a computed vector onto a task as JSON text."""
    task = session.get(Task, task_id)
    if task is None:
        raise LookupError(f"Task not found: {task_id}")
    task.embedding = json.dumps([float(v) for v in embedding])
    session.commit()


def find_suggested_bundles_overlapping(session: Session, task_ids: Sequence[str]) -> list[Bundle]:
    """Return SUGGESTED bundles sharing at least one member with task_ids."""
    if not task_ids:
        return []
    stmt = (
        select(Bundle)
        .join(BundleMember, BundleMember.bundle_id == Bundle.id)
        .where(
            Bundle.status == BundleStatus.SUGGESTED,
            BundleMember.task_id.in_(list(task_ids)),
        )
        .distinct()
    )
    return list(session.scalars(stmt).all())


def create_bundle(
    session: Session,
    task_ids: Sequence[str],
    similarity_score: float,
    auto_label: str,
) -> Bundle:
    """Insert a SUGGESTED bundle with one membership row per task."""
    if len(task_ids) < 2:
        raise ValueError("A bundle needs at least two member tasks")
    bundle = Bundle(
        status=BundleStatus.SUGGESTED,
        similarity_score=float(similarity_score),
        auto_label=auto_label,
        members=[BundleMember(task_id=task_id) for task_id in task_ids],
    )
    session.add(bundle)
    session.commit()
    logger.info("Created bundle %s with %d tasks (score=%.3f)", bundle.id, len(task_ids), similarity_score)
    return bundle


def list_bundles(session: Session, status: BundleStatus | None = None) -> list[Bundle]:
    """List bundles newest first, optionally filtered by status."""
    stmt = select(Bundle).order_by(Bundle.created_at.desc(), Bundle.id)
    if status is not None:
        stmt = stmt.where(Bundle.status == status)
    return list(session.scalars(stmt).all())


def get_bundle(session: Session, bundle_id: str) -> Bundle | None:
    return session.get(Bundle, bundle_id)


def set_bundle_status(session: Session, bundle_id: str, status: BundleStatus | str) -> Bundle:
    """Record a review decision on a bundle."""
    try:
        new_status = BundleStatus(status)
    except ValueError as exc:
        raise ValueError(f"Invalid bundle status: {status}") from exc

    bundle = session.get(Bundle, bundle_id)
    if bundle is None:
        raise LookupError(f"Bundle not found: {bundle_id}")

    previous = bundle.status
    bundle.status = new_status
    session.commit()
    logger.info("Bundle %s status %s -> %s", bundle_id, previous.value, new_status.value)
    return bundle


def delete_bundle(session: Session, bundle_id: str) -> None:
    bundle = session.get(Bundle, bundle_id)
    if bundle is None:
        raise LookupError(f"Bundle not found: {bundle_id}")
    session.delete(bundle)
    session.commit()
    logger.info("Deleted bundle %s", bundle_id)
