"""Shared fixtures: an in-memory database and a scripted embedding provider."""

from __future__ import annotations

import json
import threading
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from task_db.models import Base, Task, TaskStatus

BASE_TIME = datetime(2024, 1, 1, 9, 0, 0, tzinfo=timezone.utc)


class FakeEmbeddingProvider:
    """Returns vectors keyed by text; unknown text is unavailable (None)."""

    configured = True

    def __init__(self, vectors: dict[str, list[float]] | None = None):
        self.vectors = vectors or {}
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def embed(self, text: str) -> list[float] | None:
        with self._lock:
            self.calls.append(text)
        return self.vectors.get(text)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def add_task(session):
    """Insert a task; tasks added later sort after earlier ones."""
    counter = {"n": 0}

    def _add(
        task_id: str,
        title: str,
        description: str | None = None,
        status: TaskStatus = TaskStatus.OPEN,
        embedding: list[float] | str | None = None,
    ) -> Task:
        if isinstance(embedding, list):
            embedding = json.dumps(embedding)
        task = Task(
            id=task_id,
            title=title,
            description=description,
            status=status,
            embedding=embedding,
            created_at=BASE_TIME + timedelta(minutes=counter["n"]),
        )
        counter["n"] += 1
        session.add(task)
        session.commit()
        return task

    return _add


@pytest.fixture
def provider():
    return FakeEmbeddingProvider()
