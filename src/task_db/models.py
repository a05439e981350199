"""SQLAlchemy models for tasks and bundle proposals."""

from __future__ import annotations

import enum
from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import DateTime, Enum, Float, ForeignKey, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _new_id() -> str:
    return uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class TaskStatus(str, enum.Enum):
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"
    ARCHIVED = "ARCHIVED"


class BundleStatus(str, enum.Enum):
    SUGGESTED = "SUGGESTED"
    CONFIRMED = "CONFIRMED"
    REJECTED = "REJECTED"


# Only these statuses are candidates for bundling.
ELIGIBLE_STATUSES = (TaskStatus.OPEN, TaskStatus.IN_PROGRESS)


class Task(Base):
    __tablename__ = "tasks"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    title: Mapped[str] = mapped_column(String(500))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[TaskStatus] = mapped_column(
        Enum(TaskStatus, native_enum=False), default=TaskStatus.OPEN, index=True
    )
    # JSON-encoded list of floats, written by the bundling run.
    embedding: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    memberships: Mapped[list[BundleMember]] = relationship(back_populates="task")

    def __repr__(self) -> str:
        return f"Task(id={self.id!r}, title={self.title!r}, status={self.status.value})"


class Bundle(Base):
    __tablename__ = "bundles"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    status: Mapped[BundleStatus] = mapped_column(
        Enum(BundleStatus, native_enum=False), default=BundleStatus.SUGGESTED, index=True
    )
    similarity_score: Mapped[float] = mapped_column(Float)
    auto_label: Mapped[str] = mapped_column(String(200))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    members: Mapped[list[BundleMember]] = relationship(
        back_populates="bundle",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def task_ids(self) -> list[str]:
        return [member.task_id for member in self.members]

    def __repr__(self) -> str:
        return (
            f"Bundle(id={self.id!r}, status={self.status.value}, "
            f"score={self.similarity_score:.3f}, members={len(self.members)})"
        )


class BundleMember(Base):
    __tablename__ = "bundle_members"

    bundle_id: Mapped[str] = mapped_column(
        ForeignKey("bundles.id", ondelete="CASCADE"), primary_key=True
    )
    task_id: Mapped[str] = mapped_column(
        ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True, index=True
    )

    bundle: Mapped[Bundle] = relationship(back_populates="members")
    task: Mapped[Task] = relationship(back_populates="memberships", lazy="selectin")
