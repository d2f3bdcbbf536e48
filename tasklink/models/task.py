from datetime import date, datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tasklink.core.database import Base

TASK_STATUSES = ("todo", "in_progress", "review", "done", "blocked")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Task(Base):
    __tablename__ = "tasks"
    __table_args__ = (UniqueConstraint("organization_id", "task_id"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    task_id: Mapped[str] = mapped_column(String(64), index=True)  # e.g. "SHOP-042"
    organization_id: Mapped[int] = mapped_column(ForeignKey("organizations.id"))
    service_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("services.id"), nullable=True
    )
    sprint_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("sprints.id"), nullable=True
    )
    assignee_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id"), nullable=True
    )
    created_by_id: Mapped[int] = mapped_column(ForeignKey("users.id"))

    title: Mapped[str] = mapped_column(String(200))
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    priority: Mapped[str] = mapped_column(String(20), default="medium")
    status: Mapped[str] = mapped_column(String(20), default="todo")
    due_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    estimated_hours: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    tags: Mapped[List[str]] = mapped_column(JSON, default=list)
    labels: Mapped[List[str]] = mapped_column(JSON, default=list)

    github_issue_number: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    github_issue_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    activities: Mapped[List["TaskActivity"]] = relationship(
        back_populates="task", cascade="all, delete-orphan"
    )


class TaskActivity(Base):
    """A push delivery correlated with a task"""

    __tablename__ = "task_activities"

    id: Mapped[int] = mapped_column(primary_key=True)
    task_pk: Mapped[int] = mapped_column(ForeignKey("tasks.id"))
    kind: Mapped[str] = mapped_column(String(20), default="push")
    task_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    ref: Mapped[str] = mapped_column(String(255))
    repository: Mapped[str] = mapped_column(String(200))
    branch: Mapped[str] = mapped_column(String(255))
    author: Mapped[str] = mapped_column(String(100))
    author_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    commits_count: Mapped[int] = mapped_column(Integer, default=0)
    latest_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_new_branch: Mapped[bool] = mapped_column(Boolean, default=False)
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False)
    is_force_push: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    task: Mapped[Task] = relationship(back_populates="activities")
