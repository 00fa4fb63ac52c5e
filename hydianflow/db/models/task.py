"""
Task Model - tracked work items.

The table is owned by the task CRUD layer; the GitHub sync only ever
changes ``status``, ``started_at``, ``completed_at`` and ``updated_at``
through guarded bulk updates.
"""
import enum

from sqlalchemy import BigInteger, Column, Integer, String, Text, Float, DateTime, Enum as SQLEnum, Index

from hydianflow.core.clock import utcnow
from hydianflow.db.database import Base


class TaskStatus(str, enum.Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class Task(Base):
    """Work item on a board"""

    __tablename__ = "tasks"

    # 64-bit ids; SQLite only autoincrements a plain INTEGER primary key
    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False, default="")

    # Stored as the lower-case value ("todo", "in_progress", "done")
    status = Column(
        SQLEnum(
            TaskStatus,
            native_enum=False,
            length=16,
            values_callable=lambda members: [m.value for m in members],
        ),
        nullable=False,
        default=TaskStatus.TODO,
        index=True,
    )
    # Fractional sort key for manual ordering inside a column
    position = Column(Float, nullable=False, default=1000.0, index=True)

    creator_id = Column(Integer, nullable=False, index=True)
    assignee_id = Column(Integer, nullable=True, index=True)
    project_id = Column(Integer, nullable=True, index=True)

    # GitHub linkage
    repo_full_name = Column(String(200), nullable=True, index=True)
    branch_hint = Column(String(255), nullable=True, index=True)
    pr_number = Column(Integer, nullable=True, index=True)

    # Timestamps
    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_tasks_repo_status", "repo_full_name", "status"),
    )
