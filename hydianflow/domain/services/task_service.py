"""
Task Service - creation defaults for new tasks.

New tasks are appended to the bottom of their column: the position is the
current maximum within (status, creator, project) plus a fixed step, which
leaves room for fractional re-ordering between neighbours.
"""
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from hydianflow.core.clock import utcnow
from hydianflow.core.config import settings
from hydianflow.core.exceptions import ValidationException
from hydianflow.db.models.task import Task, TaskStatus

# Older clients send "completed"
_STATUS_ALIASES = {"completed": TaskStatus.DONE.value}


def normalize_status(raw: str) -> TaskStatus:
    value = (raw or "").strip().lower()
    value = _STATUS_ALIASES.get(value, value)
    try:
        return TaskStatus(value)
    except ValueError:
        raise ValidationException("invalid status", field="status") from None


class TaskService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def next_position(
        self,
        status: TaskStatus,
        creator_id: int,
        project_id: Optional[int] = None,
    ) -> float:
        query = select(func.coalesce(func.max(Task.position), 0.0)).where(
            Task.status == status,
            Task.creator_id == creator_id,
        )
        if project_id is not None:
            query = query.where(Task.project_id == project_id)
        current_max = (await self.db.execute(query)).scalar_one()
        return float(current_max) + settings.TASK_POSITION_STEP

    async def create_task(
        self,
        title: str,
        creator_id: int,
        status: str = TaskStatus.TODO.value,
        position: Optional[float] = None,
        description: str = "",
        project_id: Optional[int] = None,
        assignee_id: Optional[int] = None,
        repo_full_name: Optional[str] = None,
        branch_hint: Optional[str] = None,
    ) -> Task:
        if not (title or "").strip():
            raise ValidationException("title is required", field="title")

        task_status = normalize_status(status)
        if position is None:
            position = await self.next_position(task_status, creator_id, project_id)

        now = utcnow()
        task = Task(
            title=title,
            description=description,
            status=task_status,
            position=position,
            creator_id=creator_id,
            project_id=project_id,
            assignee_id=assignee_id,
            repo_full_name=repo_full_name,
            branch_hint=branch_hint,
            started_at=now if task_status == TaskStatus.IN_PROGRESS else None,
            completed_at=now if task_status == TaskStatus.DONE else None,
            created_at=now,
            updated_at=now,
        )
        self.db.add(task)
        await self.db.commit()
        return task
