"""
Task Transition Service - guarded bulk status updates.

Every status change coming from GitHub is one ``UPDATE ... WHERE status IN
(...)`` statement. Rows are never loaded and saved back, so overlapping
deliveries commute: re-running a transition matches nothing the second time.
"""
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from hydianflow.core.clock import utcnow
from hydianflow.core.exceptions import PersistenceError
from hydianflow.core.logging import get_logger
from hydianflow.db.models.task import Task, TaskStatus

logger = get_logger(__name__)


@dataclass(frozen=True)
class TaskTransition:
    """One allowed status move and the timestamps it stamps"""

    name: str
    target: TaskStatus
    from_statuses: tuple[TaskStatus, ...]
    stamp_started: bool = False
    stamp_completed: bool = False


START_WORK = TaskTransition(
    name="start_work",
    target=TaskStatus.IN_PROGRESS,
    from_statuses=(TaskStatus.TODO,),
    stamp_started=True,
)

COMPLETE_WORK = TaskTransition(
    name="complete_work",
    target=TaskStatus.DONE,
    from_statuses=(TaskStatus.TODO, TaskStatus.IN_PROGRESS),
    stamp_completed=True,
)


def normalized_hint():
    """SQL expression for the comparable form of ``branch_hint``"""
    return func.lower(func.trim(Task.branch_hint))


def hint_in(candidates: list[str]) -> ColumnElement[bool]:
    """Tasks whose normalized branch hint is one of ``candidates``"""
    return (Task.branch_hint.is_not(None)) & (Task.branch_hint != "") & normalized_hint().in_(candidates)


def id_in(task_ids: list[int]) -> ColumnElement[bool]:
    return Task.id.in_(task_ids)


class TaskTransitionService:
    """Applies TaskTransition values to all matching tasks of a repository"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def apply(
        self,
        transition: TaskTransition,
        repo_full_name: str,
        criterion: ColumnElement[bool],
        now: datetime | None = None,
    ) -> int:
        """
        Move every task of ``repo_full_name`` matching ``criterion`` and
        currently in one of ``transition.from_statuses``. Commits and returns
        the number of rows changed.
        """
        now = now or utcnow()
        values = {
            "status": transition.target,
            "updated_at": now,
        }
        if transition.stamp_started:
            values["started_at"] = func.coalesce(Task.started_at, now)
        if transition.stamp_completed:
            values["completed_at"] = func.coalesce(Task.completed_at, now)

        stmt = (
            update(Task)
            .where(
                Task.repo_full_name == repo_full_name,
                Task.status.in_(transition.from_statuses),
                criterion,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )

        try:
            result = await self.db.execute(stmt)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceError(
                "failed to update tasks",
                operation=transition.name,
                details={"repo": repo_full_name},
            ) from e

        updated = result.rowcount or 0
        logger.debug(
            "Transition applied",
            extra_data={
                "transition": transition.name,
                "repo": repo_full_name,
                "updated": updated,
            },
        )
        return updated

    async def start_matching_branch(self, repo_full_name: str, hints: list[str], now: datetime | None = None) -> int:
        if not hints:
            return 0
        return await self.apply(START_WORK, repo_full_name, hint_in(hints), now)

    async def complete_matching_branch(self, repo_full_name: str, hints: list[str], now: datetime | None = None) -> int:
        if not hints:
            return 0
        return await self.apply(COMPLETE_WORK, repo_full_name, hint_in(hints), now)

    async def complete_by_ids(self, repo_full_name: str, task_ids: list[int], now: datetime | None = None) -> int:
        if not task_ids:
            return 0
        return await self.apply(COMPLETE_WORK, repo_full_name, id_in(task_ids), now)
