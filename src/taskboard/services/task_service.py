"""Task service — CRUD over a user's own tasks.

Every method takes the acting user's email (the resolved token subject).
- list/create are scoped to that user by construction
- update/delete load the task first (404 if missing), then run the
  ownership guard (403) before touching anything

There is no optimistic locking: two concurrent updates to one task are
last-write-wins.
"""

import time
from typing import Optional

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.auth.ownership import authorize
from taskboard.db.models import Task, TaskStatus, User
from taskboard.errors import TaskNotFoundError, UnauthorizedError, UserNotFoundError
from taskboard.schemas.task import BIGINT_MAX, TaskUpdate
from taskboard.services.auth_service import get_user_by_email

logger = structlog.get_logger()


def _now_ms() -> int:
    return int(time.time() * 1000)


class TaskService:
    """Business logic for task CRUD with per-owner authorization."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_user(self, email: str) -> User:
        user = await get_user_by_email(self.db, email)
        if user is None:
            raise UserNotFoundError()
        return user

    async def _get_task(self, task_id: int) -> Task:
        task = await self.db.get(Task, task_id)
        if task is None:
            raise TaskNotFoundError()
        return task

    async def _next_order(self, user: User) -> int:
        """Creation-time sort key, strictly increasing per owner."""
        result = await self.db.execute(
            select(func.max(Task.order)).where(Task.user_id == user.id)
        )
        current_max: Optional[int] = result.scalar()
        now = _now_ms()
        if current_max is not None and current_max >= now:
            return min(current_max + 1, BIGINT_MAX)
        return now

    # ─── Read ────────────────────────────────────────────

    async def list_tasks(self, email: str) -> list[Task]:
        """All of the user's tasks, ascending by order (then id)."""
        user = await self._get_user(email)
        result = await self.db.execute(
            select(Task)
            .where(Task.user_id == user.id)
            .order_by(Task.order.asc(), Task.id.asc())
        )
        return list(result.scalars().all())

    # ─── Create ──────────────────────────────────────────

    async def create_task(self, email: str, title: str, description: Optional[str] = None) -> Task:
        """New tasks start in TODO and sort after the owner's existing ones."""
        user = await self._get_user(email)
        task = Task(
            title=title,
            description=description,
            status=TaskStatus.TODO,
            order=await self._next_order(user),
            user=user,
        )
        self.db.add(task)
        await self.db.commit()
        logger.info("task.created", task_id=task.id, user_id=str(user.id))
        return task

    # ─── Update ──────────────────────────────────────────

    async def update_task(self, email: str, task_id: int, patch: TaskUpdate) -> Task:
        """Apply only the fields present in the patch."""
        task = await self._get_task(task_id)
        self._guard(email, task)

        changes = patch.changes()
        for field, value in changes.items():
            setattr(task, field, value)

        await self.db.commit()
        logger.info("task.updated", task_id=task.id, fields=sorted(changes))
        return task

    # ─── Delete ──────────────────────────────────────────

    async def delete_task(self, email: str, task_id: int) -> None:
        task = await self._get_task(task_id)
        self._guard(email, task)

        await self.db.delete(task)
        await self.db.commit()
        logger.info("task.deleted", task_id=task_id)

    def _guard(self, email: str, task: Task) -> None:
        try:
            authorize(email, task.user.email)
        except UnauthorizedError:
            logger.warning("task.forbidden", task_id=task.id, email=email)
            raise
