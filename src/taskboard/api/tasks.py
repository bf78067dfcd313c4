"""Task API routes.

Thin HTTP layer over TaskService. The router is mounted with the auth
dependency, so every handler here already has a verified identity;
ownership and not-found errors come back from the service as domain
errors and are rendered by the app's exception handlers.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.auth.dependencies import CurrentIdentity, get_current_user
from taskboard.db.engine import get_db
from taskboard.schemas.task import TaskCreate, TaskRead, TaskUpdate
from taskboard.services.task_service import TaskService

router = APIRouter(prefix="/tasks")


def _task_svc(db: AsyncSession = Depends(get_db)) -> TaskService:
    return TaskService(db)


@router.get("", response_model=list[TaskRead])
async def list_tasks(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """The caller's tasks, ascending by order."""
    return await svc.list_tasks(identity.email)


@router.post("", response_model=TaskRead, status_code=201)
async def create_task(
    body: TaskCreate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """Create a task in TODO, sorted after the caller's existing tasks."""
    return await svc.create_task(identity.email, body.title, body.description)


@router.put("/{task_id}", response_model=TaskRead)
async def update_task(
    task_id: int,
    body: TaskUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """Change any subset of title, description, status, order."""
    return await svc.update_task(identity.email, task_id, body)


@router.delete("/{task_id}")
async def delete_task(
    task_id: int,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    await svc.delete_task(identity.email, task_id)
    return {"deleted": True}
