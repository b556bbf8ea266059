"""Tasks: FastAPI router."""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import WRITE_ROLES, get_current_user, require_role
from app.core.database import get_db
from app.modules.tasks.schemas import TaskCreate, TaskResponse, TaskUpdate
from app.modules.tasks.service import TaskService
from app.schemas.auth import CurrentUser

router = APIRouter(prefix="/tasks", tags=["Tasks"])


def _svc(db: AsyncSession, current_user: CurrentUser) -> TaskService:
    return TaskService(db, current_user.org_id, current_user.user_id)


@router.get("", response_model=list[TaskResponse])
async def list_tasks(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[TaskResponse]:
    tasks = await _svc(db, current_user).list()
    return [TaskResponse.model_validate(t) for t in tasks]


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    body: TaskCreate,
    current_user: CurrentUser = Depends(require_role(WRITE_ROLES)),
    db: AsyncSession = Depends(get_db),
) -> TaskResponse:
    """Create a task. Without ``dueAt`` a date in the title ("tomorrow 2pm") is picked up."""
    task = await _svc(db, current_user).create(body)
    await db.commit()
    return TaskResponse.model_validate(task)


@router.patch("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: uuid.UUID,
    body: TaskUpdate,
    current_user: CurrentUser = Depends(require_role(WRITE_ROLES)),
    db: AsyncSession = Depends(get_db),
) -> TaskResponse:
    task = await _svc(db, current_user).update(task_id, body)
    await db.commit()
    return TaskResponse.model_validate(task)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: uuid.UUID,
    current_user: CurrentUser = Depends(require_role(WRITE_ROLES)),
    db: AsyncSession = Depends(get_db),
) -> None:
    await _svc(db, current_user).delete(task_id)
    await db.commit()
