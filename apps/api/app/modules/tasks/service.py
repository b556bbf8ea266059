"""Tasks: async service layer."""

import uuid
from datetime import datetime

import structlog
from sqlalchemy import case, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFound
from app.core.timeutils import as_utc
from app.models.enums import TaskStatus
from app.models.tasks import Task
from app.modules.tasks.due_dates import parse_due_date
from app.modules.tasks.schemas import TaskCreate, TaskUpdate

logger = structlog.get_logger()


class TaskService:
    def __init__(self, db: AsyncSession, org_id: uuid.UUID, user_id: uuid.UUID) -> None:
        self.db = db
        self.org_id = org_id
        self.user_id = user_id

    async def list(self) -> list[Task]:
        """The caller's tasks: pending first, then by due date (undated last)."""
        result = await self.db.execute(
            select(Task)
            .where(Task.org_id == self.org_id, Task.user_id == self.user_id)
            .order_by(
                case((Task.status == TaskStatus.PENDING, 0), else_=1),
                case((Task.due_at.is_(None), 1), else_=0),
                Task.due_at.asc(),
                Task.created_at.asc(),
            )
        )
        return list(result.scalars().all())

    async def get(self, task_id: uuid.UUID) -> Task:
        result = await self.db.execute(
            select(Task).where(
                Task.id == task_id,
                Task.org_id == self.org_id,
                Task.user_id == self.user_id,
            )
        )
        task = result.scalar_one_or_none()
        if task is None:
            raise NotFound("Task not found", {"taskId": str(task_id)})
        return task

    async def create(self, body: TaskCreate, now: datetime | None = None) -> Task:
        title = body.title.strip()
        due_at = as_utc(body.due_at)
        if due_at is None:
            parsed = parse_due_date(title, now or body.local_now())
            if parsed.due_at is not None:
                title, due_at = parsed.cleaned_title, as_utc(parsed.due_at)

        task = Task(
            org_id=self.org_id,
            user_id=self.user_id,
            title=title,
            status=TaskStatus.PENDING,
            urgency=body.urgency,
            due_at=due_at,
        )
        self.db.add(task)
        await self.db.flush()
        logger.info(
            "task_created",
            task_id=str(task.id),
            user_id=str(self.user_id),
            has_due_date=due_at is not None,
        )
        return task

    async def update(
        self, task_id: uuid.UUID, body: TaskUpdate, now: datetime | None = None
    ) -> Task:
        task = await self.get(task_id)
        changes = body.model_dump(exclude_unset=True, exclude={"timezone"})

        if "due_at" in changes:
            # Explicit null clears the due date
            task.due_at = as_utc(changes.pop("due_at"))
            if changes.get("title"):
                task.title = changes.pop("title").strip()
        elif changes.get("title"):
            parsed = parse_due_date(changes.pop("title"), now or body.local_now())
            task.title = parsed.cleaned_title
            if parsed.due_at is not None:
                task.due_at = as_utc(parsed.due_at)

        for field in ("status", "urgency"):
            if changes.get(field) is not None:
                setattr(task, field, changes[field])

        await self.db.flush()
        await self.db.refresh(task)
        logger.info("task_updated", task_id=str(task.id), fields=sorted(body.model_fields_set))
        return task

    async def delete(self, task_id: uuid.UUID) -> None:
        task = await self.get(task_id)
        await self.db.delete(task)
        await self.db.flush()
        logger.info("task_deleted", task_id=str(task_id), user_id=str(self.user_id))
