"""Task model: a user's to-do item, optionally due at a point in time."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel
from app.models.enums import TaskStatus, TaskUrgency


class Task(BaseModel):
    __tablename__ = "tasks"
    __table_args__ = (
        Index("ix_tasks_org_id_user_id", "org_id", "user_id"),
        Index("ix_tasks_user_id_status", "user_id", "status"),
    )

    org_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    status: Mapped[TaskStatus] = mapped_column(nullable=False, default=TaskStatus.PENDING)
    urgency: Mapped[TaskUrgency] = mapped_column(nullable=False, default=TaskUrgency.MEDIUM)
    due_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, status={self.status.value})>"
