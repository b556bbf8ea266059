"""Task schemas."""

import uuid
from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import ConfigDict, Field, field_validator

from app.models.enums import TaskStatus, TaskUrgency
from app.schemas.common import CamelModel


class _TaskWrite(CamelModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    # IANA zone of the user ("America/Chicago"); dates in the title are read in it
    timezone: str | None = Field(default=None, max_length=64)

    @field_validator("timezone")
    @classmethod
    def _known_zone(cls, v: str | None) -> str | None:
        if v is None:
            return v
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {v}") from exc
        return v

    def local_now(self) -> datetime | None:
        """Current time in the user's zone, or None to use the server clock."""
        return datetime.now(ZoneInfo(self.timezone)) if self.timezone else None


class TaskCreate(_TaskWrite):
    title: str = Field(..., min_length=1, max_length=500)
    urgency: TaskUrgency = TaskUrgency.MEDIUM
    # When omitted the title is scanned for a date ("call Nick tomorrow 2pm")
    due_at: datetime | None = None


class TaskUpdate(_TaskWrite):
    title: str | None = Field(default=None, min_length=1, max_length=500)
    status: TaskStatus | None = None
    urgency: TaskUrgency | None = None
    due_at: datetime | None = None


class TaskResponse(CamelModel):
    id: uuid.UUID
    title: str
    status: TaskStatus
    urgency: TaskUrgency
    due_at: datetime | None
    created_at: datetime
    updated_at: datetime
