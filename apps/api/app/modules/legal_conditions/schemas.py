"""Legal condition ("issue") schemas."""

import uuid
from datetime import datetime

from pydantic import Field

from app.models.enums import (
    ConditionCategory,
    ConditionSeverity,
    ConditionSource,
    ConditionStatus,
)
from app.schemas.common import CamelModel


class ConditionCreate(CamelModel):
    category: ConditionCategory
    severity: ConditionSeverity
    summary: str = Field(..., min_length=1, max_length=500)
    details: str | None = Field(default=None, max_length=10000)
    source: ConditionSource | None = None
    external_ref: str | None = Field(default=None, max_length=255)


class ConditionUpdate(CamelModel):
    """Editable fields only; category, severity and status never change after creation."""

    summary: str | None = Field(default=None, min_length=1, max_length=500)
    details: str | None = Field(default=None, max_length=10000)
    source: ConditionSource | None = None
    external_ref: str | None = Field(default=None, max_length=255)


class ConditionResponse(CamelModel):
    id: uuid.UUID
    deal_id: uuid.UUID
    category: ConditionCategory
    severity: ConditionSeverity
    status: ConditionStatus
    summary: str
    details: str | None
    source: ConditionSource | None
    external_ref: str | None
    discovered_at: datetime
    resolved_at: datetime | None
    created_at: datetime
    updated_at: datetime


class ConditionListResponse(CamelModel):
    open_issues: list[ConditionResponse]
    resolved_issues: list[ConditionResponse]
