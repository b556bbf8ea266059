"""Attention schemas."""

import uuid
from datetime import datetime

from app.modules.attention.rules import Severity
from app.modules.tasks.schemas import TaskResponse
from app.schemas.common import CamelModel


class DealSignalResponse(CamelModel):
    signal_type: str
    message: str
    severity: Severity


class DealAttentionResponse(CamelModel):
    deal_id: uuid.UUID
    severity: Severity | None
    signals: list[DealSignalResponse]


class FeedSignalResponse(CamelModel):
    deal_id: uuid.UUID
    signal_type: str
    message: str
    severity: Severity
    detected_at: datetime


class NeedsAttentionFeedResponse(CamelModel):
    signals: list[FeedSignalResponse]


class TaskAttentionResponse(CamelModel):
    triage: list[TaskResponse]
    missed: list[TaskResponse]
    total_count: int
    critical_count: int
    alert: bool
