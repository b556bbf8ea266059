"""Deal event log: append-only, newest-first reads."""

import uuid
from datetime import timedelta
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.timeutils import as_utc, utcnow
from app.models.deals import DealEvent

logger = structlog.get_logger()

MAX_LIST_LIMIT = 200

STAGE_TRANSITION = "stage_transition"
CONDITION_OPENED = "condition_opened"
CONDITION_RESOLVED = "condition_resolved"


class DealEventService:
    """Writes and reads a deal's audit log.

    Callers own the transaction: ``append`` only flushes, so an event commits
    or rolls back together with the state change it records.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def append(
        self,
        deal_id: uuid.UUID,
        event_type: str,
        metadata: dict[str, Any] | None = None,
    ) -> DealEvent:
        created_at = utcnow()
        latest = await self.latest(deal_id)
        if latest is not None:
            latest_at = as_utc(latest.created_at)
            if latest_at is not None and created_at <= latest_at:
                created_at = latest_at + timedelta(microseconds=1)

        event = DealEvent(
            deal_id=deal_id,
            event_type=event_type,
            metadata_=dict(metadata or {}),
            created_at=created_at,
        )
        self.db.add(event)
        await self.db.flush()
        logger.info(
            "deal_event_appended",
            deal_id=str(deal_id),
            event_type=event_type,
            event_id=str(event.id),
        )
        return event

    async def list(
        self,
        deal_id: uuid.UUID,
        limit: int | None = None,
        event_type: str | None = None,
    ) -> list[DealEvent]:
        if limit is None:
            limit = settings.LEGAL_EVENTS_DEFAULT_LIMIT
        limit = max(1, min(limit, MAX_LIST_LIMIT))

        stmt = select(DealEvent).where(DealEvent.deal_id == deal_id)
        if event_type:
            stmt = stmt.where(DealEvent.event_type == event_type)
        stmt = stmt.order_by(DealEvent.created_at.desc(), DealEvent.id.desc()).limit(limit)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def latest(
        self, deal_id: uuid.UUID, event_type: str | None = None
    ) -> DealEvent | None:
        events = await self.list(deal_id, limit=1, event_type=event_type)
        return events[0] if events else None

    async def oldest(self, deal_id: uuid.UUID) -> DealEvent | None:
        result = await self.db.execute(
            select(DealEvent)
            .where(DealEvent.deal_id == deal_id)
            .order_by(DealEvent.created_at.asc(), DealEvent.id.asc())
            .limit(1)
        )
        return result.scalar_one_or_none()
