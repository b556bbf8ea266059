"""Attention: builds deal snapshots and evaluates the rules. Read-only."""

import uuid
from dataclasses import dataclass
from datetime import datetime

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.timeutils import utcnow
from app.models.deals import Deal, TitleMetadata
from app.models.enums import LegalStage
from app.models.tasks import Task
from app.modules.attention.rules import (
    AttentionSignal,
    DealSnapshot,
    Severity,
    evaluate_deal,
    overall_severity,
)
from app.modules.attention.task_triage import TaskAttention, partition_tasks
from app.modules.deal_events.service import STAGE_TRANSITION, DealEventService
from app.modules.legal_conditions.service import LegalConditionService
from app.modules.legal_workflow.deals import get_deal

logger = structlog.get_logger()


@dataclass
class DealAttention:
    deal_id: uuid.UUID
    severity: Severity | None
    signals: list[AttentionSignal]


@dataclass
class FeedSignal:
    deal_id: uuid.UUID
    signal_type: str
    message: str
    severity: Severity
    detected_at: datetime


class AttentionService:
    def __init__(self, db: AsyncSession, org_id: uuid.UUID) -> None:
        self.db = db
        self.org_id = org_id
        self.events = DealEventService(db)
        self.conditions = LegalConditionService(db, org_id)

    async def build_snapshot(self, deal: Deal) -> DealSnapshot:
        latest = await self.events.latest(deal.id)
        latest_transition = await self.events.latest(deal.id, event_type=STAGE_TRANSITION)
        oldest = await self.events.oldest(deal.id)
        conditions = await self.conditions.list_for_deal(deal.id)

        result = await self.db.execute(
            select(TitleMetadata.expected_close_date).where(TitleMetadata.deal_id == deal.id)
        )
        expected_close_date = result.scalar_one_or_none()

        return DealSnapshot(
            deal_id=deal.id,
            legal_stage=deal.legal_stage,
            last_event_at=latest.created_at if latest else None,
            last_stage_change_at=latest_transition.created_at if latest_transition else None,
            first_event_at=oldest.created_at if oldest else None,
            conditions=conditions,
            expected_close_date=expected_close_date,
        )

    async def for_deal(self, deal_id: uuid.UUID, now: datetime | None = None) -> DealAttention:
        deal = await get_deal(self.db, self.org_id, deal_id)
        snapshot = await self.build_snapshot(deal)
        signals = evaluate_deal(snapshot, now)
        return DealAttention(
            deal_id=deal.id, severity=overall_severity(signals), signals=signals
        )

    async def needs_attention_feed(self, now: datetime | None = None) -> list[FeedSignal]:
        """Signals for every live deal of the org, most severe first.

        A deal whose snapshot cannot be built is logged and left out; it never
        empties the feed for the others.
        """
        now = now or utcnow()
        result = await self.db.execute(
            select(Deal)
            .where(Deal.org_id == self.org_id, Deal.legal_stage != LegalStage.DEAD)
            .order_by(Deal.created_at.asc(), Deal.id.asc())
        )
        deals = list(result.scalars().all())

        feed: list[FeedSignal] = []
        for deal in deals:
            try:
                # A failure rolls back to this savepoint only
                async with self.db.begin_nested():
                    snapshot = await self.build_snapshot(deal)
            except Exception as exc:  # noqa: BLE001
                logger.warning(
                    "attention_snapshot_failed", deal_id=str(deal.id), error=str(exc)
                )
                continue
            for signal in evaluate_deal(snapshot, now):
                feed.append(
                    FeedSignal(
                        deal_id=deal.id,
                        signal_type=signal.signal_type,
                        message=signal.message,
                        severity=signal.severity,
                        detected_at=now,
                    )
                )

        feed.sort(key=lambda s: -s.severity.rank)
        logger.debug("attention_feed_built", org_id=str(self.org_id), signals=len(feed))
        return feed

    async def for_tasks(self, user_id: uuid.UUID, now: datetime | None = None) -> TaskAttention:
        result = await self.db.execute(
            select(Task).where(Task.org_id == self.org_id, Task.user_id == user_id)
        )
        return partition_tasks(list(result.scalars().all()), now)
