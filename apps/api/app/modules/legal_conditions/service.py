"""Legal condition registry: open, resolve, edit and list a deal's issues."""

import uuid

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFound
from app.core.timeutils import utcnow
from app.models.enums import ConditionSeverity, ConditionStatus
from app.models.legal import LegalCondition
from app.modules.deal_events.service import (
    CONDITION_OPENED,
    CONDITION_RESOLVED,
    DealEventService,
)
from app.modules.legal_conditions.schemas import ConditionCreate, ConditionUpdate
from app.modules.legal_workflow.deals import get_deal

logger = structlog.get_logger()


def split_summaries(conditions: list[LegalCondition]) -> tuple[list[str], list[str]]:
    """(blockers, warnings) from the live OPEN conditions, oldest first."""
    blockers = [c.summary for c in conditions if c.is_blocker]
    warnings = [c.summary for c in conditions if c.is_warning]
    return blockers, warnings


class LegalConditionService:
    def __init__(self, db: AsyncSession, org_id: uuid.UUID) -> None:
        self.db = db
        self.org_id = org_id
        self.events = DealEventService(db)

    # ── Reads ─────────────────────────────────────────────────────────────────

    async def list_for_deal(
        self, deal_id: uuid.UUID, status: ConditionStatus | None = None
    ) -> list[LegalCondition]:
        stmt = select(LegalCondition).where(LegalCondition.deal_id == deal_id)
        if status is not None:
            stmt = stmt.where(LegalCondition.status == status)
        stmt = stmt.order_by(LegalCondition.discovered_at.asc(), LegalCondition.id.asc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_issues(
        self, deal_id: uuid.UUID
    ) -> tuple[list[LegalCondition], list[LegalCondition]]:
        await get_deal(self.db, self.org_id, deal_id)
        conditions = await self.list_for_deal(deal_id)
        open_issues = [c for c in conditions if c.status == ConditionStatus.OPEN]
        resolved = [c for c in conditions if c.status == ConditionStatus.RESOLVED]
        return open_issues, resolved

    async def open_summaries(self, deal_id: uuid.UUID) -> tuple[list[str], list[str]]:
        conditions = await self.list_for_deal(deal_id, status=ConditionStatus.OPEN)
        return split_summaries(conditions)

    async def _get(self, deal_id: uuid.UUID, condition_id: uuid.UUID) -> LegalCondition:
        await get_deal(self.db, self.org_id, deal_id)
        result = await self.db.execute(
            select(LegalCondition).where(
                LegalCondition.id == condition_id,
                LegalCondition.deal_id == deal_id,
            )
        )
        condition = result.scalar_one_or_none()
        if condition is None:
            raise NotFound("Issue not found", {"issueId": str(condition_id)})
        return condition

    # ── Writes ────────────────────────────────────────────────────────────────

    async def open(
        self, deal_id: uuid.UUID, body: ConditionCreate, user_id: uuid.UUID
    ) -> LegalCondition:
        await get_deal(self.db, self.org_id, deal_id)
        condition = LegalCondition(
            deal_id=deal_id,
            category=body.category,
            severity=body.severity,
            status=ConditionStatus.OPEN,
            summary=body.summary.strip(),
            details=body.details,
            source=body.source,
            external_ref=body.external_ref,
            discovered_at=utcnow(),
        )
        self.db.add(condition)
        await self.db.flush()

        await self.events.append(
            deal_id,
            CONDITION_OPENED,
            {
                "conditionId": str(condition.id),
                "category": condition.category.value,
                "severity": condition.severity.value,
                "summary": condition.summary,
                "userId": str(user_id),
            },
        )
        logger.info(
            "legal_condition_opened",
            deal_id=str(deal_id),
            condition_id=str(condition.id),
            severity=condition.severity.value,
            blocking=condition.severity == ConditionSeverity.BLOCKING,
        )
        return condition

    async def resolve(
        self, deal_id: uuid.UUID, condition_id: uuid.UUID, user_id: uuid.UUID
    ) -> LegalCondition:
        """OPEN -> RESOLVED. Resolving an already resolved issue returns it unchanged."""
        condition = await self._get(deal_id, condition_id)
        if condition.status == ConditionStatus.RESOLVED:
            logger.debug(
                "legal_condition_already_resolved",
                deal_id=str(deal_id),
                condition_id=str(condition_id),
            )
            return condition

        condition.status = ConditionStatus.RESOLVED
        condition.resolved_at = utcnow()
        await self.db.flush()
        await self.db.refresh(condition)

        await self.events.append(
            deal_id,
            CONDITION_RESOLVED,
            {
                "conditionId": str(condition.id),
                "severity": condition.severity.value,
                "summary": condition.summary,
                "userId": str(user_id),
            },
        )
        logger.info(
            "legal_condition_resolved",
            deal_id=str(deal_id),
            condition_id=str(condition.id),
        )
        return condition

    async def update(
        self, deal_id: uuid.UUID, condition_id: uuid.UUID, body: ConditionUpdate
    ) -> LegalCondition:
        condition = await self._get(deal_id, condition_id)
        changes = body.model_dump(exclude_unset=True)
        if changes.get("summary") is None:
            changes.pop("summary", None)
        for field, value in changes.items():
            setattr(condition, field, value)
        await self.db.flush()
        await self.db.refresh(condition)
        logger.info(
            "legal_condition_updated",
            deal_id=str(deal_id),
            condition_id=str(condition_id),
            fields=sorted(changes),
        )
        return condition
