"""Legal workflow: async service layer.

Owns the deal's legal stage (advance, rollback, mark dead) and its per-kind
metadata records. Every stage write locks the deal row, re-checks the stage it
read in the UPDATE itself, and appends the matching ``stage_transition`` event
in the same transaction.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import BlockedTransition, InvalidTransition, StaleState
from app.core.timeutils import utcnow
from app.models.deals import (
    AssignmentMetadata,
    ContractMetadata,
    Deal,
    DealEvent,
    TitleMetadata,
)
from app.models.enums import DealStatus, LegalStage
from app.modules.deal_events.service import STAGE_TRANSITION, DealEventService
from app.modules.legal_conditions.service import LegalConditionService
from app.modules.legal_workflow import jurisdiction, stages
from app.modules.legal_workflow.deals import get_deal
from app.modules.legal_workflow.schemas import (
    AssignmentMetadataUpdate,
    ContractMetadataUpdate,
    TitleMetadataUpdate,
)

logger = structlog.get_logger()

METADATA_MODELS: dict[str, type] = {
    "contract": ContractMetadata,
    "assignment": AssignmentMetadata,
    "title": TitleMetadata,
}

MetadataUpdate = ContractMetadataUpdate | AssignmentMetadataUpdate | TitleMetadataUpdate


@dataclass
class LegalState:
    deal: Deal
    contract: ContractMetadata | None = None
    assignment: AssignmentMetadata | None = None
    title: TitleMetadata | None = None
    recent_events: list[DealEvent] = field(default_factory=list)

    @property
    def metadata(self) -> dict[str, Any]:
        return {
            "contract": self.contract,
            "assignment": self.assignment,
            "title": self.title,
        }


@dataclass
class StageChange:
    state: LegalState
    previous_stage: LegalStage
    warnings: list[str] = field(default_factory=list)


class LegalWorkflowService:
    def __init__(self, db: AsyncSession, org_id: uuid.UUID) -> None:
        self.db = db
        self.org_id = org_id
        self.events = DealEventService(db)
        self.conditions = LegalConditionService(db, org_id)

    # ── Reads ─────────────────────────────────────────────────────────────────

    async def _load_metadata(self, deal_id: uuid.UUID) -> dict[str, Any]:
        records: dict[str, Any] = {}
        for kind, model in METADATA_MODELS.items():
            result = await self.db.execute(select(model).where(model.deal_id == deal_id))
            records[kind] = result.scalar_one_or_none()
        return records

    async def _state(self, deal: Deal, with_events: bool = True) -> LegalState:
        metadata = await self._load_metadata(deal.id)
        events = await self.events.list(deal.id) if with_events else []
        return LegalState(deal=deal, recent_events=events, **metadata)

    async def get_state(self, deal_id: uuid.UUID) -> LegalState:
        deal = await get_deal(self.db, self.org_id, deal_id)
        return await self._state(deal)

    async def list_events(
        self,
        deal_id: uuid.UUID,
        limit: int | None = None,
        event_type: str | None = None,
    ) -> list[DealEvent]:
        await get_deal(self.db, self.org_id, deal_id)
        return await self.events.list(deal_id, limit=limit, event_type=event_type)

    async def _evaluate(
        self, deal: Deal, target: LegalStage | None, metadata: dict[str, Any]
    ) -> tuple[list[str], list[str]]:
        """Blockers and warnings for moving ``deal`` into ``target``."""
        blockers, warnings = await self.conditions.open_summaries(deal.id)
        if target is None:
            return blockers, warnings

        profile = await jurisdiction.load_profile(self.db, deal.lead_state, deal.lead_county)
        blockers = blockers + jurisdiction.missing_required_fields(target, metadata, profile)
        warnings = warnings + jurisdiction.stage_warnings(target, metadata, profile)
        return blockers, warnings

    async def get_blockers(
        self, deal_id: uuid.UUID
    ) -> tuple[list[str], list[str], LegalStage]:
        """What currently stands between the deal and its next stage."""
        deal = await get_deal(self.db, self.org_id, deal_id)
        metadata = await self._load_metadata(deal.id)
        blockers, warnings = await self._evaluate(
            deal, stages.successor(deal.legal_stage), metadata
        )
        return blockers, warnings, deal.legal_stage

    # ── Stage writes ──────────────────────────────────────────────────────────

    async def _lock(
        self, deal_id: uuid.UUID, expected_stage: LegalStage | None
    ) -> Deal:
        deal = await get_deal(self.db, self.org_id, deal_id, for_update=True)
        if expected_stage is not None and deal.legal_stage != expected_stage:
            raise StaleState(
                "Deal stage changed since it was last read",
                {
                    "currentStage": deal.legal_stage.value,
                    "expectedStage": expected_stage.value,
                },
            )
        return deal

    async def _write_stage(
        self,
        deal: Deal,
        new_stage: LegalStage,
        user_id: uuid.UUID,
        reason: str | None = None,
    ) -> LegalStage:
        previous = deal.legal_stage
        result = await self.db.execute(
            update(Deal)
            .where(Deal.id == deal.id, Deal.legal_stage == previous)
            .values(legal_stage=new_stage, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise StaleState(
                "Deal stage changed while the transition was in progress",
                {"expectedStage": previous.value},
            )
        await self.db.refresh(deal)

        rollback = stages.is_rollback(previous, new_stage)
        metadata: dict[str, Any] = {
            "previousStage": previous.value,
            "newStage": new_stage.value,
            "isRollback": rollback,
            "userId": str(user_id),
        }
        if reason:
            metadata["reason"] = reason
        await self.events.append(deal.id, STAGE_TRANSITION, metadata)

        logger.info(
            "legal_stage_changed",
            deal_id=str(deal.id),
            previous_stage=previous.value,
            new_stage=new_stage.value,
            is_rollback=rollback,
            user_id=str(user_id),
        )
        return previous

    async def advance(
        self,
        deal_id: uuid.UUID,
        target: str | LegalStage,
        user_id: uuid.UUID,
        expected_stage: LegalStage | None = None,
    ) -> StageChange:
        """Move the deal to the immediate next stage unless something blocks it."""
        target_stage = stages.parse_stage(target)
        deal = await self._lock(deal_id, expected_stage)

        stages.check_advance(deal.legal_stage, target_stage)
        if deal.status == DealStatus.CANCELLED:
            raise InvalidTransition(
                "Cannot advance legal stage on cancelled deal",
                {"dealStatus": deal.status.value},
            )

        metadata = await self._load_metadata(deal.id)
        blockers, warnings = await self._evaluate(deal, target_stage, metadata)
        if blockers:
            logger.info(
                "legal_stage_blocked",
                deal_id=str(deal.id),
                target_stage=target_stage.value,
                blocker_count=len(blockers),
            )
            raise BlockedTransition(
                f"Cannot transition to {target_stage.value}", blockers, warnings
            )

        previous = await self._write_stage(deal, target_stage, user_id)
        state = await self._state(deal)
        return StageChange(state=state, previous_stage=previous, warnings=warnings)

    async def rollback(
        self,
        deal_id: uuid.UUID,
        target: str | LegalStage,
        reason: str,
        user_id: uuid.UUID,
        expected_stage: LegalStage | None = None,
    ) -> StageChange:
        """Return the deal to an earlier stage. Not gated by open conditions."""
        reason = (reason or "").strip()
        if not reason:
            raise InvalidTransition("A rollback requires a reason")
        target_stage = stages.parse_stage(target)
        deal = await self._lock(deal_id, expected_stage)
        stages.check_rollback(deal.legal_stage, target_stage)

        previous = await self._write_stage(deal, target_stage, user_id, reason=reason)
        state = await self._state(deal)
        return StageChange(state=state, previous_stage=previous)

    async def mark_dead(
        self,
        deal_id: uuid.UUID,
        user_id: uuid.UUID,
        reason: str | None = None,
        expected_stage: LegalStage | None = None,
    ) -> StageChange:
        """Abandon the deal. Allowed from any non-terminal stage, blockers or not."""
        deal = await self._lock(deal_id, expected_stage)
        stages.check_mark_dead(deal.legal_stage)

        reason = reason.strip() if reason else None
        previous = await self._write_stage(deal, LegalStage.DEAD, user_id, reason=reason)
        state = await self._state(deal)
        return StageChange(state=state, previous_stage=previous)

    # ── Metadata writes ───────────────────────────────────────────────────────

    async def upsert_metadata(
        self,
        deal_id: uuid.UUID,
        kind: str,
        body: MetadataUpdate,
        user_id: uuid.UUID,
    ) -> LegalState:
        """Create or update one metadata record, bumping its version."""
        model = METADATA_MODELS[kind]
        deal = await get_deal(self.db, self.org_id, deal_id)

        result = await self.db.execute(
            select(model).where(model.deal_id == deal.id).with_for_update()
        )
        record = result.scalar_one_or_none()
        values = body.column_values()
        if record is None:
            record = model(deal_id=deal.id, version=1, **values)
            self.db.add(record)
        else:
            for column, value in values.items():
                setattr(record, column, value)
            record.version = record.version + 1
        await self.db.flush()
        await self.db.refresh(record)

        await self.events.append(
            deal.id,
            f"{kind}_metadata_updated",
            {
                "userId": str(user_id),
                "changes": body.changes(),
                "version": record.version,
            },
        )
        logger.info(
            "legal_metadata_updated",
            deal_id=str(deal.id),
            kind=kind,
            version=record.version,
            fields=sorted(values),
        )
        return await self._state(deal)
