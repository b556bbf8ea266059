"""Legal workflow: FastAPI router."""

import uuid

import structlog
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import SUPERVISOR_ROLES, WRITE_ROLES, get_current_user, require_role
from app.core.database import get_db
from app.modules.deal_events.schemas import DealEventListResponse, DealEventResponse
from app.modules.deal_events.service import MAX_LIST_LIMIT
from app.modules.legal_workflow.schemas import (
    AssignmentMetadataResponse,
    AssignmentMetadataUpdate,
    BlockersResponse,
    ContractMetadataResponse,
    ContractMetadataUpdate,
    LegalStateResponse,
    MarkDeadRequest,
    StageAdvanceRequest,
    StageChangeResponse,
    StageRollbackRequest,
    TitleMetadataResponse,
    TitleMetadataUpdate,
)
from app.modules.legal_workflow.service import LegalState, LegalWorkflowService, StageChange
from app.schemas.auth import CurrentUser

logger = structlog.get_logger()

router = APIRouter(prefix="/deals", tags=["Legal Workflow"])


def _svc(db: AsyncSession, current_user: CurrentUser) -> LegalWorkflowService:
    return LegalWorkflowService(db, current_user.org_id)


def _validate(schema, record):
    return schema.model_validate(record) if record is not None else None


def _state_response(state: LegalState) -> LegalStateResponse:
    return LegalStateResponse(
        deal_id=state.deal.id,
        legal_stage=state.deal.legal_stage,
        contract_metadata=_validate(ContractMetadataResponse, state.contract),
        assignment_metadata=_validate(AssignmentMetadataResponse, state.assignment),
        title_metadata=_validate(TitleMetadataResponse, state.title),
        recent_events=[DealEventResponse.model_validate(e) for e in state.recent_events],
    )


def _change_response(change: StageChange) -> StageChangeResponse:
    base = _state_response(change.state)
    return StageChangeResponse(
        **dict(base),
        previous_stage=change.previous_stage,
        warnings=change.warnings,
    )


# ── Reads ─────────────────────────────────────────────────────────────────────


@router.get("/{deal_id}/legal", response_model=LegalStateResponse)
async def get_legal_state(
    deal_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> LegalStateResponse:
    """Stage, metadata records and the 50 most recent events of a deal."""
    state = await _svc(db, current_user).get_state(deal_id)
    return _state_response(state)


@router.get("/{deal_id}/legal/blockers", response_model=BlockersResponse)
async def get_blockers(
    deal_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> BlockersResponse:
    blockers, warnings, current_stage = await _svc(db, current_user).get_blockers(deal_id)
    return BlockersResponse(blockers=blockers, warnings=warnings, current_stage=current_stage)


@router.get("/{deal_id}/legal/events", response_model=DealEventListResponse)
async def list_events(
    deal_id: uuid.UUID,
    limit: int = Query(default=50, ge=1, le=MAX_LIST_LIMIT),
    event_type: str | None = Query(default=None, alias="eventType"),
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> DealEventListResponse:
    events = await _svc(db, current_user).list_events(deal_id, limit=limit, event_type=event_type)
    return DealEventListResponse(events=[DealEventResponse.model_validate(e) for e in events])


# ── Stage changes ─────────────────────────────────────────────────────────────


@router.patch("/{deal_id}/legal/stage", response_model=StageChangeResponse)
async def advance_stage(
    deal_id: uuid.UUID,
    body: StageAdvanceRequest,
    current_user: CurrentUser = Depends(require_role(WRITE_ROLES)),
    db: AsyncSession = Depends(get_db),
) -> StageChangeResponse:
    """Advance to the next stage. 409 with the blocker list when something blocks it."""
    change = await _svc(db, current_user).advance(
        deal_id, body.stage, current_user.user_id, expected_stage=body.expected_stage
    )
    await db.commit()
    return _change_response(change)


@router.post("/{deal_id}/legal/rollback", response_model=StageChangeResponse)
async def rollback_stage(
    deal_id: uuid.UUID,
    body: StageRollbackRequest,
    current_user: CurrentUser = Depends(require_role(SUPERVISOR_ROLES)),
    db: AsyncSession = Depends(get_db),
) -> StageChangeResponse:
    change = await _svc(db, current_user).rollback(
        deal_id,
        body.stage,
        body.reason,
        current_user.user_id,
        expected_stage=body.expected_stage,
    )
    await db.commit()
    return _change_response(change)


@router.post("/{deal_id}/legal/dead", response_model=StageChangeResponse)
async def mark_dead(
    deal_id: uuid.UUID,
    body: MarkDeadRequest,
    current_user: CurrentUser = Depends(require_role(SUPERVISOR_ROLES)),
    db: AsyncSession = Depends(get_db),
) -> StageChangeResponse:
    change = await _svc(db, current_user).mark_dead(
        deal_id, current_user.user_id, reason=body.reason, expected_stage=body.expected_stage
    )
    await db.commit()
    return _change_response(change)


# ── Metadata ──────────────────────────────────────────────────────────────────


@router.put("/{deal_id}/legal/contract", response_model=LegalStateResponse)
async def upsert_contract_metadata(
    deal_id: uuid.UUID,
    body: ContractMetadataUpdate,
    current_user: CurrentUser = Depends(require_role(WRITE_ROLES)),
    db: AsyncSession = Depends(get_db),
) -> LegalStateResponse:
    state = await _svc(db, current_user).upsert_metadata(
        deal_id, "contract", body, current_user.user_id
    )
    await db.commit()
    return _state_response(state)


@router.put("/{deal_id}/legal/assignment", response_model=LegalStateResponse)
async def upsert_assignment_metadata(
    deal_id: uuid.UUID,
    body: AssignmentMetadataUpdate,
    current_user: CurrentUser = Depends(require_role(WRITE_ROLES)),
    db: AsyncSession = Depends(get_db),
) -> LegalStateResponse:
    state = await _svc(db, current_user).upsert_metadata(
        deal_id, "assignment", body, current_user.user_id
    )
    await db.commit()
    return _state_response(state)


@router.put("/{deal_id}/legal/title", response_model=LegalStateResponse)
async def upsert_title_metadata(
    deal_id: uuid.UUID,
    body: TitleMetadataUpdate,
    current_user: CurrentUser = Depends(require_role(WRITE_ROLES)),
    db: AsyncSession = Depends(get_db),
) -> LegalStateResponse:
    state = await _svc(db, current_user).upsert_metadata(
        deal_id, "title", body, current_user.user_id
    )
    await db.commit()
    return _state_response(state)
