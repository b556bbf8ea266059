"""Legal conditions ("issues"): FastAPI router."""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import WRITE_ROLES, get_current_user, require_role
from app.core.database import get_db
from app.modules.legal_conditions.schemas import (
    ConditionCreate,
    ConditionListResponse,
    ConditionResponse,
    ConditionUpdate,
)
from app.modules.legal_conditions.service import LegalConditionService
from app.schemas.auth import CurrentUser

router = APIRouter(prefix="/deals", tags=["Legal Conditions"])


def _svc(db: AsyncSession, current_user: CurrentUser) -> LegalConditionService:
    return LegalConditionService(db, current_user.org_id)


@router.get("/{deal_id}/legal/issues", response_model=ConditionListResponse)
async def list_issues(
    deal_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ConditionListResponse:
    open_issues, resolved = await _svc(db, current_user).list_issues(deal_id)
    return ConditionListResponse(
        open_issues=[ConditionResponse.model_validate(c) for c in open_issues],
        resolved_issues=[ConditionResponse.model_validate(c) for c in resolved],
    )


@router.post(
    "/{deal_id}/legal/issues",
    response_model=ConditionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def open_issue(
    deal_id: uuid.UUID,
    body: ConditionCreate,
    current_user: CurrentUser = Depends(require_role(WRITE_ROLES)),
    db: AsyncSession = Depends(get_db),
) -> ConditionResponse:
    """Record a new legal issue. BLOCKING issues stop stage advancement until resolved."""
    condition = await _svc(db, current_user).open(deal_id, body, current_user.user_id)
    await db.commit()
    return ConditionResponse.model_validate(condition)


@router.post("/{deal_id}/legal/issues/{issue_id}/resolve", response_model=ConditionResponse)
async def resolve_issue(
    deal_id: uuid.UUID,
    issue_id: uuid.UUID,
    current_user: CurrentUser = Depends(require_role(WRITE_ROLES)),
    db: AsyncSession = Depends(get_db),
) -> ConditionResponse:
    condition = await _svc(db, current_user).resolve(deal_id, issue_id, current_user.user_id)
    await db.commit()
    return ConditionResponse.model_validate(condition)


@router.patch("/{deal_id}/legal/issues/{issue_id}", response_model=ConditionResponse)
async def update_issue(
    deal_id: uuid.UUID,
    issue_id: uuid.UUID,
    body: ConditionUpdate,
    current_user: CurrentUser = Depends(require_role(WRITE_ROLES)),
    db: AsyncSession = Depends(get_db),
) -> ConditionResponse:
    condition = await _svc(db, current_user).update(deal_id, issue_id, body)
    await db.commit()
    return ConditionResponse.model_validate(condition)
