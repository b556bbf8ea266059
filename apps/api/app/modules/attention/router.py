"""Attention: FastAPI router. Polled by the dashboard; read-only."""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.core.database import get_readonly_db
from app.modules.attention.schemas import (
    DealAttentionResponse,
    DealSignalResponse,
    FeedSignalResponse,
    NeedsAttentionFeedResponse,
    TaskAttentionResponse,
)
from app.modules.attention.service import AttentionService
from app.modules.tasks.schemas import TaskResponse
from app.schemas.auth import CurrentUser

router = APIRouter(tags=["Attention"])


@router.get("/deals/needs-attention", response_model=NeedsAttentionFeedResponse)
async def deals_needing_attention(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_readonly_db),
) -> NeedsAttentionFeedResponse:
    """Cross-deal feed of every signal firing in the caller's org."""
    feed = await AttentionService(db, current_user.org_id).needs_attention_feed()
    return NeedsAttentionFeedResponse(
        signals=[FeedSignalResponse.model_validate(s) for s in feed]
    )


@router.get("/deals/{deal_id}/legal/attention", response_model=DealAttentionResponse)
async def deal_attention(
    deal_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_readonly_db),
) -> DealAttentionResponse:
    result = await AttentionService(db, current_user.org_id).for_deal(deal_id)
    return DealAttentionResponse(
        deal_id=result.deal_id,
        severity=result.severity,
        signals=[DealSignalResponse.model_validate(s) for s in result.signals],
    )


@router.get("/tasks/needs-attention", response_model=TaskAttentionResponse)
async def tasks_needing_attention(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_readonly_db),
) -> TaskAttentionResponse:
    result = await AttentionService(db, current_user.org_id).for_tasks(current_user.user_id)
    return TaskAttentionResponse(
        triage=[TaskResponse.model_validate(t) for t in result.triage],
        missed=[TaskResponse.model_validate(t) for t in result.missed],
        total_count=result.total_count,
        critical_count=result.critical_count,
        alert=result.alert,
    )
