"""Org-scoped deal lookup shared by the legal modules."""

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFound
from app.models.deals import Deal


async def get_deal(
    db: AsyncSession,
    org_id: uuid.UUID,
    deal_id: uuid.UUID,
    for_update: bool = False,
) -> Deal:
    """Load a deal of ``org_id``. Another org's deal is indistinguishable from a missing one."""
    stmt = select(Deal).where(Deal.id == deal_id, Deal.org_id == org_id)
    if for_update:
        stmt = stmt.with_for_update()
    result = await db.execute(stmt)
    deal = result.scalar_one_or_none()
    if deal is None:
        raise NotFound("Deal not found", {"dealId": str(deal_id)})
    return deal
