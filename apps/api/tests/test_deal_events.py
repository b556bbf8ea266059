"""Tests for the append-only deal event log."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.timeutils import as_utc
from app.modules.deal_events.service import DealEventService
from tests.conftest import add_event, create_deal

pytestmark = pytest.mark.anyio


class TestAppend:
    async def test_created_at_strictly_increases(self, db: AsyncSession):
        deal = await create_deal(db)
        # An event stamped in the future forces the next append to be nudged past it
        future = await add_event(
            db, deal, "note", age=-timedelta(minutes=5), now=datetime.now(timezone.utc)
        )
        svc = DealEventService(db)

        first = await svc.append(deal.id, "stage_transition", {"newStage": "UNDER_CONTRACT"})
        second = await svc.append(deal.id, "condition_opened", {})

        assert as_utc(first.created_at) > as_utc(future.created_at)
        assert as_utc(second.created_at) > as_utc(first.created_at)

    async def test_metadata_defaults_to_empty(self, db: AsyncSession):
        deal = await create_deal(db)
        event = await DealEventService(db).append(deal.id, "condition_resolved")
        assert event.metadata_ == {}


class TestList:
    async def test_newest_first_with_type_filter(self, db: AsyncSession):
        deal = await create_deal(db)
        await add_event(db, deal, "stage_transition", age=timedelta(days=3))
        await add_event(db, deal, "condition_opened", age=timedelta(days=2))
        await add_event(db, deal, "stage_transition", age=timedelta(days=1))
        svc = DealEventService(db)

        events = await svc.list(deal.id)
        assert [e.event_type for e in events] == [
            "stage_transition",
            "condition_opened",
            "stage_transition",
        ]
        transitions = await svc.list(deal.id, event_type="stage_transition")
        assert len(transitions) == 2

    async def test_limit_is_bounded(self, db: AsyncSession):
        deal = await create_deal(db)
        for days in range(5):
            await add_event(db, deal, "note", age=timedelta(days=days))
        svc = DealEventService(db)

        assert len(await svc.list(deal.id, limit=2)) == 2
        assert len(await svc.list(deal.id, limit=0)) == 1
        assert len(await svc.list(deal.id, limit=10_000)) == 5

    async def test_latest_and_oldest(self, db: AsyncSession):
        deal = await create_deal(db)
        old = await add_event(db, deal, "stage_transition", age=timedelta(days=40))
        await add_event(db, deal, "condition_opened", age=timedelta(days=10))
        new = await add_event(db, deal, "note", age=timedelta(days=1))
        svc = DealEventService(db)

        assert (await svc.latest(deal.id)).id == new.id
        assert (await svc.latest(deal.id, event_type="stage_transition")).id == old.id
        assert (await svc.oldest(deal.id)).id == old.id

    async def test_empty_log(self, db: AsyncSession):
        deal = await create_deal(db)
        svc = DealEventService(db)
        assert await svc.list(deal.id) == []
        assert await svc.latest(deal.id) is None
        assert await svc.oldest(deal.id) is None
