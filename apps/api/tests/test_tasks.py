"""HTTP tests for /v1/tasks."""

import uuid
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.tasks import Task
from tests.conftest import SAMPLE_ORG_ID

pytestmark = pytest.mark.anyio


def _parse(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


class TestCreateTask:
    async def test_date_is_lifted_out_of_title(self, client: AsyncClient):
        resp = await client.post("/v1/tasks", json={"title": "Call seller tomorrow 2pm"})
        assert resp.status_code == 201
        body = resp.json()
        assert body["title"] == "Call seller"
        assert body["dueAt"] is not None
        assert _parse(body["dueAt"]) > datetime.now(timezone.utc)
        assert body["status"] == "pending"
        assert body["urgency"] == "medium"

    async def test_explicit_due_at_wins_over_title(self, client: AsyncClient):
        resp = await client.post(
            "/v1/tasks",
            json={
                "title": "Walkthrough friday",
                "urgency": "critical",
                "dueAt": "2030-06-01T15:00:00Z",
            },
        )
        body = resp.json()
        assert body["title"] == "Walkthrough friday"
        assert _parse(body["dueAt"]) == datetime(2030, 6, 1, 15, tzinfo=timezone.utc)
        assert body["urgency"] == "critical"

    async def test_plain_title_has_no_due_date(self, client: AsyncClient):
        body = (await client.post("/v1/tasks", json={"title": "Pull comps"})).json()
        assert body["dueAt"] is None

    async def test_invalid_due_at_is_422(self, client: AsyncClient):
        resp = await client.post("/v1/tasks", json={"title": "x", "dueAt": "next blue moon"})
        assert resp.status_code == 422

    async def test_unknown_urgency_is_422(self, client: AsyncClient):
        resp = await client.post("/v1/tasks", json={"title": "x", "urgency": "asap"})
        assert resp.status_code == 422

    @pytest.mark.parametrize("zone", ["America/Chicago", "Asia/Tokyo"])
    async def test_title_time_is_read_in_user_timezone(self, client: AsyncClient, zone: str):
        resp = await client.post(
            "/v1/tasks", json={"title": "Call Nick at 6:00PM", "timezone": zone}
        )
        assert resp.status_code == 201
        body = resp.json()
        assert body["title"] == "Call Nick"
        local = _parse(body["dueAt"]).astimezone(ZoneInfo(zone))
        assert (local.hour, local.minute) == (18, 0)

    async def test_unknown_timezone_is_422(self, client: AsyncClient):
        resp = await client.post("/v1/tasks", json={"title": "x", "timezone": "Mars/Olympus"})
        assert resp.status_code == 422

    async def test_blank_title_is_422(self, client: AsyncClient):
        resp = await client.post("/v1/tasks", json={"title": "   "})
        assert resp.status_code == 422

    async def test_title_is_trimmed(self, client: AsyncClient):
        body = (await client.post("/v1/tasks", json={"title": "  Pull comps  "})).json()
        assert body["title"] == "Pull comps"

    async def test_viewer_cannot_create(self, viewer_client: AsyncClient):
        resp = await viewer_client.post("/v1/tasks", json={"title": "x"})
        assert resp.status_code == 403


class TestUpdateTask:
    async def test_new_title_is_reparsed(self, client: AsyncClient):
        task = (await client.post("/v1/tasks", json={"title": "Pull comps"})).json()
        resp = await client.patch(f"/v1/tasks/{task['id']}", json={"title": "Pull comps monday"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["title"] == "Pull comps"
        assert body["dueAt"] is not None

    async def test_reparse_uses_user_timezone(self, client: AsyncClient):
        task = (await client.post("/v1/tasks", json={"title": "Pull comps"})).json()
        resp = await client.patch(
            f"/v1/tasks/{task['id']}",
            json={"title": "Pull comps at 7:30am", "timezone": "Europe/Berlin"},
        )
        local = _parse(resp.json()["dueAt"]).astimezone(ZoneInfo("Europe/Berlin"))
        assert (local.hour, local.minute) == (7, 30)
        assert resp.json()["title"] == "Pull comps"

    async def test_blank_title_update_is_422(self, client: AsyncClient):
        task = (await client.post("/v1/tasks", json={"title": "Pull comps"})).json()
        resp = await client.patch(f"/v1/tasks/{task['id']}", json={"title": "  "})
        assert resp.status_code == 422

    async def test_null_due_at_clears(self, client: AsyncClient):
        task = (await client.post("/v1/tasks", json={"title": "Call title co tomorrow"})).json()
        assert task["dueAt"] is not None
        resp = await client.patch(f"/v1/tasks/{task['id']}", json={"dueAt": None})
        assert resp.json()["dueAt"] is None
        assert resp.json()["title"] == "Call title co"

    async def test_complete_task(self, client: AsyncClient):
        task = (await client.post("/v1/tasks", json={"title": "Send EMD"})).json()
        resp = await client.patch(f"/v1/tasks/{task['id']}", json={"status": "completed"})
        assert resp.json()["status"] == "completed"


class TestListAndDelete:
    async def test_pending_listed_first(self, client: AsyncClient):
        done = (await client.post("/v1/tasks", json={"title": "Done already"})).json()
        await client.patch(f"/v1/tasks/{done['id']}", json={"status": "completed"})
        await client.post("/v1/tasks", json={"title": "Still open"})

        titles = [t["title"] for t in (await client.get("/v1/tasks")).json()]
        assert titles == ["Still open", "Done already"]

    async def test_delete(self, client: AsyncClient):
        task = (await client.post("/v1/tasks", json={"title": "Temp"})).json()
        resp = await client.delete(f"/v1/tasks/{task['id']}")
        assert resp.status_code == 204
        assert (await client.get("/v1/tasks")).json() == []

    async def test_other_users_task_is_404(self, client: AsyncClient, db: AsyncSession):
        task = Task(org_id=SAMPLE_ORG_ID, user_id=uuid.uuid4(), title="Someone else's")
        db.add(task)
        await db.flush()

        assert (await client.patch(f"/v1/tasks/{task.id}", json={"status": "completed"})).status_code == 404
        assert (await client.delete(f"/v1/tasks/{task.id}")).status_code == 404
