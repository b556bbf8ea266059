"""HTTP tests for /v1/deals/{id}/legal/*."""

import uuid

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.deals import Deal
from app.models.enums import ConditionSeverity, LegalStage
from tests.conftest import OTHER_ORG_ID, add_condition, create_deal

pytestmark = pytest.mark.anyio


class TestLegalState:
    async def test_get_legal_state(self, client: AsyncClient, sample_deal: Deal):
        resp = await client.get(f"/v1/deals/{sample_deal.id}/legal")
        assert resp.status_code == 200
        body = resp.json()
        assert body["dealId"] == str(sample_deal.id)
        assert body["legalStage"] == "UNDER_CONTRACT"
        assert body["contractMetadata"] is None
        assert body["recentEvents"] == []

    async def test_unknown_deal_is_404(self, client: AsyncClient):
        resp = await client.get(f"/v1/deals/{uuid.uuid4()}/legal")
        assert resp.status_code == 404
        assert resp.json()["error"] == "not_found"

    async def test_other_org_deal_is_404(self, client: AsyncClient, db: AsyncSession):
        deal = await create_deal(db, org_id=OTHER_ORG_ID)
        resp = await client.get(f"/v1/deals/{deal.id}/legal")
        assert resp.status_code == 404

    async def test_requires_bearer_token(self, anonymous_client: AsyncClient, db: AsyncSession):
        deal = await create_deal(db)
        resp = await anonymous_client.get(f"/v1/deals/{deal.id}/legal")
        assert resp.status_code in (401, 403)


class TestAdvanceEndpoint:
    async def test_advance_returns_state_and_warnings(
        self, client: AsyncClient, db: AsyncSession, sample_deal: Deal
    ):
        await add_condition(db, sample_deal, severity=ConditionSeverity.RISKY, summary="Heirs unknown")
        resp = await client.patch(
            f"/v1/deals/{sample_deal.id}/legal/stage",
            json={"stage": "ASSIGNMENT_IN_PROGRESS"},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["legalStage"] == "ASSIGNMENT_IN_PROGRESS"
        assert body["previousStage"] == "UNDER_CONTRACT"
        assert "Heirs unknown" in body["warnings"]
        [event] = body["recentEvents"]
        assert event["eventType"] == "stage_transition"
        assert event["metadata"]["isRollback"] is False

    async def test_blocked_advance_is_409_with_blockers(
        self, client: AsyncClient, db: AsyncSession, sample_deal: Deal
    ):
        await add_condition(db, sample_deal, summary="Mechanic's lien")
        resp = await client.patch(
            f"/v1/deals/{sample_deal.id}/legal/stage",
            json={"stage": "ASSIGNMENT_IN_PROGRESS"},
        )
        assert resp.status_code == 409
        body = resp.json()
        assert body["error"] == "blocked_transition"
        assert body["blockers"] == ["Mechanic's lien"]

    async def test_skip_is_400(self, client: AsyncClient, sample_deal: Deal):
        resp = await client.patch(
            f"/v1/deals/{sample_deal.id}/legal/stage", json={"stage": "CLOSED"}
        )
        assert resp.status_code == 400
        assert resp.json()["error"] == "invalid_transition"

    async def test_terminal_is_409(self, client: AsyncClient, db: AsyncSession):
        deal = await create_deal(db, stage=LegalStage.CLOSED)
        resp = await client.patch(f"/v1/deals/{deal.id}/legal/stage", json={"stage": "DEAD"})
        assert resp.status_code == 409
        assert resp.json()["error"] == "terminal_stage"

    async def test_stale_expected_stage_is_409(self, client: AsyncClient, sample_deal: Deal):
        resp = await client.patch(
            f"/v1/deals/{sample_deal.id}/legal/stage",
            json={"stage": "ASSIGNMENT_IN_PROGRESS", "expectedStage": "PRE_CONTRACT"},
        )
        assert resp.status_code == 409
        assert resp.json()["error"] == "stale_state"

    async def test_duplicate_advance_is_409_stale(self, client: AsyncClient, sample_deal: Deal):
        url = f"/v1/deals/{sample_deal.id}/legal/stage"
        first = await client.patch(url, json={"stage": "ASSIGNMENT_IN_PROGRESS"})
        assert first.status_code == 200
        second = await client.patch(url, json={"stage": "ASSIGNMENT_IN_PROGRESS"})
        assert second.status_code == 409
        assert second.json()["error"] == "stale_state"

    async def test_viewer_cannot_advance(self, viewer_client: AsyncClient, sample_deal: Deal):
        resp = await viewer_client.patch(
            f"/v1/deals/{sample_deal.id}/legal/stage",
            json={"stage": "ASSIGNMENT_IN_PROGRESS"},
        )
        assert resp.status_code == 403


class TestRollbackAndDeadEndpoints:
    async def test_member_cannot_roll_back(self, client: AsyncClient, sample_deal: Deal):
        resp = await client.post(
            f"/v1/deals/{sample_deal.id}/legal/rollback",
            json={"stage": "PRE_CONTRACT", "reason": "Contract voided"},
        )
        assert resp.status_code == 403

    async def test_manager_rolls_back(self, manager_client: AsyncClient, sample_deal: Deal):
        resp = await manager_client.post(
            f"/v1/deals/{sample_deal.id}/legal/rollback",
            json={"stage": "PRE_CONTRACT", "reason": "Contract voided"},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["legalStage"] == "PRE_CONTRACT"
        assert body["recentEvents"][0]["metadata"]["isRollback"] is True

    async def test_rollback_without_reason_is_422(
        self, manager_client: AsyncClient, sample_deal: Deal
    ):
        resp = await manager_client.post(
            f"/v1/deals/{sample_deal.id}/legal/rollback", json={"stage": "PRE_CONTRACT"}
        )
        assert resp.status_code == 422

    async def test_manager_marks_dead(
        self, manager_client: AsyncClient, db: AsyncSession, sample_deal: Deal
    ):
        await add_condition(db, sample_deal)
        resp = await manager_client.post(
            f"/v1/deals/{sample_deal.id}/legal/dead", json={"reason": "Seller died intestate"}
        )
        assert resp.status_code == 200
        assert resp.json()["legalStage"] == "DEAD"


class TestBlockersAndEvents:
    async def test_blockers_view(self, client: AsyncClient, db: AsyncSession, sample_deal: Deal):
        await add_condition(db, sample_deal, summary="Open judgment")
        await add_condition(db, sample_deal, severity=ConditionSeverity.RISKY, summary="HOA letter")
        resp = await client.get(f"/v1/deals/{sample_deal.id}/legal/blockers")
        assert resp.status_code == 200
        body = resp.json()
        assert body["blockers"] == ["Open judgment"]
        assert body["warnings"] == ["HOA letter"]
        assert body["currentStage"] == "UNDER_CONTRACT"

    async def test_events_feed_newest_first(self, manager_client: AsyncClient, sample_deal: Deal):
        await manager_client.patch(
            f"/v1/deals/{sample_deal.id}/legal/stage", json={"stage": "ASSIGNMENT_IN_PROGRESS"}
        )
        await manager_client.post(
            f"/v1/deals/{sample_deal.id}/legal/rollback",
            json={"stage": "UNDER_CONTRACT", "reason": "Buyer financing fell through"},
        )
        resp = await manager_client.get(f"/v1/deals/{sample_deal.id}/legal/events")
        assert resp.status_code == 200
        stages = [e["metadata"]["newStage"] for e in resp.json()["events"]]
        assert stages == ["UNDER_CONTRACT", "ASSIGNMENT_IN_PROGRESS"]

    async def test_events_limit_validated(self, client: AsyncClient, sample_deal: Deal):
        resp = await client.get(f"/v1/deals/{sample_deal.id}/legal/events", params={"limit": 0})
        assert resp.status_code == 422


class TestIssuesEndpoints:
    async def test_issue_lifecycle(self, client: AsyncClient, sample_deal: Deal):
        resp = await client.post(
            f"/v1/deals/{sample_deal.id}/legal/issues",
            json={
                "category": "HEIRSHIP",
                "severity": "BLOCKING",
                "summary": "Missing heir signature",
                "source": "ATTORNEY",
                "externalRef": "MATTER-17",
            },
        )
        assert resp.status_code == 201
        issue = resp.json()
        assert issue["status"] == "OPEN"
        assert issue["externalRef"] == "MATTER-17"

        resp = await client.post(
            f"/v1/deals/{sample_deal.id}/legal/issues/{issue['id']}/resolve"
        )
        assert resp.status_code == 200
        assert resp.json()["status"] == "RESOLVED"
        resolved_at = resp.json()["resolvedAt"]

        resp = await client.post(
            f"/v1/deals/{sample_deal.id}/legal/issues/{issue['id']}/resolve"
        )
        assert resp.status_code == 200
        assert resp.json()["resolvedAt"] == resolved_at

        resp = await client.get(f"/v1/deals/{sample_deal.id}/legal/issues")
        body = resp.json()
        assert body["openIssues"] == []
        assert [i["id"] for i in body["resolvedIssues"]] == [issue["id"]]

    async def test_unknown_severity_is_422(self, client: AsyncClient, sample_deal: Deal):
        resp = await client.post(
            f"/v1/deals/{sample_deal.id}/legal/issues",
            json={"category": "LIEN", "severity": "CATASTROPHIC", "summary": "x"},
        )
        assert resp.status_code == 422

    async def test_patch_issue(self, client: AsyncClient, db: AsyncSession, sample_deal: Deal):
        condition = await add_condition(db, sample_deal)
        resp = await client.patch(
            f"/v1/deals/{sample_deal.id}/legal/issues/{condition.id}",
            json={"summary": "Lien paid, awaiting release", "severity": "RISKY"},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["summary"] == "Lien paid, awaiting release"
        assert body["severity"] == "BLOCKING"


class TestMetadataEndpoints:
    async def test_put_contract_metadata(self, client: AsyncClient, sample_deal: Deal):
        resp = await client.put(
            f"/v1/deals/{sample_deal.id}/legal/contract",
            json={
                "sellerName": "Jordan Seller",
                "contractPrice": 182500,
                "externalUrl": "https://docs.example.com/contract.pdf",
            },
        )
        assert resp.status_code == 200
        contract = resp.json()["contractMetadata"]
        assert contract["sellerName"] == "Jordan Seller"
        assert contract["contractPrice"] == 182500.0
        assert contract["version"] == 1
        assert resp.json()["recentEvents"][0]["eventType"] == "contract_metadata_updated"

    async def test_negative_fee_is_422(self, client: AsyncClient, sample_deal: Deal):
        resp = await client.put(
            f"/v1/deals/{sample_deal.id}/legal/assignment", json={"assignmentFee": -5}
        )
        assert resp.status_code == 422

    async def test_bad_url_is_422(self, client: AsyncClient, sample_deal: Deal):
        resp = await client.put(
            f"/v1/deals/{sample_deal.id}/legal/title", json={"externalUrl": "title folder"}
        )
        assert resp.status_code == 422
