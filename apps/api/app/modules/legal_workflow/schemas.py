"""Legal workflow schemas: legal state, stage changes, metadata records."""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import AnyHttpUrl, Field, field_serializer

from app.models.enums import LegalStage
from app.modules.deal_events.schemas import DealEventResponse
from app.schemas.common import CamelModel

# ── Metadata writes ───────────────────────────────────────────────────────────


class _MetadataWrite(CamelModel):
    external_url: AnyHttpUrl | None = None

    def changes(self) -> dict:
        """Fields the client actually sent, JSON-safe and camelCased for the event log."""
        return self.model_dump(mode="json", exclude_unset=True, by_alias=True)

    def column_values(self) -> dict:
        values = self.model_dump(exclude_unset=True)
        if values.get("external_url") is not None:
            values["external_url"] = str(values["external_url"])
        return values


class ContractMetadataUpdate(_MetadataWrite):
    seller_name: str | None = Field(default=None, max_length=255)
    buyer_name: str | None = Field(default=None, max_length=255)
    contract_price: Decimal | None = Field(default=None, gt=0, max_digits=12, decimal_places=2)
    contract_date: datetime | None = None


class AssignmentMetadataUpdate(_MetadataWrite):
    end_buyer_name: str | None = Field(default=None, max_length=255)
    assignment_fee: Decimal | None = Field(default=None, gt=0, max_digits=12, decimal_places=2)
    assignment_date: datetime | None = None


class TitleMetadataUpdate(_MetadataWrite):
    title_company: str | None = Field(default=None, max_length=255)
    escrow_officer: str | None = Field(default=None, max_length=255)
    escrow_number: str | None = Field(default=None, max_length=100)
    expected_close_date: datetime | None = None


# ── Metadata reads ────────────────────────────────────────────────────────────


class _MetadataResponse(CamelModel):
    id: uuid.UUID
    deal_id: uuid.UUID
    external_url: str | None
    version: int
    created_at: datetime
    updated_at: datetime


class ContractMetadataResponse(_MetadataResponse):
    seller_name: str | None
    buyer_name: str | None
    contract_price: Decimal | None
    contract_date: datetime | None

    @field_serializer("contract_price")
    def _price(self, value: Decimal | None) -> float | None:
        return float(value) if value is not None else None


class AssignmentMetadataResponse(_MetadataResponse):
    end_buyer_name: str | None
    assignment_fee: Decimal | None
    assignment_date: datetime | None

    @field_serializer("assignment_fee")
    def _fee(self, value: Decimal | None) -> float | None:
        return float(value) if value is not None else None


class TitleMetadataResponse(_MetadataResponse):
    title_company: str | None
    escrow_officer: str | None
    escrow_number: str | None
    expected_close_date: datetime | None


# ── Legal state ───────────────────────────────────────────────────────────────


class LegalStateResponse(CamelModel):
    deal_id: uuid.UUID
    legal_stage: LegalStage
    contract_metadata: ContractMetadataResponse | None = None
    assignment_metadata: AssignmentMetadataResponse | None = None
    title_metadata: TitleMetadataResponse | None = None
    recent_events: list[DealEventResponse] = []


class StageChangeResponse(LegalStateResponse):
    previous_stage: LegalStage
    warnings: list[str] = []


class BlockersResponse(CamelModel):
    blockers: list[str]
    warnings: list[str]
    current_stage: LegalStage


# ── Stage change requests ─────────────────────────────────────────────────────


class StageAdvanceRequest(CamelModel):
    # Free text so unknown stage names surface as InvalidTransition, not 422
    stage: str = Field(..., min_length=1, max_length=64)
    expected_stage: LegalStage | None = None


class StageRollbackRequest(CamelModel):
    stage: str = Field(..., min_length=1, max_length=64)
    reason: str = Field(..., min_length=1, max_length=2000)
    expected_stage: LegalStage | None = None


class MarkDeadRequest(CamelModel):
    reason: str | None = Field(default=None, max_length=2000)
    expected_stage: LegalStage | None = None
