"""Deal models: Deal, per-kind legal metadata records, DealEvent audit log."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel, JSONType, TimestampedModel
from app.models.enums import DealStatus, LegalStage


class Deal(BaseModel):
    """A wholesaling deal. Owned by the deals CRUD layer; this core only writes legal_stage."""

    __tablename__ = "deals"
    __table_args__ = (
        Index("ix_deals_org_id", "org_id"),
        Index("ix_deals_org_id_legal_stage", "org_id", "legal_stage"),
    )

    org_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    property_address: Mapped[str | None] = mapped_column(String(500))
    status: Mapped[DealStatus] = mapped_column(nullable=False, default=DealStatus.ACTIVE)
    legal_stage: Mapped[LegalStage] = mapped_column(
        nullable=False, default=LegalStage.PRE_CONTRACT
    )
    # Two-letter state / county of the underlying lead, used for jurisdiction profiles
    lead_state: Mapped[str | None] = mapped_column(String(2))
    lead_county: Mapped[str | None] = mapped_column(String(100))

    def __repr__(self) -> str:
        return f"<Deal(id={self.id}, legal_stage={self.legal_stage.value})>"


class _DealMetadataMixin:
    deal_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("deals.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    external_url: Mapped[str | None] = mapped_column(String(2000))
    # Incremented on every write; the event log records which version a change produced
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)


class ContractMetadata(_DealMetadataMixin, BaseModel):
    __tablename__ = "contract_metadata"

    seller_name: Mapped[str | None] = mapped_column(String(255))
    buyer_name: Mapped[str | None] = mapped_column(String(255))
    contract_price: Mapped[Decimal | None] = mapped_column()
    contract_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))


class AssignmentMetadata(_DealMetadataMixin, BaseModel):
    __tablename__ = "assignment_metadata"

    end_buyer_name: Mapped[str | None] = mapped_column(String(255))
    assignment_fee: Mapped[Decimal | None] = mapped_column()
    assignment_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))


class TitleMetadata(_DealMetadataMixin, BaseModel):
    __tablename__ = "title_metadata"

    title_company: Mapped[str | None] = mapped_column(String(255))
    escrow_officer: Mapped[str | None] = mapped_column(String(255))
    escrow_number: Mapped[str | None] = mapped_column(String(100))
    expected_close_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))


class DealEvent(TimestampedModel):
    """Append-only audit log entry. Never updated or deleted."""

    __tablename__ = "deal_events"
    __table_args__ = (
        Index("ix_deal_events_deal_id_created_at", "deal_id", "created_at"),
        Index("ix_deal_events_deal_id_event_type", "deal_id", "event_type"),
    )

    deal_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("deals.id", ondelete="CASCADE"),
        nullable=False,
    )
    event_type: Mapped[str] = mapped_column(String(64), nullable=False)
    metadata_: Mapped[dict[str, Any]] = mapped_column(
        "metadata", JSONType, nullable=False, default=dict
    )

    def __repr__(self) -> str:
        return f"<DealEvent(id={self.id}, event_type={self.event_type!r})>"
