"""Legal models: LegalCondition ("issue") registry and JurisdictionProfile."""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.core.timeutils import utcnow
from app.models.base import BaseModel, JSONType
from app.models.enums import (
    ConditionCategory,
    ConditionSeverity,
    ConditionSource,
    ConditionStatus,
)


class LegalCondition(BaseModel):
    __tablename__ = "legal_conditions"
    __table_args__ = (
        Index("ix_legal_conditions_deal_id_status", "deal_id", "status"),
        Index("ix_legal_conditions_deal_id_severity", "deal_id", "severity"),
    )

    deal_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("deals.id", ondelete="CASCADE"),
        nullable=False,
    )
    category: Mapped[ConditionCategory] = mapped_column(nullable=False)
    severity: Mapped[ConditionSeverity] = mapped_column(nullable=False)
    status: Mapped[ConditionStatus] = mapped_column(
        nullable=False, default=ConditionStatus.OPEN
    )
    summary: Mapped[str] = mapped_column(String(500), nullable=False)
    details: Mapped[str | None] = mapped_column(Text)
    source: Mapped[ConditionSource | None] = mapped_column()
    external_ref: Mapped[str | None] = mapped_column(String(255))
    discovered_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    @property
    def is_blocker(self) -> bool:
        return (
            self.status == ConditionStatus.OPEN
            and self.severity == ConditionSeverity.BLOCKING
        )

    @property
    def is_warning(self) -> bool:
        return (
            self.status == ConditionStatus.OPEN
            and self.severity == ConditionSeverity.RISKY
        )

    def __repr__(self) -> str:
        return (
            f"<LegalCondition(id={self.id}, severity={self.severity.value}, "
            f"status={self.status.value})>"
        )


class JurisdictionProfile(BaseModel):
    """Per state (optionally per county) rules for what a stage requires."""

    __tablename__ = "jurisdiction_profiles"
    __table_args__ = (
        UniqueConstraint("state", "county", "profile_version", name="uq_jurisdiction_profile"),
        Index("ix_jurisdiction_profiles_state", "state"),
    )

    state: Mapped[str] = mapped_column(String(2), nullable=False)
    county: Mapped[str | None] = mapped_column(String(100))
    profile_version: Mapped[str] = mapped_column(String(16), nullable=False, default="1.0")
    # {"UNDER_CONTRACT": ["contract.seller_name", ...], ...}
    required_fields: Mapped[dict[str, list[str]]] = mapped_column(
        JSONType, nullable=False, default=dict
    )
    timing_rules: Mapped[dict[str, Any] | None] = mapped_column(JSONType)
    feature_flags: Mapped[dict[str, bool] | None] = mapped_column(JSONType)
