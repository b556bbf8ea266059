"""Legal workflow core: deals, legal metadata, conditions, events, tasks.

Revision ID: 3f9a1c2d7e10
Revises:
Create Date: 2026-01-12 00:00:00.000000
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "3f9a1c2d7e10"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

# Enum types store member NAMES, matching SQLAlchemy's default Enum mapping
dealstatus = postgresql.ENUM("ACTIVE", "CLOSED", "CANCELLED", name="dealstatus", create_type=False)
legalstage = postgresql.ENUM(
    "PRE_CONTRACT",
    "UNDER_CONTRACT",
    "ASSIGNMENT_IN_PROGRESS",
    "ASSIGNED",
    "TITLE_CLEARING",
    "CLEARED_TO_CLOSE",
    "CLOSED",
    "DEAD",
    name="legalstage",
    create_type=False,
)
conditioncategory = postgresql.ENUM(
    "TITLE",
    "PROBATE",
    "LIEN",
    "HOA",
    "JUDGMENT",
    "HEIRSHIP",
    "MUNICIPAL",
    "CONTRACTUAL",
    "OTHER",
    name="conditioncategory",
    create_type=False,
)
conditionseverity = postgresql.ENUM(
    "INFORMATIONAL", "RISKY", "BLOCKING", name="conditionseverity", create_type=False
)
conditionstatus = postgresql.ENUM("OPEN", "RESOLVED", name="conditionstatus", create_type=False)
conditionsource = postgresql.ENUM(
    "TITLE_COMPANY",
    "ATTORNEY",
    "WHOLESALER",
    "BUYER",
    "SELLER",
    "OTHER",
    name="conditionsource",
    create_type=False,
)
taskstatus = postgresql.ENUM("PENDING", "COMPLETED", "CANCELLED", name="taskstatus", create_type=False)
taskurgency = postgresql.ENUM("LOW", "MEDIUM", "CRITICAL", name="taskurgency", create_type=False)

_ENUMS = (
    dealstatus,
    legalstage,
    conditioncategory,
    conditionseverity,
    conditionstatus,
    conditionsource,
    taskstatus,
    taskurgency,
)


def _id_column() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        nullable=False,
        server_default=sa.text("gen_random_uuid()"),
    )


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    ]


def _metadata_columns() -> list[sa.Column]:
    return [
        sa.Column("deal_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("external_url", sa.String(2000), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
    ]


def upgrade() -> None:
    bind = op.get_bind()
    for enum_type in _ENUMS:
        enum_type.create(bind, checkfirst=True)

    op.create_table(
        "deals",
        _id_column(),
        sa.Column("org_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("property_address", sa.String(500), nullable=True),
        sa.Column("status", dealstatus, nullable=False, server_default="ACTIVE"),
        sa.Column("legal_stage", legalstage, nullable=False, server_default="PRE_CONTRACT"),
        sa.Column("lead_state", sa.String(2), nullable=True),
        sa.Column("lead_county", sa.String(100), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_deals_org_id", "deals", ["org_id"])
    op.create_index("ix_deals_org_id_legal_stage", "deals", ["org_id", "legal_stage"])

    op.create_table(
        "contract_metadata",
        _id_column(),
        *_metadata_columns(),
        sa.Column("seller_name", sa.String(255), nullable=True),
        sa.Column("buyer_name", sa.String(255), nullable=True),
        sa.Column("contract_price", sa.Numeric(12, 2), nullable=True),
        sa.Column("contract_date", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["deal_id"], ["deals.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("deal_id"),
    )

    op.create_table(
        "assignment_metadata",
        _id_column(),
        *_metadata_columns(),
        sa.Column("end_buyer_name", sa.String(255), nullable=True),
        sa.Column("assignment_fee", sa.Numeric(12, 2), nullable=True),
        sa.Column("assignment_date", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["deal_id"], ["deals.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("deal_id"),
    )

    op.create_table(
        "title_metadata",
        _id_column(),
        *_metadata_columns(),
        sa.Column("title_company", sa.String(255), nullable=True),
        sa.Column("escrow_officer", sa.String(255), nullable=True),
        sa.Column("escrow_number", sa.String(100), nullable=True),
        sa.Column("expected_close_date", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["deal_id"], ["deals.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("deal_id"),
    )

    op.create_table(
        "deal_events",
        _id_column(),
        sa.Column("deal_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("event_type", sa.String(64), nullable=False),
        sa.Column("metadata", postgresql.JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.ForeignKeyConstraint(["deal_id"], ["deals.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_deal_events_deal_id_created_at", "deal_events", ["deal_id", "created_at"])
    op.create_index("ix_deal_events_deal_id_event_type", "deal_events", ["deal_id", "event_type"])

    op.create_table(
        "legal_conditions",
        _id_column(),
        sa.Column("deal_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("category", conditioncategory, nullable=False),
        sa.Column("severity", conditionseverity, nullable=False),
        sa.Column("status", conditionstatus, nullable=False, server_default="OPEN"),
        sa.Column("summary", sa.String(500), nullable=False),
        sa.Column("details", sa.Text(), nullable=True),
        sa.Column("source", conditionsource, nullable=True),
        sa.Column("external_ref", sa.String(255), nullable=True),
        sa.Column("discovered_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["deal_id"], ["deals.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_legal_conditions_deal_id_status", "legal_conditions", ["deal_id", "status"])
    op.create_index("ix_legal_conditions_deal_id_severity", "legal_conditions", ["deal_id", "severity"])

    op.create_table(
        "jurisdiction_profiles",
        _id_column(),
        sa.Column("state", sa.String(2), nullable=False),
        sa.Column("county", sa.String(100), nullable=True),
        sa.Column("profile_version", sa.String(16), nullable=False, server_default="1.0"),
        sa.Column("required_fields", postgresql.JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("timing_rules", postgresql.JSONB(), nullable=True),
        sa.Column("feature_flags", postgresql.JSONB(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("state", "county", "profile_version", name="uq_jurisdiction_profile"),
    )
    op.create_index("ix_jurisdiction_profiles_state", "jurisdiction_profiles", ["state"])

    op.create_table(
        "tasks",
        _id_column(),
        sa.Column("org_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("status", taskstatus, nullable=False, server_default="PENDING"),
        sa.Column("urgency", taskurgency, nullable=False, server_default="MEDIUM"),
        sa.Column("due_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_tasks_org_id_user_id", "tasks", ["org_id", "user_id"])
    op.create_index("ix_tasks_user_id_status", "tasks", ["user_id", "status"])


def downgrade() -> None:
    op.drop_index("ix_tasks_user_id_status", table_name="tasks")
    op.drop_index("ix_tasks_org_id_user_id", table_name="tasks")
    op.drop_table("tasks")
    op.drop_index("ix_jurisdiction_profiles_state", table_name="jurisdiction_profiles")
    op.drop_table("jurisdiction_profiles")
    op.drop_index("ix_legal_conditions_deal_id_severity", table_name="legal_conditions")
    op.drop_index("ix_legal_conditions_deal_id_status", table_name="legal_conditions")
    op.drop_table("legal_conditions")
    op.drop_index("ix_deal_events_deal_id_event_type", table_name="deal_events")
    op.drop_index("ix_deal_events_deal_id_created_at", table_name="deal_events")
    op.drop_table("deal_events")
    op.drop_table("title_metadata")
    op.drop_table("assignment_metadata")
    op.drop_table("contract_metadata")
    op.drop_index("ix_deals_org_id_legal_stage", table_name="deals")
    op.drop_index("ix_deals_org_id", table_name="deals")
    op.drop_table("deals")

    bind = op.get_bind()
    for enum_type in reversed(_ENUMS):
        enum_type.drop(bind, checkfirst=True)
