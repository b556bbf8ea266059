"""Jurisdiction profiles: per state/county required fields and timing advisories."""

from dataclasses import dataclass, field
from typing import Any

import structlog
from pydantic.alias_generators import to_snake
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import LegalStage
from app.models.legal import JurisdictionProfile

logger = structlog.get_logger()

PROFILE_VERSION = "1.0"

# Stage -> (metadata kind, warning) for recommended document links
_EXTERNAL_URL_WARNINGS: dict[LegalStage, tuple[str, str]] = {
    LegalStage.UNDER_CONTRACT: (
        "contract",
        "Consider adding an external URL for the contract document.",
    ),
    LegalStage.ASSIGNED: (
        "assignment",
        "Consider adding an external URL for the assignment document.",
    ),
    LegalStage.TITLE_CLEARING: (
        "title",
        "Consider adding an external URL for title documents.",
    ),
}


@dataclass(frozen=True)
class ProfileRules:
    required_fields: dict[str, list[str]] = field(default_factory=dict)
    timing_rules: dict[str, Any] = field(default_factory=dict)
    feature_flags: dict[str, bool] = field(default_factory=dict)

    @classmethod
    def from_model(cls, profile: JurisdictionProfile) -> "ProfileRules":
        return cls(
            required_fields=dict(profile.required_fields or {}),
            timing_rules=dict(profile.timing_rules or {}),
            feature_flags=dict(profile.feature_flags or {}),
        )


async def load_profile(
    db: AsyncSession, state: str | None, county: str | None = None
) -> ProfileRules | None:
    """County profile first, then the state-wide one. None when neither exists."""
    if not state:
        return None
    state = state.upper()

    if county:
        result = await db.execute(
            select(JurisdictionProfile).where(
                JurisdictionProfile.state == state,
                JurisdictionProfile.county == county,
                JurisdictionProfile.profile_version == PROFILE_VERSION,
            )
        )
        profile = result.scalar_one_or_none()
        if profile is not None:
            return ProfileRules.from_model(profile)

    result = await db.execute(
        select(JurisdictionProfile).where(
            JurisdictionProfile.state == state,
            JurisdictionProfile.county.is_(None),
            JurisdictionProfile.profile_version == PROFILE_VERSION,
        )
    )
    profile = result.scalar_one_or_none()
    if profile is None:
        logger.debug("jurisdiction_profile_missing", state=state, county=county)
        return None
    return ProfileRules.from_model(profile)


def _field_value(metadata: dict[str, Any], path: str) -> Any:
    kind, _, name = path.partition(".")
    record = metadata.get(kind)
    if record is None or not name:
        return None
    if isinstance(record, dict):
        return record.get(name, record.get(to_snake(name)))
    return getattr(record, to_snake(name), None)


def missing_required_fields(
    stage: LegalStage, metadata: dict[str, Any], profile: ProfileRules | None
) -> list[str]:
    """Blocker strings for required fields of ``stage`` absent from the metadata."""
    if profile is None:
        return []
    blockers = []
    for path in profile.required_fields.get(stage.value, []):
        value = _field_value(metadata, path)
        if value is None or value == "":
            blockers.append(f"Required field missing: {path}")
    return blockers


def stage_warnings(
    stage: LegalStage, metadata: dict[str, Any], profile: ProfileRules | None
) -> list[str]:
    """Advisory warnings for entering ``stage``. Never blocking."""
    warnings = []
    if profile is not None:
        rule = profile.timing_rules.get(stage.value)
        if isinstance(rule, dict) and rule.get("expectedDays"):
            warnings.append(f"Timing rules apply for {stage.value}. Ensure deadlines are met.")

    link = _EXTERNAL_URL_WARNINGS.get(stage)
    if link is not None:
        kind, message = link
        if not _field_value(metadata, f"{kind}.externalUrl"):
            warnings.append(message)
    return warnings

