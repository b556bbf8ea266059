"""Deal-scoped attention rules.

Each rule is an independent predicate over a ``DealSnapshot``. Adding a
heuristic means appending an ``AttentionRule`` to ``DEAL_RULES``; every rule
that matches fires, there is no first-match short circuit.
"""

import enum
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

import structlog

from app.core.config import settings
from app.core.timeutils import as_utc, utcnow, whole_days
from app.models.enums import ConditionStatus, LegalStage
from app.models.legal import LegalCondition
from app.modules.legal_workflow.stages import LATE_STAGES

logger = structlog.get_logger()


class Severity(str, enum.Enum):
    INFO = "info"
    WARNING = "warning"
    ATTENTION = "attention"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {Severity.INFO: 0, Severity.WARNING: 1, Severity.ATTENTION: 2}


@dataclass
class DealSnapshot:
    """Everything the rules look at for one deal, read once per request."""

    deal_id: uuid.UUID
    legal_stage: LegalStage
    last_event_at: datetime | None = None
    last_stage_change_at: datetime | None = None
    first_event_at: datetime | None = None
    conditions: list[LegalCondition] = field(default_factory=list)
    expected_close_date: datetime | None = None

    @property
    def has_open_blocker(self) -> bool:
        return any(c.is_blocker for c in self.conditions)

    @property
    def has_open_condition(self) -> bool:
        return any(c.status == ConditionStatus.OPEN for c in self.conditions)


@dataclass(frozen=True)
class AttentionSignal:
    signal_type: str
    message: str
    severity: Severity


@dataclass(frozen=True)
class AttentionRule:
    name: str
    signal_type: str
    severity: Severity
    message: str
    evaluate: Callable[[DealSnapshot, datetime], bool]


def _days_since(value: datetime | None, now: datetime) -> int | None:
    moment = as_utc(value)
    if moment is None:
        return None
    return whole_days((now - moment).total_seconds())


def _close_date_days(snapshot: DealSnapshot, now: datetime) -> int | None:
    close = as_utc(snapshot.expected_close_date)
    if close is None:
        return None
    return whole_days((close - now).total_seconds())


def _no_recent_activity(snapshot: DealSnapshot, now: datetime) -> bool:
    # No events at all is not evidence of staleness
    days = _days_since(snapshot.last_event_at, now)
    return days is not None and days >= settings.ATTENTION_INACTIVITY_DAYS


def _stage_unchanged(snapshot: DealSnapshot, now: datetime) -> bool:
    days = _days_since(snapshot.last_stage_change_at, now)
    return days is not None and days >= settings.ATTENTION_STAGE_STALE_DAYS


def _open_blocker(snapshot: DealSnapshot, now: datetime) -> bool:
    return snapshot.has_open_blocker


def _old_open_blocker(snapshot: DealSnapshot, now: datetime) -> bool:
    # Deal age (oldest event) stands in for how long the blocker has been open
    if not snapshot.has_open_blocker:
        return False
    days = _days_since(snapshot.first_event_at, now)
    return days is not None and days >= settings.ATTENTION_BLOCKER_AGE_DAYS


def _close_date_passed(snapshot: DealSnapshot, now: datetime) -> bool:
    days = _close_date_days(snapshot, now)
    return days is not None and days < 0


def _close_date_approaching(snapshot: DealSnapshot, now: datetime) -> bool:
    days = _close_date_days(snapshot, now)
    return days is not None and 0 <= days <= settings.ATTENTION_CLOSE_WINDOW_DAYS


def _late_stage_with_blocker(snapshot: DealSnapshot, now: datetime) -> bool:
    return snapshot.legal_stage in LATE_STAGES and snapshot.has_open_blocker


def _closed_with_open_issues(snapshot: DealSnapshot, now: datetime) -> bool:
    return snapshot.legal_stage == LegalStage.CLOSED and snapshot.has_open_condition


DEAL_RULES: tuple[AttentionRule, ...] = (
    AttentionRule(
        name="inactivity",
        signal_type="no_activity",
        severity=Severity.WARNING,
        message=f"No legal activity in the last {settings.ATTENTION_INACTIVITY_DAYS} days.",
        evaluate=_no_recent_activity,
    ),
    AttentionRule(
        name="stage_stagnant",
        signal_type="stage_unchanged",
        severity=Severity.WARNING,
        message=f"Legal stage hasn't changed in {settings.ATTENTION_STAGE_STALE_DAYS} days.",
        evaluate=_stage_unchanged,
    ),
    AttentionRule(
        name="open_blocker",
        signal_type="open_blocking_issues",
        severity=Severity.ATTENTION,
        message="There's an open issue that usually needs to be resolved.",
        evaluate=_open_blocker,
    ),
    AttentionRule(
        name="aged_blocker",
        signal_type="old_open_issues",
        severity=Severity.ATTENTION,
        message=(
            f"An open issue has been unresolved for "
            f"{settings.ATTENTION_BLOCKER_AGE_DAYS} days."
        ),
        evaluate=_old_open_blocker,
    ),
    AttentionRule(
        name="close_date_passed",
        signal_type="close_date_passed",
        severity=Severity.ATTENTION,
        message="The expected close date has passed.",
        evaluate=_close_date_passed,
    ),
    AttentionRule(
        name="close_date_approaching",
        signal_type="close_date_approaching",
        severity=Severity.WARNING,
        message="The expected close date is coming up.",
        evaluate=_close_date_approaching,
    ),
    AttentionRule(
        name="late_stage_blocker",
        signal_type="late_stage_with_issues",
        severity=Severity.WARNING,
        message="Deal is in a later stage with open issues still recorded.",
        evaluate=_late_stage_with_blocker,
    ),
    AttentionRule(
        name="closed_with_open_issues",
        signal_type="closed_with_issues",
        severity=Severity.INFO,
        message="Deal was closed while some issues were still open.",
        evaluate=_closed_with_open_issues,
    ),
)


def evaluate_deal(
    snapshot: DealSnapshot,
    now: datetime | None = None,
    rules: tuple[AttentionRule, ...] = DEAL_RULES,
) -> list[AttentionSignal]:
    """Run every rule against ``snapshot``. A rule that raises simply does not fire."""
    now = as_utc(now) or utcnow()
    signals = []
    for rule in rules:
        try:
            fired = rule.evaluate(snapshot, now)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "attention_rule_failed",
                rule=rule.name,
                deal_id=str(snapshot.deal_id),
                error=str(exc),
            )
            continue
        if fired:
            signals.append(AttentionSignal(rule.signal_type, rule.message, rule.severity))
    return signals


def overall_severity(signals: list[AttentionSignal]) -> Severity | None:
    """Highest severity among ``signals`` (attention > warning > info), None if empty."""
    if not signals:
        return None
    return max((s.severity for s in signals), key=lambda s: s.rank)
