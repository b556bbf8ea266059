"""Task attention partition: which pending tasks are missed, which need triage."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from app.core.config import settings
from app.core.timeutils import as_utc, utcnow
from app.models.enums import TaskStatus, TaskUrgency

_TRIAGE_URGENCIES = frozenset({TaskUrgency.CRITICAL, TaskUrgency.MEDIUM})


def _enum_value(value: Any) -> Any:
    return value.value if hasattr(value, "value") else value


def task_urgency(task: Any) -> TaskUrgency:
    """Urgency of ``task``; missing or unrecognised values count as medium."""
    try:
        return TaskUrgency(_enum_value(getattr(task, "urgency", None)))
    except ValueError:
        return TaskUrgency.MEDIUM


def task_due(task: Any) -> datetime | None:
    """Due date as aware UTC; unparseable values mean no due date."""
    return as_utc(getattr(task, "due_at", None))


def is_pending(task: Any) -> bool:
    return _enum_value(getattr(task, "status", None)) == TaskStatus.PENDING.value


def attention_sort_key(task: Any) -> tuple:
    """Critical first, then earliest due date (undated last), then id."""
    due = task_due(task)
    return (
        task_urgency(task) != TaskUrgency.CRITICAL,
        due is None,
        due or datetime.max.replace(tzinfo=timezone.utc),
        str(getattr(task, "id", "")),
    )


@dataclass
class TaskAttention:
    triage: list[Any] = field(default_factory=list)
    missed: list[Any] = field(default_factory=list)
    alert: bool = False

    @property
    def items(self) -> list[Any]:
        return self.missed + self.triage

    @property
    def total_count(self) -> int:
        return len(self.missed) + len(self.triage)

    @property
    def critical_count(self) -> int:
        return sum(1 for t in self.items if task_urgency(t) == TaskUrgency.CRITICAL)


def partition_tasks(tasks: list[Any], now: datetime | None = None) -> TaskAttention:
    """Split pending tasks into ``missed`` and ``triage``.

    A task lands in at most one bucket: anything overdue is missed and is
    never considered for triage.
    """
    now = as_utc(now) or utcnow()
    due_soon = now + timedelta(hours=settings.TASK_DUE_SOON_HOURS)
    alert_window = now + timedelta(hours=settings.TASK_ALERT_WINDOW_HOURS)

    missed, triage = [], []
    critical_due_now = False
    for task in tasks:
        if not is_pending(task):
            continue
        due = task_due(task)
        urgency = task_urgency(task)

        if due is not None and due < now:
            missed.append(task)
            continue

        if urgency == TaskUrgency.CRITICAL and due is not None and due <= alert_window:
            critical_due_now = True

        if urgency in _TRIAGE_URGENCIES or (due is not None and due <= due_soon):
            triage.append(task)

    missed.sort(key=attention_sort_key)
    triage.sort(key=attention_sort_key)
    return TaskAttention(
        triage=triage,
        missed=missed,
        alert=critical_due_now or bool(missed),
    )
