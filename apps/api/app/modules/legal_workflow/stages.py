"""Legal stage ordering rules. Pure functions, no I/O."""

from app.core.errors import InvalidTransition, StaleState, TerminalStage
from app.models.enums import LegalStage

# Linear lifecycle; DEAD is terminal and outside the order
STAGE_ORDER: tuple[LegalStage, ...] = (
    LegalStage.PRE_CONTRACT,
    LegalStage.UNDER_CONTRACT,
    LegalStage.ASSIGNMENT_IN_PROGRESS,
    LegalStage.ASSIGNED,
    LegalStage.TITLE_CLEARING,
    LegalStage.CLEARED_TO_CLOSE,
    LegalStage.CLOSED,
)

TERMINAL_STAGES: frozenset[LegalStage] = frozenset({LegalStage.CLOSED, LegalStage.DEAD})

# Stages where an open blocker is worse than in early negotiation
LATE_STAGES: frozenset[LegalStage] = frozenset(
    {LegalStage.ASSIGNED, LegalStage.TITLE_CLEARING}
)


def parse_stage(value: str | LegalStage) -> LegalStage:
    """Coerce a client-supplied stage name, rejecting unknown names."""
    if isinstance(value, LegalStage):
        return value
    try:
        return LegalStage(value.strip().upper())
    except (AttributeError, ValueError):
        raise InvalidTransition(
            f"Unknown legal stage: {value!r}", {"stage": str(value)}
        ) from None


def is_terminal(stage: LegalStage) -> bool:
    return stage in TERMINAL_STAGES


def stage_index(stage: LegalStage) -> int:
    """Position in the linear order. DEAD has no position."""
    try:
        return STAGE_ORDER.index(stage)
    except ValueError:
        raise InvalidTransition(f"{stage.value} is not part of the linear order") from None


def successor(stage: LegalStage) -> LegalStage | None:
    """Immediate next stage, or None for terminal stages."""
    if is_terminal(stage):
        return None
    return STAGE_ORDER[stage_index(stage) + 1]


def is_rollback(previous: LegalStage, new: LegalStage) -> bool:
    if LegalStage.DEAD in (previous, new):
        return False
    return stage_index(new) < stage_index(previous)


def check_advance(current: LegalStage, target: LegalStage) -> None:
    """Raise unless ``target`` is the immediate successor of ``current``."""
    if is_terminal(current):
        raise TerminalStage(
            f"Cannot transition from terminal state: {current.value}",
            {"currentStage": current.value},
        )
    # The caller read the previous stage; someone else already made this move
    if target == current:
        raise StaleState(
            f"Deal is already in stage: {target.value}",
            {"currentStage": current.value, "targetStage": target.value},
        )
    expected = successor(current)
    if target != expected:
        raise InvalidTransition(
            f"Cannot advance from {current.value} to {target.value}; "
            f"next stage is {expected.value}",
            {
                "currentStage": current.value,
                "targetStage": target.value,
                "nextStage": expected.value,
            },
        )


def check_rollback(current: LegalStage, target: LegalStage) -> None:
    """Raise unless ``target`` is strictly earlier than ``current``."""
    if is_terminal(current):
        raise TerminalStage(
            f"Cannot roll back from terminal state: {current.value}",
            {"currentStage": current.value},
        )
    if target == LegalStage.DEAD or stage_index(target) >= stage_index(current):
        raise InvalidTransition(
            f"Rollback target {target.value} must precede {current.value}",
            {"currentStage": current.value, "targetStage": target.value},
        )


def check_mark_dead(current: LegalStage) -> None:
    if is_terminal(current):
        raise TerminalStage(
            f"Cannot mark dead from terminal state: {current.value}",
            {"currentStage": current.value},
        )
