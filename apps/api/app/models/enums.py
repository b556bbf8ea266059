"""Native enums for all domain models."""

import enum


# ── Core ─────────────────────────────────────────────────────────────────────


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    MEMBER = "member"
    VIEWER = "viewer"


# ── Deals ────────────────────────────────────────────────────────────────────


class DealStatus(str, enum.Enum):
    ACTIVE = "active"
    CLOSED = "closed"
    CANCELLED = "cancelled"


class LegalStage(str, enum.Enum):
    """Legal lifecycle of a deal.

    Declaration order is the linear order; DEAD is terminal and sits outside it.
    """

    PRE_CONTRACT = "PRE_CONTRACT"
    UNDER_CONTRACT = "UNDER_CONTRACT"
    ASSIGNMENT_IN_PROGRESS = "ASSIGNMENT_IN_PROGRESS"
    ASSIGNED = "ASSIGNED"
    TITLE_CLEARING = "TITLE_CLEARING"
    CLEARED_TO_CLOSE = "CLEARED_TO_CLOSE"
    CLOSED = "CLOSED"
    DEAD = "DEAD"


# ── Legal conditions ("issues") ──────────────────────────────────────────────


class ConditionCategory(str, enum.Enum):
    TITLE = "TITLE"
    PROBATE = "PROBATE"
    LIEN = "LIEN"
    HOA = "HOA"
    JUDGMENT = "JUDGMENT"
    HEIRSHIP = "HEIRSHIP"
    MUNICIPAL = "MUNICIPAL"
    CONTRACTUAL = "CONTRACTUAL"
    OTHER = "OTHER"


class ConditionSeverity(str, enum.Enum):
    INFORMATIONAL = "INFORMATIONAL"
    RISKY = "RISKY"
    BLOCKING = "BLOCKING"


class ConditionStatus(str, enum.Enum):
    OPEN = "OPEN"
    RESOLVED = "RESOLVED"


class ConditionSource(str, enum.Enum):
    TITLE_COMPANY = "TITLE_COMPANY"
    ATTORNEY = "ATTORNEY"
    WHOLESALER = "WHOLESALER"
    BUYER = "BUYER"
    SELLER = "SELLER"
    OTHER = "OTHER"


# ── Tasks ────────────────────────────────────────────────────────────────────


class TaskStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TaskUrgency(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    CRITICAL = "critical"
