"""SQLAlchemy models package. Importing it registers every model on Base.metadata."""

from app.models.base import BaseModel, ModelMixin, TimestampedModel
from app.models.deals import (
    AssignmentMetadata,
    ContractMetadata,
    Deal,
    DealEvent,
    TitleMetadata,
)
from app.models.enums import (
    ConditionCategory,
    ConditionSeverity,
    ConditionSource,
    ConditionStatus,
    DealStatus,
    LegalStage,
    TaskStatus,
    TaskUrgency,
    UserRole,
)
from app.models.legal import JurisdictionProfile, LegalCondition
from app.models.tasks import Task

__all__ = [
    "AssignmentMetadata",
    "BaseModel",
    "ConditionCategory",
    "ConditionSeverity",
    "ConditionSource",
    "ConditionStatus",
    "ContractMetadata",
    "Deal",
    "DealEvent",
    "DealStatus",
    "JurisdictionProfile",
    "LegalCondition",
    "LegalStage",
    "ModelMixin",
    "Task",
    "TaskStatus",
    "TaskUrgency",
    "TimestampedModel",
    "TitleMetadata",
    "UserRole",
]
