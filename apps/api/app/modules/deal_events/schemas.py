"""Deal event log schemas."""

import uuid
from datetime import datetime
from typing import Any

from pydantic import AliasChoices, Field

from app.schemas.common import CamelModel


class DealEventResponse(CamelModel):
    id: uuid.UUID
    deal_id: uuid.UUID
    event_type: str
    # ORM attribute is metadata_ (metadata is reserved on declarative models)
    metadata_: dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("metadata_", "metadata"),
        serialization_alias="metadata",
    )
    created_at: datetime


class DealEventListResponse(CamelModel):
    events: list[DealEventResponse]
