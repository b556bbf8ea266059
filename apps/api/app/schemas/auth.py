"""Auth schemas: CurrentUser."""

import uuid

from pydantic import BaseModel

from app.models.enums import UserRole


class CurrentUser(BaseModel):
    """Lightweight user context extracted from the session JWT."""

    user_id: uuid.UUID
    org_id: uuid.UUID
    role: UserRole
    email: str = ""

    @property
    def can_write(self) -> bool:
        return self.role != UserRole.VIEWER
