"""Auth package: session token verification and role guards."""

from app.auth.dependencies import get_current_user, require_role

__all__ = [
    "get_current_user",
    "require_role",
]
