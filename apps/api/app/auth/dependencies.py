"""FastAPI auth dependencies: get_current_user, require_role."""

import uuid

import sentry_sdk
import structlog
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from pydantic import ValidationError

from app.auth.tokens import verify_session_token
from app.models.enums import UserRole
from app.schemas.auth import CurrentUser

logger = structlog.get_logger()

bearer_scheme = HTTPBearer(auto_error=True)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> CurrentUser:
    """
    Verify the session JWT and build the request's user context.

    The token is the only source of identity here; user and org records are
    owned by the auth service.
    """
    token = credentials.credentials
    try:
        payload = verify_session_token(token)
        current_user = CurrentUser(
            user_id=uuid.UUID(payload["sub"]),
            org_id=uuid.UUID(payload["org_id"]),
            role=UserRole(payload.get("role", UserRole.MEMBER.value)),
            email=payload.get("email", ""),
        )
    except (JWTError, ValueError, ValidationError) as e:
        logger.warning("jwt_verification_failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    # Enrich Sentry scope with identity (PII-free: no email)
    sentry_sdk.set_user({"id": str(current_user.user_id)})
    sentry_sdk.set_tag("org_id", str(current_user.org_id))

    return current_user


def require_role(allowed_roles: list[UserRole]):
    """
    Dependency factory: checks if current user has one of the allowed roles.

    Usage:
        @router.post("/deals/{deal_id}/legal/dead", dependencies=[Depends(require_role([UserRole.ADMIN]))])
    """

    async def _check_role(
        current_user: CurrentUser = Depends(get_current_user),
    ) -> CurrentUser:
        if current_user.role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role '{current_user.role.value}' not authorized. Required: {[r.value for r in allowed_roles]}",
            )
        return current_user

    return _check_role


# Anyone but a read-only viewer may edit legal state and tasks
WRITE_ROLES = [UserRole.ADMIN, UserRole.MANAGER, UserRole.MEMBER]
# Irreversible or history-rewriting stage moves
SUPERVISOR_ROLES = [UserRole.ADMIN, UserRole.MANAGER]
