"""Session JWT verification.

Tokens are minted by the session service (outside this API) and signed with
SECRET_KEY. Besides ``sub`` (user id) they carry ``org_id``, ``role`` and
``email`` claims.
"""

from datetime import timedelta

from jose import JWTError, jwt

from app.core.config import settings
from app.core.timeutils import utcnow


def verify_session_token(token: str) -> dict:
    """Verify an HS256 session JWT and return its claims.

    Raises JWTError on any validation failure.
    """
    payload = jwt.decode(
        token,
        settings.SECRET_KEY,
        algorithms=[settings.JWT_ALGORITHM],
        issuer=settings.JWT_ISSUER,
        options={
            "verify_aud": False,
            "verify_iss": bool(settings.JWT_ISSUER),
            "verify_exp": True,
        },
    )
    for claim in ("sub", "org_id"):
        if not payload.get(claim):
            raise JWTError(f"Token missing {claim} claim")
    return payload


def issue_session_token(
    user_id: str,
    org_id: str,
    role: str,
    email: str = "",
    expires_in: timedelta = timedelta(hours=1),
) -> str:
    """Mint a token in the session-service format (used by tests and local tooling)."""
    claims = {
        "sub": user_id,
        "org_id": org_id,
        "role": role,
        "email": email,
        "exp": utcnow() + expires_in,
    }
    if settings.JWT_ISSUER:
        claims["iss"] = settings.JWT_ISSUER
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
