from typing import Any, Optional

import structlog
from jose import JWTError, jwt
from pydantic import BaseModel

from app.core.config import settings

logger = structlog.get_logger(__name__)


class TokenPrincipal(BaseModel):
    """Identity carried by a verified bearer token."""

    subject: str
    role: str
    email: Optional[str] = None
    name: Optional[str] = None
    claims: dict[str, Any] = {}


class InvalidTokenError(Exception):
    """Raised when a bearer token cannot be verified."""


def decode_access_token(token: str) -> TokenPrincipal:
    """Verify a bearer token and return its principal.

    Tokens are issued elsewhere; they must carry ``sub`` and ``role`` claims
    and be signed with the shared SECRET_KEY.
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.warning("Token verification failed", error=str(e))
        raise InvalidTokenError("Invalid or expired token") from e

    subject = payload.get("sub")
    role = payload.get("role")
    if not subject or not role:
        logger.warning("Token missing required claims", claims=list(payload.keys()))
        raise InvalidTokenError("Token is missing required claims")

    return TokenPrincipal(
        subject=str(subject),
        role=str(role),
        email=payload.get("email"),
        name=payload.get("name"),
        claims=payload,
    )
