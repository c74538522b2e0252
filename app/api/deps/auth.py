from uuid import UUID

import structlog
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps.database import get_db
from app.core.security import InvalidTokenError, TokenPrincipal, decode_access_token
from app.models.business import Business
from app.services.business import business_service

logger = structlog.get_logger(__name__)

BUSINESS_ROLE = "business"
ADMIN_ROLE = "admin"

# HTTP Bearer token extractor
security = HTTPBearer()


async def get_current_principal(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> TokenPrincipal:
    """Verify the bearer token and return the identity it carries."""
    try:
        return decode_access_token(credentials.credentials)
    except InvalidTokenError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )


async def require_business(
    principal: TokenPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
) -> Business:
    """
    Resolve the business owning the token.

    The token subject is the business UUID. Every business route is scoped
    to the returned business.
    """
    if principal.role != BUSINESS_ROLE:
        logger.warning(
            "Business route accessed with wrong role",
            subject=principal.subject,
            role=principal.role,
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Business access required"
        )

    try:
        business_uuid = UUID(principal.subject)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token subject is not a business identifier",
        )

    business = await business_service.get_business_by_uuid(db, business_uuid)
    if not business:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Business not found"
        )
    if not business.is_active:
        logger.warning("Inactive business access attempted", business_id=business.id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Business is inactive"
        )

    return business


async def require_admin(
    principal: TokenPrincipal = Depends(get_current_principal),
) -> TokenPrincipal:
    if principal.role != ADMIN_ROLE:
        logger.warning(
            "Admin route accessed with wrong role",
            subject=principal.subject,
            role=principal.role,
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required"
        )
    return principal
