from uuid import UUID

import structlog
from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.business import Business
from app.services.business import business_service

logger = structlog.get_logger(__name__)


async def get_public_business(
    business_uuid: UUID, db: AsyncSession = Depends(get_db)
) -> Business:
    """
    Business a customer is booking with, taken from the booking link.

    Unknown and inactive businesses are both reported as not found so the
    public pages do not reveal deactivated tenants.
    """
    business = await business_service.get_business_by_uuid(db, business_uuid)

    if not business or not business.is_active:
        logger.warning(
            "Public business lookup failed",
            business_uuid=str(business_uuid),
            found=business is not None,
        )
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Business not found"
        )

    return business
