from typing import List, Optional

import structlog
from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.service import Service
from app.models.stylist import Stylist

logger = structlog.get_logger(__name__)


class CatalogService:
    """Read access to the services and stylists a customer can book."""

    async def get_available_services(
        self, db: AsyncSession, business_id: int
    ) -> List[Service]:
        result = await db.execute(
            select(Service)
            .where(and_(Service.business_id == business_id, Service.is_available))
            .order_by(Service.name)
        )
        return list(result.scalars().all())

    async def get_active_stylists(
        self, db: AsyncSession, business_id: int
    ) -> List[Stylist]:
        result = await db.execute(
            select(Stylist)
            .where(and_(Stylist.business_id == business_id, Stylist.is_active))
            .order_by(Stylist.name)
        )
        return list(result.scalars().all())

    async def get_bookable_service(
        self, db: AsyncSession, business_id: int, service_id: int
    ) -> Optional[Service]:
        """Service of this business that is currently offered."""
        result = await db.execute(
            select(Service).where(
                and_(
                    Service.id == service_id,
                    Service.business_id == business_id,
                    Service.is_available,
                )
            )
        )
        service = result.scalar_one_or_none()
        if not service:
            logger.warning(
                "Bookable service not found",
                business_id=business_id,
                service_id=service_id,
            )
        return service

    async def get_bookable_stylist(
        self, db: AsyncSession, business_id: int, stylist_id: int
    ) -> Optional[Stylist]:
        """Active stylist of this business."""
        result = await db.execute(
            select(Stylist).where(
                and_(
                    Stylist.id == stylist_id,
                    Stylist.business_id == business_id,
                    Stylist.is_active,
                )
            )
        )
        stylist = result.scalar_one_or_none()
        if not stylist:
            logger.warning(
                "Bookable stylist not found",
                business_id=business_id,
                stylist_id=stylist_id,
            )
        return stylist


catalog_service = CatalogService()
