import uuid
from typing import List, Optional
from uuid import UUID

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.appointment import Appointment
from app.models.business import Business
from app.models.business_hours import DEFAULT_WEEKLY_HOURS, BusinessHours
from app.models.customer import Customer
from app.models.insurance_lead import InsuranceLead, LeadStatus
from app.models.service import Service
from app.models.stylist import Stylist
from app.schemas.business import BusinessRegister
from app.schemas.business_hours import BusinessHoursUpdate

logger = structlog.get_logger(__name__)


def build_booking_link(base_url: str, business_uuid: UUID) -> str:
    """URL a customer opens from the business QR code."""
    return f"{base_url.rstrip('/')}/customerauth?business={business_uuid}"


class BusinessService:
    """Service layer for business operations."""

    async def register_business(
        self, db: AsyncSession, data: BusinessRegister, base_url: str
    ) -> Business:
        """Create a business with its default weekly hours and an insurance lead."""
        existing = await self.get_business_by_email(db, data.email)
        if existing:
            logger.warning("Registration with existing email", email=data.email)
            raise ValueError("Business already registered with this email")

        try:
            business_uuid = uuid.uuid4()
            business = Business(
                uuid=business_uuid,
                business_name=data.business_name,
                owner_name=data.owner_name,
                phone=data.phone,
                email=data.email,
                qr_code_data=build_booking_link(base_url, business_uuid),
                is_active=True,
            )
            db.add(business)
            await db.flush()

            for day, open_time, close_time, is_closed in DEFAULT_WEEKLY_HOURS:
                db.add(
                    BusinessHours(
                        business_id=business.id,
                        day_of_week=day,
                        open_time=open_time,
                        close_time=close_time,
                        is_closed=is_closed,
                    )
                )

            db.add(
                InsuranceLead(
                    business_id=business.id,
                    business_name=data.business_name,
                    owner_name=data.owner_name,
                    contact_email=data.email,
                    contact_phone=data.phone,
                    status=LeadStatus.NEW.value,
                )
            )

            await db.commit()
            await db.refresh(business)

            logger.info(
                "Business registered successfully",
                business_id=business.id,
                business_uuid=str(business.uuid),
                business_name=business.business_name,
            )
            return business

        except IntegrityError as e:
            await db.rollback()
            logger.error(
                "Failed to register business due to integrity constraint", error=str(e)
            )
            raise ValueError("Business already registered with this email")
        except Exception as e:
            await db.rollback()
            logger.error("Failed to register business", error=str(e))
            raise

    async def get_business(
        self, db: AsyncSession, business_id: int
    ) -> Optional[Business]:
        """Get business by ID."""
        result = await db.execute(select(Business).where(Business.id == business_id))
        business = result.scalar_one_or_none()

        if not business:
            logger.warning("Business not found", business_id=business_id)

        return business

    async def get_business_by_uuid(
        self, db: AsyncSession, business_uuid: UUID
    ) -> Optional[Business]:
        """Get business by its public UUID."""
        result = await db.execute(
            select(Business).where(Business.uuid == business_uuid)
        )
        business = result.scalar_one_or_none()

        if not business:
            logger.warning("Business not found", business_uuid=str(business_uuid))

        return business

    async def get_business_by_email(
        self, db: AsyncSession, email: str
    ) -> Optional[Business]:
        result = await db.execute(select(Business).where(Business.email == email))
        return result.scalar_one_or_none()

    async def get_businesses(
        self, db: AsyncSession, skip: int = 0, limit: int = 100
    ) -> List[Business]:
        """All businesses, newest first."""
        query = (
            select(Business)
            .order_by(Business.created_at.desc(), Business.id.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await db.execute(query)
        businesses = result.scalars().all()

        logger.info("Retrieved businesses", count=len(businesses), skip=skip, limit=limit)
        return list(businesses)

    async def get_hours(self, db: AsyncSession, business_id: int) -> List[BusinessHours]:
        result = await db.execute(
            select(BusinessHours)
            .where(BusinessHours.business_id == business_id)
            .order_by(BusinessHours.day_of_week)
        )
        return list(result.scalars().all())

    async def update_hours(
        self,
        db: AsyncSession,
        business_id: int,
        entries: List[BusinessHoursUpdate],
    ) -> List[BusinessHours]:
        """Overwrite the hours of each submitted day, creating missing rows."""
        try:
            existing = {row.day_of_week: row for row in await self.get_hours(db, business_id)}

            for entry in entries:
                row = existing.get(entry.day_of_week)
                if row is None:
                    row = BusinessHours(business_id=business_id, day_of_week=entry.day_of_week)
                    db.add(row)
                row.open_time = entry.open_time
                row.close_time = entry.close_time
                row.is_closed = entry.is_closed

            await db.commit()

            logger.info(
                "Business hours updated",
                business_id=business_id,
                days=[entry.day_of_week for entry in entries],
            )
            return await self.get_hours(db, business_id)

        except Exception as e:
            await db.rollback()
            logger.error(
                "Failed to update business hours", business_id=business_id, error=str(e)
            )
            raise

    async def delete_business(self, db: AsyncSession, business_uuid: UUID) -> bool:
        """Remove a business and every row that belongs to it."""
        business = await self.get_business_by_uuid(db, business_uuid)
        if not business:
            return False

        business_id = business.id
        try:
            # Children first, in foreign key order
            for model in (
                Appointment,
                Customer,
                Service,
                Stylist,
                BusinessHours,
                InsuranceLead,
            ):
                await db.execute(delete(model).where(model.business_id == business_id))
            await db.execute(delete(Business).where(Business.id == business_id))
            await db.commit()

            logger.info(
                "Business deleted",
                business_id=business_id,
                business_uuid=str(business_uuid),
            )
            return True

        except Exception as e:
            await db.rollback()
            logger.error(
                "Failed to delete business", business_id=business_id, error=str(e)
            )
            raise


business_service = BusinessService()
