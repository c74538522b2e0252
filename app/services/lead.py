from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.appointment import Appointment, AppointmentStatus
from app.models.business import Business
from app.models.insurance_lead import InsuranceLead, LeadStatus
from app.models.service import Service
from app.schemas.lead import DashboardStats, LeadUpdate

logger = structlog.get_logger(__name__)


class LeadService:
    """Insurance leads and the admin dashboard figures."""

    async def get_leads(
        self, db: AsyncSession, status: Optional[LeadStatus] = None
    ) -> List[InsuranceLead]:
        query = select(InsuranceLead).order_by(
            InsuranceLead.created_at.desc(), InsuranceLead.id.desc()
        )
        if status is not None:
            query = query.where(InsuranceLead.status == status.value)

        result = await db.execute(query)
        return list(result.scalars().all())

    async def update_lead(
        self, db: AsyncSession, lead_id: int, update: LeadUpdate
    ) -> Optional[InsuranceLead]:
        """Set the lead status and notes, stamping ``last_contacted``."""
        result = await db.execute(
            select(InsuranceLead).where(InsuranceLead.id == lead_id)
        )
        lead = result.scalar_one_or_none()
        if not lead:
            logger.warning("Lead not found", lead_id=lead_id)
            return None

        lead.status = update.status.value
        if update.notes is not None:
            lead.notes = update.notes
        lead.last_contacted = datetime.now(timezone.utc)

        await db.commit()
        await db.refresh(lead)

        logger.info("Lead updated", lead_id=lead.id, status=lead.status)
        return lead

    async def get_dashboard_stats(self, db: AsyncSession) -> DashboardStats:
        total_businesses = await db.scalar(select(func.count(Business.id)))
        total_appointments = await db.scalar(select(func.count(Appointment.id)))
        total_leads = await db.scalar(select(func.count(InsuranceLead.id)))
        new_leads = await db.scalar(
            select(func.count(InsuranceLead.id)).where(
                InsuranceLead.status == LeadStatus.NEW.value
            )
        )
        # Revenue counts completed appointments only
        total_revenue = await db.scalar(
            select(func.coalesce(func.sum(Service.price), 0))
            .select_from(Appointment)
            .join(Service, Appointment.service_id == Service.id)
            .where(Appointment.status == AppointmentStatus.COMPLETED.value)
        )

        return DashboardStats(
            total_businesses=total_businesses or 0,
            total_appointments=total_appointments or 0,
            total_leads=total_leads or 0,
            new_leads=new_leads or 0,
            total_revenue=Decimal(str(total_revenue or 0)),
        )


lead_service = LeadService()
