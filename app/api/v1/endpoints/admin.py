from typing import List, Optional
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps.auth import require_admin
from app.api.deps.database import get_db
from app.core.security import TokenPrincipal
from app.models.insurance_lead import LeadStatus
from app.schemas.appointment import (
    AppointmentAdminResponse,
    AppointmentStatusSchema,
    AppointmentStatusUpdate,
)
from app.schemas.business import BusinessResponse
from app.schemas.lead import DashboardStats, LeadResponse, LeadStatusSchema, LeadUpdate
from app.services.appointment import AppointmentService
from app.services.business import business_service
from app.services.lead import lead_service

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/businesses", response_model=List[BusinessResponse])
async def get_businesses(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    admin: TokenPrincipal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await business_service.get_businesses(db, skip=skip, limit=limit)


@router.delete("/businesses/{business_uuid}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_business(
    business_uuid: UUID,
    admin: TokenPrincipal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Delete a business together with all of its data."""
    deleted = await business_service.delete_business(db, business_uuid)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Business not found"
        )
    logger.info(
        "Business deleted by admin",
        business_uuid=str(business_uuid),
        admin=admin.subject,
    )


@router.get("/leads", response_model=List[LeadResponse])
async def get_leads(
    status_filter: Optional[LeadStatusSchema] = Query(None, alias="status"),
    admin: TokenPrincipal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await lead_service.get_leads(
        db, LeadStatus(status_filter.value) if status_filter else None
    )


@router.put("/leads/{lead_id}", response_model=LeadResponse)
async def update_lead(
    lead_id: int,
    data: LeadUpdate,
    admin: TokenPrincipal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    lead = await lead_service.update_lead(db, lead_id, data)
    if not lead:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Lead not found")
    return lead


@router.get("/appointments", response_model=List[AppointmentAdminResponse])
async def get_all_appointments(
    status_filter: Optional[AppointmentStatusSchema] = Query(None, alias="status"),
    admin: TokenPrincipal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Appointments across every business, most recent first."""
    service = AppointmentService(db)
    return await service.get_appointments(
        status=status_filter.to_model() if status_filter else None
    )


@router.put(
    "/appointments/{appointment_uuid}/status", response_model=AppointmentAdminResponse
)
async def update_appointment_status(
    appointment_uuid: UUID,
    data: AppointmentStatusUpdate,
    admin: TokenPrincipal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    service = AppointmentService(db)
    try:
        appointment = await service.transition_appointment_status(
            appointment_uuid, data.status.to_model()
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if not appointment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Appointment not found"
        )
    return appointment


@router.get("/stats", response_model=DashboardStats)
async def get_dashboard_stats(
    admin: TokenPrincipal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await lead_service.get_dashboard_stats(db)
