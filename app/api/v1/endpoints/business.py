from datetime import date
from typing import List, Optional
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps.auth import require_business
from app.api.deps.database import get_db
from app.core.config import settings
from app.models.business import Business
from app.schemas.appointment import (
    AppointmentResponse,
    AppointmentStatusSchema,
    AppointmentStatusUpdate,
)
from app.schemas.business import (
    BookingLink,
    BusinessRegister,
    BusinessRegistered,
    BusinessResponse,
)
from app.schemas.business_hours import BusinessHoursBatchUpdate, BusinessHoursResponse
from app.services.appointment import AppointmentService
from app.services.business import build_booking_link, business_service

logger = structlog.get_logger(__name__)

router = APIRouter()


def _public_base_url(request: Request) -> str:
    return settings.PUBLIC_BASE_URL or str(request.base_url)


@router.post(
    "/register",
    response_model=BusinessRegistered,
    status_code=status.HTTP_201_CREATED,
)
async def register_business(
    data: BusinessRegister,
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """Register a salon with default opening hours."""
    try:
        business = await business_service.register_business(
            db, data, _public_base_url(request)
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return BusinessRegistered(business_id=business.uuid, qr_code_data=business.qr_code_data)


@router.get("/data", response_model=BusinessResponse)
async def get_business_data(business: Business = Depends(require_business)):
    return business


@router.get("/qr-code", response_model=BookingLink)
async def get_qr_code(
    request: Request, business: Business = Depends(require_business)
):
    """Booking link the salon prints as a QR code."""
    return BookingLink(
        business_id=business.uuid,
        url=build_booking_link(_public_base_url(request), business.uuid),
    )


@router.get("/hours", response_model=List[BusinessHoursResponse])
async def get_business_hours(
    business: Business = Depends(require_business),
    db: AsyncSession = Depends(get_db),
):
    return await business_service.get_hours(db, business.id)


@router.put("/hours", response_model=List[BusinessHoursResponse])
async def update_business_hours(
    data: BusinessHoursBatchUpdate,
    business: Business = Depends(require_business),
    db: AsyncSession = Depends(get_db),
):
    """Replace the hours of the submitted days; other days are left as they are."""
    return await business_service.update_hours(db, business.id, data.hours)


@router.get("/appointments", response_model=List[AppointmentResponse])
async def get_business_appointments(
    status_filter: Optional[AppointmentStatusSchema] = Query(None, alias="status"),
    day: Optional[date] = Query(None, alias="date"),
    business: Business = Depends(require_business),
    db: AsyncSession = Depends(get_db),
):
    service = AppointmentService(db)
    return await service.get_appointments(
        business_id=business.id,
        status=status_filter.to_model() if status_filter else None,
        appointment_date=day,
    )


@router.put(
    "/appointments/{appointment_uuid}/status", response_model=AppointmentResponse
)
async def update_appointment_status(
    appointment_uuid: UUID,
    data: AppointmentStatusUpdate,
    business: Business = Depends(require_business),
    db: AsyncSession = Depends(get_db),
):
    """Confirm, complete or cancel one of this business's appointments."""
    service = AppointmentService(db)
    try:
        appointment = await service.transition_appointment_status(
            appointment_uuid, data.status.to_model(), business_id=business.id
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if not appointment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Appointment not found"
        )
    return appointment
