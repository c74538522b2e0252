from datetime import date
from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps.business import get_public_business
from app.api.deps.database import get_db
from app.api.deps.runtime import enforce_booking_rate_limit, get_clock, get_redis_client
from app.core.clock import BookingClock
from app.core.exceptions import BookingError
from app.core.redis import RedisClient
from app.models.business import Business
from app.schemas.appointment import (
    AppointmentResponse,
    BookingRequest,
    BookingResponse,
)
from app.schemas.business import BusinessPublic
from app.schemas.catalog import ServicePublic, StylistPublic
from app.schemas.common import BookingErrorResponse
from app.services.appointment import AppointmentService
from app.services.availability import AvailabilityResolver
from app.services.business import business_service
from app.services.catalog import catalog_service

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/business/{business_uuid}", response_model=BusinessPublic)
async def get_business_profile(business: Business = Depends(get_public_business)):
    """Business profile shown at the top of the booking page."""
    return business


@router.get("/services/{business_uuid}", response_model=List[ServicePublic])
async def get_services(
    business: Business = Depends(get_public_business),
    db: AsyncSession = Depends(get_db),
):
    return await catalog_service.get_available_services(db, business.id)


@router.get("/stylists/{business_uuid}", response_model=List[StylistPublic])
async def get_stylists(
    business: Business = Depends(get_public_business),
    db: AsyncSession = Depends(get_db),
):
    return await catalog_service.get_active_stylists(db, business.id)


@router.get("/available-slots/{business_uuid}", response_model=List[str])
async def get_available_slots(
    day: date = Query(..., alias="date", description="Day to list, YYYY-MM-DD"),
    stylist_id: int = Query(...),
    service_id: int = Query(...),
    business: Business = Depends(get_public_business),
    db: AsyncSession = Depends(get_db),
    clock: BookingClock = Depends(get_clock),
):
    """Bookable HH:MM start times for a stylist and service on one day."""
    stylist = await catalog_service.get_bookable_stylist(db, business.id, stylist_id)
    if not stylist:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"reason": "not_found", "message": "Stylist not found"},
        )

    service = await catalog_service.get_bookable_service(db, business.id, service_id)
    if not service:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"reason": "not_found", "message": "Service not found"},
        )

    resolver = AvailabilityResolver(db, clock=clock)
    return await resolver.list_available_slots(
        business.id, stylist.id, day, service.duration_minutes
    )


@router.post(
    "/book-appointment",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": BookingErrorResponse},
        404: {"model": BookingErrorResponse},
        409: {"model": BookingErrorResponse},
    },
    dependencies=[Depends(enforce_booking_rate_limit)],
)
async def book_appointment(
    booking: BookingRequest,
    db: AsyncSession = Depends(get_db),
    clock: BookingClock = Depends(get_clock),
    redis_client: Optional[RedisClient] = Depends(get_redis_client),
):
    """Create a pending appointment after checking the slot is free."""
    business = await business_service.get_business_by_uuid(db, booking.business_id)
    if not business or not business.is_active:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"reason": "not_found", "message": "Business not found"},
        )

    service = AppointmentService(db, clock=clock, redis_client=redis_client)
    try:
        appointment = await service.book_appointment(business.id, booking)
    except BookingError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())
    except Exception as e:
        logger.error("Unexpected booking failure", business_id=business.id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create appointment",
        )

    return BookingResponse(
        success=True, appointment=AppointmentResponse.model_validate(appointment)
    )
