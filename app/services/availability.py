"""Availability resolution for stylist bookings.

Slot arithmetic works on minutes since midnight. Intervals are half-open,
[start, end), so an appointment ending at 10:00 does not block a 10:00 start.
"""

from datetime import date, time
from typing import NamedTuple, Optional, Sequence

import structlog
from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import BookingClock
from app.core.config import settings
from app.core.exceptions import (
    BusinessClosedError,
    NotFoundError,
    OutsideBusinessHoursError,
    PastDateError,
    SlotConflictError,
)
from app.models.appointment import ACTIVE_STATUSES, Appointment
from app.models.business_hours import BusinessHours, day_of_week
from app.models.service import Service

logger = structlog.get_logger(__name__)


class BookedInterval(NamedTuple):
    start: int
    end: int


def to_minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def format_minutes(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def overlaps_any(start: int, end: int, booked: Sequence[BookedInterval]) -> bool:
    return any(start < b.end and b.start < end for b in booked)


def generate_time_slots(
    open_time: time,
    close_time: time,
    duration_minutes: int,
    booked: Sequence[BookedInterval] = (),
    not_before: Optional[time] = None,
    step_minutes: int = 30,
) -> list[str]:
    """List bookable start times between ``open_time`` and ``close_time``.

    Candidates step from opening time; one is kept when the service fits
    before closing and does not overlap a booked interval. When ``not_before``
    is given, candidates at or before it are dropped.
    """
    if duration_minutes <= 0 or step_minutes <= 0:
        raise ValueError("duration_minutes and step_minutes must be positive")

    open_minutes = to_minutes(open_time)
    close_minutes = to_minutes(close_time)
    cutoff = to_minutes(not_before) if not_before is not None else None

    slots = []
    current = open_minutes
    while current < close_minutes:
        slot_end = current + duration_minutes
        if slot_end > close_minutes:
            break
        if (cutoff is None or current > cutoff) and not overlaps_any(
            current, slot_end, booked
        ):
            slots.append(format_minutes(current))
        current += step_minutes

    return slots


class AvailabilityResolver:
    """Computes bookable start times and validates proposed bookings."""

    def __init__(
        self,
        db: AsyncSession,
        clock: Optional[BookingClock] = None,
        step_minutes: Optional[int] = None,
    ):
        self.db = db
        self.clock = clock or BookingClock(settings.BOOKING_TIMEZONE)
        self.step_minutes = step_minutes or settings.SLOT_INTERVAL_MINUTES

    async def list_available_slots(
        self, business_id: int, stylist_id: int, day: date, duration_minutes: int
    ) -> list[str]:
        """Ascending ``HH:MM`` start times; empty when the business is closed."""
        now = self.clock.now()
        if day < now.date():
            return []

        hours = await self._get_business_hours(business_id, day)
        if hours is None or not hours.is_open:
            logger.info(
                "No availability, business closed",
                business_id=business_id,
                date=day.isoformat(),
            )
            return []

        booked = await self._get_booked_intervals(business_id, stylist_id, day)

        not_before = now.time() if day == now.date() else None

        slots = generate_time_slots(
            hours.open_time,
            hours.close_time,
            duration_minutes,
            booked,
            not_before=not_before,
            step_minutes=self.step_minutes,
        )
        logger.info(
            "Available slots computed",
            business_id=business_id,
            stylist_id=stylist_id,
            date=day.isoformat(),
            duration_minutes=duration_minutes,
            booked_count=len(booked),
            slot_count=len(slots),
        )
        return slots

    async def validate_booking(
        self,
        business_id: int,
        stylist_id: int,
        service_id: int,
        day: date,
        start: time,
    ) -> None:
        """Raise a BookingError subclass if the booking cannot be made."""
        service = await self._get_service(business_id, service_id)
        await self.validate_slot(
            business_id, stylist_id, day, start, service.duration_minutes
        )

    async def validate_slot(
        self,
        business_id: int,
        stylist_id: int,
        day: date,
        start: time,
        duration_minutes: int,
    ) -> None:
        now = self.clock.now()
        if day < now.date():
            raise PastDateError(f"Cannot book an appointment on a past date ({day})")
        if day == now.date() and to_minutes(start) <= to_minutes(now.time()):
            raise PastDateError(f"The time {start:%H:%M} has already passed today")

        hours = await self._get_business_hours(business_id, day)
        if hours is None or not hours.is_open:
            raise BusinessClosedError(f"The business is closed on {day:%A}")

        start_minutes = to_minutes(start)
        end_minutes = start_minutes + duration_minutes
        if not hours.accommodates(start, end_minutes):
            raise OutsideBusinessHoursError(
                f"{format_minutes(start_minutes)}-{format_minutes(end_minutes)} is "
                f"outside business hours ({hours.hours_label()})"
            )

        booked = await self._get_booked_intervals(business_id, stylist_id, day)
        if overlaps_any(start_minutes, end_minutes, booked):
            raise SlotConflictError(
                f"The stylist is already booked at {format_minutes(start_minutes)} "
                f"on {day}"
            )

    async def _get_service(self, business_id: int, service_id: int) -> Service:
        result = await self.db.execute(
            select(Service).where(
                and_(Service.id == service_id, Service.business_id == business_id)
            )
        )
        service = result.scalar_one_or_none()
        if not service:
            raise NotFoundError("Service not found")
        return service

    async def _get_business_hours(
        self, business_id: int, day: date
    ) -> Optional[BusinessHours]:
        result = await self.db.execute(
            select(BusinessHours).where(
                and_(
                    BusinessHours.business_id == business_id,
                    BusinessHours.day_of_week == day_of_week(day),
                )
            )
        )
        return result.scalar_one_or_none()

    async def _get_booked_intervals(
        self, business_id: int, stylist_id: int, day: date
    ) -> list[BookedInterval]:
        result = await self.db.execute(
            select(Appointment.appointment_time, Appointment.duration_minutes).where(
                and_(
                    Appointment.business_id == business_id,
                    Appointment.stylist_id == stylist_id,
                    Appointment.appointment_date == day,
                    Appointment.status.in_([s.value for s in ACTIVE_STATUSES]),
                )
            )
        )
        return [
            BookedInterval(to_minutes(start), to_minutes(start) + duration)
            for start, duration in result.all()
        ]
