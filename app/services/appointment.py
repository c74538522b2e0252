import uuid
from datetime import date
from typing import List, Optional
from uuid import UUID

import structlog
from sqlalchemy import and_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from app.core.clock import BookingClock
from app.core.config import settings
from app.core.exceptions import BookingError, NotFoundError, SlotConflictError
from app.core.redis import RedisClient
from app.models.appointment import Appointment, AppointmentStatus
from app.models.customer import Customer
from app.schemas.appointment import BookingRequest
from app.services.availability import AvailabilityResolver
from app.services.catalog import catalog_service

logger = structlog.get_logger(__name__)

# PostgreSQL names the violated constraint; SQLite lists the table's columns
_SLOT_CONSTRAINT_MARKERS = ("uq_appointments_active_slot", "appointments.")
_CUSTOMER_CONSTRAINT_MARKERS = ("uq_customer_business_phone", "customers.phone")


def _is_slot_conflict(error: IntegrityError) -> bool:
    message = str(error.orig)
    return any(marker in message for marker in _SLOT_CONSTRAINT_MARKERS)


def _is_customer_conflict(error: IntegrityError) -> bool:
    message = str(error.orig)
    return any(marker in message for marker in _CUSTOMER_CONSTRAINT_MARKERS)


class AppointmentService:
    """Customer bookings and the appointment status lifecycle."""

    def __init__(
        self,
        db: AsyncSession,
        clock: Optional[BookingClock] = None,
        redis_client: Optional[RedisClient] = None,
    ):
        self.db = db
        self.redis_client = redis_client
        self.resolver = AvailabilityResolver(db, clock=clock)

    async def book_appointment(
        self, business_id: int, booking: BookingRequest
    ) -> Appointment:
        """Validate and store a pending appointment.

        Raises a BookingError subclass when the stylist, service or slot
        cannot be booked.
        """
        stylist = await catalog_service.get_bookable_stylist(
            self.db, business_id, booking.stylist_id
        )
        if not stylist:
            raise NotFoundError("Stylist not found")

        service = await catalog_service.get_bookable_service(
            self.db, business_id, booking.service_id
        )
        if not service:
            raise NotFoundError("Service not found")

        stylist_id, service_id = stylist.id, service.id
        duration_minutes = service.duration_minutes
        day = booking.appointment_date

        lock_token = uuid.uuid4().hex
        locked = await self._acquire_lock(business_id, stylist_id, day, lock_token)
        if not locked:
            logger.warning(
                "Booking rejected, stylist calendar busy",
                business_id=business_id,
                stylist_id=stylist_id,
                date=day.isoformat(),
            )
            raise SlotConflictError(
                "Another booking for this stylist is in progress, please retry"
            )

        try:
            try:
                appointment = await self._store_booking(
                    business_id, booking, stylist_id, service_id, duration_minutes
                )
            except IntegrityError as e:
                await self.db.rollback()
                if not _is_customer_conflict(e):
                    raise
                # A concurrent first booking created this customer; the retry finds it
                logger.info(
                    "Customer created concurrently, retrying booking",
                    business_id=business_id,
                    phone=booking.customer_phone,
                )
                appointment = await self._store_booking(
                    business_id, booking, stylist_id, service_id, duration_minutes
                )

        except BookingError as e:
            logger.warning(
                "Booking rejected",
                business_id=business_id,
                stylist_id=stylist_id,
                date=day.isoformat(),
                time=booking.appointment_time.strftime("%H:%M"),
                reason=e.reason,
            )
            raise
        except IntegrityError as e:
            await self.db.rollback()
            if not _is_slot_conflict(e):
                logger.error(
                    "Failed to create booking", business_id=business_id, error=str(e.orig)
                )
                raise
            # Lost the race for an identical start to a concurrent request
            logger.warning(
                "Booking rejected by slot constraint",
                business_id=business_id,
                stylist_id=stylist_id,
                date=day.isoformat(),
                error=str(e.orig),
            )
            raise SlotConflictError("This time slot has just been booked")
        except Exception as e:
            await self.db.rollback()
            logger.error("Failed to create booking", business_id=business_id, error=str(e))
            raise
        finally:
            await self._release_lock(business_id, stylist_id, day, lock_token)

        logger.info(
            "Booking created",
            appointment_id=appointment.id,
            business_id=business_id,
            stylist_id=stylist_id,
            service_id=service_id,
            date=day.isoformat(),
            time=booking.appointment_time.strftime("%H:%M"),
        )
        return await self.get_appointment_by_uuid(appointment.uuid)

    async def get_appointment_by_uuid(
        self, appointment_uuid: UUID, business_id: Optional[int] = None
    ) -> Optional[Appointment]:
        """Get appointment by UUID with relationships."""
        query = (
            select(Appointment)
            .options(
                joinedload(Appointment.business),
                joinedload(Appointment.customer),
                joinedload(Appointment.stylist),
                joinedload(Appointment.service),
            )
            .where(Appointment.uuid == appointment_uuid)
            .execution_options(populate_existing=True)
        )
        if business_id is not None:
            query = query.where(Appointment.business_id == business_id)

        result = await self.db.execute(query)
        return result.unique().scalar_one_or_none()

    async def get_appointments(
        self,
        business_id: Optional[int] = None,
        status: Optional[AppointmentStatus] = None,
        appointment_date: Optional[date] = None,
    ) -> List[Appointment]:
        """Appointments ordered by date and time, optionally scoped to a business."""
        query = select(Appointment).options(
            joinedload(Appointment.business),
            joinedload(Appointment.customer),
            joinedload(Appointment.stylist),
            joinedload(Appointment.service),
        )

        filters = []
        if business_id is not None:
            filters.append(Appointment.business_id == business_id)
        if status is not None:
            filters.append(Appointment.status == status.value)
        if appointment_date is not None:
            filters.append(Appointment.appointment_date == appointment_date)
        if filters:
            query = query.where(and_(*filters))

        if business_id is not None:
            query = query.order_by(
                Appointment.appointment_date, Appointment.appointment_time
            )
        else:
            query = query.order_by(
                Appointment.appointment_date.desc(), Appointment.appointment_time.desc()
            )

        result = await self.db.execute(query)
        return list(result.unique().scalars().all())

    async def transition_appointment_status(
        self,
        appointment_uuid: UUID,
        new_status: AppointmentStatus,
        business_id: Optional[int] = None,
    ) -> Optional[Appointment]:
        """Move an appointment to ``new_status``; None when it does not exist."""
        appointment = await self.get_appointment_by_uuid(appointment_uuid, business_id)
        if not appointment:
            return None

        current_status = AppointmentStatus(appointment.status)
        if not appointment.transition_to(new_status):
            raise ValueError(
                f"Cannot transition from {current_status.value} to {new_status.value}"
            )

        await self.db.commit()

        logger.info(
            "Appointment status changed",
            appointment_id=appointment.id,
            business_id=appointment.business_id,
            from_status=current_status.value,
            to_status=new_status.value,
        )
        return await self.get_appointment_by_uuid(appointment_uuid)

    async def _store_booking(
        self,
        business_id: int,
        booking: BookingRequest,
        stylist_id: int,
        service_id: int,
        duration_minutes: int,
    ) -> Appointment:
        await self.resolver.validate_slot(
            business_id,
            stylist_id,
            booking.appointment_date,
            booking.appointment_time,
            duration_minutes,
        )

        customer = await self._find_or_create_customer(business_id, booking)

        appointment = Appointment(
            business_id=business_id,
            customer_id=customer.id,
            stylist_id=stylist_id,
            service_id=service_id,
            appointment_date=booking.appointment_date,
            appointment_time=booking.appointment_time,
            duration_minutes=duration_minutes,
            special_requests=booking.special_requests,
            status=AppointmentStatus.PENDING.value,
        )
        self.db.add(appointment)
        await self.db.flush()
        await self.db.commit()
        return appointment

    async def _find_or_create_customer(
        self, business_id: int, booking: BookingRequest
    ) -> Customer:
        result = await self.db.execute(
            select(Customer).where(
                and_(
                    Customer.business_id == business_id,
                    Customer.phone == booking.customer_phone,
                )
            )
        )
        customer = result.scalar_one_or_none()

        if customer:
            customer.name = booking.customer_name
            if booking.customer_email:
                customer.email = booking.customer_email
            return customer

        customer = Customer(
            business_id=business_id,
            name=booking.customer_name,
            phone=booking.customer_phone,
            email=booking.customer_email,
        )
        self.db.add(customer)
        await self.db.flush()
        logger.info("Customer created", business_id=business_id, customer_id=customer.id)
        return customer

    async def _acquire_lock(
        self, business_id: int, stylist_id: int, day: date, token: str
    ) -> bool:
        if self.redis_client is None:
            return True
        return await self.redis_client.acquire_booking_lock(
            business_id, stylist_id, day, token, settings.BOOKING_LOCK_SECONDS
        )

    async def _release_lock(
        self, business_id: int, stylist_id: int, day: date, token: str
    ) -> None:
        if self.redis_client is None:
            return
        await self.redis_client.release_booking_lock(business_id, stylist_id, day, token)
