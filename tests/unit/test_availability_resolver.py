from datetime import datetime, time

import pytest
from sqlalchemy import select

from app.core.exceptions import (
    BusinessClosedError,
    NotFoundError,
    OutsideBusinessHoursError,
    PastDateError,
    SlotConflictError,
)
from app.models.appointment import AppointmentStatus
from app.models.business_hours import BusinessHours, day_of_week
from app.services.availability import AvailabilityResolver
from tests.fixtures.salon_fixtures import (
    SATURDAY,
    TODAY,
    TUESDAY,
    YESTERDAY,
    FixedClock,
)


@pytest.fixture
def resolver(db, clock):
    return AvailabilityResolver(db, clock=clock)


@pytest.mark.unit
def test_day_of_week_starts_on_sunday():
    assert day_of_week(YESTERDAY) == 0
    assert day_of_week(TODAY) == 1
    assert day_of_week(SATURDAY) == 6


@pytest.mark.unit
class TestListAvailableSlots:
    @pytest.mark.asyncio
    async def test_open_day_without_bookings(self, resolver, sample_business, sample_stylist):
        slots = await resolver.list_available_slots(
            sample_business.id, sample_stylist.id, TUESDAY, 60
        )

        assert slots[0] == "09:00"
        assert slots[-1] == "16:00"
        assert len(slots) == 15

    @pytest.mark.asyncio
    async def test_confirmed_appointment_blocks_slots(
        self, resolver, sample_business, sample_stylist, make_appointment
    ):
        await make_appointment(time(10, 0))

        slots = await resolver.list_available_slots(
            sample_business.id, sample_stylist.id, TUESDAY, 60
        )

        assert "09:00" in slots
        assert "09:30" not in slots
        assert "10:00" not in slots
        assert "10:30" not in slots
        assert "11:00" in slots

    @pytest.mark.asyncio
    async def test_cancelled_and_completed_do_not_block(
        self, resolver, sample_business, sample_stylist, make_appointment
    ):
        await make_appointment(time(10, 0), status=AppointmentStatus.CANCELLED)
        await make_appointment(time(12, 0), status=AppointmentStatus.COMPLETED)

        slots = await resolver.list_available_slots(
            sample_business.id, sample_stylist.id, TUESDAY, 60
        )

        assert "10:00" in slots
        assert "12:00" in slots

    @pytest.mark.asyncio
    async def test_pending_appointment_blocks(
        self, resolver, sample_business, sample_stylist, make_appointment
    ):
        await make_appointment(time(14, 0), status=AppointmentStatus.PENDING)

        slots = await resolver.list_available_slots(
            sample_business.id, sample_stylist.id, TUESDAY, 60
        )

        assert "14:00" not in slots
        assert "13:00" in slots
        assert "15:00" in slots

    @pytest.mark.asyncio
    async def test_other_stylist_bookings_are_ignored(
        self, resolver, sample_business, sample_stylist, second_stylist, make_appointment
    ):
        await make_appointment(time(10, 0), stylist=second_stylist)

        slots = await resolver.list_available_slots(
            sample_business.id, sample_stylist.id, TUESDAY, 60
        )

        assert "10:00" in slots

    @pytest.mark.asyncio
    async def test_closed_day_is_empty_even_with_appointments(
        self, resolver, sample_business, sample_stylist, make_appointment
    ):
        await make_appointment(time(11, 0), day=SATURDAY)

        slots = await resolver.list_available_slots(
            sample_business.id, sample_stylist.id, SATURDAY, 60
        )

        assert slots == []

    @pytest.mark.asyncio
    async def test_missing_hours_row_is_closed(self, db, resolver, sample_business, sample_stylist):
        row = (
            await db.execute(
                select(BusinessHours).where(
                    BusinessHours.business_id == sample_business.id,
                    BusinessHours.day_of_week == day_of_week(TUESDAY),
                )
            )
        ).scalar_one()
        await db.delete(row)
        await db.commit()

        slots = await resolver.list_available_slots(
            sample_business.id, sample_stylist.id, TUESDAY, 60
        )

        assert slots == []

    @pytest.mark.asyncio
    async def test_today_drops_elapsed_starts(self, db, sample_business, sample_stylist):
        resolver = AvailabilityResolver(db, clock=FixedClock(datetime(2025, 6, 2, 10, 15)))

        slots = await resolver.list_available_slots(
            sample_business.id, sample_stylist.id, TODAY, 60
        )

        assert "10:00" not in slots
        assert slots[0] == "10:30"

    @pytest.mark.asyncio
    async def test_past_day_is_empty(self, resolver, sample_business, sample_stylist):
        slots = await resolver.list_available_slots(
            sample_business.id, sample_stylist.id, YESTERDAY, 60
        )

        assert slots == []

    @pytest.mark.asyncio
    async def test_idempotent(self, resolver, sample_business, sample_stylist, make_appointment):
        await make_appointment(time(13, 0))

        first = await resolver.list_available_slots(
            sample_business.id, sample_stylist.id, TUESDAY, 45
        )
        second = await resolver.list_available_slots(
            sample_business.id, sample_stylist.id, TUESDAY, 45
        )

        assert first == second


@pytest.mark.unit
class TestValidateBooking:
    @pytest.mark.asyncio
    async def test_valid_booking_passes(
        self, resolver, sample_business, sample_stylist, sample_service
    ):
        await resolver.validate_booking(
            sample_business.id, sample_stylist.id, sample_service.id, TUESDAY, time(9, 0)
        )

    @pytest.mark.asyncio
    async def test_yesterday_is_past_date(
        self, resolver, sample_business, sample_stylist, sample_service
    ):
        with pytest.raises(PastDateError) as exc_info:
            await resolver.validate_booking(
                sample_business.id,
                sample_stylist.id,
                sample_service.id,
                YESTERDAY,
                time(10, 0),
            )

        assert exc_info.value.reason == "past_date"

    @pytest.mark.asyncio
    async def test_elapsed_time_today_is_past_date(
        self, db, sample_business, sample_stylist, sample_service
    ):
        resolver = AvailabilityResolver(db, clock=FixedClock(datetime(2025, 6, 2, 11, 0)))

        with pytest.raises(PastDateError):
            await resolver.validate_booking(
                sample_business.id, sample_stylist.id, sample_service.id, TODAY, time(11, 0)
            )

        await resolver.validate_booking(
            sample_business.id, sample_stylist.id, sample_service.id, TODAY, time(11, 30)
        )

    @pytest.mark.asyncio
    async def test_closed_day(self, resolver, sample_business, sample_stylist, sample_service):
        with pytest.raises(BusinessClosedError):
            await resolver.validate_booking(
                sample_business.id, sample_stylist.id, sample_service.id, SATURDAY, time(11, 0)
            )

    @pytest.mark.asyncio
    @pytest.mark.parametrize("start", [time(8, 30), time(16, 30), time(17, 0)])
    async def test_outside_business_hours(
        self, resolver, sample_business, sample_stylist, sample_service, start
    ):
        with pytest.raises(OutsideBusinessHoursError) as exc_info:
            await resolver.validate_booking(
                sample_business.id, sample_stylist.id, sample_service.id, TUESDAY, start
            )

        assert "09:00-17:00" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_last_slot_ending_at_close_is_accepted(
        self, resolver, sample_business, sample_stylist, sample_service
    ):
        await resolver.validate_booking(
            sample_business.id, sample_stylist.id, sample_service.id, TUESDAY, time(16, 0)
        )

    @pytest.mark.asyncio
    async def test_overlap_is_slot_conflict(
        self, resolver, sample_business, sample_stylist, sample_service, make_appointment
    ):
        await make_appointment(time(10, 0))

        with pytest.raises(SlotConflictError):
            await resolver.validate_booking(
                sample_business.id, sample_stylist.id, sample_service.id, TUESDAY, time(10, 30)
            )

    @pytest.mark.asyncio
    async def test_back_to_back_is_accepted(
        self, resolver, sample_business, sample_stylist, sample_service, make_appointment
    ):
        await make_appointment(time(10, 0))

        await resolver.validate_booking(
            sample_business.id, sample_stylist.id, sample_service.id, TUESDAY, time(11, 0)
        )
        await resolver.validate_booking(
            sample_business.id, sample_stylist.id, sample_service.id, TUESDAY, time(9, 0)
        )

    @pytest.mark.asyncio
    async def test_cancelled_appointment_frees_slot(
        self, resolver, sample_business, sample_stylist, sample_service, make_appointment
    ):
        await make_appointment(time(10, 0), status=AppointmentStatus.CANCELLED)

        await resolver.validate_booking(
            sample_business.id, sample_stylist.id, sample_service.id, TUESDAY, time(10, 0)
        )

    @pytest.mark.asyncio
    async def test_unknown_service(self, resolver, sample_business, sample_stylist):
        with pytest.raises(NotFoundError):
            await resolver.validate_booking(
                sample_business.id, sample_stylist.id, 9999, TUESDAY, time(10, 0)
            )

    @pytest.mark.asyncio
    async def test_past_date_checked_before_closed(
        self, resolver, sample_business, sample_stylist, sample_service
    ):
        # Yesterday was a Sunday, which is also closed
        with pytest.raises(PastDateError):
            await resolver.validate_booking(
                sample_business.id, sample_stylist.id, sample_service.id, YESTERDAY, time(9, 0)
            )
