class BookingError(ValueError):
    """Base class for user-facing booking failures."""

    reason = "booking_error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_detail(self) -> dict:
        return {"reason": self.reason, "message": self.message}


class BusinessClosedError(BookingError):
    reason = "business_closed"


class OutsideBusinessHoursError(BookingError):
    reason = "outside_business_hours"


class SlotConflictError(BookingError):
    reason = "slot_conflict"
    status_code = 409


class PastDateError(BookingError):
    reason = "past_date"


class NotFoundError(BookingError):
    reason = "not_found"
    status_code = 404
