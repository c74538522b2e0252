from datetime import date, time
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Integer,
    Time,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from app.core.database import Base

# Default weekly schedule created on registration: (day, open, close, is_closed)
DEFAULT_WEEKLY_HOURS = [
    (0, time(9, 0), time(17, 0), True),
    (1, time(9, 0), time(17, 0), False),
    (2, time(9, 0), time(17, 0), False),
    (3, time(9, 0), time(17, 0), False),
    (4, time(9, 0), time(17, 0), False),
    (5, time(9, 0), time(17, 0), False),
    (6, time(10, 0), time(16, 0), True),
]


def day_of_week(day: date) -> int:
    """Day number used by business hours rows: 0 = Sunday ... 6 = Saturday."""
    return (day.weekday() + 1) % 7


class BusinessHours(Base):
    """Opening hours of a business for one day of the week."""

    __tablename__ = "business_hours"

    id = Column(Integer, primary_key=True, index=True)
    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=False, index=True)
    day_of_week = Column(Integer, nullable=False)

    # Not consulted when is_closed
    open_time = Column(Time, nullable=True)
    close_time = Column(Time, nullable=True)
    is_closed = Column(Boolean, default=False, nullable=False)

    __table_args__ = (
        UniqueConstraint("business_id", "day_of_week", name="uq_business_hours_day"),
        CheckConstraint(
            "day_of_week >= 0 AND day_of_week <= 6", name="check_day_of_week_range"
        ),
    )

    business = relationship("Business", back_populates="hours")

    @property
    def is_open(self) -> bool:
        """True when the day accepts bookings."""
        return (
            not self.is_closed
            and self.open_time is not None
            and self.close_time is not None
        )

    def accommodates(self, start: time, end_minutes: int) -> bool:
        """Check that [start, start + duration) lies inside opening hours.

        ``end_minutes`` is minutes since midnight so that an end past midnight
        is still comparable.
        """
        if not self.is_open:
            return False
        open_minutes = self.open_time.hour * 60 + self.open_time.minute
        close_minutes = self.close_time.hour * 60 + self.close_time.minute
        start_minutes = start.hour * 60 + start.minute
        return start_minutes >= open_minutes and end_minutes <= close_minutes

    def hours_label(self) -> Optional[str]:
        if not self.is_open:
            return None
        return f"{self.open_time:%H:%M}-{self.close_time:%H:%M}"

    def __repr__(self):
        return (
            f"<BusinessHours(business_id={self.business_id}, day={self.day_of_week}, "
            f"{self.hours_label() or 'closed'})>"
        )
