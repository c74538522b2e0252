import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Time,
    Uuid,
    text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.database import Base


class AppointmentStatus(enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Statuses that occupy the stylist's calendar
ACTIVE_STATUSES = (AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED)

ALLOWED_TRANSITIONS = {
    AppointmentStatus.PENDING: [
        AppointmentStatus.CONFIRMED,
        AppointmentStatus.CANCELLED,
    ],
    AppointmentStatus.CONFIRMED: [
        AppointmentStatus.COMPLETED,
        AppointmentStatus.CANCELLED,
    ],
    AppointmentStatus.COMPLETED: [],  # Final state
    AppointmentStatus.CANCELLED: [],  # Final state
}

_ACTIVE_SLOT_WHERE = text("status IN ('pending', 'confirmed')")


class Appointment(Base):
    """Customer booking with a stylist for one service on one day."""

    __tablename__ = "appointments"

    # Core identity
    id = Column(Integer, primary_key=True, index=True)
    uuid = Column(Uuid(as_uuid=True), unique=True, nullable=False, default=uuid.uuid4, index=True)
    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=False, index=True)

    # Appointment participants
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False)
    stylist_id = Column(Integer, ForeignKey("stylists.id"), nullable=False)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False)

    # Scheduling details (naive local wall-clock)
    appointment_date = Column(Date, nullable=False, index=True)
    appointment_time = Column(Time, nullable=False)
    duration_minutes = Column(Integer, nullable=False)

    special_requests = Column(Text, nullable=True)

    # Status management
    status = Column(
        String(20), nullable=False, default=AppointmentStatus.PENDING.value, index=True
    )
    status_changed_at = Column(DateTime(timezone=True), server_default=func.now())

    # Audit timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint("duration_minutes > 0", name="check_positive_duration"),
        # One active booking per stylist start time
        Index(
            "uq_appointments_active_slot",
            "stylist_id",
            "appointment_date",
            "appointment_time",
            unique=True,
            postgresql_where=_ACTIVE_SLOT_WHERE,
            sqlite_where=_ACTIVE_SLOT_WHERE,
        ),
        Index("ix_appointments_stylist_date", "stylist_id", "appointment_date"),
    )

    # Relationships
    business = relationship("Business")
    customer = relationship("Customer")
    stylist = relationship("Stylist")
    service = relationship("Service")

    def can_transition_to(self, new_status: AppointmentStatus) -> bool:
        """Check if appointment can transition to the new status."""
        current = AppointmentStatus(self.status)
        return new_status in ALLOWED_TRANSITIONS.get(current, [])

    def transition_to(self, new_status: AppointmentStatus) -> bool:
        """Move to ``new_status`` if the transition is allowed."""
        if not self.can_transition_to(new_status):
            return False

        self.status = new_status.value
        self.status_changed_at = datetime.now(timezone.utc)
        return True

    @property
    def occupies_calendar(self) -> bool:
        """Pending and confirmed appointments block the stylist's time."""
        return AppointmentStatus(self.status) in ACTIVE_STATUSES

    @property
    def start_minutes(self) -> int:
        return self.appointment_time.hour * 60 + self.appointment_time.minute

    @property
    def end_minutes(self) -> int:
        return self.start_minutes + self.duration_minutes

    def overlaps(self, start_minutes: int, end_minutes: int) -> bool:
        """Half-open overlap test against [start_minutes, end_minutes)."""
        return start_minutes < self.end_minutes and self.start_minutes < end_minutes

    def __repr__(self):
        return (
            f"<Appointment(id={self.id}, status='{self.status}', "
            f"date='{self.appointment_date}', time='{self.appointment_time}', "
            f"stylist_id={self.stylist_id})>"
        )
