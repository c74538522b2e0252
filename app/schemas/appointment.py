from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from app.models.appointment import AppointmentStatus
from app.schemas.common import ClockTime
from app.utils.validation import validate_email_format, validate_phone_number


class AppointmentStatusSchema(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    def to_model(self) -> AppointmentStatus:
        return AppointmentStatus(self.value)


class BookingRequest(BaseModel):
    """Customer booking submitted from the public booking page."""

    business_id: UUID
    customer_name: str = Field(..., min_length=1, max_length=255)
    customer_phone: str = Field(..., min_length=7, max_length=20)
    customer_email: Optional[str] = Field(None, max_length=255)
    service_id: int
    stylist_id: int
    appointment_date: date
    appointment_time: ClockTime
    special_requests: Optional[str] = Field(None, max_length=2000)

    @field_validator("customer_phone")
    @classmethod
    def validate_phone_field(cls, v):
        if not validate_phone_number(v):
            raise ValueError("Invalid phone number format")
        return v.strip()

    @field_validator("customer_email")
    @classmethod
    def validate_email_field(cls, v):
        if v is not None and not validate_email_format(v):
            raise ValueError("Invalid email format")
        return v


class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatusSchema


# Related model summaries
class ServiceSummary(BaseModel):
    id: int
    name: str
    price: Decimal
    duration_minutes: int

    model_config = {"from_attributes": True}


class StylistSummary(BaseModel):
    id: int
    name: str

    model_config = {"from_attributes": True}


class CustomerSummary(BaseModel):
    id: int
    name: str
    phone: str
    email: Optional[str] = None

    model_config = {"from_attributes": True}


class BusinessSummary(BaseModel):
    id: int
    uuid: UUID
    business_name: str

    model_config = {"from_attributes": True}


class AppointmentResponse(BaseModel):
    id: int
    uuid: UUID
    business_id: int
    customer_id: int
    stylist_id: int
    service_id: int
    appointment_date: date
    appointment_time: ClockTime
    duration_minutes: int
    special_requests: Optional[str] = None
    status: AppointmentStatusSchema
    status_changed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    service: Optional[ServiceSummary] = None
    stylist: Optional[StylistSummary] = None
    customer: Optional[CustomerSummary] = None

    model_config = {"from_attributes": True}


class AppointmentAdminResponse(AppointmentResponse):
    business: Optional[BusinessSummary] = None


class BookingResponse(BaseModel):
    success: bool = True
    appointment: AppointmentResponse
