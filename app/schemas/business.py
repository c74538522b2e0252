from typing import Optional
from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, Field, field_validator

from app.utils.validation import validate_email_format, validate_phone_number


class BusinessRegister(BaseModel):
    """Schema for registering a new business."""
    owner_name: str = Field(..., min_length=1, max_length=255, description="Owner full name")
    business_name: str = Field(..., min_length=1, max_length=255, description="Salon name")
    phone: Optional[str] = Field(None, max_length=50, description="Business phone number")
    email: str = Field(..., max_length=255, description="Business email address")

    @field_validator('email')
    @classmethod
    def validate_email_field(cls, v):
        if not validate_email_format(v):
            raise ValueError("Invalid email format")
        return v.lower()

    @field_validator('phone')
    @classmethod
    def validate_phone_field(cls, v):
        if v is not None and not validate_phone_number(v):
            raise ValueError("Invalid phone number format")
        return v


class BusinessRegistered(BaseModel):
    """Response returned after registration."""
    success: bool = True
    message: str = "Business registered successfully"
    business_id: UUID
    qr_code_data: str


class BusinessPublic(BaseModel):
    """Business profile shown to customers on the booking page."""
    uuid: UUID
    business_name: str
    owner_name: str
    phone: Optional[str] = None
    email: str

    model_config = {"from_attributes": True}


class BusinessResponse(BusinessPublic):
    """Full business record for the owner and admins."""
    id: int
    qr_code_data: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BookingLink(BaseModel):
    """Payload a QR code for the business encodes."""
    business_id: UUID
    url: str
