from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class LeadStatusSchema(str, Enum):
    NEW = "new"
    CONTACTED = "contacted"
    CONVERTED = "converted"
    LOST = "lost"


class LeadUpdate(BaseModel):
    status: LeadStatusSchema
    notes: Optional[str] = Field(None, max_length=2000)


class LeadResponse(BaseModel):
    id: int
    business_id: int
    business_name: str
    owner_name: str
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    status: LeadStatusSchema
    notes: Optional[str] = None
    last_contacted: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class DashboardStats(BaseModel):
    """Cross-tenant figures for the admin dashboard."""

    total_businesses: int
    total_appointments: int
    total_leads: int
    new_leads: int
    total_revenue: Decimal
