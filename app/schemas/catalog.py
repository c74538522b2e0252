from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel


class ServicePublic(BaseModel):
    id: int
    uuid: UUID
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    price: Decimal
    duration_minutes: int
    is_available: bool

    model_config = {"from_attributes": True}


class StylistPublic(BaseModel):
    id: int
    uuid: UUID
    name: str
    bio: Optional[str] = None
    specialties: Optional[List[str]] = None
    experience_years: int = 0
    is_active: bool

    model_config = {"from_attributes": True}
