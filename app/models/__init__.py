# Import all models to ensure they are registered with SQLAlchemy
from . import (
    appointment,
    business,
    business_hours,
    customer,
    insurance_lead,
    service,
    stylist,
)

__all__ = [
    "appointment",
    "business",
    "business_hours",
    "customer",
    "insurance_lead",
    "service",
    "stylist",
]
