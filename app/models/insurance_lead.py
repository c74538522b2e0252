import enum

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func

from app.core.database import Base


class LeadStatus(enum.Enum):
    NEW = "new"
    CONTACTED = "contacted"
    CONVERTED = "converted"
    LOST = "lost"


class InsuranceLead(Base):
    """Sales lead opened for every newly registered business."""

    __tablename__ = "insurance_leads"

    id = Column(Integer, primary_key=True, index=True)
    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=False, index=True)

    # Snapshot of the business contact at registration time
    business_name = Column(String(255), nullable=False)
    owner_name = Column(String(255), nullable=False)
    contact_email = Column(String(255), nullable=True)
    contact_phone = Column(String(50), nullable=True)

    status = Column(String(20), nullable=False, default=LeadStatus.NEW.value, index=True)
    notes = Column(Text, nullable=True)
    last_contacted = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return (
            f"<InsuranceLead(id={self.id}, business_id={self.business_id}, "
            f"status='{self.status}')>"
        )
