import uuid

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.database import Base


class Business(Base):
    """Salon registered on the platform; the tenant boundary for all data."""

    __tablename__ = "businesses"

    # Core identity
    id = Column(Integer, primary_key=True, index=True)
    uuid = Column(Uuid(as_uuid=True), unique=True, nullable=False, default=uuid.uuid4, index=True)
    business_name = Column(String(255), nullable=False)
    owner_name = Column(String(255), nullable=False)

    # Contact
    phone = Column(String(50), nullable=True)
    email = Column(String(255), unique=True, nullable=False, index=True)

    # Booking link encoded in the business QR code
    qr_code_data = Column(String(500), nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)

    # Audit timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    hours = relationship(
        "BusinessHours", back_populates="business", order_by="BusinessHours.day_of_week"
    )
    services = relationship("Service", back_populates="business")
    stylists = relationship("Stylist", back_populates="business")

    def __repr__(self):
        return f"<Business(id={self.id}, name='{self.business_name}', email='{self.email}')>"
