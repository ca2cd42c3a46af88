"""Partner (photographer) profiles."""
from sqlalchemy import Column, Integer, String, Text, Boolean, ForeignKey, Numeric, Enum as SQLEnum, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base
import enum


class VerificationStatus(str, enum.Enum):
    pending = "pending"
    verified = "verified"
    rejected = "rejected"


class PartnerProfile(Base):
    __tablename__ = "partner_profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)

    business_name = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    experience = Column(Integer, nullable=True)  # years
    base_price = Column(Numeric(10, 2), nullable=True)
    # JSON-encoded list, e.g. '["wedding", "portrait"]'; "[]" means the partner takes any category
    service_categories = Column(Text, nullable=True)

    aadhar_number = Column(String(12), nullable=True)
    pan_number = Column(String(10), nullable=True)
    gst_number = Column(String(15), nullable=True)

    # Only admins change this; lead matching only ever assigns verified partners
    verification_status = Column(SQLEnum(VerificationStatus), nullable=False, default=VerificationStatus.pending)
    verification_comment = Column(Text, nullable=True)
    is_featured = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", backref="partner_profile")
    lead_assignments = relationship("LeadAssignment", back_populates="partner")
    portfolio_items = relationship("Portfolio", back_populates="partner", cascade="all, delete-orphan")
