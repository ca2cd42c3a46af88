"""Client inquiries and the per-partner lead assignments created from them."""
from sqlalchemy import Column, Integer, String, Text, Boolean, ForeignKey, Numeric, Enum as SQLEnum, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base
import enum


class Category(str, enum.Enum):
    wedding = "wedding"
    maternity = "maternity"
    portrait = "portrait"
    event = "event"
    commercial = "commercial"
    fashion = "fashion"


class InquiryStatus(str, enum.Enum):
    new = "new"
    responded = "responded"
    booked = "booked"
    closed = "closed"


class Inquiry(Base):
    __tablename__ = "inquiries"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    category = Column(SQLEnum(Category), nullable=False)
    event_date = Column(DateTime(timezone=True), nullable=True)
    budget = Column(Numeric(10, 2), nullable=True)
    city = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    reference_image_url = Column(String(500), nullable=True)

    status = Column(SQLEnum(InquiryStatus), nullable=False, default=InquiryStatus.new)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    client = relationship("User", backref="inquiries")
    lead_assignments = relationship("LeadAssignment", back_populates="inquiry")


class LeadAssignment(Base):
    __tablename__ = "lead_assignments"

    id = Column(Integer, primary_key=True, index=True)
    inquiry_id = Column(Integer, ForeignKey("inquiries.id"), nullable=False, index=True)
    partner_id = Column(Integer, ForeignKey("partner_profiles.id"), nullable=False, index=True)

    is_responded = Column(Boolean, nullable=False, default=False)
    response_message = Column(Text, nullable=True)
    quoted_price = Column(Numeric(10, 2), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now())

    inquiry = relationship("Inquiry", back_populates="lead_assignments")
    partner = relationship("PartnerProfile", back_populates="lead_assignments")
