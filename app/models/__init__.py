"""
All SQLAlchemy models. Schema is the source of truth for new DBs.
Base.metadata.create_all() creates every table; no migration scripts needed for fresh installs.
Pending (unverified) signups are not a table: see app.services.pending_registrations.
"""
from app.models.user import User, UserRole
from app.models.partner import PartnerProfile, VerificationStatus
from app.models.inquiry import Inquiry, InquiryStatus, Category, LeadAssignment
from app.models.portfolio import Portfolio

__all__ = [
    "User",
    "UserRole",
    "PartnerProfile",
    "VerificationStatus",
    "Inquiry",
    "InquiryStatus",
    "Category",
    "LeadAssignment",
    "Portfolio",
]
