"""Inquiry matching and lead assignment.

A new inquiry is matched in two steps:

1. Broad match (one query): verified partners whose user city contains the inquiry
   city, OR whose stored category list contains the inquiry category, both
   case-insensitive substring tests. This favors recall.
2. Narrow match (per partner): the parsed category list must be empty (partner
   takes anything) or contain the inquiry category as an exact element.

The two steps can disagree: "wedding" is a substring of '["pre-wedding"]' but not
an element of it, and a partner found through the city clause may still not
serve the category.

Each eligible partner gets its own LeadAssignment row, written and committed
independently; one failed row does not undo the others and shows up as a failed
AssignmentOutcome.
"""
from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from app.errors import NotFound
from app.models.inquiry import Inquiry, InquiryStatus, LeadAssignment
from app.models.partner import PartnerProfile, VerificationStatus
from app.models.user import User
from app.schemas.inquiry import InquiryCreate, InquiryResponseItem, ResponsePartnerInfo
from app.schemas.partner import PartnerUserInfo
from app.services.inquiry_status import mark_responded

log = logging.getLogger("uvicorn.error")


@dataclass
class AssignmentOutcome:
    partner_id: int
    lead_id: int | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.lead_id is not None


@dataclass
class InquirySubmission:
    inquiry: Inquiry
    outcomes: list[AssignmentOutcome] = field(default_factory=list)

    @property
    def assigned_count(self) -> int:
        return sum(1 for o in self.outcomes if o.ok)

    @property
    def failed(self) -> list[AssignmentOutcome]:
        return [o for o in self.outcomes if not o.ok]


def parse_service_categories(raw: str | None) -> list[str]:
    """Decode the stored JSON list. Missing or blank means no categories. Raises ValueError on bad data."""
    if raw is None or not raw.strip():
        return []
    parsed = json.loads(raw)
    if not isinstance(parsed, list):
        raise ValueError(f"service_categories is not a list: {raw[:50]!r}")
    return parsed


def serves_category(categories: list[str], category: str) -> bool:
    return not categories or category in categories


def find_candidate_partners(db: Session, city: str, category: str) -> list[PartnerProfile]:
    """Broad match: verified partners near the city OR listing the category (substring, any case)."""
    return (
        db.query(PartnerProfile)
        .join(User, PartnerProfile.user_id == User.id)
        .filter(
            PartnerProfile.verification_status == VerificationStatus.verified,
            or_(
                User.city.icontains(city, autoescape=True),
                PartnerProfile.service_categories.icontains(category, autoescape=True),
            ),
        )
        .order_by(PartnerProfile.id)
        .all()
    )


def select_eligible_partners(
    candidates: list[PartnerProfile], category: str
) -> tuple[list[PartnerProfile], list[AssignmentOutcome]]:
    """Narrow match. Returns (eligible, failures) where failures are partners with unreadable category data."""
    eligible: list[PartnerProfile] = []
    failures: list[AssignmentOutcome] = []
    for partner in candidates:
        try:
            categories = parse_service_categories(partner.service_categories)
        except ValueError as e:
            log.warning("[Leads] Partner %s has malformed service categories: %s", partner.id, e)
            failures.append(AssignmentOutcome(partner_id=partner.id, error=f"malformed service categories: {e}"))
            continue
        if serves_category(categories, category):
            eligible.append(partner)
    return eligible, failures


def assign_leads(db: Session, inquiry: Inquiry, partners: list[PartnerProfile]) -> list[AssignmentOutcome]:
    """Create one lead per partner, each in its own commit."""
    inquiry_id = inquiry.id
    partner_ids = [p.id for p in partners]
    outcomes: list[AssignmentOutcome] = []
    for partner_id in partner_ids:
        lead = LeadAssignment(inquiry_id=inquiry_id, partner_id=partner_id, is_responded=False)
        db.add(lead)
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            log.warning("[Leads] Could not assign inquiry %s to partner %s: %s", inquiry_id, partner_id, e)
            outcomes.append(AssignmentOutcome(partner_id=partner_id, error=str(e)))
            continue
        outcomes.append(AssignmentOutcome(partner_id=partner_id, lead_id=lead.id))
    return outcomes


def _reference_image_url(data: InquiryCreate, settings: Settings) -> str | None:
    url = str(data.reference_image_url) if data.reference_image_url else None
    if not url and settings.mock_file_upload:
        url = f"{settings.mock_image_base_url}?random={int(time.time() * 1000)}"
    return url


def submit_inquiry(
    db: Session,
    client_id: int,
    data: InquiryCreate,
    settings: Settings | None = None,
) -> InquirySubmission:
    """Store a client inquiry and fan it out to eligible partners as leads.

    Partners are read once, right after the inquiry is saved; partners verified later
    are never added to this inquiry.
    """
    settings = settings or get_settings()
    inquiry = Inquiry(
        client_id=client_id,
        category=data.category,
        event_date=data.event_date,
        budget=data.budget,
        city=data.city,
        description=data.description,
        reference_image_url=_reference_image_url(data, settings),
        status=InquiryStatus.new,
    )
    db.add(inquiry)
    db.commit()
    db.refresh(inquiry)

    category = data.category.value
    candidates = find_candidate_partners(db, data.city, category)
    eligible, failures = select_eligible_partners(candidates, category)
    submission = InquirySubmission(inquiry=inquiry, outcomes=failures + assign_leads(db, inquiry, eligible))
    db.refresh(inquiry)

    log.info(
        "[Leads] Inquiry %s submitted by client %s, assigned to %s partners (%s candidates, %s failed)",
        inquiry.id,
        client_id,
        submission.assigned_count,
        len(candidates),
        len(submission.failed),
    )
    return submission


def respond_to_lead(
    db: Session,
    partner_user_id: int,
    lead_id: int,
    response_message: str,
    quoted_price: Decimal | None = None,
) -> LeadAssignment:
    """Record a partner's reply on one of their own leads and mark the inquiry responded."""
    profile = db.query(PartnerProfile).filter(PartnerProfile.user_id == partner_user_id).first()
    if not profile:
        raise NotFound("Partner profile")
    # Ownership check: a partner only ever sees its own leads
    lead = (
        db.query(LeadAssignment)
        .filter(LeadAssignment.id == lead_id, LeadAssignment.partner_id == profile.id)
        .first()
    )
    if not lead:
        raise NotFound("Lead assignment")

    lead.is_responded = True
    lead.response_message = response_message
    lead.quoted_price = quoted_price
    lead.updated_at = datetime.now(timezone.utc)

    inquiry = db.query(Inquiry).filter(Inquiry.id == lead.inquiry_id).first()
    if inquiry:
        mark_responded(inquiry)
    db.commit()
    db.refresh(lead)
    log.info("[Leads] Partner %s responded to lead %s", partner_user_id, lead_id)
    return lead


def get_client_inquiry(db: Session, client_id: int, inquiry_id: int) -> Inquiry:
    inquiry = db.query(Inquiry).filter(Inquiry.id == inquiry_id, Inquiry.client_id == client_id).first()
    if not inquiry:
        raise NotFound("Inquiry")
    return inquiry


def get_inquiry_responses(db: Session, client_id: int, inquiry_id: int) -> tuple[Inquiry, list[InquiryResponseItem]]:
    """Responded leads for a client's own inquiry, with partner display fields."""
    inquiry = get_client_inquiry(db, client_id, inquiry_id)
    rows = (
        db.query(LeadAssignment, PartnerProfile, User)
        .join(PartnerProfile, LeadAssignment.partner_id == PartnerProfile.id)
        .join(User, PartnerProfile.user_id == User.id)
        .filter(LeadAssignment.inquiry_id == inquiry.id, LeadAssignment.is_responded.is_(True))
        .order_by(LeadAssignment.updated_at, LeadAssignment.id)
        .all()
    )
    responses = [
        InquiryResponseItem(
            id=lead.id,
            is_responded=lead.is_responded,
            response_message=lead.response_message,
            quoted_price=lead.quoted_price,
            responded_at=lead.updated_at,
            partner=ResponsePartnerInfo(
                id=profile.id,
                business_name=profile.business_name,
                description=profile.description,
                experience=profile.experience,
                base_price=profile.base_price,
                is_featured=bool(profile.is_featured),
                user=PartnerUserInfo(
                    first_name=user.first_name,
                    last_name=user.last_name,
                    city=user.city,
                    phone=user.phone,
                ),
            ),
        )
        for lead, profile, user in rows
    ]
    return inquiry, responses
