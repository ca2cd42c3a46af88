"""Client side: submit inquiries, read partner responses, browse verified partners."""
from fastapi import APIRouter, Depends, Query
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import require_client
from app.errors import NotFound
from app.models.inquiry import Inquiry, LeadAssignment
from app.models.partner import PartnerProfile, VerificationStatus
from app.models.user import User
from app.schemas.common import Envelope
from app.schemas.inquiry import (
    InquiryCreate,
    InquiryListData,
    InquiryResponse,
    InquiryResponsesData,
    InquirySubmitData,
)
from app.schemas.partner import PartnerDetailsData, PartnerListData, PartnerProfileResponse
from app.schemas.portfolio import PortfolioItemResponse
from app.services.matching import get_inquiry_responses, submit_inquiry
from app.services.portfolio import portfolio_for

router = APIRouter(prefix="/api", tags=["client"])


@router.post("/inquiry", response_model=Envelope[InquirySubmitData], status_code=201)
def create_inquiry(
    data: InquiryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_client),
):
    submission = submit_inquiry(db, current_user.id, data)
    return Envelope(
        message="Inquiry submitted successfully",
        data=InquirySubmitData(
            inquiry=InquiryResponse.model_validate(submission.inquiry),
            assigned_partners=submission.assigned_count,
        ),
    )


@router.get("/client/inquiries", response_model=Envelope[InquiryListData])
def list_my_inquiries(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_client),
):
    inquiries = (
        db.query(Inquiry)
        .filter(Inquiry.client_id == current_user.id)
        .order_by(Inquiry.created_at, Inquiry.id)
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    counts = dict(
        db.query(LeadAssignment.inquiry_id, func.count(LeadAssignment.id))
        .filter(
            LeadAssignment.inquiry_id.in_([i.id for i in inquiries]),
            LeadAssignment.is_responded.is_(True),
        )
        .group_by(LeadAssignment.inquiry_id)
        .all()
    ) if inquiries else {}
    items = []
    for inquiry in inquiries:
        item = InquiryResponse.model_validate(inquiry)
        item.response_count = counts.get(inquiry.id, 0)
        items.append(item)
    return Envelope(
        data=InquiryListData(
            inquiries=items,
            pagination={"page": page, "limit": limit, "total": len(items)},
        )
    )


@router.get("/client/inquiries/{inquiry_id}/responses", response_model=Envelope[InquiryResponsesData])
def inquiry_responses(
    inquiry_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_client),
):
    inquiry, responses = get_inquiry_responses(db, current_user.id, inquiry_id)
    return Envelope(
        data=InquiryResponsesData(inquiry=InquiryResponse.model_validate(inquiry), responses=responses)
    )


@router.get("/partners", response_model=Envelope[PartnerListData])
def browse_partners(
    category: str | None = None,
    city: str | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """Public listing of verified partners, featured first."""
    q = (
        db.query(PartnerProfile, User)
        .join(User, PartnerProfile.user_id == User.id)
        .filter(PartnerProfile.verification_status == VerificationStatus.verified)
    )
    if category:
        q = q.filter(PartnerProfile.service_categories.icontains(category, autoescape=True))
    if city:
        q = q.filter(User.city.icontains(city, autoescape=True))
    rows = (
        q.order_by(PartnerProfile.is_featured.desc(), PartnerProfile.created_at, PartnerProfile.id)
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    partners = [PartnerProfileResponse.from_profile(profile, user) for profile, user in rows]
    return Envelope(
        data=PartnerListData(
            partners=partners,
            pagination={"page": page, "limit": limit, "total": len(partners)},
        )
    )


@router.get("/partners/{partner_id}", response_model=Envelope[PartnerDetailsData])
def partner_details(partner_id: int, db: Session = Depends(get_db)):
    row = (
        db.query(PartnerProfile, User)
        .join(User, PartnerProfile.user_id == User.id)
        .filter(
            PartnerProfile.id == partner_id,
            PartnerProfile.verification_status == VerificationStatus.verified,
        )
        .first()
    )
    if not row:
        raise NotFound("Partner")
    profile, user = row
    return Envelope(
        data=PartnerDetailsData(
            profile=PartnerProfileResponse.from_profile(profile, user),
            portfolio=[PortfolioItemResponse.model_validate(i) for i in portfolio_for(db, profile.id)],
        )
    )
