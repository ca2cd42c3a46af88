"""Partner side: own profile, portfolio, assigned leads, responding to leads."""
import json
import logging

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import require_partner
from app.errors import NotFound
from app.models.inquiry import Inquiry, LeadAssignment
from app.models.partner import PartnerProfile
from app.models.user import User
from app.schemas.common import Envelope
from app.schemas.inquiry import (
    LeadAssignmentData,
    LeadAssignmentResponse,
    LeadInquiryInfo,
    LeadRespondRequest,
    PartnerLead,
    PartnerLeadListData,
)
from app.schemas.partner import PartnerProfileData, PartnerProfileResponse, PartnerProfileUpsert, PartnerUserInfo
from app.schemas.portfolio import PortfolioItemData, PortfolioItemResponse, PortfolioItemWrite, PortfolioListData
from app.services.matching import respond_to_lead
from app.services import portfolio as portfolio_service

log = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/api/partner", tags=["partner"])


def _get_own_profile(db: Session, user: User) -> PartnerProfile:
    profile = db.query(PartnerProfile).filter(PartnerProfile.user_id == user.id).first()
    if not profile:
        raise NotFound("Partner profile")
    return profile


@router.post("/profile", response_model=Envelope[PartnerProfileData])
@router.put("/profile", response_model=Envelope[PartnerProfileData])
def upsert_profile(
    data: PartnerProfileUpsert,
    response: Response,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_partner),
):
    """Create the profile on first call, update it afterwards. Verification status is untouched."""
    profile = db.query(PartnerProfile).filter(PartnerProfile.user_id == current_user.id).first()
    created = profile is None
    if created:
        profile = PartnerProfile(user_id=current_user.id)
        db.add(profile)
    profile.business_name = data.business_name
    profile.description = data.description
    profile.experience = data.experience
    profile.base_price = data.base_price
    profile.service_categories = json.dumps([c.value for c in data.service_categories])
    profile.aadhar_number = data.aadhar_number
    profile.pan_number = data.pan_number
    profile.gst_number = data.gst_number
    db.commit()
    db.refresh(profile)
    response.status_code = 201 if created else 200
    action = "created" if created else "updated"
    log.info("[Partner] Partner profile %s for user: %s", action, current_user.id)
    return Envelope(
        message=f"Partner profile {action} successfully",
        data=PartnerProfileData(profile=PartnerProfileResponse.from_profile(profile)),
    )


@router.get("/profile", response_model=Envelope[PartnerProfileData])
def get_profile(db: Session = Depends(get_db), current_user: User = Depends(require_partner)):
    profile = _get_own_profile(db, current_user)
    return Envelope(data=PartnerProfileData(profile=PartnerProfileResponse.from_profile(profile)))


@router.get("/leads", response_model=Envelope[PartnerLeadListData])
def list_leads(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_partner),
):
    profile = _get_own_profile(db, current_user)
    rows = (
        db.query(LeadAssignment, Inquiry, User)
        .join(Inquiry, LeadAssignment.inquiry_id == Inquiry.id)
        .join(User, Inquiry.client_id == User.id)
        .filter(LeadAssignment.partner_id == profile.id)
        .order_by(LeadAssignment.created_at.desc(), LeadAssignment.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    leads = [
        PartnerLead(
            id=lead.id,
            inquiry_id=lead.inquiry_id,
            is_responded=lead.is_responded,
            response_message=lead.response_message,
            quoted_price=lead.quoted_price,
            assigned_at=lead.created_at,
            inquiry=LeadInquiryInfo.model_validate(inquiry),
            client=PartnerUserInfo(
                first_name=client.first_name,
                last_name=client.last_name,
                email=client.email,
                phone=client.phone,
            ),
        )
        for lead, inquiry, client in rows
    ]
    return Envelope(
        data=PartnerLeadListData(leads=leads, pagination={"page": page, "limit": limit, "total": len(leads)})
    )


@router.put("/leads/{lead_id}/respond", response_model=Envelope[LeadAssignmentData])
def respond(
    lead_id: int,
    data: LeadRespondRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_partner),
):
    lead = respond_to_lead(db, current_user.id, lead_id, data.response_message, data.quoted_price)
    return Envelope(
        message="Response submitted successfully",
        data=LeadAssignmentData(lead_assignment=LeadAssignmentResponse.model_validate(lead)),
    )


@router.post("/portfolio", response_model=Envelope[PortfolioItemData], status_code=201)
def add_portfolio_item(
    data: PortfolioItemWrite,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_partner),
):
    item = portfolio_service.add_item(db, current_user.id, data)
    return Envelope(
        message="Portfolio item added successfully",
        data=PortfolioItemData(portfolio_item=PortfolioItemResponse.model_validate(item)),
    )


@router.get("/portfolio", response_model=Envelope[PortfolioListData])
def list_portfolio_items(db: Session = Depends(get_db), current_user: User = Depends(require_partner)):
    items = portfolio_service.list_items(db, current_user.id)
    return Envelope(data=PortfolioListData(portfolio_items=[PortfolioItemResponse.model_validate(i) for i in items]))


@router.put("/portfolio/{item_id}", response_model=Envelope[PortfolioItemData])
def update_portfolio_item(
    item_id: int,
    data: PortfolioItemWrite,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_partner),
):
    item = portfolio_service.update_item(db, current_user.id, item_id, data)
    return Envelope(
        message="Portfolio item updated successfully",
        data=PortfolioItemData(portfolio_item=PortfolioItemResponse.model_validate(item)),
    )


@router.delete("/portfolio/{item_id}", response_model=Envelope[None])
def delete_portfolio_item(
    item_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_partner),
):
    portfolio_service.delete_item(db, current_user.id, item_id)
    return Envelope(message="Portfolio item deleted successfully")
