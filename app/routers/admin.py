"""Admin: dashboard counts, partner verification queue and featured promotion."""
import logging
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import require_admin
from app.errors import NotFound
from app.models.inquiry import Inquiry
from app.models.partner import PartnerProfile, VerificationStatus
from app.models.user import User, UserRole
from app.schemas.common import Envelope
from app.schemas.admin import DashboardData, DashboardKPIs, InquiryCounts, RecentActivity, UserCounts, VerificationCounts
from app.schemas.partner import (
    PartnerListData,
    PartnerProfileData,
    PartnerProfileResponse,
    PromotePartnerRequest,
    VerifyPartnerRequest,
)

log = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/api/admin", tags=["admin"])

RECENT_DAYS = 30


def _get_profile(db: Session, partner_id: int) -> PartnerProfile:
    profile = db.query(PartnerProfile).filter(PartnerProfile.id == partner_id).first()
    if not profile:
        raise NotFound("Partner profile")
    return profile


@router.get("/dashboard", response_model=Envelope[DashboardData])
def dashboard(db: Session = Depends(get_db), _admin: User = Depends(require_admin)):
    """Platform counts; "recent" means created in the last RECENT_DAYS days."""
    since = datetime.now(timezone.utc) - timedelta(days=RECENT_DAYS)

    def users_with(role: UserRole, *criteria) -> int:
        return db.query(func.count(User.id)).filter(User.role == role, *criteria).scalar() or 0

    def inquiries(*criteria) -> int:
        return db.query(func.count(Inquiry.id)).filter(*criteria).scalar() or 0

    clients = users_with(UserRole.client)
    partners = users_with(UserRole.partner)
    pending = (
        db.query(func.count(PartnerProfile.id))
        .filter(PartnerProfile.verification_status == VerificationStatus.pending)
        .scalar()
        or 0
    )
    recent_inquiries = inquiries(Inquiry.created_at >= since)
    kpis = DashboardKPIs(
        total_users=UserCounts(clients=clients, partners=partners, total=clients + partners),
        verifications=VerificationCounts(pending=pending),
        inquiries=InquiryCounts(total=inquiries(), recent=recent_inquiries),
        recent_activity=RecentActivity(
            new_clients=users_with(UserRole.client, User.created_at >= since),
            new_partners=users_with(UserRole.partner, User.created_at >= since),
            new_inquiries=recent_inquiries,
        ),
    )
    log.info("[Admin] Dashboard KPIs fetched")
    return Envelope(data=DashboardData(kpis=kpis))


@router.get("/verifications", response_model=Envelope[PartnerListData])
def pending_verifications(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
):
    rows = (
        db.query(PartnerProfile, User)
        .join(User, PartnerProfile.user_id == User.id)
        .filter(PartnerProfile.verification_status == VerificationStatus.pending)
        .order_by(PartnerProfile.created_at.desc(), PartnerProfile.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    partners = [PartnerProfileResponse.from_profile(p, u, include_contact=True) for p, u in rows]
    return Envelope(
        data=PartnerListData(partners=partners, pagination={"page": page, "limit": limit, "total": len(partners)})
    )


@router.put("/verify/{partner_id}", response_model=Envelope[PartnerProfileData])
def verify_partner(
    partner_id: int,
    data: VerifyPartnerRequest,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
):
    """Approve or reject a partner. Only verified partners receive new leads."""
    profile = _get_profile(db, partner_id)
    profile.verification_status = data.status
    profile.verification_comment = data.comment
    profile.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(profile)
    log.info("[Admin] Partner %s verification status updated to: %s", partner_id, data.status.value)
    return Envelope(
        message=f"Partner {data.status.value} successfully",
        data=PartnerProfileData(profile=PartnerProfileResponse.from_profile(profile)),
    )


@router.put("/partners/{partner_id}/promote", response_model=Envelope[PartnerProfileData])
def promote_partner(
    partner_id: int,
    data: PromotePartnerRequest,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
):
    """Set the featured flag, or toggle it when no value is given."""
    profile = _get_profile(db, partner_id)
    profile.is_featured = data.is_featured if data.is_featured is not None else not profile.is_featured
    db.commit()
    db.refresh(profile)
    log.info("[Admin] Partner %s featured status updated to: %s", partner_id, profile.is_featured)
    message = "Partner promoted as featured" if profile.is_featured else "Partner removed from featured"
    return Envelope(message=message, data=PartnerProfileData(profile=PartnerProfileResponse.from_profile(profile)))
