"""Partner profile schemas."""
import json
from datetime import datetime
from decimal import Decimal
from pydantic import Field, field_validator
from app.models.inquiry import Category
from app.models.partner import VerificationStatus
from app.schemas.common import CamelModel, Pagination
from app.schemas.portfolio import PortfolioItemResponse


class PartnerProfileUpsert(CamelModel):
    business_name: str = Field(min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=1000)
    experience: int | None = Field(default=None, ge=0, le=50)
    base_price: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    service_categories: list[Category] = []
    aadhar_number: str | None = Field(default=None, pattern=r"^\d{12}$")
    pan_number: str | None = Field(default=None, min_length=10, max_length=10)
    gst_number: str | None = Field(default=None, min_length=15, max_length=15)


class PartnerUserInfo(CamelModel):
    first_name: str | None = None
    last_name: str | None = None
    city: str | None = None
    phone: str | None = None
    email: str | None = None


class PartnerProfileResponse(CamelModel):
    id: int
    user_id: int
    business_name: str | None = None
    description: str | None = None
    experience: int | None = None
    base_price: Decimal | None = None
    service_categories: list[str] = []
    verification_status: VerificationStatus
    verification_comment: str | None = None
    is_featured: bool = False
    created_at: datetime | None = None
    user: PartnerUserInfo | None = None

    @classmethod
    def from_profile(cls, profile, user=None, include_contact: bool = False) -> "PartnerProfileResponse":
        """Build from ORM rows; contact fields (email, phone) only when include_contact."""
        resp = cls.model_validate(profile)
        if user is not None:
            resp.user = PartnerUserInfo(
                first_name=user.first_name,
                last_name=user.last_name,
                city=user.city,
                phone=user.phone if include_contact else None,
                email=user.email if include_contact else None,
            )
        return resp

    @field_validator("service_categories", mode="before")
    @classmethod
    def parse_categories(cls, v):
        if v is None or v == "":
            return []
        if isinstance(v, str):
            try:
                parsed = json.loads(v)
            except ValueError:
                return []
            return parsed if isinstance(parsed, list) else []
        return v


class PartnerProfileData(CamelModel):
    profile: PartnerProfileResponse


class PartnerListData(CamelModel):
    partners: list[PartnerProfileResponse]
    pagination: Pagination


class VerifyPartnerRequest(CamelModel):
    status: VerificationStatus
    comment: str | None = Field(default=None, max_length=500)

    @field_validator("status")
    @classmethod
    def decision_only(cls, v: VerificationStatus) -> VerificationStatus:
        if v == VerificationStatus.pending:
            raise ValueError("Status must be either verified or rejected")
        return v


class PromotePartnerRequest(CamelModel):
    is_featured: bool | None = None


class PartnerDetailsData(CamelModel):
    profile: PartnerProfileResponse
    portfolio: list[PortfolioItemResponse] = []
