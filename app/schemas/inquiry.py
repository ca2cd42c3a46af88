"""Inquiry and lead schemas."""
from datetime import datetime
from decimal import Decimal
from pydantic import AnyHttpUrl, Field, field_validator
from app.models.inquiry import Category, InquiryStatus
from app.schemas.common import CamelModel, Pagination
from app.schemas.partner import PartnerUserInfo


class InquiryCreate(CamelModel):
    category: Category
    city: str = Field(min_length=1, max_length=100)
    budget: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    event_date: datetime | None = None
    description: str | None = Field(default=None, max_length=1000)
    reference_image_url: AnyHttpUrl | None = None

    @field_validator("city", "description", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v


class InquiryResponse(CamelModel):
    id: int
    client_id: int
    category: Category
    event_date: datetime | None = None
    budget: Decimal | None = None
    city: str
    description: str | None = None
    reference_image_url: str | None = None
    status: InquiryStatus
    created_at: datetime | None = None
    response_count: int | None = None


class InquirySubmitData(CamelModel):
    inquiry: InquiryResponse
    assigned_partners: int


class InquiryListData(CamelModel):
    inquiries: list[InquiryResponse]
    pagination: Pagination


class LeadRespondRequest(CamelModel):
    response_message: str = Field(min_length=1, max_length=1000)
    quoted_price: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)

    @field_validator("response_message", mode="before")
    @classmethod
    def strip_message(cls, v):
        return v.strip() if isinstance(v, str) else v


class LeadAssignmentResponse(CamelModel):
    id: int
    inquiry_id: int
    partner_id: int
    is_responded: bool
    response_message: str | None = None
    quoted_price: Decimal | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class LeadAssignmentData(CamelModel):
    lead_assignment: LeadAssignmentResponse


class LeadInquiryInfo(CamelModel):
    id: int
    category: Category
    event_date: datetime | None = None
    budget: Decimal | None = None
    city: str
    description: str | None = None
    reference_image_url: str | None = None
    status: InquiryStatus
    created_at: datetime | None = None


class PartnerLead(CamelModel):
    id: int
    inquiry_id: int
    is_responded: bool
    response_message: str | None = None
    quoted_price: Decimal | None = None
    assigned_at: datetime | None = None
    inquiry: LeadInquiryInfo
    client: PartnerUserInfo


class PartnerLeadListData(CamelModel):
    leads: list[PartnerLead]
    pagination: Pagination


class ResponsePartnerInfo(CamelModel):
    id: int
    business_name: str | None = None
    description: str | None = None
    experience: int | None = None
    base_price: Decimal | None = None
    is_featured: bool = False
    user: PartnerUserInfo


class InquiryResponseItem(CamelModel):
    id: int
    is_responded: bool
    response_message: str | None = None
    quoted_price: Decimal | None = None
    responded_at: datetime | None = None
    partner: ResponsePartnerInfo


class InquiryResponsesData(CamelModel):
    inquiry: InquiryResponse
    responses: list[InquiryResponseItem]
