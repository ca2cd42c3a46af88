from app.schemas.common import Envelope, CamelModel
from app.schemas.auth import SignupRequest, VerifyOTPRequest, RequestOTPRequest, LoginRequest, UserResponse, AuthData
from app.schemas.partner import PartnerProfileUpsert, PartnerProfileResponse, VerifyPartnerRequest
from app.schemas.inquiry import InquiryCreate, InquiryResponse, LeadRespondRequest, LeadAssignmentResponse
from app.schemas.portfolio import PortfolioItemWrite, PortfolioItemResponse
from app.schemas.admin import DashboardData
