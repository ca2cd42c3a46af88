"""Auth schemas."""
import re
from datetime import datetime
from pydantic import EmailStr, Field, field_validator
from app.models.user import UserRole
from app.schemas.common import CamelModel

PHONE_MIN_DIGITS = 10
PHONE_MAX_DIGITS = 15
PASSWORD_MIN_LENGTH = 6


def _normalize_phone(value: str | None) -> str:
    if value is None:
        return ""
    return re.sub(r"\D", "", value.strip())


class SignupRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=PASSWORD_MIN_LENGTH)
    role: UserRole = UserRole.client
    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    phone: str | None = None
    city: str | None = Field(default=None, min_length=1, max_length=100)

    @field_validator("first_name", "last_name", "city", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("phone")
    @classmethod
    def phone_valid(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        digits = _normalize_phone(v)
        if not PHONE_MIN_DIGITS <= len(digits) <= PHONE_MAX_DIGITS:
            raise ValueError(f"Phone number must have {PHONE_MIN_DIGITS}-{PHONE_MAX_DIGITS} digits.")
        return digits


class VerifyOTPRequest(CamelModel):
    email: EmailStr
    otp: str


class RequestOTPRequest(CamelModel):
    email: EmailStr


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)


class UserResponse(CamelModel):
    id: int
    email: str
    role: UserRole
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    city: str | None = None
    is_active: bool = True
    created_at: datetime | None = None


class AuthData(CamelModel):
    user: UserResponse
    token: str


class ProfileData(CamelModel):
    user: UserResponse
