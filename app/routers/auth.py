"""Authentication: OTP-gated signup, login, profile."""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user
from app.errors import AuthError
from app.models.user import User
from app.schemas.auth import (
    AuthData,
    LoginRequest,
    ProfileData,
    RequestOTPRequest,
    SignupRequest,
    UserResponse,
    VerifyOTPRequest,
)
from app.schemas.common import Envelope
from app.services.auth import create_access_token, verify_password
from app.services.notifications import Notifier, get_notifier
from app.services.pending_registrations import PendingRegistrationStore, get_pending_store, normalize_email
from app.services.signup import request_otp, request_signup, verify_signup

log = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/api/auth", tags=["auth"])

INVALID_CREDENTIALS = "Invalid email or password"


@router.post("/signup", response_model=Envelope[None])
def signup(
    data: SignupRequest,
    db: Session = Depends(get_db),
    store: PendingRegistrationStore = Depends(get_pending_store),
    notifier: Notifier = Depends(get_notifier),
):
    """Start signup: nothing is written to the database until the OTP is verified."""
    request_signup(db, data, store=store, notifier=notifier)
    return Envelope(message="OTP sent to your email. Complete verification to activate your account.")


@router.post("/request-otp", response_model=Envelope[None])
def request_otp_code(
    data: RequestOTPRequest,
    store: PendingRegistrationStore = Depends(get_pending_store),
    notifier: Notifier = Depends(get_notifier),
):
    request_otp(data.email, store=store, notifier=notifier)
    return Envelope(message="OTP sent successfully")


@router.post("/verify-otp", response_model=Envelope[AuthData], status_code=201)
def verify_otp(
    data: VerifyOTPRequest,
    db: Session = Depends(get_db),
    store: PendingRegistrationStore = Depends(get_pending_store),
):
    user, token = verify_signup(db, data.email, data.otp, store=store)
    return Envelope(
        message="Account created and verified successfully.",
        data=AuthData(user=UserResponse.model_validate(user), token=token),
    )


@router.post("/login", response_model=Envelope[AuthData])
def login(data: LoginRequest, db: Session = Depends(get_db)):
    email = normalize_email(data.email)
    user = db.query(User).filter(User.email == email).first()
    # Same message for unknown email and wrong password
    if not user or not verify_password(data.password, user.hashed_password):
        log.info("[Auth] Failed login attempt for email: %s", email)
        raise AuthError(INVALID_CREDENTIALS)
    if not user.is_active:
        raise AuthError("Account is deactivated")
    token = create_access_token(user.id, user.email, user.role)
    log.info("[Auth] User logged in: %s", email)
    return Envelope(
        message="Login successful",
        data=AuthData(user=UserResponse.model_validate(user), token=token),
    )


@router.get("/profile", response_model=Envelope[ProfileData])
def profile(current_user: User = Depends(get_current_user)):
    return Envelope(data=ProfileData(user=UserResponse.model_validate(current_user)))
