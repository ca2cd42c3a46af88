"""OTP-gated signup: the user row is only written once the emailed code is verified."""
import logging
import secrets
from datetime import timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from app.errors import DuplicateUser, InternalError, InvalidOrExpiredCode, NoSignupDataFound, ValidationError
from app.models.user import User, UserRole
from app.schemas.auth import SignupRequest
from app.services.auth import create_access_token, get_password_hash
from app.services.notifications import EmailDeliveryError, Notifier, send_otp_email
from app.services.pending_registrations import PendingRegistration, PendingRegistrationStore, normalize_email

log = logging.getLogger("uvicorn.error")


def generate_otp(settings: Settings) -> str:
    if settings.mock_otp_enabled:
        return settings.mock_otp_code
    n = settings.otp_length
    return str(secrets.randbelow(9 * 10 ** (n - 1)) + 10 ** (n - 1))


def _user_exists(db: Session, email: str) -> bool:
    return db.query(User.id).filter(User.email == email).first() is not None


def _dispatch_code(
    store: PendingRegistrationStore,
    notifier: Notifier,
    entry: PendingRegistration,
    settings: Settings,
) -> None:
    if settings.mock_otp_enabled:
        log.info("[Auth] Mock OTP mode: email not sent to %s (code=%s)", entry.email, entry.code)
        return
    try:
        send_otp_email(notifier, entry.email, entry.code, settings.otp_expire_minutes)
    except EmailDeliveryError as e:
        store.discard(entry.email, expected=entry)
        log.error("[Auth] OTP email to %s failed: %s", entry.email, e)
        raise InternalError("We could not send the OTP email. Please try again later.") from e


def request_signup(
    db: Session,
    data: SignupRequest,
    *,
    store: PendingRegistrationStore,
    notifier: Notifier,
    settings: Settings | None = None,
) -> PendingRegistration:
    """Hold the signup in the pending store and email a one-time code.

    Replaces any earlier pending signup for the same email, so only the latest
    code can be verified.
    """
    settings = settings or get_settings()
    email = normalize_email(data.email)
    if _user_exists(db, email):
        raise ValidationError("User with this email already exists")

    payload = {
        "email": email,
        "hashed_password": get_password_hash(data.password),
        "role": data.role.value,
        "first_name": data.first_name,
        "last_name": data.last_name,
        "phone": data.phone,
        "city": data.city,
    }
    entry = store.create(
        email,
        generate_otp(settings),
        timedelta(minutes=settings.otp_expire_minutes),
        signup_payload=payload,
    )
    _dispatch_code(store, notifier, entry, settings)
    log.info("[Auth] Signup initiated for email: %s, OTP sent.", email)
    return entry


def request_otp(
    email: str,
    *,
    store: PendingRegistrationStore,
    notifier: Notifier,
    settings: Settings | None = None,
) -> PendingRegistration:
    """Issue a code with no signup data attached (resend path)."""
    settings = settings or get_settings()
    entry = store.create(
        email,
        generate_otp(settings),
        timedelta(minutes=settings.otp_expire_minutes),
    )
    _dispatch_code(store, notifier, entry, settings)
    log.info("[Auth] OTP requested for email: %s", entry.email)
    return entry


def verify_signup(
    db: Session,
    email: str,
    code: str,
    *,
    store: PendingRegistrationStore,
) -> tuple[User, str]:
    """Check the code, create the user and return (user, access_token).

    The pending entry is removed before the user is inserted, so a code works at most once.
    """
    email = normalize_email(email)
    entry = store.get(email)
    if entry is None or entry.is_expired(store.now()) or entry.code != code:
        raise InvalidOrExpiredCode()

    payload = entry.signup_payload
    if not payload:
        raise NoSignupDataFound()

    # Another signup for this email may have completed since the code was issued
    if _user_exists(db, email):
        store.discard(email, expected=entry)
        raise DuplicateUser()

    if not store.discard(email, expected=entry):
        # Lost a race with a concurrent verification of the same code
        raise InvalidOrExpiredCode()

    user = User(
        email=email,
        hashed_password=payload["hashed_password"],
        role=UserRole(payload["role"]),
        first_name=payload.get("first_name"),
        last_name=payload.get("last_name"),
        phone=payload.get("phone"),
        city=payload.get("city"),
        is_active=True,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateUser()
    db.refresh(user)
    token = create_access_token(user.id, user.email, user.role)
    log.info("[Auth] User created after OTP verification: %s", email)
    return user, token
