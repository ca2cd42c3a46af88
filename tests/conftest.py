# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# Sets test environment variables before the app is imported, then provides an
# in-memory SQLite database, a pending-registration store with a controllable
# clock, a recording notifier, and a TestClient wired to all three.
# =============================================================================

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["APP_ENV"] = "test"
os.environ["DEBUG"] = "true"
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret"
os.environ["MAILGUN_API_KEY"] = ""
os.environ["MAILGUN_DOMAIN"] = ""
os.environ["SENDGRID_API_KEY"] = ""
os.environ["MOCK_OTP_ENABLED"] = "false"
os.environ["MOCK_FILE_UPLOAD"] = "false"

import json
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import Settings
from app.database import Base, get_db
from app.main import app
from app.models.partner import PartnerProfile, VerificationStatus
from app.models.user import User, UserRole
from app.services.auth import create_access_token, get_password_hash
from app.services.notifications import EmailDeliveryError, get_notifier
from app.services.pending_registrations import PendingRegistrationStore, get_pending_store

TEST_PASSWORD = "password123"
_PASSWORD_HASH = get_password_hash(TEST_PASSWORD)

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeClock:
    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


class RecordingNotifier:
    def __init__(self):
        self.sent: list[tuple[str, str, str]] = []
        self.fail = False

    def send(self, to: str, subject: str, body: str) -> None:
        if self.fail:
            raise EmailDeliveryError("smtp down")
        self.sent.append((to, subject, body))

    def last_code(self) -> str:
        # Body is "Your OTP is <code>. It expires in ..."
        body = self.sent[-1][2]
        return body.split("Your OTP is ", 1)[1].split(".", 1)[0]


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def store(clock):
    return PendingRegistrationStore(clock=clock)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def settings():
    return Settings(app_env="test", mock_otp_enabled=False, mock_file_upload=False)


@pytest.fixture
def client(db, store, notifier):
    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_pending_store] = lambda: store
    app.dependency_overrides[get_notifier] = lambda: notifier
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    def _make(email: str, role: UserRole = UserRole.client, city: str | None = None, **fields) -> User:
        user = User(
            email=email,
            hashed_password=_PASSWORD_HASH,
            role=role,
            city=city,
            is_active=fields.pop("is_active", True),
            **fields,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_partner(db, make_user):
    def _make(
        email: str,
        city: str | None,
        categories: list[str] | str | None,
        status: VerificationStatus = VerificationStatus.verified,
        **fields,
    ) -> PartnerProfile:
        user = make_user(email, UserRole.partner, city=city)
        raw = json.dumps(categories) if isinstance(categories, list) else categories
        profile = PartnerProfile(
            user_id=user.id,
            business_name=fields.pop("business_name", f"{email.split('@')[0]} studio"),
            service_categories=raw,
            verification_status=status,
            **fields,
        )
        db.add(profile)
        db.commit()
        db.refresh(profile)
        return profile

    return _make


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id, user.email, user.role)}"}

    return _headers
