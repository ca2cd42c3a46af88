"""
Create a test client, a verified test partner and a test admin (no OTP verification required).
Use when email is not configured so you can log in and exercise the lead flow.

Run from project root:
  python scripts/create_test_users.py

Credentials are printed at the end.
"""
import json
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from app.database import Base, SessionLocal, engine
from app.models.partner import PartnerProfile, VerificationStatus
from app.models.user import User, UserRole
from app.services.auth import get_password_hash

PASSWORD = "Password123!"

USERS = [
    {"email": "client@pixisphere.demo", "role": UserRole.client, "first_name": "Test", "last_name": "Client", "city": "Mumbai"},
    {"email": "partner@pixisphere.demo", "role": UserRole.partner, "first_name": "Test", "last_name": "Partner", "city": "Mumbai"},
    {"email": "admin@pixisphere.demo", "role": UserRole.admin, "first_name": "Test", "last_name": "Admin", "city": None},
]


def main():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        for spec in USERS:
            user = db.query(User).filter(User.email == spec["email"]).first()
            if user:
                print(f"{spec['role'].value} already exists: {spec['email']}")
                continue
            user = User(hashed_password=get_password_hash(PASSWORD), is_active=True, **spec)
            db.add(user)
            db.flush()
            if user.role == UserRole.partner:
                db.add(PartnerProfile(
                    user_id=user.id,
                    business_name="Test Studio",
                    service_categories=json.dumps(["wedding", "portrait"]),
                    verification_status=VerificationStatus.verified,
                ))
            print(f"Created {spec['role'].value}: {spec['email']}")
        db.commit()
    finally:
        db.close()

    print("\n--- Test credentials ---")
    for spec in USERS:
        print(f"{spec['role'].value:8} {spec['email']} / {PASSWORD}")


if __name__ == "__main__":
    main()
