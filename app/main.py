"""Pixisphere marketplace API – FastAPI application."""
# Load .env before any app code that might read config
from dotenv import load_dotenv
from pathlib import Path
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.config import get_settings
from app.database import Base, engine
# Import models so Base.metadata has all tables before create_all (schema source of truth)
from app.models import User, PartnerProfile, Inquiry, LeadAssignment, Portfolio  # noqa: F401
from app.routers import auth, client, partner, admin

log = logging.getLogger("uvicorn.error")

settings = get_settings()
app = FastAPI(title=settings.app_name, debug=settings.debug)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(client.router)
app.include_router(partner.router)
app.include_router(admin.router)


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    log.exception("[DB] Storage error on %s %s", request.method, request.url.path, exc_info=exc)
    content = {"success": False, "detail": "Internal server error"}
    if settings.debug and not settings.is_production:
        content["error"] = str(exc)
    return JSONResponse(status_code=500, content=content)


@app.on_event("startup")
def startup():
    if settings.mock_otp_enabled:
        log.warning("[Auth] MOCK_OTP_ENABLED is on: every OTP is %s and no email is sent", settings.mock_otp_code)
    elif settings.mailgun_api_key and settings.mailgun_domain:
        from_addr = settings.mailgun_from_email or ""
        from_domain = from_addr.split("@")[-1].lower() if "@" in from_addr else ""
        send_domain = (settings.mailgun_domain or "").strip().lower()
        if from_domain and send_domain and from_domain != send_domain:
            log.warning("[Mailgun] from=%s does not match domain=%s. Emails may not be delivered!", from_addr, settings.mailgun_domain)
        else:
            log.info("[Mailgun] App using domain=%s from=%s", settings.mailgun_domain, from_addr or "(none)")
    elif not settings.sendgrid_api_key:
        log.warning("[Email] No provider configured - signup OTP emails will fail; set MAILGUN_API_KEY and MAILGUN_DOMAIN in .env")
    if settings.mock_file_upload:
        log.warning("[Upload] MOCK_FILE_UPLOAD is on: inquiries without an image get a placeholder URL")
    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError as e:
        log.warning("Database startup failed (tables skipped). Check DATABASE_URL and network. Error: %s", e)


@app.get("/")
def root():
    return {"success": True, "app": settings.app_name, "status": "ok"}


@app.get("/health")
def health():
    return {"status": "healthy"}
