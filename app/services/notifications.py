"""Outbound email (Mailgun preferred, SendGrid fallback)."""
import logging
from typing import Protocol

import httpx

from app.config import Settings, get_settings

log = logging.getLogger("uvicorn.error")

MAILGUN_US_BASE = "https://api.mailgun.net"
MAILGUN_EU_BASE = "https://api.eu.mailgun.net"


class EmailDeliveryError(Exception):
    """Email could not be handed to any provider."""


class Notifier(Protocol):
    def send(self, to: str, subject: str, body: str) -> None: ...


class EmailNotifier:
    """Sends through Mailgun when configured, otherwise SendGrid. Raises EmailDeliveryError on failure."""

    def __init__(self, settings: Settings | None = None):
        self._settings = settings

    @property
    def settings(self) -> Settings:
        return self._settings or get_settings()

    def send(self, to: str, subject: str, body: str) -> None:
        s = self.settings
        if s.mailgun_api_key and s.mailgun_domain:
            log.info("[Email] Calling Mailgun API: to=%s subject=%s domain=%s", to, subject, s.mailgun_domain)
            self._send_mailgun(to, subject, body)
            return
        if s.sendgrid_api_key:
            self._send_sendgrid(to, subject, body)
            return
        log.warning(
            "[Email] NOT SENT: to=%s subject=%s. Set MAILGUN_API_KEY and MAILGUN_DOMAIN (or SENDGRID_API_KEY) in .env.",
            to,
            subject,
        )
        raise EmailDeliveryError("No email provider configured")

    def _send_mailgun(self, to: str, subject: str, body: str) -> None:
        s = self.settings
        base = (s.mailgun_base_url or MAILGUN_US_BASE).strip().rstrip("/")
        domain = (s.mailgun_domain or "").strip().lower()
        from_addr = (s.mailgun_from_email or "").strip()
        from_domain = from_addr.split("@")[-1].lower() if "@" in from_addr else ""
        if domain and from_domain != domain:
            from_addr = f"noreply@{domain}"
        data = {
            "from": f"{s.mailgun_from_name} <{from_addr}>",
            "to": to,
            "subject": subject,
            "text": body,
            "html": f"<p>{body}</p>",
        }
        try:
            with httpx.Client(timeout=10.0) as client:
                r = client.post(f"{base}/v3/{domain}/messages", auth=("api", s.mailgun_api_key), data=data)
                if r.status_code == 401 and base == MAILGUN_US_BASE:
                    log.info("[Mailgun] 401 with US endpoint. Retrying with EU endpoint...")
                    r = client.post(f"{MAILGUN_EU_BASE}/v3/{domain}/messages", auth=("api", s.mailgun_api_key), data=data)
        except httpx.HTTPError as e:
            log.error("[Mailgun] Exception: to=%s error=%s: %s", to, type(e).__name__, e)
            raise EmailDeliveryError(str(e)) from e
        if not 200 <= r.status_code < 300:
            log.error("[Mailgun] API failed: status=%s to=%s body=%s", r.status_code, to, r.text[:500])
            raise EmailDeliveryError(f"Mailgun returned {r.status_code}")
        log.info("[Mailgun] API success: to=%s status=%s", to, r.status_code)

    def _send_sendgrid(self, to: str, subject: str, body: str) -> None:
        from sendgrid import SendGridAPIClient
        from sendgrid.helpers.mail import Mail

        s = self.settings
        message = Mail(
            from_email=(s.sendgrid_from_email, s.sendgrid_from_name),
            to_emails=to,
            subject=subject,
            html_content=f"<p>{body}</p>",
            plain_text_content=body,
        )
        try:
            SendGridAPIClient(s.sendgrid_api_key).send(message)
        except Exception as e:  # sendgrid raises python_http_client errors of several types
            log.error("[SendGrid] Exception: to=%s error=%s: %s", to, type(e).__name__, e)
            raise EmailDeliveryError(str(e)) from e


def send_otp_email(notifier: Notifier, to_email: str, code: str, expire_minutes: int) -> None:
    subject = "Your Pixisphere OTP"
    body = f"Your OTP is {code}. It expires in {expire_minutes} minutes."
    notifier.send(to_email, subject, body)


_notifier = EmailNotifier()


def get_notifier() -> Notifier:
    """Process-wide notifier (FastAPI dependency; overridden in tests)."""
    return _notifier
