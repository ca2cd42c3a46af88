"""Email transport tests. Mailgun calls go to an httpx MockTransport."""

import httpx
import pytest

from app.config import Settings
from app.services import notifications
from app.services.notifications import EmailDeliveryError, EmailNotifier, send_otp_email


def _mailgun_settings(**overrides) -> Settings:
    values = dict(
        app_env="test",
        mailgun_api_key="key-test",
        mailgun_domain="mg.pixisphere.demo",
        mailgun_from_email="noreply@mg.pixisphere.demo",
        sendgrid_api_key="",
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def mailgun(monkeypatch):
    """Route httpx.Client inside the notifier to a handler; returns the list of requests seen."""
    seen: list[httpx.Request] = []
    responses: list[int] = []
    real_client = httpx.Client

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        status = responses.pop(0) if responses else 200
        return httpx.Response(status, json={"id": "<msg@mg>"})

    monkeypatch.setattr(
        notifications.httpx,
        "Client",
        lambda **kw: real_client(transport=httpx.MockTransport(handler), **kw),
    )
    return seen, responses


def test_no_provider_raises():
    notifier = EmailNotifier(Settings(app_env="test", mailgun_api_key="", mailgun_domain="", sendgrid_api_key=""))

    with pytest.raises(EmailDeliveryError):
        notifier.send("a@x.com", "Hi", "Body")


def test_otp_email_goes_through_mailgun(mailgun):
    seen, _ = mailgun

    send_otp_email(EmailNotifier(_mailgun_settings()), "a@x.com", "482913", 5)

    assert len(seen) == 1
    assert seen[0].url.path == "/v3/mg.pixisphere.demo/messages"
    form = seen[0].content.decode()
    assert "482913" in form
    assert "a%40x.com" in form


def test_mailgun_retries_eu_endpoint_on_401(mailgun):
    seen, responses = mailgun
    responses.extend([401, 200])

    EmailNotifier(_mailgun_settings()).send("a@x.com", "Hi", "Body")

    assert [r.url.host for r in seen] == ["api.mailgun.net", "api.eu.mailgun.net"]


def test_mailgun_error_status_raises(mailgun):
    _, responses = mailgun
    responses.append(500)

    with pytest.raises(EmailDeliveryError):
        EmailNotifier(_mailgun_settings()).send("a@x.com", "Hi", "Body")
