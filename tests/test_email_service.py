"""Tests for email provider selection and the verification email."""
from __future__ import annotations

from digital_offices.services import email_service


def test_console_provider(app):
    assert email_service.send_email("a@example.com", "Hello", "<p>Hi</p>", "Hi") is True


def test_resend_without_api_key_fails_softly(app):
    app.config.update(EMAIL_PROVIDER="resend", RESEND_API_KEY=None)
    assert email_service.send_email("a@example.com", "Hello", "<p>Hi</p>") is False


def test_resend_sends_message(app, monkeypatch):
    app.config.update(
        EMAIL_PROVIDER="resend",
        RESEND_API_KEY="re_test",
        RESEND_FROM_EMAIL="Digital Offices <noreply@example.com>",
    )
    sent = []
    monkeypatch.setattr(email_service.resend.Emails, "send", lambda params: sent.append(params))

    assert email_service.send_email("a@example.com", "Hello", "<p>Hi</p>", "Hi") is True
    assert email_service.resend.api_key == "re_test"
    assert sent == [{
        "from": "Digital Offices <noreply@example.com>",
        "to": ["a@example.com"],
        "subject": "Hello",
        "html": "<p>Hi</p>",
        "text": "Hi",
    }]


def test_resend_error_is_reported(app, monkeypatch):
    app.config.update(EMAIL_PROVIDER="resend", RESEND_API_KEY="re_test")

    def boom(params):
        raise RuntimeError("rate limited")

    monkeypatch.setattr(email_service.resend.Emails, "send", boom)
    assert email_service.send_email("a@example.com", "Hello", "<p>Hi</p>") is False


def test_ses_sends_message(app, monkeypatch):
    app.config.update(
        EMAIL_PROVIDER="ses",
        AWS_ACCESS_KEY_ID="AKIATEST",
        AWS_SECRET_ACCESS_KEY="secret",
        AWS_REGION="eu-west-1",
        SES_FROM_EMAIL="noreply@example.com",
    )
    calls = {}

    class FakeSes:
        def send_email(self, **kwargs):
            calls["message"] = kwargs

    def fake_client(service, **kwargs):
        calls["client"] = (service, kwargs)
        return FakeSes()

    monkeypatch.setattr(email_service.boto3, "client", fake_client)

    assert email_service.send_email("a@example.com", "Hello", "<p>Hi</p>") is True
    service, kwargs = calls["client"]
    assert service == "ses"
    assert kwargs["region_name"] == "eu-west-1"
    message = calls["message"]
    assert message["Source"] == "noreply@example.com"
    assert message["Destination"] == {"ToAddresses": ["a@example.com"]}
    assert "Text" not in message["Message"]["Body"]


def test_ses_without_credentials_fails_softly(app):
    app.config.update(EMAIL_PROVIDER="ses", AWS_ACCESS_KEY_ID=None, AWS_SECRET_ACCESS_KEY=None)
    assert email_service.send_email("a@example.com", "Hello", "<p>Hi</p>") is False


def test_verification_email_links_to_frontend(app, monkeypatch):
    captured = {}

    def fake_send(to, subject, html, text=None):
        captured.update(to=to, subject=subject, html=html, text=text)
        return True

    monkeypatch.setattr(email_service, "send_email", fake_send)
    assert email_service.send_verification_email("jane@example.com", "Jane", "tok123") is True

    link = "http://frontend.test/auth/verify-email?token=tok123"
    assert captured["to"] == "jane@example.com"
    assert captured["subject"] == "Verify Your Email Address - Digital Offices"
    assert link in captured["html"]
    assert link in captured["text"]
    assert "Jane" in captured["text"]
