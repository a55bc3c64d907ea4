"""
Email delivery with pluggable providers.

The provider is selected with the ``EMAIL_PROVIDER`` setting:

- ``console`` (default): log the message, for local development
- ``resend``: send through the Resend API
- ``ses``: send through Amazon SES

Delivery failures are logged and swallowed so that a provider outage
never fails a registration; the user can request a new verification
email later.
"""

import logging
from typing import Optional

import boto3
import resend
from flask import current_app

from ..email_templates import email_verification_template

logger = logging.getLogger(__name__)


def send_email(to: str, subject: str, html: str, text: Optional[str] = None) -> bool:
    """Send an email with the configured provider. Returns True on success."""
    provider = (current_app.config.get("EMAIL_PROVIDER") or "console").lower()
    try:
        if provider == "resend":
            _send_via_resend(to, subject, html, text)
        elif provider == "ses":
            _send_via_ses(to, subject, html, text)
        else:
            _send_via_console(to, subject, html, text)
    except Exception as e:
        logger.error("Failed to send email to %s via %s: %s", to, provider, e)
        return False
    return True


def send_verification_email(email: str, first_name: str, verification_token: str) -> bool:
    """Send the email-verification link to a newly registered user."""
    frontend_url = current_app.config.get("FRONTEND_URL", "http://localhost:3001").rstrip("/")
    verification_link = f"{frontend_url}/auth/verify-email?token={verification_token}"
    subject, html, text = email_verification_template(first_name, verification_link)
    return send_email(email, subject, html, text)


def _send_via_resend(to: str, subject: str, html: str, text: Optional[str]) -> None:
    api_key = current_app.config.get("RESEND_API_KEY")
    if not api_key:
        raise RuntimeError("RESEND_API_KEY is not configured")

    resend.api_key = api_key
    params = {
        "from": current_app.config.get("RESEND_FROM_EMAIL"),
        "to": [to],
        "subject": subject,
        "html": html,
    }
    if text:
        params["text"] = text

    resend.Emails.send(params)
    logger.info("Email sent via Resend to %s", to)


def _send_via_ses(to: str, subject: str, html: str, text: Optional[str]) -> None:
    access_key_id = current_app.config.get("AWS_ACCESS_KEY_ID")
    secret_access_key = current_app.config.get("AWS_SECRET_ACCESS_KEY")
    if not access_key_id or not secret_access_key:
        raise RuntimeError("AWS credentials are not configured")

    client = boto3.client(
        "ses",
        region_name=current_app.config.get("AWS_REGION", "us-east-1"),
        aws_access_key_id=access_key_id,
        aws_secret_access_key=secret_access_key,
    )
    body = {"Html": {"Data": html, "Charset": "UTF-8"}}
    if text:
        body["Text"] = {"Data": text, "Charset": "UTF-8"}

    client.send_email(
        Source=current_app.config.get("SES_FROM_EMAIL"),
        Destination={"ToAddresses": [to]},
        Message={
            "Subject": {"Data": subject, "Charset": "UTF-8"},
            "Body": body,
        },
    )
    logger.info("Email sent via AWS SES to %s", to)


def _send_via_console(to: str, subject: str, html: str, text: Optional[str]) -> None:
    logger.info("=" * 60)
    logger.info("EMAIL (console mode)")
    logger.info("To: %s", to)
    logger.info("Subject: %s", subject)
    logger.info("%s", text or html)
    logger.info("=" * 60)
