"""Shared fixtures for the Digital Offices API tests.

Each test gets a fresh application bound to an in-memory SQLite
database. Outgoing verification emails are captured instead of sent.
"""
from __future__ import annotations

import itertools

import pytest
from flask_jwt_extended import create_access_token

from digital_offices import create_app, db
from digital_offices.models import ExpertProfile, Role, User, VerificationStatus, utcnow

PASSWORD = "correct-horse-battery"


@pytest.fixture
def app():
    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": "sqlite://",
            "JWT_SECRET_KEY": "test-secret-key-that-is-long-enough-for-hs256",
            "EMAIL_PROVIDER": "console",
            "GOOGLE_CLIENT_ID": "test-google-client",
            "FRONTEND_URL": "http://frontend.test",
        }
    )
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def sent_emails(monkeypatch):
    """Capture verification emails as (email, first_name, token) tuples."""
    sent = []

    def fake_send(email, first_name, token):
        sent.append((email, first_name, token))
        return True

    monkeypatch.setattr("digital_offices.services.auth_service.send_verification_email", fake_send)
    return sent


_counter = itertools.count(1)


@pytest.fixture
def make_user(app):
    """Factory for committed users. Experts get a profile in ``status``."""
    def _make_user(
        role: Role = Role.USER,
        status: VerificationStatus | None = None,
        password: str | None = PASSWORD,
        **fields,
    ) -> User:
        n = next(_counter)
        user = User(
            username=fields.pop("username", f"test-user-{n}"),
            email=fields.pop("email", f"user{n}@example.com"),
            first_name=fields.pop("first_name", "Test"),
            last_name=fields.pop("last_name", f"User{n}"),
            role=role,
            is_blocked=fields.pop("is_blocked", False),
            is_unlisted=fields.pop("is_unlisted", False),
            email_verified=fields.pop("email_verified", False),
            provider=fields.pop("provider", "credentials"),
            provider_id=fields.pop("provider_id", None),
        )
        if password:
            user.set_password(password)
        if role == Role.EXPERT:
            status = status or VerificationStatus.PENDING
            verified = status == VerificationStatus.VERIFIED
            user.expert_profile = ExpertProfile(
                verification_status=status,
                rejection_reasons=fields.pop("rejection_reasons", []),
                verified_at=fields.pop("verified_at", utcnow() if verified else None),
                **fields,
            )
        db.session.add(user)
        db.session.commit()
        return user

    return _make_user


@pytest.fixture
def auth_headers(app):
    def _headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(identity=user.id)}"}

    return _headers


@pytest.fixture
def admin(make_user):
    return make_user(role=Role.ADMIN, email="admin@example.com", username="the-admin")
