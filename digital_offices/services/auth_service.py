"""Authentication business logic.

Registration, credential and Google login, email verification and
refresh-token rotation. Functions return model objects and token
dictionaries; the route handlers serialise them. Failures are raised
as exceptions from ``digital_offices.errors`` carrying the auth error
codes the front-ends understand.
"""
from __future__ import annotations

import logging
import secrets
from datetime import timedelta
from typing import Callable, Optional

from flask import current_app
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt import PyJWTError
from sqlalchemy import and_, or_
from sqlalchemy.exc import IntegrityError

from ..db import db
from ..errors import BadRequestError, ConflictError, NotFoundError, UnauthorizedError
from ..models import EmailVerificationToken, RefreshToken, Role, User, utcnow
from ..util.usernames import generate_username
from .activity_service import record_activity
from .email_service import send_verification_email
from .google_oauth import verify_google_id_token
from .token_service import decode_refresh_token, issue_tokens

logger = logging.getLogger(__name__)

MAX_USERNAME_ATTEMPTS = 5
EMAIL_VERIFICATION_TTL = timedelta(hours=24)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def create_user(fields: dict, before_flush: Optional[Callable[[User], None]] = None) -> User:
    """Insert a user with a freshly generated username.

    Email uniqueness is left to the database constraint. A username
    collision is retried with a new name, up to ``MAX_USERNAME_ATTEMPTS``
    times. ``before_flush`` may attach related rows (an expert profile)
    so they are inserted together with the user. The user is flushed,
    not committed.
    """
    for _ in range(MAX_USERNAME_ATTEMPTS):
        user = User(username=generate_username(), **fields)
        if before_flush is not None:
            before_flush(user)
        db.session.add(user)
        try:
            db.session.flush()
        except IntegrityError as exc:
            db.session.rollback()
            detail = str(exc.orig).lower()
            if "email" in detail:
                raise ConflictError("Email is already registered", code="EMAIL_ALREADY_IN_USE") from exc
            if "username" in detail:
                continue
            raise
        return user

    raise ConflictError("Unable to generate unique username. Please try again.", code="UNKNOWN")


def create_email_verification_token(user: User) -> EmailVerificationToken:
    token = EmailVerificationToken(
        user_id=user.id,
        token=secrets.token_urlsafe(32),
        expires_at=utcnow() + EMAIL_VERIFICATION_TTL,
    )
    db.session.add(token)
    return token


def register(data: dict, role: Role = Role.USER, profile_builder=None) -> User:
    """Create a credentials account and email a verification link.

    ``data`` is a loaded ``RegisterRequestSchema`` payload. Tokens are
    not issued; the user logs in or verifies their email first.
    """
    user = create_user(
        {
            "email": normalize_email(data["email"]),
            "first_name": data["first_name"],
            "last_name": data["last_name"],
            "provider": "credentials",
            "role": role,
        },
        before_flush=lambda u: _prepare_credentials(u, data["password"], profile_builder),
    )
    verification = create_email_verification_token(user)
    record_activity(
        "expert_registered" if role == Role.EXPERT else "user_registered",
        f"{user.first_name} {user.last_name} registered as {user.username}",
        user_id=user.id,
    )
    db.session.commit()
    logger.info("Registered %s user %s", role.value, user.username)

    send_verification_email(user.email, user.first_name, verification.token)
    return user


def _prepare_credentials(user: User, password: str, profile_builder) -> None:
    user.set_password(password)
    if profile_builder is not None:
        profile_builder(user)


def validate_credentials(email: str, password: str) -> User:
    """Return the user owning these credentials or raise ``INVALID_CREDENTIALS``."""
    user = User.query.filter_by(email=normalize_email(email)).first()
    if not user or not user.check_password(password):
        raise UnauthorizedError("Invalid email or password", code="INVALID_CREDENTIALS")
    return user


def start_session(user: User) -> dict:
    """Issue tokens for ``user`` and commit the stored refresh token."""
    tokens = issue_tokens(user)
    db.session.commit()
    return tokens


def login(email: str, password: str) -> tuple[User, dict]:
    user = validate_credentials(email, password)
    if user.is_blocked:
        raise UnauthorizedError("Account is blocked", code="UNAUTHORIZED")
    return user, start_session(user)


def google_oauth(id_token: str) -> tuple[User, dict]:
    """Sign in (or sign up) with a Google ID token."""
    try:
        claims = verify_google_id_token(id_token, current_app.config.get("GOOGLE_CLIENT_ID"))
    except PyJWTError as exc:
        logger.info("Google token rejected: %s", exc)
        raise UnauthorizedError(
            "Google authentication failed", code="OAUTH_ERROR", details={"error": str(exc)}
        ) from exc

    if not claims:
        raise UnauthorizedError("Invalid Google token", code="OAUTH_ERROR")

    google_id = claims.get("sub")
    email = normalize_email(claims.get("email") or "")
    first_name = claims.get("given_name") or ""
    last_name = claims.get("family_name") or ""
    email_verified = bool(claims.get("email_verified"))

    if not email:
        raise BadRequestError("Email not provided by Google", code="OAUTH_ERROR")

    user = User.query.filter(
        or_(
            User.email == email,
            and_(User.provider_id == google_id, User.provider == "google"),
        )
    ).first()

    if user:
        user.provider = "google"
        user.provider_id = google_id
        user.email_verified = email_verified or user.email_verified
        if user.email_verified and user.email_verified_at is None:
            user.email_verified_at = utcnow()
        user.first_name = first_name or user.first_name
        user.last_name = last_name or user.last_name
    else:
        user = create_user(
            {
                "email": email,
                "first_name": first_name,
                "last_name": last_name,
                "provider": "google",
                "provider_id": google_id,
                "email_verified": email_verified,
                "email_verified_at": utcnow() if email_verified else None,
            }
        )
        record_activity(
            "user_registered", f"{email} signed up with Google as {user.username}", user_id=user.id
        )
        logger.info("Created Google user %s", user.username)

    if user.is_blocked:
        db.session.commit()
        raise UnauthorizedError("Account is blocked", code="UNAUTHORIZED")

    return user, start_session(user)


def verify_email(token: str) -> tuple[User, dict]:
    """Consume a verification token, mark the address verified and log the user in."""
    record = EmailVerificationToken.query.filter_by(token=token).first()
    if not record:
        raise NotFoundError("Invalid verification token", code="INVALID_OR_EXPIRED_TOKEN")
    if record.used_at is not None:
        raise BadRequestError("Verification token already used", code="INVALID_OR_EXPIRED_TOKEN")
    if record.expires_at < utcnow():
        raise BadRequestError("Verification token expired", code="INVALID_OR_EXPIRED_TOKEN")

    now = utcnow()
    user = record.user
    user.email_verified = True
    user.email_verified_at = now
    record.used_at = now
    if user.is_blocked:
        db.session.commit()
        raise UnauthorizedError("Account is blocked", code="UNAUTHORIZED")
    return user, start_session(user)


def request_email_verification(user_id: str) -> None:
    """Send a fresh verification email to an unverified user."""
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found", code="UNAUTHENTICATED")
    if user.email_verified:
        raise BadRequestError("Email already verified", code="EMAIL_ALREADY_IN_USE")

    verification = create_email_verification_token(user)
    db.session.commit()
    send_verification_email(user.email, user.first_name, verification.token)


def _find_refresh_token(token: str) -> RefreshToken:
    try:
        decode_refresh_token(token)
    except (PyJWTError, JWTExtendedException, ValueError) as exc:
        raise UnauthorizedError("Invalid refresh token", code="INVALID_OR_EXPIRED_TOKEN") from exc

    record = RefreshToken.query.filter_by(token=token).first()
    if not record or not record.is_active:
        raise UnauthorizedError("Refresh token invalid or expired", code="INVALID_OR_EXPIRED_TOKEN")
    return record


def refresh_session(token: str) -> tuple[User, dict]:
    """Rotate a refresh token: revoke the presented one and issue a new pair."""
    record = _find_refresh_token(token)
    record.revoked_at = utcnow()
    user = record.user
    if user.is_blocked:
        db.session.commit()
        raise UnauthorizedError("Account is blocked", code="UNAUTHORIZED")
    return user, start_session(user)


def logout(token: str) -> None:
    """Revoke a refresh token. Unknown or already revoked tokens are ignored."""
    record = RefreshToken.query.filter_by(token=token).first()
    if record and record.revoked_at is None:
        record.revoked_at = utcnow()
        db.session.commit()
